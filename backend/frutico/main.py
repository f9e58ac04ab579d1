# backend/frutico/main.py

import logging

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import ORJSONResponse

from . import models  # noqa: F401  (registers tables on Base.metadata)
from .api import api_ticket, api_webhook
from .core.config import settings
from .core.context import build_context
from .core.observability import setup_logging, setup_tracer
from .database import Base

setup_logging()
logger = logging.getLogger(__name__)

app = FastAPI(title="Frutico Tickets API", default_response_class=ORJSONResponse)
setup_tracer(app)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=False,
    allow_methods=["GET", "POST"],
    allow_headers=["*"],
)

app.include_router(api_webhook.router, prefix="/webhook")
app.include_router(api_ticket.router, prefix="/ticket")


@app.on_event("startup")
def init_app_context() -> None:
    """Create the engine, mailer and task registry once per process.

    A context installed beforehand (tests, embedding) is used as-is.
    """
    if getattr(app.state, "context", None) is None:
        app.state.context = build_context(settings)
    ctx = app.state.context
    if ctx.engine is not None:
        Base.metadata.create_all(bind=ctx.engine)
    if not ctx.settings.RAZORPAY_WEBHOOK_SECRET:
        logger.warning("RAZORPAY_WEBHOOK_SECRET is not set; webhook deliveries will be answered with 500")


@app.on_event("shutdown")
async def close_app_context() -> None:
    """Let in-flight ticket emails finish, then release the store."""
    ctx = getattr(app.state, "context", None)
    if ctx is None:
        return
    logger.info("Shutting down; %d ticket task(s) in flight", len(ctx.tasks))
    await ctx.aclose()
    app.state.context = None


@app.get("/")
async def root():
    return {"message": "Frutico Tickets API"}
