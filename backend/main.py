import os

from fastapi.openapi.utils import get_openapi
from dotenv import load_dotenv

# Load environment variables for development before settings are read
load_dotenv()  # This reads .env into os.environ

from frutico.main import app  # noqa: E402


def custom_openapi() -> dict:
    """Return OpenAPI schema with project metadata."""
    if app.openapi_schema:
        return app.openapi_schema
    app.openapi_schema = get_openapi(
        title="Frutico Tickets API",
        version="1.0.0",
        description="Razorpay payment webhooks and visit tickets for Frutico.",
        contact={"name": "Frutico Support", "email": "support@example.com"},
        routes=app.routes,
    )
    return app.openapi_schema


app.openapi = custom_openapi

if __name__ == "__main__":
    import uvicorn

    keepalive = int(os.getenv("UVICORN_KEEPALIVE", "65"))
    # One worker: ticket tasks live in this process and are drained on shutdown
    uvicorn.run(
        "main:app",
        host="0.0.0.0",
        port=int(os.getenv("PORT", "8000")),
        workers=1,
        timeout_keep_alive=keepalive,
    )
