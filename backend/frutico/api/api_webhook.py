import asyncio
import logging
import time

from fastapi import APIRouter, Depends, Header, Request, status
from fastapi.responses import PlainTextResponse
from sqlalchemy.exc import SQLAlchemyError

from ..core.context import AppContext
from ..schemas.webhook import PaymentCapturedEvent, WebhookAck
from ..services.reconciler import ReconcileOutcome, reconcile_payment
from ..services.ticket_fulfillment import run_fulfillment
from ..services.webhook_verifier import (
    InvalidPayloadError,
    InvalidSignatureError,
    WebhookConfigError,
    parse_event,
    verify_signature,
)
from ..utils.metrics import incr as metrics_incr, timing_ms as metrics_timing
from .dependencies import get_context

logger = logging.getLogger(__name__)

router = APIRouter(tags=["webhooks"])


@router.post(
    "/razorpay",
    response_model=WebhookAck,
    responses={
        400: {"description": "Missing/invalid signature or malformed event"},
        500: {"description": "Webhook secret not configured or store unavailable"},
    },
)
async def razorpay_webhook(
    request: Request,
    x_razorpay_signature: str | None = Header(default=None),
    ctx: AppContext = Depends(get_context),
):
    """Handle Razorpay payment webhooks.

    - Verifies the HMAC-SHA256 signature of the raw body before parsing it.
    - On ``payment.captured``, flips the matching pending order to paid and
      starts ticket delivery in the background.
    - Idempotent: redeliveries for an already paid order return 200 and do
      nothing.
    """
    t_start = time.perf_counter()
    raw = await request.body()

    try:
        verify_signature(raw, x_razorpay_signature, ctx.settings.RAZORPAY_WEBHOOK_SECRET)
    except WebhookConfigError:
        logger.error("Missing RAZORPAY_WEBHOOK_SECRET in environment")
        return PlainTextResponse("Server configuration error", status_code=status.HTTP_500_INTERNAL_SERVER_ERROR)
    except InvalidSignatureError as exc:
        logger.warning("Razorpay webhook rejected: %s", exc)
        metrics_incr("webhook.signature_mismatch_total", tags={"provider": "razorpay"})
        return PlainTextResponse("Invalid signature", status_code=status.HTTP_400_BAD_REQUEST)

    try:
        event = parse_event(raw)
    except InvalidPayloadError as exc:
        logger.warning("Razorpay webhook payload rejected: %s", exc)
        return PlainTextResponse("Invalid payload", status_code=status.HTTP_400_BAD_REQUEST)

    if not isinstance(event, PaymentCapturedEvent):
        logger.info("Ignoring non-captured event: %s", event.event)
        return WebhookAck(outcome="ignored")

    payment = event.payment
    try:
        result = await asyncio.to_thread(
            reconcile_payment, ctx.session_factory, payment, ctx.settings.BASE_URL
        )
    except SQLAlchemyError:
        logger.exception(
            "Webhook reconciliation failed event=%s order_id=%s payment_id=%s",
            event.event,
            payment.order_id,
            payment.id,
        )
        return PlainTextResponse("Webhook processing error", status_code=status.HTTP_500_INTERNAL_SERVER_ERROR)

    if result.outcome is ReconcileOutcome.PROCESSED:
        # Committed above, so the task always reads the paid row
        ctx.tasks.spawn(
            run_fulfillment(
                ctx.session_factory,
                ctx.mailer,
                result.order_key,
                timezone_name=ctx.settings.TICKET_TIMEZONE,
                subject=ctx.settings.TICKET_EMAIL_SUBJECT,
            ),
            name=f"ticket_fulfillment:{result.order_key}",
            order_key=result.order_key,
            order_id=payment.order_id,
        )

    metrics_incr("webhook.received_total", tags={"provider": "razorpay", "outcome": result.outcome.value})
    metrics_timing("webhook.reconcile_ms", (time.perf_counter() - t_start) * 1000.0)
    return WebhookAck(outcome=result.outcome.value)
