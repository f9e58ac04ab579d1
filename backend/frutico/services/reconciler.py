"""Idempotent pending -> paid transition for captured payments.

Webhook delivery is at-least-once. The status-gated UPDATE in
``crud_order.mark_order_paid`` lets exactly one delivery win; every other
delivery for the same order becomes a logged no-op.
"""

from __future__ import annotations

import enum
import logging
from dataclasses import dataclass
from decimal import Decimal, ROUND_HALF_UP
from typing import Optional

from sqlalchemy.orm import sessionmaker

from ..crud import crud_order
from ..database import session_scope
from ..schemas.webhook import PaymentEntity

logger = logging.getLogger(__name__)


class ReconcileOutcome(str, enum.Enum):
    PROCESSED = "processed"
    DUPLICATE = "duplicate"
    NOT_FOUND = "not_found"


@dataclass(frozen=True)
class ReconcileResult:
    outcome: ReconcileOutcome
    order_key: Optional[str] = None


def minor_to_major(amount_minor: int) -> Decimal:
    return (Decimal(amount_minor) / Decimal(100)).quantize(Decimal("0.01"), rounding=ROUND_HALF_UP)


def build_qr_target(base_url: str, order_key: str) -> str:
    return f"{base_url.rstrip('/')}/ticket/{order_key}"


def reconcile_payment(session_factory: sessionmaker, payment: PaymentEntity, base_url: str) -> ReconcileResult:
    """Apply a captured payment to its order. Blocking; run off the event loop.

    Store errors propagate so the webhook answers 5xx and the provider
    redelivers; redelivery is safe because of the status gate.
    """
    with session_scope(session_factory) as db:
        order = crud_order.get_order_by_provider_id(db, payment.order_id)
        if order is None:
            logger.info("No order for provider order_id=%s payment_id=%s", payment.order_id, payment.id)
            return ReconcileResult(ReconcileOutcome.NOT_FOUND)

        order_key = order.id
        try:
            won = crud_order.mark_order_paid(
                db,
                order_key,
                payment_id=payment.id,
                amount=minor_to_major(payment.amount),
                qr_target=build_qr_target(base_url, order_key),
            )
            db.commit()
        except Exception:
            db.rollback()
            raise

        if not won:
            logger.info("Order not pending, skipping order_id=%s payment_id=%s", payment.order_id, payment.id)
            return ReconcileResult(ReconcileOutcome.DUPLICATE, order_key)

        logger.info("Order marked paid order_id=%s key=%s payment_id=%s", payment.order_id, order_key, payment.id)
        return ReconcileResult(ReconcileOutcome.PROCESSED, order_key)
