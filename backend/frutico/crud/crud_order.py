from datetime import datetime
from decimal import Decimal
from typing import Optional

from sqlalchemy.orm import Session

from .. import models
from ..models import OrderStatus


def get_order(db: Session, key: str) -> Optional[models.Order]:
    return db.query(models.Order).filter(models.Order.id == key).first()


def get_order_by_provider_id(db: Session, order_id: str) -> Optional[models.Order]:
    return db.query(models.Order).filter(models.Order.order_id == order_id).first()


def mark_order_paid(
    db: Session,
    key: str,
    payment_id: str,
    amount: Decimal,
    qr_target: str,
) -> bool:
    """Flip a pending order to paid in a single conditional UPDATE.

    Returns True only for the caller whose UPDATE matched the pending row;
    concurrent duplicates see zero affected rows. The caller commits.
    """
    affected = (
        db.query(models.Order)
        .filter(models.Order.id == key, models.Order.status == OrderStatus.PENDING)
        .update(
            {
                models.Order.payment_id: payment_id,
                models.Order.status: OrderStatus.PAID,
                models.Order.amount: amount,
                models.Order.qr_target: qr_target,
                models.Order.updated_at: datetime.utcnow(),
            },
            synchronize_session=False,
        )
    )
    return affected == 1


def redeem_ticket(db: Session, key: str) -> bool:
    """Mark a paid, unused ticket as used. Returns False if nothing matched."""
    affected = (
        db.query(models.Order)
        .filter(
            models.Order.id == key,
            models.Order.status == OrderStatus.PAID,
            models.Order.is_used.is_(False),
        )
        .update(
            {models.Order.is_used: True, models.Order.updated_at: datetime.utcnow()},
            synchronize_session=False,
        )
    )
    db.commit()
    return affected == 1


def mark_ticket_emailed(db: Session, key: str, when: Optional[datetime] = None) -> None:
    (
        db.query(models.Order)
        .filter(models.Order.id == key)
        .update({models.Order.ticket_emailed_at: when or datetime.utcnow()}, synchronize_session=False)
    )
    db.commit()


def list_undelivered_tickets(db: Session, limit: int = 100) -> list[models.Order]:
    """Paid orders whose ticket email never went out, oldest first."""
    return (
        db.query(models.Order)
        .filter(models.Order.status == OrderStatus.PAID, models.Order.ticket_emailed_at.is_(None))
        .order_by(models.Order.updated_at.asc())
        .limit(limit)
        .all()
    )
