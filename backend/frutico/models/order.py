import enum
import uuid

from sqlalchemy import (
    Boolean,
    CheckConstraint,
    Column,
    DateTime,
    Enum as SQLAlchemyEnum,
    Index,
    Integer,
    Numeric,
    String,
    false,
)

from .base import BaseModel


class OrderStatus(str, enum.Enum):
    PENDING = "pending"
    PAID = "paid"
    # Reserved for payment-failure flows handled outside the webhook
    FAILED = "failed"


class VisitLocation(str, enum.Enum):
    ANNANAGAR = "annanagar"
    KULITHALAI = "kulithalai"


def _new_order_key() -> str:
    return uuid.uuid4().hex


class Order(BaseModel):
    """A ticket order awaiting (or holding) a captured payment.

    ``id`` is our own identity and drives the ticket link and the short ticket
    number; ``order_id`` is the payment provider's order reference.
    """

    __tablename__ = "orders"

    id = Column(String(32), primary_key=True, default=_new_order_key)
    order_id = Column(String, nullable=False, unique=True)
    payment_id = Column(String, nullable=True)
    name = Column(String, nullable=False)
    email = Column(String, nullable=False)
    phone = Column(String, nullable=False)
    persons = Column(Integer, nullable=False)
    location = Column(
        SQLAlchemyEnum(VisitLocation, values_callable=lambda e: [m.value for m in e], native_enum=False),
        nullable=False,
        index=True,
    )
    visit_date = Column(DateTime, nullable=False, index=True)
    amount = Column(Numeric(10, 2), nullable=True)
    status = Column(
        SQLAlchemyEnum(OrderStatus, values_callable=lambda e: [m.value for m in e], native_enum=False),
        nullable=False,
        default=OrderStatus.PENDING,
        server_default=OrderStatus.PENDING.value,
        index=True,
    )
    qr_target = Column(String, nullable=True)
    is_used = Column(Boolean, nullable=False, default=False, server_default=false())
    ticket_emailed_at = Column(DateTime, nullable=True)

    __table_args__ = (
        CheckConstraint("persons >= 1", name="ck_orders_persons_positive"),
        # Fast counting of paid tickets per branch/date
        Index("ix_orders_location_visit_date_status", "location", "visit_date", "status"),
    )

    @property
    def ticket_id(self) -> str:
        """Short human-facing ticket number printed on the ticket."""
        return str(self.id)[:8].upper()
