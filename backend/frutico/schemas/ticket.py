from datetime import datetime
from decimal import Decimal
from typing import Optional

from pydantic import BaseModel

from ..models.order import OrderStatus, VisitLocation


class TicketRead(BaseModel):
    """What the QR link shows to the visitor and the counter staff."""

    ticket_id: str
    name: str
    persons: int
    location: VisitLocation
    visit_date: str
    amount: Optional[Decimal] = None
    status: OrderStatus
    is_used: bool
    valid: bool


class TicketRedeemed(BaseModel):
    ticket_id: str
    redeemed_at: datetime
