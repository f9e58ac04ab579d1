import logging
from datetime import datetime

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.orm import Session

from ..core.context import AppContext
from ..crud import crud_order
from ..models import OrderStatus
from ..schemas.ticket import TicketRead, TicketRedeemed
from ..utils.dates import format_visit_date
from .dependencies import get_context, get_db, require_staff

logger = logging.getLogger(__name__)

router = APIRouter(tags=["tickets"])


@router.get("/{ticket_key}", response_model=TicketRead)
def read_ticket(
    ticket_key: str,
    db: Session = Depends(get_db),
    ctx: AppContext = Depends(get_context),
):
    """Ticket page behind the QR code."""
    order = crud_order.get_order(db, ticket_key)
    if order is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Ticket not found")
    return TicketRead(
        ticket_id=order.ticket_id,
        name=order.name,
        persons=order.persons,
        location=order.location,
        visit_date=format_visit_date(order.visit_date, ctx.settings.TICKET_TIMEZONE),
        amount=order.amount,
        status=order.status,
        is_used=bool(order.is_used),
        valid=order.status == OrderStatus.PAID and not order.is_used,
    )


@router.post(
    "/{ticket_key}/redeem",
    response_model=TicketRedeemed,
    dependencies=[Depends(require_staff)],
)
def redeem_ticket(ticket_key: str, db: Session = Depends(get_db)):
    """Admit the visitor once; a second scan of the same ticket is refused.

    Counter staff only: requests must carry the X-Staff-Token header.
    """
    order = crud_order.get_order(db, ticket_key)
    if order is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Ticket not found")
    ticket_id = order.ticket_id
    if not crud_order.redeem_ticket(db, ticket_key):
        db.refresh(order)
        reason = "Ticket already used" if order.is_used else "Ticket is not paid"
        logger.info("Redeem refused ticket=%s reason=%s", ticket_id, reason)
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=reason)
    logger.info("Ticket %s redeemed", ticket_id)
    return TicketRedeemed(ticket_id=ticket_id, redeemed_at=datetime.utcnow())
