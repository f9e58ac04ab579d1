"""Render and e-mail the visit ticket for a paid order.

Runs as a detached task after the webhook has been answered. A failure here
leaves the order ``paid``; the missing ``ticket_emailed_at`` marks it for
manual follow-up.
"""

from __future__ import annotations

import asyncio
import logging
import time
from dataclasses import dataclass
from datetime import datetime
from decimal import Decimal
from typing import Optional, Protocol, Sequence

from sqlalchemy.orm import sessionmaker

from ..crud import crud_order
from ..database import session_scope
from ..models import OrderStatus
from ..utils.dates import format_visit_date
from ..utils.email import InlineAttachment
from ..utils.metrics import incr as metrics_incr, timing_ms as metrics_timing
from .qr_code import render_qr_png
from .ticket_template import QR_CONTENT_ID, render_ticket_html

logger = logging.getLogger(__name__)

QR_FILENAME = "frutico-ticket.png"


class Mailer(Protocol):
    async def send_email(
        self,
        recipient: str,
        subject: str,
        html: str,
        attachments: Sequence[InlineAttachment] = (),
    ) -> None: ...


class FulfillmentError(Exception):
    """The order cannot be fulfilled in its current state."""


@dataclass(frozen=True)
class TicketSnapshot:
    key: str
    ticket_id: str
    name: str
    email: str
    persons: int
    location: str
    visit_date: datetime
    amount: Optional[Decimal]
    qr_target: str


def _load_snapshot(session_factory: sessionmaker, order_key: str) -> TicketSnapshot:
    with session_scope(session_factory) as db:
        order = crud_order.get_order(db, order_key)
        if order is None:
            raise FulfillmentError(f"order {order_key} not found")
        if order.status != OrderStatus.PAID or not order.qr_target:
            raise FulfillmentError(f"order {order_key} is not paid")
        return TicketSnapshot(
            key=order.id,
            ticket_id=order.ticket_id,
            name=order.name,
            email=order.email,
            persons=order.persons,
            location=getattr(order.location, "value", order.location),
            visit_date=order.visit_date,
            amount=order.amount,
            qr_target=order.qr_target,
        )


def _mark_emailed(session_factory: sessionmaker, order_key: str) -> None:
    with session_scope(session_factory) as db:
        crud_order.mark_ticket_emailed(db, order_key)


async def fulfill_ticket(
    session_factory: sessionmaker,
    mailer: Mailer,
    order_key: str,
    *,
    timezone_name: str,
    subject: str,
) -> None:
    """Build the ticket for ``order_key`` and send it. Raises on failure."""
    t0 = time.perf_counter()
    ticket = await asyncio.to_thread(_load_snapshot, session_factory, order_key)

    qr_png = await asyncio.to_thread(render_qr_png, ticket.qr_target, "H", 2, 300)
    html = render_ticket_html(
        name=ticket.name,
        persons=ticket.persons,
        location=ticket.location,
        visit_date=format_visit_date(ticket.visit_date, timezone_name),
        amount=ticket.amount,
        ticket_id=ticket.ticket_id,
    )

    await mailer.send_email(
        ticket.email,
        subject,
        html,
        [InlineAttachment(filename=QR_FILENAME, content=qr_png, cid=QR_CONTENT_ID)],
    )
    await asyncio.to_thread(_mark_emailed, session_factory, order_key)

    metrics_incr("ticket.emailed_total")
    metrics_timing("ticket.fulfillment_ms", (time.perf_counter() - t0) * 1000.0)
    logger.info("Ticket %s emailed for order key=%s", ticket.ticket_id, order_key)


async def run_fulfillment(
    session_factory: sessionmaker,
    mailer: Mailer,
    order_key: str,
    *,
    timezone_name: str,
    subject: str,
) -> None:
    """Task body: count failures before handing them to the task registry."""
    try:
        await fulfill_ticket(session_factory, mailer, order_key, timezone_name=timezone_name, subject=subject)
    except Exception:
        metrics_incr("ticket.fulfillment_failed_total")
        logger.warning("Ticket fulfillment failed; order key=%s stays paid", order_key)
        raise
