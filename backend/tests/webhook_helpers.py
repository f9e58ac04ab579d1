"""Builders for orders, settings and signed Razorpay deliveries used across tests."""

import hashlib
import hmac
import json
from datetime import datetime

from frutico.core.config import Settings
from frutico.database import session_scope
from frutico.models import Order, OrderStatus, VisitLocation

WEBHOOK_SECRET = "whsec_test_secret"
BASE_URL = "https://tickets.frutico.test"
STAFF_TOKEN = "staff_counter_token"
STAFF_HEADERS = {"X-Staff-Token": STAFF_TOKEN}


class FakeMailer:
    """Collects outgoing mail instead of talking to SMTP."""

    def __init__(self, error: Exception | None = None):
        self.sent: list[dict] = []
        self.error = error

    async def send_email(self, recipient, subject, html, attachments=()):
        if self.error is not None:
            raise self.error
        self.sent.append(
            {"recipient": recipient, "subject": subject, "html": html, "attachments": list(attachments)}
        )


def make_settings(**overrides) -> Settings:
    values = {
        "RAZORPAY_WEBHOOK_SECRET": WEBHOOK_SECRET,
        "BASE_URL": BASE_URL,
        "STAFF_REDEEM_TOKEN": STAFF_TOKEN,
        "SQLALCHEMY_DATABASE_URL": "sqlite://",
        "FULFILLMENT_DRAIN_TIMEOUT": 5.0,
    }
    values.update(overrides)
    return Settings(_env_file=None, **values)


def create_order(session_factory, **overrides) -> str:
    values = dict(
        order_id="order_PQ7x1",
        name="Priya",
        email="priya@example.com",
        phone="9876543210",
        persons=3,
        location=VisitLocation.ANNANAGAR,
        visit_date=datetime(2024, 3, 10, 0, 0, 0),
        status=OrderStatus.PENDING,
    )
    values.update(overrides)
    with session_scope(session_factory) as db:
        order = Order(**values)
        db.add(order)
        db.commit()
        return order.id


def load_order(session_factory, key: str) -> Order:
    with session_scope(session_factory) as db:
        order = db.get(Order, key)
        db.expunge(order)
        return order


def event_body(event: str = "payment.captured", order_id: str = "order_PQ7x1", payment_id: str = "pay_Abc123", amount: int = 250000) -> bytes:
    payload = {
        "entity": "event",
        "account_id": "acc_Frutico",
        "event": event,
        "contains": ["payment"],
        "payload": {
            "payment": {
                "entity": {
                    "id": payment_id,
                    "entity": "payment",
                    "amount": amount,
                    "currency": "INR",
                    "status": "captured" if event == "payment.captured" else "failed",
                    "order_id": order_id,
                    "method": "upi",
                    "email": "priya@example.com",
                    "contact": "+919876543210",
                }
            }
        },
        "created_at": 1710028800,
    }
    return json.dumps(payload).encode("utf-8")


def sign(body: bytes, secret: str = WEBHOOK_SECRET) -> str:
    return hmac.new(secret.encode("utf-8"), body, hashlib.sha256).hexdigest()


def post_webhook(client, body: bytes, signature: str | None = None, signed: bool = True):
    headers = {"Content-Type": "application/json"}
    if signature is None and signed:
        signature = sign(body)
    if signature is not None:
        headers["X-Razorpay-Signature"] = signature
    return client.post("/webhook/razorpay", content=body, headers=headers)


def wait_for_tickets(client, ctx) -> None:
    """Run the app loop until spawned ticket tasks are finished."""
    client.portal.call(ctx.tasks.drain)
