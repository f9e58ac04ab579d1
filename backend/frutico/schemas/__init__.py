from .webhook import (
    PAYMENT_CAPTURED,
    PaymentCapturedEvent,
    PaymentEntity,
    UnhandledEvent,
    WebhookAck,
    WebhookEvent,
    webhook_event_adapter,
)
from .ticket import TicketRead, TicketRedeemed
