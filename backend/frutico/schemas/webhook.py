"""Razorpay webhook payloads.

Only ``payment.captured`` carries fields we act on; every other event type
parses into :class:`UnhandledEvent` and is acknowledged without side effects.
"""

from typing import Annotated, Any, Literal, Optional, Union

from pydantic import BaseModel, ConfigDict, Discriminator, Field, Tag, TypeAdapter

PAYMENT_CAPTURED = "payment.captured"


class PaymentEntity(BaseModel):
    model_config = ConfigDict(extra="ignore")

    id: str = Field(min_length=1)
    order_id: str = Field(min_length=1)
    # Minor currency units (paise); Order.amount is Numeric(10, 2)
    amount: int = Field(ge=0, le=9_999_999_999)
    currency: str = "INR"
    status: Optional[str] = None


class PaymentWrapper(BaseModel):
    model_config = ConfigDict(extra="ignore")

    entity: PaymentEntity


class PaymentPayload(BaseModel):
    model_config = ConfigDict(extra="ignore")

    payment: PaymentWrapper


class PaymentCapturedEvent(BaseModel):
    model_config = ConfigDict(extra="ignore")

    event: Literal["payment.captured"]
    payload: PaymentPayload

    @property
    def payment(self) -> PaymentEntity:
        return self.payload.payment.entity


class UnhandledEvent(BaseModel):
    model_config = ConfigDict(extra="ignore")

    event: Optional[str] = None


def _event_tag(value: Any) -> str:
    if isinstance(value, dict):
        event = value.get("event")
    else:
        event = getattr(value, "event", None)
    return "captured" if event == PAYMENT_CAPTURED else "unhandled"


WebhookEvent = Annotated[
    Union[
        Annotated[PaymentCapturedEvent, Tag("captured")],
        Annotated[UnhandledEvent, Tag("unhandled")],
    ],
    Discriminator(_event_tag),
]

webhook_event_adapter: TypeAdapter[WebhookEvent] = TypeAdapter(WebhookEvent)


class WebhookAck(BaseModel):
    received: bool = True
    outcome: Literal["processed", "duplicate", "not_found", "ignored"]
