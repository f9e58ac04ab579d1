"""Authenticate and parse Razorpay webhook deliveries.

Razorpay signs the exact request body with HMAC-SHA256 using the webhook
secret and sends the hex digest in ``X-Razorpay-Signature``. The body must be
verified byte-for-byte before it is parsed.
"""

import hashlib
import hmac
from typing import Optional

from pydantic import ValidationError

from ..schemas.webhook import WebhookEvent, webhook_event_adapter


class WebhookError(Exception):
    """Base class for deliveries we refuse to process."""


class WebhookConfigError(WebhookError):
    """The webhook secret is not provisioned on this server."""


class InvalidSignatureError(WebhookError):
    """Signature header missing or not matching the body."""


class InvalidPayloadError(WebhookError):
    """Authenticated body that is not a well-formed event."""


def compute_signature(raw: bytes, secret: str) -> str:
    return hmac.new(key=secret.encode("utf-8"), msg=raw, digestmod=hashlib.sha256).hexdigest()


def verify_signature(raw: bytes, signature: Optional[str], secret: Optional[str]) -> None:
    """Raise unless ``signature`` is the HMAC of ``raw`` under ``secret``."""
    if not secret:
        raise WebhookConfigError("RAZORPAY_WEBHOOK_SECRET is not set")
    if not signature:
        raise InvalidSignatureError("missing signature header")
    expected = compute_signature(raw, secret)
    # bytes on both sides: compare_digest rejects non-ASCII str
    if not hmac.compare_digest(signature.strip().encode("utf-8"), expected.encode("utf-8")):
        raise InvalidSignatureError("signature mismatch")


def parse_event(raw: bytes) -> WebhookEvent:
    try:
        return webhook_event_adapter.validate_json(raw)
    except ValidationError as exc:
        raise InvalidPayloadError(f"{exc.error_count()} validation error(s)") from exc
