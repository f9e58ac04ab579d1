import pytest
from fastapi.testclient import TestClient

from frutico.main import app
from frutico.models import OrderStatus
from frutico.services.webhook_verifier import (
    InvalidSignatureError,
    WebhookConfigError,
    compute_signature,
    verify_signature,
)

from conftest import install_context
from webhook_helpers import WEBHOOK_SECRET, create_order, event_body, load_order, post_webhook, sign


def test_verify_signature_accepts_exact_body():
    body = event_body()
    verify_signature(body, compute_signature(body, WEBHOOK_SECRET), WEBHOOK_SECRET)


def test_verify_signature_rejects_reserialized_body():
    body = event_body()
    signature = sign(body)
    # Same JSON, different bytes: must not verify
    with pytest.raises(InvalidSignatureError):
        verify_signature(body.replace(b", ", b","), signature, WEBHOOK_SECRET)


def test_verify_signature_rejects_non_ascii_header():
    with pytest.raises(InvalidSignatureError):
        verify_signature(b"{}", "é" * 64, WEBHOOK_SECRET)


def test_missing_secret_is_a_config_error_not_a_bad_signature():
    with pytest.raises(WebhookConfigError):
        verify_signature(b"{}", sign(b"{}"), "")


def test_missing_signature_rejected_without_mutation(context, session_factory, mailer):
    key = create_order(session_factory)
    with TestClient(app) as client:
        res = post_webhook(client, event_body(), signed=False)
        assert res.status_code == 400
        assert res.text == "Invalid signature"
        assert len(context.tasks) == 0

    order = load_order(session_factory, key)
    assert order.status == OrderStatus.PENDING
    assert order.payment_id is None
    assert mailer.sent == []


def test_tampered_body_rejected_without_mutation(context, session_factory, mailer):
    key = create_order(session_factory)
    genuine = event_body(amount=100)
    tampered = event_body(amount=250000)
    with TestClient(app) as client:
        res = post_webhook(client, tampered, signature=sign(genuine))
        assert res.status_code == 400

    order = load_order(session_factory, key)
    assert order.status == OrderStatus.PENDING
    assert order.amount is None
    assert mailer.sent == []


def test_signature_with_wrong_secret_rejected(context, session_factory):
    key = create_order(session_factory)
    body = event_body()
    with TestClient(app) as client:
        res = post_webhook(client, body, signature=sign(body, secret="someone-else"))
        assert res.status_code == 400
    assert load_order(session_factory, key).status == OrderStatus.PENDING


def test_unset_secret_returns_server_error(session_factory, mailer, alerts):
    install_context(session_factory, mailer, alerts, RAZORPAY_WEBHOOK_SECRET="")
    key = create_order(session_factory)
    try:
        with TestClient(app) as client:
            res = post_webhook(client, event_body())
            assert res.status_code == 500
            assert res.text == "Server configuration error"
    finally:
        app.state.context = None
    assert load_order(session_factory, key).status == OrderStatus.PENDING
    assert mailer.sent == []
