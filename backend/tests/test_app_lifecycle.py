from fastapi.testclient import TestClient

from frutico.main import app
from frutico.models import OrderStatus

from webhook_helpers import create_order, event_body, load_order, post_webhook


def test_shutdown_drains_ticket_tasks(context, session_factory, mailer):
    key = create_order(session_factory)
    with TestClient(app) as client:
        res = post_webhook(client, event_body())
        assert res.json()["outcome"] == "processed"

    # Leaving the client runs shutdown, which waits for the ticket email
    assert app.state.context is None
    assert len(mailer.sent) == 1
    assert load_order(session_factory, key).status == OrderStatus.PAID


def test_requests_before_startup_are_refused():
    app.state.context = None
    client = TestClient(app)
    res = client.get("/ticket/anything")
    assert res.status_code == 503


def test_root(context):
    with TestClient(app) as client:
        assert client.get("/").json() == {"message": "Frutico Tickets API"}
