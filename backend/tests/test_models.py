from datetime import datetime

from sqlalchemy import text

from frutico.crud import crud_order
from frutico.database import session_scope
from frutico.models import OrderStatus

from webhook_helpers import create_order, load_order


def test_rows_seeded_with_plain_sql_get_defaults(session_factory):
    with session_scope(session_factory) as db:
        db.execute(
            text(
                "INSERT INTO orders (id, order_id, name, email, phone, persons, location, visit_date) "
                "VALUES (:id, :order_id, 'Arun', 'arun@example.com', '9000000000', 2, 'kulithalai', :visit_date)"
            ),
            {"id": "a" * 32, "order_id": "order_sql_seed", "visit_date": datetime(2024, 3, 10)},
        )
        db.commit()

    order = load_order(session_factory, "a" * 32)
    assert order.status == OrderStatus.PENDING
    assert order.is_used is False
    assert order.created_at is not None
    assert order.updated_at is not None


def test_paying_an_order_bumps_updated_at(session_factory):
    key = create_order(session_factory)
    before = load_order(session_factory, key)
    assert before.created_at is not None

    with session_scope(session_factory) as db:
        assert crud_order.mark_order_paid(db, key, "pay_1", 2500, "https://frutico.in/ticket/x")
        db.commit()

    after = load_order(session_factory, key)
    assert after.created_at == before.created_at
    assert after.updated_at >= before.updated_at
