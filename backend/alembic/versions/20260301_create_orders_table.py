"""
Create orders table for ticket payments.

Revision ID: 20260301_create_orders_table
Revises:
Create Date: 2026-03-01
"""

from __future__ import annotations

from alembic import op
import sqlalchemy as sa
from typing import Union

# revision identifiers, used by Alembic.
revision: str = '20260301_create_orders_table'
down_revision: Union[str, None] = None
branch_labels = None
depends_on = None


def upgrade() -> None:
    op.create_table(
        'orders',
        sa.Column('id', sa.String(length=32), primary_key=True),
        sa.Column('order_id', sa.String(), nullable=False),
        sa.Column('payment_id', sa.String(), nullable=True),
        sa.Column('name', sa.String(), nullable=False),
        sa.Column('email', sa.String(), nullable=False),
        sa.Column('phone', sa.String(), nullable=False),
        sa.Column('persons', sa.Integer(), nullable=False),
        sa.Column('location', sa.String(length=10), nullable=False),
        sa.Column('visit_date', sa.DateTime(), nullable=False),
        sa.Column('amount', sa.Numeric(10, 2), nullable=True),
        sa.Column('status', sa.String(length=7), nullable=False, server_default='pending'),
        sa.Column('qr_target', sa.String(), nullable=True),
        sa.Column('is_used', sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column('ticket_emailed_at', sa.DateTime(), nullable=True),
        sa.Column('created_at', sa.DateTime(), nullable=False, server_default=sa.func.now()),
        sa.Column('updated_at', sa.DateTime(), nullable=False, server_default=sa.func.now()),
        sa.UniqueConstraint('order_id', name='uq_orders_order_id'),
        sa.CheckConstraint('persons >= 1', name='ck_orders_persons_positive'),
    )
    op.create_index('ix_orders_location', 'orders', ['location'])
    op.create_index('ix_orders_visit_date', 'orders', ['visit_date'])
    op.create_index('ix_orders_status', 'orders', ['status'])
    # Fast counting of paid tickets per branch/date
    op.create_index('ix_orders_location_visit_date_status', 'orders', ['location', 'visit_date', 'status'])


def downgrade() -> None:
    op.drop_index('ix_orders_location_visit_date_status', table_name='orders')
    op.drop_index('ix_orders_status', table_name='orders')
    op.drop_index('ix_orders_visit_date', table_name='orders')
    op.drop_index('ix_orders_location', table_name='orders')
    op.drop_table('orders')
