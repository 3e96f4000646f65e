"""
Alembic migration: Initial bakery schema.

Creates users, products, pickup locations, customers, orders and the order
rows (items and history). Enum columns are stored as strings with the
lower-case enum values.

Revision ID: 001
Revises:
Create Date: 2026-10-17 09:00:00.000000
"""

from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects import postgresql

# Revision identifiers, used by Alembic
revision: str = '001'
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None

USER_ROLES = ('barista', 'baker', 'admin')
ORDER_STATES = ('new', 'confirmed', 'ready', 'delivered', 'problem', 'cancelled')


def _id_column() -> sa.Column:
    return sa.Column(
        'id',
        postgresql.UUID(as_uuid=True),
        primary_key=True,
        comment='Unique identifier for the record',
    )


def _timestamp_columns() -> list[sa.Column]:
    return [
        sa.Column(
            'created_at',
            sa.DateTime(timezone=True),
            nullable=False,
            comment='Timestamp when record was created',
        ),
        sa.Column(
            'updated_at',
            sa.DateTime(timezone=True),
            nullable=False,
            comment='Timestamp when record was last updated',
        ),
    ]


def upgrade() -> None:
    """Create the bakery tables, constraints and indexes."""
    op.create_table(
        'users',
        _id_column(),
        sa.Column('version', sa.Integer(), nullable=False),
        sa.Column('email', sa.String(length=255), nullable=False, comment='Login email, lower-cased'),
        sa.Column('password_hash', sa.String(length=255), nullable=False),
        sa.Column('first_name', sa.String(length=255), nullable=False),
        sa.Column('last_name', sa.String(length=255), nullable=False),
        sa.Column('role', sa.Enum(*USER_ROLES, name='user_role', native_enum=False), nullable=False),
        sa.Column('locked', sa.Boolean(), nullable=False),
        *_timestamp_columns(),
        sa.UniqueConstraint('email', name='uq_users_email'),
        sa.CheckConstraint('length(password_hash) >= 4', name='ck_users_password_hash_length'),
        sa.CheckConstraint('length(first_name) >= 1', name='ck_users_first_name_not_blank'),
        sa.CheckConstraint('length(last_name) >= 1', name='ck_users_last_name_not_blank'),
    )

    op.create_table(
        'products',
        _id_column(),
        sa.Column('version', sa.Integer(), nullable=False),
        sa.Column('name', sa.String(length=255), nullable=False),
        sa.Column('price', sa.Integer(), nullable=False, comment='Price in cents'),
        *_timestamp_columns(),
        sa.UniqueConstraint('name', name='uq_products_name'),
        sa.CheckConstraint('length(name) >= 1', name='ck_products_name_not_blank'),
        sa.CheckConstraint('price >= 0 AND price <= 100000', name='ck_products_price_range'),
    )

    op.create_table(
        'pickup_locations',
        _id_column(),
        sa.Column('version', sa.Integer(), nullable=False),
        sa.Column('name', sa.String(length=255), nullable=False),
        *_timestamp_columns(),
        sa.UniqueConstraint('name', name='uq_pickup_locations_name'),
        sa.CheckConstraint('length(name) >= 1', name='ck_pickup_locations_name_not_blank'),
    )

    op.create_table(
        'customers',
        _id_column(),
        sa.Column('full_name', sa.String(length=255), nullable=False),
        sa.Column('phone_number', sa.String(length=20), nullable=False),
        sa.Column('details', sa.String(length=255), nullable=True),
        *_timestamp_columns(),
    )

    op.create_table(
        'orders',
        _id_column(),
        sa.Column('version', sa.Integer(), nullable=False),
        sa.Column('due_date', sa.Date(), nullable=False),
        sa.Column('due_time', sa.Time(), nullable=False),
        sa.Column('state', sa.Enum(*ORDER_STATES, name='order_state', native_enum=False), nullable=False),
        sa.Column('pickup_location_id', postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column('customer_id', postgresql.UUID(as_uuid=True), nullable=False),
        *_timestamp_columns(),
        sa.ForeignKeyConstraint(
            ['pickup_location_id'],
            ['pickup_locations.id'],
            name='fk_orders_pickup_location_id_pickup_locations',
            ondelete='RESTRICT',
        ),
        sa.ForeignKeyConstraint(
            ['customer_id'],
            ['customers.id'],
            name='fk_orders_customer_id_customers',
            ondelete='RESTRICT',
        ),
        sa.UniqueConstraint('customer_id', name='uq_orders_customer_id'),
    )
    op.create_index('ix_orders_due_date_due_time', 'orders', ['due_date', 'due_time'])
    op.create_index('ix_orders_state', 'orders', ['state'])

    op.create_table(
        'order_items',
        sa.Column('id', postgresql.UUID(as_uuid=True), primary_key=True),
        sa.Column('order_id', postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column('position', sa.Integer(), nullable=False),
        sa.Column('product_id', postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column('quantity', sa.Integer(), nullable=False),
        sa.Column('comment', sa.String(length=255), nullable=True),
        sa.ForeignKeyConstraint(
            ['order_id'],
            ['orders.id'],
            name='fk_order_items_order_id_orders',
            ondelete='CASCADE',
        ),
        sa.ForeignKeyConstraint(
            ['product_id'],
            ['products.id'],
            name='fk_order_items_product_id_products',
            ondelete='RESTRICT',
        ),
        sa.CheckConstraint('quantity >= 1', name='ck_order_items_quantity_positive'),
    )
    op.create_index('ix_order_items_order_id', 'order_items', ['order_id'])
    op.create_index('ix_order_items_product_id', 'order_items', ['product_id'])

    op.create_table(
        'history_items',
        sa.Column('id', postgresql.UUID(as_uuid=True), primary_key=True),
        sa.Column('order_id', postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column('position', sa.Integer(), nullable=False),
        sa.Column(
            'new_state',
            sa.Enum(*ORDER_STATES, name='history_item_state', native_enum=False),
            nullable=True,
        ),
        sa.Column('message', sa.String(length=255), nullable=False),
        sa.Column('timestamp', sa.DateTime(timezone=True), nullable=False),
        sa.Column('created_by_id', postgresql.UUID(as_uuid=True), nullable=False),
        sa.ForeignKeyConstraint(
            ['order_id'],
            ['orders.id'],
            name='fk_history_items_order_id_orders',
            ondelete='CASCADE',
        ),
        sa.ForeignKeyConstraint(
            ['created_by_id'],
            ['users.id'],
            name='fk_history_items_created_by_id_users',
            ondelete='RESTRICT',
        ),
    )
    op.create_index('ix_history_items_order_id', 'history_items', ['order_id'])
    op.create_index('ix_history_items_created_by_id', 'history_items', ['created_by_id'])


def downgrade() -> None:
    """Drop all bakery tables in reverse dependency order."""
    op.drop_index('ix_history_items_created_by_id', table_name='history_items')
    op.drop_index('ix_history_items_order_id', table_name='history_items')
    op.drop_table('history_items')
    op.drop_index('ix_order_items_product_id', table_name='order_items')
    op.drop_index('ix_order_items_order_id', table_name='order_items')
    op.drop_table('order_items')
    op.drop_index('ix_orders_state', table_name='orders')
    op.drop_index('ix_orders_due_date_due_time', table_name='orders')
    op.drop_table('orders')
    op.drop_table('customers')
    op.drop_table('pickup_locations')
    op.drop_table('products')
    op.drop_table('users')
