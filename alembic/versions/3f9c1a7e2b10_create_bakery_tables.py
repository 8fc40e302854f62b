"""create_bakery_tables

Revision ID: 3f9c1a7e2b10
Revises:
Create Date: 2026-01-04 10:12:00.000000

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision: str = '3f9c1a7e2b10'
down_revision: Union[str, Sequence[str], None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None

user_role_enum = sa.Enum('customer', 'admin', name='user_role_enum')
order_status_enum = sa.Enum(
    'pending', 'confirmed', 'baking', 'ready', 'completed', 'cancelled',
    name='order_status_enum',
)
payment_status_enum = sa.Enum(
    'pending', 'processing', 'paid', 'failed', 'refunded',
    name='payment_status_enum',
)
delivery_method_enum = sa.Enum('pickup', 'delivery', name='delivery_method_enum')


def upgrade() -> None:
    """Upgrade schema - Create profiles, catalog and order tables."""

    op.create_table(
        'profiles',
        sa.Column('id', sa.Uuid(), nullable=False),
        sa.Column('email', sa.String(length=255), nullable=True),
        sa.Column('name', sa.String(length=100), nullable=True),
        sa.Column('phone', sa.String(length=20), nullable=True),
        sa.Column('address', sa.String(length=200), nullable=True),
        sa.Column('city', sa.String(length=50), nullable=True),
        sa.Column('state', sa.String(length=50), nullable=True),
        sa.Column('zip_code', sa.String(length=10), nullable=True),
        sa.Column('role', user_role_enum, server_default='customer', nullable=False),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False),
        sa.Column('updated_at', sa.DateTime(timezone=True), nullable=False),
        sa.PrimaryKeyConstraint('id')
    )

    op.create_table(
        'products',
        sa.Column('id', sa.Uuid(), nullable=False),
        sa.Column('name', sa.String(length=100), nullable=False),
        sa.Column('description', sa.Text(), nullable=True),
        sa.Column('price', sa.Numeric(10, 2), nullable=False),
        sa.Column('cost', sa.Numeric(10, 2), nullable=False),
        sa.Column('category', sa.String(length=50), nullable=False),
        sa.Column('available', sa.Boolean(), server_default='true', nullable=False),
        sa.Column('image_url', sa.String(length=512), nullable=True),
        sa.Column('lead_time_hours', sa.Integer(), nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False),
        sa.Column('updated_at', sa.DateTime(timezone=True), nullable=False),
        sa.CheckConstraint('price > 0', name='product_positive_price'),
        sa.CheckConstraint('cost > 0', name='product_positive_cost'),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index('ix_products_category', 'products', ['category'])

    op.create_table(
        'customer_favorites',
        sa.Column('id', sa.Uuid(), nullable=False),
        sa.Column('user_id', sa.Uuid(), nullable=False),
        sa.Column('product_id', sa.Uuid(), nullable=False),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False),
        sa.ForeignKeyConstraint(['user_id'], ['profiles.id'], ondelete='CASCADE'),
        sa.ForeignKeyConstraint(['product_id'], ['products.id'], ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('user_id', 'product_id', name='unique_customer_favorite')
    )
    op.create_index('ix_customer_favorites_user_id', 'customer_favorites', ['user_id'])

    op.create_table(
        'orders',
        sa.Column('id', sa.Uuid(), nullable=False),
        sa.Column('order_number', sa.String(length=20), nullable=False),
        sa.Column('user_id', sa.Uuid(), nullable=False),
        sa.Column('status', order_status_enum, server_default='pending', nullable=False),
        sa.Column(
            'payment_status', payment_status_enum, server_default='pending', nullable=False
        ),
        sa.Column('total', sa.Numeric(10, 2), nullable=False),
        sa.Column('cost', sa.Numeric(10, 2), nullable=False),
        sa.Column('profit', sa.Numeric(10, 2), nullable=False),
        sa.Column('pickup_date', sa.DateTime(timezone=True), nullable=False),
        sa.Column(
            'delivery_method', delivery_method_enum, server_default='pickup', nullable=False
        ),
        sa.Column('notes', sa.Text(), nullable=True),
        sa.Column('stripe_payment_link_id', sa.String(length=255), nullable=True),
        sa.Column('customer_name', sa.String(length=100), nullable=True),
        sa.Column('customer_phone', sa.String(length=20), nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False),
        sa.Column('updated_at', sa.DateTime(timezone=True), nullable=False),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index('ix_orders_order_number', 'orders', ['order_number'], unique=True)
    op.create_index('ix_orders_user_id', 'orders', ['user_id'])
    op.create_index('ix_orders_stripe_payment_link_id', 'orders', ['stripe_payment_link_id'])

    op.create_table(
        'order_items',
        sa.Column('id', sa.Uuid(), nullable=False),
        sa.Column('order_id', sa.Uuid(), nullable=False),
        sa.Column('product_id', sa.Uuid(), nullable=True),
        sa.Column('quantity', sa.Integer(), nullable=False),
        sa.Column('price', sa.Numeric(10, 2), nullable=False),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False),
        sa.CheckConstraint(
            'quantity > 0 AND quantity <= 100', name='order_item_quantity_range'
        ),
        sa.ForeignKeyConstraint(['order_id'], ['orders.id'], ondelete='CASCADE'),
        sa.ForeignKeyConstraint(['product_id'], ['products.id'], ondelete='SET NULL'),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index('ix_order_items_order_id', 'order_items', ['order_id'])


def downgrade() -> None:
    """Downgrade schema - Drop bakery tables and enum types."""
    op.drop_index('ix_order_items_order_id', table_name='order_items')
    op.drop_table('order_items')
    op.drop_index('ix_orders_stripe_payment_link_id', table_name='orders')
    op.drop_index('ix_orders_user_id', table_name='orders')
    op.drop_index('ix_orders_order_number', table_name='orders')
    op.drop_table('orders')
    op.drop_index('ix_customer_favorites_user_id', table_name='customer_favorites')
    op.drop_table('customer_favorites')
    op.drop_index('ix_products_category', table_name='products')
    op.drop_table('products')
    op.drop_table('profiles')

    bind = op.get_bind()
    for enum_type in (
        delivery_method_enum,
        payment_status_enum,
        order_status_enum,
        user_role_enum,
    ):
        enum_type.drop(bind, checkfirst=True)
