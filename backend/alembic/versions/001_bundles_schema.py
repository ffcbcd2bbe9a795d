"""Shops, bundles, bundle products and analytics events.

Revision ID: 001_bundles
Revises:
Create Date: 2026-10-19

"""
from typing import Sequence, Union

import sqlalchemy as sa

from alembic import op

# revision identifiers, used by Alembic.
revision: str = '001_bundles'
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    # ### Shops table ###
    op.create_table(
        'shops',
        sa.Column('id', sa.Uuid(), primary_key=True),
        sa.Column('domain', sa.String(255), nullable=False),
        sa.Column('name', sa.String(255), nullable=False),
        sa.Column('access_token_encrypted', sa.Text(), nullable=True),
        sa.Column('scopes', sa.Text(), nullable=True),
        sa.Column('bundles_enabled', sa.Boolean(), nullable=False, server_default=sa.true()),
        sa.Column('analytics_enabled', sa.Boolean(), nullable=False, server_default=sa.true()),
        sa.Column('ai_enabled', sa.Boolean(), nullable=False, server_default=sa.true()),
        sa.Column('ai_model', sa.String(100), nullable=False, server_default='llama-3.1-8b-instant'),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.func.now()),
        sa.Column('updated_at', sa.DateTime(timezone=True), server_default=sa.func.now()),
    )
    op.create_index('ix_shops_domain', 'shops', ['domain'], unique=True)

    # ### Bundles table ###
    op.create_table(
        'bundles',
        sa.Column('id', sa.Uuid(), primary_key=True),
        sa.Column('shop_id', sa.Uuid(), sa.ForeignKey('shops.id', ondelete='CASCADE'), nullable=False),
        sa.Column('title', sa.String(255), nullable=False),
        sa.Column('description', sa.Text()),
        sa.Column('type', sa.String(50), server_default='fixed'),
        sa.Column('display_location', sa.String(50), server_default='product_page'),
        sa.Column('discount_type', sa.String(20), server_default='percentage'),
        sa.Column('discount_value', sa.Numeric(precision=10, scale=2), nullable=False),
        sa.Column('discount_code', sa.String(64), nullable=False),
        sa.Column('discount_node_id', sa.String(255)),
        sa.Column('status', sa.String(20), server_default='active'),
        sa.Column('min_products', sa.Integer(), server_default='2'),
        sa.Column('is_ai_generated', sa.Boolean(), server_default=sa.false()),
        sa.Column('priority', sa.Integer(), server_default='0'),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.func.now()),
        sa.Column('updated_at', sa.DateTime(timezone=True), server_default=sa.func.now()),
    )
    op.create_index('ix_bundles_shop_id', 'bundles', ['shop_id'])
    op.create_index('ix_bundles_discount_code', 'bundles', ['discount_code'], unique=True)
    op.create_index('ix_bundles_status', 'bundles', ['status'])
    op.create_index('ix_bundles_created_at', 'bundles', ['created_at'])

    # ### Bundle products table ###
    op.create_table(
        'bundle_products',
        sa.Column('id', sa.Uuid(), primary_key=True),
        sa.Column('bundle_id', sa.Uuid(), sa.ForeignKey('bundles.id', ondelete='CASCADE'), nullable=False),
        sa.Column('product_id', sa.String(255), nullable=False),
        sa.Column('variant_id', sa.String(255)),
        sa.Column('title', sa.String(500), nullable=False),
        sa.Column('price', sa.Numeric(precision=10, scale=2), server_default='0'),
        sa.Column('compare_at_price', sa.Numeric(precision=10, scale=2)),
        sa.Column('image_url', sa.Text()),
        sa.Column('position', sa.Integer(), server_default='0'),
    )
    op.create_index('ix_bundle_products_bundle_id', 'bundle_products', ['bundle_id'])
    op.create_index('ix_bundle_products_product_id', 'bundle_products', ['product_id'])

    # ### Analytics events table ###
    op.create_table(
        'analytics_events',
        sa.Column('id', sa.Uuid(), primary_key=True),
        sa.Column('shop_id', sa.Uuid(), sa.ForeignKey('shops.id', ondelete='CASCADE'), nullable=False),
        sa.Column('bundle_id', sa.Uuid(), sa.ForeignKey('bundles.id', ondelete='SET NULL'), nullable=True),
        sa.Column('event_type', sa.String(50), nullable=False),
        sa.Column('event_source', sa.String(50), server_default='storefront'),
        sa.Column('product_id', sa.String(255)),
        sa.Column('customer_id', sa.String(255)),
        sa.Column('revenue', sa.Numeric(precision=12, scale=2)),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.func.now()),
    )
    op.create_index('ix_analytics_events_shop_id', 'analytics_events', ['shop_id'])
    op.create_index('ix_analytics_events_customer_id', 'analytics_events', ['customer_id'])
    op.create_index('ix_analytics_events_shop_type', 'analytics_events', ['shop_id', 'event_type'])


def downgrade() -> None:
    op.drop_table('analytics_events')
    op.drop_table('bundle_products')
    op.drop_table('bundles')
    op.drop_table('shops')
