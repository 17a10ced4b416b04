"""create catalog, customer and quote tables

Revision ID: 20261017_01
Revises:
Create Date: 2026-10-17 00:00:00.000000
"""
from typing import Sequence, Union
from alembic import op
import sqlalchemy as sa

revision: str = '20261017_01'
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.create_table(
        'catalog_products',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('tenant_id', sa.String(64), nullable=False),
        sa.Column('brand', sa.String(50), nullable=False),
        sa.Column('model', sa.String(50), nullable=False),
        sa.Column('product_type', sa.Enum('air_conditioner', 'boiler', 'electric_water_heater', name='producttype'), nullable=False),
        sa.Column('status', sa.Enum('draft', 'active', 'inactive', name='productstatus'), nullable=False),
        sa.Column('stock', sa.Integer(), nullable=False, server_default='0'),
        sa.Column('description', sa.JSON(), nullable=False),
        sa.Column('variants', sa.JSON(), nullable=False),
        sa.Column('installation_kits', sa.JSON(), nullable=False),
        sa.Column('extras', sa.JSON(), nullable=False),
        sa.Column('tech_specs', sa.JSON(), nullable=False),
        sa.Column('financing', sa.JSON(), nullable=False),
        sa.Column('created_at', sa.DateTime(), nullable=True),
        sa.Column('updated_at', sa.DateTime(), nullable=True),
    )
    op.create_index('ix_catalog_products_tenant_id', 'catalog_products', ['tenant_id'])

    op.create_table(
        'customers',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('tenant_id', sa.String(64), nullable=False),
        sa.Column('name', sa.String(), nullable=False),
        sa.Column('email', sa.String(), nullable=False),
        sa.Column('phone', sa.String(), nullable=True),
        sa.Column('address', sa.String(), nullable=True),
        sa.Column('tax_id', sa.String(), nullable=True),
        sa.Column('population', sa.String(), nullable=True),
        sa.Column('created_at', sa.DateTime(), nullable=True),
        sa.Column('updated_at', sa.DateTime(), nullable=True),
    )
    op.create_index('ix_customers_tenant_id', 'customers', ['tenant_id'])

    op.create_table(
        'quotes',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('tenant_id', sa.String(64), nullable=False),
        sa.Column('quote_no', sa.String(16), nullable=False),
        sa.Column('customer_id', sa.Integer(), sa.ForeignKey('customers.id'), nullable=True),
        sa.Column('product_id', sa.Integer(), sa.ForeignKey('catalog_products.id'), nullable=True),
        sa.Column('selection', sa.JSON(), nullable=True),
        sa.Column('locale', sa.String(2), nullable=False, server_default='es'),
        sa.Column('client_name', sa.String(), nullable=True),
        sa.Column('client_email', sa.String(), nullable=True),
        sa.Column('client_phone', sa.String(), nullable=True),
        sa.Column('client_address', sa.String(), nullable=True),
        sa.Column('client_population', sa.String(), nullable=True),
        sa.Column('client_tax_id', sa.String(), nullable=True),
        sa.Column('is_technician', sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column('work_order_number', sa.String(32), nullable=True),
        sa.Column('total_amount', sa.Numeric(14, 4), nullable=False, server_default='0'),
        sa.Column('financing_months', sa.Integer(), nullable=True),
        sa.Column('financing_fee', sa.Numeric(24, 10), nullable=True),
        sa.Column(
            'status',
            sa.Enum('draft', 'sent', 'viewed', 'accepted', 'rejected', 'expired', name='quotestatus'),
            nullable=False,
            server_default='draft',
        ),
        sa.Column('valid_until', sa.Date(), nullable=False),
        sa.Column('signature', sa.Text(), nullable=True),
        sa.Column('terms_accepted_at', sa.DateTime(), nullable=True),
        sa.Column('sent_at', sa.DateTime(), nullable=True),
        sa.Column('viewed_at', sa.DateTime(), nullable=True),
        sa.Column('accepted_at', sa.DateTime(), nullable=True),
        sa.Column('rejected_at', sa.DateTime(), nullable=True),
        sa.Column('expired_at', sa.DateTime(), nullable=True),
        sa.Column('version_id', sa.Integer(), nullable=False),
        sa.Column('created_at', sa.DateTime(), nullable=True),
        sa.Column('updated_at', sa.DateTime(), nullable=True),
        sa.UniqueConstraint('tenant_id', 'quote_no', name='uq_quotes_tenant_quote_no'),
    )
    op.create_index('ix_quotes_tenant_id', 'quotes', ['tenant_id'])

    op.create_table(
        'quote_items',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('quote_id', sa.Integer(), sa.ForeignKey('quotes.id', ondelete='CASCADE'), nullable=False),
        sa.Column('position', sa.Integer(), nullable=False, server_default='0'),
        sa.Column('description', sa.String(), nullable=False),
        sa.Column('quantity', sa.Integer(), nullable=False, server_default='1'),
        sa.Column('unit_price', sa.Numeric(14, 4), nullable=False),
        sa.Column('total', sa.Numeric(14, 4), nullable=False),
        sa.Column('created_at', sa.DateTime(), nullable=True),
        sa.Column('updated_at', sa.DateTime(), nullable=True),
    )
    op.create_index('ix_quote_items_quote_id', 'quote_items', ['quote_id'])


def downgrade() -> None:
    op.drop_index('ix_quote_items_quote_id', table_name='quote_items')
    op.drop_table('quote_items')
    op.drop_index('ix_quotes_tenant_id', table_name='quotes')
    op.drop_table('quotes')
    op.drop_index('ix_customers_tenant_id', table_name='customers')
    op.drop_table('customers')
    op.drop_index('ix_catalog_products_tenant_id', table_name='catalog_products')
    op.drop_table('catalog_products')
    if op.get_bind().dialect.name == "postgresql":
        for enum_name in ("quotestatus", "productstatus", "producttype"):
            op.execute(f"DROP TYPE IF EXISTS {enum_name}")
