"""Initial database schema

Revision ID: 0001
Revises:
Create Date: 2025-08-02 12:30:00.000000

"""
from collections.abc import Sequence

import sqlalchemy as sa
from alembic import op
from sqlalchemy.dialects import postgresql

# revision identifiers, used by Alembic.
revision: str = '0001'
down_revision: str | None = None
branch_labels: str | Sequence[str] | None = None
depends_on: str | Sequence[str] | None = None

MONEY = sa.Numeric(precision=12, scale=2)
RATE = sa.Numeric(precision=12, scale=6)

SEASONAL_RATE_TABLES = (
    'hotel_room_rates',
    'transfer_rates',
    'vehicle_rates',
    'guide_rates',
    'activity_rates',
)


def _id() -> sa.Column:
    return sa.Column('id', postgresql.UUID(as_uuid=True), server_default=sa.text('gen_random_uuid()'), nullable=False)


def _tenant() -> sa.Column:
    return sa.Column('tenant_id', postgresql.UUID(as_uuid=True), nullable=False)


def _timestamps() -> list[sa.Column]:
    return [
        sa.Column('created_at', sa.DateTime(), server_default=sa.text('now()'), nullable=False),
        sa.Column('updated_at', sa.DateTime(), server_default=sa.text('now()'), nullable=False),
    ]


def _tenant_fk() -> sa.ForeignKeyConstraint:
    return sa.ForeignKeyConstraint(['tenant_id'], ['tenants.id'], ondelete='CASCADE')


def _index(table: str, *columns: str, unique: bool = False) -> None:
    name = op.f(f"ix_{table}_{'_'.join(columns)}")
    op.create_index(name, table, list(columns), unique=unique)


def _seasonal_rate_table(name: str, *columns: sa.Column) -> None:
    """Create a rate table carrying the shared season columns plus ``columns``."""
    op.create_table(name,
        _id(),
        _tenant(),
        sa.Column('service_offering_id', postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column('season_from', sa.Date(), nullable=False),
        sa.Column('season_to', sa.Date(), nullable=False),
        sa.Column('is_active', sa.Boolean(), server_default=sa.true(), nullable=False),
        sa.Column('notes', sa.Text(), nullable=True),
        *columns,
        *_timestamps(),
        sa.CheckConstraint('season_from < season_to', name=f"ck_{name[:-1]}_season_ordered"),
        _tenant_fk(),
        sa.ForeignKeyConstraint(['service_offering_id'], ['service_offerings.id'], ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('id')
    )
    for column in ('tenant_id', 'service_offering_id', 'season_from', 'season_to', 'is_active'):
        _index(name, column)


def upgrade() -> None:
    """Upgrade database schema."""
    # Create tenants table
    op.create_table('tenants',
        _id(),
        sa.Column('name', sa.String(length=255), nullable=False),
        sa.Column('slug', sa.String(length=100), nullable=False),
        sa.Column('default_currency', sa.String(length=3), server_default='EUR', nullable=False),
        sa.Column('is_active', sa.Boolean(), server_default=sa.true(), nullable=False),
        *_timestamps(),
        sa.CheckConstraint('length(slug) > 0', name='ck_tenant_slug_not_empty'),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('slug')
    )
    _index('tenants', 'slug')

    # Create users table
    op.create_table('users',
        _id(),
        _tenant(),
        sa.Column('email', sa.String(length=255), nullable=False),
        sa.Column('name', sa.String(length=255), nullable=False),
        sa.Column('password_hash', sa.String(length=255), nullable=False),
        sa.Column('role', sa.String(length=20), server_default='AGENT', nullable=False),
        sa.Column('is_active', sa.Boolean(), server_default=sa.true(), nullable=False),
        *_timestamps(),
        _tenant_fk(),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('email')
    )
    _index('users', 'tenant_id')
    _index('users', 'email')

    # Create clients table
    op.create_table('clients',
        _id(),
        _tenant(),
        sa.Column('name', sa.String(length=255), nullable=False),
        sa.Column('email', sa.String(length=255), nullable=True),
        sa.Column('phone', sa.String(length=50), nullable=True),
        sa.Column('nationality', sa.String(length=100), nullable=True),
        sa.Column('preferred_language', sa.String(length=10), server_default='en', nullable=False),
        sa.Column('passport_number', sa.String(length=50), nullable=True),
        sa.Column('date_of_birth', sa.Date(), nullable=True),
        sa.Column('notes', sa.Text(), nullable=True),
        sa.Column('is_active', sa.Boolean(), server_default=sa.true(), nullable=False),
        *_timestamps(),
        sa.CheckConstraint('length(name) > 0', name='ck_client_name_not_empty'),
        _tenant_fk(),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('tenant_id', 'email', name='uq_client_tenant_email')
    )
    for column in ('tenant_id', 'name', 'email', 'is_active'):
        _index('clients', column)

    # Create leads table
    op.create_table('leads',
        _id(),
        _tenant(),
        sa.Column('client_id', postgresql.UUID(as_uuid=True), nullable=True),
        sa.Column('source', sa.String(length=100), nullable=True),
        sa.Column('inquiry_date', sa.DateTime(), server_default=sa.text('now()'), nullable=False),
        sa.Column('destination', sa.String(length=255), nullable=True),
        sa.Column('pax_adults', sa.Integer(), server_default='1', nullable=False),
        sa.Column('pax_children', sa.Integer(), server_default='0', nullable=False),
        sa.Column('budget_eur', MONEY, nullable=True),
        sa.Column('status', sa.String(length=20), server_default='NEW', nullable=False),
        sa.Column('notes', sa.Text(), nullable=True),
        *_timestamps(),
        sa.CheckConstraint('pax_adults >= 0', name='ck_lead_pax_adults_non_negative'),
        sa.CheckConstraint('pax_children >= 0', name='ck_lead_pax_children_non_negative'),
        _tenant_fk(),
        sa.ForeignKeyConstraint(['client_id'], ['clients.id'], ondelete='SET NULL'),
        sa.PrimaryKeyConstraint('id')
    )
    for column in ('tenant_id', 'client_id', 'status'):
        _index('leads', column)

    # Create quotations table
    op.create_table('quotations',
        _id(),
        _tenant(),
        sa.Column('lead_id', postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column('custom_json', sa.JSON(), nullable=False),
        sa.Column('calc_cost_try', MONEY, server_default='0', nullable=False),
        sa.Column('sell_price_eur', MONEY, server_default='0', nullable=False),
        sa.Column('exchange_rate_used', RATE, nullable=True),
        sa.Column('valid_until', sa.Date(), nullable=True),
        sa.Column('status', sa.String(length=20), server_default='DRAFT', nullable=False),
        sa.Column('notes', sa.Text(), nullable=True),
        *_timestamps(),
        sa.CheckConstraint('calc_cost_try >= 0', name='ck_quotation_cost_non_negative'),
        sa.CheckConstraint('sell_price_eur >= 0', name='ck_quotation_sell_non_negative'),
        _tenant_fk(),
        sa.ForeignKeyConstraint(['lead_id'], ['leads.id'], ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('id')
    )
    for column in ('tenant_id', 'lead_id', 'status'):
        _index('quotations', column)

    # Create catalog tables
    op.create_table('suppliers',
        _id(),
        _tenant(),
        sa.Column('name', sa.String(length=255), nullable=False),
        sa.Column('supplier_type', sa.String(length=20), nullable=False),
        sa.Column('email', sa.String(length=255), nullable=True),
        sa.Column('phone', sa.String(length=50), nullable=True),
        sa.Column('city', sa.String(length=100), nullable=True),
        sa.Column('tax_number', sa.String(length=50), nullable=True),
        sa.Column('notes', sa.Text(), nullable=True),
        sa.Column('is_active', sa.Boolean(), server_default=sa.true(), nullable=False),
        *_timestamps(),
        sa.CheckConstraint('length(name) > 0', name='ck_supplier_name_not_empty'),
        _tenant_fk(),
        sa.PrimaryKeyConstraint('id')
    )
    for column in ('tenant_id', 'name', 'supplier_type'):
        _index('suppliers', column)

    op.create_table('service_offerings',
        _id(),
        _tenant(),
        sa.Column('supplier_id', postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column('service_type', sa.String(length=20), nullable=False),
        sa.Column('title', sa.String(length=255), nullable=False),
        sa.Column('location', sa.String(length=255), nullable=True),
        sa.Column('description', sa.Text(), nullable=True),
        sa.Column('is_active', sa.Boolean(), server_default=sa.true(), nullable=False),
        *_timestamps(),
        sa.CheckConstraint('length(title) > 0', name='ck_service_offering_title_not_empty'),
        _tenant_fk(),
        sa.ForeignKeyConstraint(['supplier_id'], ['suppliers.id'], ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('id')
    )
    for column in ('tenant_id', 'supplier_id', 'service_type'):
        _index('service_offerings', column)

    op.create_table('vendors',
        _id(),
        _tenant(),
        sa.Column('name', sa.String(length=255), nullable=False),
        sa.Column('vendor_type', sa.String(length=20), nullable=False),
        sa.Column('contact_name', sa.String(length=255), nullable=True),
        sa.Column('email', sa.String(length=255), nullable=True),
        sa.Column('phone', sa.String(length=50), nullable=True),
        sa.Column('iban', sa.String(length=50), nullable=True),
        sa.Column('notes', sa.Text(), nullable=True),
        sa.Column('is_active', sa.Boolean(), server_default=sa.true(), nullable=False),
        *_timestamps(),
        _tenant_fk(),
        sa.PrimaryKeyConstraint('id')
    )
    for column in ('tenant_id', 'name', 'vendor_type'):
        _index('vendors', column)

    # Create bookings table
    op.create_table('bookings',
        _id(),
        _tenant(),
        sa.Column('quotation_id', postgresql.UUID(as_uuid=True), nullable=True),
        sa.Column('client_id', postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column('booking_code', sa.String(length=32), nullable=False),
        sa.Column('start_date', sa.Date(), nullable=False),
        sa.Column('end_date', sa.Date(), nullable=False),
        sa.Column('locked_exchange_rate', RATE, nullable=False),
        sa.Column('total_cost_try', MONEY, server_default='0', nullable=False),
        sa.Column('total_sell_eur', MONEY, server_default='0', nullable=False),
        sa.Column('deposit_due_eur', MONEY, nullable=True),
        sa.Column('balance_due_eur', MONEY, nullable=True),
        sa.Column('status', sa.String(length=20), server_default='PENDING', nullable=False),
        sa.Column('notes', sa.Text(), nullable=True),
        *_timestamps(),
        sa.CheckConstraint('length(booking_code) > 0', name='ck_booking_code_not_empty'),
        sa.CheckConstraint('end_date >= start_date', name='ck_booking_dates_ordered'),
        _tenant_fk(),
        sa.ForeignKeyConstraint(['quotation_id'], ['quotations.id'], ondelete='SET NULL'),
        sa.ForeignKeyConstraint(['client_id'], ['clients.id'], ondelete='RESTRICT'),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('tenant_id', 'booking_code', name='uq_booking_tenant_code')
    )
    _index('bookings', 'quotation_id', unique=True)
    for column in ('tenant_id', 'client_id', 'booking_code', 'status'):
        _index('bookings', column)

    op.create_table('booking_items',
        _id(),
        _tenant(),
        sa.Column('booking_id', postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column('service_offering_id', postgresql.UUID(as_uuid=True), nullable=True),
        sa.Column('vendor_id', postgresql.UUID(as_uuid=True), nullable=True),
        sa.Column('item_type', sa.String(length=20), nullable=False),
        sa.Column('description', sa.String(length=500), nullable=True),
        sa.Column('service_date', sa.Date(), nullable=True),
        sa.Column('qty', sa.Integer(), server_default='1', nullable=False),
        sa.Column('unit_cost_try', MONEY, server_default='0', nullable=False),
        sa.Column('unit_price_eur', MONEY, server_default='0', nullable=False),
        sa.Column('notes', sa.Text(), nullable=True),
        *_timestamps(),
        sa.CheckConstraint('qty > 0', name='ck_booking_item_qty_positive'),
        _tenant_fk(),
        sa.ForeignKeyConstraint(['booking_id'], ['bookings.id'], ondelete='CASCADE'),
        sa.ForeignKeyConstraint(['service_offering_id'], ['service_offerings.id'], ondelete='SET NULL'),
        sa.ForeignKeyConstraint(['vendor_id'], ['vendors.id'], ondelete='SET NULL'),
        sa.PrimaryKeyConstraint('id')
    )
    _index('booking_items', 'tenant_id')
    _index('booking_items', 'booking_id')

    # Create seasonal rate tables
    _seasonal_rate_table('hotel_room_rates',
        sa.Column('board_type', sa.String(length=4), nullable=False),
        sa.Column('price_per_person_double', MONEY, nullable=False),
        sa.Column('single_supplement', MONEY, nullable=True),
        sa.Column('price_per_person_triple', MONEY, nullable=True),
        sa.Column('child_price_0_to_2', MONEY, nullable=True),
        sa.Column('child_price_3_to_5', MONEY, nullable=True),
        sa.Column('child_price_6_to_11', MONEY, nullable=True),
        sa.Column('allotment', sa.Integer(), nullable=True),
        sa.Column('release_days', sa.Integer(), nullable=True),
        sa.Column('min_stay', sa.Integer(), server_default='1', nullable=False),
    )
    _index('hotel_room_rates', 'board_type')

    _seasonal_rate_table('transfer_rates',
        sa.Column('pricing_model', sa.String(length=20), nullable=False),
        sa.Column('base_cost_try', MONEY, nullable=False),
        sa.Column('included_km', sa.Integer(), nullable=True),
        sa.Column('included_hours', sa.Integer(), nullable=True),
        sa.Column('extra_km_try', MONEY, nullable=True),
        sa.Column('extra_hour_try', MONEY, nullable=True),
        sa.Column('night_surcharge_pct', MONEY, nullable=True),
        sa.Column('holiday_surcharge_pct', MONEY, nullable=True),
        sa.Column('waiting_time_free', sa.Integer(), nullable=True),
    )

    _seasonal_rate_table('vehicle_rates',
        sa.Column('daily_rate_try', MONEY, nullable=False),
        sa.Column('daily_km_included', sa.Integer(), nullable=True),
        sa.Column('hourly_rate_try', MONEY, nullable=True),
        sa.Column('min_hours', sa.Integer(), nullable=True),
        sa.Column('extra_km_try', MONEY, nullable=True),
        sa.Column('driver_daily_try', MONEY, nullable=True),
        sa.Column('one_way_fee_try', MONEY, nullable=True),
        sa.Column('deposit_try', MONEY, nullable=True),
        sa.Column('min_rental_days', sa.Integer(), nullable=True),
    )

    _seasonal_rate_table('guide_rates',
        sa.Column('pricing_model', sa.String(length=20), nullable=False),
        sa.Column('day_cost_try', MONEY, nullable=True),
        sa.Column('half_day_cost_try', MONEY, nullable=True),
        sa.Column('hour_cost_try', MONEY, nullable=True),
        sa.Column('overtime_hour_try', MONEY, nullable=True),
        sa.Column('holiday_surcharge_pct', MONEY, nullable=True),
        sa.Column('min_hours', sa.Integer(), nullable=True),
    )

    _seasonal_rate_table('activity_rates',
        sa.Column('pricing_model', sa.String(length=20), nullable=False),
        sa.Column('base_cost_try', MONEY, nullable=False),
        sa.Column('min_pax', sa.Integer(), nullable=True),
        sa.Column('max_pax', sa.Integer(), nullable=True),
        sa.Column('tiered_pricing_json', sa.JSON(), nullable=True),
        sa.Column('child_discount_pct', MONEY, nullable=True),
        sa.Column('group_discount_pct', MONEY, nullable=True),
    )

    # Create exchange_rates table
    op.create_table('exchange_rates',
        _id(),
        _tenant(),
        sa.Column('from_currency', sa.String(length=3), server_default='TRY', nullable=False),
        sa.Column('to_currency', sa.String(length=3), server_default='EUR', nullable=False),
        sa.Column('rate', RATE, nullable=False),
        sa.Column('rate_date', sa.Date(), nullable=False),
        sa.Column('source', sa.String(length=100), nullable=True),
        *_timestamps(),
        sa.CheckConstraint('rate > 0', name='ck_exchange_rate_positive'),
        _tenant_fk(),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint(
            'tenant_id', 'from_currency', 'to_currency', 'rate_date',
            name='uq_exchange_rate_tenant_pair_date'
        )
    )
    _index('exchange_rates', 'tenant_id')
    _index('exchange_rates', 'rate_date')

    # Create payment tables
    op.create_table('payments_client',
        _id(),
        _tenant(),
        sa.Column('booking_id', postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column('amount_eur', MONEY, nullable=False),
        sa.Column('method', sa.String(length=20), nullable=False),
        sa.Column('paid_at', sa.DateTime(), nullable=False),
        sa.Column('txn_ref', sa.String(length=255), nullable=True),
        sa.Column('status', sa.String(length=20), server_default='COMPLETED', nullable=False),
        sa.Column('notes', sa.Text(), nullable=True),
        *_timestamps(),
        sa.CheckConstraint('amount_eur > 0', name='ck_payment_client_amount_positive'),
        _tenant_fk(),
        sa.ForeignKeyConstraint(['booking_id'], ['bookings.id'], ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('id')
    )
    for column in ('tenant_id', 'booking_id', 'paid_at', 'status'):
        _index('payments_client', column)

    op.create_table('payments_vendor',
        _id(),
        _tenant(),
        sa.Column('booking_id', postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column('vendor_id', postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column('amount_try', MONEY, nullable=False),
        sa.Column('due_at', sa.Date(), nullable=False),
        sa.Column('paid_at', sa.DateTime(), nullable=True),
        sa.Column('status', sa.String(length=20), server_default='PENDING', nullable=False),
        sa.Column('notes', sa.Text(), nullable=True),
        *_timestamps(),
        sa.CheckConstraint('amount_try > 0', name='ck_payment_vendor_amount_positive'),
        _tenant_fk(),
        sa.ForeignKeyConstraint(['booking_id'], ['bookings.id'], ondelete='CASCADE'),
        sa.ForeignKeyConstraint(['vendor_id'], ['vendors.id'], ondelete='RESTRICT'),
        sa.PrimaryKeyConstraint('id')
    )
    for column in ('tenant_id', 'booking_id', 'vendor_id', 'due_at', 'status'):
        _index('payments_vendor', column)

    # Create manual quote tables
    op.create_table('manual_quotes',
        _id(),
        _tenant(),
        sa.Column('quote_name', sa.String(length=255), nullable=False),
        sa.Column('category', sa.String(length=20), server_default='B2C', nullable=False),
        sa.Column('season_name', sa.String(length=100), nullable=True),
        sa.Column('valid_from', sa.Date(), nullable=True),
        sa.Column('valid_to', sa.Date(), nullable=True),
        sa.Column('start_date', sa.Date(), nullable=True),
        sa.Column('end_date', sa.Date(), nullable=True),
        sa.Column('tour_type', sa.String(length=50), nullable=True),
        sa.Column('pax', sa.Integer(), server_default='2', nullable=False),
        sa.Column('markup', MONEY, server_default='0', nullable=False),
        sa.Column('tax', MONEY, server_default='0', nullable=False),
        sa.Column('transport_pricing_mode', sa.String(length=10), server_default='total', nullable=False),
        sa.Column('pricing_table', sa.JSON(), nullable=True),
        sa.Column('notes', sa.Text(), nullable=True),
        sa.Column('is_active', sa.Boolean(), server_default=sa.true(), nullable=False),
        *_timestamps(),
        sa.CheckConstraint('markup >= 0 AND markup <= 100', name='ck_manual_quote_markup_range'),
        sa.CheckConstraint('tax >= 0 AND tax <= 100', name='ck_manual_quote_tax_range'),
        sa.CheckConstraint('pax > 0', name='ck_manual_quote_pax_positive'),
        _tenant_fk(),
        sa.PrimaryKeyConstraint('id')
    )
    _index('manual_quotes', 'tenant_id')
    _index('manual_quotes', 'is_active')

    op.create_table('manual_quote_days',
        _id(),
        _tenant(),
        sa.Column('quote_id', postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column('day_number', sa.Integer(), nullable=False),
        sa.Column('day_date', sa.Date(), nullable=True),
        *_timestamps(),
        sa.CheckConstraint('day_number >= 1', name='ck_manual_quote_day_number_positive'),
        _tenant_fk(),
        sa.ForeignKeyConstraint(['quote_id'], ['manual_quotes.id'], ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('id')
    )
    _index('manual_quote_days', 'tenant_id')
    _index('manual_quote_days', 'quote_id')

    op.create_table('manual_quote_expenses',
        _id(),
        _tenant(),
        sa.Column('day_id', postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column('category', sa.String(length=40), nullable=False),
        sa.Column('hotel_category', sa.String(length=50), nullable=True),
        sa.Column('location', sa.String(length=255), nullable=True),
        sa.Column('description', sa.String(length=500), nullable=True),
        sa.Column('price', MONEY, server_default='0', nullable=False),
        sa.Column('single_supplement', MONEY, nullable=True),
        sa.Column('child_0_to_2', MONEY, nullable=True),
        sa.Column('child_3_to_5', MONEY, nullable=True),
        sa.Column('child_6_to_11', MONEY, nullable=True),
        sa.Column('vehicle_count', sa.Integer(), nullable=True),
        sa.Column('price_per_vehicle', MONEY, nullable=True),
        *_timestamps(),
        sa.CheckConstraint('price >= 0', name='ck_manual_quote_expense_price_non_negative'),
        _tenant_fk(),
        sa.ForeignKeyConstraint(['day_id'], ['manual_quote_days.id'], ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('id')
    )
    _index('manual_quote_expenses', 'tenant_id')
    _index('manual_quote_expenses', 'day_id')

    # Create audit_logs table
    op.create_table('audit_logs',
        _id(),
        _tenant(),
        sa.Column('user_id', postgresql.UUID(as_uuid=True), nullable=True),
        sa.Column('action', sa.String(length=50), nullable=False),
        sa.Column('entity', sa.String(length=50), nullable=False),
        sa.Column('entity_id', sa.String(length=64), nullable=True),
        sa.Column('diff_json', sa.JSON(), nullable=True),
        sa.Column('ip_address', sa.String(length=64), nullable=True),
        *_timestamps(),
        _tenant_fk(),
        sa.ForeignKeyConstraint(['user_id'], ['users.id'], ondelete='SET NULL'),
        sa.PrimaryKeyConstraint('id')
    )
    for column in ('tenant_id', 'user_id', 'action', 'entity', 'entity_id'):
        _index('audit_logs', column)
    op.create_index('ix_audit_logs_created_at', 'audit_logs', ['created_at'], unique=False)

    # Create idempotency_keys table
    op.create_table('idempotency_keys',
        _id(),
        _tenant(),
        sa.Column('key', sa.String(length=255), nullable=False),
        sa.Column('request_path', sa.String(length=500), nullable=False),
        sa.Column('request_method', sa.String(length=10), nullable=False),
        sa.Column('request_body_hash', sa.String(length=64), nullable=False),
        sa.Column('response_status', sa.Integer(), nullable=False),
        sa.Column('response_body', sa.Text(), nullable=False),
        sa.Column('expires_at', sa.DateTime(), nullable=False),
        *_timestamps(),
        sa.CheckConstraint('length(key) > 0', name='ck_idempotency_key_not_empty'),
        sa.CheckConstraint('length(request_body_hash) = 64', name='ck_idempotency_hash_length'),
        sa.CheckConstraint('response_status >= 200', name='ck_idempotency_status_success_min'),
        sa.CheckConstraint('response_status <= 299', name='ck_idempotency_status_success_max'),
        _tenant_fk(),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('tenant_id', 'key', name='uq_idempotency_tenant_key')
    )
    _index('idempotency_keys', 'tenant_id')
    _index('idempotency_keys', 'expires_at')


def downgrade() -> None:
    """Downgrade database schema."""
    for table in (
        'idempotency_keys',
        'audit_logs',
        'manual_quote_expenses',
        'manual_quote_days',
        'manual_quotes',
        'payments_vendor',
        'payments_client',
        'exchange_rates',
        *reversed(SEASONAL_RATE_TABLES),
        'booking_items',
        'bookings',
        'vendors',
        'service_offerings',
        'suppliers',
        'quotations',
        'leads',
        'clients',
        'users',
        'tenants',
    ):
        op.drop_table(table)
