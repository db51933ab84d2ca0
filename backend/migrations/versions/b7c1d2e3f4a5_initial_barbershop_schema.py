"""initial barbershop schema

Revision ID: b7c1d2e3f4a5
Revises:
Create Date: 2026-10-19 00:00:00.000000

Creates the complete barbershop schema:
- shops: tenant root
- users, session_tokens: admin/barber accounts and bearer sessions
- services, haircuts: service catalog and haircut records (approval lifecycle)
- inventory, sales: product stock and the sales ledger
- expenses, appointments
- audit_events: append-only audit trail

Every tenant table carries a non-null shop_id. Money is integer cents.
Status columns are stored as their lowercase string values.
"""
from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision = 'b7c1d2e3f4a5'
down_revision = None
branch_labels = None
depends_on = None


def _now():
    return sa.text('CURRENT_TIMESTAMP')


def upgrade():
    # ============================================================================
    # shops: tenant root
    # ============================================================================
    op.create_table(
        'shops',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('name', sa.String(length=255), nullable=False),
        sa.Column('is_active', sa.Boolean(), nullable=False, server_default=sa.true()),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False, server_default=_now()),
        sa.PrimaryKeyConstraint('id'),
        sqlite_autoincrement=True
    )
    op.create_index('ix_shops_is_active', 'shops', ['is_active'])

    # ============================================================================
    # users: admins and barbers. Email is the global sign-in identifier.
    # ============================================================================
    op.create_table(
        'users',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('shop_id', sa.Integer(), nullable=False),
        sa.Column('name', sa.String(length=120), nullable=False),
        sa.Column('email', sa.String(length=255), nullable=False),
        sa.Column('phone', sa.String(length=32), nullable=True),
        sa.Column('password_hash', sa.String(length=255), nullable=False),
        sa.Column('role', sa.String(length=16), nullable=False),
        sa.Column('status', sa.String(length=16), nullable=False),
        sa.Column('approved_at', sa.DateTime(timezone=True), nullable=True),
        sa.Column('approved_by', sa.Integer(), nullable=True),
        sa.Column('created_by', sa.Integer(), nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False, server_default=_now()),
        sa.Column('updated_at', sa.DateTime(timezone=True), nullable=True),
        sa.Column('updated_by', sa.Integer(), nullable=True),
        sa.Column('last_login_at', sa.DateTime(timezone=True), nullable=True),
        sa.ForeignKeyConstraint(['shop_id'], ['shops.id']),
        sa.ForeignKeyConstraint(['approved_by'], ['users.id']),
        sa.ForeignKeyConstraint(['created_by'], ['users.id']),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('email'),
        sqlite_autoincrement=True
    )
    op.create_index('ix_users_shop_id', 'users', ['shop_id'])
    op.create_index('ix_users_status', 'users', ['status'])
    op.create_index('ix_users_shop_role', 'users', ['shop_id', 'role'])

    op.create_table(
        'session_tokens',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('user_id', sa.Integer(), nullable=False),
        sa.Column('shop_id', sa.Integer(), nullable=False),
        sa.Column('token_hash', sa.String(length=64), nullable=False),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False),
        sa.Column('last_used_at', sa.DateTime(timezone=True), nullable=False),
        sa.Column('expires_at', sa.DateTime(timezone=True), nullable=False),
        sa.Column('is_revoked', sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column('revoked_at', sa.DateTime(timezone=True), nullable=True),
        sa.Column('revoked_reason', sa.String(length=64), nullable=True),
        sa.ForeignKeyConstraint(['user_id'], ['users.id']),
        sa.ForeignKeyConstraint(['shop_id'], ['shops.id']),
        sa.PrimaryKeyConstraint('id'),
        sqlite_autoincrement=True
    )
    op.create_index('ix_session_tokens_user_id', 'session_tokens', ['user_id'])
    op.create_index('ix_session_tokens_shop_id', 'session_tokens', ['shop_id'])
    op.create_index('ix_session_tokens_token_hash', 'session_tokens', ['token_hash'], unique=True)

    # ============================================================================
    # services: catalog. Price/duration frozen once referenced (service layer).
    # ============================================================================
    op.create_table(
        'services',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('shop_id', sa.Integer(), nullable=False),
        sa.Column('name', sa.String(length=120), nullable=False),
        sa.Column('description', sa.Text(), nullable=True),
        sa.Column('price_cents', sa.Integer(), nullable=False),
        sa.Column('duration_minutes', sa.Integer(), nullable=False),
        sa.Column('active', sa.Boolean(), nullable=False, server_default=sa.true()),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False, server_default=_now()),
        sa.Column('updated_at', sa.DateTime(timezone=True), nullable=False, server_default=_now()),
        sa.ForeignKeyConstraint(['shop_id'], ['shops.id']),
        sa.PrimaryKeyConstraint('id'),
        sa.CheckConstraint('price_cents >= 0', name='ck_services_price_nonneg'),
        sa.CheckConstraint('duration_minutes > 0', name='ck_services_duration_pos'),
        sqlite_autoincrement=True
    )
    op.create_index('ix_services_shop_id', 'services', ['shop_id'])
    op.create_index('ix_services_shop_active', 'services', ['shop_id', 'active'])

    # ============================================================================
    # haircuts: status / approval_status move together
    # ============================================================================
    op.create_table(
        'haircuts',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('shop_id', sa.Integer(), nullable=False),
        sa.Column('barber_id', sa.Integer(), nullable=False),
        sa.Column('service_id', sa.Integer(), nullable=False),
        sa.Column('barber_name', sa.String(length=120), nullable=False),
        sa.Column('service_name', sa.String(length=120), nullable=False),
        sa.Column('price_cents', sa.Integer(), nullable=False),
        sa.Column('client_name', sa.String(length=120), nullable=False),
        sa.Column('payment_method', sa.String(length=16), nullable=False),
        sa.Column('notes', sa.Text(), nullable=True),
        sa.Column('status', sa.String(length=16), nullable=False),
        sa.Column('approval_status', sa.String(length=16), nullable=False),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False),
        sa.Column('approved_at', sa.DateTime(timezone=True), nullable=True),
        sa.Column('approved_by', sa.Integer(), nullable=True),
        sa.Column('approved_by_name', sa.String(length=120), nullable=True),
        sa.Column('updated_at', sa.DateTime(timezone=True), nullable=True),
        sa.Column('updated_by', sa.Integer(), nullable=True),
        sa.ForeignKeyConstraint(['shop_id'], ['shops.id']),
        sa.ForeignKeyConstraint(['barber_id'], ['users.id']),
        sa.ForeignKeyConstraint(['service_id'], ['services.id']),
        sa.ForeignKeyConstraint(['approved_by'], ['users.id']),
        sa.PrimaryKeyConstraint('id'),
        sqlite_autoincrement=True
    )
    op.create_index('ix_haircuts_shop_id', 'haircuts', ['shop_id'])
    op.create_index('ix_haircuts_barber_id', 'haircuts', ['barber_id'])
    op.create_index('ix_haircuts_service_id', 'haircuts', ['service_id'])
    op.create_index('ix_haircuts_created_at', 'haircuts', ['created_at'])
    op.create_index('ix_haircuts_shop_approval', 'haircuts', ['shop_id', 'approval_status'])
    op.create_index('ix_haircuts_shop_created', 'haircuts', ['shop_id', 'created_at'])

    # ============================================================================
    # inventory + sales: the ledger. Stock never negative; price above cost.
    # ============================================================================
    op.create_table(
        'inventory',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('shop_id', sa.Integer(), nullable=False),
        sa.Column('name', sa.String(length=255), nullable=False),
        sa.Column('category', sa.String(length=32), nullable=False),
        sa.Column('provider', sa.String(length=255), nullable=True),
        sa.Column('description', sa.Text(), nullable=True),
        sa.Column('barcode', sa.String(length=64), nullable=True),
        sa.Column('cost_cents', sa.Integer(), nullable=False),
        sa.Column('price_cents', sa.Integer(), nullable=False),
        sa.Column('profit_margin', sa.Float(), nullable=False),
        sa.Column('stock', sa.Integer(), nullable=False),
        sa.Column('min_stock', sa.Integer(), nullable=False),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False, server_default=_now()),
        sa.Column('updated_at', sa.DateTime(timezone=True), nullable=True),
        sa.Column('updated_by', sa.Integer(), nullable=True),
        sa.ForeignKeyConstraint(['shop_id'], ['shops.id']),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('shop_id', 'barcode', name='uq_inventory_shop_barcode'),
        sa.CheckConstraint('stock >= 0', name='ck_inventory_stock_nonneg'),
        sa.CheckConstraint('min_stock >= 0', name='ck_inventory_min_stock_nonneg'),
        sa.CheckConstraint('price_cents > cost_cents', name='ck_inventory_price_over_cost'),
        sqlite_autoincrement=True
    )
    op.create_index('ix_inventory_shop_id', 'inventory', ['shop_id'])
    op.create_index('ix_inventory_shop_name', 'inventory', ['shop_id', 'name'])

    op.create_table(
        'sales',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('shop_id', sa.Integer(), nullable=False),
        sa.Column('product_id', sa.Integer(), nullable=True),
        sa.Column('product_name', sa.String(length=255), nullable=False),
        sa.Column('quantity', sa.Integer(), nullable=False),
        sa.Column('cost_cents', sa.Integer(), nullable=False),
        sa.Column('price_cents', sa.Integer(), nullable=False),
        sa.Column('profit_cents', sa.Integer(), nullable=False),
        sa.Column('sold_by', sa.Integer(), nullable=False),
        sa.Column('sold_by_name', sa.String(length=120), nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False),
        sa.ForeignKeyConstraint(['shop_id'], ['shops.id']),
        sa.ForeignKeyConstraint(['product_id'], ['inventory.id'], ondelete='SET NULL'),
        sa.ForeignKeyConstraint(['sold_by'], ['users.id']),
        sa.PrimaryKeyConstraint('id'),
        sa.CheckConstraint('quantity > 0', name='ck_sales_quantity_pos'),
        sqlite_autoincrement=True
    )
    op.create_index('ix_sales_shop_id', 'sales', ['shop_id'])
    op.create_index('ix_sales_product_id', 'sales', ['product_id'])
    op.create_index('ix_sales_created_at', 'sales', ['created_at'])
    op.create_index('ix_sales_shop_created', 'sales', ['shop_id', 'created_at'])

    # ============================================================================
    # expenses: immutable, delete-only correction
    # ============================================================================
    op.create_table(
        'expenses',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('shop_id', sa.Integer(), nullable=False),
        sa.Column('description', sa.String(length=255), nullable=False),
        sa.Column('amount_cents', sa.Integer(), nullable=False),
        sa.Column('type', sa.String(length=16), nullable=False),
        sa.Column('category', sa.String(length=32), nullable=False),
        sa.Column('date', sa.Date(), nullable=False),
        sa.Column('created_by', sa.Integer(), nullable=False),
        sa.Column('created_by_name', sa.String(length=120), nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False, server_default=_now()),
        sa.ForeignKeyConstraint(['shop_id'], ['shops.id']),
        sa.ForeignKeyConstraint(['created_by'], ['users.id']),
        sa.PrimaryKeyConstraint('id'),
        sa.CheckConstraint('amount_cents > 0', name='ck_expenses_amount_pos'),
        sqlite_autoincrement=True
    )
    op.create_index('ix_expenses_shop_id', 'expenses', ['shop_id'])
    op.create_index('ix_expenses_shop_date', 'expenses', ['shop_id', 'date'])

    # ============================================================================
    # appointments: one non-cancelled appointment per (barber, date, time)
    # ============================================================================
    op.create_table(
        'appointments',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('shop_id', sa.Integer(), nullable=False),
        sa.Column('barber_id', sa.Integer(), nullable=False),
        sa.Column('service_id', sa.Integer(), nullable=False),
        sa.Column('barber_name', sa.String(length=120), nullable=False),
        sa.Column('service_name', sa.String(length=120), nullable=False),
        sa.Column('price_cents', sa.Integer(), nullable=False),
        sa.Column('client_name', sa.String(length=120), nullable=False),
        sa.Column('client_phone', sa.String(length=32), nullable=False),
        sa.Column('client_email', sa.String(length=255), nullable=True),
        sa.Column('notes', sa.Text(), nullable=True),
        sa.Column('date', sa.Date(), nullable=False),
        sa.Column('time', sa.String(length=5), nullable=False),
        sa.Column('status', sa.String(length=16), nullable=False),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False, server_default=_now()),
        sa.Column('updated_at', sa.DateTime(timezone=True), nullable=True),
        sa.Column('updated_by', sa.Integer(), nullable=True),
        sa.ForeignKeyConstraint(['shop_id'], ['shops.id']),
        sa.ForeignKeyConstraint(['barber_id'], ['users.id']),
        sa.ForeignKeyConstraint(['service_id'], ['services.id']),
        sa.PrimaryKeyConstraint('id'),
        sqlite_autoincrement=True
    )
    op.create_index('ix_appointments_shop_id', 'appointments', ['shop_id'])
    op.create_index('ix_appointments_barber_id', 'appointments', ['barber_id'])
    op.create_index('ix_appointments_shop_date', 'appointments', ['shop_id', 'date'])
    op.create_index(
        'uq_appointments_barber_slot',
        'appointments',
        ['barber_id', 'date', 'time'],
        unique=True,
        sqlite_where=sa.text("status != 'cancelled'"),
        postgresql_where=sa.text("status != 'cancelled'"),
    )

    # ============================================================================
    # audit_events: append-only
    # ============================================================================
    op.create_table(
        'audit_events',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('shop_id', sa.Integer(), nullable=False),
        sa.Column('entity_type', sa.String(length=32), nullable=False),
        sa.Column('entity_id', sa.Integer(), nullable=False),
        sa.Column('action', sa.String(length=64), nullable=False),
        sa.Column('from_state', sa.String(length=16), nullable=True),
        sa.Column('to_state', sa.String(length=16), nullable=True),
        sa.Column('actor_id', sa.Integer(), nullable=True),
        sa.Column('occurred_at', sa.DateTime(timezone=True), nullable=False),
        sa.Column('note', sa.String(length=255), nullable=True),
        sa.ForeignKeyConstraint(['shop_id'], ['shops.id']),
        sa.PrimaryKeyConstraint('id'),
        sqlite_autoincrement=True
    )
    op.create_index('ix_audit_events_shop_id', 'audit_events', ['shop_id'])
    op.create_index('ix_audit_events_entity', 'audit_events', ['entity_type', 'entity_id'])


def downgrade():
    """Drop all tables (destructive operation)."""
    op.drop_table('audit_events')
    op.drop_table('appointments')
    op.drop_table('expenses')
    op.drop_table('sales')
    op.drop_table('inventory')
    op.drop_table('haircuts')
    op.drop_table('services')
    op.drop_table('session_tokens')
    op.drop_table('users')
    op.drop_table('shops')
