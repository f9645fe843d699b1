"""Initial marketplace schema: accounts, vendors, catalog, audit trail

Revision ID: 20261018_initial
Revises:
Create Date: 2026-10-18

This migration adds:
1. users + session_tokens (role column, lifecycle envelope)
2. security_events (append-only, no lifecycle envelope)
3. vendor_profiles, stores
4. categories, products
5. audit_logs

Every table with the lifecycle envelope carries the named CHECK constraint
<table>_isactive_not_isdeleted_ck (is_active = NOT COALESCE(is_deleted, false)).
"""
from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision = '20261018_initial'
down_revision = None
branch_labels = None
depends_on = None


SOFT_DELETE_CHECK_SQL = "is_active = NOT COALESCE(is_deleted, false)"


def _lifecycle_columns():
    return [
        sa.Column('is_active', sa.Boolean(), nullable=False, server_default=sa.true()),
        sa.Column('is_deleted', sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column('created_by', sa.String(length=255), nullable=True),
        sa.Column('updated_by', sa.String(length=255), nullable=True),
        sa.Column('deleted_by', sa.String(length=255), nullable=True),
        sa.Column('deleted_at', sa.DateTime(timezone=True), nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.text('(CURRENT_TIMESTAMP)'), nullable=False),
        sa.Column('updated_at', sa.DateTime(timezone=True), server_default=sa.text('(CURRENT_TIMESTAMP)'), nullable=False),
    ]


def _soft_delete_check(table_name):
    return sa.CheckConstraint(SOFT_DELETE_CHECK_SQL, name=f'{table_name}_isactive_not_isdeleted_ck')


def _lifecycle_indexes(table_name):
    op.create_index(f'ix_{table_name}_is_active', table_name, ['is_active'], unique=False)
    op.create_index(f'ix_{table_name}_is_deleted', table_name, ['is_deleted'], unique=False)


def upgrade():
    # ==========================================================================
    # 1. USERS + SESSIONS
    # ==========================================================================
    op.create_table('users',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('email', sa.String(length=255), nullable=False),
        sa.Column('password_hash', sa.String(length=255), nullable=False),
        sa.Column('full_name', sa.String(length=255), nullable=True),
        sa.Column('phone', sa.String(length=32), nullable=True),
        sa.Column('role', sa.String(length=32), nullable=False, server_default='USER'),
        sa.Column('vendor_id', sa.Integer(), nullable=True),
        sa.Column('is_email_verified', sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column('last_login_at', sa.DateTime(timezone=True), nullable=True),
        *_lifecycle_columns(),
        _soft_delete_check('users'),
        sa.PrimaryKeyConstraint('id', name='pk_users'),
        sqlite_autoincrement=True
    )
    with op.batch_alter_table('users', schema=None) as batch_op:
        batch_op.create_index('ix_users_email', ['email'], unique=True)
        batch_op.create_index('ix_users_role', ['role'], unique=False)
        batch_op.create_index('ix_users_vendor_id', ['vendor_id'], unique=False)
    _lifecycle_indexes('users')

    op.create_table('session_tokens',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('user_id', sa.Integer(), nullable=False),
        sa.Column('token_hash', sa.String(length=255), nullable=False),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.text('(CURRENT_TIMESTAMP)'), nullable=False),
        sa.Column('last_used_at', sa.DateTime(timezone=True), server_default=sa.text('(CURRENT_TIMESTAMP)'), nullable=False),
        sa.Column('expires_at', sa.DateTime(timezone=True), nullable=False),
        sa.Column('is_revoked', sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column('revoked_at', sa.DateTime(timezone=True), nullable=True),
        sa.Column('revoked_reason', sa.String(length=255), nullable=True),
        sa.Column('user_agent', sa.String(length=512), nullable=True),
        sa.Column('ip_address', sa.String(length=45), nullable=True),
        sa.ForeignKeyConstraint(['user_id'], ['users.id'], name='fk_session_tokens_user_id_users'),
        sa.PrimaryKeyConstraint('id', name='pk_session_tokens'),
        sqlite_autoincrement=True
    )
    with op.batch_alter_table('session_tokens', schema=None) as batch_op:
        batch_op.create_index('ix_session_tokens_token_hash', ['token_hash'], unique=True)
        batch_op.create_index('ix_session_tokens_user_id', ['user_id'], unique=False)
        batch_op.create_index('ix_session_tokens_expires_at', ['expires_at'], unique=False)
        batch_op.create_index('ix_session_tokens_is_revoked', ['is_revoked'], unique=False)
        batch_op.create_index('ix_session_tokens_user_active', ['user_id', 'is_revoked'], unique=False)

    # ==========================================================================
    # 2. SECURITY EVENTS
    # ==========================================================================
    op.create_table('security_events',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('user_id', sa.Integer(), nullable=True),
        sa.Column('role', sa.String(length=32), nullable=True),
        sa.Column('event_type', sa.String(length=64), nullable=False),
        sa.Column('resource', sa.String(length=128), nullable=True),
        sa.Column('action', sa.String(length=64), nullable=True),
        sa.Column('success', sa.Boolean(), nullable=False),
        sa.Column('reason', sa.Text(), nullable=True),
        sa.Column('ip_address', sa.String(length=45), nullable=True),
        sa.Column('user_agent', sa.String(length=512), nullable=True),
        sa.Column('occurred_at', sa.DateTime(timezone=True), server_default=sa.text('(CURRENT_TIMESTAMP)'), nullable=False),
        sa.PrimaryKeyConstraint('id', name='pk_security_events'),
        sqlite_autoincrement=True
    )
    with op.batch_alter_table('security_events', schema=None) as batch_op:
        batch_op.create_index('ix_security_events_user_id', ['user_id'], unique=False)
        batch_op.create_index('ix_security_events_event_type', ['event_type'], unique=False)
        batch_op.create_index('ix_security_events_success', ['success'], unique=False)
        batch_op.create_index('ix_security_events_user_type', ['user_id', 'event_type'], unique=False)
        batch_op.create_index('ix_security_events_occurred', ['occurred_at'], unique=False)

    # ==========================================================================
    # 3. VENDORS + STORES
    # ==========================================================================
    op.create_table('vendor_profiles',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('user_id', sa.Integer(), nullable=False),
        sa.Column('business_name', sa.String(length=255), nullable=False),
        sa.Column('slug', sa.String(length=255), nullable=False),
        sa.Column('description', sa.Text(), nullable=True),
        sa.Column('contact_email', sa.String(length=255), nullable=True),
        sa.Column('contact_phone', sa.String(length=32), nullable=True),
        sa.Column('verification_status', sa.String(length=16), nullable=False, server_default='PENDING'),
        *_lifecycle_columns(),
        _soft_delete_check('vendor_profiles'),
        sa.ForeignKeyConstraint(['user_id'], ['users.id'], name='fk_vendor_profiles_user_id_users'),
        sa.PrimaryKeyConstraint('id', name='pk_vendor_profiles'),
        sqlite_autoincrement=True
    )
    with op.batch_alter_table('vendor_profiles', schema=None) as batch_op:
        batch_op.create_index('ix_vendor_profiles_slug', ['slug'], unique=True)
        batch_op.create_index('ix_vendor_profiles_user_id', ['user_id'], unique=False)
    _lifecycle_indexes('vendor_profiles')

    op.create_table('stores',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('vendor_id', sa.Integer(), nullable=False),
        sa.Column('name', sa.String(length=128), nullable=False),
        sa.Column('description', sa.Text(), nullable=True),
        *_lifecycle_columns(),
        _soft_delete_check('stores'),
        sa.ForeignKeyConstraint(['vendor_id'], ['vendor_profiles.id'], name='fk_stores_vendor_id_vendor_profiles'),
        sa.PrimaryKeyConstraint('id', name='pk_stores'),
        sa.UniqueConstraint('vendor_id', 'name', name='uq_stores_vendor_name'),
        sqlite_autoincrement=True
    )
    with op.batch_alter_table('stores', schema=None) as batch_op:
        batch_op.create_index('ix_stores_vendor_id', ['vendor_id'], unique=False)
    _lifecycle_indexes('stores')

    # ==========================================================================
    # 4. CATALOG
    # ==========================================================================
    op.create_table('categories',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('name', sa.String(length=128), nullable=False),
        sa.Column('slug', sa.String(length=128), nullable=False),
        sa.Column('description', sa.Text(), nullable=True),
        sa.Column('parent_id', sa.Integer(), nullable=True),
        *_lifecycle_columns(),
        _soft_delete_check('categories'),
        sa.ForeignKeyConstraint(['parent_id'], ['categories.id'], name='fk_categories_parent_id_categories'),
        sa.PrimaryKeyConstraint('id', name='pk_categories'),
        sqlite_autoincrement=True
    )
    with op.batch_alter_table('categories', schema=None) as batch_op:
        batch_op.create_index('ix_categories_slug', ['slug'], unique=True)
        batch_op.create_index('ix_categories_parent_id', ['parent_id'], unique=False)
    _lifecycle_indexes('categories')

    op.create_table('products',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('vendor_id', sa.Integer(), nullable=False),
        sa.Column('store_id', sa.Integer(), nullable=True),
        sa.Column('category_id', sa.Integer(), nullable=True),
        sa.Column('name', sa.String(length=255), nullable=False),
        sa.Column('sku', sa.String(length=64), nullable=False),
        sa.Column('description', sa.Text(), nullable=True),
        sa.Column('price_cents', sa.Integer(), nullable=False, server_default='0'),
        *_lifecycle_columns(),
        _soft_delete_check('products'),
        sa.ForeignKeyConstraint(['vendor_id'], ['vendor_profiles.id'], name='fk_products_vendor_id_vendor_profiles'),
        sa.ForeignKeyConstraint(['store_id'], ['stores.id'], name='fk_products_store_id_stores'),
        sa.ForeignKeyConstraint(['category_id'], ['categories.id'], name='fk_products_category_id_categories'),
        sa.PrimaryKeyConstraint('id', name='pk_products'),
        sqlite_autoincrement=True
    )
    with op.batch_alter_table('products', schema=None) as batch_op:
        batch_op.create_index('ix_products_sku', ['sku'], unique=True)
        batch_op.create_index('ix_products_vendor_id', ['vendor_id'], unique=False)
        batch_op.create_index('ix_products_store_id', ['store_id'], unique=False)
        batch_op.create_index('ix_products_category_id', ['category_id'], unique=False)
        batch_op.create_index('ix_products_vendor_category', ['vendor_id', 'category_id'], unique=False)
    _lifecycle_indexes('products')

    # ==========================================================================
    # 5. AUDIT LOGS
    # ==========================================================================
    op.create_table('audit_logs',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('entity', sa.String(length=64), nullable=False),
        sa.Column('entity_id', sa.String(length=64), nullable=True),
        sa.Column('action', sa.String(length=32), nullable=False),
        sa.Column('user_id', sa.String(length=64), nullable=True),
        sa.Column('meta', sa.JSON(), nullable=True),
        sa.Column('ip_address', sa.String(length=45), nullable=True),
        sa.Column('user_agent', sa.String(length=512), nullable=True),
        *_lifecycle_columns(),
        _soft_delete_check('audit_logs'),
        sa.PrimaryKeyConstraint('id', name='pk_audit_logs'),
        sqlite_autoincrement=True
    )
    with op.batch_alter_table('audit_logs', schema=None) as batch_op:
        batch_op.create_index('ix_audit_logs_user_id', ['user_id'], unique=False)
        batch_op.create_index('ix_audit_logs_entity', ['entity', 'entity_id'], unique=False)
    _lifecycle_indexes('audit_logs')


def downgrade():
    for table_name in (
        'audit_logs',
        'products',
        'categories',
        'stores',
        'vendor_profiles',
        'security_events',
        'session_tokens',
        'users',
    ):
        op.drop_table(table_name)
