"""Initial bakery schema: staff, inventory, transfers, production, sales, logs

Revision ID: 20261019_initial
Revises:
Create Date: 2026-10-19

This migration adds:
1. Staff and session tokens
2. Central inventory (products, ingredients), personal stock, recipes, suppliers
3. Transfer and production batch documents
4. Customers, orders, payment confirmations and the daily sales ledger
5. Append-only logs and cost records
"""
from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision = '20261019_initial'
down_revision = None
branch_labels = None
depends_on = None


def upgrade():
    # ==========================================================================
    # 1. STAFF
    # ==========================================================================
    op.create_table('staff',
        sa.Column('staff_id', sa.String(length=32), nullable=False),
        sa.Column('name', sa.String(length=255), nullable=False),
        sa.Column('email', sa.String(length=255), nullable=True),
        sa.Column('role', sa.String(length=32), nullable=False),
        sa.Column('password_hash', sa.String(length=255), nullable=False),
        sa.Column('is_active', sa.Boolean(), nullable=False, server_default='1'),
        sa.Column('mfa_enabled', sa.Boolean(), nullable=False, server_default='0'),
        sa.Column('theme', sa.String(length=32), nullable=True),
        sa.Column('pay_rate', sa.Float(), nullable=False, server_default='0'),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.text('(CURRENT_TIMESTAMP)'), nullable=False),
        sa.Column('version_id', sa.Integer(), nullable=False, server_default='1'),
        sa.PrimaryKeyConstraint('staff_id'),
        sa.UniqueConstraint('email')
    )
    with op.batch_alter_table('staff', schema=None) as batch_op:
        batch_op.create_index(batch_op.f('ix_staff_role'), ['role'], unique=False)

    op.create_table('session_tokens',
        sa.Column('id', sa.String(length=32), nullable=False),
        sa.Column('staff_id', sa.String(length=32), nullable=False),
        sa.Column('token_hash', sa.String(length=64), nullable=False),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False),
        sa.Column('expires_at', sa.DateTime(timezone=True), nullable=False),
        sa.Column('revoked_at', sa.DateTime(timezone=True), nullable=True),
        sa.ForeignKeyConstraint(['staff_id'], ['staff.staff_id'], ),
        sa.PrimaryKeyConstraint('id')
    )
    with op.batch_alter_table('session_tokens', schema=None) as batch_op:
        batch_op.create_index(batch_op.f('ix_session_tokens_staff_id'), ['staff_id'], unique=False)
        batch_op.create_index(batch_op.f('ix_session_tokens_token_hash'), ['token_hash'], unique=True)

    # ==========================================================================
    # 2. INVENTORY
    # ==========================================================================
    op.create_table('products',
        sa.Column('id', sa.String(length=32), nullable=False),
        sa.Column('name', sa.String(length=255), nullable=False),
        sa.Column('category', sa.String(length=64), nullable=True),
        sa.Column('unit', sa.String(length=32), nullable=True),
        sa.Column('price', sa.Float(), nullable=False, server_default='0'),
        sa.Column('cost_price', sa.Float(), nullable=False, server_default='0'),
        sa.Column('min_price', sa.Float(), nullable=True),
        sa.Column('max_price', sa.Float(), nullable=True),
        sa.Column('stock', sa.Integer(), nullable=False, server_default='0'),
        sa.Column('version_id', sa.Integer(), nullable=False, server_default='1'),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.text('(CURRENT_TIMESTAMP)'), nullable=False),
        sa.Column('updated_at', sa.DateTime(timezone=True), server_default=sa.text('(CURRENT_TIMESTAMP)'), nullable=False),
        sa.PrimaryKeyConstraint('id')
    )
    with op.batch_alter_table('products', schema=None) as batch_op:
        batch_op.create_index(batch_op.f('ix_products_name'), ['name'], unique=False)

    op.create_table('ingredients',
        sa.Column('id', sa.String(length=32), nullable=False),
        sa.Column('name', sa.String(length=255), nullable=False),
        sa.Column('unit', sa.String(length=32), nullable=False, server_default='kg'),
        sa.Column('stock', sa.Float(), nullable=False, server_default='0'),
        sa.Column('cost_per_unit', sa.Float(), nullable=False, server_default='0'),
        sa.Column('version_id', sa.Integer(), nullable=False, server_default='1'),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.text('(CURRENT_TIMESTAMP)'), nullable=False),
        sa.PrimaryKeyConstraint('id')
    )
    with op.batch_alter_table('ingredients', schema=None) as batch_op:
        batch_op.create_index(batch_op.f('ix_ingredients_name'), ['name'], unique=False)

    op.create_table('personal_stock',
        sa.Column('staff_id', sa.String(length=32), nullable=False),
        sa.Column('product_id', sa.String(length=32), nullable=False),
        sa.Column('product_name', sa.String(length=255), nullable=False),
        sa.Column('stock', sa.Integer(), nullable=False, server_default='0'),
        sa.Column('version_id', sa.Integer(), nullable=False, server_default='1'),
        sa.ForeignKeyConstraint(['staff_id'], ['staff.staff_id'], ),
        sa.ForeignKeyConstraint(['product_id'], ['products.id'], ),
        sa.PrimaryKeyConstraint('staff_id', 'product_id')
    )

    op.create_table('recipes',
        sa.Column('id', sa.String(length=32), nullable=False),
        sa.Column('name', sa.String(length=255), nullable=False),
        sa.Column('description', sa.Text(), nullable=True),
        sa.Column('product_id', sa.String(length=32), nullable=True),
        sa.Column('product_name', sa.String(length=255), nullable=True),
        sa.Column('ingredients', sa.JSON(), nullable=False),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.text('(CURRENT_TIMESTAMP)'), nullable=False),
        sa.ForeignKeyConstraint(['product_id'], ['products.id'], ),
        sa.PrimaryKeyConstraint('id')
    )

    op.create_table('suppliers',
        sa.Column('id', sa.String(length=32), nullable=False),
        sa.Column('name', sa.String(length=255), nullable=False),
        sa.Column('contact_person', sa.String(length=255), nullable=True),
        sa.Column('phone', sa.String(length=32), nullable=True),
        sa.Column('email', sa.String(length=255), nullable=True),
        sa.Column('amount_owed', sa.Float(), nullable=False, server_default='0'),
        sa.Column('amount_paid', sa.Float(), nullable=False, server_default='0'),
        sa.Column('version_id', sa.Integer(), nullable=False, server_default='1'),
        sa.PrimaryKeyConstraint('id')
    )

    op.create_table('supply_requests',
        sa.Column('id', sa.String(length=32), nullable=False),
        sa.Column('ingredient_id', sa.String(length=32), nullable=False),
        sa.Column('ingredient_name', sa.String(length=255), nullable=False),
        sa.Column('quantity', sa.Float(), nullable=False),
        sa.Column('supplier_id', sa.String(length=32), nullable=False),
        sa.Column('supplier_name', sa.String(length=255), nullable=False),
        sa.Column('requester_id', sa.String(length=32), nullable=False),
        sa.Column('requester_name', sa.String(length=255), nullable=False),
        sa.Column('status', sa.String(length=16), nullable=False, server_default='pending'),
        sa.Column('request_date', sa.DateTime(timezone=True), nullable=False),
        sa.Column('cost_per_unit', sa.Float(), nullable=True),
        sa.Column('total_cost', sa.Float(), nullable=True),
        sa.Column('approver_id', sa.String(length=32), nullable=True),
        sa.Column('approver_name', sa.String(length=255), nullable=True),
        sa.Column('approved_date', sa.DateTime(timezone=True), nullable=True),
        sa.Column('version_id', sa.Integer(), nullable=False, server_default='1'),
        sa.ForeignKeyConstraint(['ingredient_id'], ['ingredients.id'], ),
        sa.ForeignKeyConstraint(['supplier_id'], ['suppliers.id'], ),
        sa.PrimaryKeyConstraint('id')
    )
    with op.batch_alter_table('supply_requests', schema=None) as batch_op:
        batch_op.create_index(batch_op.f('ix_supply_requests_status'), ['status'], unique=False)

    # ==========================================================================
    # 3. DOCUMENTS
    # ==========================================================================
    op.create_table('transfers',
        sa.Column('id', sa.String(length=32), nullable=False),
        sa.Column('from_staff_id', sa.String(length=32), nullable=False),
        sa.Column('from_staff_name', sa.String(length=255), nullable=False),
        sa.Column('to_staff_id', sa.String(length=32), nullable=False),
        sa.Column('to_staff_name', sa.String(length=255), nullable=False),
        sa.Column('items', sa.JSON(), nullable=False),
        sa.Column('date', sa.DateTime(timezone=True), nullable=False),
        sa.Column('status', sa.String(length=24), nullable=False, server_default='pending'),
        sa.Column('kind', sa.String(length=24), nullable=False, server_default='restock'),
        sa.Column('is_sales_run', sa.Boolean(), nullable=False, server_default='0'),
        sa.Column('notes', sa.Text(), nullable=True),
        sa.Column('total_revenue', sa.Float(), nullable=False, server_default='0'),
        sa.Column('total_collected', sa.Float(), nullable=False, server_default='0'),
        sa.Column('time_received', sa.DateTime(timezone=True), nullable=True),
        sa.Column('time_completed', sa.DateTime(timezone=True), nullable=True),
        sa.Column('original_run_id', sa.String(length=64), nullable=True),
        sa.Column('version_id', sa.Integer(), nullable=False, server_default='1'),
        sa.PrimaryKeyConstraint('id')
    )
    with op.batch_alter_table('transfers', schema=None) as batch_op:
        batch_op.create_index(batch_op.f('ix_transfers_from_staff_id'), ['from_staff_id'], unique=False)
        batch_op.create_index(batch_op.f('ix_transfers_to_staff_id'), ['to_staff_id'], unique=False)
        batch_op.create_index(batch_op.f('ix_transfers_status'), ['status'], unique=False)
        batch_op.create_index(batch_op.f('ix_transfers_original_run_id'), ['original_run_id'], unique=False)
        batch_op.create_index('ix_transfers_to_staff_status', ['to_staff_id', 'status'], unique=False)

    op.create_table('production_batches',
        sa.Column('id', sa.String(length=32), nullable=False),
        sa.Column('recipe_id', sa.String(length=32), nullable=False),
        sa.Column('recipe_name', sa.String(length=255), nullable=False),
        sa.Column('product_id', sa.String(length=32), nullable=True),
        sa.Column('product_name', sa.String(length=255), nullable=True),
        sa.Column('requested_by_id', sa.String(length=32), nullable=False),
        sa.Column('requested_by_name', sa.String(length=255), nullable=False),
        sa.Column('quantity_to_produce', sa.Integer(), nullable=False),
        sa.Column('batch_size', sa.String(length=8), nullable=False, server_default='full'),
        sa.Column('status', sa.String(length=24), nullable=False, server_default='pending_approval'),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False),
        sa.Column('approved_at', sa.DateTime(timezone=True), nullable=True),
        sa.Column('completed_at', sa.DateTime(timezone=True), nullable=True),
        sa.Column('ingredients', sa.JSON(), nullable=False),
        sa.Column('successfully_produced', sa.Integer(), nullable=True),
        sa.Column('wasted', sa.Integer(), nullable=True),
        sa.Column('version_id', sa.Integer(), nullable=False, server_default='1'),
        sa.ForeignKeyConstraint(['recipe_id'], ['recipes.id'], ),
        sa.PrimaryKeyConstraint('id')
    )
    with op.batch_alter_table('production_batches', schema=None) as batch_op:
        batch_op.create_index(batch_op.f('ix_production_batches_status'), ['status'], unique=False)

    # ==========================================================================
    # 4. SALES
    # ==========================================================================
    op.create_table('customers',
        sa.Column('id', sa.String(length=32), nullable=False),
        sa.Column('name', sa.String(length=255), nullable=False),
        sa.Column('phone', sa.String(length=32), nullable=True),
        sa.Column('email', sa.String(length=255), nullable=True),
        sa.Column('address', sa.Text(), nullable=True),
        sa.Column('amount_owed', sa.Float(), nullable=False, server_default='0'),
        sa.Column('amount_paid', sa.Float(), nullable=False, server_default='0'),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.text('(CURRENT_TIMESTAMP)'), nullable=False),
        sa.Column('version_id', sa.Integer(), nullable=False, server_default='1'),
        sa.PrimaryKeyConstraint('id')
    )

    op.create_table('orders',
        sa.Column('id', sa.String(length=32), nullable=False),
        sa.Column('sales_run_id', sa.String(length=64), nullable=True),
        sa.Column('customer_id', sa.String(length=32), nullable=False, server_default='walk-in'),
        sa.Column('customer_name', sa.String(length=255), nullable=True),
        sa.Column('items', sa.JSON(), nullable=False),
        sa.Column('total', sa.Float(), nullable=False),
        sa.Column('payment_method', sa.String(length=16), nullable=False),
        sa.Column('date', sa.DateTime(timezone=True), nullable=False),
        sa.Column('staff_id', sa.String(length=32), nullable=False),
        sa.Column('staff_name', sa.String(length=255), nullable=True),
        sa.Column('status', sa.String(length=16), nullable=False, server_default='Completed'),
        sa.Column('is_debt_payment', sa.Boolean(), nullable=False, server_default='0'),
        sa.PrimaryKeyConstraint('id')
    )
    with op.batch_alter_table('orders', schema=None) as batch_op:
        batch_op.create_index(batch_op.f('ix_orders_sales_run_id'), ['sales_run_id'], unique=False)
        batch_op.create_index(batch_op.f('ix_orders_customer_id'), ['customer_id'], unique=False)
        batch_op.create_index(batch_op.f('ix_orders_payment_method'), ['payment_method'], unique=False)
        batch_op.create_index(batch_op.f('ix_orders_date'), ['date'], unique=False)
        batch_op.create_index(batch_op.f('ix_orders_staff_id'), ['staff_id'], unique=False)

    op.create_table('payment_confirmations',
        sa.Column('id', sa.String(length=32), nullable=False),
        sa.Column('run_id', sa.String(length=64), nullable=True),
        sa.Column('customer_id', sa.String(length=32), nullable=True),
        sa.Column('customer_name', sa.String(length=255), nullable=True),
        sa.Column('items', sa.JSON(), nullable=False),
        sa.Column('amount', sa.Float(), nullable=False),
        sa.Column('driver_id', sa.String(length=32), nullable=False),
        sa.Column('driver_name', sa.String(length=255), nullable=False),
        sa.Column('date', sa.DateTime(timezone=True), nullable=False),
        sa.Column('status', sa.String(length=16), nullable=False, server_default='pending'),
        sa.Column('payment_method', sa.String(length=16), nullable=False),
        sa.Column('is_debt_payment', sa.Boolean(), nullable=False, server_default='0'),
        sa.Column('is_expense', sa.Boolean(), nullable=False, server_default='0'),
        sa.Column('expense_details', sa.JSON(), nullable=True),
        sa.Column('version_id', sa.Integer(), nullable=False, server_default='1'),
        sa.PrimaryKeyConstraint('id')
    )
    with op.batch_alter_table('payment_confirmations', schema=None) as batch_op:
        batch_op.create_index(batch_op.f('ix_payment_confirmations_run_id'), ['run_id'], unique=False)
        batch_op.create_index(batch_op.f('ix_payment_confirmations_date'), ['date'], unique=False)
        batch_op.create_index(batch_op.f('ix_payment_confirmations_status'), ['status'], unique=False)

    op.create_table('sales',
        sa.Column('id', sa.String(length=10), nullable=False),
        sa.Column('date', sa.DateTime(timezone=True), nullable=False),
        sa.Column('description', sa.String(length=255), nullable=False),
        sa.Column('cash', sa.Float(), nullable=False, server_default='0'),
        sa.Column('pos', sa.Float(), nullable=False, server_default='0'),
        sa.Column('transfer', sa.Float(), nullable=False, server_default='0'),
        sa.Column('credit_sales', sa.Float(), nullable=False, server_default='0'),
        sa.Column('shortage', sa.Float(), nullable=False, server_default='0'),
        sa.Column('total', sa.Float(), nullable=False, server_default='0'),
        sa.Column('version_id', sa.Integer(), nullable=False, server_default='1'),
        sa.PrimaryKeyConstraint('id')
    )

    # ==========================================================================
    # 5. LOGS AND COSTS
    # ==========================================================================
    op.create_table('waste_logs',
        sa.Column('id', sa.String(length=32), nullable=False),
        sa.Column('product_id', sa.String(length=32), nullable=False),
        sa.Column('product_name', sa.String(length=255), nullable=False),
        sa.Column('product_category', sa.String(length=64), nullable=True),
        sa.Column('quantity', sa.Integer(), nullable=False),
        sa.Column('reason', sa.String(length=255), nullable=False),
        sa.Column('notes', sa.Text(), nullable=True),
        sa.Column('staff_id', sa.String(length=32), nullable=False),
        sa.Column('staff_name', sa.String(length=255), nullable=False),
        sa.Column('date', sa.DateTime(timezone=True), nullable=False),
        sa.PrimaryKeyConstraint('id')
    )
    with op.batch_alter_table('waste_logs', schema=None) as batch_op:
        batch_op.create_index(batch_op.f('ix_waste_logs_product_id'), ['product_id'], unique=False)
        batch_op.create_index(batch_op.f('ix_waste_logs_staff_id'), ['staff_id'], unique=False)
        batch_op.create_index(batch_op.f('ix_waste_logs_date'), ['date'], unique=False)

    op.create_table('ingredient_stock_logs',
        sa.Column('id', sa.String(length=32), nullable=False),
        sa.Column('ingredient_id', sa.String(length=32), nullable=True),
        sa.Column('ingredient_name', sa.String(length=255), nullable=False),
        sa.Column('change', sa.Float(), nullable=False),
        sa.Column('reason', sa.String(length=255), nullable=False),
        sa.Column('date', sa.DateTime(timezone=True), nullable=False),
        sa.Column('staff_name', sa.String(length=255), nullable=True),
        sa.Column('log_ref_id', sa.String(length=64), nullable=True),
        sa.PrimaryKeyConstraint('id')
    )
    with op.batch_alter_table('ingredient_stock_logs', schema=None) as batch_op:
        batch_op.create_index(batch_op.f('ix_ingredient_stock_logs_date'), ['date'], unique=False)
        batch_op.create_index(batch_op.f('ix_ingredient_stock_logs_log_ref_id'), ['log_ref_id'], unique=False)

    op.create_table('production_logs',
        sa.Column('id', sa.String(length=32), nullable=False),
        sa.Column('action', sa.String(length=64), nullable=False),
        sa.Column('details', sa.Text(), nullable=False),
        sa.Column('staff_id', sa.String(length=32), nullable=False),
        sa.Column('staff_name', sa.String(length=255), nullable=False),
        sa.Column('timestamp', sa.DateTime(timezone=True), nullable=False),
        sa.PrimaryKeyConstraint('id')
    )
    with op.batch_alter_table('production_logs', schema=None) as batch_op:
        batch_op.create_index(batch_op.f('ix_production_logs_timestamp'), ['timestamp'], unique=False)

    op.create_table('indirect_costs',
        sa.Column('id', sa.String(length=32), nullable=False),
        sa.Column('category', sa.String(length=64), nullable=False),
        sa.Column('description', sa.Text(), nullable=False),
        sa.Column('amount', sa.Float(), nullable=False),
        sa.Column('date', sa.DateTime(timezone=True), nullable=False),
        sa.Column('details', sa.JSON(), nullable=True),
        sa.PrimaryKeyConstraint('id')
    )
    with op.batch_alter_table('indirect_costs', schema=None) as batch_op:
        batch_op.create_index(batch_op.f('ix_indirect_costs_date'), ['date'], unique=False)

    op.create_table('direct_costs',
        sa.Column('id', sa.String(length=32), nullable=False),
        sa.Column('category', sa.String(length=64), nullable=False),
        sa.Column('description', sa.Text(), nullable=False),
        sa.Column('quantity', sa.Float(), nullable=True),
        sa.Column('total', sa.Float(), nullable=False),
        sa.Column('date', sa.DateTime(timezone=True), nullable=False),
        sa.PrimaryKeyConstraint('id')
    )
    with op.batch_alter_table('direct_costs', schema=None) as batch_op:
        batch_op.create_index(batch_op.f('ix_direct_costs_date'), ['date'], unique=False)


def downgrade():
    for table in (
        'direct_costs', 'indirect_costs', 'production_logs', 'ingredient_stock_logs', 'waste_logs',
        'sales', 'payment_confirmations', 'orders', 'customers',
        'production_batches', 'transfers',
        'supply_requests', 'suppliers', 'recipes', 'personal_stock', 'ingredients', 'products',
        'session_tokens', 'staff',
    ):
        op.drop_table(table)
