"""Staff administration, attendance, payroll, communications and expenses

Revision ID: 20261020_staff_admin
Revises: 20261019_initial
Create Date: 2026-10-20

This migration adds:
1. Pay details on staff (pay type, bank account)
2. Low-stock thresholds on products and ingredients, breakdowns on direct costs
3. Attendance entries
4. Wages (monthly payroll and salary advances)
5. Announcements and staff reports
6. Petty expenses
"""
from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision = '20261020_staff_admin'
down_revision = '20261019_initial'
branch_labels = None
depends_on = None


def upgrade():
    # ==========================================================================
    # 1. STAFF PAY DETAILS
    # ==========================================================================
    with op.batch_alter_table('staff', schema=None) as batch_op:
        batch_op.add_column(sa.Column('pay_type', sa.String(length=16), nullable=False, server_default='Salary'))
        batch_op.add_column(sa.Column('bank_name', sa.String(length=255), nullable=True))
        batch_op.add_column(sa.Column('account_number', sa.String(length=32), nullable=True))

    # ==========================================================================
    # 2. THRESHOLDS AND COST BREAKDOWNS
    # ==========================================================================
    with op.batch_alter_table('products', schema=None) as batch_op:
        batch_op.add_column(sa.Column('low_stock_threshold', sa.Integer(), nullable=False, server_default='20'))

    with op.batch_alter_table('ingredients', schema=None) as batch_op:
        batch_op.add_column(sa.Column('low_stock_threshold', sa.Float(), nullable=False, server_default='10'))

    with op.batch_alter_table('direct_costs', schema=None) as batch_op:
        batch_op.add_column(sa.Column('details', sa.JSON(), nullable=True))

    # ==========================================================================
    # 3. ATTENDANCE
    # ==========================================================================
    op.create_table('attendance',
        sa.Column('id', sa.String(length=32), nullable=False),
        sa.Column('staff_id', sa.String(length=32), nullable=False),
        sa.Column('date', sa.String(length=10), nullable=False),
        sa.Column('clock_in_time', sa.DateTime(timezone=True), nullable=False),
        sa.Column('clock_out_time', sa.DateTime(timezone=True), nullable=True),
        sa.Column('version_id', sa.Integer(), nullable=False, server_default='1'),
        sa.ForeignKeyConstraint(['staff_id'], ['staff.staff_id'], ),
        sa.PrimaryKeyConstraint('id')
    )
    with op.batch_alter_table('attendance', schema=None) as batch_op:
        batch_op.create_index(batch_op.f('ix_attendance_staff_id'), ['staff_id'], unique=False)
        batch_op.create_index(batch_op.f('ix_attendance_date'), ['date'], unique=False)
        batch_op.create_index('ix_attendance_staff_clock_in', ['staff_id', 'clock_in_time'], unique=False)

    # ==========================================================================
    # 4. WAGES
    # ==========================================================================
    op.create_table('wages',
        sa.Column('id', sa.String(length=32), nullable=False),
        sa.Column('staff_id', sa.String(length=32), nullable=False),
        sa.Column('staff_name', sa.String(length=255), nullable=False),
        sa.Column('role', sa.String(length=32), nullable=True),
        sa.Column('month', sa.String(length=7), nullable=False),
        sa.Column('description', sa.Text(), nullable=True),
        sa.Column('base_pay', sa.Float(), nullable=False, server_default='0'),
        sa.Column('additions', sa.Float(), nullable=False, server_default='0'),
        sa.Column('deductions', sa.JSON(), nullable=False),
        sa.Column('net_pay', sa.Float(), nullable=False),
        sa.Column('is_advance', sa.Boolean(), nullable=False, server_default='0'),
        sa.Column('date', sa.DateTime(timezone=True), nullable=False),
        sa.ForeignKeyConstraint(['staff_id'], ['staff.staff_id'], ),
        sa.PrimaryKeyConstraint('id')
    )
    with op.batch_alter_table('wages', schema=None) as batch_op:
        batch_op.create_index(batch_op.f('ix_wages_staff_id'), ['staff_id'], unique=False)
        batch_op.create_index(batch_op.f('ix_wages_date'), ['date'], unique=False)
        batch_op.create_index('ix_wages_month_advance', ['month', 'is_advance'], unique=False)

    # ==========================================================================
    # 5. COMMUNICATIONS
    # ==========================================================================
    op.create_table('announcements',
        sa.Column('id', sa.String(length=32), nullable=False),
        sa.Column('staff_id', sa.String(length=32), nullable=False),
        sa.Column('staff_name', sa.String(length=255), nullable=False),
        sa.Column('message', sa.Text(), nullable=False),
        sa.Column('timestamp', sa.DateTime(timezone=True), nullable=False),
        sa.PrimaryKeyConstraint('id')
    )
    with op.batch_alter_table('announcements', schema=None) as batch_op:
        batch_op.create_index(batch_op.f('ix_announcements_timestamp'), ['timestamp'], unique=False)

    op.create_table('reports',
        sa.Column('id', sa.String(length=32), nullable=False),
        sa.Column('subject', sa.String(length=255), nullable=False),
        sa.Column('report_type', sa.String(length=64), nullable=False),
        sa.Column('message', sa.Text(), nullable=False),
        sa.Column('staff_id', sa.String(length=32), nullable=False),
        sa.Column('staff_name', sa.String(length=255), nullable=False),
        sa.Column('status', sa.String(length=16), nullable=False, server_default='new'),
        sa.Column('timestamp', sa.DateTime(timezone=True), nullable=False),
        sa.Column('version_id', sa.Integer(), nullable=False, server_default='1'),
        sa.PrimaryKeyConstraint('id')
    )
    with op.batch_alter_table('reports', schema=None) as batch_op:
        batch_op.create_index(batch_op.f('ix_reports_staff_id'), ['staff_id'], unique=False)
        batch_op.create_index(batch_op.f('ix_reports_status'), ['status'], unique=False)
        batch_op.create_index(batch_op.f('ix_reports_timestamp'), ['timestamp'], unique=False)

    # ==========================================================================
    # 6. EXPENSES
    # ==========================================================================
    op.create_table('expenses',
        sa.Column('id', sa.String(length=32), nullable=False),
        sa.Column('category', sa.String(length=64), nullable=False),
        sa.Column('description', sa.Text(), nullable=False),
        sa.Column('amount', sa.Float(), nullable=False),
        sa.Column('date', sa.DateTime(timezone=True), nullable=False),
        sa.Column('run_id', sa.String(length=64), nullable=True),
        sa.PrimaryKeyConstraint('id')
    )
    with op.batch_alter_table('expenses', schema=None) as batch_op:
        batch_op.create_index(batch_op.f('ix_expenses_date'), ['date'], unique=False)
        batch_op.create_index(batch_op.f('ix_expenses_run_id'), ['run_id'], unique=False)


def downgrade():
    for table in ('expenses', 'reports', 'announcements', 'wages', 'attendance'):
        op.drop_table(table)

    with op.batch_alter_table('direct_costs', schema=None) as batch_op:
        batch_op.drop_column('details')
    with op.batch_alter_table('ingredients', schema=None) as batch_op:
        batch_op.drop_column('low_stock_threshold')
    with op.batch_alter_table('products', schema=None) as batch_op:
        batch_op.drop_column('low_stock_threshold')
    with op.batch_alter_table('staff', schema=None) as batch_op:
        batch_op.drop_column('account_number')
        batch_op.drop_column('bank_name')
        batch_op.drop_column('pay_type')
