"""initial wage schema: users, roles, employees, attendance, wages

Revision ID: 4f1e2a9c7b10
Revises:
Create Date: 2026-10-18 10:00:00.000000

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision: str = '4f1e2a9c7b10'
down_revision: Union[str, Sequence[str], None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


app_role = sa.Enum('admin', 'employee', name='app_role')


def upgrade() -> None:
    op.create_table(
        'users',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('email', sa.String(length=255), nullable=False),
        sa.Column('password_hash', sa.String(length=255), nullable=False),
        sa.Column('full_name', sa.String(length=255), nullable=False),
        sa.Column('phone', sa.String(length=20), nullable=True),
        sa.Column('status', sa.String(length=20), nullable=True),
        sa.Column('created_at', sa.DateTime(), nullable=True),
    )
    op.create_index('ix_users_email', 'users', ['email'], unique=True)

    op.create_table(
        'user_roles',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('user_id', sa.Integer(), sa.ForeignKey('users.id', ondelete='CASCADE'), nullable=False),
        sa.Column('role', app_role, nullable=False),
        sa.Column('created_at', sa.DateTime(), nullable=True),
        sa.UniqueConstraint('user_id', 'role', name='uq_user_roles_user_role'),
    )
    op.create_index('ix_user_roles_user_id', 'user_roles', ['user_id'])

    op.create_table(
        'employees',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('user_id', sa.Integer(), sa.ForeignKey('users.id', ondelete='SET NULL'), nullable=True, unique=True),
        sa.Column('full_name', sa.String(length=255), nullable=False),
        sa.Column('email', sa.String(length=255), nullable=True),
        sa.Column('phone', sa.String(length=20), nullable=True),
        sa.Column('daily_wage', sa.Numeric(10, 2), nullable=False),
        sa.Column('overtime_rate', sa.Numeric(10, 2), nullable=False, server_default='0'),
        sa.Column('half_day_rate', sa.Numeric(10, 2), nullable=False),
        sa.Column('status', sa.String(length=16), nullable=False, server_default='active'),
        sa.Column('created_at', sa.DateTime(), nullable=False),
        sa.Column('updated_at', sa.DateTime(), nullable=False),
        sa.CheckConstraint("status IN ('active', 'inactive')", name='ck_employee_status'),
        sa.CheckConstraint('daily_wage >= 0', name='ck_employee_daily_wage'),
        sa.CheckConstraint('overtime_rate >= 0', name='ck_employee_overtime_rate'),
        sa.CheckConstraint('half_day_rate >= 0', name='ck_employee_half_day_rate'),
    )
    op.create_index('ix_emp_status', 'employees', ['status'])

    op.create_table(
        'attendance',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('employee_id', sa.Integer(), sa.ForeignKey('employees.id', ondelete='CASCADE'), nullable=False),
        sa.Column('date', sa.Date(), nullable=False),
        sa.Column('status', sa.String(length=16), nullable=False),
        sa.Column('overtime_hours', sa.Numeric(5, 2), nullable=False, server_default='0'),
        sa.Column('advance_taken', sa.Numeric(10, 2), nullable=False, server_default='0'),
        sa.Column('notes', sa.Text(), nullable=True),
        sa.Column('created_at', sa.DateTime(), nullable=False),
        sa.Column('updated_at', sa.DateTime(), nullable=False),
        sa.UniqueConstraint('employee_id', 'date', name='uq_attendance_employee_date'),
        sa.CheckConstraint("status IN ('present', 'absent', 'half_day')", name='ck_attendance_status'),
        sa.CheckConstraint('overtime_hours >= 0', name='ck_attendance_overtime_hours'),
        sa.CheckConstraint('advance_taken >= 0', name='ck_attendance_advance_taken'),
    )
    op.create_index('ix_attendance_employee_id', 'attendance', ['employee_id'])
    op.create_index('ix_attendance_date', 'attendance', ['date'])

    op.create_table(
        'wages',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('employee_id', sa.Integer(), sa.ForeignKey('employees.id', ondelete='CASCADE'), nullable=False),
        sa.Column('period_start', sa.Date(), nullable=False),
        sa.Column('period_end', sa.Date(), nullable=False),
        sa.Column('calculation_type', sa.String(length=16), nullable=False),
        sa.Column('base_wage', sa.Numeric(10, 2), nullable=False),
        sa.Column('overtime_amount', sa.Numeric(10, 2), nullable=False, server_default='0'),
        sa.Column('advance_deductions', sa.Numeric(10, 2), nullable=False, server_default='0'),
        sa.Column('total_wage', sa.Numeric(10, 2), nullable=False),
        sa.Column('paid', sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column('paid_at', sa.DateTime(), nullable=True),
        sa.Column('created_at', sa.DateTime(), nullable=False),
        sa.Column('updated_at', sa.DateTime(), nullable=False),
        sa.CheckConstraint('period_start <= period_end', name='ck_wage_period'),
        sa.CheckConstraint("calculation_type IN ('daily', 'weekly', 'monthly')", name='ck_wage_calculation_type'),
    )
    op.create_index('ix_wages_employee_id', 'wages', ['employee_id'])
    op.create_index('ix_wages_paid', 'wages', ['paid'])


def downgrade() -> None:
    op.drop_index('ix_wages_paid', table_name='wages')
    op.drop_index('ix_wages_employee_id', table_name='wages')
    op.drop_table('wages')
    op.drop_index('ix_attendance_date', table_name='attendance')
    op.drop_index('ix_attendance_employee_id', table_name='attendance')
    op.drop_table('attendance')
    op.drop_index('ix_emp_status', table_name='employees')
    op.drop_table('employees')
    op.drop_index('ix_user_roles_user_id', table_name='user_roles')
    op.drop_table('user_roles')
    op.drop_index('ix_users_email', table_name='users')
    op.drop_table('users')
    app_role.drop(op.get_bind(), checkfirst=True)
