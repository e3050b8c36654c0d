"""employee details and service assignments

Revision ID: 20250315100000
Revises: 20250301090000
Create Date: 2025-03-15 10:00:00.000000

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision: str = '20250315100000'
down_revision: Union[str, None] = '20250301090000'
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.add_column('employees', sa.Column('dni', sa.String(length=50), nullable=True))
    op.add_column('employees', sa.Column('active', sa.Boolean(), server_default=sa.true(), nullable=False))

    op.create_table('service_employees',
    sa.Column('id', sa.Integer(), nullable=False),
    sa.Column('service_id', sa.Integer(), nullable=False),
    sa.Column('employee_id', sa.Integer(), nullable=False),
    sa.Column('created_at', sa.TIMESTAMP(timezone=True), nullable=True),
    sa.ForeignKeyConstraint(['service_id'], ['services.id'], ondelete='CASCADE'),
    sa.ForeignKeyConstraint(['employee_id'], ['employees.id'], ondelete='CASCADE'),
    sa.PrimaryKeyConstraint('id'),
    sa.UniqueConstraint('service_id', 'employee_id', name='uq_service_employee')
    )
    op.create_index(op.f('ix_service_employees_id'), 'service_employees', ['id'], unique=False)
    op.create_index('idx_service_employees_employee', 'service_employees', ['employee_id'], unique=False)


def downgrade() -> None:
    op.drop_index('idx_service_employees_employee', table_name='service_employees')
    op.drop_index(op.f('ix_service_employees_id'), table_name='service_employees')
    op.drop_table('service_employees')
    op.drop_column('employees', 'active')
    op.drop_column('employees', 'dni')
