"""create_billing_tables

Revision ID: 4b7d1e9a2c3f
Revises:
Create Date: 2026-10-18 09:12:44.318207

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision: str = '4b7d1e9a2c3f'
down_revision: Union[str, Sequence[str], None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    """Create profiles, bills and bill_instances tables."""
    op.create_table('profiles',
        sa.Column('id', sa.UUID(), nullable=False),
        sa.Column('user_id', sa.UUID(), nullable=False),
        sa.Column('name', sa.String(length=255), nullable=False),
        sa.Column('street', sa.String(length=255), nullable=False),
        sa.Column('city', sa.String(length=100), nullable=False),
        sa.Column('country', sa.String(length=100), nullable=False),
        sa.Column('color', sa.String(length=7), server_default='#3B82F6', nullable=False),
        sa.Column('created_at', sa.DateTime(), nullable=False),
        sa.Column('updated_at', sa.DateTime(), nullable=False),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index('ix_profiles_user_id', 'profiles', ['user_id'], unique=False)

    op.create_table('bills',
        sa.Column('id', sa.UUID(), nullable=False),
        sa.Column('profile_id', sa.UUID(), nullable=False),
        sa.Column('user_id', sa.UUID(), nullable=False),
        sa.Column('name', sa.String(length=255), nullable=False),
        sa.Column('e_bill_link', sa.String(length=2048), nullable=True),
        sa.Column('e_bill_username', sa.String(length=255), nullable=True),
        sa.Column('e_bill_password', sa.Text(), nullable=True),
        sa.Column('due_day', sa.Integer(), nullable=True),
        sa.Column('created_at', sa.DateTime(), nullable=False),
        sa.Column('updated_at', sa.DateTime(), nullable=False),
        sa.CheckConstraint('due_day IS NULL OR due_day BETWEEN 1 AND 31', name='ck_bills_due_day'),
        sa.ForeignKeyConstraint(['profile_id'], ['profiles.id'], ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index('ix_bills_profile_id', 'bills', ['profile_id'], unique=False)
    op.create_index('ix_bills_user_id', 'bills', ['user_id'], unique=False)

    # One instance per bill and billing period; the generator relies on it
    op.create_table('bill_instances',
        sa.Column('id', sa.UUID(), nullable=False),
        sa.Column('bill_id', sa.UUID(), nullable=False),
        sa.Column('user_id', sa.UUID(), nullable=False),
        sa.Column('period', sa.String(length=32), nullable=False),
        sa.Column('amount', sa.Numeric(precision=12, scale=2), server_default='0', nullable=False),
        sa.Column('due_date', sa.Date(), nullable=False),
        sa.Column('description', sa.Text(), nullable=True),
        sa.Column('is_paid', sa.Boolean(), server_default=sa.false(), nullable=False),
        sa.Column('created_at', sa.DateTime(), nullable=False),
        sa.Column('updated_at', sa.DateTime(), nullable=False),
        sa.CheckConstraint('amount >= 0', name='ck_bill_instances_amount'),
        sa.ForeignKeyConstraint(['bill_id'], ['bills.id'], ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('bill_id', 'period', name='uq_bill_instances_bill_period'),
    )
    op.create_index('ix_bill_instances_bill_id', 'bill_instances', ['bill_id'], unique=False)
    op.create_index('ix_bill_instances_user_id', 'bill_instances', ['user_id'], unique=False)
    op.create_index(
        'ix_bill_instances_period_user',
        'bill_instances',
        ['period', 'user_id'],
        unique=False,
    )


def downgrade() -> None:
    """Drop billing tables."""
    op.drop_index('ix_bill_instances_period_user', table_name='bill_instances')
    op.drop_index('ix_bill_instances_user_id', table_name='bill_instances')
    op.drop_index('ix_bill_instances_bill_id', table_name='bill_instances')
    op.drop_table('bill_instances')
    op.drop_index('ix_bills_user_id', table_name='bills')
    op.drop_index('ix_bills_profile_id', table_name='bills')
    op.drop_table('bills')
    op.drop_index('ix_profiles_user_id', table_name='profiles')
    op.drop_table('profiles')
