"""create_budget_tables

Revision ID: 4f2a9c1d7e3b
Revises:
Create Date: 2026-10-19 10:12:41.208311

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision: str = '4f2a9c1d7e3b'
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def _timestamps() -> list[sa.Column]:
    return [
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False),
        sa.Column('updated_at', sa.DateTime(timezone=True), nullable=False),
    ]


def upgrade() -> None:
    op.create_table(
        'users',
        sa.Column('id', sa.Uuid(), nullable=False),
        sa.Column('email', sa.String(length=255), nullable=False),
        sa.Column('password_hash', sa.String(length=255), nullable=False),
        sa.Column('name', sa.String(length=255), nullable=False),
        sa.Column('is_active', sa.Boolean(), nullable=False),
        *_timestamps(),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index('ix_users_email', 'users', ['email'], unique=True)

    op.create_table(
        'budgets',
        sa.Column('id', sa.Uuid(), nullable=False),
        sa.Column('name', sa.String(length=255), nullable=False),
        sa.Column('owner_id', sa.Uuid(), nullable=False),
        sa.Column('invite_code', sa.String(length=32), nullable=True),
        *_timestamps(),
        sa.ForeignKeyConstraint(['owner_id'], ['users.id'], ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('invite_code'),
    )
    op.create_index('ix_budgets_owner_id', 'budgets', ['owner_id'])

    op.create_table(
        'budget_members',
        sa.Column('id', sa.Uuid(), nullable=False),
        sa.Column('budget_id', sa.Uuid(), nullable=False),
        sa.Column('user_id', sa.Uuid(), nullable=False),
        sa.Column('role', sa.String(length=20), nullable=False),
        sa.Column('joined_at', sa.DateTime(timezone=True), nullable=False),
        *_timestamps(),
        sa.ForeignKeyConstraint(['budget_id'], ['budgets.id'], ondelete='CASCADE'),
        sa.ForeignKeyConstraint(['user_id'], ['users.id'], ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('budget_id', 'user_id', name='uq_budget_member'),
    )
    op.create_index('ix_budget_members_budget_id', 'budget_members', ['budget_id'])
    op.create_index('ix_budget_members_user_id', 'budget_members', ['user_id'])

    op.create_table(
        'bank_connections',
        sa.Column('id', sa.Uuid(), nullable=False),
        sa.Column('budget_id', sa.Uuid(), nullable=False),
        sa.Column('provider', sa.String(length=20), nullable=False),
        sa.Column('connection_id', sa.String(length=255), nullable=False),
        sa.Column('access_token', sa.String(length=512), nullable=False),
        sa.Column('institution_id', sa.String(length=255), nullable=True),
        sa.Column('institution_name', sa.String(length=255), nullable=False),
        *_timestamps(),
        sa.ForeignKeyConstraint(['budget_id'], ['budgets.id'], ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint(
            'budget_id', 'provider', 'connection_id', name='uq_budget_provider_connection'
        ),
    )
    op.create_index('ix_bank_connections_budget_id', 'bank_connections', ['budget_id'])

    op.create_table(
        'categories',
        sa.Column('id', sa.Uuid(), nullable=False),
        sa.Column('budget_id', sa.Uuid(), nullable=False),
        sa.Column('name', sa.String(length=100), nullable=False),
        sa.Column('color', sa.String(length=9), nullable=False),
        sa.Column('icon', sa.String(length=16), nullable=False),
        sa.Column('budget_amount', sa.Numeric(precision=12, scale=2), nullable=False),
        sa.Column('rollover', sa.Boolean(), nullable=False),
        sa.Column('order', sa.Integer(), nullable=False),
        *_timestamps(),
        sa.CheckConstraint('budget_amount >= 0', name='ck_category_budget_non_negative'),
        sa.ForeignKeyConstraint(['budget_id'], ['budgets.id'], ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index('ix_categories_budget_id', 'categories', ['budget_id'])

    op.create_table(
        'expenses',
        sa.Column('id', sa.Uuid(), nullable=False),
        sa.Column('amount', sa.Numeric(precision=12, scale=2), nullable=False),
        sa.Column('description', sa.String(length=500), nullable=False),
        sa.Column('category_id', sa.Uuid(), nullable=False),
        sa.Column('date', sa.Date(), nullable=False),
        sa.Column('created_by', sa.Uuid(), nullable=False),
        sa.Column('budget_id', sa.Uuid(), nullable=False),
        sa.Column('external_transaction_id', sa.String(length=255), nullable=True),
        sa.Column('account_name', sa.String(length=255), nullable=True),
        sa.Column('institution_name', sa.String(length=255), nullable=True),
        *_timestamps(),
        sa.CheckConstraint('amount >= 0', name='ck_expense_amount_non_negative'),
        sa.ForeignKeyConstraint(['budget_id'], ['budgets.id'], ondelete='CASCADE'),
        sa.ForeignKeyConstraint(['category_id'], ['categories.id'], ondelete='RESTRICT'),
        sa.ForeignKeyConstraint(['created_by'], ['users.id'], ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('external_transaction_id'),
    )
    op.create_index('ix_expenses_budget_id', 'expenses', ['budget_id'])
    op.create_index('ix_expenses_category_id', 'expenses', ['category_id'])
    op.create_index('ix_expenses_budget_id_date', 'expenses', ['budget_id', 'date'])

    op.create_table(
        'invites',
        sa.Column('id', sa.Uuid(), nullable=False),
        sa.Column('email', sa.String(length=255), nullable=False),
        sa.Column('budget_id', sa.Uuid(), nullable=False),
        sa.Column('token', sa.String(length=64), nullable=False),
        sa.Column('used', sa.Boolean(), nullable=False),
        sa.Column('expires_at', sa.DateTime(timezone=True), nullable=False),
        *_timestamps(),
        sa.ForeignKeyConstraint(['budget_id'], ['budgets.id'], ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index('ix_invites_token', 'invites', ['token'], unique=True)
    op.create_index('ix_invites_email_budget_id', 'invites', ['email', 'budget_id'])

    op.create_table(
        'assets',
        sa.Column('id', sa.Uuid(), nullable=False),
        sa.Column('budget_id', sa.Uuid(), nullable=False),
        sa.Column('name', sa.String(length=255), nullable=False),
        sa.Column('value', sa.Numeric(precision=14, scale=2), nullable=False),
        sa.Column('type', sa.String(length=20), nullable=False),
        *_timestamps(),
        sa.CheckConstraint('value >= 0', name='ck_asset_value_non_negative'),
        sa.ForeignKeyConstraint(['budget_id'], ['budgets.id'], ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index('ix_assets_budget_id', 'assets', ['budget_id'])

    op.create_table(
        'liabilities',
        sa.Column('id', sa.Uuid(), nullable=False),
        sa.Column('budget_id', sa.Uuid(), nullable=False),
        sa.Column('name', sa.String(length=255), nullable=False),
        sa.Column('amount', sa.Numeric(precision=14, scale=2), nullable=False),
        sa.Column('type', sa.String(length=20), nullable=False),
        *_timestamps(),
        sa.CheckConstraint('amount >= 0', name='ck_liability_amount_non_negative'),
        sa.ForeignKeyConstraint(['budget_id'], ['budgets.id'], ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index('ix_liabilities_budget_id', 'liabilities', ['budget_id'])


def downgrade() -> None:
    op.drop_table('liabilities')
    op.drop_table('assets')
    op.drop_table('invites')
    op.drop_table('expenses')
    op.drop_table('categories')
    op.drop_table('bank_connections')
    op.drop_table('budget_members')
    op.drop_table('budgets')
    op.drop_table('users')
