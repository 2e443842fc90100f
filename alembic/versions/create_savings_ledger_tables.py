"""create savings ledger tables

Revision ID: create_savings_ledger_tables
Revises:
Create Date: 2026-10-19

"""
from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects import postgresql

# revision identifiers, used by Alembic.
revision = 'create_savings_ledger_tables'
down_revision = None
branch_labels = None
depends_on = None

def upgrade():
    op.create_table(
        'users',
        sa.Column('id', postgresql.UUID(as_uuid=True), primary_key=True, server_default=sa.text('gen_random_uuid()')),
        sa.Column('external_id', sa.String(length=255), nullable=False),
        sa.Column('name', sa.String(length=255), nullable=False),
        sa.Column('email', sa.String(length=320), nullable=False),
        sa.Column('phone', sa.String(length=50), nullable=True),
        sa.Column('avatar_url', sa.String, nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
        sa.Column('updated_at', sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
    )
    op.create_index('ix_users_external_id', 'users', ['external_id'], unique=True)

    op.create_table(
        'savings_goals',
        sa.Column('id', postgresql.UUID(as_uuid=True), primary_key=True, server_default=sa.text('gen_random_uuid()')),
        sa.Column('user_id', postgresql.UUID(as_uuid=True), sa.ForeignKey('users.id'), nullable=False),
        sa.Column('name', sa.String(length=150), nullable=False),
        sa.Column('target_amount', sa.Numeric(12, 2), nullable=False),
        sa.Column('current_amount', sa.Numeric(12, 2), nullable=False, server_default='0'),
        sa.Column('is_completed', sa.Boolean, nullable=False, server_default=sa.false()),
        sa.Column('deadline', sa.DateTime(timezone=True), nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
        sa.Column('updated_at', sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
        sa.CheckConstraint('target_amount > 0', name='ck_savings_goals_target_positive'),
        sa.CheckConstraint('current_amount >= 0', name='ck_savings_goals_current_non_negative'),
    )
    op.create_index('ix_savings_goals_user_id', 'savings_goals', ['user_id'])

    op.create_table(
        'savings_transactions',
        sa.Column('id', postgresql.UUID(as_uuid=True), primary_key=True, server_default=sa.text('gen_random_uuid()')),
        sa.Column('savings_goal_id', postgresql.UUID(as_uuid=True), sa.ForeignKey('savings_goals.id'), nullable=False),
        sa.Column('amount', sa.Numeric(12, 2), nullable=False),
        sa.Column('type', sa.Enum('DEPOSIT', 'WITHDRAWAL', name='savings_transaction_type'), nullable=False),
        sa.Column('description', sa.String(length=255), nullable=False),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
        sa.CheckConstraint('amount > 0', name='ck_savings_transactions_amount_positive'),
    )
    op.create_index('ix_savings_transactions_savings_goal_id', 'savings_transactions', ['savings_goal_id'])
    op.create_index('ix_savings_transactions_created_at', 'savings_transactions', ['created_at'])

    op.create_table(
        'personal_savings',
        sa.Column('id', postgresql.UUID(as_uuid=True), primary_key=True, server_default=sa.text('gen_random_uuid()')),
        sa.Column('user_id', postgresql.UUID(as_uuid=True), sa.ForeignKey('users.id'), nullable=False, unique=True),
        sa.Column('balance', sa.Numeric(12, 2), nullable=False, server_default='0'),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
        sa.Column('updated_at', sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
    )

def downgrade():
    op.drop_table('personal_savings')
    op.drop_index('ix_savings_transactions_created_at', table_name='savings_transactions')
    op.drop_index('ix_savings_transactions_savings_goal_id', table_name='savings_transactions')
    op.drop_table('savings_transactions')
    sa.Enum(name='savings_transaction_type').drop(op.get_bind(), checkfirst=True)
    op.drop_index('ix_savings_goals_user_id', table_name='savings_goals')
    op.drop_table('savings_goals')
    op.drop_index('ix_users_external_id', table_name='users')
    op.drop_table('users')
