"""create account table

Revision ID: 1a2b3c4d5e6f
Revises:
Create Date: 2025-09-02 10:00:00.000000

"""
from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision = '1a2b3c4d5e6f'
down_revision = None
branch_labels = None
depends_on = None


def upgrade():
    op.create_table(
        'account',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('username', sa.String(length=64), nullable=False),
        sa.Column('password_hash', sa.String(length=256), nullable=True),
        sa.Column('credits', sa.Integer(), nullable=False, server_default='0'),
        sa.Column('score', sa.Integer(), nullable=False, server_default='0'),
        sa.Column('geography', sa.String(length=64), nullable=True),
        sa.Column('sex', sa.String(length=32), nullable=True),
        sa.Column('age_group', sa.String(length=32), nullable=True),
        sa.Column('last_active', sa.DateTime(), nullable=True),
        sa.CheckConstraint('credits >= 0', name='ck_account_credits_non_negative'),
        sa.PrimaryKeyConstraint('id'),
    )
    with op.batch_alter_table('account') as batch_op:
        batch_op.create_index('ix_account_username', ['username'], unique=True)


def downgrade():
    with op.batch_alter_table('account') as batch_op:
        batch_op.drop_index('ix_account_username')
    op.drop_table('account')
