"""create auth_token table for bearer sessions

Revision ID: 3c4d5e6f7a8b
Revises: 2b3c4d5e6f7a
Create Date: 2025-09-04 16:20:00.000000

"""
from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision = '3c4d5e6f7a8b'
down_revision = '2b3c4d5e6f7a'
branch_labels = None
depends_on = None


def upgrade():
    bind = op.get_bind()
    insp = sa.inspect(bind)
    if 'auth_token' in set(insp.get_table_names()):
        return

    op.create_table(
        'auth_token',
        sa.Column('token', sa.String(length=64), nullable=False),
        sa.Column('account_id', sa.Integer(), nullable=False),
        sa.Column('created_at', sa.DateTime(), nullable=False, server_default=sa.func.current_timestamp()),
        sa.ForeignKeyConstraint(['account_id'], ['account.id'], name='fk_auth_token_account_id'),
        sa.PrimaryKeyConstraint('token'),
    )
    with op.batch_alter_table('auth_token') as batch_op:
        batch_op.create_index('ix_auth_token_account_id', ['account_id'], unique=False)


def downgrade():
    with op.batch_alter_table('auth_token') as batch_op:
        batch_op.drop_index('ix_auth_token_account_id')
    op.drop_table('auth_token')
