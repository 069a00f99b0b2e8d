"""create service and user token tables

Revision ID: createtokentables
Revises:
Create Date: 2026-10-19 00:00:00.000000
"""
from alembic import op
import sqlalchemy as sa

# revision identifiers, used by Alembic.
revision = 'createtokentables'
down_revision = None
branch_labels = None
depends_on = None


def upgrade() -> None:
    op.create_table(
        'service_tokens',
        sa.Column('token', sa.String(), primary_key=True),
        sa.Column('service_name', sa.String(), nullable=False),
    )
    op.create_index('ix_service_tokens_service_name', 'service_tokens', ['service_name'], unique=True)

    op.create_table(
        'user_tokens',
        sa.Column('token', sa.String(), primary_key=True),
        sa.Column('user_name', sa.String(), nullable=False),
    )
    op.create_index('ix_user_tokens_user_name', 'user_tokens', ['user_name'], unique=True)


def downgrade() -> None:
    op.drop_index('ix_user_tokens_user_name', table_name='user_tokens')
    op.drop_table('user_tokens')
    op.drop_index('ix_service_tokens_service_name', table_name='service_tokens')
    op.drop_table('service_tokens')
