"""create actions, settings and notification_meta tables

Revision ID: a1c4e7f20b93
Revises:
Create Date: 2026-10-19 09:00:00.000000

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision: str = 'a1c4e7f20b93'
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.create_table(
        'actions',
        sa.Column('id', sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column('title', sa.Text(), nullable=False),
        sa.Column('list', sa.String(16), nullable=True),
        sa.Column('sort_index', sa.BigInteger(), nullable=False),
        sa.Column('is_done', sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column('created_at', sa.BigInteger(), nullable=False),
        sa.Column('updated_at', sa.BigInteger(), nullable=False),
        sa.Column('reminder_type', sa.String(16), nullable=False, server_default='none'),
        sa.Column('reminder_date', sa.BigInteger(), nullable=True),
        sa.Column('reminder_time', sa.String(5), nullable=True),
        sa.Column('reminder_weekday', sa.SmallInteger(), nullable=True),
        sa.Column('reminder_monthday', sa.SmallInteger(), nullable=True),
    )
    op.create_index('idx_actions_list', 'actions', ['list'])
    op.create_index('idx_actions_is_done', 'actions', ['is_done'])
    op.create_index('idx_actions_sort_index', 'actions', ['sort_index'])

    op.create_table(
        'settings',
        sa.Column('key', sa.String(64), primary_key=True),
        sa.Column('value', sa.Text(), nullable=False),
    )

    op.create_table(
        'notification_meta',
        sa.Column('key', sa.String(128), primary_key=True),
        sa.Column('notification_id', sa.String(64), nullable=False),
    )


def downgrade() -> None:
    op.drop_table('notification_meta')
    op.drop_table('settings')
    op.drop_index('idx_actions_sort_index', table_name='actions')
    op.drop_index('idx_actions_is_done', table_name='actions')
    op.drop_index('idx_actions_list', table_name='actions')
    op.drop_table('actions')
