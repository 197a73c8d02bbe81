"""Initial users and notes tables

Revision ID: 3f1c2a9d7b10
Revises:
Create Date: 2025-10-02 09:12:31.418204

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects import postgresql


# revision identifiers, used by Alembic.
revision: str = '3f1c2a9d7b10'
down_revision: Union[str, Sequence[str], None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    """Upgrade schema."""
    op.create_table(
        'users',
        sa.Column('id', postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column('email', sa.String(length=255), nullable=False),
        sa.Column('password_hash', sa.String(length=255), nullable=True),
        sa.Column('name', sa.String(length=100), nullable=False),
        sa.Column('avatar', sa.Text(), nullable=False, server_default=''),
        sa.Column('bio', sa.String(length=200), nullable=False, server_default=''),
        sa.Column('is_private', sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column('google_id', sa.String(length=255), nullable=True),
        sa.Column('auth_provider', sa.String(length=20), nullable=False, server_default='email'),
        sa.Column('refresh_token', sa.Text(), nullable=True),
        sa.Column('friends', postgresql.ARRAY(postgresql.UUID(as_uuid=True)), nullable=False, server_default='{}'),
        sa.Column('friend_requests', postgresql.ARRAY(postgresql.UUID(as_uuid=True)), nullable=False, server_default='{}'),
        sa.Column('sent_friend_requests', postgresql.ARRAY(postgresql.UUID(as_uuid=True)), nullable=False, server_default='{}'),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=True),
        sa.Column('updated_at', sa.DateTime(timezone=True), nullable=True),
        sa.CheckConstraint('length(bio) <= 200', name='ck_users_bio_len'),
        sa.CheckConstraint("auth_provider IN ('email', 'google')", name='ck_users_auth_provider'),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('email'),
        sa.UniqueConstraint('google_id'),
    )
    op.create_index('idx_users_email', 'users', ['email'], unique=False)
    op.create_index('idx_users_name', 'users', ['name'], unique=False)

    op.create_table(
        'notes',
        sa.Column('id', postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column('title', sa.String(length=200), nullable=False),
        sa.Column('content', sa.Text(), nullable=False),
        sa.Column('color', sa.String(length=20), nullable=False),
        sa.Column('images', postgresql.JSONB(), nullable=False, server_default='[]'),
        sa.Column('date', sa.DateTime(timezone=True), nullable=False),
        sa.Column('owner_id', postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column('is_pinned', sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column('is_archived', sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column('is_deleted', sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column('deleted_at', sa.DateTime(timezone=True), nullable=True),
        sa.Column('is_public', sa.Boolean(), nullable=False, server_default=sa.true()),
        sa.Column('likes', postgresql.ARRAY(postgresql.UUID(as_uuid=True)), nullable=False, server_default='{}'),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=True),
        sa.Column('updated_at', sa.DateTime(timezone=True), nullable=True),
        sa.ForeignKeyConstraint(['owner_id'], ['users.id'], ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index('idx_notes_owner_id', 'notes', ['owner_id'], unique=False)
    op.create_index('idx_notes_owner_state', 'notes', ['owner_id', 'is_deleted', 'is_archived'], unique=False)
    op.create_index('idx_notes_owner_date', 'notes', ['owner_id', 'date'], unique=False)


def downgrade() -> None:
    """Downgrade schema."""
    op.drop_index('idx_notes_owner_date', table_name='notes')
    op.drop_index('idx_notes_owner_state', table_name='notes')
    op.drop_index('idx_notes_owner_id', table_name='notes')
    op.drop_table('notes')
    op.drop_index('idx_users_name', table_name='users')
    op.drop_index('idx_users_email', table_name='users')
    op.drop_table('users')
