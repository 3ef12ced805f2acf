"""create sources, items and notifications tables

Revision ID: 001_create_sources_items
Revises:
Create Date: 2026-10-17 00:00:00.000000

"""
from typing import Sequence, Union
from alembic import op
import sqlalchemy as sa

# revision identifiers, used by Alembic.
revision: str = '001_create_sources_items'
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    """Add sources, items and notifications tables with related indexes."""
    op.create_table('sources',
        sa.Column('id', sa.Uuid(), nullable=False),
        sa.Column('name', sa.String(length=255), nullable=False),
        sa.Column('url', sa.Text(), nullable=False),
        sa.Column('mode', sa.String(length=10), nullable=False),
        sa.Column('filter_keywords', sa.JSON(), nullable=False),
        sa.Column('filter_regex', sa.JSON(), nullable=False),
        sa.Column('interval_minutes', sa.Integer(), nullable=False, server_default='60'),
        sa.Column('last_checked', sa.DateTime(timezone=True), nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False, server_default=sa.text('CURRENT_TIMESTAMP')),
        sa.Column('updated_at', sa.DateTime(timezone=True), nullable=False, server_default=sa.text('CURRENT_TIMESTAMP')),
        sa.CheckConstraint("length(name) >= 1", name='source_name_not_empty'),
        sa.CheckConstraint("length(url) >= 1", name='source_url_not_empty'),
        sa.CheckConstraint('interval_minutes >= 1 AND interval_minutes <= 10080', name='source_interval_range'),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('url', name='uk_sources_url')
    )

    op.create_index('idx_sources_name', 'sources', ['name'])
    op.create_index('idx_sources_last_checked', 'sources', ['last_checked'])

    op.create_table('items',
        sa.Column('id', sa.Uuid(), nullable=False),
        sa.Column('source_id', sa.Uuid(), nullable=False),
        sa.Column('title', sa.Text(), nullable=True),
        sa.Column('link', sa.Text(), nullable=False),
        sa.Column('summary', sa.Text(), nullable=True),
        sa.Column('published_at', sa.DateTime(timezone=True), nullable=True),
        sa.Column('discovered_at', sa.DateTime(timezone=True), nullable=False, server_default=sa.text('CURRENT_TIMESTAMP')),
        sa.Column('content_hash', sa.String(length=64), nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False, server_default=sa.text('CURRENT_TIMESTAMP')),
        sa.Column('updated_at', sa.DateTime(timezone=True), nullable=False, server_default=sa.text('CURRENT_TIMESTAMP')),
        sa.ForeignKeyConstraint(['source_id'], ['sources.id'], ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('source_id', 'link', name='uk_items_source_link')
    )

    op.create_index('idx_items_source_id', 'items', ['source_id'])
    op.create_index('idx_items_content_hash', 'items', ['content_hash'])
    op.create_index('idx_items_published_at', 'items', ['published_at'])
    op.create_index('idx_items_discovered_at', 'items', ['discovered_at'])

    op.create_table('notifications',
        sa.Column('id', sa.Uuid(), nullable=False),
        sa.Column('item_id', sa.Uuid(), nullable=False),
        sa.Column('channel', sa.String(length=50), nullable=False),
        sa.Column('payload', sa.JSON(), nullable=True),
        sa.Column('sent_at', sa.DateTime(timezone=True), nullable=False, server_default=sa.text('CURRENT_TIMESTAMP')),
        sa.Column('status', sa.String(length=20), nullable=False, server_default='PENDING'),
        sa.Column('error_message', sa.Text(), nullable=True),
        sa.Column('retry_count', sa.Integer(), nullable=False, server_default='0'),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False, server_default=sa.text('CURRENT_TIMESTAMP')),
        sa.Column('updated_at', sa.DateTime(timezone=True), nullable=False, server_default=sa.text('CURRENT_TIMESTAMP')),
        sa.CheckConstraint('retry_count >= 0', name='notification_retry_count_non_negative'),
        sa.ForeignKeyConstraint(['item_id'], ['items.id'], ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('id')
    )

    op.create_index('idx_notifications_item_id', 'notifications', ['item_id'])
    op.create_index('idx_notifications_status', 'notifications', ['status'])
    op.create_index('idx_notifications_sent_at', 'notifications', ['sent_at'])


def downgrade() -> None:
    """Remove notifications, items and sources tables."""
    op.drop_index('idx_notifications_sent_at', table_name='notifications')
    op.drop_index('idx_notifications_status', table_name='notifications')
    op.drop_index('idx_notifications_item_id', table_name='notifications')
    op.drop_table('notifications')

    op.drop_index('idx_items_discovered_at', table_name='items')
    op.drop_index('idx_items_published_at', table_name='items')
    op.drop_index('idx_items_content_hash', table_name='items')
    op.drop_index('idx_items_source_id', table_name='items')
    op.drop_table('items')

    op.drop_index('idx_sources_last_checked', table_name='sources')
    op.drop_index('idx_sources_name', table_name='sources')
    op.drop_table('sources')
