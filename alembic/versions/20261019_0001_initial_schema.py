"""Initial schema - users, content, moderation, reports, audit

Revision ID: 0001
Revises:
Create Date: 2026-10-19

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa

# revision identifiers, used by Alembic.
revision: str = '0001'
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def _moderation_columns():
    return [
        sa.Column('moderation_status', sa.String(20), nullable=False, server_default='approved'),
        sa.Column('report_count', sa.Integer(), nullable=False, server_default='0'),
        sa.Column('last_moderation_action', sa.DateTime(timezone=True), nullable=True),
        sa.Column('moderated_by', sa.Uuid(), nullable=True),
        sa.Column('deleted_at', sa.DateTime(timezone=True), nullable=True),
        sa.Column('deleted_by', sa.Uuid(), nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
    ]


def _content_indexes(table: str) -> None:
    op.create_index(f'ix_{table}_author_id', table, ['author_id'])
    op.create_index(f'ix_{table}_moderation_status', table, ['moderation_status'])
    op.create_index(f'ix_{table}_created_at', table, ['created_at'])


def upgrade() -> None:
    # Users table
    op.create_table(
        'users',
        sa.Column('id', sa.Uuid(), primary_key=True),
        sa.Column('username', sa.String(50), unique=True, nullable=False),
        sa.Column('email', sa.String(255), unique=True, nullable=False),
        sa.Column('role', sa.String(20), nullable=False, server_default='user'),
        sa.Column('is_active', sa.Boolean(), nullable=False, server_default=sa.true()),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
    )
    op.create_index('ix_users_username', 'users', ['username'])
    op.create_index('ix_users_role', 'users', ['role'])
    op.create_index('ix_users_created_at', 'users', ['created_at'])

    # Moderatable content
    op.create_table(
        'discussions',
        sa.Column('id', sa.Uuid(), primary_key=True),
        sa.Column('author_id', sa.Uuid(), sa.ForeignKey('users.id'), nullable=False),
        sa.Column('title', sa.String(300), nullable=False),
        sa.Column('description', sa.Text(), nullable=True),
        sa.Column('view_count', sa.Integer(), nullable=False, server_default='0'),
        sa.Column('is_featured', sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column('featured_at', sa.DateTime(timezone=True), nullable=True),
        sa.Column('featured_by', sa.Uuid(), nullable=True),
        sa.Column('is_promoted', sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column('promoted_start_date', sa.DateTime(timezone=True), nullable=True),
        sa.Column('promoted_end_date', sa.DateTime(timezone=True), nullable=True),
        sa.Column('promoted_by', sa.Uuid(), nullable=True),
        sa.Column('is_pinned', sa.Boolean(), nullable=False, server_default=sa.false()),
        *_moderation_columns(),
    )
    _content_indexes('discussions')

    op.create_table(
        'debates',
        sa.Column('id', sa.Uuid(), primary_key=True),
        sa.Column('author_id', sa.Uuid(), sa.ForeignKey('users.id'), nullable=False),
        sa.Column('title', sa.String(300), nullable=False),
        sa.Column('description', sa.Text(), nullable=True),
        *_moderation_columns(),
    )
    _content_indexes('debates')

    op.create_table(
        'comments',
        sa.Column('id', sa.Uuid(), primary_key=True),
        sa.Column('author_id', sa.Uuid(), sa.ForeignKey('users.id'), nullable=False),
        sa.Column('discussion_id', sa.Uuid(), nullable=True),
        sa.Column('debate_id', sa.Uuid(), nullable=True),
        sa.Column('body', sa.Text(), nullable=False),
        *_moderation_columns(),
    )
    _content_indexes('comments')
    op.create_index('ix_comments_discussion_id', 'comments', ['discussion_id'])
    op.create_index('ix_comments_debate_id', 'comments', ['debate_id'])

    # Restriction ledger (append-only)
    op.create_table(
        'content_restrictions',
        sa.Column('id', sa.Uuid(), primary_key=True),
        sa.Column('content_type', sa.String(20), nullable=False),
        sa.Column('content_id', sa.Uuid(), nullable=False),
        sa.Column('restriction_type', sa.String(20), nullable=False),
        sa.Column('moderator_id', sa.Uuid(), nullable=False),
        sa.Column('reason', sa.Text(), nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
    )
    op.create_index('ix_content_restrictions_content', 'content_restrictions', ['content_type', 'content_id'])
    op.create_index('ix_content_restrictions_moderator_id', 'content_restrictions', ['moderator_id'])
    op.create_index('ix_content_restrictions_created_at', 'content_restrictions', ['created_at'])

    # Audit log (append-only)
    op.create_table(
        'moderation_audit_log',
        sa.Column('id', sa.Uuid(), primary_key=True),
        sa.Column('subject_type', sa.String(50), nullable=False),
        sa.Column('subject_id', sa.Uuid(), nullable=False),
        sa.Column('actor_id', sa.Uuid(), nullable=True),
        sa.Column('action_type', sa.String(50), nullable=False),
        sa.Column('field_changed', sa.String(100), nullable=False),
        sa.Column('old_value', sa.Text(), nullable=True),
        sa.Column('new_value', sa.Text(), nullable=True),
        sa.Column('reason', sa.Text(), nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
    )
    op.create_index('ix_moderation_audit_log_subject_id', 'moderation_audit_log', ['subject_id'])
    op.create_index('ix_moderation_audit_log_actor_id', 'moderation_audit_log', ['actor_id'])
    op.create_index('ix_moderation_audit_log_action_type', 'moderation_audit_log', ['action_type'])
    op.create_index('ix_moderation_audit_log_created_at', 'moderation_audit_log', ['created_at'])
    op.create_index('ix_audit_subject_time', 'moderation_audit_log', ['subject_id', 'created_at'])
    op.create_index('ix_audit_actor_time', 'moderation_audit_log', ['actor_id', 'created_at'])
    op.create_index('ix_audit_action_time', 'moderation_audit_log', ['action_type', 'created_at'])

    # Reports
    op.create_table(
        'reports',
        sa.Column('id', sa.Uuid(), primary_key=True),
        sa.Column('reporter_id', sa.Uuid(), sa.ForeignKey('users.id'), nullable=False),
        sa.Column('content_type', sa.String(20), nullable=False),
        sa.Column('content_id', sa.Uuid(), nullable=False),
        sa.Column('reason', sa.String(30), nullable=False),
        sa.Column('description', sa.Text(), nullable=True),
        sa.Column('status', sa.String(20), nullable=False, server_default='unresolved'),
        sa.Column('resolved_by', sa.Uuid(), nullable=True),
        sa.Column('resolved_at', sa.DateTime(timezone=True), nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
    )
    op.create_index('ix_reports_reporter_id', 'reports', ['reporter_id'])
    op.create_index('ix_reports_reason', 'reports', ['reason'])
    op.create_index('ix_reports_status', 'reports', ['status'])
    op.create_index('ix_reports_created_at', 'reports', ['created_at'])
    op.create_index('ix_reports_content', 'reports', ['content_type', 'content_id'])

    # Notifications
    op.create_table(
        'notifications',
        sa.Column('id', sa.Uuid(), primary_key=True),
        sa.Column('user_id', sa.Uuid(), nullable=False),
        sa.Column('type', sa.String(50), nullable=False),
        sa.Column('title', sa.String(200), nullable=False),
        sa.Column('content', sa.Text(), nullable=False),
        sa.Column('link', sa.String(500), nullable=True),
        sa.Column('is_read', sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
    )
    op.create_index('ix_notifications_user_id', 'notifications', ['user_id'])
    op.create_index('ix_notifications_created_at', 'notifications', ['created_at'])

    # Homepage sections
    op.create_table(
        'homepage_section_controls',
        sa.Column('id', sa.Uuid(), primary_key=True),
        sa.Column('section_key', sa.String(50), unique=True, nullable=False),
        sa.Column('title', sa.String(200), nullable=False),
        sa.Column('is_visible', sa.Boolean(), nullable=False, server_default=sa.true()),
        sa.Column('display_order', sa.Integer(), nullable=False, server_default='0'),
        sa.Column('updated_at', sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
    )


def downgrade() -> None:
    op.drop_table('homepage_section_controls')
    op.drop_table('notifications')
    op.drop_table('reports')
    op.drop_table('moderation_audit_log')
    op.drop_table('content_restrictions')
    op.drop_table('comments')
    op.drop_table('debates')
    op.drop_table('discussions')
    op.drop_table('users')
