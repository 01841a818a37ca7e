"""Initial schema for the ticket desk

Revision ID: 3f1c9a7d2b10
Revises:
Create Date: 2026-10-18

Enums:
- audit_action_enum, audit_status_enum: Audit trail
- report_status_enum, ticket_status_enum, priority_enum: Work item lifecycle
- parent_type_enum, attachment_parent_type_enum: Polymorphic parents
- saved_view_type_enum: Saved view screens

Tables Created:
- permissions, roles, role_permissions: Permission catalog and grants
- users, user_roles: Accounts and their role sets
- audit_logs: Administrative audit trail
- categories, locations: Reference data
- reports, tickets, report_tickets, ticket_reviews: Work items
- comments, attachments, activity_logs, notifications: Collaboration
- saved_views: Per-user filter presets (partial unique default index)
- id_sequences: Daily counters behind R/W ids

Roles and permissions are not seeded here; run `python -m src.cli seed-permissions`.
"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects import postgresql

# revision identifiers, used by Alembic.
revision: str = '3f1c9a7d2b10'
down_revision: Union[str, Sequence[str], None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


audit_action_enum = postgresql.ENUM(
    'LOGIN', 'LOGIN_FAILED', 'REGISTER', 'PASSWORD_CHANGE',
    'CREATE', 'UPDATE', 'DELETE', 'ROLE_ASSIGN',
    'ROLE_CREATE', 'ROLE_UPDATE', 'ROLE_DELETE', 'ROLE_RESET',
    'PERMISSION_GRANT', 'PERMISSION_REVOKE',
    name='audit_action_enum', create_type=False,
)
audit_status_enum = postgresql.ENUM('SUCCESS', 'FAILURE', name='audit_status_enum', create_type=False)
report_status_enum = postgresql.ENUM(
    'UNCONFIRMED', 'PROCESSING', 'REJECTED', 'PENDING_REVIEW', 'REVIEWED', 'RETURNED',
    name='report_status_enum', create_type=False,
)
ticket_status_enum = postgresql.ENUM(
    'PENDING', 'IN_PROGRESS', 'COMPLETED', 'FAILED', 'VERIFIED', 'VERIFICATION_FAILED',
    name='ticket_status_enum', create_type=False,
)
priority_enum = postgresql.ENUM('LOW', 'MEDIUM', 'HIGH', 'URGENT', name='priority_enum', create_type=False)
parent_type_enum = postgresql.ENUM('REPORT', 'TICKET', name='parent_type_enum', create_type=False)
attachment_parent_type_enum = postgresql.ENUM(
    'REPORT', 'TICKET', 'TICKET_REVIEW', name='attachment_parent_type_enum', create_type=False,
)
saved_view_type_enum = postgresql.ENUM('REPORT', 'TICKET', name='saved_view_type_enum', create_type=False)

ALL_ENUMS = (
    audit_action_enum,
    audit_status_enum,
    report_status_enum,
    ticket_status_enum,
    priority_enum,
    parent_type_enum,
    attachment_parent_type_enum,
    saved_view_type_enum,
)


def _id_column() -> sa.Column:
    return sa.Column(
        'id', postgresql.UUID(as_uuid=True), nullable=False,
        server_default=sa.text('gen_random_uuid()'),
    )


def _timestamps() -> list[sa.Column]:
    return [
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
        sa.Column('updated_at', sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
    ]


def upgrade() -> None:
    """
    Upgrade schema.

    Creates the complete ticket desk schema from scratch.
    """
    bind = op.get_bind()

    # =========================================================================
    # STEP 1: Enum types (shared by several tables, so created explicitly)
    # =========================================================================
    for enum_type in ALL_ENUMS:
        enum_type.create(bind, checkfirst=True)

    # =========================================================================
    # STEP 2: Identity and authorization
    # =========================================================================
    op.create_table(
        'permissions',
        _id_column(),
        sa.Column('name', sa.String(length=64), nullable=False),
        sa.Column('description', sa.String(length=255), nullable=True),
        *_timestamps(),
        sa.PrimaryKeyConstraint('id', name=op.f('pk_permissions')),
    )
    op.create_index(op.f('ix_permissions_name'), 'permissions', ['name'], unique=True)
    op.create_index(op.f('ix_permissions_created_at'), 'permissions', ['created_at'], unique=False)

    op.create_table(
        'roles',
        _id_column(),
        sa.Column('name', sa.String(length=50), nullable=False),
        sa.Column('description', sa.String(length=255), nullable=True),
        *_timestamps(),
        sa.PrimaryKeyConstraint('id', name=op.f('pk_roles')),
    )
    op.create_index(op.f('ix_roles_name'), 'roles', ['name'], unique=True)
    op.create_index(op.f('ix_roles_created_at'), 'roles', ['created_at'], unique=False)

    op.create_table(
        'role_permissions',
        _id_column(),
        sa.Column('role_id', postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column('permission_id', postgresql.UUID(as_uuid=True), nullable=False),
        sa.ForeignKeyConstraint(
            ['role_id'], ['roles.id'], ondelete='CASCADE',
            name=op.f('fk_role_permissions_role_id_roles'),
        ),
        sa.ForeignKeyConstraint(
            ['permission_id'], ['permissions.id'], ondelete='CASCADE',
            name=op.f('fk_role_permissions_permission_id_permissions'),
        ),
        sa.PrimaryKeyConstraint('id', name=op.f('pk_role_permissions')),
        sa.UniqueConstraint('role_id', 'permission_id', name='uq_role_permissions_role_permission'),
    )
    op.create_index(op.f('ix_role_permissions_role_id'), 'role_permissions', ['role_id'], unique=False)

    op.create_table(
        'users',
        _id_column(),
        sa.Column('email', sa.String(length=255), nullable=False),
        sa.Column('name', sa.String(length=255), nullable=True),
        sa.Column('password_hash', sa.String(length=255), nullable=True),
        sa.Column('role', sa.String(length=50), nullable=True),
        sa.Column('last_login_at', sa.DateTime(timezone=True), nullable=True),
        *_timestamps(),
        sa.Column('deleted_at', sa.DateTime(timezone=True), nullable=True),
        sa.PrimaryKeyConstraint('id', name=op.f('pk_users')),
    )
    op.create_index(op.f('ix_users_email'), 'users', ['email'], unique=True)
    op.create_index(op.f('ix_users_created_at'), 'users', ['created_at'], unique=False)
    op.create_index(op.f('ix_users_deleted_at'), 'users', ['deleted_at'], unique=False)

    op.create_table(
        'user_roles',
        _id_column(),
        sa.Column('user_id', postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column('role_id', postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column('is_primary', sa.Boolean(), nullable=False, server_default=sa.text('FALSE')),
        sa.ForeignKeyConstraint(
            ['user_id'], ['users.id'], ondelete='CASCADE', name=op.f('fk_user_roles_user_id_users'),
        ),
        sa.ForeignKeyConstraint(
            ['role_id'], ['roles.id'], ondelete='CASCADE', name=op.f('fk_user_roles_role_id_roles'),
        ),
        sa.PrimaryKeyConstraint('id', name=op.f('pk_user_roles')),
        sa.UniqueConstraint('user_id', 'role_id', name='uq_user_roles_user_role'),
    )
    op.create_index(op.f('ix_user_roles_user_id'), 'user_roles', ['user_id'], unique=False)
    op.create_index(op.f('ix_user_roles_role_id'), 'user_roles', ['role_id'], unique=False)

    op.create_table(
        'audit_logs',
        _id_column(),
        sa.Column('user_id', postgresql.UUID(as_uuid=True), nullable=True),
        sa.Column('action', audit_action_enum, nullable=False),
        sa.Column('entity_type', sa.String(length=50), nullable=False),
        sa.Column('entity_id', sa.String(length=64), nullable=True),
        sa.Column('old_values', postgresql.JSONB(astext_type=sa.Text()), nullable=True),
        sa.Column('new_values', postgresql.JSONB(astext_type=sa.Text()), nullable=True),
        sa.Column('description', sa.Text(), nullable=True),
        sa.Column('ip_address', sa.String(length=45), nullable=True),
        sa.Column('user_agent', sa.String(length=500), nullable=True),
        sa.Column('request_id', sa.String(length=64), nullable=True),
        sa.Column('status', audit_status_enum, nullable=False, server_default='SUCCESS'),
        sa.Column('error_message', sa.Text(), nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
        sa.ForeignKeyConstraint(
            ['user_id'], ['users.id'], ondelete='SET NULL', name=op.f('fk_audit_logs_user_id_users'),
        ),
        sa.PrimaryKeyConstraint('id', name=op.f('pk_audit_logs')),
    )
    op.create_index(op.f('ix_audit_logs_user_id'), 'audit_logs', ['user_id'], unique=False)
    op.create_index(op.f('ix_audit_logs_action'), 'audit_logs', ['action'], unique=False)
    op.create_index(op.f('ix_audit_logs_request_id'), 'audit_logs', ['request_id'], unique=False)
    op.create_index(op.f('ix_audit_logs_created_at'), 'audit_logs', ['created_at'], unique=False)
    op.create_index('ix_audit_logs_entity', 'audit_logs', ['entity_type', 'entity_id', 'created_at'], unique=False)
    op.create_index('ix_audit_logs_action_date', 'audit_logs', ['action', 'created_at'], unique=False)

    # =========================================================================
    # STEP 3: Reference data
    # =========================================================================
    op.create_table(
        'categories',
        _id_column(),
        sa.Column('name', sa.String(length=100), nullable=False),
        sa.Column('parent_id', postgresql.UUID(as_uuid=True), nullable=True),
        sa.Column('level', sa.Integer(), nullable=False, server_default='1'),
        sa.Column('sort_order', sa.Integer(), nullable=False, server_default='0'),
        *_timestamps(),
        sa.ForeignKeyConstraint(
            ['parent_id'], ['categories.id'], ondelete='RESTRICT',
            name=op.f('fk_categories_parent_id_categories'),
        ),
        sa.PrimaryKeyConstraint('id', name=op.f('pk_categories')),
        sa.UniqueConstraint('name', 'parent_id', name='uq_categories_name_parent'),
    )
    op.create_index(op.f('ix_categories_parent_id'), 'categories', ['parent_id'], unique=False)
    op.create_index(op.f('ix_categories_created_at'), 'categories', ['created_at'], unique=False)

    op.create_table(
        'locations',
        _id_column(),
        sa.Column('name', sa.String(length=100), nullable=False),
        sa.Column('is_active', sa.Boolean(), nullable=False, server_default=sa.text('TRUE')),
        sa.Column('sort_order', sa.Integer(), nullable=False, server_default='0'),
        *_timestamps(),
        sa.PrimaryKeyConstraint('id', name=op.f('pk_locations')),
        sa.UniqueConstraint('name', name='uq_locations_name'),
    )
    op.create_index(op.f('ix_locations_sort_order'), 'locations', ['sort_order'], unique=False)
    op.create_index(op.f('ix_locations_created_at'), 'locations', ['created_at'], unique=False)

    op.create_table(
        'id_sequences',
        sa.Column('id', sa.String(length=50), nullable=False),
        sa.Column('model_name', sa.String(length=20), nullable=False),
        sa.Column('date', sa.String(length=6), nullable=False),
        sa.Column('sequence', sa.Integer(), nullable=False, server_default='0'),
        sa.PrimaryKeyConstraint('id', name=op.f('pk_id_sequences')),
    )

    # =========================================================================
    # STEP 4: Work items
    # =========================================================================
    op.create_table(
        'reports',
        sa.Column('id', sa.String(length=20), nullable=False),
        sa.Column('title', sa.String(length=255), nullable=False),
        sa.Column('description', sa.Text(), nullable=True),
        sa.Column('status', report_status_enum, nullable=False, server_default='UNCONFIRMED'),
        sa.Column('priority', priority_enum, nullable=False, server_default='MEDIUM'),
        sa.Column('creator_id', postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column('assignee_id', postgresql.UUID(as_uuid=True), nullable=True),
        sa.Column('category_id', postgresql.UUID(as_uuid=True), nullable=True),
        sa.Column('location_id', postgresql.UUID(as_uuid=True), nullable=True),
        sa.Column('contact_phone', sa.String(length=50), nullable=True),
        sa.Column('contact_email', sa.String(length=255), nullable=True),
        *_timestamps(),
        sa.ForeignKeyConstraint(['creator_id'], ['users.id'], name=op.f('fk_reports_creator_id_users')),
        sa.ForeignKeyConstraint(
            ['assignee_id'], ['users.id'], ondelete='SET NULL', name=op.f('fk_reports_assignee_id_users'),
        ),
        sa.ForeignKeyConstraint(
            ['category_id'], ['categories.id'], ondelete='SET NULL',
            name=op.f('fk_reports_category_id_categories'),
        ),
        sa.ForeignKeyConstraint(['location_id'], ['locations.id'], name=op.f('fk_reports_location_id_locations')),
        sa.PrimaryKeyConstraint('id', name=op.f('pk_reports')),
    )
    for column in ('status', 'priority', 'creator_id', 'assignee_id', 'category_id', 'location_id', 'created_at'):
        op.create_index(op.f(f'ix_reports_{column}'), 'reports', [column], unique=False)

    op.create_table(
        'tickets',
        sa.Column('id', sa.String(length=20), nullable=False),
        sa.Column('title', sa.String(length=255), nullable=False),
        sa.Column('description', sa.Text(), nullable=False),
        sa.Column('status', ticket_status_enum, nullable=False, server_default='PENDING'),
        sa.Column('priority', priority_enum, nullable=False, server_default='MEDIUM'),
        sa.Column('creator_id', postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column('assignee_id', postgresql.UUID(as_uuid=True), nullable=True),
        sa.Column('role_id', postgresql.UUID(as_uuid=True), nullable=True),
        *_timestamps(),
        sa.ForeignKeyConstraint(['creator_id'], ['users.id'], name=op.f('fk_tickets_creator_id_users')),
        sa.ForeignKeyConstraint(
            ['assignee_id'], ['users.id'], ondelete='SET NULL', name=op.f('fk_tickets_assignee_id_users'),
        ),
        sa.ForeignKeyConstraint(
            ['role_id'], ['roles.id'], ondelete='SET NULL', name=op.f('fk_tickets_role_id_roles'),
        ),
        sa.PrimaryKeyConstraint('id', name=op.f('pk_tickets')),
    )
    for column in ('status', 'priority', 'creator_id', 'assignee_id', 'role_id', 'created_at'):
        op.create_index(op.f(f'ix_tickets_{column}'), 'tickets', [column], unique=False)

    op.create_table(
        'report_tickets',
        _id_column(),
        sa.Column('report_id', sa.String(length=20), nullable=False),
        sa.Column('ticket_id', sa.String(length=20), nullable=False),
        sa.ForeignKeyConstraint(
            ['report_id'], ['reports.id'], ondelete='CASCADE',
            name=op.f('fk_report_tickets_report_id_reports'),
        ),
        sa.ForeignKeyConstraint(
            ['ticket_id'], ['tickets.id'], ondelete='CASCADE',
            name=op.f('fk_report_tickets_ticket_id_tickets'),
        ),
        sa.PrimaryKeyConstraint('id', name=op.f('pk_report_tickets')),
        sa.UniqueConstraint('report_id', 'ticket_id', name='uq_report_tickets_report_ticket'),
    )
    op.create_index(op.f('ix_report_tickets_report_id'), 'report_tickets', ['report_id'], unique=False)
    op.create_index(op.f('ix_report_tickets_ticket_id'), 'report_tickets', ['ticket_id'], unique=False)

    op.create_table(
        'ticket_reviews',
        _id_column(),
        sa.Column('ticket_id', sa.String(length=20), nullable=False),
        sa.Column('creator_id', postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column('content', sa.Text(), nullable=False),
        *_timestamps(),
        sa.ForeignKeyConstraint(
            ['ticket_id'], ['tickets.id'], ondelete='CASCADE',
            name=op.f('fk_ticket_reviews_ticket_id_tickets'),
        ),
        sa.ForeignKeyConstraint(['creator_id'], ['users.id'], name=op.f('fk_ticket_reviews_creator_id_users')),
        sa.PrimaryKeyConstraint('id', name=op.f('pk_ticket_reviews')),
    )
    op.create_index(op.f('ix_ticket_reviews_ticket_id'), 'ticket_reviews', ['ticket_id'], unique=False)
    op.create_index(op.f('ix_ticket_reviews_created_at'), 'ticket_reviews', ['created_at'], unique=False)

    # =========================================================================
    # STEP 5: Collaboration
    # =========================================================================
    op.create_table(
        'comments',
        _id_column(),
        sa.Column('content', sa.Text(), nullable=False),
        sa.Column('user_id', postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column('report_id', sa.String(length=20), nullable=True),
        sa.Column('ticket_id', sa.String(length=20), nullable=True),
        *_timestamps(),
        sa.ForeignKeyConstraint(['user_id'], ['users.id'], name=op.f('fk_comments_user_id_users')),
        sa.ForeignKeyConstraint(
            ['report_id'], ['reports.id'], ondelete='CASCADE', name=op.f('fk_comments_report_id_reports'),
        ),
        sa.ForeignKeyConstraint(
            ['ticket_id'], ['tickets.id'], ondelete='CASCADE', name=op.f('fk_comments_ticket_id_tickets'),
        ),
        sa.CheckConstraint(
            '(report_id IS NULL) <> (ticket_id IS NULL)', name=op.f('ck_comments_single_parent'),
        ),
        sa.PrimaryKeyConstraint('id', name=op.f('pk_comments')),
    )
    for column in ('user_id', 'report_id', 'ticket_id', 'created_at'):
        op.create_index(op.f(f'ix_comments_{column}'), 'comments', [column], unique=False)

    op.create_table(
        'attachments',
        _id_column(),
        sa.Column('filename', sa.String(length=255), nullable=False),
        sa.Column('url', sa.String(length=1024), nullable=False),
        sa.Column('file_type', sa.String(length=100), nullable=True),
        sa.Column('file_size', sa.Integer(), nullable=True),
        sa.Column('parent_id', sa.String(length=50), nullable=False),
        sa.Column('parent_type', attachment_parent_type_enum, nullable=False),
        sa.Column('created_by_id', postgresql.UUID(as_uuid=True), nullable=True),
        *_timestamps(),
        sa.ForeignKeyConstraint(
            ['created_by_id'], ['users.id'], ondelete='SET NULL',
            name=op.f('fk_attachments_created_by_id_users'),
        ),
        sa.PrimaryKeyConstraint('id', name=op.f('pk_attachments')),
    )
    op.create_index('ix_attachments_parent', 'attachments', ['parent_type', 'parent_id'], unique=False)
    op.create_index(op.f('ix_attachments_created_at'), 'attachments', ['created_at'], unique=False)

    op.create_table(
        'activity_logs',
        _id_column(),
        sa.Column('content', sa.Text(), nullable=False),
        sa.Column('user_id', postgresql.UUID(as_uuid=True), nullable=True),
        sa.Column('parent_id', sa.String(length=50), nullable=False),
        sa.Column('parent_type', parent_type_enum, nullable=False),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
        sa.ForeignKeyConstraint(
            ['user_id'], ['users.id'], ondelete='SET NULL', name=op.f('fk_activity_logs_user_id_users'),
        ),
        sa.PrimaryKeyConstraint('id', name=op.f('pk_activity_logs')),
    )
    op.create_index(
        'ix_activity_logs_parent', 'activity_logs', ['parent_type', 'parent_id', 'created_at'], unique=False,
    )

    op.create_table(
        'notifications',
        _id_column(),
        sa.Column('user_id', postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column('title', sa.String(length=255), nullable=False),
        sa.Column('message', sa.Text(), nullable=False),
        sa.Column('is_read', sa.Boolean(), nullable=False, server_default=sa.text('FALSE')),
        sa.Column('related_id', sa.String(length=50), nullable=True),
        sa.Column('related_type', parent_type_enum, nullable=True),
        *_timestamps(),
        sa.ForeignKeyConstraint(
            ['user_id'], ['users.id'], ondelete='CASCADE', name=op.f('fk_notifications_user_id_users'),
        ),
        sa.PrimaryKeyConstraint('id', name=op.f('pk_notifications')),
    )
    op.create_index(op.f('ix_notifications_related_id'), 'notifications', ['related_id'], unique=False)
    op.create_index(op.f('ix_notifications_created_at'), 'notifications', ['created_at'], unique=False)
    op.create_index('ix_notifications_user_created', 'notifications', ['user_id', 'created_at'], unique=False)

    op.create_table(
        'saved_views',
        _id_column(),
        sa.Column('user_id', postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column('name', sa.String(length=100), nullable=False),
        sa.Column('view_type', saved_view_type_enum, nullable=False),
        sa.Column(
            'filters', postgresql.JSONB(astext_type=sa.Text()), nullable=False,
            server_default=sa.text("'{}'::jsonb"),
        ),
        sa.Column('is_default', sa.Boolean(), nullable=False, server_default=sa.text('FALSE')),
        *_timestamps(),
        sa.ForeignKeyConstraint(
            ['user_id'], ['users.id'], ondelete='CASCADE', name=op.f('fk_saved_views_user_id_users'),
        ),
        sa.PrimaryKeyConstraint('id', name=op.f('pk_saved_views')),
        sa.UniqueConstraint('user_id', 'name', 'view_type', name='uq_saved_views_user_name_type'),
    )
    op.create_index(op.f('ix_saved_views_user_id'), 'saved_views', ['user_id'], unique=False)
    op.create_index(op.f('ix_saved_views_created_at'), 'saved_views', ['created_at'], unique=False)
    # At most one default view per (user, view type)
    op.create_index(
        'uq_saved_views_default_per_type',
        'saved_views',
        ['user_id', 'view_type'],
        unique=True,
        postgresql_where=sa.text('is_default'),
    )


def downgrade() -> None:
    """
    Downgrade schema.

    Drops every table in reverse dependency order, then the enum types.
    """
    for table in (
        'saved_views',
        'notifications',
        'activity_logs',
        'attachments',
        'comments',
        'ticket_reviews',
        'report_tickets',
        'tickets',
        'reports',
        'id_sequences',
        'locations',
        'categories',
        'audit_logs',
        'user_roles',
        'users',
        'role_permissions',
        'roles',
        'permissions',
    ):
        op.drop_table(table)

    bind = op.get_bind()
    for enum_type in reversed(ALL_ENUMS):
        enum_type.drop(bind, checkfirst=True)
