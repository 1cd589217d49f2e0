"""initial schema

Revision ID: 2026_10_19_0000
Revises:
Create Date: 2026-10-19 08:00:00.000000

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects.postgresql import JSONB


# revision identifiers, used by Alembic.
revision: str = '2026_10_19_0000'
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def _id() -> sa.Column:
    return sa.Column(
        'id', sa.BigInteger().with_variant(sa.Integer(), 'sqlite'), primary_key=True, autoincrement=True
    )


def _fk(name: str, target: str, ondelete: str = 'CASCADE', nullable: bool = False) -> sa.Column:
    return sa.Column(
        name,
        sa.BigInteger().with_variant(sa.Integer(), 'sqlite'),
        sa.ForeignKey(target, ondelete=ondelete),
        nullable=nullable,
    )


def _json() -> sa.types.TypeEngine:
    return sa.JSON().with_variant(JSONB(), 'postgresql')


def _timestamps() -> list[sa.Column]:
    return [
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
        sa.Column('updated_at', sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
    ]


def upgrade() -> None:
    """Create initial database schema."""

    # ========================================================================
    # Create roles table
    # ========================================================================
    op.create_table(
        'roles',
        _id(),
        sa.Column('name', sa.String(255), nullable=False),
        sa.Column('slug', sa.String(255), nullable=False),
        sa.Column('description', sa.Text(), nullable=True),
        sa.Column('permissions', _json(), nullable=True),
        sa.Column('is_active', sa.Boolean(), nullable=False, server_default=sa.true()),
        *_timestamps(),
        sa.UniqueConstraint('slug', name='uq_roles_slug'),
    )
    op.create_index('idx_roles_is_active', 'roles', ['is_active'])

    # ========================================================================
    # Create users table
    # ========================================================================
    op.create_table(
        'users',
        _id(),
        sa.Column('name', sa.String(255), nullable=False),
        sa.Column('email', sa.String(255), nullable=False),
        sa.Column('password', sa.String(255), nullable=False),
        _fk('role_id', 'roles.id', ondelete='RESTRICT', nullable=True),
        sa.Column('is_active', sa.Boolean(), nullable=False, server_default=sa.true()),
        sa.Column('last_login_at', sa.DateTime(timezone=True), nullable=True),
        sa.Column('email_verified_at', sa.DateTime(timezone=True), nullable=True),
        *_timestamps(),
        sa.UniqueConstraint('email', name='uq_users_email'),
    )
    op.create_index('idx_users_role_id', 'users', ['role_id'])

    # ========================================================================
    # Create categories and tags tables
    # ========================================================================
    op.create_table(
        'categories',
        _id(),
        sa.Column('name', sa.String(255), nullable=False),
        sa.Column('slug', sa.String(255), nullable=False),
        sa.Column('description', sa.Text(), nullable=True),
        sa.Column('icon', sa.String(50), nullable=True),
        sa.Column('color', sa.String(20), nullable=True),
        sa.Column('is_active', sa.Boolean(), nullable=False, server_default=sa.true()),
        *_timestamps(),
        sa.UniqueConstraint('slug', name='uq_categories_slug'),
    )
    op.create_index('idx_categories_is_active', 'categories', ['is_active'])

    op.create_table(
        'tags',
        _id(),
        sa.Column('name', sa.String(255), nullable=False),
        sa.Column('slug', sa.String(255), nullable=False),
        sa.Column('description', sa.Text(), nullable=True),
        sa.Column('color', sa.String(20), nullable=True, server_default='#6B7280'),
        sa.Column('icon', sa.String(50), nullable=True, server_default='🏷️'),
        sa.Column('is_active', sa.Boolean(), nullable=False, server_default=sa.true()),
        *_timestamps(),
        sa.UniqueConstraint('slug', name='uq_tags_slug'),
    )
    op.create_index('idx_tags_is_active', 'tags', ['is_active'])

    # ========================================================================
    # Create ai_tools table
    # ========================================================================
    op.create_table(
        'ai_tools',
        _id(),
        _fk('user_id', 'users.id'),
        sa.Column('name', sa.String(255), nullable=False),
        sa.Column('slug', sa.String(255), nullable=False),
        sa.Column('description', sa.Text(), nullable=False),
        sa.Column('long_description', sa.Text(), nullable=True),
        sa.Column('category', sa.String(100), nullable=True),
        sa.Column('tool_type', sa.String(20), nullable=False),
        sa.Column('team', sa.String(100), nullable=True),
        sa.Column('tags', _json(), nullable=True),
        sa.Column('url', sa.String(500), nullable=True),
        sa.Column('api_endpoint', sa.String(500), nullable=True),
        sa.Column('documentation_url', sa.String(500), nullable=True),
        sa.Column('github_url', sa.String(500), nullable=True),
        sa.Column('author_name', sa.String(255), nullable=True),
        sa.Column('author_email', sa.String(255), nullable=True),
        sa.Column('use_case', sa.Text(), nullable=True),
        sa.Column('pros', sa.Text(), nullable=True),
        sa.Column('cons', sa.Text(), nullable=True),
        sa.Column('rating', sa.Integer(), nullable=True),
        sa.Column('icon', sa.String(50), nullable=True),
        sa.Column('color', sa.String(20), nullable=True),
        sa.Column('version', sa.String(20), nullable=False, server_default='1.0.0'),
        sa.Column('status', sa.String(20), nullable=False, server_default='active'),
        sa.Column('is_active', sa.Boolean(), nullable=False, server_default=sa.true()),
        sa.Column('requires_auth', sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column('api_key_required', sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column('usage_limit', sa.Integer(), nullable=True),
        sa.Column('metadata', _json(), nullable=True),
        *_timestamps(),

        # Constraints
        sa.CheckConstraint('rating IS NULL OR (rating >= 1 AND rating <= 5)', name='ck_rating_range'),
        sa.CheckConstraint("status IN ('active', 'inactive', 'maintenance', 'beta')", name='ck_tool_status'),
        sa.CheckConstraint('usage_limit IS NULL OR usage_limit >= 0', name='ck_usage_limit'),
        sa.UniqueConstraint('name', name='uq_ai_tools_name'),
        sa.UniqueConstraint('slug', name='uq_ai_tools_slug'),
    )

    # Indexes for ai_tools
    op.create_index('idx_ai_tools_is_active', 'ai_tools', ['is_active'])
    op.create_index('idx_ai_tools_category', 'ai_tools', ['category'])
    op.create_index('idx_ai_tools_team', 'ai_tools', ['team'])
    op.create_index('idx_ai_tools_user_id', 'ai_tools', ['user_id'])
    op.create_index('idx_ai_tools_created_at', 'ai_tools', ['created_at'])

    # ========================================================================
    # Create pivot tables
    # ========================================================================
    op.create_table(
        'ai_tool_category',
        _id(),
        _fk('ai_tool_id', 'ai_tools.id'),
        _fk('category_id', 'categories.id'),
        *_timestamps(),
        sa.UniqueConstraint('ai_tool_id', 'category_id', name='uq_ai_tool_category'),
    )

    op.create_table(
        'ai_tool_role',
        _id(),
        _fk('ai_tool_id', 'ai_tools.id'),
        _fk('role_id', 'roles.id'),
        sa.Column('access_level', sa.String(10), nullable=False, server_default='read'),
        sa.Column('custom_permissions', _json(), nullable=True),
        *_timestamps(),
        sa.CheckConstraint("access_level IN ('read', 'write', 'admin')", name='ck_access_level'),
        sa.UniqueConstraint('ai_tool_id', 'role_id', name='uq_ai_tool_role'),
    )

    op.create_table(
        'ai_tool_tag',
        _id(),
        _fk('ai_tool_id', 'ai_tools.id'),
        _fk('tag_id', 'tags.id'),
        *_timestamps(),
        sa.UniqueConstraint('ai_tool_id', 'tag_id', name='uq_ai_tool_tag'),
    )

    op.create_table(
        'category_role',
        _id(),
        _fk('category_id', 'categories.id'),
        _fk('role_id', 'roles.id'),
        *_timestamps(),
        sa.UniqueConstraint('category_id', 'role_id', name='uq_category_role'),
    )

    # ========================================================================
    # Create usage and favorites tables
    # ========================================================================
    op.create_table(
        'ai_tool_usages',
        _id(),
        _fk('user_id', 'users.id'),
        _fk('ai_tool_id', 'ai_tools.id'),
        sa.Column('usage_count', sa.Integer(), nullable=False, server_default='0'),
        sa.Column('last_used_at', sa.DateTime(timezone=True), nullable=True),
        sa.Column('metadata', _json(), nullable=True),
        *_timestamps(),
        sa.CheckConstraint('usage_count >= 0', name='ck_usage_count_non_negative'),
        sa.UniqueConstraint('user_id', 'ai_tool_id', name='uq_ai_tool_usages_user_tool'),
    )
    op.create_index('idx_ai_tool_usages_last_used_at', 'ai_tool_usages', ['last_used_at'])

    op.create_table(
        'user_favorites',
        _id(),
        _fk('user_id', 'users.id'),
        _fk('ai_tool_id', 'ai_tools.id'),
        *_timestamps(),
        sa.UniqueConstraint('user_id', 'ai_tool_id', name='uq_user_favorites_user_tool'),
    )


def downgrade() -> None:
    """Drop all tables."""
    op.drop_table('user_favorites')
    op.drop_index('idx_ai_tool_usages_last_used_at', table_name='ai_tool_usages')
    op.drop_table('ai_tool_usages')
    op.drop_table('category_role')
    op.drop_table('ai_tool_tag')
    op.drop_table('ai_tool_role')
    op.drop_table('ai_tool_category')
    op.drop_index('idx_ai_tools_created_at', table_name='ai_tools')
    op.drop_index('idx_ai_tools_user_id', table_name='ai_tools')
    op.drop_index('idx_ai_tools_team', table_name='ai_tools')
    op.drop_index('idx_ai_tools_category', table_name='ai_tools')
    op.drop_index('idx_ai_tools_is_active', table_name='ai_tools')
    op.drop_table('ai_tools')
    op.drop_index('idx_tags_is_active', table_name='tags')
    op.drop_table('tags')
    op.drop_index('idx_categories_is_active', table_name='categories')
    op.drop_table('categories')
    op.drop_index('idx_users_role_id', table_name='users')
    op.drop_table('users')
    op.drop_index('idx_roles_is_active', table_name='roles')
    op.drop_table('roles')
