"""
User, Role, Permission and their link tables.

This module defines:
- User: account with credentials and profile information
- Role: named bundle of permissions
- Permission: one capability from the permission catalog
- RolePermission: grants a Permission to a Role
- UserRole: assigns a Role to a User, flagging exactly one as primary

Architecture:
- A user's effective permissions are the union over every role it holds
- User.role is a deprecated mirror of the primary role name kept for old
  clients; authorization never reads it
"""

import uuid
from datetime import datetime
from typing import Optional

from sqlalchemy import Boolean, DateTime, ForeignKey, String, UniqueConstraint
from sqlalchemy.dialects.postgresql import UUID
from sqlalchemy.orm import Mapped, mapped_column, relationship

from src.models.base import Base
from src.models.mixins import SoftDeleteMixin, TimestampMixin


# =============================================================================
# Permission Model
# =============================================================================


class Permission(Base, TimestampMixin):
    """
    A named capability, e.g. ``view_tickets``.

    Rows mirror the static catalog in core.permissions and are seeded by the
    ``seed-permissions`` CLI command.
    """

    __tablename__ = "permissions"

    name: Mapped[str] = mapped_column(String(64), nullable=False, unique=True, index=True)
    description: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)

    def __repr__(self) -> str:
        return f"Permission(name={self.name})"


# =============================================================================
# Role Model
# =============================================================================


class Role(Base, TimestampMixin):
    """
    Named permission group assignable to users.

    Attributes:
        name: Unique upper-case role name (e.g. "ADMIN", "STAFF")
        description: Free text shown in the admin UI
        role_permissions: Grants held by this role
    """

    __tablename__ = "roles"

    name: Mapped[str] = mapped_column(String(50), nullable=False, unique=True, index=True)
    description: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)

    role_permissions: Mapped[list["RolePermission"]] = relationship(
        "RolePermission",
        back_populates="role",
        cascade="all, delete-orphan",
        lazy="selectin",
    )

    @property
    def permission_names(self) -> set[str]:
        """Names of every permission granted by this role."""
        return {rp.permission.name for rp in self.role_permissions}

    def __repr__(self) -> str:
        return f"Role(id={self.id}, name={self.name})"


class RolePermission(Base):
    """Grant of one permission to one role. Unique per pair."""

    __tablename__ = "role_permissions"

    role_id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True),
        ForeignKey("roles.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    permission_id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True),
        ForeignKey("permissions.id", ondelete="CASCADE"),
        nullable=False,
    )

    role: Mapped["Role"] = relationship("Role", back_populates="role_permissions")
    permission: Mapped["Permission"] = relationship("Permission", lazy="joined")

    __table_args__ = (
        UniqueConstraint("role_id", "permission_id", name="uq_role_permissions_role_permission"),
    )


# =============================================================================
# User Model
# =============================================================================


class User(Base, TimestampMixin, SoftDeleteMixin):
    """
    User model for authentication and profile management.

    Attributes:
        id: UUID primary key
        email: Unique email address (suffixed on soft delete so it can be reused)
        name: Display name
        password_hash: Argon2id hash, NULL for single sign-on accounts
        role: Deprecated mirror of the primary role name
        last_login_at: Timestamp of last successful login
        user_roles: Role links, exactly one flagged primary
    """

    __tablename__ = "users"

    email: Mapped[str] = mapped_column(
        String(255),
        nullable=False,
        unique=True,
        index=True,
    )

    name: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)

    password_hash: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)

    # Deprecated: written by PermissionService.replace_user_roles, never read
    # for authorization decisions
    role: Mapped[Optional[str]] = mapped_column(String(50), nullable=True)

    last_login_at: Mapped[Optional[datetime]] = mapped_column(
        DateTime(timezone=True),
        nullable=True,
    )

    user_roles: Mapped[list["UserRole"]] = relationship(
        "UserRole",
        back_populates="user",
        cascade="all, delete-orphan",
        lazy="selectin",
    )

    @property
    def primary_role(self) -> Optional["Role"]:
        for link in self.user_roles:
            if link.is_primary:
                return link.role
        return None

    @property
    def primary_role_name(self) -> str | None:
        role = self.primary_role
        return role.name if role else None

    @property
    def additional_role_names(self) -> list[str]:
        return sorted(link.role.name for link in self.user_roles if not link.is_primary)

    @property
    def role_ids(self) -> list[uuid.UUID]:
        return [link.role_id for link in self.user_roles]

    def __repr__(self) -> str:
        return f"User(id={self.id}, email={self.email})"


class UserRole(Base):
    """
    Assignment of a role to a user.

    Invariant: exactly one row per user has ``is_primary = True``. There is no
    database constraint for it; PermissionService.replace_user_roles rewrites
    the whole set in one transaction.
    """

    __tablename__ = "user_roles"

    user_id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True),
        ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    role_id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True),
        ForeignKey("roles.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    is_primary: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)

    user: Mapped["User"] = relationship("User", back_populates="user_roles")
    role: Mapped["Role"] = relationship("Role", lazy="joined")

    __table_args__ = (
        UniqueConstraint("user_id", "role_id", name="uq_user_roles_user_role"),
    )
