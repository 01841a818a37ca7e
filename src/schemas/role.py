"""
Role and permission Pydantic schemas.
"""

import uuid

from pydantic import Field

from src.schemas.common import CamelModel


class PermissionResponse(CamelModel):
    id: uuid.UUID
    name: str
    description: str | None = None


class RoleResponse(CamelModel):
    """Role with the names of the permissions it grants."""

    id: uuid.UUID
    name: str
    description: str | None = None
    permissions: list[str] = Field(default_factory=list)

    @classmethod
    def from_role(cls, role) -> "RoleResponse":
        return cls(
            id=role.id,
            name=role.name,
            description=role.description,
            permissions=sorted(role.permission_names),
        )


class RoleCreate(CamelModel):
    name: str = Field(min_length=1, max_length=50)
    description: str | None = Field(default=None, max_length=255)
    permissions: list[str] = Field(default_factory=list)


class RoleUpdate(CamelModel):
    """Partial role update; ``permissions`` replaces the full set when sent."""

    description: str | None = Field(default=None, max_length=255)
    permissions: list[str] | None = None


class RolePermissionsUpdate(CamelModel):
    permissions: list[str] = Field(description="Complete permission set of the role")
