"""Input and read schemas for RBAC operations.

Read schemas are built from ORM rows (``from_attributes``) before the unit
of work closes, so results never hold live session objects.
"""

from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field


class _Input(BaseModel):
    model_config = ConfigDict(str_strip_whitespace=True)


class _Read(BaseModel):
    model_config = ConfigDict(from_attributes=True)


# Permissions
class PermissionBase(_Input):
    name: str = Field(..., min_length=1, max_length=100)
    description: str = Field("", max_length=250)
    category: str = Field(..., min_length=1, max_length=50)
    system_name: str = Field(..., min_length=1, max_length=100)
    is_active: bool = True

class PermissionCreate(PermissionBase):
    display_order: int = 0
    created_by: Optional[str] = Field(None, max_length=100)

class PermissionUpdate(PermissionBase):
    display_order: Optional[int] = None

class PermissionRead(_Read):
    id: int
    name: str
    description: str
    category: str
    system_name: str
    display_order: int
    is_active: bool
    created_at: Optional[datetime] = None
    created_by: Optional[str] = None


# Roles
class RoleCreate(_Input):
    name: str = Field(..., min_length=1, max_length=100)
    description: str = Field("", max_length=250)
    is_preset: bool = False
    is_active: bool = True
    display_order: int = 0
    created_by: Optional[str] = Field(None, max_length=100)

class RoleUpdate(_Input):
    name: str = Field(..., min_length=1, max_length=100)
    description: str = Field("", max_length=250)
    is_active: bool = True
    is_preset: Optional[bool] = None  # Only False is meaningful, and rejected for presets
    updated_by: Optional[str] = Field(None, max_length=100)

class RoleRead(_Read):
    id: int
    name: str
    description: str
    is_preset: bool
    is_active: bool
    display_order: int
    created_at: Optional[datetime] = None
    created_by: Optional[str] = None
    updated_at: Optional[datetime] = None
    updated_by: Optional[str] = None


# Associations
class RolePermissionRead(_Read):
    id: int
    role_id: int
    permission_id: int
    is_active: bool
    created_at: Optional[datetime] = None
    created_by: Optional[str] = None
    permission: Optional[PermissionRead] = None

class RoleWithPermissions(RoleRead):
    permission_bindings: List[RolePermissionRead] = Field(default_factory=list)

    @property
    def active_system_names(self) -> List[str]:
        return sorted(
            b.permission.system_name
            for b in self.permission_bindings
            if b.is_active and b.permission is not None and b.permission.is_active
        )

class ReconcileOutcome(BaseModel):
    """What ``reconcile`` changed, by permission id."""
    role_id: int
    added: List[int] = Field(default_factory=list)
    removed: List[int] = Field(default_factory=list)
    unchanged: List[int] = Field(default_factory=list)
    skipped: List[int] = Field(default_factory=list)  # Desired ids with no such permission

    @property
    def changed(self) -> bool:
        return bool(self.added or self.removed)


# User assignments
class UserRoleRead(_Read):
    id: int
    user_id: str
    role_id: int
    assigned_date: datetime
    assigned_by: Optional[str] = None
    role: Optional[RoleRead] = None

class UserRolesOutcome(BaseModel):
    """What ``update_user_roles`` changed, by role id."""
    user_id: str
    added: List[int] = Field(default_factory=list)
    removed: List[int] = Field(default_factory=list)
    unchanged: List[int] = Field(default_factory=list)
    skipped: List[int] = Field(default_factory=list)  # Desired ids with no such role

    @property
    def changed(self) -> bool:
        return bool(self.added or self.removed)
