"""Database models for rolekeeper."""

from rolekeeper.db.models.permission import Permission
from rolekeeper.db.models.role import Role
from rolekeeper.db.models.role_permission import RolePermission
from rolekeeper.db.models.user_role import UserRoleAssignment
from rolekeeper.db.models.user import User

__all__ = [
    "Permission",
    "Role",
    "RolePermission",
    "UserRoleAssignment",
    "User",
]
