"""RBAC (Role-Based Access Control) engine for rolekeeper.

Permission catalog, role catalog, role-permission binder, user-role
assignment manager and the permission resolver built on top of them.
"""

from .assignments import UserRoleAssignmentManager
from .bindings import RolePermissionBinder, diff_permission_sets
from .directory import SqlUserDirectory, UserDirectory
from .engine import RBACEngine
from .errors import (
    DuplicateKeyError,
    ErrorKind,
    InvalidInputError,
    NotFoundError,
    PolicyReason,
    PolicyViolationError,
    RBACError,
)
from .permissions import PermissionCatalog
from .resolver import PermissionResolver
from .result import OperationResult
from .roles import RoleCatalog
from .schemas import (
    PermissionCreate,
    PermissionRead,
    PermissionUpdate,
    ReconcileOutcome,
    RoleCreate,
    RolePermissionRead,
    RoleRead,
    RoleUpdate,
    RoleWithPermissions,
    UserRoleRead,
    UserRolesOutcome,
)

__all__ = [
    "RBACEngine",
    "PermissionCatalog",
    "RoleCatalog",
    "RolePermissionBinder",
    "UserRoleAssignmentManager",
    "PermissionResolver",
    "UserDirectory",
    "SqlUserDirectory",
    "OperationResult",
    "ErrorKind",
    "PolicyReason",
    "RBACError",
    "NotFoundError",
    "DuplicateKeyError",
    "PolicyViolationError",
    "InvalidInputError",
    "PermissionCreate",
    "PermissionUpdate",
    "PermissionRead",
    "RoleCreate",
    "RoleUpdate",
    "RoleRead",
    "RoleWithPermissions",
    "RolePermissionRead",
    "ReconcileOutcome",
    "UserRoleRead",
    "UserRolesOutcome",
    "diff_permission_sets",
]
