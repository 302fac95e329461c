"""Permission catalog: owns permission definitions."""

from typing import List

from sqlalchemy.orm import Session

from rolekeeper.common.logger import get_logger
from rolekeeper.db.models import Permission, RolePermission

from .base import RBACService
from .errors import DuplicateKeyError, NotFoundError
from .result import OperationResult
from .schemas import PermissionCreate, PermissionRead, PermissionUpdate

logger = get_logger(__name__)


class PermissionCatalog(RBACService):
    """Create, update, delete and list permission definitions."""

    def get_all_permissions(self) -> OperationResult[List[PermissionRead]]:
        def work(db: Session):
            permissions = (
                db.query(Permission)
                .order_by(Permission.category, Permission.display_order, Permission.name)
                .all()
            )
            return OperationResult.ok(
                "Permissions retrieved successfully.",
                [PermissionRead.model_validate(p) for p in permissions],
            )

        return self._execute("get_all_permissions", work)

    def get_permission_by_id(self, permission_id: int) -> OperationResult[PermissionRead]:
        def work(db: Session):
            permission = db.get(Permission, permission_id)
            if permission is None:
                raise NotFoundError("Permission")
            return OperationResult.ok(
                "Permission retrieved successfully.",
                PermissionRead.model_validate(permission),
            )

        return self._execute("get_permission_by_id", work)

    def get_permissions_by_category(self, category: str) -> OperationResult[List[PermissionRead]]:
        def work(db: Session):
            permissions = (
                db.query(Permission)
                .filter(Permission.category == category)
                .order_by(Permission.display_order, Permission.name)
                .all()
            )
            return OperationResult.ok(
                "Permissions retrieved successfully.",
                [PermissionRead.model_validate(p) for p in permissions],
            )

        return self._execute("get_permissions_by_category", work)

    def create_permission(self, data: PermissionCreate) -> OperationResult[PermissionRead]:
        def work(db: Session):
            existing = db.query(Permission).filter(
                Permission.system_name == data.system_name
            ).first()
            if existing:
                raise DuplicateKeyError(
                    "system_name",
                    data.system_name,
                    "A permission with this system name already exists.",
                )

            permission = Permission(**data.model_dump())
            db.add(permission)
            db.flush()

            logger.info(f"Created permission '{permission.system_name}' (id={permission.id})")
            return OperationResult.ok(
                "Permission created successfully.",
                PermissionRead.model_validate(permission),
            )

        return self._execute("create_permission", work)

    def update_permission(
        self, permission_id: int, data: PermissionUpdate
    ) -> OperationResult[PermissionRead]:
        def work(db: Session):
            permission = db.get(Permission, permission_id)
            if permission is None:
                raise NotFoundError("Permission")

            clash = db.query(Permission).filter(
                Permission.system_name == data.system_name,
                Permission.id != permission_id,
            ).first()
            if clash:
                raise DuplicateKeyError(
                    "system_name",
                    data.system_name,
                    "Another permission with this system name already exists.",
                )

            if permission.system_name != data.system_name:
                # Checks resolve by system name, so a rename changes who passes them
                logger.warning(
                    f"Permission {permission_id} system name changed "
                    f"'{permission.system_name}' -> '{data.system_name}'"
                )

            permission.name = data.name
            permission.description = data.description
            permission.category = data.category
            permission.system_name = data.system_name
            permission.is_active = data.is_active
            if data.display_order is not None:
                permission.display_order = data.display_order
            db.flush()

            logger.info(f"Updated permission '{permission.system_name}' (id={permission_id})")
            return OperationResult.ok(
                "Permission updated successfully.",
                PermissionRead.model_validate(permission),
            )

        return self._execute("update_permission", work)

    def delete_permission(self, permission_id: int) -> OperationResult[None]:
        """Delete a permission and every role binding that references it.

        There is no in-use guard: roles holding the permission simply lose it.
        """
        def work(db: Session):
            permission = db.get(Permission, permission_id)
            if permission is None:
                raise NotFoundError("Permission")

            detached = (
                db.query(RolePermission)
                .filter(RolePermission.permission_id == permission_id)
                .delete(synchronize_session="fetch")
            )
            db.delete(permission)
            db.flush()

            if detached:
                logger.warning(
                    f"Deleted permission '{permission.system_name}' detached "
                    f"{detached} role binding(s)"
                )
            else:
                logger.info(f"Deleted permission '{permission.system_name}'")
            return OperationResult.ok("Permission deleted successfully.")

        return self._execute("delete_permission", work)
