"""Role catalog: role definitions, preset protection and cloning."""

from typing import List, Optional

from sqlalchemy.orm import Session, selectinload

from rolekeeper.common.logger import get_logger
from rolekeeper.db.models import Role, RolePermission, UserRoleAssignment

from .base import RBACService
from .errors import (
    DuplicateKeyError,
    InvalidInputError,
    NotFoundError,
    PolicyReason,
    PolicyViolationError,
)
from .result import OperationResult
from .schemas import RoleCreate, RoleRead, RoleUpdate, RoleWithPermissions

logger = get_logger(__name__)


class RoleCatalog(RBACService):
    """
    Manages role definitions.

    Preset roles:
    - can never be deleted, whether or not anyone holds them
    - can never be converted back to custom roles
    Custom roles cannot be deleted while any user holds them.
    """

    def get_all_roles(self) -> OperationResult[List[RoleRead]]:
        def work(db: Session):
            roles = db.query(Role).order_by(Role.display_order, Role.name).all()
            return OperationResult.ok(
                "Roles retrieved successfully.",
                [RoleRead.model_validate(r) for r in roles],
            )

        return self._execute("get_all_roles", work)

    def get_role_by_id(self, role_id: int) -> OperationResult[RoleRead]:
        def work(db: Session):
            role = self._get_role(db, role_id)
            return OperationResult.ok("Role retrieved successfully.", RoleRead.model_validate(role))

        return self._execute("get_role_by_id", work)

    def get_role_with_permissions(self, role_id: int) -> OperationResult[RoleWithPermissions]:
        def work(db: Session):
            role = (
                db.query(Role)
                .options(
                    selectinload(Role.permission_bindings).joinedload(RolePermission.permission)
                )
                .filter(Role.id == role_id)
                .first()
            )
            if role is None:
                raise NotFoundError("Role")
            return OperationResult.ok(
                "Role with permissions retrieved successfully.",
                RoleWithPermissions.model_validate(role),
            )

        return self._execute("get_role_with_permissions", work)

    def create_role(self, data: RoleCreate) -> OperationResult[RoleRead]:
        def work(db: Session):
            self._ensure_name_free(db, data.name)

            role = Role(**data.model_dump())
            db.add(role)
            db.flush()

            logger.info(f"Created role '{role.name}' (id={role.id}, preset={role.is_preset})")
            return OperationResult.ok("Role created successfully.", RoleRead.model_validate(role))

        return self._execute("create_role", work)

    def update_role(self, role_id: int, data: RoleUpdate) -> OperationResult[RoleRead]:
        def work(db: Session):
            role = self._get_role(db, role_id, lock=True)
            self._ensure_name_free(db, data.name, exclude_id=role_id)

            if role.is_preset and data.is_preset is False:
                raise PolicyViolationError(
                    PolicyReason.PRESET_DOWNGRADE,
                    "Cannot change a preset role to a custom role.",
                )

            role.name = data.name
            role.description = data.description
            role.is_active = data.is_active
            self._touch_role(role, data.updated_by)
            db.flush()

            logger.info(f"Updated role '{role.name}' (id={role_id})")
            return OperationResult.ok("Role updated successfully.", RoleRead.model_validate(role))

        return self._execute("update_role", work)

    def delete_role(self, role_id: int) -> OperationResult[None]:
        """Delete a custom role and its permission bindings atomically."""
        def work(db: Session):
            role = self._get_role(db, role_id, lock=True)

            if role.is_preset:
                raise PolicyViolationError(PolicyReason.PRESET, "Cannot delete a preset role.")

            holders = (
                db.query(UserRoleAssignment)
                .filter(UserRoleAssignment.role_id == role_id)
                .count()
            )
            if holders:
                raise PolicyViolationError(
                    PolicyReason.IN_USE,
                    "Cannot delete a role that is assigned to users.",
                )

            db.query(RolePermission).filter(
                RolePermission.role_id == role_id
            ).delete(synchronize_session="fetch")
            db.delete(role)
            db.flush()

            logger.info(f"Deleted role '{role.name}' (id={role_id})")
            return OperationResult.ok("Role deleted successfully.")

        return self._execute("delete_role", work)

    def clone_role(
        self,
        source_role_id: int,
        new_role_name: str,
        *,
        created_by: Optional[str] = None,
    ) -> OperationResult[RoleRead]:
        """
        Create a custom copy of a role and its permission bindings.

        The clone is never preset, even when the source is. Each binding is
        copied into a new row with the same active flag, so later edits to
        either role never reach the other.
        """
        def work(db: Session):
            source = (
                db.query(Role)
                .options(selectinload(Role.permission_bindings))
                .filter(Role.id == source_role_id)
                .first()
            )
            if source is None:
                raise NotFoundError("Role", "Source role not found.")

            name = (new_role_name or "").strip()
            if not name:
                raise InvalidInputError("New role name must not be empty.")
            self._ensure_name_free(
                db, name, message="A role with the new name already exists."
            )

            clone = Role(
                name=name,
                description=f"Clone of {source.name}",
                is_preset=False,
                is_active=source.is_active,
                display_order=source.display_order,
                created_by=created_by if created_by is not None else source.created_by,
            )
            db.add(clone)
            db.flush()

            for binding in source.permission_bindings:
                db.add(RolePermission(
                    role_id=clone.id,
                    permission_id=binding.permission_id,
                    is_active=binding.is_active,
                    created_by=clone.created_by,
                ))
            db.flush()

            logger.info(
                f"Cloned role '{source.name}' into '{clone.name}' "
                f"({len(source.permission_bindings)} binding(s))"
            )
            return OperationResult.ok("Role cloned successfully.", RoleRead.model_validate(clone))

        return self._execute("clone_role", work)

    @staticmethod
    def _ensure_name_free(
        db: Session,
        name: str,
        *,
        exclude_id: Optional[int] = None,
        message: Optional[str] = None,
    ) -> None:
        query = db.query(Role.id).filter(Role.name == name)
        if exclude_id is not None:
            query = query.filter(Role.id != exclude_id)
        if query.first() is not None:
            if message is None:
                message = (
                    "Another role with this name already exists."
                    if exclude_id is not None
                    else "A role with this name already exists."
                )
            raise DuplicateKeyError("name", name, message)
