"""Role-permission binder: the role↔permission association.

Every mutation locks the role row and bumps the role's version token, so
concurrent writers to one role's permission set are serialized: a writer
that lost the race fails on flush instead of interleaving with the winner.
"""

from typing import Iterable, List, Optional

from sqlalchemy.orm import Session

from rolekeeper.common.logger import get_logger
from rolekeeper.db.models import Permission, RolePermission

from .base import RBACService
from .errors import NotFoundError
from .result import OperationResult
from .schemas import ReconcileOutcome, RolePermissionRead

logger = get_logger(__name__)


def diff_permission_sets(current: Iterable[int], desired: Iterable[int]):
    """Split two id collections into (to_remove, to_add, unchanged).

    Each list keeps the order in which ids first appear in its source and
    holds no duplicates.
    """
    current_ids = list(dict.fromkeys(current))
    desired_ids = list(dict.fromkeys(desired))
    current_set = set(current_ids)
    desired_set = set(desired_ids)

    to_remove = [pid for pid in current_ids if pid not in desired_set]
    to_add = [pid for pid in desired_ids if pid not in current_set]
    unchanged = [pid for pid in current_ids if pid in desired_set]
    return to_remove, to_add, unchanged


class RolePermissionBinder(RBACService):
    """Assigns, removes, toggles and reconciles a role's permissions."""

    def assign(
        self,
        role_id: int,
        permission_id: int,
        *,
        assigned_by: Optional[str] = None,
    ) -> OperationResult[RolePermissionRead]:
        """
        Bind a permission to a role.

        - no binding: insert an active one
        - inactive binding: re-activate it
        - active binding: no-op, reported as already assigned
        """
        def work(db: Session):
            role = self._get_role(db, role_id, lock=True)
            self._get_permission(db, permission_id)

            binding = self._find_binding(db, role_id, permission_id)
            if binding is not None and binding.is_active:
                return OperationResult.ok(
                    "Permission already assigned to the role.",
                    RolePermissionRead.model_validate(binding),
                )

            if binding is not None:
                binding.is_active = True
                message = "Permission re-activated for the role."
            else:
                binding = RolePermission(
                    role_id=role_id,
                    permission_id=permission_id,
                    is_active=True,
                    created_by=assigned_by,
                )
                db.add(binding)
                message = "Permission assigned to role successfully."

            self._touch_role(role, assigned_by)
            db.flush()

            logger.info(f"Role {role_id}: permission {permission_id} assigned")
            return OperationResult.ok(message, RolePermissionRead.model_validate(binding))

        return self._execute("assign_permission", work)

    def remove(self, role_id: int, permission_id: int) -> OperationResult[None]:
        """Revoke a binding by deleting its row."""
        def work(db: Session):
            role = self._get_role(db, role_id, lock=True)
            binding = self._find_binding(db, role_id, permission_id)
            if binding is None:
                raise NotFoundError(
                    "Role permission", "Permission is not assigned to the role."
                )

            db.delete(binding)
            self._touch_role(role)
            db.flush()

            logger.info(f"Role {role_id}: permission {permission_id} removed")
            return OperationResult.ok("Permission removed from role successfully.")

        return self._execute("remove_permission", work)

    def set_active(
        self,
        role_id: int,
        permission_id: int,
        is_active: bool,
    ) -> OperationResult[RolePermissionRead]:
        """Suspend or resume an existing binding without removing it."""
        def work(db: Session):
            role = self._get_role(db, role_id, lock=True)
            binding = self._find_binding(db, role_id, permission_id)
            if binding is None:
                raise NotFoundError(
                    "Role permission", "Permission is not assigned to the role."
                )

            if binding.is_active != is_active:
                binding.is_active = is_active
                self._touch_role(role)
                db.flush()
                logger.info(
                    f"Role {role_id}: permission {permission_id} "
                    f"{'resumed' if is_active else 'suspended'}"
                )

            state = "active" if is_active else "inactive"
            return OperationResult.ok(
                f"Role permission is {state}.",
                RolePermissionRead.model_validate(binding),
            )

        return self._execute("set_permission_active", work)

    def reconcile(
        self,
        role_id: int,
        desired_permission_ids: Iterable[int],
        *,
        updated_by: Optional[str] = None,
    ) -> OperationResult[ReconcileOutcome]:
        """
        Make a role's bound permission ids equal ``desired_permission_ids``.

        Bindings outside the desired set are deleted, desired ids without a
        binding are inserted as active bindings, and bindings in both sets
        are left untouched. Desired ids that name no permission are skipped
        and listed in ``ReconcileOutcome.skipped``.
        """
        desired = list(desired_permission_ids or [])

        def work(db: Session):
            role = self._get_role(db, role_id, lock=True)

            bindings = db.query(RolePermission).filter(RolePermission.role_id == role_id).all()
            by_permission = {b.permission_id: b for b in bindings}

            to_remove, to_add, unchanged = diff_permission_sets(by_permission, desired)

            existing_ids = set()
            if to_add:
                existing_ids = {
                    pid for (pid,) in db.query(Permission.id).filter(Permission.id.in_(to_add))
                }
            added = [pid for pid in to_add if pid in existing_ids]
            skipped = [pid for pid in to_add if pid not in existing_ids]

            for pid in to_remove:
                db.delete(by_permission[pid])
            for pid in added:
                db.add(RolePermission(
                    role_id=role_id,
                    permission_id=pid,
                    is_active=True,
                    created_by=updated_by,
                ))

            outcome = ReconcileOutcome(
                role_id=role_id,
                added=added,
                removed=to_remove,
                unchanged=unchanged,
                skipped=skipped,
            )
            if outcome.changed:
                self._touch_role(role, updated_by)
                db.flush()
                logger.info(
                    f"Role {role_id}: reconciled permissions "
                    f"(+{len(added)} -{len(to_remove)} ={len(unchanged)})"
                )
            if skipped:
                logger.warning(f"Role {role_id}: skipped unknown permission ids {skipped}")

            return OperationResult.ok("Role permissions updated successfully.", outcome)

        return self._execute("reconcile_permissions", work)

    def get_role_permission_ids(self, role_id: int) -> OperationResult[List[int]]:
        """Ids of every permission bound to the role, active or not."""
        def work(db: Session):
            self._get_role(db, role_id)
            ids = [
                pid for (pid,) in db.query(RolePermission.permission_id)
                .filter(RolePermission.role_id == role_id)
                .order_by(RolePermission.permission_id)
            ]
            return OperationResult.ok("Role permissions retrieved successfully.", ids)

        return self._execute("get_role_permission_ids", work)

    @staticmethod
    def _get_permission(db: Session, permission_id: int) -> Permission:
        permission = db.get(Permission, permission_id)
        if permission is None:
            raise NotFoundError("Permission")
        return permission

    @staticmethod
    def _find_binding(db: Session, role_id: int, permission_id: int) -> Optional[RolePermission]:
        return db.query(RolePermission).filter(
            RolePermission.role_id == role_id,
            RolePermission.permission_id == permission_id,
        ).first()
