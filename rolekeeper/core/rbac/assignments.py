"""User-role assignment manager."""

from typing import Iterable, List, Optional

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session, joinedload, sessionmaker

from rolekeeper.common.logger import get_logger
from rolekeeper.db.models import Role, UserRoleAssignment

from .base import RBACService
from .bindings import diff_permission_sets
from .directory import UserDirectory
from .errors import NotFoundError
from .result import OperationResult
from .schemas import UserRoleRead, UserRolesOutcome

logger = get_logger(__name__)


class UserRoleAssignmentManager(RBACService):
    """Grants and revokes roles for users of the identity store."""

    def __init__(self, session_factory: sessionmaker, user_directory: UserDirectory):
        super().__init__(session_factory)
        self.user_directory = user_directory

    def assign_role_to_user(
        self,
        user_id: str,
        role_id: int,
        *,
        assigned_by: Optional[str] = None,
    ) -> OperationResult[UserRoleRead]:
        """Assign a role; an existing assignment is returned unchanged.

        The insert runs in a savepoint. If a concurrent caller stored the
        same pair first, the unique constraint fires and the winner's row is
        returned instead of a failure.
        """
        def work(db: Session):
            self._ensure_user(user_id)
            self._get_role(db, role_id)

            existing = self._find_assignment(db, user_id, role_id)
            if existing is not None:
                return OperationResult.ok(
                    "User already has this role.",
                    UserRoleRead.model_validate(existing),
                )

            assignment = UserRoleAssignment(
                user_id=user_id,
                role_id=role_id,
                assigned_by=assigned_by,
            )
            try:
                with db.begin_nested():
                    db.add(assignment)
                    db.flush()
            except IntegrityError:
                existing = self._find_assignment(db, user_id, role_id)
                if existing is None:
                    raise
                logger.info(f"Role {role_id} was assigned to user {user_id} concurrently")
                return OperationResult.ok(
                    "User already has this role.",
                    UserRoleRead.model_validate(existing),
                )

            logger.info(f"Assigned role {role_id} to user {user_id}")
            return OperationResult.ok(
                "Role assigned to user successfully.",
                UserRoleRead.model_validate(assignment),
            )

        return self._execute("assign_role_to_user", work)

    def remove_role_from_user(self, user_id: str, role_id: int) -> OperationResult[None]:
        def work(db: Session):
            assignment = self._find_assignment(db, user_id, role_id)
            if assignment is None:
                raise NotFoundError("Role assignment", "User does not have this role.")

            db.delete(assignment)
            db.flush()

            logger.info(f"Removed role {role_id} from user {user_id}")
            return OperationResult.ok("Role removed from user successfully.")

        return self._execute("remove_role_from_user", work)

    def update_user_roles(
        self,
        user_id: str,
        role_ids: Iterable[int],
        *,
        assigned_by: Optional[str] = None,
    ) -> OperationResult[UserRolesOutcome]:
        """
        Make the user's assigned role ids equal ``role_ids``.

        Assignments outside the desired set are deleted, missing ones are
        inserted, and assignments in both sets keep their rows. Role ids that
        name no role are skipped and listed in ``UserRolesOutcome.skipped``.
        """
        desired = list(role_ids or [])

        def work(db: Session):
            self._ensure_user(user_id)

            assignments = (
                db.query(UserRoleAssignment)
                .filter(UserRoleAssignment.user_id == user_id)
                .all()
            )
            by_role = {a.role_id: a for a in assignments}

            to_remove, to_add, unchanged = diff_permission_sets(by_role, desired)

            existing_ids = set()
            if to_add:
                existing_ids = {rid for (rid,) in db.query(Role.id).filter(Role.id.in_(to_add))}
            added = [rid for rid in to_add if rid in existing_ids]
            skipped = [rid for rid in to_add if rid not in existing_ids]

            for rid in to_remove:
                db.delete(by_role[rid])
            for rid in added:
                db.add(UserRoleAssignment(user_id=user_id, role_id=rid, assigned_by=assigned_by))
            db.flush()

            outcome = UserRolesOutcome(
                user_id=user_id,
                added=added,
                removed=to_remove,
                unchanged=unchanged,
                skipped=skipped,
            )
            if outcome.changed:
                logger.info(
                    f"User {user_id}: reconciled roles "
                    f"(+{len(added)} -{len(to_remove)} ={len(unchanged)})"
                )
            if skipped:
                logger.warning(f"User {user_id}: skipped unknown role ids {skipped}")

            return OperationResult.ok("User roles updated successfully.", outcome)

        return self._execute("update_user_roles", work)

    def get_user_roles(self, user_id: str) -> OperationResult[List[UserRoleRead]]:
        """Every assignment held by the user, with role detail attached."""
        def work(db: Session):
            self._ensure_user(user_id)

            assignments = (
                db.query(UserRoleAssignment)
                .options(joinedload(UserRoleAssignment.role))
                .filter(UserRoleAssignment.user_id == user_id)
                .order_by(UserRoleAssignment.assigned_date, UserRoleAssignment.id)
                .all()
            )
            return OperationResult.ok(
                "User roles retrieved successfully.",
                [UserRoleRead.model_validate(a) for a in assignments],
            )

        return self._execute("get_user_roles", work)

    def _ensure_user(self, user_id: str) -> None:
        if not self.user_directory.user_exists(user_id):
            raise NotFoundError("User")

    @staticmethod
    def _find_assignment(db: Session, user_id: str, role_id: int) -> Optional[UserRoleAssignment]:
        return db.query(UserRoleAssignment).filter(
            UserRoleAssignment.user_id == user_id,
            UserRoleAssignment.role_id == role_id,
        ).first()
