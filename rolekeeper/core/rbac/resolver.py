"""Permission resolver: effective permissions of a user.

A permission is effective for a user when, for at least one of the user's
roles, the role binding is active and the permission definition is active.
Deactivating either side revokes access.

Both entry points fail closed: any error yields no access.
"""

from typing import List

from sqlalchemy.orm import Session, sessionmaker

from rolekeeper.common.logger import get_logger
from rolekeeper.db.models import Permission, RolePermission, UserRoleAssignment

logger = get_logger(__name__)


class PermissionResolver:
    """Stateless read-side composition over assignments, bindings and catalog."""

    def __init__(self, session_factory: sessionmaker):
        self.session_factory = session_factory

    def user_has_permission(self, user_id: str, system_name: str) -> bool:
        """Check whether ``user_id`` effectively holds ``system_name``."""
        try:
            session = self.session_factory()
            try:
                role_ids = self._user_role_ids(session, user_id)
                if not role_ids:
                    return False

                match = (
                    self._effective_query(session, role_ids)
                    .filter(Permission.system_name == system_name)
                    .first()
                )
                return match is not None
            finally:
                session.close()
        except Exception:
            logger.exception(
                f"Permission check failed for user {user_id} ({system_name}); denying"
            )
            return False

    def get_user_permissions(self, user_id: str) -> List[str]:
        """Sorted, de-duplicated system names effectively held by ``user_id``."""
        try:
            session = self.session_factory()
            try:
                role_ids = self._user_role_ids(session, user_id)
                if not role_ids:
                    return []

                rows = self._effective_query(session, role_ids).distinct().all()
                return sorted(name for (name,) in rows)
            finally:
                session.close()
        except Exception:
            logger.exception(f"Permission listing failed for user {user_id}; returning none")
            return []

    @staticmethod
    def _user_role_ids(session: Session, user_id: str) -> List[int]:
        return [
            role_id for (role_id,) in session.query(UserRoleAssignment.role_id)
            .filter(UserRoleAssignment.user_id == user_id)
        ]

    @staticmethod
    def _effective_query(session: Session, role_ids: List[int]):
        return (
            session.query(Permission.system_name)
            .join(RolePermission, RolePermission.permission_id == Permission.id)
            .filter(
                RolePermission.role_id.in_(role_ids),
                RolePermission.is_active.is_(True),
                Permission.is_active.is_(True),
            )
        )
