"""Shared service plumbing: unit-of-work boundary and per-role locking."""

from datetime import datetime, timezone
from typing import Callable, Optional, TypeVar

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.orm.exc import StaleDataError

from rolekeeper.common.logger import get_logger
from rolekeeper.db.models import Role
from rolekeeper.db.unit_of_work import UnitOfWork

from .errors import ErrorKind, NotFoundError, RBACError
from .result import OperationResult

logger = get_logger(__name__)

T = TypeVar("T")


class RBACService:
    """
    Base for the RBAC components.

    Every public operation runs through ``_execute``, which:
    - opens a fresh unit of work
    - commits on success, rolls back on any failure
    - converts expected ``RBACError``s into failed results
    - converts concurrency faults and anything else into generic failures
    """

    def __init__(self, session_factory: sessionmaker):
        self.session_factory = session_factory

    def _execute(
        self,
        operation: str,
        work: Callable[[Session], OperationResult[T]],
    ) -> OperationResult[T]:
        try:
            with UnitOfWork(self.session_factory) as uow:
                return work(uow.session)
        except RBACError as exc:
            logger.info(f"{operation} rejected: {exc.message}")
            return OperationResult.from_error(exc)
        except (StaleDataError, IntegrityError) as exc:
            logger.warning(f"{operation} lost a concurrent update: {exc}")
            return OperationResult.fail(
                "The data was modified concurrently. Please retry.",
                error=ErrorKind.CONFLICT,
            )
        except Exception:
            logger.exception(f"Unexpected error during {operation}")
            return OperationResult.fail(
                f"An unexpected error occurred during {operation}.",
                error=ErrorKind.UNEXPECTED,
            )

    @staticmethod
    def _get_role(db: Session, role_id: int, *, lock: bool = False) -> Role:
        """Load a role or raise NotFoundError.

        With ``lock`` the row is selected FOR UPDATE, serializing writers to
        the role's permission set on backends that support row locks.
        """
        query = db.query(Role).filter(Role.id == role_id)
        if lock:
            query = query.with_for_update()
        role = query.first()
        if role is None:
            raise NotFoundError("Role")
        return role

    @staticmethod
    def _touch_role(role: Role, updated_by: Optional[str] = None) -> None:
        """Mark the role modified so its version token is bumped on flush."""
        role.updated_at = datetime.now(timezone.utc)
        if updated_by is not None:
            role.updated_by = updated_by
