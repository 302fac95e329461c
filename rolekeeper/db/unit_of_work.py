"""Transactional unit of work.

Wraps one session and one transaction. Leaving the ``with`` block normally
commits; leaving it through an exception rolls back and re-raises. The
session is always closed.

Usage::

    with UnitOfWork(session_factory) as uow:
        role = uow.session.get(Role, role_id)
        role.description = "Updated"
"""

from typing import Optional

from sqlalchemy.orm import Session, sessionmaker


class UnitOfWork:
    """One logical operation against the store."""

    def __init__(self, session_factory: sessionmaker):
        self._session_factory = session_factory
        self.session: Optional[Session] = None
        self._completed = False

    def __enter__(self) -> "UnitOfWork":
        self.session = self._session_factory()
        self._completed = False
        return self

    def __exit__(self, exc_type, exc_value, traceback) -> bool:
        try:
            if exc_type is None and not self._completed:
                self.commit()
            elif exc_type is not None:
                self.rollback()
        finally:
            self.session.close()
            self.session = None
        return False

    def flush(self) -> None:
        self.session.flush()

    def commit(self) -> None:
        self.session.commit()
        self._completed = True

    def rollback(self) -> None:
        self.session.rollback()
        self._completed = True
