"""User directory: the delegated identity-store existence check."""

from abc import ABC, abstractmethod

from sqlalchemy.orm import sessionmaker

from rolekeeper.db.models import User


class UserDirectory(ABC):
    """Answers whether a user identifier exists in the identity store."""

    @abstractmethod
    def user_exists(self, user_id: str) -> bool:
        """Return True if the identity store knows ``user_id``."""
        pass


class SqlUserDirectory(UserDirectory):
    """Directory backed by the ``users`` table."""

    def __init__(self, session_factory: sessionmaker):
        self.session_factory = session_factory

    def user_exists(self, user_id: str) -> bool:
        if not user_id:
            return False
        session = self.session_factory()
        try:
            return session.query(User.id).filter(User.id == user_id).first() is not None
        finally:
            session.close()
