"""Shared pytest fixtures.

Every test gets its own SQLite database file so sessions opened by the
services (one per operation) and sessions opened by the fixtures see the
same committed data, exactly as separate requests would in production.
"""

import pytest

from rolekeeper.core.rbac import RBACEngine
from rolekeeper.db.base import Base
from rolekeeper.db.session import create_db_engine, create_session_factory

from tests import factories


@pytest.fixture
def db_engine(tmp_path):
    engine = create_db_engine(f"sqlite:///{tmp_path / 'rbac.db'}")
    Base.metadata.create_all(bind=engine)
    yield engine
    engine.dispose()


@pytest.fixture
def session_factory(db_engine):
    return create_session_factory(engine=db_engine)


@pytest.fixture
def db_session(session_factory):
    """A session for direct inspection of stored rows."""
    session = session_factory()
    try:
        yield session
    finally:
        session.rollback()
        session.close()


@pytest.fixture
def rbac(session_factory):
    return RBACEngine(session_factory)


def _committing(session_factory, factory):
    """Wrap a factory so each call runs in its own committed session."""
    def create(*args, **kwargs):
        session = session_factory()
        try:
            obj = factory(session, *args, **kwargs)
            session.commit()
            return obj
        finally:
            session.close()
    return create


@pytest.fixture
def permission_factory(session_factory):
    return _committing(session_factory, factories.create_permission)


@pytest.fixture
def role_factory(session_factory):
    return _committing(session_factory, factories.create_role)


@pytest.fixture
def user_factory(session_factory):
    return _committing(session_factory, factories.create_user)


@pytest.fixture
def binding_factory(session_factory):
    return _committing(session_factory, factories.bind_permission)


@pytest.fixture
def assignment_factory(session_factory):
    return _committing(session_factory, factories.assign_role)
