"""Engine and session factory construction.

No module-level session exists: callers build one factory per process and
every logical operation opens its own ``UnitOfWork`` from it.
"""

from typing import Optional

from sqlalchemy import create_engine, event
from sqlalchemy.engine import Engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from rolekeeper.core.config import Settings, get_settings


def create_db_engine(database_url: str, *, echo: bool = False) -> Engine:
    """Create an engine, enabling foreign keys for SQLite.

    In-memory SQLite URLs share a single connection so every session sees
    the same database.
    """
    kwargs = {"echo": echo}
    if database_url.startswith("sqlite"):
        kwargs["connect_args"] = {"check_same_thread": False}
        if database_url in ("sqlite://", "sqlite:///:memory:"):
            kwargs["poolclass"] = StaticPool

    engine = create_engine(database_url, **kwargs)

    if engine.dialect.name == "sqlite":
        @event.listens_for(engine, "connect")
        def _enable_sqlite_foreign_keys(dbapi_connection, connection_record):
            cursor = dbapi_connection.cursor()
            cursor.execute("PRAGMA foreign_keys=ON")
            cursor.close()

    return engine


def create_session_factory(
    settings: Optional[Settings] = None,
    *,
    engine: Optional[Engine] = None,
) -> sessionmaker:
    """Build a ``sessionmaker`` bound to the configured database."""
    if engine is None:
        settings = settings or get_settings()
        engine = create_db_engine(settings.database_url, echo=settings.database_echo)
    return sessionmaker(autocommit=False, autoflush=False, bind=engine, expire_on_commit=False)
