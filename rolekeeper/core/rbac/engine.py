"""RBAC engine facade.

Wires the five components over one session factory and handles schema
creation and catalog seeding at startup.

Usage::

    engine = RBACEngine.from_settings()
    if engine.resolver.user_has_permission(user_id, "tenants.view"):
        ...
"""

from typing import Dict, Optional

from sqlalchemy.orm import sessionmaker

from rolekeeper.common.config import CatalogConfig, load_catalog
from rolekeeper.common.logger import get_logger, setup_logger
from rolekeeper.core.config import Settings, get_settings
from rolekeeper.db.base import Base
from rolekeeper.db.models import Role
from rolekeeper.db.seed import seed_catalog
from rolekeeper.db.session import create_session_factory
from rolekeeper.db.unit_of_work import UnitOfWork

from .assignments import UserRoleAssignmentManager
from .bindings import RolePermissionBinder
from .directory import SqlUserDirectory, UserDirectory
from .permissions import PermissionCatalog
from .presets import default_catalog
from .resolver import PermissionResolver
from .roles import RoleCatalog

logger = get_logger(__name__)


class RBACEngine:
    """Entry point bundling every RBAC component."""

    def __init__(
        self,
        session_factory: sessionmaker,
        user_directory: Optional[UserDirectory] = None,
    ):
        self.session_factory = session_factory
        self.user_directory = user_directory or SqlUserDirectory(session_factory)

        self.permissions = PermissionCatalog(session_factory)
        self.roles = RoleCatalog(session_factory)
        self.bindings = RolePermissionBinder(session_factory)
        self.assignments = UserRoleAssignmentManager(session_factory, self.user_directory)
        self.resolver = PermissionResolver(session_factory)

    @classmethod
    def from_settings(
        cls,
        settings: Optional[Settings] = None,
        *,
        user_directory: Optional[UserDirectory] = None,
    ) -> "RBACEngine":
        """Configure logging, connect, create tables and seed if enabled."""
        settings = settings or get_settings()
        setup_logger(
            level=settings.log_level,
            log_dir=settings.log_dir,
            file_logging=settings.log_to_file,
        )

        engine = cls(create_session_factory(settings), user_directory)
        engine.create_schema()

        if settings.seed_on_startup:
            catalog = load_catalog(settings.catalog_path) if settings.catalog_path else None
            engine.seed(catalog)

        logger.info(f"{settings.app_name} RBAC engine ready")
        return engine

    def create_schema(self) -> None:
        Base.metadata.create_all(bind=self.session_factory.kw["bind"])

    def seed(self, catalog: Optional[CatalogConfig] = None) -> Dict[str, int]:
        """
        Seed the permission catalog and preset roles in one transaction.

        Returns:
            Dict mapping role name to role id
        """
        catalog = catalog or default_catalog()
        with UnitOfWork(self.session_factory) as uow:
            roles: Dict[str, Role] = seed_catalog(uow.session, catalog)
            role_ids = {name: role.id for name, role in roles.items()}

        logger.info(
            f"Catalog seeded: {len(catalog.permissions)} permissions, {len(role_ids)} roles"
        )
        return role_ids
