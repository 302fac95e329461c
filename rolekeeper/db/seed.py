"""Database seeding for rolekeeper.

Creates the permission catalog and preset roles. Seeding is idempotent:
existing permissions and roles are matched by system name and role name
and only what is missing is added.
"""

from typing import Dict

from sqlalchemy.orm import Session

from rolekeeper.common.config import CatalogConfig
from rolekeeper.common.logger import get_logger
from rolekeeper.db.models import Permission, Role, RolePermission

logger = get_logger(__name__)

SEED_ACTOR = "System"


def seed_permissions(db: Session, catalog: CatalogConfig) -> Dict[str, Permission]:
    """
    Create missing permissions from the catalog.

    Returns:
        Dict mapping system name to Permission for every catalog entry
    """
    existing = {
        p.system_name: p
        for p in db.query(Permission).filter(
            Permission.system_name.in_(catalog.system_names())
        )
    }

    permissions = {}
    for spec in catalog.permissions:
        permission = existing.get(spec.system_name)
        if permission is None:
            permission = Permission(
                system_name=spec.system_name,
                name=spec.name,
                description=spec.description,
                category=spec.category,
                display_order=spec.display_order,
                is_active=True,
                created_by=SEED_ACTOR,
            )
            db.add(permission)
            logger.info(f"Added permission: {spec.system_name}")
        permissions[spec.system_name] = permission

    db.flush()
    return permissions


def seed_roles(
    db: Session,
    catalog: CatalogConfig,
    permissions: Dict[str, Permission],
) -> Dict[str, Role]:
    """
    Create missing catalog roles together with their bindings.

    Roles that already exist are returned untouched so administrative edits
    to their permission sets survive re-seeding.
    """
    roles = {}
    for spec in catalog.roles:
        role = db.query(Role).filter(Role.name == spec.name).first()
        if role is not None:
            roles[spec.name] = role
            continue

        role = Role(
            name=spec.name,
            description=spec.description,
            is_preset=spec.is_preset,
            is_active=True,
            display_order=spec.display_order,
            created_by=SEED_ACTOR,
        )
        db.add(role)
        db.flush()

        for permission_id in dict.fromkeys(permissions[name].id for name in spec.permissions):
            db.add(RolePermission(
                role_id=role.id,
                permission_id=permission_id,
                is_active=True,
                created_by=SEED_ACTOR,
            ))
        logger.info(f"Added role: {spec.name} ({len(spec.permissions)} permissions)")
        roles[spec.name] = role

    db.flush()
    return roles


def seed_catalog(db: Session, catalog: CatalogConfig) -> Dict[str, Role]:
    """Seed permissions then roles. The caller owns the transaction."""
    permissions = seed_permissions(db, catalog)
    return seed_roles(db, catalog, permissions)
