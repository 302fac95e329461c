"""Permission catalog configuration for rolekeeper.

Handles loading and validation of YAML catalog files describing the
permissions and preset roles seeded at initialization.

Expected layout::

    permissions:
      - system_name: tenants.view
        name: View Tenants
        description: View tenant records
        category: Tenants
    roles:
      - name: Agent
        description: Front-office agent
        permissions: [tenants.view]
"""

import os
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

import yaml


@dataclass
class PermissionSpec:
    """Definition of a single seeded permission."""

    system_name: str
    name: str
    category: str
    description: str = ""
    display_order: int = 0


@dataclass
class RoleSpec:
    """Definition of a seeded role and the system names bound to it."""

    name: str
    description: str = ""
    permissions: List[str] = field(default_factory=list)
    is_preset: bool = True
    display_order: int = 0


@dataclass
class CatalogConfig:
    """Top-level catalog: permission definitions plus preset roles."""

    permissions: List[PermissionSpec] = field(default_factory=list)
    roles: List[RoleSpec] = field(default_factory=list)

    def system_names(self) -> List[str]:
        return [p.system_name for p in self.permissions]


def parse_permission_spec(perm_dict: Dict[str, Any], index: int = 0) -> PermissionSpec:
    """Parse a permission dictionary.

    Args:
        perm_dict: Permission configuration dictionary
        index: Position in the list, used as default display order

    Returns:
        PermissionSpec instance

    Raises:
        ValueError: If system_name or category is missing
    """
    system_name = perm_dict.get("system_name")
    if not system_name:
        raise ValueError(f"Permission entry {index} has no system_name")
    category = perm_dict.get("category")
    if not category:
        raise ValueError(f"Permission '{system_name}' has no category")

    return PermissionSpec(
        system_name=system_name,
        name=perm_dict.get("name", system_name),
        category=category,
        description=perm_dict.get("description", ""),
        display_order=perm_dict.get("display_order", index),
    )


def parse_role_spec(role_dict: Dict[str, Any], index: int = 0) -> RoleSpec:
    """Parse a role dictionary.

    Args:
        role_dict: Role configuration dictionary
        index: Position in the list, used as default display order

    Returns:
        RoleSpec instance
    """
    name = role_dict.get("name")
    if not name:
        raise ValueError(f"Role entry {index} has no name")

    return RoleSpec(
        name=name,
        description=role_dict.get("description", ""),
        permissions=list(role_dict.get("permissions", [])),
        is_preset=role_dict.get("is_preset", True),
        display_order=role_dict.get("display_order", index),
    )


def parse_catalog(config_dict: Dict[str, Any]) -> CatalogConfig:
    """Parse and validate a full catalog dictionary.

    Every system name referenced by a role must be defined in the
    permissions list, and system names must be unique.
    """
    permissions = [
        parse_permission_spec(p, i)
        for i, p in enumerate(config_dict.get("permissions", []) or [])
    ]
    roles = [
        parse_role_spec(r, i)
        for i, r in enumerate(config_dict.get("roles", []) or [])
    ]

    seen = set()
    for perm in permissions:
        if perm.system_name in seen:
            raise ValueError(f"Duplicate permission system_name: {perm.system_name}")
        seen.add(perm.system_name)

    for role in roles:
        unknown = [name for name in role.permissions if name not in seen]
        if unknown:
            raise ValueError(
                f"Role '{role.name}' references unknown permissions: {', '.join(unknown)}"
            )

    return CatalogConfig(permissions=permissions, roles=roles)


def load_catalog(config_path: str) -> CatalogConfig:
    """Load a permission catalog from a YAML file.

    Args:
        config_path: Path to catalog file

    Returns:
        Parsed CatalogConfig

    Raises:
        FileNotFoundError: If config file doesn't exist
        yaml.YAMLError: If config file is invalid YAML
        ValueError: If the catalog is structurally invalid
    """
    if not os.path.exists(config_path):
        raise FileNotFoundError(f"Catalog file not found: {config_path}")

    with open(config_path, "r", encoding="utf-8") as f:
        config_dict: Optional[Dict[str, Any]] = yaml.safe_load(f)

    if config_dict is None:
        return CatalogConfig()
    if not isinstance(config_dict, dict):
        raise ValueError(f"Catalog file {config_path} must contain a mapping")

    return parse_catalog(config_dict)
