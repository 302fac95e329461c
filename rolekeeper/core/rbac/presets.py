"""Built-in permission catalog and preset roles.

Permissions are grouped by category; system names follow the
``area.action`` convention. Five preset roles are defined:
1. System Administrator - every permission
2. Property Manager - properties, tenants, beneficiaries and reports
3. Finance Officer - payments, statements and financial reports
4. Leasing Agent - day-to-day tenant handling
5. Viewer - read-only reporting
"""

from typing import Dict, List, Tuple

from rolekeeper.common.config import CatalogConfig, PermissionSpec, RoleSpec


# category -> [(system_name, display name, description)]
PERMISSION_CATEGORIES: Dict[str, List[Tuple[str, str, str]]] = {
    "Properties": [
        ("properties.create", "Create/Update Properties", "Create or update properties"),
        ("properties.archive", "Archive/Restore Properties", "Archive or restore properties"),
        ("properties.view.all", "Access All Properties", "Access all properties"),
        ("properties.budgets", "Access Budgets", "Access property budgets"),
    ],
    "Beneficiaries": [
        ("beneficiaries.create", "Create Beneficiaries", "Create beneficiaries"),
        ("beneficiaries.update", "Update Beneficiaries", "Update beneficiaries (excluding bank details)"),
        ("beneficiaries.update.bank", "Update Bank Details", "Update beneficiary bank details"),
        ("beneficiaries.archive", "Archive/Restore Beneficiaries", "Archive or restore beneficiaries"),
        ("beneficiaries.payments", "Manage Payments", "Create or update beneficiary payments"),
        ("beneficiaries.approve", "Approve Details", "Approve beneficiary details"),
    ],
    "Tenants": [
        ("tenants.view", "View Tenants", "View tenant records"),
        ("tenants.create", "Create/Update Tenants", "Create or update tenants"),
        ("tenants.archive", "Archive/Restore Tenants", "Archive or restore tenants"),
        ("tenants.update.bank", "Change Bank Details", "Change tenant bank details"),
        ("tenants.invoices", "Manage Invoices", "Create or update tenant invoices"),
        ("tenants.notes", "Create Notes", "Create credit/debit notes"),
        ("tenants.deposit.request", "Request Deposit Release", "Request damage deposit release"),
        ("tenants.deposit.approve", "Approve Deposit Release", "Approve damage deposit release"),
        ("tenants.reminders", "Send Payment Reminders", "Send payment reminders"),
        ("tenants.arrears.view", "View Arrears", "View tenants in arrears"),
    ],
    "Reports": [
        ("reports.commission", "View Commission Reports", "View commission reports"),
        ("reports.transactions", "View Transaction History", "View transaction history reports"),
        ("reports.payments", "View Payment Confirmations", "View payment confirmations"),
        ("reports.statements", "Download Bulk Statements", "Download bulk statements"),
        ("reports.audit", "View Audit Log", "View audit log"),
        ("reports.management", "View Management Reports", "View management reports"),
    ],
    "Bank Statements & Payments": [
        ("payments.reject", "Reject Beneficiary Payments", "Reject beneficiary payments"),
        ("payments.deposits.view", "View Direct Deposits", "View direct deposits"),
        ("payments.deposits.reconcile", "Reconcile Direct Deposits", "Reconcile direct deposits"),
        ("payments.approve", "Approve Payments", "Approve beneficiary payments"),
    ],
    "System Settings": [
        ("settings.users", "Manage Users", "Create or update users"),
        ("settings.profile", "Update Profile", "Update profile settings"),
        ("settings.import", "Import Data", "Import data"),
        ("settings.export", "Export Data", "Export data"),
        ("settings.application", "Manage Application Settings", "Manage application settings"),
        ("settings.permissions", "Manage Roles & Permissions", "Manage roles and permissions"),
    ],
}


def _build_permissions() -> List[PermissionSpec]:
    specs = []
    for category, entries in PERMISSION_CATEGORIES.items():
        for order, (system_name, name, description) in enumerate(entries):
            specs.append(PermissionSpec(
                system_name=system_name,
                name=name,
                category=category,
                description=description,
                display_order=order,
            ))
    return specs


def _category(*categories: str) -> List[str]:
    """All system names in the given categories."""
    return [entry[0] for c in categories for entry in PERMISSION_CATEGORIES[c]]


DEFAULT_PERMISSIONS = _build_permissions()

ADMINISTRATOR_PERMISSIONS = [p.system_name for p in DEFAULT_PERMISSIONS]

PROPERTY_MANAGER_PERMISSIONS = _category("Properties", "Tenants", "Beneficiaries") + [
    "reports.commission",
    "reports.transactions",
    "reports.payments",
    "reports.statements",
    "settings.profile",
]

FINANCE_OFFICER_PERMISSIONS = _category("Bank Statements & Payments", "Reports") + [
    "beneficiaries.payments",
    "beneficiaries.approve",
    "tenants.view",
    "tenants.invoices",
    "tenants.arrears.view",
    "settings.profile",
]

AGENT_PERMISSIONS = [
    "properties.view.all",
    "tenants.view",
    "tenants.create",
    "tenants.notes",
    "tenants.reminders",
    "tenants.deposit.request",
    "settings.profile",
]

VIEWER_PERMISSIONS = [
    "properties.view.all",
    "tenants.view",
    "reports.transactions",
    "reports.payments",
    "settings.profile",
]


PRESET_ROLES: List[RoleSpec] = [
    RoleSpec(
        name="System Administrator",
        description="Full system access with all permissions",
        permissions=ADMINISTRATOR_PERMISSIONS,
        display_order=0,
    ),
    RoleSpec(
        name="Property Manager",
        description="Manages properties, tenants and beneficiaries",
        permissions=PROPERTY_MANAGER_PERMISSIONS,
        display_order=1,
    ),
    RoleSpec(
        name="Finance Officer",
        description="Handles payments, deposits and financial reporting",
        permissions=FINANCE_OFFICER_PERMISSIONS,
        display_order=2,
    ),
    RoleSpec(
        name="Leasing Agent",
        description="Day-to-day tenant handling",
        permissions=AGENT_PERMISSIONS,
        display_order=3,
    ),
    RoleSpec(
        name="Viewer",
        description="Read-only access to properties, tenants and reports",
        permissions=VIEWER_PERMISSIONS,
        display_order=4,
    ),
]


def default_catalog() -> CatalogConfig:
    """A fresh copy of the built-in catalog."""
    return CatalogConfig(
        permissions=[PermissionSpec(**vars(p)) for p in DEFAULT_PERMISSIONS],
        roles=[
            RoleSpec(
                name=r.name,
                description=r.description,
                permissions=list(r.permissions),
                is_preset=r.is_preset,
                display_order=r.display_order,
            )
            for r in PRESET_ROLES
        ],
    )
