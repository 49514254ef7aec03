"""
Permission Catalog
===================
Static registry of every atomic capability, grouped by module.
Used by the role registry, the permission resolver and the role-editing screen.

The catalog is fixed at import time and never mutated.
"""

import enum
from dataclasses import dataclass
from typing import Dict, FrozenSet, List


class PermissionModule(str, enum.Enum):
    DASHBOARD = "dashboard"
    PRODUCTS = "products"
    ORDERS = "orders"
    MARKETING = "marketing"
    USERS = "users"
    SETTINGS = "settings"
    SYSTEM = "system"


MODULE_LABELS = {
    PermissionModule.DASHBOARD: "Dashboard",
    PermissionModule.PRODUCTS: "Products",
    PermissionModule.ORDERS: "Orders",
    PermissionModule.MARKETING: "Marketing",
    PermissionModule.USERS: "Users",
    PermissionModule.SETTINGS: "Settings",
    PermissionModule.SYSTEM: "Roles (System)",
}


@dataclass(frozen=True)
class Capability:
    id: str
    label: str
    description: str
    module: PermissionModule


# --- Capability registry ---

CAPABILITY_CATALOG: List[Capability] = [
    # Dashboard
    Capability("view_dashboard", "View Dashboard", "Access to main dashboard stats", PermissionModule.DASHBOARD),

    # Products
    Capability("view_products", "View Products", "View product list and details", PermissionModule.PRODUCTS),
    Capability("create_products", "Create Products", "Add new products", PermissionModule.PRODUCTS),
    Capability("edit_products", "Edit Products", "Modify existing products", PermissionModule.PRODUCTS),
    Capability("delete_products", "Delete Products", "Remove products", PermissionModule.PRODUCTS),

    # Orders
    Capability("view_orders", "View Orders", "View incoming orders", PermissionModule.ORDERS),
    Capability("manage_orders", "Manage Orders", "Update order status (accept, ready, etc.)", PermissionModule.ORDERS),
    Capability("delete_orders", "Delete Orders", "Remove/Cancel orders", PermissionModule.ORDERS),

    # Marketing
    Capability("view_marketing", "View Marketing", "View deals and banners", PermissionModule.MARKETING),
    Capability("manage_marketing", "Manage Marketing", "Create/Edit deals and banners", PermissionModule.MARKETING),

    # Users
    Capability("view_users", "View Users", "View registered users list", PermissionModule.USERS),
    Capability("manage_users", "Manage Users", "Edit user details and roles", PermissionModule.USERS),

    # Settings
    Capability("view_settings", "View Settings", "View store settings", PermissionModule.SETTINGS),
    Capability("manage_settings", "Manage Settings", "Modify store configuration", PermissionModule.SETTINGS),

    # Roles (System)
    Capability("view_roles", "View Roles", "View defined roles", PermissionModule.SYSTEM),
    Capability("manage_roles", "Manage Roles", "Create/Edit/Delete roles", PermissionModule.SYSTEM),
]

CAPABILITIES_BY_ID: Dict[str, Capability] = {c.id: c for c in CAPABILITY_CATALOG}

ALL_CAPABILITY_IDS: FrozenSet[str] = frozenset(CAPABILITIES_BY_ID)


# --- Helpers ---

def is_known_capability(capability_id: str) -> bool:
    return capability_id in CAPABILITIES_BY_ID


def capabilities_for_module(module) -> List[str]:
    """Capability ids of a module, in catalog order."""
    module = PermissionModule(module)
    return [c.id for c in CAPABILITY_CATALOG if c.module == module]


def capabilities_by_module() -> Dict[PermissionModule, List[Capability]]:
    """Catalog grouped by module (every module present, catalog order preserved)."""
    grouped: Dict[PermissionModule, List[Capability]] = {m: [] for m in PermissionModule}
    for capability in CAPABILITY_CATALOG:
        grouped[capability.module].append(capability)
    return grouped
