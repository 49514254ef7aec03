"""
Permission Resolver
====================
Turns a principal into an effective capability set, the list of admin sections
it may see, and the per-section action flags.

Policies:
  STRICT                       → only the matched role's capabilities count
  SHOW_ALL_ON_INCOMPLETE_DATA  → every section is visible when role data is
                                 missing/empty or the role is a built-in
                                 staff role; navigation must never collapse
                                 to a blank screen while roles load
"""

import enum
import logging
from dataclasses import dataclass
from typing import Dict, FrozenSet, List, Optional, Tuple

from common.exceptions import UnauthorizedActionError
from modules.permission.catalog import PermissionModule, capabilities_for_module
from modules.permission.roles import BUILTIN_ROLE_IDS, Role, RoleRegistry
from modules.user.models import Principal

logger = logging.getLogger("foodhub.permission")


class PermissionPolicy(str, enum.Enum):
    STRICT = "strict"
    SHOW_ALL_ON_INCOMPLETE_DATA = "show_all_on_incomplete_data"


# --- Navigation registry (ordered) ---

@dataclass(frozen=True)
class NavSection:
    id: str
    label: str
    icon: str
    requires: Tuple[str, ...]  # any one of these capabilities (OR)

    def to_dict(self) -> dict:
        return {"id": self.id, "label": self.label, "icon": self.icon}


NAV_SECTIONS: Tuple[NavSection, ...] = (
    NavSection("dashboard", "Dashboard", "layout-dashboard", ("view_dashboard",)),
    NavSection("products", "Products", "package", ("view_products",)),
    NavSection("orders", "Orders", "shopping-bag", ("view_orders",)),
    NavSection("categories", "Categories", "layers", ("create_products", "edit_products")),
    NavSection("marketing", "Marketing & Promos", "megaphone", ("view_marketing", "manage_marketing")),
    NavSection("users", "Users", "users", ("view_users", "manage_users")),
    NavSection("roles", "Roles & Permissions", "shield", ("view_roles", "manage_roles")),
    NavSection("notifications", "Notifications", "bell", ("manage_marketing",)),
    NavSection("settings", "Settings", "settings", ("view_settings", "manage_settings")),
)

# section → action → required capability
SECTION_ACTIONS: Dict[str, Dict[str, str]] = {
    "products": {"create": "create_products", "edit": "edit_products", "delete": "delete_products"},
    "orders": {"advance": "manage_orders", "set_status": "manage_orders", "cancel": "delete_orders"},
    "categories": {"manage": "edit_products"},
    "marketing": {"manage": "manage_marketing"},
    "users": {"manage": "manage_users"},
    "roles": {"create": "manage_roles", "edit": "manage_roles", "delete": "manage_roles"},
    "settings": {"manage": "manage_settings"},
}

_MODULE_NAMES = frozenset(m.value for m in PermissionModule)


@dataclass(frozen=True)
class ResolvedPermissions:
    role: Optional[Role]
    capability_ids: FrozenSet[str]
    show_all: bool
    is_authenticated: bool

    @classmethod
    def anonymous(cls) -> "ResolvedPermissions":
        return cls(role=None, capability_ids=frozenset(), show_all=False, is_authenticated=False)

    def can_access(self, key: str) -> bool:
        """Check a capability id or a module name (module = any of its capabilities)."""
        if not self.is_authenticated:
            return False
        if self.show_all:
            return True
        if key in _MODULE_NAMES:
            return any(c in self.capability_ids for c in capabilities_for_module(key))
        return key in self.capability_ids

    def require(self, capability: str) -> None:
        """Fail closed when an action is invoked without its capability."""
        if not self.can_access(capability):
            logger.warning(
                f"Blocked action requiring {capability} "
                f"(role={self.role.id if self.role else None})"
            )
            raise UnauthorizedActionError(capability, authenticated=self.is_authenticated)

    def visible_sections(self) -> List[NavSection]:
        if not self.is_authenticated:
            return []
        visible = [s for s in NAV_SECTIONS if any(self.can_access(c) for c in s.requires)]
        # never leave an operator with zero reachable sections
        return visible or list(NAV_SECTIONS)

    def visible_section_ids(self) -> List[str]:
        return [s.id for s in self.visible_sections()]

    def section_actions(self) -> Dict[str, Dict[str, bool]]:
        return {
            section: {action: self.can_access(cap) for action, cap in actions.items()}
            for section, actions in SECTION_ACTIONS.items()
        }


def resolve_permissions(
    principal: Optional[Principal],
    registry: RoleRegistry,
    policy: PermissionPolicy = PermissionPolicy.SHOW_ALL_ON_INCOMPLETE_DATA,
) -> ResolvedPermissions:
    if principal is None:
        return ResolvedPermissions.anonymous()

    role = registry.find(principal.role)
    capability_ids = role.capability_ids if role else frozenset()

    show_all = False
    if policy == PermissionPolicy.SHOW_ALL_ON_INCOMPLETE_DATA:
        incomplete = not registry.is_loaded or (role is not None and not capability_ids)
        builtin = principal.role in BUILTIN_ROLE_IDS
        show_all = incomplete or builtin

    return ResolvedPermissions(
        role=role,
        capability_ids=capability_ids,
        show_all=show_all,
        is_authenticated=True,
    )


def correct_active_section(current: Optional[str], visible: List[str]) -> Optional[str]:
    """Keep the selected section if still visible, else fall back to the first visible one."""
    if current in visible:
        return current
    return visible[0] if visible else None
