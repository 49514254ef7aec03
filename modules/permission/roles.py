"""
Role Registry
==============
Named bundles of capabilities that staff members are assigned to.

Rules:
  - the `admin` role holds the whole catalog, is a system role and can't be edited
  - system roles can't be deleted
  - deleting a role does not touch principals; they simply stop resolving to it

A registry is an explicit object created at startup and injected where needed.
"""

import logging
import secrets
from dataclasses import dataclass, field, replace
from typing import Dict, FrozenSet, Iterable, List, Optional

from common.exceptions import (
    ValidationError, NotFoundError, ImmutableRoleError, SystemRoleProtectedError,
)
from modules.permission.catalog import (
    ALL_CAPABILITY_IDS, CAPABILITY_CATALOG, capabilities_for_module, is_known_capability,
)

logger = logging.getLogger("foodhub.permission")

ADMIN_ROLE_ID = "admin"
BUILTIN_ROLE_IDS = ("admin", "manager", "staff", "support")
DEFAULT_ROLE_COLOR = "#3B82F6"

# Fields a patch is allowed to change
_PATCHABLE_FIELDS = ("name", "description", "color", "capability_ids")


@dataclass(frozen=True)
class Role:
    id: str
    name: str
    description: str = ""
    color: str = DEFAULT_ROLE_COLOR
    capability_ids: FrozenSet[str] = frozenset()
    is_system: bool = False
    assigned_count: int = 0

    @property
    def is_admin(self) -> bool:
        return self.id == ADMIN_ROLE_ID

    @property
    def is_editable(self) -> bool:
        return not self.is_admin

    @property
    def is_deletable(self) -> bool:
        return not self.is_system

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "name": self.name,
            "description": self.description,
            "color": self.color,
            # catalog order keeps the output stable
            "capability_ids": [c.id for c in CAPABILITY_CATALOG if c.id in self.capability_ids],
            "is_system": self.is_system,
            "assigned_count": self.assigned_count,
            "is_editable": self.is_editable,
            "is_deletable": self.is_deletable,
        }


def default_roles() -> List[Role]:
    return [
        Role(
            id="admin",
            name="Super Admin",
            description="Full access to all system features",
            color="#EF4444",
            capability_ids=ALL_CAPABILITY_IDS,
            is_system=True,
            assigned_count=1,
        ),
        Role(
            id="manager",
            name="Store Manager",
            description="Can manage products, orders, and marketing",
            color="#F59E0B",
            capability_ids=frozenset({
                "view_dashboard",
                "view_products", "create_products", "edit_products",
                "view_orders", "manage_orders",
                "view_marketing", "manage_marketing",
                "view_users",
            }),
            assigned_count=3,
        ),
        Role(
            id="staff",
            name="Kitchen Staff",
            description="Can view and update active orders",
            color="#10B981",
            capability_ids=frozenset({"view_dashboard", "view_orders", "manage_orders"}),
            assigned_count=8,
        ),
        Role(
            id="support",
            name="Support Agent",
            description="Can view orders and users to help customers",
            color="#3B82F6",
            capability_ids=frozenset({"view_dashboard", "view_orders", "view_users"}),
            assigned_count=2,
        ),
    ]


def _validate_capabilities(capability_ids: Iterable[str]) -> FrozenSet[str]:
    ids = frozenset(capability_ids or ())
    unknown = sorted(i for i in ids if not is_known_capability(i))
    if unknown:
        raise ValidationError(f"Unknown capabilities: {', '.join(unknown)}")
    return ids


def _validate_name(name: Optional[str]) -> str:
    name = (name or "").strip()
    if not name:
        raise ValidationError("Role name is required")
    return name


# ==========================================
# Edit buffer
# ==========================================

@dataclass
class RoleDraft:
    """In-progress edit of a role. Nothing is persisted until RoleRegistry.commit()."""
    role_id: Optional[str] = None  # None -> create on commit
    name: str = ""
    description: str = ""
    color: str = DEFAULT_ROLE_COLOR
    capability_ids: List[str] = field(default_factory=list)

    @classmethod
    def from_role(cls, role: Role) -> "RoleDraft":
        return cls(
            role_id=role.id,
            name=role.name,
            description=role.description,
            color=role.color,
            capability_ids=[c.id for c in CAPABILITY_CATALOG if c.id in role.capability_ids],
        )

    def toggle_capability(self, capability_id: str) -> None:
        if not is_known_capability(capability_id):
            raise ValidationError(f"Unknown capability: {capability_id}")
        if capability_id in self.capability_ids:
            self.capability_ids.remove(capability_id)
        else:
            self.capability_ids.append(capability_id)

    def toggle_module(self, module) -> None:
        """Select every capability of the module, or clear them all if all are already selected."""
        module_ids = capabilities_for_module(module)
        all_selected = all(i in self.capability_ids for i in module_ids)
        if all_selected:
            self.capability_ids = [i for i in self.capability_ids if i not in module_ids]
        else:
            self.capability_ids.extend(i for i in module_ids if i not in self.capability_ids)

    def to_patch(self) -> dict:
        return {
            "name": self.name,
            "description": self.description,
            "color": self.color,
            "capability_ids": list(self.capability_ids),
        }


# ==========================================
# Registry
# ==========================================

class RoleRegistry:

    def __init__(self, roles: Optional[Iterable[Role]] = None):
        self._roles: Dict[str, Role] = {}
        self._loaded = False
        if roles is not None:
            self.load(roles)

    @classmethod
    def with_defaults(cls) -> "RoleRegistry":
        return cls(default_roles())

    # --- Loading ---

    @property
    def is_loaded(self) -> bool:
        return self._loaded

    def load(self, roles: Iterable[Role]) -> None:
        """Replace the registry content (e.g. once role data arrives from storage)."""
        loaded = {}
        for role in roles:
            loaded[role.id] = replace(role, capability_ids=_validate_capabilities(role.capability_ids))
        self._roles = loaded
        self._loaded = True
        logger.info(f"Role registry loaded with {len(loaded)} roles")

    # --- Queries ---

    def list_roles(self) -> List[Role]:
        return list(self._roles.values())

    def get(self, role_id: str) -> Role:
        role = self._roles.get(role_id)
        if role is None:
            raise NotFoundError(f"Role '{role_id}' not found")
        return role

    def find(self, role_ref: Optional[str]) -> Optional[Role]:
        """Exact, case-sensitive lookup by id first, then by display name."""
        if not role_ref:
            return None
        role = self._roles.get(role_ref)
        if role is not None:
            return role
        for candidate in self._roles.values():
            if candidate.name == role_ref:
                return candidate
        return None

    # --- Mutations ---

    def create(
        self,
        name: str,
        description: str = "",
        color: str = DEFAULT_ROLE_COLOR,
        capability_ids: Iterable[str] = (),
    ) -> Role:
        name = _validate_name(name)
        caps = _validate_capabilities(capability_ids)

        role_id = f"role_{secrets.token_hex(6)}"
        while role_id in self._roles:
            role_id = f"role_{secrets.token_hex(6)}"

        role = Role(
            id=role_id,
            name=name,
            description=description or "",
            color=color or DEFAULT_ROLE_COLOR,
            capability_ids=caps,
            is_system=False,
            assigned_count=0,
        )
        self._roles[role_id] = role
        logger.info(f"Role created: {role_id} ({name}) with {len(caps)} capabilities")
        return role

    def update(self, role_id: str, patch: dict) -> Role:
        """Merge `patch` into an existing role. The admin role can never be edited."""
        if role_id == ADMIN_ROLE_ID:
            logger.warning("Refused edit of the admin role")
            raise ImmutableRoleError(role_id)
        role = self.get(role_id)

        changes = {k: v for k, v in (patch or {}).items() if k in _PATCHABLE_FIELDS and v is not None}
        if "name" in changes:
            changes["name"] = _validate_name(changes["name"])
        if "capability_ids" in changes:
            changes["capability_ids"] = _validate_capabilities(changes["capability_ids"])

        updated = replace(role, **changes)
        self._roles[role_id] = updated
        logger.info(f"Role updated: {role_id} ({', '.join(sorted(changes)) or 'no changes'})")
        return updated

    def delete(self, role_id: str) -> None:
        if role_id == ADMIN_ROLE_ID:
            logger.warning("Refused delete of the admin role")
            raise SystemRoleProtectedError(role_id)
        role = self.get(role_id)
        if role.is_system:
            logger.warning(f"Refused delete of system role {role_id}")
            raise SystemRoleProtectedError(role_id)
        del self._roles[role_id]
        logger.info(f"Role deleted: {role_id} ({role.assigned_count} principals lose its capabilities)")

    # --- Edit buffer ---

    def begin_edit(self, role_id: Optional[str] = None) -> RoleDraft:
        if role_id is None:
            return RoleDraft()
        role = self.get(role_id)
        if not role.is_editable:
            raise ImmutableRoleError(role_id)
        return RoleDraft.from_role(role)

    def commit(self, draft: RoleDraft) -> Role:
        if draft.role_id is None:
            return self.create(draft.name, draft.description, draft.color, draft.capability_ids)
        return self.update(draft.role_id, draft.to_patch())
