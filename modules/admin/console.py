"""
Admin Console
==============
Composes the permission resolver, the order store, the lifecycle engine and
the dashboard stats into the operations the back-office screens call.

- every action is permission-checked and fails closed
- order transitions are persisted first; the cache (and therefore the stats)
  only changes after the order service confirms
- stats are recomputed from the current cache on every read
"""

import logging
from dataclasses import dataclass, field
from typing import Any, Dict, Iterable, List, Optional

from common.exceptions import FoodHubError, UnauthorizedActionError
from modules.admin.dashboard_service import dashboard_service
from modules.order import lifecycle
from modules.order.lifecycle import TransitionResult
from modules.order.schemas import Order
from modules.order.store import OrderStore
from modules.permission.catalog import MODULE_LABELS, capabilities_by_module
from modules.permission.resolver import (
    PermissionPolicy, ResolvedPermissions, correct_active_section, resolve_permissions,
)
from modules.permission.roles import Role, RoleRegistry
from modules.user.models import Principal

logger = logging.getLogger("foodhub.admin")

DEFAULT_SECTION = "dashboard"


@dataclass
class BulkAdvanceResult:
    advanced: List[TransitionResult] = field(default_factory=list)
    skipped: List[str] = field(default_factory=list)           # terminal / unknown status
    failed: Dict[str, str] = field(default_factory=dict)       # order id → error message

    def to_dict(self) -> dict:
        return {
            "advanced": [r.to_dict() for r in self.advanced],
            "skipped": self.skipped,
            "failed": self.failed,
        }


class AdminConsole:

    def __init__(
        self,
        registry: RoleRegistry,
        store: OrderStore,
        principal: Optional[Principal] = None,
        policy: PermissionPolicy = PermissionPolicy.SHOW_ALL_ON_INCOMPLETE_DATA,
        active_section: str = DEFAULT_SECTION,
    ):
        self.registry = registry
        self.store = store
        self.principal = principal
        self.policy = policy
        self._active_section = active_section

    # ==========================================
    # Permissions & navigation
    # ==========================================

    @property
    def permissions(self) -> ResolvedPermissions:
        # resolved on every access so role edits and late-loading roles apply immediately
        return resolve_permissions(self.principal, self.registry, self.policy)

    def set_principal(self, principal: Optional[Principal]) -> None:
        self.principal = principal
        logger.info(f"Console principal changed: {principal!r}")

    def navigation(self) -> List[dict]:
        return [s.to_dict() for s in self.permissions.visible_sections()]

    @property
    def active_section(self) -> Optional[str]:
        visible = self.permissions.visible_section_ids()
        corrected = correct_active_section(self._active_section, visible)
        if corrected != self._active_section:
            logger.info(f"Active section {self._active_section} no longer visible, switching to {corrected}")
            self._active_section = corrected
        return corrected

    def select_section(self, section_id: str) -> Optional[str]:
        self._active_section = section_id
        return self.active_section

    def section_actions(self) -> Dict[str, Dict[str, bool]]:
        return self.permissions.section_actions()

    def _require(self, capability: str) -> None:
        self.permissions.require(capability)

    def _require_any(self, *capabilities: str) -> None:
        permissions = self.permissions
        if not any(permissions.can_access(c) for c in capabilities):
            raise UnauthorizedActionError(" | ".join(capabilities), authenticated=permissions.is_authenticated)

    # ==========================================
    # Orders
    # ==========================================

    def is_loading(self, section: str) -> bool:
        """Only the dashboard waits for the order fetch; other sections render from cache."""
        return section == "dashboard" and self.store.loading

    async def load_orders(self) -> bool:
        """Fetch the full order set. On failure the previous cache stays in place."""
        self._require_any("view_orders", "view_dashboard")
        try:
            await self.store.refresh()
        except FoodHubError as e:
            logger.warning(f"Order fetch failed, keeping {len(self.store.orders)} cached orders: {e.message}")
            return False
        return True

    async def _persist(self, result: TransitionResult, action: str) -> TransitionResult:
        if not result.changed:
            return result
        order = result.order
        updated = await self.store.update(order.id, {"status": result.status})
        logger.info(
            f"Order {order.order_number or order.id} {action}: "
            f"{result.previous_status} → {updated.status} (by {self.principal.id if self.principal else '-'})"
        )
        return TransitionResult(order=updated, changed=True, previous_status=result.previous_status)

    async def advance_order(self, order_id: str) -> TransitionResult:
        self._require("manage_orders")
        order = self.store.get(order_id)
        return await self._persist(lifecycle.advance(order), "advanced")

    async def set_order_status(self, order_id: str, status: str) -> TransitionResult:
        self._require("manage_orders")
        order = self.store.get(order_id)
        return await self._persist(lifecycle.set_status(order, status), "status set")

    async def cancel_order(self, order_id: str) -> TransitionResult:
        """Cancellation is assumed to be confirmed by the operator already."""
        self._require("delete_orders")
        order = self.store.get(order_id)
        return await self._persist(lifecycle.cancel(order), "cancelled")

    async def advance_all(self, order_ids: Optional[Iterable[str]] = None) -> BulkAdvanceResult:
        """Advance several orders; terminal ones are skipped and failures don't stop the rest."""
        self._require("manage_orders")
        if order_ids is None:
            order_ids = [o.id for o in self.store.orders]

        outcome = BulkAdvanceResult()
        for order_id in order_ids:
            try:
                result = await self._persist(lifecycle.advance(self.store.get(order_id)), "advanced")
            except FoodHubError as e:
                logger.warning(f"Bulk advance failed for {order_id}: {e.message}")
                outcome.failed[order_id] = e.message
                continue
            if result.changed:
                outcome.advanced.append(result)
            else:
                outcome.skipped.append(order_id)
        return outcome

    def order_list(self, query: Optional[str] = None) -> List[Order]:
        self._require("view_orders")
        return lifecycle.filter_orders(self.store.orders, query)

    def pipeline(self, query: Optional[str] = None) -> Dict[str, List[Order]]:
        self._require("view_orders")
        buckets = lifecycle.bucket_orders(self.store.orders, query)
        return {stage.value: orders for stage, orders in buckets.items()}

    # ==========================================
    # Dashboard
    # ==========================================

    def stats(self) -> Dict[str, Any]:
        self._require("view_dashboard")
        stats = dashboard_service.get_overview_stats(self.store.orders)
        stats["loading"] = self.is_loading("dashboard")
        return stats

    # ==========================================
    # Roles
    # ==========================================

    def list_roles(self) -> List[Role]:
        self._require_any("view_roles", "manage_roles")
        return self.registry.list_roles()

    def capability_catalog(self) -> List[dict]:
        self._require_any("view_roles", "manage_roles")
        return [
            {
                "module": module.value,
                "label": MODULE_LABELS[module],
                "capabilities": [
                    {"id": c.id, "label": c.label, "description": c.description}
                    for c in capabilities
                ],
            }
            for module, capabilities in capabilities_by_module().items()
        ]

    def create_role(self, name: str, description: str = "", color: Optional[str] = None,
                    capability_ids: Iterable[str] = ()) -> Role:
        self._require("manage_roles")
        return self.registry.create(name, description, color, capability_ids)

    def update_role(self, role_id: str, patch: dict) -> Role:
        self._require("manage_roles")
        return self.registry.update(role_id, patch)

    def delete_role(self, role_id: str) -> None:
        """Deletion is assumed to be confirmed by the operator already."""
        self._require("manage_roles")
        self.registry.delete(role_id)
