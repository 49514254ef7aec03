"""
Admin Module - Dependencies
============================
Wires the app-level registry/store into a per-request AdminConsole.

The registry and the order store are created once in main.lifespan and kept
on app.state.
"""

from fastapi import Depends, Request

from modules.admin.console import AdminConsole
from modules.auth.deps import require_login
from modules.order.store import OrderStore
from modules.permission.resolver import PermissionPolicy
from modules.permission.roles import RoleRegistry


def get_role_registry(request: Request) -> RoleRegistry:
    return request.app.state.role_registry


def get_order_store(request: Request) -> OrderStore:
    return request.app.state.order_store


def get_permission_policy(request: Request) -> PermissionPolicy:
    return getattr(request.app.state, "permission_policy", PermissionPolicy.SHOW_ALL_ON_INCOMPLETE_DATA)


def get_console(
    principal=Depends(require_login),
    registry: RoleRegistry = Depends(get_role_registry),
    store: OrderStore = Depends(get_order_store),
    policy: PermissionPolicy = Depends(get_permission_policy),
) -> AdminConsole:
    return AdminConsole(registry, store, principal=principal, policy=policy)
