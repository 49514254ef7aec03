"""
Order Module - Admin Routes
==============================
Order pipeline for admin: list/pipeline views, advance, status change, cancel.
"""

from typing import List, Optional

from fastapi import APIRouter, Depends, Query
from pydantic import BaseModel, Field

from modules.admin.console import AdminConsole
from modules.admin.deps import get_console
from modules.order.lifecycle import order_payload

router = APIRouter(tags=["order-admin"])


# ==========================================
# Schemas
# ==========================================

class StatusChange(BaseModel):
    status: str = Field(..., min_length=1, max_length=40)


class BulkAdvance(BaseModel):
    order_ids: Optional[List[str]] = None


def _with_stats(console: AdminConsole, payload: dict) -> dict:
    """Attach freshly recomputed stats when the principal may see the dashboard."""
    if console.permissions.can_access("view_dashboard"):
        payload["stats"] = console.stats()
    return payload


# ==========================================
# Views
# ==========================================

@router.get("/admin/orders")
async def admin_orders(
    search: str = Query(None),
    view: str = Query("pipeline", pattern="^(pipeline|list)$"),
    console: AdminConsole = Depends(get_console),
):
    if view == "list":
        orders = console.order_list(search)
        return {
            "view": "list",
            "search_query": search or "",
            "total": len(orders),
            "orders": [order_payload(o) for o in orders],
        }

    pipeline = console.pipeline(search)
    return {
        "view": "pipeline",
        "search_query": search or "",
        "stages": {
            stage: [order_payload(o) for o in orders]
            for stage, orders in pipeline.items()
        },
    }


@router.post("/admin/orders/refresh")
async def refresh_orders(console: AdminConsole = Depends(get_console)):
    """Re-fetch the order set; on failure the cached orders stay in place."""
    ok = await console.load_orders()
    return {
        "ok": ok,
        "error": None if ok else console.store.last_error,
        "total": len(console.store.orders),
    }


# ==========================================
# Transitions
# ==========================================

@router.post("/admin/orders/advance-all")
async def advance_all_orders(body: BulkAdvance, console: AdminConsole = Depends(get_console)):
    outcome = await console.advance_all(body.order_ids)
    return _with_stats(console, outcome.to_dict())


@router.post("/admin/orders/{order_id}/advance")
async def advance_order(order_id: str, console: AdminConsole = Depends(get_console)):
    result = await console.advance_order(order_id)
    return _with_stats(console, result.to_dict())


@router.post("/admin/orders/{order_id}/status")
async def change_order_status(
    order_id: str,
    body: StatusChange,
    console: AdminConsole = Depends(get_console),
):
    result = await console.set_order_status(order_id, body.status)
    return _with_stats(console, result.to_dict())


@router.post("/admin/orders/{order_id}/cancel")
async def cancel_order_admin(order_id: str, console: AdminConsole = Depends(get_console)):
    """Cancel a non-terminal order (the UI has already asked for confirmation)."""
    result = await console.cancel_order(order_id)
    return _with_stats(console, result.to_dict())
