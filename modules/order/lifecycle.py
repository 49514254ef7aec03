"""
Order Lifecycle Engine
=======================
Status canonicalization, the linear fulfillment flow, cancellation and
pipeline bucketing.

Flow:  pending → confirmed → preparing → ready → out-for-delivery → delivered
Cancel: any non-terminal status → cancelled
Terminal: delivered, cancelled

Every function here is pure: orders are returned as copies, never mutated.
Persisting a transition is the console's job (see modules/admin/console.py).
"""

import logging
from dataclasses import dataclass
from typing import Dict, Iterable, List, Optional

from common.exceptions import ValidationError
from modules.order.models import (
    OrderStatus, STATUS_ALIASES, STATUS_LABELS, STATUS_COLORS,
    UNKNOWN_STATUS_LABEL, UNKNOWN_STATUS_COLOR,
)
from modules.order.schemas import Order

logger = logging.getLogger("foodhub.order")

STATUS_FLOW: List[OrderStatus] = [
    OrderStatus.PENDING,
    OrderStatus.CONFIRMED,
    OrderStatus.PREPARING,
    OrderStatus.READY,
    OrderStatus.OUT_FOR_DELIVERY,
    OrderStatus.DELIVERED,
]

# Kanban columns, in display order
PIPELINE_STAGES: List[OrderStatus] = list(STATUS_FLOW)

TERMINAL_STATUSES = frozenset({OrderStatus.DELIVERED, OrderStatus.CANCELLED})


def normalize_status(raw) -> Optional[OrderStatus]:
    """Map a raw status (any producer's vocabulary) to its canonical value, or None."""
    if raw is None:
        return None
    if isinstance(raw, OrderStatus):
        return raw
    key = str(raw).strip().lower()
    if key in STATUS_ALIASES:
        return STATUS_ALIASES[key]
    try:
        return OrderStatus(key)
    except ValueError:
        return None


def status_label(raw) -> str:
    status = normalize_status(raw)
    return STATUS_LABELS[status] if status else UNKNOWN_STATUS_LABEL


def status_color(raw) -> str:
    status = normalize_status(raw)
    return STATUS_COLORS[status] if status else UNKNOWN_STATUS_COLOR


def is_terminal(raw) -> bool:
    return normalize_status(raw) in TERMINAL_STATUSES


def order_payload(order: Order) -> dict:
    """Order JSON for the admin screens, with display label and color ('Unknown' for unrecognized statuses)."""
    payload = order.to_dict()
    payload["status_label"] = status_label(order.status)
    payload["status_color"] = status_color(order.status)
    return payload


def next_status(raw) -> Optional[OrderStatus]:
    """Next step in the flow, or None for terminal / unrecognized statuses."""
    status = normalize_status(raw)
    if status not in STATUS_FLOW:
        return None
    index = STATUS_FLOW.index(status)
    if index == len(STATUS_FLOW) - 1:
        return None
    return STATUS_FLOW[index + 1]


# ==========================================
# Transitions
# ==========================================

@dataclass(frozen=True)
class TransitionResult:
    order: Order
    changed: bool
    previous_status: str

    @property
    def status(self) -> str:
        return self.order.status

    def to_dict(self) -> dict:
        return {
            "order": order_payload(self.order),
            "changed": self.changed,
            "previous_status": self.previous_status,
            "status": self.status,
        }


def _with_status(order: Order, status: str) -> Order:
    return order.model_copy(update={"status": status})


def advance(order: Order) -> TransitionResult:
    """Move the order one step along the flow. Terminal/unknown statuses are a no-op."""
    target = next_status(order.status)
    if target is None:
        logger.debug(f"Advance no-op for {order.order_number or order.id} ({order.status})")
        return TransitionResult(order=order, changed=False, previous_status=order.status)
    return TransitionResult(
        order=_with_status(order, target.value),
        changed=True,
        previous_status=order.status,
    )


def validate_status(new_status) -> str:
    """Accept any canonical status or alias; reject everything else."""
    if normalize_status(new_status) is None:
        raise ValidationError(f"Unknown order status: {new_status}")
    return str(new_status.value if isinstance(new_status, OrderStatus) else new_status).strip()


def set_status(order: Order, new_status) -> TransitionResult:
    """Direct assignment from a status picker; allowed from any status (corrections)."""
    value = validate_status(new_status)
    return TransitionResult(
        order=_with_status(order, value),
        changed=value != order.status,
        previous_status=order.status,
    )


def cancel(order: Order) -> TransitionResult:
    """Cancel a non-terminal order. Delivered/cancelled orders are left as they are."""
    if is_terminal(order.status):
        return TransitionResult(order=order, changed=False, previous_status=order.status)
    return TransitionResult(
        order=_with_status(order, OrderStatus.CANCELLED.value),
        changed=True,
        previous_status=order.status,
    )


# ==========================================
# Search & pipeline
# ==========================================

def matches_query(order: Order, query: Optional[str]) -> bool:
    if not query:
        return True
    q = query.lower()
    return any(
        q in (value or "").lower()
        for value in (order.order_number, order.customer_name, order.customer_phone)
    )


def filter_orders(orders: Iterable[Order], query: Optional[str] = None) -> List[Order]:
    """Flat list view: every order (unknown statuses included) matching the search."""
    return [o for o in orders if matches_query(o, query)]


def bucket_orders(orders: Iterable[Order], query: Optional[str] = None) -> Dict[OrderStatus, List[Order]]:
    """Pipeline view: matching orders grouped by canonical stage.

    Cancelled and unrecognized statuses belong to no column.
    """
    buckets: Dict[OrderStatus, List[Order]] = {stage: [] for stage in PIPELINE_STAGES}
    for order in filter_orders(orders, query):
        stage = normalize_status(order.status)
        if stage in buckets:
            buckets[stage].append(order)
    return buckets
