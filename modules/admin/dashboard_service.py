"""
Admin Dashboard Service
=========================
Aggregated statistics for the admin dashboard, computed from the order set.

All functions are pure and recompute from scratch on every call.
"""

from typing import Dict, Any, Iterable, List

from common.helpers import parse_datetime, weekday_sunday_first
from modules.order.lifecycle import bucket_orders, normalize_status, order_payload
from modules.order.models import OrderStatus
from modules.order.schemas import Order

WEEKDAY_NAMES = ["Sun", "Mon", "Tue", "Wed", "Thu", "Fri", "Sat"]
RECENT_ORDERS_LIMIT = 5


def _is_revenue_eligible(order: Order) -> bool:
    return normalize_status(order.status) != OrderStatus.CANCELLED


def revenue(orders: Iterable[Order]) -> float:
    """Sum of order totals, cancelled orders excluded."""
    return sum(o.amount for o in orders if _is_revenue_eligible(o))


def order_count(orders: Iterable[Order]) -> int:
    """Every order counts, cancelled and unknown statuses included."""
    return len(list(orders))


def distinct_customers(orders: Iterable[Order]) -> int:
    """Distinct customer keys across all identity fields.

    Each non-empty identity field of an order is added separately, so one order
    can contribute several keys when its fields differ.
    """
    keys = set()
    for order in orders:
        for value in (order.customer, order.customer_name, order.customer_phone, order.user_id):
            if value:
                keys.add(value)
    return len(keys)


def _order_datetime(order: Order):
    return parse_datetime(order.created_at) or parse_datetime(order.date)


def sales_by_weekday(orders: Iterable[Order]) -> List[Dict[str, Any]]:
    """Revenue per weekday (Sun..Sat). Orders without a parseable date are skipped."""
    totals = [0.0] * 7
    for order in orders:
        if not _is_revenue_eligible(order):
            continue
        when = _order_datetime(order)
        if when is None:
            continue
        totals[weekday_sunday_first(when)] += order.amount
    return [{"name": name, "sales": totals[i]} for i, name in enumerate(WEEKDAY_NAMES)]


class DashboardService:

    def get_overview_stats(self, orders: Iterable[Order]) -> Dict[str, Any]:
        """Key business metrics."""
        orders = list(orders)
        buckets = bucket_orders(orders)
        pipeline_counts = {stage.value: len(items) for stage, items in buckets.items()}

        return {
            "revenue": revenue(orders),
            "orders": order_count(orders),
            "customers": distinct_customers(orders),
            "sales_by_weekday": sales_by_weekday(orders),
            "pipeline_counts": pipeline_counts,
            # menu badge: new orders waiting to be confirmed
            "pending_count": pipeline_counts[OrderStatus.PENDING.value],
            "recent_orders": [order_payload(o) for o in self.get_recent_orders(orders, RECENT_ORDERS_LIMIT)],
        }

    def get_recent_orders(self, orders: Iterable[Order], limit: int = 10) -> List[Order]:
        """Most recent orders for dashboard feed (newest first; undated orders last)."""
        dated = []
        undated = []
        for order in orders:
            when = _order_datetime(order)
            (dated if when is not None else undated).append((when, order))
        dated.sort(key=lambda pair: pair[0].timestamp(), reverse=True)
        return [o for _, o in dated + undated][:limit]


dashboard_service = DashboardService()
