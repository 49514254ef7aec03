"""
Pytest fixtures for the admin control plane tests.
"""

import os

# config.settings exits without a secret; set test env before anything imports it
os.environ.setdefault("SECRET_KEY", "test-secret-key")
os.environ.setdefault("DATABASE_URL", "sqlite://")
os.environ.setdefault("ORDERS_BACKEND", "sql")

import anyio
import pytest

from common.exceptions import ExternalServiceError, NotFoundError
from modules.order.gateway import BaseOrderGateway
from modules.order.schemas import Order
from modules.order.store import OrderStore
from modules.permission.roles import RoleRegistry
from modules.user.models import Principal


class FakeOrderGateway(BaseOrderGateway):
    """In-memory order service with switchable failures."""
    name = "fake"

    def __init__(self, orders=None):
        self.orders = {o.id: o for o in (orders or [])}
        self.fail_fetch = False
        self.fail_updates = set()       # order ids whose update fails
        self.update_delays = {}         # status → seconds before responding
        self.update_calls = []

    async def fetch_orders(self):
        if self.fail_fetch:
            raise ExternalServiceError("Order service timed out")
        return list(self.orders.values())

    async def update_order(self, order_id, fields):
        self.update_calls.append((order_id, dict(fields)))
        delay = self.update_delays.get(fields.get("status"))
        if delay:
            await anyio.sleep(delay)
        if order_id in self.fail_updates:
            raise ExternalServiceError("Failed to update order: HTTP 500")
        if order_id not in self.orders:
            raise NotFoundError(f"Order {order_id} not found")
        updated = self.orders[order_id].model_copy(update=fields)
        self.orders[order_id] = updated
        return updated


def make_order(order_id, status="pending", total=0.0, **extra) -> Order:
    data = {
        "id": order_id,
        "order_number": f"#{order_id.upper()}",
        "status": status,
        "total": total,
    }
    data.update(extra)
    return Order(**data)


@pytest.fixture
def anyio_backend():
    return "asyncio"


@pytest.fixture
def sample_orders():
    return [
        make_order("o1", "pending", 500, customer_name="Ayesha Khan", customer_phone="0300-1111111",
                   created_at="2025-06-01T12:00:00Z"),
        make_order("o2", "delivered", 1000, customer_name="Bilal Ahmed", customer_phone="0301-2222222",
                   created_at="2025-06-02T18:30:00Z"),
        make_order("o3", "cancelled", 300, customer_name="Sara Ali", customer_phone="0302-3333333",
                   created_at="2025-06-02T19:00:00Z"),
    ]


@pytest.fixture
def gateway(sample_orders):
    return FakeOrderGateway(sample_orders)


@pytest.fixture
def store(gateway, sample_orders):
    return OrderStore(gateway, sample_orders)


@pytest.fixture
def registry():
    return RoleRegistry.with_defaults()


@pytest.fixture
def admin_principal():
    return Principal(id="u-admin", email="admin@foodhub.test", role="admin")


@pytest.fixture
def staff_principal():
    return Principal(id="u-staff", email="kitchen@foodhub.test", role="staff")
