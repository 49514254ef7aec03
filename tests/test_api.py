"""
Tests: HTTP API
=================
Routes exercised through TestClient with the registry and order store
overridden per test.
"""

import pytest
from fastapi.testclient import TestClient

from common.security import create_token
from main import app
from modules.admin.deps import get_order_store, get_permission_policy, get_role_registry
from modules.order.store import OrderStore
from modules.permission.resolver import PermissionPolicy

from conftest import FakeOrderGateway, make_order


def auth(role, sub="u1"):
    return {"Authorization": f"Bearer {create_token({'sub': sub, 'role': role})}"}


@pytest.fixture
def api_gateway(sample_orders):
    return FakeOrderGateway(sample_orders)


@pytest.fixture
def client(registry, api_gateway, sample_orders):
    store = OrderStore(api_gateway, sample_orders)
    app.dependency_overrides[get_role_registry] = lambda: registry
    app.dependency_overrides[get_order_store] = lambda: store
    app.dependency_overrides[get_permission_policy] = lambda: PermissionPolicy.STRICT
    yield TestClient(app)
    app.dependency_overrides.clear()


class TestAuth:
    def test_health_is_public(self, client):
        assert client.get("/health").json()["status"] == "ok"

    def test_anonymous_rejected(self, client):
        resp = client.get("/admin/navigation")
        assert resp.status_code == 401
        assert resp.json()["detail"] == "login_required"

    def test_bad_token_rejected(self, client):
        resp = client.get("/admin/navigation", headers={"Authorization": "Bearer not-a-jwt"})
        assert resp.status_code == 401

    def test_cookie_token(self, client):
        client.cookies.set("auth_token", create_token({"sub": "u1", "role": "staff"}))
        assert client.get("/admin/navigation").status_code == 200


class TestNavigation:
    def test_staff_navigation(self, client):
        data = client.get("/admin/navigation?active=roles", headers=auth("staff")).json()
        assert [s["id"] for s in data["sections"]] == ["dashboard", "orders"]
        assert data["active_section"] == "dashboard"
        assert data["actions"]["orders"]["cancel"] is False
        assert data["role"]["id"] == "staff"
        assert data["show_all"] is False

    def test_role_from_user_metadata(self, client):
        token = create_token({"sub": "u2", "user_metadata": {"role": "support"}})
        data = client.get("/admin/navigation", headers={"Authorization": f"Bearer {token}"}).json()
        assert [s["id"] for s in data["sections"]] == ["dashboard", "orders", "users"]


class TestOrders:
    def test_pipeline_view(self, client):
        data = client.get("/admin/orders", headers=auth("staff")).json()
        assert data["view"] == "pipeline"
        assert [o["id"] for o in data["stages"]["pending"]] == ["o1"]
        assert "cancelled" not in data["stages"]

    def test_unknown_status_shown_as_unknown(self, client, api_gateway):
        app.dependency_overrides[get_order_store] = lambda: OrderStore(api_gateway, [make_order("r9", "refunded")])
        data = client.get("/admin/orders?view=list", headers=auth("staff")).json()
        assert data["orders"][0]["status_label"] == "Unknown"
        assert data["orders"][0]["status_color"] == "#6B7280"

    def test_pipeline_orders_carry_labels(self, client):
        data = client.get("/admin/orders", headers=auth("staff")).json()
        assert data["stages"]["pending"][0]["status_label"] == "New Order"

    def test_list_view_with_search(self, client):
        data = client.get("/admin/orders?view=list&search=bilal", headers=auth("staff")).json()
        assert data["total"] == 1
        assert data["orders"][0]["id"] == "o2"

    def test_invalid_view(self, client):
        assert client.get("/admin/orders?view=grid", headers=auth("staff")).status_code == 422

    def test_advance_returns_fresh_stats(self, client):
        resp = client.post("/admin/orders/o1/advance", headers=auth("staff"))
        assert resp.status_code == 200
        data = resp.json()
        assert data["status"] == "confirmed"
        assert data["stats"]["pipeline_counts"]["confirmed"] == 1
        assert data["stats"]["pending_count"] == 0

    def test_cancel_forbidden_for_staff(self, client, api_gateway):
        resp = client.post("/admin/orders/o1/cancel", headers=auth("staff"))
        assert resp.status_code == 403
        assert api_gateway.update_calls == []

    def test_unknown_status(self, client):
        resp = client.post("/admin/orders/o1/status", json={"status": "lost"}, headers=auth("admin"))
        assert resp.status_code == 422

    def test_unknown_order(self, client):
        assert client.post("/admin/orders/zzz/advance", headers=auth("admin")).status_code == 404

    def test_service_failure_maps_to_502(self, client, api_gateway):
        api_gateway.fail_updates.add("o1")
        resp = client.post("/admin/orders/o1/cancel", headers=auth("admin"))
        assert resp.status_code == 502

    def test_refresh_failure_keeps_cache(self, client, api_gateway):
        api_gateway.fail_fetch = True
        data = client.post("/admin/orders/refresh", headers=auth("admin")).json()
        assert data == {"ok": False, "error": "Order service timed out", "total": 3}

    def test_advance_all(self, client):
        data = client.post("/admin/orders/advance-all", json={}, headers=auth("admin")).json()
        assert [r["order"]["id"] for r in data["advanced"]] == ["o1"]
        assert data["skipped"] == ["o2", "o3"]


class TestRoles:
    def test_list_and_catalog(self, client):
        data = client.get("/admin/roles", headers=auth("admin")).json()
        assert data["total"] == 4
        catalog = client.get("/admin/roles/capabilities", headers=auth("admin")).json()
        assert len(catalog["modules"]) == 7

    def test_create_update_delete(self, client):
        created = client.post(
            "/admin/roles",
            json={"name": "Rider", "capability_ids": ["view_orders"]},
            headers=auth("admin"),
        )
        assert created.status_code == 201
        role_id = created.json()["id"]

        patched = client.patch(f"/admin/roles/{role_id}", json={"description": "Delivers"}, headers=auth("admin"))
        assert patched.json()["description"] == "Delivers"
        assert patched.json()["capability_ids"] == ["view_orders"]

        assert client.delete(f"/admin/roles/{role_id}", headers=auth("admin")).status_code == 204
        assert client.get("/admin/roles", headers=auth("admin")).json()["total"] == 4

    def test_admin_role_is_immutable(self, client):
        assert client.patch("/admin/roles/admin", json={"name": "Root"}, headers=auth("admin")).status_code == 409
        assert client.delete("/admin/roles/admin", headers=auth("admin")).status_code == 409

    def test_empty_name_rejected(self, client):
        assert client.post("/admin/roles", json={"name": "  "}, headers=auth("admin")).status_code == 422

    def test_manager_cannot_manage_roles(self, client):
        assert client.post("/admin/roles", json={"name": "X"}, headers=auth("manager")).status_code == 403
