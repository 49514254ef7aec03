"""
Tests: Permission Catalog & Role Registry
===========================================
"""

import pytest

from common.exceptions import (
    ImmutableRoleError, NotFoundError, SystemRoleProtectedError, ValidationError,
)
from modules.permission.catalog import (
    ALL_CAPABILITY_IDS, CAPABILITY_CATALOG, PermissionModule,
    capabilities_by_module, capabilities_for_module,
)
from modules.permission.roles import Role, RoleDraft, RoleRegistry


class TestCatalog:
    def test_catalog_has_sixteen_unique_capabilities(self):
        assert len(CAPABILITY_CATALOG) == 16
        assert len(ALL_CAPABILITY_IDS) == 16

    def test_grouping_covers_every_module(self):
        grouped = capabilities_by_module()
        assert set(grouped) == set(PermissionModule)
        assert sum(len(v) for v in grouped.values()) == 16
        assert [c.id for c in grouped[PermissionModule.ORDERS]] == [
            "view_orders", "manage_orders", "delete_orders",
        ]

    def test_capabilities_for_module_accepts_string(self):
        assert capabilities_for_module("system") == ["view_roles", "manage_roles"]


class TestDefaultRoles:
    def test_admin_holds_whole_catalog_and_is_system(self, registry):
        admin = registry.get("admin")
        assert admin.capability_ids == ALL_CAPABILITY_IDS
        assert admin.is_system
        assert not admin.is_editable

    def test_builtin_staff_roles(self, registry):
        assert registry.get("staff").capability_ids == {"view_dashboard", "view_orders", "manage_orders"}
        assert registry.get("support").capability_ids == {"view_dashboard", "view_orders", "view_users"}
        assert [r.id for r in registry.list_roles()] == ["admin", "manager", "staff", "support"]

    def test_find_matches_id_then_name_case_sensitive(self, registry):
        assert registry.find("manager").id == "manager"
        assert registry.find("Kitchen Staff").id == "staff"
        assert registry.find("Manager") is None
        assert registry.find(None) is None


class TestCreate:
    def test_create_assigns_fresh_id(self, registry):
        role = registry.create("Delivery Rider", "Sees dispatch queue", "#111111", ["view_orders"])
        assert role.id.startswith("role_")
        assert not role.is_system
        assert role.assigned_count == 0
        assert registry.get(role.id) == role

    def test_ids_are_unique(self, registry):
        ids = {registry.create(f"Role {i}").id for i in range(20)}
        assert len(ids) == 20

    @pytest.mark.parametrize("name", ["", "   ", None])
    def test_empty_name_rejected(self, registry, name):
        before = registry.list_roles()
        with pytest.raises(ValidationError):
            registry.create(name)
        assert registry.list_roles() == before

    def test_unknown_capability_rejected(self, registry):
        with pytest.raises(ValidationError):
            registry.create("Hacker", capability_ids=["launch_rockets"])


class TestUpdate:
    @pytest.mark.parametrize("patch", [
        {},
        {"name": "Root"},
        {"capability_ids": []},
        {"description": "changed", "color": "#000000"},
        {"is_system": False},
        None,
    ])
    def test_admin_can_never_be_updated(self, registry, patch):
        with pytest.raises(ImmutableRoleError):
            registry.update("admin", patch)
        assert registry.get("admin").name == "Super Admin"

    def test_merge_patch(self, registry):
        updated = registry.update("staff", {"description": "Line cooks", "capability_ids": ["view_orders"]})
        assert updated.description == "Line cooks"
        assert updated.name == "Kitchen Staff"
        assert updated.capability_ids == {"view_orders"}

    def test_patch_cannot_touch_protected_fields(self, registry):
        updated = registry.update("manager", {"is_system": True, "id": "boss", "assigned_count": 99})
        assert updated.id == "manager"
        assert not updated.is_system
        assert updated.assigned_count == 3

    def test_empty_name_rejected(self, registry):
        with pytest.raises(ValidationError):
            registry.update("manager", {"name": ""})
        assert registry.get("manager").name == "Store Manager"

    def test_unknown_role(self, registry):
        with pytest.raises(NotFoundError):
            registry.update("ghost", {"name": "Ghost"})


class TestDelete:
    def test_admin_cannot_be_deleted(self, registry):
        with pytest.raises(SystemRoleProtectedError):
            registry.delete("admin")
        assert registry.find("admin") is not None

    def test_admin_protected_even_if_missing(self):
        with pytest.raises(SystemRoleProtectedError):
            RoleRegistry().delete("admin")

    def test_other_system_roles_protected(self):
        registry = RoleRegistry([Role(id="owner", name="Owner", is_system=True)])
        with pytest.raises(SystemRoleProtectedError):
            registry.delete("owner")

    def test_delete_removes_role(self, registry):
        registry.delete("support")
        assert registry.find("support") is None
        with pytest.raises(NotFoundError):
            registry.get("support")


class TestDraft:
    def test_toggle_module_selects_all_then_clears(self, registry):
        draft = registry.begin_edit("staff")
        draft.toggle_module(PermissionModule.ORDERS)
        assert set(draft.capability_ids) >= {"view_orders", "manage_orders", "delete_orders"}

        draft.toggle_module("orders")
        assert not set(draft.capability_ids) & {"view_orders", "manage_orders", "delete_orders"}
        assert "view_dashboard" in draft.capability_ids

    def test_partial_module_selection_selects_all(self):
        draft = RoleDraft(capability_ids=["view_products"])
        draft.toggle_module("products")
        assert sorted(draft.capability_ids) == sorted(capabilities_for_module("products"))

    def test_draft_is_not_persisted_until_commit(self, registry):
        draft = registry.begin_edit("staff")
        draft.toggle_capability("view_users")
        assert "view_users" not in registry.get("staff").capability_ids

        registry.commit(draft)
        assert "view_users" in registry.get("staff").capability_ids

    def test_commit_new_draft_creates(self, registry):
        draft = registry.begin_edit()
        draft.name = "Cashier"
        draft.toggle_module("orders")
        role = registry.commit(draft)
        assert role.name == "Cashier"
        assert role.capability_ids == {"view_orders", "manage_orders", "delete_orders"}

    def test_admin_cannot_be_opened_for_edit(self, registry):
        with pytest.raises(ImmutableRoleError):
            registry.begin_edit("admin")
