"""
Tests: Permission Resolver & Navigation
=========================================
"""

import pytest

from common.exceptions import UnauthorizedActionError
from modules.permission.resolver import (
    NAV_SECTIONS, PermissionPolicy, correct_active_section, resolve_permissions,
)
from modules.permission.roles import Role, RoleRegistry
from modules.user.models import Principal

ALL_SECTION_IDS = [s.id for s in NAV_SECTIONS]
STRICT = PermissionPolicy.STRICT


def principal(role):
    return Principal(id="u1", email="u1@foodhub.test", role=role)


class TestAnonymous:
    def test_no_sections_no_actions(self, registry):
        perms = resolve_permissions(None, registry)
        assert not perms.is_authenticated
        assert perms.visible_sections() == []
        assert not perms.can_access("view_dashboard")
        assert all(not flag for actions in perms.section_actions().values() for flag in actions.values())

    def test_require_reports_unauthenticated(self, registry):
        with pytest.raises(UnauthorizedActionError) as exc:
            resolve_permissions(None, registry).require("view_orders")
        assert exc.value.authenticated is False


class TestStrictPolicy:
    def test_staff_sees_dashboard_and_orders(self, registry):
        perms = resolve_permissions(principal("staff"), registry, STRICT)
        assert perms.visible_section_ids() == ["dashboard", "orders"]
        assert perms.section_actions()["orders"] == {"advance": True, "set_status": True, "cancel": False}

    def test_support_sees_exactly_three_sections(self, registry):
        perms = resolve_permissions(principal("support"), registry, STRICT)
        assert perms.visible_section_ids() == ["dashboard", "orders", "users"]

    def test_admin_sees_everything(self, registry):
        perms = resolve_permissions(principal("admin"), registry, STRICT)
        assert perms.visible_section_ids() == ALL_SECTION_IDS

    def test_manager_categories_via_product_edit(self, registry):
        ids = resolve_permissions(principal("manager"), registry, STRICT).visible_section_ids()
        assert "categories" in ids
        assert "notifications" in ids
        assert "roles" not in ids
        assert "settings" not in ids

    def test_unknown_role_keeps_navigation_but_denies_actions(self, registry):
        perms = resolve_permissions(principal("ghost"), registry, STRICT)
        assert perms.visible_section_ids() == ALL_SECTION_IDS
        with pytest.raises(UnauthorizedActionError):
            perms.require("manage_orders")

    def test_role_matched_by_name(self, registry):
        perms = resolve_permissions(principal("Kitchen Staff"), registry, STRICT)
        assert perms.role.id == "staff"


class TestShowAllPolicy:
    @pytest.mark.parametrize("role", ["admin", "manager", "staff", "support"])
    def test_builtin_roles_see_everything(self, registry, role):
        perms = resolve_permissions(principal(role), registry)
        assert perms.show_all
        assert perms.visible_section_ids() == ALL_SECTION_IDS

    def test_registry_not_loaded(self):
        perms = resolve_permissions(principal("rider"), RoleRegistry())
        assert perms.show_all
        assert perms.can_access("manage_settings")

    def test_role_with_empty_capabilities(self):
        registry = RoleRegistry([Role(id="trainee", name="Trainee")])
        perms = resolve_permissions(principal("trainee"), registry)
        assert perms.show_all
        assert perms.visible_section_ids() == ALL_SECTION_IDS

    def test_custom_role_with_support_capabilities(self, registry):
        role = registry.create("Help Desk", capability_ids=["view_dashboard", "view_orders", "view_users"])
        perms = resolve_permissions(principal(role.id), registry)
        assert not perms.show_all
        assert perms.visible_section_ids() == ["dashboard", "orders", "users"]

    def test_custom_role_is_filtered(self, registry):
        role = registry.create("Marketer", capability_ids=["view_marketing"])
        perms = resolve_permissions(principal(role.id), registry)
        assert perms.visible_section_ids() == ["marketing"]
        assert perms.section_actions()["marketing"] == {"manage": False}


class TestNeverEmpty:
    @pytest.mark.parametrize("policy", list(PermissionPolicy))
    @pytest.mark.parametrize("capability_ids", [[], ["delete_products"], ["manage_orders"]])
    def test_signed_in_principal_always_has_a_section(self, policy, capability_ids):
        registry = RoleRegistry([Role(id="r", name="R", capability_ids=frozenset(capability_ids))])
        perms = resolve_permissions(principal("r"), registry, policy)
        assert perms.visible_sections()


class TestCanAccess:
    def test_module_name_means_any_capability(self, registry):
        role = registry.create("Packer", capability_ids=["manage_orders"])
        perms = resolve_permissions(principal(role.id), registry, STRICT)
        assert perms.can_access("orders")
        assert not perms.can_access("products")
        assert not perms.can_access("view_orders")


class TestActiveSection:
    def test_keeps_visible_section(self):
        assert correct_active_section("orders", ["dashboard", "orders"]) == "orders"

    def test_falls_back_to_first_visible(self):
        assert correct_active_section("roles", ["dashboard", "orders"]) == "dashboard"

    def test_nothing_visible(self):
        assert correct_active_section("roles", []) is None
