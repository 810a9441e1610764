"""
Tests for decision sources, precedence and the Principal queries.
"""

import pytest

from lexpilot_backend.interface.roles import RoleUpdate
from lexpilot_backend.interface.user_roles import UserRoleCreate, UserRoleUpdate
from lexpilot_backend.permissions.catalog import CUSTOM_ROLE_NAME, Permission, RoleName
from lexpilot_backend.permissions.principal import (
    LegacyRoleSource,
    OverrideSource,
    Principal,
    RbacUnionSource,
    RoleGrant,
)
from lexpilot_backend.permissions.resolver import PrincipalBuilder, resolve_source
from lexpilot_backend.permissions.role_setup import CANONICAL_ROLE_MATRICES, seed_canonical_roles
from lexpilot_backend.permissions.routes import DEFAULT_ROUTE_TABLE, RouteRule, RouteTable
from lexpilot_backend.repositories import NotFoundError
from lexpilot_backend.repositories.role import RoleRepository
from lexpilot_backend.repositories.user_permission import UserPermissionRepository
from lexpilot_backend.repositories.user_role import UserRoleRepository


def rbac(*grants: RoleGrant, route_table: RouteTable = DEFAULT_ROUTE_TABLE) -> Principal:
    return Principal(user_id="u1", source=RbacUnionSource(grants=grants), route_table=route_table)


def legacy(role: str) -> Principal:
    return PrincipalBuilder.from_login(user_id="u1", legacy_role=role, route_table=DEFAULT_ROUTE_TABLE)


def assign(db, user, role):
    return UserRoleRepository(db).assign(UserRoleCreate(user_id=user.id, role_id=role.id))


# ============================================================================
# Precedence
# ============================================================================

@pytest.mark.unit
class TestResolveSource:

    def test_overrides_win(self):
        source = resolve_source(
            overrides=["analytics"],
            legacy_role="admin",
            grants=[RoleGrant(name="Legal Admin")],
        )

        assert isinstance(source, OverrideSource)
        assert source.keys == ("analytics",)

    def test_legacy_role_beats_assignments(self):
        source = resolve_source(legacy_role="admin", grants=[RoleGrant(name="Department User")])

        assert isinstance(source, LegacyRoleSource)
        assert source.role == RoleName.PLATFORM_ADMINISTRATOR

    @pytest.mark.parametrize("legacy_role", [None, "", "   "])
    def test_assignments_without_legacy_role(self, legacy_role):
        source = resolve_source(legacy_role=legacy_role, grants=[RoleGrant(name="Reviewer")])

        assert isinstance(source, RbacUnionSource)
        assert [grant.name for grant in source.grants] == ["Reviewer"]

    def test_nothing_yields_empty_union(self):
        source = resolve_source()

        assert isinstance(source, RbacUnionSource)
        assert source.grants == ()

    @pytest.mark.parametrize("legacy_role,expected", [
        ("admin", RoleName.PLATFORM_ADMINISTRATOR),
        ("ADMIN", RoleName.PLATFORM_ADMINISTRATOR),
        ("Platform Administrator", RoleName.PLATFORM_ADMINISTRATOR),
        ("legal_admin", RoleName.LEGAL_ADMIN),
        ("Legal Admin", RoleName.LEGAL_ADMIN),
        ("dept_admin", RoleName.DEPARTMENT_ADMIN),
        ("viewer", RoleName.DEPARTMENT_USER),
        ("user", RoleName.DEPARTMENT_USER),
        ("something else", RoleName.DEPARTMENT_USER),
    ])
    def test_legacy_role_mapping(self, legacy_role, expected):
        source = resolve_source(legacy_role=legacy_role)

        assert source.role == expected
        assert source.permissions == CANONICAL_ROLE_MATRICES[expected]

    def test_source_round_trips_through_discriminator(self):
        principal = legacy("admin")

        restored = Principal.model_validate(principal.model_dump())

        assert isinstance(restored.source, LegacyRoleSource)
        assert restored.kind == "legacy_role"


# ============================================================================
# Permission queries
# ============================================================================

@pytest.mark.unit
class TestPermissionQueries:

    def test_union_of_matrices(self):
        principal = rbac(
            RoleGrant(name="Reader", permissions={"documents": {"read": True}}),
            RoleGrant(name="Analyst", permissions={"analytics": {"view": True}}),
        )

        assert principal.has_permission("documents.read")
        assert principal.has_permission("analytics.view")
        assert not principal.has_permission("documents.delete")

    @pytest.mark.parametrize("permission", [
        "documents", "documents.read.extra", ".read", "documents.", "", None, 42,
    ])
    def test_malformed_keys_are_false(self, permission):
        principal = rbac(RoleGrant(name="Reader", permissions={"documents": {"read": True}}))

        assert principal.has_permission(permission) is False

    @pytest.mark.parametrize("matrix", [
        {"documents": {"read": "true"}},
        {"documents": {"read": 1}},
        {"documents": True},
        {"documents": None},
        {},
    ])
    def test_only_literal_true_grants(self, matrix):
        principal = rbac(RoleGrant(name="Odd", permissions=matrix))

        assert principal.has_permission("documents.read") is False

    def test_any_and_all(self):
        principal = rbac(RoleGrant(name="Reader", permissions={"documents": {"read": True}}))

        assert principal.has_any_permission(["documents.read", "documents.delete"])
        assert not principal.has_all_permissions(["documents.read", "documents.delete"])
        assert principal.has_all_permissions([])
        assert not principal.has_any_permission([])

    def test_enum_members_are_accepted(self):
        principal = legacy("legal_admin")

        assert principal.has_permission(Permission.CONTRACTS_APPROVE)
        assert not principal.has_permission(Permission.SYSTEM_CONFIGURE)

    def test_canonical_matrices_strictly_decrease(self):
        def granted(role):
            return {
                permission.value for permission in Permission
                if legacy(role.value).has_permission(permission.value)
            }

        levels = [granted(role) for role in RoleName]

        for higher, lower in zip(levels, levels[1:]):
            assert lower < higher

    def test_override_source_uses_custom_matrix(self):
        principal = PrincipalBuilder.from_login(overrides=["analytics"], route_table=DEFAULT_ROUTE_TABLE)

        assert principal.role_names == [CUSTOM_ROLE_NAME]
        assert principal.has_permission("contracts.approve")
        assert principal.has_permission("analytics.view")
        assert not principal.has_permission("system.configure")
        assert not principal.has_permission("users.read")


# ============================================================================
# Roles
# ============================================================================

@pytest.mark.unit
class TestRoleQueries:

    def test_rbac_roles(self):
        principal = rbac(RoleGrant(name="Legal Admin"), RoleGrant(name="Department User"))

        assert principal.has_role("Legal Admin")
        assert not principal.has_role("legal admin")
        assert principal.has_any_role(["Platform Administrator", "Department User"])
        assert principal.has_all_roles(["Legal Admin", "Department User"])
        assert not principal.has_all_roles(["Legal Admin", "Platform Administrator"])

    def test_highest_role(self):
        principal = rbac(RoleGrant(name="Department User"), RoleGrant(name="Department Admin"))

        assert principal.highest_role() == "Department Admin"
        assert principal.is_department_admin()
        assert principal.is_department_user()
        assert not principal.is_legal_admin()

    def test_highest_role_for_custom_roles(self):
        assert rbac(RoleGrant(name="Reviewer")).highest_role() == "Reviewer"
        assert rbac().highest_role() is None

    def test_legacy_role_has_single_canonical_role(self):
        principal = legacy("admin")

        assert principal.role_names == ["Platform Administrator"]
        assert principal.is_platform_admin()
        assert not principal.has_role("admin")


# ============================================================================
# Route access
# ============================================================================

@pytest.mark.unit
class TestRouteAccess:

    def test_unmatched_route_is_allowed_by_default(self):
        assert rbac().can_access_route("/not-registered")
        assert legacy("viewer").can_access_route("/brand/new/page")

    def test_fail_closed_table_denies_unmatched_route(self):
        principal = rbac(route_table=DEFAULT_ROUTE_TABLE.with_default(False))

        assert not principal.can_access_route("/not-registered")

    @pytest.mark.parametrize("role,path,expected", [
        ("admin", "/admin", True),
        ("legal_admin", "/admin", False),
        ("legal_admin", "/analytics", True),
        ("dept_admin", "/intake", True),
        ("viewer", "/intake", False),
        ("viewer", "/review", True),
        ("viewer", "/review/17", True),
        ("viewer", "/draft", False),
        ("viewer", "/partners", True),
        ("viewer", "/playbooks/3", False),
        ("viewer", "/legal", True),
    ])
    def test_legacy_roles_against_default_table(self, role, path, expected):
        assert legacy(role).can_access_route(path) is expected

    def test_route_requires_roles_and_permissions(self):
        grant = RoleGrant(name="Platform Administrator", permissions={"documents": {"read": True}})

        # Role matches, but system.configure is missing
        assert not rbac(grant).can_access_route("/admin")

    def test_require_all(self):
        routes = RouteTable(rules=(
            RouteRule(path="/reports", permissions=("analytics.view", "documents.read"), require_all=True),
        ))
        partial = rbac(RoleGrant(name="A", permissions={"analytics": {"view": True}}), route_table=routes)
        full = rbac(
            RoleGrant(name="A", permissions={"analytics": {"view": True}}),
            RoleGrant(name="B", permissions={"documents": {"read": True}}),
            route_table=routes,
        )

        assert not partial.can_access_route("/reports")
        assert full.can_access_route("/reports")

    def test_rule_without_requirements_allows_everyone(self):
        routes = RouteTable(rules=(RouteRule(path="/open"),), default_allow=False)

        assert rbac(route_table=routes).can_access_route("/open")

    def test_accessible_routes(self):
        routes = legacy("viewer").accessible_routes()

        assert "/review" in routes
        assert "/review/:id" in routes
        assert "/admin" not in routes
        assert "/intake" not in routes

    def test_filter_routes(self):
        principal = legacy("viewer")
        rules = list(DEFAULT_ROUTE_TABLE.rules)

        assert principal.filter_routes(["/admin", "/help", "/search"]) == ["/help", "/search"]
        assert [rule.path for rule in principal.filter_routes(rules)] == principal.accessible_routes()


@pytest.mark.unit
class TestOverrideRouteAccess:

    def test_scenario_override_keys(self):
        principal = PrincipalBuilder.from_login(user_id="u2", overrides=["analytics"], route_table=DEFAULT_ROUTE_TABLE)

        assert principal.can_access_route("/analytics")
        assert not principal.can_access_route("/admin")

    def test_override_key_covers_pattern_routes(self):
        principal = PrincipalBuilder.from_login(overrides=["review"], route_table=DEFAULT_ROUTE_TABLE)

        assert principal.can_access_route("/review")
        assert principal.can_access_route("/review/99")

    def test_override_denies_unmatched_and_keyless_routes(self):
        principal = PrincipalBuilder.from_login(overrides=["analytics"], route_table=DEFAULT_ROUTE_TABLE)

        assert not principal.can_access_route("/not-registered")
        assert not principal.can_access_route("/legal")

    def test_override_ignores_rule_roles(self):
        principal = PrincipalBuilder.from_login(overrides=["admin"], route_table=DEFAULT_ROUTE_TABLE)

        assert principal.can_access_route("/admin")
        assert not principal.is_platform_admin()

    @pytest.mark.parametrize("legacy_role,grants", [
        (None, []),
        ("admin", []),
        ("viewer", [RoleGrant(name="Platform Administrator", permissions={"system": {"configure": True}})]),
        (None, [RoleGrant(name="Legal Admin", permissions={"analytics": {"view": True}})]),
    ])
    def test_decision_depends_only_on_overrides(self, legacy_role, grants):
        principal = PrincipalBuilder.from_login(
            legacy_role=legacy_role,
            grants=grants,
            overrides=["analytics", "draft"],
            route_table=DEFAULT_ROUTE_TABLE,
        )

        decisions = {rule.path: principal.can_access_route(rule.path) for rule in DEFAULT_ROUTE_TABLE.rules}

        assert [path for path, allowed in decisions.items() if allowed] == ["/draft", "/analytics"]


# ============================================================================
# Building from the stores
# ============================================================================

@pytest.mark.integration
class TestPrincipalBuilder:

    def test_scenario_assigned_role_matrix(self, db, make_user, make_role):
        user = make_user()
        role = make_role("Legal Admin", permissions={"documents": {"read": True}})
        assign(db, user, role)

        principal = PrincipalBuilder.build(user.id, db, DEFAULT_ROUTE_TABLE)

        assert principal.kind == "rbac_union"
        assert principal.has_permission("documents.read")
        assert not principal.has_permission("documents.delete")

    def test_inactive_assignments_and_roles_do_not_contribute(self, db, make_user, make_role):
        user = make_user()
        inactive_role = make_role("Inactive", permissions={"analytics": {"view": True}})
        toggled = make_role("Toggled", permissions={"team": {"manage": True}})
        assign(db, user, inactive_role)
        link = assign(db, user, toggled)
        RoleRepository(db).update_role(inactive_role.id, RoleUpdate(is_active=False))
        UserRoleRepository(db).update_assignment(link.id, UserRoleUpdate(is_active=False))

        principal = PrincipalBuilder.build(user.id, db, DEFAULT_ROUTE_TABLE)

        assert principal.role_names == []
        assert not principal.has_permission("analytics.view")
        assert not principal.has_permission("team.manage")

    def test_additional_assignment_is_monotonic(self, db, make_user):
        seed_canonical_roles(db)
        user = make_user()
        repository = RoleRepository(db)
        roles = [repository.find_by_name(role.value) for role in reversed(list(RoleName))]
        keys = [permission.value for permission in Permission]

        granted = set()
        for role in roles:
            assign(db, user, role)
            principal = PrincipalBuilder.build(user.id, db, DEFAULT_ROUTE_TABLE)
            now_granted = {key for key in keys if principal.has_permission(key)}
            assert granted <= now_granted
            granted = now_granted

        assert granted == keys_granted_to(RoleName.PLATFORM_ADMINISTRATOR)

    def test_legacy_role_takes_precedence_over_assignments(self, db, make_user, make_role):
        user = make_user(role="viewer")
        assign(db, user, make_role("Everything", permissions={"system": {"configure": True}}))

        principal = PrincipalBuilder.build(user.id, db, DEFAULT_ROUTE_TABLE)

        assert principal.kind == "legacy_role"
        assert principal.role_names == ["Department User"]
        assert not principal.has_permission("system.configure")

    def test_overrides_take_precedence(self, db, make_user):
        user = make_user(role="admin")
        UserPermissionRepository(db).replace_all(user.id, ["analytics"])

        principal = PrincipalBuilder.build(user.id, db, DEFAULT_ROUTE_TABLE)

        assert principal.kind == "overrides"
        assert principal.can_access_route("/analytics")
        assert not principal.can_access_route("/admin")

    def test_clearing_overrides_restores_role_decision(self, db, make_user):
        user = make_user(role="admin")
        overrides = UserPermissionRepository(db)
        overrides.replace_all(user.id, ["analytics"])
        overrides.replace_all(user.id, [])

        principal = PrincipalBuilder.build(user.id, db, DEFAULT_ROUTE_TABLE)

        assert principal.kind == "legacy_role"
        assert principal.can_access_route("/admin")

    def test_missing_user(self, db):
        with pytest.raises(NotFoundError):
            PrincipalBuilder.build("missing", db, DEFAULT_ROUTE_TABLE)

    def test_uses_configured_route_table(self, db, make_user, monkeypatch):
        from lexpilot_backend.permissions import routes as routes_module
        monkeypatch.setattr(routes_module.settings, "ROUTE_TABLE_PATH", None)
        monkeypatch.setattr(routes_module.settings, "ROUTE_DEFAULT_ALLOW", False)
        user = make_user(role="viewer")

        principal = PrincipalBuilder.build(user.id, db)

        assert not principal.can_access_route("/not-registered")


def keys_granted_to(role: RoleName):
    principal = legacy(role.value)
    return {permission.value for permission in Permission if principal.has_permission(permission.value)}
