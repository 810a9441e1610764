from typing import Annotated, Any, Dict, Iterable, List, Literal, Optional, Sequence, Tuple, Union
from pydantic import BaseModel, ConfigDict, Field

from lexpilot_backend.permissions.catalog import CUSTOM_ROLE_NAME, ROLE_PRECEDENCE, RoleName, split_permission
from lexpilot_backend.permissions.role_setup import CUSTOM_ROLE_MATRIX
from lexpilot_backend.permissions.routes import DEFAULT_ROUTE_TABLE, RouteRule, RouteTable


# Matrices are kept as stored; has_permission only honours literal True values
class RoleGrant(BaseModel):
    """A named role together with the permission matrix it contributes"""
    model_config = ConfigDict(frozen=True)

    name: str
    permissions: Dict[str, Any] = Field(default_factory=dict)


class OverrideSource(BaseModel):
    """Access governed by a per-user allow-list of route keys"""
    model_config = ConfigDict(frozen=True)

    kind: Literal["overrides"] = "overrides"
    keys: Tuple[str, ...]


class LegacyRoleSource(BaseModel):
    """Access governed by the user's legacy role string, mapped to a canonical role"""
    model_config = ConfigDict(frozen=True)

    kind: Literal["legacy_role"] = "legacy_role"
    role: RoleName
    permissions: Dict[str, Any] = Field(default_factory=dict)


class RbacUnionSource(BaseModel):
    """Access governed by the union of all active role assignments"""
    model_config = ConfigDict(frozen=True)

    kind: Literal["rbac_union"] = "rbac_union"
    grants: Tuple[RoleGrant, ...] = ()


DecisionSource = Annotated[
    Union[OverrideSource, LegacyRoleSource, RbacUnionSource],
    Field(discriminator="kind"),
]


class Principal(BaseModel):
    """
    Authorization decision object for one authenticated user.

    Every query is a total function: a negative outcome is reported as
    False, never raised.
    """

    user_id: Optional[str] = None
    source: DecisionSource
    route_table: RouteTable = DEFAULT_ROUTE_TABLE

    @property
    def kind(self) -> str:
        return self.source.kind

    @property
    def grants(self) -> List[RoleGrant]:
        """Roles attached to the decision source with the matrices used for permission checks"""
        source = self.source
        if isinstance(source, OverrideSource):
            return [RoleGrant(name=CUSTOM_ROLE_NAME, permissions=CUSTOM_ROLE_MATRIX)]
        if isinstance(source, LegacyRoleSource):
            return [RoleGrant(name=source.role.value, permissions=source.permissions)]
        if isinstance(source, RbacUnionSource):
            return list(source.grants)
        raise TypeError(f"Unsupported decision source: {type(source).__name__}")

    @property
    def role_names(self) -> List[str]:
        names: List[str] = []
        for grant in self.grants:
            if grant.name not in names:
                names.append(grant.name)
        return names

    def has_role(self, role: str) -> bool:
        return role in self.role_names

    def has_any_role(self, roles: Iterable[str]) -> bool:
        return any(self.has_role(role) for role in roles)

    def has_all_roles(self, roles: Iterable[str]) -> bool:
        return all(self.has_role(role) for role in roles)

    def has_permission(self, permission: str) -> bool:
        """True if any contributing matrix grants `resource.action` with a literal True"""
        try:
            resource, action = split_permission(permission)
        except ValueError:
            return False

        for grant in self.grants:
            actions = grant.permissions.get(resource)
            if isinstance(actions, dict) and actions.get(action) is True:
                return True
        return False

    def has_any_permission(self, permissions: Iterable[str]) -> bool:
        return any(self.has_permission(permission) for permission in permissions)

    def has_all_permissions(self, permissions: Iterable[str]) -> bool:
        return all(self.has_permission(permission) for permission in permissions)

    def can_access_route(self, path: str) -> bool:
        rule = self.route_table.match(path)

        if isinstance(self.source, OverrideSource):
            # Only route keys count; roles and permissions of the rule are ignored
            return rule is not None and rule.route_key is not None and rule.route_key in self.source.keys

        if rule is None:
            return self.route_table.default_allow
        return self._satisfies(rule)

    def _satisfies(self, rule: RouteRule) -> bool:
        if rule.roles and not self.has_any_role(rule.roles):
            return False
        if rule.permissions:
            if rule.require_all:
                return self.has_all_permissions(rule.permissions)
            return self.has_any_permission(rule.permissions)
        return True

    def highest_role(self) -> Optional[str]:
        for role in ROLE_PRECEDENCE:
            if self.has_role(role.value):
                return role.value
        names = self.role_names
        return names[0] if names else None

    def is_platform_admin(self) -> bool:
        return self.has_role(RoleName.PLATFORM_ADMINISTRATOR.value)

    def is_legal_admin(self) -> bool:
        return self.has_role(RoleName.LEGAL_ADMIN.value)

    def is_department_admin(self) -> bool:
        return self.has_role(RoleName.DEPARTMENT_ADMIN.value)

    def is_department_user(self) -> bool:
        return self.has_role(RoleName.DEPARTMENT_USER.value)

    def accessible_routes(self) -> List[str]:
        """Paths of the route table this principal may open, in table order"""
        return [rule.path for rule in self.route_table.rules if self.can_access_route(rule.path)]

    def filter_routes(self, routes: Sequence[Union[str, RouteRule]]) -> List[Union[str, RouteRule]]:
        """Keep the entries (paths or rules) whose path is accessible"""
        return [
            route for route in routes
            if self.can_access_route(route if isinstance(route, str) else route.path)
        ]
