"""
Role/permission resolution for LexPilot.

Main components:
- catalog: permission keys and canonical role names
- role_setup: canonical role matrices and seeding
- routes: route permission table and path matching
- principal: decision sources and the Principal decision object
- resolver: precedence between overrides, legacy role and assignments
- claims: SSO claims to role mapping
- auth / dependencies: FastAPI authentication and guards
"""

from .catalog import Permission, RoleName, CUSTOM_ROLE_NAME, split_permission
from .claims import map_claims_to_role, normalize_claim
from .principal import (
    DecisionSource,
    LegacyRoleSource,
    OverrideSource,
    Principal,
    RbacUnionSource,
    RoleGrant,
)
from .resolver import PrincipalBuilder, resolve_source
from .routes import DEFAULT_ROUTE_TABLE, RouteRule, RouteTable, load_route_table

__all__ = [
    "Permission",
    "RoleName",
    "CUSTOM_ROLE_NAME",
    "split_permission",
    "map_claims_to_role",
    "normalize_claim",
    "DecisionSource",
    "LegacyRoleSource",
    "OverrideSource",
    "Principal",
    "RbacUnionSource",
    "RoleGrant",
    "PrincipalBuilder",
    "resolve_source",
    "DEFAULT_ROUTE_TABLE",
    "RouteRule",
    "RouteTable",
    "load_route_table",
]
