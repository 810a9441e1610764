"""
Decision source resolution.

Three independently stored inputs can describe what a user may do: the
per-user override keys, the legacy role string on the user record and the
active role assignments. Exactly one of them is authoritative, chosen by
`resolve_source`:

  1. non-empty overrides
  2. a non-blank legacy role string
  3. the union of all active assignments
"""

import logging
from typing import Iterable, Optional
from sqlalchemy.orm import Session

from lexpilot_backend.model.role import UserRole
from lexpilot_backend.permissions.principal import (
    DecisionSource,
    LegacyRoleSource,
    OverrideSource,
    Principal,
    RbacUnionSource,
    RoleGrant,
)
from lexpilot_backend.permissions.role_setup import canonical_role_for, matrix_for
from lexpilot_backend.permissions.routes import RouteTable, load_route_table
from lexpilot_backend.repositories.user import UserRepository
from lexpilot_backend.repositories.user_permission import UserPermissionRepository
from lexpilot_backend.repositories.user_role import UserRoleRepository

logger = logging.getLogger(__name__)


def resolve_source(
    overrides: Iterable[str] = (),
    legacy_role: Optional[str] = None,
    grants: Iterable[RoleGrant] = (),
) -> DecisionSource:
    keys = tuple(key for key in overrides if key)
    if keys:
        return OverrideSource(keys=keys)

    if legacy_role is not None and legacy_role.strip():
        role = canonical_role_for(legacy_role)
        return LegacyRoleSource(role=role, permissions=matrix_for(role))

    return RbacUnionSource(grants=tuple(grants))


def grant_from_assignment(assignment: UserRole) -> RoleGrant:
    return RoleGrant(name=assignment.role.name, permissions=assignment.role.permissions or {})


class PrincipalBuilder:
    """Builds Principal objects from stored or already known authorization inputs"""

    @staticmethod
    def build(user_id: str, db: Session, route_table: Optional[RouteTable] = None) -> Principal:
        """
        Load the user's overrides, legacy role and active assignments and
        resolve them into a Principal.

        Raises:
            NotFoundError: If the user does not exist
        """
        user = UserRepository(db).get_by_id(user_id)
        overrides = UserPermissionRepository(db).list_keys(user_id)

        # Assignments are only consulted when nothing ranks above them
        grants = []
        if not overrides and not (user.role and user.role.strip()):
            grants = [
                grant_from_assignment(assignment)
                for assignment in UserRoleRepository(db).list_active_by_user(user_id)
            ]

        source = resolve_source(overrides=overrides, legacy_role=user.role, grants=grants)
        logger.debug(f"Resolved {source.kind} decision source for user {user_id}")

        return Principal(
            user_id=user_id,
            source=source,
            route_table=route_table if route_table is not None else load_route_table(),
        )

    @staticmethod
    def from_login(
        user_id: Optional[str] = None,
        legacy_role: Optional[str] = None,
        grants: Iterable[RoleGrant] = (),
        overrides: Iterable[str] = (),
        route_table: Optional[RouteTable] = None,
    ) -> Principal:
        """Build a Principal from inputs that are already known at login time"""
        return Principal(
            user_id=user_id,
            source=resolve_source(overrides=overrides, legacy_role=legacy_role, grants=grants),
            route_table=route_table if route_table is not None else load_route_table(),
        )
