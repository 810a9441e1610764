"""
Role setup utilities for the canonical system roles.

This module holds the hardcoded permission matrices attached to the four
canonical roles, the table that maps legacy role strings onto them, and the
seeding routine used by the CLI to create the roles in the registry.
"""

import copy
import logging
from typing import Dict, List, Optional
from sqlalchemy.orm import Session

from lexpilot_backend.interface.base import PermissionMatrix
from lexpilot_backend.interface.roles import RoleCreate, RoleUpdate
from lexpilot_backend.model.role import Role
from lexpilot_backend.permissions.catalog import RoleName
from lexpilot_backend.repositories.role import RoleRepository

logger = logging.getLogger(__name__)


CANONICAL_ROLE_MATRICES: Dict[RoleName, PermissionMatrix] = {
    RoleName.PLATFORM_ADMINISTRATOR: {
        "documents": {"create": True, "read": True, "update": True, "delete": True},
        "contracts": {"create": True, "read": True, "update": True, "delete": True, "approve": True, "submit": True},
        "team": {"view": True, "manage": True, "assign": True},
        "analytics": {"view": True},
        "system": {"configure": True, "monitor": True},
        "users": {"create": True, "read": True, "update": True, "delete": True},
        "roles": {"create": True, "read": True, "update": True, "delete": True},
        "departments": {"create": True, "read": True, "update": True, "delete": True},
    },
    # Everything except system configuration and role/department management
    RoleName.LEGAL_ADMIN: {
        "documents": {"create": True, "read": True, "update": True, "delete": True},
        "contracts": {"create": True, "read": True, "update": True, "delete": True, "approve": True, "submit": True},
        "team": {"view": True, "manage": True, "assign": True},
        "analytics": {"view": True},
        "users": {"read": True, "update": True},
    },
    RoleName.DEPARTMENT_ADMIN: {
        "documents": {"create": True, "read": True, "update": True},
        "contracts": {"create": True, "read": True, "submit": True},
        "team": {"view": True, "assign": True},
        "analytics": {"view": True},
    },
    RoleName.DEPARTMENT_USER: {
        "documents": {"read": True},
        "contracts": {"read": True},
        "team": {"view": True},
    },
}

# Matrix used for fine-grained checks when access is governed by overrides
CUSTOM_ROLE_MATRIX: PermissionMatrix = {
    "documents": {"create": True, "read": True, "update": True, "delete": True},
    "contracts": {"create": True, "read": True, "update": True, "delete": True, "approve": True, "submit": True},
    "team": {"view": True, "manage": True, "assign": True},
    "analytics": {"view": True},
}

CANONICAL_ROLE_DESCRIPTIONS: Dict[RoleName, str] = {
    RoleName.PLATFORM_ADMINISTRATOR: "Full platform access including system configuration",
    RoleName.LEGAL_ADMIN: "Legal team administration without system configuration",
    RoleName.DEPARTMENT_ADMIN: "Department level document and contract management",
    RoleName.DEPARTMENT_USER: "Read-only access to documents and contracts",
}

# Lowercased legacy role strings, including the roles produced by the SSO claims mapper
LEGACY_ROLE_ALIASES: Dict[str, RoleName] = {
    "admin": RoleName.PLATFORM_ADMINISTRATOR,
    "platform administrator": RoleName.PLATFORM_ADMINISTRATOR,
    "legal admin": RoleName.LEGAL_ADMIN,
    "legal_admin": RoleName.LEGAL_ADMIN,
    "department admin": RoleName.DEPARTMENT_ADMIN,
    "dept_admin": RoleName.DEPARTMENT_ADMIN,
    "viewer": RoleName.DEPARTMENT_USER,
    "department user": RoleName.DEPARTMENT_USER,
    "user": RoleName.DEPARTMENT_USER,
}

DEFAULT_LEGACY_ROLE = RoleName.DEPARTMENT_USER


def canonical_role_for(legacy_role: str) -> RoleName:
    """Map a legacy role string onto a canonical role; unknown values get the lowest role."""
    return LEGACY_ROLE_ALIASES.get(legacy_role.strip().lower(), DEFAULT_LEGACY_ROLE)


def matrix_for(role: RoleName) -> PermissionMatrix:
    """Return a copy of the canonical matrix so callers cannot mutate the table."""
    return copy.deepcopy(CANONICAL_ROLE_MATRICES[role])


def seed_canonical_roles(db: Session, update_existing: bool = False) -> List[Role]:
    """
    Make sure the four canonical roles exist in the role registry.

    Args:
        db: Database session
        update_existing: Reset the matrix of roles that already exist

    Returns:
        Roles that were created or updated
    """
    repository = RoleRepository(db)
    changed: List[Role] = []

    for role_name, matrix in CANONICAL_ROLE_MATRICES.items():
        existing: Optional[Role] = repository.find_by_name(role_name.value)

        if existing is None:
            role = repository.create_role(RoleCreate(
                name=role_name.value,
                description=CANONICAL_ROLE_DESCRIPTIONS[role_name],
                permissions=copy.deepcopy(matrix),
            ))
            changed.append(role)
        elif update_existing and existing.permissions != matrix:
            role = repository.update_role(existing.id, RoleUpdate(permissions=copy.deepcopy(matrix)))
            changed.append(role)

    logger.info(f"Seeded canonical roles: {[role.name for role in changed]}")
    return changed
