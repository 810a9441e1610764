"""
Canonical permission keys and role names.

Permission keys use the "resource.action" format and are checked against a
role's permission matrix (resource -> action -> bool).
"""

from enum import Enum
from typing import Tuple


class Permission(str, Enum):
    """Fine-grained permission keys."""
    DOCUMENTS_CREATE = "documents.create"
    DOCUMENTS_READ = "documents.read"
    DOCUMENTS_UPDATE = "documents.update"
    DOCUMENTS_DELETE = "documents.delete"

    CONTRACTS_CREATE = "contracts.create"
    CONTRACTS_READ = "contracts.read"
    CONTRACTS_UPDATE = "contracts.update"
    CONTRACTS_DELETE = "contracts.delete"
    CONTRACTS_APPROVE = "contracts.approve"
    CONTRACTS_SUBMIT = "contracts.submit"

    TEAM_VIEW = "team.view"
    TEAM_MANAGE = "team.manage"
    TEAM_ASSIGN = "team.assign"

    ANALYTICS_VIEW = "analytics.view"

    SYSTEM_CONFIGURE = "system.configure"
    SYSTEM_MONITOR = "system.monitor"

    USERS_CREATE = "users.create"
    USERS_READ = "users.read"
    USERS_UPDATE = "users.update"
    USERS_DELETE = "users.delete"

    ROLES_CREATE = "roles.create"
    ROLES_READ = "roles.read"
    ROLES_UPDATE = "roles.update"
    ROLES_DELETE = "roles.delete"

    DEPARTMENTS_CREATE = "departments.create"
    DEPARTMENTS_READ = "departments.read"
    DEPARTMENTS_UPDATE = "departments.update"
    DEPARTMENTS_DELETE = "departments.delete"


class RoleName(str, Enum):
    """Canonical role names, highest privilege first."""
    PLATFORM_ADMINISTRATOR = "Platform Administrator"
    LEGAL_ADMIN = "Legal Admin"
    DEPARTMENT_ADMIN = "Department Admin"
    DEPARTMENT_USER = "Department User"


# Role attached to principals whose access comes from route-key overrides
CUSTOM_ROLE_NAME = "Custom"

ROLE_PRECEDENCE: Tuple[RoleName, ...] = (
    RoleName.PLATFORM_ADMINISTRATOR,
    RoleName.LEGAL_ADMIN,
    RoleName.DEPARTMENT_ADMIN,
    RoleName.DEPARTMENT_USER,
)


def split_permission(permission: str) -> Tuple[str, str]:
    """
    Split "resource.action" into its parts.

    Raises:
        ValueError: If the key does not contain exactly one separator
    """
    if not isinstance(permission, str):
        raise ValueError(f"Malformed permission key: {permission!r}")
    resource, separator, action = permission.partition(".")
    if not separator or not resource or not action or "." in action:
        raise ValueError(f"Malformed permission key: {permission!r}")
    return resource, action
