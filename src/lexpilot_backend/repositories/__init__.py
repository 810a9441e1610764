"""
Repository pattern implementation for the role, assignment, override and
user stores.
"""

from .base import (
    BaseRepository,
    RepositoryError,
    NotFoundError,
    ConflictError,
    ValidationError,
)
from .role import RoleRepository
from .user import UserRepository
from .user_role import UserRoleRepository
from .user_permission import UserPermissionRepository

__all__ = [
    "BaseRepository",
    "RepositoryError",
    "NotFoundError",
    "ConflictError",
    "ValidationError",
    "RoleRepository",
    "UserRepository",
    "UserRoleRepository",
    "UserPermissionRepository",
]
