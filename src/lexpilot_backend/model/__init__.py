from .base import Base, metadata
from .auth import User
from .role import Role, UserRole, UserPermission

# Import all models to ensure relationships are properly set up
from . import auth, role

__all__ = [
    'Base',
    'metadata',
    # Auth models
    'User',
    # Role models
    'Role',
    'UserRole',
    'UserPermission',
]
