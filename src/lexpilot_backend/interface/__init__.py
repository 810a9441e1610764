from .base import PermissionMatrix, ListQuery
from .roles import RoleCreate, RoleUpdate, RoleGet, RoleQuery
from .user_roles import UserRoleCreate, UserRoleUpdate, UserRoleGet
from .user_permissions import UserPermissionSet, UserPermissionList

__all__ = [
    "PermissionMatrix",
    "ListQuery",
    "RoleCreate",
    "RoleUpdate",
    "RoleGet",
    "RoleQuery",
    "UserRoleCreate",
    "UserRoleUpdate",
    "UserRoleGet",
    "UserPermissionSet",
    "UserPermissionList",
]
