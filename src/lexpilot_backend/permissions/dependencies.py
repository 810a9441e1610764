"""
FastAPI dependencies that turn negative authorization decisions into 403s.

    @router.get("/analytics", dependencies=[Depends(require_route("/analytics"))])
"""

import logging
from typing import Annotated, Callable, Union
from fastapi import Depends

from lexpilot_backend.api.exceptions import ForbiddenException
from lexpilot_backend.permissions.auth import get_current_principal
from lexpilot_backend.permissions.catalog import Permission, RoleName
from lexpilot_backend.permissions.principal import Principal

logger = logging.getLogger(__name__)


def _value(item: Union[str, Permission, RoleName]) -> str:
    return item.value if isinstance(item, (Permission, RoleName)) else item


def require_route(path: str) -> Callable[..., Principal]:
    def dependency(principal: Annotated[Principal, Depends(get_current_principal)]) -> Principal:
        if not principal.can_access_route(path):
            logger.info(f"User {principal.user_id} denied route {path}")
            raise ForbiddenException(f"Access to {path} denied")
        return principal
    return dependency


def require_permission(*permissions: Union[str, Permission], require_all: bool = False) -> Callable[..., Principal]:
    keys = [_value(permission) for permission in permissions]

    def dependency(principal: Annotated[Principal, Depends(get_current_principal)]) -> Principal:
        granted = principal.has_all_permissions(keys) if require_all else principal.has_any_permission(keys)
        if not granted:
            logger.info(f"User {principal.user_id} lacks permission {keys}")
            raise ForbiddenException("Insufficient permissions")
        return principal
    return dependency


def require_role(*roles: Union[str, RoleName]) -> Callable[..., Principal]:
    names = [_value(role) for role in roles]

    def dependency(principal: Annotated[Principal, Depends(get_current_principal)]) -> Principal:
        if not principal.has_any_role(names):
            logger.info(f"User {principal.user_id} lacks role {names}")
            raise ForbiddenException("Insufficient role")
        return principal
    return dependency
