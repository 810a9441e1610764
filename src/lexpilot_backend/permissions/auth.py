"""
Authentication and principal creation.

Requests carry an application session token (HS256 JWT) as a Bearer
credential. Session tokens are issued after a successful SSO login, which
validates the Azure AD ID token, maps its claims to a legacy role and
creates or refreshes the user record. Authorization decisions are always
rebuilt from the stores, never read from the token.
"""

import datetime
import logging
from typing import Annotated, Any, Dict, Optional, Tuple
from fastapi import Depends
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from jose import jwt, JWTError
from sqlalchemy.orm import Session

from lexpilot_backend.api.exceptions import UnauthorizedException, repository_error_to_http
from lexpilot_backend.auth.azure_ad import AzureAdError, AzureAdProvider
from lexpilot_backend.database import get_db
from lexpilot_backend.model.auth import User
from lexpilot_backend.permissions.principal import Principal
from lexpilot_backend.permissions.resolver import PrincipalBuilder
from lexpilot_backend.permissions.routes import RouteTable, load_route_table
from lexpilot_backend.repositories.base import RepositoryError
from lexpilot_backend.repositories.user import UserRepository
from lexpilot_backend.settings import settings

logger = logging.getLogger(__name__)

bearer_scheme = HTTPBearer(auto_error=False)


class AuthenticationResult:
    """Result of authentication containing the user and how they logged in"""

    def __init__(self, user_id: str, legacy_role: Optional[str] = None, provider: str = "session", created: bool = False):
        self.user_id = user_id
        self.legacy_role = legacy_role
        self.provider = provider
        self.created = created


def create_session_token(user: User, expires_minutes: Optional[int] = None) -> str:
    """Issue an application session token for `user`"""
    ttl = expires_minutes if expires_minutes is not None else settings.SESSION_TOKEN_TTL_MINUTES
    payload = {
        "sub": user.id,
        "email": user.email,
        "role": user.role,
        "exp": datetime.datetime.now(datetime.timezone.utc) + datetime.timedelta(minutes=ttl),
    }
    return jwt.encode(payload, settings.JWT_SECRET, algorithm=settings.JWT_ALGORITHM)


def decode_session_token(token: str) -> Dict[str, Any]:
    try:
        return jwt.decode(token, settings.JWT_SECRET, algorithms=[settings.JWT_ALGORITHM])
    except JWTError as e:
        logger.warning(f"Rejected session token: {e}")
        raise UnauthorizedException("Invalid or expired token")


class AuthenticationService:
    """Service for the supported authentication methods"""

    @staticmethod
    def authenticate_session(token: str, db: Session) -> AuthenticationResult:
        """Authenticate using an application session token"""

        payload = decode_session_token(token)
        user_id = payload.get("sub")
        if not user_id:
            raise UnauthorizedException("Invalid token payload")

        user = UserRepository(db).get_by_id_optional(user_id)
        if user is None:
            raise UnauthorizedException("User no longer exists")

        return AuthenticationResult(user.id, user.role, "session")

    @staticmethod
    async def authenticate_sso(
        id_token: str,
        db: Session,
        provider: Optional[AzureAdProvider] = None,
    ) -> AuthenticationResult:
        """Validate an Azure AD ID token and create or refresh the user behind it"""

        provider = provider or AzureAdProvider()
        try:
            info = await provider.get_user_info(id_token)
        except AzureAdError as e:
            raise UnauthorizedException(str(e))

        try:
            user, created = UserRepository(db).upsert_sso_user(
                azure_ad_id=info.azure_ad_id,
                email=info.email,
                name=info.name,
                role=info.role,
                department=info.department,
            )
        except RepositoryError as e:
            raise repository_error_to_http(e)

        logger.info(f"SSO authentication successful for user {user.id} mapped to role '{info.role}'")
        return AuthenticationResult(user.id, user.role, "azure_ad", created)


async def sso_login(
    id_token: str,
    db: Session,
    provider: Optional[AzureAdProvider] = None,
    route_table: Optional[RouteTable] = None,
) -> Tuple[str, Principal]:
    """Full SSO login: returns a session token and the resolved principal"""
    auth_result = await AuthenticationService.authenticate_sso(id_token, db, provider)
    user = UserRepository(db).get_by_id(auth_result.user_id)
    principal = PrincipalBuilder.build(user.id, db, route_table)
    return create_session_token(user), principal


def get_route_table() -> RouteTable:
    return load_route_table()


def get_current_principal(
    credentials: Annotated[Optional[HTTPAuthorizationCredentials], Depends(bearer_scheme)],
    db: Annotated[Session, Depends(get_db)],
    route_table: Annotated[RouteTable, Depends(get_route_table)],
) -> Principal:
    """Main dependency for getting the current authenticated principal"""

    if credentials is None or not credentials.credentials:
        raise UnauthorizedException("No authorization provided")

    auth_result = AuthenticationService.authenticate_session(credentials.credentials, db)
    return PrincipalBuilder.build(auth_result.user_id, db, route_table)
