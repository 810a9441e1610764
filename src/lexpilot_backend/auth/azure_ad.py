"""
Azure AD single sign-on token validation.
"""

import logging
from typing import Any, Dict, List, Optional
import httpx
from jose import jwt, JWTError
from pydantic import BaseModel, Field

from lexpilot_backend.permissions.claims import map_claims_to_role
from lexpilot_backend.settings import settings

logger = logging.getLogger(__name__)

AZURE_LOGIN_URL = "https://login.microsoftonline.com"


class AzureAdError(Exception):
    """Raised when an Azure AD token cannot be validated or lacks user information."""
    pass


class AzureAdConfig(BaseModel):
    """Azure AD tenant configuration."""
    tenant_id: str = Field(default_factory=lambda: settings.AZURE_AD_TENANT_ID)
    client_id: str = Field(default_factory=lambda: settings.AZURE_AD_CLIENT_ID)
    verify_ssl: bool = True

    @property
    def jwks_uri(self) -> str:
        return f"{AZURE_LOGIN_URL}/{self.tenant_id}/discovery/v2.0/keys"

    @property
    def issuer(self) -> str:
        return f"{AZURE_LOGIN_URL}/{self.tenant_id}/v2.0"


class AzureAdUserInfo(BaseModel):
    """User information extracted from a validated Azure AD token."""
    azure_ad_id: str
    email: str
    name: str
    department: Optional[str] = None
    groups: List[str] = Field(default_factory=list)
    role: str


def user_info_from_claims(payload: Dict[str, Any]) -> AzureAdUserInfo:
    """
    Extract user information and the mapped role from validated token claims.

    Raises:
        AzureAdError: If the object id or email is missing
    """
    azure_ad_id = payload.get("oid") or ""
    email = payload.get("email") or payload.get("preferred_username") or ""
    name = payload.get("name") or f"{payload.get('given_name') or ''} {payload.get('family_name') or ''}".strip()
    groups = payload.get("groups") or []

    if not azure_ad_id or not email:
        raise AzureAdError("Invalid token: missing required user information")

    return AzureAdUserInfo(
        azure_ad_id=azure_ad_id,
        email=email,
        name=name or email,
        department=payload.get("department") or None,
        groups=groups,
        role=map_claims_to_role(groups, payload.get("roles")),
    )


class AzureAdProvider:
    """Validates Azure AD ID tokens against the tenant's signing keys."""

    def __init__(self, config: Optional[AzureAdConfig] = None):
        self.config = config or AzureAdConfig()
        self._jwks: Optional[Dict[str, Any]] = None

    async def _fetch_jwks(self) -> Dict[str, Any]:
        async with httpx.AsyncClient(verify=self.config.verify_ssl) as client:
            response = await client.get(self.config.jwks_uri)
            response.raise_for_status()
            self._jwks = response.json()
        return self._jwks

    async def _signing_key(self, kid: str) -> Dict[str, Any]:
        jwks = self._jwks or await self._fetch_jwks()
        for jwk in jwks.get("keys", []):
            if jwk.get("kid") == kid:
                return jwk

        # Keys rotate; refresh once before giving up
        jwks = await self._fetch_jwks()
        for jwk in jwks.get("keys", []):
            if jwk.get("kid") == kid:
                return jwk

        raise AzureAdError(f"No matching signing key found for kid: {kid}")

    async def validate_token(self, token: str) -> Dict[str, Any]:
        try:
            kid = jwt.get_unverified_header(token).get("kid")
            if not kid:
                raise AzureAdError("No key ID found in token header")

            key = await self._signing_key(kid)
            return jwt.decode(
                token,
                key,
                algorithms=["RS256"],
                audience=self.config.client_id,
                issuer=self.config.issuer,
            )
        except JWTError as e:
            logger.error(f"Azure AD token validation failed: {e}")
            raise AzureAdError(f"Azure AD token validation failed: {e}")
        except httpx.HTTPError as e:
            logger.error(f"Fetching Azure AD signing keys failed: {e}")
            raise AzureAdError(f"Could not fetch Azure AD signing keys: {e}")

    async def get_user_info(self, token: str) -> AzureAdUserInfo:
        payload = await self.validate_token(token)
        return user_info_from_claims(payload)
