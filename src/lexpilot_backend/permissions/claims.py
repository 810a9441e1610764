"""
Mapping of SSO group/role claims onto the application's legacy role strings.
"""

import re
from typing import Dict, Iterable, List, Optional

ROLE_MAPPING: Dict[str, str] = {
    "legal-admin": "legal_admin",
    "dept-admin": "dept_admin",
    "user": "user",
}

DEFAULT_SSO_ROLE = "user"

_WHITESPACE = re.compile(r"\s+")


def normalize_claim(claim: str) -> str:
    return _WHITESPACE.sub("-", claim.lower())


def map_claims_to_role(groups: Iterable[str], roles: Optional[Iterable[str]] = None) -> str:
    """
    Map group and role claims to a legacy role string.

    Substring rules win over the literal mapping regardless of claim order:
    anything mentioning "legal" and "admin" yields legal_admin, then anything
    mentioning "dept"/"department" and "admin" yields dept_admin. Otherwise the
    first claim with an exact entry in ROLE_MAPPING decides, and "user" is the
    fallback.
    """
    claims: List[str] = [
        normalize_claim(claim)
        for claim in list(groups or []) + list(roles or [])
        if isinstance(claim, str)
    ]

    if any("legal" in claim and "admin" in claim for claim in claims):
        return "legal_admin"

    if any(("dept" in claim or "department" in claim) and "admin" in claim for claim in claims):
        return "dept_admin"

    for claim in claims:
        if claim in ROLE_MAPPING:
            return ROLE_MAPPING[claim]

    return DEFAULT_SSO_ROLE
