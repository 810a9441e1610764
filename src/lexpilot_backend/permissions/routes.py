"""
Route permission registry.

A RouteTable is an immutable, ordered list of RouteRule entries describing
which roles and/or permissions an application route requires. Tables are
plain values: they are built once (from the default below or from a YAML
file) and handed to every Principal, never looked up from module state.

Matching a concrete path:
  1. a rule whose path is exactly equal wins immediately;
  2. otherwise rules with ":param" segments are tried, where a parameter
     matches exactly one non-empty path segment;
  3. among several pattern matches the most specific rule (most literal
     segments) wins, and equal specificity falls back to table order.
"""

import logging
from pathlib import Path
from typing import Any, Dict, List, Optional, Sequence, Tuple, Union

import yaml
from pydantic import BaseModel, ConfigDict, Field, field_validator

from lexpilot_backend.permissions.catalog import Permission, RoleName
from lexpilot_backend.settings import settings

logger = logging.getLogger(__name__)

PARAM_PREFIX = ":"


def _is_param(segment: str) -> bool:
    return segment.startswith(PARAM_PREFIX) and len(segment) > 1


class RouteRule(BaseModel):
    """Requirements for a single application route."""

    model_config = ConfigDict(frozen=True)

    path: str = Field(description="Route path, may contain :param segments")
    roles: Optional[Tuple[str, ...]] = Field(None, description="Any of these roles is required")
    permissions: Optional[Tuple[str, ...]] = Field(None, description="Permission keys required")
    require_all: bool = Field(False, description="Require all permissions instead of any")
    route_key: Optional[str] = Field(None, description="Key under which overrides grant this route")

    @field_validator("path")
    @classmethod
    def path_is_absolute(cls, value: str) -> str:
        if not value.startswith("/"):
            raise ValueError(f"Route path must start with '/': {value!r}")
        return value

    @property
    def segments(self) -> Tuple[str, ...]:
        return tuple(self.path.split("/"))

    @property
    def is_pattern(self) -> bool:
        return any(_is_param(segment) for segment in self.segments)

    @property
    def specificity(self) -> int:
        """Number of literal segments."""
        return sum(1 for segment in self.segments if not _is_param(segment))

    def matches_pattern(self, path: str) -> bool:
        candidate = path.split("/")
        if len(candidate) != len(self.segments):
            return False
        for expected, actual in zip(self.segments, candidate):
            if _is_param(expected):
                if not actual:
                    return False
            elif expected != actual:
                return False
        return True

    def can_overlap(self, other: "RouteRule") -> bool:
        """True if some concrete path could match both pattern rules."""
        if len(self.segments) != len(other.segments):
            return False
        for left, right in zip(self.segments, other.segments):
            if _is_param(left) or _is_param(right):
                continue
            if left != right:
                return False
        return True


class RouteTable(BaseModel):
    """Ordered, immutable route permission table with a default policy for unknown paths."""

    model_config = ConfigDict(frozen=True)

    rules: Tuple[RouteRule, ...] = ()
    default_allow: bool = True

    def match(self, path: str) -> Optional[RouteRule]:
        for rule in self.rules:
            if rule.path == path:
                return rule

        best: Optional[RouteRule] = None
        for rule in self.rules:
            if not rule.is_pattern or not rule.matches_pattern(path):
                continue
            # strictly greater keeps the earlier rule on ties
            if best is None or rule.specificity > best.specificity:
                best = rule
        return best

    def rules_for_key(self, route_key: str) -> List[RouteRule]:
        return [rule for rule in self.rules if rule.route_key == route_key]

    @property
    def route_keys(self) -> List[str]:
        keys: List[str] = []
        for rule in self.rules:
            if rule.route_key and rule.route_key not in keys:
                keys.append(rule.route_key)
        return keys

    def overlaps(self) -> List[Tuple[RouteRule, RouteRule]]:
        """
        Pairs of pattern rules that could match the same path with the same
        specificity; for those only table order decides.
        """
        patterns = [rule for rule in self.rules if rule.is_pattern]
        found = []
        for index, left in enumerate(patterns):
            for right in patterns[index + 1:]:
                if left.specificity == right.specificity and left.can_overlap(right):
                    found.append((left, right))
        return found

    def with_default(self, default_allow: bool) -> "RouteTable":
        return self.model_copy(update={"default_allow": default_allow})

    @classmethod
    def from_entries(cls, entries: Sequence[Dict[str, Any]], default_allow: bool = True) -> "RouteTable":
        return cls(rules=tuple(RouteRule(**entry) for entry in entries), default_allow=default_allow)

    @classmethod
    def from_yaml(cls, path: Union[str, Path]) -> "RouteTable":
        """
        Load a table from YAML:

            default_allow: true
            routes:
              - path: /analytics
                route_key: analytics
                roles: [Platform Administrator, Legal Admin]
                permissions: [analytics.view]
        """
        with open(path, "r") as file:
            data = yaml.safe_load(file) or {}

        table = cls.from_entries(data.get("routes") or [], default_allow=data.get("default_allow", True))
        logger.info(f"Loaded {len(table.rules)} route rules from {path}")
        return table


ALL_ROLES = tuple(role.value for role in RoleName)
ADMIN_ROLES = (
    RoleName.PLATFORM_ADMINISTRATOR.value,
    RoleName.LEGAL_ADMIN.value,
    RoleName.DEPARTMENT_ADMIN.value,
)


def _rule(path: str, route_key: Optional[str], roles: Tuple[str, ...], *permissions: Permission) -> RouteRule:
    return RouteRule(
        path=path,
        route_key=route_key,
        roles=roles,
        permissions=tuple(permission.value for permission in permissions) or None,
    )


DEFAULT_ROUTE_TABLE = RouteTable(rules=(
    _rule("/", "home", ALL_ROLES),
    _rule("/legalai", "legalai", ALL_ROLES),
    _rule("/review", "review", ALL_ROLES, Permission.CONTRACTS_READ),
    _rule("/review/:id", "review", ALL_ROLES, Permission.CONTRACTS_READ),
    _rule("/draft", "draft", ALL_ROLES, Permission.DOCUMENTS_CREATE),
    _rule("/builder", "builder", ALL_ROLES, Permission.DOCUMENTS_CREATE),
    _rule("/repository", "repository", ALL_ROLES, Permission.DOCUMENTS_READ),
    _rule("/intake", "intake", ADMIN_ROLES, Permission.CONTRACTS_SUBMIT),
    _rule("/search", "search", ALL_ROLES, Permission.DOCUMENTS_READ),
    _rule("/clauses", "clauses", ADMIN_ROLES, Permission.DOCUMENTS_READ),
    _rule("/playbooks", "playbooks", ADMIN_ROLES, Permission.DOCUMENTS_READ),
    _rule("/playbooks/:id", "playbooks", ADMIN_ROLES, Permission.DOCUMENTS_READ),
    _rule("/workflows", "workflows", ADMIN_ROLES, Permission.TEAM_VIEW),
    _rule("/analytics", "analytics", ADMIN_ROLES, Permission.ANALYTICS_VIEW),
    _rule("/partners", "partners", ALL_ROLES, Permission.TEAM_VIEW),
    _rule("/discovery", "discovery", ALL_ROLES, Permission.DOCUMENTS_READ),
    _rule("/research", "research", ALL_ROLES, Permission.DOCUMENTS_READ),
    _rule("/admin", "admin", (RoleName.PLATFORM_ADMINISTRATOR.value,), Permission.SYSTEM_CONFIGURE),
    _rule("/settings", "settings", ALL_ROLES),
    _rule("/help", "help", ALL_ROLES),
    # Not grantable through overrides
    _rule("/legal", None, ALL_ROLES),
))


def load_route_table() -> RouteTable:
    """Route table configured for this process, with the configured default policy."""
    if settings.ROUTE_TABLE_PATH:
        table = RouteTable.from_yaml(settings.ROUTE_TABLE_PATH)
    else:
        table = DEFAULT_ROUTE_TABLE
    return table.with_default(settings.ROUTE_DEFAULT_ALLOW)
