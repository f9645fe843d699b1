# Overview: Immutable lookups built once from ROLE_DEFINITIONS plus the two
# decisions every feature module relies on: "may this role pass a guard
# requiring {roles}?" and "may this role create a user with role X?".

from __future__ import annotations

from types import MappingProxyType
from typing import Iterable

from .definitions import ROLE_DEFINITIONS, UNKNOWN_ROLE_LEVEL
from .scopes import RoleScope


ROLE_HIERARCHY = MappingProxyType({code: level for code, level, _, _, _ in ROLE_DEFINITIONS})
ROLE_SCOPES = MappingProxyType({code: scope for code, _, scope, _, _ in ROLE_DEFINITIONS})
ROLE_CREATION_RULES = MappingProxyType(
    {code: frozenset(creatable) for code, _, _, creatable, _ in ROLE_DEFINITIONS}
)


def all_roles() -> list[str]:
    """Role codes ordered from most to least privileged."""
    return sorted(ROLE_HIERARCHY, key=ROLE_HIERARCHY.__getitem__, reverse=True)


def is_valid_role(role: str | None) -> bool:
    return role in ROLE_HIERARCHY


def role_level(role: str | None) -> int:
    return ROLE_HIERARCHY.get(role, UNKNOWN_ROLE_LEVEL)


def role_scope(role: str | None) -> str:
    return ROLE_SCOPES.get(role, RoleScope.OWN)


def creatable_roles(role: str | None) -> frozenset[str]:
    return ROLE_CREATION_RULES.get(role, frozenset())


def has_global_scope(role: str | None) -> bool:
    return role_scope(role) == RoleScope.GLOBAL


def has_required_role(actor_role: str | None, required_roles: Iterable[str] | None) -> bool:
    """
    Hierarchy check used by @require_roles.

    No required roles means any authenticated actor passes. Otherwise the
    actor passes if its level is >= the level of at least one required role.
    """
    required = list(required_roles or ())
    if not required:
        return True
    actor_level = role_level(actor_role)
    return any(actor_level >= role_level(required_role) for required_role in required)


def can_create_role(creator_role: str | None, target_role: str | None) -> bool:
    """Flat set-membership test against the creation-rule table."""
    return target_role in creatable_roles(creator_role)


def get_role_definition(role: str) -> dict | None:
    """Get full definition for a role code."""
    for code, level, scope, creatable, description in ROLE_DEFINITIONS:
        if code == role:
            return {
                "code": code,
                "level": level,
                "scope": scope,
                "can_create": sorted(creatable, key=role_level, reverse=True),
                "description": description,
            }
    return None
