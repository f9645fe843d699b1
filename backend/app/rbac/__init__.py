# Overview: Role hierarchy package.
# Re-exports the role table and lookups used by guards and services.

from .scopes import RoleScope
from .definitions import (
    ROLE_DEFINITIONS,
    SUPER_ADMIN,
    ADMIN,
    MANAGER,
    VENDOR,
    USER,
    DEFAULT_ROLE,
    UNKNOWN_ROLE_LEVEL,
)
from .helpers import (
    ROLE_HIERARCHY,
    ROLE_SCOPES,
    ROLE_CREATION_RULES,
    all_roles,
    is_valid_role,
    role_level,
    role_scope,
    creatable_roles,
    has_global_scope,
    has_required_role,
    can_create_role,
    get_role_definition,
)

__all__ = [
    "RoleScope",
    "ROLE_DEFINITIONS",
    "SUPER_ADMIN",
    "ADMIN",
    "MANAGER",
    "VENDOR",
    "USER",
    "DEFAULT_ROLE",
    "UNKNOWN_ROLE_LEVEL",
    "ROLE_HIERARCHY",
    "ROLE_SCOPES",
    "ROLE_CREATION_RULES",
    "all_roles",
    "is_valid_role",
    "role_level",
    "role_scope",
    "creatable_roles",
    "has_global_scope",
    "has_required_role",
    "can_create_role",
    "get_role_definition",
]
