# Overview: Static role table.
# Each role is defined as: (code, level, scope, creatable_roles, description)
# Higher level = more privileged. creatable_roles is a flat allow-list and is
# NOT derived from level: VENDOR may create ADMIN/MANAGER accounts scoped to its
# own vendor organization while ADMIN may not create another ADMIN.

from .scopes import RoleScope


SUPER_ADMIN = "SUPER_ADMIN"
ADMIN = "ADMIN"
MANAGER = "MANAGER"
VENDOR = "VENDOR"
USER = "USER"


ROLE_DEFINITIONS = [
    (
        SUPER_ADMIN,
        5,
        RoleScope.GLOBAL,
        (ADMIN,),
        "Platform owner; the only role allowed to hard delete",
    ),
    (
        ADMIN,
        4,
        RoleScope.GLOBAL,
        (MANAGER,),
        "Platform administrator with global access",
    ),
    (
        MANAGER,
        3,
        RoleScope.SCOPED,
        (),
        "Manages an assigned vendor or category",
    ),
    (
        VENDOR,
        2,
        RoleScope.OWN,
        (ADMIN, MANAGER),
        "Jewelry vendor; manages its own profile, stores, products and staff",
    ),
    (
        USER,
        1,
        RoleScope.OWN,
        (),
        "Shopper account",
    ),
]

# Role assigned to self-registered accounts
DEFAULT_ROLE = USER

# Level reported for any role string not present in ROLE_DEFINITIONS
UNKNOWN_ROLE_LEVEL = 0
