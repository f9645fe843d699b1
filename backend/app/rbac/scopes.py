# Overview: Role scope constants describing how far a role's reach extends.


class RoleScope:
    """Breadth of resources a role may act upon."""
    GLOBAL = "GLOBAL"  # every resource
    SCOPED = "SCOPED"  # an assigned subset (vendor or category)
    OWN = "OWN"        # resources the actor owns or created
