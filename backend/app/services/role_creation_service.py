# Overview: Delegated user creation governed by the role creation-rule table.

"""
Role Creation Service

WHO MAY CREATE WHOM is a flat set-membership test against
rbac.ROLE_CREATION_RULES, not a level comparison. That is what lets a VENDOR
create ADMIN/MANAGER accounts for its own organization while an ADMIN cannot
create another ADMIN.

After the rule check passes, scoping applies:
- GLOBAL creators are done.
- VENDOR creators must name a live vendor profile they own.
- MANAGER creators are always denied (manager scope assignment does not
  exist yet).
- Anything else is denied.

All checks run before any database write.
"""

from __future__ import annotations

import math

from flask import current_app

from ..extensions import db
from ..models import User, VendorProfile
from ..rbac import MANAGER, VENDOR, RoleScope, all_roles, creatable_roles, role_scope
from . import auth_service
from .soft_delete_service import Actor


class RoleCreationDeniedError(Exception):
    """Raised when the creator may not create the requested role (403)."""
    pass


class RoleCreationValidationError(Exception):
    """Raised when the request is missing data the scoping rules need (400)."""
    pass


def _parse_vendor_id(value) -> int | None:
    if value is None or value == "":
        return None
    try:
        return int(value)
    except (TypeError, ValueError):
        raise RoleCreationValidationError("created_by_vendor_id must be an integer")


def validate_role_creation(
    creator: User,
    target_role: str,
    created_by_vendor_id=None,
) -> VendorProfile | None:
    """
    Decide whether creator may create a user with target_role.

    Returns the creator's vendor profile for VENDOR creators (None for GLOBAL
    creators). Raises RoleCreationDeniedError or RoleCreationValidationError.
    """
    if creator is None:
        raise RoleCreationValidationError("Creator user not found")

    allowed = creatable_roles(creator.role)
    if target_role not in allowed:
        current_app.logger.warning(
            "Role creation denied",
            extra={
                "creator_id": creator.id,
                "creator_role": creator.role,
                "target_role": target_role,
                "allowed_roles": sorted(allowed),
            },
        )
        raise RoleCreationDeniedError(f"You cannot create users with role: {target_role}")

    if role_scope(creator.role) == RoleScope.GLOBAL:
        return None

    if creator.role == VENDOR:
        vendor_id = _parse_vendor_id(created_by_vendor_id)
        if vendor_id is None:
            raise RoleCreationValidationError(
                "Vendor must specify their vendor ID when creating users"
            )
        vendor = db.session.query(VendorProfile).filter(
            VendorProfile.id == vendor_id,
            VendorProfile.user_id == creator.id,
            VendorProfile.is_deleted.is_(False),
        ).first()
        if vendor is None:
            raise RoleCreationDeniedError(
                "You can only create users for your own vendor organization"
            )
        return vendor

    if creator.role == MANAGER:
        raise RoleCreationDeniedError("Managers cannot create users")

    raise RoleCreationDeniedError(f"You cannot create users with role: {target_role}")


def create_user_with_role(creator: User, data: dict) -> User:
    """
    Validate, then create the user.

    created_by is the creator's id so ownership checks can follow the chain.
    Users created by a vendor are scoped to that vendor via vendor_id.
    """
    role = data.get("role")
    if not isinstance(role, str):
        raise RoleCreationValidationError("role must be a string")
    target_role = role.strip().upper()
    vendor = validate_role_creation(creator, target_role, data.get("created_by_vendor_id"))

    user = auth_service.create_user(
        email=data.get("email"),
        password=data.get("password"),
        full_name=data.get("full_name"),
        phone=data.get("phone"),
        role=target_role,
        vendor_id=vendor.id if vendor else None,
        actor=Actor.from_user(creator),
        created_by=str(creator.id),
    )
    db.session.commit()

    current_app.logger.info(
        "User created with role",
        extra={"user_id": user.id, "role": user.role, "created_by": creator.id},
    )
    return user


def get_users_by_creator(creator: User, page: int = 1, limit: int = 10) -> dict:
    page = max(int(page), 1)
    limit = min(max(int(limit), 1), 100)

    query = db.session.query(User).filter(
        User.created_by == str(creator.id),
        User.is_deleted.is_(False),
    )
    total = query.count()
    users = (
        query.order_by(User.created_at.desc(), User.id.desc())
        .offset((page - 1) * limit)
        .limit(limit)
        .all()
    )

    return {
        "users": [u.to_dict() for u in users],
        "total": total,
        "page": page,
        "limit": limit,
        "total_pages": math.ceil(total / limit) if total else 0,
    }


def get_role_creation_rules(role: str) -> dict:
    allowed = creatable_roles(role)
    return {
        "creator_role": role,
        "allowed_roles": [r for r in all_roles() if r in allowed],
        "scope": role_scope(role),
        "can_create_users": bool(allowed),
    }
