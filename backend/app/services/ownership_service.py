# Overview: Resource ownership decisions for actors below GLOBAL scope.

"""
Ownership Service

check_ownership(user, entity, entity_id) answers "may this user manage that
resource?" for the @require_ownership decorator and for services that need
the same answer.

RULES:
- GLOBAL scope (SUPER_ADMIN, ADMIN): always True, existence not checked.
- product:  VENDOR owns products whose vendor profile belongs to them.
- vendor:   VENDOR owns the profile whose user_id is theirs.
- user:     everyone owns themselves; VENDOR owns users it created.
- category: GLOBAL only.
- MANAGER: always False (assignment of managers to vendors or categories
  does not exist yet).
- unknown entity, missing resource, malformed id: False.
"""

from __future__ import annotations

from flask import current_app

from ..extensions import db
from ..models import Product, User, VendorProfile
from ..rbac import VENDOR, has_global_scope


class OwnershipDeniedError(Exception):
    """Raised by require_owner when the actor does not own the resource."""
    pass


OWNERSHIP_ENTITIES = ("product", "vendor", "user", "category")


def _as_int(value) -> int | None:
    try:
        return int(value)
    except (TypeError, ValueError):
        return None


def _owns_product(user: User, product_id: int) -> bool:
    product = db.session.get(Product, product_id)
    if product is None:
        return False
    if user.role == VENDOR:
        return product.vendor is not None and product.vendor.user_id == user.id
    return False


def _owns_vendor(user: User, vendor_id: int) -> bool:
    vendor = db.session.get(VendorProfile, vendor_id)
    if vendor is None:
        return False
    if user.role == VENDOR:
        return vendor.user_id == user.id
    return False


def _owns_user(user: User, target_user_id: int) -> bool:
    if target_user_id == user.id:
        return True
    if user.role == VENDOR:
        target = db.session.get(User, target_user_id)
        return target is not None and target.created_by == str(user.id)
    return False


_CHECKS = {
    "product": _owns_product,
    "vendor": _owns_vendor,
    "user": _owns_user,
    "category": lambda user, entity_id: False,
}


def check_ownership(user: User | None, entity: str, entity_id) -> bool:
    if user is None:
        return False

    if has_global_scope(user.role):
        return True

    check = _CHECKS.get(entity)
    if check is None:
        current_app.logger.warning(
            "Unknown entity type for ownership check", extra={"entity": entity}
        )
        return False

    resource_id = _as_int(entity_id)
    if resource_id is None:
        return False

    return check(user, resource_id)


def require_owner(user: User | None, entity: str, entity_id) -> None:
    """Raise OwnershipDeniedError unless check_ownership passes."""
    if not check_ownership(user, entity, entity_id):
        raise OwnershipDeniedError("Access denied: You can only manage your own resources")
