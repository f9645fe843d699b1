# Overview: Service-layer operations for vendor profiles.

"""
Vendor Service

WHY: A vendor profile is the organization a VENDOR account sells through.
Stores, products and vendor-created staff accounts all hang off it.

RULES:
- One live (not soft-deleted) profile per owning user.
- Slugs are globally unique, including soft-deleted rows (the column is
  UNIQUE), so a soft-deleted profile keeps its slug reserved.
- Hard delete is refused while stores or products still reference the profile.
"""

from __future__ import annotations

from ..extensions import db
from ..models import Product, Store, User, VendorProfile
from ..validation import ConflictError, slugify
from . import repository
from .soft_delete_service import Actor


class VendorNotFoundError(Exception):
    """Raised when a vendor is not found."""
    pass


class VendorValidationError(Exception):
    """Raised when vendor data fails validation."""
    pass


def get_vendor(vendor_id: int, include_deleted: bool = False) -> VendorProfile:
    vendor = db.session.get(VendorProfile, vendor_id)
    if vendor is None or (vendor.is_deleted and not include_deleted):
        raise VendorNotFoundError("Vendor not found")
    return vendor


def get_vendor_for_user(user_id: int) -> VendorProfile | None:
    """The user's live vendor profile, if any."""
    return repository.live_query(VendorProfile).filter(VendorProfile.user_id == user_id).first()


def list_vendors(
    *,
    include_deleted: bool = False,
    status: str | None = None,
    page: int | None = None,
    per_page: int | None = None,
) -> dict:
    query = repository.live_query(VendorProfile, include_deleted)
    if status:
        query = query.filter(VendorProfile.verification_status == status.upper())
    return repository.paginate(query.order_by(VendorProfile.business_name.asc(), VendorProfile.id.asc()), page, per_page)


def _ensure_slug_free(slug: str, exclude_id: int | None = None) -> None:
    query = db.session.query(VendorProfile.id).filter(VendorProfile.slug == slug)
    if exclude_id is not None:
        query = query.filter(VendorProfile.id != exclude_id)
    if query.first():
        raise ConflictError(f"Vendor slug '{slug}' already exists")


def create_vendor(*, owner_id: int, patch: dict, actor: Actor | None) -> VendorProfile:
    """
    Create a vendor profile owned by owner_id.

    Raises:
        VendorValidationError: owner missing or not live
        ConflictError: owner already has a live profile, or slug taken
    """
    owner = db.session.get(User, owner_id)
    if owner is None or owner.is_deleted:
        raise VendorValidationError("Owner user not found")

    if get_vendor_for_user(owner_id) is not None:
        raise ConflictError("User already has a vendor profile")

    data = dict(patch)
    data["slug"] = slugify(data.get("slug") or data["business_name"])
    _ensure_slug_free(data["slug"])

    data.update({"user_id": owner_id, "is_deleted": False})
    vendor = repository.create_record(VendorProfile, data, actor)
    db.session.commit()
    return vendor


def update_vendor(vendor_id: int, patch: dict, actor: Actor | None) -> VendorProfile:
    vendor = get_vendor(vendor_id)
    data = dict(patch)
    if data.get("slug"):
        data["slug"] = slugify(data["slug"])
        _ensure_slug_free(data["slug"], exclude_id=vendor.id)
    repository.update_record(vendor, data, actor)
    db.session.commit()
    return vendor


def soft_delete_vendor(vendor_id: int, actor: Actor | None) -> VendorProfile:
    vendor = get_vendor(vendor_id)
    repository.soft_delete_record(vendor, actor)
    db.session.commit()
    return vendor


def restore_vendor(vendor_id: int, actor: Actor | None) -> VendorProfile:
    vendor = db.session.get(VendorProfile, vendor_id)
    if vendor is None or not vendor.is_deleted:
        raise VendorNotFoundError("Deleted vendor not found")
    if get_vendor_for_user(vendor.user_id) is not None:
        raise ConflictError("User already has a live vendor profile")
    repository.restore_record(vendor, actor)
    db.session.commit()
    return vendor


def hard_delete_vendor(vendor_id: int) -> None:
    vendor = db.session.get(VendorProfile, vendor_id)
    if vendor is None:
        raise VendorNotFoundError("Vendor not found")

    has_children = (
        db.session.query(Store.id).filter(Store.vendor_id == vendor.id).first()
        or db.session.query(Product.id).filter(Product.vendor_id == vendor.id).first()
    )
    if has_children:
        raise VendorValidationError("Vendor still has stores or products")

    repository.hard_delete_record(vendor)
    db.session.commit()
