# Overview: Service-layer operations for catalog products.

"""
Product Service

VISIBILITY: listings and lookups return live products only. include_deleted
is honoured only when the route has already established a GLOBAL caller.

OWNERSHIP: a product belongs to a vendor profile. Non-GLOBAL callers may
only create products for a vendor profile they own; updates and deletes are
gated by @require_ownership("product") at the route.
"""

from __future__ import annotations

from ..extensions import db
from ..models import Category, Product, Store, User
from ..validation import ConflictError, ValidationError, enforce_rules_product
from . import repository
from .ownership_service import require_owner
from .soft_delete_service import Actor
from .vendor_service import get_vendor


class ProductNotFoundError(Exception):
    """Raised when a product is not found."""
    pass


def get_product(product_id: int, include_deleted: bool = False) -> Product:
    product = db.session.get(Product, product_id)
    if product is None or (product.is_deleted and not include_deleted):
        raise ProductNotFoundError("Product not found")
    return product


def list_products(
    *,
    vendor_id: int | None = None,
    category_id: int | None = None,
    store_id: int | None = None,
    include_deleted: bool = False,
    page: int | None = None,
    per_page: int | None = None,
) -> dict:
    query = repository.live_query(Product, include_deleted)
    if vendor_id is not None:
        query = query.filter(Product.vendor_id == vendor_id)
    if category_id is not None:
        query = query.filter(Product.category_id == category_id)
    if store_id is not None:
        query = query.filter(Product.store_id == store_id)
    return repository.paginate(query.order_by(Product.name.asc(), Product.id.asc()), page, per_page)


def _check_references(data: dict, vendor_id: int) -> None:
    store_id = data.get("store_id")
    if store_id is not None:
        store = db.session.get(Store, store_id)
        if store is None or store.is_deleted or store.vendor_id != vendor_id:
            raise ValidationError("Store not found for this vendor")

    category_id = data.get("category_id")
    if category_id is not None:
        category = db.session.get(Category, category_id)
        if category is None or category.is_deleted:
            raise ValidationError("Category not found")


def _ensure_sku_free(sku: str, exclude_id: int | None = None) -> None:
    query = db.session.query(Product.id).filter(Product.sku == sku)
    if exclude_id is not None:
        query = query.filter(Product.id != exclude_id)
    if query.first():
        raise ConflictError(f"SKU '{sku}' already exists")


def create_product(*, user: User, patch: dict, actor: Actor | None) -> Product:
    """
    Raises:
        VendorNotFoundError: vendor missing or soft-deleted
        OwnershipDeniedError: caller does not own the vendor
        ValidationError / ConflictError: bad references, price or duplicate SKU
    """
    data = dict(patch)
    enforce_rules_product(data)

    vendor = get_vendor(data["vendor_id"])
    require_owner(user, "vendor", vendor.id)

    _check_references(data, vendor.id)
    _ensure_sku_free(data["sku"])

    data["is_deleted"] = False
    product = repository.create_record(Product, data, actor)
    db.session.commit()
    return product


def update_product(product_id: int, patch: dict, actor: Actor | None) -> Product:
    product = get_product(product_id)
    data = dict(patch)
    if "vendor_id" in data and data["vendor_id"] != product.vendor_id:
        raise ValidationError("vendor_id cannot be changed")
    enforce_rules_product(data)
    _check_references(data, product.vendor_id)
    if data.get("sku"):
        _ensure_sku_free(data["sku"], exclude_id=product.id)

    repository.update_record(product, data, actor)
    db.session.commit()
    return product


def soft_delete_product(product_id: int, actor: Actor | None) -> Product:
    product = get_product(product_id)
    repository.soft_delete_record(product, actor)
    db.session.commit()
    return product


def restore_product(product_id: int, actor: Actor | None) -> Product:
    product = db.session.get(Product, product_id)
    if product is None or not product.is_deleted:
        raise ProductNotFoundError("Deleted product not found")
    repository.restore_record(product, actor)
    db.session.commit()
    return product


def hard_delete_product(product_id: int) -> None:
    product = db.session.get(Product, product_id)
    if product is None:
        raise ProductNotFoundError("Product not found")
    repository.hard_delete_record(product)
    db.session.commit()
