# Overview: Service-layer operations for vendor storefronts.

from __future__ import annotations

from ..extensions import db
from ..models import Product, Store, User
from ..rbac import has_global_scope
from ..validation import ConflictError
from . import repository
from .ownership_service import check_ownership
from .soft_delete_service import Actor
from .vendor_service import get_vendor


class StoreNotFoundError(Exception):
    """Raised when a store is not found."""
    pass


def get_store(store_id: int, include_deleted: bool = False) -> Store:
    store = db.session.get(Store, store_id)
    if store is None or (store.is_deleted and not include_deleted):
        raise StoreNotFoundError("Store not found")
    return store


def can_manage_store(user: User, store: Store) -> bool:
    """GLOBAL roles, or the VENDOR owning the store's vendor profile."""
    return has_global_scope(user.role) or check_ownership(user, "vendor", store.vendor_id)


def list_stores(
    *,
    vendor_id: int | None = None,
    include_deleted: bool = False,
    page: int | None = None,
    per_page: int | None = None,
) -> dict:
    query = repository.live_query(Store, include_deleted)
    if vendor_id is not None:
        query = query.filter(Store.vendor_id == vendor_id)
    return repository.paginate(query.order_by(Store.name.asc(), Store.id.asc()), page, per_page)


def create_store(*, vendor_id: int, patch: dict, actor: Actor | None) -> Store:
    """
    Raises:
        VendorNotFoundError: vendor missing or soft-deleted
        ConflictError: live store with the same name exists for the vendor
    """
    vendor = get_vendor(vendor_id)

    name = patch["name"]
    clash = repository.live_query(Store).filter(Store.vendor_id == vendor.id, Store.name == name).first()
    if clash:
        raise ConflictError(f"Store '{name}' already exists for this vendor")

    data = dict(patch)
    data.update({"vendor_id": vendor.id, "is_deleted": False})
    store = repository.create_record(Store, data, actor)
    db.session.commit()
    return store


def soft_delete_store(store_id: int, actor: Actor | None) -> Store:
    store = get_store(store_id)
    repository.soft_delete_record(store, actor)
    db.session.commit()
    return store


def hard_delete_store(store_id: int, actor: Actor | None) -> None:
    """Products listed in the store are detached (store_id cleared), not deleted."""
    store = db.session.get(Store, store_id)
    if store is None:
        raise StoreNotFoundError("Store not found")
    repository.update_many(Product, {"store_id": store.id}, {"store_id": None}, actor)
    repository.hard_delete_record(store)
    db.session.commit()
