# Overview: Data-access boundary for lifecycle-enveloped models.

"""
Repository helpers

Every write to an opted-in model goes through one of these functions with an
explicit actor. Payloads for enforced models are corrected by
soft_delete_service.enforce_write_policy; other models pass through unchanged.

TRANSACTIONS: functions add and flush but never commit. The calling service
owns the transaction boundary.
"""

from __future__ import annotations

from ..extensions import db
from .soft_delete_service import (
    Actor,
    apply_upsert_policy,
    enforce_write_policy,
    is_enforced,
)


def _prepare(model, actor: Actor | None, operation: str, payload: dict | None) -> dict:
    if is_enforced(model):
        return enforce_write_policy(actor, operation, payload)
    return dict(payload or {})


def _assign(record, data: dict) -> None:
    for key, value in data.items():
        if not hasattr(type(record), key):
            raise AttributeError(f"{type(record).__name__} has no attribute {key!r}")
        setattr(record, key, value)


def create_record(model, payload: dict, actor: Actor | None = None):
    data = _prepare(model, actor, "create", payload)
    record = model(**data)
    db.session.add(record)
    db.session.flush()
    return record


def update_record(record, payload: dict, actor: Actor | None = None):
    data = _prepare(type(record), actor, "update", payload)
    _assign(record, data)
    db.session.flush()
    return record


def update_many(model, filters: dict, payload: dict, actor: Actor | None = None) -> int:
    """Bulk update rows matching equality filters. Returns the row count."""
    data = _prepare(model, actor, "update_many", payload)
    count = (
        db.session.query(model)
        .filter_by(**filters)
        .update(data, synchronize_session="fetch")
    )
    db.session.flush()
    return count


def upsert_record(model, lookup: dict, create: dict, update: dict, actor: Actor | None = None):
    """
    Update the row matching lookup, or create it.

    Both branches are corrected by the upsert policy; the lookup values are
    merged into the create branch.
    """
    if is_enforced(model):
        create_data, update_data = apply_upsert_policy(actor, create, update)
    else:
        create_data, update_data = dict(create or {}), dict(update or {})

    record = db.session.query(model).filter_by(**lookup).first()
    if record is None:
        record = model(**{**lookup, **create_data})
        db.session.add(record)
    else:
        _assign(record, update_data)
    db.session.flush()
    return record


def soft_delete_record(record, actor: Actor | None = None):
    return update_record(record, {"is_deleted": True}, actor)


def restore_record(record, actor: Actor | None = None):
    return update_record(record, {"is_deleted": False}, actor)


def hard_delete_record(record) -> None:
    """Physically remove the row. Bypasses the soft-delete policy entirely."""
    db.session.delete(record)
    db.session.flush()


def live_query(model, include_deleted: bool = False):
    """Query excluding soft-deleted rows unless include_deleted is set."""
    query = db.session.query(model)
    if not include_deleted:
        query = query.filter(model.is_deleted.is_(False))
    return query


def paginate(query, page: int | None = None, per_page: int | None = None) -> dict:
    """
    Serialize a query as {"items", "count"} plus pagination metadata when
    page is given. per_page defaults to 20, max 100.
    """
    if page is None:
        rows = query.all()
        return {"items": [r.to_dict() for r in rows], "count": len(rows)}

    per_page = min(per_page or 20, 100)
    page = max(page, 1)

    total = query.count()
    total_pages = (total + per_page - 1) // per_page if total > 0 else 1
    rows = query.offset((page - 1) * per_page).limit(per_page).all()

    return {
        "items": [r.to_dict() for r in rows],
        "count": len(rows),
        "pagination": {
            "page": page,
            "per_page": per_page,
            "total": total,
            "total_pages": total_pages,
            "has_next": page < total_pages,
            "has_prev": page > 1,
        },
    }
