# Overview: Best-effort business audit log and the after-request hook that feeds it.

"""
Audit Service

log() writes one AuditLog row. It never raises: a failed audit write is
rolled back and logged, and the request that triggered it still succeeds.

audit_response() runs after every request. Successful (2xx) POST / PUT /
PATCH / DELETE calls on a known resource prefix are logged with the acting
user taken from g.actor.
"""

from __future__ import annotations

import math
import re

from flask import current_app, g, request

from ..extensions import db
from ..models import AuditLog
from . import repository
from .soft_delete_service import Actor
from app.time_utils import utcnow


# Longest prefix first so /api/role-management/users is not shadowed.
ENTITY_URL_PATTERNS = [
    (re.compile(r"^/api/role-management/users(/|$)"), "User"),
    (re.compile(r"^/api/users(/|$)"), "User"),
    (re.compile(r"^/api/vendors(/|$)"), "VendorProfile"),
    (re.compile(r"^/api/stores(/|$)"), "Store"),
    (re.compile(r"^/api/categories(/|$)"), "Category"),
    (re.compile(r"^/api/products(/|$)"), "Product"),
]

METHOD_ACTIONS = {
    "POST": "CREATE",
    "PUT": "UPDATE",
    "PATCH": "UPDATE",
    "DELETE": "DELETE",
}

_ID_KEYS = ("id", "user_id", "product_id", "category_id", "vendor_id", "store_id")


def log(
    entity: str,
    entity_id,
    action: str,
    actor_id: str | None = None,
    metadata: dict | None = None,
    ip_address: str | None = None,
    user_agent: str | None = None,
    actor: Actor | None = None,
) -> AuditLog | None:
    """Write an audit row. Returns None (and logs) on failure."""
    try:
        entry = repository.create_record(
            AuditLog,
            {
                "entity": entity,
                "entity_id": str(entity_id) if entity_id is not None else None,
                "action": action,
                "user_id": actor_id,
                "meta": metadata,
                "ip_address": ip_address,
                "user_agent": user_agent,
            },
            actor,
        )
        db.session.commit()
    except Exception:
        db.session.rollback()
        current_app.logger.exception(
            "Failed to create audit log",
            extra={"entity": entity, "entity_id": entity_id, "action": action},
        )
        return None

    current_app.logger.debug(
        "Audit log created",
        extra={"entity": entity, "entity_id": entity_id, "action": action, "user_id": actor_id},
    )
    return entry


def entity_for_path(path: str) -> str | None:
    for pattern, entity in ENTITY_URL_PATTERNS:
        if pattern.match(path):
            return entity
    return None


def _first_id(source, keys=("id",)) -> str | None:
    if not isinstance(source, dict):
        return None
    for key in keys:
        if source.get(key) is not None:
            return str(source[key])
    return None


def extract_entity_id(view_args: dict | None, body, response_data) -> str | None:
    """Entity id from the URL, then the JSON body, then the JSON response."""
    found = _first_id(view_args, _ID_KEYS)
    if found:
        return found
    found = _first_id(body)
    if found:
        return found
    found = _first_id(response_data)
    if found:
        return found
    # Responses wrap the record: {"product": {...}}
    if isinstance(response_data, dict):
        for value in response_data.values():
            found = _first_id(value)
            if found:
                return found
    return None


def audit_response(response):
    """after_request hook. Always returns the response unchanged."""
    action = METHOD_ACTIONS.get(request.method)
    if action is None or not (200 <= response.status_code < 300):
        return response

    entity = entity_for_path(request.path)
    if entity is None:
        return response

    body = request.get_json(silent=True)
    response_data = response.get_json(silent=True) if response.is_json else None
    entity_id = extract_entity_id(request.view_args, body, response_data)
    if entity_id is None:
        return response

    actor = g.get("actor")
    log(
        entity,
        entity_id,
        action,
        actor_id=actor.id if actor else None,
        metadata={
            "method": request.method,
            "url": request.path,
            "query": request.args.to_dict(),
            "user_role": actor.role if actor else None,
            "user_name": actor.display_name if actor else None,
            "timestamp": utcnow().isoformat() + "Z",
            "response_status": response.status_code,
        },
        ip_address=request.remote_addr,
        user_agent=request.headers.get("User-Agent"),
        actor=actor,
    )
    return response


def get_audit_logs(
    *,
    entity: str | None = None,
    entity_id: str | None = None,
    user_id: str | None = None,
    action: str | None = None,
    page: int = 1,
    limit: int = 10,
) -> dict:
    page = max(int(page), 1)
    limit = min(max(int(limit), 1), 100)

    query = db.session.query(AuditLog).filter(
        AuditLog.is_active.is_(True),
        AuditLog.is_deleted.is_(False),
    )
    if entity:
        query = query.filter(AuditLog.entity == entity)
    if entity_id:
        query = query.filter(AuditLog.entity_id == str(entity_id))
    if user_id:
        query = query.filter(AuditLog.user_id == str(user_id))
    if action:
        query = query.filter(AuditLog.action == action.upper())

    total = query.count()
    logs = (
        query.order_by(AuditLog.created_at.desc(), AuditLog.id.desc())
        .offset((page - 1) * limit)
        .limit(limit)
        .all()
    )
    return {
        "logs": [entry.to_dict() for entry in logs],
        "total": total,
        "page": page,
        "limit": limit,
        "total_pages": math.ceil(total / limit) if total else 0,
    }
