# Overview: Flask API routes for reading the audit and security trails.

from flask import Blueprint, request, jsonify

from ..decorators import require_auth, require_roles
from ..rbac import ADMIN
from ..services import audit_service
from ..services.security_service import get_security_events


audit_bp = Blueprint("audit", __name__, url_prefix="/api")


@audit_bp.get("/audit-logs")
@require_auth
@require_roles(ADMIN)
def list_audit_logs_route():
    """
    Query parameters: entity, entity_id, user_id, action, page, limit
    """
    return jsonify(audit_service.get_audit_logs(
        entity=request.args.get("entity"),
        entity_id=request.args.get("entity_id"),
        user_id=request.args.get("user_id"),
        action=request.args.get("action"),
        page=request.args.get("page", 1, type=int),
        limit=request.args.get("limit", 10, type=int),
    ))


@audit_bp.get("/security-events")
@require_auth
@require_roles(ADMIN)
def list_security_events_route():
    events = get_security_events(
        user_id=request.args.get("user_id", type=int),
        event_type=request.args.get("event_type"),
        limit=min(request.args.get("limit", 100, type=int), 500),
    )
    return jsonify({"items": [e.to_dict() for e in events], "count": len(events)})
