# Overview: Authentication, role and ownership decorators for API routes.

from functools import wraps
from flask import request, jsonify, g, current_app

from .rbac import has_required_role
from .services import session_service
from .services.ownership_service import check_ownership
from .services.security_service import log_security_event


def _is_authenticated() -> bool:
    return hasattr(g, 'current_user')


def _client_context() -> dict:
    return {
        "resource": request.path,
        "action": request.method,
        "ip_address": request.remote_addr,
        "user_agent": request.headers.get("User-Agent"),
    }


def require_auth(f):
    """
    Require a valid bearer session.

    Sets the following Flask g attributes:
    - g.current_user: The authenticated User object
    - g.actor: Actor(id, role, display_name) passed to every repository write
    - g.session_context: The full SessionContext object

    Returns 401 if the Authorization header is missing, the token is invalid
    or expired, or the account is soft-deleted or deactivated.
    """
    @wraps(f)
    def decorated_function(*args, **kwargs):
        auth_header = request.headers.get("Authorization")

        if not auth_header or not auth_header.startswith("Bearer "):
            return jsonify({"error": "Authentication required"}), 401

        token = auth_header.split(" ", 1)[1]
        context = session_service.validate_session(token)

        if not context:
            return jsonify({"error": "Invalid or expired token"}), 401

        g.current_user = context.user
        g.actor = context.actor
        g.session_context = context

        return f(*args, **kwargs)

    return decorated_function


def require_roles(*roles):
    """
    Require the caller's level to reach at least one of the given roles.

    Hierarchy based: @require_roles("ADMIN") admits ADMIN and SUPER_ADMIN.
    No roles means any authenticated caller. Must sit below @require_auth.
    """
    def decorator(f):
        @wraps(f)
        def decorated_function(*args, **kwargs):
            if not _is_authenticated():
                return jsonify({"error": "Authentication required"}), 401

            user = g.current_user
            if has_required_role(user.role, roles):
                return f(*args, **kwargs)

            current_app.logger.warning(
                "Role check failed",
                extra={"user_id": user.id, "role": user.role, "required_roles": list(roles)},
            )
            log_security_event(
                user_id=user.id,
                role=user.role,
                event_type="ROLE_DENIED",
                success=False,
                reason=f"Requires one of: {', '.join(roles)}",
                **_client_context(),
            )
            return jsonify({
                "error": "Insufficient role permissions",
                "required_roles": list(roles),
            }), 403

        return decorated_function
    return decorator


# Alternate parameter names per entity, checked after id_param.
_ENTITY_ID_PARAMS = {
    "product": "product_id",
    "vendor": "vendor_id",
    "user": "user_id",
    "category": "category_id",
}


def _extract_entity_id(entity: str, id_param: str, view_kwargs: dict):
    if view_kwargs.get(id_param) is not None:
        return view_kwargs[id_param]

    body = request.get_json(silent=True)
    body = body if isinstance(body, dict) else {}
    if body.get("id") is not None:
        return body["id"]

    alt = _ENTITY_ID_PARAMS.get(entity)
    if alt:
        if view_kwargs.get(alt) is not None:
            return view_kwargs[alt]
        if body.get(alt) is not None:
            return body[alt]
    return None


def require_ownership(entity: str, id_param: str = "id"):
    """
    Require the caller to own the target resource (see ownership_service).

    GLOBAL roles always pass. Missing id -> 404 "Resource not found";
    failed check -> 403. Must sit below @require_auth.
    """
    def decorator(f):
        @wraps(f)
        def decorated_function(*args, **kwargs):
            if not _is_authenticated():
                return jsonify({"error": "Authentication required"}), 401

            user = g.current_user
            entity_id = _extract_entity_id(entity, id_param, kwargs)

            if entity_id is None:
                current_app.logger.warning(
                    "No entity ID found in request",
                    extra={"user_id": user.id, "entity": entity, "url": request.path},
                )
                return jsonify({"error": "Resource not found"}), 404

            if check_ownership(user, entity, entity_id):
                current_app.logger.debug(
                    "Ownership check passed",
                    extra={"user_id": user.id, "entity": entity, "entity_id": entity_id},
                )
                return f(*args, **kwargs)

            current_app.logger.warning(
                "Ownership check failed",
                extra={"user_id": user.id, "role": user.role, "entity": entity, "entity_id": entity_id},
            )
            log_security_event(
                user_id=user.id,
                role=user.role,
                event_type="OWNERSHIP_DENIED",
                success=False,
                reason=f"{entity}:{entity_id}",
                **_client_context(),
            )
            return jsonify({"error": "Access denied: You can only manage your own resources"}), 403

        return decorated_function
    return decorator


def reset_request_identity():
    """before_request hook: identity set by require_auth never outlives its request."""
    for name in ("current_user", "actor", "session_context"):
        g.pop(name, None)
