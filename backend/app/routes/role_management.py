# Overview: Flask API routes for delegated user creation; parses input and returns JSON responses.

"""
Role Management Routes

POST /users is gated twice: @require_roles admits VENDOR and above by level,
then role_creation_service applies the creation-rule table and scoping.
A MANAGER passes the level gate and is still refused by the service, before
anything is written.
"""

from flask import Blueprint, request, jsonify, g, current_app

from ..decorators import require_auth, require_roles, require_ownership
from ..rbac import ADMIN, SUPER_ADMIN, VENDOR
from ..services import role_creation_service, user_service
from ..services.auth_service import InvalidRoleError, PasswordValidationError, UserAlreadyExistsError
from ..services.role_creation_service import RoleCreationDeniedError, RoleCreationValidationError
from ..services.security_service import log_security_event
from ..services.user_service import UserNotFoundError
from ..validation import ValidationError


role_management_bp = Blueprint("role_management", __name__, url_prefix="/api/role-management")


@role_management_bp.post("/users")
@require_auth
@require_roles(SUPER_ADMIN, ADMIN, VENDOR)
def create_user_with_role_route():
    """
    Create a user with a specific role.

    Request body:
    {
        "email": "staff@example.com",   // required
        "password": "...",              // required
        "full_name": "...",             // required
        "role": "MANAGER",              // required
        "phone": "...",                 // optional
        "created_by_vendor_id": 3       // required for VENDOR creators
    }
    """
    creator = g.current_user
    data = request.get_json(silent=True) or {}

    missing = [f for f in ("email", "password", "full_name", "role") if not data.get(f)]
    if missing:
        return jsonify({"error": f"Missing required fields: {', '.join(missing)}"}), 400

    try:
        user = role_creation_service.create_user_with_role(creator, data)
    except RoleCreationDeniedError as e:
        log_security_event(
            user_id=creator.id,
            role=creator.role,
            event_type="ROLE_CREATION_DENIED",
            success=False,
            resource=request.path,
            action=str(data.get("role"))[:64],
            reason=str(e),
            ip_address=request.remote_addr,
            user_agent=request.headers.get("User-Agent"),
        )
        return jsonify({"error": str(e)}), 403
    except (RoleCreationValidationError, PasswordValidationError, InvalidRoleError, ValidationError) as e:
        return jsonify({"error": str(e)}), 400
    except UserAlreadyExistsError as e:
        return jsonify({"error": str(e)}), 409

    log_security_event(
        user_id=creator.id,
        role=creator.role,
        event_type="USER_CREATED",
        success=True,
        resource=request.path,
        action=user.role,
        reason=f"Created user {user.id}",
        ip_address=request.remote_addr,
        user_agent=request.headers.get("User-Agent"),
    )
    return jsonify({"user": user.to_dict(), "message": "User created successfully"}), 201


@role_management_bp.get("/users/created-by-me")
@require_auth
@require_roles(SUPER_ADMIN, ADMIN, VENDOR)
def users_created_by_me_route():
    page = request.args.get("page", 1, type=int)
    limit = request.args.get("limit", 10, type=int)
    return jsonify(role_creation_service.get_users_by_creator(g.current_user, page, limit))


@role_management_bp.get("/rules")
@require_auth
def role_rules_route():
    """Creation rules for the caller's own role."""
    return jsonify(role_creation_service.get_role_creation_rules(g.current_user.role))


@role_management_bp.delete("/users/<int:user_id>")
@require_auth
@require_roles(SUPER_ADMIN, ADMIN, VENDOR)
@require_ownership("user", id_param="user_id")
def delete_created_user_route(user_id: int):
    """Soft delete a user the caller created (or any user, for GLOBAL roles)."""
    if user_id == g.current_user.id:
        return jsonify({"error": "You cannot delete your own account here"}), 400
    try:
        user = user_service.soft_delete_user(user_id, g.actor)
    except UserNotFoundError as e:
        return jsonify({"error": str(e)}), 404
    except Exception:
        current_app.logger.exception("Failed to delete user")
        return jsonify({"error": "Internal server error"}), 500
    return jsonify({"user": user.to_dict(), "message": "User deleted successfully"})
