# Overview: Flask API routes for user accounts; parses input and returns JSON responses.

"""
User Routes

- list/get, soft delete, restore and status toggle: ADMIN and above
- PATCH: the user themselves, a VENDOR that created them, or GLOBAL roles
- hard delete: SUPER_ADMIN only
"""

from flask import Blueprint, request, jsonify, g

from ..decorators import require_auth, require_roles, require_ownership
from ..models import User
from ..rbac import ADMIN, SUPER_ADMIN
from ..services import user_service
from ..services.user_service import UserNotFoundError, UserValidationError
from ..validation import ModelValidationPolicy, ValidationError, validate_payload


users_bp = Blueprint("users", __name__, url_prefix="/api/users")

USER_POLICY = ModelValidationPolicy(
    writable_fields=frozenset({"full_name", "phone"}),
)


def _include_deleted() -> bool:
    return request.args.get("include_deleted", "false").lower() == "true"


@users_bp.get("")
@require_auth
@require_roles(ADMIN)
def list_users_route():
    """
    Query parameters:
    - role: filter by role code
    - include_deleted: include soft-deleted users (default: false)
    - page / per_page: optional pagination
    """
    return jsonify(user_service.list_users(
        role=request.args.get("role"),
        include_deleted=_include_deleted(),
        page=request.args.get("page", type=int),
        per_page=request.args.get("per_page", type=int),
    ))


@users_bp.get("/<int:user_id>")
@require_auth
@require_roles(ADMIN)
def get_user_route(user_id: int):
    try:
        user = user_service.get_user(user_id, include_deleted=_include_deleted())
    except UserNotFoundError as e:
        return jsonify({"error": str(e)}), 404
    return jsonify({"user": user.to_dict()})


@users_bp.patch("/<int:user_id>")
@require_auth
@require_ownership("user", id_param="user_id")
def update_user_route(user_id: int):
    try:
        patch = validate_payload(
            model=User,
            payload=request.get_json(silent=True),
            policy=USER_POLICY,
            partial=True,
        )
        user = user_service.update_user(user_id, patch, g.actor)
    except ValidationError as e:
        return jsonify({"error": str(e)}), 400
    except UserNotFoundError as e:
        return jsonify({"error": str(e)}), 404
    return jsonify({"user": user.to_dict()})


@users_bp.delete("/<int:user_id>")
@require_auth
@require_roles(ADMIN)
def soft_delete_user_route(user_id: int):
    if user_id == g.current_user.id:
        return jsonify({"error": "You cannot delete your own account"}), 400
    try:
        user = user_service.soft_delete_user(user_id, g.actor)
    except UserNotFoundError as e:
        return jsonify({"error": str(e)}), 404
    return jsonify({"user": user.to_dict(), "message": "User deleted successfully"})


@users_bp.post("/<int:user_id>/restore")
@require_auth
@require_roles(ADMIN)
def restore_user_route(user_id: int):
    try:
        user = user_service.restore_user(user_id, g.actor)
    except UserNotFoundError as e:
        return jsonify({"error": str(e)}), 404
    return jsonify({"user": user.to_dict(), "message": "User restored successfully"})


@users_bp.post("/<int:user_id>/toggle-status")
@require_auth
@require_roles(ADMIN)
def toggle_user_status_route(user_id: int):
    if user_id == g.current_user.id:
        return jsonify({"error": "You cannot change your own status"}), 400
    try:
        user = user_service.toggle_user_status(user_id, g.actor)
    except UserNotFoundError as e:
        return jsonify({"error": str(e)}), 404
    return jsonify({"user": user.to_dict()})


@users_bp.delete("/<int:user_id>/hard")
@require_auth
@require_roles(SUPER_ADMIN)
def hard_delete_user_route(user_id: int):
    if user_id == g.current_user.id:
        return jsonify({"error": "You cannot delete your own account"}), 400
    try:
        user_service.hard_delete_user(user_id)
    except UserNotFoundError as e:
        return jsonify({"error": str(e)}), 404
    except UserValidationError as e:
        return jsonify({"error": str(e)}), 409
    return jsonify({"id": user_id, "message": "User permanently deleted"})
