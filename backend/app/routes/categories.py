# Overview: Flask API routes for product categories; parses input and returns JSON responses.

"""
Category Routes

Categories are global catalog structure. Reads are public; writes need
ADMIN and pass the "category" ownership check, which only GLOBAL roles pass.
"""

from flask import Blueprint, request, jsonify, g

from ..decorators import require_auth, require_roles, require_ownership
from ..models import Category
from ..rbac import ADMIN, SUPER_ADMIN
from ..services import category_service
from ..services.category_service import CategoryNotFoundError
from ..validation import ConflictError, ModelValidationPolicy, ValidationError, validate_payload


categories_bp = Blueprint("categories", __name__, url_prefix="/api/categories")

CATEGORY_POLICY = ModelValidationPolicy(
    writable_fields=frozenset({"name", "slug", "description", "parent_id"}),
    required_on_create=frozenset({"name"}),
)


@categories_bp.get("")
def list_categories_route():
    return jsonify(category_service.list_categories(
        parent_id=request.args.get("parent_id", type=int),
    ))


@categories_bp.post("")
@require_auth
@require_roles(ADMIN)
def create_category_route():
    try:
        patch = validate_payload(
            model=Category,
            payload=request.get_json(silent=True),
            policy=CATEGORY_POLICY,
            partial=False,
        )
        category = category_service.create_category(patch=patch, actor=g.actor)
    except ValidationError as e:
        return jsonify({"error": str(e)}), 400
    except ConflictError as e:
        return jsonify({"error": str(e)}), 409
    return jsonify({"category": category.to_dict()}), 201


@categories_bp.put("/<int:category_id>")
@require_auth
@require_roles(ADMIN)
@require_ownership("category", id_param="category_id")
def update_category_route(category_id: int):
    try:
        patch = validate_payload(
            model=Category,
            payload=request.get_json(silent=True),
            policy=CATEGORY_POLICY,
            partial=True,
        )
        category = category_service.update_category(category_id, patch, g.actor)
    except ValidationError as e:
        return jsonify({"error": str(e)}), 400
    except CategoryNotFoundError as e:
        return jsonify({"error": str(e)}), 404
    except ConflictError as e:
        return jsonify({"error": str(e)}), 409
    return jsonify({"category": category.to_dict()})


@categories_bp.delete("/<int:category_id>")
@require_auth
@require_roles(ADMIN)
@require_ownership("category", id_param="category_id")
def soft_delete_category_route(category_id: int):
    try:
        category = category_service.soft_delete_category(category_id, g.actor)
    except CategoryNotFoundError as e:
        return jsonify({"error": str(e)}), 404
    return jsonify({"category": category.to_dict(), "message": "Category deleted successfully"})


@categories_bp.post("/<int:category_id>/restore")
@require_auth
@require_roles(ADMIN)
def restore_category_route(category_id: int):
    try:
        category = category_service.restore_category(category_id, g.actor)
    except CategoryNotFoundError as e:
        return jsonify({"error": str(e)}), 404
    return jsonify({"category": category.to_dict(), "message": "Category restored successfully"})


@categories_bp.delete("/<int:category_id>/hard")
@require_auth
@require_roles(SUPER_ADMIN)
def hard_delete_category_route(category_id: int):
    try:
        category_service.hard_delete_category(category_id)
    except CategoryNotFoundError as e:
        return jsonify({"error": str(e)}), 404
    return jsonify({"id": category_id, "message": "Category permanently deleted"})
