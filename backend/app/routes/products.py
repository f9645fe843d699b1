# Overview: Flask API routes for products; parses input and returns JSON responses.

"""
Product Routes

- list/get: public, live products only. include_deleted=true is honoured
  for authenticated ADMIN and above.
- POST: VENDOR and above; non-GLOBAL callers must own the vendor_id given.
- PUT / DELETE: @require_ownership("product")
- restore: ADMIN and above; hard delete: SUPER_ADMIN only
"""

from flask import Blueprint, request, jsonify, g

from ..decorators import require_auth, require_roles, require_ownership
from ..models import Product
from ..rbac import ADMIN, SUPER_ADMIN, VENDOR, has_required_role
from ..services import product_service, session_service
from ..services.ownership_service import OwnershipDeniedError
from ..services.product_service import ProductNotFoundError
from ..services.vendor_service import VendorNotFoundError
from ..validation import ConflictError, ModelValidationPolicy, ValidationError, validate_payload


products_bp = Blueprint("products", __name__, url_prefix="/api/products")

PRODUCT_POLICY = ModelValidationPolicy(
    writable_fields=frozenset({
        "vendor_id", "store_id", "category_id", "name", "sku", "description", "price_cents",
    }),
    required_on_create=frozenset({"vendor_id", "name", "sku", "price_cents"}),
)


def _include_deleted() -> bool:
    """
    include_deleted=true only for a valid ADMIN+ bearer token. Read routes
    are public, so the token is checked here rather than by @require_auth.
    """
    if request.args.get("include_deleted", "false").lower() != "true":
        return False
    auth_header = request.headers.get("Authorization") or ""
    if not auth_header.startswith("Bearer "):
        return False
    context = session_service.validate_session(auth_header.split(" ", 1)[1])
    return bool(context) and has_required_role(context.user.role, [ADMIN])


@products_bp.get("")
def list_products_route():
    """
    Query parameters:
    - vendor_id / category_id / store_id: filters
    - include_deleted: ADMIN+ only (default: false)
    - page / per_page: optional pagination
    """
    return jsonify(product_service.list_products(
        vendor_id=request.args.get("vendor_id", type=int),
        category_id=request.args.get("category_id", type=int),
        store_id=request.args.get("store_id", type=int),
        include_deleted=_include_deleted(),
        page=request.args.get("page", type=int),
        per_page=request.args.get("per_page", type=int),
    ))


@products_bp.get("/<int:product_id>")
def get_product_route(product_id: int):
    try:
        product = product_service.get_product(product_id, include_deleted=_include_deleted())
    except ProductNotFoundError as e:
        return jsonify({"error": str(e)}), 404
    return jsonify({"product": product.to_dict()})


@products_bp.post("")
@require_auth
@require_roles(VENDOR)
def create_product_route():
    try:
        patch = validate_payload(
            model=Product,
            payload=request.get_json(silent=True),
            policy=PRODUCT_POLICY,
            partial=False,
        )
        product = product_service.create_product(user=g.current_user, patch=patch, actor=g.actor)
    except ValidationError as e:
        return jsonify({"error": str(e)}), 400
    except OwnershipDeniedError as e:
        return jsonify({"error": str(e)}), 403
    except VendorNotFoundError as e:
        return jsonify({"error": str(e)}), 404
    except ConflictError as e:
        return jsonify({"error": str(e)}), 409
    return jsonify({"product": product.to_dict()}), 201


@products_bp.put("/<int:product_id>")
@require_auth
@require_ownership("product", id_param="product_id")
def update_product_route(product_id: int):
    try:
        patch = validate_payload(
            model=Product,
            payload=request.get_json(silent=True),
            policy=PRODUCT_POLICY,
            partial=True,
        )
        product = product_service.update_product(product_id, patch, g.actor)
    except ValidationError as e:
        return jsonify({"error": str(e)}), 400
    except ProductNotFoundError as e:
        return jsonify({"error": str(e)}), 404
    except ConflictError as e:
        return jsonify({"error": str(e)}), 409
    return jsonify({"product": product.to_dict()})


@products_bp.delete("/<int:product_id>")
@require_auth
@require_ownership("product", id_param="product_id")
def soft_delete_product_route(product_id: int):
    try:
        product = product_service.soft_delete_product(product_id, g.actor)
    except ProductNotFoundError as e:
        return jsonify({"error": str(e)}), 404
    return jsonify({"product": product.to_dict(), "message": "Product deleted successfully"})


@products_bp.post("/<int:product_id>/restore")
@require_auth
@require_roles(ADMIN)
def restore_product_route(product_id: int):
    try:
        product = product_service.restore_product(product_id, g.actor)
    except ProductNotFoundError as e:
        return jsonify({"error": str(e)}), 404
    return jsonify({"product": product.to_dict(), "message": "Product restored successfully"})


@products_bp.delete("/<int:product_id>/hard")
@require_auth
@require_roles(SUPER_ADMIN)
def hard_delete_product_route(product_id: int):
    try:
        product_service.hard_delete_product(product_id)
    except ProductNotFoundError as e:
        return jsonify({"error": str(e)}), 404
    return jsonify({"id": product_id, "message": "Product permanently deleted"})
