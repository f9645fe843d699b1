# Overview: Flask API routes for vendor storefronts; parses input and returns JSON responses.

from flask import Blueprint, request, jsonify, g

from ..decorators import require_auth, require_roles
from ..models import Store
from ..rbac import SUPER_ADMIN, VENDOR, has_global_scope
from ..services import store_service, vendor_service
from ..services.store_service import StoreNotFoundError
from ..services.vendor_service import VendorNotFoundError
from ..validation import ConflictError, ModelValidationPolicy, ValidationError, validate_payload


stores_bp = Blueprint("stores", __name__, url_prefix="/api/stores")

STORE_POLICY = ModelValidationPolicy(
    writable_fields=frozenset({"name", "description"}),
    required_on_create=frozenset({"name"}),
)


@stores_bp.get("")
@require_auth
def list_stores_route():
    return jsonify(store_service.list_stores(
        vendor_id=request.args.get("vendor_id", type=int),
        page=request.args.get("page", type=int),
        per_page=request.args.get("per_page", type=int),
    ))


@stores_bp.post("")
@require_auth
@require_roles(VENDOR)
def create_store_route():
    """
    Request body: {"name": "...", "description": "...", "vendor_id": 3}

    A VENDOR creates stores for its own live vendor profile (vendor_id is
    ignored). GLOBAL roles must name the vendor.
    """
    user = g.current_user
    data = dict(request.get_json(silent=True) or {})
    vendor_id = data.pop("vendor_id", None)

    if not has_global_scope(user.role):
        own = vendor_service.get_vendor_for_user(user.id)
        if own is None:
            return jsonify({"error": "You do not have a vendor profile"}), 403
        vendor_id = own.id
    elif vendor_id is None:
        return jsonify({"error": "vendor_id is required"}), 400

    try:
        patch = validate_payload(model=Store, payload=data, policy=STORE_POLICY, partial=False)
        store = store_service.create_store(vendor_id=vendor_id, patch=patch, actor=g.actor)
    except ValidationError as e:
        return jsonify({"error": str(e)}), 400
    except VendorNotFoundError as e:
        return jsonify({"error": str(e)}), 404
    except ConflictError as e:
        return jsonify({"error": str(e)}), 409

    return jsonify({"store": store.to_dict()}), 201


@stores_bp.delete("/<int:store_id>")
@require_auth
def soft_delete_store_route(store_id: int):
    """GLOBAL roles or the VENDOR owning the store."""
    try:
        store = store_service.get_store(store_id)
    except StoreNotFoundError as e:
        return jsonify({"error": str(e)}), 404

    if not store_service.can_manage_store(g.current_user, store):
        return jsonify({"error": "Access denied: You can only manage your own resources"}), 403

    store = store_service.soft_delete_store(store_id, g.actor)
    return jsonify({"store": store.to_dict(), "message": "Store deleted successfully"})


@stores_bp.delete("/<int:store_id>/hard")
@require_auth
@require_roles(SUPER_ADMIN)
def hard_delete_store_route(store_id: int):
    try:
        store_service.hard_delete_store(store_id, g.actor)
    except StoreNotFoundError as e:
        return jsonify({"error": str(e)}), 404
    return jsonify({"id": store_id, "message": "Store permanently deleted"})
