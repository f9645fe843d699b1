# Overview: Flask API routes for vendor profiles; parses input and returns JSON responses.

"""
Vendor Routes

- POST: VENDOR and above. A VENDOR always creates its own profile; GLOBAL
  roles may pass user_id to create one on behalf of another account.
- list/get: any authenticated caller, live profiles only
- PUT / DELETE: the owning VENDOR or GLOBAL roles (@require_ownership)
- restore: ADMIN and above; hard delete: SUPER_ADMIN only
"""

from flask import Blueprint, request, jsonify, g

from ..decorators import require_auth, require_roles, require_ownership
from ..models import VendorProfile
from ..rbac import ADMIN, SUPER_ADMIN, VENDOR, has_global_scope
from ..services import vendor_service
from ..services.vendor_service import VendorNotFoundError, VendorValidationError
from ..validation import ConflictError, ModelValidationPolicy, ValidationError, validate_payload


vendors_bp = Blueprint("vendors", __name__, url_prefix="/api/vendors")

VENDOR_POLICY = ModelValidationPolicy(
    writable_fields=frozenset({
        "business_name", "slug", "description", "contact_email", "contact_phone",
    }),
    required_on_create=frozenset({"business_name"}),
)


@vendors_bp.get("")
@require_auth
def list_vendors_route():
    """
    Query parameters:
    - status: verification status filter (PENDING/APPROVED/REJECTED)
    - page / per_page: optional pagination
    """
    return jsonify(vendor_service.list_vendors(
        status=request.args.get("status"),
        page=request.args.get("page", type=int),
        per_page=request.args.get("per_page", type=int),
    ))


@vendors_bp.post("")
@require_auth
@require_roles(VENDOR)
def create_vendor_route():
    """
    Request body:
    {
        "business_name": "Golden Hour Jewels",  // required
        "slug": "golden-hour",                  // optional, derived from name
        "description": "...",
        "contact_email": "...",
        "contact_phone": "...",
        "user_id": 12                           // GLOBAL roles only
    }
    """
    user = g.current_user
    data = dict(request.get_json(silent=True) or {})
    owner_id = data.pop("user_id", None)

    if owner_id is None or not has_global_scope(user.role):
        owner_id = user.id

    try:
        patch = validate_payload(model=VendorProfile, payload=data, policy=VENDOR_POLICY, partial=False)
        vendor = vendor_service.create_vendor(owner_id=owner_id, patch=patch, actor=g.actor)
    except (ValidationError, VendorValidationError) as e:
        return jsonify({"error": str(e)}), 400
    except ConflictError as e:
        return jsonify({"error": str(e)}), 409

    return jsonify({"vendor": vendor.to_dict()}), 201


@vendors_bp.get("/<int:vendor_id>")
@require_auth
def get_vendor_route(vendor_id: int):
    try:
        vendor = vendor_service.get_vendor(vendor_id)
    except VendorNotFoundError as e:
        return jsonify({"error": str(e)}), 404
    return jsonify({"vendor": vendor.to_dict()})


@vendors_bp.put("/<int:vendor_id>")
@require_auth
@require_ownership("vendor", id_param="vendor_id")
def update_vendor_route(vendor_id: int):
    try:
        patch = validate_payload(
            model=VendorProfile,
            payload=request.get_json(silent=True),
            policy=VENDOR_POLICY,
            partial=True,
        )
        vendor = vendor_service.update_vendor(vendor_id, patch, g.actor)
    except ValidationError as e:
        return jsonify({"error": str(e)}), 400
    except VendorNotFoundError as e:
        return jsonify({"error": str(e)}), 404
    except ConflictError as e:
        return jsonify({"error": str(e)}), 409
    return jsonify({"vendor": vendor.to_dict()})


@vendors_bp.delete("/<int:vendor_id>")
@require_auth
@require_ownership("vendor", id_param="vendor_id")
def soft_delete_vendor_route(vendor_id: int):
    try:
        vendor = vendor_service.soft_delete_vendor(vendor_id, g.actor)
    except VendorNotFoundError as e:
        return jsonify({"error": str(e)}), 404
    return jsonify({"vendor": vendor.to_dict(), "message": "Vendor deleted successfully"})


@vendors_bp.post("/<int:vendor_id>/restore")
@require_auth
@require_roles(ADMIN)
def restore_vendor_route(vendor_id: int):
    try:
        vendor = vendor_service.restore_vendor(vendor_id, g.actor)
    except VendorNotFoundError as e:
        return jsonify({"error": str(e)}), 404
    except ConflictError as e:
        return jsonify({"error": str(e)}), 409
    return jsonify({"vendor": vendor.to_dict(), "message": "Vendor restored successfully"})


@vendors_bp.delete("/<int:vendor_id>/hard")
@require_auth
@require_roles(SUPER_ADMIN)
def hard_delete_vendor_route(vendor_id: int):
    try:
        vendor_service.hard_delete_vendor(vendor_id)
    except VendorNotFoundError as e:
        return jsonify({"error": str(e)}), 404
    except VendorValidationError as e:
        return jsonify({"error": str(e)}), 409
    return jsonify({"id": vendor_id, "message": "Vendor permanently deleted"})
