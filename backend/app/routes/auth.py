# Overview: Flask API routes for auth operations; parses input and returns JSON responses.

# backend/app/routes/auth.py
"""
Authentication API routes

- Self-registration always creates a USER account; privileged accounts are
  created through /api/role-management/users or the CLI.
- Opaque bearer tokens, see session_service.
- Login attempts are written to security_events.
"""

from flask import Blueprint, request, jsonify, current_app

from ..rbac import get_role_definition
from ..services import auth_service
from ..services import session_service
from ..services.auth_service import PasswordValidationError, UserAlreadyExistsError
from ..services.security_service import log_security_event
from ..validation import ValidationError


auth_bp = Blueprint("auth", __name__, url_prefix="/api/auth")


def _bearer_token() -> str | None:
    auth_header = request.headers.get("Authorization")
    if not auth_header or not auth_header.startswith("Bearer "):
        return None
    return auth_header.split(" ", 1)[1]


@auth_bp.post("/register")
def register_route():
    """
    Self-registration. Any "role" field in the body is ignored.
    """
    data = request.get_json(silent=True) or {}
    email = data.get("email")
    password = data.get("password")

    if not all([email, password]):
        return jsonify({"error": "email and password required"}), 400

    try:
        user = auth_service.register_user(
            email=email,
            password=password,
            full_name=data.get("full_name"),
            phone=data.get("phone"),
        )
    except (PasswordValidationError, ValidationError) as e:
        return jsonify({"error": str(e)}), 400
    except UserAlreadyExistsError as e:
        return jsonify({"error": str(e)}), 409
    except Exception:
        current_app.logger.exception("Failed to register user")
        return jsonify({"error": "Internal server error"}), 500

    return jsonify({"user": user.to_dict(), "message": "Registration successful"}), 201


@auth_bp.post("/login")
def login_route():
    """
    Authenticate user and create session token.

    Token must be included in Authorization header for protected routes.
    """
    try:
        data = request.get_json(silent=True) or {}
        email = data.get("email")
        password = data.get("password")

        if not all([email, password]):
            return jsonify({"error": "email and password required"}), 400

        user_agent = request.headers.get("User-Agent")
        ip_address = request.remote_addr

        user = auth_service.authenticate(email, password)

        if not user:
            log_security_event(
                user_id=None,
                event_type="LOGIN_FAILED",
                success=False,
                resource=request.path,
                action=str(email)[:64],
                reason="Invalid credentials",
                ip_address=ip_address,
                user_agent=user_agent,
            )
            return jsonify({"error": "Invalid credentials"}), 401

        log_security_event(
            user_id=user.id,
            role=user.role,
            event_type="LOGIN_SUCCESS",
            success=True,
            resource=request.path,
            action="LOGIN",
            ip_address=ip_address,
            user_agent=user_agent,
        )

        session, token = session_service.create_session(
            user_id=user.id,
            user_agent=user_agent,
            ip_address=ip_address
        )

        return jsonify({
            "user": user.to_dict(),
            "role": get_role_definition(user.role),
            "token": token,
            "session": session.to_dict(),
            "message": "Login successful"
        }), 200

    except Exception:
        current_app.logger.exception("Failed to login user")
        return jsonify({"error": "Internal server error"}), 500


@auth_bp.post("/logout")
def logout_route():
    """Revoke session token (logout). Expects Authorization header: Bearer <token>"""
    try:
        token = _bearer_token()
        if not token:
            return jsonify({"error": "Authorization header required"}), 401

        if not session_service.revoke_session(token, reason="User logout"):
            return jsonify({"error": "Invalid or expired token"}), 401

        return jsonify({"message": "Logout successful"}), 200

    except Exception:
        current_app.logger.exception("Failed to logout user")
        return jsonify({"error": "Internal server error"}), 500


@auth_bp.post("/validate")
def validate_route():
    """
    Validate session token and return the user with its role definition
    (level, scope, creatable roles) for client-side UI filtering.
    """
    try:
        token = _bearer_token()
        if not token:
            return jsonify({"error": "Authorization header required"}), 401

        context = session_service.validate_session(token)

        if not context:
            return jsonify({"error": "Invalid or expired token"}), 401

        return jsonify({
            "user": context.user.to_dict(),
            "role": get_role_definition(context.user.role),
            "message": "Token valid"
        }), 200

    except Exception:
        current_app.logger.exception("Failed to validate session")
        return jsonify({"error": "Internal server error"}), 500
