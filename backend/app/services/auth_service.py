# Overview: Service-layer operations for authentication and account creation.

"""
Authentication Service

WHY: Every write must be attributable to an account. Uses bcrypt for password
hashing and validates password strength.

SECURITY NOTES:
- Passwords hashed with bcrypt (cost factor from BCRYPT_ROUNDS, default 12)
- Minimum 8 characters, upper, lower, digit and special character
- Session tokens managed separately (see session_service.py)
- Soft-deleted or deactivated accounts cannot authenticate
"""

import re

import bcrypt
from flask import current_app, has_app_context

from ..extensions import db
from ..models import User
from ..rbac import DEFAULT_ROLE, is_valid_role
from ..validation import ValidationError, validate_email
from . import repository
from .soft_delete_service import Actor
from app.time_utils import utcnow


class PasswordValidationError(Exception):
    """Raised when password doesn't meet strength requirements."""
    pass


class UserAlreadyExistsError(Exception):
    """Raised when an account with the same email already exists."""
    pass


class InvalidRoleError(Exception):
    """Raised when a role string is not in the role table."""
    pass


def validate_password_strength(password: str) -> None:
    """
    Validate password meets strength requirements.

    Raises PasswordValidationError if requirements not met.
    """
    if password is not None and not isinstance(password, str):
        raise PasswordValidationError("Password must be a string")

    if not password or len(password) < 8:
        raise PasswordValidationError("Password must be at least 8 characters long")

    if not re.search(r'[A-Z]', password):
        raise PasswordValidationError("Password must contain at least one uppercase letter")

    if not re.search(r'[a-z]', password):
        raise PasswordValidationError("Password must contain at least one lowercase letter")

    if not re.search(r'\d', password):
        raise PasswordValidationError("Password must contain at least one digit")

    if not re.search(r"[!@#$%^&*(),.'\":{}|<>]", password):
        raise PasswordValidationError("Password must contain at least one special character")


def _bcrypt_rounds() -> int:
    if has_app_context():
        return int(current_app.config.get("BCRYPT_ROUNDS", 12))
    return 12


def hash_password(password: str) -> str:
    """Hash password using bcrypt. Password is validated for strength before hashing."""
    validate_password_strength(password)
    salt = bcrypt.gensalt(rounds=_bcrypt_rounds())
    return bcrypt.hashpw(password.encode('utf-8'), salt).decode('utf-8')


def verify_password(password: str, password_hash: str) -> bool:
    """
    Verify password against bcrypt hash.

    WHY timing-safe: bcrypt.checkpw() prevents timing attacks automatically.
    A malformed stored hash is treated as a mismatch.
    """
    try:
        return bcrypt.checkpw(password.encode('utf-8'), password_hash.encode('utf-8'))
    except ValueError:
        return False


def create_user(
    *,
    email: str,
    password: str,
    full_name: str | None = None,
    phone: str | None = None,
    role: str = DEFAULT_ROLE,
    vendor_id: int | None = None,
    actor: Actor | None = None,
    created_by: str | None = None,
) -> User:
    """
    Create a user through the repository so the lifecycle envelope is applied.

    created_by overrides the actor's display name when given (delegated
    creation records the creator's id so ownership checks can follow it).

    Does NOT commit: callers own the transaction.

    Raises:
        UserAlreadyExistsError: email already registered (live or soft-deleted)
        PasswordValidationError: password too weak
        InvalidRoleError: role not in the role table
    """
    email = validate_email(email)
    for field, value in (("full_name", full_name), ("phone", phone)):
        if value is not None and not isinstance(value, str):
            raise ValidationError(f"{field} must be a string")

    if not is_valid_role(role):
        raise InvalidRoleError(f"Invalid role: {role}")

    existing = db.session.query(User).filter(User.email == email).first()
    if existing:
        raise UserAlreadyExistsError("User with this email already exists")

    payload = {
        "email": email,
        "password_hash": hash_password(password),
        "full_name": (full_name or "").strip() or None,
        "phone": phone,
        "role": role,
        "vendor_id": vendor_id,
        "is_deleted": False,
    }
    if created_by is not None:
        payload["created_by"] = created_by

    return repository.create_record(User, payload, actor)


def register_user(*, email: str, password: str, full_name: str | None = None, phone: str | None = None) -> User:
    """Self-registration. Always creates a USER, whatever the client asked for."""
    user = create_user(
        email=email,
        password=password,
        full_name=full_name,
        phone=phone,
        role=DEFAULT_ROLE,
    )
    db.session.commit()
    return user


def authenticate(email: str, password: str) -> User | None:
    """
    Authenticate a live user by email and password.

    Returns User if credentials valid, None otherwise.
    Updates last_login_at timestamp on successful authentication.
    """
    if not isinstance(email, str) or not isinstance(password, str):
        return None

    user = db.session.query(User).filter(
        User.email == (email or "").strip().lower(),
        User.is_active.is_(True),
        User.is_deleted.is_(False),
    ).first()

    if not user:
        return None

    if verify_password(password or "", user.password_hash):
        user.last_login_at = utcnow()
        db.session.commit()
        return user

    return None
