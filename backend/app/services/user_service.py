# Overview: Service-layer operations for user accounts; soft delete, restore and hard delete.

from __future__ import annotations

from ..extensions import db
from ..models import SessionToken, User, VendorProfile
from . import repository
from .session_service import revoke_all_user_sessions
from .soft_delete_service import Actor


class UserNotFoundError(Exception):
    """Raised when a user is not found."""
    pass


class UserValidationError(Exception):
    """Raised when a user operation is not allowed in the current state."""
    pass


def get_user(user_id: int, include_deleted: bool = False) -> User:
    user = db.session.get(User, user_id)
    if user is None or (user.is_deleted and not include_deleted):
        raise UserNotFoundError("User not found")
    return user


def list_users(
    *,
    role: str | None = None,
    include_deleted: bool = False,
    page: int | None = None,
    per_page: int | None = None,
) -> dict:
    query = repository.live_query(User, include_deleted)
    if role:
        query = query.filter(User.role == role.upper())
    return repository.paginate(query.order_by(User.id.asc()), page, per_page)


def update_user(user_id: int, patch: dict, actor: Actor | None) -> User:
    user = get_user(user_id)
    repository.update_record(user, patch, actor)
    db.session.commit()
    return user


def soft_delete_user(user_id: int, actor: Actor | None) -> User:
    """
    Mark the user deleted and revoke every session it holds.

    is_active follows is_deleted through the write policy.
    """
    user = get_user(user_id)
    repository.soft_delete_record(user, actor)
    revoke_all_user_sessions(user.id, reason="User soft deleted", commit=False)
    db.session.commit()
    return user


def restore_user(user_id: int, actor: Actor | None) -> User:
    user = db.session.get(User, user_id)
    if user is None or not user.is_deleted:
        raise UserNotFoundError("Deleted user not found")
    repository.restore_record(user, actor)
    db.session.commit()
    return user


def toggle_user_status(user_id: int, actor: Actor | None) -> User:
    """
    Flip the account between live and deleted.

    Written as is_deleted so the deletion stamps are set on deactivation and
    cleared on reactivation. The write policy derives is_active from it.
    """
    user = db.session.get(User, user_id)
    if user is None:
        raise UserNotFoundError("User not found")

    repository.update_record(user, {"is_deleted": user.is_active}, actor)
    if not user.is_active:
        revoke_all_user_sessions(user.id, reason="User deactivated", commit=False)
    db.session.commit()
    return user


def hard_delete_user(user_id: int) -> None:
    """
    Physically remove the user and its sessions.

    Refused while the user still owns vendor profiles; those must be hard
    deleted first.
    """
    user = db.session.get(User, user_id)
    if user is None:
        raise UserNotFoundError("User not found")

    owns_vendor = db.session.query(VendorProfile.id).filter(VendorProfile.user_id == user.id).first()
    if owns_vendor:
        raise UserValidationError("User still owns vendor profiles")

    db.session.query(SessionToken).filter(SessionToken.user_id == user.id).delete(synchronize_session=False)
    repository.hard_delete_record(user)
    db.session.commit()
