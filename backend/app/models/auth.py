from __future__ import annotations

from ..extensions import db
from app.time_utils import to_utc_z
from .envelope import LifecycleMixin, soft_delete_check


class User(LifecycleMixin, db.Model):
    """
    Marketplace account: shopper, vendor, staff or administrator.

    ROLE: a plain string from the rbac role table (SUPER_ADMIN, ADMIN,
    MANAGER, VENDOR, USER). Unknown strings are treated as the lowest level.

    vendor_id scopes staff accounts that a VENDOR created for its own
    organization. It is not a foreign key: vendor profiles reference their
    owning user, and the reverse link is informational.
    """
    __tablename__ = "users"
    __table_args__ = (
        soft_delete_check("users"),
        db.Index("ix_users_role", "role"),
        {"sqlite_autoincrement": True},
    )

    id = db.Column(db.Integer, primary_key=True)

    email = db.Column(db.String(255), nullable=False, unique=True, index=True)

    # Bcrypt hashed password
    password_hash = db.Column(db.String(255), nullable=False)

    full_name = db.Column(db.String(255), nullable=True)
    phone = db.Column(db.String(32), nullable=True)
    role = db.Column(db.String(32), nullable=False, default="USER")

    vendor_id = db.Column(db.Integer, nullable=True, index=True)

    is_email_verified = db.Column(db.Boolean, nullable=False, default=False)
    last_login_at = db.Column(db.DateTime(timezone=True), nullable=True)

    def __repr__(self) -> str:
        return f"<User id={self.id} email={self.email!r} role={self.role}>"

    def to_dict(self) -> dict:
        data = {
            "id": self.id,
            "email": self.email,
            "full_name": self.full_name,
            "phone": self.phone,
            "role": self.role,
            "vendor_id": self.vendor_id,
            "is_email_verified": self.is_email_verified,
            "last_login_at": to_utc_z(self.last_login_at),
        }
        data.update(self.lifecycle_dict())
        return data


class SessionToken(db.Model):
    """
    Opaque bearer session.

    SECURITY NOTES:
    - Tokens stored hashed in database (SHA-256)
    - 24-hour absolute timeout
    - 2-hour idle timeout
    - Revocable on logout, soft delete or deactivation of the user
    """
    __tablename__ = "session_tokens"
    __table_args__ = (
        db.Index("ix_session_tokens_user_active", "user_id", "is_revoked"),
        {"sqlite_autoincrement": True},
    )

    id = db.Column(db.Integer, primary_key=True)
    user_id = db.Column(db.Integer, db.ForeignKey("users.id"), nullable=False, index=True)

    # Token hash (never store plaintext tokens!)
    token_hash = db.Column(db.String(255), nullable=False, unique=True, index=True)

    created_at = db.Column(db.DateTime(timezone=True), nullable=False, server_default=db.func.now())
    last_used_at = db.Column(db.DateTime(timezone=True), nullable=False, server_default=db.func.now())
    expires_at = db.Column(db.DateTime(timezone=True), nullable=False, index=True)

    is_revoked = db.Column(db.Boolean, nullable=False, default=False, index=True)
    revoked_at = db.Column(db.DateTime(timezone=True), nullable=True)
    revoked_reason = db.Column(db.String(255), nullable=True)

    user_agent = db.Column(db.String(512), nullable=True)
    ip_address = db.Column(db.String(45), nullable=True)  # IPv6 max length

    user = db.relationship("User", backref=db.backref("session_tokens", lazy=True))

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "user_id": self.user_id,
            "created_at": to_utc_z(self.created_at),
            "last_used_at": to_utc_z(self.last_used_at),
            "expires_at": to_utc_z(self.expires_at),
            "is_revoked": self.is_revoked,
            "revoked_at": to_utc_z(self.revoked_at),
            "revoked_reason": self.revoked_reason,
        }
