from __future__ import annotations

from ..extensions import db
from app.time_utils import to_utc_z


SOFT_DELETE_CHECK_SQL = "is_active = NOT COALESCE(is_deleted, false)"


def soft_delete_check_name(tablename: str) -> str:
    return f"{tablename}_isactive_not_isdeleted_ck"


def soft_delete_check(tablename: str):
    """Named CHECK constraint tying is_active to NOT is_deleted for a table."""
    return db.CheckConstraint(SOFT_DELETE_CHECK_SQL, name=soft_delete_check_name(tablename))


class LifecycleMixin:
    """
    Shared audit/lifecycle envelope.

    INVARIANT: is_active == NOT is_deleted. Writes go through
    services.repository, which applies the soft-delete policy; the CHECK
    constraint from soft_delete_check() backs it at the database level.

    created_by / updated_by / deleted_by hold actor identities as strings
    (a raw id or a display name), never foreign keys, so attribution
    survives hard deletes of the acting user.
    """
    is_active = db.Column(db.Boolean, nullable=False, default=True, index=True)
    is_deleted = db.Column(db.Boolean, nullable=False, default=False, index=True)

    created_by = db.Column(db.String(255), nullable=True)
    updated_by = db.Column(db.String(255), nullable=True)
    deleted_by = db.Column(db.String(255), nullable=True)
    deleted_at = db.Column(db.DateTime(timezone=True), nullable=True)

    created_at = db.Column(db.DateTime(timezone=True), nullable=False, server_default=db.func.now())
    updated_at = db.Column(
        db.DateTime(timezone=True),
        nullable=False,
        server_default=db.func.now(),
        onupdate=db.func.now(),
    )

    def lifecycle_dict(self) -> dict:
        return {
            "is_active": self.is_active,
            "is_deleted": self.is_deleted,
            "created_by": self.created_by,
            "updated_by": self.updated_by,
            "deleted_by": self.deleted_by,
            "deleted_at": to_utc_z(self.deleted_at),
            "created_at": to_utc_z(self.created_at),
            "updated_at": to_utc_z(self.updated_at),
        }
