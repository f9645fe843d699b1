from __future__ import annotations

from ..extensions import db
from .envelope import LifecycleMixin, soft_delete_check


class AuditLog(LifecycleMixin, db.Model):
    """
    Business audit trail written after successful mutating requests.

    Entries are created best-effort by audit_service.log; a failed write
    never fails the request that triggered it.
    """
    __tablename__ = "audit_logs"
    __table_args__ = (
        soft_delete_check("audit_logs"),
        db.Index("ix_audit_logs_entity", "entity", "entity_id"),
        {"sqlite_autoincrement": True},
    )

    id = db.Column(db.Integer, primary_key=True)
    entity = db.Column(db.String(64), nullable=False)
    entity_id = db.Column(db.String(64), nullable=True)
    action = db.Column(db.String(32), nullable=False)  # CREATE / UPDATE / DELETE
    user_id = db.Column(db.String(64), nullable=True, index=True)
    meta = db.Column(db.JSON, nullable=True)
    ip_address = db.Column(db.String(45), nullable=True)
    user_agent = db.Column(db.String(512), nullable=True)

    def to_dict(self) -> dict:
        data = {
            "id": self.id,
            "entity": self.entity,
            "entity_id": self.entity_id,
            "action": self.action,
            "user_id": self.user_id,
            "metadata": self.meta,
            "ip_address": self.ip_address,
            "user_agent": self.user_agent,
        }
        data.update(self.lifecycle_dict())
        return data
