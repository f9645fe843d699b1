from __future__ import annotations

from ..extensions import db
from .envelope import LifecycleMixin, soft_delete_check


class VendorProfile(LifecycleMixin, db.Model):
    """
    Jewelry vendor organization.

    OWNERSHIP: user_id is the owning VENDOR account. A user holds at most one
    live (not soft-deleted) profile; the rule is enforced in vendor_service
    because soft-deleted rows keep their user_id.
    """
    __tablename__ = "vendor_profiles"
    __table_args__ = (
        soft_delete_check("vendor_profiles"),
        {"sqlite_autoincrement": True},
    )

    id = db.Column(db.Integer, primary_key=True)
    user_id = db.Column(db.Integer, db.ForeignKey("users.id"), nullable=False, index=True)

    business_name = db.Column(db.String(255), nullable=False)
    slug = db.Column(db.String(255), nullable=False, unique=True, index=True)
    description = db.Column(db.Text, nullable=True)
    contact_email = db.Column(db.String(255), nullable=True)
    contact_phone = db.Column(db.String(32), nullable=True)

    # PENDING -> APPROVED | REJECTED
    verification_status = db.Column(db.String(16), nullable=False, default="PENDING")

    owner = db.relationship("User", backref=db.backref("vendor_profiles", lazy=True))

    def __repr__(self) -> str:
        return f"<VendorProfile id={self.id} slug={self.slug!r}>"

    def to_dict(self) -> dict:
        data = {
            "id": self.id,
            "user_id": self.user_id,
            "business_name": self.business_name,
            "slug": self.slug,
            "description": self.description,
            "contact_email": self.contact_email,
            "contact_phone": self.contact_phone,
            "verification_status": self.verification_status,
        }
        data.update(self.lifecycle_dict())
        return data


class Store(LifecycleMixin, db.Model):
    """Storefront belonging to a vendor. Store names are unique per vendor."""
    __tablename__ = "stores"
    __table_args__ = (
        soft_delete_check("stores"),
        db.UniqueConstraint("vendor_id", "name", name="uq_stores_vendor_name"),
        {"sqlite_autoincrement": True},
    )

    id = db.Column(db.Integer, primary_key=True)
    vendor_id = db.Column(db.Integer, db.ForeignKey("vendor_profiles.id"), nullable=False, index=True)
    name = db.Column(db.String(128), nullable=False)
    description = db.Column(db.Text, nullable=True)

    vendor = db.relationship("VendorProfile", backref=db.backref("stores", lazy=True))

    def to_dict(self) -> dict:
        data = {
            "id": self.id,
            "vendor_id": self.vendor_id,
            "name": self.name,
            "description": self.description,
        }
        data.update(self.lifecycle_dict())
        return data
