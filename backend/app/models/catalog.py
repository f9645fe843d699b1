from __future__ import annotations

from ..extensions import db
from .envelope import LifecycleMixin, soft_delete_check


class Category(LifecycleMixin, db.Model):
    """Product category tree (rings, necklaces, ...). Managed by GLOBAL roles only."""
    __tablename__ = "categories"
    __table_args__ = (
        soft_delete_check("categories"),
        {"sqlite_autoincrement": True},
    )

    id = db.Column(db.Integer, primary_key=True)
    name = db.Column(db.String(128), nullable=False)
    slug = db.Column(db.String(128), nullable=False, unique=True, index=True)
    description = db.Column(db.Text, nullable=True)
    parent_id = db.Column(db.Integer, db.ForeignKey("categories.id"), nullable=True, index=True)

    parent = db.relationship("Category", remote_side=[id], backref=db.backref("children", lazy=True))

    def to_dict(self) -> dict:
        data = {
            "id": self.id,
            "name": self.name,
            "slug": self.slug,
            "description": self.description,
            "parent_id": self.parent_id,
        }
        data.update(self.lifecycle_dict())
        return data


class Product(LifecycleMixin, db.Model):
    """
    Catalog item listed by a vendor.

    OWNERSHIP: vendor_id -> VendorProfile.user_id is the ownership chain used
    by ownership_service for VENDOR actors.
    """
    __tablename__ = "products"
    __table_args__ = (
        soft_delete_check("products"),
        db.Index("ix_products_vendor_category", "vendor_id", "category_id"),
        {"sqlite_autoincrement": True},
    )

    id = db.Column(db.Integer, primary_key=True)
    vendor_id = db.Column(db.Integer, db.ForeignKey("vendor_profiles.id"), nullable=False, index=True)
    store_id = db.Column(db.Integer, db.ForeignKey("stores.id"), nullable=True, index=True)
    category_id = db.Column(db.Integer, db.ForeignKey("categories.id"), nullable=True, index=True)

    name = db.Column(db.String(255), nullable=False)
    sku = db.Column(db.String(64), nullable=False, unique=True, index=True)
    description = db.Column(db.Text, nullable=True)

    # Stored in cents to avoid float rounding
    price_cents = db.Column(db.Integer, nullable=False, default=0)

    vendor = db.relationship("VendorProfile", backref=db.backref("products", lazy=True))
    store = db.relationship("Store", backref=db.backref("products", lazy=True))
    category = db.relationship("Category", backref=db.backref("products", lazy=True))

    def __repr__(self) -> str:
        return f"<Product id={self.id} sku={self.sku!r}>"

    def to_dict(self) -> dict:
        data = {
            "id": self.id,
            "vendor_id": self.vendor_id,
            "store_id": self.store_id,
            "category_id": self.category_id,
            "name": self.name,
            "sku": self.sku,
            "description": self.description,
            "price_cents": self.price_cents,
        }
        data.update(self.lifecycle_dict())
        return data
