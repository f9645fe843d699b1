"""
Repository tests: every write path applies the soft-delete policy.

Verifies:
1. create / update / update_many / upsert persist consistent flags
2. soft delete and restore round trip with attribution
3. Hard delete removes the row without touching the policy
4. Models outside enforcement pass through unchanged
5. The CHECK constraint rejects inconsistent raw SQL
"""

import pytest
from sqlalchemy import text
from sqlalchemy.exc import IntegrityError

from app.extensions import db
from app.models import Category, Product, SecurityEvent
from app.services import repository
from app.services.soft_delete_service import Actor


ACTOR = Actor(id="9", role="ADMIN", display_name="Ada Admin")


class TestCreateAndUpdate:

    def test_create_stamps_created_by(self, db_session):
        category = repository.create_record(
            Category, {"name": "Pearls", "slug": "pearls", "is_deleted": False}, ACTOR
        )
        db.session.commit()

        assert category.id is not None
        assert category.created_by == "Ada Admin"
        assert category.is_active is True
        assert category.is_deleted is False

    def test_create_with_is_active_false_marks_deleted(self, db_session):
        category = repository.create_record(
            Category, {"name": "Hidden", "slug": "hidden", "is_active": False}, ACTOR
        )
        db.session.commit()
        assert category.is_deleted is True

    def test_update_stamps_updated_by(self, category):
        repository.update_record(category, {"description": "Bands and solitaires"}, ACTOR)
        db.session.commit()
        assert category.updated_by == "Ada Admin"
        assert category.description == "Bands and solitaires"

    def test_update_unknown_attribute_rejected(self, category):
        with pytest.raises(AttributeError):
            repository.update_record(category, {"colour": "gold"}, ACTOR)

    def test_update_many_applies_policy(self, product, vendor_profile):
        second = repository.create_record(
            Product,
            {"vendor_id": vendor_profile.id, "name": "Rose Ring", "sku": "RR-001", "price_cents": 900},
            ACTOR,
        )
        db.session.commit()

        count = repository.update_many(
            Product, {"vendor_id": vendor_profile.id}, {"is_deleted": True}, ACTOR
        )
        db.session.commit()

        assert count == 2
        for row in (product, second):
            db.session.refresh(row)
            assert row.is_deleted is True
            assert row.is_active is False
            assert row.deleted_by == "9"
            assert row.updated_by == "Ada Admin"
            assert row.deleted_at is not None


class TestUpsert:

    def test_upsert_creates_then_updates(self, db_session):
        created = repository.upsert_record(
            Category,
            {"slug": "opals"},
            create={"name": "Opals", "is_deleted": False},
            update={"name": "Opals and Moonstones"},
            actor=ACTOR,
        )
        db.session.commit()
        assert created.name == "Opals"
        assert created.is_active is True
        assert created.updated_by == "Ada Admin"

        updated = repository.upsert_record(
            Category,
            {"slug": "opals"},
            create={"name": "Opals", "is_deleted": False},
            update={"name": "Opals and Moonstones", "is_deleted": True},
            actor=ACTOR,
        )
        db.session.commit()
        assert updated.id == created.id
        assert updated.name == "Opals and Moonstones"
        assert updated.is_active is False
        assert updated.deleted_by == "9"


class TestSoftDeleteLifecycle:

    def test_soft_delete_then_restore(self, product):
        repository.soft_delete_record(product, ACTOR)
        db.session.commit()

        assert product.is_deleted is True
        assert product.is_active is False
        assert product.deleted_by == "9"
        assert product.deleted_at is not None
        assert repository.live_query(Product).count() == 0
        assert repository.live_query(Product, include_deleted=True).count() == 1

        repository.restore_record(product, ACTOR)
        db.session.commit()

        assert product.is_deleted is False
        assert product.is_active is True
        assert product.deleted_at is None
        assert product.deleted_by is None
        assert repository.live_query(Product).count() == 1

    def test_hard_delete_removes_row(self, product):
        product_id = product.id
        repository.hard_delete_record(product)
        db.session.commit()
        assert db.session.get(Product, product_id) is None


class TestPassThrough:

    def test_unenforced_model_not_attributed(self, db_session):
        event = repository.create_record(
            SecurityEvent, {"event_type": "LOGIN_SUCCESS", "success": True}, ACTOR
        )
        db.session.commit()
        assert event.id is not None
        assert not hasattr(event, "created_by")


class TestDatabaseConstraint:

    def test_raw_inconsistent_update_rejected(self, category):
        with pytest.raises(IntegrityError):
            db.session.execute(
                text("UPDATE categories SET is_active = 1, is_deleted = 1 WHERE id = :id"),
                {"id": category.id},
            )
            db.session.flush()
        db.session.rollback()

    def test_raw_consistent_update_allowed(self, category):
        db.session.execute(
            text("UPDATE categories SET is_active = 0, is_deleted = 1 WHERE id = :id"),
            {"id": category.id},
        )
        db.session.commit()
        db.session.refresh(category)
        assert category.is_deleted is True


class TestPaginate:

    def test_plain_listing(self, category):
        result = repository.paginate(db.session.query(Category))
        assert result["count"] == 1
        assert "pagination" not in result

    def test_paginated_listing(self, db_session):
        for n in range(5):
            repository.create_record(Category, {"name": f"C{n}", "slug": f"c{n}", "is_deleted": False})
        db.session.commit()

        result = repository.paginate(db.session.query(Category).order_by(Category.id), page=2, per_page=2)
        assert result["count"] == 2
        assert result["pagination"]["total"] == 5
        assert result["pagination"]["total_pages"] == 3
        assert result["pagination"]["has_next"] is True
        assert result["pagination"]["has_prev"] is True
