"""
Soft-delete bootstrap tests.

Verifies:
1. Tables created from the models already carry the constraint (rerun is a no-op)
2. Inconsistent legacy rows are normalized
3. A table that cannot take the constraint fails open by default
4. fail_closed raises, at runtime and during app startup
5. Missing tables are skipped
"""

import logging

import pytest
from sqlalchemy import create_engine, text

from app import create_app
from app.extensions import db
from app.models import soft_delete_check_name
from app.services.soft_delete_service import (
    SoftDeleteBootstrapError,
    bootstrap_soft_delete_consistency,
    enforced_table_names,
)


@pytest.fixture
def legacy_table(db_session):
    """A lifecycle table created outside the models, without the CHECK constraint."""
    db.session.execute(text(
        "CREATE TABLE legacy_items (id INTEGER PRIMARY KEY, is_active BOOLEAN, is_deleted BOOLEAN)"
    ))
    db.session.execute(text(
        "INSERT INTO legacy_items (id, is_active, is_deleted) VALUES "
        "(1, 1, 1), (2, 0, 0), (3, 1, NULL), (4, 0, 1)"
    ))
    db.session.commit()

    yield "legacy_items"

    db.session.rollback()
    db.session.execute(text("DROP TABLE IF EXISTS legacy_items"))
    db.session.commit()


class TestEnforcedTables:

    def test_marketplace_tables_listed(self, app):
        names = enforced_table_names()
        for table_name in ("users", "vendor_profiles", "stores", "categories", "products", "audit_logs"):
            assert table_name in names
        assert "security_events" not in names
        assert "session_tokens" not in names

    def test_constraint_name(self):
        assert soft_delete_check_name("products") == "products_isactive_not_isdeleted_ck"


class TestModelSchema:

    def test_constraints_already_present(self, db_session):
        report = bootstrap_soft_delete_consistency(db.engine)

        assert report.ok
        assert report.installed == []
        assert sorted(report.existing) == enforced_table_names()
        assert all(count == 0 for count in report.normalized.values())

    def test_rerun_is_idempotent(self, db_session):
        first = bootstrap_soft_delete_consistency(db.engine)
        second = bootstrap_soft_delete_consistency(db.engine)
        assert first.to_dict() == second.to_dict()

    def test_missing_table_skipped(self, db_session):
        report = bootstrap_soft_delete_consistency(db.engine, tables=["no_such_table"])
        assert report.skipped == ["no_such_table"]
        assert report.ok


class TestLegacyTable:

    def test_rows_normalized_before_constraint(self, legacy_table):
        bootstrap_soft_delete_consistency(db.engine, tables=[legacy_table])

        rows = db.session.execute(
            text("SELECT id, is_active FROM legacy_items ORDER BY id")
        ).all()
        assert [bool(r.is_active) for r in rows] == [False, True, True, False]

    def test_normalized_count_reported(self, legacy_table):
        report = bootstrap_soft_delete_consistency(db.engine, tables=[legacy_table])
        assert report.normalized[legacy_table] == 2

    def test_install_failure_fails_open(self, legacy_table, caplog):
        # SQLite cannot add a constraint to an existing table
        with caplog.at_level(logging.WARNING):
            report = bootstrap_soft_delete_consistency(db.engine, tables=[legacy_table, "categories"])

        assert not report.ok
        assert legacy_table in report.failed
        assert "categories" in report.existing
        assert "Soft-delete bootstrap failed" in caplog.text

    def test_fail_closed_raises(self, legacy_table):
        with pytest.raises(SoftDeleteBootstrapError):
            bootstrap_soft_delete_consistency(db.engine, tables=[legacy_table], fail_closed=True)

    def test_table_without_lifecycle_columns(self, db_session):
        report = bootstrap_soft_delete_consistency(db.engine, tables=["security_events"])
        assert "security_events" in report.failed


class TestStartup:
    """create_app runs the bootstrap when SOFT_DELETE_BOOTSTRAP_ON_STARTUP is set."""

    @pytest.fixture
    def legacy_database(self, tmp_path):
        url = f"sqlite:///{tmp_path / 'legacy.sqlite3'}"
        engine = create_engine(url)
        with engine.begin() as conn:
            conn.execute(text(
                "CREATE TABLE products (id INTEGER PRIMARY KEY, is_active BOOLEAN NOT NULL, "
                "is_deleted BOOLEAN NOT NULL)"
            ))
            conn.execute(text("INSERT INTO products (id, is_active, is_deleted) VALUES (1, 1, 1)"))
        engine.dispose()
        return url

    def _config(self, url, fail_closed):
        return {
            "TESTING": True,
            "SQLALCHEMY_DATABASE_URI": url,
            "SOFT_DELETE_BOOTSTRAP_ON_STARTUP": True,
            "SOFT_DELETE_BOOTSTRAP_FAIL_CLOSED": fail_closed,
        }

    def test_startup_fails_open(self, app, legacy_database):
        started = create_app(self._config(legacy_database, fail_closed=False))
        assert started is not None

        engine = create_engine(legacy_database)
        with engine.connect() as conn:
            row = conn.execute(text("SELECT is_active FROM products WHERE id = 1")).one()
        engine.dispose()
        assert not row.is_active

    def test_startup_fail_closed_raises(self, app, legacy_database):
        with pytest.raises(SoftDeleteBootstrapError):
            create_app(self._config(legacy_database, fail_closed=True))
