"""CLI command tests (flask system / roles / users)."""

from app.extensions import db
from app.models import User

from conftest import PASSWORD


def test_roles_list(app):
    result = app.test_cli_runner().invoke(args=["roles", "list"])
    assert result.exit_code == 0
    assert "SUPER_ADMIN" in result.output
    assert "ADMIN, MANAGER" in result.output


def test_enforce_soft_delete_reports_existing(app, db_session):
    result = app.test_cli_runner().invoke(args=["system", "enforce-soft-delete"])
    assert result.exit_code == 0
    assert "PASS products: constraint present" in result.output
    assert "FAIL" not in result.output


def test_system_init_creates_super_admin_once(app, db_session):
    runner = app.test_cli_runner()
    first = runner.invoke(args=["system", "init", "--email", "boss@jewels.test", "--password", PASSWORD])
    assert first.exit_code == 0
    assert "Created super admin" in first.output

    second = runner.invoke(args=["system", "init", "--email", "other@jewels.test", "--password", PASSWORD])
    assert "Using existing super admin: boss@jewels.test" in second.output
    assert db.session.query(User).filter_by(role="SUPER_ADMIN").count() == 1


def test_users_create_and_list(app, db_session):
    runner = app.test_cli_runner()
    result = runner.invoke(args=[
        "users", "create", "--email", "ops@jewels.test", "--password", PASSWORD, "--role", "admin",
    ])
    assert result.exit_code == 0
    assert "role: ADMIN" in result.output

    listing = runner.invoke(args=["users", "list", "--role", "ADMIN"])
    assert "ops@jewels.test" in listing.output


def test_users_create_rejects_weak_password(app, db_session):
    result = app.test_cli_runner().invoke(args=[
        "users", "create", "--email", "weak@jewels.test", "--password", "weak",
    ])
    assert result.exit_code != 0
    assert db.session.query(User).filter_by(email="weak@jewels.test").count() == 0
