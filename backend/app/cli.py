# Overview: Flask CLI command groups for bootstrap, inspection, and maintenance.

# backend/app/cli.py
# Commands Legend (run from the backend directory):
# Prereqs:
# - Activate your virtualenv.
# - Set FLASK_APP to wsgi.py (PowerShell: $env:FLASK_APP="wsgi.py").
# - Use: python -m flask <group> <command> [options]
#
# System bootstrap/repair:
# - python -m flask system init [--email superadmin@jewels.local]
#   Create tables (if missing) and the first SUPER_ADMIN account. Idempotent.
# - python -m flask system reset-db --yes
#   DEV/TEST only: drop and recreate all tables (deletes all data).
# - python -m flask system enforce-soft-delete [--fail-closed]
#   Normalize is_active/is_deleted and install the CHECK constraints now.
#
# Role inspection:
# - python -m flask roles list
#   Print the role table (level, scope, creatable roles).
#
# User inspection/bootstrap:
# - python -m flask users list [--role VENDOR] [--include-deleted]
#   List users with role and lifecycle flags.
# - python -m flask users create --email a@b.c --password "Password123!" --role ADMIN
#   Create a user directly (no creation-rule check; operator tool).

import click
from flask import current_app
from flask.cli import with_appcontext

from .extensions import db
from .models import User
from .rbac import ROLE_DEFINITIONS, SUPER_ADMIN, all_roles, creatable_roles, role_level, role_scope
from .services.auth_service import (
    InvalidRoleError,
    PasswordValidationError,
    UserAlreadyExistsError,
    create_user,
)
from .services.soft_delete_service import SoftDeleteBootstrapError, bootstrap_soft_delete_consistency
from .validation import ValidationError


@click.group('system')
def system_group():
    """System bootstrap and repair commands."""


@system_group.command('init')
@click.option('--email', default='superadmin@jewels.local', help='Super admin email')
@click.option('--password', default='Password123!', help='Super admin password')
@click.option('--full-name', default='Super Admin', help='Super admin display name')
@with_appcontext
def init_system(email, password, full_name):
    """
    Create missing tables and the first SUPER_ADMIN.

    SECURITY: Change the default password immediately in production!
    """
    click.echo("START Initializing system...")
    db.create_all()
    click.echo("PASS Tables ready")

    existing = db.session.query(User).filter(User.role == SUPER_ADMIN, User.is_deleted.is_(False)).first()
    if existing:
        click.echo(f"PASS Using existing super admin: {existing.email} (ID: {existing.id})")
        return

    try:
        user = create_user(email=email, password=password, full_name=full_name, role=SUPER_ADMIN)
        db.session.commit()
    except (PasswordValidationError, UserAlreadyExistsError, ValidationError) as e:
        db.session.rollback()
        raise click.ClickException(str(e))

    click.echo(f"PASS Created super admin: {user.email} (ID: {user.id})")


@system_group.command('reset-db')
@click.option('--yes', is_flag=True, help='Skip confirmation')
@with_appcontext
def reset_db(yes):
    """
    DANGER: Drop all tables and recreate schema.

    This will DELETE ALL DATA!
    """
    if not yes:
        click.confirm("WARN This will DELETE ALL DATA. Are you sure?", abort=True)

    click.echo("DELETE  Dropping all tables...")
    db.drop_all()

    click.echo("BUILD  Creating all tables...")
    db.create_all()

    click.echo("PASS Database reset complete")


@system_group.command('enforce-soft-delete')
@click.option('--fail-closed', is_flag=True, help='Abort on the first failing table')
@with_appcontext
def enforce_soft_delete(fail_closed):
    """Normalize lifecycle flags and install missing CHECK constraints."""
    try:
        report = bootstrap_soft_delete_consistency(
            db.engine,
            fail_closed=fail_closed,
            logger=current_app.logger,
        )
    except SoftDeleteBootstrapError as e:
        raise click.ClickException(str(e))

    for table_name, fixed in sorted(report.normalized.items()):
        click.echo(f"PASS {table_name}: normalized {fixed} row(s)")
    for table_name in report.installed:
        click.echo(f"PASS {table_name}: constraint installed")
    for table_name in report.existing:
        click.echo(f"PASS {table_name}: constraint present")
    for table_name in report.skipped:
        click.echo(f"SKIP {table_name}: table not found")
    for table_name, error in sorted(report.failed.items()):
        click.echo(f"FAIL {table_name}: {error}")

    if not report.ok:
        click.echo("WARN Some tables failed; the application keeps running (fail open)")


@click.group('roles')
def roles_group():
    """Role table inspection."""


@roles_group.command('list')
def list_roles():
    """Print the role hierarchy."""
    click.echo(f"{'Role':<12} {'Level':<6} {'Scope':<8} {'May create'}")
    click.echo("=" * 60)
    for code in all_roles():
        may_create = ", ".join(r for r in all_roles() if r in creatable_roles(code)) or "-"
        click.echo(f"{code:<12} {role_level(code):<6} {role_scope(code):<8} {may_create}")
    click.echo(f"\n{len(ROLE_DEFINITIONS)} roles")


@click.group('users')
def users_group():
    """User management commands."""


@users_group.command('list')
@click.option('--role', help='Filter by role code')
@click.option('--include-deleted', is_flag=True, help='Include soft-deleted users')
@with_appcontext
def list_users(role, include_deleted):
    """List users with role and lifecycle flags."""
    query = db.session.query(User)
    if role:
        query = query.filter(User.role == role.upper())
    if not include_deleted:
        query = query.filter(User.is_deleted.is_(False))

    users = query.order_by(User.id.asc()).all()
    if not users:
        click.echo("No users found.")
        return

    click.echo("\n" + "=" * 90)
    click.echo(f"{'ID':<5} {'Email':<35} {'Role':<12} {'Active':<8} {'Deleted':<8} {'Created by'}")
    click.echo("=" * 90)
    for user in users:
        click.echo(
            f"{user.id:<5} {user.email:<35} {user.role:<12} "
            f"{'Yes' if user.is_active else 'No':<8} {'Yes' if user.is_deleted else 'No':<8} "
            f"{user.created_by or '-'}"
        )


@users_group.command('create')
@click.option('--email', prompt=True)
@click.option('--password', prompt=True, hide_input=True, confirmation_prompt=True)
@click.option('--full-name', default=None)
@click.option('--role', type=click.Choice(all_roles(), case_sensitive=False), default='USER', show_default=True)
@with_appcontext
def create_user_command(email, password, full_name, role):
    """Create a user directly, bypassing delegated-creation rules."""
    try:
        user = create_user(email=email, password=password, full_name=full_name, role=role.upper())
        db.session.commit()
    except (PasswordValidationError, UserAlreadyExistsError, InvalidRoleError, ValidationError) as e:
        db.session.rollback()
        raise click.ClickException(str(e))

    click.echo(f"PASS Created user {user.email} (ID: {user.id}, role: {user.role})")


def register_commands(app):
    """Register all CLI commands with Flask app."""
    app.cli.add_command(system_group)
    app.cli.add_command(roles_group)
    app.cli.add_command(users_group)
