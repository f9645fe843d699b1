# backend/app/__init__.py
from flask import Flask, jsonify
from sqlalchemy.exc import IntegrityError

from .config import Config
from .extensions import db, migrate

# SQLSTATE codes (PostgreSQL) and message prefixes (SQLite) per violation kind
_INTEGRITY_KINDS = (
    ("23505", "UNIQUE", "Resource already exists"),
    ("23514", "CHECK", "Record violates a check constraint"),
    ("23503", "FOREIGN KEY", "Referenced resource does not exist or is still in use"),
    ("23502", "NOT NULL", "A required field is missing"),
)


def integrity_error_message(error: IntegrityError) -> str:
    """Client-facing message for a database constraint violation."""
    orig = error.orig
    code = getattr(orig, "pgcode", None)
    text = str(orig).upper()
    for sqlstate, marker, message in _INTEGRITY_KINDS:
        if code == sqlstate or f"{marker} CONSTRAINT FAILED" in text:
            return message
    return "Request conflicts with existing data"


def create_app(config_overrides: dict | None = None) -> Flask:
    app = Flask(__name__, instance_relative_config=True)
    app.config.from_object(Config)
    if config_overrides:
        app.config.update(config_overrides)

    app.logger.setLevel(app.config.get("LOG_LEVEL", "INFO"))

    # Initialize extensions
    db.init_app(app)
    migrate.init_app(app, db)

    # Import models so Alembic can discover metadata reliably
    from . import models  # noqa: F401

    # Register blueprints
    from .routes.system import system_bp
    from .routes.auth import auth_bp
    from .routes.role_management import role_management_bp
    from .routes.users import users_bp
    from .routes.vendors import vendors_bp
    from .routes.stores import stores_bp
    from .routes.categories import categories_bp
    from .routes.products import products_bp
    from .routes.audit import audit_bp

    app.register_blueprint(system_bp)
    app.register_blueprint(auth_bp)
    app.register_blueprint(role_management_bp)
    app.register_blueprint(users_bp)
    app.register_blueprint(vendors_bp)
    app.register_blueprint(stores_bp)
    app.register_blueprint(categories_bp)
    app.register_blueprint(products_bp)
    app.register_blueprint(audit_bp)

    @app.errorhandler(IntegrityError)
    def handle_integrity_error(error):
        # Constraint violations that slipped past service-level checks
        db.session.rollback()
        app.logger.warning("Integrity error: %s", error.orig)
        return jsonify({"error": integrity_error_message(error)}), 409

    from .decorators import reset_request_identity
    from .services.audit_service import audit_response
    app.before_request(reset_request_identity)
    app.after_request(audit_response)

    if app.config.get("SOFT_DELETE_BOOTSTRAP_ON_STARTUP"):
        from .services.soft_delete_service import bootstrap_soft_delete_consistency
        with app.app_context():
            # Raises SoftDeleteBootstrapError only in fail-closed mode
            bootstrap_soft_delete_consistency(
                db.engine,
                fail_closed=app.config.get("SOFT_DELETE_BOOTSTRAP_FAIL_CLOSED", False),
                logger=app.logger,
            )

    # Register CLI commands
    from .cli import register_commands
    register_commands(app)

    return app
