# backend/app/routes/system.py
"""
System health and version endpoints.

/health reports database connectivity, session table access and whether
every opted-in table carries the is_active/is_deleted CHECK constraint.
"""

import sys
import time
from flask import Blueprint, current_app
from sqlalchemy import inspect

from ..extensions import db
from ..models import User, SessionToken, soft_delete_check_name
from ..services.soft_delete_service import enforced_table_names
from app.time_utils import utcnow

system_bp = Blueprint("system", __name__)

API_VERSION = "1.0.0"


def _elapsed_ms(start_time: float) -> float:
    return round((time.time() - start_time) * 1000, 2)


def check_database_health() -> dict:
    start_time = time.time()
    try:
        user_count = db.session.query(User).count()
        active_sessions = db.session.query(SessionToken).filter_by(is_revoked=False).count()
        return {
            "status": "healthy",
            "latency_ms": _elapsed_ms(start_time),
            "details": {
                "users": user_count,
                "active_sessions": active_sessions,
            }
        }
    except Exception:
        current_app.logger.exception("Database health check failed")
        return {
            "status": "unhealthy",
            "latency_ms": _elapsed_ms(start_time),
            "error": "Database error"
        }


def check_soft_delete_constraints() -> dict:
    """
    Degraded when an opted-in table lacks its CHECK constraint (the startup
    bootstrap failed open, or the table was created outside the models).
    """
    start_time = time.time()
    try:
        inspector = inspect(db.engine)
        missing = []
        for table_name in enforced_table_names():
            if not inspector.has_table(table_name):
                continue
            names = {ck.get("name") for ck in inspector.get_check_constraints(table_name)}
            if soft_delete_check_name(table_name) not in names:
                missing.append(table_name)
    except Exception:
        current_app.logger.exception("Soft-delete constraint check failed")
        return {
            "status": "unhealthy",
            "latency_ms": _elapsed_ms(start_time),
            "error": "Constraint inspection error"
        }

    if missing:
        return {
            "status": "degraded",
            "latency_ms": _elapsed_ms(start_time),
            "warning": f"Missing soft-delete constraint on: {', '.join(missing)}",
        }
    return {"status": "healthy", "latency_ms": _elapsed_ms(start_time)}


@system_bp.get("/health")
def health():
    """
    Returns:
    - 200: healthy or degraded
    - 503: one or more checks unhealthy
    """
    start_time = time.time()

    checks = {
        "database": check_database_health(),
        "soft_delete_constraints": check_soft_delete_constraints(),
    }
    statuses = [check["status"] for check in checks.values()]

    if "unhealthy" in statuses:
        overall_status, http_status = "unhealthy", 503
    elif "degraded" in statuses:
        overall_status, http_status = "degraded", 200
    else:
        overall_status, http_status = "healthy", 200

    return {
        "status": overall_status,
        "timestamp": utcnow().isoformat() + "Z",
        "total_latency_ms": _elapsed_ms(start_time),
        "checks": checks,
    }, http_status


@system_bp.get("/version")
def version():
    """Non-sensitive deployment information. Never exposes secrets or paths."""
    env = "production" if not current_app.debug else "development"

    return {
        "api_version": API_VERSION,
        "environment": env,
        "python_version": sys.version.split()[0],
        "server_time": utcnow().isoformat() + "Z",
    }
