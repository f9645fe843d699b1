# backend/app/config.py
from __future__ import annotations
import os


def _env_flag(name: str, default: bool) -> bool:
    raw = os.environ.get(name)
    if raw is None:
        return default
    return raw.strip().lower() in {"1", "true", "yes", "on"}


class Config:
    # Optional "SECRET_KEY", with default dev key
    SECRET_KEY = os.environ.get("SECRET_KEY", "dev-secret-key-change-me")

    # SQLite DB stored in backend/instance/jewels.sqlite3
    SQLALCHEMY_DATABASE_URI = os.environ.get(
        "DATABASE_URL", #optional alternative location
        "sqlite:///jewels.sqlite3", #default local location
    )
    SQLALCHEMY_TRACK_MODIFICATIONS = False

    LOG_LEVEL = os.environ.get("LOG_LEVEL", "INFO").upper()

    BCRYPT_ROUNDS = int(os.environ.get("BCRYPT_ROUNDS", "12"))

    # Normalize is_active/is_deleted rows and install CHECK constraints at startup.
    SOFT_DELETE_BOOTSTRAP_ON_STARTUP = _env_flag("SOFT_DELETE_BOOTSTRAP_ON_STARTUP", True)
    # When true, a bootstrap failure aborts create_app instead of being logged.
    SOFT_DELETE_BOOTSTRAP_FAIL_CLOSED = _env_flag("SOFT_DELETE_BOOTSTRAP_FAIL_CLOSED", False)
