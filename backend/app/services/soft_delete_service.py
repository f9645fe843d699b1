# Overview: Soft-delete consistency policy and the startup constraint bootstrap.

"""
Soft-Delete Consistency Service

INVARIANT: for every opted-in table, is_active == NOT is_deleted.

Two layers keep it true:
1. enforce_write_policy() - a pure function applied by services.repository to
   every create/update/update_many/upsert payload before it reaches storage.
   It also stamps created_by / updated_by / deleted_by from the explicit actor.
2. bootstrap_soft_delete_consistency() - runs once at startup (or via
   `flask system enforce-soft-delete`): normalizes existing rows and installs
   the named CHECK constraint on tables that lack it, covering writes that
   bypass the repository (raw SQL, migrations, other services).

FAILURE POLICY: bootstrap failures are logged and reported but never raised,
unless fail_closed=True. Concurrent replicas booting together can race on
constraint creation; the existence check is not race-free and the losing
replica simply records a failure.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import datetime

from sqlalchemy import MetaData, Table, false, func, inspect, text, update
from sqlalchemy.exc import SQLAlchemyError

from app.time_utils import utcnow
from ..models.envelope import SOFT_DELETE_CHECK_SQL, soft_delete_check_name


# Entity names opted into enforcement. Names without a model in this
# codebase are ignored.
SOFT_DELETE_ENTITIES = frozenset({
    "User",
    "VendorProfile",
    "VendorVerification",
    "Store",
    "Category",
    "Product",
    "Order",
    "OrderItem",
    "Payment",
    "ShippingInfo",
    "AIModel",
    "Review",
    "AuditLog",
    "MenuItem",
})

WRITE_OPERATIONS = frozenset({"create", "update", "update_many", "upsert"})
_UPDATED_BY_OPERATIONS = frozenset({"update", "update_many", "upsert"})


class SoftDeleteBootstrapError(Exception):
    """Raised by the bootstrap when fail_closed is set and a table fails."""
    pass


@dataclass(frozen=True)
class Actor:
    """
    Identity performing a write.

    Passed explicitly to every repository call; None means anonymous or
    system work, in which case no attribution is stamped.
    """
    id: str
    role: str | None = None
    display_name: str | None = None

    @property
    def composite_id(self) -> str:
        return f"{self.role}:{self.id}"

    @property
    def label(self) -> str:
        return self.display_name or self.id

    @classmethod
    def from_user(cls, user) -> "Actor | None":
        if user is None:
            return None
        return cls(id=str(user.id), role=user.role, display_name=user.full_name or None)


def is_enforced(model) -> bool:
    """True when the model class participates in soft-delete enforcement."""
    name = model if isinstance(model, str) else getattr(model, "__name__", type(model).__name__)
    return name in SOFT_DELETE_ENTITIES


def enforce_write_policy(
    actor: Actor | None,
    operation: str,
    payload: dict | None,
    now: datetime | None = None,
) -> dict:
    """
    Return a corrected copy of a write payload. The input is never mutated.

    Rules:
    - is_deleted given as a bool: is_active = not is_deleted.
      Deleting stamps deleted_by (when an actor is known) and deleted_at
      (when not supplied). Restoring clears deleted_at / deleted_by unless
      the payload sets them.
    - else is_active given as a bool: is_deleted = not is_active.
    - neither (or non-bool values): no inference, column defaults apply.
    - create with an actor and no created_by key: created_by = actor label.
    - update / update_many / upsert with an actor and no updated_by key:
      updated_by = actor label.
    """
    if operation not in WRITE_OPERATIONS:
        raise ValueError(f"Unsupported write operation: {operation}")

    data = dict(payload or {})

    is_deleted = data.get("is_deleted")
    is_active = data.get("is_active")

    if isinstance(is_deleted, bool):
        data["is_active"] = not is_deleted
        if is_deleted:
            if actor is not None:
                data["deleted_by"] = actor.id
            if data.get("deleted_at") is None:
                data["deleted_at"] = now or utcnow()
        else:
            data.setdefault("deleted_at", None)
            data.setdefault("deleted_by", None)
    elif isinstance(is_active, bool):
        data["is_deleted"] = not is_active

    if actor is not None:
        if operation == "create" and "created_by" not in data:
            data["created_by"] = actor.label
        if operation in _UPDATED_BY_OPERATIONS and "updated_by" not in data:
            data["updated_by"] = actor.label

    return data


def apply_upsert_policy(
    actor: Actor | None,
    create: dict | None,
    update: dict | None,
    now: datetime | None = None,
) -> tuple[dict, dict]:
    """Apply the upsert rules to the create and update branches independently."""
    return (
        enforce_write_policy(actor, "upsert", create, now=now),
        enforce_write_policy(actor, "upsert", update, now=now),
    )


# =============================================================================
# Startup bootstrap
# =============================================================================

@dataclass
class BootstrapReport:
    """Per-table outcome of one bootstrap run."""
    normalized: dict[str, int] = field(default_factory=dict)
    installed: list[str] = field(default_factory=list)
    existing: list[str] = field(default_factory=list)
    skipped: list[str] = field(default_factory=list)
    failed: dict[str, str] = field(default_factory=dict)

    @property
    def ok(self) -> bool:
        return not self.failed

    def to_dict(self) -> dict:
        return {
            "normalized": dict(self.normalized),
            "installed": list(self.installed),
            "existing": list(self.existing),
            "skipped": list(self.skipped),
            "failed": dict(self.failed),
            "ok": self.ok,
        }


def enforced_table_names() -> list[str]:
    """Table names of every mapped model whose class is opted in."""
    from ..extensions import db

    names = []
    for mapper in db.Model.registry.mappers:
        cls = mapper.class_
        if is_enforced(cls):
            names.append(cls.__tablename__)
    return sorted(set(names))


def _normalize_table(conn, table: Table) -> int:
    expected = ~func.coalesce(table.c.is_deleted, false())
    stmt = (
        update(table)
        .where(table.c.is_active.is_distinct_from(expected))
        .values(is_active=expected)
    )
    return conn.execute(stmt).rowcount or 0


def _install_check(conn, table_name: str, constraint_name: str) -> None:
    preparer = conn.dialect.identifier_preparer
    qtable = preparer.quote(table_name)
    qname = preparer.quote(constraint_name)

    if conn.dialect.name == "postgresql":
        # NOT VALID + VALIDATE avoids holding a long exclusive lock on big tables
        conn.execute(text(
            f"ALTER TABLE {qtable} ADD CONSTRAINT {qname} CHECK ({SOFT_DELETE_CHECK_SQL}) NOT VALID"
        ))
        conn.execute(text(f"ALTER TABLE {qtable} VALIDATE CONSTRAINT {qname}"))
    else:
        conn.execute(text(
            f"ALTER TABLE {qtable} ADD CONSTRAINT {qname} CHECK ({SOFT_DELETE_CHECK_SQL})"
        ))


def _bootstrap_table(engine, table_name: str, report: BootstrapReport, log) -> None:
    inspector = inspect(engine)
    if not inspector.has_table(table_name):
        report.skipped.append(table_name)
        log.debug("Soft-delete bootstrap: table %s not present, skipping", table_name)
        return

    table = Table(table_name, MetaData(), autoload_with=engine)
    if "is_active" not in table.c or "is_deleted" not in table.c:
        raise SoftDeleteBootstrapError(f"Table {table_name} lacks is_active/is_deleted columns")

    with engine.begin() as conn:
        fixed = _normalize_table(conn, table)
    report.normalized[table_name] = fixed
    if fixed:
        log.warning(
            "Soft-delete bootstrap normalized %s inconsistent rows in %s",
            fixed,
            table_name,
            extra={"table": table_name, "rows": fixed},
        )

    constraint_name = soft_delete_check_name(table_name)
    existing = {ck.get("name") for ck in inspect(engine).get_check_constraints(table_name)}
    if constraint_name in existing:
        report.existing.append(table_name)
        return

    with engine.begin() as conn:
        _install_check(conn, table_name, constraint_name)
    report.installed.append(table_name)
    log.info("Soft-delete bootstrap installed %s", constraint_name)


def bootstrap_soft_delete_consistency(
    engine,
    tables=None,
    fail_closed: bool = False,
    logger: logging.Logger | None = None,
) -> BootstrapReport:
    """
    Normalize rows and install the is_active/is_deleted CHECK constraint.

    Each table is handled independently: a failure on one table is logged
    and recorded in the report, and the remaining tables still run. With
    fail_closed=True the first failure raises SoftDeleteBootstrapError.

    Idempotent: a rerun reports every table as existing and installs nothing.
    """
    log = logger or logging.getLogger(__name__)
    report = BootstrapReport()
    table_names = list(tables) if tables is not None else enforced_table_names()

    for table_name in table_names:
        try:
            _bootstrap_table(engine, table_name, report, log)
        except (SQLAlchemyError, SoftDeleteBootstrapError) as exc:
            report.failed[table_name] = str(exc)
            log.warning(
                "Soft-delete bootstrap failed for %s: %s",
                table_name,
                exc,
                extra={"table": table_name},
            )
            if fail_closed:
                raise SoftDeleteBootstrapError(
                    f"Soft-delete bootstrap failed for {table_name}: {exc}"
                ) from exc

    return report
