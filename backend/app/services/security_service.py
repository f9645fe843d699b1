# Overview: Append-only security event trail.

from ..extensions import db
from ..models import SecurityEvent
from app.time_utils import utcnow


def log_security_event(
    user_id: int | None,
    event_type: str,
    success: bool,
    resource: str | None = None,
    action: str | None = None,
    reason: str | None = None,
    ip_address: str | None = None,
    user_agent: str | None = None,
    role: str | None = None,
) -> SecurityEvent:
    """
    Log security event to the audit trail.

    WHY: Immutable record for compliance and security monitoring.
    Every guard denial, login attempt, and delegated user creation is logged.

    event_type examples:
    - LOGIN_SUCCESS / LOGIN_FAILED / LOGOUT
    - ROLE_DENIED
    - OWNERSHIP_DENIED
    - USER_CREATED
    - ROLE_CREATION_DENIED
    """
    event = SecurityEvent(
        user_id=user_id,
        role=role,
        event_type=event_type,
        resource=resource,
        action=action,
        success=success,
        reason=reason,
        ip_address=ip_address,
        user_agent=user_agent,
        occurred_at=utcnow(),
    )

    db.session.add(event)
    db.session.commit()

    return event


def get_security_events(
    *,
    user_id: int | None = None,
    event_type: str | None = None,
    limit: int = 100,
) -> list[SecurityEvent]:
    query = db.session.query(SecurityEvent)
    if user_id is not None:
        query = query.filter(SecurityEvent.user_id == user_id)
    if event_type:
        query = query.filter(SecurityEvent.event_type == event_type)
    return query.order_by(SecurityEvent.occurred_at.desc(), SecurityEvent.id.desc()).limit(limit).all()
