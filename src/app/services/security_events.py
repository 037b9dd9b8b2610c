"""
Security event recording

Builds SecurityEvent rows with the category and default risk for each event
type, and mirrors every event to the application log.
"""

import logging
from typing import Any, Dict, Optional
from uuid import UUID

from src.app.services.request_context import RequestContext
from src.app.services.unit_of_work import UnitOfWork
from src.domain.entities import EventCategory, RiskLevel, SecurityEvent, SecurityEventType

logger = logging.getLogger(__name__)

EVENT_DEFAULTS = {
    SecurityEventType.account_creation: (EventCategory.account, RiskLevel.low),
    SecurityEventType.login_success: (EventCategory.authentication, RiskLevel.low),
    SecurityEventType.login_failure: (EventCategory.authentication, RiskLevel.low),
    SecurityEventType.two_factor_required: (EventCategory.authentication, RiskLevel.low),
    SecurityEventType.logout: (EventCategory.session, RiskLevel.low),
    SecurityEventType.token_refresh: (EventCategory.session, RiskLevel.low),
    SecurityEventType.account_locked: (EventCategory.security, RiskLevel.high),
    SecurityEventType.account_unlocked: (EventCategory.security, RiskLevel.medium),
    SecurityEventType.password_change: (EventCategory.account, RiskLevel.medium),
    SecurityEventType.password_reset_requested: (EventCategory.account, RiskLevel.low),
    SecurityEventType.password_reset: (EventCategory.account, RiskLevel.medium),
    SecurityEventType.internal_error: (EventCategory.security, RiskLevel.high),
}


async def record_security_event(
    uow: UnitOfWork,
    event_type: SecurityEventType,
    *,
    success: bool,
    description: str,
    ctx: Optional[RequestContext] = None,
    user_id: Optional[UUID] = None,
    session_id: Optional[UUID] = None,
    risk_level: Optional[RiskLevel] = None,
    metadata: Optional[Dict[str, Any]] = None,
) -> SecurityEvent:
    """Append one event to the audit trail in the caller's transaction"""
    category, default_risk = EVENT_DEFAULTS[event_type]
    ctx = ctx or RequestContext()

    event = SecurityEvent(
        user_id=user_id,
        session_id=session_id,
        event_type=event_type,
        event_category=category,
        description=description,
        risk_level=risk_level or default_risk,
        success=success,
        ip_address=ctx.ip_address,
        user_agent=ctx.user_agent,
        event_metadata=metadata or {},
    )

    level = logging.WARNING if event.risk_level == RiskLevel.high else logging.INFO
    logger.log(
        level,
        f"Security event {event_type.value} user={user_id} success={success} "
        f"risk={event.risk_level.value} ip={ctx.ip_address}",
    )

    return await uow.security_events.create(event)
