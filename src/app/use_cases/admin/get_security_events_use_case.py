"""
Get Security Events Use Case

Retrieves a user's security events with pagination.
"""

from typing import Any, Dict, List, Optional
from uuid import UUID

from pydantic import BaseModel

from libs.result import Error, Result, Return
from src.app.repositories.errors import PersistenceError
from src.app.services.unit_of_work import UnitOfWork
from src.app.use_cases.errors import internal_error
from src.domain.entities import AuthErrorCode, SecurityEvent


class SecurityEventItem(BaseModel):
    """Single security event in response"""

    id: str
    event_type: str
    event_category: str
    description: str
    risk_level: str
    success: bool
    ip_address: Optional[str]
    user_agent: Optional[str]
    session_id: Optional[str]
    timestamp: str
    metadata: Dict[str, Any]


class SecurityEventsPage(BaseModel):
    events: List[SecurityEventItem]
    next_cursor: Optional[str]


class GetSecurityEventsUseCase:
    """
    Use case for retrieving security events for a user.

    Business Rules:
    - Results ordered by newest first
    - Supports cursor-based pagination
    """

    def __init__(self, uow: UnitOfWork):
        self.uow = uow

    async def execute(
        self, user_id: UUID, limit: int = 50, cursor: Optional[str] = None
    ) -> Result[SecurityEventsPage]:
        # __aexit__ rolls back and expires the rows, so build the page inside
        async with self.uow:
            try:
                user = await self.uow.users.get_by_id(user_id)
                if user is None:
                    return Return.err(Error(AuthErrorCode.USER_NOT_FOUND, "User not found"))

                events, next_cursor = await self.uow.security_events.get_by_user_paginated(
                    user_id, limit=limit, cursor=cursor
                )
                page = SecurityEventsPage(
                    events=[_to_item(event) for event in events], next_cursor=next_cursor
                )
            except PersistenceError:
                return await internal_error(self.uow, "security_events_query", user_id=user_id)

        return Return.ok(page)


def _to_item(event: SecurityEvent) -> SecurityEventItem:
    return SecurityEventItem(
        id=str(event.id),
        event_type=event.event_type.value,
        event_category=event.event_category.value,
        description=event.description,
        risk_level=event.risk_level.value,
        success=event.success,
        ip_address=event.ip_address,
        user_agent=event.user_agent,
        session_id=str(event.session_id) if event.session_id else None,
        timestamp=event.created_at.isoformat() + "Z",
        metadata=event.event_metadata or {},
    )
