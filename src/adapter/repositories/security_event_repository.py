import base64
from datetime import datetime
from typing import List, Optional, Tuple
from uuid import UUID

from sqlmodel import select
from sqlmodel.ext.asyncio.session import AsyncSession

from src.adapter.repositories.base import translate_errors
from src.app.repositories.security_event_repository import ISecurityEventRepository
from src.domain.entities import SecurityEvent


class SecurityEventRepository(ISecurityEventRepository):
    """SecurityEvent repository implementation using SQLModel"""

    def __init__(self, session: AsyncSession):
        self.session = session

    @translate_errors
    async def create(self, event: SecurityEvent) -> SecurityEvent:
        """Create a new security event (immutable)"""
        self.session.add(event)
        await self.session.flush()
        await self.session.refresh(event)
        return event

    @translate_errors
    async def get_by_user_paginated(
        self, user_id: UUID, limit: int = 50, cursor: Optional[str] = None
    ) -> Tuple[List[SecurityEvent], Optional[str]]:
        """
        Get security events for a user with cursor-based pagination.

        Cursor format: base64-encoded ISO timestamp of created_at
        """
        stmt = select(SecurityEvent).where(SecurityEvent.user_id == user_id)

        if cursor:
            try:
                cursor_timestamp = datetime.fromisoformat(
                    base64.b64decode(cursor).decode("utf-8")
                )
                stmt = stmt.where(SecurityEvent.created_at < cursor_timestamp)
            except (ValueError, TypeError):
                # Invalid cursor, ignore and return from beginning
                pass

        # Newest first, one extra row to detect another page
        stmt = stmt.order_by(SecurityEvent.created_at.desc()).limit(limit + 1)

        result = await self.session.exec(stmt)
        events = list(result.all())

        has_more = len(events) > limit
        if has_more:
            events = events[:limit]

        next_cursor = None
        if has_more and events:
            cursor_timestamp_str = events[-1].created_at.isoformat()
            next_cursor = base64.b64encode(cursor_timestamp_str.encode("utf-8")).decode("utf-8")

        return events, next_cursor
