from abc import ABC, abstractmethod
from typing import List, Optional, Tuple
from uuid import UUID

from src.domain.entities import SecurityEvent


class ISecurityEventRepository(ABC):
    """SecurityEvent repository interface - application layer"""

    @abstractmethod
    async def create(self, event: SecurityEvent) -> SecurityEvent:
        """Create a new security event (immutable)"""
        pass

    @abstractmethod
    async def get_by_user_paginated(
        self, user_id: UUID, limit: int = 50, cursor: Optional[str] = None
    ) -> Tuple[List[SecurityEvent], Optional[str]]:
        """
        Get security events for a user with cursor-based pagination.

        Returns:
            Tuple of (events list, next_cursor)
            - events: List of events ordered by created_at DESC
            - next_cursor: Cursor for next page, None if no more events
        """
        pass
