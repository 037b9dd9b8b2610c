from abc import ABC, abstractmethod
from datetime import datetime
from typing import List, Optional
from uuid import UUID

from src.domain.entities import Session


class ISessionRepository(ABC):
    """Session repository interface - application layer"""

    @abstractmethod
    async def create(self, session: Session) -> Session:
        """Create a new session"""
        pass

    @abstractmethod
    async def get_by_token(self, token_hash: str) -> Optional[Session]:
        """Find session whose session token or access token hash matches"""
        pass

    @abstractmethod
    async def get_by_refresh_token(self, token_hash: str) -> Optional[Session]:
        """Find session by refresh token hash"""
        pass

    @abstractmethod
    async def get_active_by_user_id(self, user_id: UUID) -> List[Session]:
        """Get active sessions for a user, oldest first"""
        pass

    @abstractmethod
    async def invalidate_by_id(self, session_id: UUID) -> bool:
        """Deactivate a session. Returns True only if it was still active."""
        pass

    @abstractmethod
    async def invalidate_all_by_user_id(
        self, user_id: UUID, except_session_id: Optional[UUID] = None
    ) -> int:
        """Deactivate all active sessions for a user. Returns count."""
        pass

    @abstractmethod
    async def touch(self, session_id: UUID, accessed_at: datetime) -> None:
        """Update last_accessed"""
        pass

    @abstractmethod
    async def delete_expired(self, now: datetime) -> int:
        """Delete sessions past expires_at. Returns count."""
        pass
