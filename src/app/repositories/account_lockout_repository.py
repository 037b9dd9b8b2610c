from abc import ABC, abstractmethod
from datetime import datetime
from typing import Optional
from uuid import UUID

from src.domain.entities import AccountLockout


class IAccountLockoutRepository(ABC):
    """AccountLockout repository interface - application layer"""

    @abstractmethod
    async def create(self, lockout: AccountLockout) -> AccountLockout:
        """Create a new lock"""
        pass

    @abstractmethod
    async def get_active_by_user_id(
        self, user_id: UUID, now: datetime
    ) -> Optional[AccountLockout]:
        """Get the active, unexpired lock for a user, if any"""
        pass

    @abstractmethod
    async def deactivate_all_by_user_id(self, user_id: UUID) -> int:
        """Deactivate every active lock row for a user. Returns count."""
        pass
