from abc import ABC, abstractmethod
from typing import Any, Dict, Optional
from uuid import UUID

from src.domain.entities import User


class IUserRepository(ABC):
    """User repository interface - application layer"""

    @abstractmethod
    async def get_by_email(self, email: str) -> Optional[User]:
        """Get user by email address (case-insensitive)"""
        pass

    @abstractmethod
    async def get_by_username(self, username: str) -> Optional[User]:
        """Get user by username (case-insensitive)"""
        pass

    @abstractmethod
    async def get_by_id(self, user_id: UUID) -> Optional[User]:
        """Get user by ID"""
        pass

    @abstractmethod
    async def create(self, user: User) -> User:
        """Create a new user"""
        pass

    @abstractmethod
    async def update(self, user_id: UUID, values: Dict[str, Any]) -> Optional[User]:
        """Apply a partial update and return the refreshed user"""
        pass

    @abstractmethod
    async def increment_failed_attempts(self, user_id: UUID) -> int:
        """Atomically add one to failed_attempts. Returns the new count."""
        pass

    @abstractmethod
    async def verify_password(self, user_id: UUID, candidate: str) -> bool:
        """Check a candidate password against the stored hash"""
        pass

    @abstractmethod
    async def update_password(self, user_id: UUID, new_password: str) -> None:
        """Hash and store a new password"""
        pass
