from typing import Any, Dict, Optional
from uuid import UUID

from sqlalchemy import func
from sqlmodel import select, update
from sqlmodel.ext.asyncio.session import AsyncSession

from src.adapter.repositories.base import translate_errors
from src.app.repositories.user_repository import IUserRepository
from src.app.services.password_hasher import PasswordHasher
from src.domain.base import utcnow
from src.domain.entities import User


class UserRepository(IUserRepository):
    """User repository implementation using SQLModel"""

    def __init__(self, session: AsyncSession, hasher: PasswordHasher):
        self.session = session
        self.hasher = hasher

    @translate_errors
    async def get_by_email(self, email: str) -> Optional[User]:
        """Get user by email address (case-insensitive)"""
        stmt = select(User).where(func.lower(User.email) == email.lower())
        result = await self.session.exec(stmt)
        return result.one_or_none()

    @translate_errors
    async def get_by_username(self, username: str) -> Optional[User]:
        """Get user by username (case-insensitive)"""
        stmt = select(User).where(func.lower(User.username) == username.lower())
        result = await self.session.exec(stmt)
        return result.one_or_none()

    @translate_errors
    async def get_by_id(self, user_id: UUID) -> Optional[User]:
        """Get user by ID"""
        stmt = select(User).where(User.id == user_id)
        result = await self.session.exec(stmt)
        return result.one_or_none()

    @translate_errors
    async def create(self, user: User) -> User:
        """Create a new user"""
        self.session.add(user)
        await self.session.flush()
        await self.session.refresh(user)
        return user

    @translate_errors
    async def update(self, user_id: UUID, values: Dict[str, Any]) -> Optional[User]:
        """Apply a partial update and return the refreshed user"""
        user = await self.session.get(User, user_id)
        if user is None:
            return None
        for key, value in values.items():
            setattr(user, key, value)
        user.updated_at = utcnow()
        self.session.add(user)
        await self.session.flush()
        await self.session.refresh(user)
        return user

    @translate_errors
    async def increment_failed_attempts(self, user_id: UUID) -> int:
        """Atomically add one to failed_attempts in a single UPDATE"""
        stmt = (
            update(User)
            .where(User.id == user_id)
            .values(failed_attempts=User.failed_attempts + 1)
            .execution_options(synchronize_session="fetch")
        )
        await self.session.execute(stmt)
        await self.session.flush()

        # Column select bypasses the identity map and reads the stored value
        count_stmt = select(User.failed_attempts).where(User.id == user_id)
        result = await self.session.exec(count_stmt)
        return result.one_or_none() or 0

    @translate_errors
    async def verify_password(self, user_id: UUID, candidate: str) -> bool:
        """Check a candidate password against the stored bcrypt hash"""
        stmt = select(User.password_hash).where(User.id == user_id)
        result = await self.session.exec(stmt)
        password_hash = result.one_or_none()
        if password_hash is None:
            return False
        return self.hasher.verify(candidate, password_hash)

    @translate_errors
    async def update_password(self, user_id: UUID, new_password: str) -> None:
        """Hash and store a new password"""
        stmt = (
            update(User)
            .where(User.id == user_id)
            .values(password_hash=self.hasher.hash(new_password), updated_at=utcnow())
            .execution_options(synchronize_session="fetch")
        )
        await self.session.execute(stmt)
        await self.session.flush()
