from datetime import datetime
from typing import List, Optional
from uuid import UUID

from sqlalchemy import delete, or_
from sqlmodel import select, update
from sqlmodel.ext.asyncio.session import AsyncSession

from src.adapter.repositories.base import translate_errors
from src.app.repositories.session_repository import ISessionRepository
from src.domain.entities import Session


class SessionRepository(ISessionRepository):
    """Session repository implementation using SQLModel"""

    def __init__(self, session: AsyncSession):
        self.session = session

    @translate_errors
    async def create(self, session_obj: Session) -> Session:
        """Create a new session"""
        self.session.add(session_obj)
        await self.session.flush()
        await self.session.refresh(session_obj)
        return session_obj

    @translate_errors
    async def get_by_token(self, token_hash: str) -> Optional[Session]:
        """
        Find session by session token or access token hash.

        Inactive and expired rows are returned too; the session manager
        decides how to treat them.
        """
        stmt = select(Session).where(
            or_(
                Session.session_token_hash == token_hash,
                Session.access_token_hash == token_hash,
            )
        )
        result = await self.session.exec(stmt)
        return result.first()

    @translate_errors
    async def get_by_refresh_token(self, token_hash: str) -> Optional[Session]:
        """Find session by refresh token hash"""
        stmt = select(Session).where(Session.refresh_token_hash == token_hash)
        result = await self.session.exec(stmt)
        return result.one_or_none()

    @translate_errors
    async def get_active_by_user_id(self, user_id: UUID) -> List[Session]:
        """Get active sessions for a user, oldest first"""
        stmt = (
            select(Session)
            .where(Session.user_id == user_id, Session.is_active == True)  # noqa: E712
            .order_by(Session.created_at.asc())
        )
        result = await self.session.exec(stmt)
        return list(result.all())

    @translate_errors
    async def invalidate_by_id(self, session_id: UUID) -> bool:
        """Deactivate a session. The is_active guard makes this a compare-and-set."""
        stmt = (
            update(Session)
            .where(Session.id == session_id, Session.is_active == True)  # noqa: E712
            .values(is_active=False)
            .execution_options(synchronize_session="fetch")
        )
        result = await self.session.execute(stmt)
        await self.session.flush()
        return result.rowcount > 0

    @translate_errors
    async def invalidate_all_by_user_id(
        self, user_id: UUID, except_session_id: Optional[UUID] = None
    ) -> int:
        """Deactivate all active sessions for a user, optionally keeping one"""
        stmt = update(Session).where(
            Session.user_id == user_id, Session.is_active == True  # noqa: E712
        )
        if except_session_id is not None:
            stmt = stmt.where(Session.id != except_session_id)
        stmt = stmt.values(is_active=False).execution_options(synchronize_session="fetch")
        result = await self.session.execute(stmt)
        await self.session.flush()
        return result.rowcount

    @translate_errors
    async def touch(self, session_id: UUID, accessed_at: datetime) -> None:
        """Update last_accessed"""
        stmt = (
            update(Session)
            .where(Session.id == session_id)
            .values(last_accessed=accessed_at)
            .execution_options(synchronize_session="fetch")
        )
        await self.session.execute(stmt)
        await self.session.flush()

    @translate_errors
    async def delete_expired(self, now: datetime) -> int:
        """Delete sessions past expires_at"""
        stmt = delete(Session).where(Session.expires_at < now)
        result = await self.session.execute(stmt)
        await self.session.flush()
        return result.rowcount
