from typing import Optional
from uuid import UUID

from sqlmodel import select, update
from sqlmodel.ext.asyncio.session import AsyncSession

from src.adapter.repositories.base import translate_errors
from src.app.repositories.password_reset_token_repository import IPasswordResetTokenRepository
from src.domain.entities import PasswordResetToken


class PasswordResetTokenRepository(IPasswordResetTokenRepository):
    """PasswordResetToken repository implementation using SQLModel"""

    def __init__(self, session: AsyncSession):
        self.session = session

    @translate_errors
    async def create(self, token: PasswordResetToken) -> PasswordResetToken:
        """Create a new password reset token"""
        self.session.add(token)
        await self.session.flush()
        await self.session.refresh(token)
        return token

    @translate_errors
    async def get_by_token_hash(self, token_hash: str) -> Optional[PasswordResetToken]:
        """Get password reset token by token hash"""
        stmt = select(PasswordResetToken).where(PasswordResetToken.token_hash == token_hash)
        result = await self.session.exec(stmt)
        return result.one_or_none()

    @translate_errors
    async def mark_used(self, token_id: UUID) -> bool:
        """Mark a token used; the used guard keeps a token single-use under races"""
        stmt = (
            update(PasswordResetToken)
            .where(PasswordResetToken.id == token_id, PasswordResetToken.used == False)  # noqa: E712
            .values(used=True)
            .execution_options(synchronize_session="fetch")
        )
        result = await self.session.execute(stmt)
        await self.session.flush()
        return result.rowcount > 0
