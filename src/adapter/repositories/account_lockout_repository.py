from datetime import datetime
from typing import Optional
from uuid import UUID

from sqlmodel import select, update
from sqlmodel.ext.asyncio.session import AsyncSession

from src.adapter.repositories.base import translate_errors
from src.app.repositories.account_lockout_repository import IAccountLockoutRepository
from src.domain.entities import AccountLockout


class AccountLockoutRepository(IAccountLockoutRepository):
    """AccountLockout repository implementation using SQLModel"""

    def __init__(self, session: AsyncSession):
        self.session = session

    @translate_errors
    async def create(self, lockout: AccountLockout) -> AccountLockout:
        """Create a new lock"""
        self.session.add(lockout)
        await self.session.flush()
        await self.session.refresh(lockout)
        return lockout

    @translate_errors
    async def get_active_by_user_id(
        self, user_id: UUID, now: datetime
    ) -> Optional[AccountLockout]:
        """Get the latest active lock that has not yet expired"""
        stmt = (
            select(AccountLockout)
            .where(
                AccountLockout.user_id == user_id,
                AccountLockout.is_active == True,  # noqa: E712
                AccountLockout.locked_until > now,
            )
            .order_by(AccountLockout.locked_until.desc())
        )
        result = await self.session.exec(stmt)
        return result.first()

    @translate_errors
    async def deactivate_all_by_user_id(self, user_id: UUID) -> int:
        """Deactivate every active lock row for a user"""
        stmt = (
            update(AccountLockout)
            .where(
                AccountLockout.user_id == user_id,
                AccountLockout.is_active == True,  # noqa: E712
            )
            .values(is_active=False)
            .execution_options(synchronize_session="fetch")
        )
        result = await self.session.execute(stmt)
        await self.session.flush()
        return result.rowcount
