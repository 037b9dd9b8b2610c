"""
Use Case: Unlock Account

Clears lock rows and the failed-attempt counter.
"""

from typing import Optional
from uuid import UUID

from pydantic import BaseModel

from libs.result import Error, Result, Return
from src.app.repositories.errors import PersistenceError
from src.app.services.account_lockout_guard import AccountLockoutGuard
from src.app.services.request_context import RequestContext
from src.app.services.security_events import record_security_event
from src.app.services.security_services import SecurityServices
from src.app.services.unit_of_work import UnitOfWork
from src.app.use_cases.errors import internal_error
from src.domain.entities import AuthErrorCode, SecurityEventType


class UnlockAccountResponse(BaseModel):
    """Response DTO for UnlockAccountUseCase"""

    status: str
    locks_cleared: int


class UnlockAccountUseCase:
    """
    Unlock a user account.

    Idempotent: unlocking an unlocked account succeeds with locks_cleared=0
    """

    def __init__(self, uow: UnitOfWork, services: SecurityServices):
        self.uow = uow
        self.lockout_guard = AccountLockoutGuard(uow, services.config)

    async def execute(
        self, user_id: UUID, ctx: Optional[RequestContext] = None
    ) -> Result[UnlockAccountResponse]:
        async with self.uow:
            try:
                user = await self.uow.users.get_by_id(user_id)
                if user is None:
                    return Return.err(Error(AuthErrorCode.USER_NOT_FOUND, "User not found"))

                cleared = await self.lockout_guard.unlock(user.id)

                await record_security_event(
                    self.uow,
                    SecurityEventType.account_unlocked,
                    success=True,
                    description="Account unlocked by administrator",
                    ctx=ctx,
                    user_id=user.id,
                    metadata={"locks_cleared": cleared},
                )
                await self.uow.commit()
            except PersistenceError:
                return await internal_error(self.uow, "admin_unlock", ctx, user_id)

        return Return.ok(UnlockAccountResponse(status="unlocked", locks_cleared=cleared))
