"""
Use Case: Lock Account

Administrative lock. Revokes the user's active sessions so the lock
takes effect immediately.
"""

from datetime import datetime
from typing import Optional
from uuid import UUID

from pydantic import BaseModel

from libs.result import Error, Result, Return
from src.app.repositories.errors import PersistenceError
from src.app.services.account_lockout_guard import AccountLockoutGuard
from src.app.services.request_context import RequestContext
from src.app.services.security_services import SecurityServices
from src.app.services.unit_of_work import UnitOfWork
from src.app.use_cases.errors import internal_error
from src.domain.entities import AuthErrorCode


class LockAccountResponse(BaseModel):
    """Response DTO for LockAccountUseCase"""

    status: str
    locked_until: datetime
    sessions_revoked: int


class LockAccountUseCase:
    """
    Lock a user account on behalf of an administrator.

    Business Logic:
    1. Validate user exists
    2. Create lock row (replacing any active one) and account_locked event
    3. Revoke all active sessions for the user
    """

    def __init__(self, uow: UnitOfWork, services: SecurityServices):
        self.uow = uow
        self.services = services
        self.lockout_guard = AccountLockoutGuard(uow, services.config)

    async def execute(
        self,
        user_id: UUID,
        reason: str = "admin_lock",
        duration_minutes: Optional[int] = None,
        ctx: Optional[RequestContext] = None,
    ) -> Result[LockAccountResponse]:
        async with self.uow:
            try:
                user = await self.uow.users.get_by_id(user_id)
                if user is None:
                    return Return.err(Error(AuthErrorCode.USER_NOT_FOUND, "User not found"))

                lockout = await self.lockout_guard.lock(
                    user.id,
                    reason=reason,
                    ctx=ctx,
                    duration_minutes=duration_minutes,
                    metadata={"initiated_by": "admin"},
                )
                sessions_revoked = await self.uow.sessions.invalidate_all_by_user_id(user.id)
                await self.uow.commit()
            except PersistenceError:
                return await internal_error(self.uow, "admin_lock", ctx, user_id)

        return Return.ok(
            LockAccountResponse(
                status="locked",
                locked_until=lockout.locked_until,
                sessions_revoked=sessions_revoked,
            )
        )
