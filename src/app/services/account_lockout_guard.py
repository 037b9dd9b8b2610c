"""
Account Lockout Guard

Persisted lock state per user: Unlocked -> Locked after max_login_attempts
verified-wrong passwords -> Unlocked once locked_until passes.
"""

import logging
from datetime import datetime, timedelta
from typing import Callable, Optional
from uuid import UUID

from src.app.services.request_context import RequestContext
from src.app.services.security_config import SecurityConfig
from src.app.services.security_events import record_security_event
from src.app.services.unit_of_work import UnitOfWork
from src.domain.base import utcnow
from src.domain.entities import AccountLockout, SecurityEventType

logger = logging.getLogger(__name__)


class AccountLockoutGuard:
    """
    Tracks failed attempts and lock rows. Runs inside the caller's unit of
    work and never commits.

    Business Rules:
    - failed_attempts is incremented by a single UPDATE, never read-then-write
    - Reaching max_login_attempts creates a lock and a high-risk event
    - Expired lock rows do not deny login and do not reset the counter
    - Success (or admin unlock) zeroes the counter and deactivates locks
    """

    def __init__(
        self,
        uow: UnitOfWork,
        config: SecurityConfig,
        clock: Callable[[], datetime] = utcnow,
    ):
        self.uow = uow
        self.config = config
        self._clock = clock

    async def is_locked(self, user_id: UUID) -> Optional[AccountLockout]:
        return await self.uow.lockouts.get_active_by_user_id(user_id, self._clock())

    async def record_failure(
        self, user_id: UUID, ctx: Optional[RequestContext] = None
    ) -> Optional[AccountLockout]:
        """Count one wrong password. Returns the new lock when this failure crossed the threshold."""
        attempts = await self.uow.users.increment_failed_attempts(user_id)
        logger.info(f"Failed login attempt {attempts}/{self.config.max_login_attempts} for user {user_id}")

        if attempts < self.config.max_login_attempts:
            return None

        return await self.lock(
            user_id,
            reason="too_many_failed_attempts",
            ctx=ctx,
            metadata={"failed_attempts": attempts},
        )

    async def record_success(self, user_id: UUID) -> None:
        await self.uow.users.update(user_id, {"failed_attempts": 0})
        await self.uow.lockouts.deactivate_all_by_user_id(user_id)

    async def lock(
        self,
        user_id: UUID,
        reason: str,
        ctx: Optional[RequestContext] = None,
        duration_minutes: Optional[int] = None,
        metadata: Optional[dict] = None,
    ) -> AccountLockout:
        minutes = duration_minutes or self.config.lockout_duration_minutes
        locked_until = self._clock() + timedelta(minutes=minutes)

        await self.uow.lockouts.deactivate_all_by_user_id(user_id)
        lockout = await self.uow.lockouts.create(
            AccountLockout(user_id=user_id, reason=reason, locked_until=locked_until)
        )

        await record_security_event(
            self.uow,
            SecurityEventType.account_locked,
            success=False,
            description=f"Account locked: {reason}",
            ctx=ctx,
            user_id=user_id,
            metadata={
                "reason": reason,
                "locked_until": locked_until.isoformat(),
                **(metadata or {}),
            },
        )
        logger.warning(f"Account {user_id} locked until {locked_until.isoformat()} ({reason})")
        return lockout

    async def unlock(self, user_id: UUID) -> int:
        """Clear lock state. Returns how many lock rows were deactivated."""
        await self.uow.users.update(user_id, {"failed_attempts": 0})
        return await self.uow.lockouts.deactivate_all_by_user_id(user_id)
