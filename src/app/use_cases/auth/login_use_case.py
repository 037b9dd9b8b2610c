"""
Login Use Case

Authenticates a user by email or username and opens a session.
"""

import logging
from datetime import datetime, timedelta
from typing import Callable, Optional

from libs.result import Error, Result, Return
from src.app.repositories.errors import PersistenceError
from src.app.services.account_lockout_guard import AccountLockoutGuard
from src.app.services.request_context import RequestContext
from src.app.services.security_events import record_security_event
from src.app.services.security_services import SecurityServices
from src.app.services.session_manager import SessionManager
from src.app.services.unit_of_work import UnitOfWork
from src.app.use_cases.errors import internal_error
from src.domain.base import to_epoch, utcnow
from src.domain.entities import (
    AccountStatus,
    AuthErrorCode,
    RiskLevel,
    SecurityEventType,
    User,
)
from .dtos import LoginCommand, LoginResponse, UserProfile

logger = logging.getLogger(__name__)

INVALID_CREDENTIALS_MESSAGE = "Invalid credentials"

STATUS_MESSAGES = {
    AccountStatus.inactive: "Account is inactive",
    AccountStatus.suspended: "Account is suspended",
    AccountStatus.pending_verification: "Account is pending verification",
}


class LoginUseCase:
    """
    Use case for user login.

    Business Rules:
    - Rate limit (keyed by client IP, else identifier) is checked before
      the user store is touched
    - Unknown identifier and wrong password both return INVALID_CREDENTIALS;
      a dummy bcrypt check keeps their timing alike
    - Account status is checked before lock state, lock state before the
      password, so a locked account never accepts even a correct password
    - Only a verified-wrong password counts toward lockout
    - Two-factor accounts get requires_two_factor and no tokens
    - Exactly one security event per attempt
    """

    def __init__(
        self,
        uow: UnitOfWork,
        services: SecurityServices,
        clock: Callable[[], datetime] = utcnow,
    ):
        self.uow = uow
        self.services = services
        self.clock = clock
        self.lockout_guard = AccountLockoutGuard(uow, services.config, clock)
        self.session_manager = SessionManager(uow, services.token_manager, services.config, clock)

    async def execute(
        self, command: LoginCommand, ctx: Optional[RequestContext] = None
    ) -> Result[LoginResponse]:
        """
        Execute login use case.

        Args:
            command: identifier (email or username), password, optional role
            ctx: client IP and user agent

        Returns:
            Result with LoginResponse, or Error with one of
            RATE_LIMITED, INVALID_CREDENTIALS, ACCOUNT_INACTIVE,
            ACCOUNT_LOCKED, INTERNAL_ERROR
        """
        ctx = ctx or RequestContext()
        identifier = command.identifier.strip()
        rate_key = ctx.ip_address or identifier.lower()

        async with self.uow:
            try:
                decision = self.services.rate_limiter.check("login", rate_key)
                if not decision.allowed:
                    await self._record_failure(
                        None, ctx, identifier, "rate_limited", risk_level=RiskLevel.medium
                    )
                    await self.uow.commit()
                    return Return.err(
                        Error(
                            AuthErrorCode.RATE_LIMITED,
                            "Too many login attempts. Please try again later.",
                            {
                                "retry_after": decision.retry_after,
                                "remaining": decision.remaining,
                                "reset_at": decision.reset_at,
                                "block_until": decision.block_until,
                            },
                        )
                    )

                user = await self._find_user(identifier)
                if user is None:
                    self.services.password_hasher.verify_dummy(command.password)
                    await self._record_failure(None, ctx, identifier, "unknown_identifier")
                    await self.uow.commit()
                    return Return.err(
                        Error(AuthErrorCode.INVALID_CREDENTIALS, INVALID_CREDENTIALS_MESSAGE)
                    )

                if user.account_status != AccountStatus.active:
                    await self._record_failure(
                        user.id, ctx, identifier, f"account_{user.account_status.value}"
                    )
                    await self.uow.commit()
                    return Return.err(
                        Error(
                            AuthErrorCode.ACCOUNT_INACTIVE,
                            STATUS_MESSAGES.get(user.account_status, "Account is not active"),
                        )
                    )

                lockout = await self.lockout_guard.is_locked(user.id)
                if lockout is not None:
                    await self._record_failure(
                        user.id, ctx, identifier, "account_locked", risk_level=RiskLevel.medium
                    )
                    await self.uow.commit()
                    return Return.err(
                        Error(
                            AuthErrorCode.ACCOUNT_LOCKED,
                            "Account is temporarily locked due to too many failed login attempts",
                            {"locked_until": lockout.locked_until.isoformat()},
                        )
                    )

                if not await self.uow.users.verify_password(user.id, command.password):
                    new_lock = await self.lockout_guard.record_failure(user.id, ctx)
                    if new_lock is None:
                        # A lock transition already wrote its account_locked event
                        await self._record_failure(user.id, ctx, identifier, "invalid_password")
                    await self.uow.commit()
                    return Return.err(
                        Error(AuthErrorCode.INVALID_CREDENTIALS, INVALID_CREDENTIALS_MESSAGE)
                    )

                if command.role is not None and command.role != user.role:
                    await self._record_failure(user.id, ctx, identifier, "role_mismatch")
                    await self.uow.commit()
                    return Return.err(
                        Error(AuthErrorCode.INVALID_CREDENTIALS, INVALID_CREDENTIALS_MESSAGE)
                    )

                if user.two_factor_enabled:
                    await record_security_event(
                        self.uow,
                        SecurityEventType.two_factor_required,
                        success=True,
                        description="Password verified, second factor required",
                        ctx=ctx,
                        user_id=user.id,
                    )
                    await self.uow.commit()
                    return Return.ok(
                        LoginResponse(
                            success=True,
                            requires_two_factor=True,
                            user=UserProfile.from_user(user),
                        )
                    )

                await self.lockout_guard.record_success(user.id)
                user = await self.uow.users.update(user.id, {"last_login": self.clock()})
                lifetime = (
                    timedelta(days=self.services.config.remember_me_session_ttl_days)
                    if command.remember_me
                    else None
                )
                bundle = await self.session_manager.create(user, ctx, lifetime=lifetime)

                await record_security_event(
                    self.uow,
                    SecurityEventType.login_success,
                    success=True,
                    description="Login successful",
                    ctx=ctx,
                    user_id=user.id,
                    session_id=bundle.session.id,
                    metadata={
                        "login_method": bundle.session.login_method.value,
                        "remember_me": command.remember_me,
                    },
                )
                await self.uow.commit()
            except PersistenceError:
                return await internal_error(self.uow, "login", ctx)

        session = bundle.session
        csrf_token = self.services.csrf_store.issue(
            str(session.id), not_after=to_epoch(session.expires_at)
        )
        self.services.rate_limiter.reset("login", rate_key)
        logger.info(f"User {user.id} logged in, session {session.id}")

        return Return.ok(
            LoginResponse(
                success=True,
                user=UserProfile.from_user(user),
                access_token=bundle.access_token,
                refresh_token=bundle.refresh_token,
                session_token=bundle.session_token,
                csrf_token=csrf_token,
                session_id=str(session.id),
                expires_in=bundle.expires_in,
                session_expires_at=session.expires_at,
            )
        )

    async def _find_user(self, identifier: str) -> Optional[User]:
        if "@" in identifier:
            return await self.uow.users.get_by_email(identifier)
        return await self.uow.users.get_by_username(identifier)

    async def _record_failure(
        self,
        user_id,
        ctx: RequestContext,
        identifier: str,
        reason: str,
        risk_level: Optional[RiskLevel] = None,
    ) -> None:
        await record_security_event(
            self.uow,
            SecurityEventType.login_failure,
            success=False,
            description=f"Login failed: {reason}",
            ctx=ctx,
            user_id=user_id,
            risk_level=risk_level,
            metadata={"identifier": identifier, "reason": reason},
        )
