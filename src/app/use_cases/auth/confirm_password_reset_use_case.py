"""
Confirm Password Reset Use Case

Handles password reset confirmation with secure token validation.
"""

import logging
from datetime import datetime
from typing import Callable, Optional

from libs.result import Error, Result, Return
from src.app.repositories.errors import PersistenceError
from src.app.services.account_lockout_guard import AccountLockoutGuard
from src.app.services.password_policy import UserInfo
from src.app.services.request_context import RequestContext
from src.app.services.security_events import record_security_event
from src.app.services.security_services import SecurityServices
from src.app.services.unit_of_work import UnitOfWork
from src.app.use_cases.errors import internal_error
from src.domain.base import hash_token, utcnow
from src.domain.entities import AuthErrorCode, SecurityEventType
from .dtos import ConfirmPasswordResetResponse

logger = logging.getLogger(__name__)


class ConfirmPasswordResetUseCase:
    """
    Use case for confirming password reset.

    Business Rules:
    - Token is validated by hashing and comparing with stored hash
    - Token must not be expired or already used
    - New password must satisfy the password policy
    - All user sessions are revoked
    - failed_attempts is reset and any lock is cleared
    - Token is marked as used with a conditional update (single use)
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

    async def execute(
        self, token: str, new_password: str, ctx: Optional[RequestContext] = None
    ) -> Result[ConfirmPasswordResetResponse]:
        """
        Execute confirm password reset use case.

        Errors:
            - INVALID_TOKEN: Token not found
            - TOKEN_EXPIRED: Token has expired
            - TOKEN_ALREADY_USED: Token has already been used
            - WEAK_PASSWORD: New password rejected by the policy
        """
        async with self.uow:
            try:
                reset_token = await self.uow.password_reset_tokens.get_by_token_hash(
                    hash_token(token)
                )

                if reset_token is None:
                    return await self._fail(
                        None, ctx, Error(AuthErrorCode.INVALID_TOKEN, "Invalid password reset token")
                    )

                if reset_token.used:
                    return await self._fail(
                        reset_token.user_id,
                        ctx,
                        Error(
                            AuthErrorCode.TOKEN_ALREADY_USED,
                            "Password reset token has already been used",
                        ),
                    )

                if reset_token.expires_at <= self.clock():
                    return await self._fail(
                        reset_token.user_id,
                        ctx,
                        Error(AuthErrorCode.TOKEN_EXPIRED, "Password reset token has expired"),
                    )

                user = await self.uow.users.get_by_id(reset_token.user_id)
                if user is None:
                    return await self._fail(
                        reset_token.user_id,
                        ctx,
                        Error(AuthErrorCode.USER_NOT_FOUND, "User not found"),
                    )

                validation = self.services.password_validator.validate(
                    new_password,
                    UserInfo(
                        username=user.username,
                        email=user.email,
                        first_name=user.first_name,
                        last_name=user.last_name,
                    ),
                )
                if not validation.is_valid:
                    return await self._fail(
                        user.id,
                        ctx,
                        Error(
                            AuthErrorCode.WEAK_PASSWORD,
                            "Password does not meet security requirements",
                            {"feedback": validation.feedback, "score": validation.score},
                        ),
                    )

                if not await self.uow.password_reset_tokens.mark_used(reset_token.id):
                    return await self._fail(
                        user.id,
                        ctx,
                        Error(
                            AuthErrorCode.TOKEN_ALREADY_USED,
                            "Password reset token has already been used",
                        ),
                    )

                await self.uow.users.update_password(user.id, new_password)
                revoked = await self.uow.sessions.invalidate_all_by_user_id(user.id)
                await self.lockout_guard.record_success(user.id)

                await record_security_event(
                    self.uow,
                    SecurityEventType.password_reset,
                    success=True,
                    description="Password reset completed",
                    ctx=ctx,
                    user_id=user.id,
                    metadata={"token_id": str(reset_token.id), "sessions_revoked": revoked},
                )
                await self.uow.commit()
            except PersistenceError:
                return await internal_error(self.uow, "password_reset_confirm", ctx)

        logger.info(f"Password reset for user {user.id}; revoked {revoked} sessions")
        return Return.ok(
            ConfirmPasswordResetResponse(
                status="success",
                message="Password has been reset successfully",
                sessions_revoked=revoked,
            )
        )

    async def _fail(self, user_id, ctx, error: Error) -> Result:
        await record_security_event(
            self.uow,
            SecurityEventType.password_reset,
            success=False,
            description=error.message,
            ctx=ctx,
            user_id=user_id,
            metadata={"reason": error.code},
        )
        await self.uow.commit()
        return Return.err(error)
