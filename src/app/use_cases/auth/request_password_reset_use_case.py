"""
Request Password Reset Use Case

Handles generating and handing off password reset tokens.
"""

import logging
import secrets
from datetime import datetime, timedelta
from typing import Callable, Optional

from libs.result import Error, Result, Return
from src.app.repositories.errors import PersistenceError
from src.app.services.request_context import RequestContext
from src.app.services.security_events import record_security_event
from src.app.services.security_services import SecurityServices
from src.app.services.unit_of_work import UnitOfWork
from src.app.use_cases.errors import internal_error
from src.domain.base import hash_token, utcnow
from src.domain.entities import AccountStatus, AuthErrorCode, PasswordResetToken, SecurityEventType
from .dtos import RequestPasswordResetResponse

logger = logging.getLogger(__name__)

GENERIC_MESSAGE = "If the email exists, a password reset link has been sent"


class RequestPasswordResetUseCase:
    """
    Use case for requesting password reset.

    Business Rules:
    - Rate limited per client IP (else per email)
    - Generate cryptographically secure token
    - Hash token with SHA-256 before storing
    - Token expires after password_reset_ttl_minutes
    - No email enumeration (same response for valid/invalid emails)
    - Raw token goes only to the PasswordResetNotifier
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

    async def execute(
        self, email: str, ctx: Optional[RequestContext] = None
    ) -> Result[RequestPasswordResetResponse]:
        ctx = ctx or RequestContext()

        decision = self.services.rate_limiter.check(
            "password_reset", ctx.ip_address or email.lower()
        )
        if not decision.allowed:
            return Return.err(
                Error(
                    AuthErrorCode.RATE_LIMITED,
                    "Too many password reset requests. Please try again later.",
                    {
                        "retry_after": decision.retry_after,
                        "remaining": decision.remaining,
                        "reset_at": decision.reset_at,
                        "block_until": decision.block_until,
                    },
                )
            )

        reset_token = None
        async with self.uow:
            try:
                user = await self.uow.users.get_by_email(email)

                if user is None or user.account_status != AccountStatus.active:
                    await record_security_event(
                        self.uow,
                        SecurityEventType.password_reset_requested,
                        success=False,
                        description="Password reset requested for unknown or inactive account",
                        ctx=ctx,
                        user_id=user.id if user else None,
                        metadata={"identifier": email},
                    )
                    await self.uow.commit()
                    return Return.ok(
                        RequestPasswordResetResponse(status="sent", message=GENERIC_MESSAGE)
                    )

                reset_token = secrets.token_urlsafe(32)
                token_row = await self.uow.password_reset_tokens.create(
                    PasswordResetToken(
                        user_id=user.id,
                        token_hash=hash_token(reset_token),
                        used=False,
                        expires_at=self.clock()
                        + timedelta(minutes=self.services.config.password_reset_ttl_minutes),
                    )
                )

                await record_security_event(
                    self.uow,
                    SecurityEventType.password_reset_requested,
                    success=True,
                    description="Password reset token issued",
                    ctx=ctx,
                    user_id=user.id,
                    metadata={"token_id": str(token_row.id)},
                )
                await self.uow.commit()
            except PersistenceError:
                return await internal_error(self.uow, "password_reset_request", ctx)

        await self.services.reset_notifier.send_reset_token(user, reset_token)

        return Return.ok(RequestPasswordResetResponse(status="sent", message=GENERIC_MESSAGE))
