"""
Refresh Token Use Case

Rotates a session: new session and token pair, old session invalidated.
"""

import logging
from typing import Optional

from libs.result import Result, Return
from src.app.repositories.errors import PersistenceError
from src.app.services.request_context import RequestContext
from src.app.services.security_events import record_security_event
from src.app.services.security_services import SecurityServices
from src.app.services.session_manager import SessionManager
from src.app.services.unit_of_work import UnitOfWork
from src.app.use_cases.errors import internal_error
from src.domain.base import to_epoch
from src.domain.entities import SecurityEventType
from .dtos import RefreshTokenResponse, UserProfile

logger = logging.getLogger(__name__)


class RefreshTokenUseCase:
    """
    Use case for refreshing tokens.

    Business Rules:
    - Refresh tokens are single-use; replaying a rotated token fails
    - The old session's CSRF token is revoked and a new one issued
    - A failed rotation is rolled back before its event is recorded
    """

    def __init__(self, uow: UnitOfWork, services: SecurityServices):
        self.uow = uow
        self.services = services
        self.session_manager = SessionManager(uow, services.token_manager, services.config)

    async def execute(
        self, refresh_token: str, ctx: Optional[RequestContext] = None
    ) -> Result[RefreshTokenResponse]:
        """
        Execute refresh token use case.

        Errors:
            - INVALID_TOKEN: unknown, malformed, rotated or revoked token
            - WRONG_TOKEN_TYPE: an access token was presented
            - SESSION_EXPIRED: refresh token or session past expiry
            - ACCOUNT_INACTIVE: user no longer active
        """
        ctx = ctx or RequestContext()

        async with self.uow:
            try:
                result = await self.session_manager.refresh(refresh_token, ctx)

                if result.is_err():
                    error = result.error
                    # Discard any half-finished rotation
                    await self.uow.rollback()
                    await record_security_event(
                        self.uow,
                        SecurityEventType.token_refresh,
                        success=False,
                        description=f"Token refresh failed: {error.message}",
                        ctx=ctx,
                        metadata={"reason": error.code},
                    )
                    await self.uow.commit()
                    return Return.err(error)

                bundle = result.value
                await record_security_event(
                    self.uow,
                    SecurityEventType.token_refresh,
                    success=True,
                    description="Session rotated",
                    ctx=ctx,
                    user_id=bundle.user.id,
                    session_id=bundle.session.id,
                    metadata={"previous_session_id": str(bundle.replaced_session_id)},
                )
                await self.uow.commit()
            except PersistenceError:
                return await internal_error(self.uow, "token_refresh", ctx)

        session = bundle.session
        self.services.csrf_store.revoke(str(bundle.replaced_session_id))
        csrf_token = self.services.csrf_store.issue(
            str(session.id), not_after=to_epoch(session.expires_at)
        )
        logger.info(f"Session {bundle.replaced_session_id} rotated to {session.id}")

        return Return.ok(
            RefreshTokenResponse(
                access_token=bundle.access_token,
                refresh_token=bundle.refresh_token,
                session_token=bundle.session_token,
                csrf_token=csrf_token,
                session_id=str(session.id),
                expires_in=bundle.expires_in,
                session_expires_at=session.expires_at,
                user=UserProfile.from_user(bundle.user),
            )
        )
