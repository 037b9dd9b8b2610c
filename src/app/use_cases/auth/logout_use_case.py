"""
Logout Use Case
"""

import logging
from typing import Optional

from libs.result import Error, Result, Return
from src.app.repositories.errors import PersistenceError
from src.app.services.request_context import RequestContext
from src.app.services.security_events import record_security_event
from src.app.services.security_services import SecurityServices
from src.app.services.session_manager import SessionManager
from src.app.services.unit_of_work import UnitOfWork
from src.app.use_cases.errors import internal_error
from src.domain.entities import AuthErrorCode, SecurityEventType
from .dtos import LogoutResponse

logger = logging.getLogger(__name__)


class LogoutUseCase:
    """
    Use case for logout.

    Business Rules:
    - Accepts a session token, access token or refresh token
    - Unknown or already-invalid sessions count as already logged out
    - The session's CSRF token is revoked
    - Cookie-authenticated callers (require_csrf) must present the session's
      CSRF token; a mismatch leaves the session active
    """

    def __init__(self, uow: UnitOfWork, services: SecurityServices):
        self.uow = uow
        self.services = services
        self.session_manager = SessionManager(uow, services.token_manager, services.config)

    async def execute(
        self,
        token: Optional[str],
        ctx: Optional[RequestContext] = None,
        csrf_token: Optional[str] = None,
        require_csrf: bool = False,
    ) -> Result[LogoutResponse]:
        ctx = ctx or RequestContext()

        async with self.uow:
            try:
                if require_csrf:
                    pending = await self.session_manager.find_active(token) if token else None
                    if pending is not None and not self.services.csrf_store.validate(
                        str(pending.id), csrf_token
                    ):
                        await record_security_event(
                            self.uow,
                            SecurityEventType.logout,
                            success=False,
                            description="Logout rejected: invalid CSRF token",
                            ctx=ctx,
                            user_id=pending.user_id,
                            session_id=pending.id,
                            metadata={"reason": AuthErrorCode.CSRF_INVALID},
                        )
                        await self.uow.commit()
                        return Return.err(
                            Error(AuthErrorCode.CSRF_INVALID, "Invalid or missing CSRF token")
                        )

                session = await self.session_manager.invalidate(token) if token else None
                if session is None:
                    await record_security_event(
                        self.uow,
                        SecurityEventType.logout,
                        success=True,
                        description="Logout without an active session",
                        ctx=ctx,
                        metadata={"reason": "no_session"},
                    )
                    await self.uow.commit()
                    return Return.ok(LogoutResponse(success=True, message="Already logged out"))

                await record_security_event(
                    self.uow,
                    SecurityEventType.logout,
                    success=True,
                    description="Logout successful",
                    ctx=ctx,
                    user_id=session.user_id,
                    session_id=session.id,
                )
                await self.uow.commit()
            except PersistenceError:
                return await internal_error(self.uow, "logout", ctx)

        self.services.csrf_store.revoke(str(session.id))
        logger.info(f"Session {session.id} logged out")

        return Return.ok(LogoutResponse(success=True, message="Logged out successfully"))
