"""
Validate Session Use Case

Answers "is this token a live session?" without ever failing on bad tokens.
"""

from typing import Optional

from libs.result import Result, Return
from src.app.repositories.errors import PersistenceError
from src.app.services.security_services import SecurityServices
from src.app.services.session_manager import SessionData, SessionManager
from src.app.services.unit_of_work import UnitOfWork
from src.app.use_cases.errors import internal_error
from .dtos import SessionInfo, SessionValidationResponse, UserProfile


class ValidateSessionUseCase:
    """
    Use case for session validation.

    Business Rules:
    - Missing, inactive or expired sessions yield valid=False, not an error
    - Expired sessions are deactivated as a side effect
    - No security event is written; this runs on every authenticated request
    """

    def __init__(self, uow: UnitOfWork, services: SecurityServices):
        self.uow = uow
        self.session_manager = SessionManager(uow, services.token_manager, services.config)

    async def resolve(self, token: Optional[str]) -> Result[Optional[SessionData]]:
        """Live SessionData for the token, or an ok None when there is none"""
        if not token:
            return Return.ok(None)

        async with self.uow:
            try:
                data = await self.session_manager.validate(token)
                await self.uow.commit()
            except PersistenceError:
                return await internal_error(self.uow, "session_validation")

        return Return.ok(data)

    async def execute(self, token: Optional[str]) -> Result[SessionValidationResponse]:
        result = await self.resolve(token)
        if result.is_err():
            return result

        data = result.value
        if data is None:
            return Return.ok(SessionValidationResponse(valid=False))

        session = data.session
        return Return.ok(
            SessionValidationResponse(
                valid=True,
                user=UserProfile.from_user(data.user),
                session=SessionInfo(
                    id=str(session.id),
                    login_method=session.login_method.value,
                    created_at=session.created_at,
                    last_accessed=session.last_accessed,
                    expires_at=session.expires_at,
                ),
            )
        )
