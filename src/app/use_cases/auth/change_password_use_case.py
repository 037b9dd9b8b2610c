"""
Change Password Use Case

Authenticated password change. Keeps the caller's session and revokes
every other session of the user.
"""

import logging
from typing import Optional
from uuid import UUID

from libs.result import Error, Result, Return
from src.app.repositories.errors import PersistenceError
from src.app.services.password_policy import UserInfo
from src.app.services.request_context import RequestContext
from src.app.services.security_events import record_security_event
from src.app.services.security_services import SecurityServices
from src.app.services.unit_of_work import UnitOfWork
from src.app.use_cases.errors import internal_error
from src.domain.entities import AuthErrorCode, SecurityEventType
from .dtos import ChangePasswordCommand, ChangePasswordResponse

logger = logging.getLogger(__name__)


class ChangePasswordUseCase:
    """
    Use case for changing a password.

    Business Rules:
    - Current password must verify (does not count toward lockout)
    - New password must satisfy the password policy
    - All other sessions of the user are invalidated
    """

    def __init__(self, uow: UnitOfWork, services: SecurityServices):
        self.uow = uow
        self.services = services

    async def execute(
        self,
        user_id: UUID,
        session_id: UUID,
        command: ChangePasswordCommand,
        ctx: Optional[RequestContext] = None,
    ) -> Result[ChangePasswordResponse]:
        async with self.uow:
            try:
                user = await self.uow.users.get_by_id(user_id)
                if user is None:
                    await self._record(user_id, session_id, ctx, False, "User not found")
                    await self.uow.commit()
                    return Return.err(Error(AuthErrorCode.USER_NOT_FOUND, "User not found"))

                if not await self.uow.users.verify_password(user.id, command.current_password):
                    await self._record(user.id, session_id, ctx, False, "Current password incorrect")
                    await self.uow.commit()
                    return Return.err(
                        Error(AuthErrorCode.INVALID_CREDENTIALS, "Current password is incorrect")
                    )

                validation = self.services.password_validator.validate(
                    command.new_password,
                    UserInfo(
                        username=user.username,
                        email=user.email,
                        first_name=user.first_name,
                        last_name=user.last_name,
                    ),
                )
                if not validation.is_valid:
                    await self._record(user.id, session_id, ctx, False, "New password rejected by policy")
                    await self.uow.commit()
                    return Return.err(
                        Error(
                            AuthErrorCode.WEAK_PASSWORD,
                            "Password does not meet security requirements",
                            {"feedback": validation.feedback, "score": validation.score},
                        )
                    )

                await self.uow.users.update_password(user.id, command.new_password)
                revoked = await self.uow.sessions.invalidate_all_by_user_id(
                    user.id, except_session_id=session_id
                )

                await self._record(
                    user.id, session_id, ctx, True, "Password changed", {"sessions_revoked": revoked}
                )
                await self.uow.commit()
            except PersistenceError:
                return await internal_error(self.uow, "password_change", ctx, user_id)

        logger.info(f"User {user_id} changed password; revoked {revoked} other sessions")
        return Return.ok(
            ChangePasswordResponse(
                status="success",
                message="Password changed successfully",
                sessions_revoked=revoked,
            )
        )

    async def _record(self, user_id, session_id, ctx, success, description, metadata=None):
        await record_security_event(
            self.uow,
            SecurityEventType.password_change,
            success=success,
            description=description,
            ctx=ctx,
            user_id=user_id,
            session_id=session_id,
            metadata=metadata,
        )
