from typing import Optional

from libs.result import Error, Result, Return
from src.app.repositories.errors import PersistenceError
from src.app.services.password_policy import UserInfo
from src.app.services.request_context import RequestContext
from src.app.services.security_events import record_security_event
from src.app.services.security_services import SecurityServices
from src.app.services.unit_of_work import UnitOfWork
from src.app.use_cases.errors import internal_error
from src.domain.entities import AccountStatus, AuthErrorCode, SecurityEventType, User, UserRole
from .dtos import SignupCommand, SignupResponse, UserProfile


class SignupUseCase:
    """
    Signup Use Case

    Command/Response Pattern:
    - Input: SignupCommand (validated business intent)
    - Output: Result[SignupResponse] (structured response)

    Business Logic:
    1. Reject self-registration as admin
    2. Check email and username are unused
    3. Validate password against the policy (with the user's own details)
    4. Hash password with bcrypt
    5. Create User (active, email_verified=False)
    6. Record account_creation security event
    7. Commit transaction atomically
    """

    def __init__(self, uow: UnitOfWork, services: SecurityServices):
        self.uow = uow
        self.services = services

    async def execute(
        self, command: SignupCommand, ctx: Optional[RequestContext] = None
    ) -> Result[SignupResponse]:
        """
        Execute signup use case

        Returns:
            Result[SignupResponse] with the new user's profile, or Error
            (EMAIL_ALREADY_EXISTS, USERNAME_ALREADY_EXISTS, WEAK_PASSWORD,
            UNAUTHORIZED)
        """
        if command.role == UserRole.admin:
            return Return.err(
                Error(AuthErrorCode.UNAUTHORIZED, "Admin accounts cannot be self-registered")
            )

        validation = self.services.password_validator.validate(
            command.password,
            UserInfo(
                username=command.username,
                email=command.email,
                first_name=command.first_name,
                last_name=command.last_name,
            ),
        )

        async with self.uow:
            try:
                if await self.uow.users.get_by_email(command.email):
                    return Return.err(
                        Error(
                            AuthErrorCode.EMAIL_ALREADY_EXISTS,
                            "An account with this email already exists",
                        )
                    )

                if command.username and await self.uow.users.get_by_username(command.username):
                    return Return.err(
                        Error(AuthErrorCode.USERNAME_ALREADY_EXISTS, "Username is already taken")
                    )

                if not validation.is_valid:
                    return Return.err(
                        Error(
                            AuthErrorCode.WEAK_PASSWORD,
                            "Password does not meet security requirements",
                            {"feedback": validation.feedback, "score": validation.score},
                        )
                    )

                user = await self.uow.users.create(
                    User(
                        email=command.email.lower(),
                        username=command.username,
                        first_name=command.first_name,
                        last_name=command.last_name,
                        role=command.role,
                        account_status=AccountStatus.active,
                        password_hash=self.services.password_hasher.hash(command.password),
                    )
                )

                await record_security_event(
                    self.uow,
                    SecurityEventType.account_creation,
                    success=True,
                    description="Account created",
                    ctx=ctx,
                    user_id=user.id,
                    metadata={"role": user.role.value},
                )
                await self.uow.commit()
            except PersistenceError:
                return await internal_error(self.uow, "signup", ctx)

        return Return.ok(SignupResponse(user=UserProfile.from_user(user)))
