from sqlmodel.ext.asyncio.session import AsyncSession

from src.adapter.repositories.account_lockout_repository import AccountLockoutRepository
from src.adapter.repositories.base import translate_errors
from src.adapter.repositories.password_reset_token_repository import PasswordResetTokenRepository
from src.adapter.repositories.security_event_repository import SecurityEventRepository
from src.adapter.repositories.session_repository import SessionRepository
from src.adapter.repositories.user_repository import UserRepository
from src.app.services.password_hasher import PasswordHasher
from src.app.services.unit_of_work import UnitOfWork


class SqlAlchemyUnitOfWork(UnitOfWork):
    """SQLAlchemy implementation of UnitOfWork pattern"""

    def __init__(self, session: AsyncSession, hasher: PasswordHasher):
        self.session = session
        self.hasher = hasher

    async def __aenter__(self):
        # Initialize all repositories with the session
        self.users = UserRepository(self.session, self.hasher)
        self.sessions = SessionRepository(self.session)
        self.lockouts = AccountLockoutRepository(self.session)
        self.security_events = SecurityEventRepository(self.session)
        self.password_reset_tokens = PasswordResetTokenRepository(self.session)
        return self

    async def __aexit__(self, *args):
        await self.rollback()

    @translate_errors
    async def commit(self):
        await self.session.commit()

    @translate_errors
    async def rollback(self):
        await self.session.rollback()
