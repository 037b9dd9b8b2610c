from abc import ABC, abstractmethod

from src.app.repositories.account_lockout_repository import IAccountLockoutRepository
from src.app.repositories.password_reset_token_repository import IPasswordResetTokenRepository
from src.app.repositories.security_event_repository import ISecurityEventRepository
from src.app.repositories.session_repository import ISessionRepository
from src.app.repositories.user_repository import IUserRepository


class UnitOfWork(ABC):
    """Abstract UnitOfWork - defines repository access and transaction management"""

    # Repository properties (initialized in __aenter__)
    users: IUserRepository
    sessions: ISessionRepository
    lockouts: IAccountLockoutRepository
    security_events: ISecurityEventRepository
    password_reset_tokens: IPasswordResetTokenRepository

    @abstractmethod
    async def __aenter__(self):
        pass

    @abstractmethod
    async def __aexit__(self, *args):
        pass

    @abstractmethod
    async def commit(self):
        pass

    @abstractmethod
    async def rollback(self):
        pass
