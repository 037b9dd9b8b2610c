from abc import ABC, abstractmethod

from src.domain.entities import User


class PasswordResetNotifier(ABC):
    """Delivers a raw password reset token to its owner"""

    @abstractmethod
    async def send_reset_token(self, user: User, token: str) -> None:
        pass
