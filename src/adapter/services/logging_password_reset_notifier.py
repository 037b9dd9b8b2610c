import logging

from src.app.services.password_reset_notifier import PasswordResetNotifier
from src.domain.entities import User

logger = logging.getLogger(__name__)


class LoggingPasswordResetNotifier(PasswordResetNotifier):
    """
    Default notifier: records that a reset was issued without sending mail.

    The token itself is never logged. Deployments that deliver reset links
    plug in their own PasswordResetNotifier.
    """

    async def send_reset_token(self, user: User, token: str) -> None:
        logger.info(f"Password reset token issued for user {user.id}; no mail transport configured")
