"""
CSRF check for state-changing authenticated endpoints.
"""

import logging
from typing import Optional

from fastapi import Depends, Header, status

from libs.result import Error
from src.api.error import ClientError
from src.app.services.security_services import SecurityServices
from src.app.services.session_manager import SessionData
from src.depends import get_current_session, get_security_services
from src.domain.entities import AuthErrorCode

logger = logging.getLogger(__name__)


async def require_csrf(
    x_csrf_token: Optional[str] = Header(None),
    current: SessionData = Depends(get_current_session),
    services: SecurityServices = Depends(get_security_services),
) -> SessionData:
    """
    Require X-CSRF-Token to match the token issued for the caller's session.

    Raises:
        ClientError: 403 CSRF_INVALID on a missing or mismatched token
    """
    if not services.csrf_store.validate(str(current.session.id), x_csrf_token):
        logger.warning(f"CSRF validation failed for session {current.session.id}")
        raise ClientError(
            Error(AuthErrorCode.CSRF_INVALID, "Invalid or missing CSRF token"),
            status_code=status.HTTP_403_FORBIDDEN,
        )
    return current
