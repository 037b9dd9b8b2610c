"""
Auth cookies

auth-token, refresh-token and session-token are HttpOnly; csrf-token is
readable by the page so it can be echoed in X-CSRF-Token.
"""

from datetime import datetime
from typing import Optional

from fastapi import Response

from src.app.services.security_config import SecurityConfig
from src.domain.base import utcnow

ACCESS_COOKIE = "auth-token"
REFRESH_COOKIE = "refresh-token"
SESSION_COOKIE = "session-token"
CSRF_COOKIE = "csrf-token"

CSRF_HEADER = "X-CSRF-Token"


def set_auth_cookies(
    response: Response,
    config: SecurityConfig,
    access_token: str,
    refresh_token: str,
    session_token: str,
    csrf_token: Optional[str],
    session_expires_at: Optional[datetime] = None,
) -> None:
    """Session-bound cookies live until session_expires_at (session_ttl_hours when unknown)"""
    if session_expires_at is not None:
        session_max_age = max(0, int((session_expires_at - utcnow()).total_seconds()))
    else:
        session_max_age = config.session_ttl_hours * 3600
    options = dict(httponly=True, secure=config.cookie_secure, samesite="strict", path="/")

    response.set_cookie(
        ACCESS_COOKIE, access_token, max_age=config.access_token_ttl_minutes * 60, **options
    )
    response.set_cookie(REFRESH_COOKIE, refresh_token, max_age=session_max_age, **options)
    response.set_cookie(SESSION_COOKIE, session_token, max_age=session_max_age, **options)

    if csrf_token:
        response.set_cookie(
            CSRF_COOKIE,
            csrf_token,
            max_age=min(config.csrf_token_ttl_minutes * 60, session_max_age),
            httponly=False,
            secure=config.cookie_secure,
            samesite="strict",
            path="/",
        )


def clear_auth_cookies(response: Response, config: SecurityConfig) -> None:
    for name in (ACCESS_COOKIE, REFRESH_COOKIE, SESSION_COOKIE):
        response.delete_cookie(
            name, path="/", secure=config.cookie_secure, httponly=True, samesite="strict"
        )
    response.delete_cookie(
        CSRF_COOKIE, path="/", secure=config.cookie_secure, httponly=False, samesite="strict"
    )
