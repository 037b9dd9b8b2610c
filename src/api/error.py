from typing import Dict, Optional

from fastapi import status
from libs.result import Error
from src.domain.entities import AuthErrorCode


class ClientError(Exception):
    def __init__(
        self,
        base_error: Error,
        status_code: int = status.HTTP_400_BAD_REQUEST,
        headers: Optional[Dict[str, str]] = None,
    ):
        self.base_error = base_error
        self.status_code = status_code
        self.headers = headers
        super().__init__(base_error.message)


class ServerError(Exception):
    def __init__(self, base_error: Error):
        self.base_error = base_error
        super().__init__(base_error.message)


ERROR_STATUS = {
    AuthErrorCode.INVALID_CREDENTIALS: status.HTTP_401_UNAUTHORIZED,
    AuthErrorCode.ACCOUNT_LOCKED: status.HTTP_423_LOCKED,
    AuthErrorCode.ACCOUNT_INACTIVE: status.HTTP_403_FORBIDDEN,
    AuthErrorCode.RATE_LIMITED: status.HTTP_429_TOO_MANY_REQUESTS,
    AuthErrorCode.INVALID_TOKEN: status.HTTP_401_UNAUTHORIZED,
    AuthErrorCode.TOKEN_EXPIRED: status.HTTP_401_UNAUTHORIZED,
    AuthErrorCode.WRONG_TOKEN_TYPE: status.HTTP_401_UNAUTHORIZED,
    AuthErrorCode.SESSION_EXPIRED: status.HTTP_401_UNAUTHORIZED,
    AuthErrorCode.WEAK_PASSWORD: status.HTTP_400_BAD_REQUEST,
    AuthErrorCode.CSRF_INVALID: status.HTTP_403_FORBIDDEN,
    AuthErrorCode.EMAIL_ALREADY_EXISTS: status.HTTP_409_CONFLICT,
    AuthErrorCode.USERNAME_ALREADY_EXISTS: status.HTTP_409_CONFLICT,
    AuthErrorCode.TOKEN_ALREADY_USED: status.HTTP_400_BAD_REQUEST,
    AuthErrorCode.USER_NOT_FOUND: status.HTTP_404_NOT_FOUND,
    AuthErrorCode.UNAUTHORIZED: status.HTTP_401_UNAUTHORIZED,
    AuthErrorCode.INVALID_API_KEY: status.HTTP_401_UNAUTHORIZED,
}


def rate_limit_headers(error: Error) -> Dict[str, str]:
    details = error.details
    headers = {
        "Retry-After": str(details.get("retry_after", 0)),
        "X-RateLimit-Remaining": str(details.get("remaining", 0)),
    }
    if details.get("reset_at") is not None:
        headers["X-RateLimit-Reset"] = str(int(details["reset_at"]))
    return headers


def http_error(error: Error, overrides: Optional[Dict[str, int]] = None) -> Exception:
    """
    Map a use case Error to the exception the app handlers render.

    Unknown codes (INTERNAL_ERROR included) become ServerError so no
    internal detail reaches the client.
    """
    status_code = (overrides or {}).get(error.code) or ERROR_STATUS.get(error.code)
    if status_code is None:
        return ServerError(error)

    headers = rate_limit_headers(error) if error.code == AuthErrorCode.RATE_LIMITED else None
    return ClientError(error, status_code=status_code, headers=headers)
