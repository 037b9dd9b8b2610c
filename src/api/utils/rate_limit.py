from fastapi import Depends, Request

from libs.result import Error
from src.api.error import http_error
from src.api.utils.client import get_client_ip
from src.app.services.security_services import SecurityServices
from src.depends import get_security_services
from src.domain.entities import AuthErrorCode


async def enforce_api_rate_limit(
    request: Request, services: SecurityServices = Depends(get_security_services)
) -> None:
    """
    Generic per-IP request limit for authenticated API endpoints.

    Raises:
        ClientError: 429 with Retry-After and X-RateLimit-* headers
    """
    decision = services.rate_limiter.check("api", get_client_ip(request))
    if not decision.allowed:
        raise http_error(
            Error(
                AuthErrorCode.RATE_LIMITED,
                "Too many requests. Please try again later.",
                {
                    "retry_after": decision.retry_after,
                    "remaining": decision.remaining,
                    "reset_at": decision.reset_at,
                },
            )
        )
