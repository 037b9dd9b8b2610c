"""
Admin API Routes - Account Security Administration

For support tooling. Authentication is via Admin API Key, not user sessions.
"""

from typing import Optional
from uuid import UUID

from fastapi import APIRouter, Depends, Query, status
from pydantic import BaseModel, Field

from src.api.error import http_error
from src.api.utils.admin_auth import verify_admin_api_key
from src.api.utils.client import get_request_context
from src.app.services.request_context import RequestContext
from src.app.services.security_services import SecurityServices
from src.app.services.unit_of_work import UnitOfWork
from src.app.use_cases.admin import (
    GetSecurityEventsUseCase,
    LockAccountResponse,
    LockAccountUseCase,
    SecurityEventsPage,
    UnlockAccountResponse,
    UnlockAccountUseCase,
)
from src.depends import get_security_services, get_unit_of_work

router = APIRouter(prefix="/admin", tags=["Admin"])


class LockAccountRequest(BaseModel):
    reason: str = Field(default="admin_lock", min_length=1, max_length=100)
    duration_minutes: Optional[int] = Field(default=None, ge=1, le=60 * 24 * 365)


@router.post(
    "/users/{user_id}/lock",
    status_code=status.HTTP_200_OK,
    response_model=LockAccountResponse,
    dependencies=[Depends(verify_admin_api_key)],
)
async def lock_account(
    user_id: UUID,
    request: Optional[LockAccountRequest] = None,
    ctx: RequestContext = Depends(get_request_context),
    uow: UnitOfWork = Depends(get_unit_of_work),
    services: SecurityServices = Depends(get_security_services),
):
    """
    Lock Account

    Locks the account for duration_minutes (default: the configured lockout
    duration) and revokes its active sessions.

    Requires: X-Admin-API-Key header

    Raises:
        - 401 Unauthorized: Missing or invalid admin API key
        - 404 Not Found: USER_NOT_FOUND
        - 500 Internal Server Error: Server error
    """
    request = request or LockAccountRequest()
    result = await LockAccountUseCase(uow, services).execute(
        user_id, reason=request.reason, duration_minutes=request.duration_minutes, ctx=ctx
    )

    if result.is_err():
        raise http_error(result.error)

    return result.value


@router.post(
    "/users/{user_id}/unlock",
    status_code=status.HTTP_200_OK,
    response_model=UnlockAccountResponse,
    dependencies=[Depends(verify_admin_api_key)],
)
async def unlock_account(
    user_id: UUID,
    ctx: RequestContext = Depends(get_request_context),
    uow: UnitOfWork = Depends(get_unit_of_work),
    services: SecurityServices = Depends(get_security_services),
):
    """
    Unlock Account

    Clears active locks and the failed-attempt counter. Idempotent.

    Requires: X-Admin-API-Key header

    Raises:
        - 401 Unauthorized: Missing or invalid admin API key
        - 404 Not Found: USER_NOT_FOUND
    """
    result = await UnlockAccountUseCase(uow, services).execute(user_id, ctx)

    if result.is_err():
        raise http_error(result.error)

    return result.value


@router.get(
    "/users/{user_id}/security-events",
    status_code=status.HTTP_200_OK,
    response_model=SecurityEventsPage,
    dependencies=[Depends(verify_admin_api_key)],
)
async def get_security_events(
    user_id: UUID,
    limit: int = Query(50, ge=1, le=200),
    cursor: Optional[str] = Query(None),
    uow: UnitOfWork = Depends(get_unit_of_work),
):
    """
    Security Events

    Newest first, cursor paginated.

    Requires: X-Admin-API-Key header
    """
    result = await GetSecurityEventsUseCase(uow).execute(user_id, limit=limit, cursor=cursor)

    if result.is_err():
        raise http_error(result.error)

    return result.value
