"""
Shared failure handling for use cases.
"""

import logging
from typing import Optional
from uuid import UUID

from libs.result import Error, Result, Return
from src.app.repositories.errors import PersistenceError
from src.app.services.request_context import RequestContext
from src.app.services.security_events import record_security_event
from src.app.services.unit_of_work import UnitOfWork
from src.domain.entities import AuthErrorCode, SecurityEventType

logger = logging.getLogger(__name__)


async def internal_error(
    uow: UnitOfWork,
    operation: str,
    ctx: Optional[RequestContext] = None,
    user_id: Optional[UUID] = None,
) -> Result:
    """
    Roll back a failed transaction, record a high-risk internal_error event
    if the store still accepts writes, and return a generic INTERNAL_ERROR.

    Call from an ``except PersistenceError`` block so the traceback is logged.
    """
    logger.exception(f"{operation} failed: persistence error")
    try:
        await uow.rollback()
        await record_security_event(
            uow,
            SecurityEventType.internal_error,
            success=False,
            description=f"{operation} failed due to an internal error",
            ctx=ctx,
            user_id=user_id,
            metadata={"operation": operation},
        )
        await uow.commit()
    except PersistenceError:
        logger.error(f"Could not record internal_error event for {operation}")

    return Return.err(Error(AuthErrorCode.INTERNAL_ERROR, "An internal error occurred"))
