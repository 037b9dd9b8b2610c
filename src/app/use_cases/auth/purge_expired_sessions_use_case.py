"""
Purge Expired Sessions Use Case

Deletes session rows whose fixed lifetime has passed. Run by the
background sweeper; expired sessions are already rejected on use.
"""

import logging
from datetime import datetime
from typing import Callable

from libs.result import Result, Return
from src.app.repositories.errors import PersistenceError
from src.app.services.unit_of_work import UnitOfWork
from src.app.use_cases.errors import internal_error
from src.domain.base import utcnow

logger = logging.getLogger(__name__)


class PurgeExpiredSessionsUseCase:
    def __init__(self, uow: UnitOfWork, clock: Callable[[], datetime] = utcnow):
        self.uow = uow
        self.clock = clock

    async def execute(self) -> Result[int]:
        async with self.uow:
            try:
                deleted = await self.uow.sessions.delete_expired(self.clock())
                await self.uow.commit()
            except PersistenceError:
                return await internal_error(self.uow, "expired_session_purge")

        if deleted:
            logger.info(f"Purged {deleted} expired sessions")
        return Return.ok(deleted)
