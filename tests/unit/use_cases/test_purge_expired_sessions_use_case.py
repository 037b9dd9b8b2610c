from datetime import datetime

import pytest

from src.app.repositories.errors import PersistenceError
from src.app.use_cases.auth import PurgeExpiredSessionsUseCase
from src.domain.entities import AuthErrorCode

NOW = datetime(2026, 3, 2, 9, 30)


@pytest.mark.asyncio
async def test_deletes_sessions_expired_before_now(mock_uow):
    mock_uow.sessions.delete_expired.return_value = 3

    result = await PurgeExpiredSessionsUseCase(mock_uow, clock=lambda: NOW).execute()

    assert result.value == 3
    mock_uow.sessions.delete_expired.assert_awaited_once_with(NOW)
    mock_uow.commit.assert_awaited_once()


@pytest.mark.asyncio
async def test_store_failure(mock_uow):
    mock_uow.sessions.delete_expired.side_effect = PersistenceError("database is locked")

    result = await PurgeExpiredSessionsUseCase(mock_uow, clock=lambda: NOW).execute()

    assert result.error.code == AuthErrorCode.INTERNAL_ERROR
    mock_uow.rollback.assert_awaited()
