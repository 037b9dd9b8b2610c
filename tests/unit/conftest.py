from unittest.mock import AsyncMock, MagicMock

import pytest

from src.app.services.security_config import RateLimitPolicy, SecurityConfig
from src.app.services.security_services import SecurityServices


@pytest.fixture
def mock_uow():
    """Mock UnitOfWork; repositories echo created rows back and report no lock"""
    uow = MagicMock()
    uow.__aenter__ = AsyncMock(return_value=uow)
    uow.__aexit__ = AsyncMock(return_value=False)  # Must return False to not suppress exceptions
    uow.commit = AsyncMock()
    uow.rollback = AsyncMock()

    uow.users = AsyncMock()
    uow.sessions = AsyncMock()
    uow.lockouts = AsyncMock()
    uow.security_events = AsyncMock()
    uow.password_reset_tokens = AsyncMock()

    uow.sessions.create.side_effect = lambda session: session
    uow.sessions.get_by_token.return_value = None
    uow.sessions.get_by_refresh_token.return_value = None
    uow.sessions.invalidate_by_id.return_value = True
    uow.lockouts.create.side_effect = lambda lockout: lockout
    uow.lockouts.get_active_by_user_id.return_value = None
    uow.lockouts.deactivate_all_by_user_id.return_value = 0
    uow.security_events.create.side_effect = lambda event: event
    return uow


@pytest.fixture
def security_config():
    return SecurityConfig(
        jwt_secret="unit-test-secret",
        bcrypt_rounds=4,
        rate_limits={
            "login": RateLimitPolicy(max_attempts=5, window_seconds=900, block_seconds=1800),
            "password_reset": RateLimitPolicy(max_attempts=3, window_seconds=3600),
            "api": RateLimitPolicy(max_attempts=100, window_seconds=900),
        },
    )


@pytest.fixture
def services(security_config):
    return SecurityServices(security_config, reset_notifier=AsyncMock())


@pytest.fixture
def event_types(mock_uow):
    """Event types recorded through mock_uow so far, in call order"""

    def _event_types():
        return [call.args[0].event_type for call in mock_uow.security_events.create.call_args_list]

    return _event_types
