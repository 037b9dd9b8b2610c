from uuid import uuid4

import pytest

from src.app.services.session_manager import SessionManager
from src.app.use_cases.auth import LogoutUseCase
from src.domain.entities import AccountStatus, AuthErrorCode, SecurityEventType, User, UserRole


def make_user():
    return User(
        id=uuid4(),
        email="parent@quizschool.com",
        password_hash="x" * 60,
        role=UserRole.parent,
        account_status=AccountStatus.active,
    )


@pytest.mark.asyncio
async def test_logout_invalidates_session_and_revokes_csrf(mock_uow, services, event_types):
    bundle = await SessionManager(mock_uow, services.token_manager, services.config).create(make_user())
    session_id = str(bundle.session.id)
    services.csrf_store.issue(session_id)
    mock_uow.sessions.get_by_token.return_value = bundle.session

    result = await LogoutUseCase(mock_uow, services).execute(bundle.session_token)

    assert result.is_ok()
    assert result.value.message == "Logged out successfully"
    mock_uow.sessions.invalidate_by_id.assert_called_once_with(bundle.session.id)
    assert services.csrf_store.get(session_id) is None
    assert event_types() == [SecurityEventType.logout]


@pytest.mark.asyncio
async def test_logout_is_idempotent(mock_uow, services, event_types):
    result = await LogoutUseCase(mock_uow, services).execute("unknown-token")

    assert result.is_ok()
    assert result.value.success
    assert result.value.message == "Already logged out"
    mock_uow.sessions.invalidate_by_id.assert_not_called()
    assert event_types() == [SecurityEventType.logout]


@pytest.mark.asyncio
async def test_logout_without_token(mock_uow, services):
    result = await LogoutUseCase(mock_uow, services).execute(None)

    assert result.is_ok()
    mock_uow.sessions.get_by_token.assert_not_called()


@pytest.mark.asyncio
async def test_cookie_logout_with_bad_csrf_keeps_session(mock_uow, services, event_types):
    bundle = await SessionManager(mock_uow, services.token_manager, services.config).create(make_user())
    csrf_token = services.csrf_store.issue(str(bundle.session.id))
    mock_uow.sessions.get_by_token.return_value = bundle.session
    use_case = LogoutUseCase(mock_uow, services)

    rejected = await use_case.execute(bundle.session_token, csrf_token="forged", require_csrf=True)

    assert rejected.error.code == AuthErrorCode.CSRF_INVALID
    mock_uow.sessions.invalidate_by_id.assert_not_called()
    assert services.csrf_store.validate(str(bundle.session.id), csrf_token)
    assert event_types() == [SecurityEventType.logout]
    assert mock_uow.security_events.create.call_args.args[0].success is False

    accepted = await use_case.execute(bundle.session_token, csrf_token=csrf_token, require_csrf=True)

    assert accepted.is_ok()
    mock_uow.sessions.invalidate_by_id.assert_awaited_once_with(bundle.session.id)
