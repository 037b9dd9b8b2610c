from datetime import timedelta

import pytest
import pytest_asyncio

from src.adapter.services.unit_of_work import SqlAlchemyUnitOfWork
from src.app.services.account_lockout_guard import AccountLockoutGuard
from src.app.services.password_hasher import PasswordHasher
from src.app.services.security_config import SecurityConfig
from src.app.services.session_manager import SessionManager
from src.app.services.token_manager import TokenManager
from src.domain.base import hash_token, utcnow
from src.domain.entities import (
    AccountLockout,
    PasswordResetToken,
    SecurityEvent,
    SecurityEventType,
    User,
)

CONFIG = SecurityConfig(jwt_secret="repo-test-secret", max_login_attempts=3)


@pytest.fixture
def hasher():
    return PasswordHasher(rounds=4)


@pytest_asyncio.fixture
async def uow(db_session, hasher):
    async with SqlAlchemyUnitOfWork(db_session, hasher) as uow:
        yield uow


@pytest_asyncio.fixture
async def user(uow, hasher):
    user = await uow.users.create(
        User(email="Quiz.Taker@quizschool.com", username="QuizTaker", password_hash=hasher.hash("S3cret&Pass"))
    )
    await uow.commit()
    return user


def session_manager(uow):
    token_manager = TokenManager(CONFIG.jwt_secret, CONFIG.jwt_issuer, CONFIG.jwt_audience)
    return SessionManager(uow, token_manager, CONFIG)


@pytest.mark.asyncio
async def test_user_lookups_are_case_insensitive(uow, user):
    assert (await uow.users.get_by_email("quiz.taker@QUIZSCHOOL.com")).id == user.id
    assert (await uow.users.get_by_username("quiztaker")).id == user.id
    assert await uow.users.get_by_email("someone.else@quizschool.com") is None


@pytest.mark.asyncio
async def test_verify_and_update_password(uow, user):
    assert await uow.users.verify_password(user.id, "S3cret&Pass")
    assert not await uow.users.verify_password(user.id, "wrong")

    await uow.users.update_password(user.id, "N3w&Secret!")

    assert await uow.users.verify_password(user.id, "N3w&Secret!")
    assert not await uow.users.verify_password(user.id, "S3cret&Pass")


@pytest.mark.asyncio
async def test_increment_failed_attempts_returns_stored_count(uow, user):
    counts = [await uow.users.increment_failed_attempts(user.id) for _ in range(3)]

    assert counts == [1, 2, 3]


@pytest.mark.asyncio
async def test_lockout_guard_locks_at_threshold_and_ignores_expired_locks(uow, user):
    guard = AccountLockoutGuard(uow, CONFIG)

    assert await guard.record_failure(user.id) is None
    assert await guard.record_failure(user.id) is None
    lockout = await guard.record_failure(user.id)
    await uow.commit()

    assert lockout is not None
    assert (await guard.is_locked(user.id)).id == lockout.id

    later = AccountLockoutGuard(uow, CONFIG, clock=lambda: utcnow() + timedelta(minutes=31))
    assert await later.is_locked(user.id) is None

    await guard.record_success(user.id)
    assert await guard.is_locked(user.id) is None
    assert (await uow.users.get_by_id(user.id)).failed_attempts == 0


@pytest.mark.asyncio
async def test_lock_replaces_previous_lock(uow, user):
    guard = AccountLockoutGuard(uow, CONFIG)
    first = await guard.lock(user.id, reason="admin_lock", duration_minutes=10)
    second = await guard.lock(user.id, reason="admin_lock", duration_minutes=60)

    assert (await guard.is_locked(user.id)).id == second.id
    assert await guard.unlock(user.id) == 1
    assert first.id != second.id


@pytest.mark.asyncio
async def test_session_lookup_and_compare_and_set_invalidate(uow, user):
    bundle = await session_manager(uow).create(user)
    await uow.commit()

    by_session = await uow.sessions.get_by_token(hash_token(bundle.session_token))
    by_access = await uow.sessions.get_by_token(hash_token(bundle.access_token))
    by_refresh = await uow.sessions.get_by_refresh_token(hash_token(bundle.refresh_token))
    assert by_session.id == by_access.id == by_refresh.id == bundle.session.id

    assert await uow.sessions.invalidate_by_id(bundle.session.id) is True
    assert await uow.sessions.invalidate_by_id(bundle.session.id) is False


@pytest.mark.asyncio
async def test_refresh_twice_with_same_token_fails_second_time(uow, user):
    manager = session_manager(uow)
    bundle = await manager.create(user)
    await uow.commit()

    first = await manager.refresh(bundle.refresh_token)
    second = await manager.refresh(bundle.refresh_token)

    assert first.is_ok()
    assert second.is_err()
    assert len(await uow.sessions.get_active_by_user_id(user.id)) == 1


@pytest.mark.asyncio
async def test_invalidate_all_keeps_one_session(uow, user):
    manager = session_manager(uow)
    keep = await manager.create(user)
    await manager.create(user)
    await manager.create(user)

    assert await uow.sessions.invalidate_all_by_user_id(user.id, except_session_id=keep.session.id) == 2
    active = await uow.sessions.get_active_by_user_id(user.id)
    assert [s.id for s in active] == [keep.session.id]


@pytest.mark.asyncio
async def test_delete_expired_sessions(uow, user):
    await session_manager(uow).create(user)

    assert await uow.sessions.delete_expired(utcnow()) == 0
    assert await uow.sessions.delete_expired(utcnow() + timedelta(days=8)) == 1


@pytest.mark.asyncio
async def test_reset_token_is_single_use(uow, user):
    row = await uow.password_reset_tokens.create(
        PasswordResetToken(
            user_id=user.id,
            token_hash=hash_token("reset-me"),
            expires_at=utcnow() + timedelta(hours=1),
        )
    )

    assert (await uow.password_reset_tokens.get_by_token_hash(hash_token("reset-me"))).id == row.id
    assert await uow.password_reset_tokens.mark_used(row.id) is True
    assert await uow.password_reset_tokens.mark_used(row.id) is False


@pytest.mark.asyncio
async def test_security_events_page_newest_first(uow, user):
    base = utcnow()
    for minutes, event_type in enumerate(
        [SecurityEventType.account_creation, SecurityEventType.login_failure, SecurityEventType.login_success]
    ):
        await uow.security_events.create(
            SecurityEvent(user_id=user.id, event_type=event_type, created_at=base + timedelta(minutes=minutes))
        )

    first, cursor = await uow.security_events.get_by_user_paginated(user.id, limit=2)
    second, last_cursor = await uow.security_events.get_by_user_paginated(user.id, limit=2, cursor=cursor)

    assert [e.event_type for e in first] == [SecurityEventType.login_success, SecurityEventType.login_failure]
    assert [e.event_type for e in second] == [SecurityEventType.account_creation]
    assert last_cursor is None

    restarted, _ = await uow.security_events.get_by_user_paginated(user.id, limit=2, cursor="%%%")
    assert [e.id for e in restarted] == [e.id for e in first]


@pytest.mark.asyncio
async def test_no_active_lock_until_one_is_created(uow, user):
    assert await uow.lockouts.get_active_by_user_id(user.id, utcnow()) is None

    lockout = await uow.lockouts.create(
        AccountLockout(user_id=user.id, locked_until=utcnow() + timedelta(minutes=1))
    )

    assert (await uow.lockouts.get_active_by_user_id(user.id, utcnow())).id == lockout.id
    assert await uow.lockouts.deactivate_all_by_user_id(user.id) == 1
