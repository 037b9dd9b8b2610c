from datetime import UTC, datetime, timedelta

from jose import jwt

from src.app.services.token_manager import AccessTokenClaims, TokenManager
from src.domain.entities import AuthErrorCode

SECRET = "unit-test-secret"


def make_manager(**overrides):
    options = dict(secret=SECRET, issuer="tutor-auth", audience="tutor-app")
    options.update(overrides)
    return TokenManager(**options)


def make_claims():
    return AccessTokenClaims(user_id="4b8f0b5e-0000-4000-8000-000000000001", role="student", email="kid@quizschool.com")


def test_access_token_round_trip():
    manager = make_manager()
    claims = make_claims()

    pair = manager.issue(claims)
    result = manager.verify_access(pair.access_token)

    assert result.is_ok()
    assert result.value == claims
    assert pair.expires_in == 15 * 60


def test_refresh_token_carries_only_user_id():
    manager = make_manager()
    pair = manager.issue(make_claims())

    payload = jwt.get_unverified_claims(pair.refresh_token)
    assert payload["type"] == "refresh"
    assert "email" not in payload
    assert "role" not in payload

    result = manager.verify_refresh(pair.refresh_token)
    assert result.is_ok()
    assert result.value.user_id == make_claims().user_id


def test_token_types_are_not_interchangeable():
    manager = make_manager()
    pair = manager.issue(make_claims())

    as_refresh = manager.verify_refresh(pair.access_token)
    as_access = manager.verify_access(pair.refresh_token)

    assert as_refresh.is_err()
    assert as_refresh.error.code == AuthErrorCode.WRONG_TOKEN_TYPE
    assert as_access.is_err()
    assert as_access.error.code == AuthErrorCode.WRONG_TOKEN_TYPE


def test_tokens_issued_in_same_second_differ():
    manager = make_manager()

    first = manager.issue(make_claims())
    second = manager.issue(make_claims())

    assert first.access_token != second.access_token
    assert first.refresh_token != second.refresh_token


def test_expired_token_is_reported_as_expired():
    manager = make_manager(access_ttl_minutes=-1)
    pair = manager.issue(make_claims())

    result = manager.verify_access(pair.access_token)

    assert result.is_err()
    assert result.error.code == AuthErrorCode.TOKEN_EXPIRED


def test_token_signed_with_other_secret_is_invalid():
    pair = make_manager(secret="some-other-secret").issue(make_claims())

    result = make_manager().verify_access(pair.access_token)

    assert result.is_err()
    assert result.error.code == AuthErrorCode.INVALID_TOKEN


def test_malformed_token_is_invalid():
    result = make_manager().verify_access("not-a-jwt")

    assert result.is_err()
    assert result.error.code == AuthErrorCode.INVALID_TOKEN


def test_foreign_audience_is_rejected():
    pair = make_manager(audience="another-app").issue(make_claims())

    result = make_manager().verify_access(pair.access_token)

    assert result.is_err()
    assert result.error.code == AuthErrorCode.INVALID_TOKEN


def test_token_without_issuer_and_audience_is_accepted():
    payload = {
        "user_id": "4b8f0b5e-0000-4000-8000-000000000001",
        "role": "teacher",
        "email": "teacher@quizschool.com",
        "type": "access",
        "exp": datetime.now(UTC) + timedelta(minutes=5),
    }
    token = jwt.encode(payload, SECRET, algorithm="HS256")

    result = make_manager().verify_access(token)

    assert result.is_ok()
    assert result.value.role == "teacher"
