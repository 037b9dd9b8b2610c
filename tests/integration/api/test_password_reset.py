import pytest
from httpx import AsyncClient

from src.app.services.password_reset_notifier import PasswordResetNotifier


class RecordingNotifier(PasswordResetNotifier):
    def __init__(self):
        self.sent = []

    async def send_reset_token(self, user, token):
        self.sent.append((user.email, token))


@pytest.fixture
def notifier(services):
    notifier = RecordingNotifier()
    services.reset_notifier = notifier
    return notifier


def bearer(token):
    return {"Authorization": f"Bearer {token}"}


@pytest.mark.asyncio
async def test_password_reset_flow(client: AsyncClient, signup, login, notifier):
    """Password reset

    Given a user with an active session
    When they request a reset and confirm it with a strong password
    Then their sessions are revoked and only the new password works
    And the reset token cannot be used twice
    """
    await signup()
    session_token = (await login()).json()["session_token"]

    requested = await client.post(
        "/auth/request-password-reset", json={"email": "learner@quizschool.com"}
    )
    assert requested.status_code == 200
    assert notifier.sent[0][0] == "learner@quizschool.com"
    token = notifier.sent[0][1]

    weak = await client.post(
        "/auth/confirm-password-reset", json={"token": token, "new_password": "weak"}
    )
    assert weak.status_code == 400
    assert weak.json()["error"]["code"] == "WEAK_PASSWORD"
    assert weak.json()["error"]["details"]["feedback"]

    confirmed = await client.post(
        "/auth/confirm-password-reset", json={"token": token, "new_password": "Reset&Again2026"}
    )
    assert confirmed.status_code == 200
    assert confirmed.json()["sessions_revoked"] == 1

    session = await client.get("/auth/session", headers=bearer(session_token))
    assert session.json()["valid"] is False
    assert (await login()).status_code == 401
    assert (await login(password="Reset&Again2026")).status_code == 200

    reused = await client.post(
        "/auth/confirm-password-reset", json={"token": token, "new_password": "Another&One2026"}
    )
    assert reused.status_code == 400
    assert reused.json()["error"]["code"] == "TOKEN_ALREADY_USED"


@pytest.mark.asyncio
async def test_unknown_email_gets_same_response(client: AsyncClient, signup, notifier):
    await signup()

    known = await client.post("/auth/request-password-reset", json={"email": "learner@quizschool.com"})
    unknown = await client.post("/auth/request-password-reset", json={"email": "nobody@quizschool.com"})

    assert unknown.status_code == 200
    assert unknown.json() == known.json()
    assert len(notifier.sent) == 1


@pytest.mark.asyncio
async def test_unknown_reset_token(client: AsyncClient):
    response = await client.post(
        "/auth/confirm-password-reset", json={"token": "not-a-token", "new_password": "Reset&Again2026"}
    )

    assert response.status_code == 400
    assert response.json()["error"]["code"] == "INVALID_TOKEN"


@pytest.mark.asyncio
async def test_reset_requests_are_rate_limited(client: AsyncClient, signup, notifier):
    await signup()

    for _ in range(3):
        response = await client.post(
            "/auth/request-password-reset", json={"email": "learner@quizschool.com"}
        )
        assert response.status_code == 200

    response = await client.post("/auth/request-password-reset", json={"email": "learner@quizschool.com"})

    assert response.status_code == 429
    assert "Retry-After" in response.headers
