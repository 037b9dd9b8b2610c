from uuid import uuid4

import pytest
from httpx import AsyncClient


def bearer(token):
    return {"Authorization": f"Bearer {token}"}


@pytest.mark.asyncio
async def test_admin_endpoints_require_api_key(client: AsyncClient):
    user_id = uuid4()

    missing = await client.post(f"/admin/users/{user_id}/lock")
    wrong = await client.post(
        f"/admin/users/{user_id}/lock", headers={"X-Admin-API-Key": "wrong-key"}
    )

    assert missing.status_code == 401
    assert missing.json()["error"]["code"] == "UNAUTHORIZED"
    assert wrong.status_code == 401
    assert wrong.json()["error"]["code"] == "INVALID_API_KEY"


@pytest.mark.asyncio
async def test_lock_revokes_sessions_and_blocks_login(
    client: AsyncClient, signup, login, admin_headers
):
    user = await signup()
    tokens = (await login()).json()

    response = await client.post(
        f"/admin/users/{user['id']}/lock",
        json={"reason": "suspicious_activity", "duration_minutes": 60},
        headers=admin_headers,
    )

    assert response.status_code == 200
    data = response.json()
    assert data["status"] == "locked"
    assert data["sessions_revoked"] == 1

    session = await client.get("/auth/session", headers=bearer(tokens["session_token"]))
    assert session.json()["valid"] is False

    blocked = await login()
    assert blocked.status_code == 423

    unlocked = await client.post(f"/admin/users/{user['id']}/unlock", headers=admin_headers)
    assert unlocked.json()["locks_cleared"] == 1
    assert (await login()).status_code == 200


@pytest.mark.asyncio
async def test_unlock_is_idempotent(client: AsyncClient, signup, admin_headers):
    user = await signup()

    response = await client.post(f"/admin/users/{user['id']}/unlock", headers=admin_headers)

    assert response.status_code == 200
    assert response.json()["locks_cleared"] == 0


@pytest.mark.asyncio
async def test_unknown_user(client: AsyncClient, admin_headers):
    response = await client.post(f"/admin/users/{uuid4()}/lock", headers=admin_headers)

    assert response.status_code == 404
    assert response.json()["error"]["code"] == "USER_NOT_FOUND"


@pytest.mark.asyncio
async def test_security_events_are_paginated_newest_first(
    client: AsyncClient, signup, login, admin_headers
):
    user = await signup()
    await login(password="WrongPassword1!")
    await login()

    first_page = await client.get(
        f"/admin/users/{user['id']}/security-events", params={"limit": 2}, headers=admin_headers
    )
    assert first_page.status_code == 200
    page = first_page.json()
    assert [e["event_type"] for e in page["events"]] == ["login_success", "login_failure"]
    assert page["events"][0]["ip_address"] == "127.0.0.1"
    assert page["next_cursor"]

    second_page = await client.get(
        f"/admin/users/{user['id']}/security-events",
        params={"limit": 2, "cursor": page["next_cursor"]},
        headers=admin_headers,
    )
    rest = second_page.json()
    assert [e["event_type"] for e in rest["events"]] == ["account_creation"]
    assert rest["next_cursor"] is None
