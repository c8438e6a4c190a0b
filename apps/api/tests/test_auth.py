import uuid

import jwt
import pytest

from uniform_admin.core.config import settings
from uniform_admin.core.deps import COOKIE_NAME
from uniform_admin.core.security import create_session_token, decode_session_token


def test_session_token_roundtrip():
    user_id = uuid.uuid4()
    token = create_session_token(user_id, "admin", 3)
    payload = decode_session_token(token)
    assert payload["sub"] == str(user_id)
    assert payload["role"] == "admin"
    assert payload["token_version"] == 3


def test_decode_accepts_previous_secret(monkeypatch):
    monkeypatch.setattr(settings, "JWT_SECRET", "old-secret")
    token = create_session_token(uuid.uuid4(), "admin", 1)

    monkeypatch.setattr(settings, "JWT_SECRET", "new-secret")
    monkeypatch.setattr(settings, "JWT_SECRET_PREVIOUS", "old-secret")
    assert decode_session_token(token)["role"] == "admin"

    monkeypatch.setattr(settings, "JWT_SECRET_PREVIOUS", "")
    with pytest.raises(jwt.InvalidTokenError):
        decode_session_token(token)


@pytest.mark.asyncio
async def test_me_requires_cookie(client):
    resp = await client.get("/auth/me")
    assert resp.status_code == 401


@pytest.mark.asyncio
async def test_me_returns_session_user(authed_client, test_auth):
    resp = await authed_client.get("/auth/me")
    assert resp.status_code == 200, resp.text
    data = resp.json()
    assert data["user_id"] == str(test_auth.user.id)
    assert data["role"] == "admin"
    assert data["can_review_requests"] is True


@pytest.mark.asyncio
async def test_revoked_token_is_rejected(db, authed_client, test_user):
    test_user.token_version += 1
    db.commit()

    resp = await authed_client.get("/auth/me")
    assert resp.status_code == 401
    assert resp.json()["detail"] == "Session revoked"


@pytest.mark.asyncio
async def test_unknown_role_is_forbidden(db, client, test_user):
    test_user.role = "intern"
    db.commit()
    token = create_session_token(test_user.id, "intern", test_user.token_version)

    resp = await client.get("/auth/me", cookies={COOKIE_NAME: token})
    assert resp.status_code == 403


@pytest.mark.asyncio
async def test_mutation_without_csrf_header_is_forbidden(client, test_auth):
    resp = await client.post(
        "/auth/logout",
        cookies={COOKIE_NAME: test_auth.token},
    )
    assert resp.status_code == 403
