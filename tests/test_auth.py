# This project was developed with assistance from AI tools.
"""Tests for JWT authentication and actor resolution."""

from unittest.mock import AsyncMock

import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient

from permit_api.core.config import settings
from permit_api.middleware.auth import CurrentUser, get_actor
from permit_api.schemas.auth import UserContext

from .builders import OWNER, make_user


def _me_app() -> FastAPI:
    app = FastAPI()

    @app.get("/me")
    async def me(user: CurrentUser):
        return {"user_id": user.user_id}

    return app


def test_auth_disabled_returns_dev_user(monkeypatch):
    monkeypatch.setattr(settings, "AUTH_DISABLED", True)

    resp = TestClient(_me_app()).get("/me")

    assert resp.status_code == 200
    assert resp.json() == {"user_id": "dev-user"}


def test_missing_token_returns_401(monkeypatch):
    monkeypatch.setattr(settings, "AUTH_DISABLED", False)

    resp = TestClient(_me_app()).get("/me")

    assert resp.status_code == 401
    assert "Missing authentication token" in resp.json()["detail"]


def test_malformed_token_returns_401(monkeypatch):
    monkeypatch.setattr(settings, "AUTH_DISABLED", False)

    resp = TestClient(_me_app()).get("/me", headers={"Authorization": "Bearer not-a-jwt"})

    assert resp.status_code == 401
    assert resp.json()["detail"] == "Invalid token"


# ---------------------------------------------------------------------------
# Actor resolution
# ---------------------------------------------------------------------------

_USER = UserContext(user_id=OWNER, email="a@example.com", name="A")


@pytest.mark.asyncio
async def test_actor_reads_identity_verification():
    session = AsyncMock()
    session.get = AsyncMock(return_value=make_user(OWNER, verified=True))

    actor = await get_actor(_USER, session)

    assert actor.user_id == OWNER
    assert actor.identity_verified is True


@pytest.mark.asyncio
async def test_actor_without_user_row_is_unverified():
    session = AsyncMock()
    session.get = AsyncMock(return_value=None)

    actor = await get_actor(_USER, session)

    assert actor.identity_verified is False
