# This project was developed with assistance from AI tools.
"""Tests for JWT authentication middleware."""

import time

import jwt
import pytest
from fastapi import Depends, FastAPI, HTTPException
from fastapi.testclient import TestClient
from portal_db.enums import OnboardingSubRole, UserRole

from factories import make_user
from portal_api.core.config import settings
from portal_api.middleware.auth import (
    CurrentUser,
    SigningKeys,
    _resolve_role,
    _resolve_sub_role,
    get_current_user,
    require_board_access,
    require_roles,
)
from portal_api.schemas.auth import TokenPayload

# ---------------------------------------------------------------------------
# AUTH_DISABLED bypass
# ---------------------------------------------------------------------------


def test_auth_disabled_returns_dev_admin(monkeypatch):
    """When AUTH_DISABLED=true, any request gets a dev admin user."""
    monkeypatch.setattr(settings, "AUTH_DISABLED", True)

    app = FastAPI()

    @app.get("/me")
    async def me(user: CurrentUser):
        return {"user_id": user.user_id, "role": user.role.value, "email": user.email}

    resp = TestClient(app).get("/me")
    assert resp.status_code == 200
    body = resp.json()
    assert body["user_id"] == "dev-user"
    assert body["role"] == "admin"
    assert body["email"] == "dev@onboarding.local"


# ---------------------------------------------------------------------------
# Missing / malformed token
# ---------------------------------------------------------------------------


def test_missing_token_returns_401(monkeypatch):
    """A request with no Authorization header should get 401."""
    monkeypatch.setattr(settings, "AUTH_DISABLED", False)

    app = FastAPI()

    @app.get("/me")
    async def me(user: CurrentUser):
        return {}

    resp = TestClient(app).get("/me")
    assert resp.status_code == 401
    assert "Missing authentication token" in resp.json()["detail"]


def test_non_bearer_header_treated_as_missing(monkeypatch):
    monkeypatch.setattr(settings, "AUTH_DISABLED", False)

    app = FastAPI()

    @app.get("/me")
    async def me(user: CurrentUser):
        return {}

    resp = TestClient(app).get("/me", headers={"Authorization": "Basic abc"})
    assert resp.status_code == 401


# ---------------------------------------------------------------------------
# Role resolution
# ---------------------------------------------------------------------------


def test_resolve_role_picks_known_role():
    """_resolve_role returns the first known role from token claims."""
    payload = TokenPayload(
        sub="user-1",
        realm_access={"roles": ["offline_access", "team_lead", "uma_authorization"]},
    )
    assert _resolve_role(payload) == UserRole.TEAM_LEAD


def test_resolve_role_no_known_role_is_forbidden():
    payload = TokenPayload(
        sub="user-1",
        realm_access={"roles": ["offline_access", "uma_authorization"]},
    )
    with pytest.raises(HTTPException) as exc_info:
        _resolve_role(payload)
    assert exc_info.value.status_code == 403
    assert exc_info.value.detail == "No recognized role assigned"


def test_resolve_sub_role_reads_realm_roles():
    payload = TokenPayload(
        sub="user-1",
        realm_access={"roles": ["onboarding_team", "linkedin_and_cover_letter_optimization"]},
    )
    assert _resolve_sub_role(payload) == OnboardingSubRole.LINKEDIN_AND_COVER_LETTER_OPTIMIZATION


def test_resolve_sub_role_absent():
    payload = TokenPayload(sub="user-1", realm_access={"roles": ["csm"]})
    assert _resolve_sub_role(payload) is None


# ---------------------------------------------------------------------------
# require_roles / require_board_access dependencies
# ---------------------------------------------------------------------------


def test_require_roles_rejects_wrong_role(monkeypatch):
    """require_roles returns 403 when user's role is not in allowed set."""
    monkeypatch.setattr(settings, "AUTH_DISABLED", True)

    app = FastAPI()

    @app.get("/leads-only", dependencies=[Depends(require_roles(UserRole.TEAM_LEAD))])
    async def leads_only(user: CurrentUser):
        return {"ok": True}

    # dev-user is admin, not team lead
    resp = TestClient(app).get("/leads-only")
    assert resp.status_code == 403
    assert "Insufficient permissions" in resp.json()["detail"]


def _board_app(user):
    app = FastAPI()

    @app.get("/board", dependencies=[Depends(require_board_access)])
    async def board():
        return {"ok": True}

    async def fake_user():
        return user

    app.dependency_overrides[get_current_user] = fake_user
    return TestClient(app)


def test_board_access_allowed_for_resume_maker():
    user = make_user(UserRole.ONBOARDING_TEAM, OnboardingSubRole.RESUME_MAKER, "rita@portal.test")
    assert _board_app(user).get("/board").status_code == 200


def test_board_access_denied_without_columns():
    user = make_user(
        UserRole.ONBOARDING_TEAM, OnboardingSubRole.COVER_LETTER_WRITER, "cole@portal.test"
    )
    resp = _board_app(user).get("/board")
    assert resp.status_code == 403
    assert "no access to the onboarding board" in resp.json()["detail"]


def test_board_access_denied_for_onboarding_team_without_sub_role():
    user = make_user(UserRole.ONBOARDING_TEAM, None, "nobody@portal.test")
    assert _board_app(user).get("/board").status_code == 403


def test_malformed_token_returns_401(monkeypatch):
    monkeypatch.setattr(settings, "AUTH_DISABLED", False)

    app = FastAPI()

    @app.get("/me")
    async def me(user: CurrentUser):
        return {}

    resp = TestClient(app).get("/me", headers={"Authorization": "Bearer not-a-jwt"})
    assert resp.status_code == 401
    assert resp.json()["detail"] == "Invalid token"
    assert resp.headers["WWW-Authenticate"] == "Bearer"


async def test_signing_keys_refetch_for_unknown_kid(monkeypatch):
    fetches = []

    async def fake_refresh(self):
        fetches.append(1)
        self._keys = {"k1": "key-one"} if len(fetches) == 1 else {"k2": "key-two"}
        self._fetched_at = time.monotonic()

    monkeypatch.setattr(SigningKeys, "_refresh", fake_refresh)
    keys = SigningKeys()

    assert await keys.get("k1") == "key-one"
    assert await keys.get("k1") == "key-one"
    assert len(fetches) == 1

    assert await keys.get("k2") == "key-two"
    assert len(fetches) == 2

    with pytest.raises(jwt.InvalidTokenError):
        await keys.get("k3")
