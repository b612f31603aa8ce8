# This project was developed with assistance from AI tools.
"""Tests for JWT authentication middleware."""

import time
from unittest.mock import MagicMock

import httpx
import jwt
import pytest
from cryptography.hazmat.primitives.asymmetric import rsa
from db.enums import UserRole
from fastapi import Depends, FastAPI
from fastapi.testclient import TestClient
from jwt.algorithms import RSAAlgorithm

from src.core.config import settings
from src.middleware import auth as auth_module
from src.middleware.auth import CurrentUser, _resolve_role, require_roles
from src.schemas.auth import TokenPayload

# ---------------------------------------------------------------------------
# AUTH_DISABLED bypass
# ---------------------------------------------------------------------------


def test_auth_disabled_returns_dev_admin(monkeypatch):
    """When AUTH_DISABLED=true, any request gets a dev admin user."""
    monkeypatch.setattr(settings, "AUTH_DISABLED", True)

    app = FastAPI()

    @app.get("/me")
    async def me(user: CurrentUser):
        return {"user_id": user.user_id, "role": user.role.value}

    test_client = TestClient(app)
    resp = test_client.get("/me")
    assert resp.status_code == 200
    body = resp.json()
    assert body["user_id"] == "dev-user"
    assert body["role"] == "admin"


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

    test_client = TestClient(app)
    resp = test_client.get("/me")
    assert resp.status_code == 401
    assert "Missing authentication token" in resp.json()["detail"]


# ---------------------------------------------------------------------------
# Role resolution
# ---------------------------------------------------------------------------


def test_resolve_role_picks_known_role():
    """Keycloak built-in roles are ignored."""
    payload = TokenPayload(
        sub="user-1",
        realm_access={"roles": ["offline_access", "director", "uma_authorization"]},
    )
    role = _resolve_role(payload)
    assert role == UserRole.DIRECTOR


def test_resolve_role_no_known_role_raises_value_error():
    """_resolve_role raises ValueError when no recognized roles are present."""
    payload = TokenPayload(
        sub="user-1",
        realm_access={"roles": ["offline_access", "uma_authorization"]},
    )

    with pytest.raises(ValueError, match="No recognized role assigned"):
        _resolve_role(payload)


def test_user_role_maps_to_workflow_role():
    assert UserRole.CHAIRPERSON.workflow_role.value == "chairperson"
    assert UserRole.ADMIN.workflow_role is None


# ---------------------------------------------------------------------------
# require_roles dependency
# ---------------------------------------------------------------------------


def test_require_roles_rejects_wrong_role(monkeypatch):
    """require_roles returns 403 when user's role is not in allowed set."""
    monkeypatch.setattr(settings, "AUTH_DISABLED", True)

    app = FastAPI()

    check_ceo = require_roles(UserRole.CEO)

    @app.get("/ceo-only", dependencies=[Depends(check_ceo)])
    async def ceo_only(user: CurrentUser):
        return {"ok": True}

    test_client = TestClient(app)
    # dev-user is admin, not ceo
    resp = test_client.get("/ceo-only")
    assert resp.status_code == 403
    assert "Insufficient permissions" in resp.json()["detail"]


def test_require_roles_allows_listed_role(monkeypatch):
    monkeypatch.setattr(settings, "AUTH_DISABLED", True)

    app = FastAPI()

    @app.get("/staff", dependencies=[Depends(require_roles(UserRole.ADMIN, UserRole.MANAGER))])
    async def staff(user: CurrentUser):
        return {"ok": True}

    resp = TestClient(app).get("/staff")
    assert resp.status_code == 200


def test_dev_user_takes_configured_role(monkeypatch):
    """AUTH_DEV_ROLE lets a developer act as any stage locally."""
    monkeypatch.setattr(settings, "AUTH_DISABLED", True)
    monkeypatch.setattr(settings, "AUTH_DEV_ROLE", UserRole.FIELD_OFFICER)

    app = FastAPI()

    @app.get("/me")
    async def me(user: CurrentUser):
        return {"role": user.role.value, "own_only": user.data_scope.own_submissions_only}

    body = TestClient(app).get("/me").json()
    assert body == {"role": "field_officer", "own_only": True}


# ---------------------------------------------------------------------------
# Role normalization and seniority
# ---------------------------------------------------------------------------


@pytest.mark.parametrize(
    "roles,expected",
    [
        (["Field-Officer"], UserRole.FIELD_OFFICER),
        (["MANAGER", "uma_authorization"], UserRole.MANAGER),
        (["manager", "ceo"], UserRole.CEO),
        (["ceo", "manager"], UserRole.CEO),
        (["admin", "director"], UserRole.DIRECTOR),
    ],
)
def test_resolve_role_normalizes_and_prefers_senior(roles, expected):
    payload = TokenPayload(sub="user-1", realm_access={"roles": roles})
    assert _resolve_role(payload) == expected


# ---------------------------------------------------------------------------
# Signed tokens against a stubbed realm
# ---------------------------------------------------------------------------

_KID = "realm-key-1"


@pytest.fixture
def realm(monkeypatch):
    """Serve a freshly generated RSA key as the realm's JWKS."""
    monkeypatch.setattr(settings, "AUTH_DISABLED", False)
    private_key = rsa.generate_private_key(public_exponent=65537, key_size=2048)
    jwk = RSAAlgorithm.to_jwk(private_key.public_key(), as_dict=True)
    jwk.update(kid=_KID, use="sig", alg="RS256")

    response = MagicMock()
    response.json.return_value = {"keys": [jwk]}
    fetch = MagicMock(return_value=response)
    monkeypatch.setattr(auth_module.httpx, "get", fetch)
    monkeypatch.setattr(auth_module, "_signing_keys", auth_module.SigningKeyCache())
    return private_key, fetch


def _token(private_key, kid=_KID, expires_in=300, **claims):
    body = {
        "sub": "kc-ruth",
        "iss": f"{settings.KEYCLOAK_URL}/realms/{settings.KEYCLOAK_REALM}",
        "exp": int(time.time()) + expires_in,
        "realm_access": {"roles": ["offline_access", "director"]},
        **claims,
    }
    return jwt.encode(body, private_key, algorithm="RS256", headers={"kid": kid})


def _whoami_client():
    app = FastAPI()

    @app.get("/me")
    async def me(user: CurrentUser):
        return {"user_id": user.user_id, "role": user.role.value, "name": user.name}

    return TestClient(app)


def test_valid_token_resolves_user(realm):
    private_key, _ = realm
    token = _token(private_key, name="Ruth Namata")
    resp = _whoami_client().get("/me", headers={"Authorization": f"Bearer {token}"})
    assert resp.status_code == 200
    assert resp.json() == {"user_id": "kc-ruth", "role": "director", "name": "Ruth Namata"}


def test_lowercase_scheme_accepted(realm):
    private_key, _ = realm
    resp = _whoami_client().get("/me", headers={"Authorization": f"bearer {_token(private_key)}"})
    assert resp.status_code == 200


@pytest.mark.parametrize(
    "claims,expected",
    [
        ({"preferred_username": "rnamata"}, "rnamata"),
        ({"email": "ruth@loanflow.example"}, "ruth@loanflow.example"),
        ({}, "kc-ruth"),
    ],
)
def test_display_name_falls_back(realm, claims, expected):
    private_key, _ = realm
    token = _token(private_key, **claims)
    resp = _whoami_client().get("/me", headers={"Authorization": f"Bearer {token}"})
    assert resp.json()["name"] == expected


def test_signing_keys_are_cached(realm):
    private_key, fetch = realm
    client = _whoami_client()
    for _ in range(3):
        resp = client.get("/me", headers={"Authorization": f"Bearer {_token(private_key)}"})
        assert resp.status_code == 200
    assert fetch.call_count == 1


def test_unknown_kid_refetches_then_rejects(realm):
    private_key, fetch = realm
    token = _token(private_key, kid="rotated-away")
    resp = _whoami_client().get("/me", headers={"Authorization": f"Bearer {token}"})
    assert resp.status_code == 401
    assert resp.json()["detail"] == "Invalid token"
    assert fetch.call_count == 1


def test_expired_token_returns_401(realm):
    private_key, _ = realm
    token = _token(private_key, expires_in=-60)
    resp = _whoami_client().get("/me", headers={"Authorization": f"Bearer {token}"})
    assert resp.status_code == 401
    assert resp.json()["detail"] == "Token has expired"


def test_token_without_loanflow_role_returns_403(realm):
    private_key, _ = realm
    token = _token(private_key, realm_access={"roles": ["offline_access"]})
    resp = _whoami_client().get("/me", headers={"Authorization": f"Bearer {token}"})
    assert resp.status_code == 403
    assert resp.json()["detail"] == "No recognized role assigned"


def test_unreachable_realm_returns_503(realm):
    private_key, fetch = realm
    fetch.side_effect = httpx.ConnectError("connection refused")
    resp = _whoami_client().get("/me", headers={"Authorization": f"Bearer {_token(private_key)}"})
    assert resp.status_code == 503
