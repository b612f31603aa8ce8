# This project was developed with assistance from AI tools.
"""Keycloak bearer-token authentication and role checks.

Each request carries an RS256 access token issued by the loanflow realm.
The token's realm roles decide which approval stage the caller speaks
for; a user holding several stage roles acts as the most senior one.

With AUTH_DISABLED set, every request runs as the development user
(AUTH_DEV_USER_ID / AUTH_DEV_ROLE), so the approval chain can be walked
locally without Keycloak by switching the role.
"""

import logging
import time
from typing import Annotated

import httpx
import jwt
from db.enums import UserRole
from fastapi import Depends, HTTPException, Request, status

from ..core.auth import build_data_scope
from ..core.config import settings
from ..schemas.auth import TokenPayload, UserContext

logger = logging.getLogger(__name__)

# Most senior first; a user with several roles acts as the first one held.
_ROLE_PRECEDENCE = (
    UserRole.CEO,
    UserRole.CHAIRPERSON,
    UserRole.DIRECTOR,
    UserRole.MANAGER,
    UserRole.FIELD_OFFICER,
    UserRole.ADMIN,
)


def _realm_url() -> str:
    return f"{settings.KEYCLOAK_URL}/realms/{settings.KEYCLOAK_REALM}"


class SigningKeyCache:
    """Realm signing keys by ``kid``.

    Keys are refetched once JWKS_CACHE_TTL has passed, and whenever a token
    names a ``kid`` we have not seen, which is how key rotation shows up.
    """

    def __init__(self) -> None:
        self._keys: dict[str, jwt.PyJWK] = {}
        self._fetched_at = 0.0

    def _refresh(self) -> None:
        response = httpx.get(f"{_realm_url()}/protocol/openid-connect/certs", timeout=5)
        response.raise_for_status()
        try:
            jwk_set = jwt.PyJWKSet.from_dict(response.json())
        except jwt.PyJWKSetError:
            logger.error("Realm %s published no usable signing keys", settings.KEYCLOAK_REALM)
            self._keys = {}
        else:
            self._keys = {key.key_id: key for key in jwk_set.keys}
        self._fetched_at = time.monotonic()

    def key_for(self, kid: str | None) -> jwt.PyJWK:
        expired = time.monotonic() - self._fetched_at > settings.JWKS_CACHE_TTL
        if expired or kid not in self._keys:
            self._refresh()
        key = self._keys.get(kid)
        if key is None:
            raise jwt.InvalidTokenError(f"Unknown signing key {kid!r}")
        return key


_signing_keys = SigningKeyCache()


def _bearer_token(request: Request) -> str | None:
    scheme, _, token = request.headers.get("Authorization", "").partition(" ")
    if scheme.lower() != "bearer" or not token.strip():
        return None
    return token.strip()


def _decode_token(token: str) -> TokenPayload:
    """Verify signature, expiry and issuer, and return the claims.

    Raises:
        jwt.InvalidTokenError: If the token is malformed, expired or forged.
        HTTPException: 503 if the realm's keys cannot be fetched.
    """
    kid = jwt.get_unverified_header(token).get("kid")
    try:
        key = _signing_keys.key_for(kid)
    except httpx.HTTPError as exc:
        logger.error("Could not fetch signing keys from Keycloak: %s", exc)
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="Authentication service unavailable",
        ) from exc

    claims = jwt.decode(
        token,
        key.key,
        algorithms=["RS256"],
        issuer=_realm_url(),
        options={"verify_aud": False},
    )
    return TokenPayload(**claims)


def _normalize_role(name: str) -> str:
    # Keycloak realms often spell roles "Field-Officer"
    return name.strip().lower().replace("-", "_")


def _resolve_role(payload: TokenPayload) -> UserRole:
    """The most senior loanflow role among the token's realm roles.

    Keycloak built-ins such as ``offline_access`` are ignored.

    Raises:
        ValueError: If the token carries no loanflow role.
    """
    granted = {_normalize_role(r) for r in payload.realm_access.get("roles", []) if isinstance(r, str)}
    held = [role for role in _ROLE_PRECEDENCE if role.value in granted]
    if not held:
        raise ValueError("No recognized role assigned")
    if len(held) > 1:
        logger.info(
            "User %s holds %s; acting as %s",
            payload.sub,
            [r.value for r in held],
            held[0].value,
        )
    return held[0]


def _display_name(payload: TokenPayload) -> str:
    """Name recorded against the user's workflow decisions."""
    return payload.name or payload.preferred_username or payload.email or payload.sub


def _dev_user() -> UserContext:
    role = settings.AUTH_DEV_ROLE
    user_id = settings.AUTH_DEV_USER_ID
    return UserContext(
        user_id=user_id,
        role=role,
        email="dev@loanflow.local",
        name=f"Dev {role.value.replace('_', ' ').title()}",
        data_scope=build_data_scope(role, user_id),
    )


def _unauthorized(detail: str) -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail=detail,
        headers={"WWW-Authenticate": "Bearer"},
    )


async def get_current_user(request: Request) -> UserContext:
    """FastAPI dependency: the authenticated caller, with role and data scope."""
    if settings.AUTH_DISABLED:
        return _dev_user()

    token = _bearer_token(request)
    if token is None:
        raise _unauthorized("Missing authentication token")

    try:
        payload = _decode_token(token)
    except jwt.ExpiredSignatureError as exc:
        raise _unauthorized("Token has expired") from exc
    except jwt.InvalidTokenError as exc:
        logger.info("Rejected token: %s", exc)
        raise _unauthorized("Invalid token") from exc

    try:
        role = _resolve_role(payload)
    except ValueError as exc:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail=str(exc)) from exc

    return UserContext(
        user_id=payload.sub,
        role=role,
        email=payload.email,
        name=_display_name(payload),
        data_scope=build_data_scope(role, payload.sub),
    )


CurrentUser = Annotated[UserContext, Depends(get_current_user)]


def require_roles(*allowed_roles: UserRole):
    """Route dependency admitting only callers whose role is in ``allowed_roles``."""
    allowed = frozenset(allowed_roles)

    async def _check(request: Request, user: CurrentUser) -> UserContext:
        if user.role not in allowed:
            logger.warning(
                "RBAC denied: user=%s role=%s on %s %s",
                user.user_id,
                user.role.value,
                request.method,
                request.url.path,
            )
            raise HTTPException(
                status_code=status.HTTP_403_FORBIDDEN,
                detail="Insufficient permissions",
            )
        return user

    return _check
