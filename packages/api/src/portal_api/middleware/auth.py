# This project was developed with assistance from AI tools.
"""
Bearer-token authentication against the Keycloak realm.

Tokens are RS256 JWTs verified with the realm's published signing keys. The
realm roles carry both the portal role and, for onboarding team members,
the sub-role that decides which board columns they see.

Set AUTH_DISABLED=true to bypass validation (tests / local dev without Keycloak).
"""

import logging
import time
from typing import Annotated

import httpx
import jwt
from fastapi import Depends, HTTPException, Request, status
from portal_db.enums import OnboardingSubRole, UserRole

from ..core.auth import build_data_scope
from ..core.config import settings
from ..schemas.auth import TokenPayload, UserContext

logger = logging.getLogger(__name__)


def _realm_url() -> str:
    return f"{settings.KEYCLOAK_URL}/realms/{settings.KEYCLOAK_REALM}"


class SigningKeys:
    """Realm signing keys by ``kid``.

    Refetched once the cache is older than ``JWKS_CACHE_TTL`` and again when a
    token names a key we have not seen, which covers key rotation.
    """

    def __init__(self):
        self._keys: dict[str, jwt.PyJWK] = {}
        self._fetched_at = 0.0

    def _stale(self) -> bool:
        return not self._keys or time.monotonic() - self._fetched_at > settings.JWKS_CACHE_TTL

    async def _refresh(self) -> None:
        url = f"{_realm_url()}/protocol/openid-connect/certs"
        async with httpx.AsyncClient(timeout=5) as client:
            response = await client.get(url)
            response.raise_for_status()
        key_set = jwt.PyJWKSet.from_dict(response.json())
        self._keys = {key.key_id: key for key in key_set.keys if key.key_id}
        self._fetched_at = time.monotonic()
        logger.info("Loaded %d signing keys from %s", len(self._keys), url)

    async def get(self, kid: str | None) -> jwt.PyJWK:
        if self._stale():
            await self._refresh()
        if kid not in self._keys:
            await self._refresh()
        try:
            return self._keys[kid]
        except KeyError:
            raise jwt.InvalidTokenError(f"No signing key for kid={kid}") from None


signing_keys = SigningKeys()


def _unauthorized(detail: str) -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail=detail,
        headers={"WWW-Authenticate": "Bearer"},
    )


def _bearer_token(request: Request) -> str | None:
    scheme, _, token = request.headers.get("Authorization", "").partition(" ")
    if scheme.lower() != "bearer" or not token.strip():
        return None
    return token.strip()


async def _decode_token(token: str) -> TokenPayload:
    try:
        kid = jwt.get_unverified_header(token).get("kid")
        key = await signing_keys.get(kid)
    except httpx.HTTPError as exc:
        logger.error("Could not load signing keys from Keycloak: %s", exc)
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
    return TokenPayload.model_validate(claims)


def _realm_roles(token_payload: TokenPayload) -> list[str]:
    return list(token_payload.realm_access.get("roles", []))


def _resolve_role(token_payload: TokenPayload) -> UserRole:
    """First portal role among the realm roles; more than one is logged."""
    known = {role.value for role in UserRole}
    roles = [UserRole(r) for r in _realm_roles(token_payload) if r in known]
    if not roles:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="No recognized role assigned",
        )
    if len(roles) > 1:
        logger.warning(
            "User %s holds roles %s; using %s",
            token_payload.sub,
            [r.value for r in roles],
            roles[0].value,
        )
    return roles[0]


def _resolve_sub_role(token_payload: TokenPayload) -> OnboardingSubRole | None:
    known = {sub.value for sub in OnboardingSubRole}
    for r in _realm_roles(token_payload):
        if r in known:
            return OnboardingSubRole(r)
    return None


_DISABLED_USER = UserContext(
    user_id="dev-user",
    role=UserRole.ADMIN,
    email="dev@onboarding.local",
    name="Dev User",
    data_scope=build_data_scope(UserRole.ADMIN),
)


async def get_current_user(request: Request) -> UserContext:
    """FastAPI dependency: the authenticated caller with their board scope."""
    if settings.AUTH_DISABLED:
        return _DISABLED_USER

    token = _bearer_token(request)
    if token is None:
        raise _unauthorized("Missing authentication token")

    try:
        payload = await _decode_token(token)
    except jwt.ExpiredSignatureError as exc:
        raise _unauthorized("Token has expired") from exc
    except jwt.InvalidTokenError as exc:
        raise _unauthorized("Invalid token") from exc

    role = _resolve_role(payload)
    sub_role = _resolve_sub_role(payload) if role == UserRole.ONBOARDING_TEAM else None
    return UserContext(
        user_id=payload.sub,
        role=role,
        sub_role=sub_role,
        email=payload.email.strip().lower(),
        name=payload.name or payload.preferred_username or payload.email,
        data_scope=build_data_scope(role, sub_role),
    )


CurrentUser = Annotated[UserContext, Depends(get_current_user)]


def require_roles(*allowed_roles: UserRole):
    """Dependency factory restricting a route to ``allowed_roles``."""

    async def _check(user: CurrentUser) -> UserContext:
        if user.role not in allowed_roles:
            logger.warning(
                "RBAC denied: user=%s role=%s needs one of %s",
                user.user_id,
                user.role.value,
                [r.value for r in allowed_roles],
            )
            raise HTTPException(
                status_code=status.HTTP_403_FORBIDDEN,
                detail="Insufficient permissions",
            )
        return user

    return _check


async def require_board_access(user: CurrentUser) -> UserContext:
    """Dependency: the caller must see at least one board column."""
    if not user.data_scope.visible_statuses:
        logger.warning(
            "Board access denied: user=%s role=%s sub_role=%s",
            user.user_id,
            user.role.value,
            user.sub_role.value if user.sub_role else None,
        )
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Your role has no access to the onboarding board",
        )
    return user
