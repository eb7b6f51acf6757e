"""
envelope_gate.auth.identity

Identity service boundary.

Responsibilities:
- Define the `IdentityService` protocol consumed by the verifier.
- Provide a local HS256 implementation and a remote JWKS-backed implementation.
- Normalize every provider failure (bad token, unknown key, network) into
  `IdentityServiceError`.

Note:
- Timeouts are imposed here, at the transport boundary (httpx client), never in the
  verifier or the envelope.
"""

from __future__ import annotations

import asyncio
import time
from collections.abc import Sequence
from typing import Any, Protocol

import httpx
import jwt
from jwt import InvalidTokenError, PyJWKSet
from jwt.exceptions import PyJWKError, PyJWKSetError

from envelope_gate.auth.jwt import (
    REQUIRED_CLAIMS,
    JwtConfig,
    JwtValidationError,
    decode_and_validate,
)
from envelope_gate.observability.logging import get_logger
from envelope_gate.settings import Settings

log = get_logger(__name__)


class IdentityServiceError(Exception):
    pass


class IdentityService(Protocol):
    async def verify_token(self, token: str) -> dict[str, Any]: ...


class JwtIdentityService:
    """
    Validates locally issued HS256 tokens.
    """

    def __init__(self, *, cfg: JwtConfig) -> None:
        self._cfg = cfg

    async def verify_token(self, token: str) -> dict[str, Any]:
        try:
            return decode_and_validate(cfg=self._cfg, token=token)
        except JwtValidationError as e:
            raise IdentityServiceError(str(e)) from e


class JwksIdentityService:
    """
    Validates tokens signed by a remote identity provider publishing a JWKS document.

    The key set is cached for `cache_seconds`. A token carrying an unknown `kid`
    may trigger a refresh (key rotation), but at most once per
    `min_refresh_seconds`, so bogus key ids cannot drive outbound traffic.
    Fetches are serialized: concurrent cold or expired lookups share one request.
    """

    def __init__(
        self,
        *,
        http: httpx.AsyncClient,
        jwks_url: str,
        issuer: str,
        audience: str,
        algorithms: Sequence[str] = ("RS256",),
        cache_seconds: int = 3600,
        min_refresh_seconds: float = 30.0,
    ) -> None:
        self._http = http
        self._jwks_url = jwks_url
        self._issuer = issuer
        self._audience = audience
        self._algorithms = list(algorithms)
        self._cache_seconds = cache_seconds
        self._min_refresh_seconds = min_refresh_seconds

        self._keys: PyJWKSet | None = None
        self._fetched_at: float = 0.0
        self._lock = asyncio.Lock()

    def _age(self) -> float:
        return time.monotonic() - self._fetched_at

    async def _refresh(self, *, unknown_kid: bool) -> PyJWKSet:
        async with self._lock:
            # Another waiter may have refreshed while this one was queued.
            if self._keys is not None:
                if unknown_kid and self._age() < self._min_refresh_seconds:
                    return self._keys
                if not unknown_kid and self._age() <= self._cache_seconds:
                    return self._keys

            r = await self._http.get(self._jwks_url)
            r.raise_for_status()
            self._keys = PyJWKSet.from_dict(r.json())
            self._fetched_at = time.monotonic()
            log.debug("jwks_refreshed", jwks_url=self._jwks_url, keys=len(self._keys.keys))
            return self._keys

    async def _signing_key(self, kid: str) -> jwt.PyJWK:
        keys = self._keys
        if keys is None or self._age() > self._cache_seconds:
            keys = await self._refresh(unknown_kid=False)
        try:
            return keys[kid]
        except KeyError:
            return (await self._refresh(unknown_kid=True))[kid]

    async def verify_token(self, token: str) -> dict[str, Any]:
        try:
            header = jwt.get_unverified_header(token)
            kid = header.get("kid")
            if not kid:
                raise IdentityServiceError("token header has no key id")
            key = await self._signing_key(str(kid))
            return jwt.decode(
                token,
                key.key,
                algorithms=self._algorithms,
                issuer=self._issuer,
                audience=self._audience,
                options={"require": REQUIRED_CLAIMS},
            )
        except (InvalidTokenError, PyJWKError, PyJWKSetError, KeyError, ValueError) as e:
            raise IdentityServiceError(str(e) or type(e).__name__) from e
        except httpx.HTTPError as e:
            # Covers connect/read timeouts as well as non-2xx JWKS responses.
            raise IdentityServiceError(f"jwks fetch failed: {e!r}") from e


def build_identity_service(settings: Settings, *, http: httpx.AsyncClient) -> IdentityService:
    if settings.identity_provider == "jwks":
        if not settings.jwks_url:
            raise ValueError("jwks_url is required when identity_provider is 'jwks'")
        return JwksIdentityService(
            http=http,
            jwks_url=settings.jwks_url,
            issuer=settings.jwt_issuer,
            audience=settings.jwt_audience,
            algorithms=settings.jwks_algorithms,
            cache_seconds=settings.jwks_cache_seconds,
            min_refresh_seconds=settings.jwks_min_refresh_seconds,
        )
    return JwtIdentityService(cfg=JwtConfig.from_settings(settings))


# --- Module Notes -----------------------------------------------------------
# Additional providers only need an async `verify_token(token) -> claims` method;
# the verifier treats every failure they raise the same way.
