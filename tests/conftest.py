"""
tests.conftest

Shared fixtures: a counting identity service stub and bare starlette requests.
"""

from __future__ import annotations

from collections.abc import Callable
from typing import Any

import pytest
from starlette.requests import Request

from envelope_gate.auth.identity import IdentityServiceError
from envelope_gate.auth.verifier import IdentityVerifier
from envelope_gate.envelope.factory import EnvelopeConfig, EnvelopeFactory

GOOD_TOKEN = "good-token"


class StubIdentityService:
    """
    Accepts only `GOOD_TOKEN`; records every token it is asked about.
    """

    def __init__(self, claims: dict[str, Any] | None = None) -> None:
        self.claims = claims if claims is not None else {"sub": "user-1", "email": "u1@example.com"}
        self.calls: list[str] = []

    async def verify_token(self, token: str) -> dict[str, Any]:
        self.calls.append(token)
        if token != GOOD_TOKEN:
            raise IdentityServiceError("token expired at 2020-01-01")
        return dict(self.claims)


def build_request(
    headers: dict[str, str] | None = None,
    cookies: dict[str, str] | None = None,
) -> Request:
    raw = [(k.lower().encode("latin-1"), v.encode("latin-1")) for k, v in (headers or {}).items()]
    if cookies:
        cookie = "; ".join(f"{k}={v}" for k, v in cookies.items())
        raw.append((b"cookie", cookie.encode("latin-1")))
    return Request(
        {
            "type": "http",
            "method": "GET",
            "path": "/",
            "headers": raw,
            "query_string": b"",
        }
    )


@pytest.fixture
def identity_service() -> StubIdentityService:
    return StubIdentityService()


@pytest.fixture
def verifier(identity_service: StubIdentityService) -> IdentityVerifier:
    return IdentityVerifier(service=identity_service)


@pytest.fixture
def make_request() -> Callable[..., Request]:
    return build_request


@pytest.fixture
def factory(verifier: IdentityVerifier) -> EnvelopeFactory:
    return EnvelopeFactory(config=EnvelopeConfig(default_public=False), verifier=verifier)
