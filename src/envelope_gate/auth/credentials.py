"""
envelope_gate.auth.credentials

Bearer credential extraction.

Responsibilities:
- Locate the credential in the `Authorization` header, falling back to the
  `__session` cookie. The header always wins when both are present.
"""

from __future__ import annotations

from collections.abc import Mapping

from starlette.datastructures import Headers
from starlette.requests import Request

AUTHORIZATION_HEADER = "authorization"
BEARER_PREFIX = "Bearer "
SESSION_COOKIE = "__session"


def extract_credential(
    headers: Mapping[str, str], cookies: Mapping[str, str]
) -> str | None:
    if not isinstance(headers, Headers):
        # Plain dicts (tests, non-starlette callers) get case-insensitive lookup too.
        headers = Headers(headers=dict(headers))

    authorization = headers.get(AUTHORIZATION_HEADER)
    if authorization is not None and authorization.startswith(BEARER_PREFIX):
        return authorization[len(BEARER_PREFIX) :]

    session = cookies.get(SESSION_COOKIE)
    if session:
        return session

    return None


def credential_from_request(request: Request) -> str | None:
    return extract_credential(request.headers, request.cookies)
