"""
envelope_gate.observability.middleware

HTTP middleware for request-scoped logging context.

Responsibilities:
- Generate/propagate request IDs.
- Bind request metadata into structlog contextvars.
"""

from __future__ import annotations

import uuid

import structlog
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request
from starlette.responses import Response

REQUEST_ID_HEADER = "x-request-id"


class RequestContextMiddleware(BaseHTTPMiddleware):
    """
    Binds request id, path and method for every log line emitted while serving
    the request, and echoes the request id back to the caller.
    """

    async def dispatch(self, request: Request, call_next) -> Response:
        # Prefer a caller-provided request id for trace continuity; otherwise generate one.
        request_id = request.headers.get(REQUEST_ID_HEADER) or str(uuid.uuid4())
        structlog.contextvars.clear_contextvars()
        structlog.contextvars.bind_contextvars(
            request_id=request_id,
            path=request.url.path,
            method=request.method,
        )
        try:
            response: Response = await call_next(request)
        finally:
            # Avoid leaking context (including the verified subject) across requests.
            structlog.contextvars.clear_contextvars()

        response.headers[REQUEST_ID_HEADER] = request_id
        return response


# --- Module Notes -----------------------------------------------------------
# `auth.verifier.IdentityVerifier` binds `subject` into the same contextvars once a
# credential is verified, so it is cleared here together with the request metadata.
