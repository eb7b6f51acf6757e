"""
envelope_gate.api.errors

Exception handlers that keep every failure inside the standard envelope.

Responsibilities:
- `Unauthorized` from the `require_identity` gate -> 403 unauthorized envelope.
- Framework HTTP errors (unknown route, wrong method, ...) -> error envelope with
  the framework's status code.
- Request validation errors -> 422 error envelope, detail in `devMessage`.
"""

from __future__ import annotations

from collections.abc import Sequence
from typing import Any

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from starlette.exceptions import HTTPException as StarletteHTTPException
from starlette.responses import JSONResponse

from envelope_gate.auth.verifier import Unauthorized
from envelope_gate.envelope.factory import EnvelopeFactory


def _factory(request: Request) -> EnvelopeFactory:
    return request.app.state.envelopes  # type: ignore[attr-defined]


def _describe_errors(errors: Sequence[Any]) -> str:
    # "body.subject: String should have at least 1 character; ..."
    parts = []
    for err in errors:
        loc = ".".join(str(p) for p in err.get("loc", ()))
        parts.append(f"{loc}: {err.get('msg', '')}" if loc else str(err.get("msg", "")))
    return "; ".join(parts)


def install_exception_handlers(app: FastAPI) -> None:
    @app.exception_handler(Unauthorized)
    async def _unauthorized(request: Request, _: Unauthorized) -> JSONResponse:
        # Already rejected; skip the gate so the outcome is not re-evaluated.
        return await _factory(request).new(request).set_public(True).unauthorized().send()

    @app.exception_handler(StarletteHTTPException)
    async def _http_error(request: Request, exc: StarletteHTTPException) -> JSONResponse:
        envelope = _factory(request).new(request).set_public(True).error()
        envelope.set_code(exc.status_code).set_dev_message(str(exc.detail))
        response = await envelope.send()
        if exc.headers:
            # e.g. `Allow` on 405.
            response.headers.update(exc.headers)
        return response

    @app.exception_handler(RequestValidationError)
    async def _validation_error(request: Request, exc: RequestValidationError) -> JSONResponse:
        return await (
            _factory(request)
            .new(request)
            .set_public(True)
            .error("The request is invalid.")
            .set_code(422)
            .set_dev_message(_describe_errors(exc.errors()))
            .send()
        )


# --- Module Notes -----------------------------------------------------------
# Handlers build public envelopes: private routes that must answer 403 before
# validation either gate with `require_identity` or parse their body after it.
