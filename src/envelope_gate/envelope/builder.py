"""
envelope_gate.envelope.builder

Fluent per-request response envelope.

Responsibilities:
- Accumulate the outcome of a request (kind, status code, messages, payload).
- On `send`, run the authorization gate for private endpoints, then emit exactly one
  JSON body of the form `{"success"|"error": {"message", "devMessage", "data"}}`.

Usage:

    @router.get("/things")
    async def list_things(envelope: ResponseEnvelope = Depends(envelope_dep)):
        return await envelope.success().set_data({"things": []}).send()
"""

from __future__ import annotations

import enum
import json
import re
from collections.abc import Mapping
from typing import Any

from fastapi.encoders import jsonable_encoder
from starlette.requests import Request
from starlette.responses import JSONResponse, Response

from envelope_gate.auth.verifier import IdentityVerifier, Unauthorized
from envelope_gate.envelope.errors import InvalidArgument, InvalidState
from envelope_gate.observability.logging import get_logger

log = get_logger(__name__)

SUCCESS_MESSAGE = "Request successful."
ERROR_MESSAGE = "Oops, something went wrong!"
UNAUTHORIZED_MESSAGE = "Oops, you are not authorized to complete this action!"
UNKNOWN_ERROR_MESSAGE = "An unknown error has occurred!"

RESPONSE_DATA_KEY = "response"

_VALID_CODE = re.compile(r"[1-5][0-9]{2}")

# Headers owned by the emitted JSON body; never copied from the injected response.
_BODY_HEADERS = frozenset({b"content-length", b"content-type"})

Payload = Mapping[str, Any] | str | None


class OutcomeKind(enum.StrEnum):
    unset = "UNSET"
    success = "SUCCESS"
    error = "ERROR"
    unauthorized = "UNAUTHORIZED"


def _check_payload(payload: Any) -> Payload:
    if payload is None or isinstance(payload, (Mapping, str)):
        return payload
    raise InvalidArgument(f"Unsupported payload type: {type(payload).__name__}")


class ResponseEnvelope:
    """
    One instance per request. Mutators return `self` for chaining; only `send`
    performs I/O and it may be called once.
    """

    def __init__(
        self,
        request: Request,
        response: Response | None = None,
        *,
        verifier: IdentityVerifier,
        is_public: bool = False,
    ) -> None:
        self._request = request
        self._response = response
        self._verifier = verifier
        self._is_public = is_public

        self._outcome = OutcomeKind.unset
        self._code = 200
        self._message = ""
        self._dev_message = ""
        self._data: Payload = {}
        self._sent = False

    @property
    def outcome(self) -> OutcomeKind:
        return self._outcome

    @property
    def status_code(self) -> int:
        return self._code

    @property
    def is_public(self) -> bool:
        return self._is_public

    @property
    def sent(self) -> bool:
        return self._sent

    def success(self, message: str | None = None, data: Payload = None) -> ResponseEnvelope:
        self._outcome = OutcomeKind.success
        self._code = 200
        self._message = message if message is not None else SUCCESS_MESSAGE
        # Without explicit data, keep whatever the handler already attached.
        if data is not None:
            self._data = _check_payload(data)
        return self

    def error(self, message: str | None = None, data: Payload = None) -> ResponseEnvelope:
        self._outcome = OutcomeKind.error
        self._code = 404
        self._message = message if message is not None else ERROR_MESSAGE
        self._data = _check_payload(data) if data is not None else {}
        return self

    def unauthorized(self, data: Payload = None) -> ResponseEnvelope:
        self._outcome = OutcomeKind.unauthorized
        self._code = 403
        self._message = UNAUTHORIZED_MESSAGE
        if data is not None:
            self._data = _check_payload(data)
        return self

    def set_code(self, code: int) -> ResponseEnvelope:
        # bool is an int subclass; True/False are never status codes.
        if (
            isinstance(code, bool)
            or not isinstance(code, int)
            or not _VALID_CODE.fullmatch(str(code))
        ):
            raise InvalidArgument(f"Invalid HTTP code: {code!r}")
        self._code = code
        return self

    def set_dev_message(self, message: str) -> ResponseEnvelope:
        self._dev_message = message
        return self

    def set_message(self, message: str) -> ResponseEnvelope:
        self._message = message
        return self

    def set_data(self, data: Payload) -> ResponseEnvelope:
        self._data = _check_payload(data) if data is not None else {}
        return self

    def set_response_data(self, data: Any = None) -> ResponseEnvelope:
        # Serialized eagerly, compact like JSON.stringify, so `data.response` is a string.
        encoded = json.dumps(
            jsonable_encoder(data if data is not None else {}),
            separators=(",", ":"),
            ensure_ascii=False,
        )
        self._data = {RESPONSE_DATA_KEY: encoded}
        return self

    def set_public(self, is_public: bool) -> ResponseEnvelope:
        self._is_public = is_public
        return self

    def body(self) -> dict[str, Any]:
        key = "success" if self._outcome is OutcomeKind.success else "error"
        return {
            key: {
                "message": self._message,
                "devMessage": self._dev_message,
                "data": self._data,
            }
        }

    async def send(self) -> JSONResponse:
        if self._sent:
            raise InvalidState("Response envelope has already been sent.")
        # Flip before awaiting so a concurrent second call cannot slip through.
        self._sent = True

        if not self._is_public:
            try:
                await self._verifier.verify(self._request)
            except Unauthorized:
                # Authorization failure wins over any accumulated outcome.
                self.unauthorized()
                self._data = {}
                self._dev_message = ""

        if self._outcome is OutcomeKind.unset:
            self._outcome = OutcomeKind.error
            self._code = 500
            self._message = UNKNOWN_ERROR_MESSAGE

        response = JSONResponse(status_code=self._code, content=jsonable_encoder(self.body()))
        if self._response is not None:
            # Carry over headers (e.g. Set-Cookie) the handler put on the injected response.
            response.raw_headers.extend(
                (k, v) for k, v in self._response.raw_headers if k not in _BODY_HEADERS
            )
            response.background = self._response.background

        log.debug(
            "envelope_sent",
            status_code=self._code,
            outcome=str(self._outcome),
            public=self._is_public,
        )
        return response


# --- Module Notes -----------------------------------------------------------
# Instances are never shared across requests; construct them through
# `envelope_gate.envelope.factory.EnvelopeFactory` (or the `envelope_dep` dependency).
