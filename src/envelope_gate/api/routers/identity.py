"""
envelope_gate.api.routers.identity

Private endpoints backed by the verified caller identity.

Responsibilities:
- `/v1/me`: gated up front by `require_identity`, returns the decoded claims.
- `/v1/echo`: gated only when the envelope is sent; echoes the body as a
  serialized `response` string.
"""

from __future__ import annotations

from fastapi import APIRouter, Depends, Request
from starlette.responses import JSONResponse
from starlette.status import HTTP_400_BAD_REQUEST

from envelope_gate.api.deps import envelope_dep
from envelope_gate.auth.deps import require_identity
from envelope_gate.auth.models import VerifiedIdentity
from envelope_gate.envelope.builder import ResponseEnvelope

router = APIRouter(prefix="/v1", tags=["identity"])


@router.get("/me")
async def whoami(
    identity: VerifiedIdentity = Depends(require_identity),
    envelope: ResponseEnvelope = Depends(envelope_dep),
) -> JSONResponse:
    return await envelope.set_public(False).success().set_data(identity.to_dict()).send()


@router.post("/echo")
async def echo(
    request: Request,
    envelope: ResponseEnvelope = Depends(envelope_dep),
) -> JSONResponse:
    envelope.set_public(False)
    # Parsed here rather than as a body parameter: framework validation would
    # otherwise answer an unauthenticated caller before the send-time gate runs.
    try:
        body = await request.json()
    except ValueError as e:
        return await (
            envelope.error("The request body must be valid JSON.")
            .set_code(HTTP_400_BAD_REQUEST)
            .set_dev_message(str(e))
            .send()
        )
    return await envelope.success("Echoed.").set_response_data(body).send()
