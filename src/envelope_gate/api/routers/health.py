"""
envelope_gate.api.routers.health

Liveness endpoint.
"""

from __future__ import annotations

from fastapi import APIRouter, Depends
from starlette.responses import JSONResponse

from envelope_gate.api.deps import envelope_dep
from envelope_gate.envelope.builder import ResponseEnvelope

router = APIRouter()


@router.get("/healthz")
async def healthz(envelope: ResponseEnvelope = Depends(envelope_dep)) -> JSONResponse:
    # Probes never carry credentials.
    return await envelope.set_public(True).success().set_data({"status": "ok"}).send()
