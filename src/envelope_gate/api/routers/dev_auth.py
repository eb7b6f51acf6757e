"""
envelope_gate.api.routers.dev_auth

Dev-only token minting for the local HS256 identity provider.
"""

from __future__ import annotations

from datetime import timedelta
from typing import Any

from fastapi import APIRouter, Depends
from pydantic import BaseModel, Field
from starlette.responses import JSONResponse

from envelope_gate.api.deps import envelope_dep, settings_dep
from envelope_gate.auth.jwt import JwtConfig, issue_token
from envelope_gate.envelope.builder import ResponseEnvelope
from envelope_gate.settings import Settings

router = APIRouter(prefix="/v1/dev", tags=["dev"])


class DevTokenRequest(BaseModel):
    subject: str = Field(min_length=1, max_length=256)
    claims: dict[str, Any] = Field(default_factory=dict)
    ttl_minutes: int = Field(default=60, ge=1, le=24 * 60)


@router.post("/token")
async def mint_dev_token(
    body: DevTokenRequest,
    settings: Settings = Depends(settings_dep),
    envelope: ResponseEnvelope = Depends(envelope_dep),
) -> JSONResponse:
    envelope.set_public(True)
    # Tokens minted here are only meaningful to the local provider.
    if settings.env == "prod" or settings.identity_provider != "jwt":
        return await envelope.error("Not found").send()

    token = issue_token(
        cfg=JwtConfig.from_settings(settings),
        subject=body.subject,
        claims=body.claims,
        ttl=timedelta(minutes=body.ttl_minutes),
    )
    return await envelope.success().set_data({"access_token": token, "token_type": "bearer"}).send()
