"""
envelope_gate.api.deps

FastAPI dependency wiring for the API layer.

Responsibilities:
- Expose the settings and envelope factory stored on app.state.
- Hand each request its own `ResponseEnvelope`.
"""

from __future__ import annotations

from fastapi import Depends, Request, Response

from envelope_gate.envelope.builder import ResponseEnvelope
from envelope_gate.envelope.factory import EnvelopeFactory
from envelope_gate.settings import Settings


def settings_dep(request: Request) -> Settings:
    return request.app.state.settings  # type: ignore[attr-defined]


def envelope_factory_dep(request: Request) -> EnvelopeFactory:
    # The factory is created once in `envelope_gate.api.app.create_app`.
    return request.app.state.envelopes  # type: ignore[attr-defined]


def envelope_dep(
    request: Request,
    response: Response,
    factory: EnvelopeFactory = Depends(envelope_factory_dep),
) -> ResponseEnvelope:
    return factory.new(request, response)
