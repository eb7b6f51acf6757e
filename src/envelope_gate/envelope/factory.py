"""
envelope_gate.envelope.factory

Construction of per-request envelopes from process-wide configuration.

Responsibilities:
- Hold the immutable `EnvelopeConfig` (default public/private flag) fixed at startup.
- Create a fresh `ResponseEnvelope` for each request.
"""

from __future__ import annotations

from dataclasses import dataclass

from starlette.requests import Request
from starlette.responses import Response

from envelope_gate.auth.verifier import IdentityVerifier
from envelope_gate.envelope.builder import ResponseEnvelope
from envelope_gate.settings import Settings


@dataclass(frozen=True, slots=True)
class EnvelopeConfig:
    # Endpoints are private unless configured (or overridden per envelope) otherwise.
    default_public: bool = False

    @classmethod
    def from_settings(cls, settings: Settings) -> EnvelopeConfig:
        return cls(default_public=settings.default_public)


class EnvelopeFactory:
    def __init__(self, *, config: EnvelopeConfig, verifier: IdentityVerifier) -> None:
        self._config = config
        self._verifier = verifier

    @property
    def config(self) -> EnvelopeConfig:
        return self._config

    def new(self, request: Request, response: Response | None = None) -> ResponseEnvelope:
        return ResponseEnvelope(
            request,
            response,
            verifier=self._verifier,
            is_public=self._config.default_public,
        )
