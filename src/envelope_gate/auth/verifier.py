"""
envelope_gate.auth.verifier

Per-request identity verification.

Responsibilities:
- Exchange the request's bearer credential for a `VerifiedIdentity`.
- Collapse every identity service failure into `Unauthorized`.
- Memoize the outcome on `request.state` so the identity service is consulted at
  most once per request, however many times the gate is checked.
"""

from __future__ import annotations

from dataclasses import dataclass

import structlog
from starlette.requests import Request

from envelope_gate.auth.credentials import credential_from_request
from envelope_gate.auth.identity import IdentityService
from envelope_gate.auth.models import VerifiedIdentity
from envelope_gate.observability.logging import get_logger

log = get_logger(__name__)

# Request-scoped attachment points.
USER_STATE_KEY = "user"
_OUTCOME_STATE_KEY = "identity_outcome"


class Unauthorized(Exception):
    """
    Raised when no credential is present or the identity service rejects it.
    Never surfaces to clients as-is; callers turn it into a 403 envelope.
    """


@dataclass(frozen=True, slots=True)
class _Rejection:
    # Memoized failure; a fresh `Unauthorized` is raised from it on every check.
    reason: str
    cause: BaseException | None


class IdentityVerifier:
    def __init__(self, *, service: IdentityService) -> None:
        self._service = service

    async def verify_credential(self, credential: str | None) -> VerifiedIdentity:
        if not credential:
            log.info("identity_missing_credential")
            raise Unauthorized("no bearer credential")

        try:
            claims = await self._service.verify_token(credential)
            identity = VerifiedIdentity.from_claims(claims)
        except Exception as e:
            # Provider detail stays in logs; the caller only learns "unauthorized".
            log.warning("identity_verification_failed", error=str(e), error_type=type(e).__name__)
            raise Unauthorized("credential rejected") from e

        # Every later log line for this request carries the caller.
        structlog.contextvars.bind_contextvars(subject=identity.subject)
        return identity

    async def verify(self, request: Request) -> VerifiedIdentity:
        outcome = getattr(request.state, _OUTCOME_STATE_KEY, None)
        if outcome is None:
            try:
                outcome = await self.verify_credential(credential_from_request(request))
            except Unauthorized as e:
                outcome = _Rejection(reason=str(e), cause=e.__cause__)
            setattr(request.state, _OUTCOME_STATE_KEY, outcome)
            if isinstance(outcome, VerifiedIdentity):
                setattr(request.state, USER_STATE_KEY, outcome)

        if isinstance(outcome, _Rejection):
            raise Unauthorized(outcome.reason) from outcome.cause
        return outcome


# --- Module Notes -----------------------------------------------------------
# `verify` is called both by the `require_identity` dependency and by
# `ResponseEnvelope.send`; the memoized outcome keeps those two checks consistent.
