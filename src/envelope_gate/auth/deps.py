"""
envelope_gate.auth.deps

FastAPI dependency functions for authentication.

Responsibilities:
- Expose the shared `IdentityVerifier` created at app startup.
- Gate private endpoints before the handler runs (`require_identity`).
"""

from __future__ import annotations

from fastapi import Depends, Request

from envelope_gate.auth.models import VerifiedIdentity
from envelope_gate.auth.verifier import IdentityVerifier


def verifier_from_app(request: Request) -> IdentityVerifier:
    # The verifier is created in `envelope_gate.api.app.create_app`.
    return request.app.state.verifier  # type: ignore[attr-defined]


async def require_identity(
    request: Request,
    verifier: IdentityVerifier = Depends(verifier_from_app),
) -> VerifiedIdentity:
    # Raises `Unauthorized`; the app's exception handler renders the 403 envelope.
    return await verifier.verify(request)


# --- Module Notes -----------------------------------------------------------
# Endpoints that only need the gate at send time can skip this dependency and rely
# on `ResponseEnvelope.send`, which runs the same (memoized) verification.
