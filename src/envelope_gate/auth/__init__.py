"""
envelope_gate.auth

Authentication package.

Responsibilities:
- Bearer credential extraction from headers/cookies.
- Identity service adapters (local HS256, remote JWKS).
- Per-request identity verification and FastAPI gating dependencies.
"""

# Package marker.
