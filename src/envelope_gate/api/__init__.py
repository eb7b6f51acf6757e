"""
envelope_gate.api

API package.

Responsibilities:
- FastAPI app factory and router modules.
- API-layer dependency wiring and exception handlers.
"""

# Package marker.


# --- Module Notes -----------------------------------------------------------
# Routers stay thin: every response goes through a `ResponseEnvelope`.
