"""
envelope_gate.api.app

FastAPI app factory.

Responsibilities:
- Build the FastAPI application and register routers/middleware/handlers.
- Create the shared identity service, verifier and envelope factory once per process.
- Close the identity service's HTTP client on shutdown.
"""

from __future__ import annotations

import httpx
from fastapi import FastAPI

from envelope_gate import __version__
from envelope_gate.api.errors import install_exception_handlers
from envelope_gate.api.routers.dev_auth import router as dev_auth_router
from envelope_gate.api.routers.health import router as health_router
from envelope_gate.api.routers.identity import router as identity_router
from envelope_gate.auth.identity import IdentityService, build_identity_service
from envelope_gate.auth.verifier import IdentityVerifier
from envelope_gate.envelope.factory import EnvelopeConfig, EnvelopeFactory
from envelope_gate.observability.logging import configure_logging, get_logger
from envelope_gate.observability.middleware import RequestContextMiddleware
from envelope_gate.settings import Settings

log = get_logger(__name__)


def create_app(
    *,
    settings: Settings,
    identity_service: IdentityService | None = None,
) -> FastAPI:
    configure_logging(service_name=settings.service_name, level=settings.log_level)

    app = FastAPI(
        title="Envelope Gate",
        version=__version__,
        docs_url="/docs",
        openapi_url="/openapi.json",
    )

    # Timeout for the remote identity provider lives on the transport.
    http = httpx.AsyncClient(timeout=settings.identity_timeout_seconds)
    service = identity_service or build_identity_service(settings, http=http)
    verifier = IdentityVerifier(service=service)

    # Read-only after this point; requests only ever read app.state.
    app.state.settings = settings
    app.state.http = http
    app.state.verifier = verifier
    app.state.envelopes = EnvelopeFactory(
        config=EnvelopeConfig.from_settings(settings),
        verifier=verifier,
    )

    app.add_middleware(RequestContextMiddleware)
    install_exception_handlers(app)
    app.include_router(health_router, tags=["health"])
    app.include_router(dev_auth_router)
    app.include_router(identity_router)

    @app.on_event("startup")
    async def _startup() -> None:
        log.info(
            "startup",
            env=settings.env,
            identity_provider=settings.identity_provider,
            default_public=settings.default_public,
        )

    @app.on_event("shutdown")
    async def _shutdown() -> None:
        await http.aclose()
        log.info("shutdown")

    return app
