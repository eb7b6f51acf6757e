"""
envelope_gate.api.__main__

Entrypoint for running the service via `python -m envelope_gate.api`.
"""

from __future__ import annotations

import uvicorn

from envelope_gate.api.app import create_app
from envelope_gate.settings import get_settings


def main() -> None:
    settings = get_settings()
    app = create_app(settings=settings)

    uvicorn.run(
        app,
        host=settings.api_host,
        port=settings.api_port,
        log_config=None,  # structlog
    )


if __name__ == "__main__":
    main()


# --- Module Notes -----------------------------------------------------------
# Identity provider and default public/private mode come from ENVGATE_* env vars
# (see `envelope_gate.settings`); they are fixed for the life of the process.
