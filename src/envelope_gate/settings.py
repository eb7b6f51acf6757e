"""
envelope_gate.settings

Central configuration model (Pydantic Settings).

Responsibilities:
- Provide strongly-typed, env-driven settings for all layers.
- Hide secrets from repr/logging (e.g., JWT secret).
- Offer a cached settings instance for dependency injection.
"""

from __future__ import annotations

from functools import lru_cache
from typing import Literal

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """
    Env-driven configuration, read once at process start.
    """

    model_config = SettingsConfigDict(env_prefix="ENVGATE_", case_sensitive=False)

    env: Literal["dev", "test", "prod"] = "dev"
    service_name: str = "envelope-gate"
    log_level: str = "INFO"

    api_host: str = "0.0.0.0"
    api_port: int = 8080

    # Envelopes are private (credential required) unless an endpoint opts out.
    default_public: bool = False

    identity_provider: Literal["jwt", "jwks"] = "jwt"
    identity_timeout_seconds: float = Field(default=5.0, gt=0)

    # Issuer/audience are enforced by both providers.
    jwt_issuer: str = "envelope-gate"
    jwt_audience: str = "envelope-api"

    # Local HS256 provider
    jwt_alg: str = "HS256"
    jwt_secret: str = Field(default="dev-secret-change-me", repr=False)

    # Remote JWKS provider
    jwks_url: str | None = None
    jwks_algorithms: list[str] = Field(default_factory=lambda: ["RS256"])
    jwks_cache_seconds: int = Field(default=3600, ge=0)
    # Floor between refreshes triggered by an unknown `kid`.
    jwks_min_refresh_seconds: float = Field(default=30.0, ge=0)


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    # Cache avoids re-parsing env vars for each request dependency.
    return Settings()
