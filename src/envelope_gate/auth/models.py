"""
envelope_gate.auth.models

Auth domain models.

Responsibilities:
- Define the verified identity type attached to the request for downstream handlers.
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Any


@dataclass(frozen=True, slots=True)
class VerifiedIdentity:
    """
    Decoded claims returned by the identity service for one request.
    """

    subject: str
    claims: Mapping[str, Any] = field(default_factory=dict)

    @classmethod
    def from_claims(cls, claims: Mapping[str, Any]) -> VerifiedIdentity:
        subject = str(claims.get("sub") or "")
        if not subject:
            raise ValueError("identity record has no subject")
        return cls(subject=subject, claims=MappingProxyType(dict(claims)))

    def to_dict(self) -> dict[str, Any]:
        return {"subject": self.subject, "claims": dict(self.claims)}
