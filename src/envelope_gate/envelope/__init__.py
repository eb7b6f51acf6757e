"""
envelope_gate.envelope

Response envelope package.

Responsibilities:
- The fluent `ResponseEnvelope` builder and its factory/config.
- Envelope-specific programming errors.
"""

from envelope_gate.envelope.builder import OutcomeKind, ResponseEnvelope
from envelope_gate.envelope.errors import EnvelopeError, InvalidArgument, InvalidState
from envelope_gate.envelope.factory import EnvelopeConfig, EnvelopeFactory

__all__ = [
    "EnvelopeConfig",
    "EnvelopeError",
    "EnvelopeFactory",
    "InvalidArgument",
    "InvalidState",
    "OutcomeKind",
    "ResponseEnvelope",
]
