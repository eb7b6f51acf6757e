"""
envelope_gate.envelope.errors

Programming errors raised synchronously by the response envelope.
"""

from __future__ import annotations


class EnvelopeError(Exception):
    pass


class InvalidArgument(EnvelopeError, ValueError):
    """An out-of-range status code or an unsupported payload type."""


class InvalidState(EnvelopeError, RuntimeError):
    """The envelope was sent more than once."""
