"""Exception types for Hivemind."""
from __future__ import annotations


class HivemindError(Exception):
    """Base class for pipeline errors."""
    pass


class TransportError(HivemindError):
    """Raised when the query backend cannot be reached or answers badly."""
    pass


class ResponseFormatError(HivemindError):
    """Raised when a worker response payload cannot be parsed."""
    pass
