"""Ingestion errors: malformed events and adapter contract violations."""

from typing import Any

from .base import ConfluenceError


class IngestError(ConfluenceError):
    """Base class for errors raised while turning raw events into signals."""

    pass


class InvalidEvent(IngestError):
    """Raised when a raw event has a non-finite or out-of-range field.

    The event is rejected as a whole; the adapter's buffer is untouched.
    """

    def __init__(self, domain: str, field: str, value: Any, reason: str):
        super().__init__(
            f"Invalid {domain} event: {field}",
            details={"domain": domain, "field": field, "value": repr(value), "reason": reason},
        )
        self.domain = domain
        self.field = field
        self.value = value
        self.reason = reason


class SignalContractError(IngestError):
    """Raised when an adapter produces a signal that breaks its own contract."""

    def __init__(self, domain: str, reason: str):
        super().__init__(
            f"Adapter for {domain} broke the signal contract",
            details={"domain": domain, "reason": reason},
        )
        self.domain = domain
        self.reason = reason
