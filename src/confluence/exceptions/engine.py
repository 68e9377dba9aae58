"""Engine errors: domain registration and lookup, serialization."""

from typing import List

from .base import ConfluenceError


class EngineError(ConfluenceError):
    """Base class for orchestration errors."""

    pass


class UnknownDomainError(EngineError):
    """Raised when a domain has no registered adapter."""

    def __init__(self, domain: str, known: List[str]):
        super().__init__(
            f"Unknown domain: {domain}",
            details={"domain": domain, "known": ", ".join(sorted(known)) or "-"},
        )
        self.domain = domain
        self.known = known


class DuplicateDomainError(EngineError):
    """Raised when a second adapter is registered for the same domain."""

    def __init__(self, domain: str):
        super().__init__(f"Domain already registered: {domain}", details={"domain": domain})
        self.domain = domain


class SerializationError(ConfluenceError):
    """Raised when a payload cannot be turned back into a value type."""

    def __init__(self, reason: str):
        super().__init__(f"Cannot deserialize payload: {reason}", details={"reason": reason})
        self.reason = reason
