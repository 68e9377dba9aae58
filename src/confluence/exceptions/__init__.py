"""Exception hierarchy for Confluence."""

from .base import ConfluenceError
from .config import ConfigurationError, InvalidConfigError
from .engine import DuplicateDomainError, EngineError, SerializationError, UnknownDomainError
from .ingest import IngestError, InvalidEvent, SignalContractError

__all__ = [
    "ConfluenceError",
    "IngestError",
    "InvalidEvent",
    "SignalContractError",
    "EngineError",
    "UnknownDomainError",
    "DuplicateDomainError",
    "SerializationError",
    "ConfigurationError",
    "InvalidConfigError",
]
