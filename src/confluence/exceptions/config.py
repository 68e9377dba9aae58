"""Configuration errors: unreadable files, bad environment values, failed validation."""

from typing import Any

from .base import ConfluenceError


class ConfigurationError(ConfluenceError):
    """Configuration could not be loaded or layered."""


class InvalidConfigError(ConfigurationError):
    """A config section or adapter override failed validation.

    ``key`` is the dotted location, e.g. ``adapters.market``.
    """

    def __init__(self, key: str, value: Any, reason: str):
        super().__init__(f"Invalid {key}: {reason}", details={"value": value})
        self.key = key
        self.value = value
        self.reason = reason
