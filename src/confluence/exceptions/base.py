"""Root of the Confluence exception hierarchy."""

from typing import Any, Mapping, Optional


class ConfluenceError(Exception):
    """Every error the package raises on purpose derives from this.

    ``details`` carries the structured context (domain, field, config key)
    with values already rendered as strings, in insertion order.
    """

    def __init__(self, message: str, details: Optional[Mapping[str, Any]] = None):
        self.message = message
        self.details = {key: str(value) for key, value in (details or {}).items()}
        super().__init__(message)

    def __str__(self) -> str:
        if not self.details:
            return self.message
        context = ", ".join(f"{key}={value}" for key, value in self.details.items())
        return f"{self.message} ({context})"
