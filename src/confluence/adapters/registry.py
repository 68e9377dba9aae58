"""Domain -> adapter class registry.

Adapter modules register their class at import time with ``@register``;
``create_adapter`` builds an instance with optional threshold overrides
(typically from the ``[adapters.<domain>]`` tables of the config file).
"""

from __future__ import annotations

import time
from typing import TYPE_CHECKING, Any, Callable, Mapping, Optional

from ..exceptions import InvalidConfigError, UnknownDomainError

if TYPE_CHECKING:
    from .base import DomainAdapter

ADAPTERS: dict[str, type[DomainAdapter]] = {}


def register(cls: type[DomainAdapter]) -> type[DomainAdapter]:
    """Class decorator adding an adapter to the registry.

    Raises:
        ValueError: If another class already claims the same domain
    """
    existing = ADAPTERS.get(cls.domain)
    if existing is not None and existing is not cls:
        raise ValueError(
            f"domain {cls.domain!r} already registered by {existing.__name__}"
        )
    ADAPTERS[cls.domain] = cls
    return cls


def available_domains() -> list[str]:
    return sorted(ADAPTERS)


def adapter_class(domain: str) -> type[DomainAdapter]:
    try:
        return ADAPTERS[domain]
    except KeyError:
        raise UnknownDomainError(domain, list(ADAPTERS)) from None


def create_adapter(
    domain: str,
    overrides: Optional[Mapping[str, Any]] = None,
    clock: Callable[[], float] = time.time,
) -> DomainAdapter:
    """Instantiate the registered adapter for ``domain``.

    Args:
        domain: Registered domain name
        overrides: Threshold field overrides for this domain
        clock: Time source (injected in tests)

    Raises:
        UnknownDomainError: If no adapter handles ``domain``
        InvalidConfigError: If an override names an unknown field or fails validation
    """
    cls = adapter_class(domain)
    try:
        thresholds = cls.thresholds_class(**dict(overrides or {}))
    except (TypeError, ValueError) as e:
        raise InvalidConfigError(f"adapters.{domain}", dict(overrides or {}), str(e)) from e
    return cls(thresholds=thresholds, clock=clock)
