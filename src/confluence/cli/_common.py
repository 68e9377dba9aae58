"""Shared CLI helpers."""

from pathlib import Path
from typing import Optional, Sequence

from rich.console import Console

from ..config import EngineConfig, load_config

console = Console()


def resolve_config(
    config: Optional[Path] = None,
    verbose: bool = False,
    domains: Optional[Sequence[str]] = None,
) -> EngineConfig:
    """Build engine config from CLI options."""
    overrides = {}
    if verbose:
        overrides["verbose"] = True
    if domains:
        overrides["domains"] = tuple(domains)
    return load_config(config_file=config, **overrides)
