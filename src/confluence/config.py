"""Configuration loading and management for Confluence.

Configuration sources are merged in priority order:
    1. Defaults (defined in EngineConfig)
    2. Global config (~/.confluence.toml)
    3. Project config (./confluence.toml)
    4. Explicit config file
    5. Environment variables (CONFLUENCE_* prefix)
    6. Keyword overrides (typically CLI flags)

A config file looks like::

    stale_after = 300.0
    domains = ["market", "sentiment"]

    [correlation]
    min_samples = 20
    field = "intensity"

    [consensus]
    min_weight = 0.1

    [adapters.market]
    volume_scale = 250000.0

Example:
    >>> config = load_config(stale_after=60.0)
    >>> config.correlation.min_samples
    30
"""

from __future__ import annotations

import os
from dataclasses import dataclass, field, fields
from pathlib import Path
from typing import Any, Literal, Mapping, Optional, get_type_hints

from .exceptions import ConfigurationError

Verbosity = Literal["quiet", "normal", "verbose"]

# Signature attributes a correlation can track.
SIGNATURE_FIELDS = (
    "intensity",
    "momentum",
    "volatility",
    "dominant_frequency",
    "harmonic_resonance",
    "phase_alignment",
)

REFERENCE_DOMAINS = ("market", "seismic", "epidemic", "network", "sentiment")


@dataclass(frozen=True)
class CorrelationConfig:
    """Correlation engine tuning.

    Attributes:
        min_samples: Paired samples before a pair becomes READY
        window: Paired samples retained per pair
        max_lag: Largest lead/lag shift evaluated, in ticks
        field: Signature attribute correlated between domains
    """

    min_samples: int = 30
    window: int = 100
    max_lag: int = 5
    field: str = "momentum"

    def __post_init__(self) -> None:
        if self.min_samples < 3:
            raise ValueError("min_samples must be at least 3")
        if self.window < self.min_samples:
            raise ValueError("window must be at least min_samples")
        if self.max_lag < 0:
            raise ValueError("max_lag must be non-negative")
        if self.field not in SIGNATURE_FIELDS:
            raise ValueError(f"field must be one of {', '.join(SIGNATURE_FIELDS)}")


@dataclass(frozen=True)
class ConsensusConfig:
    """Consensus aggregator tuning.

    Attributes:
        vote_threshold: |momentum| a domain needs to cast a directional vote
        neutral_band: |normalized vote| below which the direction is neutral
        min_weight: Fixed weight of a domain with no READY correlation
        confidence_cap: Upper bound on prediction confidence
        time_horizon: Seconds the prediction is meant to cover
    """

    vote_threshold: float = 0.0
    neutral_band: float = 0.0
    min_weight: float = 0.05
    confidence_cap: float = 0.95
    time_horizon: float = 5.0

    def __post_init__(self) -> None:
        if self.vote_threshold < 0:
            raise ValueError("vote_threshold must be non-negative")
        if not 0.0 <= self.neutral_band < 1.0:
            raise ValueError("neutral_band must be in [0, 1)")
        if not 0.0 < self.min_weight <= 1.0:
            raise ValueError("min_weight must be in (0, 1]")
        if not 0.0 < self.confidence_cap <= 1.0:
            raise ValueError("confidence_cap must be in (0, 1]")
        if self.time_horizon <= 0:
            raise ValueError("time_horizon must be positive")


@dataclass(frozen=True)
class EngineConfig:
    """Top-level engine configuration.

    Attributes:
        correlation: Correlation engine settings
        consensus: Aggregator settings
        stale_after: Seconds without an update before a domain is treated
            as stalled (None disables staleness)
        prediction_history: Predictions retained by the engine
        calibration_predictions: Predictions before the engine counts as calibrated
        domains: Domains the CLI and ``ConfluenceEngine.from_config`` register
        adapters: Per-domain threshold overrides, {domain: {field: value}}
        verbosity: Output level
    """

    correlation: CorrelationConfig = field(default_factory=CorrelationConfig)
    consensus: ConsensusConfig = field(default_factory=ConsensusConfig)
    stale_after: Optional[float] = None
    prediction_history: int = 1000
    calibration_predictions: int = 50
    domains: tuple[str, ...] = REFERENCE_DOMAINS
    adapters: Mapping[str, Mapping[str, Any]] = field(default_factory=dict)
    verbosity: Verbosity = "normal"

    def __post_init__(self) -> None:
        if self.stale_after is not None and self.stale_after <= 0:
            raise ValueError("stale_after must be positive (or None to disable)")
        if self.prediction_history < 1:
            raise ValueError("prediction_history must be at least 1")
        if self.calibration_predictions < 1:
            raise ValueError("calibration_predictions must be at least 1")
        if not self.domains:
            raise ValueError("domains must not be empty")
        if len(set(self.domains)) != len(self.domains):
            raise ValueError("domains must be unique")
        if self.verbosity not in ("quiet", "normal", "verbose"):
            raise ValueError("verbosity must be quiet, normal or verbose")

    def adapter_overrides(self, domain: str) -> Mapping[str, Any]:
        return self.adapters.get(domain, {})


def load_config(config_file: Optional[Path] = None, **overrides) -> EngineConfig:
    """Load configuration with auto-discovery and merging.

    Args:
        config_file: Optional explicit config file path
        **overrides: Direct overrides; ``verbose``/``quiet`` booleans are
            mapped onto ``verbosity``

    Returns:
        Validated EngineConfig instance

    Raises:
        ConfigurationError: If a config file is missing or invalid, or a
            merged value fails validation
    """
    merged: dict[str, Any] = {}

    global_config = Path.home() / ".confluence.toml"
    if global_config.exists():
        _merge(merged, _read_config_file(global_config, "global config"))

    project_config = Path.cwd() / "confluence.toml"
    if project_config.exists():
        _merge(merged, _read_config_file(project_config, "project config"))

    if config_file is not None:
        if not config_file.exists():
            raise ConfigurationError(f"Config file not found: {config_file}")
        _merge(merged, _read_config_file(config_file, "config file"))

    _merge(merged, _load_env_vars())

    overrides = dict(overrides)
    if overrides.pop("verbose", False):
        overrides["verbosity"] = "verbose"
    if overrides.pop("quiet", False):
        overrides["verbosity"] = "quiet"
    _merge(merged, overrides)

    return _build(merged)


def _build(merged: dict[str, Any]) -> EngineConfig:
    for key, cls in (("correlation", CorrelationConfig), ("consensus", ConsensusConfig)):
        section = merged.get(key)
        if isinstance(section, dict):
            try:
                merged[key] = cls(**section)
            except (TypeError, ValueError) as e:
                raise ConfigurationError(f"Invalid [{key}] config: {e}") from e

    adapters = merged.get("adapters")
    if adapters is not None:
        if not isinstance(adapters, Mapping) or not all(
            isinstance(v, Mapping) for v in adapters.values()
        ):
            raise ConfigurationError("[adapters] must contain one table per domain")
        merged["adapters"] = {domain: dict(values) for domain, values in adapters.items()}

    if isinstance(merged.get("domains"), list):
        merged["domains"] = tuple(merged["domains"])

    try:
        return EngineConfig(**merged)
    except (TypeError, ValueError) as e:
        raise ConfigurationError(f"Invalid configuration: {e}") from e


def _merge(target: dict[str, Any], source: Mapping[str, Any]) -> None:
    """Recursively merge ``source`` into ``target``; tables merge key by key."""
    for key, value in source.items():
        if isinstance(value, Mapping) and isinstance(target.get(key), dict):
            _merge(target[key], value)
        elif isinstance(value, Mapping):
            target[key] = {}
            _merge(target[key], value)
        else:
            target[key] = value


def _read_config_file(path: Path, label: str) -> dict:
    try:
        return _load_toml_file(path)
    except ConfigurationError:
        raise
    except (OSError, ValueError) as e:
        raise ConfigurationError(f"Invalid {label} '{path}': {e}") from e


def _load_env_vars() -> dict[str, Any]:
    """Load top-level scalar settings from CONFLUENCE_* environment variables.

    Supported environment variables:
        CONFLUENCE_STALE_AFTER: float ("none" disables)
        CONFLUENCE_PREDICTION_HISTORY: int
        CONFLUENCE_CALIBRATION_PREDICTIONS: int
        CONFLUENCE_DOMAINS: comma-separated domain names
        CONFLUENCE_VERBOSITY: quiet/normal/verbose

    Returns:
        Dict of field_name -> parsed_value for any CONFLUENCE_* vars found.
    """
    type_hints = get_type_hints(EngineConfig)

    result: dict[str, Any] = {}
    for f in fields(EngineConfig):
        env_key = f"CONFLUENCE_{f.name.upper()}"
        env_value = os.environ.get(env_key)
        if env_value is None:
            continue

        try:
            parsed = _parse_env_value(env_value, type_hints[f.name])
        except ValueError as e:
            raise ConfigurationError(f"Invalid {env_key}: {e}") from e
        if parsed is not _UNSUPPORTED:
            result[f.name] = parsed

    return result


_UNSUPPORTED = object()


def _parse_env_value(value: str, type_hint: Any) -> Any:
    """Parse an environment variable string to the field's type.

    Returns ``_UNSUPPORTED`` for nested tables, which only come from files.

    Raises:
        ValueError: If value can't be parsed to expected type
    """
    args = getattr(type_hint, "__args__", ())
    if type(None) in args:
        if value.strip().lower() in ("", "none"):
            return None
        type_hint = next(t for t in args if t is not type(None))

    origin = getattr(type_hint, "__origin__", None)

    if origin is tuple:
        return tuple(part.strip() for part in value.split(",") if part.strip())
    if type_hint is int:
        return int(value)
    if type_hint is float:
        return float(value)
    if type_hint is str or origin is Literal:
        return value

    return _UNSUPPORTED


def _load_toml_file(path: Path) -> dict:
    """Load TOML file and return parsed dict.

    Raises:
        ConfigurationError: If tomllib/tomli not available
    """
    try:
        # Python 3.11+ has tomllib in stdlib
        import tomllib
    except ModuleNotFoundError:
        try:
            # Fallback to tomli for older interpreters
            import tomli as tomllib  # type: ignore
        except ImportError:
            raise ConfigurationError(
                "TOML support requires Python 3.11+ or 'tomli' package. "
                "Install with: pip install tomli"
            )

    with open(path, "rb") as f:
        return tomllib.load(f)
