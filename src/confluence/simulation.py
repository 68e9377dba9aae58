"""Synthetic, correlated event streams for the reference domains.

Every domain is driven by one shared latent random walk ``z`` (a "regime"
level) plus independent noise, so their signature momenta are genuinely
correlated and the correlation engine has something to find. Used by the
``simulate`` CLI command and the tests.
"""

from __future__ import annotations

import math
from typing import Any, Callable, Iterator, Optional, Sequence

import numpy as np

from .adapters.epidemic import EpidemicReport
from .adapters.market import MarketTick
from .adapters.network import NetworkSample
from .adapters.seismic import SeismicEvent
from .adapters.sentiment import SentimentSample
from .config import REFERENCE_DOMAINS
from .exceptions import UnknownDomainError

# Event builder: (rng, timestamp, z, dz) -> event
EventBuilder = Callable[[np.random.Generator, float, float, float], Any]


def _clip(value: float, low: float, high: float) -> float:
    return float(min(high, max(low, value)))


def _market(rng: np.random.Generator, ts: float, z: float, dz: float) -> MarketTick:
    return MarketTick(
        timestamp=ts,
        price=100.0 * math.exp(z + rng.normal(0.0, 0.002)),
        volume=max(0.0, 1e6 * (1.0 + 40.0 * abs(dz)) + rng.normal(0.0, 5e4)),
        spread=_clip(0.001 + rng.normal(0.0, 0.0002), 0.0, 1.0),
    )


def _seismic(rng: np.random.Generator, ts: float, z: float, dz: float) -> SeismicEvent:
    return SeismicEvent(
        timestamp=ts,
        magnitude=_clip(4.0 + 2.0 * math.tanh(z) + rng.normal(0.0, 0.1), 0.0, 10.0),
        depth_km=_clip(35.0 + rng.normal(0.0, 5.0), 0.0, 800.0),
        event_rate=max(0.0, 2.0 + 50.0 * dz + rng.normal(0.0, 0.2)),
        stress=_clip(0.5 + 0.4 * math.tanh(z) + rng.normal(0.0, 0.02), 0.0, 1.0),
    )


def _epidemic(rng: np.random.Generator, ts: float, z: float, dz: float) -> EpidemicReport:
    return EpidemicReport(
        timestamp=ts,
        new_cases=max(0.0, 200.0 * math.exp(z) * (1.0 + rng.normal(0.0, 0.02))),
        population=1_000_000.0,
        reproduction_number=_clip(1.0 + 20.0 * dz + rng.normal(0.0, 0.05), 0.0, 20.0),
        test_positivity=_clip(0.1 + 0.05 * math.tanh(z) + rng.normal(0.0, 0.005), 0.0, 1.0),
    )


def _network(rng: np.random.Generator, ts: float, z: float, dz: float) -> NetworkSample:
    pps = max(0.0, 5000.0 * math.exp(z) + rng.normal(0.0, 50.0))
    return NetworkSample(
        timestamp=ts,
        packets_per_second=pps,
        bytes_per_second=pps * 800.0,
        latency_ms=_clip(100.0 - 60.0 * math.tanh(z) + rng.normal(0.0, 2.0), 0.0, 10_000.0),
        connection_count=max(0.0, 300.0 + 100.0 * z + rng.normal(0.0, 5.0)),
        error_rate=_clip(0.01 + rng.normal(0.0, 0.002), 0.0, 1.0),
    )


def _sentiment(rng: np.random.Generator, ts: float, z: float, dz: float) -> SentimentSample:
    return SentimentSample(
        timestamp=ts,
        polarity=_clip(math.tanh(2.0 * z) + rng.normal(0.0, 0.02), -1.0, 1.0),
        subjectivity=_clip(0.5 + rng.normal(0.0, 0.05), 0.0, 1.0),
        volume=max(0.0, 1000.0 * (1.0 + 10.0 * abs(dz)) + rng.normal(0.0, 20.0)),
    )


GENERATORS: dict[str, EventBuilder] = {
    "market": _market,
    "seismic": _seismic,
    "epidemic": _epidemic,
    "network": _network,
    "sentiment": _sentiment,
}


def simulate_events(
    domains: Optional[Sequence[str]] = None,
    ticks: int = 100,
    seed: Optional[int] = None,
    start: float = 0.0,
    interval: float = 1.0,
    drift_scale: float = 0.02,
) -> Iterator[tuple[str, Any]]:
    """Yield ``(domain, event)`` pairs, one event per domain per tick.

    Args:
        domains: Reference domains to simulate (default: all five)
        ticks: Number of ticks
        seed: Seed for ``numpy.random.default_rng``; equal seeds give equal streams
        start: Timestamp of the first tick
        interval: Seconds between ticks
        drift_scale: Standard deviation of one latent walk step

    Raises:
        UnknownDomainError: If a domain has no generator
        ValueError: If ticks is negative or drift_scale is not positive
    """
    names = tuple(domains) if domains is not None else REFERENCE_DOMAINS
    for name in names:
        if name not in GENERATORS:
            raise UnknownDomainError(name, list(GENERATORS))
    if ticks < 0:
        raise ValueError("ticks must be non-negative")
    if drift_scale <= 0:
        raise ValueError("drift_scale must be positive")

    return _stream(names, ticks, np.random.default_rng(seed), start, interval, drift_scale)


def _stream(
    names: tuple[str, ...],
    ticks: int,
    rng: np.random.Generator,
    start: float,
    interval: float,
    drift_scale: float,
) -> Iterator[tuple[str, Any]]:
    z = 0.0
    for i in range(ticks):
        dz = float(rng.normal(0.0, drift_scale))
        z += dz
        ts = start + i * interval
        for name in names:
            yield name, GENERATORS[name](rng, ts, z, dz)
