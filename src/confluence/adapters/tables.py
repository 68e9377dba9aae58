"""Read-only per-domain reference tables.

Descriptive content bundled with each domain lives here as immutable data,
apart from adapter runtime logic. Adapters consult these tables to label a
signature's regime. They never feed back into signature math.

Each table partitions one Signature attribute into ascending bands; the
first band whose ``upper`` bound exceeds the value wins.
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from types import MappingProxyType
from typing import Mapping

from ..signals.models import Signature


@dataclass(frozen=True)
class RegimeBand:
    upper: float
    label: str
    description: str


@dataclass(frozen=True)
class RegimeTable:
    """Ordered bands over one Signature attribute."""

    metric: str
    bands: tuple[RegimeBand, ...]

    def __post_init__(self) -> None:
        uppers = [b.upper for b in self.bands]
        if not uppers or uppers != sorted(uppers):
            raise ValueError(f"bands for {self.metric} must be non-empty and ascending")
        if not math.isinf(uppers[-1]):
            raise ValueError(f"last band for {self.metric} must be unbounded")

    def classify(self, signature: Signature) -> RegimeBand:
        value = float(getattr(signature, self.metric))
        for band in self.bands:
            if value < band.upper:
                return band
        return self.bands[-1]


_INF = math.inf

MARKET_REGIMES = RegimeTable(
    metric="momentum",
    bands=(
        RegimeBand(-0.02, "markdown", "Sustained decline in log price"),
        RegimeBand(-0.002, "distribution", "Drifting lower, supply outweighs demand"),
        RegimeBand(0.002, "ranging", "No material drift"),
        RegimeBand(0.02, "accumulation", "Drifting higher, demand absorbs supply"),
        RegimeBand(_INF, "markup", "Sustained advance in log price"),
    ),
)

SEISMIC_REGIMES = RegimeTable(
    metric="intensity",
    bands=(
        RegimeBand(0.15, "locked_fault", "Quiet segment, strain accumulating"),
        RegimeBand(0.4, "creep", "Steady aseismic release"),
        RegimeBand(0.7, "stress_release", "Elevated moderate activity"),
        RegimeBand(_INF, "cascade", "Large events triggering further events"),
    ),
)

EPIDEMIC_REGIMES = RegimeTable(
    metric="momentum",
    bands=(
        RegimeBand(-0.05, "declining", "Incidence falling"),
        RegimeBand(0.05, "endemic", "Incidence roughly flat"),
        RegimeBand(0.5, "growing", "Incidence rising"),
        RegimeBand(_INF, "surging", "Incidence rising fast"),
    ),
)

NETWORK_REGIMES = RegimeTable(
    metric="intensity",
    bands=(
        RegimeBand(0.25, "congested", "Latency near or above the ceiling"),
        RegimeBand(0.6, "degraded", "Latency noticeably elevated"),
        RegimeBand(0.9, "nominal", "Normal operating latency"),
        RegimeBand(_INF, "fast", "Latency well below normal"),
    ),
)

SENTIMENT_REGIMES = RegimeTable(
    metric="momentum",
    bands=(
        RegimeBand(-0.1, "souring", "Polarity turning negative"),
        RegimeBand(0.1, "steady", "Polarity stable"),
        RegimeBand(_INF, "warming", "Polarity turning positive"),
    ),
)

REGIME_TABLES: Mapping[str, RegimeTable] = MappingProxyType(
    {
        "market": MARKET_REGIMES,
        "seismic": SEISMIC_REGIMES,
        "epidemic": EPIDEMIC_REGIMES,
        "network": NETWORK_REGIMES,
        "sentiment": SENTIMENT_REGIMES,
    }
)
