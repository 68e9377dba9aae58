"""Market tick adapter.

Formulas (r = log return against the previously buffered tick):
    intensity  = volume / (volume + volume_scale)
    frequency  = 1 + |r| / return_scale
    phase      = atan2(r, return_scale)            (wrapped into [0, 2*pi))
    harmonics  = [r / return_scale, intensity, spread / spread_scale,
                  log1p(volume), sin(phase), cos(phase)]
    raw        = (price, volume, spread, r)

Momentum tracks log price; the default window of 252 ticks approximates a
trading year of daily bars.
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from types import MappingProxyType
from typing import ClassVar, Mapping, Optional

from ..math.statistics import ramp
from ..signals.models import Signal
from .base import AdapterThresholds, DomainAdapter, SignalParts
from .registry import register


@dataclass(frozen=True)
class MarketTick:
    """One trade/bar observation.

    Ranges: price > 0, volume >= 0, spread (relative bid/ask) in [0, 1].
    """

    timestamp: float
    price: float
    volume: float
    spread: float = 0.0

    RANGES: ClassVar[Mapping[str, tuple]] = MappingProxyType(
        {
            "timestamp": (None, None),
            "price": (1e-12, None),
            "volume": (0.0, None),
            "spread": (0.0, 1.0),
        }
    )


@dataclass(frozen=True)
class MarketThresholds(AdapterThresholds):
    capacity: int = 5000
    signature_window: Optional[int] = 252
    momentum_window: int = 20
    frequency_bucket: float = 0.5
    volume_scale: float = 1_000_000.0
    return_scale: float = 0.02
    spread_scale: float = 0.005

    def __post_init__(self) -> None:
        super().__post_init__()
        self._require_positive("volume_scale", "return_scale", "spread_scale")


@register
class MarketAdapter(DomainAdapter[MarketTick]):
    domain = "market"
    name = "Market Tick Flow"
    event_type = MarketTick
    thresholds_class = MarketThresholds
    harmonics_length = 6
    raw_fields = ("price", "volume", "spread", "log_return")
    default_frequency = 1.0

    thresholds: MarketThresholds

    def to_signal(self, event: MarketTick) -> SignalParts:
        t = self.thresholds
        previous = self.latest_signal()
        log_return = math.log(event.price / previous.raw[0]) if previous is not None else 0.0

        intensity = event.volume / (event.volume + t.volume_scale)
        phase = math.atan2(log_return, t.return_scale)

        return SignalParts(
            timestamp=event.timestamp,
            intensity=intensity,
            frequency=1.0 + abs(log_return) / t.return_scale,
            phase=phase,
            harmonics=(
                log_return / t.return_scale,
                intensity,
                event.spread / t.spread_scale,
                math.log1p(event.volume),
                math.sin(phase),
                math.cos(phase),
            ),
            raw=(event.price, event.volume, event.spread, log_return),
        )

    def quadrant_projection(self, means: tuple[float, ...]) -> tuple[float, float, float, float]:
        t = self.thresholds
        _, volume, spread, log_return = means
        return (
            ramp(log_return, 0.0, t.return_scale),  # upward drift
            ramp(-log_return, 0.0, t.return_scale),  # downward drift
            ramp(spread, 0.0, t.spread_scale),
            ramp(volume, 0.0, 2 * t.volume_scale),
        )

    def directional_proxy(self, signal: Signal) -> float:
        return math.log(signal.raw[0])

    def energy_proxy(self, signal: Signal) -> float:
        return signal.intensity * abs(signal.raw[3])
