"""Linguistic sentiment adapter.

Each sample is an aggregate over a batch of texts (mentions): mean polarity,
mean subjectivity and the batch size. Momentum tracks polarity.
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
class SentimentSample:
    """Aggregated sentiment of one batch of texts.

    Ranges: polarity in [-1, 1], subjectivity in [0, 1], volume >= 0.
    """

    timestamp: float
    polarity: float
    subjectivity: float
    volume: float

    RANGES: ClassVar[Mapping[str, tuple]] = MappingProxyType(
        {
            "timestamp": (None, None),
            "polarity": (-1.0, 1.0),
            "subjectivity": (0.0, 1.0),
            "volume": (0.0, None),
        }
    )


@dataclass(frozen=True)
class SentimentThresholds(AdapterThresholds):
    capacity: int = 3000
    signature_window: Optional[int] = 150
    frequency_bucket: float = 0.5
    volume_scale: float = 1000.0
    strong_polarity: float = 0.5
    subjective_low: float = 0.3
    subjective_high: float = 0.9

    def __post_init__(self) -> None:
        super().__post_init__()
        self._require_positive("volume_scale", "strong_polarity")
        if not 0.0 < self.subjective_low < self.subjective_high <= 1.0:
            raise ValueError("subjectivity bounds must satisfy 0 < low < high <= 1")


@register
class SentimentAdapter(DomainAdapter[SentimentSample]):
    domain = "sentiment"
    name = "Linguistic Sentiment"
    event_type = SentimentSample
    thresholds_class = SentimentThresholds
    harmonics_length = 5
    raw_fields = ("polarity", "subjectivity", "volume")
    default_intensity = 0.0
    default_frequency = 1.5

    thresholds: SentimentThresholds

    def to_signal(self, event: SentimentSample) -> SignalParts:
        intensity = event.volume / (event.volume + self.thresholds.volume_scale)
        return SignalParts(
            timestamp=event.timestamp,
            intensity=intensity,
            frequency=1.0 + event.subjectivity,
            phase=(event.polarity + 1.0) * math.pi / 2.0,
            harmonics=(
                event.polarity,
                event.subjectivity,
                intensity,
                event.polarity * event.subjectivity,
                1.0 - event.subjectivity,
            ),
            raw=(event.polarity, event.subjectivity, event.volume),
        )

    def quadrant_projection(self, means: tuple[float, ...]) -> tuple[float, float, float, float]:
        t = self.thresholds
        polarity, subjectivity, _ = means
        return (
            ramp(polarity, 0.0, t.strong_polarity),
            ramp(-polarity, 0.0, t.strong_polarity),
            ramp(subjectivity, t.subjective_low, t.subjective_high),
            1.0 - ramp(subjectivity, 0.0, t.subjective_low),
        )

    def directional_proxy(self, signal: Signal) -> float:
        return signal.raw[0]

    def energy_proxy(self, signal: Signal) -> float:
        return signal.intensity * abs(signal.raw[0])
