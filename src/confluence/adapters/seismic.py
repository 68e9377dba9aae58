"""Seismic activity adapter.

Formulas:
    intensity  = magnitude / magnitude_scale        (clamped to 1 above the scale)
    frequency  = 1 + event_rate                     (events per day)
    phase      = 2*pi * stress                      (locked fault -> full cycle)
    harmonics  = [magnitude / 10, depth / 800, event_rate / rate_scale,
                  stress, 1 - stress, shallowness]
    raw        = (magnitude, depth_km, event_rate, stress)

Shallowness ramps from 1 at the surface to 0 at ``shallow_depth_km``.
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from types import MappingProxyType
from typing import ClassVar, Mapping

from ..math.statistics import ramp
from ..signals.models import QuadrantProfile
from .base import AdapterThresholds, DomainAdapter, SignalParts
from .registry import register


@dataclass(frozen=True)
class SeismicEvent:
    """One catalogued earthquake plus regional context.

    Ranges: magnitude in [0, 10], depth_km in [0, 800], event_rate >= 0,
    stress (normalized accumulated strain) in [0, 1].
    """

    timestamp: float
    magnitude: float
    depth_km: float
    event_rate: float
    stress: float

    RANGES: ClassVar[Mapping[str, tuple]] = MappingProxyType(
        {
            "timestamp": (None, None),
            "magnitude": (0.0, 10.0),
            "depth_km": (0.0, 800.0),
            "event_rate": (0.0, None),
            "stress": (0.0, 1.0),
        }
    )


@dataclass(frozen=True)
class SeismicThresholds(AdapterThresholds):
    capacity: int = 2000
    frequency_bucket: float = 1.0
    magnitude_scale: float = 7.0
    quiet_magnitude: float = 3.0
    rate_scale: float = 10.0
    shallow_depth_km: float = 70.0
    deep_depth_km: float = 300.0
    locked_stress: float = 0.3

    def __post_init__(self) -> None:
        super().__post_init__()
        self._require_positive("magnitude_scale", "rate_scale", "shallow_depth_km")
        if not 0.0 <= self.quiet_magnitude < self.magnitude_scale:
            raise ValueError("quiet_magnitude must be in [0, magnitude_scale)")
        if self.deep_depth_km <= self.shallow_depth_km:
            raise ValueError("deep_depth_km must exceed shallow_depth_km")
        if not 0.0 <= self.locked_stress < 1.0:
            raise ValueError("locked_stress must be in [0, 1)")


@register
class SeismicAdapter(DomainAdapter[SeismicEvent]):
    domain = "seismic"
    name = "Seismic Stress Monitor"
    event_type = SeismicEvent
    thresholds_class = SeismicThresholds
    harmonics_length = 6
    raw_fields = ("magnitude", "depth_km", "event_rate", "stress")
    default_quadrants = QuadrantProfile(0.2, 0.4, 0.2, 0.2)
    default_intensity = 0.0
    default_frequency = 1.0

    thresholds: SeismicThresholds

    def to_signal(self, event: SeismicEvent) -> SignalParts:
        t = self.thresholds
        shallowness = 1.0 - ramp(event.depth_km, 0.0, t.shallow_depth_km)
        return SignalParts(
            timestamp=event.timestamp,
            intensity=event.magnitude / t.magnitude_scale,
            frequency=1.0 + event.event_rate,
            phase=2.0 * math.pi * event.stress,
            harmonics=(
                event.magnitude / 10.0,
                event.depth_km / 800.0,
                event.event_rate / t.rate_scale,
                event.stress,
                1.0 - event.stress,
                shallowness,
            ),
            raw=(event.magnitude, event.depth_km, event.event_rate, event.stress),
        )

    def quadrant_projection(self, means: tuple[float, ...]) -> tuple[float, float, float, float]:
        t = self.thresholds
        magnitude, depth, rate, stress = means
        return (
            ramp(magnitude, t.quiet_magnitude, t.magnitude_scale),
            ramp(stress, t.locked_stress, 1.0),
            ramp(rate, 0.0, t.rate_scale),
            ramp(depth, t.shallow_depth_km, t.deep_depth_km),
        )
