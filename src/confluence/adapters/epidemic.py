"""Epidemiological case-count adapter.

Formulas (incidence = new cases per 100k population):
    intensity  = incidence / (incidence + incidence_scale)
    frequency  = 1 + reproduction_number
    phase      = pi * (1 + tanh(reproduction_number - 1))
    harmonics  = [intensity, R / r_scale, positivity, log1p(incidence),
                  tanh(R - 1), 1 - positivity]
    raw        = (incidence, reproduction_number, test_positivity, new_cases)

Momentum tracks log1p(incidence), so it reads as relative growth.
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from types import MappingProxyType
from typing import ClassVar, Mapping

from ..math.statistics import ramp
from ..signals.models import QuadrantProfile, Signal
from .base import AdapterThresholds, DomainAdapter, SignalParts
from .registry import register

PER_100K = 100_000.0


@dataclass(frozen=True)
class EpidemicReport:
    """One periodic surveillance report.

    Ranges: new_cases >= 0, population >= 1, reproduction_number in [0, 20],
    test_positivity in [0, 1].
    """

    timestamp: float
    new_cases: float
    population: float
    reproduction_number: float
    test_positivity: float = 0.0

    RANGES: ClassVar[Mapping[str, tuple]] = MappingProxyType(
        {
            "timestamp": (None, None),
            "new_cases": (0.0, None),
            "population": (1.0, None),
            "reproduction_number": (0.0, 20.0),
            "test_positivity": (0.0, 1.0),
        }
    )


@dataclass(frozen=True)
class EpidemicThresholds(AdapterThresholds):
    capacity: int = 500
    momentum_window: int = 14
    frequency_bucket: float = 0.25
    incidence_scale: float = 100.0
    r_scale: float = 3.0
    growth_r: float = 2.5
    positivity_low: float = 0.05
    positivity_high: float = 0.3

    def __post_init__(self) -> None:
        super().__post_init__()
        self._require_positive("incidence_scale", "r_scale")
        if self.growth_r <= 1.0:
            raise ValueError("growth_r must exceed 1.0")
        if not 0.0 <= self.positivity_low < self.positivity_high <= 1.0:
            raise ValueError("positivity bounds must satisfy 0 <= low < high <= 1")


@register
class EpidemicAdapter(DomainAdapter[EpidemicReport]):
    domain = "epidemic"
    name = "Epidemiological Surveillance"
    event_type = EpidemicReport
    thresholds_class = EpidemicThresholds
    harmonics_length = 6
    raw_fields = ("incidence", "reproduction_number", "test_positivity", "new_cases")
    default_quadrants = QuadrantProfile(0.1, 0.6, 0.2, 0.1)
    default_intensity = 0.0
    default_frequency = 2.0

    thresholds: EpidemicThresholds

    def to_signal(self, event: EpidemicReport) -> SignalParts:
        t = self.thresholds
        incidence = event.new_cases / event.population * PER_100K
        intensity = incidence / (incidence + t.incidence_scale)
        r = event.reproduction_number
        return SignalParts(
            timestamp=event.timestamp,
            intensity=intensity,
            frequency=1.0 + r,
            phase=math.pi * (1.0 + math.tanh(r - 1.0)),
            harmonics=(
                intensity,
                r / t.r_scale,
                event.test_positivity,
                math.log1p(incidence),
                math.tanh(r - 1.0),
                1.0 - event.test_positivity,
            ),
            raw=(incidence, r, event.test_positivity, event.new_cases),
        )

    def quadrant_projection(self, means: tuple[float, ...]) -> tuple[float, float, float, float]:
        t = self.thresholds
        incidence, r, positivity, _ = means
        return (
            ramp(r, 1.0, t.growth_r),  # spreading
            ramp(1.0 - r, 0.0, 0.5),  # contracting
            ramp(positivity, t.positivity_low, t.positivity_high),
            ramp(incidence, 0.0, 2 * t.incidence_scale),
        )

    def directional_proxy(self, signal: Signal) -> float:
        return math.log1p(signal.raw[0])
