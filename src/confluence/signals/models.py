"""Value types flowing through the pipeline: Signal and Signature.

Both are frozen dataclasses with tuple sequences, so a snapshot can be handed
to another thread (or serialized) without copying or locking.
"""

from __future__ import annotations

from dataclasses import dataclass, field

QUADRANTS = ("aggressive", "defensive", "tactical", "strategic")
FLOW_PHASES = ("early", "mid", "late")


@dataclass(frozen=True)
class Signal:
    """One normalized observation from one domain at one instant.

    Attributes:
        domain: Domain identifier (e.g. "market")
        timestamp: Unix seconds of the source observation
        intensity: Activation level in [0, 1]
        frequency: Positive, domain-defined rate of change
        phase: Circular position in [0, 2*pi)
        harmonics: Fixed-length sub-component summary (length constant per adapter)
        raw: Unconverted input features, in the adapter's declared order
        clamped: Names of derived fields that were clamped into range
    """

    domain: str
    timestamp: float
    intensity: float
    frequency: float
    phase: float
    harmonics: tuple[float, ...]
    raw: tuple[float, ...]
    clamped: tuple[str, ...] = ()


@dataclass(frozen=True)
class QuadrantProfile:
    """Four-way character weighting of a signature (normalized to sum 1)."""

    aggressive: float = 0.25
    defensive: float = 0.25
    tactical: float = 0.25
    strategic: float = 0.25

    @classmethod
    def normalized(
        cls, aggressive: float, defensive: float, tactical: float, strategic: float
    ) -> QuadrantProfile:
        """Floor negatives at 0 and scale to sum 1 (uniform if all zero)."""
        weights = [max(0.0, w) for w in (aggressive, defensive, tactical, strategic)]
        total = sum(weights)
        if total <= 0:
            return cls()
        return cls(*(w / total for w in weights))

    def as_tuple(self) -> tuple[float, float, float, float]:
        return tuple(getattr(self, name) for name in QUADRANTS)

    def dominant(self) -> str:
        """Heaviest quadrant; ties go to the earlier name in QUADRANTS."""
        return max(QUADRANTS, key=lambda name: getattr(self, name))


@dataclass(frozen=True)
class TemporalFlow:
    """Share of window energy in the early, mid and late thirds (sum 1)."""

    early: float = 0.33
    mid: float = 0.34
    late: float = 0.33

    def as_tuple(self) -> tuple[float, float, float]:
        return tuple(getattr(self, name) for name in FLOW_PHASES)

    def dominant(self) -> str:
        return max(FLOW_PHASES, key=lambda name: getattr(self, name))


@dataclass(frozen=True)
class Signature:
    """Point-in-time statistical summary of a domain's trailing signal window.

    A pure function of the buffer contents at extraction time; only
    ``extracted_at`` depends on the clock. Never patched: build a new one.
    """

    domain: str
    quadrant_profile: QuadrantProfile = field(default_factory=QuadrantProfile)
    temporal_flow: TemporalFlow = field(default_factory=TemporalFlow)
    intensity: float = 0.5
    momentum: float = 0.0
    volatility: float = 0.0
    dominant_frequency: float = 0.0
    harmonic_resonance: float = 0.5
    phase_alignment: float = 0.5
    extracted_at: float = 0.0
    sample_size: int = 0
    is_default: bool = False

    def content(self) -> tuple:
        """Every field except ``extracted_at``; equal for equal buffers."""
        return (
            self.domain,
            self.quadrant_profile,
            self.temporal_flow,
            self.intensity,
            self.momentum,
            self.volatility,
            self.dominant_frequency,
            self.harmonic_resonance,
            self.phase_alignment,
            self.sample_size,
            self.is_default,
        )
