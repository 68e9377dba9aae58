"""Aggregator output types."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Optional


class Direction(Enum):
    """Consensus direction of a unified prediction."""

    UP = "up"
    DOWN = "down"
    NEUTRAL = "neutral"

    @property
    def sign(self) -> int:
        return {Direction.UP: 1, Direction.DOWN: -1, Direction.NEUTRAL: 0}[self]


class Vote(Enum):
    """One domain's directional vote."""

    BULLISH = "bullish"
    BEARISH = "bearish"
    NEUTRAL = "neutral"

    @property
    def sign(self) -> int:
        return {Vote.BULLISH: 1, Vote.BEARISH: -1, Vote.NEUTRAL: 0}[self]

    def agrees_with(self, direction: Direction) -> bool:
        return self.sign == direction.sign


@dataclass(frozen=True)
class DomainContribution:
    """How one domain entered a unified prediction.

    Attributes:
        domain: Domain name
        weight: Non-negative aggregation weight
        vote: Directional vote derived from the domain's momentum
        confidence: Domain confidence, 1 - volatility clamped to [0, 1]
        resonance_score: The signature's harmonic resonance
        isolated: True when the domain had no READY correlation and got
            the fixed minimum weight
    """

    domain: str
    weight: float
    vote: Vote
    confidence: float
    resonance_score: float
    isolated: bool = False


@dataclass(frozen=True)
class UnifiedPrediction:
    """Cross-domain consensus at one tick.

    Always complete: low trust is carried by ``confidence`` and
    ``insufficient_correlation``, never by missing fields.
    """

    direction: Direction
    confidence: float
    magnitude: float
    time_horizon: float
    contributions: tuple[DomainContribution, ...]
    consensus_strength: float
    harmonic_alignment: float
    insufficient_correlation: bool
    created_at: float

    @property
    def domains(self) -> tuple[str, ...]:
        return tuple(c.domain for c in self.contributions)

    def contribution(self, domain: str) -> Optional[DomainContribution]:
        for c in self.contributions:
            if c.domain == domain:
                return c
        return None
