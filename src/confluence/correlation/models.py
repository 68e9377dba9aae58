"""Cross-domain correlation value types."""

from __future__ import annotations

from dataclasses import dataclass, replace
from enum import Enum


class PairState(Enum):
    """Lifecycle of one domain pair.

    UNINITIALIZED -> ACCUMULATING -> READY; never moves backwards.
    """

    UNINITIALIZED = "uninitialized"
    ACCUMULATING = "accumulating"
    READY = "ready"


@dataclass(frozen=True)
class CrossDomainCorrelation:
    """Rolling relation between two domains' signature series.

    Attributes:
        domain_a: First domain of the pair
        domain_b: Second domain of the pair
        coefficient: Pearson r at lag 0, in [-1, 1]
        lead_lag: Shift in ticks maximizing cross-correlation; positive
            means domain_a's changes precede domain_b's
        confidence: Trust in the estimate, in [0, 1]
        sample_size: Paired samples in the retained window
        updated_at: Time of the update that produced this value
        state: Pair state when this value was produced
    """

    domain_a: str
    domain_b: str
    coefficient: float
    lead_lag: int
    confidence: float
    sample_size: int
    updated_at: float
    state: PairState = PairState.READY

    @property
    def pair(self) -> tuple[str, str]:
        return (self.domain_a, self.domain_b)

    def involves(self, domain: str) -> bool:
        return domain in (self.domain_a, self.domain_b)

    def other(self, domain: str) -> str:
        """The partner of ``domain`` in this pair."""
        if domain == self.domain_a:
            return self.domain_b
        if domain == self.domain_b:
            return self.domain_a
        raise ValueError(f"{domain!r} is not part of {self.pair}")

    def flipped(self) -> CrossDomainCorrelation:
        """Same relationship viewed from domain_b: domains swapped, lead/lag negated."""
        return replace(
            self,
            domain_a=self.domain_b,
            domain_b=self.domain_a,
            lead_lag=-self.lead_lag,
        )
