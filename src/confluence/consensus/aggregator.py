"""Weighted cross-domain vote.

Each domain votes from its own signature (sign of momentum) with confidence
1 - volatility. Its weight is that confidence times its mean |r| with the
other supplied domains it is READY-correlated with; a domain with no READY
correlation is isolated and gets a small fixed weight instead.

    N          = sum(w * v) / sum(w)                  v in {+1, -1, 0}
    direction  = up if N > band, down if N < -band, else neutral
    magnitude  = |sum(w * v * min(|momentum|, 1))| / sum(w)
    strength   = sum(w of voters agreeing with direction) / sum(w)
    confidence = min(cap, strength * weighted mean domain confidence
                          * mean READY pair confidence)

With no READY pair among the supplied domains the prediction is neutral with
zero confidence and ``insufficient_correlation`` set.
"""

from __future__ import annotations

import math
import time
from typing import Callable, Iterable, Mapping, Optional

from ..config import ConsensusConfig
from ..correlation.models import CrossDomainCorrelation, PairState
from ..logging_config import get_logger
from ..math.statistics import Statistics, clamp
from ..signals.models import Signature
from .models import Direction, DomainContribution, UnifiedPrediction, Vote

logger = get_logger(__name__)


class ConsensusAggregator:
    """Combines signatures and READY correlations into a UnifiedPrediction.

    Stateless between calls: the output depends only on the arguments.
    """

    def __init__(
        self,
        config: Optional[ConsensusConfig] = None,
        clock: Callable[[], float] = time.time,
    ) -> None:
        self.config = config if config is not None else ConsensusConfig()
        self._clock = clock

    def vote(self, signature: Signature) -> Vote:
        threshold = self.config.vote_threshold
        if signature.momentum > threshold:
            return Vote.BULLISH
        if signature.momentum < -threshold:
            return Vote.BEARISH
        return Vote.NEUTRAL

    @staticmethod
    def domain_confidence(signature: Signature) -> float:
        if signature.is_default:
            return 0.0
        return clamp(1.0 - signature.volatility)

    def aggregate(
        self,
        signatures: Mapping[str, Signature],
        correlations: Iterable[CrossDomainCorrelation],
        now: Optional[float] = None,
    ) -> UnifiedPrediction:
        """Compute the unified prediction.

        Args:
            signatures: Current signature per domain
            correlations: Current correlations; only READY pairs between two
                supplied domains are used
            now: Creation time (defaults to the aggregator clock)

        Returns:
            UnifiedPrediction with one contribution per supplied domain.
        """
        now = self._clock() if now is None else now
        ready = [
            c
            for c in correlations
            if c.state is PairState.READY
            and c.domain_a in signatures
            and c.domain_b in signatures
        ]

        strengths: dict[str, list[float]] = {domain: [] for domain in signatures}
        for c in ready:
            strengths[c.domain_a].append(abs(c.coefficient))
            strengths[c.domain_b].append(abs(c.coefficient))

        contributions = tuple(
            self._contribution(domain, signatures[domain], strengths[domain])
            for domain in sorted(signatures)
        )
        contributing = [c for c in contributions if c.weight > 0]
        harmonic_alignment = (
            Statistics.mean([c.resonance_score for c in contributing]) if contributing else 0.0
        )

        if not ready:
            logger.debug(
                "insufficient correlation data across %d domains; neutral prediction",
                len(signatures),
            )
            return self._neutral(contributions, harmonic_alignment, now, insufficient=True)

        total = math.fsum(c.weight for c in contributions)
        if total <= 0:
            return self._neutral(contributions, harmonic_alignment, now, insufficient=False)

        normalized = math.fsum(c.weight * c.vote.sign for c in contributions) / total
        band = self.config.neutral_band
        if normalized > band:
            direction = Direction.UP
        elif normalized < -band:
            direction = Direction.DOWN
        else:
            direction = Direction.NEUTRAL

        magnitude = abs(
            math.fsum(
                c.weight * c.vote.sign * min(abs(signatures[c.domain].momentum), 1.0)
                for c in contributions
            )
        ) / total
        strength = math.fsum(c.weight for c in contributions if c.vote.agrees_with(direction)) / total
        weighted_confidence = math.fsum(c.weight * c.confidence for c in contributions) / total
        pair_confidence = Statistics.mean([c.confidence for c in ready])

        confidence = min(
            self.config.confidence_cap, strength * weighted_confidence * pair_confidence
        )

        return UnifiedPrediction(
            direction=direction,
            confidence=clamp(confidence),
            magnitude=clamp(magnitude),
            time_horizon=self.config.time_horizon,
            contributions=contributions,
            consensus_strength=clamp(strength),
            harmonic_alignment=clamp(harmonic_alignment),
            insufficient_correlation=False,
            created_at=now,
        )

    def _contribution(
        self, domain: str, signature: Signature, strengths: list[float]
    ) -> DomainContribution:
        confidence = self.domain_confidence(signature)
        isolated = not strengths
        weight = self.config.min_weight if isolated else confidence * Statistics.mean(strengths)
        return DomainContribution(
            domain=domain,
            weight=weight,
            vote=self.vote(signature),
            confidence=confidence,
            resonance_score=signature.harmonic_resonance,
            isolated=isolated,
        )

    def _neutral(
        self,
        contributions: tuple[DomainContribution, ...],
        harmonic_alignment: float,
        now: float,
        insufficient: bool,
    ) -> UnifiedPrediction:
        return UnifiedPrediction(
            direction=Direction.NEUTRAL,
            confidence=0.0,
            magnitude=0.0,
            time_horizon=self.config.time_horizon,
            contributions=contributions,
            consensus_strength=0.0,
            harmonic_alignment=clamp(harmonic_alignment),
            insufficient_correlation=insufficient,
            created_at=now,
        )
