"""Consensus aggregation and outcome tracking."""

from .aggregator import ConsensusAggregator
from .models import Direction, DomainContribution, UnifiedPrediction, Vote
from .tracker import Outcome, OutcomeTracker

__all__ = [
    "ConsensusAggregator",
    "Direction",
    "DomainContribution",
    "UnifiedPrediction",
    "Vote",
    "Outcome",
    "OutcomeTracker",
]
