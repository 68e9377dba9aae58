"""Cross-domain correlation tracking."""

from .engine import CorrelationEngine, best_shift, pair_key
from .models import CrossDomainCorrelation, PairState

__all__ = [
    "CorrelationEngine",
    "CrossDomainCorrelation",
    "PairState",
    "best_shift",
    "pair_key",
]
