"""
Confluence - Cross-Domain Signal Consensus

Normalizes events from unrelated domains (markets, seismology, epidemiology,
network traffic, sentiment) into one comparable Signal shape, summarizes each
domain's recent history as a Signature, tracks how domains move together, and
combines everything into a single weighted prediction.
"""

__version__ = "0.1.0"

from .adapters import DomainAdapter, create_adapter
from .config import EngineConfig, load_config
from .consensus import Direction, UnifiedPrediction, Vote
from .correlation import CorrelationEngine, CrossDomainCorrelation, PairState
from .pipeline import ConfluenceEngine, EngineState
from .signals import Signal, Signature

__all__ = [
    "ConfluenceEngine",  # Main entry point
    "EngineState",
    "EngineConfig",
    "load_config",
    "DomainAdapter",
    "create_adapter",
    "Signal",
    "Signature",
    "CorrelationEngine",
    "CrossDomainCorrelation",
    "PairState",
    "UnifiedPrediction",
    "Direction",
    "Vote",
]
