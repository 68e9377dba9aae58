"""Domain adapters.

Importing this package registers every reference adapter.
"""

from .base import AdapterThresholds, DomainAdapter, SignalParts, validate_event
from .epidemic import EpidemicAdapter, EpidemicReport, EpidemicThresholds
from .market import MarketAdapter, MarketThresholds, MarketTick
from .network import NetworkAdapter, NetworkSample, NetworkThresholds
from .registry import ADAPTERS, adapter_class, available_domains, create_adapter, register
from .seismic import SeismicAdapter, SeismicEvent, SeismicThresholds
from .sentiment import SentimentAdapter, SentimentSample, SentimentThresholds
from .tables import REGIME_TABLES, RegimeBand, RegimeTable

__all__ = [
    "DomainAdapter",
    "AdapterThresholds",
    "SignalParts",
    "validate_event",
    "ADAPTERS",
    "register",
    "create_adapter",
    "adapter_class",
    "available_domains",
    "REGIME_TABLES",
    "RegimeBand",
    "RegimeTable",
    "MarketAdapter",
    "MarketTick",
    "MarketThresholds",
    "SeismicAdapter",
    "SeismicEvent",
    "SeismicThresholds",
    "EpidemicAdapter",
    "EpidemicReport",
    "EpidemicThresholds",
    "NetworkAdapter",
    "NetworkSample",
    "NetworkThresholds",
    "SentimentAdapter",
    "SentimentSample",
    "SentimentThresholds",
]
