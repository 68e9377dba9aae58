"""ConfluenceEngine: adapters, correlation, consensus and outcome tracking.

Producers call :meth:`ConfluenceEngine.process` for their own domain (from any
thread; every domain has its own adapter and buffer). A scheduler calls
:meth:`ConfluenceEngine.tick` at its own cadence:

    snapshot  -> one Signature per active domain (default if stale)
    correlate -> CorrelationEngine.update(snapshot)
    aggregate -> ConsensusAggregator.aggregate(snapshot, READY correlations)

A domain that updates while a tick runs contributes whatever its signature
was when the snapshot was taken.
"""

from __future__ import annotations

import time
from collections import deque
from dataclasses import dataclass
from types import MappingProxyType
from typing import Any, Callable, Mapping, Optional, Union

from .adapters.base import DomainAdapter
from .adapters.registry import create_adapter
from .config import EngineConfig
from .consensus.aggregator import ConsensusAggregator
from .consensus.models import Direction, UnifiedPrediction
from .consensus.tracker import Outcome, OutcomeTracker
from .correlation.engine import CorrelationEngine
from .exceptions import DuplicateDomainError, EngineError, UnknownDomainError
from .logging_config import get_logger
from .signals.models import Signal, Signature

logger = get_logger(__name__)


@dataclass(frozen=True)
class EngineState:
    """Read-only summary of the engine at one moment."""

    active_domains: tuple[str, ...]
    is_calibrated: bool
    calibration_progress: float
    predictions_made: int
    last_prediction: Optional[UnifiedPrediction]
    accuracy: float
    magnitude_accuracy: float
    domain_accuracy: Mapping[str, float]
    learning_velocity: float
    generation: int
    ready_correlations: int


class ConfluenceEngine:
    """Cross-domain engine.

    Args:
        config: Engine configuration (defaults to ``EngineConfig()``)
        clock: Time source shared with every component
    """

    def __init__(
        self,
        config: Optional[EngineConfig] = None,
        clock: Callable[[], float] = time.time,
    ) -> None:
        self.config = config if config is not None else EngineConfig()
        self._clock = clock
        self._adapters: dict[str, DomainAdapter] = {}
        self.correlations = CorrelationEngine(self.config.correlation, clock=clock)
        self.aggregator = ConsensusAggregator(self.config.consensus, clock=clock)
        self.tracker = OutcomeTracker(clock=clock)
        self._predictions: deque[UnifiedPrediction] = deque(
            maxlen=self.config.prediction_history
        )
        self.predictions_made = 0

    @classmethod
    def from_config(
        cls,
        config: Optional[EngineConfig] = None,
        clock: Callable[[], float] = time.time,
    ) -> ConfluenceEngine:
        """Engine with a registered reference adapter for each configured domain.

        Raises:
            UnknownDomainError: If a configured domain has no adapter
            InvalidConfigError: If a domain's threshold overrides are invalid
        """
        engine = cls(config, clock=clock)
        for domain in engine.config.domains:
            engine.register(
                create_adapter(domain, engine.config.adapter_overrides(domain), clock=clock)
            )
        return engine

    # ── domains ─────────────────────────────────────────────────────

    def register(self, adapter: DomainAdapter) -> DomainAdapter:
        """Initialize ``adapter`` and route its domain's events to it.

        Raises:
            DuplicateDomainError: If the domain already has an adapter
        """
        if adapter.domain in self._adapters:
            raise DuplicateDomainError(adapter.domain)
        adapter.initialize()
        self._adapters[adapter.domain] = adapter
        return adapter

    def adapter(self, domain: str) -> DomainAdapter:
        try:
            return self._adapters[domain]
        except KeyError:
            raise UnknownDomainError(domain, list(self._adapters)) from None

    @property
    def domains(self) -> tuple[str, ...]:
        return tuple(sorted(self._adapters))

    def process(self, domain: str, event: Any) -> Signal:
        """Route one typed event to its domain's adapter.

        Raises:
            UnknownDomainError: If no adapter handles ``domain``
            InvalidEvent: If the adapter rejects the event
        """
        return self.adapter(domain).process(event)

    def process_payload(self, domain: str, payload: Mapping[str, Any]) -> Signal:
        """Like :meth:`process`, for a plain mapping such as decoded JSON."""
        adapter = self.adapter(domain)
        return adapter.process(adapter.parse_event(payload))

    # ── ticking ─────────────────────────────────────────────────────

    def is_stale(self, adapter: DomainAdapter, now: float) -> bool:
        stale_after = self.config.stale_after
        if stale_after is None or adapter.last_update is None:
            return False
        return now - adapter.last_update > stale_after

    def snapshot(self, now: Optional[float] = None) -> dict[str, Signature]:
        """Point-in-time signature of every active domain.

        Domains without an update in the last ``stale_after`` seconds get
        their default signature.
        """
        now = self._clock() if now is None else now
        signatures = {}
        for domain, adapter in sorted(self._adapters.items()):
            if not adapter.is_active:
                continue
            if self.is_stale(adapter, now):
                logger.debug("%s stale since %.3f; using default signature", domain, adapter.last_update)
                signatures[domain] = adapter.default_signature()
            else:
                signatures[domain] = adapter.extract_signature()
        return signatures

    def tick(self, now: Optional[float] = None) -> UnifiedPrediction:
        """Snapshot, update correlations and aggregate one prediction."""
        now = self._clock() if now is None else now
        signatures = self.snapshot(now)
        self.correlations.update(signatures, now=now)
        prediction = self.aggregator.aggregate(signatures, self.correlations.ready(), now=now)

        self._predictions.append(prediction)
        self.predictions_made += 1
        if self.predictions_made == self.config.calibration_predictions:
            logger.info("engine calibrated after %d predictions", self.predictions_made)

        logger.debug(
            "tick %d: %s confidence=%.3f strength=%.3f",
            self.predictions_made,
            prediction.direction.value,
            prediction.confidence,
            prediction.consensus_strength,
        )
        return prediction

    @property
    def last_prediction(self) -> Optional[UnifiedPrediction]:
        return self._predictions[-1] if self._predictions else None

    def predictions(self, last: Optional[int] = None) -> tuple[UnifiedPrediction, ...]:
        items = tuple(self._predictions)
        if last is None:
            return items
        return items[-last:] if last > 0 else ()

    @property
    def is_calibrated(self) -> bool:
        return self.predictions_made >= self.config.calibration_predictions

    @property
    def calibration_progress(self) -> float:
        if self.is_calibrated:
            return 1.0
        return min(self.predictions_made / self.config.calibration_predictions, 0.99)

    # ── outcomes ────────────────────────────────────────────────────

    def record_outcome(
        self,
        actual_direction: Union[Direction, str],
        actual_magnitude: float = 0.0,
        prediction: Optional[UnifiedPrediction] = None,
    ) -> Outcome:
        """Score ``prediction`` (default: the latest) against the realized move.

        Raises:
            EngineError: If there is no prediction to score
        """
        target = prediction if prediction is not None else self.last_prediction
        if target is None:
            raise EngineError("No prediction to score; call tick() first")
        return self.tracker.record(target, actual_direction, actual_magnitude)

    def state(self) -> EngineState:
        return EngineState(
            active_domains=tuple(d for d, a in sorted(self._adapters.items()) if a.is_active),
            is_calibrated=self.is_calibrated,
            calibration_progress=self.calibration_progress,
            predictions_made=self.predictions_made,
            last_prediction=self.last_prediction,
            accuracy=self.tracker.accuracy,
            magnitude_accuracy=self.tracker.magnitude_accuracy,
            domain_accuracy=MappingProxyType(dict(self.tracker.domain_accuracy)),
            learning_velocity=self.tracker.learning_velocity,
            generation=self.tracker.generation,
            ready_correlations=len(self.correlations.ready()),
        )

    def __repr__(self) -> str:
        return (
            f"ConfluenceEngine(domains={list(self.domains)}, "
            f"predictions={self.predictions_made}, calibrated={self.is_calibrated})"
        )
