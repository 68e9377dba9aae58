"""Domain adapter contract.

A domain adapter owns one domain's signal buffer and is the only code that
appends to it. It converts typed raw events into :class:`Signal` values and
summarizes its trailing window as a :class:`Signature`.

Concrete adapters supply:
    event_type          frozen dataclass of the raw event; its RANGES table
                        documents the legal range of every numeric field
    thresholds_class    frozen AdapterThresholds subclass with domain tuning
    to_signal()         event -> SignalParts (domain formulas)
    quadrant_projection()  raw-feature means -> four raw weights

and may override ``directional_proxy``, ``energy_proxy`` and the default
signature constants.
"""

from __future__ import annotations

import dataclasses
import math
import time
from abc import ABC, abstractmethod
from dataclasses import dataclass
from numbers import Real
from typing import Any, Callable, ClassVar, Generic, Mapping, NamedTuple, Optional, TypeVar

from ..exceptions import InvalidEvent, SignalContractError
from ..logging_config import get_logger
from ..math.statistics import wrap_phase
from ..signals.buffer import SignalBuffer
from ..signals.extraction import extract_signature
from ..signals.models import QuadrantProfile, Signal, Signature, TemporalFlow
from .tables import REGIME_TABLES

logger = get_logger(__name__)

EventT = TypeVar("EventT")

# Smallest frequency a signal may carry; lower values are clamped up to it.
MIN_FREQUENCY = 1e-9


@dataclass(frozen=True)
class AdapterThresholds:
    """Engine-level tuning shared by every adapter.

    Attributes:
        capacity: Maximum signals retained in the buffer
        signature_window: Trailing signals summarized by default
            (None = the whole buffer)
        momentum_window: Size of the recent/preceding momentum sub-windows
        frequency_bucket: Bucket width for the dominant frequency
    """

    capacity: int = 1000
    signature_window: Optional[int] = 100
    momentum_window: int = 20
    frequency_bucket: float = 10.0

    def __post_init__(self) -> None:
        if self.capacity < 1:
            raise ValueError("capacity must be at least 1")
        if self.signature_window is not None and self.signature_window < 1:
            raise ValueError("signature_window must be at least 1")
        if self.momentum_window < 1:
            raise ValueError("momentum_window must be at least 1")
        if self.frequency_bucket <= 0:
            raise ValueError("frequency_bucket must be positive")

    def _require_positive(self, *names: str) -> None:
        for name in names:
            if getattr(self, name) <= 0:
                raise ValueError(f"{name} must be positive")


class SignalParts(NamedTuple):
    """Unchecked signal fields as computed by a domain formula."""

    timestamp: float
    intensity: float
    frequency: float
    phase: float
    harmonics: tuple[float, ...]
    raw: tuple[float, ...]
    clamped: tuple[str, ...] = ()


def validate_event(domain: str, event: Any, ranges: Mapping[str, tuple]) -> None:
    """Check every ranged field of ``event`` is a finite number within range.

    Args:
        domain: Domain name for error reporting
        event: Event instance
        ranges: {field: (low, high)}; either bound may be None

    Raises:
        InvalidEvent: On the first non-numeric, non-finite or out-of-range field
    """
    for name, (low, high) in ranges.items():
        value = getattr(event, name, None)
        if isinstance(value, bool) or not isinstance(value, Real):
            raise InvalidEvent(domain, name, value, "expected a number")
        value = float(value)
        if not math.isfinite(value):
            raise InvalidEvent(domain, name, value, "must be finite")
        if low is not None and value < low:
            raise InvalidEvent(domain, name, value, f"below minimum {low}")
        if high is not None and value > high:
            raise InvalidEvent(domain, name, value, f"above maximum {high}")


class DomainAdapter(ABC, Generic[EventT]):
    """Base class for all domain adapters."""

    domain: ClassVar[str]
    name: ClassVar[str]
    event_type: ClassVar[type]
    thresholds_class: ClassVar[type[AdapterThresholds]] = AdapterThresholds
    harmonics_length: ClassVar[int]
    raw_fields: ClassVar[tuple[str, ...]]

    # Documented default signature, returned while the buffer is empty.
    default_quadrants: ClassVar[QuadrantProfile] = QuadrantProfile()
    default_flow: ClassVar[TemporalFlow] = TemporalFlow()
    default_intensity: ClassVar[float] = 0.5
    default_frequency: ClassVar[float] = 0.0

    def __init__(
        self,
        thresholds: Optional[AdapterThresholds] = None,
        clock: Callable[[], float] = time.time,
    ) -> None:
        self.thresholds = thresholds if thresholds is not None else self.thresholds_class()
        if not isinstance(self.thresholds, self.thresholds_class):
            raise TypeError(
                f"{type(self).__name__} expects {self.thresholds_class.__name__}, "
                f"got {type(self.thresholds).__name__}"
            )
        self._buffer = SignalBuffer(self.domain, self.thresholds.capacity)
        self._clock = clock
        self.is_active = False
        self.initialized_at: Optional[float] = None
        self.last_update: Optional[float] = None
        self.rejected = 0

    # ── lifecycle ───────────────────────────────────────────────────

    def initialize(self) -> None:
        """Mark the adapter active. Idempotent; no I/O."""
        if self.is_active:
            return
        self.is_active = True
        self.initialized_at = self._clock()
        logger.info(
            "%s adapter initialized (capacity=%d, window=%s)",
            self.domain,
            self.thresholds.capacity,
            self.thresholds.signature_window,
        )

    def process(self, event: EventT) -> Signal:
        """Convert one raw event into a signal and append it to the buffer.

        Raises:
            InvalidEvent: If the event is malformed; nothing is appended.
        """
        if not self.is_active:
            self.initialize()

        try:
            self.validate(event)
        except InvalidEvent as e:
            self.rejected += 1
            logger.debug("rejected %s event: %s", self.domain, e)
            raise

        signal = self._build_signal(self.to_signal(event))
        self._buffer.append(signal)
        self.last_update = self._clock()
        return signal

    def extract_signature(self, window: Optional[int] = None) -> Signature:
        """Summarize the trailing ``window`` signals (default: configured window).

        Returns the documented default signature when the buffer is empty.
        """
        if window is not None and window < 1:
            raise ValueError("window must be at least 1")

        size = window if window is not None else self.thresholds.signature_window
        signals = self._buffer.snapshot() if size is None else self._buffer.last_n(size)
        if not signals:
            return self.default_signature()

        return extract_signature(
            self.domain,
            signals,
            quadrant_projection=self.quadrant_projection,
            directional_proxy=self.directional_proxy,
            energy_proxy=self.energy_proxy,
            momentum_window=self.thresholds.momentum_window,
            frequency_bucket=self.thresholds.frequency_bucket,
            extracted_at=self._clock(),
        )

    def default_signature(self) -> Signature:
        """Neutral signature used while no signals exist (or the domain is stale)."""
        return Signature(
            domain=self.domain,
            quadrant_profile=self.default_quadrants,
            temporal_flow=self.default_flow,
            intensity=self.default_intensity,
            momentum=0.0,
            volatility=0.0,
            dominant_frequency=self.default_frequency,
            harmonic_resonance=0.5,
            phase_alignment=0.5,
            extracted_at=self._clock(),
            sample_size=0,
            is_default=True,
        )

    # ── read-only views ─────────────────────────────────────────────

    def signals(self, last: Optional[int] = None) -> tuple[Signal, ...]:
        """Immutable copy of the buffer (or its trailing ``last`` signals)."""
        if last is None:
            return self._buffer.snapshot()
        return self._buffer.last_n(last)

    def latest_signal(self) -> Optional[Signal]:
        """Most recently buffered signal, or None. O(1)."""
        return self._buffer.latest()

    @property
    def buffer_size(self) -> int:
        return len(self._buffer)

    @property
    def evicted(self) -> int:
        return self._buffer.evicted

    def regime(self, signature: Signature) -> str:
        """Label a signature using this domain's reference table."""
        if signature.is_default:
            return "no data"
        table = REGIME_TABLES.get(self.domain)
        if table is None:
            return "unclassified"
        return table.classify(signature).label

    # ── event handling ──────────────────────────────────────────────

    def validate(self, event: EventT) -> None:
        if not isinstance(event, self.event_type):
            raise InvalidEvent(
                self.domain, "event", event, f"expected {self.event_type.__name__}"
            )
        validate_event(self.domain, event, self.event_type.RANGES)

    def parse_event(self, payload: Mapping[str, Any]) -> EventT:
        """Build this adapter's event type from a plain mapping (e.g. decoded JSON)."""
        fields = {f.name for f in dataclasses.fields(self.event_type)}
        unknown = sorted(set(payload) - fields)
        if unknown:
            raise InvalidEvent(self.domain, unknown[0], payload[unknown[0]], "unknown field")
        try:
            return self.event_type(**payload)
        except TypeError as e:
            raise InvalidEvent(self.domain, "event", dict(payload), str(e)) from e

    def _build_signal(self, parts: SignalParts) -> Signal:
        clamped = list(parts.clamped)

        intensity = parts.intensity
        if not 0.0 <= intensity <= 1.0:
            intensity = min(1.0, max(0.0, intensity))
            clamped.append("intensity")

        frequency = parts.frequency
        if frequency < MIN_FREQUENCY:
            frequency = MIN_FREQUENCY
            clamped.append("frequency")

        harmonics = tuple(float(h) for h in parts.harmonics)
        if len(harmonics) != self.harmonics_length:
            raise SignalContractError(
                self.domain,
                f"harmonics length {len(harmonics)} != {self.harmonics_length}",
            )
        raw = tuple(float(v) for v in parts.raw)
        if len(raw) != len(self.raw_fields):
            raise SignalContractError(
                self.domain, f"raw length {len(raw)} != {len(self.raw_fields)}"
            )
        if not all(math.isfinite(v) for v in (intensity, frequency, parts.phase) + harmonics):
            raise SignalContractError(self.domain, "non-finite derived value")

        if clamped:
            logger.debug("%s signal clamped: %s", self.domain, ", ".join(clamped))

        return Signal(
            domain=self.domain,
            timestamp=float(parts.timestamp),
            intensity=intensity,
            frequency=frequency,
            phase=wrap_phase(parts.phase),
            harmonics=harmonics,
            raw=raw,
            clamped=tuple(clamped),
        )

    # ── domain hooks ────────────────────────────────────────────────

    @abstractmethod
    def to_signal(self, event: EventT) -> SignalParts:
        """Domain formula: validated event -> unchecked signal fields."""
        ...

    @abstractmethod
    def quadrant_projection(self, means: tuple[float, ...]) -> tuple[float, float, float, float]:
        """Raw-feature means -> (aggressive, defensive, tactical, strategic) weights.

        Each weight must be non-negative and continuous in the means.
        """
        ...

    def directional_proxy(self, signal: Signal) -> float:
        return signal.intensity

    def energy_proxy(self, signal: Signal) -> float:
        return signal.intensity

    def __repr__(self) -> str:
        return (
            f"{type(self).__name__}(domain={self.domain!r}, active={self.is_active}, "
            f"buffered={self.buffer_size}/{self.thresholds.capacity})"
        )
