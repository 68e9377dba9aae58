"""Tests for the generic domain adapter contract."""

import math

import pytest

from confluence.adapters.base import AdapterThresholds, SignalParts, validate_event
from confluence.adapters.market import MarketAdapter
from confluence.exceptions import InvalidEvent, SignalContractError
from confluence.math.statistics import TWO_PI


def _feed(adapter, levels, start=1.0):
    for i, level in enumerate(levels):
        adapter.process(adapter.event_type(timestamp=start + i, level=level))


class TestLifecycle:
    """Initialization and bookkeeping."""

    def test_initialize_idempotent(self, toy_adapter, clock):
        """A second initialize keeps the first timestamp."""
        toy_adapter.initialize()
        first = toy_adapter.initialized_at
        clock.advance(5)
        toy_adapter.initialize()
        assert toy_adapter.is_active
        assert toy_adapter.initialized_at == first

    def test_process_auto_initializes(self, toy_adapter):
        """Processing activates an inactive adapter."""
        _feed(toy_adapter, [0.5])
        assert toy_adapter.is_active

    def test_last_update_uses_clock(self, toy_adapter, clock):
        """last_update is the receipt time, not the event timestamp."""
        clock.now = 2000.0
        _feed(toy_adapter, [0.5], start=1.0)
        assert toy_adapter.last_update == 2000.0

    def test_wrong_thresholds_class(self):
        """Adapters insist on their own thresholds type."""
        with pytest.raises(TypeError, match="MarketThresholds"):
            MarketAdapter(thresholds=AdapterThresholds())

    def test_thresholds_validated(self):
        """Invalid thresholds are rejected at construction."""
        with pytest.raises(ValueError, match="capacity"):
            AdapterThresholds(capacity=0)
        with pytest.raises(ValueError, match="signature_window"):
            AdapterThresholds(signature_window=0)


class TestSignatures:
    """Signature extraction through the adapter."""

    def test_default_on_empty(self, toy_adapter):
        """An empty buffer yields the documented default, never an error."""
        sig = toy_adapter.extract_signature()
        assert sig.is_default
        assert sig.sample_size == 0
        assert sig.intensity == 0.5
        assert sig.momentum == 0.0
        assert sig.harmonic_resonance == 0.5
        assert sig.phase_alignment == 0.5
        assert sum(sig.temporal_flow.as_tuple()) == pytest.approx(1.0)

    def test_capacity_three_example(self, clock):
        """Fourth event evicts the first; mean intensity is 0.3."""
        from conftest import ToyAdapter

        adapter = ToyAdapter(thresholds=AdapterThresholds(capacity=3), clock=clock)
        _feed(adapter, [0.1, 0.2, 0.3, 0.4])
        assert [s.intensity for s in adapter.signals()] == pytest.approx([0.2, 0.3, 0.4])
        assert adapter.extract_signature().intensity == pytest.approx(0.3)
        assert adapter.evicted == 1

    def test_boundedness(self, clock):
        """After more events than capacity the buffer holds the last ones in order."""
        from conftest import ToyAdapter

        adapter = ToyAdapter(thresholds=AdapterThresholds(capacity=5), clock=clock)
        levels = [i / 20 for i in range(12)]
        _feed(adapter, levels)
        assert adapter.buffer_size == 5
        assert [s.intensity for s in adapter.signals()] == pytest.approx(levels[-5:])

    def test_deterministic_except_timestamp(self, toy_adapter, clock):
        """Re-extracting an unchanged buffer changes only extracted_at."""
        _feed(toy_adapter, [0.1, 0.5, 0.3, 0.9, 0.7])
        first = toy_adapter.extract_signature()
        clock.advance(60)
        second = toy_adapter.extract_signature()
        assert first.content() == second.content()
        assert second.extracted_at == first.extracted_at + 60

    def test_explicit_window(self, toy_adapter):
        """A window argument limits the summarized signals."""
        _feed(toy_adapter, [0.1, 0.2, 0.3, 0.4])
        sig = toy_adapter.extract_signature(window=2)
        assert sig.sample_size == 2
        assert sig.intensity == pytest.approx(0.35)

    def test_invalid_window(self, toy_adapter):
        """Window must be positive."""
        with pytest.raises(ValueError, match="window"):
            toy_adapter.extract_signature(window=0)

    def test_regime_labels(self, toy_adapter):
        """Defaults read as no data; domains without a table are unclassified."""
        assert toy_adapter.regime(toy_adapter.default_signature()) == "no data"
        _feed(toy_adapter, [0.5])
        assert toy_adapter.regime(toy_adapter.extract_signature()) == "unclassified"


class TestValidation:
    """Malformed events are rejected whole."""

    @pytest.mark.parametrize("level", [1.5, -0.1, float("nan"), float("inf"), True, "0.5"])
    def test_rejects_bad_level(self, toy_adapter, level):
        """Out-of-range, non-finite and non-numeric values raise InvalidEvent."""
        _feed(toy_adapter, [0.5])
        with pytest.raises(InvalidEvent) as exc_info:
            toy_adapter.process(toy_adapter.event_type(timestamp=2.0, level=level))
        assert exc_info.value.field == "level"
        assert toy_adapter.buffer_size == 1
        assert toy_adapter.rejected == 1

    def test_rejects_wrong_event_type(self, toy_adapter):
        """Only the adapter's event type is accepted."""
        with pytest.raises(InvalidEvent, match="event"):
            toy_adapter.process({"timestamp": 1.0, "level": 0.5})
        assert toy_adapter.buffer_size == 0

    def test_validate_event_bounds(self):
        """Either bound may be open."""
        event = type("E", (), {"x": 5.0})()
        validate_event("toy", event, {"x": (None, 10.0)})
        with pytest.raises(InvalidEvent, match="x"):
            validate_event("toy", event, {"x": (6.0, None)})

    def test_parse_event(self, toy_adapter):
        """Plain mappings become typed events."""
        event = toy_adapter.parse_event({"timestamp": 1.0, "level": 0.25})
        assert event.level == 0.25

    def test_parse_event_unknown_field(self, toy_adapter):
        """Unknown keys are rejected."""
        with pytest.raises(InvalidEvent) as exc_info:
            toy_adapter.parse_event({"timestamp": 1.0, "level": 0.25, "bogus": 1})
        assert exc_info.value.field == "bogus"

    def test_parse_event_missing_field(self, toy_adapter):
        """Missing required keys are rejected."""
        with pytest.raises(InvalidEvent):
            toy_adapter.parse_event({"timestamp": 1.0})


class TestSignalContract:
    """Signals built by the adapter always satisfy the invariants."""

    def test_phase_wrapped(self, toy_adapter):
        """Phase is taken modulo 2*pi."""
        signal = toy_adapter.process(toy_adapter.event_type(timestamp=1.0, level=0.5, phase=7.0))
        assert signal.phase == pytest.approx(7.0 - TWO_PI)

    def test_clamps_recorded(self, clock):
        """Out-of-range derived values are clamped and named."""
        from conftest import ToyAdapter

        class LoudAdapter(ToyAdapter):
            def to_signal(self, event):
                parts = super().to_signal(event)
                return parts._replace(intensity=parts.intensity * 2, frequency=0.0)

        signal = LoudAdapter(clock=clock).process(LoudAdapter.event_type(timestamp=1.0, level=0.8))
        assert signal.intensity == 1.0
        assert signal.frequency > 0
        assert set(signal.clamped) == {"intensity", "frequency"}

    def test_harmonics_length_enforced(self, clock):
        """A harmonics length mismatch is a contract violation."""
        from conftest import ToyAdapter

        class BrokenAdapter(ToyAdapter):
            harmonics_length = 3

        adapter = BrokenAdapter(clock=clock)
        with pytest.raises(SignalContractError, match="harmonics"):
            adapter.process(adapter.event_type(timestamp=1.0, level=0.5))
        assert adapter.buffer_size == 0

    def test_non_finite_output_rejected(self, clock):
        """Formulas producing NaN break the contract."""
        from conftest import ToyAdapter

        class NanAdapter(ToyAdapter):
            def to_signal(self, event):
                return SignalParts(
                    timestamp=event.timestamp,
                    intensity=0.5,
                    frequency=1.0,
                    phase=0.0,
                    harmonics=(math.nan, 0.0),
                    raw=(event.level,),
                )

        with pytest.raises(SignalContractError, match="non-finite"):
            NanAdapter(clock=clock).process(NanAdapter.event_type(timestamp=1.0, level=0.5))
