"""Tests for the rolling cross-domain correlation engine."""

import numpy as np
import pytest

from confluence.config import CorrelationConfig
from confluence.correlation import (
    CorrelationEngine,
    CrossDomainCorrelation,
    PairState,
    best_shift,
    pair_key,
)


def _feed(engine, make_signature, series, now=0.0):
    """Feed aligned momentum series, one update per tick."""
    length = len(next(iter(series.values())))
    for t in range(length):
        snapshot = {d: make_signature(d, momentum=values[t]) for d, values in series.items()}
        engine.update(snapshot, now=now + t)


class TestHelpers:
    """pair_key and best_shift."""

    def test_pair_key_sorted(self):
        """Both orders map to one key."""
        assert pair_key("market", "epidemic") == ("epidemic", "market")
        assert pair_key("epidemic", "market") == ("epidemic", "market")

    def test_pair_key_self(self):
        """A domain cannot pair with itself."""
        with pytest.raises(ValueError, match="itself"):
            pair_key("market", "market")

    def test_best_shift_max(self):
        """The highest coefficient wins."""
        assert best_shift({-1: 0.2, 0: 0.5, 3: 0.9}) == 3

    def test_best_shift_ties(self):
        """Ties prefer the smallest |shift|, then the negative one."""
        assert best_shift({-2: 0.8, 2: 0.8, 3: 0.8}) == -2
        assert best_shift({-1: 0.9, 0: 0.9, 1: 0.9}) == 0


class TestLifecycle:
    """Pair states and the READY threshold."""

    def test_unknown_pair_uninitialized(self):
        """Pairs never seen are UNINITIALIZED."""
        engine = CorrelationEngine()
        assert engine.state("market", "seismic") is PairState.UNINITIALIZED
        assert engine.get("market", "seismic") is None
        assert engine.observed("market", "seismic") == 0

    def test_ready_at_min_samples(self, make_signature):
        """Perfectly linear series become READY at tick 30 with r = 1 and lag 0."""
        engine = CorrelationEngine(CorrelationConfig(min_samples=30, window=100, max_lag=5))
        a = [0.01 * t for t in range(40)]
        b = [0.02 * t + 0.5 for t in range(40)]

        _feed(engine, make_signature, {"alpha": a[:29], "beta": b[:29]})
        assert engine.state("alpha", "beta") is PairState.ACCUMULATING
        assert engine.get("alpha", "beta") is None

        _feed(engine, make_signature, {"alpha": a[29:30], "beta": b[29:30]})
        assert engine.state("alpha", "beta") is PairState.READY

        _feed(engine, make_signature, {"alpha": a[30:], "beta": b[30:]})
        corr = engine.get("alpha", "beta")
        assert corr.coefficient == pytest.approx(1.0)
        assert corr.lead_lag == 0
        assert corr.sample_size == 40
        assert corr.confidence == pytest.approx(0.4)
        assert engine.observed("alpha", "beta") == 40

    def test_update_returns_ready_only(self, make_signature):
        """Accumulating pairs are not returned."""
        engine = CorrelationEngine(CorrelationConfig(min_samples=3, window=10))
        snapshot = {"alpha": make_signature("alpha"), "beta": make_signature("beta")}
        assert engine.update(snapshot, now=0.0) == []
        engine.update(snapshot, now=1.0)
        refreshed = engine.update(snapshot, now=2.0)
        assert [c.pair for c in refreshed] == [("alpha", "beta")]
        assert refreshed[0].updated_at == 2.0

    def test_default_signature_skipped(self, make_signature, toy_adapter):
        """A domain with no data contributes no sample."""
        engine = CorrelationEngine()
        engine.update(
            {"alpha": make_signature("alpha"), "toy": toy_adapter.extract_signature()}, now=0.0
        )
        assert engine.observed("alpha", "toy") == 0
        assert len(engine) == 0

    def test_missing_domain_skipped(self, make_signature):
        """Only pairs present in the snapshot gain a sample."""
        engine = CorrelationEngine()
        engine.update({d: make_signature(d) for d in ("a", "b", "c")}, now=0.0)
        engine.update({d: make_signature(d) for d in ("a", "b")}, now=1.0)
        assert engine.observed("a", "b") == 2
        assert engine.observed("a", "c") == 1
        assert list(engine.pairs()) == [("a", "b"), ("a", "c"), ("b", "c")]


class TestEstimates:
    """Coefficient, lead/lag and confidence."""

    def test_constant_series_degenerate(self, make_signature):
        """Zero variance in one domain gives r = 0 and confidence 0."""
        engine = CorrelationEngine(CorrelationConfig(min_samples=5, window=20))
        _feed(engine, make_signature, {"a": [0.1 * t for t in range(10)], "b": [0.3] * 10})
        corr = engine.get("a", "b")
        assert corr.state is PairState.READY
        assert corr.coefficient == 0.0
        assert corr.confidence == 0.0
        assert corr.lead_lag == 0

    def test_detects_lead(self, make_signature):
        """beta's changes reach alpha two ticks later."""
        rng = np.random.default_rng(7)
        x = list(rng.normal(size=62))
        leader = x[2:]
        follower = x[:-2]
        engine = CorrelationEngine(CorrelationConfig(min_samples=30, window=100, max_lag=5))
        _feed(engine, make_signature, {"alpha": follower, "beta": leader})
        assert engine.get("alpha", "beta").lead_lag == -2
        assert engine.get("beta", "alpha").lead_lag == 2

    def test_orientation(self, make_signature):
        """get(b, a) is get(a, b) with domains swapped and lead/lag negated."""
        rng = np.random.default_rng(1)
        x = list(rng.normal(size=45))
        engine = CorrelationEngine(CorrelationConfig(min_samples=30))
        _feed(engine, make_signature, {"a": x[3:], "b": x[:-3]})
        forward = engine.get("a", "b")
        backward = engine.get("b", "a")
        assert backward.domain_a == "b"
        assert backward.lead_lag == -forward.lead_lag
        assert backward.coefficient == forward.coefficient

    def test_window_bound(self, make_signature):
        """The retained history never exceeds the window."""
        engine = CorrelationEngine(CorrelationConfig(min_samples=5, window=10))
        a = [0.1 * t for t in range(25)]
        _feed(engine, make_signature, {"a": a, "b": [2 * v for v in a]})
        assert engine.get("a", "b").sample_size == 10
        assert engine.observed("a", "b") == 25

    def test_confidence_grows_then_saturates(self, make_signature):
        """For a stable relationship confidence rises with samples up to 1."""
        engine = CorrelationEngine(CorrelationConfig(min_samples=10, window=20))
        seen = []
        for t in range(30):
            snapshot = {
                "a": make_signature("a", momentum=0.1 * t),
                "b": make_signature("b", momentum=0.3 * t),
            }
            refreshed = engine.update(snapshot, now=float(t))
            if refreshed:
                seen.append(refreshed[0].confidence)
        assert all(later >= earlier - 1e-9 for earlier, later in zip(seen, seen[1:]))
        assert seen[-1] == pytest.approx(1.0)
        assert all(0.0 <= c <= 1.0 for c in seen)

    def test_tracks_configured_field(self, make_signature):
        """The engine correlates the configured signature attribute."""
        engine = CorrelationEngine(CorrelationConfig(min_samples=5, window=10, field="intensity"))
        for t in range(6):
            engine.update(
                {
                    "a": make_signature("a", intensity=0.1 * t),
                    "b": make_signature("b", intensity=0.9 - 0.1 * t),
                },
                now=float(t),
            )
        assert engine.get("a", "b").coefficient == pytest.approx(-1.0)


class TestQueries:
    """ready, top and reset."""

    @pytest.fixture
    def populated(self, make_signature):
        rng = np.random.default_rng(5)
        x = rng.normal(size=40)
        noise = rng.normal(size=40)
        engine = CorrelationEngine(CorrelationConfig(min_samples=30))
        _feed(
            engine,
            make_signature,
            {"a": list(x), "b": list(2 * x), "c": list(-0.5 * x + noise)},
        )
        return engine

    def test_ready_canonical_order(self, populated):
        """READY correlations come back in sorted pair order."""
        assert [c.pair for c in populated.ready()] == [("a", "b"), ("a", "c"), ("b", "c")]

    def test_top_by_strength(self, populated):
        """The strongest |r| comes first."""
        top = populated.top(limit=2)
        assert len(top) == 2
        assert top[0].pair == ("a", "b")
        assert abs(top[0].coefficient) >= abs(top[1].coefficient)

    def test_reset(self, populated):
        """Reset forgets every pair."""
        populated.reset()
        assert len(populated) == 0
        assert populated.state("a", "b") is PairState.UNINITIALIZED


class TestCorrelationModel:
    """CrossDomainCorrelation helpers."""

    @pytest.fixture
    def corr(self):
        return CrossDomainCorrelation(
            domain_a="market",
            domain_b="sentiment",
            coefficient=0.7,
            lead_lag=3,
            confidence=0.6,
            sample_size=50,
            updated_at=10.0,
        )

    def test_other(self, corr):
        """other() returns the partner domain."""
        assert corr.other("market") == "sentiment"
        assert corr.other("sentiment") == "market"
        with pytest.raises(ValueError):
            corr.other("seismic")

    def test_flipped(self, corr):
        """Flipping swaps domains and negates the lag only."""
        flipped = corr.flipped()
        assert flipped.pair == ("sentiment", "market")
        assert flipped.lead_lag == -3
        assert flipped.coefficient == 0.7
        assert flipped.flipped() == corr

    def test_involves(self, corr):
        """involves() checks membership."""
        assert corr.involves("market")
        assert not corr.involves("network")


class TestCorrelationConfig:
    """Validation of correlation settings."""

    @pytest.mark.parametrize(
        "kwargs,message",
        [
            ({"min_samples": 2}, "min_samples"),
            ({"min_samples": 50, "window": 40}, "window"),
            ({"max_lag": -1}, "max_lag"),
            ({"field": "colour"}, "field"),
        ],
    )
    def test_invalid(self, kwargs, message):
        """Out-of-range settings raise ValueError."""
        with pytest.raises(ValueError, match=message):
            CorrelationConfig(**kwargs)
