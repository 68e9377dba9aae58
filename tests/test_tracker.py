"""Tests for prediction outcome tracking."""

import logging

import pytest

from confluence.consensus import (
    Direction,
    DomainContribution,
    OutcomeTracker,
    UnifiedPrediction,
    Vote,
)


def _prediction(direction=Direction.UP, magnitude=0.4, votes=None):
    votes = votes if votes is not None else {"market": Vote.BULLISH, "seismic": Vote.BEARISH}
    return UnifiedPrediction(
        direction=direction,
        confidence=0.6,
        magnitude=magnitude,
        time_horizon=5.0,
        contributions=tuple(
            DomainContribution(domain=d, weight=0.5, vote=v, confidence=0.8, resonance_score=0.5)
            for d, v in votes.items()
        ),
        consensus_strength=0.5,
        harmonic_alignment=0.5,
        insufficient_correlation=False,
        created_at=0.0,
    )


@pytest.fixture
def tracker(clock):
    return OutcomeTracker(clock=clock)


class TestAccuracy:
    """Adaptive moving averages."""

    def test_starts_neutral(self, tracker):
        """Everything starts at 0.5 with no history."""
        assert tracker.accuracy == 0.5
        assert tracker.magnitude_accuracy == 0.5
        assert tracker.domain_accuracy == {}
        assert len(tracker) == 0

    def test_hit_uses_damped_step(self, tracker):
        """A hit moves accuracy with alpha 0.08."""
        outcome = tracker.record(_prediction(), Direction.UP, actual_magnitude=0.2)
        assert outcome.correct
        assert tracker.accuracy == pytest.approx(0.54)
        assert tracker.magnitude_accuracy == pytest.approx(0.53)
        assert outcome.magnitude_accuracy == pytest.approx(0.8)

    def test_miss_uses_boosted_step(self, tracker):
        """A miss moves accuracy with alpha 0.15."""
        outcome = tracker.record(_prediction(), "down")
        assert not outcome.correct
        assert outcome.actual is Direction.DOWN
        assert tracker.accuracy == pytest.approx(0.425)

    def test_domain_accuracy(self, tracker):
        """Domains that voted with the outcome gain, the others lose."""
        tracker.record(_prediction(), Direction.UP)
        assert tracker.domain_accuracy["market"] == pytest.approx(0.535)
        assert tracker.domain_accuracy["seismic"] == pytest.approx(0.435)

    def test_invalid_direction(self, tracker):
        """Unknown direction strings are rejected."""
        with pytest.raises(ValueError):
            tracker.record(_prediction(), "sideways")

    def test_outcome_timestamp(self, tracker, clock):
        """Outcomes are stamped with the tracker clock."""
        clock.now = 4242.0
        assert tracker.record(_prediction(), Direction.UP).recorded_at == 4242.0


class TestWeakDomainWarning:
    """Repeatedly wrong domains are reported."""

    def test_warns_on_third_miss(self, tracker, caplog):
        """The warning fires once the domain's accuracy has dropped below 0.4."""
        caplog.set_level(logging.WARNING, logger="confluence")
        prediction = _prediction(votes={"seismic": Vote.BEARISH})

        tracker.record(prediction, Direction.UP)
        tracker.record(prediction, Direction.UP)
        assert not caplog.records

        tracker.record(prediction, Direction.UP)
        assert len(caplog.records) == 1
        assert "seismic keeps missing" in caplog.records[0].getMessage()


class TestHistory:
    """Velocity, rankings and retained outcomes."""

    def test_velocity_zero_until_twenty(self, tracker):
        """Fewer than 20 outcomes give zero velocity."""
        for _ in range(19):
            tracker.record(_prediction(), Direction.UP)
        assert tracker.learning_velocity == 0.0

    def test_velocity_improving(self, tracker):
        """Ten misses then ten hits is a velocity of 10."""
        for _ in range(10):
            tracker.record(_prediction(), Direction.DOWN)
        for _ in range(10):
            tracker.record(_prediction(), Direction.UP)
        assert tracker.learning_velocity == pytest.approx(10.0)

    def test_rankings(self, tracker):
        """Best domain first."""
        tracker.record(_prediction(), Direction.UP)
        assert [d for d, _ in tracker.rankings()] == ["market", "seismic"]

    def test_generation_and_history_bound(self, clock):
        """History is bounded but the generation keeps counting."""
        tracker = OutcomeTracker(history=20, clock=clock)
        for _ in range(25):
            tracker.record(_prediction(), Direction.UP)
        assert len(tracker) == 20
        assert tracker.generation == 25
        assert len(tracker.outcomes(last=5)) == 5
        assert tracker.outcomes(last=0) == ()

    @pytest.mark.parametrize("kwargs", [{"history": 10}, {"base_alpha": 0.0}, {"base_alpha": 1.0}])
    def test_invalid_settings(self, kwargs):
        """History must cover the velocity span and alpha must be in (0, 1)."""
        with pytest.raises(ValueError):
            OutcomeTracker(**kwargs)
