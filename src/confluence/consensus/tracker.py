"""Outcome tracking for past predictions.

Accuracy figures are reporting only; they are never fed back into the
aggregator's weights, so a prediction stays reproducible from the signatures
and correlations it was computed from.

Accuracies are exponential moving averages with an adaptive step: the overall
step shrinks after a hit and grows after a miss, so one surprise moves the
figure more than one confirmation. Per-domain steps work the same way with a
wider spread.
"""

from __future__ import annotations

import time
from collections import deque
from dataclasses import dataclass
from typing import Callable, Optional, Union

from ..logging_config import get_logger
from ..math.statistics import clamp
from .models import Direction, UnifiedPrediction

logger = get_logger(__name__)

BASE_ALPHA = 0.1
HIT_DAMPING = 0.8
MISS_BOOST = 1.5
DOMAIN_HIT_DAMPING = 0.7
DOMAIN_MISS_BOOST = 1.3
WEAK_DOMAIN_ACCURACY = 0.4
VELOCITY_SPAN = 10


@dataclass(frozen=True)
class Outcome:
    """Realized result of one prediction."""

    predicted: Direction
    actual: Direction
    correct: bool
    predicted_magnitude: float
    actual_magnitude: float
    magnitude_accuracy: float
    confidence: float
    recorded_at: float


class OutcomeTracker:
    """Accumulates accuracy statistics over recorded outcomes.

    Args:
        history: Outcomes retained for ``learning_velocity`` and ``outcomes``
        base_alpha: EMA step before adaptation
        clock: Time source
    """

    def __init__(
        self,
        history: int = 100,
        base_alpha: float = BASE_ALPHA,
        clock: Callable[[], float] = time.time,
    ) -> None:
        if history < 2 * VELOCITY_SPAN:
            raise ValueError(f"history must be at least {2 * VELOCITY_SPAN}")
        if not 0.0 < base_alpha < 1.0:
            raise ValueError("base_alpha must be in (0, 1)")
        self.base_alpha = base_alpha
        self._clock = clock
        self._outcomes: deque[Outcome] = deque(maxlen=history)
        self.accuracy = 0.5
        self.magnitude_accuracy = 0.5
        self.domain_accuracy: dict[str, float] = {}
        self.generation = 0

    def record(
        self,
        prediction: UnifiedPrediction,
        actual_direction: Union[Direction, str],
        actual_magnitude: float = 0.0,
    ) -> Outcome:
        """Score a prediction against what actually happened.

        Args:
            prediction: The prediction being scored
            actual_direction: Realized direction (enum or its value)
            actual_magnitude: Realized magnitude in [0, 1]

        Returns:
            The recorded Outcome.
        """
        actual = Direction(actual_direction)
        correct = prediction.direction is actual
        magnitude_accuracy = clamp(1.0 - abs(prediction.magnitude - actual_magnitude))

        alpha = self.base_alpha * (HIT_DAMPING if correct else MISS_BOOST)
        self.accuracy = _ema(self.accuracy, 1.0 if correct else 0.0, alpha)
        self.magnitude_accuracy = _ema(self.magnitude_accuracy, magnitude_accuracy, self.base_alpha)

        for contribution in prediction.contributions:
            right = contribution.vote.agrees_with(actual)
            previous = self.domain_accuracy.get(contribution.domain, 0.5)
            if not right and previous < WEAK_DOMAIN_ACCURACY:
                logger.warning(
                    "%s keeps missing: accuracy %.2f, voted %s, actual %s",
                    contribution.domain,
                    previous,
                    contribution.vote.value,
                    actual.value,
                )
            step = self.base_alpha * (DOMAIN_HIT_DAMPING if right else DOMAIN_MISS_BOOST)
            self.domain_accuracy[contribution.domain] = _ema(
                previous, 1.0 if right else 0.0, step
            )

        outcome = Outcome(
            predicted=prediction.direction,
            actual=actual,
            correct=correct,
            predicted_magnitude=prediction.magnitude,
            actual_magnitude=actual_magnitude,
            magnitude_accuracy=magnitude_accuracy,
            confidence=prediction.confidence,
            recorded_at=self._clock(),
        )
        self._outcomes.append(outcome)
        self.generation += 1
        return outcome

    @property
    def learning_velocity(self) -> float:
        """Hit-rate change between the last 10 outcomes and the 10 before, times 10.

        0.0 until 20 outcomes are retained.
        """
        if len(self._outcomes) < 2 * VELOCITY_SPAN:
            return 0.0
        recent = list(self._outcomes)[-2 * VELOCITY_SPAN :]
        older = sum(o.correct for o in recent[:VELOCITY_SPAN]) / VELOCITY_SPAN
        newer = sum(o.correct for o in recent[VELOCITY_SPAN:]) / VELOCITY_SPAN
        return (newer - older) * VELOCITY_SPAN

    def rankings(self) -> list[tuple[str, float]]:
        """Domains by accuracy, best first (ties by name)."""
        return sorted(self.domain_accuracy.items(), key=lambda item: (-item[1], item[0]))

    def outcomes(self, last: Optional[int] = None) -> tuple[Outcome, ...]:
        items = tuple(self._outcomes)
        if last is None:
            return items
        return items[-last:] if last > 0 else ()

    def __len__(self) -> int:
        return len(self._outcomes)


def _ema(current: float, observation: float, alpha: float) -> float:
    return current * (1.0 - alpha) + observation * alpha
