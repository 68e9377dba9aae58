"""Descriptive statistics and similarity measures used by signature and correlation math."""

import math
from typing import Optional, Sequence

import numpy as np

TWO_PI = 2.0 * math.pi

# Sum of squared deviations at or below this fraction of the sum of squares is
# rounding noise from the mean, not spread.
FLAT_TOLERANCE = 1e-24


def _is_flat(values: np.ndarray, deviations: np.ndarray) -> bool:
    if float(np.ptp(values)) == 0.0:
        return True
    scale = max(1.0, float(np.dot(values, values)))
    return float(np.dot(deviations, deviations)) <= FLAT_TOLERANCE * scale


class Statistics:
    """Statistical primitives.

    Every method returns a well-defined float for degenerate input (empty,
    single value, zero variance) instead of NaN, so callers never need to
    special-case missing data.
    """

    @staticmethod
    def mean(values: Sequence[float]) -> float:
        """Compute arithmetic mean (0.0 for empty input)."""
        if len(values) == 0:
            return 0.0
        return float(np.mean(np.asarray(values, dtype=float)))

    @staticmethod
    def pstdev(values: Sequence[float]) -> float:
        """Compute population standard deviation (0.0 for fewer than 2 values)."""
        if len(values) < 2:
            return 0.0
        return float(np.std(np.asarray(values, dtype=float)))

    @staticmethod
    def column_means(rows: Sequence[Sequence[float]]) -> tuple[float, ...]:
        """Per-column means of equal-length rows.

        Args:
            rows: Feature vectors, all of the same length

        Returns:
            Tuple of column means; empty tuple for no rows.
        """
        if len(rows) == 0:
            return ()
        matrix = np.asarray(rows, dtype=float)
        if matrix.ndim != 2 or matrix.shape[1] == 0:
            return ()
        return tuple(float(v) for v in matrix.mean(axis=0))

    @staticmethod
    def pearson(x: Sequence[float], y: Sequence[float]) -> Optional[float]:
        """
        Pearson correlation coefficient r = cov(x, y) / (sigma_x * sigma_y).

        Args:
            x: First series
            y: Second series (same length as x)

        Returns:
            r clamped to [-1, 1], or None when either series has zero
            variance or fewer than 2 points (the coefficient is undefined).
        """
        if len(x) != len(y):
            raise ValueError("series must have the same length")
        if len(x) < 2:
            return None

        xa = np.asarray(x, dtype=float)
        ya = np.asarray(y, dtype=float)
        dx = xa - xa.mean()
        dy = ya - ya.mean()
        if _is_flat(xa, dx) or _is_flat(ya, dy):
            return None
        denom = math.sqrt(float(np.dot(dx, dx)) * float(np.dot(dy, dy)))
        if denom == 0.0 or not math.isfinite(denom):
            return None

        r = float(np.dot(dx, dy)) / denom
        return max(-1.0, min(1.0, r))

    @staticmethod
    def lagged_correlations(
        x: Sequence[float], y: Sequence[float], max_lag: int, min_overlap: int = 3
    ) -> dict[int, float]:
        """
        Cross-correlation of x against y at integer shifts.

        corr(s) = pearson(x[t], y[t + s]) over the overlapping part, so a
        positive s means changes in x precede the same changes in y.

        Args:
            x: First series
            y: Second series (same length as x)
            max_lag: Largest absolute shift to evaluate
            min_overlap: Minimum overlapping points for a shift to count

        Returns:
            {shift: coefficient} for every shift with enough overlap and
            defined correlation.
        """
        if len(x) != len(y):
            raise ValueError("series must have the same length")

        n = len(x)
        result: dict[int, float] = {}
        for shift in range(-max_lag, max_lag + 1):
            overlap = n - abs(shift)
            if overlap < min_overlap:
                continue
            if shift >= 0:
                xs, ys = x[: n - shift], y[shift:]
            else:
                xs, ys = x[-shift:], y[: n + shift]
            r = Statistics.pearson(xs, ys)
            if r is not None:
                result[shift] = r
        return result

    @staticmethod
    def cosine_similarity(a: Sequence[float], b: Sequence[float]) -> float:
        """
        Cosine similarity a.b / (|a| |b|).

        Returns 0.0 when either vector has zero norm.
        """
        if len(a) != len(b):
            raise ValueError("vectors must have the same length")
        va = np.asarray(a, dtype=float)
        vb = np.asarray(b, dtype=float)
        denom = float(np.linalg.norm(va)) * float(np.linalg.norm(vb))
        if denom == 0.0:
            return 0.0
        return max(-1.0, min(1.0, float(np.dot(va, vb)) / denom))

    @staticmethod
    def circular_distance(a: float, b: float) -> float:
        """Shortest angular distance between two phases, in [0, pi]."""
        d = abs(a - b) % TWO_PI
        return min(d, TWO_PI - d)


def clamp(value: float, low: float = 0.0, high: float = 1.0) -> float:
    """Clamp value into [low, high]."""
    return max(low, min(high, value))


def ramp(value: float, low: float, high: float) -> float:
    """Continuous 0..1 ramp: 0 at or below low, 1 at or above high, linear between.

    Used in place of step thresholds so projections never jump.
    """
    if high <= low:
        raise ValueError("ramp requires high > low")
    return clamp((value - low) / (high - low))


def wrap_phase(phase: float) -> float:
    """Take phase modulo 2*pi into [0, 2*pi)."""
    wrapped = math.fmod(phase, TWO_PI)
    if wrapped < 0:
        wrapped += TWO_PI
    # fmod of a tiny negative can round back up to exactly 2*pi
    if wrapped >= TWO_PI:
        wrapped = 0.0
    return wrapped
