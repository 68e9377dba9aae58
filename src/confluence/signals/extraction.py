"""Windowed signature extraction.

Pure functions of a trailing window of signals. No clocks, no randomness:
the caller supplies ``extracted_at``, so equal windows give equal signatures.

Steps (window W, n = |W|):
    1. column means of the raw feature vectors
    2. quadrant profile from a domain projection of those means
    3. temporal flow: energy share of the early/mid/late thirds of W
    4. momentum: mean directional proxy of the last m minus the m before
    5. harmonic resonance: mean rescaled cosine similarity of consecutive harmonics
    6. phase alignment: mean 1 - d/pi over consecutive circular phase distances
"""

from __future__ import annotations

import math
from typing import Callable, Sequence

from ..math.statistics import Statistics, clamp
from .models import QuadrantProfile, Signal, Signature, TemporalFlow

QuadrantProjection = Callable[[tuple[float, ...]], tuple[float, float, float, float]]
SignalProxy = Callable[[Signal], float]

NEUTRAL_RESONANCE = 0.5
NEUTRAL_ALIGNMENT = 0.5


def partition_sizes(n: int) -> tuple[int, int, int]:
    """Sizes of three contiguous parts differing by at most one (earlier parts larger)."""
    base, extra = divmod(n, 3)
    return tuple(base + (1 if i < extra else 0) for i in range(3))  # type: ignore[return-value]


def temporal_flow(energies: Sequence[float]) -> TemporalFlow:
    """Energy share of the early, mid and late thirds of the window.

    Fewer than 3 points puts all mass in "mid". Zero total energy splits evenly.
    """
    n = len(energies)
    if n < 3:
        return TemporalFlow(early=0.0, mid=1.0, late=0.0)

    sizes = partition_sizes(n)
    sums = []
    start = 0
    for size in sizes:
        sums.append(math.fsum(abs(e) for e in energies[start : start + size]))
        start += size

    total = math.fsum(sums)
    if total <= 0:
        return TemporalFlow(early=1 / 3, mid=1 / 3, late=1 / 3)

    early = sums[0] / total
    mid = sums[1] / total
    # late takes the remainder so the three shares sum to 1 exactly
    late = max(0.0, 1.0 - early - mid)
    return TemporalFlow(early=early, mid=mid, late=late)


def momentum(proxies: Sequence[float], window: int) -> float:
    """Mean of the last ``window`` proxies minus the mean of the ``window`` before.

    0.0 until a full preceding sub-window exists (n < 2 * window).
    """
    n = len(proxies)
    if window < 1 or n < 2 * window:
        return 0.0
    recent = proxies[n - window :]
    preceding = proxies[n - 2 * window : n - window]
    return Statistics.mean(recent) - Statistics.mean(preceding)


def harmonic_resonance(harmonics: Sequence[Sequence[float]]) -> float:
    """Mean of (cos_sim + 1) / 2 over consecutive harmonic vectors, in [0, 1]."""
    if len(harmonics) < 2:
        return NEUTRAL_RESONANCE
    total = math.fsum(
        (Statistics.cosine_similarity(harmonics[i - 1], harmonics[i]) + 1.0) / 2.0
        for i in range(1, len(harmonics))
    )
    return clamp(total / (len(harmonics) - 1))


def phase_alignment(phases: Sequence[float]) -> float:
    """Mean of 1 - d/pi over consecutive circular phase distances, in [0, 1]."""
    if len(phases) < 2:
        return NEUTRAL_ALIGNMENT
    total = math.fsum(
        clamp(1.0 - Statistics.circular_distance(phases[i - 1], phases[i]) / math.pi)
        for i in range(1, len(phases))
    )
    return clamp(total / (len(phases) - 1))


def dominant_frequency(signals: Sequence[Signal], bucket_width: float) -> float:
    """Centre of the frequency bucket carrying the most intensity.

    Ties go to the lowest bucket.
    """
    if not signals:
        return 0.0
    weights: dict[int, float] = {}
    for s in signals:
        key = round(s.frequency / bucket_width)
        weights[key] = weights.get(key, 0.0) + s.intensity

    best_key = min(weights, key=lambda k: (-weights[k], k))
    return best_key * bucket_width


def extract_signature(
    domain: str,
    window: Sequence[Signal],
    *,
    quadrant_projection: QuadrantProjection,
    directional_proxy: SignalProxy,
    energy_proxy: SignalProxy,
    momentum_window: int,
    frequency_bucket: float,
    extracted_at: float,
) -> Signature:
    """Compute the signature of a non-empty window.

    Args:
        domain: Domain identifier copied into the signature
        window: Trailing signals, oldest first (must be non-empty)
        quadrant_projection: Maps raw-feature means to four raw weights
        directional_proxy: Per-signal value whose drift is the momentum
        energy_proxy: Per-signal energy for the temporal flow
        momentum_window: Size of the recent/preceding sub-windows
        frequency_bucket: Bucket width for the dominant frequency
        extracted_at: Timestamp stamped on the result

    Returns:
        Signature with ``is_default=False`` and ``sample_size=len(window)``
    """
    if not window:
        raise ValueError("window must contain at least one signal")

    means = Statistics.column_means([s.raw for s in window])
    profile = QuadrantProfile.normalized(*quadrant_projection(means))

    intensities = [s.intensity for s in window]

    return Signature(
        domain=domain,
        quadrant_profile=profile,
        temporal_flow=temporal_flow([energy_proxy(s) for s in window]),
        intensity=Statistics.mean(intensities),
        momentum=momentum([directional_proxy(s) for s in window], momentum_window),
        volatility=Statistics.pstdev(intensities),
        dominant_frequency=dominant_frequency(window, frequency_bucket),
        harmonic_resonance=harmonic_resonance([s.harmonics for s in window]),
        phase_alignment=phase_alignment([s.phase for s in window]),
        extracted_at=extracted_at,
        sample_size=len(window),
        is_default=False,
    )
