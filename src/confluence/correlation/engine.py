"""Rolling pairwise correlation between domain signature series.

Every tick the engine receives one signature per active domain. For each
unordered domain pair it keeps a bounded history of paired values of one
signature field. A pair becomes READY once ``min_samples`` paired values have
been observed, after which each update recomputes:

    coefficient = pearson(a, b) at lag 0 over the retained window
    lead_lag    = argmax_s corr(a[t], b[t + s]),  s in [-max_lag, max_lag]
    confidence  = min(n / window, 1) * (1 - min(std(candidates), 1))

where candidates are the coefficients of every evaluated shift. A constant
series in either domain yields coefficient 0 and confidence 0.
"""

from __future__ import annotations

import itertools
import time
from collections import deque
from typing import Callable, Iterable, Mapping, Optional

from ..config import CorrelationConfig
from ..logging_config import get_logger
from ..math.statistics import Statistics
from ..signals.models import Signature
from .models import CrossDomainCorrelation, PairState

logger = get_logger(__name__)

# Coefficients closer than this count as a tie when picking the lead/lag.
LAG_TIE_TOLERANCE = 1e-9

PairKey = tuple[str, str]


def pair_key(a: str, b: str) -> PairKey:
    """Canonical (sorted) key; (a, b) and (b, a) are one relationship."""
    if a == b:
        raise ValueError(f"a domain cannot be paired with itself: {a!r}")
    return (a, b) if a < b else (b, a)


def best_shift(candidates: Mapping[int, float]) -> int:
    """Shift with the highest coefficient.

    Near-ties go to the smallest absolute shift, then to the negative one.
    """
    top = max(candidates.values())
    tied = [s for s, r in candidates.items() if top - r <= LAG_TIE_TOLERANCE]
    return min(tied, key=lambda s: (abs(s), s))


class _PairHistory:
    """Bounded paired history and current estimate for one domain pair."""

    __slots__ = ("a", "b", "observed", "state", "latest")

    def __init__(self, window: int) -> None:
        self.a: deque[float] = deque(maxlen=window)
        self.b: deque[float] = deque(maxlen=window)
        self.observed = 0
        self.state = PairState.ACCUMULATING
        self.latest: Optional[CrossDomainCorrelation] = None


class CorrelationEngine:
    """Tracks every domain pair seen in the signature snapshots it is fed.

    Not thread-safe: one scheduler thread calls :meth:`update`.
    """

    def __init__(
        self,
        config: Optional[CorrelationConfig] = None,
        clock: Callable[[], float] = time.time,
    ) -> None:
        self.config = config if config is not None else CorrelationConfig()
        self._clock = clock
        self._pairs: dict[PairKey, _PairHistory] = {}

    def update(
        self, signatures: Mapping[str, Signature], now: Optional[float] = None
    ) -> list[CrossDomainCorrelation]:
        """Add one paired sample per domain pair and refresh READY estimates.

        Domains that are missing from ``signatures``, or whose signature is
        the default (no data or stale), contribute no sample this tick.

        Args:
            signatures: Current signature per domain
            now: Update time (defaults to the engine clock)

        Returns:
            Correlations refreshed by this update (READY pairs only).
        """
        now = self._clock() if now is None else now
        field = self.config.field
        values = {
            domain: float(getattr(sig, field))
            for domain, sig in signatures.items()
            if not sig.is_default
        }

        refreshed = []
        for a, b in itertools.combinations(sorted(values), 2):
            history = self._pairs.get((a, b))
            if history is None:
                history = self._pairs[(a, b)] = _PairHistory(self.config.window)
            history.a.append(values[a])
            history.b.append(values[b])
            history.observed += 1

            if history.state is PairState.ACCUMULATING and history.observed >= self.config.min_samples:
                history.state = PairState.READY
                logger.info("correlation %s/%s ready after %d samples", a, b, history.observed)

            if history.state is PairState.READY:
                history.latest = self._estimate(a, b, history, now)
                refreshed.append(history.latest)
        return refreshed

    def _estimate(
        self, a: str, b: str, history: _PairHistory, now: float
    ) -> CrossDomainCorrelation:
        xs = list(history.a)
        ys = list(history.b)
        n = len(xs)

        coefficient = Statistics.pearson(xs, ys)
        candidates = Statistics.lagged_correlations(xs, ys, self.config.max_lag)
        if coefficient is None or not candidates:
            logger.debug("correlation %s/%s degenerate over %d samples", a, b, n)
            return CrossDomainCorrelation(
                domain_a=a,
                domain_b=b,
                coefficient=0.0,
                lead_lag=0,
                confidence=0.0,
                sample_size=n,
                updated_at=now,
                state=PairState.READY,
            )

        spread = Statistics.pstdev(list(candidates.values()))
        confidence = min(n / self.config.window, 1.0) * (1.0 - min(spread, 1.0))
        return CrossDomainCorrelation(
            domain_a=a,
            domain_b=b,
            coefficient=coefficient,
            lead_lag=best_shift(candidates),
            confidence=confidence,
            sample_size=n,
            updated_at=now,
            state=PairState.READY,
        )

    # ── queries ─────────────────────────────────────────────────────

    def state(self, a: str, b: str) -> PairState:
        history = self._pairs.get(pair_key(a, b))
        return PairState.UNINITIALIZED if history is None else history.state

    def observed(self, a: str, b: str) -> int:
        """Total paired samples seen for the pair (not capped by the window)."""
        history = self._pairs.get(pair_key(a, b))
        return 0 if history is None else history.observed

    def get(self, a: str, b: str) -> Optional[CrossDomainCorrelation]:
        """Current estimate oriented as (a, b), or None unless the pair is READY."""
        key = pair_key(a, b)
        history = self._pairs.get(key)
        if history is None or history.latest is None:
            return None
        return history.latest if key == (a, b) else history.latest.flipped()

    def ready(self) -> list[CrossDomainCorrelation]:
        """Every READY correlation, in canonical pair order."""
        return [h.latest for _, h in sorted(self._pairs.items()) if h.latest is not None]

    def top(self, limit: int = 5) -> list[CrossDomainCorrelation]:
        """Strongest READY correlations by |coefficient|."""
        ranked = sorted(self.ready(), key=lambda c: (-abs(c.coefficient), c.pair))
        return ranked[:limit]

    def pairs(self) -> Iterable[PairKey]:
        return sorted(self._pairs)

    def reset(self) -> None:
        """Forget every pair (all states back to UNINITIALIZED)."""
        self._pairs.clear()

    def __len__(self) -> int:
        return len(self._pairs)
