"""Bounded per-domain signal history."""

from __future__ import annotations

import threading
from collections import deque
from itertools import islice
from typing import Iterator, Optional

from .models import Signal


class SignalBuffer:
    """Bounded FIFO of signals for one domain.

    Appending past capacity evicts the oldest signal. Insertion order is the
    only order kept; timestamps are never re-sorted. Only the owning adapter
    appends; readers get immutable tuples via :meth:`last_n`.

    The lock covers append and snapshot only, so a tick thread can copy the
    window while a producer thread is appending.
    """

    def __init__(self, domain: str, capacity: int) -> None:
        if capacity < 1:
            raise ValueError("capacity must be at least 1")
        self.domain = domain
        self.capacity = capacity
        self._items: deque[Signal] = deque(maxlen=capacity)
        self._lock = threading.Lock()
        self._evicted = 0

    def append(self, signal: Signal) -> None:
        with self._lock:
            if len(self._items) == self.capacity:
                self._evicted += 1
            self._items.append(signal)

    def last_n(self, k: int) -> tuple[Signal, ...]:
        """Trailing ``k`` signals, oldest first (empty for k <= 0)."""
        if k <= 0:
            return ()
        with self._lock:
            if k >= len(self._items):
                return tuple(self._items)
            tail = list(islice(reversed(self._items), k))
        tail.reverse()
        return tuple(tail)

    def snapshot(self) -> tuple[Signal, ...]:
        with self._lock:
            return tuple(self._items)

    def latest(self) -> Optional[Signal]:
        with self._lock:
            return self._items[-1] if self._items else None

    @property
    def evicted(self) -> int:
        """Total signals dropped by overflow since construction."""
        return self._evicted

    def __len__(self) -> int:
        return len(self._items)

    def __iter__(self) -> Iterator[Signal]:
        return iter(self.snapshot())

    def __repr__(self) -> str:
        return f"SignalBuffer(domain={self.domain!r}, size={len(self)}, capacity={self.capacity})"
