"""Network traffic adapter.

Treats packet flow as an oscillation: throughput sets the frequency, latency
sets how strongly the signal comes through, errors add phase noise.
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from types import MappingProxyType
from typing import ClassVar, Mapping

from ..math.statistics import ramp
from .base import AdapterThresholds, DomainAdapter, SignalParts
from .registry import register


@dataclass(frozen=True)
class NetworkSample:
    """One traffic measurement interval.

    Ranges: all rates and counts >= 0, error_rate in [0, 1].
    """

    timestamp: float
    packets_per_second: float
    bytes_per_second: float
    latency_ms: float
    connection_count: float
    error_rate: float = 0.0

    RANGES: ClassVar[Mapping[str, tuple]] = MappingProxyType(
        {
            "timestamp": (None, None),
            "packets_per_second": (0.0, None),
            "bytes_per_second": (0.0, None),
            "latency_ms": (0.0, None),
            "connection_count": (0.0, None),
            "error_rate": (0.0, 1.0),
        }
    )


@dataclass(frozen=True)
class NetworkThresholds(AdapterThresholds):
    high_latency_ms: float = 200.0
    high_packet_rate: float = 10_000.0
    connection_scale: float = 1000.0
    critical_error_rate: float = 0.05
    mtu_bytes: float = 1500.0

    def __post_init__(self) -> None:
        super().__post_init__()
        self._require_positive(
            "high_latency_ms",
            "high_packet_rate",
            "connection_scale",
            "critical_error_rate",
            "mtu_bytes",
        )


@register
class NetworkAdapter(DomainAdapter[NetworkSample]):
    domain = "network"
    name = "Network Flow Analyzer"
    event_type = NetworkSample
    thresholds_class = NetworkThresholds
    harmonics_length = 8
    raw_fields = (
        "packets_per_second",
        "bytes_per_second",
        "latency_ms",
        "connection_count",
        "error_rate",
    )
    default_frequency = 100.0

    thresholds: NetworkThresholds

    def to_signal(self, event: NetworkSample) -> SignalParts:
        t = self.thresholds
        base = math.log10(event.packets_per_second + 1.0)
        packets = event.packets_per_second or 1.0
        byte_ratio = event.bytes_per_second / packets
        conn_density = event.connection_count / packets

        return SignalParts(
            timestamp=event.timestamp,
            intensity=1.0 - ramp(event.latency_ms, 0.0, t.high_latency_ms),
            frequency=1.0 + base * 100.0,
            phase=event.error_rate * 2.0 * math.pi,
            harmonics=(
                base,
                base * 2.0 * (byte_ratio / 1000.0),
                base * 3.0 * conn_density,
                math.sin(base),
                math.cos(base * 2.0),
                (byte_ratio / t.mtu_bytes) * math.sin(base * 3.0),
                conn_density * math.cos(base * 4.0),
                math.sin(base * 5.0) * math.cos(byte_ratio / 1000.0),
            ),
            raw=(
                event.packets_per_second,
                event.bytes_per_second,
                event.latency_ms,
                event.connection_count,
                event.error_rate,
            ),
        )

    def quadrant_projection(self, means: tuple[float, ...]) -> tuple[float, float, float, float]:
        t = self.thresholds
        packets, _, latency, connections, errors = means
        return (
            ramp(packets, 0.0, t.high_packet_rate),  # throughput
            1.0 - ramp(latency, 0.0, t.high_latency_ms),  # stability
            ramp(connections, 0.0, t.connection_scale),
            1.0 - ramp(errors, 0.0, t.critical_error_rate),  # quality
        )
