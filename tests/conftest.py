"""Shared test fixtures for Confluence tests."""

import os
from dataclasses import dataclass
from types import MappingProxyType
from typing import ClassVar, Mapping

import pytest

from confluence.adapters.base import DomainAdapter, SignalParts
from confluence.config import EngineConfig
from confluence.pipeline import ConfluenceEngine
from confluence.signals.models import QuadrantProfile, Signal, Signature, TemporalFlow


def pytest_addoption(parser):
    """Add --run-slow option for slow tests."""
    parser.addoption(
        "--run-slow",
        action="store_true",
        default=False,
        help="run slow tests",
    )


def pytest_configure(config):
    """Configure slow marker."""
    config.addinivalue_line("markers", "slow: mark test as slow to run")


def pytest_collection_modifyitems(config, items):
    """Skip slow tests unless --run-slow is given."""
    if config.getoption("--run-slow"):
        return
    skip_slow = pytest.mark.skip(reason="need --run-slow option to run")
    for item in items:
        if "slow" in item.keywords:
            item.add_marker(skip_slow)


class FakeClock:
    """Manually advanced time source."""

    def __init__(self, now: float = 1000.0):
        self.now = now

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


@dataclass(frozen=True)
class Reading:
    """Minimal event: one level in [0, 1] and a phase."""

    timestamp: float
    level: float
    phase: float = 0.0

    RANGES: ClassVar[Mapping[str, tuple]] = MappingProxyType(
        {"timestamp": (None, None), "level": (0.0, 1.0), "phase": (None, None)}
    )


class ToyAdapter(DomainAdapter[Reading]):
    """Adapter whose intensity is the event level; not registered globally."""

    domain = "toy"
    name = "Toy"
    event_type = Reading
    harmonics_length = 2
    raw_fields = ("level",)

    def to_signal(self, event: Reading) -> SignalParts:
        return SignalParts(
            timestamp=event.timestamp,
            intensity=event.level,
            frequency=1.0 + event.level,
            phase=event.phase,
            harmonics=(event.level, 1.0 - event.level),
            raw=(event.level,),
        )

    def quadrant_projection(self, means):
        (level,) = means
        return (level, 1.0 - level, 0.5, 0.5)


@pytest.fixture
def clock():
    """Fake clock starting at t=1000."""
    return FakeClock()


@pytest.fixture
def toy_adapter(clock):
    """Fresh toy adapter with default thresholds."""
    return ToyAdapter(clock=clock)


@pytest.fixture
def make_signal():
    """Factory for signals with sensible defaults."""

    def _make(
        intensity=0.5,
        timestamp=0.0,
        frequency=1.0,
        phase=0.0,
        harmonics=(1.0, 0.0),
        raw=(0.5,),
        domain="toy",
    ):
        return Signal(
            domain=domain,
            timestamp=timestamp,
            intensity=intensity,
            frequency=frequency,
            phase=phase,
            harmonics=tuple(harmonics),
            raw=tuple(raw),
        )

    return _make


@pytest.fixture
def make_signature():
    """Factory for non-default signatures."""

    def _make(domain, momentum=0.0, volatility=0.0, resonance=0.5, intensity=0.5):
        return Signature(
            domain=domain,
            quadrant_profile=QuadrantProfile(),
            temporal_flow=TemporalFlow(),
            intensity=intensity,
            momentum=momentum,
            volatility=volatility,
            dominant_frequency=1.0,
            harmonic_resonance=resonance,
            phase_alignment=0.5,
            extracted_at=0.0,
            sample_size=10,
            is_default=False,
        )

    return _make


@pytest.fixture
def engine(clock):
    """Engine with market and sentiment adapters on the fake clock."""
    config = EngineConfig(domains=("market", "sentiment"))
    return ConfluenceEngine.from_config(config, clock=clock)


@pytest.fixture(autouse=True)
def _isolated_config_env(monkeypatch, tmp_path):
    """Keep user/project config files and CONFLUENCE_* variables out of tests."""
    for key in list(os.environ):
        if key.startswith("CONFLUENCE_"):
            monkeypatch.delenv(key)
    monkeypatch.setenv("HOME", str(tmp_path / "home"))
    monkeypatch.chdir(tmp_path)
