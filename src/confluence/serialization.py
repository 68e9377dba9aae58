"""JSON-friendly encoding of the value types.

``to_dict`` flattens a Signal, Signature, CrossDomainCorrelation or
UnifiedPrediction into plain dicts/lists/scalars tagged with ``"type"``;
``from_dict`` restores the exact value (tuples and enums included). Floats go
through JSON via ``repr`` and come back bit-identical.
"""

from __future__ import annotations

import json
from dataclasses import asdict
from enum import Enum
from typing import Any, Callable, Mapping, Union

from .consensus.models import Direction, DomainContribution, UnifiedPrediction, Vote
from .correlation.models import CrossDomainCorrelation, PairState
from .exceptions import SerializationError
from .signals.models import QuadrantProfile, Signal, Signature, TemporalFlow

Value = Union[Signal, Signature, CrossDomainCorrelation, UnifiedPrediction]

_TAGS: dict[type, str] = {
    Signal: "signal",
    Signature: "signature",
    CrossDomainCorrelation: "correlation",
    UnifiedPrediction: "prediction",
}


def _plain(obj: Any) -> Any:
    if isinstance(obj, Enum):
        return obj.value
    if isinstance(obj, dict):
        return {k: _plain(v) for k, v in obj.items()}
    if isinstance(obj, (list, tuple)):
        return [_plain(v) for v in obj]
    return obj


def to_dict(value: Value) -> dict[str, Any]:
    """Encode a value type as a tagged plain dict."""
    tag = _TAGS.get(type(value))
    if tag is None:
        raise TypeError(f"cannot serialize {type(value).__name__}")
    return {"type": tag, **_plain(asdict(value))}


def _signal(d: Mapping[str, Any]) -> Signal:
    return Signal(
        domain=d["domain"],
        timestamp=float(d["timestamp"]),
        intensity=float(d["intensity"]),
        frequency=float(d["frequency"]),
        phase=float(d["phase"]),
        harmonics=tuple(float(h) for h in d["harmonics"]),
        raw=tuple(float(v) for v in d["raw"]),
        clamped=tuple(d.get("clamped", ())),
    )


def _signature(d: Mapping[str, Any]) -> Signature:
    return Signature(
        domain=d["domain"],
        quadrant_profile=QuadrantProfile(**d["quadrant_profile"]),
        temporal_flow=TemporalFlow(**d["temporal_flow"]),
        intensity=float(d["intensity"]),
        momentum=float(d["momentum"]),
        volatility=float(d["volatility"]),
        dominant_frequency=float(d["dominant_frequency"]),
        harmonic_resonance=float(d["harmonic_resonance"]),
        phase_alignment=float(d["phase_alignment"]),
        extracted_at=float(d["extracted_at"]),
        sample_size=int(d["sample_size"]),
        is_default=bool(d["is_default"]),
    )


def _correlation(d: Mapping[str, Any]) -> CrossDomainCorrelation:
    return CrossDomainCorrelation(
        domain_a=d["domain_a"],
        domain_b=d["domain_b"],
        coefficient=float(d["coefficient"]),
        lead_lag=int(d["lead_lag"]),
        confidence=float(d["confidence"]),
        sample_size=int(d["sample_size"]),
        updated_at=float(d["updated_at"]),
        state=PairState(d["state"]),
    )


def _contribution(d: Mapping[str, Any]) -> DomainContribution:
    return DomainContribution(
        domain=d["domain"],
        weight=float(d["weight"]),
        vote=Vote(d["vote"]),
        confidence=float(d["confidence"]),
        resonance_score=float(d["resonance_score"]),
        isolated=bool(d["isolated"]),
    )


def _prediction(d: Mapping[str, Any]) -> UnifiedPrediction:
    return UnifiedPrediction(
        direction=Direction(d["direction"]),
        confidence=float(d["confidence"]),
        magnitude=float(d["magnitude"]),
        time_horizon=float(d["time_horizon"]),
        contributions=tuple(_contribution(c) for c in d["contributions"]),
        consensus_strength=float(d["consensus_strength"]),
        harmonic_alignment=float(d["harmonic_alignment"]),
        insufficient_correlation=bool(d["insufficient_correlation"]),
        created_at=float(d["created_at"]),
    )


_DECODERS: dict[str, Callable[[Mapping[str, Any]], Value]] = {
    "signal": _signal,
    "signature": _signature,
    "correlation": _correlation,
    "prediction": _prediction,
}


def from_dict(payload: Mapping[str, Any]) -> Value:
    """Decode a dict produced by :func:`to_dict`.

    Raises:
        SerializationError: On an unknown tag, a missing field or a bad value
    """
    if not isinstance(payload, Mapping):
        raise SerializationError(f"expected an object, got {type(payload).__name__}")
    tag = payload.get("type")
    decoder = _DECODERS.get(tag)  # type: ignore[arg-type]
    if decoder is None:
        raise SerializationError(f"unknown type tag {tag!r}")
    try:
        return decoder(payload)
    except KeyError as e:
        raise SerializationError(f"{tag} is missing field {e.args[0]!r}") from e
    except (TypeError, ValueError) as e:
        raise SerializationError(f"{tag}: {e}") from e


def dumps(value: Value, **kwargs: Any) -> str:
    return json.dumps(to_dict(value), **kwargs)


def loads(text: str) -> Value:
    try:
        payload = json.loads(text)
    except json.JSONDecodeError as e:
        raise SerializationError(f"invalid JSON: {e}") from e
    return from_dict(payload)
