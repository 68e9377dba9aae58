"""Signal value types, bounded buffers and signature extraction."""

from .buffer import SignalBuffer
from .extraction import extract_signature
from .models import FLOW_PHASES, QUADRANTS, QuadrantProfile, Signal, Signature, TemporalFlow

__all__ = [
    "Signal",
    "Signature",
    "QuadrantProfile",
    "TemporalFlow",
    "SignalBuffer",
    "extract_signature",
    "QUADRANTS",
    "FLOW_PHASES",
]
