"""Input layer - MIDI decoding and live performance capture."""

from .loader import MidiLoader, MidiDecodeError, analyze_file
from .recorder import PerformanceRecorder, NO_CHORD

__all__ = [
    "MidiLoader",
    "MidiDecodeError",
    "analyze_file",
    "PerformanceRecorder",
    "NO_CHORD",
]
