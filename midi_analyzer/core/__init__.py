"""Core types and constants for MIDI Analyzer."""

from .events import Event, EventKind, EventStream, NoteEvent, TempoEvent
from .constants import (
    PITCH_NAMES,
    UNKNOWN_NOTE_NAME,
    NO_ROOT,
    DEFAULT_KEY,
    DEFAULT_US_PER_QUARTER,
    DEFAULT_RESOLUTION,
)

__all__ = [
    "Event",
    "EventKind",
    "EventStream",
    "NoteEvent",
    "TempoEvent",
    "PITCH_NAMES",
    "UNKNOWN_NOTE_NAME",
    "NO_ROOT",
    "DEFAULT_KEY",
    "DEFAULT_US_PER_QUARTER",
    "DEFAULT_RESOLUTION",
]
