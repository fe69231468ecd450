"""Event types - the decoded form of a MIDI stream consumed by the scorer."""

from dataclasses import dataclass, field
from enum import Enum
from typing import List, Union

from .constants import MIDI_MAX, MIDI_MIN


class EventKind(Enum):
    """Channel message kinds the analyzer cares about."""
    NOTE_ON = "note_on"
    NOTE_OFF = "note_off"


@dataclass(frozen=True)
class NoteEvent:
    """A note-on or note-off at an absolute tick."""

    tick: int
    kind: EventKind
    note: int  # MIDI note number (0-127)
    velocity: int = 64  # MIDI velocity (0-127)

    def __post_init__(self):
        if self.tick < 0:
            raise ValueError(f"Tick must be non-negative, got {self.tick}")
        if not MIDI_MIN <= self.note <= MIDI_MAX:
            raise ValueError(f"Note number out of range: {self.note}")
        if not MIDI_MIN <= self.velocity <= MIDI_MAX:
            raise ValueError(f"Velocity out of range: {self.velocity}")

    @property
    def is_note_on(self) -> bool:
        """True for a sounding note-on (velocity > 0)."""
        return self.kind is EventKind.NOTE_ON and self.velocity > 0

    @property
    def is_note_off(self) -> bool:
        """True for note-off, including note-on with velocity 0."""
        return self.kind is EventKind.NOTE_OFF or (
            self.kind is EventKind.NOTE_ON and self.velocity == 0
        )

    @property
    def pitch_class(self) -> int:
        return self.note % 12

    @classmethod
    def on(cls, tick: int, note: int, velocity: int = 64) -> "NoteEvent":
        return cls(tick=tick, kind=EventKind.NOTE_ON, note=note, velocity=velocity)

    @classmethod
    def off(cls, tick: int, note: int, velocity: int = 0) -> "NoteEvent":
        return cls(tick=tick, kind=EventKind.NOTE_OFF, note=note, velocity=velocity)


@dataclass(frozen=True)
class TempoEvent:
    """A set-tempo meta event."""

    tick: int
    microseconds_per_quarter: int

    def __post_init__(self):
        if not 0 < self.microseconds_per_quarter <= 0xFFFFFF:
            raise ValueError(
                f"Tempo must fit in 24 bits, got {self.microseconds_per_quarter}"
            )

    @property
    def bpm(self) -> float:
        return 60_000_000 / self.microseconds_per_quarter


Event = Union[NoteEvent, TempoEvent]


@dataclass
class EventStream:
    """Decoded MIDI content: resolution plus chronologically ordered events."""

    resolution: int  # Pulses (ticks) per quarter note
    events: List[Event] = field(default_factory=list)

    def __post_init__(self):
        if self.resolution <= 0:
            raise ValueError(f"Resolution must be positive, got {self.resolution}")

    @property
    def note_events(self) -> List[NoteEvent]:
        return [e for e in self.events if isinstance(e, NoteEvent)]

    @property
    def tempo_events(self) -> List[TempoEvent]:
        return [e for e in self.events if isinstance(e, TempoEvent)]

    @property
    def last_tick(self) -> int:
        return max((e.tick for e in self.events), default=0)
