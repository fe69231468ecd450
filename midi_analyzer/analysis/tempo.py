"""Tick timing - Convert MIDI ticks to seconds and bar/beat positions."""

from typing import Iterable, Optional, Tuple

from ..core.constants import DEFAULT_BEATS_PER_BAR, DEFAULT_US_PER_QUARTER
from ..core.events import Event, TempoEvent


def first_tempo(
    events: Iterable[Event],
    default: int = DEFAULT_US_PER_QUARTER,
) -> int:
    """
    Find the tempo of a stream.

    Only the first tempo event in ``events`` is honored; later tempo
    changes are ignored. DifficultyScorer passes its tick-sorted events,
    so across merged tracks this is the tempo with the earliest tick,
    ties going to the earlier track.

    Returns:
        Microseconds per quarter note
    """
    for event in events:
        if isinstance(event, TempoEvent):
            return event.microseconds_per_quarter
    return default


class TempoGrid:
    """Map ticks onto wall-clock time and a fixed-meter bar grid."""

    def __init__(
        self,
        resolution: int,
        us_per_quarter: int = DEFAULT_US_PER_QUARTER,
        beats_per_bar: int = DEFAULT_BEATS_PER_BAR,
    ):
        """
        Initialize TempoGrid.

        Args:
            resolution: Pulses per quarter note
            us_per_quarter: Tempo in microseconds per quarter note
            beats_per_bar: Quarter-note beats in one bar
        """
        if resolution <= 0:
            raise ValueError(f"Resolution must be positive, got {resolution}")
        self.resolution = resolution
        self.us_per_quarter = us_per_quarter
        self.beats_per_bar = beats_per_bar

    @property
    def bpm(self) -> float:
        return 60_000_000 / self.us_per_quarter

    def beat(self, tick: int) -> float:
        """Position in quarter-note beats from the start."""
        return tick / self.resolution

    def seconds(self, tick: int) -> float:
        """Position in seconds from the start."""
        return self.beat(tick) * (self.us_per_quarter / 1_000_000)

    def bar_position(self, tick: int) -> Tuple[int, float]:
        """
        Get the 1-based bar and beat-in-bar for a tick.

        Returns:
            (bar, beat_in_bar), beat_in_bar in [1, beats_per_bar + 1)
        """
        beat = self.beat(tick)
        bar = int(beat // self.beats_per_bar) + 1
        beat_in_bar = (beat % self.beats_per_bar) + 1
        return bar, beat_in_bar

    @classmethod
    def from_events(
        cls,
        events: Iterable[Event],
        resolution: int,
        beats_per_bar: int = DEFAULT_BEATS_PER_BAR,
        default_us_per_quarter: Optional[int] = None,
    ) -> "TempoGrid":
        """Build a grid using the first tempo event found in ``events``."""
        default = default_us_per_quarter or DEFAULT_US_PER_QUARTER
        return cls(resolution, first_tempo(events, default), beats_per_bar)
