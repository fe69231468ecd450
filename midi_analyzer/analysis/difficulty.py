"""Difficulty scoring - Chord timeline and difficulty estimate for a MIDI stream.

A single chronological pass over the note events:
- Tracks the set of sounding notes and the peak polyphony
- Counts rapid note onsets as a rhythm complexity signal
- Detects chords whenever two or more notes sound together
- Collapses repeated or near-simultaneous detections into one chord change
- Weights each accepted chord by how hard its quality is to play
"""

import logging
from dataclasses import dataclass, field, asdict
from typing import Any, Dict, Iterable, List, Optional, Set

from ..core.constants import (
    DEFAULT_BEATS_PER_BAR,
    DEFAULT_US_PER_QUARTER,
    INTERVAL_LABEL,
    UNKNOWN_LABEL,
)
from ..core.events import Event, EventStream, NoteEvent
from ..inference.chords import ChordDetector
from .tempo import TempoGrid

logger = logging.getLogger(__name__)


@dataclass
class ScorerConfig:
    """Configuration for difficulty scoring.

    Attributes:
        beats_per_bar: Quarter-note beats per bar for the timeline (default: 4)
        rapid_change_ticks: Max ticks between onsets counted as rapid (default: 15)
        dedupe_window_seconds: Chord changes closer than this collapse (default: 0.03)
        rapid_changes_per_point: Rapid onsets per rhythm difficulty point (default: 30)
        max_rhythm_difficulty: Cap on the rhythm subscore (default: 10)
        polyphony_weight: Points per simultaneous note (default: 2)
        max_polyphony_difficulty: Cap on the polyphony contribution (default: 10)
        default_us_per_quarter: Tempo used when the stream has none (default: 500000)
    """

    beats_per_bar: int = DEFAULT_BEATS_PER_BAR
    rapid_change_ticks: int = 15
    dedupe_window_seconds: float = 0.03
    rapid_changes_per_point: int = 30
    max_rhythm_difficulty: int = 10
    polyphony_weight: int = 2
    max_polyphony_difficulty: int = 10
    default_us_per_quarter: int = DEFAULT_US_PER_QUARTER


@dataclass
class TimelineEntry:
    """An accepted chord change."""

    seconds: float  # Time from start in seconds
    bar: int  # 1-based bar number
    beat_in_bar: float  # 1-based beat within the bar
    label: str  # Chord label, e.g. "Cmaj"
    tick: int = 0

    def describe(self) -> str:
        """Human-readable line, e.g. 't=1.60s, Bar 1, Beat 3.00: Cmaj'."""
        return (
            f"t={round(self.seconds, 2):.2f}s, Bar {self.bar}, "
            f"Beat {round(self.beat_in_bar, 2):.2f}: {self.label}"
        )

    def __str__(self) -> str:
        return self.describe()


@dataclass
class AnalysisResult:
    """Container for difficulty analysis results."""

    max_polyphony: int = 0
    note_count: int = 0
    chord_difficulty: int = 0
    rhythm_difficulty: int = 0
    total_difficulty: int = 0
    timeline: List[TimelineEntry] = field(default_factory=list)

    @classmethod
    def empty(cls) -> "AnalysisResult":
        """All-zero result, used when a stream cannot be decoded."""
        return cls()

    @property
    def chord_labels(self) -> List[str]:
        return [entry.label for entry in self.timeline]

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for JSON output."""
        data = asdict(self)
        data["timeline"] = [asdict(entry) for entry in self.timeline]
        return data


def chord_weight(label: str) -> int:
    """
    Difficulty weight of a chord label.

    Rules are checked in order and the first match wins, so "Cmaj" scores as
    a triad even though "C#maj" also contains "#".
    """
    if label.endswith("maj") or label.endswith("min"):
        return 1
    if "sus" in label:
        return 2
    if "7" in label and not any(ext in label for ext in ("9", "11", "13")):
        return 3
    if "9" in label:
        return 4
    if "11" in label:
        return 5
    if "13" in label:
        return 6
    if any(mark in label for mark in ("dim", "aug", "#", "b")):
        return 5
    return 1


class _ScoringPass:
    """Mutable state for one walk over an event stream."""

    def __init__(self, grid: TempoGrid, detector: ChordDetector, config: ScorerConfig):
        self.grid = grid
        self.detector = detector
        self.config = config
        self.result = AnalysisResult()

        self.active_notes: Set[int] = set()
        self.last_label: Optional[str] = None
        self.last_tick: Optional[int] = None
        self.last_seconds: Optional[float] = None
        self.last_note_on_tick: Optional[int] = None
        self.rapid_changes = 0

    def feed(self, event: NoteEvent) -> None:
        if event.is_note_on:
            self._note_on(event)
        elif event.is_note_off:
            self.active_notes.discard(event.note)

    def _note_on(self, event: NoteEvent) -> None:
        result = self.result
        self.active_notes.add(event.note)
        result.note_count += 1
        result.max_polyphony = max(result.max_polyphony, len(self.active_notes))

        if (
            self.last_note_on_tick is not None
            and event.tick - self.last_note_on_tick <= self.config.rapid_change_ticks
        ):
            self.rapid_changes += 1
        self.last_note_on_tick = event.tick

        if len(self.active_notes) >= 2:
            chord = self.detector.detect(self.active_notes)
            if chord is not None:
                self._chord_change(chord.label, event.tick)

    def _chord_change(self, label: str, tick: int) -> None:
        if label in (UNKNOWN_LABEL, INTERVAL_LABEL):
            return

        seconds = self.grid.seconds(tick)
        if tick == self.last_tick and label == self.last_label:
            return
        if (
            self.last_seconds is not None
            and seconds - self.last_seconds < self.config.dedupe_window_seconds
        ):
            return

        bar, beat_in_bar = self.grid.bar_position(tick)
        self.result.timeline.append(
            TimelineEntry(
                seconds=seconds,
                bar=bar,
                beat_in_bar=beat_in_bar,
                label=label,
                tick=tick,
            )
        )
        self.result.chord_difficulty += chord_weight(label)

        self.last_label = label
        self.last_tick = tick
        self.last_seconds = seconds

    def finish(self) -> AnalysisResult:
        config = self.config
        result = self.result
        result.rhythm_difficulty = min(
            config.max_rhythm_difficulty,
            self.rapid_changes // config.rapid_changes_per_point,
        )
        result.total_difficulty = (
            result.chord_difficulty
            + result.rhythm_difficulty
            + min(
                config.max_polyphony_difficulty,
                result.max_polyphony * config.polyphony_weight,
            )
        )
        return result


class DifficultyScorer:
    """Score the performance difficulty of a MIDI event stream.

    Each ``analyze`` call runs an independent pass, so one scorer can be
    reused for many streams. The chord detector's key persists between calls.
    """

    def __init__(
        self,
        detector: Optional[ChordDetector] = None,
        config: Optional[ScorerConfig] = None,
    ):
        """
        Initialize DifficultyScorer.

        Args:
            detector: Chord detector to use (default: key of C, first-match)
            config: Optional ScorerConfig for thresholds and caps
        """
        self.detector = detector if detector is not None else ChordDetector()
        self.config = config if config is not None else ScorerConfig()

    def set_key(self, key_name: str) -> bool:
        """Change the key used for chord detection in later passes."""
        return self.detector.set_key(key_name)

    def analyze(self, events: Iterable[Event], resolution: int) -> AnalysisResult:
        """
        Analyze an event stream.

        Args:
            events: Note and tempo events; sorted by tick here, ties keep
                    their given order
            resolution: Pulses per quarter note

        Returns:
            AnalysisResult with subscores and chord timeline
        """
        ordered = sorted(events, key=lambda e: e.tick)
        grid = TempoGrid.from_events(
            ordered,
            resolution,
            beats_per_bar=self.config.beats_per_bar,
            default_us_per_quarter=self.config.default_us_per_quarter,
        )

        scoring = _ScoringPass(grid, self.detector, self.config)
        for event in ordered:
            if isinstance(event, NoteEvent):
                scoring.feed(event)
        result = scoring.finish()

        logger.debug(
            "Scored %d notes at %.1f BPM: %d chord changes, total difficulty %d",
            result.note_count,
            grid.bpm,
            len(result.timeline),
            result.total_difficulty,
        )
        return result

    def analyze_stream(self, stream: EventStream) -> AnalysisResult:
        """Analyze a decoded EventStream."""
        return self.analyze(stream.events, stream.resolution)
