"""Live input - Track pressed keys, name the current chord, record a take."""

import time
from typing import Callable, List, Optional, Set

from ..core.constants import DEFAULT_KEY, DEFAULT_RESOLUTION
from ..core.events import EventStream, NoteEvent
from ..inference.chords import ChordDetector

NO_CHORD = "—"


class PerformanceRecorder:
    """Record a live keyboard performance as tick-stamped note events.

    Ticks are derived from wall-clock time at a fixed 120 BPM, so a recorded
    take replays at the speed it was played when exported with that tempo.
    """

    RECORD_VELOCITY = 90
    MS_PER_QUARTER = 500  # 120 BPM

    def __init__(
        self,
        detector: Optional[ChordDetector] = None,
        resolution: int = DEFAULT_RESOLUTION,
        clock: Callable[[], float] = time.monotonic,
    ):
        """
        Initialize PerformanceRecorder.

        Args:
            detector: Chord detector for the live chord display
            resolution: Pulses per quarter note of the recording
            clock: Time source in seconds (injectable for tests)
        """
        self.detector = detector if detector is not None else ChordDetector(DEFAULT_KEY)
        self.resolution = resolution
        self.clock = clock

        self.pressed: Set[int] = set()
        self._events: List[NoteEvent] = []
        self._recording = False
        self._start_time = 0.0

    @property
    def is_recording(self) -> bool:
        return self._recording

    def set_key(self, key_name: str) -> bool:
        """Change the key used for the chord display."""
        return self.detector.set_key(key_name)

    def start(self) -> None:
        """Start a new recording, discarding any previous take."""
        self._events = []
        self._start_time = self.clock()
        self._recording = True

    def stop(self) -> EventStream:
        """Stop recording and return the take."""
        self._recording = False
        return EventStream(resolution=self.resolution, events=list(self._events))

    def press(self, note: int) -> None:
        self.pressed.add(note)
        self._record(NoteEvent.on(self.current_tick(), note, self.RECORD_VELOCITY))

    def release(self, note: int) -> None:
        self.pressed.discard(note)
        self._record(NoteEvent.off(self.current_tick(), note, self.RECORD_VELOCITY))

    def current_tick(self) -> int:
        """Ticks elapsed since recording started."""
        if not self._recording:
            return 0
        elapsed_ms = (self.clock() - self._start_time) * 1000.0
        return int(elapsed_ms * self.resolution / self.MS_PER_QUARTER)

    def current_chord(self) -> str:
        """Label of the chord currently held down, or NO_CHORD if none."""
        if not self.pressed:
            return NO_CHORD
        label = self.detector.detect_label(self.pressed)
        return label or NO_CHORD

    def _record(self, event: NoteEvent) -> None:
        if self._recording:
            self._events.append(event)
