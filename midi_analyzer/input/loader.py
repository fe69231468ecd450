"""MIDI file loading - Decode Standard MIDI Files into event streams."""

import io
import logging
import struct
from pathlib import Path
from typing import TYPE_CHECKING, List, Optional, Tuple, Union

import mido
from mido.midifiles.meta import KeySignatureError

from ..core.constants import DEFAULT_KEY
from ..core.events import Event, EventStream, NoteEvent, TempoEvent

if TYPE_CHECKING:
    from ..analysis import AnalysisResult, DifficultyScorer

logger = logging.getLogger(__name__)

MidiSource = Union[str, Path, bytes, bytearray]

# Errors mido raises on malformed chunks and meta payloads
_MIDO_ERRORS = (
    OSError,
    EOFError,
    ValueError,
    KeyError,
    IndexError,
    TypeError,
    struct.error,
    KeySignatureError,
)


class MidiDecodeError(ValueError):
    """Raised when MIDI data cannot be decoded."""


class MidiLoader:
    """Decode MIDI files into a resolution plus tick-ordered events."""

    SUPPORTED_FORMATS = {".mid", ".midi", ".smf", ".kar"}

    def __init__(self, check_extension: bool = False):
        """
        Initialize MidiLoader.

        Args:
            check_extension: Reject paths without a MIDI file extension
        """
        self.check_extension = check_extension

    def load(self, path: Union[str, Path]) -> EventStream:
        """
        Load and decode a MIDI file.

        Args:
            path: Path to MIDI file

        Returns:
            EventStream with all tracks merged by tick

        Raises:
            FileNotFoundError: If file doesn't exist
            MidiDecodeError: If the file is not valid MIDI
        """
        path = Path(path)

        if not path.exists():
            raise FileNotFoundError(f"MIDI file not found: {path}")

        if self.check_extension and path.suffix.lower() not in self.SUPPORTED_FORMATS:
            raise MidiDecodeError(
                f"Unsupported format: {path.suffix}. "
                f"Supported: {self.SUPPORTED_FORMATS}"
            )

        return self.load_bytes(path.read_bytes(), name=str(path))

    def load_bytes(self, data: Union[bytes, bytearray], name: str = "<bytes>") -> EventStream:
        """Decode MIDI data held in memory."""
        try:
            midi = mido.MidiFile(file=io.BytesIO(bytes(data)))
        except _MIDO_ERRORS as e:
            raise MidiDecodeError(f"Failed to decode MIDI data from {name}: {e}") from e
        return self.decode(midi, name=name)

    def decode(self, midi: mido.MidiFile, name: str = "<midi>") -> EventStream:
        """Convert a parsed mido.MidiFile into an EventStream."""
        resolution = midi.ticks_per_beat
        # Negative/SMPTE divisions have the top bit set
        if not 0 < resolution < 0x8000:
            raise MidiDecodeError(f"Unsupported time division in {name}: {resolution}")

        try:
            events = self._merge_tracks(midi.tracks)
        except ValueError as e:
            # Values mido accepts but the event types reject, e.g. tempo 0
            raise MidiDecodeError(f"Invalid event in {name}: {e}") from e
        logger.debug(
            "Decoded %s: %d tracks, %d events, %d PPQ",
            name, len(midi.tracks), len(events), resolution,
        )
        return EventStream(resolution=resolution, events=events)

    def _merge_tracks(self, tracks: List[mido.MidiTrack]) -> List[Event]:
        """Merge tracks into one list ordered by tick, ties in declaration order."""
        timed: List[Tuple[int, Event]] = []
        for track in tracks:
            tick = 0
            for msg in track:
                tick += msg.time
                event = self._convert(msg, tick)
                if event is not None:
                    timed.append((tick, event))

        timed.sort(key=lambda pair: pair[0])
        return [event for _, event in timed]

    def _convert(self, msg: mido.Message, tick: int) -> Optional[Event]:
        if msg.type == "note_on":
            return NoteEvent.on(tick, msg.note, msg.velocity)
        if msg.type == "note_off":
            return NoteEvent.off(tick, msg.note, msg.velocity)
        if msg.type == "set_tempo":
            return TempoEvent(tick, msg.tempo)
        return None


def analyze_file(
    source: MidiSource,
    key: Optional[str] = None,
    scorer: Optional["DifficultyScorer"] = None,
) -> "AnalysisResult":
    """
    Decode and score a MIDI file or in-memory MIDI data.

    Undecodable input is not an error here: a warning is logged and an
    all-zero AnalysisResult is returned.

    Args:
        source: Path to a MIDI file, or raw MIDI bytes
        key: Key used for chord detection. Applied to ``scorer`` when both
             are given, which changes that scorer's key for later calls.
             Defaults to the scorer's current key, or C for a new scorer.
        scorer: Optional DifficultyScorer to reuse

    Returns:
        AnalysisResult

    Raises:
        FileNotFoundError: If a path is given and the file doesn't exist
    """
    from ..analysis import AnalysisResult, DifficultyScorer

    if scorer is None:
        scorer = DifficultyScorer()
        key = key or DEFAULT_KEY
    if key is not None:
        scorer.set_key(key)

    loader = MidiLoader()
    try:
        if isinstance(source, (bytes, bytearray)):
            stream = loader.load_bytes(source)
        else:
            stream = loader.load(source)
    except MidiDecodeError as e:
        logger.warning("%s", e)
        return AnalysisResult.empty()

    return scorer.analyze_stream(stream)
