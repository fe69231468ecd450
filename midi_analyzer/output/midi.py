"""MIDI export functionality."""

from collections import defaultdict, deque
from pathlib import Path
from typing import Deque, Dict, List, Tuple

import pretty_midi

from ..analysis.tempo import TempoGrid, first_tempo
from ..core.constants import DEFAULT_TEMPO
from ..core.events import EventStream, NoteEvent


class MIDIExporter:
    """Export recorded event streams to MIDI format."""

    def __init__(
        self,
        tempo: float = DEFAULT_TEMPO,
        instrument_name: str = "Acoustic Grand Piano",
        instrument_program: int = 0,
    ):
        """
        Initialize MIDIExporter.

        Args:
            tempo: Tempo in BPM, used when the stream carries no tempo event
            instrument_name: MIDI instrument name
            instrument_program: MIDI program number (0-127)
        """
        self.tempo = tempo
        self.instrument_name = instrument_name
        self.instrument_program = instrument_program

    def export(self, stream: EventStream, output_path: str) -> None:
        """
        Export an event stream to a MIDI file.

        Args:
            stream: Recorded or decoded events
            output_path: Path to output MIDI file
        """
        midi = self.to_pretty_midi(stream)

        # Ensure output directory exists
        Path(output_path).parent.mkdir(parents=True, exist_ok=True)

        midi.write(str(output_path))

    def to_pretty_midi(self, stream: EventStream) -> pretty_midi.PrettyMIDI:
        """Convert an event stream to a PrettyMIDI object without saving."""
        us_per_quarter = first_tempo(stream.events, int(round(60_000_000 / self.tempo)))
        grid = TempoGrid(stream.resolution, us_per_quarter)

        midi = pretty_midi.PrettyMIDI(
            resolution=stream.resolution,
            initial_tempo=grid.bpm,
        )
        instrument = pretty_midi.Instrument(
            program=self.instrument_program,
            name=self.instrument_name,
        )

        for start, end, pitch, velocity in self.pair_notes(stream.note_events):
            instrument.notes.append(
                pretty_midi.Note(
                    velocity=velocity,
                    pitch=pitch,
                    start=grid.seconds(start),
                    end=grid.seconds(end),
                )
            )

        midi.instruments.append(instrument)
        return midi

    @staticmethod
    def pair_notes(events: List[NoteEvent]) -> List[Tuple[int, int, int, int]]:
        """
        Pair note-on and note-off events into notes.

        Repeated presses of one pitch are closed first-in, first-out. Notes
        still held at the end are closed at the last tick of the stream.

        Returns:
            List of (start_tick, end_tick, pitch, velocity), sorted by start
        """
        open_notes: Dict[int, Deque[Tuple[int, int]]] = defaultdict(deque)
        notes = []
        last_tick = 0

        for event in sorted(events, key=lambda e: e.tick):
            last_tick = max(last_tick, event.tick)
            if event.is_note_on:
                open_notes[event.note].append((event.tick, event.velocity))
            elif event.is_note_off and open_notes[event.note]:
                start, velocity = open_notes[event.note].popleft()
                notes.append((start, event.tick, event.note, velocity))

        for pitch, pending in open_notes.items():
            for start, velocity in pending:
                notes.append((start, last_tick, pitch, velocity))

        # Zero-length notes would be written as off-before-on
        notes = [
            (start, max(end, start + 1), pitch, velocity)
            for start, end, pitch, velocity in notes
        ]
        notes.sort(key=lambda n: (n[0], n[2]))
        return notes
