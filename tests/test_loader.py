"""Tests for MIDI decoding and file analysis."""

import io
import struct

import mido
import pytest

from midi_analyzer.core import EventKind, NoteEvent, TempoEvent
from midi_analyzer.analysis import AnalysisResult, DifficultyScorer
from midi_analyzer.input import MidiLoader, MidiDecodeError, analyze_file


def build_midi(tracks, ticks_per_beat: int = 480) -> bytes:
    """Serialize lists of mido messages (delta times) into SMF bytes."""
    midi = mido.MidiFile(ticks_per_beat=ticks_per_beat)
    for messages in tracks:
        track = mido.MidiTrack()
        track.extend(messages)
        midi.tracks.append(track)

    buffer = io.BytesIO()
    midi.save(file=buffer)
    return buffer.getvalue()


def raw_smf(track_data: bytes, ticks_per_beat: int = 480) -> bytes:
    """Wrap hand-written track bytes in a single-track SMF, bypassing mido checks."""
    header = b"MThd" + struct.pack(">LHHH", 6, 0, 1, ticks_per_beat)
    return header + b"MTrk" + struct.pack(">L", len(track_data)) + track_data


C_MAJOR_ONSETS = bytes.fromhex("00903C50 00904050 00904350")
END_OF_TRACK = bytes.fromhex("00FF2F00")

# Files with a valid header whose track payload is malformed
BAD_PAYLOADS = {
    "tempo_zero": bytes.fromhex("00FF5103000000") + C_MAJOR_ONSETS + END_OF_TRACK,
    "key_signature_10_sharps": bytes.fromhex("00FF59020A00") + C_MAJOR_ONSETS + END_OF_TRACK,
    "truncated_tempo": bytes.fromhex("00FF510207A1") + C_MAJOR_ONSETS + END_OF_TRACK,
}


def c_then_f_track():
    """C major for a beat, then F major."""
    return [
        mido.Message("note_on", note=60, velocity=80, time=0),
        mido.Message("note_on", note=64, velocity=80, time=0),
        mido.Message("note_on", note=67, velocity=80, time=0),
        mido.Message("note_off", note=60, velocity=0, time=480),
        mido.Message("note_off", note=64, velocity=0, time=0),
        mido.Message("note_off", note=67, velocity=0, time=0),
        mido.Message("note_on", note=65, velocity=80, time=0),
        mido.Message("note_on", note=69, velocity=80, time=0),
        mido.Message("note_on", note=72, velocity=80, time=0),
        mido.Message("note_on", note=65, velocity=0, time=480),
        mido.Message("note_on", note=69, velocity=0, time=0),
        mido.Message("note_on", note=72, velocity=0, time=0),
    ]


class TestMidiLoader:
    """Tests for MidiLoader."""

    def test_load_bytes(self):
        data = build_midi([[mido.MetaMessage("set_tempo", tempo=400_000, time=0)]
                           + c_then_f_track()])
        stream = MidiLoader().load_bytes(data)

        assert stream.resolution == 480
        assert stream.tempo_events == [TempoEvent(0, 400_000)]
        assert len(stream.note_events) == 12
        assert stream.note_events[0] == NoteEvent.on(0, 60, 80)

    def test_absolute_ticks(self):
        stream = MidiLoader().load_bytes(build_midi([c_then_f_track()]))
        notes = stream.note_events

        assert notes[3].kind is EventKind.NOTE_OFF
        assert notes[3].tick == 480
        assert notes[-1].tick == 960
        # Note-on with velocity 0 is a release
        assert notes[-1].is_note_off
        assert stream.last_tick == 960

    def test_tracks_merged_by_tick(self):
        conductor = [mido.MetaMessage("set_tempo", tempo=600_000, time=0)]
        melody = [
            mido.Message("note_on", note=72, velocity=90, time=240),
            mido.Message("note_off", note=72, velocity=0, time=240),
        ]
        bass = [
            mido.Message("note_on", note=48, velocity=90, time=0),
            mido.Message("note_off", note=48, velocity=0, time=480),
        ]
        stream = MidiLoader().load_bytes(build_midi([conductor, melody, bass]))

        ticks = [e.tick for e in stream.events]
        assert ticks == sorted(ticks)
        assert isinstance(stream.events[0], TempoEvent)
        assert stream.events[1] == NoteEvent.on(0, 48, 90)
        assert stream.events[2] == NoteEvent.on(240, 72, 90)

    def test_same_tick_keeps_track_order(self):
        first = [mido.Message("note_on", note=60, velocity=80, time=100)]
        second = [mido.Message("note_on", note=64, velocity=80, time=100)]
        stream = MidiLoader().load_bytes(build_midi([first, second]))
        assert [e.note for e in stream.note_events] == [60, 64]

    def test_other_messages_ignored(self):
        track = [
            mido.Message("program_change", program=5, time=0),
            mido.Message("control_change", control=64, value=127, time=0),
            mido.MetaMessage("track_name", name="Piano", time=0),
            mido.Message("note_on", note=60, velocity=80, time=0),
        ]
        stream = MidiLoader().load_bytes(build_midi([track]))
        assert stream.events == [NoteEvent.on(0, 60, 80)]

    def test_load_path(self, tmp_path):
        path = tmp_path / "song.mid"
        path.write_bytes(build_midi([c_then_f_track()]))

        stream = MidiLoader().load(path)
        assert len(stream.note_events) == 12

    def test_missing_file(self, tmp_path):
        with pytest.raises(FileNotFoundError):
            MidiLoader().load(tmp_path / "missing.mid")

    def test_extension_check(self, tmp_path):
        path = tmp_path / "song.txt"
        path.write_bytes(build_midi([c_then_f_track()]))

        with pytest.raises(MidiDecodeError, match="Unsupported format"):
            MidiLoader(check_extension=True).load(path)

    @pytest.mark.parametrize("data", [b"", b"not a midi file", b"MThd\x00\x00"])
    def test_garbage_raises_decode_error(self, data):
        with pytest.raises(MidiDecodeError):
            MidiLoader().load_bytes(data)

    @pytest.mark.parametrize("payload", sorted(BAD_PAYLOADS))
    def test_bad_payload_raises_decode_error(self, payload):
        with pytest.raises(MidiDecodeError):
            MidiLoader().load_bytes(raw_smf(BAD_PAYLOADS[payload]))

    def test_raw_smf_helper_decodes(self):
        stream = MidiLoader().load_bytes(raw_smf(C_MAJOR_ONSETS + END_OF_TRACK))
        assert [e.note for e in stream.note_events] == [60, 64, 67]

    def test_decode_error_is_value_error(self):
        assert issubclass(MidiDecodeError, ValueError)


class TestAnalyzeFile:
    """Tests for the decode-and-score entry point."""

    def test_analyze_bytes(self):
        result = analyze_file(build_midi([c_then_f_track()]))

        assert result.chord_labels == ["Cmaj", "Fmaj"]
        assert result.note_count == 6
        assert result.timeline[1].seconds == pytest.approx(0.5)

    def test_analyze_path_honors_tempo(self, tmp_path):
        path = tmp_path / "fast.mid"
        track = [mido.MetaMessage("set_tempo", tempo=250_000, time=0)] + c_then_f_track()
        path.write_bytes(build_midi([track]))

        result = analyze_file(str(path))
        assert result.timeline[1].seconds == pytest.approx(0.25)

    def test_undecodable_input_gives_empty_result(self):
        assert analyze_file(b"garbage") == AnalysisResult.empty()

    @pytest.mark.parametrize("payload", sorted(BAD_PAYLOADS))
    def test_bad_payload_gives_empty_result(self, payload, tmp_path):
        data = raw_smf(BAD_PAYLOADS[payload])
        path = tmp_path / f"{payload}.mid"
        path.write_bytes(data)

        assert analyze_file(data) == AnalysisResult.empty()
        assert analyze_file(path) == AnalysisResult.empty()

    def test_earliest_tempo_across_tracks(self):
        # Track 0 sets its tempo later in time than track 1 does
        conductor = [mido.MetaMessage("set_tempo", tempo=1_000_000, time=480)]
        melody = [mido.MetaMessage("set_tempo", tempo=250_000, time=0)] + c_then_f_track()

        result = analyze_file(build_midi([conductor, melody]))
        assert result.timeline[1].seconds == pytest.approx(0.25)

    def test_missing_path_raises(self, tmp_path):
        with pytest.raises(FileNotFoundError):
            analyze_file(tmp_path / "missing.mid")

    def test_key_applied_to_scorer(self):
        scorer = DifficultyScorer()
        analyze_file(build_midi([c_then_f_track()]), key="F", scorer=scorer)
        assert scorer.detector.key == "F"

    def test_reused_scorer_keeps_its_key(self):
        scorer = DifficultyScorer()
        scorer.set_key("Am")
        analyze_file(build_midi([c_then_f_track()]), scorer=scorer)
        assert scorer.detector.key == "Am"

    def test_new_scorer_defaults_to_c(self):
        # {C, D, G} is Csus2 in C but Gsus4 in G
        track = [mido.Message("note_on", note=n, velocity=80, time=0) for n in (60, 62, 67)]
        data = build_midi([track])

        assert analyze_file(data).chord_labels == ["Csus2"]
        assert analyze_file(data, key="G").chord_labels == ["Gsus4"]
