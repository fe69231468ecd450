"""Global constants for MIDI Analyzer."""

# Pitch names (sharp-based spelling only)
PITCH_NAMES = ["C", "C#", "D", "D#", "E", "F", "F#", "G", "G#", "A", "A#", "B"]
UNKNOWN_NOTE_NAME = "?"

# Sentinel root for results that are not rooted chords
NO_ROOT = -1

# Fallback labels when no template matches
INTERVAL_LABEL = "interval"
UNKNOWN_LABEL = "unknown"

# Musical defaults
DEFAULT_KEY = "C"
DEFAULT_US_PER_QUARTER = 500_000  # 120 BPM
DEFAULT_TEMPO = 120.0
DEFAULT_BEATS_PER_BAR = 4
DEFAULT_RESOLUTION = 480

# MIDI ranges
MIDI_MIN = 0
MIDI_MAX = 127
