"""Inference layer - Chord identification from sounding notes.

This layer turns sets of MIDI notes into chord names:
- Root priority orders per key (tonal closeness to the tonic)
- Ordered chord template catalog (triads through 13ths)
- Chord detection with a configurable resolution policy

Pipeline: Notes -> Pitch classes -> [Root order x Templates] -> Chord label
"""

from .keys import (
    RootPriorityTable,
    UnknownKeyError,
    ROOT_PRIORITIES,
    DEFAULT_ROOT_TABLE,
)
from .templates import (
    ChordTemplate,
    ChordTemplateCatalog,
    CHORD_TEMPLATES,
    DEFAULT_CATALOG,
)
from .chords import (
    ChordDetector,
    ChordResult,
    ResolutionPolicy,
    note_name,
    parse_note,
    pitch_class_membership,
)

__all__ = [
    # Keys
    "RootPriorityTable",
    "UnknownKeyError",
    "ROOT_PRIORITIES",
    "DEFAULT_ROOT_TABLE",
    # Templates
    "ChordTemplate",
    "ChordTemplateCatalog",
    "CHORD_TEMPLATES",
    "DEFAULT_CATALOG",
    # Detection
    "ChordDetector",
    "ChordResult",
    "ResolutionPolicy",
    "note_name",
    "parse_note",
    "pitch_class_membership",
]
