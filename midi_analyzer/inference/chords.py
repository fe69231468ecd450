"""Chord detection - Name the chord formed by a set of sounding notes.

Implements key-aware template matching:
- Pitch class reduction (octave-independent)
- Root search in key-specific priority order
- Ordered template catalog, triads through thirteenths
- Interval / unknown fallbacks for note sets that match no template

Two resolution policies are supported. FIRST_MATCH (the default) returns
the first (root, template) pair that fits, trying every template for a root
before moving to the next root. MATCH_COUNT considers every fitting pair and
keeps the one covering the most pitch classes, so a full Cmaj7 is reported
as "Cmaj7" rather than the "Cmaj" triad it contains.
"""

import re
import warnings
from dataclasses import dataclass, field
from enum import Enum
from typing import FrozenSet, Iterable, Optional, Tuple

import numpy as np

from ..core.constants import (
    DEFAULT_KEY,
    INTERVAL_LABEL,
    MIDI_MAX,
    MIDI_MIN,
    NO_ROOT,
    PITCH_NAMES,
    UNKNOWN_LABEL,
    UNKNOWN_NOTE_NAME,
)
from .keys import DEFAULT_ROOT_TABLE, RootOrder, RootPriorityTable, UnknownKeyError
from .templates import DEFAULT_CATALOG, ChordTemplate, ChordTemplateCatalog


_NOTE_PATTERN = re.compile(r"^([A-Ga-g])([#b]?)(-?\d+)?$")
_NATURAL_PCS = {"C": 0, "D": 2, "E": 4, "F": 5, "G": 7, "A": 9, "B": 11}


def note_name(pitch_class: int) -> str:
    """Get the sharp-based name of a pitch class, or "?" if out of range."""
    if isinstance(pitch_class, (int, np.integer)) and 0 <= pitch_class < 12:
        return PITCH_NAMES[pitch_class]
    return UNKNOWN_NOTE_NAME


def parse_note(token: str, default_octave: int = 4) -> int:
    """
    Parse a MIDI note number or note name into a MIDI note number.

    Args:
        token: "60", "C4", "F#3", "Bb" (octave defaults to ``default_octave``)
        default_octave: Octave used when the name has none (C4 = 60)

    Returns:
        MIDI note number (0-127)

    Raises:
        ValueError: If the token is not a note or is out of MIDI range
    """
    token = token.strip()
    if token.lstrip("-").isdigit():
        note = int(token)
    else:
        match = _NOTE_PATTERN.match(token)
        if not match:
            raise ValueError(f"Not a note name or number: {token!r}")
        letter, accidental, octave = match.groups()
        pc = _NATURAL_PCS[letter.upper()]
        if accidental == "#":
            pc += 1
        elif accidental == "b":
            pc -= 1
        octave = int(octave) if octave is not None else default_octave
        note = (octave + 1) * 12 + pc

    if not MIDI_MIN <= note <= MIDI_MAX:
        raise ValueError(f"Note out of MIDI range: {token!r}")
    return note


def pitch_class_membership(notes: Iterable[int]) -> np.ndarray:
    """Build a 12-element boolean array marking the pitch classes present."""
    membership = np.zeros(12, dtype=bool)
    for note in notes:
        membership[note % 12] = True
    return membership


class ResolutionPolicy(Enum):
    """How to choose between several fitting (root, template) pairs."""
    FIRST_MATCH = "first-match"
    MATCH_COUNT = "match-count"


@dataclass(frozen=True)
class ChordResult:
    """Result of a chord detection."""

    label: str  # e.g. "Cmaj", "F#m7", "interval", "unknown"
    root_pitch_class: int  # 0-11, or -1 when there is no root
    source_notes: FrozenSet[int] = field(default_factory=frozenset)

    @property
    def root(self) -> Optional[str]:
        """Root note name, or None for interval/unknown results."""
        if self.root_pitch_class == NO_ROOT:
            return None
        return note_name(self.root_pitch_class)

    @property
    def is_named(self) -> bool:
        """True unless the result is one of the interval/unknown fallbacks."""
        return self.label not in (INTERVAL_LABEL, UNKNOWN_LABEL)

    def __str__(self) -> str:
        return self.label


class ChordDetector:
    """Identify chords from sets of simultaneously sounding MIDI notes.

    The detector holds the active key (and therefore the root order) for a
    session. ``detect`` itself has no side effects: the same notes under the
    same key always give the same result.
    """

    def __init__(
        self,
        key: str = DEFAULT_KEY,
        root_table: RootPriorityTable = DEFAULT_ROOT_TABLE,
        catalog: ChordTemplateCatalog = DEFAULT_CATALOG,
        policy: ResolutionPolicy = ResolutionPolicy.FIRST_MATCH,
    ):
        """
        Initialize ChordDetector.

        Args:
            key: Initial key name; must be present in ``root_table``
            root_table: Root priority orders per key
            catalog: Chord templates in priority order
            policy: Resolution policy when several templates fit
        """
        self.root_table = root_table
        self.catalog = catalog
        self.policy = ResolutionPolicy(policy)
        self._key = key
        self._root_order: RootOrder = root_table.order(key)

    @property
    def key(self) -> str:
        return self._key

    @property
    def root_order(self) -> RootOrder:
        return self._root_order

    def set_key(self, key_name: str) -> bool:
        """
        Change the active key for subsequent detections.

        Unrecognized key names leave the current key in place and emit a
        warning.

        Returns:
            True if the key was applied
        """
        try:
            order = self.root_table.order(key_name)
        except UnknownKeyError:
            warnings.warn(
                f"Unknown key '{key_name}', keeping key '{self._key}'",
                stacklevel=2,
            )
            return False
        self._key = key_name
        self._root_order = order
        return True

    def detect(self, notes: Optional[Iterable[int]]) -> Optional[ChordResult]:
        """
        Detect the chord formed by a set of notes.

        Args:
            notes: MIDI note numbers sounding together

        Returns:
            ChordResult, or None if no notes were given
        """
        if notes is None:
            return None
        source = frozenset(notes)
        if not source:
            return None

        membership = pitch_class_membership(source)
        pressed_count = int(membership.sum())

        if pressed_count == 1:
            pc = int(np.flatnonzero(membership)[0])
            return ChordResult(note_name(pc), pc, source)

        if self.policy is ResolutionPolicy.MATCH_COUNT:
            best = self._best_by_match_count(membership)
        else:
            best = self._first_match(membership)

        if best is not None:
            root, template = best
            return ChordResult(note_name(root) + template.label, root, source)

        if pressed_count == 2:
            return ChordResult(INTERVAL_LABEL, NO_ROOT, source)
        return ChordResult(UNKNOWN_LABEL, NO_ROOT, source)

    def detect_label(self, notes: Optional[Iterable[int]]) -> Optional[str]:
        """Convenience wrapper returning only the chord label."""
        result = self.detect(notes)
        return result.label if result else None

    def _first_match(
        self, membership: np.ndarray
    ) -> Optional[Tuple[int, ChordTemplate]]:
        for root in self._root_order:
            if not membership[root]:
                continue
            for template in self.catalog:
                if template.matches(membership, root):
                    return root, template
        return None

    def _best_by_match_count(
        self, membership: np.ndarray
    ) -> Optional[Tuple[int, ChordTemplate]]:
        best = None
        best_count = 0
        for root in self._root_order:
            if not membership[root]:
                continue
            for template in self.catalog:
                # Strictly greater keeps the earliest root/template on ties
                if template.size > best_count and template.matches(membership, root):
                    best = (root, template)
                    best_count = template.size
        return best
