"""Chord templates - Interval patterns for chord quality identification.

Templates are ordered from simplest to most complex. The order matters: the
first-match detection policy returns the earliest template that fits, so a
plain triad wins over any extension built on top of it.
"""

from dataclasses import dataclass
from typing import FrozenSet, Iterator, Sequence, Tuple

import numpy as np


@dataclass(frozen=True)
class ChordTemplate:
    """A chord quality defined by semitone offsets from its root."""

    label: str  # Suffix appended to the root name, e.g. "maj7"
    intervals: Tuple[int, ...]  # Ascending, starts at 0, may exceed 11

    def __post_init__(self):
        intervals = tuple(self.intervals)
        object.__setattr__(self, "intervals", intervals)
        if not intervals or intervals[0] != 0:
            raise ValueError(f"Template {self.label!r} must start at interval 0")
        if any(i < 0 for i in intervals):
            raise ValueError(f"Template {self.label!r} has negative intervals")
        if list(intervals) != sorted(intervals):
            raise ValueError(f"Template {self.label!r} intervals must be ascending")

    @property
    def size(self) -> int:
        """Number of distinct pitch classes the template covers."""
        return len({i % 12 for i in self.intervals})

    def pitch_classes(self, root: int) -> FrozenSet[int]:
        """Pitch classes of this chord built on ``root``."""
        return frozenset((root + i) % 12 for i in self.intervals)

    def matches(self, membership: np.ndarray, root: int) -> bool:
        """True if every chord tone above ``root`` is present in ``membership``."""
        return all(membership[(root + i) % 12] for i in self.intervals)


# Simplest to most complex
CHORD_TEMPLATES: Tuple[ChordTemplate, ...] = (
    # Triads
    ChordTemplate("maj", (0, 4, 7)),
    ChordTemplate("min", (0, 3, 7)),
    ChordTemplate("sus2", (0, 2, 7)),
    ChordTemplate("sus4", (0, 5, 7)),
    ChordTemplate("dim", (0, 3, 6)),
    ChordTemplate("aug", (0, 4, 8)),
    # Seventh chords
    ChordTemplate("7", (0, 4, 7, 10)),
    ChordTemplate("maj7", (0, 4, 7, 11)),
    ChordTemplate("m7", (0, 3, 7, 10)),
    ChordTemplate("mMaj7", (0, 3, 7, 11)),
    ChordTemplate("7sus4", (0, 5, 7, 10)),
    # Sixths
    ChordTemplate("6", (0, 4, 7, 9)),
    ChordTemplate("m6", (0, 3, 7, 9)),
    # Ninths (14 = 2 + 12)
    ChordTemplate("9", (0, 4, 7, 10, 14)),
    ChordTemplate("m9", (0, 3, 7, 10, 14)),
    ChordTemplate("maj9", (0, 4, 7, 11, 14)),
    ChordTemplate("7b9", (0, 4, 7, 10, 13)),
    ChordTemplate("7#9", (0, 4, 7, 10, 15)),
    # Elevenths
    ChordTemplate("11", (0, 4, 7, 10, 14, 17)),
    ChordTemplate("m11", (0, 3, 7, 10, 14, 17)),
    # Thirteenths
    ChordTemplate("13", (0, 4, 7, 10, 14, 17, 21)),
    ChordTemplate("m13", (0, 3, 7, 10, 14, 17, 21)),
    ChordTemplate("maj13", (0, 4, 7, 11, 14, 17, 21)),
)


class ChordTemplateCatalog:
    """Immutable, ordered collection of chord templates."""

    def __init__(self, templates: Sequence[ChordTemplate] = CHORD_TEMPLATES):
        self._templates: Tuple[ChordTemplate, ...] = tuple(templates)
        labels = [t.label for t in self._templates]
        if len(set(labels)) != len(labels):
            raise ValueError("Template labels must be unique")

    def __iter__(self) -> Iterator[ChordTemplate]:
        return iter(self._templates)

    def __len__(self) -> int:
        return len(self._templates)

    def __getitem__(self, label: str) -> ChordTemplate:
        for template in self._templates:
            if template.label == label:
                return template
        raise KeyError(label)

    @property
    def labels(self) -> Tuple[str, ...]:
        return tuple(t.label for t in self._templates)


DEFAULT_CATALOG = ChordTemplateCatalog()
