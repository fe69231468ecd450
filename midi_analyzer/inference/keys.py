"""Root priority tables - Order in which chord roots are tried per key.

Each of the 24 major/minor keys maps to a permutation of the twelve pitch
classes. The tonic comes first, followed by the degrees most closely related
to it (fifth, fourth, relative), then the remaining chromatic roots. The
chord detector walks roots in this order, so a key biases ambiguous note
sets towards the chords that are most likely in that key.
"""

from types import MappingProxyType
from typing import Dict, Iterable, List, Mapping, Sequence, Tuple

from ..core.constants import DEFAULT_KEY

RootOrder = Tuple[int, ...]

CHROMATIC_ORDER: RootOrder = tuple(range(12))


class UnknownKeyError(KeyError):
    """Raised when a key name has no root priority order."""

    def __init__(self, key_name: str):
        super().__init__(key_name)
        self.key_name = key_name

    def __str__(self) -> str:
        return f"Unknown key: {self.key_name!r}"


# Hand-assigned orders: tonic, then fifth/fourth related degrees, then the rest
ROOT_PRIORITIES: Dict[str, Sequence[int]] = {
    # Major keys
    "C": (0, 7, 5, 9, 4, 2, 11, 1, 3, 6, 8, 10),
    "C#": (1, 8, 6, 10, 5, 3, 0, 2, 4, 7, 9, 11),
    "D": (2, 9, 7, 11, 6, 4, 1, 3, 5, 8, 10, 0),
    "D#": (3, 10, 8, 0, 7, 5, 2, 4, 6, 9, 11, 1),
    "E": (4, 11, 9, 1, 8, 6, 3, 5, 7, 10, 0, 2),
    "F": (5, 0, 10, 2, 9, 7, 4, 6, 8, 11, 1, 3),
    "F#": (6, 1, 11, 3, 10, 8, 5, 7, 9, 0, 2, 4),
    "G": (7, 2, 0, 4, 11, 9, 6, 8, 10, 1, 3, 5),
    "G#": (8, 3, 1, 5, 0, 10, 7, 9, 11, 2, 4, 6),
    "A": (9, 4, 2, 6, 1, 11, 8, 10, 0, 3, 5, 7),
    "A#": (10, 5, 3, 7, 2, 0, 9, 11, 1, 4, 6, 8),
    "B": (11, 6, 4, 8, 3, 1, 10, 0, 2, 5, 7, 9),
    # Minor keys
    "Cm": (0, 5, 7, 2, 9, 4, 11, 1, 3, 6, 8, 10),
    "C#m": (1, 6, 8, 3, 10, 5, 0, 2, 4, 7, 9, 11),
    "Dm": (2, 7, 9, 4, 11, 6, 3, 5, 8, 10, 0, 1),
    "D#m": (3, 8, 10, 5, 0, 7, 4, 6, 9, 11, 1, 2),
    "Em": (4, 9, 11, 6, 1, 8, 5, 7, 10, 0, 2, 3),
    "Fm": (5, 10, 0, 7, 2, 9, 6, 8, 11, 1, 3, 4),
    "F#m": (6, 11, 1, 8, 3, 10, 7, 9, 0, 2, 4, 5),
    "Gm": (7, 0, 2, 9, 4, 11, 8, 10, 1, 3, 5, 6),
    "G#m": (8, 1, 3, 10, 5, 0, 9, 11, 2, 4, 6, 7),
    "Am": (9, 2, 4, 11, 6, 1, 10, 0, 3, 5, 7, 8),
    "A#m": (10, 3, 5, 0, 7, 2, 11, 1, 4, 6, 8, 9),
    "Bm": (11, 4, 6, 1, 8, 3, 0, 2, 5, 7, 9, 10),
}


def validate_root_order(order: Iterable[int]) -> RootOrder:
    """Check that ``order`` is a permutation of 0-11 and return it as a tuple."""
    order = tuple(order)
    if sorted(order) != list(CHROMATIC_ORDER):
        raise ValueError(f"Root order must be a permutation of 0-11, got {order}")
    return order


class RootPriorityTable:
    """Immutable key name -> root order mapping.

    A single instance is built at import time (``DEFAULT_ROOT_TABLE``) and
    shared read-only by every detector, but detectors accept any table so
    tests can inject their own.
    """

    def __init__(self, priorities: Mapping[str, Iterable[int]] = ROOT_PRIORITIES):
        self._orders: Mapping[str, RootOrder] = MappingProxyType(
            {name: validate_root_order(order) for name, order in priorities.items()}
        )

    def __contains__(self, key_name: object) -> bool:
        return key_name in self._orders

    def __len__(self) -> int:
        return len(self._orders)

    def keys(self) -> List[str]:
        """Recognized key names in declaration order."""
        return list(self._orders)

    def order(self, key_name: str) -> RootOrder:
        """
        Get the root priority order for a key.

        Args:
            key_name: Key name such as "C", "F#" or "Am"

        Returns:
            Tuple of 12 pitch classes, highest priority first

        Raises:
            UnknownKeyError: If the key is not in the table
        """
        try:
            return self._orders[key_name]
        except KeyError:
            raise UnknownKeyError(key_name) from None

    @property
    def default_order(self) -> RootOrder:
        return self.order(DEFAULT_KEY)

    @staticmethod
    def chromatic() -> RootOrder:
        """Ascending chromatic order, 0-11."""
        return CHROMATIC_ORDER


DEFAULT_ROOT_TABLE = RootPriorityTable()
