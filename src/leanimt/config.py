"""
Tree Configuration

LeanIMTConfig holds the construction-time parameters of a tree.
The hash function is passed separately since it is the only required input.
"""

from dataclasses import dataclass
from typing import Hashable


DEFAULT_TOMBSTONE = "0"


@dataclass(frozen=True)
class LeanIMTConfig:
    """
    Construction parameters for LeanIMT.

    All parameters are immutable.
    """

    tombstone: Hashable = DEFAULT_TOMBSTONE
    """Reserved leaf value written into removed slots. Cannot be inserted."""

    def __post_init__(self):
        # None is the proof marker for a level without a sibling
        if self.tombstone is None:
            raise ValueError("tombstone cannot be None")

    def is_tombstone(self, value) -> bool:
        return value == self.tombstone
