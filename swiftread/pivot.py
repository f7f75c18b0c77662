"""Fixation-point (pivot) decomposition of display units.

A renderer keeps the pivot character in a fixed screen column by
right-aligning ``left`` and left-aligning ``right`` around it, so the eye
does not have to move between words of different lengths.
"""

from __future__ import annotations

import enum
from typing import Dict, NamedTuple, Union


class PivotMode(str, enum.Enum):
    HEURISTIC = "heuristic"
    CENTER = "center"

    @classmethod
    def parse(cls, value: Union["PivotMode", str]) -> "PivotMode":
        if isinstance(value, cls):
            return value
        try:
            return cls(str(value).strip().lower())
        except ValueError:
            names = ", ".join(m.value for m in cls)
            raise ValueError(f"Unknown pivot mode: {value!r} (expected one of: {names})") from None


class PivotDecomposition(NamedTuple):
    left: str
    pivot: str
    right: str

    @property
    def index(self) -> int:
        return len(self.left)

    def to_dict(self) -> Dict[str, str]:
        return {"left": self.left, "pivot": self.pivot, "right": self.right}


EMPTY = PivotDecomposition("", "", "")


def center_index(length: int) -> int:
    if length <= 0:
        return 0
    return (length - 1) // 2


def pivot_index(length: int) -> int:
    """Optimal recognition point for a unit of ``length`` characters."""
    if length <= 0:
        return 0
    if length == 1:
        idx = 0
    elif length <= 5:
        idx = 1
    elif length <= 9:
        idx = 2
    elif length <= 13:
        idx = 3
    else:
        idx = 4

    if idx >= length:
        idx = center_index(length)
    return idx


def _split(unit: str, idx: int) -> PivotDecomposition:
    return PivotDecomposition(unit[:idx], unit[idx], unit[idx + 1:])


def decompose(unit: str, mode: Union[PivotMode, str] = PivotMode.HEURISTIC) -> PivotDecomposition:
    if not unit:
        return EMPTY
    if PivotMode.parse(mode) is PivotMode.CENTER:
        return _split(unit, center_index(len(unit)))
    return _split(unit, pivot_index(len(unit)))


def decompose_center(unit: str) -> PivotDecomposition:
    return decompose(unit, PivotMode.CENTER)
