"""SwiftRead: RSVP speed reader with pivot-aligned word display."""

from swiftread.pivot import PivotDecomposition, PivotMode, decompose, decompose_center
from swiftread.playback import (
    InvalidRateError,
    PlaybackController,
    PlaybackState,
    ReaderSnapshot,
    clamp_rate,
    delay_ms,
)
from swiftread.session import ReadingSession
from swiftread.tokenizer import tokenize

__version__ = "1.0.0"

__all__ = [
    "InvalidRateError",
    "PivotDecomposition",
    "PivotMode",
    "PlaybackController",
    "PlaybackState",
    "ReaderSnapshot",
    "ReadingSession",
    "clamp_rate",
    "decompose",
    "decompose_center",
    "delay_ms",
    "tokenize",
]
