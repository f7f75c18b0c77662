"""Playback controller: position, rate and the self-rescheduling tick loop.

The controller never blocks. Each advancement is a cancellable deferred
callback obtained from a scheduler (anything with an asyncio-style
``call_later(delay, callback)`` returning a handle with ``cancel()``); the
running asyncio loop is used when no scheduler is given. Only one tick is
outstanding at a time, and every tick carries the generation it was
scheduled in so that a tick delivered after a cancel is dropped.
"""

from __future__ import annotations

import asyncio
import enum
import functools
import logging
import math
import numbers
from dataclasses import dataclass
from typing import Any, Callable, Dict, List, Optional, Protocol, Sequence, Tuple, Union

from swiftread.config import DEFAULT_WPM, MAX_WPM, MIN_WPM
from swiftread.pivot import PivotDecomposition, PivotMode, decompose
from swiftread.tokenizer import tokenize

logger = logging.getLogger(__name__)


class PlaybackState(str, enum.Enum):
    IDLE = "idle"
    PLAYING = "playing"
    PAUSED = "paused"


class InvalidRateError(ValueError):
    pass


class TimerHandle(Protocol):
    def cancel(self) -> Any: ...


class Scheduler(Protocol):
    def call_later(self, delay: float, callback: Callable[..., Any], *args: Any) -> TimerHandle: ...


def _validate_rate(wpm: Any) -> Union[int, float]:
    if isinstance(wpm, bool) or not isinstance(wpm, numbers.Real):
        raise InvalidRateError(f"Rate must be a number, got {wpm!r}")
    if not math.isfinite(wpm) or wpm <= 0:
        raise InvalidRateError(f"Rate must be a positive finite number, got {wpm!r}")
    return wpm


def _validate_units(units: Sequence[str]) -> Tuple[str, ...]:
    units = tuple(units)
    for unit in units:
        if not isinstance(unit, str) or not unit or any(ch.isspace() for ch in unit):
            raise ValueError(f"Display units must be non-empty and free of whitespace, got {unit!r}")
    return units


def delay_ms(wpm: Union[int, float]) -> float:
    """Milliseconds between advancements at ``wpm`` words per minute."""
    return 60000 / _validate_rate(wpm)


def clamp_rate(value: Any, lo: int = MIN_WPM, hi: int = MAX_WPM) -> int:
    """Coerce user input to an integer rate inside ``[lo, hi]``."""
    try:
        n = float(value)
    except (TypeError, ValueError):
        raise InvalidRateError(f"Rate must be a number, got {value!r}") from None
    if not math.isfinite(n):
        raise InvalidRateError(f"Rate must be finite, got {value!r}")
    return int(round(max(lo, min(hi, n))))


@dataclass(frozen=True)
class ReaderSnapshot:
    state: PlaybackState
    position: int
    total_units: int
    current_unit: str
    current_decomposition: PivotDecomposition
    rate: Union[int, float]
    pivot_mode: PivotMode

    @property
    def progress(self) -> float:
        if not self.total_units:
            return 0.0
        return (self.position + 1) / self.total_units

    def to_dict(self) -> Dict[str, Any]:
        return {
            "state": self.state.value,
            "position": self.position,
            "total_units": self.total_units,
            "current_unit": self.current_unit,
            "current_decomposition": self.current_decomposition.to_dict(),
            "rate": self.rate,
            "pivot_mode": self.pivot_mode.value,
            "progress": self.progress,
        }


def time_remaining(snapshot: ReaderSnapshot) -> float:
    """Seconds left to reach the last unit at the snapshot's rate."""
    if not snapshot.total_units:
        return 0.0
    remaining = snapshot.total_units - snapshot.position - 1
    return remaining * delay_ms(snapshot.rate) / 1000.0


Listener = Callable[[ReaderSnapshot], None]


class PlaybackController:
    def __init__(
        self,
        units: Sequence[str] = (),
        rate: Union[int, float] = DEFAULT_WPM,
        pivot_mode: Union[PivotMode, str] = PivotMode.HEURISTIC,
        scheduler: Optional[Scheduler] = None,
    ) -> None:
        self._units: Tuple[str, ...] = _validate_units(units)
        self._rate = _validate_rate(rate)
        self._pivot_mode = PivotMode.parse(pivot_mode)
        self._scheduler = scheduler
        self._state = PlaybackState.IDLE
        self._position = 0
        self._handle: Optional[TimerHandle] = None
        self._generation = 0
        self._listeners: List[Listener] = []

    @classmethod
    def from_text(cls, text: str, **kwargs: Any) -> "PlaybackController":
        return cls(tokenize(text), **kwargs)

    # -------------------------------
    # Read-only view
    # -------------------------------
    @property
    def state(self) -> PlaybackState:
        return self._state

    @property
    def position(self) -> int:
        return self._position

    @property
    def rate(self) -> Union[int, float]:
        return self._rate

    @property
    def pivot_mode(self) -> PivotMode:
        return self._pivot_mode

    @property
    def units(self) -> Tuple[str, ...]:
        return self._units

    @property
    def total_units(self) -> int:
        return len(self._units)

    @property
    def current_unit(self) -> str:
        if not self._units:
            return ""
        return self._units[self._position]

    @property
    def has_pending_tick(self) -> bool:
        return self._handle is not None

    def snapshot(self) -> ReaderSnapshot:
        unit = self.current_unit
        return ReaderSnapshot(
            state=self._state,
            position=self._position,
            total_units=len(self._units),
            current_unit=unit,
            current_decomposition=decompose(unit, self._pivot_mode),
            rate=self._rate,
            pivot_mode=self._pivot_mode,
        )

    def subscribe(self, listener: Listener) -> Callable[[], None]:
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    # -------------------------------
    # Inputs
    # -------------------------------
    def set_source_text(self, text: str) -> None:
        self.set_units(tokenize(text))

    def set_units(self, units: Sequence[str]) -> None:
        units = _validate_units(units)
        self._cancel_timer()
        self._units = units
        self._position = 0
        self._state = PlaybackState.IDLE
        logger.debug("Loaded %d units", len(self._units))
        self._emit()

    def set_rate(self, wpm: Union[int, float]) -> None:
        # The pending tick keeps its delay; the new rate applies from the
        # next schedule onwards.
        self._rate = _validate_rate(wpm)
        self._emit()

    def set_pivot_mode(self, mode: Union[PivotMode, str]) -> None:
        self._pivot_mode = PivotMode.parse(mode)
        self._emit()

    def start(self) -> None:
        if not self._units or self._state is PlaybackState.PLAYING:
            return
        self._cancel_timer()
        # Scheduled before any state changes: raises RuntimeError outside a
        # running loop when no scheduler was given.
        self._schedule_next()
        if self._position >= len(self._units) - 1:
            self._position = 0
        self._state = PlaybackState.PLAYING
        logger.debug("Playing from %d at %s wpm", self._position, self._rate)
        self._emit()

    resume = start

    def pause(self) -> None:
        if self._state is not PlaybackState.PLAYING:
            return
        self._cancel_timer()
        self._state = PlaybackState.PAUSED
        logger.debug("Paused at %d", self._position)
        self._emit()

    def toggle(self) -> None:
        if self._state is PlaybackState.PLAYING:
            self.pause()
        else:
            self.start()

    def reset(self) -> None:
        self._cancel_timer()
        self._state = PlaybackState.IDLE
        self._position = 0
        self._emit()

    def seek(self, index: int) -> None:
        if self._units:
            self._position = max(0, min(int(index), len(self._units) - 1))
        else:
            self._position = 0
        self._emit()

    def skip(self, delta: int) -> None:
        self.seek(self._position + int(delta))

    def close(self) -> None:
        self._cancel_timer()
        if self._state is PlaybackState.PLAYING:
            self._state = PlaybackState.PAUSED
        self._listeners.clear()

    # -------------------------------
    # Tick loop
    # -------------------------------
    def _cancel_timer(self) -> None:
        self._generation += 1
        if self._handle is not None:
            self._handle.cancel()
            self._handle = None

    def _schedule_next(self) -> None:
        scheduler = self._scheduler if self._scheduler is not None else asyncio.get_running_loop()
        delay = delay_ms(self._rate) / 1000.0
        self._handle = scheduler.call_later(delay, functools.partial(self._tick, self._generation))

    def _tick(self, generation: int) -> None:
        if generation != self._generation or self._state is not PlaybackState.PLAYING:
            logger.debug("Dropped stale tick (generation %d, current %d)", generation, self._generation)
            return
        self._handle = None

        if self._position >= len(self._units) - 1:
            self._state = PlaybackState.IDLE
            self._position = 0
            logger.debug("Reached end of sequence")
        else:
            self._position += 1
            self._schedule_next()
        self._emit()

    def _emit(self) -> None:
        if not self._listeners:
            return
        snap = self.snapshot()
        for listener in list(self._listeners):
            listener(snap)
