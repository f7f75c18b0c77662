from __future__ import annotations

import logging
from typing import Any, Optional, Protocol, Union

from swiftread.config import RECORD_MIN_UNITS
from swiftread.pivot import PivotMode
from swiftread.playback import PlaybackController, PlaybackState, ReaderSnapshot

logger = logging.getLogger(__name__)


class UsageRecorder(Protocol):
    def record(self, word_count: int, rate: Union[int, float]) -> Any: ...


class ReadingSession:
    """One reader: a controller plus the collaborators fed by it.

    The usage recorder is told about a text the first time it starts
    playing, provided it is longer than ``RECORD_MIN_UNITS`` units.
    """

    def __init__(
        self,
        controller: Optional[PlaybackController] = None,
        recorder: Optional[UsageRecorder] = None,
    ) -> None:
        self.controller = controller if controller is not None else PlaybackController()
        self.recorder = recorder
        self.source = ""
        self._recorded = False

    def load_text(self, text: str, source: str = "manual") -> ReaderSnapshot:
        self.controller.set_source_text(text)
        self.source = source
        self._recorded = False
        logger.info("Loaded %d units from %s", self.controller.total_units, source)
        return self.controller.snapshot()

    def clear(self) -> ReaderSnapshot:
        return self.load_text("", source="")

    def toggle(self) -> ReaderSnapshot:
        self.controller.toggle()
        if self.controller.state is PlaybackState.PLAYING:
            self._record_once()
        return self.controller.snapshot()

    def set_rate(self, wpm: Union[int, float]) -> ReaderSnapshot:
        self.controller.set_rate(wpm)
        return self.controller.snapshot()

    def set_pivot_mode(self, mode: Union[PivotMode, str]) -> ReaderSnapshot:
        self.controller.set_pivot_mode(mode)
        return self.controller.snapshot()

    def seek(self, index: int) -> ReaderSnapshot:
        self.controller.seek(index)
        return self.controller.snapshot()

    def reset(self) -> ReaderSnapshot:
        self.controller.reset()
        return self.controller.snapshot()

    def close(self) -> None:
        self.controller.close()

    def _record_once(self) -> None:
        if self._recorded or self.recorder is None:
            return
        count = self.controller.total_units
        if count <= RECORD_MIN_UNITS:
            return
        self._recorded = True
        try:
            self.recorder.record(count, self.controller.rate)
        except Exception:
            logger.exception("Could not record reading session")
