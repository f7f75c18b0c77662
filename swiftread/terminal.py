"""Terminal renderer for a :class:`PlaybackController` running on asyncio."""

from __future__ import annotations

import asyncio
import logging
import os
import sys
from typing import Optional

from rich.console import Console, Group
from rich.live import Live
from rich.text import Text

from swiftread.config import MAX_WPM, MIN_WPM
from swiftread.pivot import PivotDecomposition, PivotMode
from swiftread.playback import PlaybackController, PlaybackState, ReaderSnapshot, clamp_rate, time_remaining

logger = logging.getLogger(__name__)

RATE_STEP = 25
SKIP_UNITS = 10
HELP = "[space] play/pause  [h/l] -/+10  [+/-] speed  [m] pivot mode  [r] reset  [q] quit"


def render_unit(decomp: PivotDecomposition, width: int) -> Text:
    """Lay out one unit so the pivot lands on column ``width // 2``."""
    column = max(width // 2, 1)
    left = decomp.left[-column:]
    text = Text(no_wrap=True, overflow="crop")
    text.append(" " * (column - len(left)))
    text.append(left)
    text.append(decomp.pivot or " ", style="bold red")
    text.append(decomp.right)
    return text


def render_status(snap: ReaderSnapshot) -> Text:
    shown = snap.position + 1 if snap.total_units else 0
    return Text(
        f"{snap.state.value.upper():<7} {shown}/{snap.total_units}  "
        f"{snap.rate} wpm  {snap.pivot_mode.value}  ~{time_remaining(snap):.0f}s left",
        style="dim",
    )


class TerminalReader:
    def __init__(
        self,
        controller: PlaybackController,
        console: Optional[Console] = None,
        interactive: Optional[bool] = None,
    ) -> None:
        self.controller = controller
        self.console = console or Console()
        if interactive is None:
            interactive = os.name == "posix" and sys.stdin.isatty()
        self.interactive = interactive
        self._done: Optional[asyncio.Event] = None

    def render(self, snap: ReaderSnapshot) -> Group:
        width = self.console.size.width
        parts = [Text(""), render_unit(snap.current_decomposition, width), Text(""), render_status(snap)]
        if self.interactive:
            parts.append(Text(HELP, style="dim"))
        return Group(*parts)

    def handle_key(self, key: str) -> bool:
        """Apply one keypress. Returns False when the reader should stop."""
        ctl = self.controller
        if key == "q":
            return False
        if key == " ":
            ctl.toggle()
        elif key == "r":
            ctl.reset()
        elif key == "h":
            ctl.skip(-SKIP_UNITS)
        elif key == "l":
            ctl.skip(SKIP_UNITS)
        elif key in ("+", "="):
            ctl.set_rate(clamp_rate(ctl.rate + RATE_STEP, MIN_WPM, MAX_WPM))
        elif key in ("-", "_"):
            ctl.set_rate(clamp_rate(ctl.rate - RATE_STEP, MIN_WPM, MAX_WPM))
        elif key == "m":
            mode = PivotMode.CENTER if ctl.pivot_mode is PivotMode.HEURISTIC else PivotMode.HEURISTIC
            ctl.set_pivot_mode(mode)
        return True

    def _on_snapshot(self, live: Live, snap: ReaderSnapshot) -> None:
        live.update(self.render(snap), refresh=True)
        if not self.interactive and snap.state is PlaybackState.IDLE and self._done is not None:
            self._done.set()

    def _on_stdin(self, fd: int) -> None:
        key = os.read(fd, 1).decode("utf-8", errors="ignore")
        logger.debug("Key %r", key)
        if key and not self.handle_key(key) and self._done is not None:
            self._done.set()

    async def run(self) -> None:
        ctl = self.controller
        if not ctl.total_units:
            self.console.print("[yellow]Nothing to read.[/yellow]")
            return

        loop = asyncio.get_running_loop()
        self._done = asyncio.Event()

        with Live(self.render(ctl.snapshot()), console=self.console, auto_refresh=False, transient=False) as live:
            unsubscribe = ctl.subscribe(lambda snap: self._on_snapshot(live, snap))
            try:
                if self.interactive:
                    await self._run_interactive(loop)
                else:
                    ctl.start()
                    await self._done.wait()
            finally:
                unsubscribe()
                ctl.close()

    async def _run_interactive(self, loop: asyncio.AbstractEventLoop) -> None:
        import termios
        import tty

        fd = sys.stdin.fileno()
        saved = termios.tcgetattr(fd)
        tty.setcbreak(fd)
        loop.add_reader(fd, self._on_stdin, fd)
        try:
            self.controller.start()
            await self._done.wait()
        finally:
            loop.remove_reader(fd)
            termios.tcsetattr(fd, termios.TCSADRAIN, saved)
