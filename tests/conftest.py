"""Shared fixtures: a hand-cranked scheduler, a temp usage log, a Flask client."""

from __future__ import annotations

import functools
from typing import Any, Callable, List

import pytest

from swiftread.analytics import UsageLog
from swiftread.config import Settings
from swiftread.playback import PlaybackController
from swiftread.web import create_app

ADMIN_PASSWORD = "correct horse"


class ManualHandle:
    def __init__(self, when: float, callback: Callable[[], Any]) -> None:
        self.when = when
        self.callback = callback
        self.cancelled = False
        self.fired = False

    def cancel(self) -> None:
        self.cancelled = True


class ManualScheduler:
    """Stands in for an asyncio loop; time only moves when the test says so."""

    def __init__(self) -> None:
        self.now = 0.0
        self.handles: List[ManualHandle] = []

    def call_later(self, delay: float, callback: Callable[..., Any], *args: Any) -> ManualHandle:
        handle = ManualHandle(self.now + delay, functools.partial(callback, *args))
        self.handles.append(handle)
        return handle

    @property
    def pending(self) -> List[ManualHandle]:
        return [h for h in self.handles if not h.cancelled and not h.fired]

    def advance(self, seconds: float) -> None:
        target = self.now + seconds
        while True:
            due = [h for h in self.pending if h.when <= target + 1e-9]
            if not due:
                break
            handle = min(due, key=lambda h: h.when)
            self.now = handle.when
            handle.fired = True
            handle.callback()
        self.now = target

    def force(self, handle: ManualHandle) -> None:
        """Deliver a callback even if it was cancelled."""
        handle.fired = True
        handle.callback()


@pytest.fixture
def scheduler() -> ManualScheduler:
    return ManualScheduler()


@pytest.fixture
def make_controller(scheduler):
    def _make(units=("one", "two", "three"), **kwargs: Any) -> PlaybackController:
        kwargs.setdefault("rate", 300)
        return PlaybackController(list(units), scheduler=scheduler, **kwargs)

    return _make


@pytest.fixture
def usage_log(tmp_path) -> UsageLog:
    return UsageLog(tmp_path / "analytics.json")


@pytest.fixture
def settings(tmp_path) -> Settings:
    return Settings(
        analytics_path=tmp_path / "analytics.json",
        admin_password=ADMIN_PASSWORD,
        secret_key="test-secret",
        default_wpm=300,
        allow_private_fetch=False,
    )


@pytest.fixture
def app(settings, usage_log):
    app = create_app(settings, usage_log=usage_log)
    app.config["TESTING"] = True
    return app


@pytest.fixture
def client(app):
    return app.test_client()
