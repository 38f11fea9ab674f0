from __future__ import annotations

import time
from collections.abc import Callable
from typing import Protocol


class Clock(Protocol):
    """Monotonic clock abstraction.

    Throttling and other timed logic depend on this interface rather than
    calling real time directly.
    """

    def now(self) -> float:
        """Return monotonic seconds."""


class RealClock:
    """Production clock backed by time.monotonic()."""

    def now(self) -> float:
        return time.monotonic()


class FrameScheduler:
    """Queue of callbacks to run on the next display refresh.

    The host loop calls :meth:`run_frame` once per rendered frame.  Callbacks
    requested while a frame is running are deferred to the following frame,
    so a callback that re-arms itself runs exactly once per frame.
    """

    def __init__(self) -> None:
        self._callbacks: list[Callable[[], None]] = []

    @property
    def pending_count(self) -> int:
        return len(self._callbacks)

    def request_animation_frame(self, callback: Callable[[], None]) -> None:
        self._callbacks.append(callback)

    def run_frame(self) -> int:
        callbacks, self._callbacks = self._callbacks, []
        for callback in callbacks:
            callback()
        return len(callbacks)
