"""Throttled haptic pulses.

The platform capability is joystick/gamepad rumble.  It is probed once at
startup; when nothing can rumble the feedback object degrades to a silent
no-op rather than raising.
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from typing import Protocol

import pygame

from .clock import Clock

logger = logging.getLogger(__name__)

VIBRATION_DURATION_MS = 300


class Vibrator(Protocol):
    @property
    def supported(self) -> bool: ...

    def vibrate(self, duration_ms: int) -> None: ...


class NullVibrator:
    @property
    def supported(self) -> bool:
        return False

    def vibrate(self, duration_ms: int) -> None:
        _ = duration_ms


class JoystickRumble:
    """Rumbles every connected controller that accepted a probe pulse."""

    def __init__(self, joysticks: list[pygame.joystick.Joystick]) -> None:
        self._joysticks = list(joysticks)

    @property
    def supported(self) -> bool:
        return bool(self._joysticks)

    def vibrate(self, duration_ms: int) -> None:
        for js in list(self._joysticks):
            try:
                js.rumble(1.0, 1.0, int(duration_ms))
            except pygame.error:
                logger.warning("Rumble failed on %s; disabling it", js.get_name(), exc_info=True)
                self._joysticks.remove(js)


def _iter_connected_joysticks() -> list[pygame.joystick.Joystick]:
    joysticks: list[pygame.joystick.Joystick] = []
    try:
        if not pygame.joystick.get_init():
            pygame.joystick.init()
        count = int(pygame.joystick.get_count())
    except pygame.error:
        return joysticks
    for idx in range(count):
        try:
            js = pygame.joystick.Joystick(idx)
            if not js.get_init():
                js.init()
            joysticks.append(js)
        except pygame.error:
            continue
    return joysticks


def _accepts_rumble(js: pygame.joystick.Joystick) -> bool:
    rumble = getattr(js, "rumble", None)
    if not callable(rumble):
        return False
    try:
        # A zero-strength pulse reports support without being felt.
        return bool(rumble(0.0, 0.0, 1))
    except pygame.error:
        return False


def probe_vibrator(*, disabled: bool = False) -> Vibrator:
    if disabled:
        logger.info("Vibration disabled by configuration")
        return NullVibrator()
    capable = [js for js in _iter_connected_joysticks() if _accepts_rumble(js)]
    if not capable:
        logger.info("Vibration not supported")
        return NullVibrator()
    logger.info("Vibration supported (%d device(s))", len(capable))
    return JoystickRumble(capable)


class Throttle:
    """Leading-edge call plus at most one trailing call per cooldown window.

    State is explicit: the time of the last invocation and the deadline of the
    pending trailing call, if any.  The trailing call runs from :meth:`poll`,
    which the host calls every frame.
    """

    def __init__(self, *, clock: Clock, wait_s: float, fn: Callable[[], None]) -> None:
        if wait_s < 0:
            raise ValueError("wait_s must be >= 0")
        self._clock = clock
        self._wait_s = float(wait_s)
        self._fn = fn
        self._last_fire_s: float | None = None
        self._pending_at_s: float | None = None

    @property
    def last_fire_s(self) -> float | None:
        return self._last_fire_s

    @property
    def pending_at_s(self) -> float | None:
        return self._pending_at_s

    def attempt(self) -> bool:
        """Invoke now if the window has elapsed; otherwise schedule a trailing call.

        Returns True when the call ran immediately.
        """

        now = self._clock.now()
        if self._last_fire_s is None or now - self._last_fire_s >= self._wait_s:
            self._fire(now)
            return True
        # Supersedes any trailing call already scheduled.
        self._pending_at_s = self._last_fire_s + self._wait_s
        return False

    def poll(self) -> bool:
        if self._pending_at_s is None:
            return False
        now = self._clock.now()
        if now < self._pending_at_s:
            return False
        self._fire(now)
        return True

    def cancel(self) -> None:
        self._pending_at_s = None

    def _fire(self, now: float) -> None:
        self._last_fire_s = now
        self._pending_at_s = None
        self._fn()


class HapticFeedback:
    def __init__(
        self,
        vibrator: Vibrator,
        *,
        clock: Clock,
        duration_ms: int = VIBRATION_DURATION_MS,
    ) -> None:
        self._vibrator = vibrator
        self._duration_ms = int(duration_ms)
        self._throttle: Throttle | None = None
        if vibrator.supported:
            self._throttle = Throttle(clock=clock, wait_s=self._duration_ms / 1000.0, fn=self._pulse)

    @property
    def supported(self) -> bool:
        return self._throttle is not None

    def trigger(self) -> None:
        if self._throttle is None:
            return
        self._throttle.attempt()

    def poll(self) -> None:
        if self._throttle is None:
            return
        self._throttle.poll()

    def _pulse(self) -> None:
        self._vibrator.vibrate(self._duration_ms)
