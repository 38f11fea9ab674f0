from __future__ import annotations

from dataclasses import dataclass, field

import pytest

from sandpaper_letters.haptics import (
    VIBRATION_DURATION_MS,
    HapticFeedback,
    NullVibrator,
    Throttle,
    probe_vibrator,
)


@dataclass
class FakeClock:
    t: float = 0.0

    def now(self) -> float:
        return self.t

    def advance(self, dt: float) -> None:
        self.t += float(dt)


@dataclass
class FakeVibrator:
    calls: list[int] = field(default_factory=list)

    @property
    def supported(self) -> bool:
        return True

    def vibrate(self, duration_ms: int) -> None:
        self.calls.append(duration_ms)


def test_throttle_fires_leading_edge_then_collapses_repeats() -> None:
    clock = FakeClock()
    fired: list[float] = []
    throttle = Throttle(clock=clock, wait_s=0.3, fn=lambda: fired.append(clock.now()))

    assert throttle.attempt() is True
    clock.advance(0.05)
    assert throttle.attempt() is False
    clock.advance(0.05)
    assert throttle.attempt() is False

    assert fired == [0.0]
    assert throttle.pending_at_s == pytest.approx(0.3)


def test_throttle_trailing_call_runs_once_at_cooldown_expiry() -> None:
    clock = FakeClock()
    fired: list[float] = []
    throttle = Throttle(clock=clock, wait_s=0.3, fn=lambda: fired.append(clock.now()))

    throttle.attempt()
    clock.advance(0.1)
    throttle.attempt()
    throttle.attempt()

    clock.advance(0.1)
    assert throttle.poll() is False
    clock.advance(0.1)
    assert throttle.poll() is True
    assert throttle.poll() is False

    assert fired == [pytest.approx(0.0), pytest.approx(0.3)]
    assert throttle.pending_at_s is None
    assert throttle.last_fire_s == pytest.approx(0.3)


def test_throttle_fires_immediately_after_window_elapses() -> None:
    clock = FakeClock()
    count = 0

    def bump() -> None:
        nonlocal count
        count += 1

    throttle = Throttle(clock=clock, wait_s=0.3, fn=bump)
    throttle.attempt()
    clock.advance(0.3)
    assert throttle.attempt() is True
    assert count == 2


def test_throttle_cancel_drops_trailing_call() -> None:
    clock = FakeClock()
    count = 0

    def bump() -> None:
        nonlocal count
        count += 1

    throttle = Throttle(clock=clock, wait_s=0.3, fn=bump)
    throttle.attempt()
    throttle.attempt()
    throttle.cancel()
    clock.advance(1.0)
    assert throttle.poll() is False
    assert count == 1


def test_throttle_rejects_negative_wait() -> None:
    with pytest.raises(ValueError):
        Throttle(clock=FakeClock(), wait_s=-1.0, fn=lambda: None)


def test_haptic_feedback_pulses_fixed_duration() -> None:
    clock = FakeClock()
    vibrator = FakeVibrator()
    haptics = HapticFeedback(vibrator, clock=clock)

    assert haptics.supported
    for _ in range(5):
        haptics.trigger()
        clock.advance(0.016)
    assert vibrator.calls == [VIBRATION_DURATION_MS]

    clock.advance(0.3)
    haptics.poll()
    assert vibrator.calls == [VIBRATION_DURATION_MS, VIBRATION_DURATION_MS]


def test_haptic_feedback_without_support_is_silent() -> None:
    haptics = HapticFeedback(NullVibrator(), clock=FakeClock())
    assert not haptics.supported
    haptics.trigger()
    haptics.poll()


def test_probe_respects_disable_flag() -> None:
    vibrator = probe_vibrator(disabled=True)
    assert not vibrator.supported
    vibrator.vibrate(300)
