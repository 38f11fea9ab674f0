from __future__ import annotations

from dataclasses import dataclass, field

from sandpaper_letters.clock import FrameScheduler
from sandpaper_letters.events import EventKind, MouseEvent
from sandpaper_letters.glyph_layout import GlyphPlacement, Orientation
from sandpaper_letters.haptics import HapticFeedback
from sandpaper_letters.layers import Canvas, Point2D
from sandpaper_letters.letters import SeededRng, pick_letter
from sandpaper_letters.tracing_core import CanvasSet, Ready, Session, StateKind


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


def _canvas(w: int, h: int) -> Canvas:
    return Canvas(client_width=w, client_height=h)


def test_headless_sim_landscape_press_release_cycle() -> None:
    seed = 2024
    mirror = SeededRng(seed)
    expected_letter = pick_letter(mirror)

    clock = FakeClock()
    scheduler = FrameScheduler()
    session = Session(
        scheduler=scheduler,
        haptics=HapticFeedback(FakeVibrator(), clock=clock),
        rng=SeededRng(seed),
    )
    canvases = CanvasSet(
        guide=_canvas(400, 300),
        drawing=_canvas(400, 300),
        ui=_canvas(400, 300),
        window=_canvas(400, 300),
    )
    session.initialise(canvases)

    ready = session.state
    assert isinstance(ready, Ready)
    assert ready.layout.orientation is Orientation.LANDSCAPE
    assert ready.layout.font_size == 180
    assert ready.layout.placements == (
        GlyphPlacement(expected_letter.pair, Point2D(200.0, 150.0)),
    )

    # Input arrives through the canvas listeners, as the host delivers it.
    canvases.ui.dispatch_event(EventKind.MOUSE_DOWN, MouseEvent(200, 150))
    assert session.state_kind is StateKind.MOUSE_STROKE
    clock.advance(1 / 60)
    canvases.ui.dispatch_event(EventKind.MOUSE_UP, MouseEvent(250, 150))

    assert session.state_kind is StateKind.CLEARING
    (segment,) = session.segments()
    assert segment.start == segment.end == Point2D(200.0, 150.0)

    scheduler.run_frame()

    again = session.state
    assert isinstance(again, Ready)
    assert again.letter == expected_letter
    assert again.layout == ready.layout
    assert scheduler.pending_count == 0


def test_headless_sim_scripted_trace_over_several_frames() -> None:
    clock = FakeClock()
    vibrator = FakeVibrator()
    scheduler = FrameScheduler()
    session = Session(
        scheduler=scheduler,
        haptics=HapticFeedback(vibrator, clock=clock),
        rng=SeededRng(5),
    )
    canvases = CanvasSet(
        guide=_canvas(360, 640),
        drawing=_canvas(360, 640),
        ui=_canvas(360, 640),
        window=_canvas(360, 640),
    )
    session.initialise(canvases)
    ready = session.state
    assert isinstance(ready, Ready)
    assert ready.layout.orientation is Orientation.PORTRAIT

    # A horizontal sweep across the whole surface through the capital letter.
    y = ready.layout.placements[0].center.y
    canvases.ui.dispatch_event(EventKind.MOUSE_DOWN, MouseEvent(2, y))
    for x in range(10, 360, 10):
        canvases.ui.dispatch_event(EventKind.MOUSE_MOVE, MouseEvent(x, y))
        clock.advance(1 / 60)
        scheduler.run_frame()
    canvases.ui.dispatch_event(EventKind.MOUSE_UP, MouseEvent(358, y))
    scheduler.run_frame()

    segments = session.segments()
    assert len(segments) == 1 + len(range(10, 360, 10))
    assert not segments[0].on_glyph
    assert any(s.on_glyph for s in segments)
    assert not segments[-1].on_glyph
    # Contiguous strokes: each segment starts where the previous one ended.
    for prev, cur in zip(segments, segments[1:]):
        assert cur.start == prev.end
    # The 300 ms throttle keeps the pulse count well below the on-glyph count.
    assert 1 <= len(vibrator.calls) <= sum(1 for s in segments if s.on_glyph)
    assert session.state_kind is StateKind.READY
