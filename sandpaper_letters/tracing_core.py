"""Letter-tracing session: the input/render state machine.

States form a closed union (``Uninitialised | Ready | MouseStroke |
TouchStroke | Clearing``) of plain dataclasses carrying per-state data.
:class:`Session` owns the single live state and is the only dispatcher: each
input handler and each animation tick looks the state up at call time and
branches on its type, so a tick queued by a state that has since been replaced
acts on whatever is live now.

Cycle::

    Uninitialised -> Ready -> MouseStroke | TouchStroke -> Clearing -> Ready

Ready also re-enters itself on refresh (new letter) and on resize (same
letter, layers rebuilt at the new size).
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from enum import StrEnum
from typing import ClassVar, assert_never

from .clock import FrameScheduler
from .controls import RefreshButton
from .events import (
    EventKind,
    MouseButton,
    MouseEvent,
    ResizeEvent,
    TouchEvent,
    find_touch,
)
from .glyph_layout import GlyphLayout, layout_letter
from .haptics import HapticFeedback
from .layers import LINE_CAP_ROUND, Canvas, Colour, Layer, OffscreenMask, Point2D
from .letters import Letter, SeededRng, pick_letter

logger = logging.getLogger(__name__)

GUIDE_COLOUR: Colour = (0xAA, 0xAA, 0xAA)
MASK_COLOUR: Colour = (0, 0, 0)
PRIMARY_STROKE_COLOUR: Colour = (0, 0, 0)
WARNING_STROKE_COLOUR: Colour = (255, 0, 0)
STROKE_WIDTH_PX = 20


class StateKind(StrEnum):
    UNINITIALISED = "Uninitialised"
    READY = "Ready"
    MOUSE_STROKE = "MouseStroke"
    TOUCH_STROKE = "TouchStroke"
    CLEARING = "Clearing"


@dataclass(frozen=True, slots=True)
class CanvasSet:
    """The three stacked canvases plus the window that reports resizes."""

    guide: Canvas
    drawing: Canvas
    ui: Canvas
    window: Canvas


@dataclass(frozen=True, slots=True)
class LayerSet:
    guide: Layer
    drawing: Layer
    ui: Layer

    @classmethod
    def from_canvases(cls, canvases: CanvasSet) -> "LayerSet":
        return cls(guide=Layer(canvases.guide), drawing=Layer(canvases.drawing), ui=Layer(canvases.ui))


@dataclass(frozen=True, slots=True)
class StrokeSegment:
    start: Point2D
    end: Point2D
    on_glyph: bool
    colour: Colour


@dataclass(frozen=True, slots=True)
class Uninitialised:
    kind: ClassVar[StateKind] = StateKind.UNINITIALISED


@dataclass(frozen=True, slots=True)
class Ready:
    kind: ClassVar[StateKind] = StateKind.READY
    layers: LayerSet
    letter: Letter
    mask: OffscreenMask
    layout: GlyphLayout
    refresh_button: RefreshButton


@dataclass(slots=True)
class MouseStroke:
    kind: ClassVar[StateKind] = StateKind.MOUSE_STROKE
    layers: LayerSet
    letter: Letter
    mask: OffscreenMask
    last_position: Point2D
    position: Point2D


@dataclass(slots=True)
class TouchStroke:
    kind: ClassVar[StateKind] = StateKind.TOUCH_STROKE
    layers: LayerSet
    letter: Letter
    mask: OffscreenMask
    identifier: int
    last_position: Point2D
    position: Point2D


@dataclass(frozen=True, slots=True)
class Clearing:
    kind: ClassVar[StateKind] = StateKind.CLEARING
    layers: LayerSet
    letter: Letter


State = Uninitialised | Ready | MouseStroke | TouchStroke | Clearing


@dataclass(slots=True)
class _SessionStats:
    strokes_started: int = 0
    refreshes: int = 0
    segments: list[StrokeSegment] = field(default_factory=list)


class Session:
    """Public entry point for one tracing surface.

    Construct it, then call :meth:`initialise` with the host's canvases.
    Handlers may be called in any state; those that do not apply are no-ops.
    """

    def __init__(
        self,
        *,
        scheduler: FrameScheduler,
        haptics: HapticFeedback,
        rng: SeededRng | None = None,
    ) -> None:
        self._scheduler = scheduler
        self._haptics = haptics
        self._rng = rng if rng is not None else SeededRng()
        self._state: State = Uninitialised()
        self._canvases: CanvasSet | None = None
        self._frame_pending = False
        self._stats = _SessionStats()

    # -- Introspection -----------------------------------------------------
    @property
    def state(self) -> State:
        return self._state

    @property
    def state_kind(self) -> StateKind:
        return self._state.kind

    @property
    def frame_pending(self) -> bool:
        return self._frame_pending

    @property
    def strokes_started(self) -> int:
        return self._stats.strokes_started

    @property
    def refreshes(self) -> int:
        return self._stats.refreshes

    def segments(self) -> list[StrokeSegment]:
        """Segments painted by the current (or most recent) stroke."""

        return list(self._stats.segments)

    # -- Lifecycle ---------------------------------------------------------
    def initialise(self, canvases: CanvasSet) -> None:
        state = self._state
        if not isinstance(state, Uninitialised):
            logger.warning("Already initialised")
            return

        layers = LayerSet.from_canvases(canvases)
        target = canvases.ui
        target.add_event_listener(EventKind.MOUSE_DOWN, self.handle_mouse_down)
        target.add_event_listener(EventKind.MOUSE_MOVE, self.handle_mouse_move)
        target.add_event_listener(EventKind.MOUSE_UP, self.handle_mouse_up)
        target.add_event_listener(EventKind.TOUCH_START, self.handle_touch_start, passive=False)
        target.add_event_listener(EventKind.TOUCH_MOVE, self.handle_touch_move, passive=False)
        target.add_event_listener(EventKind.TOUCH_END, self.handle_touch_end)
        target.add_event_listener(EventKind.TOUCH_CANCEL, self.handle_touch_cancel)
        canvases.window.add_event_listener(EventKind.RESIZE, self.handle_resize)
        self._canvases = canvases

        self._enter_ready(layers, pick_letter(self._rng))

    def animate(self) -> None:
        """Run one tick now; Drawing states keep re-arming on the next frame."""

        self._tick()

    # -- Input handlers ----------------------------------------------------
    def handle_mouse_down(self, event: MouseEvent) -> None:
        state = self._state
        if isinstance(state, Ready):
            if event.button != MouseButton.PRIMARY:
                return
            point = state.layers.ui.get_position(event.client_x, event.client_y)
            if state.refresh_button.test_hit(point):
                self._refresh()
                return
            self._begin_stroke(
                MouseStroke(
                    layers=state.layers,
                    letter=state.letter,
                    mask=state.mask,
                    last_position=point,
                    position=point,
                )
            )
        elif isinstance(state, (Uninitialised, MouseStroke, TouchStroke, Clearing)):
            return
        else:
            assert_never(state)

    def handle_mouse_move(self, event: MouseEvent) -> None:
        state = self._state
        if isinstance(state, MouseStroke):
            state.position = state.layers.drawing.get_position(event.client_x, event.client_y)
        elif isinstance(state, (Uninitialised, Ready, TouchStroke, Clearing)):
            return
        else:
            assert_never(state)

    def handle_mouse_up(self, event: MouseEvent) -> None:
        state = self._state
        if isinstance(state, MouseStroke):
            if event.button != MouseButton.PRIMARY:
                return
            self._set_state(Clearing(layers=state.layers, letter=state.letter))
        elif isinstance(state, (Uninitialised, Ready, TouchStroke, Clearing)):
            return
        else:
            assert_never(state)

    def handle_touch_start(self, event: TouchEvent) -> None:
        state = self._state
        if isinstance(state, Ready):
            if len(event.touches) != 1:
                return
            event.prevent_default()
            touch = event.touches[0]
            point = state.layers.ui.get_position(touch.client_x, touch.client_y)
            if state.refresh_button.test_hit(point):
                self._refresh()
                return
            self._begin_stroke(
                TouchStroke(
                    layers=state.layers,
                    letter=state.letter,
                    mask=state.mask,
                    identifier=touch.identifier,
                    last_position=point,
                    position=point,
                )
            )
        elif isinstance(state, (TouchStroke, MouseStroke)):
            # Extra fingers must not scroll or zoom mid-stroke.
            event.prevent_default()
        elif isinstance(state, (Uninitialised, Clearing)):
            return
        else:
            assert_never(state)

    def handle_touch_move(self, event: TouchEvent) -> None:
        state = self._state
        if isinstance(state, TouchStroke):
            event.prevent_default()
            touch = find_touch(state.identifier, event.touches)
            if touch is None:
                return
            state.position = state.layers.drawing.get_position(touch.client_x, touch.client_y)
        elif isinstance(state, (Uninitialised, Ready, MouseStroke, Clearing)):
            return
        else:
            assert_never(state)

    def handle_touch_end(self, event: TouchEvent) -> None:
        self._finish_touch(event)

    def handle_touch_cancel(self, event: TouchEvent) -> None:
        self._finish_touch(event)

    def handle_resize(self, event: ResizeEvent | None = None) -> None:
        """Rebuild every layer at the canvases' new size, keeping the letter.

        Applies in every initialised state; an in-flight stroke is abandoned
        because its geometry belongs to the old size.
        """

        _ = event
        state = self._state
        if isinstance(state, Uninitialised):
            return
        if isinstance(state, (Ready, MouseStroke, TouchStroke, Clearing)):
            assert self._canvases is not None
            self._enter_ready(LayerSet.from_canvases(self._canvases), state.letter)
        else:
            assert_never(state)

    # -- Internals ---------------------------------------------------------
    def _finish_touch(self, event: TouchEvent) -> None:
        state = self._state
        if isinstance(state, TouchStroke):
            if find_touch(state.identifier, event.changed_touches) is None:
                return
            self._set_state(Clearing(layers=state.layers, letter=state.letter))
        elif isinstance(state, (Uninitialised, Ready, MouseStroke, Clearing)):
            return
        else:
            assert_never(state)

    def _begin_stroke(self, stroke: MouseStroke | TouchStroke) -> None:
        drawing = stroke.layers.drawing
        drawing.line_width = STROKE_WIDTH_PX
        drawing.line_cap = LINE_CAP_ROUND
        self._stats.strokes_started += 1
        self._stats.segments.clear()
        self._set_state(stroke)
        self.animate()

    def _refresh(self) -> None:
        assert self._canvases is not None
        self._stats.refreshes += 1
        letter = pick_letter(self._rng)
        logger.debug("Refresh requested; new letter %s", letter.pair)
        self._enter_ready(LayerSet.from_canvases(self._canvases), letter)

    def _enter_ready(self, layers: LayerSet, letter: Letter) -> None:
        guide = layers.guide
        layout = layout_letter(letter, guide.width, guide.height)

        guide.clear()
        layout.stamp(guide, colour=GUIDE_COLOUR)

        mask = OffscreenMask(layers.ui.width, layers.ui.height)
        mask.clear()
        layout.stamp(mask, colour=MASK_COLOUR)

        layers.ui.clear()
        button = RefreshButton.clear_of(mask.ink())
        button.render(layers.ui.context)

        self._set_state(
            Ready(layers=layers, letter=letter, mask=mask, layout=layout, refresh_button=button)
        )

    def _request_frame(self) -> None:
        if self._frame_pending:
            return
        self._frame_pending = True
        self._scheduler.request_animation_frame(self._on_frame)

    def _on_frame(self) -> None:
        self._frame_pending = False
        self._tick()

    def _tick(self) -> None:
        state = self._state
        if isinstance(state, (MouseStroke, TouchStroke)):
            self._request_frame()
            self._paint_segment(state)
        elif isinstance(state, Clearing):
            state.layers.drawing.clear()
            self._enter_ready(state.layers, state.letter)
        elif isinstance(state, (Uninitialised, Ready)):
            return
        else:
            assert_never(state)

    def _paint_segment(self, stroke: MouseStroke | TouchStroke) -> None:
        # Both ends are sampled so a fast jump off the letter is still caught.
        previous_miss = not stroke.mask.is_hit(stroke.last_position)
        miss = not stroke.mask.is_hit(stroke.position)
        drawing = stroke.layers.drawing
        if previous_miss or miss:
            drawing.stroke_style = WARNING_STROKE_COLOUR
        else:
            drawing.stroke_style = PRIMARY_STROKE_COLOUR
            self._haptics.trigger()

        drawing.stroke_segment(stroke.last_position, stroke.position)
        self._stats.segments.append(
            StrokeSegment(
                start=stroke.last_position,
                end=stroke.position,
                on_glyph=not (previous_miss or miss),
                colour=drawing.stroke_style,
            )
        )
        stroke.last_position = stroke.position

    def _set_state(self, state: State) -> None:
        previous = self._state
        self._state = state
        logger.info("StateChanged: from %s to %s", previous.kind, state.kind)

