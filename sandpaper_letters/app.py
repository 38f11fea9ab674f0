"""Pygame shell for Sandpaper Letters.

The window hosts three stacked canvases (guide, drawing, UI).  Native pygame
input is translated into mouse/touch/resize events and dispatched to the top
canvas, where the tracing :class:`~sandpaper_letters.tracing_core.Session`
listens.  All tracing state and feedback policy lives in tracing_core; this
module only owns the window, the frame loop and compositing.
"""

from __future__ import annotations

import logging
from collections.abc import Callable

import pygame

from .clock import FrameScheduler, RealClock
from .config import TracingConfig
from .events import EventKind, EventTarget, MouseButton, MouseEvent, ResizeEvent, Touch, TouchEvent
from .haptics import HapticFeedback, probe_vibrator
from .layers import Canvas
from .letters import SeededRng
from .tracing_core import CanvasSet, Session

logger = logging.getLogger(__name__)

WINDOW_TITLE = "Sandpaper Letters"
BACKGROUND = (250, 248, 242)

_PYGAME_BUTTONS = {
    1: MouseButton.PRIMARY,
    2: MouseButton.AUXILIARY,
    3: MouseButton.SECONDARY,
}


class InputAdapter:
    """Turns pygame events into tracing events.

    Finger events carry normalised coordinates, so they are scaled by the
    window's client size.  The adapter keeps the list of fingers currently
    down so every TouchEvent carries full ``touches``/``changed_touches``
    lists.  Mouse events that SDL synthesises from touches are dropped; the
    finger events already describe them.
    """

    def __init__(
        self,
        *,
        target: EventTarget,
        window: Canvas,
        on_resize: Callable[[int, int], None],
    ) -> None:
        self._target = target
        self._window = window
        self._on_resize = on_resize
        self._live: dict[int, Touch] = {}

    @property
    def live_touch_count(self) -> int:
        return len(self._live)

    def handle_event(self, event: pygame.event.Event) -> bool:
        """Dispatch ``event`` if it is tracing input; returns True when consumed."""

        et = event.type
        if et in (pygame.MOUSEBUTTONDOWN, pygame.MOUSEBUTTONUP):
            if getattr(event, "touch", False):
                return False
            button = _PYGAME_BUTTONS.get(int(event.button))
            if button is None:
                return False
            kind = EventKind.MOUSE_DOWN if et == pygame.MOUSEBUTTONDOWN else EventKind.MOUSE_UP
            x, y = event.pos
            self._target.dispatch_event(kind, MouseEvent(float(x), float(y), button))
            return True
        if et == pygame.MOUSEMOTION:
            if getattr(event, "touch", False):
                return False
            x, y = event.pos
            self._target.dispatch_event(EventKind.MOUSE_MOVE, MouseEvent(float(x), float(y)))
            return True
        if et in (pygame.FINGERDOWN, pygame.FINGERMOTION, pygame.FINGERUP):
            self._handle_finger(event)
            return True
        if et == pygame.WINDOWFOCUSLOST:
            self._cancel_all()
            return False
        if et == pygame.VIDEORESIZE:
            w, h = int(event.w), int(event.h)
            if w <= 0 or h <= 0:
                return False
            self._on_resize(w, h)
            self._window.dispatch_event(EventKind.RESIZE, ResizeEvent(w, h))
            return True
        return False

    def _handle_finger(self, event: pygame.event.Event) -> None:
        touch = Touch(
            identifier=int(event.finger_id),
            client_x=float(event.x) * self._window.client_width,
            client_y=float(event.y) * self._window.client_height,
        )
        if event.type == pygame.FINGERDOWN:
            self._live[touch.identifier] = touch
            kind = EventKind.TOUCH_START
        elif event.type == pygame.FINGERMOTION:
            self._live[touch.identifier] = touch
            kind = EventKind.TOUCH_MOVE
        else:
            self._live.pop(touch.identifier, None)
            kind = EventKind.TOUCH_END
        self._target.dispatch_event(
            kind,
            TouchEvent(touches=tuple(self._live.values()), changed_touches=(touch,)),
        )

    def _cancel_all(self) -> None:
        if not self._live:
            return
        changed = tuple(self._live.values())
        self._live.clear()
        self._target.dispatch_event(EventKind.TOUCH_CANCEL, TouchEvent(touches=(), changed_touches=changed))


class App:
    def __init__(
        self,
        surface: pygame.Surface,
        *,
        config: TracingConfig,
        haptics: HapticFeedback,
        scheduler: FrameScheduler | None = None,
        rng: SeededRng | None = None,
    ) -> None:
        self._surface = surface
        self._config = config
        self._haptics = haptics
        self._scheduler = scheduler if scheduler is not None else FrameScheduler()
        self._running = True

        w, h = surface.get_size()
        dpr = config.device_pixel_ratio
        self._canvases = CanvasSet(
            guide=Canvas(client_width=w, client_height=h, device_pixel_ratio=dpr),
            drawing=Canvas(client_width=w, client_height=h, device_pixel_ratio=dpr),
            ui=Canvas(client_width=w, client_height=h, device_pixel_ratio=dpr),
            window=Canvas(client_width=w, client_height=h, device_pixel_ratio=dpr),
        )
        self._session = Session(
            scheduler=self._scheduler,
            haptics=haptics,
            rng=rng if rng is not None else SeededRng(config.seed),
        )
        self._input = InputAdapter(
            target=self._canvases.ui,
            window=self._canvases.window,
            on_resize=self._resize_canvases,
        )

    @property
    def running(self) -> bool:
        return self._running

    @property
    def session(self) -> Session:
        return self._session

    @property
    def canvases(self) -> CanvasSet:
        return self._canvases

    def start(self) -> None:
        self._session.initialise(self._canvases)

    def quit(self) -> None:
        self._running = False

    def handle_event(self, event: pygame.event.Event) -> None:
        if event.type == pygame.QUIT:
            self.quit()
            return
        if event.type == pygame.KEYDOWN and event.key == pygame.K_ESCAPE:
            self.quit()
            return
        self._input.handle_event(event)

    def update(self) -> None:
        self._scheduler.run_frame()
        self._haptics.poll()

    def render(self) -> None:
        current = pygame.display.get_surface()
        if current is not None:
            self._surface = current
        self._surface.fill(BACKGROUND)
        size = self._surface.get_size()
        for canvas in (self._canvases.guide, self._canvases.drawing, self._canvases.ui):
            layer = canvas.get_context()
            if layer is None:
                continue
            if layer.get_size() != size:
                layer = pygame.transform.smoothscale(layer, size)
            self._surface.blit(layer, (0, 0))

    def _resize_canvases(self, width: int, height: int) -> None:
        logger.debug("Window resized to %dx%d", width, height)
        for canvas in (
            self._canvases.guide,
            self._canvases.drawing,
            self._canvases.ui,
            self._canvases.window,
        ):
            canvas.set_client_size(width, height)


def run(
    *,
    max_frames: int | None = None,
    event_injector: Callable[[int], None] | None = None,
    config: TracingConfig | None = None,
) -> int:
    config = config if config is not None else TracingConfig.from_env()
    logging.basicConfig(
        level=config.logging_level,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    pygame.init()
    pygame.display.set_caption(WINDOW_TITLE)
    surface = pygame.display.set_mode(config.window_size, pygame.RESIZABLE)
    clock = pygame.time.Clock()

    haptics = HapticFeedback(probe_vibrator(disabled=config.disable_haptics), clock=RealClock())
    app = App(surface, config=config, haptics=haptics)
    app.start()

    frame = 0
    try:
        while app.running:
            if event_injector is not None:
                event_injector(frame)

            for event in pygame.event.get():
                app.handle_event(event)

            app.update()
            app.render()

            pygame.display.flip()

            frame += 1
            if max_frames is not None and frame >= max_frames:
                break

            clock.tick(config.target_fps)
    finally:
        pygame.quit()

    return 0
