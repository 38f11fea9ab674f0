"""Host-neutral input events and a minimal listener registry.

The tracing session never sees pygame events directly.  The host translates
its native input into the small value types below and dispatches them through
:class:`EventTarget` objects, mirroring the mouse/touch/resize lifecycle a
browser canvas exposes.
"""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass, field
from enum import IntEnum, StrEnum


class EventKind(StrEnum):
    MOUSE_DOWN = "mousedown"
    MOUSE_MOVE = "mousemove"
    MOUSE_UP = "mouseup"
    TOUCH_START = "touchstart"
    TOUCH_MOVE = "touchmove"
    TOUCH_END = "touchend"
    TOUCH_CANCEL = "touchcancel"
    RESIZE = "resize"


class MouseButton(IntEnum):
    PRIMARY = 0
    AUXILIARY = 1
    SECONDARY = 2


@dataclass(frozen=True, slots=True)
class MouseEvent:
    client_x: float
    client_y: float
    button: MouseButton = MouseButton.PRIMARY


@dataclass(frozen=True, slots=True)
class Touch:
    identifier: int
    client_x: float
    client_y: float


@dataclass(slots=True)
class TouchEvent:
    """Touch lists follow browser semantics.

    ``touches`` holds every finger still on the surface; ``changed_touches``
    holds the fingers this event is about (for end/cancel they are no longer
    in ``touches``).
    """

    touches: tuple[Touch, ...]
    changed_touches: tuple[Touch, ...]
    cancelable: bool = True
    default_prevented: bool = field(default=False, init=False)
    in_passive_listener: bool = field(default=False, init=False)

    def prevent_default(self) -> None:
        if self.cancelable and not self.in_passive_listener:
            self.default_prevented = True


@dataclass(frozen=True, slots=True)
class ResizeEvent:
    width: int
    height: int


def find_touch(identifier: int, touches: tuple[Touch, ...]) -> Touch | None:
    for touch in touches:
        if touch.identifier == identifier:
            return touch
    return None


@dataclass(frozen=True, slots=True)
class _Listener:
    handler: Callable[[object], None]
    passive: bool


class EventTarget:
    def __init__(self) -> None:
        self._listeners: dict[EventKind, list[_Listener]] = {}

    def add_event_listener(
        self,
        kind: EventKind,
        handler: Callable[[object], None],
        *,
        passive: bool = True,
    ) -> None:
        listeners = self._listeners.setdefault(EventKind(kind), [])
        if any(listener.handler == handler for listener in listeners):
            return
        listeners.append(_Listener(handler=handler, passive=passive))

    def listener_count(self, kind: EventKind) -> int:
        return len(self._listeners.get(EventKind(kind), ()))

    def is_passive(self, kind: EventKind) -> bool:
        listeners = self._listeners.get(EventKind(kind), ())
        return all(listener.passive for listener in listeners)

    def dispatch_event(self, kind: EventKind, event: object) -> int:
        """Deliver ``event`` to every listener of ``kind``; returns the count."""

        listeners = list(self._listeners.get(EventKind(kind), ()))
        for listener in listeners:
            if isinstance(event, TouchEvent):
                # Passive listeners cannot cancel the default action.
                event.in_passive_listener = listener.passive
            listener.handler(event)
        return len(listeners)
