"""Drawable surfaces for the tracing screen.

A :class:`Canvas` is the host's handle for one stacked drawing area: it knows
its client (point) size, where it sits in the window and the device-pixel
ratio.  A :class:`Layer` takes ownership of a canvas' backing store at
construction, sized ``client * device_pixel_ratio`` and fixed for the layer's
lifetime; a resize means building a new Layer.

:class:`OffscreenMask` is never displayed.  Glyphs are stamped onto it in an
opaque colour and its alpha channel answers "is this pixel on the letter?".
"""

from __future__ import annotations

import math
from dataclasses import dataclass

import pygame

from .events import EventTarget

Colour = tuple[int, int, int]

LINE_CAP_BUTT = "butt"
LINE_CAP_ROUND = "round"


@dataclass(frozen=True, slots=True)
class Point2D:
    """A position in canvas-pixel space."""

    x: float
    y: float

    def as_tuple(self) -> tuple[float, float]:
        return (self.x, self.y)


@dataclass(frozen=True, slots=True)
class ClientRect:
    left: float
    top: float
    width: float
    height: float


class Canvas(EventTarget):
    """Host-side drawing area that layers attach to."""

    def __init__(
        self,
        *,
        client_width: float,
        client_height: float,
        device_pixel_ratio: float = 1.0,
        left: float = 0.0,
        top: float = 0.0,
        attached: bool = True,
    ) -> None:
        super().__init__()
        if device_pixel_ratio <= 0:
            raise ValueError("device_pixel_ratio must be > 0")
        self.device_pixel_ratio = float(device_pixel_ratio)
        self.left = float(left)
        self.top = float(top)
        self.attached = attached
        self.client_width = 0.0
        self.client_height = 0.0
        self.set_client_size(client_width, client_height)
        self.width = 0
        self.height = 0
        self._backing: pygame.Surface | None = None

    def set_client_size(self, client_width: float, client_height: float) -> None:
        if client_width <= 0 or client_height <= 0:
            raise ValueError("client size must be > 0")
        self.client_width = float(client_width)
        self.client_height = float(client_height)

    def set_backing_size(self, width: int, height: int) -> None:
        # Assigning the size always discards the previous pixels.
        self.width = max(1, int(width))
        self.height = max(1, int(height))
        self._backing = None

    def get_context(self) -> pygame.Surface | None:
        if not self.attached:
            return None
        if self._backing is None:
            try:
                self._backing = pygame.Surface((self.width, self.height), pygame.SRCALPHA)
            except pygame.error:
                return None
        return self._backing

    def get_bounding_client_rect(self) -> ClientRect:
        return ClientRect(self.left, self.top, self.client_width, self.client_height)


class Raster:
    """Shared drawing surface behaviour.

    Fonts are loaded per raster and die with it, so nothing outlives the
    pygame session that created it.
    """

    context: pygame.Surface

    def __init__(self) -> None:
        self._fonts: dict[int, pygame.font.Font] = {}

    def _font(self, size: int) -> pygame.font.Font:
        size = max(1, int(size))
        font = self._fonts.get(size)
        if font is None:
            if not pygame.font.get_init():
                pygame.font.init()
            # The bundled default face is a bold sans-serif.
            font = pygame.font.Font(None, size)
            self._fonts[size] = font
        return font

    @property
    def width(self) -> int:
        return self.context.get_width()

    @property
    def height(self) -> int:
        return self.context.get_height()

    def clear(self) -> None:
        self.context.fill((0, 0, 0, 0))

    def fill_text(self, text: str, center: Point2D, *, font_size: int, colour: Colour) -> pygame.Rect:
        """Draw ``text`` centred on ``center`` both horizontally and vertically."""

        rendered = self._font(font_size).render(text, True, colour)
        rect = rendered.get_rect(center=(round(center.x), round(center.y)))
        self.context.blit(rendered, rect)
        return rect


class Layer(Raster):
    def __init__(self, canvas: Canvas) -> None:
        super().__init__()
        self.canvas = canvas
        canvas.set_backing_size(
            int(canvas.client_width * canvas.device_pixel_ratio),
            int(canvas.client_height * canvas.device_pixel_ratio),
        )
        context = canvas.get_context()
        if context is None:
            raise RuntimeError("Could not get 2D context")
        self.context = context
        self.bounding_client_rect = canvas.get_bounding_client_rect()

        self.line_width = 1
        self.line_cap = LINE_CAP_BUTT
        self.stroke_style: Colour = (0, 0, 0)

    def get_position(self, client_x: float, client_y: float) -> Point2D:
        """Map a client-space point into canvas pixels.

        Scaling by canvas size over the snapshotted client rect covers both
        CSS scaling and the device-pixel ratio.
        """

        rect = self.bounding_client_rect
        return Point2D(
            self.canvas.width * client_x / rect.width,
            self.canvas.height * client_y / rect.height,
        )

    def get_client_position(self, point: Point2D) -> tuple[float, float]:
        rect = self.bounding_client_rect
        return (
            point.x * rect.width / self.canvas.width,
            point.y * rect.height / self.canvas.height,
        )

    def stroke_segment(self, start: Point2D, end: Point2D) -> None:
        width = max(1, int(self.line_width))
        pygame.draw.line(self.context, self.stroke_style, start.as_tuple(), end.as_tuple(), width)
        if self.line_cap == LINE_CAP_ROUND:
            radius = width / 2.0
            pygame.draw.circle(self.context, self.stroke_style, start.as_tuple(), radius)
            pygame.draw.circle(self.context, self.stroke_style, end.as_tuple(), radius)


class OffscreenMask(Raster):
    def __init__(self, width: int, height: int) -> None:
        super().__init__()
        try:
            self.context = pygame.Surface((max(1, int(width)), max(1, int(height))), pygame.SRCALPHA)
        except pygame.error as exc:
            raise RuntimeError("Could not get 2D context") from exc

    def alpha_at(self, point: Point2D) -> int:
        x = math.floor(point.x)
        y = math.floor(point.y)
        if not (0 <= x < self.width and 0 <= y < self.height):
            return 0
        return int(self.context.get_at((x, y)).a)

    def is_hit(self, point: Point2D) -> bool:
        return self.alpha_at(point) > 0

    def ink(self) -> pygame.mask.Mask:
        """Bitmask of every pixel that :meth:`is_hit` accepts."""

        return pygame.mask.from_surface(self.context, 0)
