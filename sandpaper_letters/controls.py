from __future__ import annotations

import math
from dataclasses import dataclass
from enum import StrEnum

import pygame

from .layers import Colour, Point2D

REFRESH_RADIUS_RATIO = 1.0 / 8.0
REFRESH_MARGIN_RATIO = 0.5  # of the radius
REFRESH_GAP_DEG = 60.0
REFRESH_GAP_CENTER_DEG = 60.0
REFRESH_COLOUR: Colour = (136, 136, 136)


class Corner(StrEnum):
    TOP_RIGHT = "top-right"
    BOTTOM_RIGHT = "bottom-right"
    TOP_LEFT = "top-left"
    BOTTOM_LEFT = "bottom-left"


# Preference order when the letter occupies a corner.
CORNER_ORDER = (Corner.TOP_RIGHT, Corner.BOTTOM_RIGHT, Corner.TOP_LEFT, Corner.BOTTOM_LEFT)


@dataclass(frozen=True, slots=True)
class BoundingBox:
    left: float
    top: float
    right: float
    bottom: float

    def contains(self, point: Point2D) -> bool:
        # Inclusive on all four sides.
        return self.left <= point.x <= self.right and self.top <= point.y <= self.bottom


@dataclass(frozen=True, slots=True)
class RefreshButton:
    """Circular "new letter" control, hit-tested by its bounding box."""

    position: Point2D  # centre
    diameter: float
    bounding_box: BoundingBox

    @classmethod
    def create(cls, position: Point2D, diameter: float) -> "RefreshButton":
        r = diameter / 2.0
        box = BoundingBox(position.x - r, position.y - r, position.x + r, position.y + r)
        return cls(position=position, diameter=float(diameter), bounding_box=box)

    @classmethod
    def for_surface(cls, width: int, height: int, *, corner: Corner = Corner.TOP_RIGHT) -> "RefreshButton":
        """Anchor the control near ``corner``."""

        r = min(width, height) * REFRESH_RADIUS_RATIO
        inset = r * REFRESH_MARGIN_RATIO + r
        right = corner in (Corner.TOP_RIGHT, Corner.BOTTOM_RIGHT)
        top = corner in (Corner.TOP_RIGHT, Corner.TOP_LEFT)
        center = Point2D(
            width - inset if right else inset,
            inset if top else height - inset,
        )
        return cls.create(center, 2.0 * r)

    @classmethod
    def clear_of(cls, ink: pygame.mask.Mask) -> "RefreshButton":
        """Place the control in the first corner whose hit box misses ``ink``.

        When every corner touches the letter, the one covering the fewest
        letter pixels wins.
        """

        width, height = ink.get_size()
        best: RefreshButton | None = None
        best_overlap = 0
        for corner in CORNER_ORDER:
            button = cls.for_surface(width, height, corner=corner)
            overlap = button.overlap_with(ink)
            if overlap == 0:
                return button
            if best is None or overlap < best_overlap:
                best, best_overlap = button, overlap
        assert best is not None
        return best

    @property
    def radius(self) -> float:
        return self.diameter / 2.0

    def test_hit(self, point: Point2D) -> bool:
        return self.bounding_box.contains(point)

    def overlap_with(self, ink: pygame.mask.Mask) -> int:
        """Count ``ink`` pixels that fall inside the hit box."""

        box = self.bounding_box
        left = math.floor(box.left)
        top = math.floor(box.top)
        # Inclusive box, so the far edge pixel counts too.
        size = (math.floor(box.right) - left + 1, math.floor(box.bottom) - top + 1)
        return ink.overlap_area(pygame.mask.Mask(size, fill=True), (left, top))

    def render(self, surface: pygame.Surface, *, colour: Colour = REFRESH_COLOUR) -> None:
        cx, cy = self.position.x, self.position.y
        r = self.radius
        thickness = max(2, int(round(r / 6.0)))

        gap_start = math.radians(REFRESH_GAP_CENTER_DEG - REFRESH_GAP_DEG / 2.0)
        gap_end = math.radians(REFRESH_GAP_CENTER_DEG + REFRESH_GAP_DEG / 2.0)
        # Inset the ring so the arrowhead stays inside the hit box.
        ring_outer = r - thickness
        rect = pygame.Rect(0, 0, int(round(2 * ring_outer)), int(round(2 * ring_outer)))
        rect.center = (int(round(cx)), int(round(cy)))
        # pygame arcs run counter-clockwise; draw everything except the gap.
        pygame.draw.arc(surface, colour, rect, gap_end, gap_start + 2.0 * math.pi, thickness)

        # Arrowhead where the ring stops, pointing along the direction of travel.
        theta = gap_start
        ring_r = ring_outer - thickness / 2.0
        px = cx + ring_r * math.cos(theta)
        py = cy - ring_r * math.sin(theta)
        tx, ty = -math.sin(theta), -math.cos(theta)
        nx, ny = math.cos(theta), -math.sin(theta)
        size = thickness * 1.5
        tip = (px + tx * size, py + ty * size)
        outer = (px + nx * size, py + ny * size)
        inner = (px - nx * size, py - ny * size)
        pygame.draw.polygon(surface, colour, [tip, outer, inner])
