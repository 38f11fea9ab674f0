"""Where the letter pair goes on a surface of a given size.

Landscape surfaces show ``"Aa"`` as one centred string.  Portrait surfaces
stack the capital above the small letter, each centred horizontally.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import StrEnum

from .layers import Colour, Point2D, Raster
from .letters import Letter

LANDSCAPE_FONT_RATIO = 0.6
# Portrait geometry is measured in 36ths of the height.
PORTRAIT_ROWS = 36
PORTRAIT_FONT_ROWS = 15
PORTRAIT_UPPER_ROW = 9
PORTRAIT_LOWER_ROW = 23


class Orientation(StrEnum):
    LANDSCAPE = "landscape"
    PORTRAIT = "portrait"


@dataclass(frozen=True, slots=True)
class GlyphPlacement:
    text: str
    center: Point2D


@dataclass(frozen=True, slots=True)
class GlyphLayout:
    orientation: Orientation
    font_size: int
    placements: tuple[GlyphPlacement, ...]

    def stamp(self, target: Raster, *, colour: Colour) -> None:
        for placement in self.placements:
            target.fill_text(placement.text, placement.center, font_size=self.font_size, colour=colour)


def layout_letter(letter: Letter, width: int, height: int) -> GlyphLayout:
    if width > height:
        return GlyphLayout(
            orientation=Orientation.LANDSCAPE,
            font_size=int(round(height * LANDSCAPE_FONT_RATIO)),
            placements=(GlyphPlacement(letter.pair, Point2D(width / 2.0, height / 2.0)),),
        )
    cx = width / 2.0
    return GlyphLayout(
        orientation=Orientation.PORTRAIT,
        font_size=int(round(height * PORTRAIT_FONT_ROWS / PORTRAIT_ROWS)),
        placements=(
            GlyphPlacement(letter.upper, Point2D(cx, height * PORTRAIT_UPPER_ROW / PORTRAIT_ROWS)),
            GlyphPlacement(letter.lower, Point2D(cx, height * PORTRAIT_LOWER_ROW / PORTRAIT_ROWS)),
        ),
    )
