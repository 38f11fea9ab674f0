from __future__ import annotations

import pygame

from sandpaper_letters.glyph_layout import GlyphPlacement, Orientation, layout_letter
from sandpaper_letters.layers import OffscreenMask, Point2D
from sandpaper_letters.letters import LETTERS, Letter, SeededRng, pick_letter


def test_alphabet_table_has_26_matching_pairs() -> None:
    assert len(LETTERS) == 26
    assert LETTERS[0] == Letter("A", "a")
    assert LETTERS[25] == Letter("Z", "z")
    assert all(letter.upper.lower() == letter.lower for letter in LETTERS)


def test_pick_letter_is_reproducible_for_a_seed() -> None:
    a = SeededRng(7)
    b = SeededRng(7)
    assert [pick_letter(a) for _ in range(20)] == [pick_letter(b) for _ in range(20)]


def test_landscape_is_one_centred_string() -> None:
    layout = layout_letter(Letter("B", "b"), 400, 300)
    assert layout.orientation is Orientation.LANDSCAPE
    assert layout.font_size == 180
    assert layout.placements == (GlyphPlacement("Bb", Point2D(200.0, 150.0)),)


def test_portrait_stacks_upper_above_lower() -> None:
    layout = layout_letter(Letter("Q", "q"), 360, 720)
    assert layout.orientation is Orientation.PORTRAIT
    assert layout.font_size == 300
    upper, lower = layout.placements
    assert upper == GlyphPlacement("Q", Point2D(180.0, 180.0))
    assert lower == GlyphPlacement("q", Point2D(180.0, 460.0))


def test_square_surface_uses_portrait() -> None:
    assert layout_letter(Letter("A", "a"), 300, 300).orientation is Orientation.PORTRAIT


def test_stamp_marks_the_mask_around_each_placement() -> None:
    layout = layout_letter(Letter("I", "i"), 200, 400)
    mask = OffscreenMask(200, 400)
    layout.stamp(mask, colour=(0, 0, 0))

    bits = pygame.mask.from_surface(mask.context)
    rects = bits.get_bounding_rects()
    assert rects
    top_half = [r for r in rects if r.centery < 200]
    bottom_half = [r for r in rects if r.centery >= 200]
    assert top_half and bottom_half
    assert mask.alpha_at(Point2D(1, 1)) == 0


def test_portrait_rows_land_on_whole_pixels() -> None:
    for height in (360, 720, 1080, 1440):
        upper, lower = layout_letter(Letter("Q", "q"), height // 2, height).placements
        assert upper.center.y == height // 4
        assert lower.center.y == height * 23 // 36
