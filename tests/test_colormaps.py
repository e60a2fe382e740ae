"""Palettes and colour conversion."""

import pytest

from mathvisual.colormaps import (
    INSIDE_TONE, create_palette_gray, create_palette_nice, create_root_palette,
    get_palette, hsl_to_rgb, list_palette_names,
)


def test_hsl_primaries():
    assert hsl_to_rgb(0, 1, 0.5) == (255, 0, 0)
    assert hsl_to_rgb(120, 1, 0.5) == (0, 255, 0)
    assert hsl_to_rgb(240, 1, 0.5) == (0, 0, 255)
    assert hsl_to_rgb(360, 1, 0.5) == (255, 0, 0), "Hue should wrap"
    assert hsl_to_rgb(77, 0, 1) == (255, 255, 255)


def test_gray_palette_has_two_bands():
    pal = create_palette_gray(100)
    assert pal.shape == (101, 3), f"Shape {pal.shape}"
    assert tuple(pal[0]) == (240, 240, 240), f"Fast escape {pal[0]}"
    assert tuple(pal[100]) == (INSIDE_TONE,) * 3, f"Inside {pal[100]}"
    escaped = pal[:100, 0]
    assert escaped.min() >= 140, f"Escaped band too dark: {escaped.min()}"
    assert all(escaped[i] >= escaped[i + 1] for i in range(99)), "Band should darken with iterations"


def test_nice_palette_black_inside():
    pal = create_palette_nice(64)
    assert tuple(pal[64]) == (0, 0, 0)
    assert pal[:64].max() > 0


def test_root_palette_distinct_colours():
    pal = create_root_palette(5)
    assert pal.shape == (5, 3)
    assert len({tuple(c) for c in pal}) == 5, f"Root colours collide: {pal}"


def test_palette_lookup():
    assert set(list_palette_names()) == {"gray", "nice"}
    assert get_palette("gray", 10).shape == (11, 3)
    with pytest.raises(KeyError):
        get_palette("rainbow", 10)
