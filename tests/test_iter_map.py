"""Chaotic 2D maps."""

import numpy as np
import pytest

from mathvisual.colormaps import BACKGROUND
from mathvisual.compute import MAP_CLIFFORD, MAP_DE_JONG, iterate_map, map_step
from mathvisual.renderers import ITER_MAP_MAX_STEPS, render_preset
from mathvisual.surface import RenderSurface


def test_de_jong_step():
    coeffs = np.array([1.4, -2.3, 2.4, -2.1])
    x, y = map_step(MAP_DE_JONG, coeffs, 0.1, 0.0)
    assert abs(x - (np.sin(0.0) - np.cos(-0.23))) < 1e-12
    assert abs(y - (np.sin(0.24) - np.cos(0.0))) < 1e-12


def test_iterate_map_records_every_state():
    coeffs = np.array([-1.4, 1.6, 1.0, 0.7])
    xs, ys = iterate_map(MAP_CLIFFORD, coeffs, 500, 0.1, 0.0)
    assert xs.shape == (500,) and ys.shape == (500,)
    x1, y1 = map_step(MAP_CLIFFORD, coeffs, 0.1, 0.0)
    assert xs[0] == x1 and ys[0] == y1, "First entry is the state after one step"
    # Clifford attractor is bounded by 1 + |c| and 1 + |d|
    assert np.all(np.abs(xs) <= 2.0 + 1e-9) and np.all(np.abs(ys) <= 1.7 + 1e-9)


def test_render_inks_the_background():
    preset = {"family": "de_jong", "params": {"steps": 20000}}
    surface = RenderSurface(64, 64)
    stats = render_preset(preset, surface)
    assert stats["steps"] == 20000
    assert stats["plotted"] > 0
    assert surface.pixels[:, :, 0].min() < BACKGROUND[0], "Some pixels should be darkened"
    # Ink only darkens, never changes hue: equal drop on every channel
    diff = np.array(BACKGROUND, dtype=int) - surface.pixels[:, :, :3].astype(int)
    untouched_or_equal = (diff[:, :, 0] == diff[:, :, 1]) | (surface.pixels[:, :, 1] == 0)
    assert untouched_or_equal.all()


def test_steps_capped():
    preset = {"family": "clifford", "params": {"steps": 10 ** 7}}
    stats = render_preset(preset, RenderSurface(8, 8))
    assert stats["steps"] == ITER_MAP_MAX_STEPS, f"steps {stats['steps']}"


def test_every_map_family_renders():
    for family in ("de_jong", "clifford", "ikeda", "gumowski_mira"):
        stats = render_preset({"family": family, "params": {"steps": 3000, "discard": 10}},
                              RenderSurface(16, 16))
        assert stats["renderer"] == "iter_map", f"{family} dispatched to {stats['renderer']}"


def test_unknown_map_family_raises():
    with pytest.raises(ValueError):
        render_preset({"family": "tent", "params": {}, "renderer_hint": {"type": "iter_map"}},
                      RenderSurface(8, 8))


def test_iter_map_deterministic():
    preset = {"family": "ikeda", "params": {"steps": 5000}}
    a, b = RenderSurface(24, 24), RenderSurface(24, 24)
    render_preset(preset, a)
    render_preset(preset, b)
    assert np.array_equal(a.pixels, b.pixels)
