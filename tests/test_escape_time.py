"""Escape-time kernel and renderer."""

import numpy as np

from mathvisual.colormaps import INSIDE_TONE
from mathvisual.compute import compute_escape_time, escape_iterations
from mathvisual.renderers import ESCAPE_MAX_ITER, render_preset
from mathvisual.surface import RenderSurface


def test_far_point_escapes_after_one_iteration():
    assert escape_iterations(0.0, 0.0, 10.0, 0.0, 4.0, 100) == 1


def test_origin_never_escapes():
    assert escape_iterations(0.0, 0.0, 0.0, 0.0, 4.0, 100) == 100


def test_julia_starts_from_pixel():
    xs = np.array([0.0, 3.0])
    ys = np.array([0.0])
    grid = compute_escape_time(xs, ys, True, 0.0, 0.0, 2.0, 50)
    assert grid.shape == (1, 2)
    # c = 0: the unit disc is the filled Julia set
    assert grid[0, 0] == 50, f"Origin escaped after {grid[0, 0]}"
    assert grid[0, 1] == 0, f"|z| = 3 should be outside from the start, got {grid[0, 1]}"


def test_mandelbrot_centre_pixel_inside_set():
    """100x100 overview: the centre pixel is near (-0.5, 0), inside the main cardioid."""
    preset = {"family": "mandelbrot", "params": {"bounds": [-2.5, 1.5, -1.5, 1.5], "max_iter": 100},
              "renderer_hint": {"type": "escape_time"}}
    surface = RenderSurface(100, 100)
    render_preset(preset, surface)
    centre = tuple(surface.pixels[50, 50, :3])
    assert centre == (INSIDE_TONE,) * 3, f"Centre pixel {centre} should be the inside tone"
    corner = tuple(surface.pixels[0, 0, :3])
    assert corner[0] > 200, f"Corner (-2.5, 1.5) escapes at once, got {corner}"


def test_iterations_capped():
    preset = {"family": "julia", "params": {"max_iter": 100000}}
    surface = RenderSurface(16, 12)
    stats = render_preset(preset, surface)
    assert stats["max_iter"] == ESCAPE_MAX_ITER, f"max_iter {stats['max_iter']}"
    assert stats["iterations"] <= ESCAPE_MAX_ITER


def test_mandelbrot_centre_and_zoom():
    preset = {"family": "mandelbrot", "params": {"centre": [-0.75, 0.1], "zoom": 2, "max_iter": 20}}
    stats = render_preset(preset, RenderSurface(40, 20))
    x_min, x_max, y_min, y_max = stats["bounds"]
    assert abs((x_max - x_min) - 1.75) < 1e-12
    assert abs((y_max - y_min) - 0.875) < 1e-12, "Height should follow the 2:1 aspect"


def test_escape_time_deterministic():
    preset = {"family": "julia", "params": {"max_iter": 60, "palette": "nice"}}
    a = RenderSurface(30, 20)
    b = RenderSurface(30, 20)
    render_preset(preset, a)
    render_preset(preset, b)
    assert np.array_equal(a.pixels, b.pixels)
