"""Newton basins."""

import math

import numpy as np
import pytest

from mathvisual.colormaps import NEWTON_BACKGROUND, create_root_palette
from mathvisual.compute import compute_newton, newton_solve
from mathvisual.renderers import NEWTON_MAX_ITER, parse_degree, render_preset
from mathvisual.surface import RenderSurface


def test_root_is_a_fixed_point():
    x, y, k, converged = newton_solve(1.0, 0.0, 3, 40, 1e-6)
    assert converged, "Starting on a root should converge immediately"
    assert k == 0, f"Took {k} iterations"
    assert abs(x - 1.0) < 1e-12 and abs(y) < 1e-12


def test_origin_does_not_converge():
    x, y, k, converged = newton_solve(0.0, 0.0, 3, 40, 1e-6)
    assert not converged


def test_points_near_roots_pick_that_root():
    n = 3
    xs = np.array([1.1, math.cos(2 * math.pi / 3) * 1.1])
    ys = np.array([0.0])
    roots, _ = compute_newton(xs, ys, n, 40, 1e-6)
    assert roots[0, 0] == 0, f"Near 1 -> root {roots[0, 0]}"
    ys = np.array([math.sin(2 * math.pi / 3) * 1.1])
    xs = np.array([math.cos(2 * math.pi / 3) * 1.1])
    roots, _ = compute_newton(xs, ys, n, 40, 1e-6)
    assert roots[0, 0] == 1, f"Near e^(2pi i/3) -> root {roots[0, 0]}"


def test_parse_degree():
    assert parse_degree("z**5 - 1") == 5
    assert parse_degree(None) == 3
    assert parse_degree("z^4 - 1") == 3, "Only the z**n form is recognised"
    assert parse_degree("z**1000 - 1") == 32


def test_render_colours_converged_pixels():
    preset = {"family": "newton", "params": {"polynomial": "z**4 - 1", "max_iter": 1000}}
    surface = RenderSurface(41, 41)
    stats = render_preset(preset, surface)
    assert stats["max_iter"] == NEWTON_MAX_ITER
    assert stats["degree"] == 4
    assert stats["converged"] > 0
    palette = [tuple(c) for c in create_root_palette(4)]
    # Pixel (40, 20) is world (2, 0), in the basin of root 1
    assert tuple(surface.pixels[20, 40, :3]) == palette[0]
    # Pixel (20, 20) is the origin, where the derivative vanishes
    assert tuple(surface.pixels[20, 20, :3]) == NEWTON_BACKGROUND


@pytest.mark.parametrize("j", [1, 2])
def test_complex_roots_are_fixed_points(j):
    rx, ry = math.cos(2 * math.pi * j / 3), math.sin(2 * math.pi * j / 3)
    x, y, k, converged = newton_solve(rx, ry, 3, 40, 1e-6)
    assert converged, f"e^(2pi i {j}/3) should converge immediately"
    assert k == 0, f"Took {k} iterations from root {j}"
    assert abs(x - rx) < 1e-12 and abs(y - ry) < 1e-12


def test_render_is_repeatable():
    preset = {"family": "newton", "params": {"polynomial": "z**5 - 1", "max_iter": 40}}
    a, b = RenderSurface(33, 25), RenderSurface(33, 25)
    stats_a = render_preset(preset, a)
    stats_b = render_preset(preset, b)
    assert np.array_equal(a.pixels, b.pixels)
    assert stats_a["converged"] == stats_b["converged"]
