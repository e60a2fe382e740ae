"""Curve samplers and the curve renderers."""

import math

import numpy as np
import pytest

from mathvisual.coords import world_to_viewport
from mathvisual.curves import (
    lissajous, phyllotaxis, rose_curve, rose_period, sample_angles,
    spirograph, superformula,
)
from mathvisual.renderers import CURVE_MAX_SAMPLES, PHYLLOTAXIS_MAX_POINTS, render_preset
from mathvisual.surface import RenderSurface


def test_sample_angles_include_both_ends():
    t = sample_angles(5)
    assert t[0] == 0.0 and t[-1] == 2 * math.pi
    with pytest.raises(ValueError):
        sample_angles(1)


def test_lissajous_closes():
    xs, ys = lissajous(1, 1, 3, 2, math.pi / 2, 1000)
    assert abs(xs[0] - xs[-1]) < 1e-9 and abs(ys[0] - ys[-1]) < 1e-9


def test_lissajous_normalised_by_larger_amplitude():
    xs, ys = lissajous(4, 2, 1, 1, 0, 2001)
    assert abs(np.abs(xs).max() - 1.0) < 1e-6
    assert abs(np.abs(ys).max() - 0.5) < 1e-6


def test_lissajous_path_starts_and_ends_on_same_pixel():
    preset = {"family": "lissajous",
              "params": {"A": 1, "B": 1, "a": 3, "b": 2, "delta": math.pi / 2, "samples": 1000}}
    surface = RenderSurface(100, 100)
    stats = render_preset(preset, surface)
    xs, ys = stats["path"]
    first = world_to_viewport(xs[0], ys[0], stats["bounds"], 100, 100)
    last = world_to_viewport(xs[-1], ys[-1], stats["bounds"], 100, 100)
    assert first == last, f"Path starts at {first}, ends at {last}"
    assert stats["segments"] == 999


def test_spirograph_fits_unit_square():
    for kind in ("hypo", "epi"):
        xs, ys = spirograph(5, 3, 5, kind, 3000)
        assert np.abs(xs).max() <= 1.0 and np.abs(ys).max() <= 1.0, f"{kind} overflows"
    with pytest.raises(ValueError):
        spirograph(5, 0, 1, "hypo", 100)


def test_superformula_circle():
    xs, ys = superformula(0, 1, 1, 1, 1, 1, 100)
    r = np.hypot(xs, ys)
    assert np.allclose(r, 1.0), f"Radii {r.min()}..{r.max()}"


def test_rose_period_uses_reduced_denominator():
    assert rose_period(5, 1) == 2 * math.pi
    assert rose_period(7, 4) == 8 * math.pi
    assert rose_period(6, 4) == 4 * math.pi


def test_rose_radius_never_negative():
    xs, ys = rose_curve(2, 1, 1.0, 801)
    r = np.hypot(xs, ys)
    assert r.max() <= 1.0 + 1e-12
    # r = cos(2t): t = pi/2 has cos = -1, drawn at angle 3pi/2
    i = 200
    assert abs(xs[i]) < 1e-9 and abs(ys[i] + 1.0) < 1e-9, f"Point {xs[i], ys[i]}"


def test_phyllotaxis_points():
    xs, ys = phyllotaxis(100, 0.7, 137.507)
    assert len(xs) == 100
    assert xs[0] == 0.0 and ys[0] == 0.0
    assert np.hypot(xs, ys).max() < 0.7


def test_curve_caps():
    stats = render_preset({"family": "rose_curve", "params": {"samples": 10 ** 6}}, RenderSurface(8, 8))
    assert stats["samples"] == CURVE_MAX_SAMPLES
    stats = render_preset({"family": "phyllotaxis", "params": {"n_points": 10 ** 6}}, RenderSurface(8, 8))
    assert stats["points"] == PHYLLOTAXIS_MAX_POINTS


def test_curve_defaults():
    for family, kind in (("lissajous", "parametric_2d"), ("spirograph", "parametric_2d"),
                         ("superformula", "polar_2d"), ("rose_curve", "polar_2d"),
                         ("phyllotaxis", "point_polar")):
        stats = render_preset({"family": family, "params": {}}, RenderSurface(20, 20))
        assert stats["renderer"] == kind


def test_curves_deterministic():
    preset = {"family": "superformula", "params": {"m": 5, "n1": 2, "n2": 6, "n3": 6}}
    a, b = RenderSurface(40, 30), RenderSurface(40, 30)
    render_preset(preset, a)
    render_preset(preset, b)
    assert np.array_equal(a.pixels, b.pixels)


def test_rose_with_fractional_numerator_closes():
    # 2.5 / 1 is 5/2, which needs two full turns
    assert rose_period(2.5, 1) == 4 * math.pi
    assert rose_period(1, 0.5) == 2 * math.pi
    xs, ys = rose_curve(2.5, 1, 1.0, 4001)
    assert abs(xs[0] - xs[-1]) < 1e-9 and abs(ys[0] - ys[-1]) < 1e-9, \
        f"Open rose: {xs[0], ys[0]} vs {xs[-1], ys[-1]}"


def test_rose_period_rejects_zero_denominator():
    with pytest.raises(ValueError):
        rose_period(3, 0)


@pytest.mark.parametrize("preset", [
    {"family": "lissajous", "params": {"a": 3, "b": 4, "delta": 0.5, "samples": 800}},
    {"family": "spirograph", "params": {"R": 5, "r": 3, "d": 5, "kind": "hypo"}},
    {"family": "spirograph", "params": {"R": 5, "r": 1, "d": 2, "kind": "epi"}},
    {"family": "phyllotaxis", "params": {"n_points": 600}},
], ids=["lissajous", "hypotrochoid", "epitrochoid", "phyllotaxis"])
def test_curve_renders_repeat_exactly(preset):
    a, b = RenderSurface(48, 36), RenderSurface(48, 36)
    render_preset(preset, a)
    render_preset(preset, b)
    assert np.array_equal(a.pixels, b.pixels), f"{preset['family']} differs between renders"
    assert not np.all(a.pixels[:, :, :3] == a.pixels[0, 0, :3]), "Nothing was drawn"
