"""Viewer state that doesn't need a window: preset selection and re-renders."""

import pytest

from mathvisual.app import MathVisualApp
from mathvisual.component import MathVisual


def _app(catalog, **kwargs):
    return MathVisualApp(width=24, height=24, settings={"background": [10, 20, 30]},
                         catalog=catalog, **kwargs)


def test_no_filter_selects_by_index(small_catalog):
    app = _app(small_catalog, index=18)
    assert app.family is None
    assert app.selected_preset() is None, "Without a filter the visual picks by index"


def test_cycle_family_walks_catalog_families(small_catalog):
    app = _app(small_catalog, index=5)
    seen = []
    for _ in range(3):
        app.cycle_family()
        seen.append(app.family)
    assert seen == ["julia", "lissajous", None], f"Got {seen}"
    assert app.index == 0


def test_filter_steps_within_family(small_catalog):
    app = _app(small_catalog)
    app.cycle_family()
    ids = []
    for i in range(3):
        app.index = i
        ids.append(app.selected_preset()["id"])
    assert ids == ["julia:a", "julia:b", "julia:a"], f"Got {ids}"


def test_start_on_preset_id(small_catalog):
    app = _app(small_catalog, preset_id="julia:b")
    assert app.family == "julia"
    assert app.index == 1
    assert app.selected_preset()["id"] == "julia:b"


def test_unknown_preset_id(small_catalog):
    with pytest.raises(KeyError):
        _app(small_catalog, preset_id="nope")


def test_zoomed_render_uses_configured_background(small_catalog):
    app = _app(small_catalog)
    app.visual = MathVisual(0, 24, 24, catalog=small_catalog,
                            preset=small_catalog.get("lissajous:a"))
    surface = app.render_view()
    assert surface.pixels.shape == (24, 24, 4)
    # lissajous only inks its path; the corner keeps the settings background
    assert tuple(surface.pixels[0, 0, :3]) == (10, 20, 30)
