import pytest

from mathvisual.presets import PresetCatalog


@pytest.fixture
def small_catalog():
    """Two julia presets and one lissajous, enough to exercise selection."""
    return PresetCatalog([
        {"id": "julia:a", "family": "julia", "preset_index": 0,
         "params": {"c_re": -0.8, "c_im": 0.156, "max_iter": 50},
         "renderer_hint": {"type": "escape_time"}},
        {"id": "julia:b", "family": "julia", "preset_index": 1,
         "params": {"c_re": 0.285, "c_im": 0.01, "max_iter": 50},
         "renderer_hint": {"type": "escape_time"}},
        {"id": "lissajous:a", "family": "lissajous", "preset_index": 0,
         "params": {"samples": 500}},
    ])


@pytest.fixture
def broken_catalog():
    """A single preset whose renderer does not exist."""
    return PresetCatalog([
        {"id": "julia:broken", "family": "julia", "preset_index": 0,
         "params": {}, "renderer_hint": {"type": "no_such_renderer"}},
    ])
