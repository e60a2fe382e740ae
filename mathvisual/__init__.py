"""
Mathematical Visuals Package

Deterministic mathematical images (escape-time fractals, Newton basins,
chaotic maps, strange attractors, curves, phyllotaxis, interference
fields and IFS fractals) chosen from a preset catalog by an integer
index, rendered once into an RGBA buffer. Numba compiles the per-pixel
and per-step kernels; Pygame is only used by the viewer.

Quick Start:
    from mathvisual import RenderSurface, get_preset_for_quote, render_preset
    surface = RenderSurface(400, 400)
    render_preset(get_preset_for_quote(42), surface)

Or from command line:
    python -m mathvisual 42 --window 800x600

Package Structure:
    - coords.py: World <-> viewport transforms
    - colormaps.py: Palettes and tones
    - compute.py: JIT-compiled kernels
    - curves.py: Closed-form curve samplers
    - surface.py: RGBA render target
    - presets.py: Preset catalog and index -> preset mapping
    - renderers.py: Renderer registry and dispatch
    - component.py: Visibility gate and the one-shot MathVisual
    - settings.py: settings.json loading
    - app.py: Pygame viewer

Controls (viewer):
    - Left / Right: Previous / next preset
    - F: Cycle the family filter (off, then each family)
    - Scroll: Zoom at mouse position (escape-time presets)
    - R: Reset zoom
    - ESC: Quit
"""

from .component import GateState, MathVisual, VisibilityGate
from .errors import (
    DegenerateBoundsError, EmptyCatalogError, InvalidTargetError,
    MathVisualError, UnknownRendererError,
)
from .presets import FAMILIES, PresetCatalog, get_preset_for_quote, load_catalog
from .renderers import RENDERERS, render_preset
from .settings import load_settings
from .surface import RenderSurface

__version__ = "1.0.0"
__all__ = [
    "GateState",
    "MathVisual",
    "VisibilityGate",
    "MathVisualError",
    "DegenerateBoundsError",
    "InvalidTargetError",
    "UnknownRendererError",
    "EmptyCatalogError",
    "FAMILIES",
    "PresetCatalog",
    "get_preset_for_quote",
    "load_catalog",
    "RENDERERS",
    "render_preset",
    "load_settings",
    "RenderSurface",
]
