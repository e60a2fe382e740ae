"""
Palette definitions for the math renderers.

Escape-time palettes are lookup tables of shape (max_iter + 1, 3) uint8,
indexed directly by iteration count; the last entry is the colour for
points that never escaped. Newton basins use a root palette of shape
(n, 3), one colour per root of z^n - 1.

To add a new palette:
1. Define a create_palette_xxx(max_iter) function that returns the LUT
2. Add it to the PALETTES dictionary at the bottom of this file
"""

import math

import numpy as np


BACKGROUND = (240, 238, 230)   # Light paper tone behind every render
INK = (50, 50, 50)             # Stroke / dot colour for path renderers
INK_ALPHA = 0.4

INSIDE_TONE = 50               # Grey level of non-escaping points
ESCAPE_BASE = 240              # Grey level of points escaping at once
ESCAPE_RANGE = 100             # How much darker the slowest escapes get

NEWTON_BACKGROUND = BACKGROUND # Pixels that never converge

FALLBACK_INNER = (0x1f, 0x29, 0x37)
FALLBACK_OUTER = (0x0a, 0x0a, 0x0a)


def _clamp(x, a, b):
    return max(a, min(b, x))


def _round(v):
    return int(math.floor(v + 0.5))


def hsl_to_rgb(h, s, l):
    """
    Convert HSL to RGB using the six-sextant branch table.

    Args:
        h: Hue in degrees (wrapped into [0, 360))
        s, l: Saturation and lightness, clamped to [0, 1]

    Returns:
        (r, g, b) ints in [0, 255]
    """
    s = _clamp(s, 0.0, 1.0)
    l = _clamp(l, 0.0, 1.0)
    c = (1 - abs(2 * l - 1)) * s
    hp = (h % 360) / 60
    x = c * (1 - abs((hp % 2) - 1))

    if hp < 1:
        r1, g1, b1 = c, x, 0
    elif hp < 2:
        r1, g1, b1 = x, c, 0
    elif hp < 3:
        r1, g1, b1 = 0, c, x
    elif hp < 4:
        r1, g1, b1 = 0, x, c
    elif hp < 5:
        r1, g1, b1 = x, 0, c
    else:
        r1, g1, b1 = c, 0, x

    m = l - c / 2
    return _round(255 * (r1 + m)), _round(255 * (g1 + m)), _round(255 * (b1 + m))


def escape_intensity(iteration, max_iter):
    """Grey level for a point; escaped points get lighter the faster they go."""
    if iteration >= max_iter:
        return INSIDE_TONE
    t = iteration / max_iter
    return _clamp(ESCAPE_BASE - int(math.floor(ESCAPE_RANGE * t)), 0, 255)


def nice_palette(iteration, max_iter):
    """Hue-cycling colour: four trips round the wheel, black inside the set."""
    if iteration >= max_iter:
        return (0, 0, 0)
    t = iteration / max_iter
    return hsl_to_rgb(360 * t * 4, 0.6, 0.5 + 0.2 * math.sin(2 * math.pi * t))


def root_color(x, y):
    """Colour of a Newton root, taken from its angle around the origin."""
    ang = (math.atan2(y, x) + 2 * math.pi) % (2 * math.pi)
    hue = 360 * (ang / (2 * math.pi))
    return hsl_to_rgb(hue, 0.7, 0.55)


def create_palette_gray(max_iter):
    """
    Grey palette: two tonal bands.

    Escaped points run from light (240) down towards 140 with iteration
    count; points that never escape sit in a separate dark band (50).
    """
    colors = np.zeros((max_iter + 1, 3), dtype=np.uint8)
    for i in range(max_iter + 1):
        v = escape_intensity(i, max_iter)
        colors[i] = [v, v, v]
    return colors


def create_palette_nice(max_iter):
    """
    Nice palette: hue cycles four times with a slow lightness wave.

    High contrast, shows fine banding near the boundary.
    """
    colors = np.zeros((max_iter + 1, 3), dtype=np.uint8)
    for i in range(max_iter + 1):
        colors[i] = nice_palette(i, max_iter)
    return colors


def create_root_palette(n):
    """One colour per root e^(2*pi*i*k/n) of z^n - 1."""
    colors = np.zeros((n, 3), dtype=np.uint8)
    for k in range(n):
        ang = 2 * math.pi * k / n
        colors[k] = root_color(math.cos(ang), math.sin(ang))
    return colors


# Registry of escape-time palettes.
# Keys are the names presets use in params["palette"].
PALETTES = {
    'gray': create_palette_gray,
    'nice': create_palette_nice,
}

DEFAULT_PALETTE = 'gray'


def get_palette(name, max_iter):
    """
    Build an escape-time palette by name.

    Raises:
        KeyError if name not found
    """
    return PALETTES[name](max_iter)


def list_palette_names():
    """Get list of available palette names."""
    return list(PALETTES.keys())
