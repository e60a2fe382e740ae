"""
World <-> viewport coordinate mapping.

Bounds are always (x_min, x_max, y_min, y_max) in world units. Pixel
(0, 0) is the top-left corner of the raster, so increasing world y moves
up the screen. The transform is affine and exactly invertible as long as
the bounds are non-degenerate, which validate_bounds() enforces.
"""

import math

import numpy as np

from .errors import DegenerateBoundsError, InvalidTargetError


# Width of the full Mandelbrot overview at zoom 1
MANDELBROT_BASE_WIDTH = 3.5


def round_half_up(v):
    """Round to the nearest integer, halves going up (screen convention)."""
    return int(math.floor(v + 0.5))


def validate_bounds(bounds):
    """
    Check a world window and return it as a tuple of floats.

    Raises:
        DegenerateBoundsError if a side has zero extent or a value is
        not finite.
    """
    try:
        x_min, x_max, y_min, y_max = (float(v) for v in bounds)
    except (TypeError, ValueError) as e:
        raise DegenerateBoundsError(f"Bounds must be 4 numbers, got {bounds!r}") from e
    if not all(math.isfinite(v) for v in (x_min, x_max, y_min, y_max)):
        raise DegenerateBoundsError(f"Bounds must be finite, got {bounds!r}")
    if x_max == x_min or y_max == y_min:
        raise DegenerateBoundsError(f"Bounds have zero extent: {bounds!r}")
    return x_min, x_max, y_min, y_max


def validate_size(width, height):
    """Raster sizes must be integers >= 2 (the mapping divides by W-1, H-1)."""
    if int(width) != width or int(height) != height:
        raise InvalidTargetError(f"Size must be integral, got {width}x{height}")
    if width < 2 or height < 2:
        raise InvalidTargetError(f"Size must be at least 2x2, got {width}x{height}")
    return int(width), int(height)


def world_to_viewport(x, y, bounds, width, height):
    """
    Map a world point to the nearest integer pixel.

    Args:
        x, y: World coordinates
        bounds: (x_min, x_max, y_min, y_max)
        width, height: Raster size in pixels

    Returns:
        (px, py) integer pixel coordinates (may lie outside the raster)
    """
    x_min, x_max, y_min, y_max = validate_bounds(bounds)
    sx = (x - x_min) / (x_max - x_min)
    sy = (y - y_min) / (y_max - y_min)
    return round_half_up(sx * (width - 1)), round_half_up((1 - sy) * (height - 1))


def viewport_to_world(px, py, bounds, width, height):
    """Inverse of world_to_viewport (without the rounding)."""
    x_min, x_max, y_min, y_max = validate_bounds(bounds)
    x = x_min + (x_max - x_min) * (px / (width - 1))
    y = y_min + (y_max - y_min) * (1 - py / (height - 1))
    return x, y


def pixel_grid(bounds, width, height):
    """
    World coordinates of every pixel column and row.

    Returns:
        (xs, ys): float64 arrays of length width and height. ys[0] is
        y_max (top row), ys[-1] is y_min.
    """
    x_min, x_max, y_min, y_max = validate_bounds(bounds)
    width, height = validate_size(width, height)
    xs = x_min + (x_max - x_min) * (np.arange(width, dtype=np.float64) / (width - 1))
    ys = y_min + (y_max - y_min) * (1 - np.arange(height, dtype=np.float64) / (height - 1))
    return xs, ys


def to_pixel_arrays(xs, ys, bounds, width, height):
    """
    Vectorised world -> viewport for point arrays.

    Returns float64 pixel coordinates (unrounded) so callers can clip
    segments before rasterising. Non-finite world points stay non-finite.
    """
    x_min, x_max, y_min, y_max = validate_bounds(bounds)
    xs = np.asarray(xs, dtype=np.float64)
    ys = np.asarray(ys, dtype=np.float64)
    with np.errstate(invalid='ignore', over='ignore'):
        px = (xs - x_min) / (x_max - x_min) * (width - 1)
        py = (1 - (ys - y_min) / (y_max - y_min)) * (height - 1)
    return px, py


def mandelbrot_view(centre, zoom, aspect):
    """
    Bounds for a Mandelbrot zoom preset.

    The window is 3.5/zoom wide and keeps the output aspect ratio.
    """
    cx, cy = float(centre[0]), float(centre[1])
    if zoom <= 0 or aspect <= 0:
        raise DegenerateBoundsError(f"zoom and aspect must be positive, got {zoom}, {aspect}")
    w = MANDELBROT_BASE_WIDTH / zoom
    h = w / aspect
    return (cx - w / 2, cx + w / 2, cy - h / 2, cy + h / 2)


def zoom_about(bounds, x, y, factor):
    """
    Zoom a window while keeping the world point (x, y) fixed.

    factor < 1 zooms in, factor > 1 zooms out.
    """
    x_min, x_max, y_min, y_max = validate_bounds(bounds)
    new_width = (x_max - x_min) * factor
    new_height = (y_max - y_min) * factor

    x_ratio = (x - x_min) / (x_max - x_min)
    y_ratio = (y - y_min) / (y_max - y_min)

    return validate_bounds((
        x - x_ratio * new_width,
        x + (1 - x_ratio) * new_width,
        y - y_ratio * new_height,
        y + (1 - y_ratio) * new_height,
    ))
