"""
RenderSurface: the raster target a render writes into.

A surface owns one (height, width, 4) RGBA uint8 buffer and is owned by
exactly one render at a time; nothing here is shared or locked.
"""

import numpy as np

from .colormaps import BACKGROUND, FALLBACK_INNER, FALLBACK_OUTER, INK, INK_ALPHA
from .compute import blend_points, ink_points, stroke_mask
from .coords import to_pixel_arrays, validate_size


class RenderSurface:
    """
    RGBA pixel buffer with the few drawing operations the renderers use.

    Attributes:
        width, height: Raster size in pixels
        pixels: (height, width, 4) uint8 array, row 0 at the top
    """

    def __init__(self, width, height):
        self.width, self.height = validate_size(width, height)
        self.pixels = np.zeros((self.height, self.width, 4), dtype=np.uint8)

    @property
    def aspect(self):
        return self.width / self.height

    def fill(self, rgb=BACKGROUND):
        """Fill the whole surface with an opaque colour."""
        self.pixels[:, :, :3] = rgb
        self.pixels[:, :, 3] = 255

    def put_rgb(self, rgb):
        """Copy an (height, width, 3) image into the surface, fully opaque."""
        self.pixels[:, :, :3] = rgb
        self.pixels[:, :, 3] = 255

    def ink(self, xs, ys, bounds, amount, start=0):
        """
        Darken the pixel under each world point by `amount` grey levels.

        Points before index `start` are skipped (burn-in). Returns the
        number of points that landed on the surface.
        """
        px, py = to_pixel_arrays(xs, ys, bounds, self.width, self.height)
        return ink_points(self.pixels, px, py, start, amount)

    def dots(self, xs, ys, bounds, rgb=INK, alpha=INK_ALPHA, start=0):
        """Composite a translucent 1-pixel dot at each world point."""
        px, py = to_pixel_arrays(xs, ys, bounds, self.width, self.height)
        return blend_points(self.pixels, px, py, start, rgb[0], rgb[1], rgb[2], alpha)

    def stroke(self, xs, ys, bounds, rgb=INK, alpha=INK_ALPHA):
        """
        Stroke one connected path through the world points.

        The whole path is composited once, so self-overlaps do not get
        darker. Returns the number of segments drawn.
        """
        px, py = to_pixel_arrays(xs, ys, bounds, self.width, self.height)
        mask = np.zeros((self.height, self.width), dtype=np.bool_)
        segments = stroke_mask(mask, px, py)
        if segments:
            rgb_f = np.asarray(rgb, dtype=np.float64)
            under = self.pixels[mask, :3].astype(np.float64)
            self.pixels[mask, :3] = np.floor(under * (1 - alpha) + rgb_f * alpha + 0.5).astype(np.uint8)
            self.pixels[mask, 3] = 255
        return segments

    def radial_gradient(self, inner=FALLBACK_INNER, outer=FALLBACK_OUTER):
        """
        Radial gradient from the centre (inner colour) to radius width/2.

        Used as the neutral placeholder when a render fails.
        """
        ys, xs = np.ogrid[:self.height, :self.width]
        cx = self.width / 2
        cy = self.height / 2
        dist = np.sqrt((xs + 0.5 - cx) ** 2 + (ys + 0.5 - cy) ** 2)
        t = np.clip(dist / (self.width / 2), 0, 1)[:, :, np.newaxis]
        inner = np.asarray(inner, dtype=np.float64)
        outer = np.asarray(outer, dtype=np.float64)
        self.pixels[:, :, :3] = np.floor(inner * (1 - t) + outer * t + 0.5).astype(np.uint8)
        self.pixels[:, :, 3] = 255

    def to_rgb(self):
        """Copy of the colour channels as an (height, width, 3) array."""
        return self.pixels[:, :, :3].copy()
