"""
Exception types raised by the rendering core.

Algorithms raise these and never recover on their own; the MathVisual
component is the single boundary that catches them (see component.py).
"""


class MathVisualError(Exception):
    """Base class for all errors raised by mathvisual."""


class DegenerateBoundsError(MathVisualError, ValueError):
    """World window with zero (or non-finite) width or height."""


class InvalidTargetError(MathVisualError, ValueError):
    """Raster target too small to map coordinates onto."""


class UnknownRendererError(MathVisualError, KeyError):
    """Preset asks for a renderer type that is not registered."""


class EmptyCatalogError(MathVisualError):
    """Preset catalog has no entries to select from."""
