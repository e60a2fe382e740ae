"""
The embeddable visual: a one-shot render guarded by a visibility gate.

The host owns time, layout and visibility; it feeds them in as events
and calls poll() from its frame loop:

    visual = MathVisual(index=42, width=640, height=640)
    visual.mount()
    visual.set_visibility(1.0, now)
    ...
    if visual.poll(now):          # True on the frame the render ran
        blit(visual.surface.to_rgb())
"""

import enum
import logging
import math

from .colormaps import BACKGROUND
from .presets import get_preset_for_quote
from .renderers import render_preset
from .surface import RenderSurface


logger = logging.getLogger(__name__)


class GateState(enum.Enum):
    UNMOUNTED = 'unmounted'
    MOUNTED = 'mounted'        # waiting for visibility / enabled / size
    PENDING = 'pending'        # eligible, waiting out the delay
    RENDERED = 'rendered'      # terminal


class VisibilityGate:
    """
    Decides when the render may run: at most once, after the host has been
    visible, enabled and sized for `delay_ms` without interruption.

    Any event that breaks eligibility while PENDING cancels the timer.
    Once RENDERED every event is ignored.
    """

    DEFAULT_DELAY_MS = 200
    DEFAULT_THRESHOLD = 0.1
    MIN_SIZE = 2

    def __init__(self, delay_ms=None, threshold=None):
        self.delay_ms = self.DEFAULT_DELAY_MS if delay_ms is None else delay_ms
        self.threshold = self.DEFAULT_THRESHOLD if threshold is None else threshold

        self.state = GateState.UNMOUNTED
        self.visible = False
        self.enabled = True
        self.width = 0
        self.height = 0
        self.deadline = None

    @property
    def eligible(self):
        return (self.state in (GateState.MOUNTED, GateState.PENDING)
                and self.visible
                and self.enabled
                and self.width >= self.MIN_SIZE
                and self.height >= self.MIN_SIZE)

    def _update(self, now):
        if self.state == GateState.MOUNTED and self.eligible:
            self.state = GateState.PENDING
            self.deadline = now + self.delay_ms
            logger.debug("Render scheduled for t=%s ms", self.deadline)
        elif self.state == GateState.PENDING and not self.eligible:
            self.state = GateState.MOUNTED
            self.deadline = None
            logger.debug("Pending render cancelled at t=%s ms", now)

    def mount(self, now=0):
        if self.state == GateState.UNMOUNTED:
            self.state = GateState.MOUNTED
            self._update(now)

    def unmount(self):
        if self.state == GateState.RENDERED:
            return
        if self.state == GateState.PENDING:
            logger.debug("Pending render cancelled by unmount")
        self.state = GateState.UNMOUNTED
        self.deadline = None

    def set_visibility(self, ratio, now):
        """Intersection ratio of the host with the viewport (0..1)."""
        if self.state == GateState.RENDERED:
            return
        self.visible = ratio > 0 and ratio >= self.threshold
        self._update(now)

    def set_enabled(self, flag, now):
        if self.state == GateState.RENDERED:
            return
        self.enabled = bool(flag)
        self._update(now)

    def set_size(self, width, height, now):
        if self.state == GateState.RENDERED:
            return
        self.width, self.height = width, height
        self._update(now)

    def poll(self, now):
        """
        Advance the clock. Returns True exactly once: on the first poll at
        or after the deadline of an uninterrupted pending period.
        """
        if self.state == GateState.PENDING and now >= self.deadline:
            self.state = GateState.RENDERED
            self.deadline = None
            return True
        return False


class MathVisual:
    """
    One embedded mathematical image.

    The preset is resolved from `index` once, at construction, unless
    one is passed in as `preset`. The render runs inside poll() when the
    gate fires; it either succeeds or paints a neutral gradient, and in
    both cases reports through `on_render_complete(success)`. Nothing
    raised while building the surface or rendering escapes; if even the
    surface can't be built, `surface` stays None.

    Attributes:
        preset: The catalog entry this instance draws
        surface: RenderSurface holding the result (None before the render)
        stats: Renderer stats after a successful render
        error: The exception caught by a failed render
    """

    def __init__(self, index, width, height, enabled=True, on_render_complete=None,
                 catalog=None, rng=None, settings=None, preset=None):
        settings = settings or {}
        self.index = index
        self.preset = preset if preset is not None else get_preset_for_quote(index, catalog)
        self.on_render_complete = on_render_complete
        self.rng = rng
        self.background = tuple(settings.get('background', BACKGROUND))

        self.gate = VisibilityGate(
            delay_ms=settings.get('render_delay_ms'),
            threshold=settings.get('visibility_threshold'),
        )
        self.gate.width, self.gate.height = width, height
        self.gate.enabled = bool(enabled)

        self.surface = None
        self.stats = None
        self.error = None
        self.success = None

    @property
    def rendered(self):
        return self.gate.state == GateState.RENDERED

    def mount(self, now=0):
        self.gate.mount(now)

    def unmount(self):
        self.gate.unmount()

    def set_visibility(self, ratio, now):
        self.gate.set_visibility(ratio, now)

    def set_enabled(self, flag, now):
        self.gate.set_enabled(flag, now)

    def set_size(self, width, height, now):
        self.gate.set_size(width, height, now)

    def poll(self, now):
        """Run the render if the gate fires. Returns True if it ran."""
        if not self.gate.poll(now):
            return False
        self._render()
        return True

    def _render(self):
        self.surface = None
        try:
            # Layout sizes may be fractional; the raster takes whole pixels
            self.surface = RenderSurface(int(math.floor(self.gate.width)),
                                         int(math.floor(self.gate.height)))
            self.stats = render_preset(self.preset, self.surface, rng=self.rng,
                                       background=self.background)
            self.success = True
        except Exception as e:
            logger.exception("Render of preset %r failed", self.preset.get('id'))
            self.error = e
            self.success = False
            if self.surface is not None:
                self.surface.radial_gradient()

        if self.on_render_complete is not None:
            self.on_render_complete(self.success)
