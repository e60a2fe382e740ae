"""
Host viewer: shows one MathVisual in a pygame window.

Handles:
- Window setup and main loop
- Driving the visibility gate from the pygame clock
- Keyboard (previous / next preset, family filter, reset, quit)
- Mouse-wheel zoom about the pointer for escape-time presets
"""

import logging

import pygame

from .colormaps import BACKGROUND
from .component import MathVisual
from .coords import viewport_to_world, zoom_about
from .presets import default_catalog, renderer_type
from .renderers import render_preset
from .settings import load_settings
from .surface import RenderSurface


logger = logging.getLogger(__name__)


class MathVisualApp:
    """
    Main application class.

    The window plays the role of the host page: it is "visible" from
    the first frame, reports its size to the component and blits the
    surface once the component has rendered.
    """

    # Default configuration
    DEFAULT_WIDTH = 640
    DEFAULT_HEIGHT = 640
    RENDER_DELAY_MS = 25  # Delay before re-rendering after a zoom

    # Zoom factors
    ZOOM_IN_FACTOR = 0.85
    ZOOM_OUT_FACTOR = 1.18

    def __init__(self, index=None, width=None, height=None, settings=None, catalog=None,
                 preset_id=None):
        """
        Initialize the application.

        Args:
            index: Preset index to start on (default: settings start_index)
            width: Window width in pixels (default: settings, then 640)
            height: Window height in pixels (default: settings, then 640)
            settings: Settings dict (default: load_settings())
            catalog: PresetCatalog (default: the packaged one)
            preset_id: Start on this preset, browsing its family

        Raises:
            KeyError if preset_id is not in the catalog
        """
        self.settings = settings if settings is not None else load_settings()
        self.catalog = catalog or default_catalog()
        self.index = index if index is not None else self.settings.get('start_index', 0)
        self.width = width or self.settings.get('window_width') or self.DEFAULT_WIDTH
        self.height = height or self.settings.get('window_height') or self.DEFAULT_HEIGHT
        self.background = tuple(self.settings.get('background', BACKGROUND))

        # Family filter: None browses by index, otherwise self.index is a
        # position within the family
        self.family = None
        if preset_id is not None:
            self._start_on(preset_id)

        # Pygame state (initialized in run())
        self.screen = None
        self.clock = None

        self.visual = None
        self.current_surface = None

        # Zoom state, only used by escape-time presets
        self.base_bounds = None
        self.bounds = None
        self.last_action_time = 0
        self.pending_render = False

        self.running = False

    def _start_on(self, preset_id):
        preset = self.catalog.get(preset_id)
        if preset is None:
            raise KeyError(f"Unknown preset id {preset_id!r}")
        self.family = preset.get('family')
        self.index = self.catalog.filter(family=self.family).index(preset)

    def selected_preset(self):
        """
        The preset to show next, or None to let the visual pick it from
        self.index.
        """
        if self.family is None:
            return None
        matching = self.catalog.filter(family=self.family)
        if not matching:
            return None
        return matching[self.index % len(matching)]

    def cycle_family(self):
        """Move the family filter on: off, then each catalog family in turn."""
        choices = [None] + self.catalog.families()
        position = choices.index(self.family) if self.family in choices else 0
        self.family = choices[(position + 1) % len(choices)]
        self.index = 0
        logger.info("Family filter: %s", self.family or "off")

    def run(self):
        """Run the application main loop."""
        self._init_pygame()
        self._mount(pygame.time.get_ticks())

        self.running = True
        while self.running:
            current_time = pygame.time.get_ticks()

            self._handle_events(current_time)
            self._poll_visual(current_time)
            self._maybe_start_render(current_time)
            self._draw()

            self.clock.tick(60)

        pygame.quit()

    def _init_pygame(self):
        """Initialize pygame and create window."""
        pygame.init()
        self.screen = pygame.display.set_mode((self.width, self.height), pygame.DOUBLEBUF)
        self.clock = pygame.time.Clock()

    def _mount(self, current_time):
        """Replace the visual with a fresh one for self.index."""
        if self.visual is not None:
            self.visual.unmount()
        self.visual = MathVisual(
            self.index, self.width, self.height,
            on_render_complete=self._on_render_complete,
            catalog=self.catalog, settings=self.settings,
            preset=self.selected_preset(),
        )
        self.current_surface = None
        self.base_bounds = self.bounds = None
        self.pending_render = False
        self.visual.mount(current_time)
        self.visual.set_visibility(1.0, current_time)
        self._set_caption("Rendering...")

    def _on_render_complete(self, success):
        if success:
            logger.info("Rendered preset %s", self.visual.preset.get('id'))
            if self.visual.stats.get('renderer') == 'escape_time':
                self.base_bounds = self.bounds = self.visual.stats['bounds']
        else:
            logger.warning("Preset %s failed, showing placeholder", self.visual.preset.get('id'))
        self._set_caption()

    def _set_caption(self, status=None):
        preset = self.visual.preset
        title = f"#{self.index} {preset.get('id', preset.get('family'))}"
        if self.family is not None:
            title += f" [{self.family}]"
        if status:
            title += f" - {status}"
        elif renderer_type(preset) == 'escape_time':
            title += " - Scroll to zoom, R to reset"
        pygame.display.set_caption(title)

    def _handle_events(self, current_time):
        """Process all pending pygame events."""
        for event in pygame.event.get():
            if event.type == pygame.QUIT:
                self.running = False
            elif event.type == pygame.MOUSEWHEEL:
                self._handle_zoom(event, current_time)
            elif event.type == pygame.KEYDOWN:
                self._handle_key(event, current_time)

    def _handle_zoom(self, event, current_time):
        """Handle mouse wheel zoom (escape-time presets only)."""
        if self.bounds is None:
            return

        mx, my = pygame.mouse.get_pos()
        x, y = viewport_to_world(mx, my, self.bounds, self.width, self.height)
        factor = self.ZOOM_IN_FACTOR if event.y > 0 else self.ZOOM_OUT_FACTOR
        self.bounds = zoom_about(self.bounds, x, y, factor)

        self.last_action_time = current_time
        self.pending_render = True

    def _handle_key(self, event, current_time):
        """Handle keyboard input."""
        if event.key == pygame.K_r:
            if self.base_bounds is not None:
                self.bounds = self.base_bounds
                self.last_action_time = current_time
                self.pending_render = True
        elif event.key == pygame.K_RIGHT:
            self.index += 1
            self._mount(current_time)
        elif event.key == pygame.K_LEFT:
            self.index -= 1
            self._mount(current_time)
        elif event.key == pygame.K_f:
            self.cycle_family()
            self._mount(current_time)
        elif event.key == pygame.K_ESCAPE:
            self.running = False

    def _poll_visual(self, current_time):
        if self.visual.poll(current_time):
            self.current_surface = self._to_pygame(self.visual.surface)

    def _maybe_start_render(self, current_time):
        """Re-render the zoomed view once input has settled."""
        if not (self.pending_render and current_time - self.last_action_time > self.RENDER_DELAY_MS):
            return
        self.pending_render = False
        self._set_caption("Computing...")
        try:
            surface = self.render_view()
        except Exception:
            logger.exception("Zoomed render failed, keeping the previous image")
            return
        self.current_surface = self._to_pygame(surface)
        self._set_caption()

    def render_view(self):
        """Render the current preset at self.bounds, on the configured background."""
        surface = RenderSurface(self.width, self.height)
        render_preset(self.visual.preset, surface, bounds=self.bounds,
                      background=self.background)
        return surface

    @staticmethod
    def _to_pygame(surface):
        return pygame.surfarray.make_surface(surface.to_rgb().swapaxes(0, 1))

    def _draw(self):
        """Draw the current frame."""
        self.screen.fill(self.background)
        if self.current_surface is not None:
            self.screen.blit(self.current_surface, (0, 0))
        pygame.display.flip()


def run(index=None, width=None, height=None, preset_id=None):
    """
    Run the viewer.

    Args:
        index: Preset index to show first
        width: Window width
        height: Window height
        preset_id: Preset id to show first (overrides index)
    """
    logging.basicConfig(level=logging.INFO,
                        format='%(asctime)s %(name)s %(levelname)s: %(message)s')
    app = MathVisualApp(index, width, height, preset_id=preset_id)
    try:
        app.run()
    except KeyboardInterrupt:
        pygame.quit()

