"""
Main application module for the visualizer.

Contains the MandelbrotApp class which handles:
- Window setup and main loop
- User input (zoom, pan, resize, keyboard)
- Turning input into render requests for the RenderContext
- Showing the partially rendered surface and render speed
"""

import logging

import pygame

from .colormaps import get_colormap, list_colormap_names
from .compute import get_fractal, list_fractal_names, warmup_jit
from .config import load_settings
from .progress import LogProgress, format_metric
from .renderer import RenderContext, RenderRequest
from .surface import ImageSurface
from .viewport import DEFAULT_RECT, ViewportModel


logger = logging.getLogger(__name__)


class MandelbrotApp:
    """
    Main application class for the visualizer.

    Handles the pygame window and event loop; all pixel work happens on the
    RenderContext worker, which paints into an ImageSurface that this class
    blits every frame.
    """

    CAPTION = "Mandelbrot Set - Scroll to zoom, drag to pan, R to reset"

    def __init__(self, settings=None):
        """
        Initialize the application.

        Args:
            settings: dict as returned by config.load_settings()
        """
        self.settings = settings or load_settings()
        width = self.settings['width']
        height = self.settings['height']

        self.viewport = ViewportModel(DEFAULT_RECT, width, height)
        self.palette = self.settings['palette']
        self.fractal = self.settings['fractal']
        self.samples = self.settings['samples']

        self.surface = ImageSurface(width, height)
        self.context = RenderContext(
            self.surface,
            progress=self._on_progress,
            update_interval=self.settings['update_interval_ms'] / 1000.0,
        )

        # Pygame state (initialized in run())
        self.screen = None
        self.clock = None

        # Input state
        self.dragging = False
        self.drag_start = None
        self.drag_offset = (0, 0)

        # Latest progress report: (elapsed_seconds, throughput, unit)
        self.last_progress = None

        self.running = False

    def run(self):
        """Run the application main loop."""
        self._init_pygame()
        warmup_jit()
        self.request_render()

        self.running = True
        while self.running:
            self._handle_events()
            self._draw()
            self.clock.tick(60)

        self.context.cancel()
        self.context.wait(timeout=1.0)
        pygame.quit()

    def _init_pygame(self):
        """Initialize pygame and create window."""
        pygame.init()
        self.screen = pygame.display.set_mode(
            (self.viewport.width, self.viewport.height),
            pygame.RESIZABLE
        )
        pygame.display.set_caption(self.CAPTION)
        self.clock = pygame.time.Clock()

    def build_request(self):
        """Snapshot the current view and settings into a RenderRequest."""
        escape_fn = get_fractal(self.fractal, self.settings['julia_constant'])
        return RenderRequest.create(
            self.viewport.rect,
            self.viewport.width,
            self.viewport.height,
            color_fn=get_colormap(self.palette),
            escape_fn=escape_fn,
            samples=self.samples,
            escape_radius=self.settings['escape_radius'],
        )

    def request_render(self):
        generation = self.context.request_render(self.build_request())
        logger.debug("Requested render %d (%s, %s, %d samples)",
                     generation, self.fractal, self.palette, self.samples)

    def _on_progress(self, elapsed_seconds, throughput, unit):
        # Called from the render thread; only store the report here
        self.last_progress = (elapsed_seconds, throughput, unit)

    def _handle_events(self):
        """Process all pending pygame events."""
        for event in pygame.event.get():
            if event.type == pygame.QUIT:
                self.running = False
            elif event.type == pygame.MOUSEWHEEL:
                self._handle_zoom(event)
            elif event.type == pygame.MOUSEBUTTONDOWN and event.button == 1:
                self.dragging = True
                self.drag_start = event.pos
                self.drag_offset = (0, 0)
            elif event.type == pygame.MOUSEMOTION and self.dragging:
                self.drag_offset = (event.pos[0] - self.drag_start[0],
                                    event.pos[1] - self.drag_start[1])
            elif event.type == pygame.MOUSEBUTTONUP and event.button == 1:
                self._handle_drag_end()
            elif event.type == pygame.VIDEORESIZE:
                self._handle_resize(event.w, event.h)
            elif event.type == pygame.KEYDOWN:
                self._handle_key(event)

    def _handle_zoom(self, event):
        """Handle mouse wheel zoom."""
        mx, my = pygame.mouse.get_pos()
        if event.y > 0:
            factor = self.settings['zoom_in_factor']
        else:
            factor = self.settings['zoom_out_factor']
        self.viewport = self.viewport.zoom_at(mx, my, factor)
        self.request_render()

    def _handle_drag_end(self):
        """Commit a drag as a pan."""
        if not self.dragging:
            return
        self.dragging = False
        dpx, dpy = self.drag_offset
        self.drag_offset = (0, 0)
        if dpx or dpy:
            self.viewport = self.viewport.pan(-dpx, -dpy)
            self.request_render()

    def _handle_resize(self, width, height):
        """Resize the surface; a render in flight stops on its next row."""
        width = max(1, width)
        height = max(1, height)
        self.screen = pygame.display.set_mode((width, height), pygame.RESIZABLE)
        self.surface.resize(width, height)
        self.viewport = self.viewport.resized(width, height)
        self.request_render()

    def _handle_key(self, event):
        """Handle keyboard input."""
        if event.key == pygame.K_ESCAPE:
            self.running = False
        elif event.key == pygame.K_r:
            # Reset to default view
            self.viewport = ViewportModel(DEFAULT_RECT, self.viewport.width,
                                          self.viewport.height)
            self.request_render()
        elif event.key == pygame.K_p:
            self.palette = _cycle(list_colormap_names(), self.palette)
            self.request_render()
        elif event.key == pygame.K_f:
            self.fractal = _cycle(list_fractal_names(), self.fractal)
            self.request_render()
        elif event.key in (pygame.K_PLUS, pygame.K_EQUALS, pygame.K_KP_PLUS):
            self.samples = min(self.samples * 2, self.settings['max_samples'])
            self.request_render()
        elif event.key in (pygame.K_MINUS, pygame.K_KP_MINUS):
            self.samples = max(self.samples // 2, 1)
            self.request_render()

    def _draw(self):
        """Draw the current frame."""
        pixels = self.surface.snapshot()
        image = pygame.surfarray.make_surface(pixels[:, :, :3].swapaxes(0, 1))

        self.screen.fill((0, 0, 0))
        self.screen.blit(image, self.drag_offset)
        pygame.display.flip()

        self._update_caption()

    def _update_caption(self):
        if self.last_progress is None:
            return
        elapsed, throughput, unit = self.last_progress
        state = "Rendering" if self.context.running else "Rendered"
        pygame.display.set_caption(
            "%s %s/%s %.1fs, %s pixels/%s" % (
                state, self.fractal, self.palette, elapsed,
                format_metric(throughput), unit)
        )


def _cycle(names, current):
    """Return the name after current, wrapping around."""
    if current not in names:
        return names[0]
    return names[(names.index(current) + 1) % len(names)]


def render_headless(settings=None):
    """
    Render the default view once without opening a window.

    Progress is written to the log. Useful for timing the renderer.

    Returns:
        The RenderRun that finished
    """
    settings = settings or load_settings()
    width = settings['width']
    height = settings['height']

    surface = ImageSurface(width, height)
    context = RenderContext(surface, progress=LogProgress(logging.INFO),
                            update_interval=settings['update_interval_ms'] / 1000.0)
    request = RenderRequest.create(
        DEFAULT_RECT, width, height,
        color_fn=get_colormap(settings['palette']),
        escape_fn=get_fractal(settings['fractal'], settings['julia_constant']),
        samples=settings['samples'],
        escape_radius=settings['escape_radius'],
    )
    warmup_jit()
    context.request_render(request)
    context.wait()
    run = context.last_run
    logger.info("Finished %dx%d render: %s, %d pixels",
                width, height, run.state.value, run.pixels)
    return run


def run(settings=None):
    """
    Run the visualizer.

    Args:
        settings: dict as returned by config.load_settings()
    """
    app = MandelbrotApp(settings)
    try:
        app.run()
    except KeyboardInterrupt:
        pygame.quit()
