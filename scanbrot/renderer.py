"""
Incremental, cancellable scanline renderer.

The RenderContext class handles:
- Background computation on a worker thread so the UI stays responsive
- A single-slot pending request: bursts of requests collapse to the latest
- A generation counter that tells in-flight renders they are stale
- Progress and throughput reporting while a render runs

A RenderRun paints one RenderRequest onto a surface, one full row at a
time, top to bottom. Before every row it compares its own generation with
the context's and the surface size with the size it started with; if
either changed it stops where it is. Cancellation therefore only ever
happens between rows, never mid-row.
"""

import enum
import logging
import threading
import time
from dataclasses import dataclass
from typing import Callable, Optional

import numpy as np

from .colormaps import clamp_to_bytes, get_default_colormap
from .compute import get_row_kernel, mandelbrot_escape
from .progress import measure_throughput
from .viewport import ComplexRect, ViewportModel, iteration_budget


logger = logging.getLogger(__name__)

ESCAPE_RADIUS = 10.0
UPDATE_INTERVAL = 0.2  # seconds between progress reports / yields
PROGRESS_COLOR = (255, 59, 3, 255)


class RenderState(enum.Enum):
    IDLE = 'idle'
    RUNNING = 'running'
    COMPLETED = 'completed'
    SUPERSEDED = 'superseded'
    STALE_GEOMETRY = 'stale_geometry'


@dataclass(frozen=True)
class RenderRequest:
    """Everything a render needs, captured when the render is triggered."""

    rect: ComplexRect
    surface_width: int
    surface_height: int
    color_fn: Callable
    escape_fn: Callable
    iterations: int
    escape_radius_squared: float
    samples: int = 1
    seed: Optional[int] = None

    @classmethod
    def create(cls, rect, width, height, color_fn=None, escape_fn=None,
               samples=1, escape_radius=ESCAPE_RADIUS, iterations=None, seed=None):
        """
        Build a request, deriving the iteration budget from the rect.

        Args:
            rect: ComplexRect to render
            width, height: Surface dimensions at trigger time
            color_fn: Palette picker (default HSV1)
            escape_fn: Escape-time evaluator (default Mandelbrot)
            samples: Jittered samples per pixel, 1 disables supersampling
            escape_radius: Bailout radius (squared before use)
            iterations: Override for the zoom-derived iteration budget
            seed: Seed for the supersampling jitter (None = unpredictable)
        """
        if iterations is None:
            iterations = iteration_budget(rect)
        return cls(
            rect=rect,
            surface_width=width,
            surface_height=height,
            color_fn=color_fn or get_default_colormap(),
            escape_fn=escape_fn or mandelbrot_escape,
            iterations=iterations,
            escape_radius_squared=float(escape_radius) ** 2,
            samples=max(1, int(samples)),
            seed=seed,
        )

    @property
    def viewport(self):
        return ViewportModel(self.rect, self.surface_width, self.surface_height)


class RenderRun:
    """
    One pass of the scanline loop for a single request.

    Usage:
        run = RenderRun(context, request, generation)
        run.run()              # blocking, yields the GIL at progress points

        # or drive it cooperatively:
        for row in run.scanlines():
            handle_other_work()

    Attributes:
        state: RenderState of this run
        rows_written: Number of fully computed rows written so far
        pixels: Pixels written so far
    """

    def __init__(self, context, request, generation, progress=None,
                 update_interval=UPDATE_INTERVAL, clock=time.monotonic):
        self.context = context
        self.surface = context.surface
        self.request = request
        self.generation = generation
        self.progress = progress
        self.update_interval = update_interval
        self.clock = clock

        self.state = RenderState.IDLE
        self.rows_written = 0
        self.pixels = 0

        self._viewport = request.viewport
        self._rng = np.random.default_rng(request.seed)
        self._row = np.zeros((request.surface_width, 4), dtype=np.float64)
        self._marker = np.tile(np.array(PROGRESS_COLOR, dtype=np.uint8),
                               (request.surface_width, 1))

        # compiled whole-row evaluation for built-in fractals
        self._fill_row = get_row_kernel(request.escape_fn)
        self._n = np.zeros(request.surface_width, dtype=np.int64)
        self._tr = np.zeros(request.surface_width, dtype=np.float64)
        self._ti = np.zeros(request.surface_width, dtype=np.float64)

    def _check_stale(self):
        """Move to a terminal state and return True if this run is stale."""
        if self.context.generation != self.generation:
            self.state = RenderState.SUPERSEDED
        elif (self.surface.width != self.request.surface_width or
              self.surface.height != self.request.surface_height):
            self.state = RenderState.STALE_GEOMETRY
        else:
            return False
        logger.debug("Render %d stopped after %d rows (%s)",
                     self.generation, self.rows_written, self.state.value)
        return True

    def draw_line(self, ci):
        """Compute one row of colors at imaginary part ci."""
        request = self.request
        pick = request.color_fn
        steps = request.iterations
        dx = self._viewport.dx
        cr = request.rect.top_left.x

        if self._fill_row is not None:
            self._fill_row(cr, dx, ci, request.escape_radius_squared, steps,
                           self._n, self._tr, self._ti)
            results = zip(self._n.tolist(), self._tr.tolist(), self._ti.tolist())
        else:
            escape = request.escape_fn
            radius2 = request.escape_radius_squared
            results = []
            for _ in range(request.surface_width):
                results.append(escape(cr, ci, radius2, steps))
                cr += dx
            cr = request.rect.top_left.x

        for x, (n, tr, ti) in enumerate(results):
            self._row[x] = pick(steps, n, tr, ti, cr, ci)
            cr += dx
        return self._row

    def draw_line_supersampled(self, ci):
        """
        Compute one row, averaging several jittered samples per pixel.

        Each sample is moved back by up to half a pixel in each direction.
        The result varies between runs unless the request carries a seed.
        """
        request = self.request
        escape = request.escape_fn
        pick = request.color_fn
        steps = request.iterations
        radius2 = request.escape_radius_squared
        samples = request.samples
        dx = self._viewport.dx
        dy = self._viewport.dy
        rng = self._rng

        cr = request.rect.top_left.x
        for x in range(request.surface_width):
            color = np.zeros(4, dtype=np.float64)
            for _ in range(samples):
                sr = cr - rng.random() * dx / 2
                si = ci - rng.random() * dy / 2
                n, tr, ti = escape(sr, si, radius2, steps)
                color += pick(steps, n, tr, ti, sr, si)
            self._row[x] = color / samples
            cr += dx
        return self._row

    def scanlines(self):
        """
        Generator that renders the request row by row.

        Yields the index of the last written row each time a progress
        report is due (at most once per update_interval); between yields
        rows are computed back to back. Returns silently when the run goes
        stale.
        """
        request = self.request
        surface = self.surface
        width = request.surface_width
        height = request.surface_height
        draw_line = self.draw_line_supersampled if request.samples > 1 else self.draw_line
        dy = self._viewport.dy

        self.state = RenderState.RUNNING
        logger.debug("Render %d started: %dx%d, %d iterations, %d samples",
                     self.generation, width, height, request.iterations, request.samples)

        start = self.clock()
        last_update = start
        now = start
        ci = request.rect.top_left.y

        for y in range(height):
            if self._check_stale():
                return

            pixels = clamp_to_bytes(draw_line(ci))
            pixels[:, 3] = 255
            surface.set_row(y, pixels)
            ci += dy
            self.rows_written += 1
            self.pixels += width

            now = self.clock()
            if now - last_update >= self.update_interval:
                # show where we're rendering
                if y + 1 < height:
                    surface.set_row(y + 1, self._marker)
                self._report(now - start)
                last_update = now
                yield y

        self.state = RenderState.COMPLETED
        self._report(now - start)
        logger.info("Render %d completed: %dx%d in %.2fs",
                    self.generation, width, height, now - start)

    def _report(self, elapsed):
        if self.progress is None:
            return
        throughput, unit = measure_throughput(self.pixels, elapsed)
        self.progress(elapsed, throughput, unit)

    def run(self):
        """Render to completion or staleness. Returns the final state."""
        for _ in self.scanlines():
            time.sleep(0)  # let other threads in between rows
        return self.state


class RenderContext:
    """
    Owns the surface, the generation counter and the render worker.

    Usage:
        context = RenderContext(ImageSurface(800, 600))
        context.request_render(RenderRequest.create(rect, 800, 600))

        # In your game loop:
        pixels = context.surface.snapshot()

    At most one render executes at a time. A request made while a render
    is running bumps the generation, which makes the running render stop at
    its next row, and waits in the pending slot; a later request simply
    replaces it.

    Attributes:
        surface: Pixel surface every render writes to
        progress: Optional progress sink passed to each run
        last_run: Most recently started RenderRun
    """

    def __init__(self, surface, progress=None, update_interval=UPDATE_INTERVAL,
                 clock=time.monotonic):
        self.surface = surface
        self.progress = progress
        self.update_interval = update_interval
        self.clock = clock
        self.last_run = None

        self.lock = threading.Lock()
        self._generation = 0
        self._running = False
        self._pending = None
        self._thread = None

    @property
    def generation(self):
        with self.lock:
            return self._generation

    @property
    def running(self):
        with self.lock:
            return self._running

    def request_render(self, request):
        """
        Trigger a render of request.

        Returns:
            The generation assigned to this request
        """
        with self.lock:
            self._generation += 1
            self._pending = request
            if not self._running:
                self._running = True
                self._thread = threading.Thread(target=self._render_thread,
                                                name="scanbrot-render")
                self._thread.daemon = True
                self._thread.start()
            return self._generation

    def cancel(self):
        """Stop the running render at its next row and drop any pending one."""
        with self.lock:
            self._generation += 1
            self._pending = None

    def wait(self, timeout=None):
        """
        Block until no render is running.

        Returns:
            True if the worker finished, False on timeout
        """
        while True:
            with self.lock:
                thread = self._thread
            if thread is None:
                return True
            thread.join(timeout)
            if thread.is_alive():
                return False
            with self.lock:
                if self._thread is thread or not self._running:
                    return True

    def _render_thread(self):
        """Background thread: keep rendering the newest request until none is left."""
        while True:
            with self.lock:
                request = self._pending
                self._pending = None
                generation = self._generation
                if request is None:
                    self._running = False
                    break

            run = RenderRun(self, request, generation, self.progress,
                            self.update_interval, self.clock)
            self.last_run = run
            try:
                run.run()
            except Exception:
                logger.exception("Render %d failed", generation)
                with self.lock:
                    self._running = False
                    self._pending = None
                raise
