"""
Incremental Mandelbrot Set Renderer

Renders the Mandelbrot set and related escape-time fractals one scanline
at a time onto a pixel surface, cancelling in-flight renders as soon as
the view changes. Uses Numba for the JIT-compiled escape-time loop and
Pygame for the interactive window.

Quick Start:
    from scanbrot import run
    run()

Or from command line:
    python -m scanbrot

Package Structure:
    - compute.py: JIT-compiled escape-time evaluators
    - colormaps.py: Palettes mapping escape results to RGBA
    - viewport.py: Complex-plane rect, pixel deltas, zoom and pan
    - renderer.py: Cancellable scanline renderer and render worker
    - surface.py: Thread-safe in-memory pixel surface
    - progress.py: Throughput measurement and formatting
    - config.py: settings.json loading
    - app.py: Main application and event loop

Controls:
    - Scroll: Zoom in/out at mouse position
    - Drag: Pan around
    - R: Reset to default view
    - P / F: Next palette / next fractal
    - + / -: More / fewer samples per pixel
    - ESC: Quit
"""

from .app import run, render_headless, MandelbrotApp
from .colormaps import COLORMAPS, get_colormap, list_colormap_names
from .compute import FRACTALS, get_fractal, list_fractal_names, mandelbrot_escape
from .renderer import RenderContext, RenderRequest, RenderRun, RenderState
from .surface import ImageSurface
from .viewport import ComplexRect, DEFAULT_RECT, ViewportModel

__version__ = "1.0.0"
__all__ = [
    "run",
    "render_headless",
    "MandelbrotApp",
    "COLORMAPS",
    "get_colormap",
    "list_colormap_names",
    "FRACTALS",
    "get_fractal",
    "list_fractal_names",
    "mandelbrot_escape",
    "RenderContext",
    "RenderRequest",
    "RenderRun",
    "RenderState",
    "ImageSurface",
    "ComplexRect",
    "DEFAULT_RECT",
    "ViewportModel",
]
