"""
In-memory pixel surface the renderer paints into.

Anything with width, height and set_row(y, pixels) can be rendered to;
ImageSurface is the implementation used by the app and the tests. A render
worker writes rows while the display loop reads snapshots, so all access
to the pixel buffer goes through a lock.
"""

import threading

import numpy as np


class ImageSurface:
    """
    RGBA pixel buffer of shape (height, width, 4), uint8.

    Usage:
        surface = ImageSurface(800, 600)
        surface.set_row(0, row)      # row is (800, 4) uint8
        pixels = surface.snapshot()  # copy, safe to hand to pygame
    """

    def __init__(self, width, height):
        self.lock = threading.Lock()
        self._pixels = np.zeros((height, width, 4), dtype=np.uint8)

    @property
    def width(self):
        with self.lock:
            return self._pixels.shape[1]

    @property
    def height(self):
        with self.lock:
            return self._pixels.shape[0]

    @property
    def size(self):
        with self.lock:
            return self._pixels.shape[1], self._pixels.shape[0]

    def set_row(self, y, pixels):
        """
        Overwrite row y.

        Rows that no longer fit (the surface shrank under a stale render)
        are dropped.
        """
        with self.lock:
            if 0 <= y < self._pixels.shape[0] and len(pixels) == self._pixels.shape[1]:
                self._pixels[y] = pixels

    def fill(self, color):
        with self.lock:
            self._pixels[:] = color

    def resize(self, width, height):
        """Replace the buffer with a blank one of the new size."""
        with self.lock:
            self._pixels = np.zeros((height, width, 4), dtype=np.uint8)

    def snapshot(self):
        """Return a copy of the pixel buffer."""
        with self.lock:
            return self._pixels.copy()
