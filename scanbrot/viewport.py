"""Complex-plane viewport geometry."""

import math
from collections import namedtuple
from dataclasses import dataclass, replace


Point = namedtuple('Point', ['x', 'y'])


@dataclass(frozen=True)
class ComplexRect:
    """
    Visible region of the complex plane.

    No ordering between the corners is assumed: the default rect has the
    imaginary axis pointing down the screen, so y_range is negative.
    """

    top_left: Point
    bottom_right: Point

    @property
    def x_range(self):
        return self.bottom_right.x - self.top_left.x

    @property
    def y_range(self):
        return self.bottom_right.y - self.top_left.y

    @property
    def center(self):
        return Point((self.top_left.x + self.bottom_right.x) / 2,
                     (self.top_left.y + self.bottom_right.y) / 2)

    @classmethod
    def from_corners(cls, x0, y0, x1, y1):
        return cls(Point(float(x0), float(y0)), Point(float(x1), float(y1)))


DEFAULT_RECT = ComplexRect.from_corners(-2.5, 1.25, 1.0, -1.25)


def iteration_budget(rect):
    """
    Iteration count for a view, growing as the view shrinks.

    Uses the smaller of the two plane extents so deep zooms get more
    iterations without any user setting.
    """
    f = math.sqrt(0.001 + 2.0 * min(abs(rect.x_range), abs(rect.y_range)))
    return int(math.floor(223.0 / f))


@dataclass(frozen=True)
class ViewportModel:
    """
    A ComplexRect mapped onto a width x height pixel surface.

    Attributes:
        rect: Visible region of the plane
        width, height: Surface dimensions in pixels
        zoom: (x, y) zoom scalars kept in step with rect changes
    """

    rect: ComplexRect
    width: int
    height: int
    zoom: tuple = (1.0, 1.0)

    @property
    def dx(self):
        """Plane delta per pixel column. The 0.5 centres samples in the pixel."""
        return self.rect.x_range / (0.5 + (self.width - 1))

    @property
    def dy(self):
        """Plane delta per pixel row."""
        return self.rect.y_range / (0.5 + (self.height - 1))

    def pixel_to_complex(self, px, py):
        """Convert a pixel position to (cr, ci)."""
        return (self.rect.top_left.x + px * self.dx,
                self.rect.top_left.y + py * self.dy)

    def adjust_aspect_ratio(self):
        """
        Return a viewport whose pixels are square in plane units.

        The narrower plane extent is widened about the rect centre and the
        matching zoom component is scaled by the same factor.
        """
        ratio = abs(self.rect.x_range) / abs(self.rect.y_range)
        sratio = self.width / self.height
        cx, cy = self.rect.center
        tl, br = self.rect.top_left, self.rect.bottom_right

        if sratio > ratio:
            xf = sratio / ratio
            rect = ComplexRect(Point(cx + (tl.x - cx) * xf, tl.y),
                               Point(cx + (br.x - cx) * xf, br.y))
            zoom = (self.zoom[0] * xf, self.zoom[1])
        else:
            yf = ratio / sratio
            rect = ComplexRect(Point(tl.x, cy + (tl.y - cy) * yf),
                               Point(br.x, cy + (br.y - cy) * yf))
            zoom = (self.zoom[0], self.zoom[1] * yf)
        return replace(self, rect=rect, zoom=zoom)

    def zoom_at(self, px, py, factor):
        """
        Scale the view by factor, keeping the point under (px, py) fixed.

        Args:
            px, py: Pixel position to zoom around
            factor: < 1 zooms in, > 1 zooms out
        """
        cx, cy = self.pixel_to_complex(px, py)
        tl, br = self.rect.top_left, self.rect.bottom_right
        rect = ComplexRect(Point(cx + (tl.x - cx) * factor, cy + (tl.y - cy) * factor),
                           Point(cx + (br.x - cx) * factor, cy + (br.y - cy) * factor))
        zoom = (self.zoom[0] / factor, self.zoom[1] / factor)
        return replace(self, rect=rect, zoom=zoom)

    def pan(self, dpx, dpy):
        """Shift the view by a pixel offset; positive moves the content left/up."""
        ox = dpx * self.dx
        oy = dpy * self.dy
        tl, br = self.rect.top_left, self.rect.bottom_right
        rect = ComplexRect(Point(tl.x + ox, tl.y + oy), Point(br.x + ox, br.y + oy))
        return replace(self, rect=rect)

    def resized(self, width, height):
        return replace(self, width=width, height=height)

    @property
    def iterations(self):
        return iteration_budget(self.rect)
