"""
Color mapping functions for escape-time results.

Each palette is a plain function

    pick(steps, n, tr, ti, cr=0.0, ci=0.0) -> (r, g, b, a)

that turns an evaluator result into an RGBA color. Points that never
escaped (n == steps) get INTERIOR_COLOR; escaped points go through
smooth_color() first so neighbouring iteration counts blend instead of
forming hard bands. Channel values are floats and may fall outside
[0, 255]; clamp_to_bytes() folds them into a uint8 row the same way a
canvas clamped byte array would.

To add a new palette:
1. Define a pick_color_xxx() function with the signature above
2. Add it to the COLORMAPS dictionary at the bottom of this file
"""

import math

import numpy as np


INTERIOR_COLOR = (0, 0, 0, 255)

# Default view extents, used by the gradient palette to blend by position
MANDELBROT_X_OFFSET = 2.5
MANDELBROT_Y_OFFSET = 1.25
MANDELBROT_X_RANGE = 3.5
MANDELBROT_Y_RANGE = 2.5

# Constants for smooth_color
LOG_BASE = 1.0 / math.log(2.0)
LOG_HALF_BASE = math.log(0.5) * LOG_BASE


def smooth_color(steps, n, tr, ti):
    """
    Continuous escape index for a point that escaped after n iterations.

    The textbook form is 1 + n - log(log(|Z|)) / log(2); with |Z|^2 = Tr + Ti
    it simplifies to the expression below. Requires tr + ti > 1, which holds
    for any escape radius above 1. Overflowed or degenerate magnitudes
    give NaN, which clamp_to_bytes() turns into 0.
    """
    magnitude = tr + ti
    if not 1.0 < magnitude < math.inf:
        return math.nan
    return 5 + n - LOG_HALF_BASE - math.log(math.log(magnitude)) * LOG_BASE


def hsv_to_rgb(h, s, v):
    """
    Convert hue-saturation-value to RGB.

    Args:
        h: Hue in degrees, [0, 360)
        s: Saturation, [0.0, 1.0]
        v: Value, clamped to at most 1.0

    Returns:
        [r, g, b] as floats scaled to [0, 255]. Hues outside [0, 360)
        fall through to a gray of v - v*s.
    """
    if v > 1.0:
        v = 1.0
    hp = h / 60.0
    c = v * s
    x = c * (1 - abs(math.fmod(hp, 2) - 1))
    rgb = [0.0, 0.0, 0.0]

    if 0 <= hp < 1:
        rgb = [c, x, 0.0]
    elif 1 <= hp < 2:
        rgb = [x, c, 0.0]
    elif 2 <= hp < 3:
        rgb = [0.0, c, x]
    elif 3 <= hp < 4:
        rgb = [0.0, x, c]
    elif 4 <= hp < 5:
        rgb = [x, 0.0, c]
    elif 5 <= hp < 6:
        rgb = [c, 0.0, x]

    m = v - c
    return [(channel + m) * 255 for channel in rgb]


def pick_color_hsv1(steps, n, tr, ti, cr=0.0, ci=0.0):
    """Full-brightness hue sweep."""
    if n == steps:  # converged?
        return INTERIOR_COLOR

    v = smooth_color(steps, n, tr, ti)
    r, g, b = hsv_to_rgb(360.0 * v / steps, 1.0, 1.0)
    return (r, g, b, 255)


def pick_color_hsv2(steps, n, tr, ti, cr=0.0, ci=0.0):
    """Hue sweep that fades in from black near the outer bands."""
    if n == steps:
        return INTERIOR_COLOR

    v = smooth_color(steps, n, tr, ti)
    r, g, b = hsv_to_rgb(360.0 * v / steps, 1.0, 10.0 * v / steps)
    return (r, g, b, 255)


def pick_color_hsv3(steps, n, tr, ti, cr=0.0, ci=0.0):
    """Same as HSV2 with red and blue swapped."""
    if n == steps:
        return INTERIOR_COLOR

    v = smooth_color(steps, n, tr, ti)
    r, g, b = hsv_to_rgb(360.0 * v / steps, 1.0, 10.0 * v / steps)
    return (b, g, r, 255)


def pick_color_hsv1_gradient(steps, n, tr, ti, cr=0.0, ci=0.0):
    """
    HSV2 blended across the plane by the pixel position.

    Red and blue trade places along the real axis, green and blue along the
    imaginary axis. Each channel update sees the previous ones, so the order
    of the four assignments matters. Over-bright pixels are dimmed.
    """
    if n == steps:
        return INTERIOR_COLOR

    v = smooth_color(steps, n, tr, ti)
    c = hsv_to_rgb(360.0 * v / steps, 1.0, 10.0 * v / steps)

    # gradient of background pixels along the real axis
    x_near = (cr + MANDELBROT_X_OFFSET) / MANDELBROT_X_RANGE
    x_far = (MANDELBROT_X_RANGE - cr - MANDELBROT_X_OFFSET) / MANDELBROT_X_RANGE
    c[0] = c[0] * x_near + c[2] * x_far
    c[2] = c[2] * x_near + c[0] * x_far

    # gradient of intensely colored pixels along the imaginary axis
    y_near = (ci + MANDELBROT_Y_OFFSET) / MANDELBROT_Y_RANGE
    y_far = (MANDELBROT_Y_RANGE - ci - MANDELBROT_Y_OFFSET) / MANDELBROT_Y_RANGE
    c[1] = c[1] * y_near + c[2] * y_far
    c[2] = c[2] * (ci + MANDELBROT_X_OFFSET) / MANDELBROT_X_RANGE + c[1] * y_far

    if c[0] + c[1] + c[2] > 500:
        c = [channel * 0.6 for channel in c]

    return (c[0], c[1], c[2], 255)


def pick_color_grayscale(steps, n, tr, ti, cr=0.0, ci=0.0):
    """Linear gray ramp that saturates halfway through the iteration budget."""
    if n == steps:
        return INTERIOR_COLOR

    v = smooth_color(steps, n, tr, ti)
    v = min(np.floor(512.0 * v / steps), 255.0)
    return (v, v, v, 255)


def pick_color_grayscale2(steps, n, tr, ti, cr=0.0, ci=0.0):
    """Grayscale that also shades the interior by the final magnitude."""
    if n == steps:
        c = 255 - math.fmod(np.floor(255.0 * math.sqrt(tr + ti)), 255)
        c = min(max(c, 0.0), 255.0)
        return (c, c, c, 255)

    return pick_color_grayscale(steps, n, tr, ti)


def clamp_to_bytes(colors):
    """
    Convert float RGBA values to uint8.

    Values are rounded half to even and clamped to [0, 255]; NaN becomes 0
    and infinities saturate.

    Args:
        colors: Array-like of floats, any shape

    Returns:
        uint8 numpy array of the same shape
    """
    colors = np.asarray(colors, dtype=np.float64)
    colors = np.nan_to_num(colors, nan=0.0, posinf=255.0, neginf=0.0)
    return np.rint(np.clip(colors, 0.0, 255.0)).astype(np.uint8)


# Registry of all available palettes.
# Keys are display names, values are picker functions.
COLORMAPS = {
    'HSV1': pick_color_hsv1,
    'HSV2': pick_color_hsv2,
    'HSV3': pick_color_hsv3,
    'HSV1 Gradient': pick_color_hsv1_gradient,
    'Grayscale': pick_color_grayscale,
    'Grayscale2': pick_color_grayscale2,
}

DEFAULT_COLORMAP = 'HSV1'


def get_colormap(name):
    """
    Get a palette by name.

    Args:
        name: Key from COLORMAPS dictionary

    Returns:
        Picker function

    Raises:
        KeyError if name not found
    """
    return COLORMAPS[name]


def get_default_colormap():
    """Get the default palette (HSV1)."""
    return COLORMAPS[DEFAULT_COLORMAP]


def list_colormap_names():
    """Get list of available palette names."""
    return list(COLORMAPS.keys())
