import math

import numpy as np
import pytest

from scanbrot.colormaps import (
    COLORMAPS,
    INTERIOR_COLOR,
    clamp_to_bytes,
    get_colormap,
    get_default_colormap,
    hsv_to_rgb,
    list_colormap_names,
    pick_color_grayscale,
    pick_color_grayscale2,
    pick_color_hsv1,
    pick_color_hsv1_gradient,
    pick_color_hsv2,
    pick_color_hsv3,
    smooth_color,
)


STEPS = 100
# A typical escaped result: n iterations and |Z|^2 well past the radius
ESCAPED = (12, 1.0e6, 3.0e5)


@pytest.mark.parametrize('name', list(COLORMAPS))
def test_interior_color_for_every_palette_except_grayscale2(name):
    pick = COLORMAPS[name]
    color = pick(STEPS, STEPS, 1.0, 2.0, -0.5, 0.1)
    if name == 'Grayscale2':
        assert color[3] == 255
    else:
        assert color == INTERIOR_COLOR


@pytest.mark.parametrize('name', list(COLORMAPS))
def test_escaped_colors_are_opaque(name):
    color = COLORMAPS[name](STEPS, *ESCAPED, -0.5, 0.1)
    assert len(color) == 4
    assert color[3] == 255


def test_smooth_color_formula():
    n, tr, ti = ESCAPED
    expected = 5 + n - math.log(0.5) / math.log(2) - math.log(math.log(tr + ti)) / math.log(2)
    assert smooth_color(STEPS, n, tr, ti) == pytest.approx(expected)


def test_smooth_color_is_continuous_in_magnitude():
    low = smooth_color(STEPS, 10, 1.0e4, 0.0)
    high = smooth_color(STEPS, 10, 1.0e8, 0.0)
    # larger final magnitude means the point escaped "earlier"
    assert high < low
    assert low - high == pytest.approx(1.0)


def test_smooth_color_degenerate_magnitudes():
    assert math.isnan(smooth_color(STEPS, 3, 0.25, 0.25))
    assert math.isnan(smooth_color(STEPS, 3, math.inf, 1.0))
    assert math.isnan(smooth_color(STEPS, 3, math.nan, 1.0))


@pytest.mark.parametrize('h, expected', [
    (0, [255, 0, 0]),
    (60, [255, 255, 0]),
    (120, [0, 255, 0]),
    (180, [0, 255, 255]),
    (240, [0, 0, 255]),
    (300, [255, 0, 255]),
])
def test_hsv_to_rgb_primary_hues(h, expected):
    assert hsv_to_rgb(h, 1.0, 1.0) == pytest.approx(expected)


def test_hsv_to_rgb_clamps_value_and_handles_out_of_range_hue():
    assert hsv_to_rgb(0, 1.0, 5.0) == pytest.approx([255, 0, 0])
    assert hsv_to_rgb(0, 0.0, 0.5) == pytest.approx([127.5, 127.5, 127.5])
    # past 360 degrees no sector matches; only the gray offset remains
    assert hsv_to_rgb(400, 1.0, 1.0) == pytest.approx([0, 0, 0])


def test_hsv1_uses_full_value():
    v = smooth_color(STEPS, *ESCAPED)
    expected = hsv_to_rgb(360.0 * v / STEPS, 1.0, 1.0)
    assert pick_color_hsv1(STEPS, *ESCAPED)[:3] == pytest.approx(expected)


def test_hsv3_swaps_red_and_blue_of_hsv2():
    r, g, b, a = pick_color_hsv2(STEPS, *ESCAPED)
    assert pick_color_hsv3(STEPS, *ESCAPED) == (b, g, r, a)


def test_gradient_depends_on_position():
    left = pick_color_hsv1_gradient(STEPS, *ESCAPED, -2.0, 1.0)
    right = pick_color_hsv1_gradient(STEPS, *ESCAPED, 0.8, -1.0)
    assert left != right


def test_gradient_blend_at_view_centre():
    # |Z|^2 = e^4 gives v = n + 4 = 10: hue 36 degrees at full value,
    # so the base color is (255, 153, 0). At (-0.75, 0) every blend weight is 1/2.
    color = pick_color_hsv1_gradient(STEPS, 6, math.exp(4.0), 0.0, -0.75, 0.0)
    # red 255/2, blue red/2, green (153 + blue)/2, blue blue*2.5/3.5 + green/2
    assert color[:3] == pytest.approx((127.5, 108.375, 99.72321428571428))
    assert color[3] == 255


def test_gradient_dims_over_bright_pixels():
    # at cr = 1, ci = 1.25 the blend weights are 1 and 0 for red and green
    n, tr, ti = 14, 1.0e6, 0.0
    v = smooth_color(STEPS, n, tr, ti)
    base = hsv_to_rgb(360.0 * v / STEPS, 1.0, 10.0 * v / STEPS)
    color = pick_color_hsv1_gradient(STEPS, n, tr, ti, 1.0, 1.25)
    assert sum(base) > 500
    assert color[0] == pytest.approx(base[0] * 0.6)


def test_grayscale_ramp_and_clamp():
    n, tr, ti = 5, 1.0e4, 0.0
    v = smooth_color(STEPS, n, tr, ti)
    expected = math.floor(512.0 * v / STEPS)
    assert pick_color_grayscale(STEPS, n, tr, ti) == (expected, expected, expected, 255)

    bright = pick_color_grayscale(STEPS, 90, 1.0e4, 0.0)
    assert bright[:3] == (255, 255, 255)


def test_grayscale2_interior_shading():
    # sqrt(0.25) * 255 = 127.5 -> 127; 255 - 127 = 128
    assert pick_color_grayscale2(STEPS, STEPS, 0.25, 0.0) == (128, 128, 128, 255)
    # escaped points fall back to the plain grayscale ramp
    assert pick_color_grayscale2(STEPS, *ESCAPED) == pick_color_grayscale(STEPS, *ESCAPED)


def test_clamp_to_bytes():
    row = clamp_to_bytes([[-3.0, 12.5, 13.5, 300.0], [math.nan, math.inf, -math.inf, 254.6]])
    assert row.dtype == np.uint8
    assert row.tolist() == [[0, 12, 14, 255], [0, 255, 0, 255]]


def test_registry():
    assert get_default_colormap() is pick_color_hsv1
    assert get_colormap('Grayscale') is pick_color_grayscale
    assert list_colormap_names() == list(COLORMAPS)
    with pytest.raises(KeyError):
        get_colormap('Hot')
