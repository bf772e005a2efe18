import pytest

from scanbrot.viewport import (
    DEFAULT_RECT,
    ComplexRect,
    Point,
    ViewportModel,
    iteration_budget,
)


def test_default_rect_has_inverted_imaginary_axis():
    assert DEFAULT_RECT.x_range == pytest.approx(3.5)
    assert DEFAULT_RECT.y_range == pytest.approx(-2.5)
    assert DEFAULT_RECT.center == (pytest.approx(-0.75), pytest.approx(0.0))


def test_pixel_deltas_use_half_pixel_offset():
    viewport = ViewportModel(DEFAULT_RECT, 100, 50)
    assert viewport.dx == pytest.approx(3.5 / 99.5)
    assert viewport.dy == pytest.approx(-2.5 / 49.5)


def test_pixel_to_complex():
    viewport = ViewportModel(DEFAULT_RECT, 100, 50)
    assert viewport.pixel_to_complex(0, 0) == (-2.5, 1.25)
    cr, ci = viewport.pixel_to_complex(10, 4)
    assert cr == pytest.approx(-2.5 + 10 * 3.5 / 99.5)
    assert ci == pytest.approx(1.25 - 4 * 2.5 / 49.5)


def test_iteration_budget_grows_with_zoom():
    assert iteration_budget(DEFAULT_RECT) == 99
    small = ComplexRect.from_corners(-0.75, 0.1, -0.74, 0.09)
    assert iteration_budget(small) == int(223.0 / (0.001 + 2 * 0.01) ** 0.5)
    assert iteration_budget(small) > iteration_budget(DEFAULT_RECT)


def test_aspect_ratio_widens_x_for_wide_surface():
    rect = ComplexRect.from_corners(-1.0, 1.0, 1.0, -1.0)
    viewport = ViewportModel(rect, 200, 100).adjust_aspect_ratio()
    assert viewport.rect.x_range == pytest.approx(4.0)
    assert viewport.rect.y_range == pytest.approx(-2.0)
    assert viewport.rect.center == (pytest.approx(0.0), pytest.approx(0.0))
    assert viewport.zoom == (pytest.approx(2.0), 1.0)


def test_aspect_ratio_widens_y_for_tall_surface():
    rect = ComplexRect.from_corners(-1.0, 1.0, 1.0, -1.0)
    viewport = ViewportModel(rect, 100, 400).adjust_aspect_ratio()
    assert viewport.rect.x_range == pytest.approx(2.0)
    assert viewport.rect.y_range == pytest.approx(-8.0)
    assert viewport.zoom == (1.0, pytest.approx(4.0))


def test_zoom_at_keeps_point_under_cursor():
    viewport = ViewportModel(DEFAULT_RECT, 100, 100)
    before = viewport.pixel_to_complex(30, 70)
    zoomed = viewport.zoom_at(30, 70, 0.5)
    after = zoomed.pixel_to_complex(30, 70)
    assert after == (pytest.approx(before[0]), pytest.approx(before[1]))
    assert zoomed.rect.x_range == pytest.approx(1.75)
    assert zoomed.zoom == (pytest.approx(2.0), pytest.approx(2.0))


def test_pan_moves_by_pixel_deltas():
    viewport = ViewportModel(DEFAULT_RECT, 100, 100)
    panned = viewport.pan(10, -5)
    assert panned.rect.top_left.x == pytest.approx(-2.5 + 10 * viewport.dx)
    assert panned.rect.top_left.y == pytest.approx(1.25 - 5 * viewport.dy)
    assert panned.rect.x_range == pytest.approx(viewport.rect.x_range)


def test_resized_keeps_rect():
    viewport = ViewportModel(DEFAULT_RECT, 100, 100).resized(300, 200)
    assert (viewport.width, viewport.height) == (300, 200)
    assert viewport.rect == DEFAULT_RECT
    assert isinstance(viewport.rect.top_left, Point)
