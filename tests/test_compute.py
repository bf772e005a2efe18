import numpy as np
import pytest

from scanbrot.compute import (
    DEFAULT_JULIA_CONSTANT,
    FRACTALS,
    JuliaEscape,
    get_fractal,
    get_row_kernel,
    julia_escape,
    list_fractal_names,
    make_julia_escape,
    mandelbrot_escape,
    tricorn_escape,
)


def test_far_point_escapes_quickly():
    n, tr, ti = mandelbrot_escape(10.0, 10.0, 100.0, 50)
    assert n == 1
    assert tr + ti > 100.0


def test_origin_is_interior_for_any_budget():
    for max_iterations in (1, 2, 17, 500):
        n, _, _ = mandelbrot_escape(0.0, 0.0, 100.0, max_iterations)
        assert n == max_iterations


def test_extra_iterations_not_counted():
    # C = 11 escapes on the first iteration; four more iterations follow
    n, tr, ti = mandelbrot_escape(11.0, 0.0, 100.0, 50)
    assert n == 1
    zr = 11.0
    for _ in range(4):
        zr = zr * zr + 11.0
    assert tr == zr * zr
    assert ti == 0.0


def test_identical_inputs_give_identical_outputs():
    first = mandelbrot_escape(-0.7453, 0.1127, 100.0, 300)
    second = mandelbrot_escape(-0.7453, 0.1127, 100.0, 300)
    assert first == second


def test_matches_pure_python_version():
    for cr, ci in [(-0.75, 0.1), (0.3, 0.5), (-2.0, 0.0), (0.25, 0.0)]:
        assert mandelbrot_escape(cr, ci, 100.0, 200) == \
            mandelbrot_escape.py_func(cr, ci, 100.0, 200)


def test_tricorn_origin_interior_and_far_point_escapes():
    assert tricorn_escape(0.0, 0.0, 100.0, 40)[0] == 40
    assert tricorn_escape(10.0, -10.0, 100.0, 40)[0] < 40


def test_tricorn_differs_from_mandelbrot():
    point = (-0.1, 0.9)
    assert tricorn_escape(*point, 100.0, 100) != mandelbrot_escape(*point, 100.0, 100)


def test_julia_with_zero_constant_is_unit_disc():
    escape = make_julia_escape(0.0, 0.0)
    assert escape(0.5, 0.0, 100.0, 100)[0] == 100
    assert escape(1.5, 0.0, 100.0, 100)[0] < 100


def test_get_fractal():
    assert get_fractal('Mandelbrot') is mandelbrot_escape
    julia = get_fractal('Julia', (0.0, 0.0))
    assert julia(0.0, 0.0, 100.0, 10)[0] == 10
    assert list_fractal_names() == ['Mandelbrot', 'Tricorn', 'Julia']
    with pytest.raises(KeyError):
        get_fractal('Burning Ship')


def test_julia_evaluator_is_shared_per_constant():
    first = get_fractal('Julia', (-0.8, 0.156))
    assert get_fractal('Julia', [-0.8, 0.156]) is first
    assert get_fractal('Julia') is get_fractal('Julia', DEFAULT_JULIA_CONSTANT)
    assert get_fractal('Julia', (0.285, 0.01)) is not first


def test_julia_registered_as_factory():
    assert FRACTALS['Julia'] is make_julia_escape
    assert isinstance(get_fractal('Julia'), JuliaEscape)


def test_julia_matches_pure_python_version():
    for cr, ci in [(0.1, 0.2), (-0.5, 0.6), (1.2, -0.3)]:
        assert julia_escape(cr, ci, -0.8, 0.156, 100.0, 150) == \
            julia_escape.py_func(cr, ci, -0.8, 0.156, 100.0, 150)


@pytest.mark.parametrize('escape', [
    mandelbrot_escape,
    tricorn_escape,
    make_julia_escape(-0.123, 0.745),
])
def test_row_kernel_matches_pixel_evaluator(escape):
    width = 9
    cr0, dx, ci = -2.0, 0.3, 0.4
    n_out = np.zeros(width, dtype=np.int64)
    tr_out = np.zeros(width, dtype=np.float64)
    ti_out = np.zeros(width, dtype=np.float64)
    get_row_kernel(escape)(cr0, dx, ci, 100.0, 80, n_out, tr_out, ti_out)

    cr = cr0
    for x in range(width):
        assert (n_out[x], tr_out[x], ti_out[x]) == escape(cr, ci, 100.0, 80)
        cr += dx


def test_no_row_kernel_for_plain_functions():
    assert get_row_kernel(mandelbrot_escape.py_func) is None
