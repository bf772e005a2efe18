"""
Escape-time evaluators using Numba JIT compilation.

Every evaluator shares one contract:

    escape(cr, ci, escape_radius_squared, max_iterations) -> (n, tr, ti)

where n is the number of iterations used before |Z|^2 exceeded the escape
radius (n == max_iterations means the point never escaped) and tr, ti are
the squared real and imaginary parts of Z after four extra iterations. The
extra iterations shrink the error term of the smooth coloring logarithm
(see http://linas.org/art-gallery/escape/escape.html) and are not counted
in n.

Supported fractals:
- Mandelbrot: Z0 = 0, Z <- Z^2 + C
- Tricorn:    Z0 = 0, Z <- conj(Z)^2 + C
- Julia:      Z0 = C, Z <- Z^2 + K for a fixed constant K
"""

import logging
from functools import lru_cache

import numpy as np
from numba import jit


logger = logging.getLogger(__name__)

EXTRA_ITERATIONS = 4


@jit(nopython=True, cache=True)
def mandelbrot_escape(cr, ci, escape_radius_squared, max_iterations):
    """
    Iterate Z <- Z^2 + C from Z = 0.

    Args:
        cr, ci: Real and imaginary parts of C
        escape_radius_squared: Bailout threshold for Tr + Ti
        max_iterations: Iteration budget

    Returns:
        (n, tr, ti)
    """
    zr = 0.0
    zi = 0.0
    tr = 0.0
    ti = 0.0
    n = 0

    while n < max_iterations and tr + ti <= escape_radius_squared:
        zi = 2.0 * zr * zi + ci
        zr = tr - ti + cr
        tr = zr * zr
        ti = zi * zi
        n += 1

    for _ in range(EXTRA_ITERATIONS):
        zi = 2.0 * zr * zi + ci
        zr = tr - ti + cr
        tr = zr * zr
        ti = zi * zi

    return n, tr, ti


@jit(nopython=True, cache=True)
def tricorn_escape(cr, ci, escape_radius_squared, max_iterations):
    """Iterate Z <- conj(Z)^2 + C from Z = 0 (the Mandelbar set)."""
    zr = 0.0
    zi = 0.0
    tr = 0.0
    ti = 0.0
    n = 0

    while n < max_iterations and tr + ti <= escape_radius_squared:
        zi = -2.0 * zr * zi + ci
        zr = tr - ti + cr
        tr = zr * zr
        ti = zi * zi
        n += 1

    for _ in range(EXTRA_ITERATIONS):
        zi = -2.0 * zr * zi + ci
        zr = tr - ti + cr
        tr = zr * zr
        ti = zi * zi

    return n, tr, ti


@jit(nopython=True, cache=True)
def julia_escape(cr, ci, kr, ki, escape_radius_squared, max_iterations):
    """
    Iterate Z <- Z^2 + K from Z = C.

    Args:
        cr, ci: Starting point Z0 (the pixel coordinate)
        kr, ki: Real and imaginary parts of the constant K
        escape_radius_squared: Bailout threshold for Tr + Ti
        max_iterations: Iteration budget

    Returns:
        (n, tr, ti)
    """
    zr = cr
    zi = ci
    tr = zr * zr
    ti = zi * zi
    n = 0

    while n < max_iterations and tr + ti <= escape_radius_squared:
        zi = 2.0 * zr * zi + ki
        zr = tr - ti + kr
        tr = zr * zr
        ti = zi * zi
        n += 1

    for _ in range(EXTRA_ITERATIONS):
        zi = 2.0 * zr * zi + ki
        zr = tr - ti + kr
        tr = zr * zr
        ti = zi * zi

    return n, tr, ti


# Row kernels: evaluate a whole scanline in compiled code, starting at cr and
# stepping by dx, writing the results into preallocated arrays.

@jit(nopython=True, cache=True)
def mandelbrot_row(cr, dx, ci, escape_radius_squared, max_iterations,
                   n_out, tr_out, ti_out):
    for x in range(n_out.shape[0]):
        n, tr, ti = mandelbrot_escape(cr, ci, escape_radius_squared, max_iterations)
        n_out[x] = n
        tr_out[x] = tr
        ti_out[x] = ti
        cr += dx


@jit(nopython=True, cache=True)
def tricorn_row(cr, dx, ci, escape_radius_squared, max_iterations,
                n_out, tr_out, ti_out):
    for x in range(n_out.shape[0]):
        n, tr, ti = tricorn_escape(cr, ci, escape_radius_squared, max_iterations)
        n_out[x] = n
        tr_out[x] = tr
        ti_out[x] = ti
        cr += dx


@jit(nopython=True, cache=True)
def julia_row(cr, dx, ci, kr, ki, escape_radius_squared, max_iterations,
              n_out, tr_out, ti_out):
    for x in range(n_out.shape[0]):
        n, tr, ti = julia_escape(cr, ci, kr, ki, escape_radius_squared, max_iterations)
        n_out[x] = n
        tr_out[x] = tr
        ti_out[x] = ti
        cr += dx


class JuliaEscape:
    """
    Julia set evaluator for one constant K = kr + i*ki.

    Calling it follows the standard escape contract; K is passed through to
    the shared compiled kernel, so new constants never trigger a compile.
    """

    def __init__(self, kr, ki):
        self.kr = kr
        self.ki = ki

    def __call__(self, cr, ci, escape_radius_squared, max_iterations):
        return julia_escape(float(cr), float(ci), self.kr, self.ki,
                            escape_radius_squared, max_iterations)

    def fill_row(self, cr, dx, ci, escape_radius_squared, max_iterations,
                 n_out, tr_out, ti_out):
        julia_row(cr, dx, ci, self.kr, self.ki, escape_radius_squared,
                  max_iterations, n_out, tr_out, ti_out)

    def __repr__(self):
        return "JuliaEscape(%r, %r)" % (self.kr, self.ki)


@lru_cache(maxsize=32)
def make_julia_escape(kr, ki):
    """
    Get the Julia set evaluator for the constant K = kr + i*ki.

    The pixel coordinate becomes the starting point Z0 and K is added on
    every iteration. Evaluators are shared per constant.

    Args:
        kr, ki: Real and imaginary parts of K

    Returns:
        A JuliaEscape with the standard escape contract
    """
    return JuliaEscape(float(kr), float(ki))


# Douady rabbit
DEFAULT_JULIA_CONSTANT = (-0.123, 0.745)


# Registry of built-in fractals. Julia maps to its factory because it
# needs a constant.
FRACTALS = {
    'Mandelbrot': mandelbrot_escape,
    'Tricorn': tricorn_escape,
    'Julia': make_julia_escape,
}


def get_fractal(name, julia_constant=None):
    """
    Get an escape-time evaluator by name.

    Args:
        name: Key from FRACTALS dictionary
        julia_constant: (kr, ki) used when name is 'Julia'

    Returns:
        Evaluator function

    Raises:
        KeyError if name not found
    """
    escape = FRACTALS[name]
    if escape is make_julia_escape:
        kr, ki = julia_constant or DEFAULT_JULIA_CONSTANT
        return make_julia_escape(float(kr), float(ki))
    return escape


def get_row_kernel(escape):
    """
    Get the compiled whole-row kernel matching an evaluator.

    Returns:
        fill_row(cr, dx, ci, escape_radius_squared, max_iterations,
        n_out, tr_out, ti_out), or None for evaluators without one
    """
    if escape is mandelbrot_escape:
        return mandelbrot_row
    if escape is tricorn_escape:
        return tricorn_row
    if isinstance(escape, JuliaEscape):
        return escape.fill_row
    return None


def list_fractal_names():
    """Get list of available fractal names."""
    return list(FRACTALS.keys())


def warmup_jit():
    """
    Compile the built-in evaluators and row kernels with a dummy call each.

    Call this once at startup to avoid a compilation pause on the first
    rendered row.
    """
    logger.info("Compiling escape-time evaluators...")
    n_out = np.zeros(1, dtype=np.int64)
    tr_out = np.zeros(1, dtype=np.float64)
    ti_out = np.zeros(1, dtype=np.float64)

    mandelbrot_escape(0.0, 0.0, 4.0, 1)
    tricorn_escape(0.0, 0.0, 4.0, 1)
    julia_escape(0.0, 0.0, 0.0, 0.0, 4.0, 1)
    mandelbrot_row(0.0, 0.1, 0.0, 4.0, 1, n_out, tr_out, ti_out)
    tricorn_row(0.0, 0.1, 0.0, 4.0, 1, n_out, tr_out, ti_out)
    julia_row(0.0, 0.1, 0.0, 0.0, 0.0, 4.0, 1, n_out, tr_out, ti_out)
