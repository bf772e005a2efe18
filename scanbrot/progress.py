"""
Render progress reporting.

A progress sink is any callable taking (elapsed_seconds, throughput, unit),
where unit is 'second' or 'minute'. The renderer calls it at most once per
update interval.
"""

import logging
import math

import numpy as np


logger = logging.getLogger(__name__)

METRIC_UNITS = ["", "k", "M", "G", "T", "P", "E"]


def format_metric(number):
    """
    Format a number with two decimals and an SI suffix, e.g. 1.50M.

    Numbers below 1 are printed without a suffix, non-positive and
    non-finite numbers as 0.00.
    """
    if not 0 < number < math.inf:
        return "0.00"
    mag = int(math.ceil((1 + math.log10(number)) / 3))
    mag = min(max(mag, 1), len(METRIC_UNITS))
    return "%.2f%s" % (number / 10 ** (3 * (mag - 1)), METRIC_UNITS[mag - 1])


def measure_throughput(pixels, elapsed_seconds):
    """
    Pixels per second, or pixels per minute when that figure is unusable.

    The per-second rate is degenerate when the division does not produce a
    finite number (no time has elapsed) or when it rounds down to zero.

    Args:
        pixels: Pixels written so far
        elapsed_seconds: Wall-clock time since the render started

    Returns:
        (value, unit) where unit is 'second' or 'minute'
    """
    with np.errstate(divide='ignore', invalid='ignore'):
        speed = np.floor(np.float64(pixels) / np.float64(elapsed_seconds))

    if np.isfinite(speed) and speed >= 1:
        return int(speed), 'second'

    elapsed_ms = max(elapsed_seconds * 1000.0, 1.0)
    return int(math.floor(60000.0 * pixels / elapsed_ms)), 'minute'


class LogProgress:
    """Progress sink that writes each report to the log."""

    def __init__(self, level=logging.DEBUG):
        self.level = level

    def __call__(self, elapsed_seconds, throughput, unit):
        logger.log(self.level, "Rendering: %.1fs elapsed, %s pixels/%s",
                   elapsed_seconds, format_metric(throughput), unit)
