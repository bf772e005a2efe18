"""
Settings for the visualizer.

Defaults live in DEFAULT_SETTINGS; settings.json next to this module (or a
file passed explicitly) overrides any subset of them. Unknown keys are
ignored.
"""

import json
import logging
import os


logger = logging.getLogger(__name__)

SETTINGS_PATH = os.path.join(os.path.dirname(__file__), 'settings.json')

DEFAULT_SETTINGS = {
    'width': 800,
    'height': 600,
    'palette': 'HSV1',
    'fractal': 'Mandelbrot',
    'julia_constant': [-0.123, 0.745],
    'samples': 1,
    'max_samples': 16,
    'escape_radius': 10.0,
    'update_interval_ms': 200,
    'zoom_in_factor': 0.85,
    'zoom_out_factor': 1.18,
}


def load_settings(path=None):
    """
    Load settings from a JSON file merged over the defaults.

    Args:
        path: JSON file to read (default: the bundled settings.json)

    Returns:
        dict with every key of DEFAULT_SETTINGS
    """
    settings = dict(DEFAULT_SETTINGS)
    settings_path = path or SETTINGS_PATH
    try:
        with open(settings_path, 'r') as f:
            loaded = json.load(f)
    except (OSError, json.JSONDecodeError) as e:
        logger.warning("Could not load %s: %s", settings_path, e)
        return settings

    if not isinstance(loaded, dict):
        logger.warning("Ignoring %s: expected a JSON object", settings_path)
        return settings

    for key, value in loaded.items():
        if key in settings:
            settings[key] = value
        else:
            logger.debug("Ignoring unknown setting %r", key)
    return settings
