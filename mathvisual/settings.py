"""Host settings read from settings.json."""

import json
import logging
import os


logger = logging.getLogger(__name__)

SETTINGS_PATH = os.path.join(os.path.dirname(__file__), 'settings.json')

DEFAULT_SETTINGS = {
    'render_delay_ms': 200,
    'visibility_threshold': 0.1,
    'background': [240, 238, 230],
    'window_width': 640,
    'window_height': 640,
    'start_index': 0,
}


def load_settings(path=None):
    """
    Load settings from a JSON file, merged over DEFAULT_SETTINGS.

    A missing or malformed file is not fatal: the defaults are returned
    and a warning is logged. Unknown keys are kept.
    """
    path = path or SETTINGS_PATH
    settings = dict(DEFAULT_SETTINGS)
    try:
        with open(path, 'r', encoding='utf-8') as f:
            loaded = json.load(f)
    except (OSError, json.JSONDecodeError) as e:
        logger.warning("Could not load %s: %s", path, e)
        return settings

    if not isinstance(loaded, dict):
        logger.warning("Ignoring %s: expected a JSON object", path)
        return settings

    settings.update(loaded)
    return settings
