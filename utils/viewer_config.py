"""
Viewer Configuration Manager for Timeline Lens
Loads viewer preferences (row cap, display cap, time reference, logging) from JSON.
"""

import json
import logging
import os

logger = logging.getLogger(__name__)

WALL_CLOCK = 'wall_clock'
LATEST_EVENT = 'latest_event'
RELATIVE_REFERENCES = (WALL_CLOCK, LATEST_EVENT)


class ViewerConfig:
    """
    Manages viewer preferences.
    Preferences are stored in an optional JSON file under the 'viewer' key;
    values missing from the file keep their defaults.
    """

    DEFAULT_CONFIG = {
        'ingestion': {
            'max_rows': 100000
        },
        'display': {
            'display_cap': 5000
        },
        'time': {
            'relative_reference': WALL_CLOCK
        },
        'logging': {
            'level': 'INFO',
            'file': None
        }
    }

    def __init__(self, config_file=None):
        """
        Initialize viewer configuration manager.

        Args:
            config_file: Path to configuration file (optional)
        """
        self.config_file = config_file
        # Copy each section so defaults are never mutated
        self.config = {}
        for key, value in self.DEFAULT_CONFIG.items():
            self.config[key] = value.copy()

        if config_file and os.path.exists(config_file):
            self.load()

    def load(self):
        """Load viewer preferences from configuration file."""
        if not self.config_file or not os.path.exists(self.config_file):
            return

        try:
            if os.path.getsize(self.config_file) == 0:
                return

            with open(self.config_file, 'r', encoding='utf-8') as f:
                data = json.load(f)
        except (OSError, json.JSONDecodeError) as e:
            logger.warning(f"Error loading configuration {self.config_file}: {e}")
            return

        viewer_data = data.get('viewer', {}) if isinstance(data, dict) else {}
        for section in self.DEFAULT_CONFIG:
            values = viewer_data.get(section)
            if isinstance(values, dict):
                self.config[section].update(
                    {k: v for k, v in values.items() if k in self.DEFAULT_CONFIG[section]}
                )

        self._validate()
        logger.debug(f"Loaded configuration from {self.config_file}")

    def _validate(self):
        """Fall back to defaults for values of the wrong shape."""
        for section, key in (('ingestion', 'max_rows'), ('display', 'display_cap')):
            value = self.config[section][key]
            if not isinstance(value, int) or isinstance(value, bool) or value <= 0:
                logger.warning(f"Ignoring invalid {section}.{key}: {value!r}")
                self.config[section][key] = self.DEFAULT_CONFIG[section][key]

        reference = self.config['time']['relative_reference']
        if reference not in RELATIVE_REFERENCES:
            logger.warning(f"Ignoring invalid time.relative_reference: {reference!r}")
            self.config['time']['relative_reference'] = WALL_CLOCK

    @property
    def max_rows(self):
        return self.config['ingestion']['max_rows']

    @property
    def display_cap(self):
        return self.config['display']['display_cap']

    @property
    def relative_reference(self):
        return self.config['time']['relative_reference']

    @property
    def log_level(self):
        return self.config['logging']['level']

    @property
    def log_file(self):
        return self.config['logging']['file']

    def override(self, section, key, value):
        """
        Override a single preference for this run (e.g. from a CLI flag).

        None leaves the current value untouched.
        """
        if value is None:
            return
        if section not in self.config or key not in self.DEFAULT_CONFIG[section]:
            raise KeyError(f"Unknown configuration key: {section}.{key}")
        self.config[section][key] = value
