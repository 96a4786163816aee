"""Load and store daemon settings from the user config directory."""

import json
import logging
import os
from typing import Any, Dict, Mapping, Optional

from .constants import ENV_PREFIX, SETTINGS_FILE_NAME, __app_name__
from .settings import DaemonSettings

logger = logging.getLogger(__name__)

_TRUTHY = ('1', 'true', 'yes')


def get_config_dir() -> str:
    """Get the user config directory for settings (~/.config/tiltlight)."""
    base = os.environ.get('XDG_CONFIG_HOME') or os.path.join(os.path.expanduser('~'), '.config')
    return os.path.join(base, __app_name__)


class SettingsManager:
    def __init__(self, config_dir: Optional[str] = None, environ: Optional[Mapping[str, str]] = None):
        self.config_dir = config_dir or get_config_dir()
        self.settings_file = os.path.join(self.config_dir, SETTINGS_FILE_NAME)
        self._environ = os.environ if environ is None else environ

    def load_settings(self) -> DaemonSettings:
        """Load settings from file, apply environment overrides and validate.

        Falls back to defaults when the file is missing, unreadable or
        contains values that fail validation.
        """
        data: Dict[str, Any] = {}

        if os.path.exists(self.settings_file):
            try:
                with open(self.settings_file, 'r', encoding='utf-8') as f:
                    loaded = json.load(f)
                if isinstance(loaded, dict):
                    data.update(loaded)
                    logger.debug(f"Loaded settings keys from {self.settings_file}: {list(loaded.keys())}")
                else:
                    logger.warning(f"Ignoring {self.settings_file}: expected a JSON object")
            except (OSError, ValueError) as e:
                logger.warning(f"Error loading settings from {self.settings_file}: {e}")

        data.update(self._env_overrides())

        try:
            return DaemonSettings.from_dict(data)
        except (TypeError, ValueError) as e:
            logger.warning(f"Invalid settings, using defaults: {e}")
            return DaemonSettings()

    def save_settings(self, settings: DaemonSettings) -> None:
        """Save settings to file."""
        os.makedirs(self.config_dir, exist_ok=True)
        with open(self.settings_file, 'w', encoding='utf-8') as f:
            json.dump(settings.to_dict(), f, indent=4, ensure_ascii=False)

    def _env_overrides(self) -> Dict[str, Any]:
        overrides: Dict[str, Any] = {}
        env = self._environ

        verbose = env.get(f'{ENV_PREFIX}VERBOSE')
        if verbose is not None:
            overrides['verbose'] = verbose.lower() in _TRUTHY

        dry_run = env.get(f'{ENV_PREFIX}DRY_RUN')
        if dry_run is not None:
            overrides['dry_run'] = dry_run.lower() in _TRUTHY

        output = env.get(f'{ENV_PREFIX}OUTPUT', '').strip()
        if output:
            overrides['output'] = output

        devices = env.get(f'{ENV_PREFIX}DEVICES')
        if devices is not None:
            overrides['target_devices'] = [d.strip() for d in devices.split(',') if d.strip()]

        log_file = env.get(f'{ENV_PREFIX}LOG_FILE', '').strip()
        if log_file:
            overrides['log_file'] = log_file

        return overrides
