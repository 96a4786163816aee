"""Configuration package exposing constants, logging and settings."""

from .constants import __app_name__, __version__
from .logging_config import setup_logging, setup_qt_logging
from .settings import BacklightMethod, DaemonSettings
from .settings_manager import SettingsManager, get_config_dir

__all__ = [
    "__app_name__",
    "__version__",
    "setup_logging",
    "setup_qt_logging",
    "BacklightMethod",
    "DaemonSettings",
    "SettingsManager",
    "get_config_dir",
]
