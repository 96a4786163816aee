"""Daemon settings dataclasses with validation."""

from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, List, Optional

from .constants import (
    BRIGHTNESS_SCALE,
    DEFAULT_OUTPUT,
    DEFAULT_TARGET_DEVICES,
    LOWER_BACKLIGHT,
    UPPER_BACKLIGHT,
)


class BacklightMethod(str, Enum):
    """Supported ways of applying the backlight level."""
    XBACKLIGHT = "xbacklight"
    SYSFS = "sysfs"


@dataclass
class DaemonSettings:
    """Runtime configuration for the sensor daemon."""

    # Display and input devices
    output: str = DEFAULT_OUTPUT
    target_devices: List[str] = field(default_factory=lambda: list(DEFAULT_TARGET_DEVICES))

    # Backlight
    lower_backlight: float = LOWER_BACKLIGHT
    upper_backlight: float = UPPER_BACKLIGHT
    brightness_scale: float = BRIGHTNESS_SCALE
    clamp_backlight: bool = False
    backlight_method: BacklightMethod = BacklightMethod.XBACKLIGHT
    backlight_device: Optional[str] = None

    # Behaviour
    dry_run: bool = False
    release_on_exit: bool = True

    # Logging
    log_file: Optional[str] = None
    verbose: bool = False

    def __post_init__(self):
        """Validate settings."""
        if not self.output:
            raise ValueError("output must not be empty")
        if any(not isinstance(name, str) or not name for name in self.target_devices):
            raise ValueError(f"target_devices must be non-empty strings, got {self.target_devices}")
        if self.lower_backlight < 0:
            raise ValueError(f"lower_backlight must be >= 0, got {self.lower_backlight}")
        if self.upper_backlight <= self.lower_backlight:
            raise ValueError("upper_backlight must be greater than lower_backlight")
        if self.brightness_scale <= 0:
            raise ValueError(f"brightness_scale must be > 0, got {self.brightness_scale}")
        if not isinstance(self.backlight_method, BacklightMethod):
            self.backlight_method = BacklightMethod(self.backlight_method)

    @property
    def backlight_ceiling(self) -> Optional[float]:
        """Upper bound applied to the setpoint, or None when unclamped."""
        return self.upper_backlight if self.clamp_backlight else None

    def to_dict(self) -> Dict:
        """Convert to dictionary for JSON serialization."""
        return {
            'output': self.output,
            'target_devices': list(self.target_devices),
            'lower_backlight': self.lower_backlight,
            'upper_backlight': self.upper_backlight,
            'brightness_scale': self.brightness_scale,
            'clamp_backlight': self.clamp_backlight,
            'backlight_method': self.backlight_method.value,
            'backlight_device': self.backlight_device,
            'dry_run': self.dry_run,
            'release_on_exit': self.release_on_exit,
            'log_file': self.log_file,
            'verbose': self.verbose,
        }

    @classmethod
    def from_dict(cls, data: Dict) -> 'DaemonSettings':
        """Create from dictionary loaded from JSON."""
        return cls(
            output=data.get('output', DEFAULT_OUTPUT),
            target_devices=list(data.get('target_devices', DEFAULT_TARGET_DEVICES)),
            lower_backlight=float(data.get('lower_backlight', LOWER_BACKLIGHT)),
            upper_backlight=float(data.get('upper_backlight', UPPER_BACKLIGHT)),
            brightness_scale=float(data.get('brightness_scale', BRIGHTNESS_SCALE)),
            clamp_backlight=bool(data.get('clamp_backlight', False)),
            backlight_method=BacklightMethod(data.get('backlight_method', 'xbacklight')),
            backlight_device=data.get('backlight_device'),
            dry_run=bool(data.get('dry_run', False)),
            release_on_exit=bool(data.get('release_on_exit', True)),
            log_file=data.get('log_file'),
            verbose=bool(data.get('verbose', False)),
        )
