"""Helpers for controlling the backlight through /sys/class/backlight."""

from __future__ import annotations

import glob
import logging
import os
from dataclasses import dataclass
from typing import Iterable, Optional

logger = logging.getLogger(__name__)

BACKLIGHT_ROOT = "/sys/class/backlight"

# Kernel interface types, most preferred first
_TYPE_PREFERENCE = {"firmware": 0, "platform": 1, "raw": 2}


@dataclass
class BacklightInfo:
    """Information about a detected backlight device."""

    name: str
    brightness_path: str
    max_brightness: int
    kind: str = "raw"


class SystemBacklightController:
    """Control screen backlight by writing to /sys/class/backlight."""

    def __init__(self, info: BacklightInfo) -> None:
        self._info = info
        self._last_raw_value: Optional[int] = None

    @property
    def name(self) -> str:
        return self._info.name

    @property
    def max_brightness(self) -> int:
        return self._info.max_brightness

    @classmethod
    def auto_detect(cls, root: str = BACKLIGHT_ROOT) -> Optional["SystemBacklightController"]:
        """Return a controller for the first readable backlight device."""
        for info in cls._enumerate_backlights(root):
            controller = cls(info)
            try:
                controller.get_percent()
            except (OSError, ValueError) as e:
                logger.debug(f"Skipping backlight {info.name}: {e}")
                continue
            return controller
        return None

    @classmethod
    def from_directory(cls, directory: str) -> Optional["SystemBacklightController"]:
        """Create controller from explicit backlight directory."""
        info = cls._read_info(directory)
        return cls(info) if info is not None else None

    @classmethod
    def _enumerate_backlights(cls, root: str) -> Iterable[BacklightInfo]:
        infos = [info for info in map(cls._read_info, glob.glob(os.path.join(root, "*"))) if info]
        return sorted(infos, key=lambda info: (_TYPE_PREFERENCE.get(info.kind, 3), info.name))

    @classmethod
    def _read_info(cls, directory: str) -> Optional[BacklightInfo]:
        brightness_path = os.path.join(directory, "brightness")
        max_path = os.path.join(directory, "max_brightness")
        if not (os.path.exists(brightness_path) and os.path.exists(max_path)):
            return None
        try:
            max_value = cls._read_int(max_path)
        except (OSError, ValueError):
            return None
        kind = "raw"
        type_path = os.path.join(directory, "type")
        if os.path.exists(type_path):
            with open(type_path, "r", encoding="utf-8") as handle:
                kind = handle.read().strip()
        return BacklightInfo(
            name=os.path.basename(directory.rstrip("/")),
            brightness_path=brightness_path,
            max_brightness=max_value,
            kind=kind,
        )

    def set_percent(self, percent: float) -> None:
        """Set backlight level as a percentage of max_brightness, clamped to 0..100."""
        clamped = max(0.0, min(100.0, float(percent)))
        raw_value = int(round(clamped / 100.0 * self._info.max_brightness))
        if self._last_raw_value is not None and raw_value == self._last_raw_value:
            return

        try:
            with open(self._info.brightness_path, "w", encoding="utf-8") as handle:
                handle.write(f"{raw_value}\n")
        except PermissionError as exc:
            raise PermissionError(
                f"Permission denied while writing {self._info.brightness_path}. "
                "Add a udev rule granting write access or run the daemon as root."
            ) from exc
        self._last_raw_value = raw_value

    def get_percent(self) -> float:
        """Return current backlight level in range 0..100."""
        raw_value = self._read_int(self._info.brightness_path)
        self._last_raw_value = raw_value
        if self._info.max_brightness <= 0:
            return 0.0
        return max(0.0, min(100.0, raw_value * 100.0 / self._info.max_brightness))

    @staticmethod
    def _read_int(path: str) -> int:
        with open(path, "r", encoding="utf-8") as handle:
            return int(handle.read().strip())
