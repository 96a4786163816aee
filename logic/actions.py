"""Backends that carry out display actions."""

from __future__ import annotations

import abc
import logging
import subprocess
from typing import List, Optional

from config.settings import BacklightMethod, DaemonSettings
from .orientation import Rotation, TransformMatrix
from .system_brightness import SystemBacklightController

logger = logging.getLogger(__name__)

COMMAND_TIMEOUT_S = 10
TRANSFORM_PROPERTY = "Coordinate Transformation Matrix"


class ActionError(Exception):
    """An action could not be applied."""


class ActionBackend(abc.ABC):
    """Applies rotations, input transforms and backlight levels."""

    @abc.abstractmethod
    def set_rotation(self, rotation: Rotation) -> None:
        ...

    @abc.abstractmethod
    def set_device_transform(self, device: str, matrix: TransformMatrix) -> None:
        ...

    @abc.abstractmethod
    def set_backlight(self, level: float) -> None:
        ...


def backlight_command(level: float) -> List[str]:
    return ["xbacklight", "-set", f"{level:f}"]


def run_command(args: List[str], timeout: float = COMMAND_TIMEOUT_S) -> None:
    """Run an external command without a shell.

    Raises:
        ActionError: if the command is missing, times out or fails
    """
    logger.debug(f"Running: {' '.join(args)}")
    try:
        result = subprocess.run(args, capture_output=True, text=True, timeout=timeout)
    except FileNotFoundError as e:
        raise ActionError(f"'{args[0]}' command not found") from e
    except subprocess.TimeoutExpired as e:
        raise ActionError(f"'{args[0]}' timed out after {timeout}s") from e
    except OSError as e:
        raise ActionError(f"Cannot run '{args[0]}': {e}") from e
    if result.returncode != 0:
        error = result.stderr.strip() or result.stdout.strip() or f"exit status {result.returncode}"
        raise ActionError(f"'{' '.join(args)}' failed: {error}")


class XCommandBackend(ActionBackend):
    """Drive X11 through xrandr, xinput and xbacklight."""

    def __init__(self, output: str) -> None:
        self.output = output

    def set_rotation(self, rotation: Rotation) -> None:
        run_command(["xrandr", "--output", self.output, "--rotate", rotation.value])

    def set_device_transform(self, device: str, matrix: TransformMatrix) -> None:
        run_command(["xinput", "set-prop", device, TRANSFORM_PROPERTY, *matrix.as_args()])

    def set_backlight(self, level: float) -> None:
        run_command(backlight_command(level))


class SysfsBacklightBackend(XCommandBackend):
    """X11 rotation with the backlight written to sysfs as a percentage."""

    def __init__(self, output: str, controller: SystemBacklightController) -> None:
        super().__init__(output)
        self.controller = controller

    def set_backlight(self, level: float) -> None:
        try:
            self.controller.set_percent(level)
        except OSError as e:
            raise ActionError(f"Failed to write backlight {self.controller.name}: {e}") from e


class LoggingBackend(ActionBackend):
    """Dry-run backend: only reports what would be done."""

    def __init__(self, output: str) -> None:
        self.output = output

    def set_rotation(self, rotation: Rotation) -> None:
        logger.info(f"[dry-run] xrandr --output {self.output} --rotate {rotation.value}")

    def set_device_transform(self, device: str, matrix: TransformMatrix) -> None:
        logger.info(f"[dry-run] xinput set-prop '{device}' '{TRANSFORM_PROPERTY}' {matrix.format()}")

    def set_backlight(self, level: float) -> None:
        logger.info(f"[dry-run] {' '.join(backlight_command(level))}")


def create_backend(settings: DaemonSettings) -> ActionBackend:
    """Build the backend selected by the settings."""
    if settings.dry_run:
        return LoggingBackend(settings.output)

    if settings.backlight_method is BacklightMethod.SYSFS:
        controller: Optional[SystemBacklightController]
        if settings.backlight_device:
            controller = SystemBacklightController.from_directory(settings.backlight_device)
        else:
            controller = SystemBacklightController.auto_detect()
        if controller is None:
            raise ActionError("No usable backlight device found under /sys/class/backlight")
        logger.info(f"Using sysfs backlight {controller.name} (max {controller.max_brightness})")
        return SysfsBacklightBackend(settings.output, controller)

    return XCommandBackend(settings.output)
