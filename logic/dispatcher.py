"""Turn sensor property changes into display actions."""

from __future__ import annotations

import logging
from typing import Any, Dict, Iterable, List, Optional

from PyQt6.QtCore import QObject, pyqtSlot

from config.constants import (
    PROP_HAS_ACCELEROMETER,
    PROP_HAS_AMBIENT_LIGHT,
    PROP_LIGHT_LEVEL,
    PROP_LIGHT_LEVEL_UNIT,
    PROP_ORIENTATION,
)
from config.settings import DaemonSettings
from .actions import ActionBackend, ActionError, backlight_command
from .brightness import LUX_UNIT, backlight_setpoint, calculate_brightness
from .orientation import map_orientation
from .sensor_session import SensorSession

logger = logging.getLogger(__name__)


class ChangeDispatcher(QObject):
    """Reacts to each batch of changed properties from a SensorSession.

    Every batch goes through all four checks: accelerometer presence,
    orientation, light sensor presence and light level.
    """

    def __init__(self, session: SensorSession, backend: ActionBackend, settings: DaemonSettings,
                 parent: Optional[QObject] = None) -> None:
        super().__init__(parent)
        self._session = session
        self._backend = backend
        self._settings = settings
        session.propertiesChanged.connect(self._on_properties_changed)

    @pyqtSlot(dict, list)
    def _on_properties_changed(self, changed: Dict[str, Any], invalidated: List[str]) -> None:
        self.dispatch(changed.keys(), invalidated)

    def dispatch(self, changed: Iterable[str], invalidated: Iterable[str] = ()) -> None:
        """Run the four property checks for one batch.

        Values are read from the session cache, so only the names matter.

        Args:
            changed: Names of properties whose new values were pushed
            invalidated: Names of properties the service invalidated
        """
        names = set(changed) | set(invalidated)

        if PROP_HAS_ACCELEROMETER in names:
            if self._session.get_property(PROP_HAS_ACCELEROMETER):
                logger.info("+++ Accelerometer appeared")
            else:
                logger.info("--- Accelerometer disappeared")

        if PROP_ORIENTATION in names:
            self.apply_orientation(self._session.get_property(PROP_ORIENTATION))

        if PROP_HAS_AMBIENT_LIGHT in names:
            if self._session.get_property(PROP_HAS_AMBIENT_LIGHT):
                logger.info("+++ Light sensor appeared")
            else:
                logger.info("--- Light sensor disappeared")

        if PROP_LIGHT_LEVEL in names:
            self.apply_light_level(
                self._session.get_property(PROP_LIGHT_LEVEL, 0.0),
                self._session.get_property(PROP_LIGHT_LEVEL_UNIT, ""),
            )

    def apply_orientation(self, orientation: Optional[str]) -> None:
        """Rotate the output and remap every target device.

        Args:
            orientation: Orientation name as reported by the sensor proxy
        """
        action = map_orientation(orientation) if isinstance(orientation, str) else None
        if action is None:
            logger.warning(f"Unknown orientation: {orientation}")
            return

        logger.debug(f"Orientation {orientation} -> rotate {action.rotation.value}")
        self._run(self._backend.set_rotation, action.rotation)
        for device in self._settings.target_devices:
            self._run(self._backend.set_device_transform, device, action.matrix)

    def apply_light_level(self, level: float, unit: str) -> None:
        """Set the backlight from a light reading.

        Args:
            level: Light level in ``unit``
            unit: Unit reported by the sensor proxy, normally "lux"
        """
        try:
            level = float(level)
        except (TypeError, ValueError):
            logger.warning(f"Invalid light level: {level!r}")
            return
        if unit != LUX_UNIT:
            logger.warning(f"Unknown unit: {unit}")
        brightness = calculate_brightness(level, unit)
        setpoint = backlight_setpoint(
            brightness,
            lower=self._settings.lower_backlight,
            scale=self._settings.brightness_scale,
            upper=self._settings.backlight_ceiling,
        )
        logger.info(" ".join(backlight_command(setpoint)))
        self._run(self._backend.set_backlight, setpoint)

    @staticmethod
    def _run(action, *args) -> None:
        try:
            action(*args)
        except ActionError as e:
            logger.warning(str(e))
