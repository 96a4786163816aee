"""Connection and claim lifecycle against iio-sensor-proxy."""

from __future__ import annotations

import logging
from enum import Enum
from typing import Any, Dict, List, Optional

from PyQt6.QtCore import QObject, pyqtSignal, pyqtSlot

from config.constants import (
    PROP_HAS_ACCELEROMETER,
    PROP_HAS_AMBIENT_LIGHT,
    PROP_LIGHT_LEVEL,
    PROP_LIGHT_LEVEL_UNIT,
    PROP_ORIENTATION,
)
from .sensor_bus import SensorBusError, SensorProxyBus

logger = logging.getLogger(__name__)


class SessionState(str, Enum):
    DISCONNECTED = "disconnected"
    CONNECTED = "connected"
    CLAIMED = "claimed"


class SensorCapability(str, Enum):
    """Claimable features of the sensor proxy, in claim order."""
    ACCELEROMETER = "accelerometer"
    AMBIENT_LIGHT = "light sensor"

    @property
    def claim_method(self) -> str:
        return _CLAIM_METHODS[self][0]

    @property
    def release_method(self) -> str:
        return _CLAIM_METHODS[self][1]


_CLAIM_METHODS = {
    SensorCapability.ACCELEROMETER: ("ClaimAccelerometer", "ReleaseAccelerometer"),
    SensorCapability.AMBIENT_LIGHT: ("ClaimLight", "ReleaseLight"),
}


class SensorSession(QObject):
    """Owns the proxy connection, the claims and the property cache.

    The bus is anything exposing the ``SensorProxyBus`` signals and
    methods. Every transition happens on the thread running the Qt event
    loop.
    """

    stateChanged = pyqtSignal(str)
    claimed = pyqtSignal()
    propertiesChanged = pyqtSignal(dict, list)
    fatalError = pyqtSignal(str)
    cancelled = pyqtSignal()

    def __init__(self, bus: SensorProxyBus, parent: Optional[QObject] = None) -> None:
        super().__init__(parent)
        self._bus = bus
        self._state = SessionState.DISCONNECTED
        self._cache: Dict[str, Any] = {}
        self._shutting_down = False

        bus.serviceAppeared.connect(self._on_service_appeared)
        bus.serviceVanished.connect(self._on_service_vanished)
        bus.propertiesChanged.connect(self._on_properties_changed)

    @property
    def state(self) -> SessionState:
        return self._state

    @property
    def properties(self) -> Dict[str, Any]:
        return dict(self._cache)

    def get_property(self, name: str, default: Any = None) -> Any:
        """Return the last known value of a sensor property.

        Args:
            name: D-Bus property name, e.g. "LightLevel"
            default: Value returned when the property is not cached

        Returns:
            Cached value or ``default``
        """
        return self._cache.get(name, default)

    def shutdown(self, release: bool = True) -> None:
        """Mark the session as shutting down.

        Claim errors seen after this point are treated as cancellation.

        Args:
            release: If True, release held claims before returning
        """
        self._shutting_down = True
        if release:
            self.release()

    def release(self) -> None:
        """Release both claims if they are held.

        Issues ``ReleaseAccelerometer`` then ``ReleaseLight`` and moves the
        session back to CONNECTED. Failures are logged, never raised.
        """
        if self._state is not SessionState.CLAIMED:
            return
        for capability in SensorCapability:
            try:
                self._bus.call(capability.release_method)
            except SensorBusError as e:
                logger.warning(f"Failed to release {capability.value}: {e.message}")
        self._set_state(SessionState.CONNECTED)

    def _set_state(self, state: SessionState) -> None:
        if state is self._state:
            return
        logger.debug(f"Sensor session {self._state.value} -> {state.value}")
        self._state = state
        self.stateChanged.emit(state.value)

    @pyqtSlot()
    def _on_service_appeared(self) -> None:
        logger.info("+++ iio-sensor-proxy appeared")

        if self._bus.is_connected:
            self._bus.disconnect_proxy()
        self._cache.clear()
        self._bus.connect_proxy()
        self._set_state(SessionState.CONNECTED)

        for capability in SensorCapability:
            try:
                self._bus.call(capability.claim_method)
            except SensorBusError as e:
                self._claim_failed(capability, e)
                return

        try:
            self._cache.update(self._bus.get_all())
        except SensorBusError as e:
            self._claim_failed(None, e)
            return

        self._set_state(SessionState.CLAIMED)
        self._log_initial_values()
        self.claimed.emit()

    def _claim_failed(self, capability: Optional[SensorCapability], error: SensorBusError) -> None:
        if error.is_cancelled or self._shutting_down:
            logger.debug(f"Claim cancelled: {error.message}")
            self.cancelled.emit()
            return
        if capability is None:
            logger.error(f"Failed to read sensor properties: {error.message}")
        else:
            logger.error(f"Failed to claim {capability.value}: {error.message}")
        self.fatalError.emit(error.message)

    @pyqtSlot()
    def _on_service_vanished(self) -> None:
        if not self._bus.is_connected:
            return
        self._bus.disconnect_proxy()
        self._cache.clear()
        self._set_state(SessionState.DISCONNECTED)
        logger.info("--- iio-sensor-proxy vanished, waiting for it to appear")

    @pyqtSlot(dict, list)
    def _on_properties_changed(self, changed: Dict[str, Any], invalidated: List[str]) -> None:
        self._cache.update(changed)
        for name in invalidated:
            try:
                self._cache[name] = self._bus.get(name)
            except SensorBusError as e:
                logger.debug(f"Could not refresh {name}: {e.message}")
                self._cache.pop(name, None)

        if self._state is not SessionState.CLAIMED:
            return
        self.propertiesChanged.emit(dict(changed), list(invalidated))

    def _log_initial_values(self) -> None:
        if self._cache.get(PROP_HAS_ACCELEROMETER):
            logger.info(f"=== Has accelerometer (orientation: {self._cache.get(PROP_ORIENTATION)})")
        else:
            logger.info("=== No accelerometer")

        if self._cache.get(PROP_HAS_AMBIENT_LIGHT):
            level = self._cache.get(PROP_LIGHT_LEVEL, 0.0)
            unit = self._cache.get(PROP_LIGHT_LEVEL_UNIT, "")
            logger.info(f"=== Has ambient light sensor (value: {float(level):f}, unit: {unit})")
        else:
            logger.info("=== No ambient light sensor")
