"""Shared fixtures: a Qt core application, a fake sensor bus and a recording backend."""

from typing import Any, Dict, List, Optional

import pytest
from PyQt6.QtCore import QCoreApplication, QObject, pyqtSignal

from config.settings import DaemonSettings
from logic.actions import ActionBackend, ActionError
from logic.sensor_bus import SensorBusError


@pytest.fixture(scope="session", autouse=True)
def qapp():
    app = QCoreApplication.instance() or QCoreApplication([])
    yield app


class FakeSensorBus(QObject):
    """In-memory stand-in for SensorProxyBus."""

    serviceAppeared = pyqtSignal()
    serviceVanished = pyqtSignal()
    propertiesChanged = pyqtSignal(dict, list)

    def __init__(self, properties: Optional[Dict[str, Any]] = None) -> None:
        super().__init__()
        self.properties: Dict[str, Any] = dict(properties or {})
        self.calls: List[str] = []
        self.failures: Dict[str, SensorBusError] = {}
        self.connects = 0
        self.disconnects = 0
        self._connected = False

    @property
    def service(self) -> str:
        return "net.hadess.SensorProxy"

    @property
    def is_connected(self) -> bool:
        return self._connected

    def connect_proxy(self) -> None:
        self.connects += 1
        self._connected = True

    def disconnect_proxy(self) -> None:
        self.disconnects += 1
        self._connected = False

    def call(self, method: str) -> List[Any]:
        self.calls.append(method)
        if method in self.failures:
            raise self.failures[method]
        return []

    def get(self, name: str) -> Any:
        if name not in self.properties:
            raise SensorBusError("org.freedesktop.DBus.Error.InvalidArgs", f"No such property '{name}'")
        return self.properties[name]

    def get_all(self, names=None) -> Dict[str, Any]:
        return dict(self.properties)

    # Helpers driving the session like the real service would
    def appear(self) -> None:
        self.serviceAppeared.emit()

    def vanish(self) -> None:
        self.serviceVanished.emit()

    def change(self, changed: Dict[str, Any], invalidated: Optional[List[str]] = None) -> None:
        self.properties.update(changed)
        self.propertiesChanged.emit(changed, list(invalidated or []))


class RecordingBackend(ActionBackend):
    def __init__(self) -> None:
        self.actions: List[tuple] = []
        self.fail_devices: set = set()

    def set_rotation(self, rotation) -> None:
        self.actions.append(("rotation", rotation))

    def set_device_transform(self, device, matrix) -> None:
        if device in self.fail_devices:
            raise ActionError(f"device {device} not found")
        self.actions.append(("transform", device, matrix))

    def set_backlight(self, level) -> None:
        self.actions.append(("backlight", level))


SENSOR_DEFAULTS = {
    "HasAccelerometer": True,
    "AccelerometerOrientation": "normal",
    "HasAmbientLight": True,
    "LightLevel": 120.0,
    "LightLevelUnit": "lux",
}


@pytest.fixture
def fake_bus():
    return FakeSensorBus(SENSOR_DEFAULTS)


@pytest.fixture
def backend():
    return RecordingBackend()


@pytest.fixture
def settings():
    return DaemonSettings(target_devices=["Atmel", "Pen stylus", "Pen eraser"])
