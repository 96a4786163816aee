"""Logic layer exports."""

from .actions import (
    ActionBackend,
    ActionError,
    LoggingBackend,
    SysfsBacklightBackend,
    XCommandBackend,
    create_backend,
)
from .brightness import backlight_setpoint, calculate_brightness
from .dispatcher import ChangeDispatcher
from .orientation import OrientationAction, Rotation, TransformMatrix, map_orientation
from .sensor_bus import SensorBusError, SensorProxyBus
from .sensor_session import SensorCapability, SensorSession, SessionState
from .system_brightness import SystemBacklightController

__all__ = [
    "ActionBackend",
    "ActionError",
    "LoggingBackend",
    "SysfsBacklightBackend",
    "XCommandBackend",
    "create_backend",
    "backlight_setpoint",
    "calculate_brightness",
    "ChangeDispatcher",
    "OrientationAction",
    "Rotation",
    "TransformMatrix",
    "map_orientation",
    "SensorBusError",
    "SensorProxyBus",
    "SensorSession",
    "SensorCapability",
    "SessionState",
    "SystemBacklightController",
]
