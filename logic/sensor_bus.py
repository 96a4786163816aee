"""QtDBus access to iio-sensor-proxy on the system bus."""

from __future__ import annotations

import logging
from typing import Any, Dict, Iterable, List, Optional

from PyQt6.QtCore import QObject, pyqtSignal, pyqtSlot
from PyQt6.QtDBus import (
    QDBusConnection,
    QDBusInterface,
    QDBusMessage,
    QDBusServiceWatcher,
    QDBusVariant,
)

from config.constants import (
    DBUS_PROPERTIES_INTERFACE,
    PROP_HAS_ACCELEROMETER,
    PROP_HAS_AMBIENT_LIGHT,
    PROP_LIGHT_LEVEL,
    PROP_LIGHT_LEVEL_UNIT,
    PROP_ORIENTATION,
    SENSOR_PROXY_INTERFACE,
    SENSOR_PROXY_PATH,
    SENSOR_PROXY_SERVICE,
)

logger = logging.getLogger(__name__)

# GIO's G_IO_ERROR_CANCELLED as it travels over the bus
CANCELLED_ERROR_NAMES = frozenset({
    "org.gtk.GDBus.UnmappedGError.Quark._g_2dio_2derror_2dquark.Code19",
})

# Claims block until the proxy answers
CALL_TIMEOUT_MS = 0x7FFFFFFF

SENSOR_PROPERTIES = (
    PROP_HAS_ACCELEROMETER,
    PROP_ORIENTATION,
    PROP_HAS_AMBIENT_LIGHT,
    PROP_LIGHT_LEVEL,
    PROP_LIGHT_LEVEL_UNIT,
)


class SensorBusError(Exception):
    """A D-Bus call to the sensor proxy returned an error."""

    def __init__(self, name: str, message: str) -> None:
        super().__init__(message or name)
        self.name = name
        self.message = message or name

    @property
    def is_cancelled(self) -> bool:
        return self.name in CANCELLED_ERROR_NAMES


def unwrap_variant(value: Any) -> Any:
    """Strip QDBusVariant wrappers from a demarshalled value."""
    while isinstance(value, QDBusVariant):
        value = value.variant()
    return value


class SensorProxyBus(QObject):
    """Thin adapter around the sensor proxy's bus name and object.

    Emits ``serviceAppeared``/``serviceVanished`` as the bus name gains or
    loses an owner and forwards the proxy's ``PropertiesChanged`` signal
    as ``propertiesChanged(changed, invalidated)``.
    """

    serviceAppeared = pyqtSignal()
    serviceVanished = pyqtSignal()
    propertiesChanged = pyqtSignal(dict, list)

    def __init__(
        self,
        connection: Optional[QDBusConnection] = None,
        service: str = SENSOR_PROXY_SERVICE,
        path: str = SENSOR_PROXY_PATH,
        interface: str = SENSOR_PROXY_INTERFACE,
        parent: Optional[QObject] = None,
    ) -> None:
        super().__init__(parent)
        self._connection = connection if connection is not None else QDBusConnection.systemBus()
        self._service = service
        self._path = path
        self._interface = interface
        self._watcher: Optional[QDBusServiceWatcher] = None
        self._proxy: Optional[QDBusInterface] = None
        self._properties: Optional[QDBusInterface] = None
        self._subscribed = False

    @property
    def service(self) -> str:
        return self._service

    @property
    def is_connected(self) -> bool:
        return self._proxy is not None

    def watch(self) -> None:
        """Start watching the service name.

        ``serviceAppeared`` is emitted right away when the name already
        has an owner.
        """
        if not self._connection.isConnected():
            raise SensorBusError(
                "org.freedesktop.DBus.Error.Disconnected",
                f"Cannot connect to the system bus: {self._connection.lastError().message()}",
            )

        mode = (
            QDBusServiceWatcher.WatchModeFlag.WatchForRegistration
            | QDBusServiceWatcher.WatchModeFlag.WatchForUnregistration
        )
        self._watcher = QDBusServiceWatcher(self._service, self._connection, mode, self)
        self._watcher.serviceRegistered.connect(self._on_registered)
        self._watcher.serviceUnregistered.connect(self._on_unregistered)

        reply = self._connection.interface().isServiceRegistered(self._service)
        if reply.isValid() and reply.value():
            self.serviceAppeared.emit()

    def connect_proxy(self) -> None:
        """Create the proxy object and subscribe to property changes."""
        self._proxy = QDBusInterface(self._service, self._path, self._interface, self._connection)
        self._proxy.setTimeout(CALL_TIMEOUT_MS)
        self._properties = QDBusInterface(
            self._service, self._path, DBUS_PROPERTIES_INTERFACE, self._connection
        )
        self._subscribed = self._connection.connect(
            self._service,
            self._path,
            DBUS_PROPERTIES_INTERFACE,
            "PropertiesChanged",
            self._on_properties_changed,
        )
        if not self._subscribed:
            logger.warning(f"Could not subscribe to PropertiesChanged on {self._service}")

    def disconnect_proxy(self) -> None:
        """Forget the proxy object and drop the subscription."""
        if self._subscribed:
            self._connection.disconnect(
                self._service,
                self._path,
                DBUS_PROPERTIES_INTERFACE,
                "PropertiesChanged",
                self._on_properties_changed,
            )
            self._subscribed = False
        self._proxy = None
        self._properties = None

    def call(self, method: str) -> List[Any]:
        """Call a method on the sensor proxy synchronously.

        Args:
            method: Method name on the sensor proxy interface

        Returns:
            Reply arguments

        Raises:
            SensorBusError: on an error reply or without a proxy
        """
        if self._proxy is None:
            raise SensorBusError("org.freedesktop.DBus.Error.ServiceUnknown",
                                 f"No proxy for {self._service}")
        return self._check(self._proxy.call(method))

    def get(self, name: str) -> Any:
        """Read one property of the sensor proxy.

        Args:
            name: Property name

        Returns:
            The property value with variant wrappers removed

        Raises:
            SensorBusError: on an error reply or without a proxy
        """
        if self._properties is None:
            raise SensorBusError("org.freedesktop.DBus.Error.ServiceUnknown",
                                 f"No proxy for {self._service}")
        arguments = self._check(self._properties.call("Get", self._interface, name))
        return unwrap_variant(arguments[0]) if arguments else None

    def get_all(self, names: Iterable[str] = SENSOR_PROPERTIES) -> Dict[str, Any]:
        """Read the given properties, skipping any the proxy rejects.

        Args:
            names: Property names to read

        Returns:
            Mapping of property name to value

        Raises:
            SensorBusError: only when a read is cancelled
        """
        values: Dict[str, Any] = {}
        for name in names:
            try:
                values[name] = self.get(name)
            except SensorBusError as e:
                if e.is_cancelled:
                    raise
                logger.debug(f"Could not read {name}: {e.message}")
        return values

    @staticmethod
    def _check(reply: QDBusMessage) -> List[Any]:
        if reply.type() == QDBusMessage.MessageType.ErrorMessage:
            raise SensorBusError(reply.errorName(), reply.errorMessage())
        return list(reply.arguments())

    @pyqtSlot(str)
    def _on_registered(self, name: str) -> None:
        logger.debug(f"Bus name {name} registered")
        self.serviceAppeared.emit()

    @pyqtSlot(str)
    def _on_unregistered(self, name: str) -> None:
        logger.debug(f"Bus name {name} unregistered")
        self.serviceVanished.emit()

    @pyqtSlot(str, 'QVariantMap', 'QStringList')
    def _on_properties_changed(self, interface: str, changed: Dict[str, Any], invalidated: List[str]) -> None:
        if interface != self._interface:
            return
        values = {str(key): unwrap_variant(value) for key, value in dict(changed).items()}
        self.propertiesChanged.emit(values, [str(name) for name in invalidated])
