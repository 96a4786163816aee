"""Application-wide constant values."""

__version__ = "0.3.1"
__app_name__ = "tiltlight"

# iio-sensor-proxy on the system bus
SENSOR_PROXY_SERVICE = "net.hadess.SensorProxy"
SENSOR_PROXY_PATH = "/net/hadess/SensorProxy"
SENSOR_PROXY_INTERFACE = "net.hadess.SensorProxy"
DBUS_PROPERTIES_INTERFACE = "org.freedesktop.DBus.Properties"

# Properties exposed by the sensor proxy
PROP_HAS_ACCELEROMETER = "HasAccelerometer"
PROP_ORIENTATION = "AccelerometerOrientation"
PROP_HAS_AMBIENT_LIGHT = "HasAmbientLight"
PROP_LIGHT_LEVEL = "LightLevel"
PROP_LIGHT_LEVEL_UNIT = "LightLevelUnit"

# Backlight range used by the brightness curve
LOWER_BACKLIGHT = 6
UPPER_BACKLIGHT = 100
BRIGHTNESS_SCALE = 10

DEFAULT_OUTPUT = "eDP1"
DEFAULT_TARGET_DEVICES = [
    "Atmel",
    "Wacom ISDv4 12C Pen stylus",
    "Wacom ISDv4 12C Pen eraser",
]

SETTINGS_FILE_NAME = "settings.json"
ENV_PREFIX = "TILTLIGHT_"
