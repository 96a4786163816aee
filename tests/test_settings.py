import json

import pytest

from config.constants import DEFAULT_TARGET_DEVICES
from config.settings import BacklightMethod, DaemonSettings
from config.settings_manager import SettingsManager, get_config_dir


def test_defaults():
    settings = DaemonSettings()
    assert settings.output == "eDP1"
    assert settings.target_devices == DEFAULT_TARGET_DEVICES
    assert settings.lower_backlight == 6
    assert settings.upper_backlight == 100
    assert settings.backlight_ceiling is None
    assert settings.backlight_method is BacklightMethod.XBACKLIGHT


def test_default_device_list_is_not_shared():
    first = DaemonSettings()
    first.target_devices.append("extra")
    assert "extra" not in DaemonSettings().target_devices


def test_round_trip_through_dict():
    original = DaemonSettings(output="DSI-1", target_devices=["Touch"], clamp_backlight=True,
                              backlight_method="sysfs", backlight_device="/sys/class/backlight/x")
    restored = DaemonSettings.from_dict(original.to_dict())
    assert restored == original
    assert restored.backlight_method is BacklightMethod.SYSFS
    assert restored.backlight_ceiling == 100


@pytest.mark.parametrize("kwargs", [
    {"output": ""},
    {"target_devices": [""]},
    {"lower_backlight": -1},
    {"lower_backlight": 50, "upper_backlight": 40},
    {"brightness_scale": 0},
    {"backlight_method": "ddc"},
])
def test_validation(kwargs):
    with pytest.raises(ValueError):
        DaemonSettings(**kwargs)


def test_missing_file_gives_defaults(tmp_path):
    manager = SettingsManager(str(tmp_path), environ={})
    assert manager.load_settings() == DaemonSettings()


def test_file_values_are_loaded(tmp_path):
    (tmp_path / "settings.json").write_text(json.dumps({
        "output": "eDP-1",
        "target_devices": ["ELAN Touchscreen"],
        "dry_run": True,
    }))
    settings = SettingsManager(str(tmp_path), environ={}).load_settings()
    assert settings.output == "eDP-1"
    assert settings.target_devices == ["ELAN Touchscreen"]
    assert settings.dry_run is True


def test_environment_overrides_file(tmp_path):
    (tmp_path / "settings.json").write_text(json.dumps({"output": "eDP-1", "verbose": False}))
    environ = {
        "TILTLIGHT_OUTPUT": "HDMI-1",
        "TILTLIGHT_DEVICES": "Pen stylus, Pen eraser,",
        "TILTLIGHT_VERBOSE": "yes",
        "TILTLIGHT_DRY_RUN": "0",
        "TILTLIGHT_LOG_FILE": "/tmp/tiltlight.log",
    }
    settings = SettingsManager(str(tmp_path), environ=environ).load_settings()
    assert settings.output == "HDMI-1"
    assert settings.target_devices == ["Pen stylus", "Pen eraser"]
    assert settings.verbose is True
    assert settings.dry_run is False
    assert settings.log_file == "/tmp/tiltlight.log"


def test_malformed_file_falls_back(tmp_path, caplog):
    (tmp_path / "settings.json").write_text("{not json")
    settings = SettingsManager(str(tmp_path), environ={}).load_settings()
    assert settings == DaemonSettings()
    assert "Error loading settings" in caplog.text


def test_invalid_values_fall_back(tmp_path, caplog):
    (tmp_path / "settings.json").write_text(json.dumps({"brightness_scale": -3}))
    settings = SettingsManager(str(tmp_path), environ={}).load_settings()
    assert settings.brightness_scale == 10
    assert "Invalid settings" in caplog.text


def test_save_settings(tmp_path):
    manager = SettingsManager(str(tmp_path / "conf"), environ={})
    manager.save_settings(DaemonSettings(output="eDP-2"))
    assert manager.load_settings().output == "eDP-2"


def test_config_dir_honours_xdg(monkeypatch, tmp_path):
    monkeypatch.setenv("XDG_CONFIG_HOME", str(tmp_path))
    assert get_config_dir() == str(tmp_path / "tiltlight")
