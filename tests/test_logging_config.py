import logging

import pytest
from PyQt6.QtCore import QtMsgType

from config.logging_config import (
    JOURNAL_FORMAT,
    VERBOSE_FORMAT,
    qt_message_handler,
    setup_logging,
    setup_qt_logging,
)
from config.settings import DaemonSettings


@pytest.fixture
def restore_root_logger():
    root = logging.getLogger()
    handlers, level = list(root.handlers), root.level
    yield root
    for handler in root.handlers:
        if handler not in handlers:
            handler.close()
    root.handlers[:] = handlers
    root.setLevel(level)


def test_default_console_logging(restore_root_logger):
    root = setup_logging(DaemonSettings(), environ={})
    assert root.level == logging.INFO
    assert len(root.handlers) == 1


def test_verbose_switches_to_debug(restore_root_logger):
    root = setup_logging(DaemonSettings(verbose=True), environ={})
    assert root.level == logging.DEBUG
    assert root.handlers[0].formatter._fmt == VERBOSE_FORMAT


def test_journald_format_has_no_timestamp(restore_root_logger):
    root = setup_logging(DaemonSettings(), environ={"JOURNAL_STREAM": "8:1234"})
    assert root.handlers[0].formatter._fmt == JOURNAL_FORMAT


def test_log_file_from_settings(restore_root_logger, tmp_path):
    log_file = tmp_path / "logs" / "tiltlight.log"
    root = setup_logging(DaemonSettings(log_file=str(log_file)), environ={})
    logging.getLogger("logic.sensor_session").info("+++ iio-sensor-proxy appeared")
    for handler in root.handlers:
        handler.flush()
    assert "+++ iio-sensor-proxy appeared" in log_file.read_text()


def test_qt_messages_are_filtered_and_leveled(caplog):
    setup_qt_logging()
    qt_message_handler(QtMsgType.QtWarningMsg, None, "QDBusConnection: name 'net.hadess.SensorProxy' had owner")
    qt_message_handler(QtMsgType.QtDebugMsg, None, "debug chatter")
    qt_message_handler(QtMsgType.QtCriticalMsg, None, "bus connection lost")

    qt_records = [r for r in caplog.records if r.name == "Qt"]
    assert [(r.levelno, r.getMessage()) for r in qt_records] == [
        (logging.CRITICAL, "bus connection lost"),
    ]
