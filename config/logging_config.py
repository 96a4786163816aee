"""Logging setup for the daemon and for messages coming out of Qt."""

import logging
import os
import sys
from pathlib import Path
from typing import Mapping, Optional

from PyQt6.QtCore import QtMsgType, qInstallMessageHandler

from .settings import DaemonSettings

# journald stamps every line itself
JOURNAL_FORMAT = '%(levelname)s %(name)s: %(message)s'
CONSOLE_FORMAT = '%(asctime)s - %(levelname)s - %(message)s'
VERBOSE_FORMAT = '%(asctime)s - %(name)s - %(levelname)s - %(filename)s:%(lineno)d - %(message)s'

_QT_LEVELS = {
    QtMsgType.QtDebugMsg: logging.DEBUG,
    QtMsgType.QtInfoMsg: logging.INFO,
    QtMsgType.QtWarningMsg: logging.WARNING,
    QtMsgType.QtCriticalMsg: logging.CRITICAL,
    QtMsgType.QtFatalMsg: logging.CRITICAL,
}


def _console_formatter(verbose: bool, environ: Mapping[str, str]) -> logging.Formatter:
    if verbose:
        return logging.Formatter(VERBOSE_FORMAT, datefmt='%Y-%m-%d %H:%M:%S')
    if environ.get('JOURNAL_STREAM'):
        return logging.Formatter(JOURNAL_FORMAT)
    return logging.Formatter(CONSOLE_FORMAT, datefmt='%H:%M:%S')


def setup_logging(
    settings: DaemonSettings,
    log_level: int = logging.INFO,
    environ: Optional[Mapping[str, str]] = None,
) -> logging.Logger:
    """Configure process-wide logging from the daemon settings.

    Args:
        settings: Supplies ``verbose`` (DEBUG level, detailed format) and
            the optional ``log_file``
        log_level: Level used when not verbose
        environ: Environment to inspect, defaults to ``os.environ``. Under
            systemd (``JOURNAL_STREAM`` set) console lines carry no timestamp

    Returns:
        Configured root logger
    """
    environ = os.environ if environ is None else environ
    if settings.verbose:
        log_level = logging.DEBUG

    root_logger = logging.getLogger()
    root_logger.setLevel(log_level)
    root_logger.handlers.clear()

    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setLevel(log_level)
    console_handler.setFormatter(_console_formatter(settings.verbose, environ))
    root_logger.addHandler(console_handler)

    if settings.log_file:
        try:
            Path(settings.log_file).parent.mkdir(parents=True, exist_ok=True)
            file_handler = logging.FileHandler(settings.log_file, encoding='utf-8')
            file_handler.setLevel(log_level)
            file_handler.setFormatter(logging.Formatter(VERBOSE_FORMAT, datefmt='%Y-%m-%d %H:%M:%S'))
            root_logger.addHandler(file_handler)
        except OSError as e:
            root_logger.warning(f"Failed to create log file {settings.log_file}: {e}")

    return root_logger


class QtLogFilter(logging.Filter):
    """Drop QtDBus chatter that does not affect the daemon."""

    IGNORED_PATTERNS = [
        "QDBusConnection: couldn't handle call",
        "QDBusConnection: name '",
        "QSocketNotifier: Can only be used with threads started with QThread",
    ]

    def filter(self, record: logging.LogRecord) -> bool:
        message = record.getMessage()
        return not any(pattern in message for pattern in self.IGNORED_PATTERNS)


def qt_message_handler(mode: QtMsgType, context, message: str) -> None:
    """Forward a Qt message to the 'Qt' logger at the matching level."""
    logging.getLogger('Qt').log(_QT_LEVELS.get(mode, logging.WARNING), message)


def setup_qt_logging() -> None:
    """Route Qt's own messages through logging, warnings and above only."""
    qt_logger = logging.getLogger('Qt')
    qt_logger.setLevel(logging.WARNING)
    if not any(isinstance(f, QtLogFilter) for f in qt_logger.filters):
        qt_logger.addFilter(QtLogFilter())
    qInstallMessageHandler(qt_message_handler)
