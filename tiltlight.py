"""Entry point for the tiltlight sensor daemon."""

import logging
import signal
import sys

from PyQt6.QtCore import QCoreApplication, QTimer

from config import (
    __version__,
    SettingsManager,
    setup_logging,
    setup_qt_logging,
)
from logic import (
    ChangeDispatcher,
    SensorBusError,
    SensorProxyBus,
    SensorSession,
    create_backend,
)

logger = logging.getLogger(__name__)

__all__ = ["__version__", "main"]


def _install_signal_handlers(app: QCoreApplication) -> QTimer:
    """Quit the event loop on SIGINT/SIGTERM.

    Python only runs signal handlers between bytecodes, so a timer keeps
    the interpreter waking up while Qt sits in its event loop.
    """
    for signum in (signal.SIGINT, signal.SIGTERM):
        signal.signal(signum, lambda *_args: app.quit())
    timer = QTimer()
    timer.timeout.connect(lambda: None)
    timer.start(500)
    return timer


def main() -> int:
    """Run the daemon until the event loop ends.

    Returns:
        Process exit code: 0 on normal shutdown, 1 on a fatal claim or
        startup failure
    """
    settings = SettingsManager().load_settings()
    setup_logging(settings)

    logger.info(f"Starting tiltlight v{__version__}")
    try:
        app = QCoreApplication(sys.argv)
        setup_qt_logging()

        backend = create_backend(settings)
        bus = SensorProxyBus(parent=app)
        session = SensorSession(bus, parent=app)
        ChangeDispatcher(session, backend, settings, parent=app)

        session.fatalError.connect(lambda _message: app.exit(1))
        session.cancelled.connect(app.quit)
        app.aboutToQuit.connect(lambda: session.shutdown(release=settings.release_on_exit))
        signal_timer = _install_signal_handlers(app)

        def start() -> None:
            logger.info("    Waiting for iio-sensor-proxy to appear")
            try:
                bus.watch()
            except SensorBusError as e:
                logger.error(f"Cannot watch {bus.service}: {e}")
                app.exit(1)

        # Watch from inside the loop so a fatal claim can end it
        QTimer.singleShot(0, start)
        exit_code = app.exec()
        signal_timer.stop()
        return exit_code
    except Exception as e:
        logger.exception(f"Fatal error in daemon: {e}")
        return 1


if __name__ == "__main__":
    sys.exit(main())
