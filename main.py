# main.py
from __future__ import annotations

import argparse
import configparser
import logging
import signal
import sys
from pathlib import Path
from typing import List, Optional

from PySide6.QtCore import QCoreApplication, QTimer

from app_meta import APP_NAME, detect_version
from backend import PulseDefaultsBackend
from lifecycle import DefaultRestoreService, StartupError
from log_setup import configure_logging
from models import HostError
from pulse_events import subscribe_server_changes
from store_config import ConfigStore


LOGGER = logging.getLogger(__name__)


def _parse_args(argv: Optional[List[str]]) -> argparse.Namespace:
    parser = argparse.ArgumentParser(prog="redefault", description="Restore and keep the default sink and source.")
    parser.add_argument("--config", type=Path, default=None, help="config file (default: XDG config dir)")
    parser.add_argument("--verbose", "-v", action="store_true", help="debug logging")
    parser.add_argument("--version", action="version", version=f"{APP_NAME} {detect_version()}")
    return parser.parse_args(argv)


def _install_signal_handlers(app: QCoreApplication) -> QTimer:
    def _quit(signum, _frame) -> None:
        LOGGER.info("Received signal %d, shutting down.", signum)
        app.quit()

    signal.signal(signal.SIGINT, _quit)
    signal.signal(signal.SIGTERM, _quit)

    # Python signal handlers only run when the interpreter gets control back
    wake = QTimer()
    wake.setInterval(250)
    wake.timeout.connect(lambda: None)
    wake.start()
    return wake


def main(argv: Optional[List[str]] = None) -> int:
    args = _parse_args(argv)

    store = ConfigStore(override_path=args.config)
    try:
        settings = store.settings()
    except (OSError, configparser.Error) as e:
        configure_logging("DEBUG" if args.verbose else "INFO")
        LOGGER.error("Cannot read config %s: %s", store.file_path, e)
        return 1

    configure_logging("DEBUG" if args.verbose else settings.log_level, settings.log_file)
    LOGGER.debug("Using config %s.", store.file_path)

    app = QCoreApplication(sys.argv[:1])
    app.setApplicationName(APP_NAME)
    wake = _install_signal_handlers(app)

    backend = PulseDefaultsBackend(settings.configured)
    try:
        LOGGER.info("Connected to %s.", backend.server_label())
        backend.apply_configured_defaults()
    except HostError as e:
        LOGGER.error("Cannot connect to the sound server: %s", e)
        backend.close()
        return 1

    service = DefaultRestoreService(
        backend,
        subscribe=subscribe_server_changes,
        interval=settings.save_interval,
        state_dir=settings.state_dir,
    )
    try:
        service.start()
    except StartupError as e:
        LOGGER.error("%s", e)
        backend.close()
        return 1

    app.aboutToQuit.connect(service.stop)
    try:
        rc = app.exec()
    finally:
        service.stop()
        wake.stop()
        backend.close()
    return rc


if __name__ == "__main__":
    raise SystemExit(main())
