"""
Logging configuration for the Sarthi engine.

Sets up console + rotating file logging from ``Settings``. All modules should use:
    import logging
    logger = logging.getLogger(__name__)
"""

from __future__ import annotations

import logging
import logging.handlers
import sys

from sarthi.config.settings import Settings

LOG_FORMAT = "%(asctime)s | %(levelname)-8s | %(name)s | %(message)s"
DATE_FORMAT = "%Y-%m-%d %H:%M:%S"


def level_for(debug: bool) -> int:
    """Map the ``Settings.debug`` flag to a log level."""
    return logging.DEBUG if debug else logging.INFO


def setup_logging(settings: Settings, log_to_file: bool = True) -> None:
    """
    Configure logging for the whole ``sarthi`` package.

    The level follows ``settings.debug``; the file handler writes
    ``settings.logging.file_name`` under ``settings.logs_dir`` and rotates
    per ``settings.logging``.  Noisy third-party loggers stay at WARNING
    unless debug is on.

    Args:
        settings: Application settings.
        log_to_file: If False, only console logging is set up.
    """
    level = level_for(settings.debug)
    root_logger = logging.getLogger("sarthi")
    root_logger.setLevel(level)

    for name in settings.logging.quiet_loggers:
        logging.getLogger(name).setLevel(level if settings.debug else logging.WARNING)

    # Prevent duplicate handlers on repeated calls
    if root_logger.handlers:
        return

    formatter = logging.Formatter(fmt=LOG_FORMAT, datefmt=DATE_FORMAT)

    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setLevel(level)
    console_handler.setFormatter(formatter)
    root_logger.addHandler(console_handler)

    if not log_to_file:
        return

    log_path = settings.logs_dir / settings.logging.file_name
    try:
        settings.logs_dir.mkdir(parents=True, exist_ok=True)
        file_handler = logging.handlers.RotatingFileHandler(
            filename=log_path,
            maxBytes=settings.logging.max_bytes,
            backupCount=settings.logging.backup_count,
            encoding="utf-8",
        )
        file_handler.setLevel(level)
        file_handler.setFormatter(formatter)
        root_logger.addHandler(file_handler)
    except OSError as e:
        root_logger.warning("Could not set up file logging at %s: %s", log_path, e)
