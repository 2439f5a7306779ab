"""Process-wide logging setup."""

from __future__ import annotations

import logging
import sys

LOG_FORMAT = "%(asctime)s %(levelname)s [%(name)s] %(message)s"
ROOT_LOGGER_NAME = "rendezvous"


def setup_logging(log_level: str = "INFO", log_file: str | None = None) -> None:
    """Attach stream (and optional file) handlers to the package logger.

    Calling it again replaces the handlers, so reloads in tests do not stack
    duplicate output.
    """
    logger = logging.getLogger(ROOT_LOGGER_NAME)
    logger.setLevel(log_level.upper())

    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()

    formatter = logging.Formatter(LOG_FORMAT)
    stream_handler = logging.StreamHandler(sys.stdout)
    stream_handler.setFormatter(formatter)
    logger.addHandler(stream_handler)

    if log_file:
        file_handler = logging.FileHandler(log_file, encoding="utf-8")
        file_handler.setFormatter(formatter)
        logger.addHandler(file_handler)


def get_logger(name: str) -> logging.Logger:
    return logging.getLogger(name)
