"""File logging for resolver diagnostics."""

import logging
import os
from logging.handlers import RotatingFileHandler
from typing import Optional, Union

MAX_LOG_BYTES = 2 * 1024 * 1024
LOG_BACKUP_COUNT = 1
LOG_FORMAT = "[%(asctime)s] %(levelname)s %(name)s: %(message)s"
DATE_FORMAT = "%Y-%m-%dT%H:%M:%S%z"

_handler: Optional[RotatingFileHandler] = None


def configure_logging(path: str, level: Union[int, str] = logging.INFO) -> RotatingFileHandler:
    """
    Attach a rotating file handler to the package logger.

    Calling again with the same path only updates the level.

    Args:
        path: Log file location; parent directories are created
        level: Logging level name or number

    Returns:
        The installed handler
    """
    global _handler
    package_logger = logging.getLogger("shellporter")
    package_logger.setLevel(level)

    path = os.path.abspath(os.path.expanduser(path))
    if _handler is not None:
        if _handler.baseFilename == path:
            return _handler
        package_logger.removeHandler(_handler)
        _handler.close()
        _handler = None

    os.makedirs(os.path.dirname(path), exist_ok=True)
    handler = RotatingFileHandler(path, maxBytes=MAX_LOG_BYTES, backupCount=LOG_BACKUP_COUNT, encoding="utf-8")
    handler.setFormatter(logging.Formatter(LOG_FORMAT, datefmt=DATE_FORMAT))
    package_logger.addHandler(handler)
    _handler = handler
    return handler


def reset_logging() -> None:
    """Detach and close the handler installed by configure_logging."""
    global _handler
    if _handler is not None:
        logging.getLogger("shellporter").removeHandler(_handler)
        _handler.close()
        _handler = None


__all__ = ["configure_logging", "reset_logging", "MAX_LOG_BYTES", "LOG_BACKUP_COUNT"]
