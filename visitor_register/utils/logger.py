# visitor_register/utils/logger.py
"""
Logging setup shared by the backend and the setup scripts.

Console output always; a rotating visitor_register.log in LOG_DIR when
LOG_DIR is set. setup_logging() may be called again with another level
(create_app does this with the app's own settings).
"""

import logging
import os
from logging.handlers import RotatingFileHandler

from visitor_register.config import settings

LOG_FORMAT = "%(asctime)s | %(levelname)-8s | %(name)s | %(message)s"
DATE_FORMAT = "%Y-%m-%d %H:%M:%S"
LOG_FILE = "visitor_register.log"
NOISY_LOGGERS = ("multipart", "python_multipart", "urllib3")

_handlers: list[logging.Handler] = []


def setup_logging(level: str = settings.LOG_LEVEL, log_dir: str = settings.LOG_DIR) -> None:
    root = logging.getLogger()
    for handler in _handlers:
        root.removeHandler(handler)
        handler.close()
    _handlers.clear()

    formatter = logging.Formatter(fmt=LOG_FORMAT, datefmt=DATE_FORMAT)
    _handlers.append(logging.StreamHandler())

    # 10 × 5MB files
    if log_dir:
        os.makedirs(log_dir, exist_ok=True)
        _handlers.append(RotatingFileHandler(
            filename=os.path.join(log_dir, LOG_FILE),
            maxBytes=5 * 1024 * 1024,
            backupCount=10,
            encoding="utf-8",
        ))

    for handler in _handlers:
        handler.setFormatter(formatter)
        root.addHandler(handler)
    root.setLevel(level.upper())

    for name in NOISY_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)


def get_logger(name: str) -> logging.Logger:
    """Get a named logger. Call this at the top of every module."""
    if not _handlers:
        setup_logging()
    return logging.getLogger(name)
