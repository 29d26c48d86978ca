"""
Logging setup for the Lius FinTech API.

Everything the service logs goes through loggers below the
``lius_fintech_api`` package logger.  ``setup_logging`` sets that
logger's level from ``LOG_LEVEL`` and, when ``LOG_FILE`` is set, sends
its records to that file as well.  A console handler is attached to the
root logger only when nobody (uvicorn, pytest) has configured it yet.
"""

import logging
from pathlib import Path
from typing import Optional

from .config import settings

APP_LOGGER = "lius_fintech_api"
LOG_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"
DATE_FORMAT = "%Y-%m-%d %H:%M:%S"


def setup_logging(level: Optional[str] = None, logfile: Optional[str] = None) -> logging.Logger:
    """Configure the service loggers and return the package logger.

    ``level`` and ``logfile`` default to ``settings.log_level`` and
    ``settings.log_file``.  Calling it again only updates the level; the
    log file handler is added once.
    """
    level = level or settings.log_level
    logfile = logfile if logfile is not None else settings.log_file
    formatter = logging.Formatter(fmt=LOG_FORMAT, datefmt=DATE_FORMAT)

    root = logging.getLogger()
    if not root.handlers:
        console_handler = logging.StreamHandler()
        console_handler.setFormatter(formatter)
        root.addHandler(console_handler)
        root.setLevel(logging.INFO)

    app_logger = logging.getLogger(APP_LOGGER)
    app_logger.setLevel(getattr(logging, level.upper(), logging.INFO))

    if logfile:
        log_path = Path(logfile).resolve()
        already = any(
            isinstance(h, logging.FileHandler) and Path(h.baseFilename) == log_path
            for h in app_logger.handlers
        )
        if not already:
            log_path.parent.mkdir(parents=True, exist_ok=True)
            file_handler = logging.FileHandler(log_path, encoding="utf-8")
            file_handler.setFormatter(formatter)
            app_logger.addHandler(file_handler)
    return app_logger
