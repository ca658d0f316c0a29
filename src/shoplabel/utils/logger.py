"""
Logging configuration for ShopLabel.

Handlers live on the ``shoplabel`` package logger; module loggers returned by
``get_logger`` propagate to it. Until ``setup_logging`` is called with the
application settings, the LOG_LEVEL and LOG_DIR environment variables are
used so that loggers can be created at import time.
"""

import logging
import logging.handlers
import os
import sys
from pathlib import Path
from typing import TYPE_CHECKING, Optional

import colorlog

if TYPE_CHECKING:
    from shoplabel.core.config import Settings

PACKAGE_LOGGER = "shoplabel"
LOG_FILE_NAME = "shoplabel.log"

_LOG_COLORS = {
    'DEBUG': 'cyan',
    'INFO': 'green',
    'WARNING': 'yellow',
    'ERROR': 'red',
    'CRITICAL': 'red,bg_white',
}

_configured = False


class ShopLabelLogger:
    """Builds the handlers of the package logger."""

    def __init__(self, level: str = "INFO", log_dir: Optional[str] = None, debug: bool = False):
        self.level = getattr(logging, level.upper(), logging.INFO)
        self.log_dir = log_dir
        self.debug = debug

    @property
    def _location(self) -> str:
        # Debug output names the emitting function and line
        return "%(name)s.%(funcName)s:%(lineno)d" if self.debug else "%(name)s"

    def configure(self) -> logging.Logger:
        logger = logging.getLogger(PACKAGE_LOGGER)
        logger.setLevel(self.level)
        logger.handlers.clear()

        logger.addHandler(self._console_handler())
        if self.log_dir:
            logger.addHandler(self._file_handler())

        logger.propagate = False
        return logger

    def _console_handler(self) -> logging.Handler:
        handler = colorlog.StreamHandler(sys.stdout)
        handler.setFormatter(colorlog.ColoredFormatter(
            f"%(log_color)s%(asctime)s [%(levelname)8s] {self._location} - %(message)s",
            datefmt="%Y-%m-%d %H:%M:%S",
            log_colors=_LOG_COLORS,
        ))
        return handler

    def _file_handler(self) -> logging.Handler:
        Path(self.log_dir).mkdir(parents=True, exist_ok=True)

        # 5MB per file, keep 5 files
        handler = logging.handlers.RotatingFileHandler(
            os.path.join(self.log_dir, LOG_FILE_NAME),
            maxBytes=5 * 1024 * 1024,
            backupCount=5,
            encoding='utf-8'
        )
        handler.setFormatter(logging.Formatter(
            f"%(asctime)s [%(levelname)8s] {self._location} - %(message)s",
            datefmt="%Y-%m-%d %H:%M:%S",
        ))
        return handler


def setup_logging(settings: Optional["Settings"] = None) -> logging.Logger:
    """
    (Re)configure the package logger.

    Args:
        settings: Application settings; environment variables when None.
    """
    global _configured

    if settings is not None:
        builder = ShopLabelLogger(settings.LOG_LEVEL, settings.LOG_DIR, settings.DEBUG)
    else:
        builder = ShopLabelLogger(
            os.getenv("LOG_LEVEL", "INFO"),
            os.getenv("LOG_DIR"),
            os.getenv("DEBUG", "false").lower() == "true",
        )

    logger = builder.configure()
    _configured = True
    logger.debug(f"Logging configured (level={logging.getLevelName(logger.level)}, dir={builder.log_dir})")
    return logger


def get_logger(name: Optional[str] = None) -> logging.Logger:
    """
    Get a logger instance for the given name.

    Args:
        name: Logger name. If None, uses the caller's module name.

    Returns:
        Logger under the ``shoplabel`` hierarchy.
    """
    if not _configured:
        setup_logging()

    if name is None:
        frame = sys._getframe(1)
        name = frame.f_globals.get('__name__', PACKAGE_LOGGER)

    if name != PACKAGE_LOGGER and not name.startswith(f"{PACKAGE_LOGGER}."):
        name = f"{PACKAGE_LOGGER}.{name}"

    return logging.getLogger(name)
