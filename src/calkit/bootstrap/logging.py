"""Logging for the ``calkit`` package.

Only the package logger is configured, so embedding applications keep
control of the root logger. Console output goes to stderr; a rotating file
log is written when a path is given or ``CALKIT_LOG_FILE`` is set.
"""

from __future__ import annotations

import logging
import os
import sys
from logging.handlers import RotatingFileHandler
from pathlib import Path
from typing import Optional

from ..config.paths import LOG_DIR

PACKAGE_LOGGER = "calkit"
CONSOLE_HANDLER = "calkit-console"
FILE_HANDLER = "calkit-file"

CONSOLE_FORMAT = "%(levelname)-7s %(component)s: %(message)s"
FILE_FORMAT = "%(asctime)s %(levelname)s [%(component)s] %(message)s"

_TRUTHY = {"1", "true", "yes", "on"}


class ComponentFilter(logging.Filter):
    """Adds ``component``: the logger name without the package prefix."""

    def filter(self, record: logging.LogRecord) -> bool:
        name = record.name
        if name.startswith(PACKAGE_LOGGER + "."):
            name = name[len(PACKAGE_LOGGER) + 1 :]
        record.component = name
        return True


def _level(level: Optional[str]) -> int:
    name = (level or os.getenv("CALKIT_LOG_LEVEL") or "INFO").upper()
    resolved = logging.getLevelName(name)
    return resolved if isinstance(resolved, int) else logging.INFO


def _file_target(log_path: Optional[Path]) -> Optional[Path]:
    if log_path is not None:
        return log_path
    raw = os.getenv("CALKIT_LOG_FILE", "").strip()
    if not raw or raw.lower() in {"0", "false", "no", "off"}:
        return None
    if raw.lower() in _TRUTHY:
        return LOG_DIR / "calkit.log"
    return Path(raw).expanduser()


def _named_handler(logger: logging.Logger, name: str) -> Optional[logging.Handler]:
    return next((handler for handler in logger.handlers if handler.get_name() == name), None)


def configure_logging(*, level: Optional[str] = None, log_path: Optional[Path] = None) -> logging.Logger:
    """Attach calkit's handlers to the package logger and return it.

    Calling again only adjusts the level and adds a file handler that was
    not there before.
    """

    logger = logging.getLogger(PACKAGE_LOGGER)
    logger.setLevel(_level(level))

    if _named_handler(logger, CONSOLE_HANDLER) is None:
        console = logging.StreamHandler(sys.stderr)
        console.set_name(CONSOLE_HANDLER)
        console.addFilter(ComponentFilter())
        console.setFormatter(logging.Formatter(CONSOLE_FORMAT))
        logger.addHandler(console)

    target = _file_target(log_path)
    if target is not None and _named_handler(logger, FILE_HANDLER) is None:
        target.parent.mkdir(parents=True, exist_ok=True)
        file_handler = RotatingFileHandler(str(target), maxBytes=1_000_000, backupCount=3, encoding="utf-8")
        file_handler.set_name(FILE_HANDLER)
        file_handler.addFilter(ComponentFilter())
        file_handler.setFormatter(logging.Formatter(FILE_FORMAT, datefmt="%Y-%m-%d %H:%M:%S"))
        logger.addHandler(file_handler)
        logger.debug("Writing log file %s", target)

    return logger


def reset_logging() -> None:
    """Detach and close the handlers added by :func:`configure_logging`."""

    logger = logging.getLogger(PACKAGE_LOGGER)
    for name in (CONSOLE_HANDLER, FILE_HANDLER):
        handler = _named_handler(logger, name)
        if handler is not None:
            logger.removeHandler(handler)
            handler.close()
    logger.setLevel(logging.NOTSET)


__all__ = ["configure_logging", "reset_logging"]
