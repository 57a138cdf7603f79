"""Logger setup for corpus builds and the query service."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import TYPE_CHECKING

if TYPE_CHECKING:  # pragma: no cover - typing aid
    from .models import BuildWarning

_ROOT = "doccorpus"
_CONSOLE_FORMAT = "[doccorpus] %(levelname)s %(message)s"
_FILE_FORMAT = "%(asctime)s %(levelname)s %(name)s [%(threadName)s]: %(message)s"


def get_logger(name: str | None = None) -> logging.Logger:
    """Return ``doccorpus.<name>``, or the package logger when ``name`` is empty."""
    return logging.getLogger(f"{_ROOT}.{name}" if name else _ROOT)


def configure_logging(
    *, verbose: bool = False, log_file: Path | None = None
) -> logging.Logger:
    """Route package logs to stderr and, when given, to ``log_file``.

    Parse workers log under their thread name, which only the file sink shows.
    Calling this again replaces the handlers installed by the previous call.
    """
    level = logging.DEBUG if verbose else logging.INFO
    logger = get_logger()
    logger.setLevel(level)
    logger.propagate = False
    _clear_handlers(logger)

    logger.addHandler(_handler(logging.StreamHandler(), level, _CONSOLE_FORMAT))
    if log_file is not None:
        log_file.parent.mkdir(parents=True, exist_ok=True)
        logger.addHandler(
            _handler(logging.FileHandler(log_file, encoding="utf-8"), level, _FILE_FORMAT)
        )
    return logger


def log_build_warning(logger: logging.Logger, warning: "BuildWarning") -> None:
    """Log a build warning prefixed with its ``path:line`` location."""
    if warning.path and warning.line:
        location = f"{warning.path}:{warning.line}: "
    elif warning.path:
        location = f"{warning.path}: "
    else:
        location = ""
    logger.warning("%s[%s] %s", location, warning.kind.value, warning.message)


def _handler(handler: logging.Handler, level: int, fmt: str) -> logging.Handler:
    handler.setLevel(level)
    handler.setFormatter(logging.Formatter(fmt))
    return handler


def _clear_handlers(logger: logging.Logger) -> None:
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()


__all__ = ["configure_logging", "get_logger", "log_build_warning"]
