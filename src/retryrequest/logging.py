"""Library logging helpers.

The ``retryrequest`` logger carries only a ``NullHandler`` until an
application opts in through :func:`configure_logging`.
"""

from __future__ import annotations

import logging as py_logging
import sys
from pathlib import Path
from typing import TextIO

LOGGER_NAME = "retryrequest"
LOG_LEVELS = {
    "DEBUG": py_logging.DEBUG,
    "INFO": py_logging.INFO,
    "WARN": py_logging.WARNING,
    "WARNING": py_logging.WARNING,
    "ERROR": py_logging.ERROR,
}
_FORMAT = "%(asctime)s %(levelname)s %(name)s attempt-log %(message)s"
_OWNED_MARKER = "_retryrequest_owned"

py_logging.getLogger(LOGGER_NAME).addHandler(py_logging.NullHandler())


def resolve_level(level: str) -> int:
    normalized = level.strip().upper()
    if normalized == "WARNING":
        normalized = "WARN"
    return LOG_LEVELS.get(normalized, py_logging.INFO)


def _own(handler: py_logging.Handler) -> py_logging.Handler:
    setattr(handler, _OWNED_MARKER, True)
    return handler


def _drop_owned_handlers(logger: py_logging.Logger) -> None:
    for handler in list(logger.handlers):
        if getattr(handler, _OWNED_MARKER, False):
            logger.removeHandler(handler)
            handler.close()


def _file_handler(log_file: str | Path) -> py_logging.Handler | None:
    log_path = Path(log_file).expanduser().resolve()
    try:
        log_path.parent.mkdir(parents=True, exist_ok=True)
        return py_logging.FileHandler(log_path, encoding="utf-8")
    except OSError:
        py_logging.getLogger(__name__).warning("Retry log file is not writable: %s", log_path)
        return None


def configure_logging(
    level: str = "INFO",
    stream: TextIO | None = None,
    *,
    log_file: str | Path | None = None,
    propagate: bool = True,
) -> py_logging.Logger:
    """Attach retry log output to ``stream`` and optionally ``log_file``.

    Handlers installed by an earlier call are replaced; handlers added by the
    application are left alone. Records still reach the root logger unless
    ``propagate`` is false.
    """
    resolved = resolve_level(level)
    logger = py_logging.getLogger(LOGGER_NAME)
    logger.setLevel(resolved)
    _drop_owned_handlers(logger)
    formatter = py_logging.Formatter(_FORMAT)

    stream_handler = _own(py_logging.StreamHandler(stream or sys.stderr))
    stream_handler.setFormatter(formatter)
    logger.addHandler(stream_handler)

    if log_file:
        file_handler = _file_handler(log_file)
        if file_handler is not None:
            file_handler.setLevel(py_logging.DEBUG)
            file_handler.setFormatter(formatter)
            logger.addHandler(_own(file_handler))

    logger.propagate = propagate
    return logger
