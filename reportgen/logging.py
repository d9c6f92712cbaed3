"""Logging setup shared by the reportgen CLI and the report service."""

from __future__ import annotations

import logging
from pathlib import Path

LOGGER_NAME = "reportgen"
CONSOLE_FORMAT = "[reportgen] %(levelname)s %(message)s"
FILE_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"


def get_logger(name: str | None = None) -> logging.Logger:
    """Return ``reportgen.<name>``, or the package logger when ``name`` is empty."""
    return logging.getLogger(f"{LOGGER_NAME}.{name}" if name else LOGGER_NAME)


def configure_logging(
    *, verbose: bool = False, log_file: Path | None = None
) -> logging.Logger:
    """Attach console (and optionally file) handlers to the package logger.

    Safe to call repeatedly: handlers from an earlier call are closed and
    replaced, so a ``serve`` after a ``report`` in the same process neither
    duplicates output nor leaks the previous log file handle.
    """
    level = logging.DEBUG if verbose else logging.INFO
    logger = logging.getLogger(LOGGER_NAME)
    logger.setLevel(level)
    logger.propagate = False
    _reset_handlers(logger)

    console = logging.StreamHandler()
    console.setFormatter(logging.Formatter(CONSOLE_FORMAT))
    handlers: list[logging.Handler] = [console]
    if log_file is not None:
        log_file.parent.mkdir(parents=True, exist_ok=True)
        sink = logging.FileHandler(log_file, encoding="utf-8")
        sink.setFormatter(logging.Formatter(FILE_FORMAT))
        handlers.append(sink)

    for handler in handlers:
        handler.setLevel(level)
        logger.addHandler(handler)
    return logger


def uvicorn_log_level(logger: logging.Logger | None = None) -> str:
    """Map the package logger's effective level onto uvicorn's level names."""
    level = (logger or logging.getLogger(LOGGER_NAME)).getEffectiveLevel()
    return "debug" if level <= logging.DEBUG else "info"


def _reset_handlers(logger: logging.Logger) -> None:
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()


__all__ = ["CONSOLE_FORMAT", "FILE_FORMAT", "LOGGER_NAME", "configure_logging", "get_logger", "uvicorn_log_level"]
