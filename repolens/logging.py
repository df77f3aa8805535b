"""Logging utilities for repolens commands.

Every pipeline component logs through a child of the ``repolens`` logger
(``repolens.scanner``, ``repolens.graph``, ``repolens.orchestrator`` ...),
and the console output names that component so interleaved stage logs from
concurrent runs stay readable.
"""

from __future__ import annotations

import logging
from pathlib import Path

_LOGGER_NAME = "repolens"
_CONSOLE_FORMAT = "[%(component)s] %(levelname)s %(message)s"
_FILE_FORMAT = "%(asctime)s %(levelname)s %(name)s [%(threadName)s]: %(message)s"


def get_logger(name: str | None = None) -> logging.Logger:
    """Return a component logger under the repolens hierarchy.

    Accepts a short component name (``"scanner"``) or a module name
    (``__name__``); both map to ``repolens.<component>``.
    """
    if not name or name == _LOGGER_NAME:
        return logging.getLogger(_LOGGER_NAME)
    component = name[len(_LOGGER_NAME) + 1:] if name.startswith(f"{_LOGGER_NAME}.") else name
    return logging.getLogger(f"{_LOGGER_NAME}.{component}")


class ComponentFormatter(logging.Formatter):
    """Formatter exposing ``%(component)s``: ``repolens`` or ``repolens:<component>``."""

    def format(self, record: logging.LogRecord) -> str:
        prefix = f"{_LOGGER_NAME}."
        if record.name.startswith(prefix):
            record.component = f"{_LOGGER_NAME}:{record.name[len(prefix):]}"
        else:
            record.component = record.name
        return super().format(record)


def configure_logging(
    *, verbose: bool = False, log_file: Path | None = None
) -> logging.Logger:
    """Configure the repolens logger with console output and optional file sink."""
    level = logging.DEBUG if verbose else logging.INFO
    logger = logging.getLogger(_LOGGER_NAME)
    logger.setLevel(level)
    logger.propagate = False

    # Replace handlers so repeated CLI invocations do not duplicate output.
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()

    stream_handler = logging.StreamHandler()
    stream_handler.setLevel(level)
    stream_handler.setFormatter(ComponentFormatter(_CONSOLE_FORMAT))
    logger.addHandler(stream_handler)

    if log_file is not None:
        file_handler = logging.FileHandler(log_file, encoding="utf-8")
        file_handler.setLevel(level)
        file_handler.setFormatter(logging.Formatter(_FILE_FORMAT))
        logger.addHandler(file_handler)

    return logger


__all__ = ["ComponentFormatter", "configure_logging", "get_logger"]
