"""Logging utilities for docugenius commands and services."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Any, MutableMapping, TextIO

_LOGGER_NAME = "docugenius"

CONSOLE_FORMAT = "[docugenius] %(levelname)s %(message)s"
FILE_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"


def get_logger(name: str | None = None) -> logging.Logger:
    """Return a module-scoped logger under the docugenius hierarchy."""
    full_name = f"{_LOGGER_NAME}.{name}" if name else _LOGGER_NAME
    return logging.getLogger(full_name)


class RepositoryLogAdapter(logging.LoggerAdapter):
    """Prefixes records with the repository a run is documenting."""

    def process(self, msg: Any, kwargs: MutableMapping[str, Any]) -> tuple[Any, MutableMapping[str, Any]]:
        return f"[{self.extra['repository']}] {msg}", kwargs


def get_run_logger(name: str, repository: str) -> RepositoryLogAdapter:
    return RepositoryLogAdapter(get_logger(name), {"repository": repository})


def configure_logging(
    *,
    verbose: bool = False,
    log_file: Path | None = None,
    stream: TextIO | None = None,
) -> logging.Logger:
    """Configure the docugenius logger with console output and an optional file sink.

    The console handler writes to ``stream`` (stderr when omitted). Existing
    handlers are replaced so calling this twice in one process does not
    duplicate output.
    """
    level = logging.DEBUG if verbose else logging.INFO
    logger = logging.getLogger(_LOGGER_NAME)
    logger.setLevel(level)
    logger.propagate = False

    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()

    console = logging.StreamHandler(stream)
    console.setLevel(level)
    console.setFormatter(logging.Formatter(CONSOLE_FORMAT))
    logger.addHandler(console)

    if log_file is not None:
        log_file.parent.mkdir(parents=True, exist_ok=True)
        file_handler = logging.FileHandler(log_file, encoding="utf-8")
        file_handler.setLevel(logging.DEBUG)
        file_handler.setFormatter(logging.Formatter(FILE_FORMAT))
        logger.addHandler(file_handler)

    return logger


__all__ = ["RepositoryLogAdapter", "configure_logging", "get_logger", "get_run_logger"]
