"""Central logging configuration for ``ledger_import``.

Entrypoints (the CLI, or a host application) call :func:`configure_logging`
once at startup. It attaches one ``StreamHandler`` to the ``ledger_import``
package logger. Library modules only ever call
``get_logger("ledger_import.<module>")``; they never attach handlers.

The level comes from the explicit argument, else ``LEDGER_IMPORT_LOG_LEVEL``,
else ``INFO``.
"""

from __future__ import annotations

import logging
import os
import sys
from typing import IO

PACKAGE_LOGGER = "ledger_import"
LEVEL_ENV_VAR = "LEDGER_IMPORT_LOG_LEVEL"
DEFAULT_FORMAT = "%(asctime)s %(name)s %(levelname)s %(message)s"

_handler: logging.Handler | None = None


def resolve_level(level: int | str | None = None) -> int:
    """Translate ``level`` (or the env override) into a numeric logging level.

    Unknown names fall back to ``INFO`` instead of raising, so a typo in the
    environment never prevents the CLI from starting.
    """

    if level is None:
        level = os.getenv(LEVEL_ENV_VAR)
    if isinstance(level, int):
        return level
    if isinstance(level, str) and level.strip():
        name = level.strip().upper()
        if name.isdigit():
            return int(name)
        numeric = logging.getLevelName(name)
        if isinstance(numeric, int):
            return numeric
    return logging.INFO


def configure_logging(
    level: int | str | None = None,
    *,
    fmt: str | None = None,
    stream: IO[str] | None = None,
    force: bool = False,
) -> logging.Logger:
    """Attach the package handler and return the package logger.

    Parameters
    ----------
    level:
        ``int`` or level name. ``None`` reads ``LEDGER_IMPORT_LOG_LEVEL``.
    fmt:
        Format string; defaults to :data:`DEFAULT_FORMAT`.
    stream:
        Destination stream, ``sys.stderr`` when omitted.
    force:
        Replace a handler installed by an earlier call. Without it, repeated
        calls are no-ops so importing entrypoints twice never doubles output.
    """

    global _handler
    logger = logging.getLogger(PACKAGE_LOGGER)
    if _handler is not None and not force:
        return logger

    for h in list(logger.handlers):
        if isinstance(h, logging.NullHandler) or h is _handler:
            logger.removeHandler(h)

    numeric = resolve_level(level)
    handler = logging.StreamHandler(stream if stream is not None else sys.stderr)
    handler.setLevel(numeric)
    handler.setFormatter(logging.Formatter(fmt or DEFAULT_FORMAT))

    logger.setLevel(numeric)
    logger.addHandler(handler)
    logger.propagate = False
    _handler = handler
    return logger


def get_logger(name: str) -> logging.Logger:
    """Return ``logging.getLogger(name)`` with a silent default in library use."""

    pkg_logger = logging.getLogger(PACKAGE_LOGGER)
    if _handler is None and not pkg_logger.handlers:
        pkg_logger.addHandler(logging.NullHandler())
    return logging.getLogger(name)


__all__ = ["configure_logging", "get_logger", "resolve_level", "LEVEL_ENV_VAR"]
