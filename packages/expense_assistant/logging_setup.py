"""Centralized logging configuration for the ``expense_assistant`` package.

- ``configure_logging(...)``: attach a single ``StreamHandler`` to the package
  root logger (``"expense_assistant"``). Entry points (CLI, HTTP app factory)
  call it once at startup.
- ``get_logger(name)``: acquire a module logger, making sure the package root
  has at least a ``NullHandler`` when nothing has been configured.

Library modules never attach handlers themselves; they call
``get_logger("expense_assistant.<module>")`` and leave output decisions to the
host process.
"""

from __future__ import annotations

import logging
import os
import sys
from typing import IO

_PKG_LOGGER_NAME = "expense_assistant"
_LEVEL_ENV = "EXPENSE_ASSISTANT_LOG_LEVEL"
_DEFAULT_FORMAT = "%(asctime)s %(name)s %(levelname)s %(message)s"
_CONFIGURED = False


def _parse_level(level: int | str | None) -> int:
    if isinstance(level, int):
        return level
    if isinstance(level, str):
        name = level.strip().upper()
        if name.isdigit():
            return int(name)
        numeric = logging.getLevelName(name)
        if isinstance(numeric, int):
            return numeric
        raise ValueError(f"Unknown log level: {level!r}")
    env_val = os.getenv(_LEVEL_ENV)
    if env_val:
        return _parse_level(env_val)
    return logging.INFO


def configure_logging(
    level: int | str | None = None,
    *,
    fmt: str | None = None,
    stream: IO[str] = sys.stderr,
) -> None:
    """Configure the package root logger exactly once.

    ``level`` accepts an ``int`` or a level name; when ``None`` the
    ``EXPENSE_ASSISTANT_LOG_LEVEL`` environment variable is consulted and
    ``INFO`` is the fallback.
    """

    global _CONFIGURED
    if _CONFIGURED:
        return

    resolved = _parse_level(level)
    logger = logging.getLogger(_PKG_LOGGER_NAME)

    # A NullHandler left over from library use would swallow nothing, but
    # keep the handler list to exactly one stream handler.
    for h in list(logger.handlers):
        if isinstance(h, logging.NullHandler):
            logger.removeHandler(h)

    handler = logging.StreamHandler(stream)
    handler.setLevel(resolved)
    handler.setFormatter(logging.Formatter(fmt or _DEFAULT_FORMAT))

    logger.setLevel(resolved)
    logger.addHandler(handler)
    logger.propagate = False

    _CONFIGURED = True


def get_logger(name: str) -> logging.Logger:
    """Return a logger by name with library-safe defaults."""

    pkg_logger = logging.getLogger(_PKG_LOGGER_NAME)
    if not _CONFIGURED and not pkg_logger.handlers:
        pkg_logger.addHandler(logging.NullHandler())
    return logging.getLogger(name)


__all__ = ["configure_logging", "get_logger"]
