"""Centralized logging configuration for the ``networth`` package.

- ``configure_logging(...)`` attaches a single ``StreamHandler`` to the
  package root logger (``"networth"``). Called once by the CLI.
- ``get_logger(name)`` returns a logger, making sure the package root logger
  has at least a ``NullHandler`` so library use stays silent.

Library modules never attach their own handlers.
"""

from __future__ import annotations

import logging
import os
import sys
from typing import IO

_PKG_LOGGER_NAME = "networth"
_ENV_LEVEL = "NETWORTH_LOG_LEVEL"
_CONFIGURED = False


def _level_from_name(level: str) -> int | None:
    level = level.strip().upper()
    if level.isdigit():
        return int(level)
    numeric = getattr(logging, level, None)
    return numeric if isinstance(numeric, int) else None


def _parse_level(level: int | str | None, default: int = logging.WARNING) -> int:
    if isinstance(level, int):
        return level
    if isinstance(level, str):
        numeric = _level_from_name(level)
        if numeric is not None:
            return numeric
    # Env override when ``level`` is missing or unusable
    env_val = os.getenv(_ENV_LEVEL)
    if env_val:
        numeric = _level_from_name(env_val)
        if numeric is not None:
            return numeric
    return default


def configure_logging(
    level: int | str | None = None,
    *,
    fmt: str | None = None,
    stream: IO[str] = sys.stderr,
) -> None:
    """Configure the package root logger exactly once.

    Parameters
    ----------
    level:
        Logging level as ``int`` or level name. If ``None`` (or not a valid
        name), falls back to ``NETWORTH_LOG_LEVEL`` and then ``WARNING``.
    fmt:
        Optional format string, defaults to ``"%(name)s %(levelname)s %(message)s"``.
    stream:
        Output stream of the handler (defaults to ``sys.stderr``).
    """

    global _CONFIGURED
    if _CONFIGURED:
        return

    logger = logging.getLogger(_PKG_LOGGER_NAME)

    for h in list(logger.handlers):
        if isinstance(h, logging.NullHandler):
            logger.removeHandler(h)

    resolved = _parse_level(level)
    handler = logging.StreamHandler(stream)
    handler.setLevel(resolved)
    handler.setFormatter(logging.Formatter(fmt or "%(name)s %(levelname)s %(message)s"))

    logger.setLevel(resolved)
    logger.addHandler(handler)
    logger.propagate = False

    _CONFIGURED = True


def get_logger(name: str) -> logging.Logger:
    """Return a logger by name, attaching a ``NullHandler`` to the package
    root logger when nothing has been configured yet."""

    pkg_logger = logging.getLogger(_PKG_LOGGER_NAME)
    if not _CONFIGURED and not pkg_logger.handlers:
        pkg_logger.addHandler(logging.NullHandler())
    return logging.getLogger(name)
