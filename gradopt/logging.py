"""Logging utilities for gradopt.

Every module logs through a child of the ``gradopt`` package logger, which
owns the only handler. Children carry no level of their own, so
:func:`set_log_level` and :func:`configure_logging` act on the whole package
at once, including loggers created afterwards.

Optimizers report iteration progress at INFO when built with ``verbose=True``
and at DEBUG otherwise, so nothing is printed under the default WARNING level.
"""

from __future__ import annotations

import logging
import sys
from typing import IO, Optional, Union

PACKAGE = "gradopt"
_DEFAULT_FORMAT = "[%(levelname)s] %(name)s: %(message)s"

Level = Union[int, str]


def _coerce_level(level: Level) -> int:
    if isinstance(level, str):
        return getattr(logging, level.upper(), logging.WARNING)
    return level


def _package_logger() -> logging.Logger:
    root = logging.getLogger(PACKAGE)
    if not root.handlers:
        _install_handler(root, sys.stderr, _DEFAULT_FORMAT)
        root.setLevel(logging.WARNING)
        root.propagate = False
    return root


def _install_handler(root: logging.Logger, stream: IO[str], fmt: str) -> None:
    for handler in root.handlers[:]:
        root.removeHandler(handler)
    handler = logging.StreamHandler(stream)
    handler.setFormatter(logging.Formatter(fmt))
    root.addHandler(handler)


def get_logger(name: Optional[str] = None) -> logging.Logger:
    """Return the ``gradopt`` logger for ``name``.

    Args:
        name: Module name, typically ``__name__``. Names outside the package
            are nested under it; None returns the package logger.

    Example:
        >>> from gradopt.logging import get_logger
        >>> get_logger("optimize.sgd").name
        'gradopt.optimize.sgd'
    """
    root = _package_logger()
    if name is None or name == PACKAGE:
        return root
    if not name.startswith(PACKAGE + "."):
        name = f"{PACKAGE}.{name}"
    return logging.getLogger(name)


def set_log_level(level: Level) -> None:
    """Set the threshold of every gradopt logger.

    Args:
        level: ``logging.DEBUG`` etc., or its name (``"DEBUG"``).
    """
    _package_logger().setLevel(_coerce_level(level))


def configure_logging(
    level: Level = logging.WARNING,
    format_string: Optional[str] = None,
    stream: Optional[IO[str]] = None,
) -> None:
    """Point gradopt output at ``stream`` with the given level and format.

    Typically called once at startup, e.g. ``configure_logging("INFO")`` to
    watch verbose optimizers.
    """
    root = _package_logger()
    _install_handler(root, stream if stream is not None else sys.stderr,
                     format_string or _DEFAULT_FORMAT)
    root.setLevel(_coerce_level(level))


__all__ = ["get_logger", "set_log_level", "configure_logging"]
