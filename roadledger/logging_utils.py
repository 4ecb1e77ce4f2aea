"""Mini README: Application-wide logging helpers for RoadLedger.

Structure:
    * configure_root_logger - one-time root handler setup, accepts level names.
    * get_logger - factory returning module loggers after baseline setup.

Usage:
    Modules declare ``LOGGER = get_logger(__name__)``. The CLI calls
    ``configure_root_logger`` with the configured level before serving so
    request handlers and calculators share one formatter.
"""

from __future__ import annotations

import logging
from typing import Optional, Union

_LOGGER_INITIALISED = False
LOG_FORMAT = "[%(asctime)s] [%(levelname)s] %(name)s - %(message)s"


def _resolve_level(level: Union[int, str]) -> int:
    """Translate level names such as ``"debug"`` into logging constants."""

    if isinstance(level, int):
        return level
    resolved = logging.getLevelName(str(level).strip().upper())
    if not isinstance(resolved, int):
        raise ValueError(f"Unknown logging level: {level}")
    return resolved


def configure_root_logger(level: Union[int, str] = logging.INFO) -> None:
    """Attach the RoadLedger handler to the root logger exactly once.

    Later calls only adjust the level, so reloading modules in development
    never stacks duplicate handlers.
    """

    global _LOGGER_INITIALISED
    root_logger = logging.getLogger()
    root_logger.setLevel(_resolve_level(level))
    if _LOGGER_INITIALISED:
        return

    handler = logging.StreamHandler()
    handler.setFormatter(logging.Formatter(LOG_FORMAT, datefmt="%Y-%m-%d %H:%M:%S"))
    root_logger.addHandler(handler)
    _LOGGER_INITIALISED = True


def get_logger(name: Optional[str] = None) -> logging.Logger:
    """Return a module-specific logger ensuring baseline configuration."""

    if not _LOGGER_INITIALISED:
        configure_root_logger()
    return logging.getLogger(name)
