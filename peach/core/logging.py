# peach/core/logging.py

from __future__ import annotations

import logging
import sys
from typing import Dict, Optional

from peach.core.config import settings

DEFAULT_FORMAT = "%(asctime)s | %(levelname)s | %(name)s | %(message)s"


def _level(name: str, fallback: int = logging.INFO) -> int:
    level = getattr(logging, name.upper(), None)
    return level if isinstance(level, int) else fallback


def component_levels() -> Dict[str, int]:
    """
    Per-logger levels for the chat server.

    Fan-out logs one line per publish and per dropped message, which floods
    the output once rooms are busy, so it has its own knob. Framing read
    errors are only interesting while debugging a client.
    """
    return {
        "peach.services.broadcast": _level(settings.BROADCAST_LOG_LEVEL, logging.WARNING),
        "peach.services.room_manager": _level(settings.BROADCAST_LOG_LEVEL, logging.WARNING),
        "peach.services.session": _level(settings.SESSION_LOG_LEVEL),
        "peach.services.framing": logging.WARNING,
        # The admin API is polled by health probes
        "uvicorn.access": logging.WARNING,
    }


def setup_logging(level: Optional[str] = None) -> int:
    """
    Configure logging for the chat server.

    - Root level from ``level`` or ``settings.LOG_LEVEL``
    - One stdout handler, added only if nobody configured the root logger
    - Component levels from ``component_levels()`` are always applied

    Returns:
        The resolved root level.
    """
    root_level = _level(level or settings.LOG_LEVEL)

    root_logger = logging.getLogger()
    root_logger.setLevel(root_level)

    if not root_logger.handlers:
        handler = logging.StreamHandler(sys.stdout)
        handler.setFormatter(logging.Formatter(DEFAULT_FORMAT))
        root_logger.addHandler(handler)

    for name, component_level in component_levels().items():
        # A DEBUG root means the operator wants everything
        logging.getLogger(name).setLevel(min(component_level, root_level))

    return root_level


def get_logger(name: str | None = None) -> logging.Logger:
    return logging.getLogger(name)
