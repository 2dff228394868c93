"""Single-line logging shared by the relay, the Streamlit session and the seed script."""

from __future__ import annotations

import logging
import os
from typing import Optional, Union

ROOT_NAMESPACE = "backend"
LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s %(message)s"
DATE_FORMAT = "%Y-%m-%dT%H:%M:%S"
HANDLER_NAME = "backend-stream"


def _resolve_level(level: Union[str, int, None]) -> int:
    if isinstance(level, int):
        return level
    name = (level or os.getenv("LOG_LEVEL", "INFO")).strip().upper()
    resolved = logging.getLevelName(name)
    # getLevelName returns "Level X" for names it does not know.
    return resolved if isinstance(resolved, int) else logging.INFO


def configure_logging(level: Union[str, int, None] = None) -> logging.Logger:
    """Attach the stream handler to the ``backend`` logger once and return it.

    Messages carry their context as ``key=value`` pairs after an event name,
    e.g. ``fetch_done generation=3 rows=6``. Passing ``level`` re-levels an
    already configured logger.
    """

    logger = logging.getLogger(ROOT_NAMESPACE)
    configured = any(handler.get_name() == HANDLER_NAME for handler in logger.handlers)
    if level is not None or not configured:
        logger.setLevel(_resolve_level(level))
    if configured:
        return logger

    handler = logging.StreamHandler()
    handler.set_name(HANDLER_NAME)
    handler.setFormatter(logging.Formatter(fmt=LOG_FORMAT, datefmt=DATE_FORMAT))
    logger.addHandler(handler)
    logger.propagate = False
    return logger


def get_logger(child: Optional[str] = None) -> logging.Logger:
    base = configure_logging()
    return base.getChild(child) if child else base
