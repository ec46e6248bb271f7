"""Configure loguru for the service and the CLI."""

from __future__ import annotations

import sys

from loguru import logger

from .config import get_log_level

LOG_FORMAT = (
    "<green>{time:YYYY-MM-DD HH:mm:ss}</green> | <level>{level: <8}</level> | "
    "{name}:{function}:{line} - {message}"
)

_configured = False


def setup_logging(level: str | None = None) -> None:
    """Replace loguru's default sink with one stderr sink at ``level``.

    Repeated calls are ignored unless an explicit ``level`` is passed.
    """
    global _configured
    if _configured and level is None:
        return
    logger.remove()
    logger.add(sys.stderr, level=level or get_log_level(), format=LOG_FORMAT)
    _configured = True
