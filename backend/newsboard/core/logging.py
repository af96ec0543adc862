"""
Logging setup for the newsboard API.

All modules log through the shared loguru ``log`` object. ``configure_logging``
replaces loguru's default sink once, at application startup.
"""

from __future__ import annotations

import sys
from typing import Optional

from loguru import logger as log

from newsboard.core.settings import settings

_FORMAT = (
    "<green>{time:YYYY-MM-DD HH:mm:ss.SSS}</green> | "
    "<level>{level: <8}</level> | "
    "<cyan>{name}</cyan>:<cyan>{function}</cyan>:<cyan>{line}</cyan> - "
    "<level>{message}</level>"
)


def configure_logging(level: Optional[str] = None) -> None:
    """
    Install the stderr sink.

    Args:
        level: Override for ``settings.log_level`` (DEBUG, INFO, WARNING, ERROR)
    """
    log.remove()
    log.add(
        sys.stderr,
        format=_FORMAT,
        level=(level or settings.log_level).upper(),
        colorize=settings.env == "dev",
        backtrace=settings.env == "dev",
        diagnose=False,
    )


__all__ = ["configure_logging", "log"]
