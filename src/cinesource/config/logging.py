"""Logging setup for the command line entry points."""

from __future__ import annotations

import logging
import os
from typing import Final

from .errors import ConfigurationError

LOG_FORMAT: Final[str] = "%(asctime)s %(levelname)s [%(name)s] %(message)s"
LOG_LEVEL_ENV: Final[str] = "CINESOURCE_LOG_LEVEL"

# Per-request chatter from the HTTP stack drowns out resolution summaries at INFO.
_NOISY_LOGGERS: Final[tuple[str, ...]] = ("httpx", "httpcore", "hishel")


def resolve_log_level(default: int = logging.INFO) -> int:
    raw = os.getenv(LOG_LEVEL_ENV)
    if raw is None or not raw.strip():
        return default
    name = raw.strip().upper()
    level = logging.getLevelNamesMapping().get(name)
    if level is None:
        raise ConfigurationError(f"{LOG_LEVEL_ENV} must be a logging level name, got {raw!r}")
    return level


def configure_logging(*, level: int | None = None, force: bool = False) -> None:
    """Initialise the root logger.

    ``level`` falls back to ``CINESOURCE_LOG_LEVEL`` and then INFO. Pass
    ``force=True`` to reconfigure an already configured root logger.
    """

    effective = resolve_log_level() if level is None else level
    logging.basicConfig(level=effective, format=LOG_FORMAT, datefmt="%H:%M:%S", force=force)
    for name in _NOISY_LOGGERS:
        logging.getLogger(name).setLevel(max(effective, logging.WARNING))
