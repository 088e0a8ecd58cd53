"""Logging setup for reclaim.

Modules log through ``logging.getLogger(__name__)``; only the CLI entry point
installs a handler.
"""

from __future__ import annotations

import logging

from rich.console import Console
from rich.logging import RichHandler

_LOGGER_NAME = "reclaim"
_VALID_LEVELS: frozenset[str] = frozenset(["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"])


def normalize_level(level: str | int) -> int:
    """Return the numeric level for *level*; raise ValueError if unknown."""
    if isinstance(level, int):
        return level
    name = level.strip().upper()
    if name not in _VALID_LEVELS:
        raise ValueError(
            f"Unknown log level '{level}'. Use one of: {', '.join(sorted(_VALID_LEVELS))}."
        )
    return getattr(logging, name)


def configure_logging(level: str | int = "WARNING", console: Console | None = None) -> logging.Logger:
    """Install a single Rich handler (stderr) on the ``reclaim`` logger.

    Idempotent: repeated calls replace the handler instead of stacking them.
    """
    logger = logging.getLogger(_LOGGER_NAME)
    logger.setLevel(normalize_level(level))
    handler = RichHandler(
        console=console or Console(stderr=True),
        show_path=False,
        markup=False,
        rich_tracebacks=False,
    )
    handler.setFormatter(logging.Formatter("%(message)s"))
    logger.handlers = [handler]
    # httpx logs every request at INFO; keep it quiet unless debugging.
    logging.getLogger("httpx").setLevel(
        logging.DEBUG if logger.level <= logging.DEBUG else logging.WARNING
    )
    return logger
