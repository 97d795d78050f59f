from __future__ import annotations

import logging

from .settings import get_settings


# PUBLIC_INTERFACE
def configure_logging(level: str | None = None) -> None:
    """Configure root logging at the given level, or LOG_LEVEL from settings."""
    logging.basicConfig(
        level=level or get_settings().log_level,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )
    logging.getLogger("httpx").setLevel(logging.WARNING)
