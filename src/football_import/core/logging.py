from __future__ import annotations

import logging

LOG_FORMAT = "%(asctime)s [%(name)s] %(levelname)s: %(message)s"


def configure_logging(level: str | int = "INFO") -> None:
    """Configure root logging once for CLI entry points."""

    if isinstance(level, str):
        level = logging.getLevelName(level.upper())
        if not isinstance(level, int):
            level = logging.INFO

    logging.basicConfig(level=level, format=LOG_FORMAT)
    # httpx logs every request at INFO; the client already does.
    logging.getLogger("httpx").setLevel(logging.WARNING)
