from __future__ import annotations

import logging
from typing import Optional

_FORMAT = "%(asctime)s %(levelname)s [%(name)s] %(message)s"


def configure_logging(level: Optional[str] = None) -> None:
    """Install a basic root handler; used by the command line entry point."""

    resolved = logging.getLevelName((level or "INFO").upper())
    if not isinstance(resolved, int):
        resolved = logging.INFO
    logging.basicConfig(level=resolved, format=_FORMAT)
    # httpx logs every request at INFO, which drowns the pipeline's own events
    logging.getLogger("httpx").setLevel(max(resolved, logging.WARNING))
