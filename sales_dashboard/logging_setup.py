from __future__ import annotations

import logging
import sys

_INITIALIZED = False

LOG_FORMAT = "%(asctime)s | %(levelname)s | %(name)s | %(message)s"


def setup_logging(level: str = "INFO") -> None:
    """Configure root logging to stdout once; later calls are no-ops."""
    global _INITIALIZED
    if _INITIALIZED:
        return

    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.INFO),
        format=LOG_FORMAT,
        datefmt="%Y-%m-%d %H:%M:%S",
        handlers=[logging.StreamHandler(sys.stdout)],
    )
    # The connector is chatty at INFO (one line per login/query).
    logging.getLogger("snowflake.connector").setLevel(logging.WARNING)
    _INITIALIZED = True
