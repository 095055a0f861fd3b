# solar_engine/logs.py

from __future__ import annotations
import logging
import sys


def configure_logging(level: str = "INFO") -> None:
    """
    Central logging setup, called once by the API entrypoint.
    Engine modules only create module-level loggers.
    """
    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.INFO),
        format="%(asctime)s | %(levelname)s | %(name)s | %(message)s",
        handlers=[logging.StreamHandler(sys.stdout)],
    )
