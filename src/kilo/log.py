"""Logging setup.

The editor owns the terminal, so records go to the file named by
``KILO_LOG`` or nowhere at all.
"""

from __future__ import annotations

import logging
import os

LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"


def setup_logging(path: str | None = None, level: str | None = None) -> logging.Logger:
    logger = logging.getLogger("kilo")
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()
    logger.propagate = False

    path = path or os.environ.get("KILO_LOG")
    if not path:
        logger.addHandler(logging.NullHandler())
        return logger

    handler = logging.FileHandler(path, encoding="utf-8")
    handler.setFormatter(logging.Formatter(LOG_FORMAT))
    logger.addHandler(handler)
    level_name = (level or os.environ.get("KILO_LOG_LEVEL") or "DEBUG").upper()
    logger.setLevel(getattr(logging, level_name, logging.DEBUG))
    return logger
