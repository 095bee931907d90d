from __future__ import annotations

import errno
import logging
import os

from .document import Document
from .terminal import FatalError, write_all

logger = logging.getLogger(__name__)


def open_file(filename: str, doc: Document) -> None:
    doc.select_syntax(filename)
    try:
        with open(filename, "rb") as f:
            doc.load_lines(f)
    except OSError as exc:
        raise FatalError("fopen", exc.errno or errno.EIO) from exc
    doc.mark_clean()
    logger.info("opened %s (%d rows)", filename, doc.numrows)


def save_file(filename: str, doc: Document) -> int:
    """Write the document to ``filename`` and return the byte count.

    Raises ``OSError`` without touching the dirty counter if any step
    fails.
    """
    data = doc.to_bytes()
    fd = os.open(filename, os.O_RDWR | os.O_CREAT, 0o644)
    try:
        os.ftruncate(fd, len(data))
        write_all(fd, data)
    finally:
        os.close(fd)
    doc.mark_clean()
    logger.info("wrote %d bytes to %s", len(data), filename)
    return len(data)
