from __future__ import annotations

from typing import TYPE_CHECKING

from .constants import KILO_TAB_STOP
from .models import EditorConfig, Row

if TYPE_CHECKING:
    from .document import Document


def cx_to_rx(row: Row, cx: int) -> int:
    rx = 0
    for ch in row.chars[:cx]:
        if ch == "\t":
            rx += (KILO_TAB_STOP - 1) - (rx % KILO_TAB_STOP)
        rx += 1
    return rx


def rx_to_cx(row: Row, rx: int) -> int:
    cur_rx = 0
    for cx, ch in enumerate(row.chars):
        if ch == "\t":
            cur_rx += (KILO_TAB_STOP - 1) - (cur_rx % KILO_TAB_STOP)
        cur_rx += 1
        if cur_rx > rx:
            return cx
    return row.size


def scroll(cfg: EditorConfig, doc: Document) -> None:
    """Move the offsets so the cursor's render position is on screen."""
    cfg.rx = 0
    if cfg.cy < doc.numrows:
        cfg.rx = cx_to_rx(doc.rows[cfg.cy], cfg.cx)

    if cfg.cy < cfg.rowoff:
        cfg.rowoff = cfg.cy
    if cfg.cy >= cfg.rowoff + cfg.screenrows:
        cfg.rowoff = cfg.cy - cfg.screenrows + 1
    if cfg.rx < cfg.coloff:
        cfg.coloff = cfg.rx
    if cfg.rx >= cfg.coloff + cfg.screencols:
        cfg.coloff = cfg.rx - cfg.screencols + 1
