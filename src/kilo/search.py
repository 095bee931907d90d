from __future__ import annotations

import logging

from .constants import (
    ARROW_DOWN,
    ARROW_LEFT,
    ARROW_RIGHT,
    ARROW_UP,
    ENTER,
    ESC,
    HL_MATCH,
)
from .document import Document
from .models import EditorConfig, SearchSnapshot
from .viewport import rx_to_cx

logger = logging.getLogger(__name__)

IDLE = "idle"
COMPOSING = "composing"
MATCHED = "matched"
NO_MATCH = "no-match"


class Search:
    """Incremental search driven one key at a time by the prompt.

    ``on_key`` is fed the current query and the key that produced it.
    A hit paints the match with ``HL_MATCH``; the painted row's previous
    highlight is kept aside and put back before the next scan and when
    the search ends.
    """

    def __init__(self, cfg: EditorConfig, doc: Document) -> None:
        self.cfg = cfg
        self.doc = doc
        self.state = IDLE
        self.last_match = -1
        self.direction = 1
        self.saved: SearchSnapshot | None = None
        self.saved_hl_line = -1
        self.saved_hl: list[int] | None = None

    def begin(self) -> None:
        self.saved = self.cfg.snapshot()
        self.last_match = -1
        self.direction = 1
        self.state = COMPOSING

    def _apply_overlay(self, row_idx: int, start: int, length: int) -> None:
        row = self.doc.rows[row_idx]
        self.saved_hl_line = row_idx
        self.saved_hl = row.hl.copy()
        for i in range(start, min(start + length, row.rsize)):
            row.hl[i] = HL_MATCH

    def _restore_overlay(self) -> None:
        if self.saved_hl is not None and 0 <= self.saved_hl_line < self.doc.numrows:
            self.doc.rows[self.saved_hl_line].hl = self.saved_hl
        self.saved_hl = None
        self.saved_hl_line = -1

    def _finish(self, key: int) -> None:
        self.last_match = -1
        self.direction = 1
        if key == ESC and self.saved is not None:
            self.cfg.restore(self.saved)
        self.saved = None
        self.state = IDLE

    def on_key(self, query: str, key: int) -> None:
        self._restore_overlay()

        if key in (ENTER, ESC):
            self._finish(key)
            return
        if key in (ARROW_RIGHT, ARROW_DOWN):
            self.direction = 1
        elif key in (ARROW_LEFT, ARROW_UP):
            self.direction = -1
        else:
            self.last_match = -1
            self.direction = 1

        if not query:
            self.state = COMPOSING
            return
        if self.last_match == -1:
            self.direction = 1

        current = self.last_match
        for _ in range(self.doc.numrows):
            current += self.direction
            if current == -1:
                current = self.doc.numrows - 1
            elif current == self.doc.numrows:
                current = 0

            row = self.doc.rows[current]
            pos = row.render.find(query)
            if pos == -1:
                continue

            self.last_match = current
            self.cfg.cy = current
            self.cfg.cx = rx_to_cx(row, pos)
            # Past the end, so the next scroll pass brings the match into view.
            self.cfg.rowoff = self.doc.numrows
            self._apply_overlay(current, pos, len(query))
            self.state = MATCHED
            logger.debug("match for %r at row %d col %d", query, current, pos)
            return

        self.state = NO_MATCH
