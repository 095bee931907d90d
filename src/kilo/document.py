from __future__ import annotations

import logging
from collections.abc import Iterable

from .constants import KILO_TAB_STOP
from .models import EditorSyntax, Row
from .syntax import select_syntax, update_syntax

logger = logging.getLogger(__name__)


class Document:
    """Ordered rows of the open file plus the dirty counter.

    Every mutation regenerates the touched row's render text and
    highlight and bumps ``dirty``; ``dirty`` only goes back to zero
    through :meth:`mark_clean`.
    """

    def __init__(self, syntax: EditorSyntax | None = None) -> None:
        self.rows: list[Row] = []
        self.dirty = 0
        self.syntax = syntax

    @property
    def numrows(self) -> int:
        return len(self.rows)

    def select_syntax(self, filename: str | None) -> None:
        self.syntax = select_syntax(filename)
        logger.debug(
            "syntax for %r: %s", filename, self.syntax.filetype if self.syntax else None
        )
        for row in self.rows:
            update_syntax(self, row.idx)

    def mark_clean(self) -> None:
        self.dirty = 0

    def update_row(self, row: Row) -> None:
        out: list[str] = []
        idx = 0
        for ch in row.chars:
            if ch == "\t":
                out.append(" ")
                idx += 1
                while idx % KILO_TAB_STOP != 0:
                    out.append(" ")
                    idx += 1
            else:
                out.append(ch)
                idx += 1
        row.render = "".join(out)
        update_syntax(self, row.idx)

    def insert_row(self, at: int, s: str) -> None:
        if at < 0 or at > self.numrows:
            return
        self.rows.insert(at, Row(idx=at, chars=s))
        for j in range(at + 1, self.numrows):
            self.rows[j].idx = j
        self.update_row(self.rows[at])
        self.dirty += 1

    def delete_row(self, at: int) -> None:
        if at < 0 or at >= self.numrows:
            return
        del self.rows[at]
        for j in range(at, self.numrows):
            self.rows[j].idx = j
        # The row that moved up now follows a different neighbour.
        if at < self.numrows:
            update_syntax(self, at)
        self.dirty += 1

    def insert_char(self, at_row: int, at: int, c: str) -> None:
        if at_row == self.numrows:
            self.insert_row(self.numrows, "")
        row = self.rows[at_row]
        if at < 0 or at > row.size:
            at = row.size
        row.chars = row.chars[:at] + c + row.chars[at:]
        self.update_row(row)
        self.dirty += 1

    def delete_char(self, at_row: int, at: int) -> None:
        row = self.rows[at_row]
        if at < 0 or at >= row.size:
            return
        row.chars = row.chars[:at] + row.chars[at + 1 :]
        self.update_row(row)
        self.dirty += 1

    def append_text(self, at_row: int, s: str) -> None:
        row = self.rows[at_row]
        row.chars += s
        self.update_row(row)
        self.dirty += 1

    def split_row(self, at_row: int, at: int) -> None:
        """Keep ``chars[:at]`` in place and move the rest to a new row below."""
        if at_row == self.numrows:
            self.insert_row(self.numrows, "")
            return
        row = self.rows[at_row]
        at = max(0, min(at, row.size))
        self.insert_row(at_row + 1, row.chars[at:])
        row.chars = row.chars[:at]
        self.update_row(row)

    def merge_with_previous(self, at_row: int) -> int:
        """Join row ``at_row`` onto the row above and return the join column.

        Returns -1 and leaves the document untouched when there is no
        previous row.
        """
        if at_row <= 0 or at_row >= self.numrows:
            return -1
        prev = self.rows[at_row - 1]
        join = prev.size
        self.append_text(at_row - 1, self.rows[at_row].chars)
        self.delete_row(at_row)
        return join

    def load_lines(self, lines: Iterable[bytes]) -> None:
        for line in lines:
            while line and line[-1] in (0x0A, 0x0D):
                line = line[:-1]
            self.insert_row(self.numrows, line.decode("latin-1"))

    def to_bytes(self) -> bytes:
        text = "".join(f"{row.chars}\n" for row in self.rows)
        return text.encode("latin-1")
