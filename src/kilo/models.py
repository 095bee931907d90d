from __future__ import annotations

from dataclasses import dataclass, field


@dataclass(frozen=True, slots=True)
class EditorSyntax:
    filetype: str
    filematch: tuple[str, ...]
    keywords: tuple[str, ...]
    singleline_comment_start: str
    multiline_comment_start: str
    multiline_comment_end: str
    flags: int


@dataclass(slots=True)
class Row:
    """One line of the document.

    ``chars`` holds the raw text, one character per byte (latin-1).
    ``render`` and ``hl`` are derived from it and must be regenerated
    after every change to ``chars``.
    """

    idx: int
    chars: str
    render: str = ""
    hl: list[int] = field(default_factory=list)
    hl_open_comment: bool = False

    @property
    def size(self) -> int:
        return len(self.chars)

    @property
    def rsize(self) -> int:
        return len(self.render)


@dataclass(slots=True)
class SearchSnapshot:
    cx: int
    cy: int
    coloff: int
    rowoff: int


@dataclass(slots=True)
class EditorConfig:
    cx: int = 0
    cy: int = 0
    rx: int = 0
    rowoff: int = 0
    coloff: int = 0
    screenrows: int = 0
    screencols: int = 0
    filename: str | None = None
    statusmsg: str = ""
    statusmsg_time: float = 0.0

    def snapshot(self) -> SearchSnapshot:
        return SearchSnapshot(self.cx, self.cy, self.coloff, self.rowoff)

    def restore(self, saved: SearchSnapshot) -> None:
        self.cx = saved.cx
        self.cy = saved.cy
        self.coloff = saved.coloff
        self.rowoff = saved.rowoff
