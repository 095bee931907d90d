from __future__ import annotations

import time

from .constants import (
    ANSI_CLEAR_LINE,
    ANSI_CURSOR_HOME,
    ANSI_DEFAULT_FG,
    ANSI_HIDE_CURSOR,
    ANSI_INVERT_OFF,
    ANSI_INVERT_ON,
    ANSI_SHOW_CURSOR,
    HL_NORMAL,
    KILO_MSG_TIMEOUT,
    KILO_VERSION,
)
from .document import Document
from .models import EditorConfig, Row
from .syntax import syntax_to_color


def is_control(ch: str) -> bool:
    return ord(ch) < 32 or ord(ch) == 127


def draw_welcome(cfg: EditorConfig, ab: bytearray) -> None:
    welcome = f"Kilo editor -- version {KILO_VERSION}"[: cfg.screencols]
    padding = (cfg.screencols - len(welcome)) // 2
    if padding:
        ab += b"~"
        padding -= 1
    ab += b" " * padding
    ab += welcome.encode("latin-1")


def draw_row(cfg: EditorConfig, row: Row, ab: bytearray) -> None:
    text = row.render[cfg.coloff : cfg.coloff + cfg.screencols]
    hl = row.hl[cfg.coloff : cfg.coloff + cfg.screencols]
    current_color = -1
    for ch, h in zip(text, hl):
        if is_control(ch):
            sym = chr(ord("@") + ord(ch)) if ord(ch) <= 26 else "?"
            ab += ANSI_INVERT_ON
            ab += sym.encode("latin-1")
            ab += ANSI_INVERT_OFF
            if current_color != -1:
                ab += f"\x1b[{current_color}m".encode()
        elif h == HL_NORMAL:
            if current_color != -1:
                ab += ANSI_DEFAULT_FG
                current_color = -1
            ab += ch.encode("latin-1")
        else:
            color = syntax_to_color(h)
            if color != current_color:
                current_color = color
                ab += f"\x1b[{color}m".encode()
            ab += ch.encode("latin-1")
    ab += ANSI_DEFAULT_FG


def draw_rows(cfg: EditorConfig, doc: Document, ab: bytearray) -> None:
    for y in range(cfg.screenrows):
        filerow = y + cfg.rowoff
        if filerow >= doc.numrows:
            if doc.numrows == 0 and cfg.rowoff == 0 and y == cfg.screenrows // 3:
                draw_welcome(cfg, ab)
            else:
                ab += b"~"
        else:
            draw_row(cfg, doc.rows[filerow], ab)
        ab += ANSI_CLEAR_LINE
        ab += b"\r\n"


def draw_status_bar(cfg: EditorConfig, doc: Document, ab: bytearray) -> None:
    ab += ANSI_INVERT_ON
    filename = cfg.filename or "[No Name]"
    modified = "(modified)" if doc.dirty else ""
    status = f"{filename:.20} - {doc.numrows} lines {modified}"[: cfg.screencols]
    filetype = doc.syntax.filetype if doc.syntax else "no ft"
    rstatus = f"{filetype} | {cfg.cy + 1}/{doc.numrows}"
    ab += status.encode("latin-1", errors="replace")
    fill = len(status)
    while fill < cfg.screencols:
        if cfg.screencols - fill == len(rstatus):
            ab += rstatus.encode("latin-1", errors="replace")
            break
        ab += b" "
        fill += 1
    ab += ANSI_INVERT_OFF
    ab += b"\r\n"


def draw_message_bar(cfg: EditorConfig, ab: bytearray, now: float) -> None:
    ab += ANSI_CLEAR_LINE
    if cfg.statusmsg and now - cfg.statusmsg_time < KILO_MSG_TIMEOUT:
        ab += cfg.statusmsg[: cfg.screencols].encode("latin-1", errors="replace")


def compose_frame(cfg: EditorConfig, doc: Document, now: float | None = None) -> bytes:
    """Build one full screen update; offsets must already be reconciled."""
    if now is None:
        now = time.time()
    ab = bytearray()
    ab += ANSI_HIDE_CURSOR
    ab += ANSI_CURSOR_HOME
    draw_rows(cfg, doc, ab)
    draw_status_bar(cfg, doc, ab)
    draw_message_bar(cfg, ab, now)
    ab += f"\x1b[{cfg.cy - cfg.rowoff + 1};{cfg.rx - cfg.coloff + 1}H".encode()
    ab += ANSI_SHOW_CURSOR
    return bytes(ab)
