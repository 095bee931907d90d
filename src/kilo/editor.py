from __future__ import annotations

import logging
import signal
import sys
import time
from collections.abc import Callable
from functools import partial
from typing import Final

from .constants import (
    ANSI_CLEAR_SCREEN,
    ANSI_CURSOR_HOME,
    ARROW_DOWN,
    ARROW_LEFT,
    ARROW_RIGHT,
    ARROW_UP,
    BACKSPACE,
    CTRL_F,
    CTRL_H,
    CTRL_L,
    CTRL_Q,
    CTRL_S,
    DEL_KEY,
    END_KEY,
    ENTER,
    ESC,
    HOME_KEY,
    KILO_QUERY_LEN,
    KILO_QUIT_TIMES,
    PAGE_DOWN,
    PAGE_UP,
)
from .document import Document
from .fileio import open_file, save_file
from .log import setup_logging
from .models import EditorConfig
from .search import Search
from .terminal import FatalError, KeyDecoder, TerminalSession, get_window_size, write_all
from .ui import compose_frame
from .viewport import scroll

logger = logging.getLogger(__name__)

STDIN_FD: Final[int] = 0
STDOUT_FD: Final[int] = 1

HELP_MESSAGE = "HELP: Ctrl-S = save | Ctrl-Q = quit | Ctrl-F = find"


class Editor:
    def __init__(
        self,
        stdin_fd: int = STDIN_FD,
        stdout_fd: int = STDOUT_FD,
        *,
        screen_size: tuple[int, int] | None = None,
        decoder: KeyDecoder | None = None,
        write: Callable[[bytes], None] | None = None,
    ) -> None:
        self.cfg = EditorConfig()
        self.doc = Document()
        self.quit_times = KILO_QUIT_TIMES
        self.stdin_fd = stdin_fd
        self.stdout_fd = stdout_fd
        self.decoder = decoder or KeyDecoder.from_fd(stdin_fd)
        self.write = write or partial(write_all, stdout_fd)
        if screen_size is None:
            self.update_window_size()
        else:
            self.set_screen_size(*screen_size)

    def set_screen_size(self, rows: int, cols: int) -> None:
        # Two lines are kept for the status and message bars.
        self.cfg.screenrows = max(1, rows - 2)
        self.cfg.screencols = max(1, cols)

    def update_window_size(self) -> None:
        rows, cols = get_window_size(self.stdin_fd, self.stdout_fd)
        logger.debug("window size %dx%d", cols, rows)
        self.set_screen_size(rows, cols)

    def handle_sigwinch(self, _signum: int, _frame) -> None:
        self.update_window_size()
        self.refresh_screen()

    def set_status_message(self, fmt: str, *args: object) -> None:
        self.cfg.statusmsg = fmt % args if args else fmt
        self.cfg.statusmsg_time = time.time()

    def open(self, filename: str) -> None:
        self.cfg.filename = filename
        open_file(filename, self.doc)

    def refresh_screen(self) -> None:
        scroll(self.cfg, self.doc)
        self.write(compose_frame(self.cfg, self.doc))

    def prompt(
        self, template: str, callback: Callable[[str, int], None] | None = None
    ) -> str | None:
        buf = ""
        while True:
            self.set_status_message(template, buf)
            self.refresh_screen()

            c = self.decoder.next_key()
            if c in (DEL_KEY, CTRL_H, BACKSPACE):
                buf = buf[:-1]
            elif c == ESC:
                self.set_status_message("")
                if callback is not None:
                    callback(buf, c)
                return None
            elif c == ENTER:
                # Enter on an empty buffer is not an answer; the callback
                # must not see it either.
                if not buf:
                    continue
                self.set_status_message("")
                if callback is not None:
                    callback(buf, c)
                return buf
            elif 32 <= c < 127 and len(buf) < KILO_QUERY_LEN:
                buf += chr(c)

            if callback is not None:
                callback(buf, c)

    def insert_char(self, c: int) -> None:
        self.doc.insert_char(self.cfg.cy, self.cfg.cx, chr(c & 0xFF))
        self.cfg.cx += 1

    def insert_newline(self) -> None:
        if self.cfg.cx == 0:
            self.doc.insert_row(self.cfg.cy, "")
        else:
            self.doc.split_row(self.cfg.cy, self.cfg.cx)
        self.cfg.cy += 1
        self.cfg.cx = 0

    def del_char(self) -> None:
        cfg = self.cfg
        if cfg.cy == self.doc.numrows:
            return
        if cfg.cx == 0 and cfg.cy == 0:
            return

        if cfg.cx > 0:
            self.doc.delete_char(cfg.cy, cfg.cx - 1)
            cfg.cx -= 1
        else:
            cfg.cx = self.doc.merge_with_previous(cfg.cy)
            cfg.cy -= 1

    def save(self) -> None:
        if self.cfg.filename is None:
            filename = self.prompt("Save as: %s (ESC to cancel)")
            if filename is None:
                self.set_status_message("Save aborted")
                return
            self.cfg.filename = filename
            self.doc.select_syntax(filename)

        try:
            written = save_file(self.cfg.filename, self.doc)
        except OSError as exc:
            logger.warning("save to %s failed: %s", self.cfg.filename, exc)
            self.set_status_message("Can't save! I/O error: %s", exc.strerror or exc)
            return
        self.set_status_message("%d bytes written to disk", written)

    def find(self) -> None:
        search = Search(self.cfg, self.doc)
        search.begin()
        self.prompt("Search: %s (Use ESC/Arrows/Enter)", search.on_key)

    def move_cursor(self, key: int) -> None:
        cfg = self.cfg
        rows = self.doc.rows
        row = rows[cfg.cy] if cfg.cy < self.doc.numrows else None

        if key == ARROW_LEFT:
            if cfg.cx != 0:
                cfg.cx -= 1
            elif cfg.cy > 0:
                cfg.cy -= 1
                cfg.cx = rows[cfg.cy].size
        elif key == ARROW_RIGHT:
            if row is not None and cfg.cx < row.size:
                cfg.cx += 1
            elif row is not None and cfg.cx == row.size:
                cfg.cy += 1
                cfg.cx = 0
        elif key == ARROW_UP:
            if cfg.cy != 0:
                cfg.cy -= 1
        elif key == ARROW_DOWN:
            if cfg.cy < self.doc.numrows:
                cfg.cy += 1

        row = rows[cfg.cy] if cfg.cy < self.doc.numrows else None
        rowlen = row.size if row is not None else 0
        if cfg.cx > rowlen:
            cfg.cx = rowlen

    def page(self, key: int) -> None:
        cfg = self.cfg
        if key == PAGE_UP:
            cfg.cy = cfg.rowoff
        else:
            cfg.cy = min(cfg.rowoff + cfg.screenrows - 1, self.doc.numrows)
        for _ in range(cfg.screenrows):
            self.move_cursor(ARROW_UP if key == PAGE_UP else ARROW_DOWN)

    def quit(self) -> None:
        if self.doc.dirty and self.quit_times > 0:
            self.set_status_message(
                "WARNING!!! File has unsaved changes. Press Ctrl-Q %d more times to quit.",
                self.quit_times,
            )
            self.quit_times -= 1
            return
        self.write(ANSI_CLEAR_SCREEN + ANSI_CURSOR_HOME)
        raise SystemExit(0)

    def process_key(self, c: int) -> None:
        if c == CTRL_Q:
            self.quit()
            return

        if c == ENTER:
            self.insert_newline()
        elif c == CTRL_S:
            self.save()
        elif c == HOME_KEY:
            self.cfg.cx = 0
        elif c == END_KEY:
            if self.cfg.cy < self.doc.numrows:
                self.cfg.cx = self.doc.rows[self.cfg.cy].size
        elif c == CTRL_F:
            self.find()
        elif c in (BACKSPACE, CTRL_H, DEL_KEY):
            if c == DEL_KEY:
                self.move_cursor(ARROW_RIGHT)
            self.del_char()
        elif c in (PAGE_UP, PAGE_DOWN):
            self.page(c)
        elif c in (ARROW_UP, ARROW_DOWN, ARROW_LEFT, ARROW_RIGHT):
            self.move_cursor(c)
        elif c in (CTRL_L, ESC):
            pass
        else:
            self.insert_char(c)

        self.quit_times = KILO_QUIT_TIMES

    def process_keypress(self) -> None:
        self.process_key(self.decoder.next_key())


def _report_fatal(exc: OSError) -> None:
    try:
        write_all(STDOUT_FD, ANSI_CLEAR_SCREEN + ANSI_CURSOR_HOME)
    except OSError:
        logger.debug("could not clear the screen")
    if isinstance(exc, FatalError):
        message = exc.report()
    else:
        message = f"kilo: {exc.strerror or exc}"
    print(message, file=sys.stderr)


def run(argv: list[str] | None = None) -> int:
    setup_logging()
    args = list(sys.argv[1:] if argv is None else argv)
    if len(args) > 1:
        print("Usage: kilo [filename]", file=sys.stderr)
        return 1

    try:
        with TerminalSession(STDIN_FD):
            editor = Editor()
            if args:
                editor.open(args[0])
            signal.signal(signal.SIGWINCH, editor.handle_sigwinch)
            editor.set_status_message(HELP_MESSAGE)
            while True:
                editor.refresh_screen()
                editor.process_keypress()
    except OSError as exc:
        logger.exception("fatal error")
        _report_fatal(exc)
        return 1
    except SystemExit as exc:
        if isinstance(exc.code, int):
            return exc.code
        return 0


def main() -> int:
    return run(sys.argv[1:])
