from __future__ import annotations

import errno
import os

import pytest

import kilo.editor as editor_module
from kilo.constants import (
    ARROW_DOWN,
    ARROW_LEFT,
    ARROW_RIGHT,
    ARROW_UP,
    BACKSPACE,
    CTRL_F,
    CTRL_L,
    CTRL_Q,
    CTRL_S,
    DEL_KEY,
    END_KEY,
    ENTER,
    ESC,
    HOME_KEY,
    KILO_QUIT_TIMES,
    PAGE_DOWN,
    PAGE_UP,
)
from kilo.editor import run
from kilo.terminal import FatalError, TerminalSession


def rows(editor) -> list[str]:
    return [row.chars for row in editor.doc.rows]


def cursor(editor) -> tuple[int, int]:
    return editor.cfg.cx, editor.cfg.cy


class TestEditing:
    def test_typing_into_empty_document(self, make_editor):
        editor = make_editor()
        for ch in b"hi":
            editor.process_key(ch)
        assert rows(editor) == ["hi"]
        assert cursor(editor) == (2, 0)
        assert editor.doc.dirty

    def test_enter_splits_row(self, make_editor):
        editor = make_editor(["hello"])
        editor.cfg.cx = 2
        editor.process_key(ENTER)
        assert rows(editor) == ["he", "llo"]
        assert cursor(editor) == (0, 1)

    def test_enter_at_column_zero_inserts_above(self, make_editor):
        editor = make_editor(["abc"])
        editor.process_key(ENTER)
        assert rows(editor) == ["", "abc"]
        assert cursor(editor) == (0, 1)

    def test_backspace_merges_with_previous_row(self, make_editor):
        editor = make_editor(["abc", "def", "ghi"])
        editor.cfg.cy = 1
        editor.process_key(BACKSPACE)
        assert rows(editor) == ["abcdef", "ghi"]
        assert editor.doc.numrows == 2
        assert cursor(editor) == (3, 0)

    def test_backspace_within_row(self, make_editor):
        editor = make_editor(["abc"])
        editor.cfg.cx = 2
        editor.process_key(BACKSPACE)
        assert rows(editor) == ["ac"]
        assert cursor(editor) == (1, 0)

    def test_backspace_at_document_start_is_noop(self, make_editor):
        editor = make_editor(["abc"])
        editor.process_key(BACKSPACE)
        assert rows(editor) == ["abc"]
        assert editor.doc.dirty == 0

    def test_backspace_at_document_end_is_noop(self, make_editor):
        editor = make_editor(["abc"])
        editor.cfg.cy = 1
        editor.process_key(BACKSPACE)
        assert rows(editor) == ["abc"]
        assert editor.doc.dirty == 0

    def test_delete_key_removes_char_under_cursor(self, make_editor):
        editor = make_editor(["abc"])
        editor.cfg.cx = 1
        editor.process_key(DEL_KEY)
        assert rows(editor) == ["ac"]
        assert cursor(editor) == (1, 0)

    def test_ignored_keys(self, make_editor):
        editor = make_editor(["abc"])
        editor.process_key(CTRL_L)
        editor.process_key(ESC)
        assert rows(editor) == ["abc"]


class TestMovement:
    def test_right_at_end_of_row_snaps_to_next_row(self, make_editor):
        editor = make_editor(["ab", "cd"])
        editor.cfg.cx = 2
        editor.process_key(ARROW_RIGHT)
        assert cursor(editor) == (0, 1)

    def test_left_at_start_wraps_to_previous_row(self, make_editor):
        editor = make_editor(["ab", "cd"])
        editor.cfg.cy = 1
        editor.process_key(ARROW_LEFT)
        assert cursor(editor) == (2, 0)

    def test_vertical_moves_clamp_column(self, make_editor):
        editor = make_editor(["abcdef", "x"])
        editor.cfg.cx = 5
        editor.process_key(ARROW_DOWN)
        assert cursor(editor) == (1, 1)
        editor.process_key(ARROW_DOWN)
        assert cursor(editor) == (0, 2)
        editor.process_key(ARROW_DOWN)
        assert cursor(editor) == (0, 2)
        editor.process_key(ARROW_UP)
        editor.process_key(ARROW_UP)
        editor.process_key(ARROW_UP)
        assert cursor(editor) == (0, 0)

    def test_home_and_end(self, make_editor):
        editor = make_editor(["hello"])
        editor.process_key(END_KEY)
        assert cursor(editor) == (5, 0)
        editor.process_key(HOME_KEY)
        assert cursor(editor) == (0, 0)

    def test_page_down_and_up(self, make_editor):
        editor = make_editor([str(i) for i in range(50)], size=(12, 80))
        assert editor.cfg.screenrows == 10
        editor.process_key(PAGE_DOWN)
        assert editor.cfg.cy == 19
        editor.refresh_screen()
        assert editor.cfg.rowoff == 10
        editor.process_key(PAGE_UP)
        assert editor.cfg.cy == 0

    def test_page_down_stops_at_end(self, make_editor):
        editor = make_editor(["a", "b", "c"], size=(12, 80))
        editor.process_key(PAGE_DOWN)
        assert editor.cfg.cy == 3


class TestQuit:
    def test_clean_document_quits_immediately(self, make_editor, frames):
        editor = make_editor(["a"])
        with pytest.raises(SystemExit) as info:
            editor.process_key(CTRL_Q)
        assert info.value.code == 0
        assert frames[-1] == b"\x1b[2J\x1b[H"

    def test_dirty_document_needs_repeated_presses(self, make_editor):
        editor = make_editor(["a"])
        editor.process_key(ord("x"))
        for remaining in range(KILO_QUIT_TIMES, 0, -1):
            editor.process_key(CTRL_Q)
            assert f"Press Ctrl-Q {remaining} more times" in editor.cfg.statusmsg
        with pytest.raises(SystemExit):
            editor.process_key(CTRL_Q)

    def test_other_key_resets_counter(self, make_editor):
        editor = make_editor(["a"])
        editor.process_key(ord("x"))
        editor.process_key(CTRL_Q)
        editor.process_key(CTRL_Q)
        editor.process_key(ARROW_LEFT)
        assert editor.quit_times == KILO_QUIT_TIMES
        editor.process_key(CTRL_Q)
        assert f"Press Ctrl-Q {KILO_QUIT_TIMES} more times" in editor.cfg.statusmsg


class TestSave:
    def test_save_writes_file_and_clears_dirty(self, make_editor, tmp_path):
        path = tmp_path / "out.txt"
        editor = make_editor(["one", "two"], filename=str(path))
        editor.process_key(ord("!"))
        editor.process_key(CTRL_S)
        assert path.read_bytes() == b"!one\ntwo\n"
        assert editor.doc.dirty == 0
        assert editor.cfg.statusmsg == "9 bytes written to disk"

    def test_save_failure_keeps_dirty(self, make_editor, tmp_path):
        editor = make_editor(["one"], filename=str(tmp_path))
        editor.process_key(ord("x"))
        dirty = editor.doc.dirty
        editor.process_key(CTRL_S)
        assert editor.doc.dirty == dirty
        assert editor.cfg.statusmsg.startswith("Can't save! I/O error: ")
        assert rows(editor) == ["xone"]

    def test_save_as_prompts_for_name(self, make_editor, fake_input, tmp_path):
        path = tmp_path / "new.c"
        editor = make_editor(["int a;"])
        fake_input.feed(str(path).encode() + b"\r")
        editor.process_key(CTRL_S)
        assert editor.cfg.filename == str(path)
        assert path.read_bytes() == b"int a;\n"
        assert editor.doc.syntax is not None
        assert editor.doc.syntax.filetype == "c"

    def test_save_as_cancelled(self, make_editor, fake_input):
        editor = make_editor(["x"])
        fake_input.feed(b"abc\x1b")
        editor.process_key(CTRL_S)
        assert editor.cfg.filename is None
        assert editor.cfg.statusmsg == "Save aborted"


class TestPrompt:
    def test_backspace_and_enter(self, make_editor, fake_input):
        editor = make_editor()
        fake_input.feed(b"abx\x7fc\r")
        assert editor.prompt("Name: %s") == "abc"

    def test_enter_on_empty_input_is_ignored(self, make_editor, fake_input):
        editor = make_editor()
        fake_input.feed(b"\rz\r")
        assert editor.prompt("Name: %s") == "z"

    def test_callback_skips_enter_on_empty_input(self, make_editor, fake_input):
        editor = make_editor()
        seen = []
        fake_input.feed(b"\rq\r")
        editor.prompt("Name: %s", lambda buf, key: seen.append((buf, key)))
        assert seen == [("q", ord("q")), ("q", ENTER)]

    def test_callback_sees_every_key(self, make_editor, fake_input):
        editor = make_editor()
        seen = []
        fake_input.feed(b"ab\r")
        editor.prompt("Name: %s", lambda buf, key: seen.append((buf, key)))
        assert seen == [("a", ord("a")), ("ab", ord("b")), ("ab", ENTER)]

    def test_each_step_renders_one_frame(self, make_editor, fake_input, frames):
        editor = make_editor()
        fake_input.feed(b"ab\r")
        editor.prompt("Name: %s")
        assert len(frames) == 3
        assert b"Name: ab" in frames[-1]


class TestFind:
    def test_accept_moves_to_match(self, make_editor, fake_input):
        editor = make_editor(["alpha", "beta", "gamma"])
        fake_input.feed(b"mm\r")
        editor.process_key(CTRL_F)
        assert cursor(editor) == (2, 2)
        assert editor.cfg.statusmsg == ""

    def test_cancel_restores_cursor(self, make_editor, fake_input):
        editor = make_editor(["alpha", "beta", "gamma"])
        editor.cfg.cx = 1
        fake_input.feed(b"gam\x1b")
        editor.process_key(CTRL_F)
        assert cursor(editor) == (1, 0)

    def test_cancel_after_enter_on_cleared_query_restores_cursor(self, make_editor, fake_input):
        editor = make_editor(["alpha", "beta", "gamma"])
        fake_input.feed(b"mm\x7f\x7f\r\x1b")
        editor.process_key(CTRL_F)
        assert cursor(editor) == (0, 0)
        assert editor.cfg.rowoff == 0

    def test_arrows_step_between_matches(self, make_editor, fake_input):
        editor = make_editor(["ab", "x", "ab"])
        fake_input.feed(b"ab\x1b[B\r")
        editor.process_key(CTRL_F)
        assert cursor(editor) == (0, 2)


def test_open_missing_file_is_fatal(make_editor, tmp_path):
    editor = make_editor()
    with pytest.raises(FatalError) as info:
        editor.open(str(tmp_path / "missing.c"))
    assert info.value.operation == "fopen"


def test_refresh_writes_once(make_editor, frames):
    editor = make_editor(["a", "b"])
    editor.refresh_screen()
    assert len(frames) == 1


def test_run_rejects_extra_arguments(capsys):
    assert run(["a", "b"]) == 1
    assert "Usage" in capsys.readouterr().err


def test_run_reports_fatal_error_and_exits_1(monkeypatch, capfd):
    r, w = os.pipe()
    monkeypatch.setattr(editor_module, "STDIN_FD", r)
    try:
        assert run([]) == 1
    finally:
        os.close(r)
        os.close(w)
    out, err = capfd.readouterr()
    assert out.startswith("\x1b[2J\x1b[H")
    assert f"tcgetattr: {os.strerror(errno.ENOTTY)}" in err


def test_run_releases_terminal_before_reporting(monkeypatch):
    events = []

    def fake_acquire(session):
        events.append("acquire")
        session._orig = []
        return session

    def fake_release(session):
        events.append("release")
        session._orig = None

    def failing_window_size(ifd, ofd):
        raise FatalError("get_window_size", errno.EIO)

    def fake_report(exc):
        events.append(exc.report())

    monkeypatch.setattr(TerminalSession, "acquire", fake_acquire)
    monkeypatch.setattr(TerminalSession, "release", fake_release)
    monkeypatch.setattr(editor_module, "get_window_size", failing_window_size)
    monkeypatch.setattr(editor_module, "_report_fatal", fake_report)
    assert run([]) == 1
    assert events == [
        "acquire",
        "release",
        f"get_window_size: {os.strerror(errno.EIO)}",
    ]
