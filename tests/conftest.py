from __future__ import annotations

import pytest

from kilo.document import Document
from kilo.editor import Editor
from kilo.syntax import select_syntax
from kilo.terminal import KeyDecoder


class FakeInput:
    """Byte source for ``KeyDecoder``: one queued byte per read, ``b""`` when idle."""

    def __init__(self, data: bytes = b"", max_idle: int = 100) -> None:
        self.pending = bytearray(data)
        self.idle_reads = 0
        self.max_idle = max_idle

    def feed(self, data: bytes) -> None:
        self.pending += data

    def __call__(self, n: int) -> bytes:
        if not self.pending:
            self.idle_reads += 1
            if self.idle_reads > self.max_idle:
                raise AssertionError("input script exhausted")
            return b""
        self.idle_reads = 0
        chunk = bytes(self.pending[:n])
        del self.pending[:n]
        return chunk


def make_document(lines: list[str], filename: str | None = None) -> Document:
    doc = Document(select_syntax(filename))
    for line in lines:
        doc.insert_row(doc.numrows, line)
    doc.mark_clean()
    return doc


@pytest.fixture
def fake_input() -> FakeInput:
    return FakeInput()


@pytest.fixture
def frames() -> list[bytes]:
    return []


@pytest.fixture
def make_editor(fake_input: FakeInput, frames: list[bytes]):
    def factory(
        lines: list[str] | None = None,
        filename: str | None = None,
        size: tuple[int, int] = (24, 80),
    ) -> Editor:
        editor = Editor(
            screen_size=size,
            decoder=KeyDecoder(fake_input),
            write=frames.append,
        )
        editor.doc = make_document(lines or [], filename)
        editor.cfg.filename = filename
        return editor

    return factory
