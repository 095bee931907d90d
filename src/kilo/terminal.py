from __future__ import annotations

import errno
import fcntl
import logging
import os
import re
import struct
import termios
from collections.abc import Callable, Iterator
from contextlib import AbstractContextManager

from .constants import (
    CSI_SIMPLE_MAP,
    CSI_TILDE_MAP,
    ESC,
    SS3_SIMPLE_MAP,
)

logger = logging.getLogger(__name__)

Reader = Callable[[int], bytes]


class FatalError(OSError):
    """Unrecoverable terminal or I/O failure; ``operation`` names the call."""

    def __init__(self, operation: str, err: int, strerror: str | None = None) -> None:
        super().__init__(err, strerror or os.strerror(err))
        self.operation = operation

    def report(self) -> str:
        return f"{self.operation}: {self.strerror}"


def fd_reader(fd: int) -> Reader:
    """Read up to ``n`` bytes from ``fd``; an idle timeout yields ``b""``."""

    def read(n: int) -> bytes:
        try:
            return os.read(fd, n)
        except (BlockingIOError, InterruptedError):
            return b""
        except OSError as exc:
            raise FatalError("read", exc.errno or errno.EIO) from exc

    return read


def write_all(fd: int, data: bytes) -> None:
    view = memoryview(data)
    while view:
        n = os.write(fd, view)
        if n <= 0:
            raise OSError(errno.EIO, "short write")
        view = view[n:]


class KeyDecoder:
    """Turns the raw input byte stream into key codes.

    Plain bytes are returned as-is; recognised escape sequences map to
    the ``ARROW_*``/``HOME_KEY``/... codes and anything else after an
    escape byte collapses to ``ESC``.
    """

    def __init__(self, read: Reader) -> None:
        self._read = read

    @classmethod
    def from_fd(cls, fd: int) -> "KeyDecoder":
        return cls(fd_reader(fd))

    def _read_byte_once(self) -> int | None:
        data = self._read(1)
        if not data:
            return None
        return data[0]

    def _read_byte_blocking(self) -> int:
        while True:
            c = self._read_byte_once()
            if c is not None:
                return c

    def next_key(self) -> int:
        c = self._read_byte_blocking()
        if c != ESC:
            return c

        seq0 = self._read_byte_once()
        if seq0 is None:
            return ESC
        seq1 = self._read_byte_once()
        if seq1 is None:
            return ESC

        if seq0 == ord("["):
            if ord("0") <= seq1 <= ord("9"):
                seq2 = self._read_byte_once()
                if seq2 is None:
                    return ESC
                if seq2 == ord("~"):
                    return CSI_TILDE_MAP.get(seq1, ESC)
                return ESC
            return CSI_SIMPLE_MAP.get(seq1, ESC)
        if seq0 == ord("O"):
            return SS3_SIMPLE_MAP.get(seq1, ESC)
        return ESC

    def keys(self) -> Iterator[int]:
        while True:
            yield self.next_key()


def read_key(fd: int) -> int:
    return KeyDecoder.from_fd(fd).next_key()


def get_cursor_position(ifd: int, ofd: int) -> tuple[int, int]:
    write_all(ofd, b"\x1b[6n")

    read = fd_reader(ifd)
    buf = bytearray()
    while len(buf) < 31:
        data = read(1)
        if not data:
            break
        if data == b"R":
            break
        buf += data

    match = re.fullmatch(rb"\x1b\[(\d+);(\d+)", bytes(buf))
    if not match:
        raise FatalError("get_cursor_position", errno.EIO, "invalid cursor position response")
    return int(match.group(1)), int(match.group(2))


def get_window_size(ifd: int, ofd: int) -> tuple[int, int]:
    try:
        packed = fcntl.ioctl(ofd, termios.TIOCGWINSZ, struct.pack("HHHH", 0, 0, 0, 0))
        rows, cols, _, _ = struct.unpack("HHHH", packed)
        if cols:
            return rows, cols
    except OSError:
        logger.debug("TIOCGWINSZ unavailable, probing with the cursor")

    try:
        orig_row, orig_col = get_cursor_position(ifd, ofd)
        write_all(ofd, b"\x1b[999C\x1b[999B")
        rows, cols = get_cursor_position(ifd, ofd)
        write_all(ofd, f"\x1b[{orig_row};{orig_col}H".encode())
    except OSError as exc:
        raise FatalError("get_window_size", exc.errno or errno.EIO) from exc
    return rows, cols


class TerminalSession(AbstractContextManager["TerminalSession"]):
    """Raw mode for one terminal, restored exactly once on release."""

    def __init__(self, fd: int) -> None:
        self.fd = fd
        self._orig: list | None = None

    @property
    def active(self) -> bool:
        return self._orig is not None

    def acquire(self) -> "TerminalSession":
        if not os.isatty(self.fd):
            raise FatalError("tcgetattr", errno.ENOTTY)
        try:
            self._orig = termios.tcgetattr(self.fd)
            raw = termios.tcgetattr(self.fd)
        except termios.error as exc:
            raise FatalError("tcgetattr", exc.args[0]) from exc

        raw[0] &= ~(termios.BRKINT | termios.ICRNL | termios.INPCK | termios.ISTRIP | termios.IXON)
        raw[1] &= ~termios.OPOST
        raw[2] |= termios.CS8
        raw[3] &= ~(termios.ECHO | termios.ICANON | termios.IEXTEN | termios.ISIG)
        raw[6][termios.VMIN] = 0
        raw[6][termios.VTIME] = 1
        try:
            termios.tcsetattr(self.fd, termios.TCSAFLUSH, raw)
        except termios.error as exc:
            raise FatalError("tcsetattr", exc.args[0]) from exc
        logger.debug("raw mode enabled on fd %d", self.fd)
        return self

    def release(self) -> None:
        if self._orig is None:
            return
        orig, self._orig = self._orig, None
        try:
            termios.tcsetattr(self.fd, termios.TCSAFLUSH, orig)
        except termios.error as exc:
            raise FatalError("tcsetattr", exc.args[0]) from exc
        logger.debug("terminal restored on fd %d", self.fd)

    def __enter__(self) -> "TerminalSession":
        return self.acquire()

    def __exit__(self, exc_type, exc, tb) -> None:
        self.release()
