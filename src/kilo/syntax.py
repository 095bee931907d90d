from __future__ import annotations

from typing import TYPE_CHECKING

from .constants import (
    C_HL_EXTENSIONS,
    C_HL_KEYWORDS,
    HL_COMMENT,
    HL_HIGHLIGHT_NUMBERS,
    HL_HIGHLIGHT_STRINGS,
    HL_KEYWORD1,
    HL_KEYWORD2,
    HL_MATCH,
    HL_MLCOMMENT,
    HL_NORMAL,
    HL_NUMBER,
    HL_STRING,
    PY_HL_EXTENSIONS,
    PY_HL_KEYWORDS,
)
from .models import EditorSyntax, Row

if TYPE_CHECKING:
    from .document import Document

HLDB: tuple[EditorSyntax, ...] = (
    EditorSyntax(
        filetype="c",
        filematch=C_HL_EXTENSIONS,
        keywords=C_HL_KEYWORDS,
        singleline_comment_start="//",
        multiline_comment_start="/*",
        multiline_comment_end="*/",
        flags=HL_HIGHLIGHT_STRINGS | HL_HIGHLIGHT_NUMBERS,
    ),
    EditorSyntax(
        filetype="python",
        filematch=PY_HL_EXTENSIONS,
        keywords=PY_HL_KEYWORDS,
        singleline_comment_start="#",
        multiline_comment_start="",
        multiline_comment_end="",
        flags=HL_HIGHLIGHT_STRINGS | HL_HIGHLIGHT_NUMBERS,
    ),
)

SEPARATORS = ",.()+-/*=~%<>[];"
WHITESPACE = " \t\n\v\f\r\0"
DIGITS = "0123456789"


def is_separator(c: str) -> bool:
    return not c or c in WHITESPACE or c in SEPARATORS


def syntax_to_color(hl: int) -> int:
    if hl in (HL_COMMENT, HL_MLCOMMENT):
        return 36
    if hl == HL_KEYWORD1:
        return 33
    if hl == HL_KEYWORD2:
        return 32
    if hl == HL_STRING:
        return 35
    if hl == HL_NUMBER:
        return 31
    if hl == HL_MATCH:
        return 34
    return 37


def select_syntax(filename: str | None) -> EditorSyntax | None:
    """Return the first syntax whose filematch fits ``filename``.

    Patterns starting with a dot must equal the filename's extension,
    any other pattern matches anywhere in the name.
    """
    if not filename:
        return None
    dot = filename.rfind(".")
    ext = filename[dot:] if dot != -1 else None
    for syntax in HLDB:
        for pattern in syntax.filematch:
            if pattern.startswith("."):
                if ext is not None and ext == pattern:
                    return syntax
            elif pattern in filename:
                return syntax
    return None


def highlight_row(row: Row, syntax: EditorSyntax | None, in_comment: bool) -> bool:
    """Recompute ``row.hl`` and return the row's new open-comment flag.

    ``in_comment`` is the open-comment flag carried by the previous row.
    """
    row.hl = [HL_NORMAL] * row.rsize
    if syntax is None:
        return False

    keywords = syntax.keywords
    scs = syntax.singleline_comment_start
    mcs = syntax.multiline_comment_start
    mce = syntax.multiline_comment_end

    p = row.render
    hl = row.hl
    prev_sep = True
    in_string = ""
    i = 0

    while i < row.rsize:
        c = p[i]
        prev_hl = hl[i - 1] if i > 0 else HL_NORMAL

        if scs and not in_string and not in_comment:
            if p.startswith(scs, i):
                for h in range(i, row.rsize):
                    hl[h] = HL_COMMENT
                break

        if mcs and mce and not in_string:
            if in_comment:
                hl[i] = HL_MLCOMMENT
                if p.startswith(mce, i):
                    for h in range(i, i + len(mce)):
                        hl[h] = HL_MLCOMMENT
                    i += len(mce)
                    in_comment = False
                    prev_sep = True
                else:
                    i += 1
                continue
            if p.startswith(mcs, i):
                for h in range(i, i + len(mcs)):
                    hl[h] = HL_MLCOMMENT
                i += len(mcs)
                in_comment = True
                continue

        if syntax.flags & HL_HIGHLIGHT_STRINGS:
            if in_string:
                hl[i] = HL_STRING
                if c == "\\" and i + 1 < row.rsize:
                    hl[i + 1] = HL_STRING
                    i += 2
                    continue
                if c == in_string:
                    in_string = ""
                i += 1
                prev_sep = True
                continue
            if c in ('"', "'"):
                in_string = c
                hl[i] = HL_STRING
                i += 1
                continue

        if syntax.flags & HL_HIGHLIGHT_NUMBERS:
            if (c in DIGITS and (prev_sep or prev_hl == HL_NUMBER)) or (
                c == "." and prev_hl == HL_NUMBER
            ):
                hl[i] = HL_NUMBER
                i += 1
                prev_sep = False
                continue

        if prev_sep:
            matched = False
            for kw in keywords:
                kw2 = kw.endswith("|")
                token = kw[:-1] if kw2 else kw
                klen = len(token)
                tail = p[i + klen] if i + klen < row.rsize else ""
                if p.startswith(token, i) and is_separator(tail):
                    mark = HL_KEYWORD2 if kw2 else HL_KEYWORD1
                    for h in range(i, i + klen):
                        hl[h] = mark
                    i += klen
                    matched = True
                    break
            if matched:
                prev_sep = False
                continue

        prev_sep = is_separator(c)
        i += 1

    return in_comment


def update_syntax(doc: Document, idx: int) -> None:
    # Walk forward while the open-comment flag keeps changing; each row is
    # highlighted at most once, so this ends within numrows passes.
    while idx < doc.numrows:
        row = doc.rows[idx]
        carried = idx > 0 and doc.rows[idx - 1].hl_open_comment
        open_comment = highlight_row(row, doc.syntax, carried)
        changed = row.hl_open_comment != open_comment
        row.hl_open_comment = open_comment
        if not changed:
            return
        idx += 1
