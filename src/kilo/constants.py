from __future__ import annotations

import logging
import os

logger = logging.getLogger(__name__)

KILO_VERSION = "0.1.0"
KILO_QUERY_LEN = 256
KILO_QUIT_TIMES = 3
KILO_MSG_TIMEOUT = 5
DEFAULT_TAB_STOP = 8


def _tab_stop_from_env() -> int:
    value = os.environ.get("KILO_TAB_STOP")
    if not value:
        return DEFAULT_TAB_STOP
    try:
        tab_stop = int(value)
    except ValueError:
        tab_stop = 0
    if tab_stop <= 0:
        logger.warning("ignoring invalid KILO_TAB_STOP=%r", value)
        return DEFAULT_TAB_STOP
    return tab_stop


KILO_TAB_STOP = _tab_stop_from_env()

# Syntax highlight types.
HL_NORMAL = 0
HL_COMMENT = 1
HL_MLCOMMENT = 2
HL_KEYWORD1 = 3
HL_KEYWORD2 = 4
HL_STRING = 5
HL_NUMBER = 6
HL_MATCH = 7

HL_HIGHLIGHT_STRINGS = 1 << 0
HL_HIGHLIGHT_NUMBERS = 1 << 1

# Key actions.
CTRL_F = 6
CTRL_H = 8
CTRL_L = 12
ENTER = 13
CTRL_Q = 17
CTRL_S = 19
ESC = 27
BACKSPACE = 127

ARROW_LEFT = 1000
ARROW_RIGHT = 1001
ARROW_UP = 1002
ARROW_DOWN = 1003
DEL_KEY = 1004
HOME_KEY = 1005
END_KEY = 1006
PAGE_UP = 1007
PAGE_DOWN = 1008

CSI_SIMPLE_MAP = {
    ord("A"): ARROW_UP,
    ord("B"): ARROW_DOWN,
    ord("C"): ARROW_RIGHT,
    ord("D"): ARROW_LEFT,
    ord("H"): HOME_KEY,
    ord("F"): END_KEY,
}
CSI_TILDE_MAP = {
    ord("1"): HOME_KEY,
    ord("3"): DEL_KEY,
    ord("4"): END_KEY,
    ord("5"): PAGE_UP,
    ord("6"): PAGE_DOWN,
    ord("7"): HOME_KEY,
    ord("8"): END_KEY,
}
SS3_SIMPLE_MAP = {
    ord("H"): HOME_KEY,
    ord("F"): END_KEY,
}

ANSI_CLEAR_SCREEN = b"\x1b[2J"
ANSI_HIDE_CURSOR = b"\x1b[?25l"
ANSI_SHOW_CURSOR = b"\x1b[?25h"
ANSI_CURSOR_HOME = b"\x1b[H"
ANSI_CLEAR_LINE = b"\x1b[K"
ANSI_INVERT_ON = b"\x1b[7m"
ANSI_INVERT_OFF = b"\x1b[m"
ANSI_DEFAULT_FG = b"\x1b[39m"

C_HL_EXTENSIONS = (".c", ".h", ".cpp", ".hpp", ".cc")
C_HL_KEYWORDS = (
    # C keywords.
    "switch",
    "if",
    "while",
    "for",
    "break",
    "continue",
    "return",
    "else",
    "struct",
    "union",
    "typedef",
    "static",
    "enum",
    "class",
    "case",
    "default",
    "do",
    "goto",
    "sizeof",
    "extern",
    "register",
    "volatile",
    "NULL",
    # C++ keywords.
    "namespace",
    "new",
    "delete",
    "this",
    "template",
    "typename",
    "virtual",
    "public",
    "private",
    "protected",
    "operator",
    "nullptr",
    "true",
    "false",
    # C types (secondary class).
    "int|",
    "long|",
    "double|",
    "float|",
    "char|",
    "unsigned|",
    "signed|",
    "void|",
    "short|",
    "const|",
    "bool|",
)

PY_HL_EXTENSIONS = (".py", ".pyw")
PY_HL_KEYWORDS = (
    "and",
    "as",
    "assert",
    "async",
    "await",
    "break",
    "class",
    "continue",
    "def",
    "del",
    "elif",
    "else",
    "except",
    "finally",
    "for",
    "from",
    "global",
    "if",
    "import",
    "in",
    "is",
    "lambda",
    "nonlocal",
    "not",
    "or",
    "pass",
    "raise",
    "return",
    "try",
    "while",
    "with",
    "yield",
    # Builtin names (secondary class).
    "None|",
    "True|",
    "False|",
    "self|",
    "int|",
    "str|",
    "bytes|",
    "float|",
    "list|",
    "dict|",
    "set|",
    "tuple|",
)
