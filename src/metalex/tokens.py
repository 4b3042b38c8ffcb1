"""Token types, data structures, and character classification helpers."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum, auto

# Action delimiters, fixed for the language
LEFT_DELIM = "{{"
RIGHT_DELIM = "}}"

# Returned by the cursor when the source is exhausted; never a valid character
EOF_CHAR = ""


class TokenType(Enum):
    ERROR = auto()  # value is the error message
    EOF = auto()

    TEXT = auto()  # any text outside actions
    LEFT_DELIM = auto()  # {{
    RIGHT_DELIM = auto()  # }}
    IDENTIFIER = auto()  # letter (letter | digit | _)*


@dataclass(frozen=True, slots=True)
class Position:
    """Source position, 1-based line and column, 0-based offset."""

    line: int
    column: int
    offset: int


@dataclass(frozen=True, slots=True)
class Span:
    """Source range from start to end position."""

    start: Position
    end: Position


@dataclass(frozen=True, slots=True)
class Token:
    """A single lexer token: the verbatim source text it covers, or an error message."""

    type: TokenType
    value: str
    span: Span


def is_ident_start(ch: str) -> bool:
    """Return True if ch may begin an identifier (any Unicode letter)."""
    return ch.isalpha()


def is_ident_char(ch: str) -> bool:
    """Return True if ch may continue an identifier."""
    return ch.isalpha() or ch.isdecimal() or ch == "_"


# str.isspace also accepts the ASCII information separators
_NOT_SPACE = frozenset("\x1c\x1d\x1e\x1f")


def is_space(ch: str) -> bool:
    return ch.isspace() and ch not in _NOT_SPACE
