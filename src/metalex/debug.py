"""Human-readable token listing for --debug and text output."""

from __future__ import annotations

import sys
from collections.abc import Iterable
from typing import TextIO

from metalex.tokens import Token, TokenType

_KIND_NAMES = {
    TokenType.TEXT: "Text",
    TokenType.LEFT_DELIM: "LeftDelim",
    TokenType.RIGHT_DELIM: "RightDelim",
    TokenType.IDENTIFIER: "Identifier",
}


def _quote(value: str) -> str:
    escaped = value.replace("\\", "\\\\").replace('"', '\\"')
    escaped = escaped.replace("\n", "\\n").replace("\t", "\\t").replace("\r", "\\r")
    return f'"{escaped}"'


def format_token(tok: Token, limit: int = 10) -> str:
    """Render a token as one line; values longer than *limit* are truncated."""
    if tok.type == TokenType.EOF:
        return "t: EOF"
    if tok.type == TokenType.ERROR:
        return f"t: Error; v: {tok.value}"
    prefix = f"t: {_KIND_NAMES[tok.type]}; "
    if limit > 0 and len(tok.value) > limit:
        return f"{prefix} v: {_quote(tok.value[:limit])}..."
    return f"{prefix} v: {_quote(tok.value)}"


def dump_tokens(tokens: Iterable[Token], *, file: TextIO | None = None, limit: int = 10) -> None:
    """Print one formatted token per line to *file* (default: the current sys.stderr)."""
    if file is None:
        file = sys.stderr
    for tok in tokens:
        file.write(format_token(tok, limit) + "\n")
