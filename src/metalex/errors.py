"""Lexical error exception with a source snippet."""

from __future__ import annotations

from metalex.tokens import Position, Span, Token


class LexError(Exception):
    """Raised for a lexical error; the span covers the offending character.

    An empty span marks an error found at the end of the input.
    """

    def __init__(self, message: str, span: Span, source: str) -> None:
        self.message = message
        self.span = span
        self.source = source
        super().__init__(self.format())

    @classmethod
    def from_token(cls, tok: Token, source: str) -> LexError:
        """Build the exception for an ERROR token taken from a lexing session."""
        return cls(tok.value, tok.span, source)

    @property
    def position(self) -> Position:
        return self.span.start

    def _source_line(self) -> str:
        offset = self.span.start.offset
        begin = self.source.rfind("\n", 0, offset) + 1
        end = self.source.find("\n", offset)
        if end < 0:
            end = len(self.source)
        return self.source[begin:end].rstrip("\r")

    def format(self, filename: str = "input.tmpl") -> str:
        start = self.span.start
        width = self.span.end.offset - start.offset
        marker = "^" * width if width > 0 else "^ end of input"
        gutter = " " * len(str(start.line))
        pad = " " * (start.column - 1)
        return "\n".join(
            [
                f"error: {self.message}",
                f"{gutter}--> {filename}:{start.line}:{start.column}",
                f"{gutter} |",
                f"{start.line} | {self._source_line()}",
                f"{gutter} | {pad}{marker}",
            ]
        )
