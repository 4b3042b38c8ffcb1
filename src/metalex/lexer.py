"""Action lexer: splits template source into text, delimiter, and identifier tokens."""

from __future__ import annotations

from collections import deque
from collections.abc import Iterator
from enum import Enum, auto

from metalex.errors import LexError
from metalex.tokens import (
    EOF_CHAR,
    LEFT_DELIM,
    RIGHT_DELIM,
    Position,
    Span,
    Token,
    TokenType,
    is_ident_char,
    is_ident_start,
    is_space,
)


class _State(Enum):
    OUTSIDE_ACTION = auto()
    LEFT_DELIM = auto()
    INSIDE_ACTION = auto()
    RIGHT_DELIM = auto()
    IDENTIFIER = auto()


class Lexer:
    """Lazily tokenize template source; iterate to pull tokens one at a time.

    A lexer is a one-shot session: it stops for good after yielding EOF or
    the first ERROR token.
    """

    def __init__(self, source: str, name: str = "input.tmpl") -> None:
        self.name = name
        self._source = source
        self._start = 0
        self._pos = 0
        self._width = 0
        self._state: _State | None = _State.OUTSIDE_ACTION
        self._pending: deque[Token] = deque()
        self._handlers = {
            _State.OUTSIDE_ACTION: self._lex_outside_action,
            _State.LEFT_DELIM: self._lex_left_delim,
            _State.INSIDE_ACTION: self._lex_inside_action,
            _State.RIGHT_DELIM: self._lex_right_delim,
            _State.IDENTIFIER: self._lex_identifier,
        }

    def __iter__(self) -> Iterator[Token]:
        return self

    def __next__(self) -> Token:
        tok = self.next_item()
        if tok is None:
            raise StopIteration
        return tok

    def next_item(self) -> Token | None:
        """Run the state machine until a token is available; None once exhausted."""
        while not self._pending:
            if self._state is None:
                return None
            self._state = self._handlers[self._state]()
        return self._pending.popleft()

    # ------------------------------------------------------------------
    # Cursor primitives
    # ------------------------------------------------------------------

    def _next(self) -> str:
        if self._pos >= len(self._source):
            self._width = 0
            return EOF_CHAR
        ch = self._source[self._pos]
        self._width = len(ch)
        self._pos += self._width
        return ch

    def _peek(self) -> str:
        ch = self._next()
        self._backup()
        return ch

    def _backup(self) -> None:
        # Only valid once per _next()
        self._pos -= self._width

    def _ignore(self) -> None:
        self._start = self._pos

    def _at(self, delim: str) -> bool:
        return self._source.startswith(delim, self._pos)

    def _position(self, offset: int) -> Position:
        line = self._source.count("\n", 0, offset) + 1
        col = offset - (self._source.rfind("\n", 0, offset) + 1) + 1
        return Position(line, col, offset)

    def _emit(self, tt: TokenType) -> None:
        span = Span(self._position(self._start), self._position(self._pos))
        self._pending.append(Token(tt, self._source[self._start : self._pos], span))
        self._start = self._pos

    def _emit_error(self, message: str) -> None:
        """Emit an ERROR token at the last character read; ends the session."""
        start = self._position(self._pos - self._width)
        self._pending.append(Token(TokenType.ERROR, message, Span(start, self._position(self._pos))))
        return None

    # ------------------------------------------------------------------
    # States
    # ------------------------------------------------------------------

    def _lex_outside_action(self) -> _State | None:
        while True:
            if self._at(LEFT_DELIM):
                if self._pos > self._start:
                    self._emit(TokenType.TEXT)
                return _State.LEFT_DELIM
            if self._next() == EOF_CHAR:
                break
        if self._pos > self._start:
            self._emit(TokenType.TEXT)
        self._emit(TokenType.EOF)
        return None

    def _lex_left_delim(self) -> _State:
        self._pos += len(LEFT_DELIM)
        self._emit(TokenType.LEFT_DELIM)
        return _State.INSIDE_ACTION

    def _lex_right_delim(self) -> _State:
        self._pos += len(RIGHT_DELIM)
        self._emit(TokenType.RIGHT_DELIM)
        return _State.OUTSIDE_ACTION

    def _lex_inside_action(self) -> _State | None:
        while True:
            if self._at(RIGHT_DELIM):
                return _State.RIGHT_DELIM
            ch = self._next()
            if ch == EOF_CHAR or ch == "\n":
                return self._emit_error("unclosed action")
            if is_space(ch):
                self._ignore()
            elif is_ident_start(ch):
                self._backup()
                return _State.IDENTIFIER
            else:
                return self._emit_error(f"unexpected symbol {ch!r}")

    def _lex_identifier(self) -> _State:
        # Only entered from _lex_inside_action after it has seen a letter
        if not is_ident_start(self._peek()):
            raise LexError(
                "internal error: identifier must start with a letter",
                Span(self._position(self._pos), self._position(self._pos)),
                self._source,
            )
        self._next()
        while is_ident_char(self._next()):
            pass
        self._backup()
        self._emit(TokenType.IDENTIFIER)
        return _State.INSIDE_ACTION


def lex(name: str, source: str) -> Lexer:
    """Start a lexing session over source; name labels it in error messages."""
    return Lexer(source, name)


def tokenize(source: str, name: str = "input.tmpl") -> list[Token]:
    """Convenience function: tokenize source text and return the token list.

    Raises LexError instead of returning a trailing ERROR token.
    """
    tokens: list[Token] = []
    for tok in Lexer(source, name):
        if tok.type == TokenType.ERROR:
            raise LexError.from_token(tok, source)
        tokens.append(tok)
    return tokens
