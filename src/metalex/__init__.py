"""metalex: lexer for {{ action }} templates."""

from __future__ import annotations

from metalex.channel import ThreadedLexer, lex_threaded
from metalex.errors import LexError
from metalex.lexer import Lexer, lex, tokenize
from metalex.tokens import LEFT_DELIM, RIGHT_DELIM, Token, TokenType

__version__ = "0.1.0"

__all__ = [
    "LEFT_DELIM",
    "RIGHT_DELIM",
    "LexError",
    "Lexer",
    "ThreadedLexer",
    "Token",
    "TokenType",
    "lex",
    "lex_threaded",
    "tokenize",
]
