"""Shared test fixtures and helpers."""

from __future__ import annotations

import pytest

from metalex.lexer import lex as start_session
from metalex.tokens import Token, TokenType


@pytest.fixture
def lex():
    """Return a helper that runs a full lexing session and returns every token."""

    def _lex(source: str, name: str = "test.tmpl") -> list[Token]:
        return list(start_session(name, source))

    return _lex


def assert_types(tokens: list[Token], expected: list[TokenType]) -> None:
    """Assert that the token types match the expected list."""
    actual = [t.type for t in tokens]
    assert actual == expected, f"Expected {expected}, got {actual}"


def assert_values(tokens: list[Token], expected: list[str]) -> None:
    """Assert that the token values match the expected list."""
    actual = [t.value for t in tokens]
    assert actual == expected, f"Expected {expected}, got {actual}"


def source_text(tokens: list[Token]) -> str:
    """Concatenate the values of every token that covers source text."""
    return "".join(t.value for t in tokens if t.type not in (TokenType.EOF, TokenType.ERROR))
