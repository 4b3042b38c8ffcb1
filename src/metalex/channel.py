"""Lexing session that runs the state machine on a producer thread.

Tokens are handed to the consumer through a single-slot queue, so the
producer is at most one token ahead. Order is preserved. Closing the session
stops a producer whose consumer has gone away.
"""

from __future__ import annotations

import queue
import threading
from collections.abc import Iterator

from metalex.lexer import Lexer
from metalex.tokens import Token

_DONE = object()
_POLL_INTERVAL = 0.05


class ThreadedLexer:
    """Iterate tokens produced by a Lexer running on a background thread."""

    def __init__(self, source: str, name: str = "input.tmpl") -> None:
        self.name = name
        self._lexer = Lexer(source, name)
        self._queue: queue.Queue[object] = queue.Queue(maxsize=1)
        self._closed = threading.Event()
        self._exhausted = False
        self._thread = threading.Thread(target=self._run, name=f"metalex-{name}", daemon=True)
        self._thread.start()

    def _run(self) -> None:
        try:
            for tok in self._lexer:
                if not self._put(tok):
                    return
        except Exception as exc:
            # Re-raised in the consumer by next_item()
            self._put(exc)
            return
        self._put(_DONE)

    def _put(self, item: object) -> bool:
        """Block until the consumer takes the slot; False if the session was closed."""
        while not self._closed.is_set():
            try:
                self._queue.put(item, timeout=_POLL_INTERVAL)
            except queue.Full:
                continue
            return True
        return False

    def __iter__(self) -> Iterator[Token]:
        return self

    def __next__(self) -> Token:
        tok = self.next_item()
        if tok is None:
            raise StopIteration
        return tok

    def next_item(self) -> Token | None:
        """Wait for the next token; None once the session is exhausted or closed."""
        if self._exhausted or self._closed.is_set():
            return None
        item = self._queue.get()
        if item is _DONE:
            self._exhausted = True
            self._thread.join()
            return None
        if isinstance(item, Exception):
            self._exhausted = True
            raise item
        assert isinstance(item, Token)
        return item

    @property
    def alive(self) -> bool:
        """True while the producer thread is running."""
        return self._thread.is_alive()

    def close(self, timeout: float | None = None) -> None:
        """Abandon the session and wait for the producer thread to exit."""
        self._closed.set()
        self._thread.join(timeout)

    def __enter__(self) -> ThreadedLexer:
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()


def lex_threaded(name: str, source: str) -> ThreadedLexer:
    """Start a lexing session on a producer thread."""
    return ThreadedLexer(source, name)
