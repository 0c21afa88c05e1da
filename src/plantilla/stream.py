"""Replayable token stream handed from the lexer to the tree builder.

A stream is built by pushing tokens and then frozen. After freezing it is
read-only and can be consumed any number of times (rewind, then next/peek).

Two construction orders exist:

- Expression content streams are pushed in document order and read in
  the same order.
- The document stream is pushed innermost node first (children before
  parents) and read in reverse push order, so the consumer meets the
  document properties, then the root node, then its descendants.

Example:
    >>> stream = TokenStream(lifo=True)
    >>> stream.push(child_token)
    >>> stream.push(root_token)
    >>> stream.freeze()
    >>> stream.next() is root_token
    True

"""

from __future__ import annotations

from collections.abc import Iterable, Iterator
from typing import TYPE_CHECKING

from plantilla.errors import StreamFrozenError

if TYPE_CHECKING:
    from plantilla.tokens import Token


class TokenStream:
    """Ordered, replayable sequence of tokens.

    Navigation follows the parser convention: ``current`` is the token at
    the cursor (None before the first ``next()`` and past the end),
    ``next()`` advances and returns the new current token, ``peek()``
    looks ahead without moving.

    Thread Safety:
        A frozen stream is never mutated again; only the cursor moves.
        Share frozen streams across threads by giving each reader its own
        ``replay()`` copy.

    """

    __slots__ = ("_pushed", "_tokens", "_tokens_len", "_pos", "_current", "_source", "_lifo")

    def __init__(self, source: str = "", *, lifo: bool = False) -> None:
        """Initialize an empty, writable stream.

        Args:
            source: Raw source text the tokens were produced from
            lifo: Read tokens in reverse push order once frozen
        """
        self._pushed: list[Token] | None = []
        self._tokens: tuple[Token, ...] = ()
        self._tokens_len = 0
        self._pos = -1
        self._current: Token | None = None
        self._source = source
        self._lifo = lifo

    @classmethod
    def from_tokens(cls, tokens: Iterable[Token], source: str = "") -> TokenStream:
        """Build a frozen stream read in the given order."""
        stream = cls(source)
        for token in tokens:
            stream.push(token)
        return stream.freeze()

    @classmethod
    def from_pushed(cls, tokens: Iterable[Token], source: str = "") -> TokenStream:
        """Build a frozen stream from tokens in push order (read last-pushed first)."""
        stream = cls(source, lifo=True)
        for token in tokens:
            stream.push(token)
        return stream.freeze()

    # =========================================================================
    # Construction
    # =========================================================================

    def push(self, token: Token) -> None:
        """Append a token to a writable stream.

        Raises:
            StreamFrozenError: If the stream was already frozen.
        """
        if self._pushed is None:
            raise StreamFrozenError("Cannot push onto a frozen token stream")
        self._pushed.append(token)

    def freeze(self) -> TokenStream:
        """Fix the read order and make the stream read-only.

        Returns:
            The stream itself, rewound.
        """
        if self._pushed is not None:
            pushed = self._pushed
            self._tokens = tuple(reversed(pushed)) if self._lifo else tuple(pushed)
            self._tokens_len = len(self._tokens)
            self._pushed = None
        self.rewind()
        return self

    @property
    def frozen(self) -> bool:
        return self._pushed is None

    # =========================================================================
    # Consumption
    # =========================================================================

    def rewind(self) -> None:
        """Move the cursor before the first token."""
        self._pos = -1
        self._current = None

    def next(self) -> Token | None:
        """Advance to next token and return it."""
        if self._pos < self._tokens_len:
            self._pos += 1
        if self._pos < self._tokens_len:
            self._current = self._tokens[self._pos]
        else:
            self._current = None
        return self._current

    def peek(self, offset: int = 1) -> Token | None:
        """Peek at token at offset from current position."""
        pos = self._pos + offset
        if 0 <= pos < self._tokens_len:
            return self._tokens[pos]
        return None

    @property
    def current(self) -> Token | None:
        return self._current

    def at_end(self) -> bool:
        """Check if no token is left after the cursor."""
        return self._pos + 1 >= self._tokens_len

    def replay(self) -> TokenStream:
        """Return an independent, rewound reader over the same tokens."""
        if self._pushed is not None:
            raise StreamFrozenError("Only frozen streams can be replayed")
        stream = TokenStream(self._source)
        stream._pushed = None
        stream._tokens = self._tokens
        stream._tokens_len = self._tokens_len
        return stream

    @property
    def source(self) -> str:
        """Raw source text, for diagnostics."""
        return self._source

    def __iter__(self) -> Iterator[Token]:
        return iter(self._tokens)

    def __len__(self) -> int:
        return self._tokens_len

    def __getitem__(self, index: int) -> Token:
        return self._tokens[index]

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, TokenStream):
            return NotImplemented
        return self._tokens == other._tokens and self._pushed == other._pushed

    __hash__ = None  # type: ignore[assignment]

    def __repr__(self) -> str:
        state = "frozen" if self._pushed is None else f"building, {len(self._pushed)} pushed"
        return f"TokenStream({self._tokens_len} tokens, {state})"
