"""Quote-aware splitting of text into expression runs.

Finds the {% and %} delimiters in a text run without misreading string
literals inside an expression as delimiters:

    >>> [run.kind.name for run in split_text("{% '{% x %}' %}")]
    ['OPEN', 'CHARS', 'SINGLE_QUOTED', 'CHARS', 'CLOSE']

Quoted literals are matched before delimiters, inside and outside an
expression, and a literal is emitted as a single run. Text like
``Type '{%' to open`` therefore opens nothing. A lone apostrophe never
forms a literal, so ``Don't {% x %}`` still splits at its delimiters.

Delimiters are captured as runs of their own and empty runs are dropped.
Every run carries the line it starts on.

"""

from __future__ import annotations

import re
from dataclasses import dataclass
from enum import Enum, auto

OPEN_DELIMITER = "{%"
CLOSE_DELIMITER = "%}"

# String literals first, then delimiters.
_RUN_PATTERN = re.compile(
    r"""('(?:[^'\\]|\\['"]|\\)*')"""
    r'''|("(?:[^"\\]|\\["']|\\)*")'''
    r"|(\{%|%\})"
)


class RunKind(Enum):
    """Classification of a split run."""

    SINGLE_QUOTED = auto()  # '...'
    DOUBLE_QUOTED = auto()  # "..."
    OPEN = auto()  # {%
    CLOSE = auto()  # %}
    CHARS = auto()  # anything else


@dataclass(frozen=True, slots=True)
class TextRun:
    """One classified piece of a text run."""

    kind: RunKind
    value: str
    lineno: int


class ExpressionScanner:
    """Stateful splitter for text fed in several pieces.

    Element content may interleave text with embedded markup, and an
    expression may span both. The scanner keeps the expression depth and
    the running line number across ``feed()`` calls; ``advance()`` moves
    the line counter over markup that is not split.

    Thread Safety:
        Scanner instances are single-use. Create one per expression site.

    """

    __slots__ = ("_depth", "_lineno")

    def __init__(self, lineno: int = 1) -> None:
        self._depth = 0
        self._lineno = lineno

    @property
    def depth(self) -> int:
        """Number of currently unclosed {% delimiters."""
        return self._depth

    @property
    def lineno(self) -> int:
        """Line on which the next run starts."""
        return self._lineno

    def advance(self, markup: str) -> None:
        """Move the line counter past markup that is not split."""
        self._lineno += markup.count("\n")

    def feed(self, text: str) -> list[TextRun]:
        """Split the next piece of text.

        Args:
            text: Raw text (attribute value or text node content)

        Returns:
            Runs in source order.
        """
        runs: list[TextRun] = []
        pos = 0
        text_len = len(text)
        while pos < text_len:
            match = _RUN_PATTERN.search(text, pos)
            if match is None:
                self._emit(runs, RunKind.CHARS, text[pos:])
                break

            start = match.start()
            if start > pos:
                self._emit(runs, RunKind.CHARS, text[pos:start])

            value = match.group(0)
            if value == OPEN_DELIMITER:
                self._depth += 1
                self._emit(runs, RunKind.OPEN, value)
            elif value == CLOSE_DELIMITER:
                if self._depth:
                    self._depth -= 1
                self._emit(runs, RunKind.CLOSE, value)
            elif value[0] == "'":
                self._emit(runs, RunKind.SINGLE_QUOTED, value)
            else:
                self._emit(runs, RunKind.DOUBLE_QUOTED, value)
            pos = match.end()

        return runs

    def _emit(self, runs: list[TextRun], kind: RunKind, value: str) -> None:
        runs.append(TextRun(kind, value, self._lineno))
        self._lineno += value.count("\n")


def split_text(text: str, lineno: int = 1) -> list[TextRun]:
    """Split a single text run into classified runs.

    Args:
        text: Raw text to split
        lineno: Line on which the text starts

    Returns:
        Runs in source order.

    Example:
        >>> [(r.kind.name, r.value) for r in split_text("a {% b %}")]
        [('CHARS', 'a '), ('OPEN', '{%'), ('CHARS', ' b '), ('CLOSE', '%}')]
    """
    return ExpressionScanner(lineno).feed(text)


def has_delimiter(text: str | None) -> bool:
    """Check whether text contains an expression delimiter."""
    return bool(text) and (OPEN_DELIMITER in text or CLOSE_DELIMITER in text)
