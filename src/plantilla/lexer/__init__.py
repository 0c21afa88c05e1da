"""Document lexer for Plantilla templates.

Modules:
    core: Lexer orchestration (discovery, ordering, node tokens)
    context: Per-pass state and name helpers
    helpers: Attribute and element helper tokenization
    expressions: Expression site tokenization
    relations: Ancestor, sibling and child resolution
    content: Markup extraction for node content
"""

from __future__ import annotations

from pathlib import Path
from typing import TYPE_CHECKING

from plantilla.document import load_file, load_string
from plantilla.lexer.core import Lexer

if TYPE_CHECKING:
    from lxml import etree

    from plantilla.config import LexConfig
    from plantilla.stream import TokenStream


def lex(
    document: etree._ElementTree | etree._Element,
    config: LexConfig | None = None,
    source_file: str | None = None,
) -> TokenStream:
    """Tokenize a parsed template document."""
    return Lexer(config).scan(document, source_file=source_file)


def lex_string(
    source: str | bytes,
    config: LexConfig | None = None,
    source_file: str | None = None,
) -> TokenStream:
    """Parse and tokenize template source.

    Raises:
        DocumentLoadError: If the source is not well-formed XML.
    """
    return lex(load_string(source, source_file=source_file), config, source_file)


def lex_file(path: str | Path, config: LexConfig | None = None) -> TokenStream:
    """Parse and tokenize a template file."""
    return lex(load_file(path), config, source_file=str(path))


__all__ = ["Lexer", "lex", "lex_file", "lex_string"]
