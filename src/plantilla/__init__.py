"""
Plantilla — Document Lexer for XML Templates

Turns an XML template into a flat, replayable token stream for a template
tree builder. Structurally significant elements (the root, helper elements
and elements carrying helper attributes) become Node tokens linked by
path-derived ids; helpers and {% ... %} expressions get tokens of their own.

Quick Start:
    >>> from plantilla import lex_string
    >>> stream = lex_string('<root xmlns:ex="urn:ex"><p ex:If="{% a %}">Hi</p></root>')
    >>> [token.type.name for token in stream]
    ['XML_VERSION', 'XML_ENCODING', 'ROOT_NODE', 'ELEMENT_NODE', 'ATTRIBUTE_HELPER', 'EXPRESSION']

    >>> # Custom policy
    >>> from plantilla import LexConfig, Lexer, load_string
    >>> lexer = Lexer(LexConfig(strict=True))
    >>> stream = lexer.scan(load_string("<root/>"))

Installation:
    pip install plantilla
"""

from plantilla.config import (
    LexConfig,
    get_lex_config,
    lex_config_context,
    reset_lex_config,
    set_lex_config,
)
from plantilla.document import load_file, load_string
from plantilla.errors import (
    AmbiguousHelperNamespaceError,
    DocumentLoadError,
    LexError,
    MalformedExpressionError,
    PlantillaError,
    StreamFrozenError,
    UnresolvedPlaceholderError,
)
from plantilla.lexer import Lexer, lex, lex_file, lex_string
from plantilla.location import SourceLocation
from plantilla.namespaces import NamespaceClassifier
from plantilla.selectors import NodeSelector
from plantilla.serialization import from_dict, from_json, to_dict, to_json
from plantilla.splitter import ExpressionScanner, RunKind, TextRun, split_text
from plantilla.stream import TokenStream
from plantilla.tokens import (
    ExpressionContentToken,
    ExpressionToken,
    HelperToken,
    NodeToken,
    PropertyToken,
    Token,
    TokenType,
)

__version__ = "0.1.0"

__all__ = [
    # Version
    "__version__",
    # Core API
    "Lexer",
    "lex",
    "lex_file",
    "lex_string",
    "load_file",
    "load_string",
    # Configuration
    "LexConfig",
    "get_lex_config",
    "lex_config_context",
    "reset_lex_config",
    "set_lex_config",
    # Building blocks
    "ExpressionScanner",
    "NamespaceClassifier",
    "NodeSelector",
    "RunKind",
    "TextRun",
    "split_text",
    # Tokens
    "ExpressionContentToken",
    "ExpressionToken",
    "HelperToken",
    "NodeToken",
    "PropertyToken",
    "Token",
    "TokenStream",
    "TokenType",
    # Location
    "SourceLocation",
    # Errors
    "AmbiguousHelperNamespaceError",
    "DocumentLoadError",
    "LexError",
    "MalformedExpressionError",
    "PlantillaError",
    "StreamFrozenError",
    "UnresolvedPlaceholderError",
    # Serialization
    "from_dict",
    "from_json",
    "to_dict",
    "to_json",
]
