"""Token and TokenType definitions for the Plantilla document lexer.

The lexer produces a stream of tokens that the template tree builder
consumes. There are five token classes, all sharing the Token base:

- PropertyToken: document prolog metadata (XML version, encoding)
- NodeToken: one structurally significant element
- HelperToken: an element or attribute helper (extension point)
- ExpressionToken: one {% ... %} site, wrapping its content tokens
- ExpressionContentToken: a piece of an expression site

Nodes reference each other by id (hash of the node path) instead of by
object, since the tree is rewritten while tokens are produced.

Thread Safety:
Tokens are frozen (immutable) and safe to share across threads.
TokenType is an enum (inherently immutable).

Performance Note:
Tokens store raw coordinates and lazily create SourceLocation on demand.

"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum, auto
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from plantilla.location import SourceLocation
    from plantilla.stream import TokenStream


class TokenType(Enum):
    """Token types produced by the document lexer.

    Organized by category:
    - Document properties (XML_VERSION, XML_ENCODING)
    - Structure (ROOT_NODE, ELEMENT_NODE)
    - Helpers (ELEMENT_HELPER, ATTRIBUTE_HELPER)
    - Expressions (EXPRESSION and its content kinds)

    """

    # Document properties
    XML_VERSION = auto()
    XML_ENCODING = auto()

    # Structure
    ROOT_NODE = auto()
    ELEMENT_NODE = auto()

    # Helpers
    ELEMENT_HELPER = auto()  # <ex:If>
    ATTRIBUTE_HELPER = auto()  # ex:Locale="..."

    # Expressions
    EXPRESSION = auto()
    EXPRESSION_OPEN = auto()  # {%
    EXPRESSION_CLOSE = auto()  # %}
    EXPRESSION_CHARS = auto()  # .+
    EXPRESSION_ELEMENT = auto()  # <tag />
    EXPRESSION_COMMENT = auto()  # <!-- comment -->
    EXPRESSION_CDATA = auto()  # <![CDATA[ ]]>
    EXPRESSION_PI = auto()  # <?target data?>


PROPERTY_TYPES = frozenset({TokenType.XML_VERSION, TokenType.XML_ENCODING})
NODE_TYPES = frozenset({TokenType.ROOT_NODE, TokenType.ELEMENT_NODE})
HELPER_TYPES = frozenset({TokenType.ELEMENT_HELPER, TokenType.ATTRIBUTE_HELPER})
EXPRESSION_CONTENT_TYPES = frozenset(
    {
        TokenType.EXPRESSION_OPEN,
        TokenType.EXPRESSION_CLOSE,
        TokenType.EXPRESSION_CHARS,
        TokenType.EXPRESSION_ELEMENT,
        TokenType.EXPRESSION_COMMENT,
        TokenType.EXPRESSION_CDATA,
        TokenType.EXPRESSION_PI,
    }
)


@dataclass(frozen=True, slots=True)
class Token:
    """Base class for all document tokens.

    Attributes:
        type: The token type (from TokenType enum)
        lineno: Line number in the source document (1-indexed, 0 = unknown)
        _source_file: Optional source file path

    Performance:
        SourceLocation is created lazily on first access to `.location`.

    """

    type: TokenType
    lineno: int
    _source_file: str | None = field(default=None, kw_only=True)
    # Cache field - excluded from repr and comparison
    _location_cache: SourceLocation | None = field(
        default=None, repr=False, compare=False, hash=False, kw_only=True
    )

    @property
    def location(self) -> SourceLocation:
        """Get source location (lazily created and cached)."""
        if self._location_cache is not None:
            return self._location_cache

        from plantilla.location import SourceLocation

        loc = SourceLocation(
            lineno=self.lineno,
            path=getattr(self, "path", None),
            source_file=self._source_file,
        )
        object.__setattr__(self, "_location_cache", loc)
        return loc


@dataclass(frozen=True, slots=True)
class PropertyToken(Token):
    """Document prolog metadata (XML_VERSION or XML_ENCODING)."""

    value: str | None = None

    def __repr__(self) -> str:
        return f"PropertyToken({self.type.name}, {self.value!r})"


@dataclass(frozen=True, slots=True)
class NodeToken(Token):
    """One structural node of the template.

    Attributes:
        id: Hash of the node path in the original document
        path: Node path in the original document
        ancestor_id: Id of the nearest enclosing node (None for the root)
        previous_sibling_id: Id of the preceding sibling node, if addressable
        next_sibling_id: Id of the following sibling node, if addressable
        content: Markup of the node with helper markup stripped. Processed
            child nodes appear as placeholder elements carrying their id.
        children: Ids of the directly contained nodes, in document order

    """

    id: str = ""
    path: str = ""
    ancestor_id: str | None = None
    previous_sibling_id: str | None = None
    next_sibling_id: str | None = None
    content: str = ""
    children: tuple[str, ...] = ()

    @property
    def is_root(self) -> bool:
        return self.type == TokenType.ROOT_NODE

    def __repr__(self) -> str:
        return f"NodeToken({self.type.name}, {self.path!r}, {self.lineno}, children={len(self.children)})"


@dataclass(frozen=True, slots=True)
class HelperToken(Token):
    """An element or attribute helper.

    Attributes:
        id: Hash of the helper path
        path: Path of the helper element or attribute
        name: Local name of the helper
        namespace: Namespace URI of the helper
        attributes: Non-helper attributes of an element helper (qualified name -> value)
        value: Raw value of an attribute helper

    """

    id: str = ""
    path: str = ""
    name: str = ""
    namespace: str = ""
    attributes: dict[str, str] = field(default_factory=dict, hash=False)
    value: str | None = None

    def __repr__(self) -> str:
        return f"HelperToken({self.type.name}, {{{self.namespace}}}{self.name}, {self.lineno})"


@dataclass(frozen=True, slots=True)
class ExpressionToken(Token):
    """One expression site, wrapping the tokens of its content.

    Attributes:
        id: Hash of the site path
        path: Path of the element or attribute holding the expression
        attribute: Qualified name of the owning attribute (None for element content)
        content: Stream of ExpressionContentToken objects

    """

    id: str = ""
    path: str = ""
    attribute: str | None = None
    content: TokenStream | None = field(default=None, hash=False)

    def __repr__(self) -> str:
        return f"ExpressionToken({self.path!r}, {self.lineno})"


@dataclass(frozen=True, slots=True)
class ExpressionContentToken(Token):
    """A piece of an expression site: delimiter, characters or embedded markup."""

    value: str = ""

    def __repr__(self) -> str:
        val = self.value
        if len(val) > 20:
            val = val[:17] + "..."
        return f"ExpressionContentToken({self.type.name}, {val!r}, {self.lineno})"
