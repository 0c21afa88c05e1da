"""Document lexer for XML templates.

Turns a parsed template into a flat token stream. Instead of walking the
document recursively, the lexer finds all structurally significant nodes
up front and processes them innermost first, replacing each processed
node with a placeholder element:

    <root xmlns:ex="urn:ex">           <root>
      <p ex:If="{% a %}">..</p>   -->    <__N_-_O_-_D_-_E__ id="..."/>
    </root>                            </root>

A parent therefore only ever sees its direct child nodes, as placeholders
carrying their ids, and the tree builder can rebuild the hierarchy from
the ids alone.

Thread Safety:
Lexer instances hold only their config and may be shared. Every pass
works on a private copy of the document and its own LexContext.

"""

from __future__ import annotations

import copy

from lxml import etree

from plantilla.config import LexConfig, get_lex_config
from plantilla.lexer.content import node_content
from plantilla.lexer.context import LexContext, Marker
from plantilla.lexer.expressions import ExpressionTokenizerMixin
from plantilla.lexer.helpers import HelperTokenizerMixin
from plantilla.lexer.relations import RelationsMixin
from plantilla.namespaces import NamespaceClassifier
from plantilla.selectors import NodeSelector
from plantilla.stream import TokenStream
from plantilla.tokens import NodeToken, PropertyToken, TokenType
from plantilla.utils.logger import get_logger

logger = get_logger(__name__)


class Lexer(
    ExpressionTokenizerMixin,
    HelperTokenizerMixin,
    RelationsMixin,
):
    """Two-phase document lexer.

    Phase 1 discovers every node with its original path, id, depth and
    nearest enclosing node. Phase 2 tokenizes the nodes deepest first and,
    at equal depth, last first. The stream is read in reverse push order,
    so a forward reader meets every node before its descendants and
    before its following siblings.

    Usage:
        >>> stream = Lexer().scan(load_string('<root xmlns:ex="urn:ex"><p ex:If="x"/></root>'))
        >>> [token.type.name for token in stream]
        ['XML_VERSION', 'XML_ENCODING', 'ROOT_NODE', 'ELEMENT_NODE', 'ATTRIBUTE_HELPER']

    """

    __slots__ = ("_config",)

    def __init__(self, config: LexConfig | None = None) -> None:
        """Initialize lexer.

        Args:
            config: Lexing policy (defaults to the active config)
        """
        self._config = config or get_lex_config()

    @property
    def config(self) -> LexConfig:
        return self._config

    def scan(
        self,
        document: etree._ElementTree | etree._Element,
        source_file: str | None = None,
    ) -> TokenStream:
        """Tokenize a template document.

        The document is never modified; lexing the same document twice
        yields identical streams.

        Args:
            document: Parsed template (an element stands for its whole document)
            source_file: Optional template file name for diagnostics

        Returns:
            Frozen stream: properties, then the root node, then the other
            nodes by increasing depth (document order within a depth), each
            followed by its helpers and expressions.

        Raises:
            MalformedExpressionError: If an expression is never closed.
            UnresolvedPlaceholderError: If a placeholder cannot be resolved.
            AmbiguousHelperNamespaceError: In strict mode, on policy conflicts.
        """
        if isinstance(document, etree._Element):
            document = document.getroottree()

        ctx = self._create_context(document, source_file)
        try:
            markers = self._discover(ctx)
            logger.debug(
                "Lexing %s: %d helper namespace(s), %d node(s)",
                source_file or "<string>",
                len(ctx.namespaces),
                len(markers),
            )
            for marker in sorted(markers, key=lambda m: (-m.depth, -m.index)):
                self._tokenize_node(ctx, marker)
        finally:
            ctx.clear()

        docinfo = document.docinfo
        ctx.stream.push(
            PropertyToken(
                TokenType.XML_ENCODING, 0, value=docinfo.encoding, _source_file=source_file
            )
        )
        ctx.stream.push(
            PropertyToken(
                TokenType.XML_VERSION, 0, value=docinfo.xml_version, _source_file=source_file
            )
        )
        stream = ctx.stream.freeze()
        logger.debug("Lexed %d token(s)", len(stream))
        return stream

    # =========================================================================
    # Phase 1: discovery
    # =========================================================================

    def _create_context(self, document: etree._ElementTree, source_file: str | None) -> LexContext:
        tree = copy.deepcopy(document)
        namespaces = NamespaceClassifier(self._config).classify(tree)
        return LexContext(
            config=self._config,
            tree=tree,
            stream=TokenStream(etree.tostring(document, encoding="unicode"), lifo=True),
            selector=NodeSelector(namespaces, self._config),
            namespaces=namespaces,
            source_file=source_file,
        )

    def _discover(self, ctx: LexContext) -> list[Marker]:
        """Record every node of the working tree, in document order."""
        markers = ctx.markers
        for index, element in enumerate(ctx.tree.xpath(ctx.selector.node_query)):
            path = ctx.path_of(element)
            markers[element] = Marker(
                element=element,
                id=ctx.make_id(path),
                path=path,
                depth=sum(1 for _ in element.iterancestors()),
                index=index,
            )

        for marker in markers.values():
            for ancestor in marker.element.iterancestors():
                enclosing = markers.get(ancestor)
                if enclosing is not None:
                    marker.ancestor_id = enclosing.id
                    break
        return list(markers.values())

    # =========================================================================
    # Phase 2: tokenization
    # =========================================================================

    def _tokenize_node(self, ctx: LexContext, marker: Marker) -> None:
        node = marker.element
        ctx.originals[marker.id] = copy.deepcopy(node)

        self._tokenize_attribute_helpers(ctx, marker)
        is_helper = self._tokenize_element_helper(ctx, marker)
        self._tokenize_expressions(ctx, node, ctx.selector.node_expression_query)

        parent = node.getparent()
        ctx.stream.push(
            NodeToken(
                TokenType.ELEMENT_NODE if parent is not None else TokenType.ROOT_NODE,
                marker.lineno,
                id=marker.id,
                path=marker.path,
                ancestor_id=marker.ancestor_id,
                previous_sibling_id=self._previous_sibling_id(ctx, marker),
                next_sibling_id=self._next_sibling_id(ctx, marker),
                content=node_content(ctx, node, is_helper),
                children=self._children_ids(ctx, marker),
                _source_file=ctx.source_file,
            )
        )
        ctx.emitted.add(marker.id)

        if parent is not None:
            tail = node.tail
            placeholder = etree.Element(ctx.config.placeholder_tag, id=marker.id)
            parent.replace(node, placeholder)
            placeholder.tail = tail
