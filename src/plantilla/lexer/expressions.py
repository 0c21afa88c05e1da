"""Expression tokenization mixin.

An expression site is an attribute value or an element whose content holds
a {% or %} delimiter. Each site becomes one EXPRESSION token wrapping a
stream of content tokens:

    <p>Hello {% user.name %}</p>

    EXPRESSION /root/p
        EXPRESSION_CHARS 'Hello '
        EXPRESSION_OPEN  '{%'
        EXPRESSION_CHARS ' user.name '
        EXPRESSION_CLOSE '%}'

Embedded markup (elements, comments, processing instructions and CDATA
sections) is kept verbatim so that expression syntax may span it.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from lxml import etree

from plantilla.errors import MalformedExpressionError, UnresolvedPlaceholderError
from plantilla.lexer.content import comment_markup, iter_content, to_markup
from plantilla.lexer.context import qualified_name
from plantilla.splitter import ExpressionScanner, RunKind
from plantilla.stream import TokenStream
from plantilla.tokens import ExpressionContentToken, ExpressionToken, TokenType

if TYPE_CHECKING:
    from plantilla.lexer.context import LexContext
    from plantilla.splitter import TextRun

_RUN_TYPES = {
    RunKind.OPEN: TokenType.EXPRESSION_OPEN,
    RunKind.CLOSE: TokenType.EXPRESSION_CLOSE,
    RunKind.SINGLE_QUOTED: TokenType.EXPRESSION_CHARS,
    RunKind.DOUBLE_QUOTED: TokenType.EXPRESSION_CHARS,
    RunKind.CHARS: TokenType.EXPRESSION_CHARS,
}


class _ContentBuilder:
    """Collects the content tokens of one site, merging adjacent characters."""

    __slots__ = ("tokens", "_source_file")

    def __init__(self, source_file: str | None) -> None:
        self.tokens: list[ExpressionContentToken] = []
        self._source_file = source_file

    def add(self, token_type: TokenType, value: str, lineno: int) -> None:
        tokens = self.tokens
        if (
            token_type == TokenType.EXPRESSION_CHARS
            and tokens
            and tokens[-1].type == TokenType.EXPRESSION_CHARS
        ):
            last = tokens[-1]
            tokens[-1] = ExpressionContentToken(
                last.type, last.lineno, value=last.value + value, _source_file=self._source_file
            )
            return
        tokens.append(
            ExpressionContentToken(token_type, lineno, value=value, _source_file=self._source_file)
        )

    def add_runs(self, runs: list[TextRun]) -> None:
        for run in runs:
            self.add(_RUN_TYPES[run.kind], run.value, run.lineno)

    def build(self, source: str) -> TokenStream:
        return TokenStream.from_tokens(self.tokens, source)


class ExpressionTokenizerMixin:
    """Mixin turning expression sites into EXPRESSION tokens."""

    def _tokenize_expressions(self, ctx: LexContext, node: etree._Element, query: str) -> None:
        """Push one EXPRESSION token per site matched by a query.

        Sites are pushed in reverse document order.

        Args:
            ctx: Pass context
            node: Context node of the query
            query: XPath selecting attributes and/or elements
        """
        for site in reversed(node.xpath(query)):
            if isinstance(site, str):
                # Attribute result: smart string with a parent element
                token = self._attribute_expression(ctx, site.getparent(), site.attrname, str(site))
            else:
                token = self._element_expression(ctx, site)
            ctx.stream.push(token)

    def _attribute_expression(
        self, ctx: LexContext, element: etree._Element, name: str, value: str
    ) -> ExpressionToken:
        path = ctx.attribute_path(element, name)
        lineno = element.sourceline or 0
        scanner = ExpressionScanner(lineno)
        builder = _ContentBuilder(ctx.source_file)
        builder.add_runs(scanner.feed(value))
        self._check_closed(ctx, scanner, path, lineno)
        return ExpressionToken(
            TokenType.EXPRESSION,
            lineno,
            id=ctx.make_id(path),
            path=path,
            attribute=qualified_name(element, name),
            content=builder.build(value),
            _source_file=ctx.source_file,
        )

    def _element_expression(self, ctx: LexContext, element: etree._Element) -> ExpressionToken:
        path = ctx.path_of(element)
        lineno = element.sourceline or 0
        scanner = ExpressionScanner(lineno)
        builder = _ContentBuilder(ctx.source_file)
        source: list[str] = []

        for kind, item in iter_content(element):
            if kind == "text":
                builder.add_runs(scanner.feed(item))
                source.append(item)
                continue
            if kind == "cdata":
                token_type, markup = TokenType.EXPRESSION_CDATA, item
            else:
                token_type, markup = self._embedded_markup(ctx, item, path)
                if token_type is None:
                    builder.add_runs(scanner.feed(markup))
                    source.append(markup)
                    continue
                if not markup:
                    continue
            builder.add(token_type, markup, scanner.lineno)
            scanner.advance(markup)
            source.append(markup)

        self._check_closed(ctx, scanner, path, lineno)
        return ExpressionToken(
            TokenType.EXPRESSION,
            lineno,
            id=ctx.make_id(path),
            path=path,
            content=builder.build("".join(source)),
            _source_file=ctx.source_file,
        )

    def _embedded_markup(
        self, ctx: LexContext, child: etree._Element, path: str
    ) -> tuple[TokenType | None, str]:
        """Classify a child node inside element content.

        Returns:
            Token type and markup. The type is None for entity references,
            which are split like text.

        Raises:
            UnresolvedPlaceholderError: If a placeholder has no stashed original.
        """
        tag = child.tag
        if tag is etree.Comment:
            return TokenType.EXPRESSION_COMMENT, comment_markup(child, ctx.directive_pattern)
        if tag is etree.PI:
            data = f" {child.text}" if child.text else ""
            return TokenType.EXPRESSION_PI, f"<?{child.target}{data}?>"
        if tag is etree.Entity:
            return None, child.text
        if ctx.is_placeholder(child):
            node_id = child.get("id", "")
            original = ctx.originals.get(node_id)
            if original is None:
                raise UnresolvedPlaceholderError(
                    node_id, path=path, lineno=child.sourceline, source_file=ctx.source_file
                )
            return TokenType.EXPRESSION_ELEMENT, to_markup(original)
        return TokenType.EXPRESSION_ELEMENT, to_markup(child)

    def _check_closed(
        self, ctx: LexContext, scanner: ExpressionScanner, path: str, lineno: int
    ) -> None:
        if scanner.depth:
            raise MalformedExpressionError(
                "Expression opened with '{%' is never closed",
                path=path,
                lineno=lineno,
                source_file=ctx.source_file,
            )
