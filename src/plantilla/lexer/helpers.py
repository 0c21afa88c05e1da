"""Helper tokenization mixin.

Attribute helpers are consumed (removed from the working tree) as they are
tokenized. Element helpers stay in place; the node itself is replaced by a
placeholder later in the pass.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from plantilla.lexer.context import qualified_name, split_name
from plantilla.splitter import has_delimiter
from plantilla.tokens import HelperToken, TokenType

if TYPE_CHECKING:
    from collections.abc import Callable

    from lxml import etree

    from plantilla.tokens import ExpressionToken

    from plantilla.lexer.context import LexContext, Marker


class HelperTokenizerMixin:
    """Mixin tokenizing the attribute and element helpers of a node.

    Expects ``_attribute_expression`` and ``_tokenize_expressions`` from
    ExpressionTokenizerMixin.
    """

    _attribute_expression: Callable[[LexContext, etree._Element, str, str], ExpressionToken]
    _tokenize_expressions: Callable[[LexContext, etree._Element, str], None]

    def _tokenize_attribute_helpers(self, ctx: LexContext, marker: Marker) -> None:
        """Push ATTRIBUTE_HELPER tokens (and their expressions), then drop the attributes.

        Attributes are visited in reverse document order so that a forward
        reader of the document stream meets them in source order.
        """
        query = ctx.selector.helper_attribute_query
        if not query:
            return

        node = marker.element
        for attribute in reversed(node.xpath(query)):
            name = attribute.attrname
            value = str(attribute)
            if has_delimiter(value):
                ctx.stream.push(self._attribute_expression(ctx, node, name, value))

            uri, local = split_name(name)
            path = ctx.attribute_path(node, name)
            ctx.stream.push(
                HelperToken(
                    TokenType.ATTRIBUTE_HELPER,
                    marker.lineno,
                    id=ctx.make_id(path),
                    path=path,
                    name=local,
                    namespace=uri or "",
                    value=value,
                    _source_file=ctx.source_file,
                )
            )
            del node.attrib[name]

    def _tokenize_element_helper(self, ctx: LexContext, marker: Marker) -> bool:
        """Push the ELEMENT_HELPER token of a helper element.

        Returns:
            True if the node is an element helper.
        """
        node = marker.element
        uri, local = split_name(node.tag)
        if not ctx.selector.is_helper_namespace(uri):
            return False

        self._tokenize_expressions(ctx, node, ctx.selector.element_helper_expression_query)
        attributes = {
            qualified_name(node, name): value
            for name, value in node.attrib.items()
            if not ctx.is_helper(name)
        }
        ctx.stream.push(
            HelperToken(
                TokenType.ELEMENT_HELPER,
                marker.lineno,
                id=marker.id,
                path=marker.path,
                name=local,
                namespace=uri,
                attributes=attributes,
                _source_file=ctx.source_file,
            )
        )
        return True
