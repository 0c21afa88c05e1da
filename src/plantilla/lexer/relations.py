"""Structural relationship resolution mixin.

Relationships are read off the working tree at the moment a node is
tokenized. Nodes are processed children first and later siblings first, so:

- every following sibling node has already been replaced by a placeholder
- every preceding sibling node is still in place
- every contained node has already been replaced by a placeholder
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from plantilla.errors import UnresolvedPlaceholderError

if TYPE_CHECKING:
    from lxml import etree

    from plantilla.lexer.context import LexContext, Marker


def _element_sibling(element: etree._Element, forward: bool) -> etree._Element | None:
    """Nearest sibling element, skipping comments and processing instructions."""
    sibling = element.getnext() if forward else element.getprevious()
    while sibling is not None and not isinstance(sibling.tag, str):
        sibling = sibling.getnext() if forward else sibling.getprevious()
    return sibling


class RelationsMixin:
    """Mixin resolving ancestor, sibling and child ids of a node."""

    def _previous_sibling_id(self, ctx: LexContext, marker: Marker) -> str | None:
        if marker.ancestor_id is None:
            return None
        sibling = _element_sibling(marker.element, forward=False)
        if sibling is None:
            return None
        if ctx.is_placeholder(sibling):
            return sibling.get("id")
        found = ctx.markers.get(sibling)
        return found.id if found is not None else None

    def _next_sibling_id(self, ctx: LexContext, marker: Marker) -> str | None:
        if marker.ancestor_id is None:
            return None
        sibling = _element_sibling(marker.element, forward=True)
        if sibling is None or not ctx.is_placeholder(sibling):
            return None
        return self._resolve(ctx, sibling, marker)

    def _children_ids(self, ctx: LexContext, marker: Marker) -> tuple[str, ...]:
        # A replaced node carries its own placeholders away with it, so
        # every placeholder still below this node is a direct child node.
        return tuple(
            self._resolve(ctx, placeholder, marker)
            for placeholder in marker.element.iter(ctx.config.placeholder_tag)
        )

    def _resolve(self, ctx: LexContext, placeholder: etree._Element, marker: Marker) -> str:
        node_id = placeholder.get("id", "")
        if node_id not in ctx.emitted:
            raise UnresolvedPlaceholderError(
                node_id, path=marker.path, lineno=marker.lineno, source_file=ctx.source_file
            )
        return node_id
