"""Markup extraction for Node tokens and embedded expression content.

Every function here works on copies: the working tree is only mutated by
the lexer itself (attribute helper removal, placeholder substitution).

"""

from __future__ import annotations

import copy
import html
import re
from collections.abc import Iterator
from typing import TYPE_CHECKING

from lxml import etree

if TYPE_CHECKING:
    from plantilla.lexer.context import LexContext

# Stand-in for child nodes while an element's text is serialized.
_PROBE_TAG = "_plantilla-child_"
_PROBE = re.compile(
    r'<_plantilla-child_\b[^>]*?\bn="(\d+)"[^>]*/>'
    r"|<!--_plantilla-child_ (\d+)-->"
    r"|<\?_plantilla-child_ (\d+)\?>"
    r"|&_plantilla-child_(\d+);"
)
_CDATA = re.compile(r"(<!\[CDATA\[.*?\]\]>)", re.DOTALL)


def to_markup(node: etree._Element) -> str:
    """Serialize a node without its tail text."""
    return etree.tostring(node, encoding="unicode", with_tail=False)


def inner_markup(element: etree._Element) -> str:
    """Serialize the content of an element, without its own tags."""
    shell = copy.deepcopy(element)
    shell.attrib.clear()
    shell.tail = None
    markup = to_markup(shell)
    end = markup.rfind("</")
    if end == -1:
        # <tag/>
        return ""
    return markup[markup.find(">") + 1 : end]


def is_directive_comment(comment: etree._Element, pattern: re.Pattern[str]) -> bool:
    return pattern.search(comment.text or "") is not None


def comment_markup(comment: etree._Element, pattern: re.Pattern[str]) -> str:
    """Return the markup of a comment, or "" for a directive comment."""
    if is_directive_comment(comment, pattern):
        return ""
    return f"<!--{comment.text or ''}-->"


def drop_node(node: etree._Element) -> None:
    """Remove a node from its parent, keeping its tail text in place."""
    parent = node.getparent()
    if parent is None:
        return
    if node.tail:
        previous = node.getprevious()
        if previous is not None:
            previous.tail = (previous.tail or "") + node.tail
        else:
            parent.text = (parent.text or "") + node.tail
    parent.remove(node)


def drop_directive_comments(element: etree._Element, pattern: re.Pattern[str]) -> None:
    """Remove directive comments anywhere below an element."""
    for comment in [c for c in element.iter(etree.Comment) if is_directive_comment(c, pattern)]:
        drop_node(comment)


def strip_helper_namespaces(element: etree._Element, namespaces: tuple[str, ...]) -> None:
    """Remove unused helper namespace declarations below an element.

    Declarations still referenced by a tag or attribute are kept, as are
    all non-helper declarations.
    """
    keep = sorted(
        {
            prefix
            for node in element.iter(etree.Element)
            for prefix, uri in node.nsmap.items()
            if prefix and uri not in namespaces
        }
    )
    etree.cleanup_namespaces(element, keep_ns_prefixes=keep)


def node_content(ctx: LexContext, node: etree._Element, is_helper: bool) -> str:
    """Compute the markup carried by a Node token.

    Args:
        ctx: Pass context
        node: The node in the working tree, after its nested nodes were
            replaced by placeholders
        is_helper: Whether the node is an element helper, in which case
            only its children are serialized

    Returns:
        Serialized markup.
    """
    snapshot = copy.deepcopy(node)
    snapshot.tail = None
    drop_directive_comments(snapshot, ctx.directive_pattern)
    if not ctx.is_raw(node):
        strip_helper_namespaces(snapshot, ctx.namespaces)
    if is_helper:
        return inner_markup(snapshot)
    return to_markup(snapshot)


def iter_content(element: etree._Element) -> Iterator[tuple[str, str | etree._Element]]:
    """Walk the content of an element in document order.

    Text is returned as it appears in the source: character references are
    decoded and CDATA sections are kept verbatim.

    Yields:
        ("text", str), ("cdata", markup) or ("child", node) pairs.
    """
    children = list(element)
    probe = copy.deepcopy(element)
    # Children are turned into numbered stand-ins in place, so tail text
    # (including CDATA sections) is serialized untouched.
    for index, child in enumerate(probe):
        if child.tag is etree.Comment:
            child.text = f"{_PROBE_TAG} {index}"
        elif child.tag is etree.PI:
            child.target = _PROBE_TAG
            child.text = str(index)
        elif child.tag is etree.Entity:
            child.name = f"{_PROBE_TAG}{index}"
        else:
            child.clear(keep_tail=True)
            child.tag = _PROBE_TAG
            child.set("n", str(index))

    markup = inner_markup(probe)
    pos = 0
    for match in _PROBE.finditer(markup):
        yield from _text_chunks(markup[pos : match.start()])
        index = next(group for group in match.groups() if group is not None)
        yield "child", children[int(index)]
        pos = match.end()
    yield from _text_chunks(markup[pos:])


def _text_chunks(markup: str) -> Iterator[tuple[str, str]]:
    for chunk in _CDATA.split(markup):
        if not chunk:
            continue
        if chunk.startswith("<![CDATA["):
            yield "cdata", chunk
        else:
            yield "text", html.unescape(chunk)
