"""Per-pass lexing state.

Everything a pass mutates lives here, so the Lexer itself stays stateless
and reentrant. A context is created by Lexer.scan(), threaded through every
tokenizer call, and discarded when the pass returns.

"""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from typing import TYPE_CHECKING

from lxml import etree

from plantilla.utils.hashing import node_id

if TYPE_CHECKING:
    from plantilla.config import LexConfig
    from plantilla.selectors import NodeSelector
    from plantilla.stream import TokenStream

XML_NAMESPACE = "http://www.w3.org/XML/1998/namespace"


def split_name(name: str) -> tuple[str | None, str]:
    """Split an lxml name in Clark notation into (namespace, local name)."""
    if name[:1] == "{":
        uri, local = name[1:].split("}", 1)
        return uri, local
    return None, name


def qualified_name(element: etree._Element, name: str) -> str:
    """Return the prefixed form of an attribute name as written in the source."""
    uri, local = split_name(name)
    if uri is None:
        return local
    if uri == XML_NAMESPACE:
        return f"xml:{local}"
    for prefix, bound in element.nsmap.items():
        if bound == uri and prefix:
            return f"{prefix}:{local}"
    return local


@dataclass(slots=True)
class Marker:
    """A node discovered by the node query.

    Attributes:
        element: The element in the working tree
        id: Hash of the original path
        path: Path in the original tree
        depth: Number of ancestors
        index: Position in document order among all markers
        ancestor_id: Id of the nearest enclosing marker (None for the root)

    """

    element: etree._Element
    id: str
    path: str
    depth: int
    index: int
    ancestor_id: str | None = None

    @property
    def lineno(self) -> int:
        return self.element.sourceline or 0


@dataclass(slots=True)
class LexContext:
    """Mutable state of one lexing pass.

    Attributes:
        config: Active lexing policy
        tree: Private working copy of the document (mutated)
        stream: Token stream under construction
        selector: Queries built for this document
        namespaces: Helper namespaces (cached for the whole pass)
        source_file: Optional template file name for diagnostics
        paths: Original path of every element, computed before any mutation
        markers: Discovered nodes by element
        originals: Copy of every processed node before mutation, by id
        emitted: Ids of nodes whose Node token was already pushed

    """

    config: LexConfig
    tree: etree._ElementTree
    stream: TokenStream
    selector: NodeSelector
    namespaces: tuple[str, ...]
    source_file: str | None = None
    paths: dict[etree._Element, str] = field(default_factory=dict)
    markers: dict[etree._Element, Marker] = field(default_factory=dict)
    originals: dict[str, etree._Element] = field(default_factory=dict)
    emitted: set[str] = field(default_factory=set)
    directive_pattern: re.Pattern[str] | None = None

    def __post_init__(self) -> None:
        if self.directive_pattern is None:
            self.directive_pattern = re.compile(self.config.directive_comment_pattern, re.DOTALL)
        if not self.paths:
            # Paths must describe the original tree, so take them all up front
            self.paths = {
                element: self.tree.getpath(element)
                for element in self.tree.getroot().iter(etree.Element)
            }

    def make_id(self, path: str) -> str:
        return node_id(path, self.config.id_algorithm)

    def path_of(self, element: etree._Element) -> str:
        path = self.paths.get(element)
        return path if path is not None else self.tree.getpath(element)

    def attribute_path(self, element: etree._Element, name: str) -> str:
        return f"{self.path_of(element)}/@{qualified_name(element, name)}"

    def is_helper(self, name: str) -> bool:
        """Check whether an element tag or attribute name is in a helper namespace."""
        uri, _ = split_name(name)
        return uri is not None and uri in self.namespaces

    def is_placeholder(self, element: etree._Element) -> bool:
        return element.tag == self.config.placeholder_tag

    def is_raw(self, element: etree._Element) -> bool:
        return element.tag == f"{{{self.config.raw_namespace}}}{self.config.raw_local_name}"

    def clear(self) -> None:
        """Drop references to tree fragments once the pass is over."""
        self.originals.clear()
        self.markers.clear()
        self.paths.clear()
