"""XPath queries locating nodes and expression sites.

All queries are built once per lexing pass from the helper namespaces of
the document and the raw-exclusion element of the policy:

- node_query: the root, plus every element that is a helper or carries a
  helper attribute, outside raw-exclusion subtrees
- node_expression_query: expression sites owned directly by a node
- element_helper_expression_query: expressions on the non-helper
  attributes of an element helper

Query results are node-sets, so lxml returns them in document order.

"""

from __future__ import annotations

from typing import TYPE_CHECKING

from plantilla.config import LexConfig, get_lex_config

if TYPE_CHECKING:
    from collections.abc import Sequence

EXPRESSION_TEST = "(contains(., '{%') or contains(., '%}'))"


def xpath_literal(value: str) -> str:
    """Quote a string as an XPath 1.0 literal."""
    if "'" not in value:
        return f"'{value}'"
    if '"' not in value:
        return f'"{value}"'
    parts = value.split("'")
    return "concat(" + ", \"'\", ".join(f"'{part}'" for part in parts) + ")"


def namespace_test(namespaces: Sequence[str], axes: Sequence[str] = (".",)) -> str:
    """Build the namespace part of a query.

    Args:
        namespaces: Helper namespace URIs
        axes: Location paths whose namespace is tested

    Returns:
        ``(namespace-uri(.) = 'u1' or ...)``, or "" when there are no namespaces.

    Example:
        >>> namespace_test(["urn:a"], [".", "@*"])
        "(namespace-uri(.) = 'urn:a' or namespace-uri(@*) = 'urn:a')"
    """
    tests = [
        f"namespace-uri({axis}) = {xpath_literal(uri)}" for uri in namespaces for axis in axes
    ]
    return "(" + " or ".join(tests) + ")" if tests else ""


class NodeSelector:
    """Builds the structural queries of one lexing pass.

    Attributes:
        namespaces: Helper namespaces of the document
        ns_test: Namespace test on the context node
        raw_test: Excludes anything below the raw-exclusion element

    """

    __slots__ = ("namespaces", "ns_test", "raw_test", "_parent_ns_test")

    def __init__(self, namespaces: Sequence[str], config: LexConfig | None = None) -> None:
        config = config or get_lex_config()
        self.namespaces = tuple(namespaces)
        self.ns_test = namespace_test(self.namespaces)
        self._parent_ns_test = namespace_test(self.namespaces, ("parent::*",))
        self.raw_test = (
            "not(ancestor::*[namespace-uri() = "
            f"{xpath_literal(config.raw_namespace)} and local-name() = "
            f"{xpath_literal(config.raw_local_name)}])"
        )

    @property
    def node_query(self) -> str:
        """Query for all nodes, in document order.

        The root is always a node. Other elements are nodes when they are
        element helpers or carry an attribute helper, and are not inside a
        raw-exclusion element.
        """
        query = "/*"
        if self.ns_test:
            query += f" | //*[{self.ns_test} and {self.raw_test}]"
            query += f" | //@*[{self.ns_test}]/parent::*[{self.raw_test}]"
        return query

    @property
    def helper_attribute_query(self) -> str:
        """Attribute helpers of the context node."""
        return f"@*[{self.ns_test}]" if self.ns_test else ""

    @property
    def element_helper_expression_query(self) -> str:
        """Expressions on the non-helper attributes of an element helper."""
        if not self.ns_test:
            return f"@*[{EXPRESSION_TEST}]"
        return f"@*[not({self.ns_test}) and {EXPRESSION_TEST}]"

    @property
    def node_expression_query(self) -> str:
        """Expression sites owned directly by the context node.

        Nested nodes have already been replaced by placeholders when this
        runs, so their sites are out of reach. Expressions inside attribute
        helpers are handled with the helper; expressions on the attributes
        of an element helper are handled with the element helper.
        """
        # <root><child test="{% var %}"/></root>
        query = f"descendant::*//@*[{self.raw_test} and {EXPRESSION_TEST}]"

        # <child test="{% var %}" ex:Locale="..."/>, unless child is itself a helper
        if self._parent_ns_test:
            query += f" | @*[not({self._parent_ns_test}) and {self.raw_test} and {EXPRESSION_TEST}]"
        else:
            query += f" | @*[{self.raw_test} and {EXPRESSION_TEST}]"

        # <root>{% var %}</root>
        query += f" | descendant-or-self::*//text()[{self.raw_test} and {EXPRESSION_TEST}]/parent::*"
        return query

    def is_helper_namespace(self, uri: str | None) -> bool:
        return uri is not None and uri in self.namespaces
