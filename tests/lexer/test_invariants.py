"""Property-based tests for lexer invariants using Hypothesis.

These tests verify that certain properties always hold regardless
of the input, helping catch edge cases that example-based tests miss.
"""

from hypothesis import given, settings
from hypothesis import strategies as st
from lxml import etree

from plantilla import NodeToken, TokenType, lex, load_string, to_json
from plantilla.tokens import (
    EXPRESSION_CONTENT_TYPES,
    HELPER_TYPES,
    NODE_TYPES,
    PROPERTY_TYPES,
    HelperToken,
)

_TAGS = st.sampled_from(["a", "b", "ex:If"])
_TEXTS = st.sampled_from(["", "t", "{% x %}", "it's {% 'a' %}", "<!--%d%-->", "<!--c-->"])


def _element(children: st.SearchStrategy) -> st.SearchStrategy:
    return st.tuples(_TAGS, st.booleans(), _TEXTS, children, _TEXTS)


_TREES = st.recursive(
    _element(st.just([])),
    lambda children: _element(st.lists(children, max_size=3)),
    max_leaves=12,
)


def _render(node: tuple) -> str:
    tag, helper, text, children, tail = node
    attrs = ' ex:h="1"' if helper else ""
    inner = text + "".join(_render(child) for child in children)
    return f"<{tag}{attrs}>{inner}</{tag}>{tail}"


def _document(tree: tuple) -> str:
    return f'<root xmlns:ex="urn:ex">{_render(tree)}</root>'


class TestStructuralInvariants:
    """Invariants of the node graph."""

    @given(_TREES)
    @settings(max_examples=100, deadline=None)
    def test_properties_first(self, tree: tuple) -> None:
        stream = lex(load_string(_document(tree)))
        assert [t.type for t in stream][:3] == [
            TokenType.XML_VERSION,
            TokenType.XML_ENCODING,
            TokenType.ROOT_NODE,
        ]
        assert not any(t.type in PROPERTY_TYPES for t in list(stream)[2:])

    @given(_TREES)
    @settings(max_examples=100, deadline=None)
    def test_token_classes_match_type_groups(self, tree: tuple) -> None:
        """Every top-level token is a property, node, helper or expression."""
        for token in list(lex(load_string(_document(tree))))[2:]:
            if token.type in NODE_TYPES:
                assert isinstance(token, NodeToken)
            elif token.type in HELPER_TYPES:
                assert isinstance(token, HelperToken)
            else:
                assert token.type == TokenType.EXPRESSION

    @given(_TREES)
    @settings(max_examples=100, deadline=None)
    def test_helpers_follow_their_node(self, tree: tuple) -> None:
        """A helper token comes after the node token sharing its path prefix."""
        seen: set[str] = set()
        for token in lex(load_string(_document(tree))):
            if token.type in NODE_TYPES:
                seen.add(token.path)
            elif token.type in HELPER_TYPES:
                owner = token.path.split("/@", 1)[0]
                assert owner in seen

    @given(_TREES)
    @settings(max_examples=100, deadline=None)
    def test_only_root_lacks_ancestor(self, tree: tuple) -> None:
        nodes = [t for t in lex(load_string(_document(tree))) if isinstance(t, NodeToken)]
        assert [n.is_root for n in nodes].count(True) == 1
        for node in nodes:
            assert (node.ancestor_id is None) == node.is_root

    @given(_TREES)
    @settings(max_examples=100, deadline=None)
    def test_children_match_ancestors(self, tree: tuple) -> None:
        """A node's children are exactly the nodes naming it as ancestor."""
        nodes = [t for t in lex(load_string(_document(tree))) if isinstance(t, NodeToken)]
        ids = {n.id for n in nodes}
        for node in nodes:
            expected = [n.id for n in nodes if n.ancestor_id == node.id]
            assert sorted(node.children) == sorted(expected)
            assert set(node.children) <= ids

    @given(_TREES)
    @settings(max_examples=100, deadline=None)
    def test_siblings_are_symmetric(self, tree: tuple) -> None:
        nodes = {t.id: t for t in lex(load_string(_document(tree))) if isinstance(t, NodeToken)}
        for node in nodes.values():
            if node.next_sibling_id is not None:
                assert nodes[node.next_sibling_id].previous_sibling_id == node.id
            if node.previous_sibling_id is not None:
                assert nodes[node.previous_sibling_id].next_sibling_id == node.id

    @given(_TREES)
    @settings(max_examples=100, deadline=None)
    def test_content_free_of_helper_markup(self, tree: tuple) -> None:
        for token in lex(load_string(_document(tree))):
            if isinstance(token, NodeToken):
                assert "xmlns:ex" not in token.content
                assert "ex:h=" not in token.content
                assert "<!--%d%-->" not in token.content

    @given(_TREES)
    @settings(max_examples=100, deadline=None)
    def test_expression_content_kinds(self, tree: tuple) -> None:
        for token in lex(load_string(_document(tree))):
            if token.type == TokenType.EXPRESSION:
                assert len(token.content) > 0
                assert all(t.type in EXPRESSION_CONTENT_TYPES for t in token.content)


class TestRepeatability:
    """Lexing is a pure function of the document."""

    @given(_TREES)
    @settings(max_examples=100, deadline=None)
    def test_same_stream_twice(self, tree: tuple) -> None:
        document = load_string(_document(tree))
        before = etree.tostring(document)
        first = to_json(lex(document))
        assert etree.tostring(document) == before
        assert to_json(lex(document)) == first

    @given(_TREES)
    @settings(max_examples=50, deadline=None)
    def test_ids_unique(self, tree: tuple) -> None:
        ids = [t.id for t in lex(load_string(_document(tree))) if isinstance(t, NodeToken)]
        assert len(ids) == len(set(ids))
