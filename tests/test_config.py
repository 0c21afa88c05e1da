"""Tests for ContextVar-based lex configuration.

Validates thread isolation, context manager behavior, and how the active
config reaches the lexer.
"""

from threading import Thread

import pytest

from plantilla import (
    LexConfig,
    Lexer,
    get_lex_config,
    lex_config_context,
    lex_string,
    reset_lex_config,
    set_lex_config,
)
from plantilla.config import CORE_NAMESPACE, DEFAULT_NON_HELPER_NAMESPACES, PLACEHOLDER_TAG
from plantilla.tokens import TokenType


class TestLexConfigDataclass:
    """Test LexConfig frozen dataclass behavior."""

    def test_default_values(self) -> None:
        """Default config matches the standard template dialect."""
        config = LexConfig()
        assert config.non_helper_namespaces == DEFAULT_NON_HELPER_NAMESPACES
        assert config.helper_namespaces is None
        assert config.raw_namespace == CORE_NAMESPACE
        assert config.raw_local_name == "Raw"
        assert config.placeholder_tag == PLACEHOLDER_TAG
        assert config.directive_comment_pattern == r"^%.*%$"
        assert config.id_algorithm == "sha1"
        assert config.strict is False

    def test_deny_list_contents(self) -> None:
        """Well-known vocabularies are never helper namespaces."""
        assert "http://www.w3.org/1999/xhtml" in DEFAULT_NON_HELPER_NAMESPACES
        assert "http://www.w3.org/2000/svg" in DEFAULT_NON_HELPER_NAMESPACES
        assert "http://www.w3.org/XML/1998/namespace" in DEFAULT_NON_HELPER_NAMESPACES
        assert CORE_NAMESPACE not in DEFAULT_NON_HELPER_NAMESPACES

    def test_immutability(self) -> None:
        """Config is frozen and cannot be modified."""
        config = LexConfig()
        with pytest.raises(AttributeError):
            config.strict = True  # type: ignore[misc]

    def test_custom_values(self) -> None:
        """Config can be created with custom values."""
        config = LexConfig(raw_local_name="Verbatim", strict=True)
        assert config.raw_local_name == "Verbatim"
        assert config.strict is True
        assert config.id_algorithm == "sha1"  # Still default


class TestFromDict:
    """Test LexConfig.from_dict."""

    def test_unknown_keys_ignored(self) -> None:
        config = LexConfig.from_dict({"raw_local_name": "Verbatim", "unknown_key": 1})
        assert config.raw_local_name == "Verbatim"

    def test_namespace_lists_are_frozen(self) -> None:
        """Lists from YAML/JSON sources become frozensets."""
        config = LexConfig.from_dict({"helper_namespaces": ["urn:a", "urn:b"]})
        assert config.helper_namespaces == frozenset({"urn:a", "urn:b"})
        assert isinstance(config.helper_namespaces, frozenset)

    def test_none_helper_namespaces_kept(self) -> None:
        config = LexConfig.from_dict({"helper_namespaces": None})
        assert config.helper_namespaces is None

    def test_empty_dict_gives_defaults(self) -> None:
        assert LexConfig.from_dict({}) == LexConfig()


class TestContextVarFunctions:
    """Test get/set/reset functions."""

    def test_get_returns_default(self) -> None:
        reset_lex_config()
        assert get_lex_config() == LexConfig()

    def test_set_and_reset(self) -> None:
        custom = LexConfig(strict=True)
        set_lex_config(custom)
        try:
            assert get_lex_config() is custom
        finally:
            reset_lex_config()
        assert get_lex_config().strict is False

    def test_context_manager_restores_previous(self) -> None:
        outer = LexConfig(raw_local_name="Outer")
        with lex_config_context(outer):
            with lex_config_context(LexConfig(raw_local_name="Inner")):
                assert get_lex_config().raw_local_name == "Inner"
            assert get_lex_config().raw_local_name == "Outer"
        assert get_lex_config().raw_local_name == "Raw"

    def test_context_manager_restores_on_error(self) -> None:
        with pytest.raises(RuntimeError):
            with lex_config_context(LexConfig(strict=True)):
                raise RuntimeError("boom")
        assert get_lex_config().strict is False


class TestThreadIsolation:
    """Config set in one thread is invisible to others."""

    def test_threads_do_not_share_config(self) -> None:
        seen: dict[str, str] = {}

        def worker(name: str) -> None:
            set_lex_config(LexConfig(raw_local_name=name))
            seen[name] = get_lex_config().raw_local_name

        threads = [Thread(target=worker, args=(f"T{i}",)) for i in range(4)]
        for thread in threads:
            thread.start()
        for thread in threads:
            thread.join()

        assert seen == {f"T{i}": f"T{i}" for i in range(4)}
        assert get_lex_config().raw_local_name == "Raw"


class TestConfigReachesLexer:
    """The lexer reads the active config when none is passed."""

    def test_lexer_uses_active_config(self) -> None:
        custom = LexConfig(placeholder_tag="slot")
        with lex_config_context(custom):
            lexer = Lexer()
        assert lexer.config is custom

    def test_explicit_config_wins(self) -> None:
        explicit = LexConfig(strict=True)
        with lex_config_context(LexConfig()):
            assert Lexer(explicit).config is explicit

    def test_custom_placeholder_tag_in_content(self) -> None:
        stream = lex_string(
            '<root xmlns:ex="urn:ex"><a ex:h="1"/></root>',
            config=LexConfig(placeholder_tag="slot"),
        )
        root = next(t for t in stream if t.type == TokenType.ROOT_NODE)
        assert root.content.startswith("<root><slot id=")

    def test_custom_raw_element(self) -> None:
        """A renamed raw-exclusion element shields its content."""
        source = (
            '<root xmlns:ex="urn:ex">'
            '<ex:Verbatim><p ex:If="{% x %}"/></ex:Verbatim>'
            "</root>"
        )
        stream = lex_string(
            source, config=LexConfig(raw_namespace="urn:ex", raw_local_name="Verbatim")
        )
        types = [t.type for t in stream]
        assert TokenType.ATTRIBUTE_HELPER not in types
        assert TokenType.EXPRESSION not in types
