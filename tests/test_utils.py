"""Tests for plantilla.utils (hashing and logging helpers)."""

import hashlib
import logging

import pytest

from plantilla.utils import get_logger, hash_str, node_id


class TestHashStr:
    """Test hash_str."""

    def test_sha256_default(self) -> None:
        assert hash_str("hello") == hashlib.sha256(b"hello").hexdigest()

    def test_truncate(self) -> None:
        assert hash_str("hello world", truncate=16) == "b94d27b9934d3e08"

    def test_algorithm(self) -> None:
        assert hash_str("hello", algorithm="md5") == hashlib.md5(b"hello").hexdigest()

    def test_unknown_algorithm(self) -> None:
        with pytest.raises(ValueError):
            hash_str("hello", algorithm="no-such-hash")

    def test_unicode_is_utf8_encoded(self) -> None:
        assert hash_str("día") == hashlib.sha256("día".encode()).hexdigest()


class TestNodeId:
    """Node ids are SHA-1 digests of node paths by default."""

    def test_sha1_of_path(self) -> None:
        assert node_id("/root/p[2]") == hashlib.sha1(b"/root/p[2]").hexdigest()

    def test_deterministic(self) -> None:
        assert node_id("/root") == node_id("/root")
        assert node_id("/root/a") != node_id("/root/b")

    def test_custom_algorithm(self) -> None:
        assert node_id("/root", "sha256") == hashlib.sha256(b"/root").hexdigest()


class TestGetLogger:
    """Loggers live under the plantilla namespace."""

    def test_prefix_added(self) -> None:
        assert get_logger("mymodule").name == "plantilla.mymodule"

    def test_package_names_unchanged(self) -> None:
        assert get_logger("plantilla.lexer.core").name == "plantilla.lexer.core"
        assert get_logger("plantilla").name == "plantilla"

    def test_returns_stdlib_logger(self) -> None:
        assert isinstance(get_logger("x"), logging.Logger)
