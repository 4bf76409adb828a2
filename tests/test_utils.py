"""Tests for mesita.utils."""

import logging

from mesita.utils.hashing import hash_str, hash_table_text
from mesita.utils.logger import get_logger


class TestHashing:
    """SHA256 cache keys."""

    def test_known_values(self) -> None:
        assert hash_str("hello") == (
            "2cf24dba5fb0a30e26e83b2ac5b9e29e1b161e5c1fa7425e73043362938b9824"
        )
        assert hash_str("hello", truncate=16) == "2cf24dba5fb0a30e"

    def test_hash_table_text_is_sha256(self) -> None:
        assert hash_table_text("| a |") == hash_str("| a |")
        assert len(hash_table_text("| a |")) == 64

    def test_different_text_different_hash(self) -> None:
        assert hash_table_text("| a |") != hash_table_text("| b |")

    def test_deterministic(self) -> None:
        assert hash_table_text("| a |\n| - |") == hash_table_text("| a |\n| - |")


class TestLogger:
    """get_logger namespacing."""

    def test_prefixes_names(self) -> None:
        assert get_logger("session").name == "mesita.session"

    def test_keeps_package_names(self) -> None:
        assert get_logger("mesita.editor.state").name == "mesita.editor.state"
        assert get_logger("mesita").name == "mesita"

    def test_returns_stdlib_logger(self) -> None:
        assert isinstance(get_logger("x"), logging.Logger)
