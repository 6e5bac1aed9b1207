"""Tests for path helper module."""

import pytest
from pathlib import Path

from src.treesync.exceptions import InvalidPathError
from src.treesync.paths import (
    is_under_root,
    normalize_root,
    to_relative,
    validate_relative_path,
)


class TestValidateRelativePath:
    """Tests for validate_relative_path function."""

    def test_simple(self):
        assert validate_relative_path("a/b/c") == "a/b/c"

    def test_backslashes_and_dots(self):
        assert validate_relative_path("a\\b") == "a/b"
        assert validate_relative_path("./a//b/") == "a/b"

    def test_path_object(self):
        assert validate_relative_path(Path("a") / "b") == "a/b"

    @pytest.mark.parametrize("bad", ["..", "../x", "a/../../x", "a\\..\\x"])
    def test_parent_components_rejected(self, bad):
        with pytest.raises(InvalidPathError) as exc_info:
            validate_relative_path(bad)
        assert exc_info.value.path == bad

    @pytest.mark.parametrize("bad", ["/abs", "C:\\data", "C:data", "\\\\server\\share\\x"])
    def test_absolute_rejected(self, bad):
        with pytest.raises(InvalidPathError):
            validate_relative_path(bad)

    @pytest.mark.parametrize("bad", ["", "   ", ".", "./"])
    def test_empty_or_root_rejected(self, bad):
        with pytest.raises(InvalidPathError):
            validate_relative_path(bad)

    def test_null_byte_rejected(self):
        with pytest.raises(InvalidPathError):
            validate_relative_path("bad\x00name")

    def test_dotted_names_allowed(self):
        assert validate_relative_path("..hidden/x..y") == "..hidden/x..y"


class TestRootHelpers:
    """Tests for root-relative helpers."""

    def test_normalize_existing(self, tmp_path):
        assert normalize_root(tmp_path / ".") == tmp_path.resolve()

    def test_normalize_missing(self, tmp_path):
        root = normalize_root(tmp_path / "missing")
        assert root.is_absolute()
        assert root.name == "missing"

    def test_to_relative(self, tmp_path):
        assert to_relative(tmp_path, tmp_path / "a" / "b") == "a/b"
        assert to_relative(tmp_path, tmp_path) == ""

    def test_to_relative_outside(self, tmp_path):
        with pytest.raises(ValueError):
            to_relative(tmp_path / "a", tmp_path / "b")

    def test_is_under_root(self, tmp_path):
        assert is_under_root(tmp_path, tmp_path / "a") is True
        assert is_under_root(tmp_path, tmp_path) is True
        assert is_under_root(tmp_path / "a", tmp_path / "ab") is False
