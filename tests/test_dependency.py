"""Tests for Dependency parsing and formatting."""

import pytest

from counting.errors import DependencyFormatError, FormatError
from counting.models import Dependency


class TestParse:
    """Tests for Dependency.parse()."""

    def test_parses_three_parts(self):
        dep = Dependency.parse("com.squareup.okhttp3:okhttp:4.12.0")
        assert dep.group == "com.squareup.okhttp3"
        assert dep.artifact == "okhttp"
        assert dep.version == "4.12.0"

    @pytest.mark.parametrize("text", [
        "com.example:lib:1.0",
        "androidx.core:core-ktx:1.12.0-rc01",
        "a:b:c",
    ])
    def test_round_trip(self, text):
        assert str(Dependency.parse(text)) == text

    def test_one_colon_fails(self):
        with pytest.raises(FormatError):
            Dependency.parse("com.example:lib")

    def test_three_colons_fails(self):
        with pytest.raises(DependencyFormatError):
            Dependency.parse("a:b:c:d")

    def test_no_colon_fails(self):
        with pytest.raises(DependencyFormatError):
            Dependency.parse("okhttp")

    def test_empty_parts_are_legal(self):
        dep = Dependency.parse("::")
        assert dep == Dependency("", "", "")
        assert str(dep) == "::"

    def test_format_error_is_value_error(self):
        with pytest.raises(ValueError):
            Dependency.parse("nope")


class TestIdentity:
    """Dependencies compare and hash structurally."""

    def test_equal_and_hash(self):
        a = Dependency("g", "a", "1")
        b = Dependency.parse("g:a:1")
        assert a == b
        assert hash(a) == hash(b)
        assert len({a, b}) == 1

    def test_version_matters(self):
        assert Dependency("g", "a", "1") != Dependency("g", "a", "2")

    def test_immutable(self):
        dep = Dependency("g", "a", "1")
        with pytest.raises(AttributeError):
            dep.group = "other"
