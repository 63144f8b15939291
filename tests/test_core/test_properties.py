"""Unit tests for pomkeeper.core.properties module.

Test Coverage:
- Single-pass ``${name}`` substitution
- Unknown placeholders left intact
- Strict resolution raising UnresolvedProperty
- Merging externally evaluated properties
"""

from __future__ import annotations

import pytest

from pomkeeper.core.properties import (
    PLACEHOLDER_PATTERN,
    PropertyResolver,
    has_placeholder,
)
from pomkeeper.exceptions import UnresolvedProperty


@pytest.fixture
def resolver() -> PropertyResolver:
    return PropertyResolver(
        {
            "spring.version": "5.3.31",
            "jackson.version": "2.15.3",
            "indirect": "${spring.version}",
        }
    )


@pytest.mark.unit
class TestHasPlaceholder:
    """Tests for has_placeholder detection."""

    @pytest.mark.parametrize(
        "value,expected",
        [
            ("${spring.version}", True),
            ("1.0-${suffix}", True),
            ("5.3.31", False),
            ("$spring.version", False),
            ("${}", False),
            ("", False),
            (None, False),
        ],
    )
    def test_has_placeholder(self, value, expected: bool) -> None:
        assert has_placeholder(value) is expected

    def test_pattern_captures_name(self) -> None:
        assert PLACEHOLDER_PATTERN.findall("${a}.${b.c}") == ["a", "b.c"]


@pytest.mark.unit
class TestPropertyResolver:
    """Tests for PropertyResolver substitution."""

    def test_resolves_single_placeholder(self, resolver: PropertyResolver) -> None:
        assert resolver.resolve("${spring.version}") == "5.3.31"

    def test_resolves_embedded_placeholders(self, resolver: PropertyResolver) -> None:
        """Test every known placeholder in a value is replaced."""
        assert resolver.resolve("${spring.version}-${jackson.version}") == "5.3.31-2.15.3"

    def test_unknown_placeholder_left_intact(self, resolver: PropertyResolver) -> None:
        assert resolver.resolve("${missing}") == "${missing}"
        assert resolver.resolve("${spring.version}/${missing}") == "5.3.31/${missing}"

    def test_substitution_is_not_recursive(self, resolver: PropertyResolver) -> None:
        """Test a value that expands to another placeholder is not expanded again."""
        assert resolver.resolve("${indirect}") == "${spring.version}"

    def test_literal_and_none_pass_through(self, resolver: PropertyResolver) -> None:
        assert resolver.resolve("1.2.3") == "1.2.3"
        assert resolver.resolve(None) is None

    def test_placeholder_name_whitespace_ignored(self, resolver: PropertyResolver) -> None:
        assert resolver.resolve("${ spring.version }") == "5.3.31"

    def test_unresolved_lists_missing_names(self, resolver: PropertyResolver) -> None:
        assert resolver.unresolved("${a}-${spring.version}-${b}") == ["a", "b"]
        assert resolver.unresolved("1.0") == []
        assert resolver.unresolved(None) == []

    def test_resolve_strict_success(self, resolver: PropertyResolver) -> None:
        assert resolver.resolve_strict("${jackson.version}") == "2.15.3"

    def test_resolve_strict_raises(self, resolver: PropertyResolver) -> None:
        with pytest.raises(UnresolvedProperty) as exc_info:
            resolver.resolve_strict("${netty.version}")

        assert exc_info.value.property_names == ("netty.version",)
        assert exc_info.value.value == "${netty.version}"

    @pytest.mark.parametrize("blank", ["", "   "])
    def test_resolve_strict_rejects_blank_value(self, blank: str) -> None:
        resolver = PropertyResolver({"netty.version": blank})

        with pytest.raises(UnresolvedProperty) as exc_info:
            resolver.resolve_strict("${netty.version}")

        assert exc_info.value.property_names == ("netty.version",)

    def test_resolve_strict_allows_partly_empty(self) -> None:
        """Test an empty suffix property still leaves a usable version."""
        resolver = PropertyResolver({"base": "1.4", "suffix": ""})

        assert resolver.resolve_strict("${base}${suffix}") == "1.4"

    def test_mapping_accessors(self, resolver: PropertyResolver) -> None:
        assert "spring.version" in resolver
        assert "missing" not in resolver
        assert len(resolver) == 3
        assert resolver.get("jackson.version") == "2.15.3"
        assert resolver.get("missing") is None

    def test_properties_returns_copy(self, resolver: PropertyResolver) -> None:
        snapshot = resolver.properties
        snapshot["spring.version"] = "6.0.0"  # type: ignore[index]

        assert resolver.get("spring.version") == "5.3.31"

    def test_empty_resolver(self) -> None:
        empty = PropertyResolver()

        assert len(empty) == 0
        assert empty.resolve("${x}") == "${x}"


@pytest.mark.unit
class TestPropertyResolverMerge:
    """Tests for PropertyResolver.merge."""

    def test_merge_adds_new_entries(self, resolver: PropertyResolver) -> None:
        merged = resolver.merge({"netty.version": "4.1.100.Final"})

        assert merged.resolve("${netty.version}") == "4.1.100.Final"
        assert "netty.version" not in resolver

    def test_merge_keeps_declared_values(self, resolver: PropertyResolver) -> None:
        """Test POM-declared properties win over evaluated ones by default."""
        merged = resolver.merge({"spring.version": "6.1.0"})

        assert merged.get("spring.version") == "5.3.31"

    def test_merge_with_override(self, resolver: PropertyResolver) -> None:
        merged = resolver.merge({"spring.version": "6.1.0"}, override=True)

        assert merged.get("spring.version") == "6.1.0"
