"""
Property placeholder resolution for POM values.

Maven lets any text value reference the property table with
``${name}``. :class:`PropertyResolver` performs a single, non-recursive
substitution pass: a value that itself contains a placeholder after
substitution is returned as-is and never expanded again.

Example::

    >>> resolver = PropertyResolver({"spring.version": "5.3.31"})
    >>> resolver.resolve("${spring.version}")
    '5.3.31'
    >>> resolver.resolve("${missing}")
    '${missing}'
"""

from __future__ import annotations

import re
from typing import Dict, List, Mapping, Optional

from pomkeeper.exceptions import UnresolvedProperty

#: Matches one ``${name}`` placeholder; group 1 is the property name.
PLACEHOLDER_PATTERN = re.compile(r"\$\{([^}]+)\}")


def has_placeholder(value: Optional[str]) -> bool:
    """Return True if *value* contains at least one ``${...}`` placeholder."""
    return bool(value) and PLACEHOLDER_PATTERN.search(value) is not None


class PropertyResolver:
    """Substitute ``${name}`` placeholders from a property table.

    Args:
        properties: Property name to literal value.
    """

    def __init__(self, properties: Optional[Mapping[str, str]] = None) -> None:
        self._properties: Dict[str, str] = dict(properties or {})

    @property
    def properties(self) -> Mapping[str, str]:
        return dict(self._properties)

    def __contains__(self, name: object) -> bool:
        return name in self._properties

    def __len__(self) -> int:
        return len(self._properties)

    def get(self, name: str) -> Optional[str]:
        return self._properties.get(name)

    def resolve(self, value: Optional[str]) -> Optional[str]:
        """Replace every known placeholder in *value* once.

        Unknown placeholders are left untouched. ``None`` is returned
        unchanged, as is any value without placeholders.
        """
        if value is None or "${" not in value:
            return value

        def _substitute(match: "re.Match[str]") -> str:
            replacement = self._properties.get(match.group(1).strip())
            return match.group(0) if replacement is None else replacement

        return PLACEHOLDER_PATTERN.sub(_substitute, value)

    def unresolved(self, value: Optional[str]) -> List[str]:
        """List placeholder names in *value* that have no table entry."""
        if not value:
            return []
        return [
            name
            for name in PLACEHOLDER_PATTERN.findall(value)
            if name.strip() not in self._properties
        ]

    def resolve_strict(self, value: str) -> str:
        """Resolve *value*, failing if any placeholder is left unresolved.

        A placeholder value that substitutes to an empty or blank string
        counts as unresolved; an empty version is never usable.

        Raises:
            UnresolvedProperty: A placeholder has no value in the table,
                or the substituted result is blank.
        """
        missing = self.unresolved(value)
        if missing:
            raise UnresolvedProperty(
                f"Unresolved property placeholder in '{value}'",
                property_names=missing,
                value=value,
            )
        resolved = self.resolve(value)
        assert resolved is not None
        if not resolved.strip():
            raise UnresolvedProperty(
                f"Property placeholder in '{value}' resolves to an empty value",
                property_names=PLACEHOLDER_PATTERN.findall(value),
                value=value,
            )
        return resolved

    def merge(
        self,
        external: Mapping[str, str],
        *,
        override: bool = False,
    ) -> "PropertyResolver":
        """Return a new resolver with *external* entries added.

        Existing entries win unless *override* is true.
        """
        merged = dict(self._properties)
        for name, value in external.items():
            if override or name not in merged:
                merged[name] = value
        return PropertyResolver(merged)
