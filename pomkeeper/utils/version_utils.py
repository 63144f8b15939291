"""
Version comparison utilities for pomkeeper.

Maven artifact versions do not reliably follow any one scheme
(``5.3.31``, ``2.0.9``, ``32.1.3-jre``, ``Hoxton.SR12``, ``1.0.RELEASE``),
so comparison here is deliberately tolerant instead of strict:

* versions are split on ``.`` and compared component by component;
* two pure integers compare numerically;
* otherwise the leading digit run of each side is compared, a side
  without digits counting as ``0``;
* two entirely non-numeric components compare lexically;
* a missing trailing component behaves like ``"0"``.

Provenance annotations appended during resolution (``"3.2.0 (from parent)"``)
are stripped before any comparison.
"""

from __future__ import annotations

import re
from typing import List, Optional, Tuple

_ANNOTATION_RE = re.compile(r"\s*\(.*\)$")
_DIGITS_RE = re.compile(r"[0-9]+")
_LEADING_DIGITS_RE = re.compile(r"^([0-9]+)(.*)$", re.DOTALL)


def clean_version(version: str) -> str:
    """Strip whitespace and a trailing parenthetical annotation.

    Examples:
        >>> clean_version("3.2.0 (from parent)")
        '3.2.0'
        >>> clean_version(" 1.4 ")
        '1.4'
    """
    return _ANNOTATION_RE.sub("", version.strip()).strip()


def split_version(version: str) -> List[str]:
    """Split a cleaned version string into its dot-separated components."""
    cleaned = clean_version(version)
    return cleaned.split(".") if cleaned else []


def numeric_value(component: str) -> Tuple[Optional[int], str]:
    """Return the leading digit run of *component* and the remaining suffix.

    The integer is ``None`` when the component does not start with a digit.

    Examples:
        >>> numeric_value("31")
        (31, '')
        >>> numeric_value("3-jre")
        (3, '-jre')
        >>> numeric_value("RELEASE")
        (None, 'RELEASE')
    """
    match = _LEADING_DIGITS_RE.match(component)
    if match is None:
        return None, component
    return int(match.group(1)), match.group(2)


def _sign(value: int) -> int:
    return (value > 0) - (value < 0)


def compare_components(left: str, right: str) -> int:
    """Compare a single pair of version components.

    Returns:
        ``-1``, ``0`` or ``1``.
    """
    if _DIGITS_RE.fullmatch(left) and _DIGITS_RE.fullmatch(right):
        return _sign(int(left) - int(right))

    left_num, left_rest = numeric_value(left)
    right_num, right_rest = numeric_value(right)

    if left_num is None and right_num is None:
        return _sign((left > right) - (left < right))

    result = _sign((left_num or 0) - (right_num or 0))
    if result != 0:
        return result

    # Numeric tie: order qualifiers only when both sides carry one
    if left_rest and right_rest:
        return _sign((left_rest > right_rest) - (left_rest < right_rest))
    return 0


def compare_versions(left: str, right: str) -> int:
    """Compare two version strings component-wise.

    The comparison is reflexive (``compare_versions(a, a) == 0``) and
    antisymmetric (``compare_versions(a, b) == -compare_versions(b, a)``).
    Versions of different length are equal only when the extra trailing
    components are zero.

    Returns:
        ``-1`` if *left* is older, ``0`` if equivalent, ``1`` if newer.

    Examples:
        >>> compare_versions("1.9.0", "1.10.0")
        -1
        >>> compare_versions("2.0", "2.0.0")
        0
        >>> compare_versions("32.1.3-jre", "31.0-jre")
        1
    """
    left_parts = split_version(left)
    right_parts = split_version(right)

    for index in range(max(len(left_parts), len(right_parts))):
        left_part = left_parts[index] if index < len(left_parts) else "0"
        right_part = right_parts[index] if index < len(right_parts) else "0"

        result = compare_components(left_part, right_part)
        if result != 0:
            return result

    return 0


def release_triplet(version: str) -> Tuple[int, int, int]:
    """Return the (major, minor, patch) numbers of *version*.

    Missing or non-numeric components count as ``0``.
    """
    parts = split_version(version)
    values = [numeric_value(p)[0] or 0 for p in parts[:3]]
    while len(values) < 3:
        values.append(0)
    return values[0], values[1], values[2]


def get_update_type(
    current_version: Optional[str],
    target_version: Optional[str],
) -> str:
    """Determine the kind of update between two versions.

    Args:
        current_version: Version currently in use, or ``None``.
        target_version: Version to compare against, or ``None``.

    Returns:
        One of:
            - ``"new"``       : No current version exists
            - ``"same"``      : Versions are equivalent
            - ``"downgrade"`` : Target version is lower than current
            - ``"major"``     : Major version change
            - ``"minor"``     : Minor version change
            - ``"patch"``     : Patch-level change
            - ``"update"``    : Newer, but only beyond the patch component
            - ``"unknown"``   : No target version

    Examples:
        >>> get_update_type("1.0.0", "2.0.0")
        'major'
        >>> get_update_type(None, "1.0.0")
        'new'
        >>> get_update_type("5.3.31", "5.3.31")
        'same'
    """
    if target_version is None or not clean_version(target_version):
        return "unknown"

    if current_version is None or not clean_version(current_version):
        return "new"

    comparison = compare_versions(current_version, target_version)
    if comparison == 0:
        return "same"
    if comparison > 0:
        return "downgrade"

    current = release_triplet(current_version)
    target = release_triplet(target_version)

    if current[0] != target[0]:
        return "major"
    if current[1] != target[1]:
        return "minor"
    if current[2] != target[2]:
        return "patch"

    # Qualifier-only or fourth-component changes
    return "update"
