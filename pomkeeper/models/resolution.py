"""
Version resolution outcomes.

A :class:`ResolutionOutcome` records *how* a dependency's effective version
was found, from the strongest tier (a literal version on the declaration)
down to an estimate that only names the governing BOM, or no version at
all.
"""

from __future__ import annotations

from enum import Enum
from dataclasses import dataclass
from typing import Optional

from pomkeeper.constants import MANAGED_BY_BOM


class ResolutionKind(str, Enum):
    """Resolution tier that produced a version."""

    LITERAL = "literal"
    PROPERTY_RESOLVED = "property"
    PARENT_INHERITED = "parent"
    MANAGED_TABLE = "managed"
    EXTERNALLY_RESOLVED = "external"
    ESTIMATED = "estimated"
    UNRESOLVED = "unresolved"


#: Suffix appended to the version when rendered for humans.
_ANNOTATIONS = {
    ResolutionKind.PARENT_INHERITED: "from parent",
    ResolutionKind.MANAGED_TABLE: "managed",
    ResolutionKind.EXTERNALLY_RESOLVED: "resolved from BOM",
}

_NOT_BOM_MANAGED = frozenset({ResolutionKind.LITERAL, ResolutionKind.PROPERTY_RESOLVED})


@dataclass(frozen=True)
class ResolutionOutcome:
    """Result of resolving one declaration's effective version.

    Attributes:
        kind: Tier that produced the result.
        version: The effective version. Always ``None`` for
            :attr:`ResolutionKind.ESTIMATED` and
            :attr:`ResolutionKind.UNRESOLVED`.
        hint: Human-readable provenance. For estimates this is the BOM
            identity marker (e.g. ``"MANAGED_BY_BOM (Spring Boot 3.2.0)"``)
            and must never be treated as a version number.
    """

    kind: ResolutionKind
    version: Optional[str] = None
    hint: Optional[str] = None

    # ------------------------------------------------------------------
    # Constructors
    # ------------------------------------------------------------------

    @classmethod
    def literal(cls, version: str) -> "ResolutionOutcome":
        return cls(ResolutionKind.LITERAL, version)

    @classmethod
    def property_resolved(cls, version: str, raw: Optional[str] = None) -> "ResolutionOutcome":
        return cls(ResolutionKind.PROPERTY_RESOLVED, version, raw)

    @classmethod
    def parent_inherited(cls, version: str, parent: Optional[str] = None) -> "ResolutionOutcome":
        return cls(ResolutionKind.PARENT_INHERITED, version, parent)

    @classmethod
    def managed_table(cls, version: str, raw: Optional[str] = None) -> "ResolutionOutcome":
        return cls(ResolutionKind.MANAGED_TABLE, version, raw)

    @classmethod
    def externally_resolved(cls, version: str, source: Optional[str] = None) -> "ResolutionOutcome":
        return cls(ResolutionKind.EXTERNALLY_RESOLVED, version, source)

    @classmethod
    def estimated(cls, bom_hint: str) -> "ResolutionOutcome":
        return cls(ResolutionKind.ESTIMATED, None, bom_hint)

    @classmethod
    def unresolved(cls, reason: Optional[str] = None) -> "ResolutionOutcome":
        return cls(ResolutionKind.UNRESOLVED, None, reason)

    # ------------------------------------------------------------------
    # Derived state
    # ------------------------------------------------------------------

    @property
    def bom_managed(self) -> bool:
        """False only when the declaration itself carried the version."""
        return self.kind not in _NOT_BOM_MANAGED

    @property
    def is_comparable(self) -> bool:
        """True when :attr:`version` is a real version that may be compared."""
        return self.version is not None and self.kind not in (
            ResolutionKind.ESTIMATED,
            ResolutionKind.UNRESOLVED,
        )

    @property
    def display_version(self) -> str:
        """Version as reported to users, with a provenance annotation."""
        if self.kind is ResolutionKind.ESTIMATED:
            return self.hint or MANAGED_BY_BOM
        if self.version is None:
            return MANAGED_BY_BOM

        annotation = _ANNOTATIONS.get(self.kind)
        if annotation:
            return f"{self.version} ({annotation})"
        return self.version

    def __str__(self) -> str:
        return self.display_version
