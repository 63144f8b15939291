"""
Structural POM model for pomkeeper.

These records are produced by
:class:`~pomkeeper.core.pom_parser.PomModelExtractor` and are immutable once
extracted. They describe what the descriptor *declares*; resolving the
effective version of each declaration is the job of
:mod:`pomkeeper.core.bom_resolver`.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, Mapping, Optional, Tuple

from pomkeeper.constants import DEFAULT_SCOPE, NON_PRIMARY_SCOPES


def coordinate_key(group_id: Optional[str], artifact_id: Optional[str]) -> str:
    """Return the ``group:artifact`` key used by managed-version tables."""
    return f"{group_id or ''}:{artifact_id or ''}"


@dataclass(frozen=True)
class ParentReference:
    """Coordinates of the ``<parent>`` POM.

    Attributes:
        group_id: Parent group id.
        artifact_id: Parent artifact id.
        version: Parent version (literal, as written in the POM).
        relative_path: ``<relativePath>`` value, if declared.
    """

    group_id: Optional[str] = None
    artifact_id: Optional[str] = None
    version: Optional[str] = None
    relative_path: Optional[str] = None

    @property
    def is_complete(self) -> bool:
        """True when group, artifact and version are all known."""
        return bool(self.group_id and self.artifact_id and self.version)

    @property
    def key(self) -> str:
        return coordinate_key(self.group_id, self.artifact_id)

    def __str__(self) -> str:
        return f"{self.group_id}:{self.artifact_id}:{self.version}"


@dataclass(frozen=True)
class DependencyDeclaration:
    """A single ``<dependency>`` entry exactly as declared.

    Attributes:
        group_id: Declared group id (empty string when omitted).
        artifact_id: Declared artifact id.
        version: Raw version text; may contain ``${...}`` placeholders or be
            ``None`` when governed by a parent or BOM.
        scope: Declared scope, ``None`` when omitted (Maven's ``compile``).
        optional: ``<optional>true</optional>`` was declared.
        type: Declared ``<type>``, if any.
        classifier: Declared ``<classifier>``, if any.
        raw_xml: Serialized XML fragment, kept for diagnostics.
    """

    group_id: str
    artifact_id: str
    version: Optional[str] = None
    scope: Optional[str] = None
    optional: bool = False
    type: Optional[str] = None
    classifier: Optional[str] = None
    raw_xml: str = field(default="", repr=False, compare=False)

    @property
    def key(self) -> str:
        """``group:artifact`` coordinate."""
        return coordinate_key(self.group_id, self.artifact_id)

    @property
    def effective_scope(self) -> str:
        """Declared scope, defaulting to ``compile``."""
        return self.scope or DEFAULT_SCOPE

    @property
    def is_primary(self) -> bool:
        """False for ``provided``/``test`` scoped or optional declarations."""
        return not self.optional and self.effective_scope not in NON_PRIMARY_SCOPES

    def __str__(self) -> str:
        if self.version:
            return f"{self.key}:{self.version}"
        return self.key


@dataclass(frozen=True)
class PomModel:
    """In-memory view of one POM.

    Attributes:
        group_id: Project group id (inherited from parent when omitted).
        artifact_id: Project artifact id.
        version: Project version (inherited from parent when omitted).
        packaging: Declared packaging, if any.
        parent: Parent reference, or ``None``.
        properties: Property table (name → literal value), including the
            built-in ``project.*`` coordinates.
        managed_versions: ``group:artifact`` → raw version from this POM's
            own ``dependencyManagement`` section.
        dependencies: Project-level dependency declarations, in order.
        licenses: Project license names.
    """

    group_id: Optional[str] = None
    artifact_id: Optional[str] = None
    version: Optional[str] = None
    packaging: Optional[str] = None
    parent: Optional[ParentReference] = None
    properties: Mapping[str, str] = field(default_factory=dict)
    managed_versions: Mapping[str, Optional[str]] = field(default_factory=dict)
    dependencies: Tuple[DependencyDeclaration, ...] = ()
    licenses: Tuple[str, ...] = ()

    @property
    def project_license(self) -> Optional[str]:
        """Comma-joined license names, or ``None`` when none are declared."""
        return ", ".join(self.licenses) if self.licenses else None

    def to_json(self) -> Dict[str, Any]:
        return {
            "groupId": self.group_id,
            "artifactId": self.artifact_id,
            "version": self.version,
            "packaging": self.packaging,
            "parent": str(self.parent) if self.parent else None,
            "properties": dict(self.properties),
            "managedVersions": dict(self.managed_versions),
            "dependencies": [str(d) for d in self.dependencies],
            "licenses": list(self.licenses),
        }
