"""
Resolved dependency data model for pomkeeper.

A :class:`ResolvedDependency` ties a declaration to the outcome of version
resolution and to a :class:`DriftAssessment` against the newest published
release. :class:`AnalysisResult` is the ordered set returned for one POM.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Tuple

from pomkeeper.models.pom import DependencyDeclaration, ParentReference
from pomkeeper.models.resolution import ResolutionKind, ResolutionOutcome
from pomkeeper.utils.version_utils import get_update_type

STATUS_OUTDATED = "outdated"
STATUS_UP_TO_DATE = "up-to-date"
STATUS_BOM_MANAGED = "bom-managed"
STATUS_UNKNOWN = "unknown"


@dataclass(frozen=True)
class DriftAssessment:
    """How far a resolved version lags the latest published release.

    Attributes:
        latest_version: Latest published version, or ``None`` when the
            lookup failed (the dependency is then *unidentified*).
        is_outdated: The resolved version differs from ``latest_version``.
        releases_behind: A rough, weighted ESTIMATE of how many releases
            separate the two versions. It is derived from the
            major/minor/patch deltas only and is not an exact release
            count. Always ``>= 1`` when outdated, ``0`` otherwise.
    """

    latest_version: Optional[str] = None
    is_outdated: bool = False
    releases_behind: int = 0

    def __post_init__(self) -> None:
        if self.releases_behind < 0:
            raise ValueError("releases_behind must be >= 0")

    @classmethod
    def unavailable(cls) -> "DriftAssessment":
        """Assessment used when no latest-version fact is known."""
        return cls()

    @property
    def is_identified(self) -> bool:
        return self.latest_version is not None


@dataclass
class ResolvedDependency:
    """A declaration with its resolved version, license and drift.

    Attributes:
        declaration: The dependency as written in the POM.
        outcome: How the effective version was resolved.
        drift: Comparison against the latest published version.
        license: License text supplied by a collaborator; opaque here.
    """

    declaration: DependencyDeclaration
    outcome: ResolutionOutcome
    drift: DriftAssessment = field(default_factory=DriftAssessment.unavailable)
    license: Optional[str] = None

    # ------------------------------------------------------------------
    # Accessors
    # ------------------------------------------------------------------

    @property
    def group_id(self) -> str:
        return self.declaration.group_id

    @property
    def artifact_id(self) -> str:
        return self.declaration.artifact_id

    @property
    def key(self) -> str:
        return self.declaration.key

    @property
    def scope(self) -> str:
        return self.declaration.effective_scope

    @property
    def version(self) -> Optional[str]:
        """Effective version, or ``None`` when only estimated/unresolved."""
        return self.outcome.version

    @property
    def bom_managed(self) -> bool:
        return self.outcome.bom_managed

    @property
    def status(self) -> str:
        """One of ``outdated``, ``up-to-date``, ``bom-managed``, ``unknown``."""
        if self.outcome.kind is ResolutionKind.UNRESOLVED:
            return STATUS_UNKNOWN
        if not self.outcome.is_comparable:
            return STATUS_BOM_MANAGED
        if self.drift.is_outdated:
            return STATUS_OUTDATED
        if self.drift.is_identified:
            return STATUS_UP_TO_DATE
        return STATUS_UNKNOWN

    @property
    def update_type(self) -> Optional[str]:
        """Update classification for outdated dependencies."""
        if not self.drift.is_outdated:
            return None
        return get_update_type(self.outcome.version, self.drift.latest_version)

    # ------------------------------------------------------------------
    # Reporting & serialization
    # ------------------------------------------------------------------

    def get_status_summary(self) -> Tuple[str, str, str]:
        """Return (status, current, latest) strings for plain-text output."""
        return (
            self.status,
            self.outcome.display_version,
            self.drift.latest_version or "unknown",
        )

    def to_json(self) -> Dict[str, Any]:
        """Serialize to a JSON-compatible dictionary."""
        entry: Dict[str, Any] = {
            "groupId": self.group_id,
            "artifactId": self.artifact_id,
            "scope": self.scope,
            "optional": self.declaration.optional,
            "status": self.status,
            "resolution": self.outcome.kind.value,
            "bomManaged": self.bom_managed,
            "currentVersion": self.outcome.display_version,
            "version": self.outcome.version,
            "latestVersion": self.drift.latest_version,
            "isOutdated": self.drift.is_outdated,
            "estimatedReleasesBehind": self.drift.releases_behind,
            "license": self.license,
        }

        if self.declaration.version is not None:
            entry["declaredVersion"] = self.declaration.version
        if self.outcome.hint:
            entry["provenance"] = self.outcome.hint
        if self.update_type:
            entry["updateType"] = self.update_type

        return entry

    def __str__(self) -> str:
        text = f"{self.key} {self.outcome.display_version}"
        if self.drift.latest_version:
            text += f" -> {self.drift.latest_version} ({self.status})"
        return text


@dataclass
class AnalysisResult:
    """Ordered resolved dependencies for one POM plus summary counters.

    Counting follows one rule per dependency: outdated when outdated,
    otherwise up-to-date when a latest version is known, otherwise
    unidentified.
    """

    dependencies: List[ResolvedDependency] = field(default_factory=list)
    parent: Optional[ParentReference] = None
    project: Optional[str] = None

    @property
    def total(self) -> int:
        return len(self.dependencies)

    @property
    def outdated(self) -> int:
        return sum(1 for d in self.dependencies if d.drift.is_outdated)

    @property
    def up_to_date(self) -> int:
        return sum(
            1
            for d in self.dependencies
            if not d.drift.is_outdated and d.drift.is_identified
        )

    @property
    def unidentified(self) -> int:
        return sum(1 for d in self.dependencies if not d.drift.is_identified)

    @property
    def bom_managed(self) -> int:
        return sum(1 for d in self.dependencies if d.bom_managed)

    def get_outdated(self) -> List[ResolvedDependency]:
        return [d for d in self.dependencies if d.drift.is_outdated]

    def to_json(self) -> Dict[str, Any]:
        return {
            "project": self.project,
            "parent": str(self.parent) if self.parent else None,
            "summary": {
                "total": self.total,
                "outdated": self.outdated,
                "upToDate": self.up_to_date,
                "unidentified": self.unidentified,
                "bomManaged": self.bom_managed,
            },
            "dependencies": [d.to_json() for d in self.dependencies],
        }
