"""
Unified data model exports for pomkeeper.

This module re-exports all core data models to provide a stable and
convenient public API.

Example:
    >>> from pomkeeper.models import DependencyDeclaration, ResolutionOutcome
"""

from __future__ import annotations

from pomkeeper.models.pom import (
    DependencyDeclaration,
    ParentReference,
    PomModel,
    coordinate_key,
)
from pomkeeper.models.resolution import ResolutionKind, ResolutionOutcome
from pomkeeper.models.dependency import (
    AnalysisResult,
    DriftAssessment,
    ResolvedDependency,
)

__all__ = [
    "DependencyDeclaration",
    "ParentReference",
    "PomModel",
    "coordinate_key",
    "ResolutionKind",
    "ResolutionOutcome",
    "DriftAssessment",
    "ResolvedDependency",
    "AnalysisResult",
]
