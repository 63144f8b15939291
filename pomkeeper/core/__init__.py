"""
Core functionality exports for pomkeeper.

This module provides convenient access to the core subsystems of pomkeeper.
Importing from here keeps user-facing imports clean and stable:

    from pomkeeper.core import PomAnalyzer
"""

from __future__ import annotations

from pomkeeper.core.properties import PLACEHOLDER_PATTERN, PropertyResolver
from pomkeeper.core.pom_parser import PomModelExtractor
from pomkeeper.core.external import (
    ExternalResolutionCache,
    ExternalVersionResolver,
    MavenCommandResolver,
)
from pomkeeper.core.bom_resolver import ManagedVersionResolver
from pomkeeper.core.drift import DriftEstimator, estimate_releases_behind
from pomkeeper.core.metadata_store import ArtifactMetadata, MavenCentralDataStore
from pomkeeper.core.analyzer import (
    AnalysisResult,
    LatestVersionLookup,
    LicenseLookup,
    PomAnalyzer,
)

__all__ = [
    "PLACEHOLDER_PATTERN",
    "PropertyResolver",
    "PomModelExtractor",
    "ExternalResolutionCache",
    "ExternalVersionResolver",
    "MavenCommandResolver",
    "ManagedVersionResolver",
    "DriftEstimator",
    "estimate_releases_behind",
    "ArtifactMetadata",
    "MavenCentralDataStore",
    "AnalysisResult",
    "LatestVersionLookup",
    "LicenseLookup",
    "PomAnalyzer",
]
