"""Dependency analysis for a single POM.

:class:`PomAnalyzer` ties together the pieces of an analysis run:

1. extract the :class:`~pomkeeper.models.pom.PomModel` from POM text;
2. optionally drop ``provided``/``test``/optional declarations;
3. resolve the effective version of every declaration;
4. look up the latest published version of each artifact concurrently;
5. estimate drift and assemble an :class:`AnalysisResult`.

Only a malformed descriptor aborts a run. Everything that goes wrong for a
single dependency degrades that dependency and the batch continues.

Typical usage::

    from pomkeeper.utils.http import HTTPClient
    from pomkeeper.core.analyzer import PomAnalyzer
    from pomkeeper.core.metadata_store import MavenCentralDataStore

    async with HTTPClient() as http:
        analyzer = PomAnalyzer(latest_lookup=MavenCentralDataStore(http))
        result = await analyzer.analyze(pom_text)
        print(result.outdated, "of", result.total, "dependencies are outdated")
"""

from __future__ import annotations

import asyncio
from typing import Any, List, Optional, Protocol, Tuple

from pomkeeper.core.bom_resolver import ManagedVersionResolver
from pomkeeper.core.drift import DriftEstimator
from pomkeeper.core.external import PathLike
from pomkeeper.core.pom_parser import PomModelExtractor
from pomkeeper.exceptions import LatestVersionUnavailable, PomKeeperError
from pomkeeper.models.dependency import AnalysisResult, ResolvedDependency
from pomkeeper.models.pom import DependencyDeclaration, PomModel
from pomkeeper.models.resolution import ResolutionOutcome
from pomkeeper.utils.logger import get_logger

logger = get_logger("analyzer")

__all__ = ["AnalysisResult", "LatestVersionLookup", "LicenseLookup", "PomAnalyzer"]

ResolvedPair = Tuple[DependencyDeclaration, ResolutionOutcome]


class LatestVersionLookup(Protocol):
    """Source of the latest published version of an artifact."""

    async def get_latest_version(self, group_id: str, artifact_id: str) -> Optional[str]:
        ...


class LicenseLookup(Protocol):
    """Source of an artifact's license text."""

    async def get_license(
        self,
        group_id: str,
        artifact_id: str,
        version: Optional[str],
    ) -> Optional[str]:
        ...


class PomAnalyzer:
    """Resolve and assess every dependency declared in a POM.

    All collaborators are optional; the defaults resolve without a build
    tool and report every dependency as unidentified since no
    latest-version source is configured.

    Args:
        extractor: POM text to model.
        resolver: Effective-version resolution.
        estimator: Drift estimation.
        latest_lookup: Latest published version per artifact.
        license_lookup: License per artifact. Without one, the POM's own
            project license is reported for every dependency.
    """

    def __init__(
        self,
        extractor: Optional[PomModelExtractor] = None,
        resolver: Optional[ManagedVersionResolver] = None,
        estimator: Optional[DriftEstimator] = None,
        latest_lookup: Optional[LatestVersionLookup] = None,
        license_lookup: Optional[LicenseLookup] = None,
    ) -> None:
        self.extractor = extractor or PomModelExtractor()
        self.resolver = resolver or ManagedVersionResolver()
        self.estimator = estimator or DriftEstimator()
        self.latest_lookup = latest_lookup
        self.license_lookup = license_lookup

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    def resolve(
        self,
        pom_text: str,
        directory: Optional[PathLike] = None,
        include_non_primary: bool = True,
        *,
        source: str = "<string>",
    ) -> List[ResolvedPair]:
        """Resolve the effective version of every declaration, in POM order.

        Raises:
            MalformedDescriptor: *pom_text* is not a usable POM.
        """
        model = self.extractor.extract(pom_text, source=source)
        return self._resolve_model(model, directory, include_non_primary)

    async def analyze(
        self,
        pom_text: str,
        directory: Optional[PathLike] = None,
        include_non_primary: bool = True,
        *,
        source: str = "<string>",
    ) -> AnalysisResult:
        """Resolve every declaration and assess it against the latest release.

        Raises:
            MalformedDescriptor: *pom_text* is not a usable POM.
        """
        model = self.extractor.extract(pom_text, source=source)
        pairs = self._resolve_model(model, directory, include_non_primary)

        latest_results = await asyncio.gather(
            *(self._fetch_latest(declaration) for declaration, _ in pairs),
            return_exceptions=True,
        )
        licenses = await self._fetch_licenses(model, pairs)

        dependencies: List[ResolvedDependency] = []
        for (declaration, outcome), latest, license_text in zip(pairs, latest_results, licenses):
            latest_version = self._unwrap_latest(declaration, latest)
            dependencies.append(
                ResolvedDependency(
                    declaration=declaration,
                    outcome=outcome,
                    drift=self.estimator.assess(outcome, latest_version),
                    license=license_text,
                )
            )

        result = AnalysisResult(
            dependencies=dependencies,
            parent=model.parent,
            project=_project_label(model),
        )
        logger.info(
            "Analyzed %d dependencies: %d outdated, %d up to date, %d unidentified",
            result.total,
            result.outdated,
            result.up_to_date,
            result.unidentified,
        )
        return result

    # ------------------------------------------------------------------
    # Resolution
    # ------------------------------------------------------------------

    def _resolve_model(
        self,
        model: PomModel,
        directory: Optional[PathLike],
        include_non_primary: bool,
    ) -> List[ResolvedPair]:
        declarations = self.extractor.filter_declarations(model.dependencies, include_non_primary)
        properties = self.resolver.resolve_properties(model, directory)

        pairs: List[ResolvedPair] = []
        for declaration in declarations:
            try:
                outcome = self.resolver.resolve(
                    declaration,
                    properties,
                    parent=model.parent,
                    managed_versions=model.managed_versions,
                    directory=directory,
                )
            except PomKeeperError as exc:
                logger.error("Failed to resolve %s: %s", declaration.key, exc)
                outcome = ResolutionOutcome.unresolved(exc.message)
            pairs.append((declaration, outcome))

        return pairs

    # ------------------------------------------------------------------
    # Collaborator lookups
    # ------------------------------------------------------------------

    async def _fetch_latest(self, declaration: DependencyDeclaration) -> str:
        if self.latest_lookup is None or not declaration.group_id:
            raise LatestVersionUnavailable(
                f"No latest-version source for {declaration.key}",
                coordinate=declaration.key,
            )

        latest = await self.latest_lookup.get_latest_version(
            declaration.group_id,
            declaration.artifact_id,
        )
        if not latest:
            raise LatestVersionUnavailable(
                f"Latest version of {declaration.key} is unknown",
                coordinate=declaration.key,
            )
        return latest

    @staticmethod
    def _unwrap_latest(declaration: DependencyDeclaration, result: Any) -> Optional[str]:
        if isinstance(result, LatestVersionUnavailable):
            logger.debug("%s", result)
            return None
        if isinstance(result, Exception):
            logger.error("Latest version lookup failed for %s: %s", declaration.key, result)
            return None
        return result

    async def _fetch_licenses(
        self,
        model: PomModel,
        pairs: List[ResolvedPair],
    ) -> List[Optional[str]]:
        default = model.project_license
        if self.license_lookup is None:
            return [default] * len(pairs)

        results = await asyncio.gather(
            *(
                self.license_lookup.get_license(d.group_id, d.artifact_id, o.version)
                for d, o in pairs
            ),
            return_exceptions=True,
        )

        licenses: List[Optional[str]] = []
        for (declaration, _), result in zip(pairs, results):
            if isinstance(result, Exception):
                logger.warning("License lookup failed for %s: %s", declaration.key, result)
                licenses.append(default)
            else:
                licenses.append(result or default)
        return licenses


def _project_label(model: PomModel) -> Optional[str]:
    if not model.artifact_id:
        return None
    label = f"{model.group_id or ''}:{model.artifact_id}"
    return f"{label}:{model.version}" if model.version else label
