"""Centralized Maven Central metadata store for pomkeeper.

Provides an async-safe cache of latest-version metadata so that every
dependency in an analysis shares a single HTTP fetch per
``group:artifact`` coordinate. The data comes from the Maven Central Solr
search API::

    https://search.maven.org/solrsearch/select?q=g:"G" AND a:"A"&rows=1&wt=json

Typical usage::

    from pomkeeper.utils.http import HTTPClient
    from pomkeeper.core.metadata_store import MavenCentralDataStore

    async with HTTPClient() as client:
        store = MavenCentralDataStore(client)
        latest = await store.get_latest_version("org.slf4j", "slf4j-api")
        print(latest)                       # e.g. "2.0.9"
"""

from __future__ import annotations

import asyncio
from dataclasses import dataclass
from typing import Any, Dict, Optional

from pomkeeper.constants import MAVEN_SEARCH_API
from pomkeeper.exceptions import MavenCentralError, NetworkError
from pomkeeper.models.pom import coordinate_key
from pomkeeper.utils.http import HTTPClient
from pomkeeper.utils.logger import get_logger

logger = get_logger("metadata_store")

__all__ = ["ArtifactMetadata", "MavenCentralDataStore"]


# ---------------------------------------------------------------------------
# Data container
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class ArtifactMetadata:
    """Snapshot of one artifact's search record on Maven Central.

    Attributes:
        group_id: Artifact group id.
        artifact_id: Artifact id.
        latest_version: Newest published version.
    """

    group_id: str
    artifact_id: str
    latest_version: str


# ---------------------------------------------------------------------------
# Async data-store with double-checked locking
# ---------------------------------------------------------------------------


class MavenCentralDataStore:
    """Async-safe, per-process cache for Maven Central artifact metadata.

    Each ``group:artifact`` coordinate triggers **at most one** search
    request, whether it succeeds or not. A :class:`asyncio.Semaphore`
    limits concurrent fetches, and a second cache check inside the
    semaphore prevents duplicate requests when several coroutines ask for
    the same coordinate at once.

    The store satisfies the ``LatestVersionLookup`` protocol used by
    :class:`~pomkeeper.core.analyzer.PomAnalyzer`.

    Args:
        http_client: A pre-configured :class:`HTTPClient` instance.
        concurrent_limit: Maximum number of in-flight searches.
        search_url: Solr search endpoint.
    """

    def __init__(
        self,
        http_client: HTTPClient,
        concurrent_limit: int = 10,
        search_url: str = MAVEN_SEARCH_API,
    ) -> None:
        self.http_client = http_client
        self.search_url = search_url
        self._semaphore = asyncio.Semaphore(concurrent_limit)

        # coordinate -> metadata, or the error raised for it
        self._metadata: Dict[str, ArtifactMetadata] = {}
        self._failures: Dict[str, MavenCentralError] = {}

    # ------------------------------------------------------------------
    # Public async accessors
    # ------------------------------------------------------------------

    async def get_artifact_metadata(
        self,
        group_id: str,
        artifact_id: str,
    ) -> ArtifactMetadata:
        """Fetch (or return cached) metadata for one artifact.

        Raises:
            MavenCentralError: The artifact is unknown to the search index,
                the response is malformed, or the request failed.
        """
        key = coordinate_key(group_id, artifact_id)

        cached = self._lookup_cached(key)
        if cached is not None:
            return cached

        async with self._semaphore:
            cached = self._lookup_cached(key)
            if cached is not None:
                return cached

            try:
                data = await self._search(group_id, artifact_id)
                metadata = self._parse_search_response(group_id, artifact_id, data)
            except MavenCentralError as exc:
                self._failures[key] = exc
                raise

            self._metadata[key] = metadata
            return metadata

    async def get_latest_version(
        self,
        group_id: str,
        artifact_id: str,
    ) -> Optional[str]:
        """Return the latest published version, or ``None`` when unknown.

        Lookup failures are logged and never raised.
        """
        try:
            metadata = await self.get_artifact_metadata(group_id, artifact_id)
        except MavenCentralError as exc:
            logger.debug("Latest version lookup failed for %s:%s: %s", group_id, artifact_id, exc)
            return None
        return metadata.latest_version

    # ------------------------------------------------------------------
    # Cache helpers
    # ------------------------------------------------------------------

    def _lookup_cached(self, key: str) -> Optional[ArtifactMetadata]:
        if key in self._failures:
            raise self._failures[key]
        return self._metadata.get(key)

    # ------------------------------------------------------------------
    # Network & parsing helpers
    # ------------------------------------------------------------------

    async def _search(self, group_id: str, artifact_id: str) -> Dict[str, Any]:
        key = coordinate_key(group_id, artifact_id)
        params = {
            "q": f'g:"{group_id}" AND a:"{artifact_id}"',
            "rows": "1",
            "wt": "json",
        }

        try:
            return await self.http_client.get_json(self.search_url, params=params)
        except NetworkError as exc:
            raise MavenCentralError(
                f"Maven Central search failed for {key}: {exc.message}",
                coordinate=key,
                url=exc.url,
                status_code=exc.status_code,
            ) from exc

    @staticmethod
    def _parse_search_response(
        group_id: str,
        artifact_id: str,
        data: Dict[str, Any],
    ) -> ArtifactMetadata:
        """Extract ``response.docs[0]`` into :class:`ArtifactMetadata`."""
        key = coordinate_key(group_id, artifact_id)
        response = data.get("response")

        if not isinstance(response, dict):
            raise MavenCentralError(
                f"Malformed search response for {key}",
                coordinate=key,
            )

        docs = response.get("docs") or []
        if not response.get("numFound") or not docs:
            raise MavenCentralError(
                f"Artifact {key} not found on Maven Central",
                coordinate=key,
                status_code=404,
            )

        doc = docs[0]
        latest = doc.get("latestVersion") if isinstance(doc, dict) else None
        if not latest:
            raise MavenCentralError(
                f"No latest version reported for {key}",
                coordinate=key,
            )

        return ArtifactMetadata(
            group_id=group_id,
            artifact_id=artifact_id,
            latest_version=str(latest),
        )
