"""Unit tests for pomkeeper.core.metadata_store module.

Test Coverage:
- Search request parameters
- Parsing of Solr search responses (found, not found, malformed)
- At-most-once fetching per coordinate, including failures
- Concurrent requests for one coordinate sharing a fetch
- get_latest_version never raising
"""

from __future__ import annotations

import asyncio
from typing import Any, Dict
from unittest.mock import AsyncMock, MagicMock

import pytest

from pomkeeper.core.metadata_store import (
    ArtifactMetadata,
    MavenCentralDataStore,
)
from pomkeeper.exceptions import MavenCentralError, NetworkError
from pomkeeper.utils.http import HTTPClient


def _search_payload(latest: str = "2.0.9", **extra: Any) -> Dict[str, Any]:
    doc = {
        "id": "org.slf4j:slf4j-api",
        "g": "org.slf4j",
        "a": "slf4j-api",
        "latestVersion": latest,
        "timestamp": 1693471438000,
        "versionCount": 87,
    }
    doc.update(extra)
    return {"responseHeader": {"status": 0}, "response": {"numFound": 1, "docs": [doc]}}


@pytest.fixture
def mock_http_client() -> MagicMock:
    client = MagicMock(spec=HTTPClient)
    client.get_json = AsyncMock(return_value=_search_payload())
    return client


@pytest.fixture
def store(mock_http_client: MagicMock) -> MavenCentralDataStore:
    return MavenCentralDataStore(mock_http_client)


@pytest.mark.unit
class TestGetArtifactMetadata:
    """Tests for MavenCentralDataStore.get_artifact_metadata."""

    @pytest.mark.asyncio
    async def test_fetches_and_parses(
        self, store: MavenCentralDataStore, mock_http_client: MagicMock
    ) -> None:
        metadata = await store.get_artifact_metadata("org.slf4j", "slf4j-api")

        assert metadata == ArtifactMetadata(
            group_id="org.slf4j",
            artifact_id="slf4j-api",
            latest_version="2.0.9",
        )

    @pytest.mark.asyncio
    async def test_search_parameters(
        self, store: MavenCentralDataStore, mock_http_client: MagicMock
    ) -> None:
        await store.get_artifact_metadata("org.slf4j", "slf4j-api")

        args, kwargs = mock_http_client.get_json.call_args
        assert args[0] == "https://search.maven.org/solrsearch/select"
        assert kwargs["params"] == {
            "q": 'g:"org.slf4j" AND a:"slf4j-api"',
            "rows": "1",
            "wt": "json",
        }

    @pytest.mark.asyncio
    async def test_custom_search_url(self, mock_http_client: MagicMock) -> None:
        store = MavenCentralDataStore(mock_http_client, search_url="https://mirror.example/select")

        await store.get_artifact_metadata("org.slf4j", "slf4j-api")

        assert mock_http_client.get_json.call_args[0][0] == "https://mirror.example/select"

    @pytest.mark.asyncio
    async def test_cached_after_first_fetch(
        self, store: MavenCentralDataStore, mock_http_client: MagicMock
    ) -> None:
        first = await store.get_artifact_metadata("org.slf4j", "slf4j-api")
        second = await store.get_artifact_metadata("org.slf4j", "slf4j-api")

        assert first is second
        assert mock_http_client.get_json.await_count == 1

    @pytest.mark.asyncio
    async def test_concurrent_requests_share_fetch(
        self, store: MavenCentralDataStore, mock_http_client: MagicMock
    ) -> None:
        """Test double-checked locking prevents duplicate searches."""

        async def slow_search(*args: Any, **kwargs: Any) -> Dict[str, Any]:
            await asyncio.sleep(0.01)
            return _search_payload()

        mock_http_client.get_json.side_effect = slow_search
        store._semaphore = asyncio.Semaphore(1)

        results = await asyncio.gather(
            *(store.get_artifact_metadata("org.slf4j", "slf4j-api") for _ in range(5))
        )

        assert all(r.latest_version == "2.0.9" for r in results)
        assert mock_http_client.get_json.await_count == 1

    @pytest.mark.asyncio
    async def test_not_found(
        self, store: MavenCentralDataStore, mock_http_client: MagicMock
    ) -> None:
        mock_http_client.get_json.return_value = {"response": {"numFound": 0, "docs": []}}

        with pytest.raises(MavenCentralError) as exc_info:
            await store.get_artifact_metadata("com.acme", "internal-lib")

        assert exc_info.value.status_code == 404
        assert exc_info.value.coordinate == "com.acme:internal-lib"

    @pytest.mark.asyncio
    async def test_failure_cached(
        self, store: MavenCentralDataStore, mock_http_client: MagicMock
    ) -> None:
        """Test a failed coordinate is not searched a second time."""
        mock_http_client.get_json.return_value = {"response": {"numFound": 0, "docs": []}}

        for _ in range(2):
            with pytest.raises(MavenCentralError):
                await store.get_artifact_metadata("com.acme", "internal-lib")

        assert mock_http_client.get_json.await_count == 1

    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        "payload,message",
        [
            ({}, "Malformed search response"),
            ({"response": "oops"}, "Malformed search response"),
            ({"response": {"numFound": 1, "docs": [{"id": "x"}]}}, "No latest version"),
        ],
    )
    async def test_malformed_response(
        self,
        store: MavenCentralDataStore,
        mock_http_client: MagicMock,
        payload: Dict[str, Any],
        message: str,
    ) -> None:
        mock_http_client.get_json.return_value = payload

        with pytest.raises(MavenCentralError) as exc_info:
            await store.get_artifact_metadata("org.slf4j", "slf4j-api")

        assert message in str(exc_info.value)

    @pytest.mark.asyncio
    async def test_network_error_wrapped(
        self, store: MavenCentralDataStore, mock_http_client: MagicMock
    ) -> None:
        mock_http_client.get_json.side_effect = NetworkError(
            "HTTP 503 error", url="https://search.maven.org", status_code=503
        )

        with pytest.raises(MavenCentralError) as exc_info:
            await store.get_artifact_metadata("org.slf4j", "slf4j-api")

        assert exc_info.value.status_code == 503
        assert isinstance(exc_info.value.__cause__, NetworkError)


@pytest.mark.unit
class TestGetLatestVersion:
    """Tests for MavenCentralDataStore.get_latest_version."""

    @pytest.mark.asyncio
    async def test_returns_latest(self, store: MavenCentralDataStore) -> None:
        assert await store.get_latest_version("org.slf4j", "slf4j-api") == "2.0.9"

    @pytest.mark.asyncio
    async def test_failure_returns_none(
        self, store: MavenCentralDataStore, mock_http_client: MagicMock
    ) -> None:
        mock_http_client.get_json.side_effect = NetworkError("down")

        assert await store.get_latest_version("org.slf4j", "slf4j-api") is None

