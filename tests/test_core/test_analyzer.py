"""Unit tests for pomkeeper.core.analyzer module.

The analyzer is exercised end to end against in-memory latest-version and
license sources; no network or build tool is involved.

Test Coverage:
- Synchronous resolution in POM order
- Outdated, up-to-date, BOM-estimated and unidentified dependencies
- Filtering of non-primary declarations
- Lookup failures degrading single dependencies
- License lookups and the project-license fallback
- Summary counters and project labels
"""

from __future__ import annotations

from typing import Dict, List, Optional, Tuple
from unittest.mock import MagicMock

import pytest

from pomkeeper.core.analyzer import PomAnalyzer
from pomkeeper.core.bom_resolver import ManagedVersionResolver
from pomkeeper.exceptions import MalformedDescriptor, NetworkError, UnresolvedProperty
from pomkeeper.models import ResolutionKind

POM = """<project xmlns="http://maven.apache.org/POM/4.0.0">
  <modelVersion>4.0.0</modelVersion>
  <parent>
    <groupId>org.springframework.boot</groupId>
    <artifactId>spring-boot-starter-parent</artifactId>
    <version>3.2.0</version>
  </parent>
  <groupId>com.example</groupId>
  <artifactId>orders</artifactId>
  <version>0.0.1-SNAPSHOT</version>
  <licenses><license><name>MIT</name></license></licenses>
  <properties>
    <jackson.version>2.15.3</jackson.version>
  </properties>
  <dependencies>
    <dependency>
      <groupId>org.springframework.boot</groupId>
      <artifactId>spring-boot-starter-web</artifactId>
    </dependency>
    <dependency>
      <groupId>com.fasterxml.jackson.core</groupId>
      <artifactId>jackson-databind</artifactId>
      <version>${jackson.version}</version>
    </dependency>
    <dependency>
      <groupId>io.micrometer</groupId>
      <artifactId>micrometer-core</artifactId>
    </dependency>
    <dependency>
      <groupId>com.acme</groupId>
      <artifactId>internal-lib</artifactId>
      <version>1.0.0</version>
    </dependency>
    <dependency>
      <groupId>junit</groupId>
      <artifactId>junit</artifactId>
      <version>4.13.2</version>
      <scope>test</scope>
    </dependency>
  </dependencies>
</project>
"""

LATEST = {
    "org.springframework.boot:spring-boot-starter-web": "3.2.0",
    "com.fasterxml.jackson.core:jackson-databind": "2.16.1",
    "io.micrometer:micrometer-core": "1.12.1",
    "junit:junit": "4.13.2",
}


class FakeLatestLookup:
    """In-memory LatestVersionLookup that records its calls."""

    def __init__(self, versions: Dict[str, str], errors: Optional[Dict[str, Exception]] = None):
        self.versions = versions
        self.errors = errors or {}
        self.calls: List[Tuple[str, str]] = []

    async def get_latest_version(self, group_id: str, artifact_id: str) -> Optional[str]:
        key = f"{group_id}:{artifact_id}"
        self.calls.append((group_id, artifact_id))
        if key in self.errors:
            raise self.errors[key]
        return self.versions.get(key)


class FakeLicenseLookup:
    def __init__(self, licenses: Dict[str, str], failing: Optional[str] = None):
        self.licenses = licenses
        self.failing = failing

    async def get_license(
        self, group_id: str, artifact_id: str, version: Optional[str]
    ) -> Optional[str]:
        key = f"{group_id}:{artifact_id}"
        if key == self.failing:
            raise NetworkError("license service down")
        return self.licenses.get(key)


@pytest.fixture
def analyzer() -> PomAnalyzer:
    return PomAnalyzer(latest_lookup=FakeLatestLookup(LATEST))


def _by_key(result) -> Dict[str, object]:
    return {dep.key: dep for dep in result.dependencies}


@pytest.mark.unit
class TestResolve:
    """Tests for PomAnalyzer.resolve."""

    def test_resolution_in_pom_order(self, analyzer: PomAnalyzer) -> None:
        pairs = analyzer.resolve(POM)

        assert [d.key for d, _ in pairs] == [
            "org.springframework.boot:spring-boot-starter-web",
            "com.fasterxml.jackson.core:jackson-databind",
            "io.micrometer:micrometer-core",
            "com.acme:internal-lib",
            "junit:junit",
        ]
        assert [o.kind for _, o in pairs] == [
            ResolutionKind.PARENT_INHERITED,
            ResolutionKind.PROPERTY_RESOLVED,
            ResolutionKind.ESTIMATED,
            ResolutionKind.LITERAL,
            ResolutionKind.LITERAL,
        ]

    def test_exclude_non_primary(self, analyzer: PomAnalyzer) -> None:
        pairs = analyzer.resolve(POM, include_non_primary=False)

        assert "junit:junit" not in [d.key for d, _ in pairs]

    def test_malformed_descriptor_propagates(self, analyzer: PomAnalyzer) -> None:
        with pytest.raises(MalformedDescriptor):
            analyzer.resolve("<dependencies/>", source="broken.xml")

    def test_resolver_error_degrades_single_dependency(self) -> None:
        resolver = ManagedVersionResolver()
        original = resolver.resolve

        def flaky(declaration, *args, **kwargs):
            if declaration.artifact_id == "internal-lib":
                raise UnresolvedProperty("boom", property_names=["x"])
            return original(declaration, *args, **kwargs)

        resolver.resolve = flaky  # type: ignore[method-assign]
        pairs = PomAnalyzer(resolver=resolver).resolve(POM)
        outcomes = {d.artifact_id: o for d, o in pairs}

        assert outcomes["internal-lib"].kind is ResolutionKind.UNRESOLVED
        assert outcomes["internal-lib"].hint == "boom"
        assert outcomes["junit"].kind is ResolutionKind.LITERAL


@pytest.mark.unit
class TestAnalyze:
    """Tests for PomAnalyzer.analyze."""

    @pytest.mark.asyncio
    async def test_statuses(self, analyzer: PomAnalyzer) -> None:
        deps = _by_key(await analyzer.analyze(POM))

        assert deps["org.springframework.boot:spring-boot-starter-web"].status == "up-to-date"
        assert deps["com.fasterxml.jackson.core:jackson-databind"].status == "outdated"
        assert deps["io.micrometer:micrometer-core"].status == "bom-managed"
        assert deps["com.acme:internal-lib"].status == "unknown"
        assert deps["junit:junit"].status == "up-to-date"

    @pytest.mark.asyncio
    async def test_outdated_drift(self, analyzer: PomAnalyzer) -> None:
        jackson = _by_key(await analyzer.analyze(POM))["com.fasterxml.jackson.core:jackson-databind"]

        assert jackson.version == "2.15.3"
        assert jackson.drift.latest_version == "2.16.1"
        assert jackson.drift.releases_behind == 3
        assert jackson.update_type == "minor"

    @pytest.mark.asyncio
    async def test_estimate_never_compared(self, analyzer: PomAnalyzer) -> None:
        """Test an estimated version is never reported as outdated."""
        micrometer = _by_key(await analyzer.analyze(POM))["io.micrometer:micrometer-core"]

        assert micrometer.version is None
        assert micrometer.drift.latest_version == "1.12.1"
        assert micrometer.drift.is_outdated is False
        assert micrometer.outcome.display_version == "MANAGED_BY_BOM (Spring Boot 3.2.0)"

    @pytest.mark.asyncio
    async def test_summary_counters(self, analyzer: PomAnalyzer) -> None:
        result = await analyzer.analyze(POM)

        assert result.total == 5
        assert result.outdated == 1
        assert result.up_to_date == 3
        assert result.unidentified == 1
        assert result.total == result.outdated + result.up_to_date + result.unidentified
        assert result.bom_managed == 2

    @pytest.mark.asyncio
    async def test_project_and_parent(self, analyzer: PomAnalyzer) -> None:
        result = await analyzer.analyze(POM)

        assert result.project == "com.example:orders:0.0.1-SNAPSHOT"
        assert str(result.parent) == "org.springframework.boot:spring-boot-starter-parent:3.2.0"

    @pytest.mark.asyncio
    async def test_exclude_non_primary(self, analyzer: PomAnalyzer) -> None:
        result = await analyzer.analyze(POM, include_non_primary=False)

        assert result.total == 4

    @pytest.mark.asyncio
    async def test_lookup_once_per_dependency(self) -> None:
        lookup = FakeLatestLookup(LATEST)

        await PomAnalyzer(latest_lookup=lookup).analyze(POM)

        assert len(lookup.calls) == 5
        assert len(set(lookup.calls)) == 5

    @pytest.mark.asyncio
    async def test_lookup_error_isolated(self) -> None:
        """Test one failing lookup leaves the other dependencies assessed."""
        lookup = FakeLatestLookup(
            LATEST,
            errors={"com.fasterxml.jackson.core:jackson-databind": RuntimeError("search down")},
        )

        result = await PomAnalyzer(latest_lookup=lookup).analyze(POM)
        deps = _by_key(result)

        assert deps["com.fasterxml.jackson.core:jackson-databind"].drift.is_identified is False
        assert deps["junit:junit"].status == "up-to-date"
        assert result.outdated == 0

    @pytest.mark.asyncio
    async def test_without_latest_lookup(self) -> None:
        result = await PomAnalyzer().analyze(POM)

        assert result.unidentified == result.total
        assert result.outdated == 0

    @pytest.mark.asyncio
    async def test_missing_group_not_looked_up(self) -> None:
        text = POM.replace("<groupId>com.acme</groupId>", "")
        lookup = FakeLatestLookup(LATEST)

        await PomAnalyzer(latest_lookup=lookup).analyze(text)

        assert ("", "internal-lib") not in lookup.calls

    @pytest.mark.asyncio
    async def test_project_license_default(self, analyzer: PomAnalyzer) -> None:
        result = await analyzer.analyze(POM)

        assert {d.license for d in result.dependencies} == {"MIT"}

    @pytest.mark.asyncio
    async def test_license_lookup(self) -> None:
        licenses = FakeLicenseLookup(
            {"junit:junit": "EPL-1.0"},
            failing="io.micrometer:micrometer-core",
        )

        result = await PomAnalyzer(
            latest_lookup=FakeLatestLookup(LATEST), license_lookup=licenses
        ).analyze(POM)
        deps = _by_key(result)

        assert deps["junit:junit"].license == "EPL-1.0"
        assert deps["io.micrometer:micrometer-core"].license == "MIT"
        assert deps["com.acme:internal-lib"].license == "MIT"

    def test_directory_passed_to_resolver(self, tmp_path) -> None:
        resolver = MagicMock(spec=ManagedVersionResolver)
        resolver.resolve_properties.return_value = MagicMock()
        resolver.resolve.return_value = MagicMock(kind=ResolutionKind.UNRESOLVED)

        PomAnalyzer(resolver=resolver).resolve(POM, directory=tmp_path)

        resolver.resolve_properties.assert_called_once()
        assert resolver.resolve_properties.call_args[0][1] == tmp_path
        assert all(c.kwargs["directory"] == tmp_path for c in resolver.resolve.call_args_list)

    @pytest.mark.asyncio
    async def test_json_serialization(self, analyzer: PomAnalyzer) -> None:
        data = (await analyzer.analyze(POM)).to_json()

        assert data["summary"] == {
            "total": 5,
            "outdated": 1,
            "upToDate": 3,
            "unidentified": 1,
            "bomManaged": 2,
        }
        jackson = data["dependencies"][1]
        assert jackson["declaredVersion"] == "${jackson.version}"
        assert jackson["resolution"] == "property"
        assert jackson["estimatedReleasesBehind"] == 3
