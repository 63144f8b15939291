"""
External build-tool version resolution.

When a BOM imported through ``dependencyManagement`` governs a version, the
POM text alone does not contain it. If the project directory is available,
the build tool itself can report the effective versions. This module holds:

* :class:`ExternalVersionResolver`, the protocol the resolver tiers depend
  on, so tests and other build tools can substitute their own;
* :class:`MavenCommandResolver`, which shells out to ``mvn``;
* :class:`ExternalResolutionCache`, an explicit, lock-guarded,
  per-directory cache of resolved values.

Every failure to run the tool surfaces as
:class:`~pomkeeper.exceptions.ExternalToolUnavailable`, which callers treat
as "no result".
"""

from __future__ import annotations

import re
import threading
import subprocess
from pathlib import Path
from typing import Dict, List, Mapping, Optional, Protocol, Sequence, Union

from pomkeeper.constants import (
    DEFAULT_COMMAND_TIMEOUT,
    DEFAULT_MAVEN_COMMAND,
    DEPENDENCY_LIST_FILE,
    SPECIFIC_DEPENDENCY_FILE,
)
from pomkeeper.exceptions import ExternalToolUnavailable
from pomkeeper.models.pom import coordinate_key
from pomkeeper.utils.logger import get_logger

logger = get_logger("external")

PathLike = Union[str, Path]

# <java.version>17</java.version>
_PROPERTY_LINE_RE = re.compile(r"^\s*<([^<>/\s]+)>(.+)</\1>\s*$")


def _version_key(artifact_id: str) -> str:
    return f"{artifact_id}.version"


# ---------------------------------------------------------------------------
# Protocol
# ---------------------------------------------------------------------------


class ExternalVersionResolver(Protocol):
    """Capability to ask a build tool for effective versions."""

    def get_project_properties(self, directory: PathLike) -> Mapping[str, str]:
        """Return the project's effective properties and dependency versions."""
        ...

    def resolve_managed_version(
        self,
        group_id: str,
        artifact_id: str,
        directory: PathLike,
    ) -> Optional[str]:
        """Return the effective version of one artifact, or ``None``."""
        ...


# ---------------------------------------------------------------------------
# Cache
# ---------------------------------------------------------------------------


class ExternalResolutionCache:
    """Thread-safe cache of externally resolved values, scoped per directory.

    Each directory owns an independent table. Versions are stored under two
    keys, ``<artifactId>.version`` and ``<groupId>:<artifactId>``, matching
    the keys the build tool's property output uses.

    A directory where the tool could not run is remembered as well, so a
    hanging or missing build tool costs one timeout per directory rather
    than one per dependency.
    """

    def __init__(self) -> None:
        self._tables: Dict[str, Dict[str, str]] = {}
        self._failures: Dict[str, ExternalToolUnavailable] = {}
        self._lock = threading.Lock()

    @staticmethod
    def _scope(directory: PathLike) -> str:
        return str(Path(directory).expanduser().resolve())

    def __contains__(self, directory: object) -> bool:
        if not isinstance(directory, (str, Path)):
            return False
        with self._lock:
            return self._scope(directory) in self._tables

    def get_table(self, directory: PathLike) -> Optional[Dict[str, str]]:
        """Return a copy of the directory's table, or ``None`` if never stored."""
        with self._lock:
            table = self._tables.get(self._scope(directory))
            return dict(table) if table is not None else None

    def store_table(self, directory: PathLike, entries: Mapping[str, str]) -> None:
        """Replace the directory's table with *entries*."""
        with self._lock:
            self._tables[self._scope(directory)] = dict(entries)

    def record_failure(self, directory: PathLike, error: ExternalToolUnavailable) -> None:
        """Remember that the build tool is unusable in *directory*."""
        with self._lock:
            self._failures[self._scope(directory)] = error

    def get_failure(self, directory: PathLike) -> Optional[ExternalToolUnavailable]:
        """Return the recorded failure for *directory*, if any."""
        with self._lock:
            return self._failures.get(self._scope(directory))

    def lookup(self, directory: PathLike, group_id: str, artifact_id: str) -> Optional[str]:
        """Find a version by ``artifactId.version``, then ``group:artifact``."""
        with self._lock:
            table = self._tables.get(self._scope(directory))
            if not table:
                return None
            return table.get(_version_key(artifact_id)) or table.get(
                coordinate_key(group_id, artifact_id)
            )

    def seed(
        self,
        directory: PathLike,
        group_id: str,
        artifact_id: str,
        version: str,
    ) -> None:
        """Record *version* under both lookup keys."""
        with self._lock:
            table = self._tables.setdefault(self._scope(directory), {})
            table[_version_key(artifact_id)] = version
            table[coordinate_key(group_id, artifact_id)] = version

    def clear(self, directory: Optional[PathLike] = None) -> None:
        with self._lock:
            if directory is None:
                self._tables.clear()
                self._failures.clear()
            else:
                self._tables.pop(self._scope(directory), None)
                self._failures.pop(self._scope(directory), None)


# ---------------------------------------------------------------------------
# Maven implementation
# ---------------------------------------------------------------------------


class MavenCommandResolver:
    """Resolve effective versions by running Maven in the project directory.

    Args:
        command: Maven executable (``mvn``, ``./mvnw`` ...).
        timeout: Seconds allowed for each invocation.
        cache: Cache for per-directory project properties.

    Example:
        >>> resolver = MavenCommandResolver(timeout=60)
        >>> resolver.resolve_managed_version(
        ...     "org.springframework", "spring-core", "/path/to/project")
        '6.1.1'
    """

    def __init__(
        self,
        command: str = DEFAULT_MAVEN_COMMAND,
        timeout: int = DEFAULT_COMMAND_TIMEOUT,
        cache: Optional[ExternalResolutionCache] = None,
    ) -> None:
        self.command = command
        self.timeout = timeout
        self.cache = cache if cache is not None else ExternalResolutionCache()

    def get_project_properties(self, directory: PathLike) -> Mapping[str, str]:
        """Return ``project.properties`` plus resolved dependency versions.

        The first call per directory runs ``help:evaluate`` and
        ``dependency:list``; later calls are served from the cache. A
        failing ``dependency:list`` only drops the dependency entries. A
        failing ``help:evaluate`` is cached too and raised again on later
        calls without running Maven.

        Raises:
            ExternalToolUnavailable: ``help:evaluate`` could not be run.
        """
        cached = self.cache.get_table(directory)
        if cached is not None:
            return cached
        self._raise_if_failed(directory)

        logger.info("Evaluating Maven project properties in %s", directory)
        try:
            output = self._run(
                ["help:evaluate", "-Dexpression=project.properties", "-q", "-DforceStdout"],
                directory,
            )
        except ExternalToolUnavailable as exc:
            self.cache.record_failure(directory, exc)
            raise
        properties = parse_property_lines(output.splitlines())
        logger.debug("Parsed %d properties from help:evaluate", len(properties))

        try:
            self._run(
                ["dependency:list", f"-DoutputFile={DEPENDENCY_LIST_FILE}", "-q"],
                directory,
            )
        except ExternalToolUnavailable as exc:
            logger.warning("Could not list resolved dependencies: %s", exc)
        else:
            lines = self._consume_output_file(directory, DEPENDENCY_LIST_FILE)
            properties.update(parse_dependency_lines(lines))

        self.cache.store_table(directory, properties)
        return properties

    def resolve_managed_version(
        self,
        group_id: str,
        artifact_id: str,
        directory: PathLike,
    ) -> Optional[str]:
        """Return the version Maven resolves for ``group:artifact``.

        Project properties are consulted first; only when they do not
        mention the artifact is ``dependency:resolve`` run for it.

        Raises:
            ExternalToolUnavailable: Maven could not be run.
        """
        key = coordinate_key(group_id, artifact_id)
        properties = self.get_project_properties(directory)

        version = properties.get(_version_key(artifact_id)) or properties.get(key)
        if version:
            logger.debug("Found %s in Maven project properties: %s", key, version)
            return version

        self._raise_if_failed(directory)
        try:
            self._run(
                [
                    "dependency:resolve",
                    f"-DincludeArtifactIds={artifact_id}",
                    f"-DoutputFile={SPECIFIC_DEPENDENCY_FILE}",
                    f"-DincludeGroupIds={group_id}",
                    "-q",
                ],
                directory,
            )
        except ExternalToolUnavailable as exc:
            # A non-zero exit may be specific to this artifact
            if exc.exit_code is None:
                self.cache.record_failure(directory, exc)
            raise

        for line in self._consume_output_file(directory, SPECIFIC_DEPENDENCY_FILE):
            line = line.strip()
            if key not in line:
                continue
            parts = line.split(":")
            if len(parts) >= 4:
                logger.info("Maven resolved %s to %s", key, parts[3])
                return parts[3]

        logger.debug("Maven could not resolve a version for %s", key)
        return None

    # ------------------------------------------------------------------
    # Process helpers
    # ------------------------------------------------------------------

    def _raise_if_failed(self, directory: PathLike) -> None:
        failure = self.cache.get_failure(directory)
        if failure is not None:
            logger.debug("Maven previously failed in %s; skipping", directory)
            raise failure

    def _run(self, args: Sequence[str], directory: PathLike) -> str:
        """Run Maven with *args* in *directory* and return its stdout."""
        command: List[str] = [self.command, *args]

        try:
            completed = subprocess.run(
                command,
                cwd=str(directory),
                capture_output=True,
                text=True,
                timeout=self.timeout,
                check=False,
            )
        except subprocess.TimeoutExpired as exc:
            raise ExternalToolUnavailable(
                f"Maven timed out after {self.timeout}s",
                command=command,
                original_error=exc,
            ) from exc
        except OSError as exc:
            raise ExternalToolUnavailable(
                f"Could not run '{self.command}'",
                command=command,
                original_error=exc,
            ) from exc

        if completed.returncode != 0:
            raise ExternalToolUnavailable(
                "Maven exited with a non-zero status",
                command=command,
                exit_code=completed.returncode,
            )

        return completed.stdout or ""

    @staticmethod
    def _consume_output_file(directory: PathLike, relative: str) -> List[str]:
        """Read and delete a Maven ``-DoutputFile`` result."""
        path = Path(directory) / relative
        if not path.is_file():
            return []

        try:
            lines = path.read_text(encoding="utf-8", errors="replace").splitlines()
        except OSError as exc:
            raise ExternalToolUnavailable(
                f"Could not read Maven output {path}",
                original_error=exc,
            ) from exc
        finally:
            try:
                path.unlink()
            except OSError as exc:
                logger.debug("Could not delete %s: %s", path, exc)

        return lines


# ---------------------------------------------------------------------------
# Output parsing
# ---------------------------------------------------------------------------


def parse_property_lines(lines: Sequence[str]) -> Dict[str, str]:
    """Parse ``<name>value</name>`` lines printed by ``help:evaluate``."""
    properties: Dict[str, str] = {}
    for line in lines:
        match = _PROPERTY_LINE_RE.match(line)
        if match:
            properties[match.group(1)] = match.group(2).strip()
    return properties


def parse_dependency_lines(lines: Sequence[str]) -> Dict[str, str]:
    """Parse ``group:artifact:type:version[:scope]`` lines into version entries.

    Each line yields ``<artifactId>.version`` and ``<groupId>:<artifactId>``.
    """
    entries: Dict[str, str] = {}
    for line in lines:
        parts = line.strip().split(":")
        if len(parts) < 4:
            continue
        group_id, artifact_id, version = parts[0], parts[1], parts[3].strip()
        if not artifact_id or not version:
            continue
        entries[_version_key(artifact_id)] = version
        entries[coordinate_key(group_id, artifact_id)] = version
    return entries
