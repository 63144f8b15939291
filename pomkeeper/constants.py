"""
Centralized constants for pomkeeper.

This module defines immutable configuration values used across pomkeeper,
including network settings, Maven command lines, resolution markers, and
logging formats. All values are intended to be treated as read-only.
"""

from typing import Final, Sequence

# ---------------------------------------------------------------------------
# Project metadata
# ---------------------------------------------------------------------------

#: HTTP User-Agent template used for outbound requests.
USER_AGENT_TEMPLATE: Final[str] = (
    "pomkeeper/{version} (https://github.com/pomkeeper/pomkeeper)"
)

# ---------------------------------------------------------------------------
# Maven Central endpoints
# ---------------------------------------------------------------------------

#: Solr search endpoint used for latest-version lookups.
MAVEN_SEARCH_API: Final[str] = "https://search.maven.org/solrsearch/select"

# ---------------------------------------------------------------------------
# HTTP configuration
# ---------------------------------------------------------------------------

#: Default network timeout in seconds.
DEFAULT_TIMEOUT: Final[int] = 30

#: Maximum number of retries for failed HTTP requests.
DEFAULT_MAX_RETRIES: Final[int] = 3

# ---------------------------------------------------------------------------
# POM structure
# ---------------------------------------------------------------------------

#: XML namespace declared by Maven 4.0.0 POMs.
POM_NAMESPACE: Final[str] = "http://maven.apache.org/POM/4.0.0"

#: Scope Maven applies when a dependency omits ``<scope>``.
DEFAULT_SCOPE: Final[str] = "compile"

#: Scopes dropped when non-primary dependencies are excluded.
NON_PRIMARY_SCOPES: Final[Sequence[str]] = ("provided", "test")

# ---------------------------------------------------------------------------
# Version resolution
# ---------------------------------------------------------------------------

#: Placeholder reported for dependencies whose version is governed by a BOM.
MANAGED_BY_BOM: Final[str] = "MANAGED_BY_BOM"

#: Umbrella group-id prefixes whose versions are inherited from the parent.
DEFAULT_INHERIT_GROUP_PREFIXES: Final[Sequence[str]] = ("org.springframework.boot",)

#: Parent group id of the Spring Boot BOM family.
SPRING_BOOT_GROUP_ID: Final[str] = "org.springframework.boot"

#: Default build-tool executable.
DEFAULT_MAVEN_COMMAND: Final[str] = "mvn"

#: Default timeout (seconds) for a single build-tool invocation.
DEFAULT_COMMAND_TIMEOUT: Final[int] = 120

#: Output file written by ``mvn dependency:list``.
DEPENDENCY_LIST_FILE: Final[str] = "target/all-dependencies.txt"

#: Output file written by ``mvn dependency:resolve`` for a single artifact.
SPECIFIC_DEPENDENCY_FILE: Final[str] = "target/specific-dependency.txt"

# ---------------------------------------------------------------------------
# Drift estimation weights
# ---------------------------------------------------------------------------

#: Releases counted per major version difference.
MAJOR_RELEASE_WEIGHT: Final[int] = 10

#: Releases counted per minor version difference.
MINOR_RELEASE_WEIGHT: Final[int] = 3

#: Cap applied to the lower-order delta added on top of a weighted delta.
LOWER_ORDER_CAP: Final[int] = 5

# ---------------------------------------------------------------------------
# Configuration defaults
# ---------------------------------------------------------------------------

#: Keep provided/test/optional dependencies in the analysis.
DEFAULT_INCLUDE_NON_PRIMARY: Final[bool] = True

#: Allow invoking the build tool when a project directory is supplied.
DEFAULT_EXTERNAL_RESOLUTION: Final[bool] = True

# ---------------------------------------------------------------------------
# Security constraints
# ---------------------------------------------------------------------------

#: Default descriptor name inside a project directory.
POM_FILE_NAME: Final[str] = "pom.xml"

#: Maximum allowed file size (in bytes) when reading POM files.
MAX_FILE_SIZE: Final[int] = 10 * 1024 * 1024  # 10 MB

# ---------------------------------------------------------------------------
# Logging configuration
# ---------------------------------------------------------------------------

#: Timestamp format for verbose logging.
LOG_DATE_FORMAT: Final[str] = "%Y-%m-%d %H:%M:%S"

#: Default log format (non-verbose).
LOG_DEFAULT_FORMAT: Final[str] = "%(levelname)s: %(message)s"

#: Verbose log format including timestamp and logger name.
LOG_VERBOSE_FORMAT: Final[str] = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
