"""
Custom exception hierarchy for pomkeeper.

This module defines structured exception types used across pomkeeper.
All exceptions inherit from :class:`PomKeeperError` and support optional
structured metadata via the ``details`` attribute to improve diagnostics
and logging.

Only :class:`MalformedDescriptor` aborts an analysis. Every subclass of
:class:`ResolutionError` is raised and caught inside the per-dependency
resolution steps and degrades a single dependency instead.
"""

from __future__ import annotations

from typing import Any, Mapping, MutableMapping, Optional, Sequence


class PomKeeperError(Exception):
    """Base exception for all pomkeeper errors.

    Args:
        message: Human-readable error message.
        details: Optional structured metadata describing the error.
    """

    __slots__ = ("message", "details")

    def __init__(
        self,
        message: str,
        details: Optional[Mapping[str, Any]] = None,
    ) -> None:
        self.message: str = message
        self.details: MutableMapping[str, Any] = dict(details) if details else {}
        super().__init__(message)

    def __str__(self) -> str:
        if not self.details:
            return self.message
        formatted = ", ".join(f"{k}={v}" for k, v in self.details.items())
        return f"{self.message} ({formatted})"

    def __repr__(self) -> str:
        return (
            f"{self.__class__.__name__}("
            f"message={self.message!r}, details={dict(self.details)!r})"
        )


def _add_if(details: MutableMapping[str, Any], key: str, value: Any) -> None:
    """Add a key to ``details`` only if ``value`` is not ``None``."""
    if value is not None:
        details[key] = value


def _truncate(text: str, max_length: int = 200) -> str:
    """Truncate long text for safe logging or error reporting."""
    if len(text) <= max_length:
        return text
    return text[:max_length] + "..."


class MalformedDescriptor(PomKeeperError):
    """Raised when POM text is not well-formed XML or has no project root.

    Args:
        message: Error description.
        source: Where the text came from (file path or ``"<string>"``).
        reason: Underlying parser message.
    """

    __slots__ = ("source", "reason")

    def __init__(
        self,
        message: str,
        *,
        source: Optional[str] = None,
        reason: Optional[str] = None,
    ) -> None:
        details: MutableMapping[str, Any] = {}
        _add_if(details, "source", source)
        _add_if(details, "reason", reason)

        super().__init__(message, details)

        self.source = source
        self.reason = reason


class ResolutionError(PomKeeperError):
    """Base class for non-fatal, per-dependency resolution failures."""


class UnresolvedProperty(ResolutionError):
    """Raised when a ``${name}`` placeholder has no value in the property table.

    Args:
        message: Error description.
        property_names: Names of the placeholders left unresolved.
        value: The version string that still contains placeholders.
    """

    __slots__ = ("property_names", "value")

    def __init__(
        self,
        message: str,
        *,
        property_names: Sequence[str] = (),
        value: Optional[str] = None,
    ) -> None:
        details: MutableMapping[str, Any] = {}
        if property_names:
            details["properties"] = ", ".join(property_names)
        _add_if(details, "value", value)

        super().__init__(message, details)

        self.property_names = tuple(property_names)
        self.value = value


class UnresolvedManagedVersion(ResolutionError):
    """Raised when a ``dependencyManagement`` entry yields no usable version.

    Args:
        message: Error description.
        coordinate: ``group:artifact`` key of the managed entry.
        managed_version: Raw managed version, if any.
    """

    __slots__ = ("coordinate", "managed_version")

    def __init__(
        self,
        message: str,
        *,
        coordinate: Optional[str] = None,
        managed_version: Optional[str] = None,
    ) -> None:
        details: MutableMapping[str, Any] = {}
        _add_if(details, "coordinate", coordinate)
        _add_if(details, "managed_version", managed_version)

        super().__init__(message, details)

        self.coordinate = coordinate
        self.managed_version = managed_version


class ExternalToolUnavailable(ResolutionError):
    """Raised when the build tool cannot be run or exits unsuccessfully.

    Args:
        message: Error description.
        command: The command line that was attempted.
        exit_code: Process exit code, if the process ran.
        original_error: Exception raised by :mod:`subprocess`, if any.
    """

    __slots__ = ("command", "exit_code", "original_error")

    def __init__(
        self,
        message: str,
        *,
        command: Optional[Sequence[str]] = None,
        exit_code: Optional[int] = None,
        original_error: Optional[Exception] = None,
    ) -> None:
        details: MutableMapping[str, Any] = {}
        if command:
            details["command"] = " ".join(command)
        _add_if(details, "exit_code", exit_code)
        _add_if(
            details,
            "original_error",
            str(original_error) if original_error else None,
        )

        super().__init__(message, details)

        self.command = tuple(command) if command else ()
        self.exit_code = exit_code
        self.original_error = original_error


class LatestVersionUnavailable(ResolutionError):
    """Raised when no latest published version is known for an artifact.

    Args:
        message: Error description.
        coordinate: ``group:artifact`` key of the artifact.
    """

    __slots__ = ("coordinate",)

    def __init__(self, message: str, *, coordinate: Optional[str] = None) -> None:
        details: MutableMapping[str, Any] = {}
        _add_if(details, "coordinate", coordinate)

        super().__init__(message, details)

        self.coordinate = coordinate


class NetworkError(PomKeeperError):
    """Raised when HTTP or network operations fail.

    Args:
        message: Error description.
        url: URL being accessed.
        status_code: HTTP status code, if available.
        response_body: Raw response body, truncated for safety.
    """

    __slots__ = ("url", "status_code", "response_body")

    def __init__(
        self,
        message: str,
        *,
        url: Optional[str] = None,
        status_code: Optional[int] = None,
        response_body: Optional[str] = None,
    ) -> None:
        details: MutableMapping[str, Any] = {}
        _add_if(details, "url", url)
        _add_if(details, "status_code", status_code)

        if response_body is not None:
            details["response"] = _truncate(response_body)

        super().__init__(message, details)

        self.url = url
        self.status_code = status_code
        self.response_body = response_body


class MavenCentralError(NetworkError):
    """Raised for failures related to the Maven Central search API.

    Args:
        message: Error description.
        coordinate: ``group:artifact`` key of the artifact involved.
        **kwargs: Additional arguments forwarded to ``NetworkError``.
    """

    __slots__ = ("coordinate",)

    def __init__(
        self,
        message: str,
        *,
        coordinate: Optional[str] = None,
        **kwargs: Any,
    ) -> None:
        super().__init__(message, **kwargs)

        self.coordinate = coordinate
        if coordinate is not None:
            self.details["artifact"] = coordinate


class FileOperationError(PomKeeperError):
    """Raised when file system operations fail.

    Args:
        message: Error description.
        file_path: Path to the file involved.
        operation: Operation being performed (read/validate).
        original_error: Original exception that triggered this error.
    """

    __slots__ = ("file_path", "operation", "original_error")

    def __init__(
        self,
        message: str,
        *,
        file_path: Optional[str] = None,
        operation: Optional[str] = None,
        original_error: Optional[Exception] = None,
    ) -> None:
        details: MutableMapping[str, Any] = {}
        _add_if(details, "path", file_path)
        _add_if(details, "operation", operation)
        _add_if(
            details,
            "original_error",
            str(original_error) if original_error else None,
        )

        super().__init__(message, details)

        self.file_path = file_path
        self.operation = operation
        self.original_error = original_error


class ConfigError(PomKeeperError):
    """Raised when a configuration file is unreadable or invalid.

    Args:
        message: Error description.
        config_path: Path to the configuration file.
        option: Name of the offending option, if any.
    """

    __slots__ = ("config_path", "option")

    def __init__(
        self,
        message: str,
        *,
        config_path: Optional[str] = None,
        option: Optional[str] = None,
    ) -> None:
        details: MutableMapping[str, Any] = {}
        _add_if(details, "config", config_path)
        _add_if(details, "option", option)

        super().__init__(message, details)

        self.config_path = config_path
        self.option = option
