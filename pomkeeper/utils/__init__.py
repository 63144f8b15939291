"""
Utility helpers for pomkeeper.

This package provides reusable utilities used across pomkeeper, including:

- Console output helpers (Rich-based)
- Logging configuration and retrieval
- Filesystem safety helpers
- Async HTTP client utilities
- Version comparison helpers

Only symbols listed in ``__all__`` are considered part of the public API.
"""

from __future__ import annotations

# ---------------------------------------------------------------------------
# Filesystem utilities
# ---------------------------------------------------------------------------

from pomkeeper.utils.filesystem import (
    locate_pom,
    safe_read_file,
    validate_path,
)

# ---------------------------------------------------------------------------
# Logging utilities
# ---------------------------------------------------------------------------

from pomkeeper.utils.logger import (
    disable_logging,
    get_dependency_logger,
    get_logger,
    is_logging_configured,
    setup_logging,
)

# ---------------------------------------------------------------------------
# Console utilities
# ---------------------------------------------------------------------------

from pomkeeper.utils.console import (
    colorize_status,
    colorize_update_type,
    get_raw_console,
    print_error,
    print_success,
    print_table,
    print_warning,
    reconfigure_console,
)

# ---------------------------------------------------------------------------
# HTTP utilities
# ---------------------------------------------------------------------------

from pomkeeper.utils.http import HTTPClient

# ---------------------------------------------------------------------------
# Version utilities
# ---------------------------------------------------------------------------

from pomkeeper.utils.version_utils import (
    clean_version,
    compare_versions,
    get_update_type,
)

# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------

__all__ = [
    # Console
    "print_error",
    "print_table",
    "print_success",
    "print_warning",
    "get_raw_console",
    "reconfigure_console",
    "colorize_status",
    "colorize_update_type",
    # Logging
    "get_logger",
    "get_dependency_logger",
    "setup_logging",
    "disable_logging",
    "is_logging_configured",
    # Filesystem
    "locate_pom",
    "safe_read_file",
    "validate_path",
    # HTTP
    "HTTPClient",
    # Version utilities
    "clean_version",
    "compare_versions",
    "get_update_type",
]
