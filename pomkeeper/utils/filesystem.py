"""
Filesystem utilities for pomkeeper.

This module provides safe helpers for locating and reading POM files. All
filesystem errors are normalized to ``FileOperationError``.
"""

from __future__ import annotations

from pathlib import Path
from typing import Optional, Union

from pomkeeper.utils.logger import get_logger
from pomkeeper.exceptions import FileOperationError
from pomkeeper.constants import MAX_FILE_SIZE, POM_FILE_NAME


logger = get_logger("filesystem")

PathLike = Union[str, Path]


def _validated_file(path: Path) -> Path:
    """Ensure *path* is an existing regular file and resolve it."""
    if not path.exists():
        raise FileOperationError(
            f"File not found: {path}",
            file_path=str(path),
            operation="read",
        )
    if not path.is_file():
        raise FileOperationError(
            f"Not a file: {path}",
            file_path=str(path),
            operation="read",
        )
    return path.resolve()


def locate_pom(path: PathLike) -> Path:
    """Return the POM file for *path*.

    A directory is taken to mean its ``pom.xml``.
    """
    candidate = Path(path).expanduser()
    if candidate.is_dir():
        candidate = candidate / POM_FILE_NAME
        logger.debug("Using %s", candidate)
    return _validated_file(candidate)


def safe_read_file(
    file_path: PathLike,
    *,
    max_size: Optional[int] = MAX_FILE_SIZE,
    encoding: str = "utf-8",
) -> str:
    """Safely read a text file with optional size limits.

    Args:
        file_path: Path to the file.
        max_size: Maximum allowed file size in bytes (None disables limit).
        encoding: Text encoding.

    Returns:
        File contents as a string.
    """
    path = _validated_file(Path(file_path))
    size = path.stat().st_size

    if max_size is not None and size > max_size:
        raise FileOperationError(
            f"File too large: {size} bytes (max {max_size})",
            file_path=str(path),
            operation="read",
        )

    try:
        return path.read_text(encoding=encoding)
    except (OSError, UnicodeDecodeError) as exc:
        raise FileOperationError(
            f"Failed to read file: {exc}",
            file_path=str(path),
            operation="read",
            original_error=exc,
        ) from exc


def validate_path(
    path: PathLike,
    *,
    base_dir: Optional[PathLike] = None,
) -> Path:
    """Resolve and validate a filesystem path.

    If ``base_dir`` is provided, the resolved path must be within it.
    """
    resolved = Path(path).expanduser().resolve(strict=False)

    if base_dir:
        base = Path(base_dir).resolve(strict=False)
        try:
            resolved.relative_to(base)
        except ValueError:
            raise FileOperationError(
                f"Path outside allowed base directory: {resolved}",
                file_path=str(path),
                operation="validate",
            )

    return resolved
