"""Configuration file loader for pomkeeper.

Handles discovery, loading, parsing, and validation of configuration files.
Supports two formats:

- ``pomkeeper.toml``: settings under ``[pomkeeper]`` table
- ``pyproject.toml``: settings under ``[tool.pomkeeper]`` table

Discovery order:

1. Explicit path from ``--config`` or ``POMKEEPER_CONFIG``
2. ``pomkeeper.toml`` in current directory
3. ``pyproject.toml`` with ``[tool.pomkeeper]`` section

Configuration precedence: defaults < config file < CLI args.

Example (``pomkeeper.toml``)::

    [pomkeeper]
    include_non_primary = false
    maven_command = "./mvnw"
    command_timeout = 300
    inherit_group_prefixes = ["org.springframework.boot", "io.quarkus"]
"""

from __future__ import annotations

import tomli as tomllib
from pathlib import Path
from typing import Any, Dict, List, Optional
from dataclasses import dataclass, field

from pomkeeper.exceptions import ConfigError
from pomkeeper.utils.logger import get_logger
from pomkeeper.constants import (
    DEFAULT_COMMAND_TIMEOUT,
    DEFAULT_EXTERNAL_RESOLUTION,
    DEFAULT_INCLUDE_NON_PRIMARY,
    DEFAULT_INHERIT_GROUP_PREFIXES,
    DEFAULT_MAVEN_COMMAND,
)

logger = get_logger("config")


@dataclass
class PomKeeperConfig:
    """Parsed and validated pomkeeper configuration.

    All fields have defaults, so empty config files are valid.

    Attributes:
        include_non_primary: Keep ``provided``/``test``/optional
            dependencies in the analysis.
        external_resolution: Allow invoking Maven when a project directory
            is supplied.
        maven_command: Executable used for external resolution.
        command_timeout: Timeout in seconds for each Maven invocation.
        inherit_group_prefixes: Group-id prefixes whose versions are
            inherited from the parent POM.
        source_path: Path to loaded config file, or ``None`` if using defaults.
    """

    include_non_primary: bool = DEFAULT_INCLUDE_NON_PRIMARY
    external_resolution: bool = DEFAULT_EXTERNAL_RESOLUTION
    maven_command: str = DEFAULT_MAVEN_COMMAND
    command_timeout: int = DEFAULT_COMMAND_TIMEOUT
    inherit_group_prefixes: List[str] = field(
        default_factory=lambda: list(DEFAULT_INHERIT_GROUP_PREFIXES)
    )

    # Metadata (not a user-facing option)
    source_path: Optional[Path] = field(default=None, repr=False)

    def to_log_dict(self) -> Dict[str, Any]:
        """Return configuration as dictionary for debug logging.

        Excludes ``source_path`` metadata.
        """
        return {
            "include_non_primary": self.include_non_primary,
            "external_resolution": self.external_resolution,
            "maven_command": self.maven_command,
            "command_timeout": self.command_timeout,
            "inherit_group_prefixes": list(self.inherit_group_prefixes),
        }


def discover_config_file(explicit_path: Optional[Path] = None) -> Optional[Path]:
    """Find the configuration file to load.

    Args:
        explicit_path: Explicit config path. If provided, must exist.

    Returns:
        Resolved path to config file, or ``None`` if not found.

    Raises:
        ConfigError: Explicit path provided but does not exist.
    """
    if explicit_path is not None:
        resolved = explicit_path.resolve()
        if not resolved.is_file():
            raise ConfigError(
                f"Configuration file not found: {explicit_path}",
                config_path=str(explicit_path),
            )
        logger.debug("Using explicit config: %s", resolved)
        return resolved

    cwd = Path.cwd()

    pomkeeper_toml = cwd / "pomkeeper.toml"
    if pomkeeper_toml.is_file():
        logger.debug("Found pomkeeper.toml: %s", pomkeeper_toml)
        return pomkeeper_toml

    pyproject_toml = cwd / "pyproject.toml"
    if pyproject_toml.is_file():
        if _pyproject_has_pomkeeper_section(pyproject_toml):
            logger.debug("Found [tool.pomkeeper] in pyproject.toml: %s", pyproject_toml)
            return pyproject_toml

    logger.debug("No configuration file found")
    return None


def _pyproject_has_pomkeeper_section(path: Path) -> bool:
    """Check if pyproject.toml contains a [tool.pomkeeper] section.

    Parse errors are ignored so that an unrelated broken pyproject.toml
    does not prevent running with defaults.
    """
    try:
        raw = _read_toml(path)
    except ConfigError:
        return False
    return "pomkeeper" in raw.get("tool", {})


def load_config(config_path: Optional[Path] = None) -> PomKeeperConfig:
    """Load and validate pomkeeper configuration.

    Args:
        config_path: Explicit path to config file. If ``None``, uses
            auto-discovery (see :func:`discover_config_file`).

    Returns:
        Validated :class:`PomKeeperConfig` with values from file or defaults.

    Raises:
        ConfigError: File cannot be parsed, has unknown keys, or invalid values.
    """
    resolved = discover_config_file(config_path)

    if resolved is None:
        logger.debug("No config file found, using defaults")
        return PomKeeperConfig()

    logger.info("Loading configuration from %s", resolved)
    raw = _read_toml(resolved)

    if resolved.name == "pyproject.toml":
        section = raw.get("tool", {}).get("pomkeeper", {})
    else:
        section = raw.get("pomkeeper", {})

    if not section:
        logger.debug("Config file found but no pomkeeper section, using defaults")
        return PomKeeperConfig(source_path=resolved)

    config = _parse_section(section, config_path=str(resolved))
    config.source_path = resolved

    logger.debug("Loaded configuration: %s", config.to_log_dict())
    return config


def _read_toml(path: Path) -> Dict[str, Any]:
    """Read and parse a TOML file.

    Raises:
        ConfigError: File cannot be read or is not valid TOML.
    """
    try:
        with open(path, "rb") as fh:
            return tomllib.load(fh)
    except tomllib.TOMLDecodeError as exc:
        raise ConfigError(
            f"Invalid TOML in {path.name}: {exc}",
            config_path=str(path),
        ) from exc
    except OSError as exc:
        raise ConfigError(
            f"Cannot read configuration file {path}: {exc}",
            config_path=str(path),
        ) from exc


def _require_bool(section: Dict[str, Any], key: str, config_path: str) -> bool:
    val = section[key]
    if not isinstance(val, bool):
        raise ConfigError(
            f"{key} must be a boolean, got {type(val).__name__}",
            config_path=config_path,
            option=key,
        )
    return val


def _parse_section(
    section: Dict[str, Any],
    *,
    config_path: str,
) -> PomKeeperConfig:
    """Parse and validate the pomkeeper configuration section.

    Rejects unknown keys and type mismatches.

    Raises:
        ConfigError: Unknown keys or incorrect types.
    """
    config = PomKeeperConfig()

    known_top = {
        "include_non_primary",
        "external_resolution",
        "maven_command",
        "command_timeout",
        "inherit_group_prefixes",
    }

    unknown_top = set(section.keys()) - known_top
    if unknown_top:
        raise ConfigError(
            f"Unknown configuration keys: {', '.join(sorted(unknown_top))}",
            config_path=config_path,
        )

    if "include_non_primary" in section:
        config.include_non_primary = _require_bool(
            section, "include_non_primary", config_path
        )

    if "external_resolution" in section:
        config.external_resolution = _require_bool(
            section, "external_resolution", config_path
        )

    if "maven_command" in section:
        val = section["maven_command"]
        if not isinstance(val, str) or not val.strip():
            raise ConfigError(
                "maven_command must be a non-empty string",
                config_path=config_path,
                option="maven_command",
            )
        config.maven_command = val.strip()

    if "command_timeout" in section:
        val = section["command_timeout"]
        # bool is a subclass of int; reject it explicitly
        if isinstance(val, bool) or not isinstance(val, int) or val <= 0:
            raise ConfigError(
                f"command_timeout must be a positive integer, got {val!r}",
                config_path=config_path,
                option="command_timeout",
            )
        config.command_timeout = val

    if "inherit_group_prefixes" in section:
        val = section["inherit_group_prefixes"]
        if not isinstance(val, list) or not all(isinstance(v, str) for v in val):
            raise ConfigError(
                "inherit_group_prefixes must be a list of strings",
                config_path=config_path,
                option="inherit_group_prefixes",
            )
        config.inherit_group_prefixes = [v.strip() for v in val if v.strip()]

    return config
