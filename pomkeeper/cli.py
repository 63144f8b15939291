"""
Command-line interface for pomkeeper.

This module provides the main CLI entry point and handles global options,
configuration loading, and command registration.
"""

from __future__ import annotations

import os
import sys
import logging
from pathlib import Path
from typing import Optional

import click

from pomkeeper.config import load_config
from pomkeeper.__version__ import __version__
from pomkeeper.context import PomKeeperContext
from pomkeeper.exceptions import ConfigError, PomKeeperError
from pomkeeper.utils.logger import get_logger, setup_logging
from pomkeeper.utils.console import print_error, print_warning, reconfigure_console

logger = get_logger("cli")


@click.group(context_settings={"help_option_names": ["-h", "--help"]})
@click.option(
    "--config",
    "-c",
    type=click.Path(exists=True, dir_okay=False, path_type=Path),
    help="Path to configuration file.",
    envvar="POMKEEPER_CONFIG",
)
@click.option(
    "--verbose",
    "-v",
    count=True,
    help="Increase verbosity (can be repeated: -v, -vv).",
)
@click.option(
    "--color/--no-color",
    default=True,
    help="Enable or disable colored output.",
    envvar="POMKEEPER_COLOR",
)
@click.version_option(
    version=__version__,
    prog_name="pomkeeper",
    message="%(prog)s %(version)s",
)
@click.pass_context
def cli(
    ctx: click.Context,
    config: Optional[Path],
    verbose: int,
    color: bool,
) -> None:
    """pomkeeper: Maven dependency resolution and version drift analysis.

    \b
    Available commands:
      pomkeeper analyze            Report resolved versions and drift
      pomkeeper validate           Check that a POM is well-formed

    \b
    Examples:
      pomkeeper analyze pom.xml
      pomkeeper analyze pom.xml --project-dir . --outdated-only
      pomkeeper -v validate pom.xml

    Use ``pomkeeper COMMAND --help`` for command-specific options.
    """
    # Respect NO_COLOR for logging and console output alike
    if color:
        os.environ.pop("NO_COLOR", None)
    else:
        os.environ["NO_COLOR"] = "1"
    reconfigure_console()

    _configure_logging(verbose)

    try:
        loaded_config = load_config(config)
    except ConfigError as exc:
        print_error(str(exc))
        raise SystemExit(1) from exc

    pomkeeper_ctx = PomKeeperContext()
    pomkeeper_ctx.config_path = config or loaded_config.source_path
    pomkeeper_ctx.color = color
    pomkeeper_ctx.verbose = verbose
    pomkeeper_ctx.config = loaded_config
    ctx.obj = pomkeeper_ctx

    logger.debug("pomkeeper v%s", __version__)
    logger.debug("Config path: %s", pomkeeper_ctx.config_path)
    if loaded_config.source_path:
        logger.debug("Loaded configuration: %s", loaded_config.to_log_dict())
    logger.debug("Verbosity: %s | Color: %s", verbose, color)


def _configure_logging(verbose: int) -> None:
    """Configure logging level based on verbosity flags."""
    if verbose <= 0:
        level = logging.WARNING
    elif verbose == 1:
        level = logging.INFO
    else:
        level = logging.DEBUG

    setup_logging(level=level, verbose=verbose > 1)
    logger.debug("Logging initialized at %s level", logging.getLevelName(level))


# Register CLI subcommands
try:
    from pomkeeper.commands.analyze import analyze
    from pomkeeper.commands.validate import validate

    cli.add_command(analyze)
    cli.add_command(validate)

except ImportError as exc:
    sys.stderr.write(f"FATAL: Failed to import CLI commands: {exc}\n")
    sys.exit(1)


def main() -> int:
    """Main entry point for the pomkeeper CLI.

    Returns:
        Exit code:
            0   Success
            1   Outdated dependencies, or an application error
            2   Usage error (Click)
            130 Interrupted by user (Ctrl+C)
    """
    try:
        cli(standalone_mode=False)
        return 0

    except click.ClickException as exc:
        exc.show()
        return exc.exit_code

    except click.exceptions.Abort:
        print_warning("\nOperation cancelled by user")
        return 130

    except PomKeeperError as exc:
        print_error(str(exc))
        logger.debug(
            "PomKeeperError details: %s",
            exc.details or "<none>",
            exc_info=True,
        )
        return 1

    except KeyboardInterrupt:
        print_warning("\nOperation cancelled by user")
        return 130

    except Exception as exc:
        print_error(f"Unexpected error: {exc}")
        logger.exception("Unhandled exception in CLI")
        return 1


if __name__ == "__main__":
    sys.exit(main())
