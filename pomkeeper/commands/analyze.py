"""Analyze command implementation for pomkeeper.

Reads a ``pom.xml``, resolves the effective version of every declared
dependency and compares it with the latest release on Maven Central.

The command wires together the core components:

1. **PomModelExtractor** parses the descriptor.
2. **ManagedVersionResolver** resolves versions through properties, the
   parent, ``dependencyManagement`` and (optionally) Maven itself.
3. **MavenCentralDataStore** fetches latest versions, at most once per
   artifact.
4. **PomAnalyzer** assembles the report.

Typical usage::

    # Report every dependency
    $ pomkeeper analyze pom.xml

    # Ask Maven for BOM-managed versions, show only outdated dependencies
    $ pomkeeper analyze pom.xml --project-dir . --outdated-only

    # Machine-readable JSON output
    $ pomkeeper analyze pom.xml --format json > report.json
"""

from __future__ import annotations

import sys
import json
import click
import asyncio
from pathlib import Path
from typing import Any, Dict, List, Optional

from rich.markup import escape

from pomkeeper.config import PomKeeperConfig
from pomkeeper.constants import NON_PRIMARY_SCOPES
from pomkeeper.context import PomKeeperContext, pass_context
from pomkeeper.core import (
    ManagedVersionResolver,
    MavenCentralDataStore,
    MavenCommandResolver,
    PomAnalyzer,
)
from pomkeeper.exceptions import PomKeeperError
from pomkeeper.models import AnalysisResult, ResolvedDependency
from pomkeeper.utils import (
    HTTPClient,
    colorize_status,
    colorize_update_type,
    get_logger,
    get_raw_console,
    locate_pom,
    print_error,
    print_success,
    print_table,
    print_warning,
    safe_read_file,
    validate_path,
)

logger = get_logger("commands.analyze")


@click.command()
@click.argument(
    "pom",
    type=click.Path(exists=True, path_type=Path),
    default="pom.xml",
)
@click.option(
    "--project-dir",
    "-d",
    type=click.Path(exists=True, file_okay=False, path_type=Path),
    help="Maven project directory; enables resolution through Maven itself.",
)
@click.option(
    "--exclude-non-primary",
    is_flag=True,
    help="Skip provided, test and optional dependencies.",
)
@click.option(
    "--no-external",
    is_flag=True,
    help="Never invoke Maven, even when --project-dir is given.",
)
@click.option(
    "--outdated-only",
    is_flag=True,
    help="Show only outdated dependencies.",
)
@click.option(
    "--format",
    "-f",
    type=click.Choice(["table", "simple", "json"], case_sensitive=False),
    default="table",
    help="Output format.",
)
@pass_context
def analyze(
    ctx: PomKeeperContext,
    pom: Path,
    project_dir: Optional[Path],
    exclude_non_primary: bool,
    no_external: bool,
    outdated_only: bool,
    format: str,
) -> None:
    """Report resolved versions and drift for a POM's dependencies.

    POM may be a ``pom.xml`` file or a directory containing one.

    Exits with status 1 when at least one dependency is outdated or an
    error occurred, 0 otherwise.
    """
    try:
        has_outdated = asyncio.run(
            _analyze_async(
                ctx,
                pom,
                project_dir,
                include_non_primary=ctx.config.include_non_primary and not exclude_non_primary,
                external=ctx.config.external_resolution and not no_external,
                outdated_only=outdated_only,
                format=format.lower(),
            )
        )
        sys.exit(1 if has_outdated else 0)

    except PomKeeperError as e:
        print_error(f"{e}")
        sys.exit(1)


# ---------------------------------------------------------------------------
# Async orchestration
# ---------------------------------------------------------------------------


def build_resolver(config: PomKeeperConfig, external: bool) -> ManagedVersionResolver:
    """Create the version resolver described by *config*."""
    maven = None
    if external:
        maven = MavenCommandResolver(
            command=config.maven_command,
            timeout=config.command_timeout,
        )
    return ManagedVersionResolver(
        external=maven,
        inherit_group_prefixes=config.inherit_group_prefixes,
    )


async def _analyze_async(
    ctx: PomKeeperContext,
    pom: Path,
    project_dir: Optional[Path],
    *,
    include_non_primary: bool,
    external: bool,
    outdated_only: bool,
    format: str,
) -> bool:
    """Run the analysis and render it.

    Returns:
        ``True`` if any dependency is outdated.
    """
    show_progress = format == "table" or ctx.verbose > 0

    pom_path = locate_pom(pom)
    directory = validate_path(project_dir) if project_dir else None
    if directory is not None and not external:
        logger.info("External resolution disabled; ignoring %s", directory)
        directory = None

    logger.info("Analyzing %s...", pom_path)
    text = safe_read_file(pom_path)

    async with HTTPClient() as http:
        analyzer = PomAnalyzer(
            resolver=build_resolver(ctx.config, external),
            latest_lookup=MavenCentralDataStore(http),
        )
        result = await analyzer.analyze(
            text,
            directory=directory,
            include_non_primary=include_non_primary,
            source=str(pom_path),
        )

    dependencies = result.get_outdated() if outdated_only else list(result.dependencies)

    if not dependencies:
        if show_progress:
            if outdated_only:
                print_success("All dependencies are up to date!")
            else:
                print_warning("No dependencies declared")
        if format == "json":
            _display_json(result, dependencies)
        return result.outdated > 0

    if format == "table":
        _display_table(result, dependencies)
    elif format == "simple":
        _display_simple(dependencies)
    else:  # json
        _display_json(result, dependencies)

    if show_progress:
        _display_summary(result)

    return result.outdated > 0


# ---------------------------------------------------------------------------
# Display renderers
# ---------------------------------------------------------------------------


def _display_table(result: AnalysisResult, dependencies: List[ResolvedDependency]) -> None:
    """Render dependencies as a Rich table.

    Example::

        ┏━━━━━━━━━━━━┳━━━━━━━━━━━━━━━━━━━━━━━━━━┳━━━━━━━━━━━━━━━━━━━┳━━━━━━━━┓
        ┃ Status     ┃ Dependency               ┃ Current           ┃ Latest ┃
        ┡━━━━━━━━━━━━╇━━━━━━━━━━━━━━━━━━━━━━━━━━╇━━━━━━━━━━━━━━━━━━━╇━━━━━━━━┩
        │ outdated   │ org.slf4j:slf4j-api      │ 1.7.36            │ 2.0.9  │
        │ up-to-date │ com.google.guava:guava   │ 32.1.3-jre        │ ...    │
        └────────────┴──────────────────────────┴───────────────────┴────────┘
    """
    data = [_create_table_row(dep) for dep in dependencies]

    column_styles: Dict[str, Dict[str, Any]] = {
        "Status": {"justify": "center", "no_wrap": True},
        "Dependency": {"style": "bold cyan", "no_wrap": True},
        "Scope": {"style": "dim"},
        "Current": {"justify": "left"},
        "Latest": {"justify": "center", "style": "bold green"},
        "Update Type": {"justify": "center"},
        "Behind (est.)": {"justify": "right"},
    }

    print_table(
        data,
        title=f"Dependencies of {result.project}" if result.project else "Dependencies",
        caption=f"Parent: {result.parent}" if result.parent else None,
        column_styles=column_styles,
        row_styler=lambda row: "dim" if row["Scope"] in NON_PRIMARY_SCOPES else None,
    )


def _create_table_row(dep: ResolvedDependency) -> Dict[str, str]:
    dash = "[dim]-[/dim]"
    update_type = dep.update_type

    return {
        "Status": colorize_status(dep.status),
        "Dependency": escape(dep.key),
        "Scope": dep.scope,
        "Current": escape(dep.outcome.display_version),
        "Latest": escape(dep.drift.latest_version) if dep.drift.latest_version else dash,
        "Update Type": colorize_update_type(update_type) if update_type else dash,
        "Behind (est.)": f"~{dep.drift.releases_behind}" if dep.drift.is_outdated else dash,
    }


def _display_simple(dependencies: List[ResolvedDependency]) -> None:
    """Render one plain line per dependency.

    Example::

        [OUTDATED] org.slf4j:slf4j-api            1.7.36     -> 2.0.9
        [BOM-MANAGED] org.springframework.boot:spring-boot-starter-web 3.2.0 (from parent) -> 3.2.1
    """
    console = get_raw_console()

    for dep in dependencies:
        status, current, latest = dep.get_status_summary()
        line = f"[{status.upper()}] {dep.key:30} {current:10} -> {latest}"
        console.print(escape(line), highlight=False)


def _display_json(result: AnalysisResult, dependencies: List[ResolvedDependency]) -> None:
    """Render the report as JSON; ``dependencies`` honours ``--outdated-only``."""
    data = result.to_json()
    data["dependencies"] = [dep.to_json() for dep in dependencies]
    print(json.dumps(data, indent=2))


def _display_summary(result: AnalysisResult) -> None:
    console = get_raw_console()
    console.print(
        f"\nTotal: {result.total} | Outdated: {result.outdated} | "
        f"Up to date: {result.up_to_date} | Unidentified: {result.unidentified}"
    )
    if result.outdated:
        print_warning(f"{result.outdated} dependency(ies) are outdated")
    else:
        print_success("No outdated dependencies found")
