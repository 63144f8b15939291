"""Validate command implementation for pomkeeper.

Checks that a file is a well-formed POM that pomkeeper can analyze, and
prints a short description of what it declares::

    $ pomkeeper validate pom.xml
    [OK] pom.xml is a valid POM (com.acme:shop:1.0.0)
"""

from __future__ import annotations

import sys
import click
from pathlib import Path

from pomkeeper.context import PomKeeperContext, pass_context
from pomkeeper.core import PomModelExtractor
from pomkeeper.exceptions import MalformedDescriptor, PomKeeperError
from pomkeeper.utils import (
    get_logger,
    get_raw_console,
    locate_pom,
    print_error,
    print_success,
    safe_read_file,
)

logger = get_logger("commands.validate")


@click.command()
@click.argument(
    "pom",
    type=click.Path(exists=True, path_type=Path),
    default="pom.xml",
)
@pass_context
def validate(ctx: PomKeeperContext, pom: Path) -> None:
    """Check that POM is a well-formed Maven descriptor.

    Exits with status 1 when it is not.
    """
    try:
        pom_path = locate_pom(pom)
        model = PomModelExtractor().extract(safe_read_file(pom_path), source=str(pom_path))
    except MalformedDescriptor as e:
        print_error(f"{pom} is not a valid POM: {e}")
        sys.exit(1)
    except PomKeeperError as e:
        print_error(f"{e}")
        sys.exit(1)

    coordinates = ":".join(
        part for part in (model.group_id, model.artifact_id, model.version) if part
    )
    print_success(f"{pom} is a valid POM ({coordinates or 'no coordinates'})")

    if ctx.verbose > 0:
        console = get_raw_console()
        console.print(f"  Parent:       {model.parent or '-'}", highlight=False)
        console.print(f"  Dependencies: {len(model.dependencies)}", highlight=False)
        console.print(f"  Managed:      {len(model.managed_versions)}", highlight=False)
        console.print(f"  Properties:   {len(model.properties)}", highlight=False)
