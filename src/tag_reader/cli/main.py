"""Command-line interface for the tag reader.

This is the main entry point that delegates to command modules.
"""

from pathlib import Path
from typing import Any, Optional

import click

from ..service import TagReaderService
from ..utils.logging_config import (
    configure_third_party_loggers,
    set_log_level,
    setup_logging,
)
from .commands import new_command, removed_command, scan_command, tags_command


@click.group()
@click.option(
    "--log-level",
    default="WARNING",
    type=click.Choice(["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]),
    help="Set logging level",
)
@click.option("--log-file", type=click.Path(), help="Log to file")
@click.option(
    "--verbose", "-v", is_flag=True, help="Debug output from tag reader modules only"
)
@click.pass_context
def cli(ctx: Any, log_level: str, log_file: Optional[str], verbose: bool) -> None:
    """Audio Tag Reader.

    Scan local music folders and read tags, technical metadata and artwork.
    """
    setup_logging(log_level=log_level, log_file=Path(log_file) if log_file else None)
    configure_third_party_loggers()
    if verbose:
        set_log_level("DEBUG")

    # Tests and embedding hosts may inject their own service
    if ctx.obj is None:
        ctx.obj = TagReaderService()


cli.add_command(tags_command)
cli.add_command(scan_command)
cli.add_command(new_command)
cli.add_command(removed_command)


if __name__ == "__main__":
    cli()
