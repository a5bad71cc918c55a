"""tlfusion CLI entry point and global options."""

import sys
from pathlib import Path
from typing import Literal

import click

from tlfusion import __version__
from tlfusion.cli.case import case
from tlfusion.cli.imports import digest, import_events
from tlfusion.cli.output import OutputFormat, OutputFormatter, set_output_format
from tlfusion.cli.story import story
from tlfusion.core.errors import TlfusionError, handle_error
from tlfusion.core.logging import configure_logging
from tlfusion.core.settings import load_settings


@click.group()
@click.option(
    "--format",
    "-f",
    type=click.Choice(["json", "jsonl", "human"]),
    default=None,
    help="Output format (default: json, or the config file's output_format)",
)
@click.option(
    "--verbose",
    "-v",
    is_flag=True,
    default=False,
    help="Enable verbose logging to stderr",
)
@click.option(
    "--quiet",
    "-q",
    is_flag=True,
    default=False,
    help="Suppress informational output",
)
@click.option(
    "--log-format",
    type=click.Choice(["text", "json"]),
    default="text",
    help="Log format for stderr (default: text)",
)
@click.option(
    "--config",
    "-c",
    "config_path",
    type=click.Path(exists=True, dir_okay=False, path_type=Path),
    default=None,
    help="YAML settings file",
)
@click.version_option(version=__version__, prog_name="tlfusion")
@click.pass_context
def cli(
    ctx: click.Context,
    format: OutputFormat | None,
    verbose: bool,
    quiet: bool,
    log_format: Literal["text", "json"],
    config_path: Path | None,
) -> None:
    """tlfusion: normalize forensic event logs into tamper-evident timelines.

    Imports JSON and CSV timeline exports into one canonical event schema,
    classifies events into display lanes and computes order-sensitive
    SHA-256 digests for stories.
    """
    configure_logging(log_format=log_format, quiet=quiet, verbose=verbose)

    try:
        settings = load_settings(config_path)
    except TlfusionError as e:
        handle_error(e)

    if format is not None:
        settings = settings.merged(output_format=format)

    set_output_format(settings.output_format)
    ctx.ensure_object(dict)
    ctx.obj = {
        "settings": settings,
        "formatter": OutputFormatter(format=settings.output_format),
    }


cli.add_command(import_events)
cli.add_command(digest)
cli.add_command(case)
cli.add_command(story)


EXIT_ERROR = 1


def main() -> None:
    """Main entry point."""
    try:
        cli()
    except Exception as e:
        click.echo(f"Error: {e}", err=True)
        sys.exit(EXIT_ERROR)


if __name__ == "__main__":
    main()
