"""Case file CLI commands."""

from pathlib import Path

import click

from tlfusion.cli.imports import effective_settings, files_argument, load_workspace, mapping_option, strict_option
from tlfusion.cli.output import OutputFormatter
from tlfusion.core import logging
from tlfusion.core.case import CaseManager
from tlfusion.core.errors import TlfusionError
from tlfusion.core.workspace import Workspace
from tlfusion.normalizer.lanes import determine_lane


@click.group()
def case() -> None:
    """Save and inspect case files."""
    pass


@case.command()
@files_argument
@click.option(
    "--output",
    "-o",
    "output_path",
    required=True,
    type=click.Path(dir_okay=False, path_type=Path),
    help="Case file to write",
)
@strict_option
@mapping_option
@click.pass_context
def save(
    ctx: click.Context,
    files: tuple[Path, ...],
    output_path: Path,
    strict_timestamps: bool | None,
    mapping: Path | None,
) -> None:
    """Import event logs and save them as a case file."""
    formatter: OutputFormatter = ctx.obj["formatter"]

    try:
        settings = effective_settings(ctx, strict_timestamps, mapping)
        workspace = load_workspace(settings, files)
        case_file = CaseManager().save(workspace.events, output_path)
        logging.info(f"Case saved to {output_path}", events=len(workspace))
        formatter.output(
            {
                "path": str(output_path),
                "metadata": case_file.metadata.model_dump(mode="json", by_alias=True),
            }
        )
    except TlfusionError as e:
        formatter.error(e.to_structured_error())
        ctx.exit(1)


@case.command()
@click.argument("case_path", type=click.Path(dir_okay=False, path_type=Path))
@click.option("--search", "-s", "query", default=None, help="Only show events matching this text")
@click.pass_context
def show(ctx: click.Context, case_path: Path, query: str | None) -> None:
    """List the events of a case file."""
    formatter: OutputFormatter = ctx.obj["formatter"]

    try:
        case_file = CaseManager().load(case_path)
        workspace = Workspace.from_case(case_file)
        events = workspace.search(query) if query else workspace.events
        logging.info(f"Loaded case with {len(workspace)} events", shown=len(events))

        records = []
        for event in events:
            record = event.to_json_dict()
            record["lane"] = int(determine_lane(event))
            records.append(record)
        formatter.events(records)
    except TlfusionError as e:
        formatter.error(e.to_structured_error())
        ctx.exit(1)
