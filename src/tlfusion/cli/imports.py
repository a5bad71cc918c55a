"""Import and digest CLI commands."""

from pathlib import Path
from typing import Any

import click

from tlfusion.cli.output import OutputFormatter
from tlfusion.core.errors import TlfusionError
from tlfusion.core.settings import Settings
from tlfusion.core.workspace import Workspace
from tlfusion.evidence.digest import DigestEngine, HashlibHasher
from tlfusion.normalizer.fields import DEFAULT_FIELD_MAPPING, load_field_mapping
from tlfusion.normalizer.lanes import determine_lane
from tlfusion.normalizer.timeline import TimelineNormalizer


def build_normalizer(settings: Settings) -> TimelineNormalizer:
    """Create a normalizer from effective settings."""
    mapping = DEFAULT_FIELD_MAPPING
    if settings.mapping_file is not None:
        mapping = load_field_mapping(settings.mapping_file)
    return TimelineNormalizer(
        field_mapping=mapping,
        strict_timestamps=settings.strict_timestamps,
    )


def load_workspace(settings: Settings, files: tuple[Path, ...]) -> Workspace:
    """Import every file into a fresh workspace, in argument order."""
    workspace = Workspace(normalizer=build_normalizer(settings))
    for path in files:
        workspace.import_file(path)
    return workspace


def effective_settings(
    ctx: click.Context,
    strict_timestamps: bool | None = None,
    mapping: Path | None = None,
) -> Settings:
    settings: Settings = ctx.obj["settings"]
    return settings.merged(strict_timestamps=strict_timestamps, mapping_file=mapping)


strict_option = click.option(
    "--strict-timestamps/--lenient-timestamps",
    default=None,
    help="Fail on unparseable timestamps instead of substituting the current time",
)

mapping_option = click.option(
    "--mapping",
    "-m",
    type=click.Path(exists=True, dir_okay=False, path_type=Path),
    default=None,
    help="YAML file with extra CSV column candidates",
)

files_argument = click.argument(
    "files",
    nargs=-1,
    required=True,
    type=click.Path(exists=True, dir_okay=False, path_type=Path),
)


@click.command("import")
@files_argument
@strict_option
@mapping_option
@click.option("--lanes", is_flag=True, default=False, help="Include the display lane of each event")
@click.option("--hash", "with_hash", is_flag=True, default=False, help="Include each event's digest")
@click.pass_context
def import_events(
    ctx: click.Context,
    files: tuple[Path, ...],
    strict_timestamps: bool | None,
    mapping: Path | None,
    lanes: bool,
    with_hash: bool,
) -> None:
    """Normalize JSON or CSV event logs into canonical events."""
    formatter: OutputFormatter = ctx.obj["formatter"]

    try:
        settings = effective_settings(ctx, strict_timestamps, mapping)
        workspace = load_workspace(settings, files)
        engine = DigestEngine(HashlibHasher(settings.hash_algorithm)) if with_hash else None

        records: list[dict[str, Any]] = []
        for event in workspace.events:
            record = event.to_json_dict()
            if lanes or formatter.is_human():
                record["lane"] = int(determine_lane(event))
            if engine is not None:
                record["hash"] = engine.hash_event_sync(event)
            records.append(record)

        formatter.events(records)
    except TlfusionError as e:
        formatter.error(e.to_structured_error())
        ctx.exit(1)


@click.command()
@files_argument
@strict_option
@mapping_option
@click.option("--per-event", is_flag=True, default=False, help="Also list every event digest")
@click.pass_context
def digest(
    ctx: click.Context,
    files: tuple[Path, ...],
    strict_timestamps: bool | None,
    mapping: Path | None,
    per_event: bool,
) -> None:
    """Compute the order-sensitive digest of the imported events.

    Generated ids are random per import, so digests are only reproducible
    for inputs that carry their own ids.
    """
    formatter: OutputFormatter = ctx.obj["formatter"]

    try:
        settings = effective_settings(ctx, strict_timestamps, mapping)
        workspace = load_workspace(settings, files)
        engine = DigestEngine(HashlibHasher(settings.hash_algorithm))

        result: dict[str, Any] = {
            "algorithm": settings.hash_algorithm,
            "event_count": len(workspace),
            "digest": engine.hash_event_array_sync(workspace.events),
        }
        if per_event:
            result["events"] = [
                {"id": event.id, "hash": engine.hash_event_sync(event)}
                for event in workspace.events
            ]
        formatter.output(result)
    except TlfusionError as e:
        formatter.error(e.to_structured_error())
        ctx.exit(1)
