"""Story CLI commands."""

import asyncio
from pathlib import Path

import click

from tlfusion.cli.output import OutputFormatter
from tlfusion.core.case import CaseManager
from tlfusion.core.errors import StoryError, TlfusionError
from tlfusion.core.workspace import Workspace
from tlfusion.evidence.digest import DigestEngine, HashlibHasher
from tlfusion.evidence.story import Story


@click.group()
def story() -> None:
    """Assemble tamper-evident stories from case events."""
    pass


async def _assemble(
    workspace: Workspace,
    event_ids: tuple[str, ...],
    notes: dict[str, str],
    author: str | None,
    engine: DigestEngine,
    expected: str | None,
) -> dict:
    narrative = Story(author=author, engine=engine)
    for event_id in event_ids:
        event = workspace.get(event_id)
        if event is None:
            raise StoryError("Event not found in case", event_id=event_id)
        await narrative.add(event, note=notes.get(event_id, ""))

    report = await narrative.to_report()
    if expected is not None:
        report["verified"] = await narrative.verify(expected)
    return report


def _parse_notes(values: tuple[str, ...]) -> dict[str, str]:
    notes = {}
    for value in values:
        event_id, sep, note = value.partition("=")
        if not sep:
            raise click.BadParameter(f"expected ID=TEXT, got {value!r}", param_hint="--note")
        notes[event_id] = note
    return notes


@story.command()
@click.argument("case_path", type=click.Path(dir_okay=False, path_type=Path))
@click.option("--event", "-e", "event_ids", multiple=True, required=True, help="Event id, in story order (repeatable)")
@click.option("--note", "-n", "notes", multiple=True, help="Investigator note as ID=TEXT (repeatable)")
@click.option("--author", "-a", default=None, help="Story author")
@click.option("--expect", default=None, help="Previously recorded story digest to verify against")
@click.pass_context
def build(
    ctx: click.Context,
    case_path: Path,
    event_ids: tuple[str, ...],
    notes: tuple[str, ...],
    author: str | None,
    expect: str | None,
) -> None:
    """Build a story from case events and compute its combined digest."""
    formatter: OutputFormatter = ctx.obj["formatter"]
    note_map = _parse_notes(notes)

    try:
        engine = DigestEngine(HashlibHasher(ctx.obj["settings"].hash_algorithm))
        workspace = Workspace.from_case(CaseManager().load(case_path))
        report = asyncio.run(_assemble(workspace, event_ids, note_map, author, engine, expect))
        formatter.output(report)
    except TlfusionError as e:
        formatter.error(e.to_structured_error())
        ctx.exit(1)

    if report.get("verified") is False:
        ctx.exit(1)
