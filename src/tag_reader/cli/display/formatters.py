"""Display formatters and UI helpers for CLI."""

import json
import logging
from typing import Any, List, Sequence

import click
from rich.console import Console
from rich.table import Table

from ...core.catalog import CatalogDiff
from ...models import AudioFileRecord, AudioTags, TagField

console = Console()
logger = logging.getLogger(__name__)

# Longest album art value shown before truncation
ART_PREVIEW_LENGTH = 48


def _preview_art(value: str) -> str:
    if not value:
        return ""
    if value.startswith("file://") or len(value) <= ART_PREVIEW_LENGTH:
        return value
    return f"{value[:ART_PREVIEW_LENGTH]}... ({len(value)} chars)"


def print_json(payload: Any) -> None:
    """Write ``payload`` as JSON to stdout, bypassing rich markup."""
    click.echo(json.dumps(payload, indent=2, ensure_ascii=False))


def display_tags(tags: AudioTags, title: str = "Tags") -> None:
    """Display a tag map as a two column table.

    Args:
        tags: Tag map to show
        title: Table title, usually the file name
    """
    table = Table(title=title, show_header=True)
    table.add_column("Field", style="cyan")
    table.add_column("Value", style="green")

    for field in TagField:
        value = tags.get(field)
        if field is TagField.ALBUM_ART:
            value = _preview_art(value)
        table.add_row(field.value, value or "[dim]-[/dim]")

    console.print(table)


def display_records(
    records: Sequence[AudioFileRecord], page_size: int, page_number: int
) -> None:
    """Display one page of records.

    Args:
        records: Records of the page
        page_size: Requested page size
        page_number: Requested 1-based page number
    """
    if not records:
        console.print(f"[yellow]No audio files on page {page_number}[/yellow]")
        return

    table = Table(title=f"Page {page_number} (size {page_size})")
    table.add_column("File", style="cyan")
    table.add_column("Artist")
    table.add_column("Title")
    table.add_column("Album")
    table.add_column("Duration (ms)", justify="right")
    table.add_column("Modified")
    table.add_column("ID", style="dim")

    for record in sorted(records, key=lambda r: r.file_name.lower()):
        table.add_row(
            record.file_name,
            record.tags.artist,
            record.tags.title,
            record.tags.album,
            record.tags.duration,
            record.creation_date,
            record.internal_id[:12],
        )

    console.print(table)
    console.print(f"[green]✓[/green] {len(records)} file(s)")


def display_removed_ids(removed: List[str]) -> None:
    """Display identifiers that no longer exist on disk."""
    if not removed:
        console.print("[green]✓[/green] No known files were removed")
        return

    console.print(f"[yellow]{len(removed)} known file(s) no longer exist:[/yellow]")
    for internal_id in removed:
        console.print(f"  - {internal_id}")


def display_diff_summary(diff: CatalogDiff) -> None:
    """Display added/removed/unchanged counts."""
    summary = diff.summary()

    table = Table(show_header=False)
    table.add_column("Metric", style="cyan")
    table.add_column("Value", style="green", justify="right")
    table.add_row("New files", str(summary["added"]))
    table.add_row("Removed files", str(summary["removed"]))
    table.add_row("Unchanged files", str(summary["unchanged"]))

    console.print(table)
