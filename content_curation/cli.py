"""Command-line entry points for running curation passes on JSON files."""

import sys
from pathlib import Path
from typing import Any

import click
import orjson
from rich import box
from rich.console import Console
from rich.table import Table

from .config import get_settings, validate_config
from .logging import get_logger, setup_logging
from .pipeline import CurationPipeline, load_content_items
from .processing.dedupe import (
    DeduplicationStats,
    content_hash,
    deduplicate,
    get_deduplication_stats,
)
from .types import UserProfile

logger = get_logger(__name__)
console = Console()


def _read_json(path: Path) -> Any:
    return orjson.loads(path.read_bytes())


def _read_items(path: Path) -> list:
    data = _read_json(path)
    if isinstance(data, dict):
        data = data.get('items', [])
    if not isinstance(data, list):
        raise click.BadParameter(f"{path} must contain a JSON list of content items")
    return load_content_items(data)


def display_stats(stats: DeduplicationStats) -> None:
    """Print deduplication statistics as a table."""
    table = Table(title="Deduplication", box=box.SIMPLE)
    table.add_column("Metric", style="cyan")
    table.add_column("Value", justify="right")

    table.add_row("Records", str(stats.total_original))
    table.add_row("Unique", str(stats.total_unique))
    table.add_row("Duplicates", str(stats.total_duplicates))
    table.add_row("Rate", f"{stats.deduplication_rate:.1f}%")
    for reason, count in sorted(stats.duplicates_by_reason.items()):
        table.add_row(f"  {reason}", str(count))

    console.print(table)


@click.group()
@click.option("--log-level", default="ERROR", help="Log level")
@click.option("--json-logs", is_flag=True, help="Emit JSON log lines")
def cli(log_level, json_logs):
    """Content Curation Engine - deduplicate and rank content batches."""
    setup_logging(log_level=log_level, json_logging=json_logs)


@cli.command()
@click.argument("input_file", type=click.Path(exists=True, dir_okay=False, path_type=Path))
@click.option("--profile", "profile_file", required=True,
              type=click.Path(exists=True, dir_okay=False, path_type=Path),
              help="JSON file with the user profile")
@click.option("--existing-hashes", "hashes_file",
              type=click.Path(exists=True, dir_okay=False, path_type=Path),
              help="File with one already-stored content hash per line")
@click.option("--max-items", type=int, help="Maximum items to keep")
@click.option("--min-score", type=float, help="Minimum combined score to keep")
@click.option("--transitive", is_flag=True, help="Group duplicates transitively")
@click.option("--output", "-o", type=click.File("wb"), default="-",
              help="Output file (default: stdout)")
def curate(input_file, profile_file, hashes_file, max_items, min_score, transitive, output):
    """Deduplicate and rank INPUT_FILE for a profile, writing JSON."""
    settings = get_settings().model_copy()
    if max_items is not None:
        settings.max_items = max_items
    if min_score is not None:
        settings.min_relevance_score = min_score
    if transitive:
        settings.transitive_dedupe = True

    if not validate_config(settings):
        click.echo("❌ Configuration validation failed", err=True)
        sys.exit(1)

    try:
        items = _read_items(input_file)
        profile = UserProfile.from_dict(_read_json(profile_file))
        existing = None
        if hashes_file:
            existing = [line.strip() for line in hashes_file.read_text().splitlines() if line.strip()]

        result = CurationPipeline(settings).run(items, profile, existing_hashes=existing)

        payload = {
            'items': [item.to_dict() for item in result.items],
            'weights': result.weights.as_dict() if result.weights else None,
            'skippedReason': result.skipped_reason,
        }
        output.write(orjson.dumps(payload, option=orjson.OPT_INDENT_2))
        output.write(b"\n")

    except Exception as e:
        logger.error("Curation failed", error=str(e))
        click.echo(f"❌ Error: {e}", err=True)
        sys.exit(1)


@cli.command()
@click.argument("input_file", type=click.Path(exists=True, dir_okay=False, path_type=Path))
@click.option("--transitive", is_flag=True, help="Group duplicates transitively")
def dedupe(input_file, transitive):
    """Show deduplication statistics for INPUT_FILE."""
    settings = get_settings().model_copy(update={'transitive_dedupe': transitive})
    try:
        records = [item.to_record() for item in _read_items(input_file)]
        result = deduplicate(records, settings)
    except Exception as e:
        logger.error("Deduplication failed", error=str(e))
        click.echo(f"❌ Error: {e}", err=True)
        sys.exit(1)

    display_stats(get_deduplication_stats(result))
    for group in result.duplicate_groups:
        console.print(f"[bold]{group.original.id}[/bold] {group.original.title}")
        for duplicate, reason in zip(group.duplicates, group.reasons, strict=True):
            console.print(f"  ↳ {duplicate.id} [dim]{reason}[/dim]")


@cli.command(name="hash")
@click.argument("input_file", type=click.Path(exists=True, dir_okay=False, path_type=Path))
def hash_command(input_file):
    """Print the content hash of every item in INPUT_FILE."""
    try:
        items = _read_items(input_file)
    except Exception as e:
        logger.error("Hashing failed", error=str(e))
        click.echo(f"❌ Error: {e}", err=True)
        sys.exit(1)

    for item in items:
        click.echo(f"{item.id}\t{content_hash(item)}")


if __name__ == "__main__":
    cli()
