"""Click CLI for pixcache: load images through the cache and manage it."""

from __future__ import annotations

import asyncio
import logging
import sys
from pathlib import Path

import click
from rich.console import Console
from rich.logging import RichHandler
from rich.table import Table

from pixcache.config.hierarchy import load_settings
from pixcache.types import LoadResult

console = Console()
error_console = Console(stderr=True)


def _setup_logging(verbosity: int, default_level: str = "WARNING") -> None:
    """Configure logging based on verbosity level."""
    level = logging.getLevelName(default_level.upper())
    if not isinstance(level, int):
        level = logging.WARNING
    if verbosity == 1:
        level = logging.INFO
    elif verbosity >= 2:
        level = logging.DEBUG

    logging.basicConfig(
        level=level,
        format="%(message)s",
        handlers=[RichHandler(console=error_console, show_time=False, show_path=False)],
    )


@click.group()
@click.version_option(package_name="pixcache")
def cli() -> None:
    """pixcache: two-tier image cache."""


@cli.command()
@click.argument("url")
@click.option("-o", "--output", type=click.Path(), help="Save the decoded image to this file.")
@click.option("--cache-dir", type=click.Path(), default=None, help="Disk cache directory.")
@click.option("-v", "--verbose", count=True, help="Increase verbosity (-v info, -vv debug).")
def get(url: str, output: str | None, cache_dir: str | None, verbose: int) -> None:
    """Load a remote image through the cache."""
    settings = load_settings(cache_dir=cache_dir)
    _setup_logging(verbose, settings.log_level)

    from pixcache.cache.manager import CacheManager

    async def _run() -> LoadResult:
        async with CacheManager.from_settings(settings) as manager:
            return await manager.load_remote_result(url)

    _report(asyncio.run(_run()), output)


@cli.command()
@click.argument("resource_id", type=int)
@click.option(
    "--resource-dir",
    type=click.Path(exists=True, file_okay=False),
    default=None,
    help="Directory of <id>.<ext> resource images.",
)
@click.option("-o", "--output", type=click.Path(), help="Save the decoded image to this file.")
@click.option("--cache-dir", type=click.Path(), default=None, help="Disk cache directory.")
@click.option("-v", "--verbose", count=True, help="Increase verbosity (-v info, -vv debug).")
def resource(
    resource_id: int,
    resource_dir: str | None,
    output: str | None,
    cache_dir: str | None,
    verbose: int,
) -> None:
    """Load a bundled resource image through the cache."""
    settings = load_settings(cache_dir=cache_dir, resource_dir=resource_dir)
    _setup_logging(verbose, settings.log_level)

    from pixcache.cache.manager import CacheManager

    async def _run() -> LoadResult:
        async with CacheManager.from_settings(settings) as manager:
            return await manager.load_drawable_result(resource_id)

    _report(asyncio.run(_run()), output)


def _report(result: LoadResult, output: str | None) -> None:
    if not result.ok:
        reason = result.failure.value if result.failure else "unknown"
        error_console.print(
            f"[red]Error:[/red] {result.status.value} ({reason}) {result.message}".rstrip()
        )
        sys.exit(1)

    image = result.image
    source = result.source.value if result.source else "-"
    console.print(
        f"[green]{result.key}[/green] {image.width}x{image.height} {image.mode} from {source}"
    )
    if output:
        image.save(Path(output))
        console.print(f"[green]Written to {output}[/green]")


@cli.group()
def cache() -> None:
    """Cache management commands."""


@cache.command("stats")
@click.option("--cache-dir", type=click.Path(), default=None, help="Disk cache directory.")
def cache_stats(cache_dir: str | None) -> None:
    """Show disk cache statistics."""
    from pixcache.cache.disk import DiskCache

    settings = load_settings(cache_dir=cache_dir)
    disk = DiskCache(settings.cache_dir)

    table = Table(title="Cache Statistics", show_header=True)
    table.add_column("Metric", style="cyan")
    table.add_column("Value")

    table.add_row("Directory", str(disk.directory))
    table.add_row("Entries", str(disk.entry_count))
    table.add_row("Size (MB)", f"{disk.size_bytes / (1024 * 1024):.1f}")
    table.add_row("Target bounds", f"{settings.target_width}x{settings.target_height}")

    console.print(table)


@cache.command("clear")
@click.option("--cache-dir", type=click.Path(), default=None, help="Disk cache directory.")
@click.confirmation_option(prompt="Are you sure you want to clear the cache?")
def cache_clear(cache_dir: str | None) -> None:
    """Delete all cached image files."""
    from pixcache.cache.disk import DiskCache

    settings = load_settings(cache_dir=cache_dir)
    removed = DiskCache(settings.cache_dir).clear()
    console.print(f"[green]Cache cleared ({removed} entries removed).[/green]")


def main() -> None:
    cli()
