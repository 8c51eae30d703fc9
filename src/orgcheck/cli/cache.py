"""Cache management commands."""

from datetime import datetime
from pathlib import Path
from typing import Optional

import typer
from rich.table import Table

from . import app
from ._common import console, resolve_config


def _open(config_path: Optional[Path]):
    from ..cache import CacheManager, DiskStorage

    config = resolve_config(config=config_path)
    if not config.cache_enabled:
        return config, None
    storage = DiskStorage(config.cache_dir)
    return config, CacheManager(storage, ttl_hours=config.cache_ttl_hours)


@app.command()
def cache_info(
    config: Optional[Path] = typer.Option(
        None, "--config", "-c",
        help="Configuration file (TOML)",
        exists=True, file_okay=True, dir_okay=False,
    ),
):
    """Show cached datasets: size, kind and age."""
    settings, cache = _open(config)

    console.print("[bold cyan]Org Check Cache Info[/bold cyan]")
    console.print()
    if cache is None:
        console.print("Status: [red]Disabled[/red]")
        return

    try:
        items = cache.details()
        console.print("Status: [green]Enabled[/green]")
        console.print(f"Directory: [blue]{settings.cache_dir}[/blue]")
        console.print(f"Entries: [yellow]{len(items)}[/yellow]")
        console.print(f"Size: [yellow]{cache.storage.volume()} bytes[/yellow]")
        if not items:
            return

        table = Table(show_header=True, pad_edge=True)
        table.add_column("Dataset", style="cyan")
        table.add_column("Kind")
        table.add_column("Length", justify="right")
        table.add_column("Created")
        for item in items:
            created = datetime.fromtimestamp(item.created).strftime("%Y-%m-%d %H:%M") if item.created else ""
            table.add_row(item.name, "map" if item.is_map else "value", str(item.length), created)
        console.print()
        console.print(table)
    finally:
        cache.storage.close()


@app.command()
def cache_clear(
    config: Optional[Path] = typer.Option(
        None, "--config", "-c",
        help="Configuration file (TOML)",
        exists=True, file_okay=True, dir_okay=False,
    ),
):
    """Remove every cached dataset."""
    _settings, cache = _open(config)
    if cache is None:
        console.print("[yellow]Cache is disabled[/yellow]")
        raise typer.Exit(0)

    try:
        cache.clear()
    finally:
        cache.storage.close()
    console.print("[green]Cache cleared successfully[/green]")
