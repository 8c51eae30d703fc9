"""Rule commands: list the best-practice catalog and explain one rule."""

from pathlib import Path
from typing import Optional

import typer
from rich.panel import Panel
from rich.table import Table

from ..core.catalog import default_registry
from ..core.records import get_record_class
from ..exceptions import OrgCheckError
from . import app
from ._common import console, resolve_config


def _registry(config_path: Optional[Path]):
    config = resolve_config(config=config_path)
    return default_registry(config.api_version, config.old_api_version_years)


@app.command()
def rules(
    kind: Optional[str] = typer.Option(
        None, "--type", "-t",
        help="Only rules applying to this record type (e.g. ApexClass, Field)",
    ),
    config: Optional[Path] = typer.Option(
        None, "--config", "-c",
        help="Configuration file (TOML)",
        exists=True, file_okay=True, dir_okay=False,
    ),
):
    """List the score rules and the record types they apply to."""
    try:
        registry = _registry(config)
    except OrgCheckError as e:
        console.print(f"[red]Error:[/red] {e}")
        raise typer.Exit(1)

    table = Table(show_header=True, pad_edge=True)
    table.add_column("Id", justify="right", style="cyan")
    table.add_column("Rule", min_width=30)
    table.add_column("Applies to")
    for rule in registry:
        names = sorted(get_record_class(k).display_name for k in rule.applicable)
        if kind is not None and kind not in {k.value for k in rule.applicable}:
            continue
        table.add_row(str(rule.id), rule.description, ", ".join(names))
    console.print(table)


@app.command()
def explain(
    rule_id: int = typer.Argument(..., help="Id of the score rule"),
    config: Optional[Path] = typer.Option(
        None, "--config", "-c",
        help="Configuration file (TOML)",
        exists=True, file_okay=True, dir_okay=False,
    ),
):
    """Show what a score rule checks and which field it blames."""
    try:
        registry = _registry(config)
        rule = registry.get_score_rule(rule_id)
    except KeyError as e:
        console.print(f"[red]Error:[/red] {e.args[0]}")
        raise typer.Exit(1)
    except OrgCheckError as e:
        console.print(f"[red]Error:[/red] {e}")
        raise typer.Exit(1)

    names = sorted(get_record_class(k).display_name for k in rule.applicable)
    body = (
        f"{rule.error_message}\n\n"
        f"[bold]Blamed field:[/bold] {rule.bad_field}\n"
        f"[bold]Applies to:[/bold] {', '.join(names)}"
    )
    if rule.uses_dependencies:
        body += "\n[dim]Reads the dependency graph[/dim]"
    console.print(Panel(body, title=f"#{rule.id} {rule.description}", expand=False))
