"""Run command: execute a recipe or a collection and print its result."""

import json
from pathlib import Path
from typing import Any, List, Optional

import typer
from rich.table import Table

from ..api import OrgCheckAPI
from ..config import OrgCheckConfig
from ..exceptions import OrgCheckError
from ..logging_config import get_logger, setup_logging
from ..recipes import DataCollectionStatistics
from . import app
from ._common import console, parse_params, record_label, resolve_config, to_jsonable


def _build_api(config: OrgCheckConfig) -> OrgCheckAPI:
    if config.fixtures_dir is None:
        console.print("[red]Error:[/red] no org to read from, pass --fixtures or set fixtures_dir")
        raise typer.Exit(2)
    return OrgCheckAPI.from_fixtures(Path(config.fixtures_dir), config=config)


@app.command()
def run(
    recipe: str = typer.Argument(..., help="Recipe or collection alias (see 'orgcheck recipes')"),
    param: Optional[List[str]] = typer.Option(
        None, "--param", "-p",
        help="Recipe parameter as KEY=VALUE (namespace, sobjecttype, sobject, object)",
    ),
    fixtures: Optional[Path] = typer.Option(
        None, "--fixtures",
        help="Directory of JSON rows standing in for the org",
        exists=True, file_okay=False, dir_okay=True,
    ),
    fmt: str = typer.Option(
        "table", "--format", "-f",
        help="Output format: table (human-readable) or json",
    ),
    refresh: bool = typer.Option(
        False, "--refresh",
        help="Drop the cached datasets of the recipe before running it",
    ),
    no_cache: bool = typer.Option(
        False, "--no-cache",
        help="Keep results in memory only",
    ),
    config: Optional[Path] = typer.Option(
        None, "--config", "-c",
        help="Configuration file (TOML)",
        exists=True, file_okay=True, dir_okay=False,
    ),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Debug logging"),
    quiet: bool = typer.Option(False, "--quiet", "-q", help="Suppress logging"),
):
    """
    Run a recipe against the org and print the result.

    [bold cyan]Examples:[/bold cyan]

      orgcheck run apex-classes --fixtures ./demo-org

      orgcheck run object --param object=Account --format json

      orgcheck run global-view --refresh
    """
    logger = get_logger(__name__)
    if fmt not in ("table", "json"):
        raise typer.BadParameter(f"unknown format {fmt!r}", param_hint="--format")
    parameters = parse_params(param)

    try:
        settings = resolve_config(config=config, fixtures=fixtures, no_cache=no_cache, verbose=verbose, quiet=quiet)
        setup_logging(settings.verbosity)
        api = _build_api(settings)
        try:
            if refresh:
                api.clean_recipe(recipe, parameters)
            result = api.run_recipe_sync(recipe, parameters)
        finally:
            api.close()

        if fmt == "json":
            console.print_json(json.dumps(to_jsonable(result), default=str))
        else:
            _print_result(recipe, result)

    except typer.Exit:
        raise
    except OrgCheckError as e:
        console.print(f"[red]Error:[/red] {e}")
        raise typer.Exit(1)
    except Exception as e:
        logger.exception("Unexpected error")
        console.print(f"[red]Unexpected error:[/red] {e}")
        if verbose:
            console.print_exception()
        raise typer.Exit(1)


@app.command()
def recipes():
    """List the recipes and collections that can be run."""
    from ..recipes import get_recipe_collections, get_recipes

    table = Table(show_header=True, show_lines=False, pad_edge=True)
    table.add_column("Alias", style="cyan")
    table.add_column("Kind")
    table.add_column("Description")
    for alias, recipe in sorted(get_recipes().items()):
        table.add_row(alias, "recipe", recipe.description)
    for alias, collection in sorted(get_recipe_collections().items()):
        table.add_row(alias, "collection", collection.description)
    console.print(table)


# ---------------------------------------------------------------------------
# Table rendering
# ---------------------------------------------------------------------------


def _print_result(alias: str, result: Any) -> None:
    if isinstance(result, list):
        _print_records(alias, result)
    elif isinstance(result, dict) and all(isinstance(v, DataCollectionStatistics) for v in result.values()):
        _print_statistics(alias, result)
    else:
        # Single records, matrices and trees have no flat shape
        console.print_json(json.dumps(to_jsonable(result), default=str))


def _print_records(alias: str, records: list) -> None:
    table = Table(title=f"{alias} ({len(records)})", show_header=True, pad_edge=True)
    table.add_column("Name", min_width=24)
    table.add_column("Package")
    table.add_column("Score", justify="right")
    table.add_column("Bad fields")
    for record in records:
        score = getattr(record, "score", None)
        style = "red" if score else None
        table.add_row(
            record_label(record),
            getattr(record, "package", None) or "",
            "" if score is None else str(score),
            ", ".join(getattr(record, "bad_fields", None) or ()),
            style=style,
        )
    console.print(table)


def _print_statistics(alias: str, statistics: dict) -> None:
    table = Table(title=alias, show_header=True, pad_edge=True)
    table.add_column("Recipe", style="cyan")
    table.add_column("All", justify="right")
    table.add_column("Good", justify="right")
    table.add_column("Bad", justify="right")
    table.add_column("Top rules")
    for recipe_alias, stats in statistics.items():
        if stats.had_error:
            table.add_row(recipe_alias, "", "", "", f"[red]{stats.last_error_message}[/red]")
            continue
        top = sorted(stats.count_bad_by_rule, key=lambda r: r["count"], reverse=True)[:3]
        table.add_row(
            recipe_alias,
            str(stats.count_all),
            str(stats.count_good),
            str(stats.count_bad),
            "; ".join(f"{r['rule_name']} ({r['count']})" for r in top),
        )
    console.print(table)
