"""CLI entry point: registers all subcommands."""

import typer

from .. import __version__
from ._common import console

app = typer.Typer(
    name="orgcheck",
    help="Org Check - Salesforce org inspection and best-practice scoring",
    add_completion=False,
    rich_markup_mode="rich",
)


def _version_callback(value: bool) -> None:
    if value:
        console.print(f"orgcheck {__version__}")
        raise typer.Exit(0)


@app.callback()
def main(
    version: bool = typer.Option(
        False, "--version",
        help="Show the version and exit",
        callback=_version_callback, is_eager=True,
    ),
):
    """Inspect an org through recipes and score its records against best-practice rules."""


# Import subcommands to register them
from .run import run as _run, recipes as _recipes  # noqa: F401, E402
from .rules import rules as _rules, explain as _explain  # noqa: F401, E402
from .cache import cache_info as _cache_info, cache_clear as _cache_clear  # noqa: F401, E402
