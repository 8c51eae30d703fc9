"""Shared CLI helpers."""

from pathlib import Path
from typing import Any, Optional

import typer
from rich.console import Console

from ..config import OrgCheckConfig, load_config
from ..core.dependencies import DependencyView
from ..core.records import Record

console = Console()


def resolve_config(
    config: Optional[Path] = None,
    fixtures: Optional[Path] = None,
    no_cache: bool = False,
    verbose: bool = False,
    quiet: bool = False,
) -> OrgCheckConfig:
    """Build the configuration from CLI options."""
    overrides: dict[str, Any] = {}
    if fixtures is not None:
        overrides["fixtures_dir"] = str(fixtures)
    if no_cache:
        overrides["cache_enabled"] = False
    if verbose:
        overrides["verbose"] = True
    if quiet:
        overrides["quiet"] = True
    return load_config(config_file=config, **overrides)


def parse_params(values: Optional[list[str]]) -> dict[str, str]:
    """``["k=v", ...]`` into a dict; a malformed pair is a usage error."""
    params: dict[str, str] = {}
    for item in values or []:
        key, sep, value = item.partition("=")
        if not sep or not key:
            raise typer.BadParameter(f"expected KEY=VALUE, got {item!r}", param_hint="--param")
        params[key.strip()] = value.strip()
    return params


def to_jsonable(value: Any) -> Any:
    """Recipe results (records, matrices, trees, statistics) as plain JSON data."""
    if isinstance(value, (Record, DependencyView)):
        return value.to_dict()
    if hasattr(value, "to_dict"):
        # Matrices, trees and statistics keep records in their dict form
        return to_jsonable(value.to_dict())
    if isinstance(value, (list, tuple)):
        return [to_jsonable(v) for v in value]
    if isinstance(value, dict):
        return {k: to_jsonable(v) for k, v in value.items()}
    return value


def record_label(record: Any) -> str:
    """Best human name of a record."""
    for attribute in ("label", "name", "apiname", "id"):
        value = getattr(record, attribute, None)
        if value:
            return str(value)
    return repr(record)
