"""Configuration loading and management for Org Check.

Configuration sources are merged in priority order:
    1. Defaults (defined in OrgCheckConfig)
    2. Global config (~/.orgcheck.toml)
    3. Project config (./orgcheck.toml)
    4. Explicit config file
    5. Environment variables (ORGCHECK_* prefix)
    6. Overrides (passed as kwargs)

Example:
    >>> config = load_config(cache_ttl_hours=12)
    >>> config.cache_ttl_seconds
    43200
"""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Literal, Optional, get_type_hints

from .exceptions import ConfigFileError, InvalidConfigError

Verbosity = Literal["quiet", "normal", "verbose"]

_VERBOSITIES = ("quiet", "normal", "verbose")


@dataclass(frozen=True)
class OrgCheckConfig:
    """Settings shared by the managers, the transport and the CLI.

    Attributes:
        Caching:
            cache_enabled: Persist dataset results between runs
            cache_dir: Directory for the diskcache storage
            cache_ttl_hours: Age after which a cache entry is treated as absent

        Scoring:
            api_version: Latest API version of the org (None = computed from today)
            old_api_version_years: Age in years after which an API version is old

        Dependencies:
            dependency_error_ids: Ids known to make the dependency source fail

        Output control:
            verbosity: Logging verbosity level
            fixtures_dir: Directory of JSON rows used by the fixture transport
    """

    cache_enabled: bool = True
    cache_dir: str = ".orgcheck-cache"
    cache_ttl_hours: int = 24

    api_version: Optional[int] = None
    old_api_version_years: int = 3

    dependency_error_ids: frozenset[str] = field(default_factory=frozenset)

    verbosity: Verbosity = "normal"
    fixtures_dir: Optional[str] = None

    def __post_init__(self) -> None:
        """Validate configuration after initialization."""
        if self.cache_ttl_hours < 0:
            raise InvalidConfigError("cache_ttl_hours", self.cache_ttl_hours, "must be non-negative")
        if self.api_version is not None and self.api_version < 1:
            raise InvalidConfigError("api_version", self.api_version, "must be at least 1")
        if self.old_api_version_years < 1:
            raise InvalidConfigError(
                "old_api_version_years", self.old_api_version_years, "must be at least 1"
            )
        if self.verbosity not in _VERBOSITIES:
            raise InvalidConfigError("verbosity", self.verbosity, f"must be one of {_VERBOSITIES}")
        if not isinstance(self.dependency_error_ids, frozenset):
            # TOML and env sources hand over lists
            object.__setattr__(self, "dependency_error_ids", frozenset(self.dependency_error_ids))

    @property
    def cache_ttl_seconds(self) -> int:
        """Get cache TTL in seconds."""
        return self.cache_ttl_hours * 3600


def load_config(config_file: Optional[Path] = None, **overrides) -> OrgCheckConfig:
    """Load configuration with auto-discovery and merging.

    Args:
        config_file: Optional explicit config file path
        **overrides: Direct overrides (typically from CLI flags)

    Returns:
        Validated OrgCheckConfig instance

    Raises:
        ConfigFileError: If a config file is missing or unreadable
        InvalidConfigError: If a value or key is invalid
    """
    merged: dict = {}

    global_config = Path.home() / ".orgcheck.toml"
    if global_config.exists():
        merged.update(_load_toml_file(global_config))

    project_config = Path.cwd() / "orgcheck.toml"
    if project_config.exists():
        merged.update(_load_toml_file(project_config))

    if config_file is not None:
        if not config_file.exists():
            raise ConfigFileError(config_file, "file not found")
        merged.update(_load_toml_file(config_file))

    merged.update(_load_env_vars())

    if "verbose" in overrides:
        if overrides["verbose"]:
            overrides["verbosity"] = "verbose"
        del overrides["verbose"]
    if "quiet" in overrides:
        if overrides["quiet"]:
            overrides["verbosity"] = "quiet"
        del overrides["quiet"]

    merged.update({k: v for k, v in overrides.items() if v is not None})

    unknown = set(merged) - set(OrgCheckConfig.__dataclass_fields__)
    if unknown:
        key = sorted(unknown)[0]
        raise InvalidConfigError(key, merged[key], "unknown configuration key")

    return OrgCheckConfig(**merged)


def _load_env_vars() -> dict[str, Any]:
    """Load configuration from ORGCHECK_* environment variables.

    Supported environment variables:
        ORGCHECK_CACHE_ENABLED: bool (true/false/1/0)
        ORGCHECK_CACHE_DIR: str
        ORGCHECK_CACHE_TTL_HOURS: int
        ORGCHECK_API_VERSION: int
        ORGCHECK_OLD_API_VERSION_YEARS: int
        ORGCHECK_DEPENDENCY_ERROR_IDS: comma separated ids
        ORGCHECK_VERBOSITY: quiet/normal/verbose
        ORGCHECK_FIXTURES_DIR: str

    Returns:
        Dict of field_name -> parsed_value for any ORGCHECK_* vars found.
    """
    type_hints = get_type_hints(OrgCheckConfig)

    result: dict[str, Any] = {}

    for field_name in OrgCheckConfig.__dataclass_fields__:
        env_key = f"ORGCHECK_{field_name.upper()}"
        env_value = os.environ.get(env_key)

        if env_value is None:
            continue

        type_hint = type_hints.get(field_name)
        if type_hint is None:
            continue

        try:
            parsed = _parse_env_value(env_value, type_hint)
        except ValueError as e:
            raise InvalidConfigError(env_key, env_value, str(e))
        if parsed is not None:
            result[field_name] = parsed

    return result


def _parse_env_value(value: str, type_hint: Any) -> Any:
    """Parse environment variable string to the correct type.

    Args:
        value: Raw string from environment
        type_hint: Type annotation from dataclass

    Returns:
        Parsed value or None if can't parse

    Raises:
        ValueError: If value can't be parsed to expected type
    """
    origin = getattr(type_hint, "__origin__", None)

    # Optional[X] is Union[X, None]
    args = getattr(type_hint, "__args__", ())
    if type(None) in args:
        non_none_types = [t for t in args if t is not type(None)]
        if non_none_types:
            type_hint = non_none_types[0]
            origin = getattr(type_hint, "__origin__", None)

    if origin is frozenset or type_hint is frozenset:
        return frozenset(part.strip() for part in value.split(",") if part.strip())

    if type_hint is bool:
        lower = value.lower()
        if lower in ("true", "1", "yes", "on"):
            return True
        elif lower in ("false", "0", "no", "off"):
            return False
        else:
            raise ValueError(f"expected true/false, got '{value}'")

    if type_hint is int:
        return int(value)

    if type_hint is str or origin is Literal:
        return value

    return None


def _load_toml_file(path: Path) -> dict:
    """Load TOML file and return parsed dict.

    Args:
        path: Path to TOML file

    Returns:
        Parsed TOML as dict (the [orgcheck] table when present)

    Raises:
        ConfigFileError: If the file cannot be read or parsed
    """
    try:
        import tomllib
    except ModuleNotFoundError:
        # Python < 3.11
        import tomli as tomllib  # type: ignore

    try:
        with open(path, "rb") as f:
            data = tomllib.load(f)
    except (OSError, tomllib.TOMLDecodeError) as e:
        raise ConfigFileError(path, str(e))

    return data.get("orgcheck", data)
