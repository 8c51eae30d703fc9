"""Exception hierarchy for Org Check."""

from .base import OrgCheckError
from .config import (
    ConfigFileError,
    ConfigurationError,
    InvalidConfigError,
    RuleRegistrationError,
    UnknownAliasError,
)
from .data import (
    DataError,
    DatasetError,
    EntityNotFoundError,
    MissingDatasetError,
    RecipeError,
    ScoringError,
    TransportError,
)

__all__ = [
    "OrgCheckError",
    "ConfigurationError",
    "ConfigFileError",
    "InvalidConfigError",
    "RuleRegistrationError",
    "UnknownAliasError",
    "DataError",
    "DatasetError",
    "EntityNotFoundError",
    "MissingDatasetError",
    "RecipeError",
    "ScoringError",
    "TransportError",
]
