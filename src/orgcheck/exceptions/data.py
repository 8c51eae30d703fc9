"""Data-related exceptions: transport, datasets, recipes, scoring."""

from typing import Optional

from .base import OrgCheckError


class DataError(OrgCheckError):
    """Base class for errors raised while retrieving or shaping org data."""

    pass


class TransportError(DataError):
    """Raised by a transport when a remote call fails."""

    def __init__(self, reason: str, query: Optional[str] = None):
        details = {"reason": reason}
        if query:
            details["query"] = query
        super().__init__(f"Transport failure: {reason}", details=details)
        self.reason = reason
        self.query = query


class DatasetError(DataError):
    """Raised when a single dataset fails to run."""

    def __init__(self, alias: str, cause: BaseException):
        super().__init__(
            f"Dataset '{alias}' failed",
            details={"alias": alias, "cause": f"{type(cause).__name__}: {cause}"},
        )
        self.alias = alias
        self.cause = cause


class RecipeError(DataError):
    """Raised when a recipe cannot produce its result."""

    def __init__(self, alias: str, reason: str):
        super().__init__(f"Recipe '{alias}' failed", details={"alias": alias, "reason": reason})
        self.alias = alias
        self.reason = reason


class MissingDatasetError(RecipeError):
    """Raised when a dataset a recipe declared is absent at transform time."""

    def __init__(self, alias: str, dataset_alias: str):
        super().__init__(alias, f"data from dataset '{dataset_alias}' was undefined")
        self.details["dataset"] = dataset_alias
        self.dataset_alias = dataset_alias


class EntityNotFoundError(DataError):
    """Raised when a describe-style fetch returns nothing for a named entity."""

    def __init__(self, kind: str, name: str):
        super().__init__(f"{kind} not found: {name}", details={"kind": kind, "name": name})
        self.kind = kind
        self.name = name


class ScoringError(DataError):
    """Raised when scoring a record that was never scoring-initialized."""

    def __init__(self, record_type: str, reason: str):
        super().__init__(
            f"Cannot score {record_type} record",
            details={"type": record_type, "reason": reason},
        )
        self.record_type = record_type
        self.reason = reason
