"""Base classes for recipes and recipe collections."""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Any, Iterable, Mapping, Optional, Sequence

from ..datasets.base import DatasetRunInformation
from ..datasets.manager import DatasetRequest
from ..exceptions import MissingDatasetError

ALL_VALUES = "*"

# Parameter names shared by the list recipes
NAMESPACE = "namespace"
OBJECT_TYPE = "sobjecttype"
OBJECT = "sobject"


class RecipeAliases:
    APEX_CLASSES = "apex-classes"
    APEX_TESTS = "apex-tests"
    APEX_TRIGGERS = "apex-triggers"
    APEX_UNCOMPILED = "apex-uncompiled"
    APP_PERMISSIONS = "app-permissions"
    COLLABORATION_GROUPS = "collaboration-groups"
    CUSTOM_FIELDS = "custom-fields"
    CUSTOM_LABELS = "custom-labels"
    DOCUMENTS = "documents"
    FIELD_PERMISSIONS = "field-permissions"
    FLOWS = "flows"
    GLOBAL_VIEW = "global-view"
    HARDCODED_URLS_VIEW = "hardcoded-urls-view"
    HOME_PAGE_COMPONENTS = "home-page-components"
    INTERNAL_ACTIVE_USERS = "internal-active-users"
    LIGHTNING_AURA_COMPONENTS = "lightning-aura-components"
    LIGHTNING_PAGES = "lightning-pages"
    LIGHTNING_WEB_COMPONENTS = "lightning-web-components"
    OBJECT = "object"
    OBJECT_PERMISSIONS = "object-permissions"
    OBJECT_TYPES = "object-types"
    OBJECTS = "objects"
    ORGANIZATION = "org-information"
    PACKAGES = "packages"
    PAGE_LAYOUTS = "page-layouts"
    PERMISSION_SET_LICENSES = "permission-set-licenses"
    PERMISSION_SETS = "permission-sets"
    PROCESS_BUILDERS = "process-builders"
    PROFILE_PASSWORD_POLICIES = "profile-password-policies"
    PROFILE_RESTRICTIONS = "profile-restrictions"
    PROFILES = "profiles"
    PUBLIC_GROUPS = "public-groups"
    QUEUES = "queues"
    RECORD_TYPES = "record-types"
    ROLE_TREE = "role-tree"
    USER_ROLES = "user-roles"
    VALIDATION_RULES = "validation-rules"
    VISUALFORCE_COMPONENTS = "visualforce-components"
    VISUALFORCE_PAGES = "visualforce-pages"
    WEB_LINKS = "web-links"
    WORKFLOWS = "workflows"


class Recipe(ABC):
    """
    Names the datasets it needs (``extract``) and shapes their values into
    one result (``transform``).

    ``transform`` receives values keyed by dataset alias. Cross-links between
    records of different datasets are set here and nowhere else.
    """

    alias: str
    description: str = ""

    @abstractmethod
    def extract(self, parameters: Mapping[str, Any]) -> list[DatasetRequest]:
        ...

    @abstractmethod
    def transform(self, data: Mapping[str, Any], logger: logging.Logger, parameters: Mapping[str, Any]) -> Any:
        ...

    def require(self, data: Mapping[str, Any], *aliases: str) -> list[Any]:
        """Values of ``aliases``, in order.

        Raises:
            MissingDatasetError: If a declared dataset is absent from ``data``
                or its value is None
        """
        values = []
        for alias in aliases:
            value = data.get(alias)
            if value is None:
                raise MissingDatasetError(self.alias, alias)
            values.append(value)
        return values


class RecipeCollection(ABC):
    """Runs several recipes and summarizes the bad records of each."""

    alias: str
    description: str = ""

    @abstractmethod
    def extract(self, parameters: Mapping[str, Any]) -> list[str]:
        """Aliases of the recipes to run."""

    def filter_by_score_rule_ids(self, parameters: Mapping[str, Any]) -> Optional[Sequence[int]]:
        """Rule ids a record must have failed to count as bad; None keeps every bad record."""
        return None


@dataclass
class DataCollectionStatistics:
    """Summary of one recipe inside a collection."""

    had_error: bool = False
    last_error_message: Optional[str] = None
    count_all: int = 0
    count_bad: int = 0
    count_bad_by_rule: list[dict[str, Any]] = field(default_factory=list)
    data: list[Any] = field(default_factory=list)

    @property
    def count_good(self) -> int:
        return self.count_all - self.count_bad

    def to_dict(self) -> dict[str, Any]:
        return {
            "had_error": self.had_error,
            "last_error_message": self.last_error_message,
            "count_all": self.count_all,
            "count_bad": self.count_bad,
            "count_good": self.count_good,
            "count_bad_by_rule": list(self.count_bad_by_rule),
        }


# ── Parameter helpers ──────────────────────────────────────────────


def namespace_of(parameters: Mapping[str, Any]) -> str:
    return parameters.get(NAMESPACE) or ALL_VALUES


def object_type_of(parameters: Mapping[str, Any]) -> str:
    return parameters.get(OBJECT_TYPE) or ALL_VALUES


def object_of(parameters: Mapping[str, Any]) -> str:
    return parameters.get(OBJECT) or ALL_VALUES


def matches(wanted: str, value: Any) -> bool:
    return wanted == ALL_VALUES or value == wanted


def lookup(ids: Optional[Iterable[str]], records: Mapping[str, Any]) -> list[Any]:
    """Records of ``ids`` found in ``records``, unknown ids skipped."""
    return [records[id] for id in ids or () if id in records]


def per_object(alias: str, object_name: str, parameters: Optional[Mapping[str, Any]] = None) -> DatasetRunInformation:
    """Request for a dataset scoped to one object, cached under its own key."""
    params = {"object": object_name}
    if parameters:
        params.update(parameters)
    return DatasetRunInformation(alias=alias, cache_key=f"{alias}_{object_name}", parameters=params)
