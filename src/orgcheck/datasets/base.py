"""Base class for datasets and the aliases they are registered under."""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Any, Iterable, Mapping, Optional, Union

from ..core.factory import DataFactory
from ..core.records import Record
from ..transport import Row, Transport, case_safe_id

DatasetResult = Union[dict[str, Record], list[Record]]


class DatasetAliases:
    APEX_CLASSES = "apex-classes"
    APEX_TRIGGERS = "apex-triggers"
    APP_PERMISSIONS = "app-permissions"
    APPLICATIONS = "applications"
    COLLABORATION_GROUPS = "collaboration-groups"
    CUSTOM_FIELDS = "custom-fields"
    CUSTOM_LABELS = "custom-labels"
    DOCUMENTS = "documents"
    FIELD_PERMISSIONS = "field-permissions"
    FLOWS = "flows"
    GROUPS = "groups"
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
    PROFILE_PASSWORD_POLICIES = "profile-password-policies"
    PROFILE_RESTRICTIONS = "profile-restrictions"
    PROFILES = "profiles"
    RECORD_TYPES = "record-types"
    USER_ROLES = "user-roles"
    VALIDATION_RULES = "validation-rules"
    VISUALFORCE_COMPONENTS = "visual-force-components"
    VISUALFORCE_PAGES = "visual-force-pages"
    WEB_LINKS = "web-links"
    WORKFLOWS = "workflows"


@dataclass(frozen=True)
class DatasetRunInformation:
    """A dataset request: which dataset, under which cache key, with which parameters."""

    alias: str
    cache_key: str
    parameters: Mapping[str, Any] = field(default_factory=dict)

    @classmethod
    def of(cls, request: Union[str, DatasetRunInformation]) -> DatasetRunInformation:
        if isinstance(request, DatasetRunInformation):
            return request
        return cls(alias=request, cache_key=request)


class Dataset(ABC):
    """One named unit of retrieval: transport rows in, typed records out.

    ``run`` must not touch the cache; the manager does.
    """

    alias: str
    description: str = ""

    @abstractmethod
    async def run(
        self,
        transport: Transport,
        factory: DataFactory,
        logger: logging.Logger,
        parameters: Mapping[str, Any],
    ) -> DatasetResult:
        ...


# ── Row helpers ────────────────────────────────────────────────────


def record_ids(rows: Iterable[Row], key: str = "Id") -> list[str]:
    """Case-safe ids of ``rows``, skipping rows without one."""
    return [case_safe_id(row[key]) for row in rows if row.get(key)]


def nested(row: Optional[Mapping[str, Any]], *path: str) -> Any:
    """``row[a][b]...``, None as soon as a level is missing."""
    value: Any = row
    for name in path:
        if not isinstance(value, Mapping):
            return None
        value = value.get(name)
    return value


def package_of(row: Mapping[str, Any]) -> str:
    return row.get("NamespacePrefix") or ""
