"""Transport collaborator: the only component that talks to the org.

Datasets call three async operations and receive JSON-shaped rows:

    execute_queries(queries)         -> one list of rows per QuerySpec
    fetch_dependency_edges(ids)      -> DependencyData (edges + failing ids)
    fetch_metadata(requests)         -> {metadata type: [rows]}

Describes go through ``fetch_metadata`` under the pseudo types
``DescribeGlobal`` (one row per sobject) and ``DescribeSObject`` (members are
sobject names). Pagination, batching, retries and the query language itself
are transport concerns. ``InMemoryTransport`` serves canned rows (tests, demos) and
``FixtureTransport`` loads them from a directory of JSON files.
"""

from __future__ import annotations

import asyncio
import json
from abc import ABC, abstractmethod
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Iterable, Mapping, Optional, Sequence

from .core.dependencies import DependencyData, Edge
from .exceptions import TransportError
from .logging_config import get_logger

logger = get_logger(__name__)

Row = dict[str, Any]


@dataclass(frozen=True)
class QuerySpec:
    """One remote query.

    Attributes:
        string:  Query text, opaque to the core
        sobject: Main entity queried; names the result set
        tooling: Run against the tooling endpoint
        alias:   Distinguishes two queries on the same sobject
        optional: The sobject may not exist in the org (a disabled feature);
            transports answer no rows instead of failing
    """

    string: str
    sobject: str
    tooling: bool = False
    alias: Optional[str] = None
    optional: bool = False

    @property
    def key(self) -> str:
        return self.alias or self.sobject


@dataclass(frozen=True)
class MetadataRequest:
    """Read ``members`` (ids or full names, ``*`` for all) of a metadata type."""

    type: str
    members: tuple[str, ...] = ("*",)


class Transport(ABC):
    """Abstract transport. Implementations must be safe to call concurrently."""

    @abstractmethod
    async def execute_queries(self, queries: Sequence[QuerySpec]) -> list[list[Row]]:
        """Run every query and return the rows of each, in query order."""

    @abstractmethod
    async def fetch_dependency_edges(self, ids: Sequence[str]) -> DependencyData:
        """Edges where one end is in ``ids``, plus ids the source failed on."""

    @abstractmethod
    async def fetch_metadata(self, requests: Sequence[MetadataRequest]) -> dict[str, list[Row]]:
        """Metadata rows keyed by type."""


# ---------------------------------------------------------------------------
# Setup URLs and ids
# ---------------------------------------------------------------------------


class MetadataType:
    """Metadata type names used for setup URLs and dependency edges."""

    ANY_FIELD = "Field"
    GLOBAL_DESCRIBE = "DescribeGlobal"
    SOBJECT_DESCRIBE = "DescribeSObject"
    APEX_CLASS = "ApexClass"
    APEX_TRIGGER = "ApexTrigger"
    AURA_WEB_COMPONENT = "AuraDefinitionBundle"
    COLLABORATION_GROUP = "CollaborationGroup"
    CUSTOM_BIG_OBJECT = "CustomBigObject"
    CUSTOM_EVENT = "CustomEvent"
    CUSTOM_FIELD = "CustomField"
    CUSTOM_LABEL = "CustomLabel"
    CUSTOM_METADATA_TYPE = "CustomMetadataType"
    CUSTOM_OBJECT = "CustomObject"
    CUSTOM_SETTING = "CustomSetting"
    DOCUMENT = "Document"
    EXTERNAL_OBJECT = "ExternalObject"
    FIELD_SET = "FieldSet"
    FLOW_DEFINITION = "FlowDefinition"
    FLOW_VERSION = "Flow"
    HOME_PAGE_COMPONENT = "HomePageComponent"
    KNOWLEDGE_ARTICLE = "KnowledgeArticle"
    LIGHTNING_PAGE = "FlexiPage"
    LIGHTNING_WEB_COMPONENT = "LightningComponentBundle"
    PAGE_LAYOUT = "Layout"
    PERMISSION_SET = "PermissionSet"
    PERMISSION_SET_GROUP = "PermissionSetGroup"
    PERMISSION_SET_LICENSE = "PermissionSetLicense"
    PROFILE = "Profile"
    PROFILE_PASSWORD_POLICY = "ProfilePasswordPolicy"
    PUBLIC_GROUP = "PublicGroup"
    QUEUE = "Queue"
    RECORD_TYPE = "RecordType"
    ROLE = "UserRole"
    STANDARD_FIELD = "StandardField"
    STANDARD_OBJECT = "StandardEntity"
    TECHNICAL_GROUP = "TechnicalGroup"
    USER = "User"
    VALIDATION_RULE = "ValidationRule"
    VISUAL_FORCE_COMPONENT = "ApexComponent"
    VISUAL_FORCE_PAGE = "ApexPage"
    WEB_LINK = "WebLink"
    WORKFLOW_RULE = "WorkflowRule"


OBJECT_TYPE_LABELS = {
    MetadataType.STANDARD_OBJECT: "Standard Object",
    MetadataType.CUSTOM_OBJECT: "Custom Object",
    MetadataType.EXTERNAL_OBJECT: "External Object",
    MetadataType.CUSTOM_SETTING: "Custom Setting",
    MetadataType.CUSTOM_METADATA_TYPE: "Custom Metadata Type",
    MetadataType.CUSTOM_EVENT: "Platform Event",
    MetadataType.KNOWLEDGE_ARTICLE: "Knowledge Article",
    MetadataType.CUSTOM_BIG_OBJECT: "Big Object",
}

_OBJECT_SUFFIXES = (
    ("__c", MetadataType.CUSTOM_OBJECT),
    ("__x", MetadataType.EXTERNAL_OBJECT),
    ("__mdt", MetadataType.CUSTOM_METADATA_TYPE),
    ("__e", MetadataType.CUSTOM_EVENT),
    ("__ka", MetadataType.KNOWLEDGE_ARTICLE),
    ("__b", MetadataType.CUSTOM_BIG_OBJECT),
)

_OBJECT_MANAGER = "/lightning/setup/ObjectManager/"

_SETUP_PAGES = {
    MetadataType.CUSTOM_BIG_OBJECT: "BigObjects",
    MetadataType.CUSTOM_EVENT: "EventObjects",
    MetadataType.CUSTOM_SETTING: "CustomSettings",
    MetadataType.CUSTOM_METADATA_TYPE: "CustomMetadata",
    MetadataType.EXTERNAL_OBJECT: "ExternalObjects",
}

# Components living under an object: type -> Object Manager sub page
_OBJECT_COMPONENT_PAGES = {
    MetadataType.PAGE_LAYOUT: "PageLayouts",
    MetadataType.WEB_LINK: "ButtonsLinksActions",
    MetadataType.RECORD_TYPE: "RecordTypes",
    MetadataType.APEX_TRIGGER: "ApexTriggers",
    MetadataType.FIELD_SET: "FieldSets",
    MetadataType.LIGHTNING_PAGE: "LightningPages",
}

_SIMPLE_TEMPLATES = {
    MetadataType.VALIDATION_RULE: _OBJECT_MANAGER + "page?address=%2F{id}",
    MetadataType.USER: "/lightning/setup/ManageUsers/page?address=%2F{id}%3Fnoredirect%3D1%26isUserEntityOverride%3D1",
    MetadataType.PROFILE: "/lightning/setup/EnhancedProfiles/page?address=%2F{id}",
    MetadataType.PERMISSION_SET: "/lightning/setup/PermSets/page?address=%2F{id}",
    MetadataType.PERMISSION_SET_LICENSE: "/lightning/setup/PermissionSetLicense/page?address=%2F{id}",
    MetadataType.PERMISSION_SET_GROUP: "/lightning/setup/PermSetGroups/page?address=%2F{id}",
    MetadataType.ROLE: "/lightning/setup/Roles/page?address=%2F{id}",
    MetadataType.PUBLIC_GROUP: "/lightning/setup/PublicGroups/page?address=%2Fsetup%2Fown%2Fgroupdetail.jsp%3Fid%3D{id}",
    MetadataType.QUEUE: "/lightning/setup/Queues/page?address=%2Fp%2Fown%2FQueue%2Fd%3Fid%3D{id}",
    MetadataType.TECHNICAL_GROUP: "",
    MetadataType.CUSTOM_LABEL: "/lightning/setup/ExternalStrings/page?address=%2F{id}",
    MetadataType.FLOW_VERSION: "/builder_platform_interaction/flowBuilder.app?flowId={id}",
    MetadataType.FLOW_DEFINITION: "/{id}",
    MetadataType.WORKFLOW_RULE: "/lightning/setup/WorkflowRules/page?address=%2F{id}&nodeId=WorkflowRules",
    MetadataType.VISUAL_FORCE_PAGE: "/lightning/setup/ApexPages/page?address=%2F{id}",
    MetadataType.VISUAL_FORCE_COMPONENT: "/lightning/setup/ApexComponent/page?address=%2F{id}",
    MetadataType.AURA_WEB_COMPONENT: "/lightning/setup/LightningComponentBundles/page?address=%2F{id}",
    MetadataType.LIGHTNING_WEB_COMPONENT: "/lightning/setup/LightningComponentBundles/page?address=%2F{id}",
    MetadataType.APEX_CLASS: "/lightning/setup/ApexClasses/page?address=%2F{id}",
}


def case_safe_id(value: Optional[str]) -> Optional[str]:
    """Reduce an 18-character id to its 15-character form."""
    if value and len(value) == 18:
        return value[:15]
    return value


def get_object_type(api_name: str, is_custom_setting: bool = False) -> str:
    """Object type id of an sobject, from its API name suffix."""
    if is_custom_setting:
        return MetadataType.CUSTOM_SETTING
    for suffix, object_type in _OBJECT_SUFFIXES:
        if api_name.endswith(suffix):
            return object_type
    return MetadataType.STANDARD_OBJECT


def setup_url(
    id: Optional[str],
    type: Optional[str],
    parent_id: Optional[str] = None,
    parent_type: Optional[str] = None,
) -> str:
    """Setup page of a component; blank when the id is unknown."""
    if not id:
        return ""

    if type in (MetadataType.STANDARD_FIELD, MetadataType.CUSTOM_FIELD, MetadataType.ANY_FIELD):
        if parent_type in (
            MetadataType.STANDARD_OBJECT,
            MetadataType.CUSTOM_OBJECT,
            MetadataType.KNOWLEDGE_ARTICLE,
        ):
            if parent_id:
                return f"{_OBJECT_MANAGER}{parent_id}/FieldsAndRelationships/{id}/view"
            return f"{_OBJECT_MANAGER}page?address=%2F{id}"
        page = _SETUP_PAGES.get(parent_type)
        if page:
            return f"/lightning/setup/{page}/page?address=%2F{id}%3Fsetupid%3D{page}"
        return f"{_OBJECT_MANAGER}page?address=%2F{id}"

    if type in (MetadataType.STANDARD_OBJECT, MetadataType.CUSTOM_OBJECT, MetadataType.KNOWLEDGE_ARTICLE):
        return f"{_OBJECT_MANAGER}{id}/Details/view"

    if type in _SETUP_PAGES:
        page = _SETUP_PAGES[type]
        return f"/lightning/setup/{page}/page?address=%2F{id}%3Fsetupid%3D{page}"

    if type in _OBJECT_COMPONENT_PAGES:
        if parent_id:
            return f"{_OBJECT_MANAGER}{parent_id}/{_OBJECT_COMPONENT_PAGES[type]}/{id}/view"
        return f"{_OBJECT_MANAGER}page?address=%2F{id}"

    template = _SIMPLE_TEMPLATES.get(type)
    if template is not None:
        return template.format(id=id)

    logger.debug(f"No setup URL template for type {type!r}, falling back to /{id}")
    return f"/{id}"


# ---------------------------------------------------------------------------
# Canned transports
# ---------------------------------------------------------------------------


class InMemoryTransport(Transport):
    """Serves rows held in memory and records every call.

    Args:
        queries: Rows per QuerySpec key (alias or sobject)
        edges: Dependency edges of the whole org
        dependency_errors: Ids the dependency source fails on
        metadata: Metadata rows per type
        strict: Raise TransportError for unknown query keys instead of
            answering with no rows
    """

    def __init__(
        self,
        queries: Optional[Mapping[str, list[Row]]] = None,
        edges: Iterable[Edge] = (),
        dependency_errors: Iterable[str] = (),
        metadata: Optional[Mapping[str, list[Row]]] = None,
        strict: bool = False,
    ):
        self.queries = dict(queries or {})
        self.edges = tuple(edges)
        self.dependency_errors = frozenset(dependency_errors)
        self.metadata = dict(metadata or {})
        self.strict = strict
        self.calls: list[tuple[str, Any]] = []

    async def execute_queries(self, queries: Sequence[QuerySpec]) -> list[list[Row]]:
        self.calls.append(("query", tuple(q.key for q in queries)))
        await asyncio.sleep(0)
        results = []
        for query in queries:
            if query.key not in self.queries:
                if self.strict and not query.optional:
                    raise TransportError(f"no rows for {query.key}", query.string)
                logger.debug(f"No rows for {query.key}")
            results.append([dict(row) for row in self.queries.get(query.key, [])])
        return results

    async def fetch_dependency_edges(self, ids: Sequence[str]) -> DependencyData:
        wanted = frozenset(ids)
        self.calls.append(("dependencies", len(wanted)))
        await asyncio.sleep(0)
        records = [e for e in self.edges if e.id in wanted or e.ref_id in wanted]
        return DependencyData.of(records, self.dependency_errors & wanted)

    async def fetch_metadata(self, requests: Sequence[MetadataRequest]) -> dict[str, list[Row]]:
        self.calls.append(("metadata", tuple(r.type for r in requests)))
        await asyncio.sleep(0)
        out: dict[str, list[Row]] = {}
        for request in requests:
            rows = self.metadata.get(request.type, [])
            if "*" not in request.members:
                members = {case_safe_id(m) for m in request.members}
                rows = [
                    row
                    for row in rows
                    if case_safe_id(row.get("Id")) in members
                    or row.get("FullName") in members
                    or row.get("name") in members
                ]
            out[request.type] = [dict(row) for row in rows]
        return out


class FixtureTransport(InMemoryTransport):
    """InMemoryTransport fed from a directory::

        <dir>/queries/<key>.json      list of rows per query key
        <dir>/metadata/<type>.json    list of rows per metadata type
        <dir>/dependencies.json       {"records": [edges], "errors": [ids]}
    """

    def __init__(self, directory: Path, strict: bool = False):
        directory = Path(directory)
        if not directory.is_dir():
            raise TransportError(f"fixtures directory not found: {directory}")

        dependencies: dict[str, Any] = {}
        dependencies_file = directory / "dependencies.json"
        if dependencies_file.exists():
            dependencies = _read_json(dependencies_file)

        super().__init__(
            queries=_read_json_dir(directory / "queries"),
            edges=[Edge.from_dict(e) for e in dependencies.get("records", [])],
            dependency_errors=dependencies.get("errors", []),
            metadata=_read_json_dir(directory / "metadata"),
            strict=strict,
        )
        self.directory = directory
        logger.debug(
            f"Fixtures loaded from {directory}: {len(self.queries)} query sets, "
            f"{len(self.metadata)} metadata types, {len(self.edges)} edges"
        )


def _read_json(path: Path) -> Any:
    try:
        with open(path, encoding="utf-8") as f:
            return json.load(f)
    except (OSError, json.JSONDecodeError) as e:
        raise TransportError(f"cannot read fixture {path}: {e}")


def _read_json_dir(directory: Path) -> dict[str, list[Row]]:
    if not directory.is_dir():
        return {}
    return {path.stem: _read_json(path) for path in sorted(directory.glob("*.json"))}
