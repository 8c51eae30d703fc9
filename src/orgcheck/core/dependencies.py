"""Dependency index: per-component view of a flat "uses / used by" edge list.

An edge means "component ``id`` (of ``type``) references component ``ref_id``
(of ``ref_type``)". The index never mutates edges and never de-duplicates them;
the transport is expected to hand over unique ``(id, ref_id)`` pairs.

Building a view is O(E) in the number of edges, so indexing every record of a
dataset against the same edge list is O(N * E). E is bounded by the per-batch
limit of the dependency source.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Any, Iterable, Mapping, Optional, Sequence, Union


@dataclass(frozen=True)
class Edge:
    """Directed reference from component ``id`` to component ``ref_id``."""

    id: str
    name: str
    type: str
    url: str
    ref_id: str
    ref_name: str
    ref_type: str
    ref_url: str

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> Edge:
        """Accept both snake_case keys and the camelCase keys of the raw source."""
        return cls(
            id=data["id"],
            name=data.get("name", ""),
            type=data.get("type", ""),
            url=data.get("url", ""),
            ref_id=data.get("ref_id", data.get("refId")),
            ref_name=data.get("ref_name", data.get("refName", "")),
            ref_type=data.get("ref_type", data.get("refType", "")),
            ref_url=data.get("ref_url", data.get("refUrl", "")),
        )


@dataclass(frozen=True)
class DependencyItem:
    """One side of an edge as seen from the focal component."""

    id: str
    name: str
    type: str
    url: str

    def to_dict(self) -> dict[str, str]:
        return {"id": self.id, "name": self.name, "type": self.type, "url": self.url}


@dataclass(frozen=True)
class DependencyData:
    """Edges plus the ids the dependency source reported as failing."""

    records: tuple[Edge, ...] = ()
    errors: frozenset[str] = field(default_factory=frozenset)

    @classmethod
    def of(cls, records: Iterable[Edge], errors: Iterable[str] = ()) -> DependencyData:
        return cls(records=tuple(records), errors=frozenset(errors))

    def with_errors(self, errors: Iterable[str]) -> DependencyData:
        """Return a copy whose error set also contains ``errors``."""
        return DependencyData(records=self.records, errors=self.errors | frozenset(errors))


@dataclass(frozen=True)
class DependencyView:
    """Outgoing and incoming references of one component.

    When ``had_error`` is True the dependency source could not answer for this
    component: ``using`` and ``referenced`` are empty and must not be read as
    "no dependencies".
    """

    using: tuple[DependencyItem, ...] = ()
    referenced: tuple[DependencyItem, ...] = ()
    referenced_by_types: Mapping[str, int] = field(
        default_factory=lambda: MappingProxyType({})
    )
    had_error: bool = False

    @classmethod
    def error(cls) -> DependencyView:
        return cls(had_error=True)

    def to_dict(self) -> dict[str, Any]:
        if self.had_error:
            return {"had_error": True}
        return {
            "had_error": False,
            "using": [item.to_dict() for item in self.using],
            "referenced": [item.to_dict() for item in self.referenced],
            "referenced_by_types": dict(self.referenced_by_types),
        }

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> DependencyView:
        if data.get("had_error"):
            return cls.error()
        return cls(
            using=tuple(DependencyItem(**item) for item in data.get("using", [])),
            referenced=tuple(DependencyItem(**item) for item in data.get("referenced", [])),
            referenced_by_types=MappingProxyType(dict(data.get("referenced_by_types", {}))),
        )


class DependencyIndex:
    """Builds DependencyViews against a fixed set of known-bad ids.

    Args:
        error_ids: Ids that always short-circuit to an error view, on top of
            the errors carried by each DependencyData.
    """

    def __init__(self, error_ids: Iterable[str] = ()):
        self.error_ids = frozenset(error_ids)

    def build(
        self,
        data: Union[DependencyData, Sequence[Edge]],
        focal: Union[str, Sequence[str]],
    ) -> DependencyView:
        """Compute the view of ``focal`` (one id or several ids of the same component).

        Matching edges keep their input order. The error check runs before
        any iteration over the edges.
        """
        if not isinstance(data, DependencyData):
            data = DependencyData.of(data)
        focal_ids = (focal,) if isinstance(focal, str) else tuple(focal)
        focal_set = frozenset(i for i in focal_ids if i)

        if any(i in data.errors or i in self.error_ids for i in focal_set):
            return DependencyView.error()

        using = tuple(
            DependencyItem(id=e.ref_id, name=e.ref_name, type=e.ref_type, url=e.ref_url)
            for e in data.records
            if e.id in focal_set
        )

        referenced: list[DependencyItem] = []
        by_types: dict[str, int] = {}
        for e in data.records:
            if e.ref_id in focal_set:
                referenced.append(DependencyItem(id=e.id, name=e.name, type=e.type, url=e.url))
                by_types[e.type] = by_types.get(e.type, 0) + 1

        return DependencyView(
            using=using,
            referenced=tuple(referenced),
            referenced_by_types=MappingProxyType(by_types),
        )


def build_dependency_view(
    data: Union[DependencyData, Sequence[Edge]],
    focal: Union[str, Sequence[str]],
    error_ids: Optional[Iterable[str]] = None,
) -> DependencyView:
    """Shortcut for ``DependencyIndex(error_ids).build(data, focal)``."""
    return DependencyIndex(error_ids or ()).build(data, focal)
