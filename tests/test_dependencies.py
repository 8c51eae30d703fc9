"""Tests for core/dependencies.py - per-component views of the edge list."""

import pytest

from conftest import RELATIONSHIP_001, RELATIONSHIP_002, edge
from orgcheck.core.dependencies import (
    DependencyData,
    DependencyIndex,
    DependencyView,
    Edge,
    build_dependency_view,
)


class TestKnownRelationships:
    def test_class_using_and_referenced(self):
        view = DependencyIndex().build(DependencyData.of(RELATIONSHIP_001), "ApexClass-001")

        assert len(view.using) == 2
        assert len(view.referenced) == 2
        assert dict(view.referenced_by_types) == {"ApexClass": 1, "CustomField": 1}
        assert view.had_error is False

    def test_field_referenced_only(self):
        view = DependencyIndex().build(DependencyData.of(RELATIONSHIP_002), "CustomField-001")

        assert len(view.using) == 0
        assert len(view.referenced) == 5
        assert dict(view.referenced_by_types) == {"Layout": 4, "ApexClass": 1}

    def test_using_items_describe_the_target(self):
        view = DependencyIndex().build(RELATIONSHIP_001, "ApexClass-001")

        assert [item.id for item in view.using] == ["ApexClass-002", "CustomField-001"]
        assert view.using[1].type == "CustomField"
        assert view.using[1].url == "/CustomField-001"

    def test_referenced_items_keep_input_order(self):
        view = DependencyIndex().build(RELATIONSHIP_002, "CustomField-001")

        assert [item.id for item in view.referenced] == [
            "Layout-001",
            "Layout-002",
            "Layout-003",
            "ApexClass-001",
            "Layout-004",
        ]


class TestViewProperties:
    @pytest.mark.parametrize("focal", ["ApexClass-001", "ApexClass-002", "CustomField-001", "nobody"])
    def test_counts_match_edges(self, focal):
        edges = RELATIONSHIP_001 + RELATIONSHIP_002
        view = DependencyIndex().build(edges, focal)

        assert len(view.using) == sum(1 for e in edges if e.id == focal)
        assert len(view.referenced) == sum(1 for e in edges if e.ref_id == focal)
        assert sum(view.referenced_by_types.values()) == len(view.referenced)

    def test_zero_counts_are_absent(self):
        view = DependencyIndex().build(RELATIONSHIP_001, "ApexClass-002")

        assert "CustomField" not in view.referenced_by_types
        assert dict(view.referenced_by_types) == {"ApexClass": 1}

    def test_unknown_id_is_empty_not_error(self):
        view = DependencyIndex().build(RELATIONSHIP_001, "nobody")

        assert view.using == ()
        assert view.referenced == ()
        assert view.had_error is False

    def test_view_is_immutable(self):
        view = DependencyIndex().build(RELATIONSHIP_001, "ApexClass-001")

        with pytest.raises(Exception):
            view.had_error = True
        with pytest.raises(TypeError):
            view.referenced_by_types["Layout"] = 1


class TestErrorShortCircuit:
    def test_error_from_data(self):
        data = DependencyData.of(RELATIONSHIP_001, errors=["ApexClass-001"])
        view = DependencyIndex().build(data, "ApexClass-001")

        assert view.had_error is True
        assert view.using == ()
        assert view.referenced == ()

    def test_error_from_configured_ids(self):
        view = DependencyIndex(error_ids=["ApexClass-001"]).build(RELATIONSHIP_001, "ApexClass-001")

        assert view.had_error is True

    def test_error_does_not_leak_to_others(self):
        data = DependencyData.of(RELATIONSHIP_001, errors=["ApexClass-003"])
        view = DependencyIndex().build(data, "ApexClass-001")

        assert view.had_error is False
        assert len(view.referenced) == 2

    def test_with_errors_keeps_previous(self):
        data = DependencyData.of([], errors=["a"]).with_errors(["b"])

        assert data.errors == frozenset({"a", "b"})

    def test_shortcut_function(self):
        view = build_dependency_view(RELATIONSHIP_001, "ApexClass-001", error_ids=["ApexClass-001"])

        assert view.had_error is True


class TestMultipleFocalIds:
    def test_edges_of_every_focal_id(self):
        edges = (
            edge("Flow-def", "Flow", "Object-1", "CustomObject"),
            edge("Flow-version", "Flow", "Field-1", "CustomField"),
            edge("Page-1", "LightningPage", "Flow-version", "Flow"),
        )
        view = DependencyIndex().build(edges, ["Flow-def", "Flow-version"])

        assert [item.id for item in view.using] == ["Object-1", "Field-1"]
        assert [item.id for item in view.referenced] == ["Page-1"]

    def test_any_failing_focal_id_fails_the_view(self):
        data = DependencyData.of([], errors=["Flow-version"])
        view = DependencyIndex().build(data, ["Flow-def", "Flow-version"])

        assert view.had_error is True

    def test_blank_focal_ids_ignored(self):
        view = DependencyIndex().build(RELATIONSHIP_001, ["ApexClass-001", None, ""])

        assert len(view.using) == 2


class TestSerialization:
    def test_edge_from_raw_keys(self):
        e = Edge.from_dict(
            {"id": "a", "name": "A", "type": "ApexClass", "url": "/a",
             "refId": "b", "refName": "B", "refType": "CustomField", "refUrl": "/b"}
        )

        assert e.ref_id == "b"
        assert e.ref_type == "CustomField"

    def test_view_dict_form(self):
        view = DependencyIndex().build(RELATIONSHIP_001, "ApexClass-001")
        restored = DependencyView.from_dict(view.to_dict())

        assert restored == view

    def test_error_view_dict_form(self):
        assert DependencyView.error().to_dict() == {"had_error": True}
        assert DependencyView.from_dict({"had_error": True}).had_error is True
