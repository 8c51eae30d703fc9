"""Recipes over the data model: objects, fields and object components."""

from __future__ import annotations

import logging
from typing import Any, Mapping, Optional

from ..datasets.base import DatasetAliases
from ..exceptions import EntityNotFoundError, MissingDatasetError, RecipeError
from .base import (
    Recipe,
    RecipeAliases,
    lookup,
    matches,
    namespace_of,
    object_of,
    object_type_of,
    per_object,
)


def link_object(record: Any, objects: Mapping[str, Any], types: Mapping[str, Any]) -> Optional[Any]:
    """Point ``record.object_ref`` at its object, resolving the object's type on the way."""
    object_ref = objects.get(record.object_id)
    if object_ref is not None and object_ref.type_ref is None:
        object_ref.type_ref = types.get(object_ref.type_id)
    record.object_ref = object_ref
    return object_ref


class ObjectComponentsRecipe(Recipe):
    """Components attached to an object, filtered on package, object type and object."""

    dataset: str

    def extract(self, parameters: Mapping[str, Any]) -> list:
        return [self.dataset, DatasetAliases.OBJECT_TYPES, DatasetAliases.OBJECTS]

    def transform(self, data: Mapping[str, Any], logger: logging.Logger, parameters: Mapping[str, Any]) -> list:
        (records, types, objects) = self.require(
            data, self.dataset, DatasetAliases.OBJECT_TYPES, DatasetAliases.OBJECTS
        )
        namespace = namespace_of(parameters)
        object_type = object_type_of(parameters)
        object_name = object_of(parameters)

        out = []
        for record in records.values():
            object_ref = link_object(record, objects, types)
            type_id = object_ref.type_ref.id if object_ref is not None and object_ref.type_ref is not None else None
            if (
                matches(namespace, record.package)
                and matches(object_type, type_id)
                and matches(object_name, object_ref.apiname if object_ref is not None else None)
            ):
                out.append(record)
        return out


class CustomFieldsRecipe(ObjectComponentsRecipe):
    alias = RecipeAliases.CUSTOM_FIELDS
    description = "Custom fields linked to their object and object type"
    dataset = DatasetAliases.CUSTOM_FIELDS


class ValidationRulesRecipe(ObjectComponentsRecipe):
    alias = RecipeAliases.VALIDATION_RULES
    dataset = DatasetAliases.VALIDATION_RULES


class RecordTypesRecipe(ObjectComponentsRecipe):
    alias = RecipeAliases.RECORD_TYPES
    dataset = DatasetAliases.RECORD_TYPES


class PageLayoutsRecipe(ObjectComponentsRecipe):
    alias = RecipeAliases.PAGE_LAYOUTS
    dataset = DatasetAliases.PAGE_LAYOUTS


class WebLinksRecipe(ObjectComponentsRecipe):
    alias = RecipeAliases.WEB_LINKS
    dataset = DatasetAliases.WEB_LINKS


class ObjectTypesRecipe(Recipe):
    alias = RecipeAliases.OBJECT_TYPES

    def extract(self, parameters: Mapping[str, Any]) -> list:
        return [DatasetAliases.OBJECT_TYPES]

    def transform(self, data: Mapping[str, Any], logger: logging.Logger, parameters: Mapping[str, Any]) -> list:
        (types,) = self.require(data, DatasetAliases.OBJECT_TYPES)
        return list(types.values())


class ObjectsRecipe(Recipe):
    alias = RecipeAliases.OBJECTS
    description = "Objects with their type, sorted by label"

    def extract(self, parameters: Mapping[str, Any]) -> list:
        return [DatasetAliases.OBJECT_TYPES, DatasetAliases.OBJECTS]

    def transform(self, data: Mapping[str, Any], logger: logging.Logger, parameters: Mapping[str, Any]) -> list:
        (types, objects) = self.require(data, DatasetAliases.OBJECT_TYPES, DatasetAliases.OBJECTS)
        namespace = namespace_of(parameters)
        object_type = object_type_of(parameters)
        out = []
        for record in objects.values():
            record.type_ref = types.get(record.type_id)
            if matches(namespace, record.package) and matches(object_type, record.type_id):
                out.append(record)
        return sorted(out, key=lambda o: o.label or "")


class ObjectRecipe(Recipe):
    """One object described in full, with its triggers, pages and custom fields.

    Requires the ``object`` parameter (API name).
    """

    alias = RecipeAliases.OBJECT

    def extract(self, parameters: Mapping[str, Any]) -> list:
        name = parameters.get("object")
        if not name:
            raise RecipeError(self.alias, "parameter 'object' is required")
        return [
            per_object(DatasetAliases.OBJECT, name),
            DatasetAliases.OBJECT_TYPES,
            DatasetAliases.APEX_TRIGGERS,
            DatasetAliases.LIGHTNING_PAGES,
            per_object(DatasetAliases.CUSTOM_FIELDS, name),
        ]

    def transform(self, data: Mapping[str, Any], logger: logging.Logger, parameters: Mapping[str, Any]) -> Any:
        # The object dataset answers None for an unknown object
        if DatasetAliases.OBJECT not in data:
            raise MissingDatasetError(self.alias, DatasetAliases.OBJECT)
        record = data[DatasetAliases.OBJECT]
        (types, triggers, pages, fields) = self.require(
            data,
            DatasetAliases.OBJECT_TYPES,
            DatasetAliases.APEX_TRIGGERS,
            DatasetAliases.LIGHTNING_PAGES,
            DatasetAliases.CUSTOM_FIELDS,
        )
        if record is None:
            raise EntityNotFoundError("Object", parameters["object"])

        record.type_ref = types.get(record.type_id)
        record.apex_trigger_refs = lookup(record.apex_trigger_ids, triggers)
        for trigger in record.apex_trigger_refs:
            trigger.object_ref = record
        record.custom_field_refs = lookup(record.custom_field_ids, fields)
        for field in record.custom_field_refs:
            field.object_ref = record
        record.flexi_pages = [p for p in pages.values() if p.object_id == record.apiname]
        return record
