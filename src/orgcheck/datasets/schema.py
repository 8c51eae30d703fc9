"""Datasets describing the data model."""

from __future__ import annotations

import asyncio
import logging
from typing import Any, Mapping, Optional

from ..core import codescanner
from ..core.factory import DataFactory
from ..data import (
    Field,
    FieldSet,
    Limit,
    Object,
    ObjectType,
    PageLayout,
    RecordTypeInfo,
    ValidationRule,
    WebLink,
)
from ..transport import (
    OBJECT_TYPE_LABELS,
    MetadataRequest,
    MetadataType,
    QuerySpec,
    Transport,
    case_safe_id,
    get_object_type,
    setup_url,
)
from .base import Dataset, DatasetAliases, nested, package_of, record_ids

# Comment, History, Share, Feed and Event companions of custom objects
EXCLUDED_OBJECT_PREFIXES = ("00a", "017", "02c", "0D5", "1CE")

# Trending historical objects
EXCLUDED_OBJECT_SUFFIX = "_hd"


def is_excluded_object(api_name: Optional[str], key_prefix: Optional[str]) -> bool:
    return key_prefix in EXCLUDED_OBJECT_PREFIXES or bool(api_name and api_name.endswith(EXCLUDED_OBJECT_SUFFIX))


class ObjectTypesDataset(Dataset):
    alias = DatasetAliases.OBJECT_TYPES
    description = "Kinds of sobjects (standard, custom, external, ...)"

    async def run(self, transport: Transport, factory: DataFactory, logger: logging.Logger, parameters: Mapping[str, Any]):
        type_factory = factory.get_instance(ObjectType)
        return {
            id: type_factory.create({"id": id, "label": label})
            for id, label in OBJECT_TYPE_LABELS.items()
        }


class ObjectsDataset(Dataset):
    alias = DatasetAliases.OBJECTS
    description = "Every sobject with component counts"

    async def run(self, transport: Transport, factory: DataFactory, logger: logging.Logger, parameters: Mapping[str, Any]):
        logger.info("Performing a global describe and querying EntityDefinition...")
        where = (
            "WHERE KeyPrefix <> null AND DeveloperName <> null "
            f"AND (NOT(KeyPrefix IN ({', '.join(repr(p) for p in EXCLUDED_OBJECT_PREFIXES)}))) "
            f"AND (NOT(QualifiedApiName like '%{EXCLUDED_OBJECT_SUFFIX}'))"
        )
        describe, results = await asyncio.gather(
            transport.fetch_metadata([MetadataRequest(MetadataType.GLOBAL_DESCRIBE)]),
            transport.execute_queries(
                [
                    QuerySpec(
                        "SELECT DurableId, NamespacePrefix, DeveloperName, QualifiedApiName, "
                        "ExternalSharingModel, InternalSharingModel FROM EntityDefinition " + where,
                        "EntityDefinition",
                        tooling=True,
                    ),
                    _count_query("CustomField", "NbCustomFields"),
                    _count_query("Layout", "NbPageLayouts"),
                    _count_query("RecordType", "NbRecordTypes"),
                    _count_query("WorkflowRule", "NbWorkflowRules", group_by="TableEnumOrId"),
                    _count_query("ValidationRule", "NbValidationRules"),
                    _count_query("ApexTrigger", "NbTriggers"),
                ]
            ),
        )
        entities, *count_rows = results
        entities_by_name = {row["QualifiedApiName"]: row for row in entities if row.get("QualifiedApiName")}
        (custom_fields, layouts, record_types, workflow_rules, validation_rules, triggers) = (
            _counts(rows) for rows in count_rows
        )

        object_factory = factory.get_instance(Object)
        sobjects = describe.get(MetadataType.GLOBAL_DESCRIBE, [])
        logger.info(f"Parsing {len(sobjects)} objects...")
        objects = {}
        for sobject in sobjects:
            name = sobject.get("name")
            entity = entities_by_name.get(name)
            if entity is None:
                continue
            type_id = get_object_type(name, sobject.get("customSetting") is True)
            durable_id = entity.get("DurableId")
            objects[name] = object_factory.create(
                {
                    "id": name,
                    "label": sobject.get("label"),
                    "label_plural": sobject.get("labelPlural"),
                    "name": entity.get("DeveloperName"),
                    "apiname": name,
                    "package": package_of(entity),
                    "is_custom": sobject.get("custom"),
                    "key_prefix": sobject.get("keyPrefix"),
                    "type_id": type_id,
                    "external_sharing_model": entity.get("ExternalSharingModel"),
                    "internal_sharing_model": entity.get("InternalSharingModel"),
                    "nb_custom_fields": custom_fields.get(durable_id, 0),
                    "nb_page_layouts": layouts.get(durable_id, 0),
                    "nb_record_types": record_types.get(durable_id, 0),
                    "nb_workflow_rules": workflow_rules.get(name, 0),
                    "nb_validation_rules": validation_rules.get(durable_id, 0),
                    "nb_apex_triggers": triggers.get(durable_id, 0),
                    "url": setup_url(durable_id, type_id),
                }
            )

        logger.info("Done")
        return objects


def _count_query(sobject: str, label: str, group_by: str = "EntityDefinitionId") -> QuerySpec:
    return QuerySpec(
        f"SELECT {group_by}, COUNT(Id) Nb FROM {sobject} GROUP BY {group_by}",
        sobject,
        tooling=True,
        alias=label,
    )


def _counts(rows: list[Mapping[str, Any]]) -> dict[str, int]:
    counts = {}
    for row in rows:
        key = row.get("EntityDefinitionId") or row.get("TableEnumOrId")
        if key:
            counts[key] = row.get("Nb") or 0
    return counts


class ObjectDataset(Dataset):
    """Full describe of a single sobject. Returns None when the org does not know it."""

    alias = DatasetAliases.OBJECT
    description = "Describe of one sobject with its fields and satellites"

    async def run(self, transport: Transport, factory: DataFactory, logger: logging.Logger, parameters: Mapping[str, Any]):
        api_name = parameters["object"]
        parts = api_name.split("__")
        namespace = parts[0] if len(parts) == 3 else ""
        namespace_filter = f"AND NamespacePrefix = '{namespace}' " if namespace else ""

        logger.info(f"Describing {api_name} and querying its EntityDefinition...")
        describe, (entity_rows, field_rows) = await asyncio.gather(
            transport.fetch_metadata([MetadataRequest(MetadataType.SOBJECT_DESCRIBE, (api_name,))]),
            transport.execute_queries(
                [
                    QuerySpec(
                        "SELECT Id, DurableId, DeveloperName, Description, NamespacePrefix, "
                        "ExternalSharingModel, InternalSharingModel, "
                        "(SELECT Id FROM ApexTriggers), "
                        "(SELECT Id, MasterLabel, Description FROM FieldSets), "
                        "(SELECT Id, Name, LayoutType FROM Layouts), "
                        "(SELECT DurableId, Label, Max, Remaining, Type FROM Limits), "
                        "(SELECT Id, Active, Description, ErrorDisplayField, ErrorMessage, ValidationName, "
                        "NamespacePrefix, CreatedDate, LastModifiedDate FROM ValidationRules), "
                        "(SELECT Id, Name, Url, LinkType, OpenType, Description, CreatedDate, "
                        "LastModifiedDate, NamespacePrefix FROM WebLinks) "
                        f"FROM EntityDefinition WHERE QualifiedApiName = '{api_name}' "
                        + namespace_filter
                        + "LIMIT 1",
                        "EntityDefinition",
                        tooling=True,
                        alias=f"EntityDefinition.{api_name}",
                    ),
                    QuerySpec(
                        "SELECT DurableId, QualifiedApiName, Description, IsIndexed FROM FieldDefinition "
                        f"WHERE EntityDefinition.QualifiedApiName = '{api_name}' "
                        + namespace_filter.replace("NamespacePrefix", "EntityDefinition.NamespacePrefix"),
                        "FieldDefinition",
                        tooling=True,
                        alias=f"FieldDefinition.{api_name}",
                    ),
                ]
            ),
        )

        described = describe.get(MetadataType.SOBJECT_DESCRIBE) or []
        if not described or not entity_rows:
            logger.warning(f"No describe or entity definition found for {api_name}")
            return None
        sobject = described[0]
        entity = entity_rows[0]
        durable_id = entity.get("DurableId")
        type_id = get_object_type(sobject.get("name", api_name), sobject.get("customSetting") is True)

        custom_field_ids = []
        standard_field_info = {}
        for row in field_rows:
            parts = (row.get("DurableId") or "").split(".")
            if len(parts) < 2:
                continue
            id = case_safe_id(parts[1])
            # Custom field ids start with 00N
            if parts[1].startswith("00N"):
                custom_field_ids.append(id)
            else:
                standard_field_info[row.get("QualifiedApiName")] = row | {"id": id}

        field_factory = factory.get_instance(Field)
        standard_fields = []
        for field in sobject.get("fields") or []:
            info = standard_field_info.get(field.get("name"))
            if info is None:
                continue
            standard_fields.append(
                field_factory.create_with_score(
                    {
                        "id": info["id"],
                        "name": field.get("label"),
                        "label": field.get("label"),
                        "description": info.get("Description"),
                        "tooltip": field.get("inlineHelpText"),
                        "type": field.get("type"),
                        "length": field.get("length"),
                        "is_unique": field.get("unique"),
                        "is_encrypted": field.get("encrypted"),
                        "is_external_id": field.get("externalId"),
                        "is_indexed": info.get("IsIndexed"),
                        "default_value": field.get("defaultValue"),
                        "formula": field.get("calculatedFormula"),
                        "is_custom": False,
                        "object_id": api_name,
                        "url": setup_url(info["id"], MetadataType.STANDARD_FIELD, durable_id, type_id),
                    }
                )
            )

        field_set_factory = factory.get_instance(FieldSet)
        field_sets = [
            field_set_factory.create_with_score(
                {
                    "id": case_safe_id(r["Id"]),
                    "label": r.get("MasterLabel"),
                    "description": r.get("Description"),
                    "url": setup_url(r["Id"], MetadataType.FIELD_SET, durable_id),
                }
            )
            for r in _subquery(entity, "FieldSets")
        ]

        layout_factory = factory.get_instance(PageLayout)
        layouts = [
            layout_factory.create_with_score(
                {
                    "id": case_safe_id(r["Id"]),
                    "name": r.get("Name"),
                    "type": r.get("LayoutType"),
                    "object_id": api_name,
                    "url": setup_url(r["Id"], MetadataType.PAGE_LAYOUT, durable_id),
                }
            )
            for r in _subquery(entity, "Layouts")
        ]

        limit_factory = factory.get_instance(Limit)
        limits = []
        for r in _subquery(entity, "Limits"):
            maximum = r.get("Max") or 0
            used = maximum - (r.get("Remaining") or 0)
            limits.append(
                limit_factory.create_with_score(
                    {
                        "id": case_safe_id(r.get("DurableId")),
                        "label": r.get("Label"),
                        "max": maximum,
                        "remaining": r.get("Remaining"),
                        "used": used,
                        "used_percentage": used / maximum if maximum else None,
                        "type": r.get("Type"),
                    }
                )
            )

        rule_factory = factory.get_instance(ValidationRule)
        validation_rules = [
            rule_factory.create_with_score(
                {
                    "id": case_safe_id(r["Id"]),
                    "name": r.get("ValidationName"),
                    "is_active": r.get("Active"),
                    "description": r.get("Description"),
                    "error_display_field": r.get("ErrorDisplayField"),
                    "error_message": r.get("ErrorMessage"),
                    "package": package_of(r),
                    "object_id": api_name,
                    "created_date": r.get("CreatedDate"),
                    "last_modified_date": r.get("LastModifiedDate"),
                    "url": setup_url(r["Id"], MetadataType.VALIDATION_RULE),
                }
            )
            for r in _subquery(entity, "ValidationRules")
        ]

        link_factory = factory.get_instance(WebLink)
        web_links = [_web_link(link_factory, r, api_name, durable_id) for r in _subquery(entity, "WebLinks")]

        record_type_factory = factory.get_instance(RecordTypeInfo)
        record_types = [
            record_type_factory.create_with_score(
                {
                    "id": case_safe_id(r.get("recordTypeId")),
                    "name": r.get("name"),
                    "developer_name": r.get("developerName"),
                    "is_active": r.get("active"),
                    "is_available": r.get("available"),
                    "is_default": r.get("defaultRecordTypeMapping"),
                    "is_master": r.get("master"),
                    "object_id": api_name,
                    "url": setup_url(r.get("recordTypeId"), MetadataType.RECORD_TYPE, durable_id),
                }
            )
            for r in sobject.get("recordTypeInfos") or []
        ]

        relationships = [
            {
                "name": r.get("relationshipName"),
                "child_object": r.get("childSObject"),
                "field_name": r.get("field"),
                "is_cascade_delete": r.get("cascadeDelete"),
                "is_restricted_delete": r.get("restrictedDelete"),
            }
            for r in sobject.get("childRelationships") or []
            if r.get("relationshipName") is not None
        ]

        object_factory = factory.get_instance(Object)
        record = object_factory.create(
            {
                "id": durable_id,
                "label": sobject.get("label"),
                "label_plural": sobject.get("labelPlural"),
                "is_custom": sobject.get("custom"),
                "is_feed_enabled": sobject.get("feedEnabled"),
                "is_most_recent_enabled": sobject.get("mruEnabled"),
                "is_searchable": sobject.get("searchable"),
                "key_prefix": sobject.get("keyPrefix"),
                "name": entity.get("DeveloperName"),
                "apiname": sobject.get("name", api_name),
                "package": package_of(entity),
                "type_id": type_id,
                "description": entity.get("Description"),
                "external_sharing_model": entity.get("ExternalSharingModel"),
                "internal_sharing_model": entity.get("InternalSharingModel"),
                "apex_trigger_ids": [case_safe_id(r["Id"]) for r in _subquery(entity, "ApexTriggers")],
                "custom_field_ids": custom_field_ids,
                "standard_fields": standard_fields,
                "field_sets": field_sets,
                "layouts": layouts,
                "limits": limits,
                "validation_rules": validation_rules,
                "web_links": web_links,
                "record_types": record_types,
                "relationships": relationships,
                "url": setup_url(entity.get("Id"), type_id),
            }
        )
        logger.info("Done")
        return record


def _subquery(entity: Mapping[str, Any], name: str) -> list[Mapping[str, Any]]:
    return nested(entity, name, "records") or []


def _web_link(link_factory, row: Mapping[str, Any], object_id: Optional[str], parent_id: Optional[str]) -> WebLink:
    id = case_safe_id(row["Id"])
    return link_factory.create_with_score(
        {
            "id": id,
            "name": row.get("Name"),
            "hard_coded_urls": codescanner.find_hard_coded_urls(row.get("Url")),
            "hard_coded_ids": codescanner.find_hard_coded_ids(row.get("Url")),
            "type": row.get("LinkType"),
            "behavior": row.get("OpenType"),
            "package": package_of(row),
            "description": row.get("Description"),
            "object_id": object_id,
            "created_date": row.get("CreatedDate"),
            "last_modified_date": row.get("LastModifiedDate"),
            "url": setup_url(id, MetadataType.WEB_LINK, parent_id),
        }
    )


class CustomFieldsDataset(Dataset):
    alias = DatasetAliases.CUSTOM_FIELDS
    description = "Custom fields of every object"

    async def run(self, transport: Transport, factory: DataFactory, logger: logging.Logger, parameters: Mapping[str, Any]):
        # Optional: restrict to the fields of one object
        only_object = parameters.get("object")
        query = (
            "SELECT Id, EntityDefinition.QualifiedApiName, EntityDefinition.IsCustomSetting, "
            "EntityDefinition.KeyPrefix FROM CustomField "
            "WHERE ManageableState IN ('installedEditable', 'unmanaged')"
        )
        if only_object:
            query += f" AND EntityDefinition.QualifiedApiName = '{only_object}'"

        logger.info("Querying CustomField...")
        (rows,) = await transport.execute_queries([QuerySpec(query, "CustomField", tooling=True)])
        entity_by_field_id = {}
        for row in rows:
            entity = row.get("EntityDefinition")
            if not entity or is_excluded_object(entity.get("QualifiedApiName"), entity.get("KeyPrefix")):
                continue
            if only_object and entity.get("QualifiedApiName") != only_object:
                continue
            entity_by_field_id[case_safe_id(row["Id"])] = entity

        logger.info(f"Retrieving dependencies of {len(rows)} custom fields...")
        dependencies = await transport.fetch_dependency_edges(record_ids(rows))

        logger.info(f"Reading metadata of {len(entity_by_field_id)} custom fields...")
        metadata = await transport.fetch_metadata(
            [MetadataRequest(MetadataType.CUSTOM_FIELD, tuple(entity_by_field_id))]
        )

        field_factory = factory.get_instance(Field)
        fields = {}
        for row in metadata.get(MetadataType.CUSTOM_FIELD, []):
            id = case_safe_id(row["Id"])
            entity = entity_by_field_id.get(id)
            if entity is None:
                continue
            definition = row.get("Metadata") or {}
            object_name = entity.get("QualifiedApiName")
            object_type = get_object_type(object_name, entity.get("IsCustomSetting") is True)
            value_set = definition.get("valueSet")
            field = field_factory.create(
                {
                    "id": id,
                    "name": row.get("DeveloperName"),
                    "label": definition.get("label"),
                    "package": package_of(row),
                    "description": row.get("Description"),
                    "is_custom": True,
                    "object_id": object_name,
                    "tooltip": row.get("InlineHelpText"),
                    "type": definition.get("type"),
                    "length": definition.get("length"),
                    "is_unique": definition.get("unique") is True,
                    "is_encrypted": definition.get("encryptionScheme") not in (None, "None"),
                    "is_external_id": definition.get("externalId") is True,
                    "is_indexed": definition.get("unique") is True or definition.get("externalId") is True,
                    "is_restricted_picklist": (
                        isinstance(value_set, str) or (isinstance(value_set, Mapping) and value_set.get("restricted") is True)
                    ),
                    "default_value": definition.get("defaultValue"),
                    "formula": definition.get("formula"),
                    "created_date": row.get("CreatedDate"),
                    "last_modified_date": row.get("LastModifiedDate"),
                    "url": setup_url(id, MetadataType.CUSTOM_FIELD, object_name, object_type),
                },
                dependencies,
            )
            if field.formula:
                source = codescanner.remove_comments_from_code(field.formula)
                field.hard_coded_urls = codescanner.find_hard_coded_urls(source)
                field.hard_coded_ids = codescanner.find_hard_coded_ids(source)
            field_factory.compute_score(field)
            fields[id] = field

        logger.info("Done")
        return fields


class ValidationRulesDataset(Dataset):
    alias = DatasetAliases.VALIDATION_RULES
    description = "Validation rules of every object"

    async def run(self, transport: Transport, factory: DataFactory, logger: logging.Logger, parameters: Mapping[str, Any]):
        logger.info("Querying ValidationRule...")
        (rows,) = await transport.execute_queries(
            [
                QuerySpec(
                    "SELECT Id, Active, Description, ErrorDisplayField, ErrorMessage, ValidationName, "
                    "NamespacePrefix, EntityDefinition.QualifiedApiName, CreatedDate, LastModifiedDate "
                    "FROM ValidationRule",
                    "ValidationRule",
                    tooling=True,
                )
            ]
        )
        rule_factory = factory.get_instance(ValidationRule)
        logger.info(f"Parsing {len(rows)} validation rules...")
        rules = {}
        for row in rows:
            id = case_safe_id(row["Id"])
            rules[id] = rule_factory.create_with_score(
                {
                    "id": id,
                    "name": row.get("ValidationName"),
                    "is_active": row.get("Active"),
                    "description": row.get("Description"),
                    "error_display_field": row.get("ErrorDisplayField"),
                    "error_message": row.get("ErrorMessage"),
                    "package": package_of(row),
                    "object_id": nested(row, "EntityDefinition", "QualifiedApiName"),
                    "created_date": row.get("CreatedDate"),
                    "last_modified_date": row.get("LastModifiedDate"),
                    "url": setup_url(id, MetadataType.VALIDATION_RULE),
                }
            )
        logger.info("Done")
        return rules


class RecordTypesDataset(Dataset):
    alias = DatasetAliases.RECORD_TYPES
    description = "Active record types of every object"

    async def run(self, transport: Transport, factory: DataFactory, logger: logging.Logger, parameters: Mapping[str, Any]):
        logger.info("Querying RecordType...")
        (rows,) = await transport.execute_queries(
            [
                QuerySpec(
                    "SELECT Id, Name, DeveloperName, NamespacePrefix, Description, IsActive, SobjectType "
                    "FROM RecordType WHERE IsActive = true",
                    "RecordType",
                )
            ]
        )
        record_type_factory = factory.get_instance(RecordTypeInfo)
        logger.info(f"Parsing {len(rows)} record types...")
        record_types = {}
        for row in rows:
            id = case_safe_id(row["Id"])
            # Availability and default mapping are only known from a describe
            record_types[id] = record_type_factory.create_with_score(
                {
                    "id": id,
                    "name": row.get("Name"),
                    "developer_name": row.get("DeveloperName"),
                    "package": package_of(row),
                    "description": row.get("Description"),
                    "is_active": row.get("IsActive"),
                    "object_id": row.get("SobjectType"),
                    "url": setup_url(id, MetadataType.RECORD_TYPE, row.get("SobjectType")),
                }
            )
        logger.info("Done")
        return record_types


class PageLayoutsDataset(Dataset):
    alias = DatasetAliases.PAGE_LAYOUTS
    description = "Page layouts with their profile assignment counts"

    async def run(self, transport: Transport, factory: DataFactory, logger: logging.Logger, parameters: Mapping[str, Any]):
        logger.info("Querying Layout and ProfileLayout...")
        layout_rows, assignment_rows = await transport.execute_queries(
            [
                QuerySpec(
                    "SELECT Id, Name, NamespacePrefix, LayoutType, EntityDefinition.QualifiedApiName, "
                    "CreatedDate, LastModifiedDate FROM Layout",
                    "Layout",
                    tooling=True,
                ),
                QuerySpec(
                    "SELECT LayoutId, COUNT(ProfileId) CountAssignment FROM ProfileLayout "
                    "WHERE Profile.Name != null GROUP BY LayoutId",
                    "ProfileLayout",
                    tooling=True,
                ),
            ]
        )
        layout_factory = factory.get_instance(PageLayout)

        logger.info(f"Parsing {len(layout_rows)} page layouts...")
        layouts = {}
        for row in layout_rows:
            object_name = nested(row, "EntityDefinition", "QualifiedApiName")
            if not object_name:
                continue
            id = case_safe_id(row["Id"])
            layouts[id] = layout_factory.create(
                {
                    "id": id,
                    "name": row.get("Name"),
                    "package": package_of(row),
                    "object_id": object_name,
                    "type": row.get("LayoutType"),
                    "profile_assignment_count": 0,
                    "created_date": row.get("CreatedDate"),
                    "last_modified_date": row.get("LastModifiedDate"),
                    "url": setup_url(id, MetadataType.PAGE_LAYOUT, object_name),
                }
            )

        for row in assignment_rows:
            layout = layouts.get(case_safe_id(row.get("LayoutId")))
            if layout is not None:
                layout.profile_assignment_count += row.get("CountAssignment") or 0

        for layout in layouts.values():
            layout_factory.compute_score(layout)

        logger.info("Done")
        return layouts


class WebLinksDataset(Dataset):
    alias = DatasetAliases.WEB_LINKS
    description = "Buttons, links and actions of every object"

    async def run(self, transport: Transport, factory: DataFactory, logger: logging.Logger, parameters: Mapping[str, Any]):
        logger.info("Querying WebLink...")
        (rows,) = await transport.execute_queries(
            [
                QuerySpec(
                    "SELECT Id, Name, Url, LinkType, OpenType, Description, CreatedDate, LastModifiedDate, "
                    "NamespacePrefix, PageOrSobjectType FROM WebLink "
                    "WHERE ManageableState IN ('installedEditable', 'unmanaged')",
                    "WebLink",
                    tooling=True,
                )
            ]
        )
        link_factory = factory.get_instance(WebLink)
        logger.info(f"Parsing {len(rows)} web links...")
        links = {}
        for row in rows:
            object_name = row.get("PageOrSobjectType")
            link = _web_link(link_factory, row, object_name, object_name)
            links[link.id] = link
        logger.info("Done")
        return links
