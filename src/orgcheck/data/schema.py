"""Records describing the data model: objects, fields and their satellites."""

from ..core.records import (
    Data,
    DataWithDependencies,
    DataWithoutScoring,
    RecordType,
    register_record,
)


@register_record
class ObjectType(DataWithoutScoring):
    kind = RecordType.OBJECT_TYPE
    display_name = "Object Type"
    __slots__ = ("id", "label")


@register_record
class Object(DataWithoutScoring):
    """An sobject. Summary counts come from the objects dataset, the
    component lists from the per-object describe."""

    kind = RecordType.OBJECT
    display_name = "Object"
    __slots__ = (
        "id",
        "label",
        "label_plural",
        "name",
        "apiname",
        "url",
        "package",
        "description",
        "is_custom",
        "is_feed_enabled",
        "is_most_recent_enabled",
        "is_searchable",
        "key_prefix",
        "type_id",
        "type_ref",
        "external_sharing_model",
        "internal_sharing_model",
        "nb_custom_fields",
        "nb_page_layouts",
        "nb_record_types",
        "nb_workflow_rules",
        "nb_validation_rules",
        "nb_apex_triggers",
        "standard_fields",
        "custom_field_ids",
        "custom_field_refs",
        "apex_trigger_ids",
        "apex_trigger_refs",
        "field_sets",
        "layouts",
        "limits",
        "validation_rules",
        "web_links",
        "record_types",
        "relationships",
        "flexi_pages",
    )


@register_record
class Field(DataWithDependencies):
    kind = RecordType.FIELD
    display_name = "Standard or Custom Field"
    __slots__ = (
        "id",
        "name",
        "label",
        "url",
        "description",
        "tooltip",
        "type",
        "length",
        "is_unique",
        "is_encrypted",
        "is_external_id",
        "is_indexed",
        "is_restricted_picklist",
        "default_value",
        "formula",
        "package",
        "is_custom",
        "object_id",
        "object_ref",
        "hard_coded_urls",
        "hard_coded_ids",
        "created_date",
        "last_modified_date",
    )


@register_record
class FieldSet(Data):
    kind = RecordType.FIELD_SET
    display_name = "Field Set"
    __slots__ = ("id", "label", "description", "url")


@register_record
class ValidationRule(Data):
    kind = RecordType.VALIDATION_RULE
    display_name = "Validation Rule"
    __slots__ = (
        "id",
        "name",
        "url",
        "package",
        "is_active",
        "description",
        "error_display_field",
        "error_message",
        "object_id",
        "object_ref",
        "created_date",
        "last_modified_date",
    )


@register_record
class RecordTypeInfo(Data):
    """Record type of an object (named to avoid clashing with RecordType)."""

    kind = RecordType.RECORD_TYPE
    display_name = "Record Type"
    __slots__ = (
        "id",
        "name",
        "developer_name",
        "url",
        "package",
        "description",
        "is_active",
        "is_available",
        "is_default",
        "is_master",
        "object_id",
        "object_ref",
    )


@register_record
class PageLayout(Data):
    kind = RecordType.PAGE_LAYOUT
    display_name = "Page Layout"
    __slots__ = (
        "id",
        "name",
        "url",
        "type",
        "package",
        "profile_assignment_count",
        "object_id",
        "object_ref",
        "created_date",
        "last_modified_date",
    )


@register_record
class WebLink(Data):
    kind = RecordType.WEB_LINK
    display_name = "Web Link"
    __slots__ = (
        "id",
        "name",
        "url",
        "package",
        "type",
        "behavior",
        "description",
        "hard_coded_urls",
        "hard_coded_ids",
        "object_id",
        "object_ref",
        "created_date",
        "last_modified_date",
    )


@register_record
class Limit(Data):
    kind = RecordType.LIMIT
    display_name = "Limit"
    __slots__ = ("id", "label", "type", "max", "used", "used_percentage", "remaining")
