"""Records for code and automation: apex, flows, lightning and visualforce."""

from ..core.records import (
    Data,
    DataWithDependencies,
    DataWithoutScoring,
    RecordType,
    register_record,
)


@register_record
class ApexTestMethodResult(DataWithoutScoring):
    """Outcome of one method during the last test run of a test class."""

    kind = RecordType.APEX_TEST_METHOD_RESULT
    display_name = "Apex Test Method Result"
    __slots__ = ("method_name", "is_successful", "runtime", "stacktrace")


@register_record
class ApexClass(DataWithDependencies):
    """Apex class, enriched with symbol table, coverage and test results."""

    kind = RecordType.APEX_CLASS
    display_name = "Apex Class"
    __slots__ = (
        "id",
        "name",
        "url",
        "api_version",
        "package",
        "is_test",
        "is_test_see_all_data",
        "nb_system_asserts",
        "is_abstract",
        "is_class",
        "is_enum",
        "is_interface",
        "inner_classes_count",
        "is_schedulable",
        "is_scheduled",
        "interfaces",
        "extends",
        "methods_count",
        "annotations",
        "specified_sharing",
        "specified_access",
        "length",
        "source_code",
        "needs_recompilation",
        "coverage",
        "related_test_class_ids",
        "related_test_class_refs",
        "related_class_ids",
        "related_class_refs",
        "hard_coded_urls",
        "hard_coded_ids",
        "last_test_run_date",
        "test_methods_run_time",
        "test_passed_methods",
        "test_failed_methods",
        "test_passed_but_long_methods",
        "created_date",
        "last_modified_date",
    )


@register_record
class ApexTrigger(DataWithDependencies):
    kind = RecordType.APEX_TRIGGER
    display_name = "Apex Trigger"
    __slots__ = (
        "id",
        "name",
        "url",
        "api_version",
        "package",
        "length",
        "is_active",
        "before_insert",
        "after_insert",
        "before_update",
        "after_update",
        "before_delete",
        "after_delete",
        "after_undelete",
        "object_id",
        "object_ref",
        "has_soql",
        "has_dml",
        "hard_coded_urls",
        "hard_coded_ids",
        "created_date",
        "last_modified_date",
    )


@register_record
class CustomLabel(DataWithDependencies):
    kind = RecordType.CUSTOM_LABEL
    display_name = "Custom Label"
    __slots__ = (
        "id",
        "name",
        "url",
        "package",
        "category",
        "is_protected",
        "language",
        "value",
        "created_date",
        "last_modified_date",
    )


@register_record
class FlowVersion(DataWithoutScoring):
    """The version of a flow that is analyzed: the active one, or the latest."""

    kind = RecordType.FLOW_VERSION
    display_name = "Flow Version"
    __slots__ = (
        "id",
        "name",
        "url",
        "version",
        "api_version",
        "total_node_count",
        "dml_create_node_count",
        "dml_delete_node_count",
        "dml_update_node_count",
        "screen_node_count",
        "is_active",
        "description",
        "type",
        "running_mode",
        "sobject",
        "trigger_type",
        "record_trigger_type",
        "created_date",
        "last_modified_date",
    )


@register_record
class Flow(DataWithDependencies):
    """Flow definition (flow or process builder) with its current version."""

    kind = RecordType.FLOW
    display_name = "Flow or Process Builder"
    __slots__ = (
        "id",
        "name",
        "url",
        "api_version",
        "current_version_id",
        "current_version_ref",
        "is_latest_current_version",
        "is_version_active",
        "versions_count",
        "description",
        "type",
        "is_process_builder",
        "created_date",
        "last_modified_date",
    )


@register_record
class Workflow(Data):
    kind = RecordType.WORKFLOW
    display_name = "Workflow"
    __slots__ = (
        "id",
        "name",
        "url",
        "description",
        "actions",
        "future_actions",
        "empty_time_triggers",
        "is_active",
        "has_action",
        "created_date",
        "last_modified_date",
    )


@register_record
class LightningAuraComponent(DataWithDependencies):
    kind = RecordType.LIGHTNING_AURA_COMPONENT
    display_name = "Aura Component"
    __slots__ = (
        "id",
        "name",
        "url",
        "api_version",
        "package",
        "description",
        "created_date",
        "last_modified_date",
    )


@register_record
class LightningWebComponent(DataWithDependencies):
    kind = RecordType.LIGHTNING_WEB_COMPONENT
    display_name = "Lightning Web Component"
    __slots__ = (
        "id",
        "name",
        "url",
        "api_version",
        "package",
        "description",
        "created_date",
        "last_modified_date",
    )


@register_record
class LightningPage(DataWithDependencies):
    kind = RecordType.LIGHTNING_PAGE
    display_name = "Lightning Page"
    __slots__ = (
        "id",
        "name",
        "url",
        "type",
        "package",
        "object_id",
        "object_ref",
        "description",
        "created_date",
        "last_modified_date",
    )


@register_record
class VisualForcePage(DataWithDependencies):
    kind = RecordType.VISUALFORCE_PAGE
    display_name = "Visualforce Page"
    __slots__ = (
        "id",
        "name",
        "url",
        "api_version",
        "package",
        "is_mobile_ready",
        "description",
        "hard_coded_urls",
        "hard_coded_ids",
        "created_date",
        "last_modified_date",
    )


@register_record
class VisualForceComponent(DataWithDependencies):
    kind = RecordType.VISUALFORCE_COMPONENT
    display_name = "Visualforce Component"
    __slots__ = (
        "id",
        "name",
        "url",
        "api_version",
        "package",
        "description",
        "hard_coded_urls",
        "hard_coded_ids",
        "created_date",
        "last_modified_date",
    )


@register_record
class HomePageComponent(Data):
    kind = RecordType.HOME_PAGE_COMPONENT
    display_name = "Home Page Component"
    __slots__ = (
        "id",
        "name",
        "url",
        "package",
        "is_body_empty",
        "hard_coded_urls",
        "hard_coded_ids",
        "created_date",
        "last_modified_date",
    )


@register_record
class Document(Data):
    kind = RecordType.DOCUMENT
    display_name = "Document"
    __slots__ = (
        "id",
        "name",
        "url",
        "document_url",
        "is_hard_coded_url",
        "description",
        "folder_id",
        "folder_name",
        "size",
        "type",
        "package",
        "created_date",
        "last_modified_date",
    )
