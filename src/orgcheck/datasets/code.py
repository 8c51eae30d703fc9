"""Datasets for code and automation: apex, flows, lightning, visualforce, workflows."""

from __future__ import annotations

import logging
from typing import Any, Mapping

from ..core import codescanner
from ..core.factory import DataFactory
from ..data import (
    ApexClass,
    ApexTestMethodResult,
    ApexTrigger,
    CustomLabel,
    Document,
    Flow,
    FlowVersion,
    HomePageComponent,
    LightningAuraComponent,
    LightningPage,
    LightningWebComponent,
    VisualForceComponent,
    VisualForcePage,
    Workflow,
)
from ..transport import MetadataRequest, MetadataType, QuerySpec, Transport, case_safe_id, setup_url
from .base import Dataset, DatasetAliases, nested, package_of, record_ids

UNMANAGED = "WHERE ManageableState IN ('installedEditable', 'unmanaged')"

# Test methods slower than this (ms) are reported even when they pass
LONG_TEST_METHOD_RUNTIME = 20000

_SHARING_MODIFIERS = {
    "with sharing": "with",
    "without sharing": "without",
    "inherited sharing": "inherited",
}
_ACCESS_MODIFIERS = ("public", "private", "global", "virtual")

_FLOW_NODE_PROPERTIES = (
    "actionCalls",
    "apexPluginCalls",
    "assignments",
    "collectionProcessors",
    "decisions",
    "loops",
    "orchestratedStages",
    "recordCreates",
    "recordDeletes",
    "recordLookups",
    "recordRollbacks",
    "recordUpdates",
    "screens",
    "steps",
    "waits",
)


class ApexClassesDataset(Dataset):
    alias = DatasetAliases.APEX_CLASSES
    description = "Apex classes with coverage, schedules and last test results"

    async def run(self, transport: Transport, factory: DataFactory, logger: logging.Logger, parameters: Mapping[str, Any]):
        logger.info("Querying ApexClass, ApexCodeCoverage, ApexCodeCoverageAggregate, AsyncApexJob and ApexTestResult...")
        (class_rows, coverage_rows, aggregate_rows, job_rows, test_rows) = await transport.execute_queries(
            [
                QuerySpec(
                    "SELECT Id, Name, ApiVersion, NamespacePrefix, Body, LengthWithoutComments, "
                    "SymbolTable, CreatedDate, LastModifiedDate FROM ApexClass " + UNMANAGED,
                    "ApexClass",
                    tooling=True,
                ),
                QuerySpec(
                    "SELECT ApexClassOrTriggerId, ApexTestClassId FROM ApexCodeCoverage",
                    "ApexCodeCoverage",
                    tooling=True,
                ),
                QuerySpec(
                    "SELECT ApexClassOrTriggerId, NumLinesCovered, NumLinesUncovered, Coverage "
                    "FROM ApexCodeCoverageAggregate",
                    "ApexCodeCoverageAggregate",
                    tooling=True,
                ),
                QuerySpec(
                    "SELECT ApexClassId FROM AsyncApexJob WHERE JobType = 'ScheduledApex'",
                    "AsyncApexJob",
                ),
                QuerySpec(
                    "SELECT Id, ApexClassId, MethodName, ApexTestRunResult.CreatedDate, RunTime, "
                    "Outcome, StackTrace FROM ApexTestResult "
                    "WHERE ApexTestRunResult.Status = 'Completed' "
                    "ORDER BY ApexClassId, ApexTestRunResult.CreatedDate desc, MethodName",
                    "ApexTestResult",
                    tooling=True,
                ),
            ]
        )

        class_factory = factory.get_instance(ApexClass)
        result_factory = factory.get_instance(ApexTestMethodResult)

        logger.info(f"Retrieving dependencies of {len(class_rows)} apex classes...")
        dependencies = await transport.fetch_dependency_edges(record_ids(class_rows))

        logger.info(f"Parsing {len(class_rows)} apex classes...")
        classes: dict[str, ApexClass] = {}
        for row in class_rows:
            id = case_safe_id(row["Id"])
            apex_class = class_factory.create(
                {
                    "id": id,
                    "name": row.get("Name"),
                    "api_version": row.get("ApiVersion"),
                    "package": package_of(row),
                    "is_test": False,
                    "is_abstract": False,
                    "is_class": True,
                    "is_enum": False,
                    "is_interface": False,
                    "is_schedulable": False,
                    "is_scheduled": False,
                    "length": row.get("LengthWithoutComments"),
                    "source_code": row.get("Body"),
                    "needs_recompilation": not row.get("SymbolTable"),
                    "coverage": 0,
                    "related_test_class_ids": [],
                    "related_class_ids": [],
                    "created_date": row.get("CreatedDate"),
                    "last_modified_date": row.get("LastModifiedDate"),
                    "url": setup_url(id, MetadataType.APEX_CLASS),
                },
                dependencies,
            )
            _read_symbol_table(apex_class, row.get("SymbolTable"), logger)
            _scan_source(apex_class, row.get("Body"))
            classes[id] = apex_class

        logger.debug(f"Parsing {len(coverage_rows)} code coverages...")
        for row in coverage_rows:
            id = case_safe_id(row.get("ApexClassOrTriggerId"))
            test_id = case_safe_id(row.get("ApexTestClassId"))
            if id not in classes:
                continue
            tested = classes[id]
            if test_id not in tested.related_test_class_ids:
                tested.related_test_class_ids.append(test_id)
            # A packaged test can cover a local class; it is not in the map
            test = classes.get(test_id)
            if test is not None and id not in test.related_class_ids:
                test.related_class_ids.append(id)

        logger.debug(f"Parsing {len(aggregate_rows)} code coverage aggregates...")
        for row in aggregate_rows:
            apex_class = classes.get(case_safe_id(row.get("ApexClassOrTriggerId")))
            covered = row.get("NumLinesCovered") or 0
            total = covered + (row.get("NumLinesUncovered") or 0)
            if apex_class is not None and total:
                apex_class.coverage = covered / total

        logger.debug(f"Parsing {len(job_rows)} scheduled jobs...")
        for row in job_rows:
            apex_class = classes.get(case_safe_id(row.get("ApexClassId")))
            if apex_class is not None:
                apex_class.is_scheduled = True

        logger.debug(f"Parsing {len(test_rows)} test results...")
        for row in test_rows:
            test = classes.get(case_safe_id(row.get("ApexClassId")))
            if test is None or test.is_test is not True:
                continue
            run_date = nested(row, "ApexTestRunResult", "CreatedDate")
            if not test.last_test_run_date:
                test.last_test_run_date = run_date
                test.test_methods_run_time = 0
                test.test_passed_methods = []
                test.test_failed_methods = []
                test.test_passed_but_long_methods = []
            # Rows come newest run first: only the last run counts
            if test.last_test_run_date != run_date:
                continue
            result = result_factory.create(
                {
                    "method_name": row.get("MethodName"),
                    "is_successful": row.get("Outcome") == "Pass",
                    "runtime": row.get("RunTime") or 0,
                    "stacktrace": row.get("StackTrace"),
                }
            )
            test.test_methods_run_time += result.runtime
            if result.is_successful:
                test.test_passed_methods.append(result)
                if result.runtime > LONG_TEST_METHOD_RUNTIME:
                    test.test_passed_but_long_methods.append(result)
            else:
                test.test_failed_methods.append(result)

        for apex_class in classes.values():
            class_factory.compute_score(apex_class)

        logger.info("Done")
        return classes


def _read_symbol_table(apex_class: ApexClass, symbol_table: Any, logger: logging.Logger) -> None:
    if not symbol_table:
        return
    apex_class.inner_classes_count = len(symbol_table.get("innerClasses") or [])
    apex_class.interfaces = symbol_table.get("interfaces") or []
    apex_class.is_schedulable = "System.Schedulable" in apex_class.interfaces
    apex_class.methods_count = len(symbol_table.get("methods") or [])
    apex_class.extends = symbol_table.get("parentClass")
    declaration = symbol_table.get("tableDeclaration")
    if not declaration:
        return
    apex_class.annotations = [
        a.get("name") if isinstance(a, Mapping) else a for a in declaration.get("annotations") or []
    ]
    for modifier in declaration.get("modifiers") or []:
        if modifier in _SHARING_MODIFIERS:
            apex_class.specified_sharing = _SHARING_MODIFIERS[modifier]
        elif modifier in _ACCESS_MODIFIERS:
            apex_class.specified_access = modifier
        elif modifier == "abstract":
            apex_class.is_abstract = True
        elif modifier == "testMethod":
            apex_class.is_test = True
        else:
            logger.warning(f"Unsupported modifier {modifier!r} on apex class {apex_class.id}")


def _scan_source(apex_class: ApexClass, body: Any) -> None:
    if body:
        source = codescanner.remove_comments_from_code(body)
        apex_class.is_interface = codescanner.is_interface(source)
        apex_class.is_enum = codescanner.is_enum(source)
        apex_class.is_class = not apex_class.is_interface and not apex_class.is_enum
        apex_class.hard_coded_urls = codescanner.find_hard_coded_urls(source)
        apex_class.hard_coded_ids = codescanner.find_hard_coded_ids(source)
        if apex_class.is_test is True:
            apex_class.is_test_see_all_data = codescanner.is_test_see_all_data(source)
            apex_class.nb_system_asserts = codescanner.count_asserts(source)
    if apex_class.is_enum or apex_class.is_interface:
        apex_class.specified_sharing = "Not applicable"


class ApexTriggersDataset(Dataset):
    alias = DatasetAliases.APEX_TRIGGERS
    description = "Apex triggers with their events and source scan"

    async def run(self, transport: Transport, factory: DataFactory, logger: logging.Logger, parameters: Mapping[str, Any]):
        logger.info("Querying ApexTrigger...")
        (rows,) = await transport.execute_queries(
            [
                QuerySpec(
                    "SELECT Id, Name, ApiVersion, Status, NamespacePrefix, Body, "
                    "UsageBeforeInsert, UsageAfterInsert, UsageBeforeUpdate, UsageAfterUpdate, "
                    "UsageBeforeDelete, UsageAfterDelete, UsageAfterUndelete, UsageIsBulk, "
                    "LengthWithoutComments, EntityDefinition.QualifiedApiName, "
                    "CreatedDate, LastModifiedDate FROM ApexTrigger " + UNMANAGED,
                    "ApexTrigger",
                    tooling=True,
                )
            ]
        )
        # Triggers on objects the user cannot see come back without an entity
        rows = [row for row in rows if row.get("EntityDefinition")]
        trigger_factory = factory.get_instance(ApexTrigger)

        logger.info(f"Retrieving dependencies of {len(rows)} apex triggers...")
        dependencies = await transport.fetch_dependency_edges(record_ids(rows))

        logger.info(f"Parsing {len(rows)} apex triggers...")
        triggers = {}
        for row in rows:
            id = case_safe_id(row["Id"])
            object_name = nested(row, "EntityDefinition", "QualifiedApiName")
            trigger = trigger_factory.create(
                {
                    "id": id,
                    "name": row.get("Name"),
                    "api_version": row.get("ApiVersion"),
                    "package": package_of(row),
                    "length": row.get("LengthWithoutComments"),
                    "is_active": row.get("Status") == "Active",
                    "before_insert": row.get("UsageBeforeInsert"),
                    "after_insert": row.get("UsageAfterInsert"),
                    "before_update": row.get("UsageBeforeUpdate"),
                    "after_update": row.get("UsageAfterUpdate"),
                    "before_delete": row.get("UsageBeforeDelete"),
                    "after_delete": row.get("UsageAfterDelete"),
                    "after_undelete": row.get("UsageAfterUndelete"),
                    "object_id": object_name,
                    "has_soql": False,
                    "has_dml": False,
                    "created_date": row.get("CreatedDate"),
                    "last_modified_date": row.get("LastModifiedDate"),
                    "url": setup_url(id, MetadataType.APEX_TRIGGER, object_name),
                },
                dependencies,
            )
            if row.get("Body"):
                source = codescanner.remove_comments_from_code(row["Body"])
                trigger.has_soql = codescanner.has_soql(source)
                trigger.has_dml = codescanner.has_dml(source)
                trigger.hard_coded_urls = codescanner.find_hard_coded_urls(source)
                trigger.hard_coded_ids = codescanner.find_hard_coded_ids(source)
            trigger_factory.compute_score(trigger)
            triggers[id] = trigger

        logger.info("Done")
        return triggers


class CustomLabelsDataset(Dataset):
    alias = DatasetAliases.CUSTOM_LABELS
    description = "Custom labels"

    async def run(self, transport: Transport, factory: DataFactory, logger: logging.Logger, parameters: Mapping[str, Any]):
        logger.info("Querying ExternalString...")
        (rows,) = await transport.execute_queries(
            [
                QuerySpec(
                    "SELECT Id, Name, NamespacePrefix, Category, IsProtected, Language, MasterLabel, "
                    "Value, CreatedDate, LastModifiedDate FROM ExternalString " + UNMANAGED,
                    "ExternalString",
                    tooling=True,
                )
            ]
        )
        label_factory = factory.get_instance(CustomLabel)

        logger.info(f"Retrieving dependencies of {len(rows)} custom labels...")
        dependencies = await transport.fetch_dependency_edges(record_ids(rows))

        logger.info(f"Parsing {len(rows)} custom labels...")
        labels = {}
        for row in rows:
            id = case_safe_id(row["Id"])
            labels[id] = label_factory.create_with_score(
                {
                    "id": id,
                    "name": row.get("Name"),
                    "package": package_of(row),
                    "category": row.get("Category"),
                    "is_protected": row.get("IsProtected") is True,
                    "language": row.get("Language"),
                    "value": row.get("Value"),
                    "created_date": row.get("CreatedDate"),
                    "last_modified_date": row.get("LastModifiedDate"),
                    "url": setup_url(id, MetadataType.CUSTOM_LABEL),
                },
                dependencies,
            )

        logger.info("Done")
        return labels


class FlowsDataset(Dataset):
    alias = DatasetAliases.FLOWS
    description = "Flow definitions with their current version (flows and process builders)"

    async def run(self, transport: Transport, factory: DataFactory, logger: logging.Logger, parameters: Mapping[str, Any]):
        logger.info("Querying FlowDefinition and Flow...")
        definition_rows, version_rows = await transport.execute_queries(
            [
                QuerySpec(
                    "SELECT Id, MasterLabel, DeveloperName, ApiVersion, Description, ActiveVersionId, "
                    "LatestVersionId, CreatedDate, LastModifiedDate FROM FlowDefinition",
                    "FlowDefinition",
                    tooling=True,
                ),
                QuerySpec(
                    "SELECT Id, DefinitionId, Status, ProcessType FROM Flow WHERE DefinitionId <> null",
                    "Flow",
                    tooling=True,
                ),
            ]
        )
        flow_factory = factory.get_instance(Flow)
        version_factory = factory.get_instance(FlowVersion)

        # A definition is indexed under its own id and its current version id
        dependency_ids = []
        for row in definition_rows:
            dependency_ids.append(case_safe_id(row.get("ActiveVersionId") or row.get("LatestVersionId")))
            dependency_ids.append(case_safe_id(row["Id"]))
        logger.info(f"Retrieving dependencies of {len(definition_rows)} flows...")
        dependencies = await transport.fetch_dependency_edges([i for i in dependency_ids if i])

        logger.info(f"Parsing {len(definition_rows)} flow definitions...")
        flows: dict[str, Flow] = {}
        for row in definition_rows:
            id = case_safe_id(row["Id"])
            active_version_id = case_safe_id(row.get("ActiveVersionId"))
            latest_version_id = case_safe_id(row.get("LatestVersionId"))
            flows[id] = flow_factory.create(
                {
                    "id": id,
                    "name": row.get("DeveloperName"),
                    "api_version": row.get("ApiVersion"),
                    "current_version_id": active_version_id or latest_version_id,
                    "is_latest_current_version": active_version_id == latest_version_id,
                    "is_version_active": bool(active_version_id),
                    "versions_count": 0,
                    "description": row.get("Description"),
                    "created_date": row.get("CreatedDate"),
                    "last_modified_date": row.get("LastModifiedDate"),
                    "url": setup_url(id, MetadataType.FLOW_DEFINITION),
                },
                dependencies,
                dependency_id_fields=("id", "current_version_id"),
            )

        logger.debug(f"Parsing {len(version_rows)} flow versions...")
        for row in version_rows:
            flow = flows.get(case_safe_id(row.get("DefinitionId")))
            if flow is not None:
                flow.versions_count += 1
                flow.type = row.get("ProcessType")
                flow.is_process_builder = flow.type == "Workflow"

        current_ids = [f.current_version_id for f in flows.values() if f.current_version_id]
        logger.info(f"Reading metadata of {len(current_ids)} flow versions...")
        metadata = await transport.fetch_metadata([MetadataRequest(MetadataType.FLOW_VERSION, tuple(current_ids))])

        for row in metadata.get(MetadataType.FLOW_VERSION, []):
            flow = flows.get(case_safe_id(row.get("DefinitionId")))
            if flow is None:
                continue
            flow.current_version_ref = _flow_version(version_factory, row)

        for flow in flows.values():
            flow_factory.compute_score(flow)

        logger.info("Done")
        return flows


def _flow_version(version_factory, row: Mapping[str, Any]) -> FlowVersion:
    id = case_safe_id(row["Id"])
    metadata = row.get("Metadata") or {}
    version = version_factory.create(
        {
            "id": id,
            "name": row.get("FullName"),
            "version": row.get("VersionNumber"),
            "api_version": row.get("ApiVersion"),
            "total_node_count": sum(len(metadata.get(p) or []) for p in _FLOW_NODE_PROPERTIES),
            "dml_create_node_count": len(metadata.get("recordCreates") or []),
            "dml_delete_node_count": len(metadata.get("recordDeletes") or []),
            "dml_update_node_count": len(metadata.get("recordUpdates") or []),
            "screen_node_count": len(metadata.get("screens") or []),
            "sobject": nested(metadata, "start", "object") or "",
            "trigger_type": nested(metadata, "start", "triggerType") or "",
            "record_trigger_type": nested(metadata, "start", "recordTriggerType") or "",
            "is_active": row.get("Status") == "Active",
            "description": row.get("Description"),
            "type": row.get("ProcessType"),
            "running_mode": row.get("RunInMode"),
            "created_date": row.get("CreatedDate"),
            "last_modified_date": row.get("LastModifiedDate"),
            "url": setup_url(id, MetadataType.FLOW_VERSION),
        }
    )
    # Process builders keep object and trigger in process metadata values
    if version.type == "Workflow":
        for value in metadata.get("processMetadataValues") or []:
            if value.get("name") == "ObjectType":
                version.sobject = nested(value, "value", "stringValue")
            elif value.get("name") == "TriggerType":
                version.trigger_type = nested(value, "value", "stringValue")
    return version


class _BundleDataset(Dataset):
    """Lightning bundles: one tooling query, dependencies, score."""

    sobject: str
    record_class: type
    metadata_type: str

    async def run(self, transport: Transport, factory: DataFactory, logger: logging.Logger, parameters: Mapping[str, Any]):
        logger.info(f"Querying {self.sobject}...")
        (rows,) = await transport.execute_queries(
            [
                QuerySpec(
                    "SELECT Id, MasterLabel, ApiVersion, NamespacePrefix, Description, "
                    f"CreatedDate, LastModifiedDate FROM {self.sobject} " + UNMANAGED,
                    self.sobject,
                    tooling=True,
                )
            ]
        )
        component_factory = factory.get_instance(self.record_class)

        logger.info(f"Retrieving dependencies of {len(rows)} components...")
        dependencies = await transport.fetch_dependency_edges(record_ids(rows))

        logger.info(f"Parsing {len(rows)} components...")
        components = {}
        for row in rows:
            id = case_safe_id(row["Id"])
            components[id] = component_factory.create_with_score(
                {
                    "id": id,
                    "name": row.get("MasterLabel"),
                    "api_version": row.get("ApiVersion"),
                    "package": package_of(row),
                    "description": row.get("Description"),
                    "created_date": row.get("CreatedDate"),
                    "last_modified_date": row.get("LastModifiedDate"),
                    "url": setup_url(id, self.metadata_type),
                },
                dependencies,
            )
        logger.info("Done")
        return components


class LightningAuraComponentsDataset(_BundleDataset):
    alias = DatasetAliases.LIGHTNING_AURA_COMPONENTS
    description = "Aura components"
    sobject = "AuraDefinitionBundle"
    record_class = LightningAuraComponent
    metadata_type = MetadataType.AURA_WEB_COMPONENT


class LightningWebComponentsDataset(_BundleDataset):
    alias = DatasetAliases.LIGHTNING_WEB_COMPONENTS
    description = "Lightning web components"
    sobject = "LightningComponentBundle"
    record_class = LightningWebComponent
    metadata_type = MetadataType.LIGHTNING_WEB_COMPONENT


class LightningPagesDataset(Dataset):
    alias = DatasetAliases.LIGHTNING_PAGES
    description = "Lightning (flexi) pages"

    async def run(self, transport: Transport, factory: DataFactory, logger: logging.Logger, parameters: Mapping[str, Any]):
        logger.info("Querying FlexiPage...")
        (rows,) = await transport.execute_queries(
            [
                QuerySpec(
                    "SELECT Id, MasterLabel, EntityDefinition.QualifiedApiName, Type, NamespacePrefix, "
                    "Description, CreatedDate, LastModifiedDate FROM FlexiPage " + UNMANAGED,
                    "FlexiPage",
                    tooling=True,
                )
            ]
        )
        page_factory = factory.get_instance(LightningPage)

        logger.info(f"Retrieving dependencies of {len(rows)} lightning pages...")
        dependencies = await transport.fetch_dependency_edges(record_ids(rows))

        logger.info(f"Parsing {len(rows)} lightning pages...")
        pages = {}
        for row in rows:
            id = case_safe_id(row["Id"])
            pages[id] = page_factory.create_with_score(
                {
                    "id": id,
                    "name": row.get("MasterLabel"),
                    "type": row.get("Type"),
                    "package": package_of(row),
                    "description": row.get("Description"),
                    "object_id": nested(row, "EntityDefinition", "QualifiedApiName") or "",
                    "created_date": row.get("CreatedDate"),
                    "last_modified_date": row.get("LastModifiedDate"),
                    "url": setup_url(id, MetadataType.LIGHTNING_PAGE),
                },
                dependencies,
            )
        logger.info("Done")
        return pages


class _MarkupDataset(Dataset):
    """Visualforce pages and components: markup is scanned for hard-coded values."""

    sobject: str
    record_class: type
    metadata_type: str
    extra_fields: tuple[str, ...] = ()

    def properties(self, row: Mapping[str, Any]) -> dict[str, Any]:
        return {}

    async def run(self, transport: Transport, factory: DataFactory, logger: logging.Logger, parameters: Mapping[str, Any]):
        logger.info(f"Querying {self.sobject}...")
        fields = ", ".join(("Id", "Name", "ApiVersion", "NamespacePrefix", "Description") + self.extra_fields)
        (rows,) = await transport.execute_queries(
            [
                QuerySpec(
                    f"SELECT {fields}, Markup, CreatedDate, LastModifiedDate FROM {self.sobject} " + UNMANAGED,
                    self.sobject,
                    tooling=True,
                )
            ]
        )
        component_factory = factory.get_instance(self.record_class)

        logger.info(f"Retrieving dependencies of {len(rows)} items...")
        dependencies = await transport.fetch_dependency_edges(record_ids(rows))

        logger.info(f"Parsing {len(rows)} items...")
        components = {}
        for row in rows:
            id = case_safe_id(row["Id"])
            properties = {
                "id": id,
                "name": row.get("Name"),
                "api_version": row.get("ApiVersion"),
                "package": package_of(row),
                "description": row.get("Description"),
                "created_date": row.get("CreatedDate"),
                "last_modified_date": row.get("LastModifiedDate"),
                "url": setup_url(id, self.metadata_type),
            }
            properties.update(self.properties(row))
            component = component_factory.create(properties, dependencies)
            if row.get("Markup"):
                source = codescanner.remove_comments_from_code(row["Markup"])
                component.hard_coded_urls = codescanner.find_hard_coded_urls(source)
                component.hard_coded_ids = codescanner.find_hard_coded_ids(source)
            component_factory.compute_score(component)
            components[id] = component

        logger.info("Done")
        return components


class VisualForcePagesDataset(_MarkupDataset):
    alias = DatasetAliases.VISUALFORCE_PAGES
    description = "Visualforce pages"
    sobject = "ApexPage"
    record_class = VisualForcePage
    metadata_type = MetadataType.VISUAL_FORCE_PAGE
    extra_fields = ("IsAvailableInTouch",)

    def properties(self, row: Mapping[str, Any]) -> dict[str, Any]:
        return {"is_mobile_ready": row.get("IsAvailableInTouch")}


class VisualForceComponentsDataset(_MarkupDataset):
    alias = DatasetAliases.VISUALFORCE_COMPONENTS
    description = "Visualforce components"
    sobject = "ApexComponent"
    record_class = VisualForceComponent
    metadata_type = MetadataType.VISUAL_FORCE_COMPONENT


class WorkflowsDataset(Dataset):
    alias = DatasetAliases.WORKFLOWS
    description = "Workflow rules with their immediate and time-based actions"

    async def run(self, transport: Transport, factory: DataFactory, logger: logging.Logger, parameters: Mapping[str, Any]):
        logger.info("Querying WorkflowRule...")
        (rows,) = await transport.execute_queries(
            [QuerySpec("SELECT Id FROM WorkflowRule", "WorkflowRule", tooling=True)]
        )
        ids = [row["Id"] for row in rows if row.get("Id")]
        workflow_factory = factory.get_instance(Workflow)

        logger.info(f"Reading metadata of {len(ids)} workflow rules...")
        metadata = await transport.fetch_metadata([MetadataRequest(MetadataType.WORKFLOW_RULE, tuple(ids))])
        records = metadata.get(MetadataType.WORKFLOW_RULE, [])

        logger.info(f"Parsing {len(records)} workflows...")
        workflows = {}
        for row in records:
            id = case_safe_id(row["Id"])
            definition = row.get("Metadata") or {}
            actions = [{"name": a.get("name"), "type": a.get("type")} for a in definition.get("actions") or []]
            future_actions = []
            empty_time_triggers = []
            for trigger in definition.get("workflowTimeTriggers") or []:
                field = trigger.get("offsetFromField") or "TriggerDate"
                delay = f"{trigger.get('timeLength')} {trigger.get('workflowTimeTriggerUnit')}"
                trigger_actions = trigger.get("actions") or []
                if not trigger_actions:
                    empty_time_triggers.append({"field": field, "delay": delay})
                for action in trigger_actions:
                    future_actions.append(
                        {"name": action.get("name"), "type": action.get("type"), "field": field, "delay": delay}
                    )
            workflows[id] = workflow_factory.create_with_score(
                {
                    "id": id,
                    "name": row.get("FullName"),
                    "description": definition.get("description"),
                    "is_active": definition.get("active"),
                    "actions": actions,
                    "future_actions": future_actions,
                    "empty_time_triggers": empty_time_triggers,
                    "has_action": bool(actions or future_actions),
                    "created_date": row.get("CreatedDate"),
                    "last_modified_date": row.get("LastModifiedDate"),
                    "url": setup_url(id, MetadataType.WORKFLOW_RULE),
                }
            )

        logger.info("Done")
        return workflows


class HomePageComponentsDataset(Dataset):
    alias = DatasetAliases.HOME_PAGE_COMPONENTS
    description = "Classic home page components, body scanned for hard-coded values"

    async def run(self, transport: Transport, factory: DataFactory, logger: logging.Logger, parameters: Mapping[str, Any]):
        logger.info("Querying HomePageComponent...")
        (rows,) = await transport.execute_queries(
            [
                QuerySpec(
                    "SELECT Id, Name, Body, CreatedDate, LastModifiedDate, NamespacePrefix "
                    "FROM HomePageComponent " + UNMANAGED,
                    "HomePageComponent",
                    tooling=True,
                )
            ]
        )
        component_factory = factory.get_instance(HomePageComponent)

        logger.info(f"Parsing {len(rows)} home page components...")
        components = {}
        for row in rows:
            id = case_safe_id(row["Id"])
            component = component_factory.create(
                {
                    "id": id,
                    "name": row.get("Name"),
                    "package": package_of(row),
                    "is_body_empty": not row.get("Body"),
                    "created_date": row.get("CreatedDate"),
                    "last_modified_date": row.get("LastModifiedDate"),
                    "url": setup_url(id, MetadataType.HOME_PAGE_COMPONENT),
                }
            )
            if row.get("Body"):
                body = codescanner.remove_comments_from_xml(row["Body"])
                component.hard_coded_urls = codescanner.find_hard_coded_urls(body)
                component.hard_coded_ids = codescanner.find_hard_coded_ids(body)
            component_factory.compute_score(component)
            components[id] = component

        logger.info("Done")
        return components


class DocumentsDataset(Dataset):
    alias = DatasetAliases.DOCUMENTS
    description = "Documents stored in folders"

    async def run(self, transport: Transport, factory: DataFactory, logger: logging.Logger, parameters: Mapping[str, Any]):
        logger.info("Querying Document...")
        (rows,) = await transport.execute_queries(
            [
                QuerySpec(
                    "SELECT Id, Name, Url, BodyLength, ContentType, CreatedDate, Description, "
                    "DeveloperName, Folder.Name, Folder.Id, LastModifiedDate, NamespacePrefix "
                    "FROM Document",
                    "Document",
                )
            ]
        )
        document_factory = factory.get_instance(Document)

        logger.info(f"Parsing {len(rows)} documents...")
        documents = {}
        for row in rows:
            id = case_safe_id(row["Id"])
            documents[id] = document_factory.create_with_score(
                {
                    "id": id,
                    "name": row.get("Name"),
                    "document_url": row.get("Url"),
                    "is_hard_coded_url": bool(codescanner.find_hard_coded_urls(row.get("Url"))),
                    "size": row.get("BodyLength"),
                    "type": row.get("ContentType"),
                    "description": row.get("Description"),
                    "folder_id": case_safe_id(nested(row, "Folder", "Id")),
                    "folder_name": nested(row, "Folder", "Name"),
                    "package": package_of(row),
                    "created_date": row.get("CreatedDate"),
                    "last_modified_date": row.get("LastModifiedDate"),
                    "url": setup_url(id, MetadataType.DOCUMENT),
                }
            )

        logger.info("Done")
        return documents
