"""Recipes over code and automation: apex, flows, lightning, visualforce, workflows."""

from __future__ import annotations

import logging
from typing import Any, Mapping

from ..datasets.base import DatasetAliases
from .base import Recipe, RecipeAliases, lookup, matches, namespace_of


class NamespaceListRecipe(Recipe):
    """Records of one dataset, filtered on their package."""

    dataset: str

    def extract(self, parameters: Mapping[str, Any]) -> list:
        return [self.dataset]

    def keep(self, record: Any) -> bool:
        return True

    def transform(self, data: Mapping[str, Any], logger: logging.Logger, parameters: Mapping[str, Any]) -> list:
        (records,) = self.require(data, self.dataset)
        namespace = namespace_of(parameters)
        return [r for r in records.values() if matches(namespace, r.package) and self.keep(r)]


class _ApexRecipe(NamespaceListRecipe):
    dataset = DatasetAliases.APEX_CLASSES

    def transform(self, data: Mapping[str, Any], logger: logging.Logger, parameters: Mapping[str, Any]) -> list:
        (classes,) = self.require(data, self.dataset)
        for apex_class in classes.values():
            apex_class.related_test_class_refs = lookup(apex_class.related_test_class_ids, classes)
            apex_class.related_class_refs = lookup(apex_class.related_class_ids, classes)
        return super().transform(data, logger, parameters)


class ApexClassesRecipe(_ApexRecipe):
    alias = RecipeAliases.APEX_CLASSES
    description = "Compiled apex classes that are not tests"

    def keep(self, record: Any) -> bool:
        return record.is_test is False and record.needs_recompilation is False


class ApexTestsRecipe(_ApexRecipe):
    alias = RecipeAliases.APEX_TESTS
    description = "Compiled apex test classes"

    def keep(self, record: Any) -> bool:
        return record.is_test is True and record.needs_recompilation is False


class ApexUncompiledRecipe(_ApexRecipe):
    alias = RecipeAliases.APEX_UNCOMPILED
    description = "Apex classes that need to be recompiled"

    def keep(self, record: Any) -> bool:
        return record.needs_recompilation is True


class ApexTriggersRecipe(NamespaceListRecipe):
    alias = RecipeAliases.APEX_TRIGGERS
    description = "Apex triggers linked to their object"
    dataset = DatasetAliases.APEX_TRIGGERS

    def extract(self, parameters: Mapping[str, Any]) -> list:
        return [self.dataset, DatasetAliases.OBJECTS]

    def transform(self, data: Mapping[str, Any], logger: logging.Logger, parameters: Mapping[str, Any]) -> list:
        (triggers, objects) = self.require(data, self.dataset, DatasetAliases.OBJECTS)
        for trigger in triggers.values():
            trigger.object_ref = objects.get(trigger.object_id)
        return super().transform(data, logger, parameters)


class LightningPagesRecipe(NamespaceListRecipe):
    alias = RecipeAliases.LIGHTNING_PAGES
    description = "Lightning pages linked to their object, if any"
    dataset = DatasetAliases.LIGHTNING_PAGES

    def extract(self, parameters: Mapping[str, Any]) -> list:
        return [self.dataset, DatasetAliases.OBJECTS]

    def transform(self, data: Mapping[str, Any], logger: logging.Logger, parameters: Mapping[str, Any]) -> list:
        (pages, objects) = self.require(data, self.dataset, DatasetAliases.OBJECTS)
        for page in pages.values():
            if page.object_id:
                page.object_ref = objects.get(page.object_id)
        return super().transform(data, logger, parameters)


class CustomLabelsRecipe(NamespaceListRecipe):
    alias = RecipeAliases.CUSTOM_LABELS
    dataset = DatasetAliases.CUSTOM_LABELS


class LightningAuraComponentsRecipe(NamespaceListRecipe):
    alias = RecipeAliases.LIGHTNING_AURA_COMPONENTS
    dataset = DatasetAliases.LIGHTNING_AURA_COMPONENTS


class LightningWebComponentsRecipe(NamespaceListRecipe):
    alias = RecipeAliases.LIGHTNING_WEB_COMPONENTS
    dataset = DatasetAliases.LIGHTNING_WEB_COMPONENTS


class VisualForcePagesRecipe(NamespaceListRecipe):
    alias = RecipeAliases.VISUALFORCE_PAGES
    dataset = DatasetAliases.VISUALFORCE_PAGES


class VisualForceComponentsRecipe(NamespaceListRecipe):
    alias = RecipeAliases.VISUALFORCE_COMPONENTS
    dataset = DatasetAliases.VISUALFORCE_COMPONENTS


class DocumentsRecipe(NamespaceListRecipe):
    alias = RecipeAliases.DOCUMENTS
    dataset = DatasetAliases.DOCUMENTS


class HomePageComponentsRecipe(NamespaceListRecipe):
    alias = RecipeAliases.HOME_PAGE_COMPONENTS
    dataset = DatasetAliases.HOME_PAGE_COMPONENTS


class _FlowRecipe(Recipe):
    process_builders: bool

    def extract(self, parameters: Mapping[str, Any]) -> list:
        return [DatasetAliases.FLOWS]

    def transform(self, data: Mapping[str, Any], logger: logging.Logger, parameters: Mapping[str, Any]) -> list:
        (flows,) = self.require(data, DatasetAliases.FLOWS)
        return [f for f in flows.values() if (f.type == "Workflow") is self.process_builders]


class FlowsRecipe(_FlowRecipe):
    alias = RecipeAliases.FLOWS
    description = "Flows, process builders excluded"
    process_builders = False


class ProcessBuildersRecipe(_FlowRecipe):
    alias = RecipeAliases.PROCESS_BUILDERS
    description = "Process builders only"
    process_builders = True


class WorkflowsRecipe(Recipe):
    alias = RecipeAliases.WORKFLOWS

    def extract(self, parameters: Mapping[str, Any]) -> list:
        return [DatasetAliases.WORKFLOWS]

    def transform(self, data: Mapping[str, Any], logger: logging.Logger, parameters: Mapping[str, Any]) -> list:
        (workflows,) = self.require(data, DatasetAliases.WORKFLOWS)
        return list(workflows.values())
