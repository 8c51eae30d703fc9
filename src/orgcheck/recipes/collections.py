"""Recipe collections: several recipes summarized side by side."""

from __future__ import annotations

from typing import Any, Mapping, Optional, Sequence

from .base import RecipeAliases, RecipeCollection

# Rules about hard-coded urls and ids
HARDCODED_RULE_IDS = (46, 47, 50)


class GlobalViewCollection(RecipeCollection):
    """Every scored recipe, reduced to its bad records and counts per rule."""

    alias = RecipeAliases.GLOBAL_VIEW
    description = "Counts of good and bad records for every scored recipe"

    def extract(self, parameters: Mapping[str, Any]) -> list[str]:
        return [
            RecipeAliases.APEX_CLASSES,
            RecipeAliases.APEX_TESTS,
            RecipeAliases.APEX_TRIGGERS,
            RecipeAliases.APEX_UNCOMPILED,
            RecipeAliases.COLLABORATION_GROUPS,
            RecipeAliases.CUSTOM_FIELDS,
            RecipeAliases.CUSTOM_LABELS,
            RecipeAliases.DOCUMENTS,
            RecipeAliases.FLOWS,
            RecipeAliases.HOME_PAGE_COMPONENTS,
            RecipeAliases.INTERNAL_ACTIVE_USERS,
            RecipeAliases.LIGHTNING_AURA_COMPONENTS,
            RecipeAliases.LIGHTNING_PAGES,
            RecipeAliases.LIGHTNING_WEB_COMPONENTS,
            RecipeAliases.PAGE_LAYOUTS,
            RecipeAliases.PERMISSION_SETS,
            RecipeAliases.PERMISSION_SET_LICENSES,
            RecipeAliases.PROCESS_BUILDERS,
            RecipeAliases.PROFILE_PASSWORD_POLICIES,
            RecipeAliases.PROFILE_RESTRICTIONS,
            RecipeAliases.PROFILES,
            RecipeAliases.PUBLIC_GROUPS,
            RecipeAliases.QUEUES,
            RecipeAliases.RECORD_TYPES,
            RecipeAliases.USER_ROLES,
            RecipeAliases.VALIDATION_RULES,
            RecipeAliases.VISUALFORCE_COMPONENTS,
            RecipeAliases.VISUALFORCE_PAGES,
            RecipeAliases.WEB_LINKS,
            RecipeAliases.WORKFLOWS,
        ]


class HardcodedUrlsViewCollection(RecipeCollection):
    """Recipes whose records are scanned for hard-coded urls and ids."""

    alias = RecipeAliases.HARDCODED_URLS_VIEW
    description = "Records with hard-coded urls or ids"

    def extract(self, parameters: Mapping[str, Any]) -> list[str]:
        return [
            RecipeAliases.APEX_CLASSES,
            RecipeAliases.APEX_TESTS,
            RecipeAliases.APEX_TRIGGERS,
            RecipeAliases.APEX_UNCOMPILED,
            RecipeAliases.COLLABORATION_GROUPS,
            RecipeAliases.CUSTOM_FIELDS,
            RecipeAliases.DOCUMENTS,
            RecipeAliases.HOME_PAGE_COMPONENTS,
            RecipeAliases.VISUALFORCE_COMPONENTS,
            RecipeAliases.VISUALFORCE_PAGES,
            RecipeAliases.WEB_LINKS,
        ]

    def filter_by_score_rule_ids(self, parameters: Mapping[str, Any]) -> Optional[Sequence[int]]:
        return HARDCODED_RULE_IDS
