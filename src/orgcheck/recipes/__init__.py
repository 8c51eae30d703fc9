"""Recipes and recipe collections, registered by alias."""

from ..exceptions import RuleRegistrationError
from .base import DataCollectionStatistics, Recipe, RecipeAliases, RecipeCollection
from .code import (
    ApexClassesRecipe,
    ApexTestsRecipe,
    ApexTriggersRecipe,
    ApexUncompiledRecipe,
    CustomLabelsRecipe,
    DocumentsRecipe,
    FlowsRecipe,
    HomePageComponentsRecipe,
    LightningAuraComponentsRecipe,
    LightningPagesRecipe,
    LightningWebComponentsRecipe,
    ProcessBuildersRecipe,
    VisualForceComponentsRecipe,
    VisualForcePagesRecipe,
    WorkflowsRecipe,
)
from .collections import GlobalViewCollection, HardcodedUrlsViewCollection
from .manager import RecipeManager
from .org import OrganizationRecipe, PackagesRecipe
from .schema import (
    CustomFieldsRecipe,
    ObjectRecipe,
    ObjectsRecipe,
    ObjectTypesRecipe,
    PageLayoutsRecipe,
    RecordTypesRecipe,
    ValidationRulesRecipe,
    WebLinksRecipe,
)
from .security import (
    AppPermissionsRecipe,
    CollaborationGroupsRecipe,
    FieldPermissionsRecipe,
    InternalActiveUsersRecipe,
    ObjectPermissionsRecipe,
    PermissionSetLicensesRecipe,
    PermissionSetsRecipe,
    ProfilePasswordPoliciesRecipe,
    ProfileRestrictionsRecipe,
    ProfilesRecipe,
    PublicGroupsRecipe,
    QueuesRecipe,
    RoleTreeRecipe,
    UserRolesRecipe,
)


def _register(instances) -> dict:
    registered = {}
    for instance in instances:
        if instance.alias in registered:
            raise RuleRegistrationError(f"recipe alias {instance.alias!r} registered twice")
        registered[instance.alias] = instance
    return registered


def get_recipes() -> dict[str, Recipe]:
    """Every recipe by alias.

    Raises:
        RuleRegistrationError: If two recipes share an alias
    """
    return _register(
        [
            ApexClassesRecipe(),
            ApexTestsRecipe(),
            ApexUncompiledRecipe(),
            ApexTriggersRecipe(),
            CustomLabelsRecipe(),
            FlowsRecipe(),
            ProcessBuildersRecipe(),
            LightningAuraComponentsRecipe(),
            LightningPagesRecipe(),
            LightningWebComponentsRecipe(),
            VisualForceComponentsRecipe(),
            VisualForcePagesRecipe(),
            WorkflowsRecipe(),
            DocumentsRecipe(),
            HomePageComponentsRecipe(),
            ObjectTypesRecipe(),
            ObjectsRecipe(),
            ObjectRecipe(),
            CustomFieldsRecipe(),
            ValidationRulesRecipe(),
            RecordTypesRecipe(),
            PageLayoutsRecipe(),
            WebLinksRecipe(),
            ProfilesRecipe(),
            PermissionSetsRecipe(),
            PermissionSetLicensesRecipe(),
            ProfilePasswordPoliciesRecipe(),
            ProfileRestrictionsRecipe(),
            FieldPermissionsRecipe(),
            AppPermissionsRecipe(),
            CollaborationGroupsRecipe(),
            InternalActiveUsersRecipe(),
            UserRolesRecipe(),
            RoleTreeRecipe(),
            PublicGroupsRecipe(),
            QueuesRecipe(),
            ObjectPermissionsRecipe(),
            OrganizationRecipe(),
            PackagesRecipe(),
        ]
    )


def get_recipe_collections() -> dict[str, RecipeCollection]:
    """Every recipe collection by alias."""
    return _register([GlobalViewCollection(), HardcodedUrlsViewCollection()])


__all__ = [
    "DataCollectionStatistics",
    "Recipe",
    "RecipeAliases",
    "RecipeCollection",
    "RecipeManager",
    "get_recipe_collections",
    "get_recipes",
]
