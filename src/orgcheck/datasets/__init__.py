"""Dataset implementations, registered by alias."""

from ..exceptions import RuleRegistrationError, UnknownAliasError
from .base import Dataset, DatasetAliases, DatasetResult, DatasetRunInformation
from .code import (
    ApexClassesDataset,
    ApexTriggersDataset,
    CustomLabelsDataset,
    DocumentsDataset,
    FlowsDataset,
    HomePageComponentsDataset,
    LightningAuraComponentsDataset,
    LightningPagesDataset,
    LightningWebComponentsDataset,
    VisualForceComponentsDataset,
    VisualForcePagesDataset,
    WorkflowsDataset,
)
from .manager import DatasetManager
from .org import OrganizationDataset, PackagesDataset
from .schema import (
    CustomFieldsDataset,
    ObjectDataset,
    ObjectsDataset,
    ObjectTypesDataset,
    PageLayoutsDataset,
    RecordTypesDataset,
    ValidationRulesDataset,
    WebLinksDataset,
)
from .security import (
    ApplicationsDataset,
    AppPermissionsDataset,
    CollaborationGroupsDataset,
    FieldPermissionsDataset,
    GroupsDataset,
    InternalActiveUsersDataset,
    ObjectPermissionsDataset,
    PermissionSetLicensesDataset,
    PermissionSetsDataset,
    ProfilePasswordPoliciesDataset,
    ProfileRestrictionsDataset,
    ProfilesDataset,
    UserRolesDataset,
)


def get_datasets() -> dict[str, Dataset]:
    """Every dataset by alias, freshly instantiated.

    Raises:
        RuleRegistrationError: If two datasets share an alias
    """
    datasets: dict[str, Dataset] = {}
    for dataset in (
        ApexClassesDataset(),
        ApexTriggersDataset(),
        CustomLabelsDataset(),
        FlowsDataset(),
        LightningAuraComponentsDataset(),
        LightningPagesDataset(),
        LightningWebComponentsDataset(),
        VisualForceComponentsDataset(),
        VisualForcePagesDataset(),
        WorkflowsDataset(),
        DocumentsDataset(),
        HomePageComponentsDataset(),
        ObjectTypesDataset(),
        ObjectsDataset(),
        ObjectDataset(),
        CustomFieldsDataset(),
        ValidationRulesDataset(),
        RecordTypesDataset(),
        PageLayoutsDataset(),
        WebLinksDataset(),
        ProfilesDataset(),
        PermissionSetsDataset(),
        PermissionSetLicensesDataset(),
        ProfilePasswordPoliciesDataset(),
        ProfileRestrictionsDataset(),
        ObjectPermissionsDataset(),
        FieldPermissionsDataset(),
        ApplicationsDataset(),
        AppPermissionsDataset(),
        UserRolesDataset(),
        InternalActiveUsersDataset(),
        GroupsDataset(),
        CollaborationGroupsDataset(),
        OrganizationDataset(),
        PackagesDataset(),
    ):
        if dataset.alias in datasets:
            raise RuleRegistrationError(f"dataset alias {dataset.alias!r} registered twice")
        datasets[dataset.alias] = dataset
    return datasets


def get_dataset(alias: str) -> Dataset:
    """Dataset registered under ``alias``.

    Raises:
        UnknownAliasError: If no dataset has this alias
    """
    datasets = get_datasets()
    if alias not in datasets:
        raise UnknownAliasError("dataset", alias)
    return datasets[alias]


__all__ = [
    "Dataset",
    "DatasetAliases",
    "DatasetManager",
    "DatasetResult",
    "DatasetRunInformation",
    "get_dataset",
    "get_datasets",
]
