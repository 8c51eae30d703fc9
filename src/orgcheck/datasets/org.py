"""Datasets about the org itself."""

from __future__ import annotations

import logging
from typing import Any, Mapping

from ..core.factory import DataFactory
from ..data import Organization, Package
from ..exceptions import DataError
from ..transport import QuerySpec, Transport, case_safe_id
from .base import Dataset, DatasetAliases, nested

ORGTYPE_PROD = "Production"
ORGTYPE_DE = "Developer Edition"
ORGTYPE_SANDBOX = "Sandbox"
ORGTYPE_TRIAL = "Trial"


def organization_type(row: Mapping[str, Any]) -> str:
    if row.get("OrganizationType") == ORGTYPE_DE:
        return ORGTYPE_DE
    if row.get("IsSandbox") is True:
        return ORGTYPE_SANDBOX
    if row.get("TrialExpirationDate"):
        return ORGTYPE_TRIAL
    return ORGTYPE_PROD


class OrganizationDataset(Dataset):
    alias = DatasetAliases.ORGANIZATION
    description = "Name, edition and namespace of the org"

    async def run(self, transport: Transport, factory: DataFactory, logger: logging.Logger, parameters: Mapping[str, Any]):
        logger.info("Querying Organization...")
        (rows,) = await transport.execute_queries(
            [
                QuerySpec(
                    "SELECT Id, Name, IsSandbox, OrganizationType, TrialExpirationDate, NamespacePrefix "
                    "FROM Organization LIMIT 1",
                    "Organization",
                )
            ]
        )
        if not rows:
            raise DataError("No Organization record returned", details={"dataset": self.alias})

        row = rows[0]
        type = organization_type(row)
        organization = factory.get_instance(Organization).create(
            {
                "id": case_safe_id(row.get("Id")),
                "name": row.get("Name"),
                "type": type,
                "is_developer_edition": type == ORGTYPE_DE,
                "is_sandbox": type == ORGTYPE_SANDBOX,
                "is_trial": type == ORGTYPE_TRIAL,
                "is_production": type == ORGTYPE_PROD,
                "local_namespace": row.get("NamespacePrefix") or "",
            }
        )

        logger.info("Done")
        return organization


class PackagesDataset(Dataset):
    alias = DatasetAliases.PACKAGES
    description = "Installed packages plus the local namespace, if any"

    async def run(self, transport: Transport, factory: DataFactory, logger: logging.Logger, parameters: Mapping[str, Any]):
        logger.info("Querying InstalledSubscriberPackage and Organization...")
        (package_rows, organization_rows) = await transport.execute_queries(
            [
                QuerySpec(
                    "SELECT Id, SubscriberPackage.NamespacePrefix, SubscriberPackage.Name "
                    "FROM InstalledSubscriberPackage",
                    "InstalledSubscriberPackage",
                    tooling=True,
                ),
                QuerySpec(
                    "SELECT NamespacePrefix FROM Organization LIMIT 1",
                    "Organization",
                    alias="OrganizationNamespace",
                ),
            ]
        )
        package_factory = factory.get_instance(Package)

        logger.info(f"Parsing {len(package_rows)} installed packages...")
        packages = {}
        for row in package_rows:
            id = case_safe_id(row["Id"])
            packages[id] = package_factory.create(
                {
                    "id": id,
                    "name": nested(row, "SubscriberPackage", "Name"),
                    "namespace": nested(row, "SubscriberPackage", "NamespacePrefix"),
                    "type": "Installed",
                }
            )

        if not organization_rows:
            raise DataError("No Organization record returned", details={"dataset": self.alias})
        local_namespace = organization_rows[0].get("NamespacePrefix")
        if local_namespace:
            logger.info(f"Adding the local package {local_namespace}...")
            packages[local_namespace] = package_factory.create(
                {"id": local_namespace, "name": local_namespace, "namespace": local_namespace, "type": "Local"}
            )

        logger.info("Done")
        return packages
