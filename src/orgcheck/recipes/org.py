"""Recipes about the org itself."""

from __future__ import annotations

import logging
from typing import Any, Mapping

from ..datasets.base import DatasetAliases
from .base import Recipe, RecipeAliases


class OrganizationRecipe(Recipe):
    alias = RecipeAliases.ORGANIZATION
    description = "Name, edition and namespace of the org"

    def extract(self, parameters: Mapping[str, Any]) -> list:
        return [DatasetAliases.ORGANIZATION]

    def transform(self, data: Mapping[str, Any], logger: logging.Logger, parameters: Mapping[str, Any]) -> Any:
        (organization,) = self.require(data, DatasetAliases.ORGANIZATION)
        return organization


class PackagesRecipe(Recipe):
    alias = RecipeAliases.PACKAGES
    description = "Installed packages and the local namespace"

    def extract(self, parameters: Mapping[str, Any]) -> list:
        return [DatasetAliases.PACKAGES]

    def transform(self, data: Mapping[str, Any], logger: logging.Logger, parameters: Mapping[str, Any]) -> list:
        (packages,) = self.require(data, DatasetAliases.PACKAGES)
        return list(packages.values())
