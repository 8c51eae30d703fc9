"""RecipeManager: extract, fetch and transform, for recipes and collections."""

from __future__ import annotations

import asyncio
from typing import Any, Mapping, Optional, Sequence

from ..core.rules import ScoreRuleRegistry
from ..datasets.base import DatasetRunInformation
from ..datasets.manager import DatasetManager
from ..exceptions import RecipeError, UnknownAliasError
from ..logging_config import get_logger, recipe_logger
from .base import DataCollectionStatistics, Recipe, RecipeCollection

logger = get_logger(__name__)


class RecipeManager:
    """
    Runs recipes by alias on top of a DatasetManager.

    A recipe names its datasets, the dataset manager fetches them (cache
    first), and the recipe shapes the values into its result. A collection
    runs several recipes concurrently and keeps only their bad records.

    Args:
        dataset_manager: Fetches and caches dataset values
        registry: Rule table used to name rules in collection statistics
        recipes: Recipe instances by alias
        collections: Recipe collection instances by alias
    """

    def __init__(
        self,
        dataset_manager: DatasetManager,
        registry: ScoreRuleRegistry,
        recipes: Mapping[str, Recipe],
        collections: Optional[Mapping[str, RecipeCollection]] = None,
    ):
        self.dataset_manager = dataset_manager
        self.registry = registry
        self.recipes = dict(recipes)
        self.collections = dict(collections or {})

    def aliases(self) -> list[str]:
        return sorted([*self.recipes, *self.collections])

    async def run(self, alias: str, parameters: Optional[Mapping[str, Any]] = None) -> Any:
        """
        Result of the recipe or collection registered under ``alias``.

        Raises:
            UnknownAliasError: If nothing is registered under ``alias``
            DatasetError: If a dataset of a plain recipe failed
            RecipeError: If the recipe cannot run with these parameters
        """
        parameters = dict(parameters or {})
        if alias in self.recipes:
            return await self._run_recipe(self.recipes[alias], parameters)
        if alias in self.collections:
            return await self._run_collection(self.collections[alias], parameters)
        raise UnknownAliasError("recipe", alias)

    def clean(self, alias: str, parameters: Optional[Mapping[str, Any]] = None) -> None:
        """Drop the cached datasets of a recipe, or of every recipe of a collection."""
        parameters = dict(parameters or {})
        if alias in self.recipes:
            self.dataset_manager.clean(self.recipes[alias].extract(parameters))
        elif alias in self.collections:
            for recipe_alias in self.collections[alias].extract(parameters):
                self.clean(recipe_alias, parameters)
        else:
            raise UnknownAliasError("recipe", alias)

    async def _run_recipe(self, recipe: Recipe, parameters: Mapping[str, Any]) -> Any:
        requests = [DatasetRunInformation.of(r) for r in recipe.extract(parameters)]
        logger.debug(f"Recipe {recipe.alias} needs {[r.cache_key for r in requests]}")

        values = await self.dataset_manager.run(requests)
        # Recipes read their data by dataset alias, whatever the cache key
        data = {request.alias: values[request.cache_key] for request in requests}
        return recipe.transform(data, recipe_logger(recipe.alias), parameters)

    async def _run_collection(
        self, collection: RecipeCollection, parameters: Mapping[str, Any]
    ) -> dict[str, DataCollectionStatistics]:
        aliases = collection.extract(parameters)
        for alias in aliases:
            if alias not in self.recipes:
                raise UnknownAliasError("recipe", alias)
        rule_ids = collection.filter_by_score_rule_ids(parameters)

        results = await asyncio.gather(
            *(self._run_recipe(self.recipes[alias], parameters) for alias in aliases),
            return_exceptions=True,
        )

        statistics: dict[str, DataCollectionStatistics] = {}
        for alias, result in zip(aliases, results):
            if isinstance(result, Exception):
                logger.warning(f"Recipe {alias} failed inside {collection.alias}: {result}")
                statistics[alias] = DataCollectionStatistics(had_error=True, last_error_message=str(result))
                continue
            if isinstance(result, BaseException):
                raise result
            if not isinstance(result, list):
                error = RecipeError(alias, f"returned {type(result).__name__}, collections need a list")
                statistics[alias] = DataCollectionStatistics(had_error=True, last_error_message=str(error))
                continue
            statistics[alias] = self._summarize(result, rule_ids)
        return statistics

    def _summarize(self, records: list, rule_ids: Optional[Sequence[int]]) -> DataCollectionStatistics:
        wanted = set(rule_ids) if rule_ids is not None else None
        bad = []
        counts: dict[int, int] = {}
        for record in records:
            if not getattr(record, "score", 0):
                continue
            reasons = [r for r in record.bad_reason_ids or () if wanted is None or r in wanted]
            if not reasons:
                continue
            bad.append(record)
            for rule_id in reasons:
                counts[rule_id] = counts.get(rule_id, 0) + 1

        bad.sort(key=lambda r: r.score, reverse=True)
        return DataCollectionStatistics(
            count_all=len(records),
            count_bad=len(bad),
            count_bad_by_rule=[
                {
                    "rule_id": rule_id,
                    "rule_name": self.registry.get_score_rule_description(rule_id),
                    "count": counts[rule_id],
                }
                for rule_id in sorted(counts)
            ],
            data=bad,
        )
