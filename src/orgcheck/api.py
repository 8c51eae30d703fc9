"""Public API for Org Check.

``OrgCheckAPI`` wires the rule registry, the record factory, the cache and the
two managers around a transport. Callers run recipes by alias and never touch
datasets directly.

Example:
    >>> from orgcheck import OrgCheckAPI
    >>> from orgcheck.transport import FixtureTransport
    >>>
    >>> api = OrgCheckAPI(FixtureTransport("fixtures/demo-org"))
    >>> classes = api.run_recipe_sync("apex-classes", {"namespace": "*"})
"""

from __future__ import annotations

import asyncio
from pathlib import Path
from typing import Any, Mapping, Optional

from .cache import CacheManager, CacheStorage, DataCacheItem, DiskStorage, MemoryStorage
from .config import OrgCheckConfig, load_config
from .core.catalog import default_registry
from .core.factory import DataFactory
from .core.matrix import DataMatrix
from .core.rules import ScoreRule
from .datasets import DatasetManager, get_datasets
from .logging_config import get_logger
from .recipes import RecipeManager, get_recipe_collections, get_recipes
from .transport import FixtureTransport, Transport

logger = get_logger(__name__)


class OrgCheckAPI:
    """
    Entry point for running recipes against one org.

    Args:
        transport: Remote data source
        storage: Cache storage; None picks one from the configuration
            (disk when caching is enabled, memory otherwise)
        config: Settings; None loads them from files and environment
    """

    def __init__(
        self,
        transport: Transport,
        storage: Optional[CacheStorage] = None,
        config: Optional[OrgCheckConfig] = None,
    ):
        self.config = config if config is not None else load_config()
        self.transport = transport

        if storage is None:
            storage = DiskStorage(self.config.cache_dir) if self.config.cache_enabled else MemoryStorage()
        self.storage = storage

        self.registry = default_registry(self.config.api_version, self.config.old_api_version_years)
        self.factory = DataFactory(self.registry, self.config.dependency_error_ids)
        self.cache = CacheManager(storage, ttl_hours=self.config.cache_ttl_hours)
        self.dataset_manager = DatasetManager(get_datasets(), transport, self.factory, self.cache)
        self.recipe_manager = RecipeManager(
            self.dataset_manager, self.registry, get_recipes(), get_recipe_collections()
        )
        logger.debug(f"Org Check ready: {len(self.registry)} rules, {len(self.dataset_manager.datasets)} datasets")

    @classmethod
    def from_fixtures(cls, directory: Path, config: Optional[OrgCheckConfig] = None) -> OrgCheckAPI:
        """API over a FixtureTransport reading ``directory``."""
        return cls(FixtureTransport(directory), config=config)

    # ── Recipes ────────────────────────────────────────────────────

    async def run_recipe(self, alias: str, parameters: Optional[Mapping[str, Any]] = None) -> Any:
        return await self.recipe_manager.run(alias, parameters)

    def run_recipe_sync(self, alias: str, parameters: Optional[Mapping[str, Any]] = None) -> Any:
        """``run_recipe`` from synchronous code, on a fresh event loop."""
        return asyncio.run(self.run_recipe(alias, parameters))

    def clean_recipe(self, alias: str, parameters: Optional[Mapping[str, Any]] = None) -> None:
        """Forget the cached datasets of a recipe so its next run refetches them."""
        self.recipe_manager.clean(alias, parameters)

    def recipe_aliases(self) -> list[str]:
        return self.recipe_manager.aliases()

    # ── Score rules ────────────────────────────────────────────────

    def get_score_rule(self, rule_id: int) -> ScoreRule:
        return self.registry.get_score_rule(rule_id)

    def score_rules_matrix(self) -> DataMatrix:
        return self.registry.as_matrix()

    # ── Cache ──────────────────────────────────────────────────────

    def cache_information(self) -> list[DataCacheItem]:
        return self.cache.details()

    def remove_all_from_cache(self) -> None:
        self.cache.clear()

    def close(self) -> None:
        self.storage.close()
