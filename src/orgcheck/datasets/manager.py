"""DatasetManager: cache-first execution of datasets, one fetch per cache key."""

from __future__ import annotations

import asyncio
from typing import Any, Iterable, Mapping, Optional, Union

from ..cache import CacheManager
from ..core.factory import DataFactory
from ..exceptions import DatasetError, UnknownAliasError
from ..logging_config import dataset_logger, get_logger
from ..transport import Transport
from .base import Dataset, DatasetRunInformation

logger = get_logger(__name__)

DatasetRequest = Union[str, DatasetRunInformation]


class DatasetManager:
    """
    Runs datasets against a transport and keeps their results in the cache.

    Requests for the same cache key that overlap share one in-flight task, so
    the transport is asked at most once per key at any time. A failed dataset
    never writes to the cache.

    Args:
        datasets: Dataset instances by alias
        transport: Remote data source
        factory: Record factory shared by every dataset
        cache: Cache manager, or None to always fetch
    """

    def __init__(
        self,
        datasets: Mapping[str, Dataset],
        transport: Transport,
        factory: DataFactory,
        cache: Optional[CacheManager] = None,
    ):
        self.datasets = dict(datasets)
        self.transport = transport
        self.factory = factory
        self.cache = cache
        self._in_flight: dict[str, asyncio.Task] = {}

    async def run(
        self,
        requests: Iterable[DatasetRequest],
        return_exceptions: bool = False,
    ) -> dict[str, Any]:
        """
        Run every requested dataset concurrently.

        Returns a mapping from cache key to value. Every dataset runs to
        completion before anything is raised, so siblings of a failed dataset
        still land in the cache.

        Args:
            requests: Aliases or DatasetRunInformation
            return_exceptions: Put DatasetError instances in the result instead
                of raising the first one

        Raises:
            UnknownAliasError: If a request names an unregistered dataset
            DatasetError: If a dataset failed and return_exceptions is False
        """
        infos = [DatasetRunInformation.of(r) for r in requests]
        for info in infos:
            if info.alias not in self.datasets:
                raise UnknownAliasError("dataset", info.alias)

        tasks = [self._task_for(info) for info in infos]
        results = await asyncio.gather(*tasks, return_exceptions=True)

        out: dict[str, Any] = {}
        first_error: Optional[BaseException] = None
        for info, result in zip(infos, results):
            if isinstance(result, BaseException):
                if first_error is None:
                    first_error = result
                if not return_exceptions:
                    continue
            out[info.cache_key] = result
        if first_error is not None and not return_exceptions:
            raise first_error
        return out

    async def run_dataset(self, request: DatasetRequest) -> Any:
        """Value of a single dataset."""
        info = DatasetRunInformation.of(request)
        results = await self.run([info])
        return results[info.cache_key]

    def clean(self, requests: Iterable[DatasetRequest]) -> None:
        """Drop the cached value of each request so the next run refetches it."""
        if self.cache is None:
            return
        for request in requests:
            info = DatasetRunInformation.of(request)
            self.cache.remove(info.cache_key)
            logger.debug(f"Cache entry removed: {info.cache_key}")

    def _task_for(self, info: DatasetRunInformation) -> asyncio.Task:
        task = self._in_flight.get(info.cache_key)
        if task is not None and not task.done():
            logger.debug(f"Joining in-flight fetch of {info.cache_key}")
            return task

        task = asyncio.ensure_future(self._fetch(info))
        self._in_flight[info.cache_key] = task
        # Only pending fetches are shared; a finished or failed one is forgotten
        task.add_done_callback(lambda _: self._forget(info.cache_key, task))
        return task

    def _forget(self, cache_key: str, task: asyncio.Task) -> None:
        if self._in_flight.get(cache_key) is task:
            del self._in_flight[cache_key]

    async def _fetch(self, info: DatasetRunInformation) -> Any:
        if self.cache is not None and self.cache.has(info.cache_key):
            value = self.cache.get(info.cache_key)
            if value is not None:
                logger.debug(f"Dataset {info.cache_key} served from cache")
                return value

        dataset = self.datasets[info.alias]
        run_logger = dataset_logger(info.alias)
        try:
            value = await dataset.run(self.transport, self.factory, run_logger, info.parameters)
        except Exception as e:
            logger.warning(f"Dataset {info.cache_key} failed: {e}")
            raise DatasetError(info.alias, e) from e

        if self.cache is not None:
            self.cache.set(info.cache_key, value)
        return value
