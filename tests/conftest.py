"""Shared test fixtures for Org Check."""

import asyncio

import pytest

from orgcheck.cache import CacheManager, MemoryStorage
from orgcheck.core.catalog import default_registry
from orgcheck.core.dependencies import Edge
from orgcheck.core.factory import DataFactory
from orgcheck.datasets import DatasetManager, get_datasets
from orgcheck.transport import InMemoryTransport


def edge(id, type, ref_id, ref_type):
    return Edge(
        id=id,
        name=f"{type} {id}",
        type=type,
        url=f"/{id}",
        ref_id=ref_id,
        ref_name=f"{ref_type} {ref_id}",
        ref_type=ref_type,
        ref_url=f"/{ref_id}",
    )


# ApexClass-001 uses ApexClass-002 and CustomField-001, and is referenced by
# ApexClass-003 and CustomField-002.
RELATIONSHIP_001 = (
    edge("ApexClass-001", "ApexClass", "ApexClass-002", "ApexClass"),
    edge("ApexClass-001", "ApexClass", "CustomField-001", "CustomField"),
    edge("ApexClass-003", "ApexClass", "ApexClass-001", "ApexClass"),
    edge("CustomField-002", "CustomField", "ApexClass-001", "ApexClass"),
)

# CustomField-001 is used by four layouts and one apex class, and uses nothing.
RELATIONSHIP_002 = (
    edge("Layout-001", "Layout", "CustomField-001", "CustomField"),
    edge("Layout-002", "Layout", "CustomField-001", "CustomField"),
    edge("Layout-003", "Layout", "CustomField-001", "CustomField"),
    edge("ApexClass-001", "ApexClass", "CustomField-001", "CustomField"),
    edge("Layout-004", "Layout", "CustomField-001", "CustomField"),
)


def run(coro):
    """Drive a coroutine to completion from a synchronous test."""
    return asyncio.run(coro)


@pytest.fixture
def registry():
    return default_registry(api_version=60)


@pytest.fixture
def factory(registry):
    return DataFactory(registry)


@pytest.fixture
def storage():
    return MemoryStorage()


@pytest.fixture
def clock():
    """Settable clock: ``clock.now`` is the current time in seconds."""

    class Clock:
        now = 1_700_000_000.0

        def __call__(self):
            return self.now

    return Clock()


@pytest.fixture
def cache(storage, clock):
    return CacheManager(storage, ttl_hours=24, clock=clock)


@pytest.fixture
def transport():
    return InMemoryTransport()


@pytest.fixture
def dataset_manager(transport, factory, cache):
    return DatasetManager(get_datasets(), transport, factory, cache)
