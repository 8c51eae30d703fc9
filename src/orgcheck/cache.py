"""
Cache manager for dataset results.

Every logical key is stored as two physical entries in a string key/value
storage:

    OrgCheck_<key>   metadata: {"type": "map"|"scalar", "length", "created"}
    OrgCheck.<key>   data:     {"content", "created"}

Both are JSON, zlib-compressed and hex-encoded. Metadata is small, so
``has`` and ``details`` never decompress the data payload. Entries older
than the TTL read as absent.

Durable storage uses diskcache (SQLite-backed); MemoryStorage is a plain dict
for tests and one-shot runs.
"""

import json
import time
import zlib
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Any, Callable, Iterable, Mapping, Optional

from diskcache import Cache

from .core.records import decode_value, encode_value
from .logging_config import get_logger

logger = get_logger(__name__)

CACHE_PREFIX = "OrgCheck"
DATA_CACHE_PREFIX = f"{CACHE_PREFIX}."
METADATA_CACHE_PREFIX = f"{CACHE_PREFIX}_"

# Map entries under these keys are back-references and never persisted
RESERVED_KEY_SUFFIXES = ("Ref", "_ref", "_refs")


class CacheStorage(ABC):
    """Raw string key/value storage the cache manager writes into."""

    @abstractmethod
    def get_item(self, key: str) -> Optional[str]:
        ...

    @abstractmethod
    def set_item(self, key: str, value: str) -> None:
        ...

    @abstractmethod
    def remove_item(self, key: str) -> None:
        ...

    @abstractmethod
    def keys(self) -> list[str]:
        ...

    def close(self) -> None:
        """Release the storage (no-op unless overridden)."""


class MemoryStorage(CacheStorage):
    def __init__(self) -> None:
        self.items: dict[str, str] = {}

    def get_item(self, key: str) -> Optional[str]:
        return self.items.get(key)

    def set_item(self, key: str, value: str) -> None:
        self.items[key] = value

    def remove_item(self, key: str) -> None:
        self.items.pop(key, None)

    def keys(self) -> list[str]:
        return list(self.items)


class DiskStorage(CacheStorage):
    """
    SQLite-backed storage through diskcache.

    Args:
        directory: Directory holding the cache database
    """

    def __init__(self, directory: str = ".orgcheck-cache"):
        self.directory = directory
        self.cache = Cache(directory)
        logger.debug(f"Disk storage opened at {directory}")

    def get_item(self, key: str) -> Optional[str]:
        return self.cache.get(key)

    def set_item(self, key: str, value: str) -> None:
        self.cache.set(key, value)

    def remove_item(self, key: str) -> None:
        self.cache.delete(key)

    def keys(self) -> list[str]:
        return [k for k in self.cache.iterkeys() if isinstance(k, str)]

    def volume(self) -> int:
        return self.cache.volume()

    def close(self) -> None:
        self.cache.close()


@dataclass(frozen=True)
class DataCacheItem:
    """One entry of ``CacheManager.details()``."""

    name: str
    is_empty: bool
    is_map: bool
    length: int
    created: float

    def to_dict(self) -> dict[str, Any]:
        return {
            "name": self.name,
            "is_empty": self.is_empty,
            "is_map": self.is_map,
            "length": self.length,
            "created": self.created,
        }


def data_key(key: str) -> str:
    return key if key.startswith(DATA_CACHE_PREFIX) else DATA_CACHE_PREFIX + key


def metadata_key(key: str) -> str:
    return key if key.startswith(METADATA_CACHE_PREFIX) else METADATA_CACHE_PREFIX + key


def logical_key(key: str) -> str:
    for prefix in (METADATA_CACHE_PREFIX, DATA_CACHE_PREFIX):
        if key.startswith(prefix):
            return key[len(prefix):]
    return key


def _length_of(value: Any) -> int:
    if isinstance(value, (list, tuple, dict, set, frozenset)):
        return len(value)
    return 1


class CacheManager:
    """
    Typed envelope and TTL policy on top of a CacheStorage.

    Args:
        storage: Raw key/value storage
        ttl_hours: Age after which entries read as absent
        clock: Returns the current time in seconds
    """

    def __init__(
        self,
        storage: CacheStorage,
        ttl_hours: int = 24,
        clock: Callable[[], float] = time.time,
    ):
        self.storage = storage
        self.ttl_seconds = ttl_hours * 3600
        self._clock = clock

    def has(self, key: str) -> bool:
        """True when a fresh metadata entry exists and its data entry is stored."""
        meta_key, payload_key = metadata_key(key), data_key(key)
        metadata = self._read(meta_key)
        if metadata is None:
            self._remove_both(key)
            return False
        if payload_key not in self.storage.keys():
            # Metadata without data: realign by dropping the metadata
            self.storage.remove_item(meta_key)
            return False
        return True

    def get(self, key: str) -> Optional[Any]:
        """
        Cached value, or None when absent or expired.

        Maps come back as dicts, anything else as stored.
        """
        metadata = self._read(metadata_key(key))
        if metadata is None:
            self._remove_both(key)
            logger.debug(f"Cache miss: {key}")
            return None

        entry = self._read(data_key(key))
        if entry is None:
            self.storage.remove_item(metadata_key(key))
            logger.debug(f"Cache miss (no data): {key}")
            return None

        content = entry.get("content")
        if metadata.get("type") == "map":
            try:
                value = {k: decode_value(v) for k, v in content}
            except (TypeError, ValueError, KeyError) as e:
                logger.warning(f"Cache entry {key} is corrupt, dropping it: {e}")
                self._remove_both(key)
                return None
        else:
            value = decode_value(content)

        logger.debug(f"Cache hit: {key}")
        return value

    def set(self, key: str, value: Any) -> None:
        """
        Store ``value`` under ``key``; None removes the entry.

        A failed write removes both physical entries so a partial entry is
        never left behind.
        """
        if value is None:
            self._remove_both(key)
            return

        now = self._clock()
        if isinstance(value, Mapping):
            content = [
                [k, encode_value(v)]
                for k, v in value.items()
                if not str(k).endswith(RESERVED_KEY_SUFFIXES)
            ]
            metadata = {"type": "map", "length": len(value), "created": now}
        else:
            content = encode_value(value)
            metadata = {"type": "scalar", "length": _length_of(value), "created": now}

        try:
            # Data first: the larger write is the one likely to fail
            self._write(data_key(key), {"content": content, "created": now})
            self._write(metadata_key(key), metadata)
            logger.debug(f"Cache set: {key} ({metadata['type']}, {metadata['length']})")
        except Exception as e:
            logger.warning(f"Cache set failed for {key}: {e}")
            self._remove_both(key)

    def remove(self, key: str) -> None:
        self._remove_both(key)

    def clear(self) -> None:
        """Remove every entry written by a cache manager, leave others alone."""
        keys = [k for k in self.storage.keys() if k.startswith(CACHE_PREFIX)]
        for key in keys:
            self.storage.remove_item(key)
        logger.info(f"Cache cleared ({len(keys)} entries)")

    def details(self) -> list[DataCacheItem]:
        """Name, emptiness, kind, length and creation time of every entry."""
        items = []
        for key in sorted(self.storage.keys()):
            if not key.startswith(METADATA_CACHE_PREFIX):
                continue
            metadata = self._read(key)
            name = logical_key(key)
            if metadata is None:
                items.append(DataCacheItem(name, True, False, 0, 0))
                continue
            length = metadata.get("length") or 0
            items.append(
                DataCacheItem(
                    name=name,
                    is_empty=length == 0,
                    is_map=metadata.get("type") == "map",
                    length=length,
                    created=metadata.get("created", 0),
                )
            )
        return items

    def keys(self) -> Iterable[str]:
        """Logical keys currently stored."""
        return [logical_key(k) for k in self.storage.keys() if k.startswith(METADATA_CACHE_PREFIX)]

    def _remove_both(self, key: str) -> None:
        self.storage.remove_item(metadata_key(key))
        self.storage.remove_item(data_key(key))

    def _write(self, physical_key: str, entry: dict[str, Any]) -> None:
        raw = json.dumps(entry, separators=(",", ":")).encode("utf-8")
        self.storage.set_item(physical_key, zlib.compress(raw).hex())

    def _read(self, physical_key: str) -> Optional[dict[str, Any]]:
        hex_value = self.storage.get_item(physical_key)
        if not hex_value:
            return None
        try:
            entry = json.loads(zlib.decompress(bytes.fromhex(hex_value)).decode("utf-8"))
        except (ValueError, zlib.error) as e:
            logger.warning(f"Unreadable cache entry {physical_key}: {e}")
            return None
        created = entry.get("created")
        if created and self._clock() - created > self.ttl_seconds:
            return None
        return entry
