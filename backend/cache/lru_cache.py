"""
LRU Cache
LRU 缓存

Capacity-bounded, recency-ordered index layered over a backing Storage.

Features:
- Read-through: index misses consult the store before reporting not-found
- Write-through: set() persists to the store before the index changes
- Strict LRU eviction; evicted entries are deleted from the store too
- Thread-safe: one Lock serializes every public operation
"""

import io
import logging
from collections import OrderedDict
from threading import Lock
from typing import BinaryIO, Dict, List

from storage import EvictionError, OperationContext, Storage, StorageError

logger = logging.getLogger(__name__)


class LRUCache:
    """
    Bounded cache of byte blobs keyed by string.

    The index is an OrderedDict ordered from least to most recently used.
    It never holds more than ``capacity`` entries once a public call
    returns; with capacity <= 0 it holds none, although the value written
    to the store by set() is still persisted until its eviction deletes it.

    Usage:
        cache = LRUCache(capacity=5, storage=MemoryStorage())
        cache.set(ctx, url, data)
        with cache.get(ctx, url) as f:
            data = f.read()
    """

    def __init__(self, capacity: int, storage: Storage):
        self._capacity = capacity
        self._storage = storage
        self._items: "OrderedDict[str, bytes]" = OrderedDict()
        self._lock = Lock()

        self._hits = 0
        self._misses = 0
        self._evictions = 0

    @property
    def capacity(self) -> int:
        return self._capacity

    @property
    def storage(self) -> Storage:
        return self._storage

    def get(self, ctx: OperationContext, key: str) -> BinaryIO:
        """
        Get cached bytes for key.

        Index hits never touch the store. Misses read through to the store
        and insert the value as most recently used, which may evict the
        least recently used entry.

        Raises:
            KeyNotFoundError: key is in neither the index nor the store.
            EvictionError: the value was loaded but evicting overflow failed.
        """
        with self._lock:
            if key in self._items:
                self._items.move_to_end(key)
                self._hits += 1
                return io.BytesIO(self._items[key])

            self._misses += 1
            with self._storage.get(ctx, key) as stream:
                try:
                    value = stream.read()
                except OSError as e:
                    raise StorageError(f"failed to read from storage: {e}") from e

            self._items[key] = value
            self._evict_overflow(ctx)

            return io.BytesIO(value)

    def set(self, ctx: OperationContext, key: str, value: bytes) -> None:
        """
        Write value to the store, then record it as most recently used.

        A store failure leaves the index untouched.

        Raises:
            EvictionError: the value is stored but evicting overflow failed.
        """
        with self._lock:
            self._storage.set(ctx, key, value)

            if key in self._items:
                self._items[key] = value
                self._items.move_to_end(key)
                return

            self._items[key] = value
            self._evict_overflow(ctx)

    def delete(self, ctx: OperationContext, key: str) -> None:
        """Drop key from the index (if present) and from the store."""
        with self._lock:
            self._items.pop(key, None)
            self._storage.delete(ctx, key)

    def resize(self, ctx: OperationContext, capacity: int) -> None:
        """Change capacity, evicting least recently used entries to fit."""
        with self._lock:
            logger.info(f"[LRUCache] Capacity {self._capacity} -> {capacity}")
            self._capacity = capacity
            self._evict_overflow(ctx)

    def _evict_overflow(self, ctx: OperationContext) -> None:
        """Evict oldest entries until the index fits capacity (lock held)."""
        while len(self._items) > self._capacity:
            self._remove_oldest(ctx)

    def _remove_oldest(self, ctx: OperationContext) -> None:
        key, _ = self._items.popitem(last=False)
        self._evictions += 1
        try:
            self._storage.delete(ctx, key)
        except Exception as e:
            logger.warning(f"[LRUCache] Failed to delete evicted entry {key[:50]}: {e}")
            raise EvictionError(e, key=key) from e
        logger.debug(f"[LRUCache] LRU evicted: {key[:50]}")

    def keys(self) -> List[str]:
        """Cached keys, most recently used first."""
        with self._lock:
            return list(reversed(self._items.keys()))

    def __contains__(self, key: str) -> bool:
        # Does not refresh recency
        with self._lock:
            return key in self._items

    def __len__(self) -> int:
        with self._lock:
            return len(self._items)

    def stats(self) -> Dict[str, int]:
        """
        Get cache statistics
        获取缓存统计信息
        """
        with self._lock:
            return {
                "capacity": self._capacity,
                "cached_entries": len(self._items),
                "storage_size": self._storage.size(),
                "hits": self._hits,
                "misses": self._misses,
                "evictions": self._evictions,
            }
