"""
Key/value caching service.

This module provides a TTL and schema-versioned cache layered over a
KeyValueStore, with size-bounded eviction and hit/miss statistics persisted
next to the cached items.

Expiry and version checks are lazy: they happen on read and during the
periodic cleanup sweep. Eviction removes expired items first, then the
oldest writes; read access does not refresh an item's age.

Concurrent writers are not coordinated. Entries and statistics are
read-modify-written as whole JSON documents, so the last write wins.

Typical usage:
    cache = SmartCache(store)
    cached = cache.get("predictions:2024-01-10")
    if cached is None:
        cached = compute()
        cache.set("predictions:2024-01-10", cached, ttl=6 * 60 * 60)
"""
import base64
import json
import time
import zlib
from typing import Any, Callable, List, Optional, Tuple

from aws_lambda_powertools import Logger
from pydantic import ValidationError

from src.models.cache import CacheConfig, CacheEntry, CacheStats
from src.services.constants import (
    CACHE_CLEANUP_INTERVAL_SECONDS,
    CACHE_PREFIX,
    CACHE_STATS_KEY,
)
from src.utils.storage import KeyValueStore

logger = Logger()


def calculate_size(value: Any) -> int:
    """Approximate in-storage size in bytes (two bytes per JSON character)."""
    return len(json.dumps(value, separators=(",", ":"), default=str)) * 2


def compress_data(value: Any) -> str:
    return base64.b64encode(zlib.compress(json.dumps(value).encode("utf-8"))).decode("ascii")


def decompress_data(compressed: str) -> Any:
    return json.loads(zlib.decompress(base64.b64decode(compressed)).decode("utf-8"))


class SmartCache:
    """Versioned TTL cache over a key/value store."""

    def __init__(
        self,
        store: KeyValueStore,
        config: Optional[CacheConfig] = None,
        clock: Callable[[], float] = time.time
    ):
        """
        Initialize the cache and run startup maintenance.

        Loads persisted statistics, sweeps expired items when the last
        cleanup is older than six hours, then recalculates size statistics.
        """
        self.store = store
        self.config = config or CacheConfig()
        self.clock = clock
        self._stats = self._load_stats()
        self._perform_startup_tasks()

    @property
    def stats(self) -> CacheStats:
        return self._stats.model_copy()

    @property
    def hit_rate(self) -> float:
        """Percentage of reads served from the cache."""
        total = self._stats.hits + self._stats.misses
        return self._stats.hits / total * 100 if total else 0.0

    @property
    def size_percentage(self) -> float:
        return self._stats.size / self.config.max_size * 100

    def _cache_key(self, key: str) -> str:
        return f"{CACHE_PREFIX}{key}"

    def _load_stats(self) -> CacheStats:
        try:
            raw = self.store.get_item(CACHE_STATS_KEY)
            if raw:
                return CacheStats.model_validate_json(raw)
        except ValidationError:
            logger.warning("Discarding corrupted cache statistics")
        except Exception as e:
            logger.error("Error loading cache statistics", extra={
                "error": str(e),
                "error_type": e.__class__.__name__
            })
        return CacheStats(last_cleanup=self.clock())

    def _save_stats(self, **changes) -> None:
        self._stats = self._stats.model_copy(update=changes)
        try:
            self.store.set_item(CACHE_STATS_KEY, self._stats.model_dump_json())
        except Exception as e:
            logger.error("Error saving cache statistics", extra={
                "error": str(e),
                "error_type": e.__class__.__name__
            })

    def _perform_startup_tasks(self) -> None:
        if self.clock() - self._stats.last_cleanup > CACHE_CLEANUP_INTERVAL_SECONDS:
            self.cleanup()
        self.recalculate_stats()

    def _cache_keys(self) -> List[str]:
        return [key for key in self.store.get_all_keys() if key.startswith(CACHE_PREFIX)]

    def _read_entry(self, cache_key: str) -> Tuple[Optional[str], Optional[CacheEntry]]:
        """Return the raw payload and the parsed entry, or None for a corrupted one."""
        raw = self.store.get_item(cache_key)
        if raw is None:
            return None, None
        try:
            return raw, CacheEntry.model_validate_json(raw)
        except ValidationError:
            return raw, None

    def _record_miss(self, removed_size: int = 0, removed_items: int = 0) -> None:
        self._save_stats(
            misses=self._stats.misses + 1,
            size=max(0, self._stats.size - removed_size),
            item_count=max(0, self._stats.item_count - removed_items)
        )

    def get(self, key: str) -> Optional[Any]:
        """
        Get a cached value.

        Expired entries and entries written under another schema version are
        deleted and reported as misses.

        Returns:
            The cached value, or None on a miss or storage failure
        """
        cache_key = self._cache_key(key)
        try:
            raw, entry = self._read_entry(cache_key)

            if raw is None:
                self._record_miss()
                return None

            if entry is None:
                logger.warning("Removing corrupted cache entry", extra={"key": key})
                self.store.remove_item(cache_key)
                self._record_miss(removed_size=len(raw) * 2, removed_items=1)
                return None

            if entry.is_expired(self.clock()) or entry.version != self.config.version:
                self.store.remove_item(cache_key)
                self._record_miss(removed_size=entry.size, removed_items=1)
                logger.debug("Cache entry invalidated", extra={
                    "key": key,
                    "expired": entry.is_expired(self.clock()),
                    "version": entry.version
                })
                return None

            self._save_stats(hits=self._stats.hits + 1)
            if entry.compressed:
                return decompress_data(entry.data)
            return entry.data

        except Exception as e:
            logger.error("Error reading cache entry", extra={
                "key": key,
                "error": str(e),
                "error_type": e.__class__.__name__
            })
            return None

    def set(
        self,
        key: str,
        value: Any,
        ttl: Optional[float] = None,
        priority: str = "normal"
    ) -> bool:
        """
        Cache a JSON-serializable value.

        Args:
            key: Cache key
            value: Value to store
            ttl: Time to live in seconds. None uses the configured TTL. Zero or
                less does not fall back to it: the value is stored without
                expiry
            priority: Informational priority tag stored with the entry

        Returns:
            True if the value was stored. Values larger than half the cache
            capacity are rejected, as are writes when eviction cannot free
            enough space.
        """
        cache_key = self._cache_key(key)
        try:
            now = self.clock()
            if ttl is None:
                ttl = self.config.default_ttl

            data = compress_data(value) if self.config.enable_compression else value
            entry = CacheEntry(
                data=data,
                timestamp=now,
                expires_at=now + ttl if ttl > 0 else None,
                version=self.config.version,
                size=0,
                compressed=self.config.enable_compression,
                priority=priority
            )
            # The size field is part of what is measured, so repeat until it settles
            while True:
                size = calculate_size(entry.model_dump(mode="json"))
                if size == entry.size:
                    break
                entry.size = size

            if entry.size > self.config.max_size / 2:
                logger.warning("Item too large for cache", extra={"key": key, "size": entry.size})
                return False

            if self._stats.size + entry.size > self.config.max_size:
                freed = self._evict_items(entry.size)
                if freed < entry.size:
                    logger.warning("Could not free enough cache space", extra={
                        "key": key,
                        "needed": entry.size,
                        "freed": freed
                    })
                    return False

            existing_raw, existing = self._read_entry(cache_key)
            existing_size = existing.size if existing else 0

            self.store.set_item(cache_key, entry.model_dump_json())

            self._save_stats(
                size=max(0, self._stats.size - existing_size) + entry.size,
                item_count=self._stats.item_count + (0 if existing_raw is not None else 1)
            )
            return True

        except Exception as e:
            logger.error("Error writing cache entry", extra={
                "key": key,
                "error": str(e),
                "error_type": e.__class__.__name__
            })
            return False

    def remove(self, key: str) -> bool:
        """
        Remove a cached value.

        Returns:
            True if an entry existed and was removed
        """
        cache_key = self._cache_key(key)
        try:
            raw, entry = self._read_entry(cache_key)
            if raw is None:
                return False

            self.store.remove_item(cache_key)
            self._save_stats(
                size=max(0, self._stats.size - (entry.size if entry else 0)),
                item_count=max(0, self._stats.item_count - 1)
            )
            return True

        except Exception as e:
            logger.error("Error removing cache entry", extra={
                "key": key,
                "error": str(e),
                "error_type": e.__class__.__name__
            })
            return False

    def _evict_items(self, space_needed: int) -> int:
        """
        Remove entries until at least space_needed bytes are freed.

        Corrupted and expired entries go first, then the oldest writes.

        Returns:
            Number of bytes freed
        """
        now = self.clock()
        candidates = []
        for cache_key in self._cache_keys():
            raw, entry = self._read_entry(cache_key)
            if raw is None:
                continue
            if entry is None:
                candidates.append((0, 0.0, cache_key, len(raw) * 2))
            else:
                rank = 0 if entry.is_expired(now) else 1
                candidates.append((rank, entry.timestamp, cache_key, entry.size))

        candidates.sort(key=lambda c: (c[0], c[1]))

        to_remove = []
        freed = 0
        for _, _, cache_key, size in candidates:
            if freed >= space_needed:
                break
            to_remove.append(cache_key)
            freed += size

        if to_remove:
            self.store.multi_remove(to_remove)
            self._save_stats(
                size=max(0, self._stats.size - freed),
                item_count=max(0, self._stats.item_count - len(to_remove))
            )
            logger.info("Evicted cache entries", extra={"count": len(to_remove), "freed": freed})

        return freed

    def cleanup(self) -> None:
        """Remove expired, outdated and corrupted entries."""
        try:
            now = self.clock()
            stale_keys = []
            freed = 0

            for cache_key in self._cache_keys():
                raw, entry = self._read_entry(cache_key)
                if raw is None:
                    continue
                if entry is None:
                    stale_keys.append(cache_key)
                    freed += len(raw) * 2
                elif entry.is_expired(now) or entry.version != self.config.version:
                    stale_keys.append(cache_key)
                    freed += entry.size

            if stale_keys:
                self.store.multi_remove(stale_keys)
                logger.info("Cache cleaned", extra={"removed": len(stale_keys), "freed": freed})

            self._save_stats(
                size=max(0, self._stats.size - freed),
                item_count=max(0, self._stats.item_count - len(stale_keys)),
                last_cleanup=now
            )

        except Exception as e:
            logger.error("Error cleaning cache", extra={
                "error": str(e),
                "error_type": e.__class__.__name__
            })

    def clear(self) -> None:
        """Remove every cached entry and reset statistics."""
        try:
            cache_keys = self._cache_keys()
            if cache_keys:
                self.store.multi_remove(cache_keys)
            self._save_stats(hits=0, misses=0, size=0, item_count=0, last_cleanup=self.clock())

        except Exception as e:
            logger.error("Error clearing cache", extra={
                "error": str(e),
                "error_type": e.__class__.__name__
            })

    def recalculate_stats(self) -> None:
        """Recompute size and item count from the stored entries."""
        try:
            total_size = 0
            item_count = 0
            for cache_key in self._cache_keys():
                _, entry = self._read_entry(cache_key)
                if entry is not None:
                    total_size += entry.size
                    item_count += 1
            self._save_stats(size=total_size, item_count=item_count)

        except Exception as e:
            logger.error("Error recalculating cache statistics", extra={
                "error": str(e),
                "error_type": e.__class__.__name__
            })
