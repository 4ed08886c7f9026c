"""
In-memory response cache with per-entry TTL.

Entries are keyed by normalized request identity (path + sorted query).
Expired entries are treated as absent on read and physically removed by
``sweep()``, which the application runs on a fixed interval. The map is
bounded: once ``max_entries`` is reached the least recently used entry is
evicted.

State is per instance and per process; several workers each keep their own.
"""

import json
import logging
import time
from collections import OrderedDict
from dataclasses import dataclass
from typing import Any, Callable, Dict, Iterable, Optional, Tuple, Union
from urllib.parse import urlencode

logger = logging.getLogger(__name__)

QueryLike = Union[Dict[str, Any], Iterable[Tuple[str, Any]], None]


@dataclass
class CacheEntry:
    key: str
    payload: Any
    stored_at: float
    ttl_seconds: float

    def is_expired(self, now: float) -> bool:
        return now - self.stored_at >= self.ttl_seconds

    def approximate_size(self) -> int:
        if isinstance(self.payload, (bytes, bytearray)):
            size = len(self.payload)
        else:
            try:
                size = len(json.dumps(self.payload, default=str))
            except (TypeError, ValueError):
                size = 0
        return size + len(self.key)


def make_key(path: str, query: QueryLike = None) -> str:
    """Build a cache key; parameter order in the query string does not matter."""
    if not query:
        return path
    items = query.items() if isinstance(query, dict) else query
    pairs = sorted((str(k), "" if v is None else str(v)) for k, v in items)
    if not pairs:
        return path
    return f"{path}?{urlencode(pairs)}"


class ResponseCache:
    def __init__(
        self,
        ttl_seconds: float = 900,
        max_entries: Optional[int] = 1000,
        clock: Callable[[], float] = time.time,
    ):
        self.ttl_seconds = ttl_seconds
        self.max_entries = max_entries
        self._clock = clock
        self._entries: "OrderedDict[str, CacheEntry]" = OrderedDict()

    def __len__(self) -> int:
        return len(self._entries)

    def __contains__(self, key: str) -> bool:
        return self.lookup(key) is not None

    # -- key level ---------------------------------------------------------

    def lookup(self, key: str) -> Optional[CacheEntry]:
        entry = self._entries.get(key)
        if entry is None:
            return None
        if entry.is_expired(self._clock()):
            # Left in place; sweep() or the next store() for the key removes it
            return None
        self._entries.move_to_end(key)
        return entry

    def store(self, key: str, payload: Any, ttl_seconds: Optional[float] = None) -> CacheEntry:
        entry = CacheEntry(
            key=key,
            payload=payload,
            stored_at=self._clock(),
            ttl_seconds=self.ttl_seconds if ttl_seconds is None else ttl_seconds,
        )
        self._entries[key] = entry
        self._entries.move_to_end(key)
        self._evict_overflow()
        return entry

    def _evict_overflow(self) -> None:
        if not self.max_entries:
            return
        while len(self._entries) > self.max_entries:
            evicted, _ = self._entries.popitem(last=False)
            logger.debug(f"Cache evicted LRU entry: {evicted}")

    # -- request level -----------------------------------------------------

    def get(self, method: str, path: str, query: QueryLike = None) -> Optional[CacheEntry]:
        """Return the live entry for a GET request, or None."""
        if method.upper() != "GET":
            return None
        return self.lookup(make_key(path, query))

    def put(self, path: str, query: QueryLike, status_code: int, payload: Any) -> bool:
        """Store a response body; only 200 responses are cached."""
        if status_code != 200:
            return False
        self.store(make_key(path, query), payload)
        return True

    # -- maintenance -------------------------------------------------------

    def sweep(self) -> int:
        now = self._clock()
        expired = [key for key, entry in self._entries.items() if entry.is_expired(now)]
        for key in expired:
            del self._entries[key]
        if expired:
            logger.debug(f"Cache sweep removed {len(expired)} expired entries")
        return len(expired)

    def clear(self, pattern: Optional[str] = None) -> int:
        if pattern:
            matching = [key for key in self._entries if pattern in key]
            for key in matching:
                del self._entries[key]
            logger.info(f"Cleared {len(matching)} cache entries matching: {pattern}")
            return len(matching)

        size = len(self._entries)
        self._entries.clear()
        logger.info(f"Cleared all {size} cache entries")
        return size

    def stats(self) -> Dict[str, Any]:
        now = self._clock()
        total = len(self._entries)
        expired = sum(1 for entry in self._entries.values() if entry.is_expired(now))
        return {
            "total": total,
            "active": total - expired,
            "expired": expired,
            "approximate_memory_bytes": sum(e.approximate_size() for e in self._entries.values()),
            "max_entries": self.max_entries,
            "ttl_seconds": self.ttl_seconds,
        }
