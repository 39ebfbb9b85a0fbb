"""In-memory read-through cache with lazy TTL expiry.

Entries are immutable and replaced wholesale.  An entry older than the
TTL is treated as absent and evicted when it is next read; there is no
background sweep.

Known gaps: the store is unbounded in size, and concurrent misses for
the same key each run their own loader (no in-flight de-duplication).
"""

from __future__ import annotations

import logging
import time
from dataclasses import dataclass
from typing import Any, Callable, TypeVar

logger = logging.getLogger(__name__)

__all__ = ["DEFAULT_TTL", "CacheEntry", "ReadThroughCache", "cache_key"]

T = TypeVar("T")

DEFAULT_TTL = 60 * 60 * 24  # seconds


@dataclass(frozen=True)
class CacheEntry:
    """A stored value and the clock reading at which it was stored."""

    key: str
    value: Any
    stored_at: float


class ReadThroughCache:
    """Key/value store mediating every upstream fetch.

    Parameters
    ----------
    ttl:
        Entry lifetime in seconds.
    clock:
        Zero-argument callable returning the current time in seconds.
        Defaults to :func:`time.monotonic`.
    """

    def __init__(
        self,
        ttl: float = DEFAULT_TTL,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self.ttl = ttl
        self._clock = clock
        self._store: dict[str, CacheEntry] = {}

    def _is_fresh(self, entry: CacheEntry) -> bool:
        return self._clock() - entry.stored_at < self.ttl

    def get(self, key: str) -> Any | None:
        entry = self._store.get(key)
        if entry is None:
            return None
        if not self._is_fresh(entry):
            # Another writer may have replaced the entry meanwhile
            if self._store.get(key) is entry:
                del self._store[key]
            return None
        return entry.value

    def put(self, key: str, value: Any) -> None:
        self._store[key] = CacheEntry(key=key, value=value, stored_at=self._clock())

    def get_or_load(self, key: str, loader: Callable[[], T]) -> T:
        """Return the cached value for *key*, calling *loader* on a miss.

        Exceptions raised by *loader* propagate and nothing is stored.
        """
        cached = self.get(key)
        if cached is not None:
            logger.debug("Cache hit: %s", key)
            return cached

        logger.debug("Cache miss: %s", key)
        value = loader()
        self.put(key, value)
        return value

    def clear(self) -> None:
        self._store.clear()

    def __contains__(self, key: object) -> bool:
        entry = self._store.get(key)  # type: ignore[call-overload]
        return entry is not None and self._is_fresh(entry)

    def __len__(self) -> int:
        """Number of stored entries, stale ones not yet evicted included."""
        return len(self._store)


def cache_key(kind: str, *parts: Any, **params: Any) -> str:
    """Build a canonical cache key.

    Positional *parts* keep their order; keyword *params* are rendered
    as ``name=value`` sorted by name, so the key does not depend on
    call-site argument order.

    >>> cache_key("places", "528", limit=5, minSitelinks=0)
    'places:528:limit=5:minSitelinks=0'
    """
    segments = [kind, *(str(p) for p in parts)]
    segments.extend(f"{name}={params[name]}" for name in sorted(params))
    return ":".join(segments)
