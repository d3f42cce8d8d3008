"""
In-memory key/value cache with per-entry expiry.
"""

import time
from dataclasses import dataclass
from typing import Any, Callable, Dict, Generic, Hashable, Optional, TypeVar

V = TypeVar("V")


@dataclass(frozen=True)
class CacheEntry(Generic[V]):
    """Cached value with its absolute expiry timestamp."""

    value: V
    expires_at: float

    def is_expired(self, now: float) -> bool:
        return now >= self.expires_at


class TTLCache(Generic[V]):
    """
    Keyed cache whose entries expire after a time-to-live.

    Expired entries are dropped lazily when read. There is no locking: two
    concurrent misses on the same key may both compute a value and the last
    ``set`` wins.
    """

    def __init__(
        self,
        default_ttl: float = 3600.0,
        clock: Callable[[], float] = time.monotonic,
    ):
        self.default_ttl = default_ttl
        self._clock = clock
        self._entries: Dict[Hashable, CacheEntry[V]] = {}
        self._hits = 0
        self._misses = 0

    def get(self, key: Hashable) -> Optional[V]:
        """Return the live value for ``key`` or None."""
        entry = self._entries.get(key)
        if entry is None:
            self._misses += 1
            return None

        if entry.is_expired(self._clock()):
            del self._entries[key]
            self._misses += 1
            return None

        self._hits += 1
        return entry.value

    def set(self, key: Hashable, value: V, ttl: Optional[float] = None) -> None:
        """Store ``value`` until now + ``ttl`` (or the default TTL)."""
        lifetime = self.default_ttl if ttl is None else ttl
        self._entries[key] = CacheEntry(
            value=value, expires_at=self._clock() + lifetime
        )

    def __len__(self) -> int:
        return len(self._entries)

    @property
    def stats(self) -> Dict[str, Any]:
        """Get cache statistics."""
        total = self._hits + self._misses
        return {
            "size": len(self._entries),
            "hits": self._hits,
            "misses": self._misses,
            "hit_ratio": self._hits / total if total > 0 else 0.0,
        }
