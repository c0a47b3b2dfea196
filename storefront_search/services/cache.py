"""Short-lived, capacity-bounded cache for search payloads."""

from __future__ import annotations

import threading
import time
from collections import OrderedDict
from dataclasses import dataclass
from typing import Any, Callable, Dict, Generic, Optional, TypeVar

T = TypeVar("T")

DEFAULT_TTL_SECONDS = 30.0
DEFAULT_MAX_ENTRIES = 500


@dataclass(frozen=True)
class CacheEntry(Generic[T]):
    data: T
    expires_at: float


def build_cache_key(
    query: str,
    locale: str,
    limit: int,
    mode: str,
    *,
    autocomplete: bool = False,
    min_score: Optional[float] = None,
) -> str:
    parts = [f"q={query}", f"locale={locale}", f"limit={limit}", f"mode={mode}"]
    if autocomplete:
        parts.append("autocomplete=1")
    if min_score is not None:
        parts.append(f"min_score={min_score:g}")
    return "search:" + "&".join(parts)


class SearchCache(Generic[T]):
    """TTL cache evicting by insertion order once full.

    This is not an LRU: reads never refresh an entry's position. When the
    cache is full, expired entries are purged first and then the oldest
    inserted entries are dropped until there is room.
    """

    def __init__(
        self,
        max_entries: int = DEFAULT_MAX_ENTRIES,
        ttl_seconds: float = DEFAULT_TTL_SECONDS,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self.max_entries = max(1, max_entries)
        self.ttl_seconds = ttl_seconds
        self._clock = clock
        self._entries: "OrderedDict[str, CacheEntry[T]]" = OrderedDict()
        self._lock = threading.Lock()
        self.hits = 0
        self.misses = 0

    def __len__(self) -> int:
        return len(self._entries)

    def __contains__(self, key: str) -> bool:
        entry = self._entries.get(key)
        return entry is not None and entry.expires_at > self._clock()

    def get(self, key: str) -> Optional[T]:
        with self._lock:
            entry = self._entries.get(key)
            if entry is None:
                self.misses += 1
                return None
            if entry.expires_at <= self._clock():
                del self._entries[key]
                self.misses += 1
                return None
            self.hits += 1
            return entry.data

    def set(self, key: str, value: T, ttl: Optional[float] = None) -> None:
        expires_at = self._clock() + (self.ttl_seconds if ttl is None else ttl)
        with self._lock:
            self._entries.pop(key, None)
            if len(self._entries) >= self.max_entries:
                self._purge_expired()
            while len(self._entries) >= self.max_entries:
                self._entries.popitem(last=False)
            self._entries[key] = CacheEntry(data=value, expires_at=expires_at)

    def invalidate(self, key: str) -> None:
        with self._lock:
            self._entries.pop(key, None)

    def clear(self) -> None:
        with self._lock:
            self._entries.clear()

    def _purge_expired(self) -> None:
        now = self._clock()
        for key in [k for k, entry in self._entries.items() if entry.expires_at <= now]:
            del self._entries[key]

    def stats(self) -> Dict[str, Any]:
        return {
            "entries": len(self._entries),
            "max_entries": self.max_entries,
            "ttl_seconds": self.ttl_seconds,
            "hits": self.hits,
            "misses": self.misses,
        }
