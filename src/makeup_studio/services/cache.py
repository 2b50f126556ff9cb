"""Simple TTL cache used for reference data and per-user journeys."""

from collections import OrderedDict
from collections.abc import Callable
from dataclasses import dataclass, field
from datetime import UTC, datetime, timedelta
from typing import Protocol


class Cache(Protocol):
    """Cache interface for simple key-value data."""

    def get(self, key: str) -> object | None:
        """Return a cached value if present and not expired."""

    def set(self, key: str, value: object, ttl_seconds: int) -> None:
        """Store a cached value with a TTL in seconds."""


def _utcnow() -> datetime:
    return datetime.now(tz=UTC)


@dataclass
class _CacheEntry:
    value: object
    expires_at: datetime


@dataclass
class InMemoryCache(Cache):
    """Process-local cache kept in least-recently-used order.

    Reads refresh recency. Writes sweep expired entries from the stale end and
    then drop the least recently used ones beyond ``max_entries``.
    """

    clock: Callable[[], datetime] = _utcnow
    max_entries: int | None = None
    _entries: OrderedDict[str, _CacheEntry] = field(
        default_factory=OrderedDict, init=False
    )

    def __len__(self) -> int:
        return len(self._entries)

    def get(self, key: str) -> object | None:
        """Return a cached value if it hasn't expired."""
        entry = self._entries.get(key)
        if entry is None:
            return None
        if self.clock() >= entry.expires_at:
            self._entries.pop(key, None)
            return None
        self._entries.move_to_end(key)
        return entry.value

    def set(self, key: str, value: object, ttl_seconds: int) -> None:
        """Store a cached value with a TTL; non-positive TTLs are not stored."""
        if ttl_seconds <= 0:
            return
        now = self.clock()
        self._entries[key] = _CacheEntry(
            value=value, expires_at=now + timedelta(seconds=ttl_seconds)
        )
        self._entries.move_to_end(key)
        self._evict(now)

    def _evict(self, now: datetime) -> None:
        while self._entries:
            oldest = next(iter(self._entries.values()))
            if now < oldest.expires_at:
                break
            self._entries.popitem(last=False)
        if self.max_entries is not None:
            while len(self._entries) > self.max_entries:
                self._entries.popitem(last=False)
