"""Keyed TTL cache used for the voice catalog.

Responsibilities:
- Define the cache store protocol the client depends on.
- Provide an in-memory TTL store with an injectable clock.
- Track basic cache telemetry (hits/misses).
"""

from __future__ import annotations

from dataclasses import dataclass, field
import threading
from time import monotonic
from typing import Any, Callable, Protocol


class CacheStore(Protocol):
    """Protocol for keyed caches with per-entry TTL."""

    def get(self, key: str) -> Any | None:
        """Return the cached value for a key, or `None` when missing or expired."""

    def put(self, key: str, value: Any, ttl_seconds: int) -> None:
        """Store a value under a key for `ttl_seconds`."""


@dataclass(slots=True)
class InMemoryCacheStore:
    """Process-local TTL cache; entries expire once the clock passes their deadline."""

    clock: Callable[[], float] = monotonic
    hits: int = 0
    misses: int = 0
    _entries: dict[str, tuple[float, Any]] = field(default_factory=dict)
    _lock: threading.Lock = field(default_factory=threading.Lock)

    def get(self, key: str) -> Any | None:
        """Return a live entry and update hit/miss counters."""

        with self._lock:
            entry = self._entries.get(key)
            if entry is not None:
                expires_at, value = entry
                if self.clock() < expires_at:
                    self.hits += 1
                    return value
                del self._entries[key]
            self.misses += 1
            return None

    def put(self, key: str, value: Any, ttl_seconds: int) -> None:
        """Store a value that expires `ttl_seconds` from now."""

        with self._lock:
            self._entries[key] = (self.clock() + ttl_seconds, value)

    def hit_rate(self) -> float:
        """Return cache hit rate for the store lifetime."""

        total = self.hits + self.misses
        if total == 0:
            return 0.0
        return self.hits / float(total)
