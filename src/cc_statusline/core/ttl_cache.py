"""Expiring key → value store bounded by entry count.

Entries expire when ``now - inserted_at > ttl``. When the store is full,
inserting a new key drops the entry that was inserted earliest among the
entries currently held (FIFO). Reads never reorder entries.

An entry may carry the modification stamp of the file it was derived from;
``is_valid()`` then also rejects it once the file's current stamp is newer.

// [LAW:one-source-of-truth] Expiry and eviction rules live only in this module.
// [LAW:dataflow-not-control-flow] A miss is the MISSING sentinel, never an exception.
"""

from __future__ import annotations

import time
from collections.abc import Callable
from dataclasses import dataclass
from typing import Generic, TypeVar

T = TypeVar("T")

DEFAULT_MAX_SIZE = 100


class _Missing:
    _instance: "_Missing | None" = None

    def __new__(cls) -> "_Missing":
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __repr__(self) -> str:
        return "MISSING"

    def __bool__(self) -> bool:
        return False


# Cached values may legitimately be None, so a miss needs its own marker.
MISSING = _Missing()


@dataclass(frozen=True)
class CacheEntry(Generic[T]):
    value: T
    inserted_at: float
    mtime: float | None = None


class TTLCache(Generic[T]):
    """In-process cache with age expiry, optional mtime stamps and FIFO eviction."""

    def __init__(
        self,
        ttl: float,
        max_size: int = DEFAULT_MAX_SIZE,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self._ttl = float(ttl)
        self._max_size = max(1, int(max_size))
        self._clock = clock
        # dict preserves insertion order; the first key is the oldest insertion.
        self._entries: dict[str, CacheEntry[T]] = {}

    @property
    def ttl(self) -> float:
        return self._ttl

    @property
    def max_size(self) -> int:
        return self._max_size

    @property
    def size(self) -> int:
        return len(self._entries)

    def _expired(self, entry: CacheEntry[T]) -> bool:
        return self._clock() - entry.inserted_at > self._ttl

    def get(self, key: str) -> T | _Missing:
        """Return the cached value, or MISSING. Expired entries are dropped here."""
        entry = self._entries.get(key)
        if entry is None:
            return MISSING
        if self._expired(entry):
            del self._entries[key]
            return MISSING
        return entry.value

    def set(self, key: str, value: T, mtime: float | None = None) -> None:
        if key in self._entries:
            # Re-insertion: moves the key to the newest position.
            del self._entries[key]
        elif len(self._entries) >= self._max_size:
            oldest = next(iter(self._entries))
            del self._entries[oldest]
        self._entries[key] = CacheEntry(value=value, inserted_at=self._clock(), mtime=mtime)

    def has(self, key: str) -> bool:
        return self.get(key) is not MISSING

    def invalidate(self, key: str | None = None) -> None:
        """Drop one key, or every entry when no key is given."""
        if key is None:
            self._entries.clear()
        else:
            self._entries.pop(key, None)

    def is_valid(self, key: str, current_mtime: float | None = None) -> bool:
        """True when the entry is present, not expired, and not older than current_mtime.

        The age check and the modification check are independent; failing
        either evicts the entry.
        """
        entry = self._entries.get(key)
        if entry is None:
            return False

        if self._expired(entry):
            del self._entries[key]
            return False

        if current_mtime is not None and entry.mtime is not None and current_mtime > entry.mtime:
            del self._entries[key]
            return False

        return True

    def get_mtime(self, key: str) -> float | None:
        entry = self._entries.get(key)
        return entry.mtime if entry is not None else None

    def keys(self) -> tuple[str, ...]:
        """Held keys, oldest insertion first. Expired entries are included until read."""
        return tuple(self._entries)

    def clear(self) -> None:
        self._entries.clear()
