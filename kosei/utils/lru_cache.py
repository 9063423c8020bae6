"""Bounded least-recently-used cache shared by the whole pipeline.

One implementation serves token sequences, per-paragraph findings and
validation outcomes. Keys may be passed through an optional ``key_fn`` so
that a large input (for example a paragraph) is stored under a short digest.
"""

from __future__ import annotations

from collections import OrderedDict
from dataclasses import dataclass
from typing import Callable, Generic, Hashable, Iterator, TypeVar

K = TypeVar("K")
V = TypeVar("V")


@dataclass(frozen=True)
class CacheStats:
    """Point-in-time snapshot of cache usage."""

    size: int
    max_size: int
    hit_count: int
    miss_count: int
    total_accesses: int
    hit_rate: float
    miss_rate: float


class BoundedCache(Generic[K, V]):
    """Count-bounded key/value store with strict LRU eviction.

    Every successful ``get`` and every ``set`` moves the entry to the
    most-recently-used end, so eviction always removes the entry that was
    touched longest ago.
    """

    def __init__(
        self,
        max_size: int = 200,
        *,
        key_fn: Callable[[K], Hashable] | None = None,
        track_stats: bool = True,
    ) -> None:
        if max_size < 1:
            raise ValueError("max_size must be at least 1")
        self._max_size = max_size
        self._key_fn = key_fn
        self._track_stats = track_stats
        self._entries: OrderedDict[Hashable, V] = OrderedDict()
        self._hits = 0
        self._misses = 0

    @property
    def max_size(self) -> int:
        return self._max_size

    def _key(self, key: K) -> Hashable:
        if self._key_fn is None:
            return key  # type: ignore[return-value]
        return self._key_fn(key)

    def get(self, key: K) -> V | None:
        """Return the cached value (promoting it) or ``None`` on a miss."""

        internal = self._key(key)
        if internal not in self._entries:
            if self._track_stats:
                self._misses += 1
            return None
        self._entries.move_to_end(internal)
        if self._track_stats:
            self._hits += 1
        return self._entries[internal]

    def set(self, key: K, value: V) -> None:
        internal = self._key(key)
        if internal in self._entries:
            self._entries.move_to_end(internal)
        elif len(self._entries) >= self._max_size:
            self._entries.popitem(last=False)
        self._entries[internal] = value

    def has(self, key: K) -> bool:
        """Membership test that neither promotes the key nor counts an access."""

        return self._key(key) in self._entries

    def delete(self, key: K) -> bool:
        internal = self._key(key)
        if internal not in self._entries:
            return False
        del self._entries[internal]
        return True

    def clear(self) -> None:
        self._entries.clear()
        self._hits = 0
        self._misses = 0

    def keys(self) -> Iterator[Hashable]:
        """Internal keys from least to most recently used."""

        return iter(list(self._entries.keys()))

    def stats(self) -> CacheStats:
        total = self._hits + self._misses
        hit_rate = (self._hits / total) * 100 if total else 0.0
        miss_rate = (self._misses / total) * 100 if total else 0.0
        return CacheStats(
            size=len(self._entries),
            max_size=self._max_size,
            hit_count=self._hits,
            miss_count=self._misses,
            total_accesses=total,
            hit_rate=hit_rate,
            miss_rate=miss_rate,
        )

    def __len__(self) -> int:
        return len(self._entries)

    def __contains__(self, key: object) -> bool:
        return self.has(key)  # type: ignore[arg-type]
