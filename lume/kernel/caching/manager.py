import threading
from collections import OrderedDict
from typing import Generic, Optional, TypeVar
from lume.kernel.caching.logic import CacheKey
from lume.kernel.system.logging import get_logger

logger = get_logger(__name__)

V = TypeVar("V")


class ResultCache(Generic[V]):
    """
    Bounded LRU store of rendered results keyed by (source image, preset).
    Every operation holds one lock, so workers grading different images
    may share an instance.
    """

    def __init__(self, capacity: int = 15) -> None:
        if capacity < 1:
            raise ValueError(f"Cache capacity must be >= 1, got {capacity}")
        self.capacity = capacity
        self._entries: "OrderedDict[CacheKey, V]" = OrderedDict()
        self._lock = threading.Lock()

    def get(self, key: CacheKey) -> Optional[V]:
        """Returns the cached value and marks it most recently used, or None on a miss."""
        with self._lock:
            if key not in self._entries:
                return None
            self._entries.move_to_end(key)
            return self._entries[key]

    def put(self, key: CacheKey, value: V) -> None:
        """Inserts or overwrites, then evicts the least recently used entry if over capacity."""
        with self._lock:
            self._entries[key] = value
            self._entries.move_to_end(key)
            while len(self._entries) > self.capacity:
                evicted, _ = self._entries.popitem(last=False)
                logger.debug(f"Evicted cached result {evicted.preset_id[:8]} for {evicted.image_id[:8]}")

    def invalidate_all(self, image_id: str) -> int:
        """Drops every entry rendered from the given source image. Returns how many were removed."""
        with self._lock:
            stale = [k for k in self._entries if k.image_id == image_id]
            for key in stale:
                del self._entries[key]
            return len(stale)

    def clear(self) -> None:
        with self._lock:
            self._entries.clear()

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)

    def __contains__(self, key: object) -> bool:
        # Membership check does not touch recency
        with self._lock:
            return key in self._entries
