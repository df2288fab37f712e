import time
from dataclasses import dataclass
from typing import Any, Callable, Dict, Optional

DEFAULT_TTL_SECONDS = 60.0


@dataclass
class CacheEntry:
    key: str
    value: Any
    stored_at: float


class ResponseCache:
    """In-memory TTL cache for upstream responses.

    Entries older than the TTL read as misses but stay in the map until the
    next ``set`` for the same key overwrites them. There is no size bound.
    """

    def __init__(self, ttl_seconds: float = DEFAULT_TTL_SECONDS, clock: Callable[[], float] = time.time):
        self.ttl_seconds = ttl_seconds
        self._clock = clock
        self._entries: Dict[str, CacheEntry] = {}

    def get(self, key: str) -> Optional[Any]:
        entry = self._entries.get(key)
        if entry is None:
            return None
        if self._clock() - entry.stored_at < self.ttl_seconds:
            return entry.value
        return None

    def set(self, key: str, value: Any) -> None:
        self._entries[key] = CacheEntry(key=key, value=value, stored_at=self._clock())

    def __contains__(self, key: str) -> bool:
        # Raw membership, stale entries included
        return key in self._entries

    def __len__(self) -> int:
        return len(self._entries)
