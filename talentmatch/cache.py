"""In-memory key/value store with a fixed time-to-live per entry."""

import time
from dataclasses import dataclass
from typing import Any, Callable, Dict, Hashable, Optional

DEFAULT_TTL_SECONDS = 5 * 60


@dataclass
class CacheEntry:
    key: Hashable
    value: Any
    expires_at: float

    def is_expired(self, now: float) -> bool:
        return now > self.expires_at


class AgentCache:
    """
    Expiring cache for AI replies.

    There is no background timer: an entry goes stale once its TTL has
    passed and is dropped the next time it is looked up.
    """

    def __init__(self, ttl_seconds: float = DEFAULT_TTL_SECONDS, clock: Callable[[], float] = time.monotonic):
        if ttl_seconds <= 0:
            raise ValueError("ttl_seconds must be > 0")
        self.ttl_seconds = ttl_seconds
        self._clock = clock
        self._entries: Dict[Hashable, CacheEntry] = {}

    def get(self, key: Hashable) -> Optional[Any]:
        """Return the cached value, or None when missing or stale."""
        entry = self._entries.get(key)
        if entry is None:
            return None
        if entry.is_expired(self._clock()):
            del self._entries[key]
            return None
        return entry.value

    def set(self, key: Hashable, value: Any) -> CacheEntry:
        entry = CacheEntry(key=key, value=value, expires_at=self._clock() + self.ttl_seconds)
        self._entries[key] = entry
        return entry

    def clear(self) -> None:
        self._entries.clear()

    def stats(self) -> Dict[str, int]:
        return {
            "size": len(self._entries),
            "timeout_ms": int(self.ttl_seconds * 1000),
        }

    def __len__(self) -> int:
        return len(self._entries)
