"""In-memory record of notifications already delivered in this process."""

from collections.abc import Callable
from datetime import datetime, timezone

from cachetools import TLRUCache

Clock = Callable[[], datetime]

# Plenty for one user's schedules; least recently used keys go first
REGISTRY_MAXSIZE = 4096


def _utc_now() -> datetime:
    return datetime.now(timezone.utc)


def _expires_at(key: str, value: tuple[str, float], now: float) -> float:
    return value[1]


class NotifiedRegistry:
    """Notification keys mapped to the schedule they belong to and an expiry.

    An entry disappears on its own once its expiry passes, so the registry
    does not grow with every schedule ever notified.
    """

    def __init__(self, clock: Clock | None = None, maxsize: int = REGISTRY_MAXSIZE):
        self._clock = clock or _utc_now
        self._cache: TLRUCache = TLRUCache(
            maxsize=maxsize,
            ttu=_expires_at,
            timer=lambda: self._clock().timestamp(),
        )

    def add(self, key: str, schedule_id: str, expires_at: datetime) -> None:
        self._cache[key] = (schedule_id, expires_at.timestamp())

    def __contains__(self, key: str) -> bool:
        return key in self._cache

    def __len__(self) -> int:
        self._cache.expire()
        return len(self._cache)

    def discard_for(self, schedule_id: str) -> int:
        """Remove every key recorded for ``schedule_id``. Returns how many were removed."""
        keys = [key for key, value in list(self._cache.items()) if value[0] == schedule_id]
        for key in keys:
            self._cache.pop(key, None)
        return len(keys)

    def clear(self) -> None:
        self._cache.clear()
