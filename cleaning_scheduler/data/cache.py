"""
Cleaning Scheduler - Time-boxed cache.

Sits in front of the schedule store. Keys are namespaced with a "<ns>:"
prefix ("schedule:...", "stats:...") so writes can drop whole namespaces.
Entries older than the TTL are treated as absent.
"""

from __future__ import annotations

import copy
import logging
import threading
import time
from dataclasses import dataclass
from typing import Any, Callable

logger = logging.getLogger(__name__)

DEFAULT_TTL_SECONDS = 300


@dataclass
class CacheEntry:
    value: Any
    written_at: float
    ttl: float

    def is_expired(self, now: float) -> bool:
        return now - self.written_at >= self.ttl


class TTLCache:
    """In-process key/value cache with per-entry TTL and namespace invalidation."""

    def __init__(
        self,
        ttl_seconds: float = DEFAULT_TTL_SECONDS,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self._ttl = ttl_seconds
        self._clock = clock
        self._entries: dict[str, CacheEntry] = {}
        self._lock = threading.Lock()

    @property
    def ttl(self) -> float:
        return self._ttl

    def get(self, key: str) -> Any | None:
        """Return a copy of the cached value, or None on miss/expiry.

        Any failure while reading is reported as a miss.
        """
        try:
            with self._lock:
                entry = self._entries.get(key)
                if entry is None:
                    logger.debug("Cache miss: %s", key)
                    return None
                if entry.is_expired(self._clock()):
                    del self._entries[key]
                    logger.debug("Cache expired: %s", key)
                    return None
                value = entry.value
            return copy.deepcopy(value)
        except Exception as exc:
            logger.warning("Cache read failed for %s, treating as miss: %s", key, exc)
            self.invalidate(key)
            return None

    def set(self, key: str, value: Any, ttl: float | None = None) -> None:
        snapshot = copy.deepcopy(value)
        with self._lock:
            self._entries[key] = CacheEntry(
                value=snapshot,
                written_at=self._clock(),
                ttl=self._ttl if ttl is None else ttl,
            )
        logger.debug("Cache set: %s", key)

    def invalidate(self, key: str) -> None:
        with self._lock:
            self._entries.pop(key, None)

    def invalidate_namespace(self, *namespaces: str) -> int:
        """Drop every key whose namespace is one of `namespaces`.

        Returns the number of entries removed.
        """
        prefixes = tuple(f"{ns}:" for ns in namespaces)
        with self._lock:
            doomed = [k for k in self._entries if k.startswith(prefixes)]
            for k in doomed:
                del self._entries[k]
        if doomed:
            logger.debug("Cache invalidated %d key(s) in %s", len(doomed), namespaces)
        return len(doomed)

    def clear(self) -> None:
        with self._lock:
            self._entries.clear()

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)
