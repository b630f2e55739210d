"""
In-memory TTL cache for low-latency status and location reads.

Provides a time-aware key/value store of opaque bytes, enabling:
- Fast reads in front of the database and the aviation provider
- Per-entry expiration (flight status 5 min, user location 10 min)
- Thread-safe operations shared by API requests and both schedulers

Only single-key operations are offered (get, set-with-TTL, delete), each
atomic under the cache lock; callers never need their own locking.
"""

import json
import logging
import threading
import time
from dataclasses import dataclass
from typing import Any, Callable, Dict, Optional

from gatewatch.config import config

logger = logging.getLogger(__name__)


def status_cache_key(flight_key: str) -> str:
    return f'flight:{flight_key}'


def location_cache_key(user_id: Any) -> str:
    return f'user:location:{user_id}'


def security_wait_cache_key(airport_code: str) -> str:
    return f'airport:wait:{airport_code}'


@dataclass
class _Entry:
    value: bytes
    expires_at: float


class TTLCache:
    """
    Thread-safe in-memory cache with per-key expiry.

    Values are bytes so the cache stays a drop-in for an external
    key/value server; use ``get_json``/``set_json`` for structured data.
    """

    def __init__(
        self,
        max_entries: Optional[int] = None,
        timer: Callable[[], float] = time.monotonic,
    ):
        self.max_entries = max_entries or config.cache.max_entries
        self._timer = timer

        self._entries: Dict[str, _Entry] = {}
        self._lock = threading.RLock()

        # Statistics
        self._hits = 0
        self._misses = 0

    def get(self, key: str) -> Optional[bytes]:
        """
        Get cached value by key.

        Returns None if not cached or expired.
        """
        with self._lock:
            entry = self._entries.get(key)
            if entry is not None:
                if self._timer() < entry.expires_at:
                    self._hits += 1
                    return entry.value
                # Expired
                del self._entries[key]
            self._misses += 1
        return None

    def set(self, key: str, value: bytes, ttl_seconds: float) -> None:
        """Store ``value`` under ``key`` for ``ttl_seconds``."""
        if not isinstance(value, (bytes, bytearray)):
            raise TypeError(f'Cache values must be bytes, got {type(value).__name__}')

        with self._lock:
            self._entries[key] = _Entry(bytes(value), self._timer() + ttl_seconds)

            # Evict if over capacity
            if len(self._entries) > self.max_entries:
                self._evict()

    def delete(self, key: str) -> None:
        """Remove specific entry from cache."""
        with self._lock:
            self._entries.pop(key, None)

    def get_json(self, key: str) -> Optional[Any]:
        raw = self.get(key)
        if raw is None:
            return None
        return json.loads(raw.decode('utf-8'))

    def set_json(self, key: str, value: Any, ttl_seconds: float) -> None:
        self.set(key, json.dumps(value).encode('utf-8'), ttl_seconds)

    def _evict(self) -> None:
        """Drop expired entries, then the soonest-to-expire 10% if still full."""
        now = self._timer()
        for key in [k for k, e in self._entries.items() if e.expires_at <= now]:
            del self._entries[key]

        if len(self._entries) > self.max_entries:
            entries = sorted(self._entries.items(), key=lambda x: x[1].expires_at)
            to_remove = max(1, len(entries) // 10)
            for key, _ in entries[:to_remove]:
                del self._entries[key]

    @property
    def stats(self) -> dict:
        """Get cache statistics."""
        with self._lock:
            total = self._hits + self._misses
            return {
                'entries': len(self._entries),
                'hits': self._hits,
                'misses': self._misses,
                'hit_rate': self._hits / total if total > 0 else 0,
            }
