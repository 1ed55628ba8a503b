"""Time-bounded in-memory cache of mapped feeds.

Entries are keyed by feed URL and expire after a fixed TTL measured on the
monotonic clock. Loads run outside the lock, so two concurrent misses may
both fetch; the later result wins. Failed loads are never stored.
"""

import logging
import threading
import time
from dataclasses import dataclass
from typing import Callable

from podfeed.models.schemas import FeedResult

logger = logging.getLogger(__name__)


@dataclass
class _Entry:
    result: FeedResult
    expires_at: float


class FeedCache:

    def __init__(self, ttl_seconds: float, clock: Callable[[], float] = time.monotonic):
        self._ttl = ttl_seconds
        self._clock = clock
        self._entries: dict[str, _Entry] = {}
        self._lock = threading.Lock()

    @property
    def enabled(self) -> bool:
        return self._ttl > 0

    def get(self, url: str) -> FeedResult | None:
        with self._lock:
            entry = self._entries.get(url)
            if entry is None:
                return None
            if entry.expires_at <= self._clock():
                del self._entries[url]
                return None
            return entry.result

    def put(self, url: str, result: FeedResult) -> None:
        if not self.enabled:
            return
        with self._lock:
            self._entries[url] = _Entry(result, self._clock() + self._ttl)

    def get_or_load(self, url: str, loader: Callable[[], FeedResult]) -> FeedResult:
        cached = self.get(url)
        if cached is not None:
            logger.debug("Feed cache hit: %s", url)
            return cached
        logger.debug("Feed cache miss: %s", url)
        result = loader()
        self.put(url, result)
        return result

    def clear(self) -> None:
        with self._lock:
            self._entries.clear()
