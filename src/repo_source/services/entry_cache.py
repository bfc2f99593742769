"""Short-lived read-through cache of decoded entries, keyed by resolved path."""

from __future__ import annotations

import logging
import threading
import time
from collections import OrderedDict
from typing import Callable

from repo_source.domain.entities import Entry

logger = logging.getLogger(__name__)


class EntryCache:
    """Bounded LRU of ``path → Entry`` with a time-to-live.

    Only successfully decoded entries are stored, so a miss always means the
    caller must fetch.  Owned by a single adapter instance and discarded with it.
    """

    def __init__(
        self,
        max_entries: int = 512,
        ttl_seconds: float = 60.0,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        if max_entries < 1:
            raise ValueError("max_entries must be at least 1")
        if ttl_seconds <= 0:
            raise ValueError("ttl_seconds must be positive")
        self._max_entries = max_entries
        self._ttl = ttl_seconds
        self._clock = clock
        self._entries: OrderedDict[str, tuple[float, Entry]] = OrderedDict()
        self._lock = threading.Lock()

    def get(self, path: str) -> Entry | None:
        """Return the cached entry for *path*, or ``None`` on a miss or expiry."""
        now = self._clock()
        with self._lock:
            cached = self._entries.get(path)
            if cached is None:
                return None
            expires_at, entry = cached
            if expires_at <= now:
                del self._entries[path]
                return None
            self._entries.move_to_end(path)
        logger.debug("Entry cache hit for '%s'", path)
        return entry

    def put(self, path: str, entry: Entry) -> None:
        expires_at = self._clock() + self._ttl
        with self._lock:
            self._entries[path] = (expires_at, entry)
            self._entries.move_to_end(path)
            while len(self._entries) > self._max_entries:
                self._entries.popitem(last=False)

    def clear(self) -> None:
        with self._lock:
            self._entries.clear()

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)
