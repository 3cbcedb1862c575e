# shortcut_dock/core/icon_cache.py

import logging
import os
import threading
import time
from dataclasses import dataclass
from typing import Dict, Optional, Tuple

from .models import IconPayload

logger = logging.getLogger(__name__)

DEFAULT_MAX_ENTRIES = 500
DEFAULT_MAX_AGE_SECONDS = 3600


@dataclass
class CachedIcon:
    payload: IconPayload
    file_size: int
    modified_ns: int
    cached_at: float


def _file_signature(path: str) -> Optional[Tuple[int, int]]:
    try:
        stat = os.stat(path)
    except OSError:
        return None
    return stat.st_size, stat.st_mtime_ns


class IconCache:
    """
    An in-memory icon cache for the local icon collaborator.

    An entry is only served while it is younger than `max_age_seconds` and the
    file's size and modification time still match what they were when the icon
    was stored. When full, the oldest entry is evicted.
    """

    def __init__(self, max_entries: int = DEFAULT_MAX_ENTRIES, max_age_seconds: float = DEFAULT_MAX_AGE_SECONDS):
        self.max_entries = max(1, max_entries)
        self.max_age_seconds = max_age_seconds
        self._entries: Dict[Tuple[str, bool], CachedIcon] = {}
        # Lookups run inside worker threads (asyncio.to_thread).
        self._lock = threading.Lock()

    def __len__(self) -> int:
        return len(self._entries)

    def get(self, path: str, high_res: bool) -> Optional[IconPayload]:
        key = (path, high_res)
        with self._lock:
            cached = self._entries.get(key)
            if cached is None:
                return None
            if not self._is_valid(path, cached):
                logger.debug(f"Icon cache entry for '{path}' is stale; dropping it.")
                del self._entries[key]
                return None
            return IconPayload(data=cached.payload.data, format=cached.payload.format, from_cache=True)

    def put(self, path: str, high_res: bool, payload: IconPayload):
        signature = _file_signature(path)
        if signature is None:
            return

        with self._lock:
            if (path, high_res) not in self._entries and len(self._entries) >= self.max_entries:
                self._evict_oldest()
            self._entries[(path, high_res)] = CachedIcon(
                payload=payload,
                file_size=signature[0],
                modified_ns=signature[1],
                cached_at=time.monotonic(),
            )

    def clear(self):
        with self._lock:
            self._entries.clear()

    def _is_valid(self, path: str, cached: CachedIcon) -> bool:
        if time.monotonic() - cached.cached_at > self.max_age_seconds:
            return False
        return _file_signature(path) == (cached.file_size, cached.modified_ns)

    def _evict_oldest(self):
        oldest_key = min(self._entries, key=lambda k: self._entries[k].cached_at)
        del self._entries[oldest_key]
