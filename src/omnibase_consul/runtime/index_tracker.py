# SPDX-License-Identifier: MIT
# Copyright (c) 2025 OmniNode Team
"""Per-key store index bookkeeping.

IndexTracker remembers, for every key the client has observed, the store
index (``X-Consul-Index``) of the most recent response for that key. The
change watcher seeds its long-poll wait-index from it and plain lookups
refresh it.

Thread Safety:
    Watch loops run on the event loop while lookups may be issued from any
    task or thread, so every read and write goes through a per-instance
    ``threading.Lock``. The lock is held only for the dictionary access.
"""

from __future__ import annotations

import threading


class IndexTracker:
    """Thread-safe mapping of key to last observed store index.

    Example:
        >>> tracker = IndexTracker()
        >>> tracker.get("service/port") is None
        True
        >>> tracker.set("service/port", 42)
        >>> tracker.get("service/port")
        42
    """

    def __init__(self) -> None:
        self._lock: threading.Lock = threading.Lock()
        self._indices: dict[str, int] = {}

    def get(self, key: str) -> int | None:
        """Return the last observed index for ``key``, or None if never seen."""
        with self._lock:
            return self._indices.get(key)

    def set(self, key: str, index: int) -> None:
        """Record ``index`` as the last observed index for ``key``."""
        with self._lock:
            self._indices[key] = index

    def forget(self, key: str) -> None:
        """Drop any recorded index for ``key``."""
        with self._lock:
            self._indices.pop(key, None)

    def snapshot(self) -> dict[str, int]:
        """Return a copy of all recorded indices."""
        with self._lock:
            return dict(self._indices)

    def __contains__(self, key: object) -> bool:
        with self._lock:
            return key in self._indices

    def __len__(self) -> int:
        with self._lock:
            return len(self._indices)


__all__: list[str] = ["IndexTracker"]
