"""TTL cache for resolved board and list ids.

Board and list ids rarely change, so a resolved name is kept for a few
minutes to save a listing call on the next tool invocation. Expiry is lazy:
an expired entry is purged when it is read, there is no background sweep.

Two key spaces are kept apart:

- top-level names (boards), ``name -> id``
- scoped names (lists), ``scope -> name -> id`` where the scope is the
  owning board id, so "To Do" on one board never shadows "To Do" on another.
"""

from __future__ import annotations

import time
from typing import Any, Callable, Dict, Optional, Tuple

from trello_semantic.config.resolution_limits import DEFAULT_CACHE_TTL_MINUTES
from trello_semantic.core.similarity import normalize_name


# (stored_at, value, canonical name)
_Entry = Tuple[float, str, str]


class ResolutionCache:
    """Expiring name -> id store, optionally scoped by a parent id.

    Not thread-safe. Callers run on a single asyncio loop, which never
    switches tasks between a read and the write that follows it.
    """

    def __init__(
        self,
        ttl_minutes: float = DEFAULT_CACHE_TTL_MINUTES,
        clock: Callable[[], float] = time.time,
    ) -> None:
        self._ttl_seconds = ttl_minutes * 60.0
        self._clock = clock
        self._top_level: Dict[str, _Entry] = {}
        self._scoped: Dict[str, Dict[str, _Entry]] = {}

    @property
    def ttl_seconds(self) -> float:
        return self._ttl_seconds

    def _is_valid(self, entry: _Entry) -> bool:
        stored_at = entry[0]
        return self._clock() - stored_at < self._ttl_seconds

    def get(self, key: str, scope: Optional[str] = None) -> Optional[str]:
        """Return the cached id for ``key``, or None if absent or expired."""

        entry = self._lookup(key, scope)
        return entry[1] if entry else None

    def get_named(self, key: str, scope: Optional[str] = None) -> Optional[Tuple[str, str]]:
        """Return ``(id, canonical name)`` for ``key``, or None.

        The canonical name is the one stored with the id; it falls back to
        the key as written when none was given.
        """

        entry = self._lookup(key, scope)
        return (entry[1], entry[2]) if entry else None

    def _lookup(self, key: str, scope: Optional[str]) -> Optional[_Entry]:
        normalized = normalize_name(key)
        if scope is None:
            bucket: Optional[Dict[str, _Entry]] = self._top_level
        else:
            bucket = self._scoped.get(scope)
        if not bucket:
            return None

        entry = bucket.get(normalized)
        if entry is None:
            return None
        if self._is_valid(entry):
            return entry

        # Expired, remove it
        del bucket[normalized]
        if scope is not None and not bucket:
            self._scoped.pop(scope, None)
        return None

    def set(
        self,
        key: str,
        value: str,
        scope: Optional[str] = None,
        canonical: Optional[str] = None,
    ) -> None:
        normalized = normalize_name(key)
        if scope is None:
            bucket = self._top_level
        else:
            bucket = self._scoped.setdefault(scope, {})
        bucket[normalized] = (self._clock(), value, canonical or key.strip())

    def invalidate_scope(self, scope: str) -> None:
        """Forget everything cached under ``scope`` and any name pointing at it."""

        self._scoped.pop(scope, None)
        stale = [name for name, entry in self._top_level.items() if entry[1] == scope]
        for name in stale:
            del self._top_level[name]

    def clear(self) -> None:
        self._top_level.clear()
        self._scoped.clear()

    def stats(self) -> Dict[str, Any]:
        return {
            "top_level_entries": len(self._top_level),
            "scoped_entries": sum(len(bucket) for bucket in self._scoped.values()),
            "scopes": len(self._scoped),
            "ttl_seconds": self._ttl_seconds,
        }
