"""
In-memory cache for chain lookups keyed by (address, chain_id[, extra])
"""

import itertools
import logging
from typing import Any, Dict, Hashable, Optional, Tuple

CacheKey = Tuple[Hashable, ...]


class LookupCache:
    """
    Shared between workflow sessions. Any session may read; only the request
    holding the latest ticket for a key may write it.
    """

    def __init__(self):
        self._entries: Dict[CacheKey, Any] = {}
        self._tickets: Dict[CacheKey, int] = {}
        self._counter = itertools.count(1)
        self.logger = logging.getLogger('ima_bridge')

    @staticmethod
    def key(address: str, chain_id: int, *extra: Hashable) -> CacheKey:
        return (address.lower(), chain_id) + tuple(extra)

    def issue(self, key: CacheKey) -> int:
        """Hand out a write ticket; older tickets for the key become stale"""
        ticket = next(self._counter)
        self._tickets[key] = ticket
        return ticket

    def is_latest(self, key: CacheKey, ticket: int) -> bool:
        return self._tickets.get(key) == ticket

    def store(self, key: CacheKey, ticket: int, value: Any) -> bool:
        if not self.is_latest(key, ticket):
            self.logger.debug(f"Dropping stale cache write for {key}")
            return False
        self._entries[key] = value
        return True

    def get(self, key: CacheKey) -> Optional[Any]:
        return self._entries.get(key)

    def invalidate(self, key: Optional[CacheKey] = None) -> int:
        """Drop one key or everything; returns the number of entries removed"""
        if key is None:
            count = len(self._entries)
            self._entries.clear()
            return count
        return 1 if self._entries.pop(key, None) is not None else 0

    def __len__(self) -> int:
        return len(self._entries)
