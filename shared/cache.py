"""
Caching utilities for the application.
"""

from collections import OrderedDict
from datetime import datetime, timedelta
from typing import Any


class Cache:
    """In-memory cache with TTL and a bound on the number of entries.

    Oldest entries are evicted first once ``max_entries`` is reached.
    """

    def __init__(self, default_ttl: int = 3600, max_entries: int = 512) -> None:
        self.default_ttl = default_ttl
        self.max_entries = max_entries
        self._cache: "OrderedDict[str, dict[str, Any]]" = OrderedDict()

    def get(self, key: str) -> Any | None:
        """
        Get value from cache by key.

        Returns:
            Cached value if exists and not expired, None otherwise
        """
        item = self._cache.get(key)
        if item is None:
            return None
        if datetime.now() >= item["expires"]:
            del self._cache[key]
            return None
        return item["value"]

    def set(self, key: str, value: Any, ttl: int | None = None) -> None:
        """Store ``value`` for ``ttl`` seconds (defaults to ``default_ttl``)."""
        effective_ttl = self.default_ttl if ttl is None else ttl
        self._cache.pop(key, None)
        self._cache[key] = {
            "value": value,
            "expires": datetime.now() + timedelta(seconds=effective_ttl),
        }
        while len(self._cache) > self.max_entries:
            self._cache.popitem(last=False)

    def delete(self, key: str) -> None:
        self._cache.pop(key, None)

    def clear(self) -> None:
        self._cache.clear()

    def size(self) -> int:
        return len(self._cache)
