"""
In-memory cache for SPARQL responses, backed by ``cachetools.TTLCache``.

Entries are bounded in number and expire after a fixed time-to-live; the
least recently used entry is evicted when the cache is full.
"""

import hashlib
from typing import Any, Dict, Optional

from cachetools import TTLCache

from musigraph.settings import (
    QUERY_CACHE_KEY_LENGTH,
    QUERY_CACHE_MAX_SIZE,
    QUERY_CACHE_TTL_SECONDS,
)


def normalize_query(query: str) -> str:
    """
    Strip surrounding whitespace only. Inner whitespace may sit inside a
    string literal, where it changes what the query matches.
    """
    return query.strip()


def get_cache_key(query: str, length: int = QUERY_CACHE_KEY_LENGTH) -> str:
    """Creates a short SHA256-based key for a query string."""
    digest = hashlib.sha256(normalize_query(query).encode("utf-8")).hexdigest()
    return digest[:length]


class QueryCache:
    """
    Bounded, expiring mapping from query fingerprint to raw SPARQL response.

    Args:
        max_size: Maximum number of cached responses.
        ttl: Seconds after which an entry expires.
        timer: Clock used for expiry; injectable for tests.
    """

    def __init__(
        self,
        max_size: int = QUERY_CACHE_MAX_SIZE,
        ttl: float = QUERY_CACHE_TTL_SECONDS,
        timer: Optional[Any] = None,
    ):
        if timer is None:
            self._cache: TTLCache = TTLCache(maxsize=max_size, ttl=ttl)
        else:
            self._cache = TTLCache(maxsize=max_size, ttl=ttl, timer=timer)

    def get(self, query: str) -> Optional[Dict[str, Any]]:
        return self._cache.get(get_cache_key(query))

    def set(self, query: str, response: Dict[str, Any]) -> None:
        self._cache[get_cache_key(query)] = response

    def __contains__(self, query: str) -> bool:
        return get_cache_key(query) in self._cache

    def clear(self) -> None:
        self._cache.clear()

    def __len__(self) -> int:
        return len(self._cache)
