"""Caching utilities for the snow forecast API."""

import hashlib
import json
from functools import wraps
from typing import Callable

from cachetools import TTLCache

# The location hierarchy only changes on deploy
CACHE_TTL_VERY_LONG_SECONDS = 86400  # 24 hours
_hierarchy_cache: TTLCache = TTLCache(maxsize=16, ttl=CACHE_TTL_VERY_LONG_SECONDS)


def get_cache_key(*args, **kwargs) -> str:
    """Generate a cache key from function arguments."""
    key_data = json.dumps({"args": args, "kwargs": kwargs}, sort_keys=True, default=str)
    # MD5 is used here only for cache key generation, not for security purposes
    return hashlib.md5(key_data.encode(), usedforsecurity=False).hexdigest()


def cached_hierarchy(func: Callable) -> Callable:
    """Cache decorator for the location hierarchy (24-hour TTL)."""

    @wraps(func)
    def wrapper(*args, **kwargs):
        cache_key = get_cache_key(func.__qualname__, *args, **kwargs)
        if cache_key in _hierarchy_cache:
            return _hierarchy_cache[cache_key]
        result = func(*args, **kwargs)
        _hierarchy_cache[cache_key] = result
        return result

    return wrapper


def clear_all_caches() -> None:
    """Clear all caches. Useful for testing."""
    _hierarchy_cache.clear()


# Cache-Control header values; forecasts refresh every few hours
CACHE_CONTROL_PUBLIC = "public, max-age=300"  # 5 minutes
CACHE_CONTROL_PUBLIC_LONG = "public, max-age=3600"  # 1 hour, for the hierarchy
CACHE_CONTROL_NO_STORE = "no-store"  # Not-ready responses must not be cached
