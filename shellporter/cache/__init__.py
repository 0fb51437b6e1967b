"""Persistent cache of resolved project paths."""

from .cache import (
    DEFAULT_MAX_ENTRIES,
    ResolutionCacheStore,
    default_cache_path,
    get_cache_store,
    initialize_cache_store,
    reset_cache_store,
)
from .models import CacheEntry

__all__ = [
    'CacheEntry',
    'DEFAULT_MAX_ENTRIES',
    'ResolutionCacheStore',
    'default_cache_path',
    'get_cache_store',
    'initialize_cache_store',
    'reset_cache_store',
]
