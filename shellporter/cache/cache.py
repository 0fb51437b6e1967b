"""
LRU cache mapping (bundle identifier, window title) -> project path, persisted as JSON.

Live strategies fail transiently: AX attributes are empty while a window is opening,
titles lose the project name when the active tab changes, and recents files are only
flushed on project open/close. The cache turns an earlier successful resolution into a
fallback for those moments.

Every record writes two entries:

- exact key `<bundle>|title|<normalized title>` for the same window seen again
- last key `<bundle>|last` for when the title changed or is empty

Lookup tries the exact key first, then the last key. Hits are checked against the
filesystem; entries whose path vanished are pruned when the store is loaded.
"""

import json
import logging
import os
import tempfile
import threading
import time
from typing import Dict, Optional

from .models import CacheEntry

logger = logging.getLogger(__name__)

DEFAULT_MAX_ENTRIES = 200

# Module-level singleton instance
_instance: Optional['ResolutionCacheStore'] = None
_instance_lock = threading.Lock()


def default_cache_path() -> str:
    return os.path.expanduser("~/Library/Application Support/Shellporter/resolution-cache.json")


def get_cache_store() -> Optional['ResolutionCacheStore']:
    """
    Get the global cache store instance.

    Returns:
        ResolutionCacheStore if initialized, None otherwise
    """
    return _instance


def initialize_cache_store(
    cache_path: Optional[str] = None,
    max_entries: int = DEFAULT_MAX_ENTRIES
) -> 'ResolutionCacheStore':
    """
    Initialize the global cache store instance.

    Idempotent: later calls return the existing instance without reloading.

    Args:
        cache_path: Path to the cache JSON file (defaults to Application Support)
        max_entries: Maximum number of entries kept on disk

    Returns:
        ResolutionCacheStore instance
    """
    global _instance
    with _instance_lock:
        if _instance is None:
            _instance = ResolutionCacheStore(cache_path=cache_path, max_entries=max_entries)
        return _instance


def reset_cache_store() -> None:
    """Reset the global cache store instance (for testing)."""
    global _instance
    with _instance_lock:
        _instance = None


class ResolutionCacheStore:
    """Persistent, dual-keyed, capacity-bounded store of resolved project paths."""

    def __init__(self, cache_path: Optional[str] = None, max_entries: int = DEFAULT_MAX_ENTRIES):
        """
        Load the store from disk, migrating and pruning as needed.

        Args:
            cache_path: Path to the cache JSON file
            max_entries: Maximum number of entries; oldest are evicted past this
        """
        if max_entries < 1:
            raise ValueError(f"max_entries must be positive, got {max_entries}")
        self.cache_path = cache_path or default_cache_path()
        self.max_entries = max_entries
        # All reads and writes of _cache and the cache file go through this lock.
        self._lock = threading.RLock()
        self._cache: Dict[str, CacheEntry] = {}
        self._load()

    @property
    def entry_count(self) -> int:
        with self._lock:
            return len(self._cache)

    def record(self, bundle_identifier: str, window_title: Optional[str], path: str) -> None:
        """
        Remember a resolved path under the last key and, with a title, the exact key.

        Args:
            bundle_identifier: Application bundle identifier
            window_title: Window title at resolution time (optional)
            path: Resolved project directory
        """
        standardized = os.path.normpath(os.path.abspath(path))
        with self._lock:
            now = time.time()
            keys = [self._last_key(bundle_identifier)]
            normalized_title = self._normalize_title(window_title)
            if normalized_title:
                keys.append(self._exact_key(bundle_identifier, normalized_title))
            for key in keys:
                # Re-insert so dict order follows recency when timestamps tie.
                self._cache.pop(key, None)
                self._cache[key] = CacheEntry(path=standardized, last_used=now)
            self._evict_if_needed()
            self._save()

    def lookup(self, bundle_identifier: str, window_title: Optional[str]) -> Optional[str]:
        """
        Find a cached path for this app/window signature.

        Entries whose path no longer exists are treated as misses but left in place.

        Args:
            bundle_identifier: Application bundle identifier
            window_title: Current window title (optional)

        Returns:
            Cached project directory, or None
        """
        with self._lock:
            normalized_title = self._normalize_title(window_title)
            if normalized_title:
                entry = self._cache.get(self._exact_key(bundle_identifier, normalized_title))
                if entry is not None and os.path.exists(entry.path):
                    return entry.path

            entry = self._cache.get(self._last_key(bundle_identifier))
            if entry is not None and os.path.exists(entry.path):
                return entry.path
            return None

    def entries(self) -> Dict[str, CacheEntry]:
        """Snapshot copy of all entries."""
        with self._lock:
            return {key: CacheEntry(entry.path, entry.last_used) for key, entry in self._cache.items()}

    # Persistence

    def _load(self) -> None:
        with self._lock:
            self._cache = {}
            if not os.path.exists(self.cache_path):
                return

            try:
                with open(self.cache_path, 'r', encoding='utf-8') as f:
                    data = json.load(f)
            except (json.JSONDecodeError, OSError, UnicodeDecodeError) as e:
                logger.warning("Resolution cache load failed for %s: %s", self.cache_path, e)
                return

            if not isinstance(data, dict):
                logger.warning("Resolution cache at %s is not a JSON object; ignoring it.", self.cache_path)
                return

            loaded_at = time.time()
            migrated = 0
            for key, value in data.items():
                entry = CacheEntry.from_json(value, loaded_at)
                if entry is None:
                    continue
                if isinstance(value, str):
                    migrated += 1
                self._cache[str(key)] = entry

            if migrated:
                logger.info("Resolution cache: migrated %d entries from legacy format.", migrated)
                self._save()

            self._prune_stale_entries()

    def _prune_stale_entries(self) -> None:
        before = len(self._cache)
        self._cache = {key: entry for key, entry in self._cache.items() if os.path.exists(entry.path)}
        pruned = before - len(self._cache)
        if pruned > 0:
            logger.info("Resolution cache: pruned %d stale entries.", pruned)
            self._save()

    def _evict_if_needed(self) -> None:
        excess = len(self._cache) - self.max_entries
        if excess <= 0:
            return
        oldest = sorted(self._cache.items(), key=lambda item: item[1].last_used)[:excess]
        for key, _ in oldest:
            del self._cache[key]
        logger.info("Resolution cache: evicted %d oldest entries.", excess)

    def _save(self) -> None:
        payload = {key: entry.to_json() for key, entry in self._cache.items()}
        temp_path = None
        try:
            cache_dir = os.path.dirname(self.cache_path)
            if cache_dir:
                os.makedirs(cache_dir, exist_ok=True)
            fd, temp_path = tempfile.mkstemp(dir=cache_dir or None, prefix=".resolution-cache-", suffix=".json")
            with os.fdopen(fd, 'w', encoding='utf-8') as f:
                json.dump(payload, f, indent=2, sort_keys=True)
            os.replace(temp_path, self.cache_path)
            temp_path = None
        except OSError as e:
            logger.warning("Resolution cache save failed for %s: %s", self.cache_path, e)
        finally:
            if temp_path and os.path.exists(temp_path):
                os.remove(temp_path)

    # Keys

    @staticmethod
    def _normalize_title(title: Optional[str]) -> str:
        return (title or "").strip().lower()

    @staticmethod
    def _exact_key(bundle_identifier: str, normalized_title: str) -> str:
        return f"{bundle_identifier.lower()}|title|{normalized_title}"

    @staticmethod
    def _last_key(bundle_identifier: str) -> str:
        return f"{bundle_identifier.lower()}|last"


__all__ = [
    'DEFAULT_MAX_ENTRIES',
    'ResolutionCacheStore',
    'default_cache_path',
    'get_cache_store',
    'initialize_cache_store',
    'reset_cache_store',
]
