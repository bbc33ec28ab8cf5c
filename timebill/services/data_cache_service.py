"""
Short-TTL in-memory cache for workspace collections.

This module memoizes the collections fetched from the web API (projects,
clients, timesheets, invoices, workspace settings) keyed by resource and
workspace, so that repeated reads within a CLI invocation hit the network
once. Entries expire by TTL or by explicit invalidation; there is no other
eviction.
"""

import logging
import threading
import time
from concurrent.futures import Future, ThreadPoolExecutor
from typing import Any, Callable, Dict, Optional

logger = logging.getLogger(__name__)

DEFAULT_TTL = 300

RESOURCE_TTLS: Dict[str, int] = {
    "projects": 300,
    "clients": 300,
    "timesheets": 120,
    "invoices": 300,
    "workspaceSettings": 600,
}


def ttl_for(resource: str) -> int:
    """Return the TTL in seconds for a resource key."""
    return RESOURCE_TTLS.get(resource, DEFAULT_TTL)


def cache_key(resource: str, workspace_id: str) -> str:
    """Build the ``{resource}-{workspace_id}`` cache key."""
    return f"{resource}-{workspace_id}"


class DataCache:
    """
    TTL cache for fetched workspace collections.

    Features:
    - Per-resource TTLs with an override per call
    - Forced refresh that bypasses the lookup
    - Background preloading on a single worker thread
    - Workspace-scoped and global invalidation
    - Thread-safe operations with lock protection
    - Injected clock for deterministic tests

    Cache Structure:
        {"{resource}-{workspace_id}": {"data": ..., "workspace_id": str,
                                          "timestamp": float, "ttl": int}}

    Example:
        >>> with DataCache() as cache:
        ...     projects = cache.get_or_fetch(
        ...         "projects", "ws-1", lambda: api.list_projects("ws-1")
        ...     )
    """

    def __init__(self, clock: Callable[[], float] = time.monotonic):
        """
        Initialize the cache.

        Args:
            clock: Returns the current time in seconds
        """
        self._clock = clock
        self._entries: Dict[str, Dict[str, Any]] = {}
        self._lock = threading.Lock()
        self._executor: Optional[ThreadPoolExecutor] = None
        self._closed = False

        self._stats = {
            "hits": 0,
            "misses": 0,
            "fetches": 0,
            "invalidations": 0,
            "preloads": 0,
        }

    def get_or_fetch(
        self,
        resource: str,
        workspace_id: str,
        fetcher: Callable[[], Any],
        ttl: Optional[int] = None,
        force_refresh: bool = False,
    ) -> Any:
        """
        Return cached data for a resource or fetch and store it.

        Freshness is judged against the time of this call. The fetcher runs
        outside the lock; if it raises, the error propagates and nothing is
        cached.

        Args:
            resource: Resource key, e.g. "projects"
            workspace_id: Workspace the data belongs to
            fetcher: Zero-argument callable returning the data
            ttl: TTL override in seconds
            force_refresh: Skip the lookup and always fetch

        Returns:
            The cached or freshly fetched data
        """
        key = cache_key(resource, workspace_id)
        now = self._clock()

        if not force_refresh:
            with self._lock:
                entry = self._entries.get(key)
                if entry is not None and now - entry["timestamp"] < entry["ttl"]:
                    self._stats["hits"] += 1
                    logger.debug(f"Cache hit for {key}")
                    return entry["data"]
                self._stats["misses"] += 1

        logger.debug(f"Fetching {key} (force_refresh={force_refresh})")
        data = fetcher()

        with self._lock:
            self._stats["fetches"] += 1
            self._entries[key] = {
                "data": data,
                "workspace_id": workspace_id,
                "timestamp": self._clock(),
                "ttl": ttl if ttl is not None else ttl_for(resource),
            }

        return data

    def is_fresh(self, resource: str, workspace_id: str) -> bool:
        """True when a non-expired entry exists for the resource."""
        key = cache_key(resource, workspace_id)
        now = self._clock()
        with self._lock:
            entry = self._entries.get(key)
            return entry is not None and now - entry["timestamp"] < entry["ttl"]

    def preload(
        self, resource: str, workspace_id: str, fetcher: Callable[[], Any]
    ) -> Optional[Future]:
        """
        Warm the cache in the background.

        Does nothing when a fresh entry exists. Failures are logged as
        warnings and never raised.

        Returns:
            The Future of the background fetch, or None when nothing was
            scheduled
        """
        if self._closed:
            logger.debug(f"Cache closed, skipping preload of {resource}")
            return None
        if self.is_fresh(resource, workspace_id):
            return None

        with self._lock:
            if self._executor is None:
                self._executor = ThreadPoolExecutor(
                    max_workers=1, thread_name_prefix="timebill-preload"
                )
            self._stats["preloads"] += 1
            executor = self._executor

        return executor.submit(self._preload_task, resource, workspace_id, fetcher)

    def _preload_task(
        self, resource: str, workspace_id: str, fetcher: Callable[[], Any]
    ) -> None:
        try:
            self.get_or_fetch(resource, workspace_id, fetcher)
        except Exception as e:
            logger.warning(f"Failed to preload {resource} for workspace {workspace_id}: {e}")

    def invalidate(self, resource: str, workspace_id: str) -> bool:
        """Remove a single entry. Returns True if it existed."""
        key = cache_key(resource, workspace_id)
        with self._lock:
            if self._entries.pop(key, None) is None:
                return False
            self._stats["invalidations"] += 1
            logger.debug(f"Invalidated {key}")
            return True

    def invalidate_workspace(self, workspace_id: str) -> int:
        """
        Remove every entry belonging to a workspace.

        Args:
            workspace_id: Workspace whose entries are dropped

        Returns:
            Number of entries removed
        """
        with self._lock:
            keys_to_remove = [
                key
                for key, entry in self._entries.items()
                if entry["workspace_id"] == workspace_id
            ]
            for key in keys_to_remove:
                del self._entries[key]
            self._stats["invalidations"] += len(keys_to_remove)
        logger.info(
            f"Invalidated {len(keys_to_remove)} entries for workspace {workspace_id}"
        )
        return len(keys_to_remove)

    def clear(self) -> None:
        """Remove all entries."""
        with self._lock:
            count = len(self._entries)
            self._entries.clear()
            self._stats["invalidations"] += count
        logger.info(f"Cleared cache ({count} entries)")

    def get_statistics(self) -> Dict[str, Any]:
        """
        Get cache performance statistics.

        Returns:
            Dictionary with hit/miss counts, hit rate and current size
        """
        with self._lock:
            lookups = self._stats["hits"] + self._stats["misses"]
            hit_rate = (self._stats["hits"] / lookups * 100) if lookups > 0 else 0
            return {
                **self._stats,
                "hit_rate_pct": round(hit_rate, 2),
                "size": len(self._entries),
            }

    def close(self) -> None:
        """Shut down the preload executor and drop all entries."""
        with self._lock:
            executor = self._executor
            self._executor = None
            self._closed = True
        if executor is not None:
            executor.shutdown(wait=True)
        with self._lock:
            self._entries.clear()
        logger.debug("DataCache closed")

    def __enter__(self) -> "DataCache":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()
