"""
Source Cache - Process-wide memo of loaded catalogs

Loading a catalog parses the whole file and builds its index. The cache
keeps the result per source identifier (the catalog path string) so that
every SampleLookup pointing at the same catalog shares one payload and the
file is parsed once per process.

An entry is reused only when its payload holds at least one record. A
failed load never touches the cache, so a later retry after the file has
been fixed can succeed.
"""

import logging
import os
import threading
from typing import Callable, Dict, Optional, Union

from .catalog_loader import CatalogPayload, load_catalog

logger = logging.getLogger(__name__)

CatalogLoaderFn = Callable[[str], CatalogPayload]


class SourceCache:
    """
    Table of loaded catalogs keyed by source identifier.

    Example:
        ```python
        cache = SourceCache()
        payload = cache.get_or_load("catalog.csv")   # parses the file
        payload = cache.get_or_load("catalog.csv")   # same object, no I/O
        cache.invalidate("catalog.csv")               # next call re-parses
        ```

    Attributes:
        loads: Number of times the loader has been invoked
    """

    def __init__(self, loader: Optional[CatalogLoaderFn] = None):
        """
        Initialize an empty cache.

        Args:
            loader: Callable turning a source identifier into a payload.
                    Defaults to load_catalog.
        """
        self._loader = loader or load_catalog
        self._entries: Dict[str, CatalogPayload] = {}
        self._lock = threading.RLock()
        self.loads = 0

    @staticmethod
    def _key(source_id: Union[str, "os.PathLike[str]"]) -> str:
        return os.fspath(source_id)

    def get_or_load(self, source_id: Union[str, "os.PathLike[str]"]) -> CatalogPayload:
        """
        Return the cached payload for ``source_id``, loading it if needed.

        Raises:
            CatalogError: Propagated from the loader; the cache is unchanged
        """
        key = self._key(source_id)

        with self._lock:
            entry = self._entries.get(key)
            if entry is not None and not entry.is_empty:
                logger.debug(f"Cache hit for {key}")
                return entry

            self.loads += 1
            payload = self._loader(key)
            self._entries[key] = payload

        logger.info(f"Loaded catalog {key}: {len(payload.records)} samples")
        return payload

    def invalidate(self, source_id: Union[str, "os.PathLike[str]"]) -> None:
        """Drop any entry for ``source_id`` so the next lookup re-parses."""
        key = self._key(source_id)
        with self._lock:
            if self._entries.pop(key, None) is not None:
                logger.debug(f"Invalidated cache entry for {key}")

    def peek(self, source_id: Union[str, "os.PathLike[str]"]) -> Optional[CatalogPayload]:
        """Return the stored payload without loading, or None."""
        with self._lock:
            return self._entries.get(self._key(source_id))

    def clear(self) -> None:
        """Drop every entry."""
        with self._lock:
            self._entries.clear()
        logger.info("Catalog cache cleared")

    def __contains__(self, source_id: object) -> bool:
        if not isinstance(source_id, (str, os.PathLike)):
            return False
        with self._lock:
            return self._key(source_id) in self._entries

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)


# Module-level singleton for convenience
_default_cache: Optional[SourceCache] = None


def get_source_cache() -> SourceCache:
    """
    Get the process-wide SourceCache instance.

    Creates the instance on first call; later calls return the same one.
    """
    global _default_cache

    if _default_cache is None:
        _default_cache = SourceCache()

    return _default_cache
