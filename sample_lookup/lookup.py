"""
Sample Lookup - Per-session query entry point

Holds the current instrument/technique selection and sample root, and
resolves notes to sample paths through the shared catalog cache.

Usage:
    from sample_lookup import SampleLookup

    lookup = SampleLookup("catalog.csv", root_path="/samples")
    lookup.select_instrument("Violin")
    lookup.select_technique("pizzicato")
    lookup.note("A4", "mf")   # ['/samples/Violin/pizz/A4_mf.wav']
    lookup.note("A4")         # every dynamic of A4
"""

from __future__ import annotations

import logging
import os
from typing import List, Optional, Union

from .catalog_loader import CatalogPayload
from .errors import IncompleteSelectionError, NoMatchError, UnknownInstrumentError
from .root_store import RootPathStore
from .sample_index import InstrumentDescription
from .source_cache import SourceCache, get_source_cache
from .utils import apply_root, clean_name

logger = logging.getLogger(__name__)


class SampleLookup:
    """
    Resolve (instrument, technique, pitch, dynamic) to sample file paths.

    Several instances may point at the same catalog; they share one parsed
    payload through the SourceCache. Selection and root path are per
    instance.

    Attributes:
        source_id: Catalog path used as the cache key
        selected_instrument: Current instrument, or None
        selected_technique: Current technique, or None
        root_path: Directory prefixed to every result, or None
    """

    def __init__(
        self,
        catalog_path: Union[str, "os.PathLike[str]"],
        cache: Optional[SourceCache] = None,
        root_store: Optional[RootPathStore] = None,
        root_path: Optional[str] = None,
    ):
        """
        Initialize a lookup session.

        The catalog is loaded lazily, on the first query or explicit load().

        Args:
            catalog_path: Catalog file path (the cache key)
            cache: Catalog cache; defaults to the process-wide cache
            root_store: Sidecar used to persist the root path
            root_path: Initial root; when None it is read from root_store
        """
        self.source_id = os.fspath(catalog_path)
        self.cache = cache if cache is not None else get_source_cache()
        self.root_store = root_store

        if root_path is None and root_store is not None:
            root_path = root_store.read()
        self.root_path: Optional[str] = clean_name(root_path)

        self.selected_instrument: Optional[str] = None
        self.selected_technique: Optional[str] = None
        self._payload: Optional[CatalogPayload] = None

    # =========================================================================
    # Catalog
    # =========================================================================

    def load(self) -> CatalogPayload:
        """
        Make sure the catalog is loaded and return its payload.

        The cache entry wins, so a reload through any instance sharing the
        cache is picked up here. The payload held by this instance is only
        used while the cache has no valid entry (after a failed reload).

        Raises:
            CatalogError: If the catalog cannot be loaded
        """
        cached = self.cache.peek(self.source_id)
        if cached is not None and not cached.is_empty:
            self._payload = cached
        elif self._payload is None or self._payload.is_empty:
            self._payload = self.cache.get_or_load(self.source_id)
        return self._payload

    def reload(self) -> CatalogPayload:
        """
        Force a fresh parse of the catalog.

        On failure the previously loaded payload stays in use.

        Raises:
            CatalogError: If the catalog cannot be loaded
        """
        self.cache.invalidate(self.source_id)
        payload = self.cache.get_or_load(self.source_id)
        self._payload = payload
        logger.info(f"Reloaded {self.source_id}: {len(payload.records)} samples")
        return payload

    @property
    def is_loaded(self) -> bool:
        return self._payload is not None

    @property
    def record_count(self) -> int:
        return len(self._payload.records) if self._payload is not None else 0

    def instruments(self) -> List[str]:
        """Sorted instrument names of the loaded catalog."""
        return self.load().index.instruments()

    # =========================================================================
    # Configuration & selection
    # =========================================================================

    def set_root(self, path: Optional[str]) -> None:
        """
        Set the sample root directory and persist it.

        The in-memory root is updated even when saving fails.

        Raises:
            PersistError: If the root store cannot be written
        """
        self.root_path = clean_name(path)
        logger.debug(f"Root path set to {self.root_path!r}")

        if self.root_store is not None:
            self.root_store.write(self.root_path or "")

    def select_instrument(self, name: Optional[str]) -> None:
        self.selected_instrument = clean_name(name)

    def select_technique(self, name: Optional[str]) -> None:
        self.selected_technique = clean_name(name)

    # =========================================================================
    # Queries
    # =========================================================================

    def note(self, pitch: str, dynamic: Optional[str] = None) -> List[str]:
        """
        Resolve a pitch (and optionally a dynamic) for the current selection.

        Args:
            pitch: Pitch name, e.g. 'A4'
            dynamic: Dynamic name; None or blank matches every dynamic

        Returns:
            Sample paths, prefixed with the root path when one is set

        Raises:
            IncompleteSelectionError: If instrument or technique is not selected
            NoMatchError: If no sample matches
            CatalogError: If the catalog cannot be loaded
        """
        missing = []
        if self.selected_instrument is None:
            missing.append("instrument")
        if self.selected_technique is None:
            missing.append("technique")
        if missing:
            raise IncompleteSelectionError(missing)

        pitch = str(pitch).strip()
        dynamic = clean_name(dynamic)

        payload = self.load()
        paths = payload.index.query(
            self.selected_instrument,
            self.selected_technique,
            pitch,
            dynamic,
        )
        if not paths:
            raise NoMatchError(self.selected_instrument, self.selected_technique, pitch, dynamic)

        return apply_root(self.root_path, paths)

    def list_tech_dyn(self, instrument: Optional[str] = None) -> InstrumentDescription:
        """
        Describe the techniques, dynamics and pitches of an instrument.

        Args:
            instrument: Instrument name; defaults to the selected instrument

        Raises:
            IncompleteSelectionError: If no instrument is given or selected
            UnknownInstrumentError: If the instrument is not in the catalog
        """
        name = clean_name(instrument) or self.selected_instrument
        if name is None:
            raise IncompleteSelectionError(["instrument"])

        description = self.load().index.describe(name)
        if description is None:
            raise UnknownInstrumentError(name)
        return description

    def __repr__(self) -> str:
        return (
            f"SampleLookup(source={self.source_id!r}, "
            f"instrument={self.selected_instrument!r}, "
            f"technique={self.selected_technique!r}, "
            f"root={self.root_path!r})"
        )
