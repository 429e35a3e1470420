"""
Sample Lookup

Resolves instrument / technique / pitch / dynamic to recorded-sample file
paths from a CSV catalog, loaded once per process and cached for
low-latency lookups inside a performance host.
"""

__version__ = "0.1.0"
__author__ = "Sample Lookup Team"

from .errors import (
    ErrorCode,
    SampleLookupError,
    ConfigLoadError,
    CatalogError,
    SourceNotFoundError,
    MissingColumnError,
    CatalogEncodingError,
    QueryError,
    IncompleteSelectionError,
    NoMatchError,
    UnknownInstrumentError,
    PersistError,
)
from .tokenizer import split_line, iter_rows
from .sample_index import (
    SampleIndex,
    InstrumentDescription,
    TechniqueSummary,
)
from .catalog_loader import (
    CatalogColumns,
    CatalogPayload,
    SampleRecord,
    DEFAULT_COLUMNS,
    load_catalog,
)
from .source_cache import SourceCache, get_source_cache
from .root_store import RootPathStore, ROOT_CONFIG_FILENAME
from .utils import join_root_path
from .lookup import SampleLookup

__all__ = [
    # Errors
    "ErrorCode",
    "SampleLookupError",
    "ConfigLoadError",
    "CatalogError",
    "SourceNotFoundError",
    "MissingColumnError",
    "CatalogEncodingError",
    "QueryError",
    "IncompleteSelectionError",
    "NoMatchError",
    "UnknownInstrumentError",
    "PersistError",

    # Parsing & loading
    "split_line",
    "iter_rows",
    "CatalogColumns",
    "CatalogPayload",
    "SampleRecord",
    "DEFAULT_COLUMNS",
    "load_catalog",

    # Index
    "SampleIndex",
    "InstrumentDescription",
    "TechniqueSummary",

    # Cache & facade
    "SourceCache",
    "get_source_cache",
    "RootPathStore",
    "ROOT_CONFIG_FILENAME",
    "join_root_path",
    "SampleLookup",
]
