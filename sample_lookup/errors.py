"""
Error types for the sample lookup system.

Every exception carries a numeric ``code`` so host bridges can report
failures as structured messages without inspecting exception classes.
"""

from typing import List, Optional


class ErrorCode:
    """
    Error codes for structured error reporting.
    """
    # General errors (1xx)
    UNKNOWN = 100
    INVALID_MESSAGE = 101
    MISSING_PARAMETER = 102
    INVALID_CONFIG = 103

    # Catalog errors (2xx)
    SOURCE_NOT_FOUND = 200
    MISSING_COLUMN = 201
    INVALID_ENCODING = 202

    # Query errors (3xx)
    INCOMPLETE_SELECTION = 300
    NO_MATCH = 301
    UNKNOWN_INSTRUMENT = 302

    # File errors (5xx)
    PERSIST_FAILED = 500

    # Server errors (9xx)
    SHUTDOWN_IN_PROGRESS = 902


class SampleLookupError(Exception):
    """Base class for all sample lookup failures."""

    code = ErrorCode.UNKNOWN


class ConfigLoadError(SampleLookupError):
    """Raised when server configuration loading fails."""

    code = ErrorCode.INVALID_CONFIG


# =============================================================================
# CATALOG ERRORS
# =============================================================================

class CatalogError(SampleLookupError):
    """Structural failure while loading a catalog; aborts the whole load."""


class SourceNotFoundError(CatalogError):
    """Raised when the catalog file cannot be opened."""

    code = ErrorCode.SOURCE_NOT_FOUND

    def __init__(self, source: str, reason: str = ""):
        self.source = source
        self.reason = reason
        message = f"Catalog not found: {source}"
        if reason:
            message = f"{message} ({reason})"
        super().__init__(message)


class MissingColumnError(CatalogError):
    """Raised when the catalog header lacks a required column."""

    code = ErrorCode.MISSING_COLUMN

    def __init__(self, column: str, source: str = "", missing: Optional[List[str]] = None):
        self.column = column
        self.source = source
        self.missing = list(missing) if missing else [column]
        message = f"Missing required column '{column}'"
        if source:
            message = f"{message} in {source}"
        super().__init__(message)


class CatalogEncodingError(CatalogError):
    """Raised when a catalog line is not valid UTF-8."""

    code = ErrorCode.INVALID_ENCODING

    def __init__(self, source: str, line_number: int, reason: str = ""):
        self.source = source
        self.line_number = line_number
        self.reason = reason
        message = f"Catalog {source} is not valid UTF-8 at line {line_number}"
        if reason:
            message = f"{message} ({reason})"
        super().__init__(message)


# =============================================================================
# QUERY ERRORS
# =============================================================================

class QueryError(SampleLookupError):
    """Query-time failure; reported to the user, never fatal to the host."""


class IncompleteSelectionError(QueryError):
    """Raised when a query needs an instrument/technique that is not selected."""

    code = ErrorCode.INCOMPLETE_SELECTION

    def __init__(self, missing: List[str]):
        self.missing = list(missing)
        super().__init__(f"Select {' and '.join(self.missing)} first")


class NoMatchError(QueryError):
    """Raised when a fully specified query resolves to no samples."""

    code = ErrorCode.NO_MATCH

    def __init__(self, instrument: str, technique: str, pitch: str, dynamic: Optional[str] = None):
        self.instrument = instrument
        self.technique = technique
        self.pitch = pitch
        self.dynamic = dynamic
        key = f"{instrument} / {technique} / {pitch}"
        if dynamic is not None:
            key = f"{key} / {dynamic}"
        super().__init__(f"No samples for {key}")


class UnknownInstrumentError(QueryError):
    """Raised when an instrument is not present in the loaded catalog."""

    code = ErrorCode.UNKNOWN_INSTRUMENT

    def __init__(self, instrument: str):
        self.instrument = instrument
        super().__init__(f"Unknown instrument: {instrument}")


# =============================================================================
# PERSISTENCE ERRORS
# =============================================================================

class PersistError(SampleLookupError):
    """Raised when the root path sidecar cannot be written."""

    code = ErrorCode.PERSIST_FAILED

    def __init__(self, path: str, reason: str = ""):
        self.path = path
        self.reason = reason
        message = f"Could not save root path to {path}"
        if reason:
            message = f"{message}: {reason}"
        super().__init__(message)
