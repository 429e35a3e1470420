"""
Catalog Loader - Read a sample catalog file into records and an index

A catalog is a comma-separated text file whose first non-blank line is a
header. Five columns are required (header names are configurable):

    Instrument (in full),Technique (in full),Pitch,Dynamics,Path
    Violin,pizzicato,A4,mf,Violin/pizz/A4_mf.wav

Rows missing an instrument, technique, pitch or path are dropped; they are
the normal way an incomplete catalog row is filtered out. The dynamic may be
blank.

Usage:
    from sample_lookup.catalog_loader import load_catalog

    payload = load_catalog("catalog.csv")
    payload.index.query("Violin", "pizzicato", "A4")
"""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass, field
from typing import BinaryIO, Dict, Iterator, List, Optional, Tuple, Union

from .errors import CatalogEncodingError, MissingColumnError, SourceNotFoundError
from .sample_index import SampleIndex
from .tokenizer import iter_rows

logger = logging.getLogger(__name__)

PathLike = Union[str, "os.PathLike[str]"]

BOM = "\ufeff"


@dataclass(frozen=True)
class CatalogColumns:
    """Header names for the five required catalog columns."""
    instrument: str = "Instrument (in full)"
    technique: str = "Technique (in full)"
    pitch: str = "Pitch"
    dynamic: str = "Dynamics"
    path: str = "Path"

    def as_roles(self) -> List[Tuple[str, str]]:
        """(role, header name) pairs in record field order."""
        return [
            ("instrument", self.instrument),
            ("technique", self.technique),
            ("pitch", self.pitch),
            ("dynamic", self.dynamic),
            ("path", self.path),
        ]


DEFAULT_COLUMNS = CatalogColumns()


@dataclass(frozen=True)
class SampleRecord:
    """One validated catalog row. All fields are trimmed."""
    instrument: str
    technique: str
    pitch: str
    dynamic: str
    path: str

    def is_complete(self) -> bool:
        """Every field except the dynamic must be non-empty."""
        return bool(self.instrument and self.technique and self.pitch and self.path)


@dataclass(frozen=True)
class CatalogPayload:
    """Records and index produced by one load of a catalog."""
    source: str
    records: Tuple[SampleRecord, ...] = ()
    index: SampleIndex = field(default_factory=SampleIndex)
    skipped_rows: int = 0

    @property
    def is_empty(self) -> bool:
        return not self.records


def map_header(cells: List[str]) -> Dict[str, int]:
    """
    Map trimmed header names to 1-based column positions.

    The first occurrence of a repeated name wins.
    """
    positions: Dict[str, int] = {}
    for position, cell in enumerate(cells, start=1):
        positions.setdefault(cell.strip(), position)
    return positions


def resolve_columns(
    header: Dict[str, int],
    columns: CatalogColumns = DEFAULT_COLUMNS,
    source: str = "",
) -> Dict[str, int]:
    """
    Resolve each record field to its column position.

    Raises:
        MissingColumnError: If any required header name is absent
    """
    missing = [name for _, name in columns.as_roles() if name not in header]
    if missing:
        raise MissingColumnError(missing[0], source=source, missing=missing)
    return {role: header[name] for role, name in columns.as_roles()}


def _field(cells: List[str], position: int) -> str:
    if position <= len(cells):
        return cells[position - 1].strip()
    return ""


def build_record(cells: List[str], positions: Dict[str, int]) -> Optional[SampleRecord]:
    """Assemble a record from tokenized cells, or None if it is incomplete."""
    record = SampleRecord(
        instrument=_field(cells, positions["instrument"]),
        technique=_field(cells, positions["technique"]),
        pitch=_field(cells, positions["pitch"]),
        dynamic=_field(cells, positions["dynamic"]),
        path=_field(cells, positions["path"]),
    )
    if not record.is_complete():
        return None
    return record


def _decode_lines(handle: BinaryIO, source: str) -> Iterator[str]:
    """Decode a binary catalog line by line, dropping a leading BOM."""
    for line_number, raw in enumerate(handle, start=1):
        try:
            text = raw.decode("utf-8")
        except UnicodeDecodeError as e:
            raise CatalogEncodingError(source, line_number, e.reason) from e
        if line_number == 1 and text.startswith(BOM):
            text = text[1:]
        yield text


def load_catalog(path: PathLike, columns: CatalogColumns = DEFAULT_COLUMNS) -> CatalogPayload:
    """
    Load a catalog file into records and a lookup index in a single pass.

    Args:
        path: Catalog file path
        columns: Header names of the required columns

    Returns:
        CatalogPayload with records in file order

    Raises:
        SourceNotFoundError: If the file cannot be opened
        MissingColumnError: If the header lacks a required column
        CatalogEncodingError: If a line is not valid UTF-8
    """
    source = os.fspath(path)

    try:
        handle = open(source, "rb")
    except OSError as e:
        raise SourceNotFoundError(source, e.strerror or str(e)) from e

    records: List[SampleRecord] = []
    index = SampleIndex()
    positions: Optional[Dict[str, int]] = None
    skipped = 0

    with handle:
        for cells in iter_rows(_decode_lines(handle, source)):
            if positions is None:
                positions = resolve_columns(map_header(cells), columns, source)
                continue

            record = build_record(cells, positions)
            if record is None:
                skipped += 1
                continue

            records.append(record)
            index.add(record.instrument, record.technique, record.pitch, record.dynamic, record.path)

    if positions is None:
        # No header line at all
        resolve_columns({}, columns, source)

    logger.debug(f"Loaded {len(records)} records from {source} ({skipped} incomplete rows skipped)")

    return CatalogPayload(
        source=source,
        records=tuple(records),
        index=index,
        skipped_rows=skipped,
    )
