"""
Sample Index - Nested lookup from musical attributes to sample paths

Structure:
    instrument -> technique -> pitch -> dynamic -> [path, path, ...]

Every level is an exact-string key. The dynamic level may hold an empty
string key for rows that carry no dynamic marking. Terminal lists keep file
order and duplicates.

Usage:
    from sample_lookup.sample_index import SampleIndex

    index = SampleIndex.from_records(records)
    index.query("Violin", "pizzicato", "A4", "mf")   # one dynamic
    index.query("Violin", "pizzicato", "A4")         # every dynamic
    index.describe("Violin").techniques
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, Iterable, List, Optional, TYPE_CHECKING

if TYPE_CHECKING:
    from .catalog_loader import SampleRecord

# pitch -> dynamic -> paths
PitchTable = Dict[str, Dict[str, List[str]]]


@dataclass
class TechniqueSummary:
    """Dynamics and pitches available for one technique."""
    dynamics: List[str] = field(default_factory=list)
    pitches: List[str] = field(default_factory=list)


@dataclass
class InstrumentDescription:
    """
    Human-readable overview of one instrument in the catalog.

    All lists are sorted. ``dynamics`` and ``pitches`` are the union over
    every technique of the instrument.
    """
    instrument: str
    techniques: List[str] = field(default_factory=list)
    dynamics: List[str] = field(default_factory=list)
    pitches: List[str] = field(default_factory=list)
    by_technique: Dict[str, TechniqueSummary] = field(default_factory=dict)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "instrument": self.instrument,
            "techniques": list(self.techniques),
            "dynamics": list(self.dynamics),
            "pitches": list(self.pitches),
            "by_technique": {
                name: {
                    "dynamics": list(summary.dynamics),
                    "pitches": list(summary.pitches),
                }
                for name, summary in self.by_technique.items()
            },
        }


class SampleIndex:
    """
    Four-level nested index of sample paths.

    The index is filled by the catalog loader while it reads the file and
    is not modified after the load returns. A reload builds a new index.
    """

    def __init__(self):
        self._tree: Dict[str, Dict[str, PitchTable]] = {}
        self._size = 0

    @classmethod
    def from_records(cls, records: Iterable["SampleRecord"]) -> "SampleIndex":
        """Build an index from already validated records."""
        index = cls()
        for record in records:
            index.add(record.instrument, record.technique, record.pitch, record.dynamic, record.path)
        return index

    def add(self, instrument: str, technique: str, pitch: str, dynamic: str, path: str) -> None:
        """Append ``path`` under the four keys, creating levels as needed."""
        techniques = self._tree.setdefault(instrument, {})
        pitches = techniques.setdefault(technique, {})
        dynamics = pitches.setdefault(pitch, {})
        dynamics.setdefault(dynamic, []).append(path)
        self._size += 1

    # =========================================================================
    # Queries
    # =========================================================================

    def query(
        self,
        instrument: str,
        technique: str,
        pitch: str,
        dynamic: Optional[str] = None,
    ) -> List[str]:
        """
        Resolve a key to sample paths.

        Args:
            instrument: Instrument name (exact)
            technique: Technique name (exact)
            pitch: Pitch name (exact)
            dynamic: Dynamic name; ``None`` matches every dynamic, while
                ``""`` addresses rows without a dynamic marking

        Returns:
            New list of paths, empty when nothing matches
        """
        dynamics = self._pitch_node(instrument, technique, pitch)
        if dynamics is None:
            return []

        if dynamic is not None:
            return list(dynamics.get(dynamic, ()))

        paths: List[str] = []
        for bucket in dynamics.values():
            paths.extend(bucket)
        return paths

    def _pitch_node(self, instrument: str, technique: str, pitch: str) -> Optional[Dict[str, List[str]]]:
        techniques = self._tree.get(instrument)
        if techniques is None:
            return None
        pitches = techniques.get(technique)
        if pitches is None:
            return None
        return pitches.get(pitch)

    def instruments(self) -> List[str]:
        """Sorted instrument names."""
        return sorted(self._tree)

    def techniques(self, instrument: str) -> List[str]:
        """Sorted technique names for an instrument (empty if unknown)."""
        return sorted(self._tree.get(instrument, {}))

    def dynamics(self, instrument: str, technique: str, pitch: str) -> List[str]:
        """Dynamic keys under a pitch, in the order they were first seen."""
        node = self._pitch_node(instrument, technique, pitch)
        return list(node) if node is not None else []

    def describe(self, instrument: str) -> Optional[InstrumentDescription]:
        """
        Summarize the techniques, dynamics and pitches of an instrument.

        Returns:
            InstrumentDescription, or None if the instrument is not indexed
        """
        techniques = self._tree.get(instrument)
        if techniques is None:
            return None

        all_dynamics = set()
        all_pitches = set()
        by_technique: Dict[str, TechniqueSummary] = {}

        for technique in sorted(techniques):
            pitches = techniques[technique]
            tech_dynamics = set()
            for dynamics in pitches.values():
                tech_dynamics.update(dynamics)
            by_technique[technique] = TechniqueSummary(
                dynamics=sorted(tech_dynamics),
                pitches=sorted(pitches),
            )
            all_dynamics.update(tech_dynamics)
            all_pitches.update(pitches)

        return InstrumentDescription(
            instrument=instrument,
            techniques=sorted(techniques),
            dynamics=sorted(all_dynamics),
            pitches=sorted(all_pitches),
            by_technique=by_technique,
        )

    def __contains__(self, instrument: object) -> bool:
        return instrument in self._tree

    def __len__(self) -> int:
        return self._size

    def __repr__(self) -> str:
        return f"SampleIndex(instruments={len(self._tree)}, paths={self._size})"
