"""
Pytest fixtures for sample_lookup tests.
"""
import pytest
import sys
from pathlib import Path

# Add project root to path
PROJECT_ROOT = Path(__file__).parent.parent
sys.path.insert(0, str(PROJECT_ROOT))

HEADER = "Instrument (in full),Technique (in full),Pitch,Dynamics,Path"


@pytest.fixture
def write_catalog(tmp_path):
    """Factory writing a catalog file from a list of lines."""
    def _write(lines, name="catalog.csv", header=HEADER, newline="\n"):
        path = tmp_path / name
        rows = ([header] if header is not None else []) + list(lines)
        path.write_text(newline.join(rows) + newline, encoding="utf-8")
        return path
    return _write


@pytest.fixture
def violin_catalog(write_catalog):
    """Single-row catalog used by the end-to-end scenario."""
    return write_catalog(["Violin,pizzicato,A4,mf,Violin/pizz/A4_mf.wav"])


@pytest.fixture
def orchestra_catalog(write_catalog):
    """Catalog with several instruments, dynamics and an incomplete row."""
    return write_catalog([
        "Violin,pizzicato,A4,mf,Violin/pizz/A4_mf.wav",
        "Violin,pizzicato,A4,ff,Violin/pizz/A4_ff.wav",
        "Violin,pizzicato,A4,mf,Violin/pizz/A4_mf_2.wav",
        "Violin,ordinario,G3,pp,Violin/ord/G3_pp.wav",
        "Violin,ordinario,D4,,Violin/ord/D4.wav",
        "Cello,sul ponticello,C2,mp,Cello/pont/C2_mp.wav",
        "Cello,,C2,mp,Cello/orphan.wav",
    ])


@pytest.fixture
def counting_loader():
    """Wrap load_catalog and count its calls."""
    from sample_lookup.catalog_loader import load_catalog

    class CountingLoader:
        def __init__(self):
            self.calls = 0

        def __call__(self, source):
            self.calls += 1
            return load_catalog(source)

    return CountingLoader()


@pytest.fixture
def cache(counting_loader):
    """Isolated SourceCache backed by the counting loader."""
    from sample_lookup.source_cache import SourceCache
    return SourceCache(loader=counting_loader)


@pytest.fixture
def latin1_catalog(tmp_path):
    """Catalog saved as Latin-1; line 3 holds a non-UTF-8 byte."""
    path = tmp_path / "latin1.csv"
    text = f"{HEADER}\nViolin,pizzicato,A4,mf,a.wav\nOboe,ord,C4,mf,café.wav\n"
    path.write_bytes(text.encode("latin-1"))
    return path
