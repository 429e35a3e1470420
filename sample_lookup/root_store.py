"""
Root path sidecar file.

The sample root directory is kept as the first line of a small text file
next to the catalog, so it survives host restarts.
"""

import logging
import os
from pathlib import Path
from typing import Optional, Union

from .errors import PersistError

logger = logging.getLogger(__name__)

ROOT_CONFIG_FILENAME = "sample_lookup_root.txt"


class RootPathStore:
    """Read and overwrite the persisted root path."""

    def __init__(self, path: Union[str, "os.PathLike[str]"]):
        self.path = Path(path)

    @classmethod
    def beside(cls, catalog_path: Union[str, "os.PathLike[str]"]) -> "RootPathStore":
        """Store located in the catalog's directory."""
        return cls(Path(catalog_path).parent / ROOT_CONFIG_FILENAME)

    def read(self) -> Optional[str]:
        """
        Read the stored root path.

        Returns:
            The root path, or None when the file is absent, unreadable or blank
        """
        try:
            with open(self.path, "r", encoding="utf-8") as f:
                first_line = f.readline()
        except FileNotFoundError:
            return None
        except OSError as e:
            logger.warning(f"Could not read root path from {self.path}: {e}")
            return None

        value = first_line.strip()
        return value or None

    def write(self, root_path: str) -> None:
        """
        Overwrite the stored root path.

        Raises:
            PersistError: If the file cannot be written
        """
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            with open(self.path, "w", encoding="utf-8") as f:
                f.write(f"{root_path}\n")
        except OSError as e:
            raise PersistError(str(self.path), e.strerror or str(e)) from e

        logger.debug(f"Saved root path to {self.path}")
