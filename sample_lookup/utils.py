"""
Utility functions for sample path handling.
"""

from typing import List, Optional

SEPARATORS = ("/", "\\")


def join_root_path(root: str, relative: str) -> str:
    """
    Join a sample root directory and a catalog-relative path.

    Exactly one separator ends up between the two parts.

    Examples:
        join_root_path('/samples', 'Violin/A4.wav') -> '/samples/Violin/A4.wav'
        join_root_path('/samples/', '/Violin/A4.wav') -> '/samples/Violin/A4.wav'
    """
    if not root:
        return relative
    if not relative:
        return root

    root_has_sep = root.endswith(SEPARATORS)
    relative_has_sep = relative.startswith(SEPARATORS)

    if root_has_sep and relative_has_sep:
        return root + relative[1:]
    if root_has_sep or relative_has_sep:
        return root + relative
    return f"{root}/{relative}"


def apply_root(root: Optional[str], paths: List[str]) -> List[str]:
    """Prefix every path with ``root``; paths are returned as-is when root is unset."""
    if not root:
        return list(paths)
    return [join_root_path(root, p) for p in paths]


def clean_name(value: Optional[str]) -> Optional[str]:
    """Trim a user-supplied name; blank becomes None."""
    if value is None:
        return None
    value = str(value).strip()
    return value or None
