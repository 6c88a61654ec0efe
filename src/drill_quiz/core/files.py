"""File discovery helpers."""

from __future__ import annotations

from pathlib import Path
from typing import Iterable, List, Optional, Sequence, Set

__all__ = [
    "parse_extensions",
    "list_files",
]


def parse_extensions(
    values: Optional[Sequence[str]],
    *,
    default: Optional[Iterable[str]] = None,
) -> Set[str]:
    """Normalize extension strings to a lowercase set without leading dots.

    Parameters
    ----------
    values:
        Raw extension inputs (with or without leading dots). Empty or
        ``None`` returns ``default``.
    default:
        Fallback extensions. Defaults to ``{"yml", "yaml"}``.
    """
    fallback = set(default or {"yml", "yaml"})
    if not values:
        return set(fallback)

    normalized: Set[str] = set()
    for item in values:
        if not isinstance(item, str):
            continue
        candidate = item.strip().lower().lstrip(".")
        if candidate:
            normalized.add(candidate)
    return normalized or set(fallback)


def list_files(directory: Path, extensions: Set[str]) -> List[Path]:
    """Return files directly under ``directory`` matching ``extensions``.

    Results are sorted case-insensitively by name so menus are stable.
    Raises ``FileNotFoundError`` when the directory does not exist and
    ``NotADirectoryError`` when it is a file.
    """
    root = Path(directory)
    if not root.exists():
        raise FileNotFoundError(f"Directory not found: {root}")
    if not root.is_dir():
        raise NotADirectoryError(f"Not a directory: {root}")
    matches = [
        child
        for child in root.iterdir()
        if child.is_file() and child.suffix.lower().lstrip(".") in extensions
    ]
    return sorted(matches, key=lambda p: p.name.lower())
