"""
RESPONSIBILITIES
- Resolve and create the ~/SchoolRoute directory scaffold used for persistence.
- Provide helpers for locating collection workbooks.
PROCESS OVERVIEW
1. resolve_root() expands user input or falls back to SCHOOLROUTE_ROOT / ~/SchoolRoute.
2. ensure_structure() materializes store/logs directories.
3. store_file_path() returns the canonical location for a collection workbook.
"""

from __future__ import annotations

import os
from pathlib import Path
from typing import Iterable

_DEFAULT_SUBDIRS: tuple[str, ...] = ("store", "logs")


def resolve_root(root: str | os.PathLike[str] | None = None) -> Path:
    """Return the persistence root, defaulting to $SCHOOLROUTE_ROOT or ~/SchoolRoute."""

    if root is not None:
        base = Path(root)
    elif os.getenv("SCHOOLROUTE_ROOT"):
        base = Path(os.environ["SCHOOLROUTE_ROOT"])
    else:
        base = Path.home() / "SchoolRoute"
    return base.expanduser().resolve()


def ensure_structure(root: str | os.PathLike[str] | None = None, *, subdirs: Iterable[str] | None = None) -> dict[str, Path]:
    """Ensure persistence directories exist and return a mapping."""

    base = resolve_root(root)
    requested = tuple(subdirs) if subdirs is not None else _DEFAULT_SUBDIRS
    base.mkdir(parents=True, exist_ok=True)
    resolved: dict[str, Path] = {}
    for name in requested:
        target = base / name
        target.mkdir(parents=True, exist_ok=True)
        resolved[name] = target
    return resolved


def store_file_path(filename: str, root: str | os.PathLike[str] | None = None) -> Path:
    """Return the absolute path for a collection workbook under \"store\"."""

    directories = ensure_structure(root)
    return directories["store"] / filename
