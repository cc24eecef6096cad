# -*- coding: utf-8 -*-
"""Workspace directories and the journal files inside them."""
from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, List
import string

WORKSPACE_CHARS = frozenset(string.ascii_letters + "-_")
WORKSPACE_MIN_LEN = 2
WORKSPACE_MAX_LEN = 25


@dataclass
class Workspace:
    """A named directory of journal files."""

    name: str
    files: List[Path] = field(default_factory=list)


def valid_workspace_name(name: str) -> str:
    """Return the trimmed *name* or raise ``ValueError``."""
    name = name.strip()
    if len(name) < WORKSPACE_MIN_LEN:
        raise ValueError(f"too short workspace name: {name}")
    if len(name) > WORKSPACE_MAX_LEN:
        raise ValueError("too long workspace name")
    invalid = sorted({ch for ch in name if ch not in WORKSPACE_CHARS})
    if invalid:
        raise ValueError(f"contains invalid characters: {''.join(invalid)}")
    return name


def list_files(directory: Path) -> List[Path]:
    """Regular files in *directory*, sorted by name; ``[]`` if it is missing."""
    if not directory.is_dir():
        return []
    return sorted(p for p in directory.iterdir() if p.is_file())


def list_dirs(directory: Path) -> List[Path]:
    if not directory.is_dir():
        return []
    return sorted(p for p in directory.iterdir() if p.is_dir())


def list_workspaces(workspaces_dir: Path) -> Dict[str, Workspace]:
    """Map every workspace under *workspaces_dir* to its files."""
    return {d.name: Workspace(d.name, list_files(d)) for d in list_dirs(workspaces_dir)}


def find_entry(directory: Path, pattern: str) -> Path:
    """Exact filename match first, else the first file containing *pattern*."""
    exact = directory / pattern
    if Path(pattern).name == pattern and exact.is_file():
        return exact
    for path in list_files(directory):
        if pattern in path.name:
            return path
    raise ValueError(f"no entry matching: {pattern}")


def valid_journal_name(name: str) -> str:
    """Reject names that would escape the workspace directory."""
    if not name or name in (".", "..") or Path(name).name != name:
        raise ValueError(f"invalid journal name: {name!r}")
    return name
