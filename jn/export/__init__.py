# -*- coding: utf-8 -*-
"""Export targets and the incremental export driver."""
from __future__ import annotations

from .archive import ArchiveTarget, ArchiveWriter
from .base import ExportResult, ExportTarget, filter_workspaces, run_export
from .store import ObjectStore, SqliteObjectStore, StoreTarget

TARGETS = ("zip", "store")

__all__ = [
    "ArchiveTarget",
    "ArchiveWriter",
    "ExportResult",
    "ExportTarget",
    "ObjectStore",
    "SqliteObjectStore",
    "StoreTarget",
    "TARGETS",
    "filter_workspaces",
    "run_export",
]
