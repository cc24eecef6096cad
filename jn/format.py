# -*- coding: utf-8 -*-
"""Text rendering of command results (rich console markup)."""
from __future__ import annotations

from pathlib import Path
from typing import List, Sequence

from rich.markup import escape

from .export import ExportResult
from .logic import SearchResult


def format_workspace(name: str, files: Sequence[Path]) -> str:
    lines = [f"    {escape(p.name)}" for p in files]
    return "\n".join([f"[bold]{escape(name)}/[/bold]"] + lines)


def format_export(result: ExportResult) -> str:
    lines: List[str] = []
    if result.exported:
        lines.append("Exported files:")
        lines.extend(f"  [green]{escape(k)}[/green]" for k in result.exported)
    if result.skipped:
        lines.append("Skipped files:")
        lines.extend(f"  [blue]{escape(k)}[/blue]" for k in result.skipped)
    if not lines:
        lines.append("Nothing to export.")
    if result.archive is not None:
        lines.append(f"Archive: {escape(str(result.archive))}")
    if not result.manifest_changed:
        lines.append("Manifest unchanged.")
    return "\n".join(lines)


def format_search(result: SearchResult) -> str:
    lines: List[str] = []
    current = None
    for m in result.matches:
        where = f"{m.workspace}/{m.filename}"
        if where != current:
            lines.append(f"[bold magenta]{escape(where)}[/bold magenta]")
            current = where
        lines.append(f"[green]{m.line_no}[/green]: {escape(m.line)}")
    if result.skipped:
        lines.append("Skipped files:")
        lines.extend(f"  [blue]{escape(k)}[/blue]" for k in result.skipped)
    return "\n".join(lines)
