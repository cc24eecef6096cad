# -*- coding: utf-8 -*-
"""Incremental export driver shared by every export target.

One run walks through::

    FetchManifest -> DiffFiles -> WriteArtifacts -> CompareManifestDigest
                  -> PersistManifest -> Done

Writes and the manifest persist are skipped under ``dryrun``; the
exported/skipped partition is identical either way. The manifest is only
persisted when its serialized digest changed, so a run over unchanged files
performs no manifest write at all. A run that fails while writing calls
:meth:`ExportTarget.abort` instead of :meth:`ExportTarget.finish`.
"""
from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, Iterable, List, Mapping, Optional
import logging

from ..crypto import sha256_hex
from ..errors import JournalError, RemoteManifestUnavailable
from ..manifest import Decision, Manifest
from ..workspace import Workspace

logger = logging.getLogger(__name__)


@dataclass
class ExportResult:
    """Outcome of one export run, keyed by ``"{workspace}/{filename}"``."""

    exported: List[str] = field(default_factory=list)
    skipped: List[str] = field(default_factory=list)
    manifest_changed: bool = False
    archive: Optional[Path] = None

    @property
    def empty(self) -> bool:
        return not self.exported and not self.skipped


class ExportTarget(ABC):
    """Destination of an export run."""

    name = "target"
    #: Workspace names to export; None exports every workspace.
    workspaces: Optional[List[str]] = None

    @abstractmethod
    async def fetch_manifest(self) -> bytes:
        """Serialized manifest held by the target.

        Raise :class:`RemoteManifestUnavailable` when there is none yet.
        """

    async def prepare(self, workspace: str, path: Path, raw: bytes) -> bytes:
        """Artifact bytes for one journal; defaults to the raw file bytes.

        Raising :class:`JournalError` marks the journal as skipped.
        """
        return raw

    @abstractmethod
    async def write_artifact(self, key: str, workspace: str, data: bytes) -> None:
        ...

    async def finish(self) -> None:
        """Called after the last artifact was written."""

    async def abort(self) -> None:
        """Called instead of :meth:`finish` when the run fails; release partial output."""

    @abstractmethod
    async def persist_manifest(self, data: bytes) -> None:
        ...


def filter_workspaces(
    workspaces: Mapping[str, Workspace],
    only: Optional[Iterable[str]] = None,
) -> Dict[str, Workspace]:
    """Keep the workspaces named in *only*; ``None`` keeps all."""
    if only is None:
        return dict(workspaces)
    wanted = set(only)
    return {name: ws for name, ws in workspaces.items() if name in wanted}


async def load_manifest(target: ExportTarget) -> Manifest:
    """FetchManifest: a missing manifest is an empty one."""
    try:
        data = await target.fetch_manifest()
    except RemoteManifestUnavailable:
        logger.info("no manifest at %s target, starting empty", target.name)
        return Manifest()
    return Manifest.from_bytes(data)


async def _diff_and_write(
    target: ExportTarget,
    workspaces: Mapping[str, Workspace],
    manifest: Manifest,
    result: ExportResult,
    dryrun: bool,
) -> None:
    """DiffFiles and WriteArtifacts, in sorted workspace/file order."""
    for ws_name in sorted(workspaces):
        for path in workspaces[ws_name].files:
            key = Manifest.key_for(ws_name, path.name)
            try:
                raw = path.read_bytes()
            except OSError as exc:
                logger.warning("skipping %s: %s", key, exc)
                result.skipped.append(key)
                continue

            digest = sha256_hex(raw)
            if manifest.decide(key, digest) is Decision.SKIP:
                logger.debug("unchanged: %s", key)
                result.skipped.append(key)
                continue

            try:
                artifact = await target.prepare(ws_name, path, raw)
            except JournalError as exc:
                logger.warning("skipping %s: %s", key, exc)
                result.skipped.append(key)
                continue

            manifest.record(key, digest)
            if not dryrun:
                await target.write_artifact(key, ws_name, artifact)
            result.exported.append(key)


async def run_export(
    target: ExportTarget,
    workspaces: Mapping[str, Workspace],
    dryrun: bool = False,
) -> ExportResult:
    """Export every journal of *workspaces* that *target* does not hold yet."""
    result = ExportResult()
    workspaces = filter_workspaces(workspaces, target.workspaces)
    old_manifest = await load_manifest(target)
    manifest = old_manifest.copy()
    logger.debug("fetched manifest with %d entries", len(old_manifest))

    try:
        await _diff_and_write(target, workspaces, manifest, result, dryrun)
    except BaseException:
        if not dryrun:
            await target.abort()
        raise
    if not dryrun:
        await target.finish()

    result.manifest_changed = manifest.digest() != old_manifest.digest()
    if not result.manifest_changed:
        logger.info("manifest matches old - skipping")
    elif dryrun:
        logger.info("dry run: manifest not persisted")
    else:
        logger.info("persisting manifest (%d entries) to %s target", len(manifest), target.name)
        await target.persist_manifest(manifest.to_bytes())

    return result
