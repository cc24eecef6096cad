# -*- coding: utf-8 -*-
"""Export manifest: which version of each journal a target already holds.

The manifest maps ``"{workspace}/{filename}"`` to the lowercase hex SHA-256
of the journal's raw bytes on disk. It is serialized as pretty-printed JSON
with sorted keys, so two manifests with the same entries always serialize,
and therefore digest, identically.
"""
from __future__ import annotations

from enum import Enum
from typing import Dict, Optional
import json

from .crypto import sha256_hex
from .errors import ManifestError

MANIFEST_NAME = "manifest.json"


class Decision(Enum):
    SKIP = "skip"
    INCLUDE = "include"


class Manifest:
    """In-memory manifest for one export run."""

    def __init__(self, files: Optional[Dict[str, str]] = None) -> None:
        self.files: Dict[str, str] = dict(files or {})

    @staticmethod
    def key_for(workspace: str, filename: str) -> str:
        return f"{workspace}/{filename}"

    def lookup(self, key: str) -> Optional[str]:
        """Digest recorded for *key*, if any."""
        return self.files.get(key)

    def decide(self, key: str, digest: str) -> Decision:
        """SKIP when the target already holds content with *digest*."""
        if self.lookup(key) == digest:
            return Decision.SKIP
        return Decision.INCLUDE

    def record(self, key: str, digest: str) -> None:
        self.files[key] = digest

    def copy(self) -> "Manifest":
        return Manifest(self.files)

    def to_bytes(self) -> bytes:
        return json.dumps(self.files, indent=2, sort_keys=True).encode("utf-8")

    def digest(self) -> str:
        return sha256_hex(self.to_bytes())

    @classmethod
    def from_bytes(cls, data: bytes) -> "Manifest":
        try:
            obj = json.loads(data.decode("utf-8"))
        except (UnicodeDecodeError, json.JSONDecodeError) as exc:
            raise ManifestError(f"manifest is not valid JSON: {exc}") from exc
        if not isinstance(obj, dict) or not all(
            isinstance(k, str) and isinstance(v, str) for k, v in obj.items()
        ):
            raise ManifestError("manifest must be a JSON object of string digests")
        return cls(obj)

    def __len__(self) -> int:
        return len(self.files)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Manifest):
            return NotImplemented
        return self.files == other.files

    def __repr__(self) -> str:
        return f"Manifest({len(self.files)} files)"
