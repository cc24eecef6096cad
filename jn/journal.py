# -*- coding: utf-8 -*-
"""Journal files: read, decrypt, edit, re-encrypt and write.

A journal on disk is ``header || payload`` (see :mod:`jn.header`). Reading
happens once, at :meth:`Journal.open`. Every write produces a brand-new
header, so saving unchanged content under a key still changes the stored
nonce, tag and ciphertext.
"""
from __future__ import annotations

from pathlib import Path
from typing import Optional, Protocol
import logging
import os
import tempfile

from . import crypto
from .errors import IoFailure, MissingKey
from .header import Header, V1Header, decode, encode, payload

logger = logging.getLogger(__name__)


class TempEditor(Protocol):
    def edit_temp(self, filename: str, content: bytes) -> bytes: ...


# ---------------------------------------------------------------------
# Writing helpers
# ---------------------------------------------------------------------

def render(content: bytes, key: Optional[str]) -> bytes:
    """Return the full on-disk bytes for *content*, sealed when *key* is set."""
    if key is None:
        return encode(V1Header.plain()) + content
    res = crypto.encrypt(content, key)
    return encode(V1Header.sealed(res.nonce, res.tag)) + res.ciphertext


def write_atomic(path: Path, data: bytes) -> None:
    """Replace *path* with *data* via a temp file in the same directory."""
    fd, tmp = tempfile.mkstemp(dir=path.parent, prefix=f".{path.name}.", suffix=".tmp")
    try:
        with os.fdopen(fd, "wb") as f:
            f.write(data)
            f.flush()
            os.fsync(f.fileno())
        os.replace(tmp, path)
    except BaseException:
        if os.path.exists(tmp):
            os.unlink(tmp)
        raise


def write_exclusive(path: Path, data: bytes) -> None:
    """Create *path* with *data*; fail if it already exists."""
    with path.open("xb") as f:
        f.write(data)


# ---------------------------------------------------------------------
# Journal
# ---------------------------------------------------------------------

class Journal:
    """A journal file as read at open time."""

    def __init__(self, path: Path, key: Optional[str], header: Header, raw: bytes) -> None:
        self.path = Path(path)
        self.key = key
        self.header = header
        self.raw = raw

    @classmethod
    def open(cls, path: Path, key: Optional[str] = None) -> "Journal":
        """Read *path* once and decode its header."""
        path = Path(path)
        try:
            raw = path.read_bytes()
        except OSError as exc:
            raise IoFailure(f"failed to read {path}: {exc}") from exc
        return cls.from_bytes(path, key, raw)

    @classmethod
    def from_bytes(cls, path: Path, key: Optional[str], raw: bytes) -> "Journal":
        return cls(Path(path), key, decode(raw), raw)

    @property
    def encrypted(self) -> bool:
        return self.header.encrypted

    @property
    def filename(self) -> str:
        return self.path.name

    def plaintext(self) -> bytes:
        """Return the journal contents, decrypting when the header says so."""
        header = self.header
        data = payload(self.raw, header)
        if not isinstance(header, V1Header) or not header.encrypted:
            return data
        if self.key is None:
            raise MissingKey(f"key required for encrypted file {self.filename}")
        return crypto.decrypt(self.key, header.nonce, header.tag, data)

    def edit(self, editor: TempEditor) -> None:
        """Edit the contents and overwrite the file.

        With a key the file is (re-)encrypted, even if it was plaintext before.
        """
        if self.key is not None:
            crypto.normalize_key(self.key)
        content = editor.edit_temp(self.filename, self.plaintext())
        data = render(content, self.key)
        try:
            write_atomic(self.path, data)
        except OSError as exc:
            raise IoFailure(f"failed to write {self.path}: {exc}") from exc
        self.header = decode(data)
        self.raw = data
        logger.info("saved %s (%d bytes, encrypted=%s)", self.path, len(data), self.encrypted)

    @classmethod
    def create(
        cls,
        path: Path,
        key: Optional[str],
        content: bytes,
        editor: TempEditor,
    ) -> "Journal":
        """Edit *content* in a temp buffer, then create *path* exclusively."""
        path = Path(path)
        if key is not None:
            crypto.normalize_key(key)
        if path.exists():
            raise IoFailure(f"filepath {path} already exists")
        content = editor.edit_temp(path.name, content)
        data = render(content, key)
        try:
            write_exclusive(path, data)
        except OSError as exc:
            raise IoFailure(f"failed to create {path}: {exc}") from exc
        logger.info("created %s (encrypted=%s)", path, key is not None)
        return cls.from_bytes(path, key, data)
