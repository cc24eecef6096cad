# -*- coding: utf-8 -*-
"""Exception hierarchy for jn.

Format and crypto failures are raised to the immediate caller as one of the
classes below. Bulk operations (search, export) catch :class:`JournalError`
per file and record the file as skipped.
"""
from __future__ import annotations


class JournalError(Exception):
    """Base class for every error raised by jn itself."""


class MalformedHeader(JournalError):
    """The journal header is truncated or declares impossible lengths."""


class KeyInvalid(JournalError):
    """The key string is empty, shorter than 8 or longer than 32 bytes."""


class MissingKey(JournalError):
    """An encrypted journal was read without a key."""


class AuthenticationFailed(JournalError):
    """AEAD tag verification failed (wrong key or corrupted data)."""


class IoFailure(JournalError):
    """An underlying read, write, editor or store operation failed."""


class ManifestError(JournalError):
    """A fetched manifest could not be parsed."""


class RemoteManifestUnavailable(JournalError):
    """No manifest exists at the export target yet.

    Export treats this as an empty manifest; it never reaches the caller.
    """


class ObjectNotFound(IoFailure):
    """The object store holds no object under the requested key."""

    def __init__(self, key: str) -> None:
        super().__init__(f"object not found: {key}")
        self.key = key
