# -*- coding: utf-8 -*-
"""Crypto helpers for jn.

This module encapsulates *stateless* cryptographic helpers: AES-256-GCM
sealing/opening of journal contents, key normalization and content digests.
It does **not** perform any file I/O.

Nonces are 96 random bits drawn fresh for every call. Nothing records which
nonces were already used under a key, so uniqueness is probabilistic only:
the chance of any collision stays below 2**-32 for up to 2**32 encryptions
under the same key, far beyond the edit count of a personal journal.
"""
from __future__ import annotations

from dataclasses import dataclass
import secrets

from cryptography.exceptions import InvalidTag
from cryptography.hazmat.primitives import hashes
from cryptography.hazmat.primitives.ciphers.aead import AESGCM

from .errors import AuthenticationFailed, KeyInvalid

# ---------------------------------------------------------------------
# Parameters
# ---------------------------------------------------------------------

KEY_LEN = 32
KEY_MIN_LEN = 8
NONCE_LEN = 12
TAG_LEN = 16


# ---------------------------------------------------------------------
# Data structures
# ---------------------------------------------------------------------

@dataclass(frozen=True)
class EncryptionResult:
    """Output of one :func:`encrypt` call; all three parts must be stored."""

    ciphertext: bytes
    nonce: bytes
    tag: bytes


# ---------------------------------------------------------------------
# Key handling
# ---------------------------------------------------------------------

def normalize_key(keystr: str) -> bytes:
    """Turn a user key string into a 32-byte AES key.

    The UTF-8 encoding must be 8..32 bytes long; shorter keys are padded with
    trailing zero bytes.
    """
    raw = keystr.encode("utf-8")
    if not raw:
        raise KeyInvalid("empty key")
    if len(raw) < KEY_MIN_LEN:
        raise KeyInvalid(f"key must not be shorter than {KEY_MIN_LEN} characters")
    if len(raw) > KEY_LEN:
        raise KeyInvalid(f"key must not be longer than {KEY_LEN} characters")
    return raw.ljust(KEY_LEN, b"\x00")


# ---------------------------------------------------------------------
# AEAD helpers
# ---------------------------------------------------------------------

def encrypt(plaintext: bytes, keystr: str) -> EncryptionResult:
    """Seal *plaintext* with AES-256-GCM under *keystr*."""
    key = normalize_key(keystr)
    nonce = secrets.token_bytes(NONCE_LEN)
    sealed = AESGCM(key).encrypt(nonce, plaintext, None)
    return EncryptionResult(
        ciphertext=sealed[:-TAG_LEN],
        nonce=nonce,
        tag=sealed[-TAG_LEN:],
    )


def decrypt(keystr: str, nonce: bytes, tag: bytes, ciphertext: bytes) -> bytes:
    """Open *ciphertext*; raise :class:`AuthenticationFailed` on any mismatch."""
    key = normalize_key(keystr)
    if len(nonce) != NONCE_LEN or len(tag) != TAG_LEN:
        raise AuthenticationFailed("invalid nonce or tag length")
    try:
        return AESGCM(key).decrypt(nonce, ciphertext + tag, None)
    except InvalidTag as exc:
        raise AuthenticationFailed("authentication failed: wrong key or corrupted data") from exc


# ---------------------------------------------------------------------
# Digests
# ---------------------------------------------------------------------

def sha256_hex(data: bytes) -> str:
    """Lowercase hex SHA-256 of *data*."""
    digest = hashes.Hash(hashes.SHA256())
    digest.update(data)
    return digest.finalize().hex()
