# -*- coding: utf-8 -*-
"""Versioned header prefixed to every journal file written by jn.

Layout (byte offsets from the start of the file)::

    byte 0      version   (0x01; anything else means a legacy file)
    byte 1      flags     (bit 7 = encrypted)
    if encrypted:
    byte 2      nonce_len
    byte 3      tag_len
    bytes 4..   nonce, then tag
    remaining   ciphertext, or plaintext when not encrypted

Files written before the header existed have no header at all. Those decode
to :class:`LegacyHeader` and the whole buffer is payload.
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import Union
import struct

from .errors import MalformedHeader

# ---------------------------------------------------------------------
# Parameters
# ---------------------------------------------------------------------

VERSION = 0x01
FLAG_ENCRYPTED = 0x80

PREFIX_FMT = ">BB"   # version, flags
LENGTHS_FMT = ">BB"  # nonce_len, tag_len
PREFIX_SIZE = struct.calcsize(PREFIX_FMT)
LENGTHS_SIZE = struct.calcsize(LENGTHS_FMT)
MAX_FIELD_LEN = 0xFF


# ---------------------------------------------------------------------
# Data structures
# ---------------------------------------------------------------------

@dataclass(frozen=True)
class LegacyHeader:
    """Header of a file that predates the format: nothing to strip."""

    @property
    def size(self) -> int:
        return 0

    @property
    def encrypted(self) -> bool:
        return False


@dataclass(frozen=True)
class V1Header:
    """Version 1 header. ``nonce`` and ``tag`` are empty unless encrypted."""

    flags: int = 0
    nonce: bytes = b""
    tag: bytes = b""

    @classmethod
    def plain(cls) -> "V1Header":
        return cls(flags=0)

    @classmethod
    def sealed(cls, nonce: bytes, tag: bytes) -> "V1Header":
        return cls(flags=FLAG_ENCRYPTED, nonce=nonce, tag=tag)

    @property
    def encrypted(self) -> bool:
        return bool(self.flags & FLAG_ENCRYPTED)

    @property
    def size(self) -> int:
        if not self.encrypted:
            return PREFIX_SIZE
        return PREFIX_SIZE + LENGTHS_SIZE + len(self.nonce) + len(self.tag)


Header = Union[LegacyHeader, V1Header]


# ---------------------------------------------------------------------
# Codec
# ---------------------------------------------------------------------

def encode(header: Header) -> bytes:
    """Serialize *header*. A legacy header serializes to ``b""``."""
    if isinstance(header, LegacyHeader):
        return b""
    out = struct.pack(PREFIX_FMT, VERSION, header.flags)
    if not header.encrypted:
        return out
    if len(header.nonce) > MAX_FIELD_LEN or len(header.tag) > MAX_FIELD_LEN:
        raise MalformedHeader("nonce and tag must each fit in 255 bytes")
    out += struct.pack(LENGTHS_FMT, len(header.nonce), len(header.tag))
    return out + header.nonce + header.tag


def decode(data: bytes) -> Header:
    """Read the header at the start of *data*.

    Raises :class:`MalformedHeader` when a version 1 header is cut short.
    """
    if not data or data[0] != VERSION:
        return LegacyHeader()

    if len(data) < PREFIX_SIZE:
        raise MalformedHeader("failed to decode header: missing flags")
    _, flags = struct.unpack_from(PREFIX_FMT, data, 0)
    if not flags & FLAG_ENCRYPTED:
        return V1Header(flags=flags)

    if len(data) < PREFIX_SIZE + LENGTHS_SIZE:
        raise MalformedHeader("failed to decode header: missing nonce/tag sizes")
    nonce_len, tag_len = struct.unpack_from(LENGTHS_FMT, data, PREFIX_SIZE)

    start = PREFIX_SIZE + LENGTHS_SIZE
    end = start + nonce_len + tag_len
    if len(data) < end:
        raise MalformedHeader(
            f"failed to decode header: expected {end} bytes, found {len(data)}"
        )
    nonce = bytes(data[start:start + nonce_len])
    tag = bytes(data[start + nonce_len:end])
    return V1Header(flags=flags, nonce=nonce, tag=tag)


def payload(data: bytes, header: Header) -> bytes:
    """Return the bytes of *data* that follow *header*."""
    return bytes(data[header.size:])
