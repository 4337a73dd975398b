"""Content digests for redirect records.

A digest is the SHA-1 of a byte stream, encoded with the RFC 4648 base-32
alphabet in upper case. 20 raw bytes always encode to 32 characters, so the
result never carries padding.
"""

from __future__ import annotations

import base64
import gzip
import hashlib
from typing import Any, BinaryIO

CHUNK_SIZE = 64 * 1024


def _encode(raw: bytes) -> str:
    return base64.b32encode(raw).decode("ascii").rstrip("=")


def _consume(hasher: Any, stream: BinaryIO) -> None:
    while True:
        chunk = stream.read(CHUNK_SIZE)
        if not chunk:
            break
        hasher.update(chunk)


def compute_digest(stream: BinaryIO) -> str:
    """Digest the full content of a binary stream with a fresh hash state."""

    hasher = hashlib.sha1()
    _consume(hasher, stream)
    return _encode(hasher.digest())


def compute_digest_gz(stream: BinaryIO) -> str:
    """Digest the decompressed content of a gzip-compressed stream."""

    with gzip.GzipFile(fileobj=stream, mode="rb") as decompressed:
        return compute_digest(decompressed)


def digest_bytes(data: bytes) -> str:
    """One-shot digest of an in-memory value."""

    return _encode(hashlib.sha1(data).digest())


class DigestComputer:
    """Reusable digest engine for validating many records in a row.

    The computer keeps one empty SHA-1 context and hashes every input on a
    copy of it, so each call starts from a clean state without constructing
    a new hash object from scratch.
    """

    def __init__(self) -> None:
        self._initial = hashlib.sha1()
        self.count = 0

    def digest(self, stream: BinaryIO) -> str:
        hasher = self._initial.copy()
        _consume(hasher, stream)
        self.count += 1
        return _encode(hasher.digest())

    def digest_bytes(self, data: bytes) -> str:
        hasher = self._initial.copy()
        hasher.update(data)
        self.count += 1
        return _encode(hasher.digest())
