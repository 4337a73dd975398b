"""Optional compression of ingestion input files.

Shards themselves are always plain text; only candidate input may arrive
compressed.
"""

from __future__ import annotations

import gzip
from enum import Enum
from pathlib import Path
from typing import TextIO

ENCODING = "utf-8"


class CompressionCodec(str, Enum):
    NONE = "none"
    GZIP = "gzip"
    ZSTD = "zstd"
    LZ4 = "lz4"


_SUFFIX_CODECS = {
    ".gz": CompressionCodec.GZIP,
    ".gzip": CompressionCodec.GZIP,
    ".zst": CompressionCodec.ZSTD,
    ".zstd": CompressionCodec.ZSTD,
    ".lz4": CompressionCodec.LZ4,
}


def codec_for_path(path: Path | str) -> CompressionCodec:
    """Infer the input codec from the file suffix."""

    return _SUFFIX_CODECS.get(Path(path).suffix.lower(), CompressionCodec.NONE)


def open_text_input(path: Path | str, codec: CompressionCodec | None = None) -> TextIO:
    """Open an input file for reading text, decompressing when needed."""

    resolved = codec if codec is not None else codec_for_path(path)
    if resolved is CompressionCodec.NONE:
        return open(path, "r", encoding=ENCODING)
    if resolved is CompressionCodec.GZIP:
        return gzip.open(path, "rt", encoding=ENCODING)
    if resolved is CompressionCodec.ZSTD:
        import zstandard as zstd

        return zstd.open(path, "rt", encoding=ENCODING)
    if resolved is CompressionCodec.LZ4:
        import lz4.frame as lz4f

        return lz4f.open(path, "rt", encoding=ENCODING)
    raise ValueError(f"Unsupported compression codec {resolved}")
