"""Export the digests held by the store."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Iterator

from .records import parse_record_line
from .routing import is_valid_shard_file_name
from .shard_io import is_decodable, iter_lines

logger = logging.getLogger(__name__)


def iter_shard_files(data_dir: Path | str) -> Iterator[Path]:
    """Yield shard files of a store in name order, skipping anything else."""

    for entry in sorted(Path(data_dir).iterdir()):
        if entry.is_file() and is_valid_shard_file_name(entry):
            yield entry
        else:
            logger.warning("Skipping non-shard entry: %s", entry)


def iter_digests(data_dir: Path | str) -> Iterator[str]:
    """Yield the digest of every record, shard by shard in file order."""

    for path in iter_shard_files(data_dir):
        for line in iter_lines(path):
            record = parse_record_line(line)
            if record is None or not is_decodable(record.digest):
                logger.error("Invalid line in %s: %r", path.name, line)
                continue
            yield record.digest
