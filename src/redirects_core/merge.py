"""Merge-insert of new records into an existing sorted shard."""

from __future__ import annotations

import logging
import time
from dataclasses import dataclass
from pathlib import Path
from typing import Iterable, Iterator, List

from .metrics import REDIRECTS_MERGE_RECORDS_TOTAL, REDIRECTS_MERGE_SECONDS
from .routing import shard_path
from .shard_io import AtomicShardWriter, iter_lines

logger = logging.getLogger(__name__)


class ShardMismatchError(ValueError):
    """Raised when a candidate line does not belong to the target shard."""

    def __init__(self, shard_id: str, line: str) -> None:
        super().__init__(f"Line does not belong to shard {shard_id}: {line!r}")
        self.shard_id = shard_id
        self.line = line


@dataclass(frozen=True)
class MergeResult:
    """Outcome of merging a batch into one shard."""

    shard_id: str
    path: Path
    candidates: int
    added: int
    skipped: int
    total_lines: int


def prepare_batch(shard_id: str, lines: Iterable[str]) -> List[str]:
    """Check shard membership, then sort and de-duplicate a candidate batch."""

    batch = set()
    for line in lines:
        if not line.startswith(shard_id):
            raise ShardMismatchError(shard_id, line)
        batch.add(line)
    return sorted(batch)


def merge_sorted_lines(existing: Iterable[str], new_sorted: Iterable[str]) -> Iterator[str]:
    """Lazily merge two ascending line sequences.

    A new line equal to an existing one is dropped; the existing line is
    emitted once. Nothing from ``existing`` is ever dropped.
    """

    pending = iter(new_sorted)
    next_new = next(pending, None)

    for line in existing:
        while next_new is not None and next_new <= line:
            if next_new < line:
                yield next_new
            next_new = next(pending, None)
        yield line

    if next_new is not None:
        yield next_new
        yield from pending


def merge_into_shard(data_dir: Path | str, shard_id: str, lines: Iterable[str]) -> MergeResult:
    """Merge candidate lines into a shard and atomically replace its file.

    The shard file must already exist. On any error the original file is
    left untouched.
    """

    path = shard_path(data_dir, shard_id)
    batch = prepare_batch(shard_id, lines)
    if not path.is_file():
        raise FileNotFoundError(f"Shard file does not exist: {path}")

    start = time.perf_counter()
    existing_count = 0

    def _count_existing(source: Iterable[str]) -> Iterator[str]:
        nonlocal existing_count
        for line in source:
            existing_count += 1
            yield line

    existing = iter_lines(path)
    try:
        with AtomicShardWriter(path) as writer:
            writer.write_lines(merge_sorted_lines(_count_existing(existing), batch))
    finally:
        existing.close()

    total = writer.lines_written
    added = total - existing_count
    skipped = len(batch) - added
    REDIRECTS_MERGE_SECONDS.labels(shard=shard_id).observe(time.perf_counter() - start)
    REDIRECTS_MERGE_RECORDS_TOTAL.labels(shard=shard_id, result="added").inc(added)
    REDIRECTS_MERGE_RECORDS_TOTAL.labels(shard=shard_id, result="skipped").inc(skipped)
    logger.info("Merged shard %s: added=%d skipped=%d total=%d", shard_id, added, skipped, total)

    return MergeResult(
        shard_id=shard_id,
        path=path,
        candidates=len(batch),
        added=added,
        skipped=skipped,
        total_lines=total,
    )
