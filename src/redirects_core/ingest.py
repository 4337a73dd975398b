"""Batch ingestion: group candidate lines by shard and merge them in."""

from __future__ import annotations

import logging
from contextlib import contextmanager
from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, Iterable, Iterator, List, TextIO

from .compression import CompressionCodec, open_text_input
from .merge import MergeResult, merge_into_shard
from .metrics import REDIRECTS_INGEST_REJECTIONS_TOTAL
from .routing import is_valid_shard_id
from .shard_io import iter_stream_lines

logger = logging.getLogger(__name__)


class MalformedInputError(ValueError):
    """Raised when a candidate line does not start with a valid shard id."""

    def __init__(self, line: str, line_number: int) -> None:
        super().__init__(f"Invalid input line {line_number}: {line!r}")
        self.line = line
        self.line_number = line_number


@dataclass
class IngestResult:
    """Summary of one ingestion run."""

    merges: List[MergeResult] = field(default_factory=list)

    @property
    def shards_touched(self) -> int:
        return len(self.merges)

    @property
    def records_added(self) -> int:
        return sum(merge.added for merge in self.merges)

    @property
    def records_skipped(self) -> int:
        return sum(merge.skipped for merge in self.merges)


def group_lines_by_shard(lines: Iterable[str]) -> Dict[str, List[str]]:
    """Group candidate lines by their leading shard id.

    Surrounding whitespace is stripped and blank lines are ignored. The first
    line with an invalid leading character rejects the whole batch.
    """

    grouped: Dict[str, List[str]] = {}
    for line_number, raw in enumerate(lines, start=1):
        line = raw.strip()
        if not line:
            continue
        if not is_valid_shard_id(line[0]):
            REDIRECTS_INGEST_REJECTIONS_TOTAL.inc()
            raise MalformedInputError(line, line_number)
        grouped.setdefault(line[0], []).append(line)
    return grouped


def ingest_lines(lines: Iterable[str], data_dir: Path | str) -> IngestResult:
    """Merge a batch of ``digest,url`` lines into the store.

    The batch is fully read and validated before any shard is written, so a
    malformed line leaves every shard untouched. Shards are merged one after
    another in id order; an IO error stops the run with the shards merged so
    far already replaced.
    """

    grouped = group_lines_by_shard(lines)
    result = IngestResult()
    for shard_id in sorted(grouped):
        result.merges.append(merge_into_shard(data_dir, shard_id, grouped[shard_id]))
    logger.info(
        "Ingested batch: shards=%d added=%d skipped=%d",
        result.shards_touched,
        result.records_added,
        result.records_skipped,
    )
    return result


@contextmanager
def read_input_lines(
    source: Path | str | TextIO,
    codec: CompressionCodec | None = None,
) -> Iterator[Iterator[str]]:
    """Yield an iterator over candidate lines from a file or an open stream.

    Files may be compressed; the codec is inferred from the suffix unless
    given explicitly.
    """

    if isinstance(source, (str, Path)):
        with open_text_input(source, codec) as fp:
            yield iter_stream_lines(fp)
    else:
        yield iter_stream_lines(source)
