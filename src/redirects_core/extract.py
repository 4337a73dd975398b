"""Cross-reference retweet logs with status URLs stored in the redirect store.

The store maps digests to redirect targets. Targets that are tweet status
URLs give a digest -> (author, status id) lookup, which resolves the third
column of a retweet log (the digest of the retweeted status' redirect) back
to the retweeted author and status.
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass
from pathlib import Path
from typing import Dict, Iterable, Iterator

from .export import iter_shard_files
from .records import parse_record_line
from .shard_io import is_decodable, iter_lines

logger = logging.getLogger(__name__)

TWEET_URL_RE = re.compile(r"^https?://twitter\.com/([^/]+)/status/([0-9]+)(?:\?.+)?$")
MAX_STATUS_ID = 2**64 - 1


@dataclass(frozen=True, slots=True)
class StatusRef:
    author: str
    status_id: int


@dataclass(frozen=True, slots=True)
class RetweetLink:
    author: str
    retweeted_author: str
    status_id: int
    retweeted_status_id: int

    def to_line(self) -> str:
        return f"{self.author},{self.retweeted_author},{self.status_id},{self.retweeted_status_id}"


def parse_status_url(url: str) -> StatusRef | None:
    """Return the author and status id of a tweet URL, ignoring any query.

    Status ids are unsigned 64-bit integers; larger values do not match.
    """

    match = TWEET_URL_RE.fullmatch(url)
    if match is None:
        return None
    digits = match.group(2)
    if len(digits) > len(str(MAX_STATUS_ID)) or int(digits) > MAX_STATUS_ID:
        return None
    return StatusRef(author=match.group(1), status_id=int(digits))


def build_status_index(data_dir: Path | str) -> Dict[str, StatusRef]:
    """Map digests to status references for every tweet URL in the store."""

    index: Dict[str, StatusRef] = {}
    for path in iter_shard_files(data_dir):
        for line in iter_lines(path):
            record = parse_record_line(line)
            if record is None or not is_decodable(line):
                logger.error("Invalid line: %r", line)
                continue
            status = parse_status_url(record.url)
            if status is not None:
                index[record.digest] = status
    logger.info("Indexed %d status URLs from %s", len(index), data_dir)
    return index


def extract_retweets(log_lines: Iterable[str], index: Dict[str, StatusRef]) -> Iterator[RetweetLink]:
    """Yield links for retweet log rows whose digest resolves to a known status.

    Rows are ``url,<ignored>,digest[,...]``.
    """

    for line in log_lines:
        parts = line.split(",")
        if len(parts) < 3:
            logger.error("Invalid retweet line: %s", line)
            continue
        url, digest = parts[0], parts[2]
        status = parse_status_url(url)
        if status is None:
            continue
        retweeted = index.get(digest)
        if retweeted is None:
            continue
        yield RetweetLink(
            author=status.author,
            retweeted_author=retweeted.author,
            status_id=status.status_id,
            retweeted_status_id=retweeted.status_id,
        )
