"""Pure shard addressing for the redirect store.

A record lives in the shard named after the first character of its digest.
The id alphabet is exactly the set of characters the base-32 digest encoding
can start with, so every digest maps to one of the 32 shards.
"""

from __future__ import annotations

import re
import string
from pathlib import Path, PurePath

SHARD_IDS: tuple[str, ...] = tuple(sorted("234567" + string.ascii_uppercase))
SHARD_ID_SET: frozenset[str] = frozenset(SHARD_IDS)
SHARD_COUNT = len(SHARD_IDS)

SHARD_FILE_PREFIX = "redirects-"
SHARD_FILE_SUFFIX = ".csv"
SHARD_FILE_RE = re.compile(r"^redirects-(.)\.csv$")


def is_valid_shard_id(value: str) -> bool:
    """Return True if ``value`` is one of the 32 shard ids."""

    return value in SHARD_ID_SET


def _validate_shard_id(shard_id: str) -> str:
    if not is_valid_shard_id(shard_id):
        raise ValueError(f"Invalid shard id: {shard_id!r}")
    return shard_id


def shard_id_for_digest(digest: str) -> str:
    """Return the shard id for a digest (its first character)."""

    if not digest:
        raise ValueError("Cannot derive a shard id from an empty digest.")
    return digest[0]


def shard_file_name(shard_id: str) -> str:
    """Return the file name of a shard, e.g. ``redirects-A.csv``."""

    return f"{SHARD_FILE_PREFIX}{_validate_shard_id(shard_id)}{SHARD_FILE_SUFFIX}"


def shard_path(data_dir: Path | str, shard_id: str) -> Path:
    """Return the path of a shard file inside ``data_dir``."""

    return Path(data_dir) / shard_file_name(shard_id)


def is_valid_shard_file_name(name: str | PurePath) -> bool:
    """Return True if ``name`` (or a path's final component) names a shard."""

    if isinstance(name, PurePath):
        name = name.name
    match = SHARD_FILE_RE.match(name)
    if match is None:
        return False
    return is_valid_shard_id(match.group(1))
