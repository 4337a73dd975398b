"""Line-oriented IO for redirect shard files.

Shard format:

    <digest>,<url>\n
    <digest>,<url>\n
    ...

UTF-8 text, one record per line, strictly ascending by the full line. Lines end
at ``\n`` only; a ``\r`` before it is dropped, a lone ``\r`` is part of the
line. Writers always emit ``\n``. Bytes that are not valid UTF-8 are carried
through as surrogate escapes so a damaged shard can still be read and merged.

Shards are never modified in place. ``AtomicShardWriter`` writes the new
content to a temporary file in the shard's directory and renames it over the
shard on success, so a reader sees either the old or the new shard, never a
partial one.
"""

from __future__ import annotations

import logging
import os
import tempfile
from pathlib import Path
from types import TracebackType
from typing import Iterable, Iterator, TextIO, Type

from .routing import SHARD_IDS, shard_path

logger = logging.getLogger(__name__)

ENCODING = "utf-8"
ERRORS = "surrogateescape"


def strip_line_terminator(line: str) -> str:
    if line.endswith("\n"):
        line = line[:-1]
        if line.endswith("\r"):
            line = line[:-1]
    return line


def is_decodable(text: str) -> bool:
    """Return False if ``text`` carries bytes that were not valid UTF-8."""

    try:
        text.encode(ENCODING)
    except UnicodeEncodeError:
        return False
    return True


def iter_lines(path: Path | str) -> Iterator[str]:
    """Yield the lines of a shard file without their terminators."""

    with open(path, "r", encoding=ENCODING, errors=ERRORS, newline="\n") as fp:
        for line in fp:
            yield strip_line_terminator(line)


def iter_stream_lines(stream: Iterable[str]) -> Iterator[str]:
    """Yield lines of an already opened text stream without terminators."""

    for line in stream:
        yield strip_line_terminator(line)


class AtomicShardWriter:
    """Context manager writing a shard through a temporary file.

    On clean exit the temporary file is flushed, synced and moved over the
    target path with ``os.replace``. If the block raises, the temporary file
    is removed and the target is left as it was.
    """

    def __init__(self, target: Path | str) -> None:
        self._target = Path(target)
        self._fp: TextIO | None = None
        self._tmp_path: Path | None = None
        self._committed = False
        self.lines_written = 0

    @property
    def target(self) -> Path:
        return self._target

    def __enter__(self) -> "AtomicShardWriter":
        tmp = tempfile.NamedTemporaryFile(
            mode="w",
            encoding=ENCODING,
            errors=ERRORS,
            newline="\n",
            dir=self._target.parent,
            prefix=f".{self._target.name}.",
            suffix=".tmp",
            delete=False,
        )
        self._fp = tmp
        self._tmp_path = Path(tmp.name)
        return self

    def __exit__(
        self,
        exc_type: Type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        if exc_type is None:
            self._commit()
        else:
            self._discard()

    def write_line(self, line: str) -> None:
        if self._fp is None or self._committed:
            raise ValueError("AtomicShardWriter is not open.")
        if "\n" in line:
            raise ValueError(f"Shard lines must not contain a newline: {line!r}")
        self._fp.write(line)
        self._fp.write("\n")
        self.lines_written += 1

    def write_lines(self, lines: Iterable[str]) -> int:
        for line in lines:
            self.write_line(line)
        return self.lines_written

    def _commit(self) -> None:
        assert self._fp is not None and self._tmp_path is not None
        try:
            self._fp.flush()
            os.fsync(self._fp.fileno())
            self._fp.close()
            os.replace(self._tmp_path, self._target)
        except BaseException:
            self._discard()
            raise
        self._committed = True
        logger.debug("Replaced %s (%d lines)", self._target, self.lines_written)

    def _discard(self) -> None:
        if self._fp is not None and not self._fp.closed:
            self._fp.close()
        if self._tmp_path is not None:
            try:
                self._tmp_path.unlink()
            except FileNotFoundError:
                pass
            logger.debug("Discarded temporary file for %s", self._target)


def init_store(data_dir: Path | str) -> list[Path]:
    """Create any missing shard as an empty file; existing shards are kept.

    Returns the paths that were created.
    """

    root = Path(data_dir)
    root.mkdir(parents=True, exist_ok=True)
    created: list[Path] = []
    for shard_id in SHARD_IDS:
        path = shard_path(root, shard_id)
        if path.exists():
            continue
        path.touch()
        created.append(path)
    if created:
        logger.info("Created %d empty shard(s) in %s", len(created), root)
    return created
