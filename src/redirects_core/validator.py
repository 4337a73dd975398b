"""Read-only validation of shard files and of the whole store directory.

Validation reports problems instead of raising them. Only IO failures, such
as a missing shard directory, propagate as exceptions.
"""

from __future__ import annotations

import logging
import time
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import List

from .digest import DigestComputer
from .metrics import (
    REDIRECTS_SHARD_VALIDATIONS_TOTAL,
    REDIRECTS_STORE_FINDINGS_TOTAL,
    REDIRECTS_VALIDATED_LINES_TOTAL,
    REDIRECTS_VALIDATION_SECONDS,
)
from .records import parse_record_line
from .redirect_html import render_redirect
from .routing import SHARD_COUNT, is_valid_shard_file_name
from .shard_io import is_decodable, iter_lines

logger = logging.getLogger(__name__)


@dataclass
class ShardValidationReport:
    """Findings for a single shard file."""

    path: Path
    invalid_lines: List[str] = field(default_factory=list)
    is_sorted: bool = True
    line_count: int = 0

    @property
    def is_valid(self) -> bool:
        return self.is_sorted and not self.invalid_lines


class FindingKind(str, Enum):
    TOO_MANY_FILES = "too_many_files"
    TOO_FEW_FILES = "too_few_files"
    INVALID_FILE_NAME = "invalid_file_name"


@dataclass(frozen=True)
class StoreFinding:
    kind: FindingKind
    message: str
    path: Path | None = None


@dataclass
class StoreValidationReport:
    """Findings for a store directory and every file in it."""

    data_dir: Path
    entry_count: int = 0
    findings: List[StoreFinding] = field(default_factory=list)
    shards: List[ShardValidationReport] = field(default_factory=list)

    @property
    def is_valid(self) -> bool:
        return not self.findings and all(report.is_valid for report in self.shards)


def validate_shard(path: Path | str, computer: DigestComputer | None = None) -> ShardValidationReport:
    """Re-derive every digest in a shard and check strict ascending order."""

    shard = Path(path)
    digest_computer = computer or DigestComputer()
    report = ShardValidationReport(path=shard)
    previous: str | None = None
    start = time.perf_counter()

    for line in iter_lines(shard):
        report.line_count += 1
        if previous is not None and previous >= line:
            report.is_sorted = False
        previous = line

        record = parse_record_line(line)
        if record is None or not is_decodable(line):
            report.invalid_lines.append(line)
            REDIRECTS_VALIDATED_LINES_TOTAL.labels(status="malformed").inc()
            continue

        computed = digest_computer.digest_bytes(render_redirect(record.url))
        if computed != record.digest:
            report.invalid_lines.append(line)
            REDIRECTS_VALIDATED_LINES_TOTAL.labels(status="mismatch").inc()
            logger.debug("Digest mismatch in %s: stored=%s computed=%s", shard, record.digest, computed)
        else:
            REDIRECTS_VALIDATED_LINES_TOTAL.labels(status="valid").inc()

    REDIRECTS_VALIDATION_SECONDS.observe(time.perf_counter() - start)
    REDIRECTS_SHARD_VALIDATIONS_TOTAL.labels(result="valid" if report.is_valid else "invalid").inc()
    return report


def _add_finding(report: StoreValidationReport, finding: StoreFinding) -> None:
    report.findings.append(finding)
    REDIRECTS_STORE_FINDINGS_TOTAL.labels(kind=finding.kind.value).inc()


def validate_store(data_dir: Path | str) -> StoreValidationReport:
    """Validate the directory layout and every shard file in it."""

    root = Path(data_dir)
    entries = sorted(root.iterdir())
    report = StoreValidationReport(data_dir=root, entry_count=len(entries))

    if len(entries) > SHARD_COUNT:
        _add_finding(
            report,
            StoreFinding(FindingKind.TOO_MANY_FILES, f"Too many files in data directory ({len(entries)})"),
        )
    elif len(entries) < SHARD_COUNT:
        _add_finding(
            report,
            StoreFinding(FindingKind.TOO_FEW_FILES, f"Too few files in data directory ({len(entries)})"),
        )

    computer = DigestComputer()
    for entry in entries:
        if not is_valid_shard_file_name(entry):
            _add_finding(
                report,
                StoreFinding(FindingKind.INVALID_FILE_NAME, f"Invalid file name: {entry.name}", path=entry),
            )
        if not entry.is_file():
            continue
        report.shards.append(validate_shard(entry, computer))

    logger.info(
        "Validated %s: entries=%d findings=%d shards=%d",
        root,
        report.entry_count,
        len(report.findings),
        len(report.shards),
    )
    return report
