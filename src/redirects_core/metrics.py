"""Prometheus metrics for redirect store writes and validation."""

from __future__ import annotations

import logging
from pathlib import Path

from prometheus_client import REGISTRY, Counter, Histogram, write_to_textfile

logger = logging.getLogger(__name__)

REDIRECTS_MERGE_RECORDS_TOTAL = Counter(
    "redirects_merge_records_total",
    "Candidate records handled by shard merges",
    ["shard", "result"],
)

REDIRECTS_MERGE_SECONDS = Histogram(
    "redirects_merge_seconds",
    "Time spent merging a batch into one shard",
    ["shard"],
)

REDIRECTS_INGEST_REJECTIONS_TOTAL = Counter(
    "redirects_ingest_rejections_total",
    "Ingestion batches rejected because of malformed input",
)

REDIRECTS_VALIDATED_LINES_TOTAL = Counter(
    "redirects_validated_lines_total",
    "Shard lines checked by the validator",
    ["status"],
)

REDIRECTS_SHARD_VALIDATIONS_TOTAL = Counter(
    "redirects_shard_validations_total",
    "Shard validation runs",
    ["result"],
)

REDIRECTS_STORE_FINDINGS_TOTAL = Counter(
    "redirects_store_findings_total",
    "Store level validation findings",
    ["kind"],
)

REDIRECTS_VALIDATION_SECONDS = Histogram(
    "redirects_validation_seconds",
    "Time spent validating a single shard",
)


def dump_metrics(path: Path | None) -> None:
    """Write the default registry in text format for a textfile collector.

    A failed write is logged and does not affect the caller's outcome.
    """

    if path is None:
        return
    try:
        write_to_textfile(str(path), REGISTRY)
    except OSError as exc:
        logger.error("Failed to write metrics to %s: %s", path, exc)


__all__ = [
    "REDIRECTS_MERGE_RECORDS_TOTAL",
    "REDIRECTS_MERGE_SECONDS",
    "REDIRECTS_INGEST_REJECTIONS_TOTAL",
    "REDIRECTS_VALIDATED_LINES_TOTAL",
    "REDIRECTS_SHARD_VALIDATIONS_TOTAL",
    "REDIRECTS_STORE_FINDINGS_TOTAL",
    "REDIRECTS_VALIDATION_SECONDS",
    "dump_metrics",
]
