"""Validate redirect shards and the store directory layout.

Exits with status 1 if any digest fails re-verification, any shard is not
strictly sorted, or the directory does not hold exactly the 32 expected
shard files. Offending lines are printed to stdout; diagnostics go to the
log on stderr.
"""

from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path
from typing import Iterable

from .cli_common import add_common_arguments, config_from_args, setup_logging
from .metrics import dump_metrics
from .validator import ShardValidationReport, validate_shard, validate_store

logger = logging.getLogger("redirects_validate")


def _parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Validate redirect store shards.")
    add_common_arguments(parser)
    parser.add_argument("-p", "--path", default=None, help="Validate a single shard file instead of the whole store.")
    return parser.parse_args(argv)


def displayable_line(line: str) -> str:
    """Render bytes that were not valid UTF-8 as ``\\xNN`` escapes."""

    return line.encode("utf-8", "surrogateescape").decode("utf-8", "backslashreplace")


def print_shard_report(report: ShardValidationReport) -> bool:
    """Log and print the findings for one shard; return True if it is valid."""

    if not report.is_sorted:
        logger.error("File is not sorted: %s", report.path)
    if report.invalid_lines:
        logger.error("Invalid content in %s (%d lines)", report.path, len(report.invalid_lines))
        for line in report.invalid_lines:
            print(displayable_line(line))
    return report.is_valid


def _validate_single(path: Path) -> bool:
    return print_shard_report(validate_shard(path))


def _validate_all(data_dir: Path) -> bool:
    report = validate_store(data_dir)
    for finding in report.findings:
        logger.error("%s", finding.message)
    shards_valid = True
    for shard_report in report.shards:
        if not print_shard_report(shard_report):
            shards_valid = False
    return shards_valid and not report.findings


def main(argv: Iterable[str] | None = None) -> None:
    args = _parse_args(list(argv) if argv is not None else None)
    setup_logging(args.verbose, "redirects-validate")
    try:
        config = config_from_args(args)
    except (OSError, ValueError) as exc:
        logger.error('stage="config" error="%s"', exc)
        sys.exit(1)

    try:
        if args.path is not None:
            valid = _validate_single(Path(args.path))
        else:
            valid = _validate_all(config.data_dir)
    except (OSError, UnicodeDecodeError) as exc:
        logger.error('stage="validate" error="%s"', exc)
        sys.exit(1)
    finally:
        dump_metrics(config.metrics_textfile)

    sys.exit(0 if valid else 1)


if __name__ == "__main__":  # pragma: no cover
    main()
