"""Merge candidate ``digest,url`` lines into the redirect store."""

from __future__ import annotations

import argparse
import logging
import sys
from typing import Iterable

from .cli_common import add_common_arguments, config_from_args, setup_logging
from .compression import CompressionCodec
from .ingest import IngestResult, MalformedInputError, ingest_lines, read_input_lines
from .metrics import dump_metrics

logger = logging.getLogger("redirects_add")


def _parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Add redirect records to the sharded store.")
    add_common_arguments(parser)
    parser.add_argument("--input", default=None, help="Input file of digest,url lines (default: stdin).")
    parser.add_argument(
        "--compression",
        choices=[codec.value for codec in CompressionCodec],
        default=None,
        help="Input compression; inferred from the file suffix when omitted.",
    )
    return parser.parse_args(argv)


def _report(result: IngestResult) -> None:
    for merge in result.merges:
        logger.info(
            "shard=%s added=%d skipped=%d total=%d",
            merge.shard_id,
            merge.added,
            merge.skipped,
            merge.total_lines,
        )
    print(
        f"Merged {result.records_added} new record(s) into {result.shards_touched} shard(s), "
        f"skipped {result.records_skipped} duplicate(s)."
    )


def main(argv: Iterable[str] | None = None) -> None:
    args = _parse_args(list(argv) if argv is not None else None)
    setup_logging(args.verbose, "redirects-add")
    try:
        config = config_from_args(args)
    except (OSError, ValueError) as exc:
        logger.error('stage="config" error="%s"', exc)
        sys.exit(1)

    codec = CompressionCodec(args.compression) if args.compression else None
    source = args.input if args.input is not None else sys.stdin
    try:
        with read_input_lines(source, codec) as lines:
            result = ingest_lines(lines, config.data_dir)
    except (MalformedInputError, UnicodeDecodeError) as exc:
        logger.error('stage="input" error="%s"', exc)
        sys.exit(1)
    except OSError as exc:
        logger.error('stage="merge" error="%s"', exc)
        sys.exit(1)
    finally:
        dump_metrics(config.metrics_textfile)

    _report(result)
    sys.exit(0)


if __name__ == "__main__":  # pragma: no cover
    main()
