"""Resolve retweet logs against tweet URLs stored in the redirect store."""

from __future__ import annotations

import argparse
import logging
import sys
from typing import Iterable

from .cli_common import add_common_arguments, config_from_args, setup_logging
from .extract import build_status_index, extract_retweets
from .ingest import read_input_lines

logger = logging.getLogger("redirects_extract")


def _parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Extract author/retweeted-author status pairs.")
    add_common_arguments(parser)
    parser.add_argument("-p", "--path", required=True, help="Retweet log (url,...,digest lines); may be compressed.")
    return parser.parse_args(argv)


def main(argv: Iterable[str] | None = None) -> None:
    args = _parse_args(list(argv) if argv is not None else None)
    setup_logging(args.verbose, "redirects-extract")
    try:
        config = config_from_args(args)
        index = build_status_index(config.data_dir)
        with read_input_lines(args.path) as lines:
            for link in extract_retweets(lines, index):
                print(link.to_line())
    except (OSError, ValueError) as exc:
        logger.error('stage="extract" error="%s"', exc)
        sys.exit(1)
    sys.exit(0)


if __name__ == "__main__":  # pragma: no cover
    main()
