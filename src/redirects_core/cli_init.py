"""Create the empty shard files of a new redirect store."""

from __future__ import annotations

import argparse
import logging
import sys
from typing import Iterable

from .cli_common import add_common_arguments, config_from_args, setup_logging
from .shard_io import init_store

logger = logging.getLogger("redirects_init")


def _parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Create missing redirect shard files.")
    add_common_arguments(parser)
    return parser.parse_args(argv)


def main(argv: Iterable[str] | None = None) -> None:
    args = _parse_args(list(argv) if argv is not None else None)
    setup_logging(args.verbose, "redirects-init")
    try:
        config = config_from_args(args)
        created = init_store(config.data_dir)
    except (OSError, ValueError) as exc:
        logger.error('stage="init" error="%s"', exc)
        sys.exit(1)

    print(f"Created {len(created)} shard file(s) in {config.data_dir}")
    sys.exit(0)


if __name__ == "__main__":  # pragma: no cover
    main()
