"""Shared plumbing for the redirect store command-line tools."""

from __future__ import annotations

import argparse
import logging
import sys

from .config import StoreConfig, resolve_config


def select_log_level(verbosity: int) -> int:
    """Map a ``-v`` count to a logging level; errors are always shown."""

    if verbosity <= 1:
        return logging.ERROR
    if verbosity == 2:
        return logging.WARNING
    if verbosity == 3:
        return logging.INFO
    return logging.DEBUG


def setup_logging(verbosity: int, tool: str) -> None:
    logging.basicConfig(
        level=select_log_level(verbosity),
        format=f"%(levelname)s {tool} %(message)s",
        handlers=[logging.StreamHandler(sys.stderr)],
        force=True,
    )


def add_common_arguments(parser: argparse.ArgumentParser) -> None:
    parser.add_argument("-v", "--verbose", action="count", default=0, help="Level of verbosity (repeatable).")
    parser.add_argument("--config", default=None, help="Optional config file (json or yaml).")
    parser.add_argument("--data-dir", default=None, help="Directory holding the shard files.")


def config_from_args(args: argparse.Namespace) -> StoreConfig:
    return resolve_config(config_path=args.config, data_dir=args.data_dir)
