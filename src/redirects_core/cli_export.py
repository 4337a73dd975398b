"""Export commands for the redirect store."""

from __future__ import annotations

import click

from .cli_common import setup_logging
from .config import StoreConfig, resolve_config
from .export import iter_digests


@click.group()
@click.option("-v", "--verbose", count=True, help="Level of verbosity (repeatable).")
@click.option("--config", "config_path", type=click.Path(dir_okay=False), default=None)
@click.option("--data-dir", type=click.Path(file_okay=False), default=None)
@click.pass_context
def export(ctx: click.Context, verbose: int, config_path: str | None, data_dir: str | None) -> None:
    """Export data held by the redirect store."""

    setup_logging(verbose, "redirects-export")
    try:
        ctx.obj = resolve_config(config_path=config_path, data_dir=data_dir)
    except (OSError, ValueError) as exc:
        raise click.ClickException(f"Failed to load config: {exc}") from exc


@export.command()
@click.pass_obj
def digests(config: StoreConfig) -> None:
    """Print every stored digest, one per line, in shard order."""

    try:
        for digest in iter_digests(config.data_dir):
            click.echo(digest)
    except OSError as exc:
        raise click.ClickException(f"Export failed: {exc}") from exc


def main() -> None:
    export()


if __name__ == "__main__":  # pragma: no cover
    main()
