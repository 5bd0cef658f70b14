"""fieldguard CLI entry point."""

import logging
from pathlib import Path

import click

from fieldguard.config import FieldGuardConfig


@click.group()
@click.option(
    "--metadata-path",
    "metadata_paths",
    multiple=True,
    type=click.Path(path_type=Path),
    help="Metadata root directory. Repeat to layer overrides (default: FIELDGUARD_METADATA_PATH or ./metadata).",
)
@click.option(
    "--plugin",
    "plugins",
    multiple=True,
    help="Module to import before running, so it can register field validators.",
)
@click.option(
    "--log-level",
    default=None,
    type=click.Choice(["DEBUG", "INFO", "WARNING", "ERROR"], case_sensitive=False),
    help="Logging level (default: FIELDGUARD_LOG_LEVEL or WARNING).",
)
@click.pass_context
def cli(ctx, metadata_paths, plugins, log_level):
    """fieldguard: metadata-driven field validation CLI."""
    config = FieldGuardConfig.from_env(Path.cwd())
    if metadata_paths:
        config.metadata_paths = list(metadata_paths)
    if plugins:
        config.plugins = [*config.plugins, *plugins]
    if log_level:
        config.log_level = log_level.upper()

    logging.basicConfig(
        level=config.log_level,
        format="%(levelname)s %(name)s: %(message)s",
    )
    ctx.obj = config


# Register subcommands
from fieldguard.cli.check_cmd import check, resolve  # noqa: E402
from fieldguard.cli.metadata_cmd import metadata  # noqa: E402

cli.add_command(metadata)
cli.add_command(check)
cli.add_command(resolve)
