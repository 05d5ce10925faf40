"""`clean` subcommand implementation."""

from __future__ import annotations

import sys
from pathlib import Path
from typing import Optional

import click

from genomeannot.cli.exit_codes import EXIT_ERROR
from genomeannot.exceptions import GenomeAnnotError
from genomeannot.utils.logging import get_logger

from ..common_options import settings_options
from ..pipeline import build_pipeline, configure_logging, load_effective_config


@click.command()
@settings_options
@click.option("--all", "include_cached", is_flag=True, help="Also remove the cached container image")
@click.option("--stage", "stage_name", default=None, help="Only reset this stage (marker and output dir)")
def clean(
    config: Optional[Path],
    genome: Optional[Path],
    work_dir: Optional[Path],
    verbose: int,
    include_cached: bool,
    stage_name: Optional[str],
) -> None:
    """Remove completion markers and stage outputs."""
    if include_cached and stage_name:
        raise click.UsageError("--all and --stage cannot be combined")

    logger = get_logger("cli")
    try:
        cfg = load_effective_config(config, genome, work_dir)
        configure_logging(cfg, verbose)
        pipeline = build_pipeline(cfg)
        if stage_name:
            cleared = pipeline.clean_stage(stage_name)
            click.echo(f"Reset stage(s): {', '.join(cleared)}")
        else:
            removed = pipeline.clean(include_cached=include_cached)
            for path in removed:
                click.echo(f"Removed {path}")
            if not removed:
                click.echo("Nothing to clean")
    except GenomeAnnotError as exc:
        logger.error(f"Pipeline error: {exc}")
        sys.exit(EXIT_ERROR)
