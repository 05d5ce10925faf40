"""`steps` subcommand: stage table with applicability and completion status."""

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
def steps(
    config: Optional[Path],
    genome: Optional[Path],
    work_dir: Optional[Path],
    verbose: int,
) -> None:
    """List pipeline stages, whether they apply and whether they are done."""
    try:
        cfg = load_effective_config(config, genome, work_dir)
        configure_logging(cfg, verbose)
        pipeline = build_pipeline(cfg)
    except GenomeAnnotError as exc:
        get_logger("cli").error(f"Pipeline error: {exc}")
        sys.exit(EXIT_ERROR)

    click.echo(f"\nPipeline stages (BRAKER3 mode: {pipeline.settings.mode.value})")
    click.echo("-" * 60)
    for i, row in enumerate(pipeline.status(), 1):
        if not row["applicable"]:
            state = "n/a"
        elif row["satisfied"]:
            state = "done"
        else:
            state = "pending"
        click.echo(f"  {i}. {row['name']:<15} [{state:<7}] {row['description']}")
        if row["depends_on"]:
            click.echo(f"     after: {', '.join(row['depends_on'])}")
    click.echo("-" * 60)
