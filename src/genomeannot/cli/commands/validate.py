"""Installation validation command."""

from __future__ import annotations

import sys
from pathlib import Path
from typing import Optional

import click

from genomeannot import __version__
from genomeannot.cli.exit_codes import EXIT_ERROR
from genomeannot.exceptions import GenomeAnnotError
from genomeannot.utils.dependency_checker import DependencyChecker
from genomeannot.utils.logging import get_logger

from ..common_options import settings_options
from ..pipeline import build_pipeline, configure_logging, load_effective_config


@click.command()
@settings_options
def validate(
    config: Optional[Path],
    genome: Optional[Path],
    work_dir: Optional[Path],
    verbose: int,
) -> None:
    """Validate the configuration and the external tool environment."""
    click.echo("Validating genomeannot setup...")
    try:
        cfg = load_effective_config(config, genome, work_dir)
        configure_logging(cfg, verbose)
        pipeline = build_pipeline(cfg)
    except GenomeAnnotError as exc:
        get_logger("cli").error(f"Pipeline error: {exc}")
        sys.exit(EXIT_ERROR)

    settings = pipeline.settings
    issues = [f"Input not found: {m}" for m in pipeline.missing_inputs()]
    checker = DependencyChecker(
        cfg.environments,
        needs_alignment=settings.evidence.needs_alignment,
        image=settings.paths.braker_image,
    )
    tools_ok = checker.check_all()

    for line in checker.report_lines():
        click.echo(f"  {line}")
    if issues or not tools_ok:
        click.echo("✗ Issues found:")
        for issue in issues:
            click.echo(f"  - {issue}")
        sys.exit(EXIT_ERROR)
    click.echo("✓ All checks passed!")
    click.echo(f"  genomeannot version: {__version__}")
    click.echo(f"  BRAKER3 mode: {settings.mode.value}")
