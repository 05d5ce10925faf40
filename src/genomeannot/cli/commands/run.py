"""`run` subcommand implementation."""

from __future__ import annotations

import sys
from pathlib import Path
from typing import Optional

import click

from genomeannot.cli.exit_codes import EXIT_ERROR
from genomeannot.exceptions import GenomeAnnotError, StageError, ToolExecutionError
from genomeannot.utils.display import ConsoleFormatter
from genomeannot.utils.logging import get_logger, setup_logging

from ..common_options import common_pipeline_options
from ..pipeline import PipelineOptions, execute_pipeline


def report_error(logger, exc: GenomeAnnotError) -> None:
    """Log a pipeline error with the failing stage and its log file."""
    logger.debug(f"Pipeline error: {exc!r}")
    click.echo(ConsoleFormatter().error_message(str(exc)), err=True)
    if isinstance(exc, StageError) and exc.stage:
        click.echo(f"Failed stage: {exc.stage}", err=True)
    if isinstance(exc, ToolExecutionError) and exc.log_file:
        click.echo(f"See log: {exc.log_file}", err=True)


@click.command()
@click.argument("target", required=False, default="all")
@common_pipeline_options
def run(
    target: str,
    config: Optional[Path],
    genome: Optional[Path],
    work_dir: Optional[Path],
    verbose: int,
    threads: Optional[int],
    log_file: Optional[Path],
    dry_run: bool,
) -> None:
    """Run TARGET (a stage name, or "all") and any unfinished predecessors.

    Completed stages are skipped, so re-running resumes after a failure.
    """
    setup_logging()
    logger = get_logger("cli")

    try:
        opts = PipelineOptions(
            config_path=config,
            genome=genome,
            work_dir=work_dir,
            threads=threads,
            target=target,
            dry_run=dry_run,
            log_file=log_file,
            verbose=verbose,
        )
        execute_pipeline(opts, logger)
    except GenomeAnnotError as exc:
        report_error(logger, exc)
        sys.exit(EXIT_ERROR)
