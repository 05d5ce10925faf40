"""Shared pipeline execution helpers for the CLI."""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

import click

from genomeannot.config import Config, load_config, save_config
from genomeannot.core.pipeline_types import ExecutionResult
from genomeannot.utils.display import ConsoleFormatter, print_formatted
from genomeannot.utils.logging import level_from_name, setup_logging

EFFECTIVE_CONFIG_NAME = "genomeannot.config.yaml"


@dataclass
class PipelineOptions:
    """Container for pipeline execution options."""

    config_path: Optional[Path]
    genome: Optional[Path] = None  # None means use config
    work_dir: Optional[Path] = None  # None means use config or "."
    threads: Optional[int] = None  # None means use config or default
    target: str = "all"
    dry_run: bool = False
    log_file: Optional[Path] = None
    verbose: int = 0


def load_effective_config(
    config_path: Optional[Path],
    genome: Optional[Path] = None,
    work_dir: Optional[Path] = None,
    threads: Optional[int] = None,
) -> Config:
    """Load the config file and apply CLI overrides.

    Priority: CLI arg (if provided) > config file > hardcoded default. Paths
    given on the command line are relative to the current directory.
    """
    cfg = load_config(config_path) if config_path else Config()
    if genome is not None:
        cfg.genome = Path(os.path.abspath(genome))
    if work_dir is not None:
        cfg.work_dir = Path(os.path.abspath(work_dir))
    if threads is not None:
        cfg.threads = threads
    return cfg


def configure_logging(cfg: Config, verbose: int, log_file: Optional[Path] = None) -> None:
    """Apply verbosity: -v/-vv win over ``runtime.log_level``; CLI log file over config."""
    if verbose >= 2:
        level = logging.DEBUG
    elif verbose == 1:
        level = logging.INFO
    else:
        level = level_from_name(cfg.runtime.log_level)
    setup_logging(level=level, log_file=log_file or cfg.runtime.log_file)


def build_pipeline(cfg: Config):
    """Resolve settings and construct the executor."""
    from genomeannot.core.pipeline import Pipeline
    from genomeannot.core.resolver import resolve_settings

    return Pipeline(resolve_settings(cfg))


def show_dry_run(pipeline, result: ExecutionResult) -> None:
    formatter = ConsoleFormatter()
    click.echo(f"Dry run: target '{result.target}' (BRAKER3 mode: {result.mode})")
    click.echo(formatter.separator())
    click.echo(formatter.format_plan(result.records.values()))
    click.echo(formatter.separator())
    pending = [r for r in result.records.values() if r.status == "planned"]
    click.echo(f"{len(pending)} stage(s) would run, {len(result.skipped)} already completed")
    for missing in pipeline.missing_inputs():
        click.echo(f"Warning: input not found: {missing}", err=True)


def execute_pipeline(opts: PipelineOptions, logger: logging.Logger) -> ExecutionResult:
    """Execute the annotation pipeline with given options.

    Raises:
        GenomeAnnotError: configuration, dependency or tool failures.
    """
    cfg = load_effective_config(opts.config_path, opts.genome, opts.work_dir, opts.threads)
    configure_logging(cfg, opts.verbose, opts.log_file)

    pipeline = build_pipeline(cfg)
    settings = pipeline.settings
    logger.info(f"BRAKER3 mode: {settings.mode.value}")

    if opts.dry_run:
        result = pipeline.run(opts.target, dry_run=True)
        show_dry_run(pipeline, result)
        return result

    if pipeline.pending(opts.target):
        pipeline.preflight()

    try:
        save_config(cfg, settings.paths.work_dir / EFFECTIVE_CONFIG_NAME)
    except OSError as exc:
        logger.warning(f"Could not save config: {exc}")

    formatter = ConsoleFormatter()
    print_formatted(formatter.header())
    print_formatted(
        formatter.format_config(
            {
                "genome": settings.paths.genome,
                "species": cfg.species,
                "mode": settings.mode.value,
                "target": opts.target,
                "work_dir": settings.paths.work_dir,
                "threads": cfg.threads,
            }
        )
    )
    print_formatted(formatter.separator())
    print_formatted(formatter.start_message())

    result = pipeline.run(opts.target)
    logger.debug(f"Stage summary: {result.summary()}")

    print_formatted(formatter.separator())
    if result.executed:
        print_formatted("Ran: " + ", ".join(result.executed))
    if result.skipped:
        print_formatted("Already completed: " + ", ".join(result.skipped))
    print_formatted(formatter.success_message(result.mode))
    if result.target == "all" or opts.target == pipeline.resolve_target(None).name:
        print_formatted(formatter.format_outputs(pipeline.key_outputs()))
    print_formatted(formatter.separator("="))
    return result
