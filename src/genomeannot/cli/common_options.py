"""Shared Click options for genomeannot CLI commands.

Every subcommand that needs a resolved configuration takes the same
``-c/-g/-w`` trio so that a config file can be reused across commands.
"""

from __future__ import annotations

from pathlib import Path
from typing import Callable, TypeVar

import click

F = TypeVar("F", bound=Callable[..., None])


def config_option(func: F) -> F:
    """Configuration file option."""
    return click.option(
        "-c",
        "--config",
        type=click.Path(exists=True, dir_okay=False, path_type=Path),
        help="Configuration file (YAML)",
    )(func)


def genome_option(func: F) -> F:
    """Input assembly option."""
    return click.option(
        "-g",
        "--genome",
        type=click.Path(path_type=Path),
        default=None,
        help="Input genome assembly (FASTA); overrides the config file",
    )(func)


def work_dir_option(func: F) -> F:
    """Working directory option."""
    return click.option(
        "-w",
        "--work-dir",
        type=click.Path(file_okay=False, path_type=Path),
        default=None,
        help="Working directory for stage outputs and markers [default: .]",
    )(func)


def threads_option(func: F) -> F:
    """Threads option."""
    return click.option(
        "-t",
        "--threads",
        type=click.IntRange(min=1),
        default=None,
        help="Number of threads passed to every tool [default: 16]",
    )(func)


def verbose_option(func: F) -> F:
    """Verbosity option."""
    return click.option(
        "-v",
        "--verbose",
        count=True,
        help="Increase log verbosity (-v for INFO, -vv for DEBUG)",
    )(func)


def log_file_option(func: F) -> F:
    """Log file option."""
    return click.option(
        "--log-file",
        type=click.Path(dir_okay=False, path_type=Path),
        help="Path for log file output",
    )(func)


def dry_run_option(func: F) -> F:
    """Dry run option."""
    return click.option(
        "--dry-run",
        is_flag=True,
        help="Show the stages and commands that would run, without executing",
    )(func)


def settings_options(func: F) -> F:
    """Options needed to resolve settings (config file plus path overrides)."""
    for decorator in reversed([config_option, genome_option, work_dir_option, verbose_option]):
        func = decorator(func)
    return func


def common_pipeline_options(func: F) -> F:
    """Apply all options of the ``run`` command.

    Usage:
        @click.command()
        @common_pipeline_options
        def my_command(config, genome, work_dir, verbose, threads, log_file, dry_run):
            pass
    """
    decorators = [
        settings_options,
        threads_option,
        log_file_option,
        dry_run_option,
    ]
    for decorator in reversed(decorators):
        func = decorator(func)
    return func
