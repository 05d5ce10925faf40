"""`build-image` subcommand: fetch the BRAKER3 container image."""

from __future__ import annotations

import sys
from pathlib import Path
from typing import Optional

import click

from genomeannot.cli.exit_codes import EXIT_ERROR
from genomeannot.exceptions import GenomeAnnotError
from genomeannot.external import Apptainer, ToolInvoker
from genomeannot.utils.logging import get_logger

from ..common_options import settings_options
from ..pipeline import configure_logging, load_effective_config
from .run import report_error


def build_image(cfg, invoker: Optional[ToolInvoker] = None) -> Optional[Path]:
    """Build the image unless it already exists. Returns the built path, or None."""
    from genomeannot.core.resolver import resolve_settings

    settings = resolve_settings(cfg)
    image = settings.paths.braker_image
    if image.exists():
        get_logger("cli").info(f"Container image already present: {image}")
        return None
    invoker = invoker or ToolInvoker(cfg.environments)
    invoker.invoke(Apptainer().build(image, cfg.braker.image_source), "build-image")
    return image


@click.command(name="build-image")
@settings_options
def build_image_command(
    config: Optional[Path],
    genome: Optional[Path],
    work_dir: Optional[Path],
    verbose: int,
) -> None:
    """Build the BRAKER3 Apptainer image (no-op when it exists)."""
    logger = get_logger("cli")
    try:
        cfg = load_effective_config(config, genome, work_dir)
        configure_logging(cfg, verbose)
        image = build_image(cfg)
    except GenomeAnnotError as exc:
        report_error(logger, exc)
        sys.exit(EXIT_ERROR)
    if image is None:
        click.echo("Container image already present; nothing to do")
    else:
        click.echo(f"Container image built: {image}")
