"""Repeat library construction and soft-masking stages."""

from __future__ import annotations

import shutil
from pathlib import Path
from typing import Optional

from genomeannot.core.pipeline_types import Action, LocalTask
from genomeannot.core.resolver import ResolvedSettings
from genomeannot.external.repeatmasker import RepeatMasker
from genomeannot.external.repeatmodeler import RepeatModeler
from genomeannot.utils.logging import get_logger

logger = get_logger("steps.repeats")


def build_repeat_library(denovo: Path, combined: Path, extra: Optional[Path] = None) -> Path:
    """Write the RepeatMasker library: the de novo families plus ``extra`` if it exists."""
    combined.parent.mkdir(parents=True, exist_ok=True)
    if extra is not None and extra.is_file():
        logger.info(f"Merging de novo library with {extra}")
        with open(combined, "wb") as out_f:
            for source in (denovo, extra):
                with open(source, "rb") as in_f:
                    shutil.copyfileobj(in_f, out_f)
    else:
        if extra is not None:
            logger.warning(f"Extra repeat library {extra} not found; using de novo library alone")
        shutil.copyfile(denovo, combined)
    return combined


def publish_softmasked(masked: Path, softmasked: Path) -> Path:
    """Copy RepeatMasker's ``.masked`` output to the ``.softmasked`` name used downstream."""
    shutil.copyfile(masked, softmasked)
    logger.info(f"Softmasked genome: {softmasked}")
    return softmasked


def repeat_modeler(settings: ResolvedSettings) -> list[Action]:
    """Stage 2: BuildDatabase + RepeatModeler."""
    cfg = settings.config
    paths = settings.paths
    tool = RepeatModeler(
        engine=cfg.repeat.engine, threads=settings.threads, extra_args=cfg.repeat.extra_args
    )
    return [
        tool.build_database(paths.genome, cfg.genome_name, paths.repeat_modeler_dir),
        tool.model(cfg.genome_name, paths.repeat_modeler_dir),
    ]


def repeat_masker(settings: ResolvedSettings) -> list[Action]:
    """Stage 3: merge libraries, soft-mask, publish the softmasked genome."""
    paths = settings.paths
    extra = paths.extra_library
    library_desc = "Preparing combined repeat library"
    if extra is not None:
        library_desc += f" (with {extra.name})"
    return [
        LocalTask(
            library_desc,
            lambda: build_repeat_library(paths.denovo_library, paths.combined_library, extra),
        ),
        RepeatMasker(threads=settings.threads).soft_mask(
            paths.genome, paths.combined_library, paths.repeat_masker_dir
        ),
        LocalTask(
            f"Copying {paths.masked_genome.name} to {paths.softmasked_genome.name}",
            lambda: publish_softmasked(paths.masked_genome, paths.softmasked_genome),
        ),
    ]
