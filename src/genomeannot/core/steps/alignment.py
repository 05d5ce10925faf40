"""RNA-seq alignment sub-chain (only applicable for raw reads)."""

from __future__ import annotations

import re
from pathlib import Path

from genomeannot.core.pipeline_types import Action, LocalTask
from genomeannot.core.resolver import ResolvedSettings
from genomeannot.external.samtools import Samtools
from genomeannot.external.star import Star
from genomeannot.utils.logging import get_logger

logger = get_logger("steps.alignment")

_SUMMARY_PATTERN = re.compile(r"Uniquely mapped|mapped to multiple|unmapped")


def mapping_summary(log_final: Path) -> list[str]:
    """Return the mapping-rate lines of STAR's Log.final.out (empty if absent)."""
    if not log_final.is_file():
        return []
    with open(log_final, "r", errors="replace") as f:
        return [line.strip() for line in f if _SUMMARY_PATTERN.search(line)]


def _log_mapping_summary(log_final: Path) -> None:
    lines = mapping_summary(log_final)
    if lines:
        logger.info("STAR mapping summary:")
        for line in lines:
            logger.info(f"  {line}")


def _star(settings: ResolvedSettings) -> Star:
    star_cfg = settings.config.star
    return Star(
        sa_index_nbases=star_cfg.sa_index_nbases,
        threads=settings.threads,
        extra_args=star_cfg.extra_args,
    )


def star_index(settings: ResolvedSettings) -> list[Action]:
    """Stage 5: STAR genome index from the soft-masked genome."""
    paths = settings.paths
    return [_star(settings).generate_index(paths.softmasked_genome, paths.star_index_dir)]


def star_align(settings: ResolvedSettings) -> list[Action]:
    """Stage 6: STAR alignment, BAM index and mapping summary."""
    paths = settings.paths
    evidence = settings.evidence
    read2 = evidence.rna_r2 if evidence.paired else None
    align = _star(settings).align(paths.star_index_dir, evidence.rna_r1, paths.star_dir, read2=read2)
    log_final = paths.star_dir / "Log.final.out"
    return [
        align,
        Samtools(threads=settings.threads).index_bam(paths.final_bam, log_file=align.log_file),
        LocalTask("Reporting mapping summary", lambda: _log_mapping_summary(log_final)),
    ]
