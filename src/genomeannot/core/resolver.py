"""Derived-configuration resolution.

Turns user settings into absolute, execution-environment-independent paths
and the evidence/mode pair. Pure: paths are normalised with ``os.path.abspath``
and nothing on disk is read or written.
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

from genomeannot.config import Config
from genomeannot.core.evidence import EvidenceConfiguration, ExecutionMode, select_mode
from genomeannot.utils.logging import get_logger

STAR_BAM_NAME = "Aligned.sortedByCoord.out.bam"
COMBINED_LIBRARY_NAME = "combined_repeat_library.fa"

logger = get_logger("resolver")


@dataclass(frozen=True)
class ResolvedPaths:
    """Absolute paths for every file the stages read or write."""

    work_dir: Path
    marker_dir: Path
    genome: Path
    busco_raw_dir: Path
    busco_masked_dir: Path
    busco_downloads: Path
    repeat_modeler_dir: Path
    repeat_masker_dir: Path
    star_dir: Path
    star_index_dir: Path
    braker_dir: Path
    denovo_library: Path
    combined_library: Path
    extra_library: Optional[Path]
    masked_genome: Path
    softmasked_genome: Path
    protein_db: Optional[Path]
    protein_dir: Optional[Path]
    final_bam: Optional[Path]
    bam_dir: Optional[Path]
    braker_image: Path

    @property
    def stage_dirs(self) -> list[Path]:
        """Every per-stage output directory (what `clean` removes)."""
        return [
            self.busco_raw_dir,
            self.repeat_modeler_dir,
            self.repeat_masker_dir,
            self.busco_masked_dir,
            self.star_dir,
            self.braker_dir,
        ]


@dataclass(frozen=True)
class ResolvedSettings:
    """Validated configuration plus everything derived from it."""

    config: Config
    evidence: EvidenceConfiguration
    mode: ExecutionMode
    paths: ResolvedPaths

    @property
    def threads(self) -> int:
        return self.config.threads


def _abs(base: Path, value: Optional[Path]) -> Optional[Path]:
    if value is None:
        return None
    path = Path(os.path.expanduser(str(value)))
    if not path.is_absolute():
        path = base / path
    return Path(os.path.abspath(path))


def resolve_evidence(config: Config, base: Path) -> EvidenceConfiguration:
    """Resolve the optional evidence inputs to absolute paths."""
    ev = config.evidence
    rna_bam = _abs(base, ev.rna_bam)
    rna_r1 = _abs(base, ev.rna_r1)
    if rna_bam is not None and rna_r1 is not None:
        logger.warning(
            "Both evidence.rna_bam and evidence.rna_r1 are set; "
            "using the pre-aligned BAM and skipping STAR alignment"
        )
    return EvidenceConfiguration(
        protein_db=_abs(base, ev.protein_db),
        rna_r1=rna_r1,
        rna_r2=_abs(base, ev.rna_r2),
        rna_bam=rna_bam,
    )


def resolve_paths(config: Config, evidence: EvidenceConfiguration) -> ResolvedPaths:
    """Compute absolute paths for all stage inputs and outputs."""
    work_dir = Path(os.path.abspath(os.path.expanduser(str(config.work_dir))))
    out = config.outputs

    genome = _abs(work_dir, config.genome)
    repeat_modeler_dir = _abs(work_dir, out.repeat_modeler)
    repeat_masker_dir = _abs(work_dir, out.repeat_masker)
    star_dir = _abs(work_dir, out.star)

    if evidence.rna_bam is not None:
        final_bam: Optional[Path] = evidence.rna_bam
    elif evidence.rna_r1 is not None:
        final_bam = star_dir / STAR_BAM_NAME
    else:
        final_bam = None

    protein_db = evidence.protein_db
    return ResolvedPaths(
        work_dir=work_dir,
        marker_dir=work_dir / config.runtime.marker_dir,
        genome=genome,
        busco_raw_dir=_abs(work_dir, out.busco_raw),
        busco_masked_dir=_abs(work_dir, out.busco_masked),
        busco_downloads=_abs(work_dir, config.busco.download_path),
        repeat_modeler_dir=repeat_modeler_dir,
        repeat_masker_dir=repeat_masker_dir,
        star_dir=star_dir,
        star_index_dir=star_dir / "genome_index",
        braker_dir=_abs(work_dir, out.braker),
        denovo_library=repeat_modeler_dir / f"{config.genome_name}-families.fa",
        combined_library=repeat_masker_dir / COMBINED_LIBRARY_NAME,
        extra_library=_abs(work_dir, config.repeat.extra_library),
        masked_genome=repeat_masker_dir / f"{genome.name}.masked",
        softmasked_genome=repeat_masker_dir / f"{genome.name}.softmasked",
        protein_db=protein_db,
        protein_dir=protein_db.parent if protein_db is not None else None,
        final_bam=final_bam,
        bam_dir=final_bam.parent if final_bam is not None else None,
        braker_image=_abs(work_dir, config.braker.image or Path("braker3.sif")),
    )


def resolve_settings(config: Config) -> ResolvedSettings:
    """Validate the configuration and derive evidence, mode and paths.

    Raises:
        ConfigurationError: on missing required settings or absent evidence.
    """
    config.validate()
    work_dir = Path(os.path.abspath(os.path.expanduser(str(config.work_dir))))
    evidence = resolve_evidence(config, work_dir)
    mode = select_mode(evidence.has_protein, evidence.has_rna)
    paths = resolve_paths(config, evidence)
    logger.debug(f"Resolved BRAKER3 mode {mode.value}; alignment needed: {evidence.needs_alignment}")
    return ResolvedSettings(config=config, evidence=evidence, mode=mode, paths=paths)
