"""BUSCO completeness stages (raw and masked assembly)."""

from __future__ import annotations

from genomeannot.core.pipeline_types import Action
from genomeannot.core.resolver import ResolvedSettings
from genomeannot.external.busco import Busco


def _busco(settings: ResolvedSettings) -> Busco:
    return Busco(threads=settings.threads, extra_args=settings.config.busco.extra_args)


def busco(settings: ResolvedSettings) -> list[Action]:
    """Stage 1: BUSCO on the raw assembly."""
    paths = settings.paths
    return [
        _busco(settings).assess(
            genome=paths.genome,
            run_name=f"{settings.config.genome_name}_raw",
            out_path=paths.busco_raw_dir,
            lineage=settings.config.busco.lineage,
            download_path=paths.busco_downloads,
        )
    ]


def busco_masked(settings: ResolvedSettings) -> list[Action]:
    """Stage 4: BUSCO on the soft-masked assembly (checks for over-masking)."""
    paths = settings.paths
    return [
        _busco(settings).assess(
            genome=paths.softmasked_genome,
            run_name=f"{settings.config.genome_name}_masked",
            out_path=paths.busco_masked_dir,
            lineage=settings.config.busco.lineage,
            download_path=paths.busco_downloads,
        )
    ]
