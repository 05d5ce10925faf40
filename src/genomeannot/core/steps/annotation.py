"""BRAKER3 gene annotation stage."""

from __future__ import annotations

from pathlib import Path

from genomeannot.core.pipeline_types import Action, LocalTask
from genomeannot.core.resolver import ResolvedSettings
from genomeannot.exceptions import MissingEnvironmentError
from genomeannot.external.agat import Agat
from genomeannot.external.braker import Braker


def check_image(image: Path, stage: str = "braker") -> None:
    """Fail with a remediation hint when the container image is absent."""
    if not image.is_file():
        raise MissingEnvironmentError(
            f"Apptainer image not found at {image}",
            stage=stage,
            executable=str(image),
            hint="run `genomeannot build-image` or set braker.image to an existing .sif",
        )


def braker(settings: ResolvedSettings) -> list[Action]:
    """Stage 7: braker.pl inside Apptainer, then GTF -> GFF3 with AGAT."""
    cfg = settings.config
    paths = settings.paths
    image = paths.braker_image
    gtf = paths.braker_dir / "braker.gtf"
    return [
        LocalTask(f"Checking container image {image.name}", lambda: check_image(image)),
        Braker(threads=settings.threads, extra_args=cfg.braker.extra_args).predict(
            image=image,
            genome=paths.softmasked_genome,
            species=cfg.species,
            working_dir=paths.braker_dir,
            mode=settings.mode,
            protein_db=paths.protein_db,
            bam=paths.final_bam,
        ),
        Agat().gtf_to_gff3(image, gtf, paths.braker_dir / "braker.gff3"),
    ]
