"""Canonical stage table.

Declaration order is the tie-break order of the topological sort. ``braker``
is the terminal stage: every other applicable stage is one of its transitive
predecessors, so running it is equivalent to running the whole pipeline.
Predecessors that are inapplicable under the current evidence are ignored.
"""

from __future__ import annotations

from pathlib import Path

from genomeannot.core.evidence import EvidenceConfiguration
from genomeannot.core.pipeline_types import Stage
from genomeannot.core.resolver import ResolvedSettings
from genomeannot.core.steps import alignment, annotation, assessment, repeats

TERMINAL_STAGE = "braker"


def needs_alignment(evidence: EvidenceConfiguration) -> bool:
    return evidence.needs_alignment


def _softmasked(settings: ResolvedSettings) -> list[Path]:
    return [settings.paths.softmasked_genome]


def _braker_inputs(settings: ResolvedSettings) -> list[Path]:
    inputs = [settings.paths.softmasked_genome]
    if settings.paths.final_bam is not None:
        inputs.append(settings.paths.final_bam)
    return inputs


PIPELINE_STAGES: list[Stage] = [
    Stage(
        "busco",
        "BUSCO on raw assembly",
        depends_on=(),
        build=assessment.busco,
        output_dir="busco_raw_dir",
    ),
    Stage(
        "repeat_modeler",
        "Build de novo repeat/TE library",
        depends_on=(),
        build=repeats.repeat_modeler,
        output_dir="repeat_modeler_dir",
    ),
    Stage(
        "repeat_masker",
        "Soft-mask genome",
        depends_on=("repeat_modeler",),
        build=repeats.repeat_masker,
        requires=lambda s: [s.paths.denovo_library],
        output_dir="repeat_masker_dir",
    ),
    Stage(
        "busco_masked",
        "BUSCO on masked assembly",
        depends_on=("repeat_masker",),
        build=assessment.busco_masked,
        requires=_softmasked,
        output_dir="busco_masked_dir",
    ),
    Stage(
        "star_index",
        "STAR genome index (RNA-seq reads only)",
        depends_on=("repeat_masker",),
        build=alignment.star_index,
        applicable=needs_alignment,
        requires=_softmasked,
        output_dir="star_index_dir",
    ),
    Stage(
        "star_align",
        "Align RNA-seq reads (RNA-seq reads only)",
        depends_on=("star_index",),
        build=alignment.star_align,
        applicable=needs_alignment,
        requires=lambda s: [s.paths.star_index_dir],
        output_dir="star_dir",
    ),
    Stage(
        "braker",
        "BRAKER3 gene annotation",
        depends_on=("busco", "repeat_masker", "busco_masked", "star_align"),
        build=annotation.braker,
        requires=_braker_inputs,
        output_dir="braker_dir",
    ),
]
