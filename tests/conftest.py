"""Pytest configuration for genomeannot tests."""

import logging
import sys
from pathlib import Path

import pytest

# Add src directory to Python path
ROOT = Path(__file__).resolve().parents[1]
SRC = ROOT / "src"
if str(SRC) not in sys.path:
    sys.path.insert(0, str(SRC))

from genomeannot.config import Config


@pytest.fixture(autouse=True)
def reset_logging_after_test():
    """Reset genomeannot logger state after each test.

    setup_logging() sets propagate=False, which breaks caplog in later tests.
    """
    yield
    app_logger = logging.getLogger("genomeannot")
    for handler in list(app_logger.handlers):
        app_logger.removeHandler(handler)
    app_logger.setLevel(logging.NOTSET)
    app_logger.propagate = True


@pytest.fixture
def inputs(tmp_path):
    """User input files on disk: assembly, proteins, paired reads, BAM, image."""
    data = tmp_path / "data"
    data.mkdir()
    files = {
        "genome": data / "genome.fa",
        "protein_db": data / "proteins.fa",
        "rna_r1": data / "reads_1.fq.gz",
        "rna_r2": data / "reads_2.fq.gz",
        "rna_bam": data / "rnaseq.bam",
        "image": tmp_path / "braker3.sif",
    }
    files["genome"].write_text(">chr1\nACGTACGTNNacgt\n")
    files["protein_db"].write_text(">p1\nMKV\n")
    files["rna_r1"].write_bytes(b"")
    files["rna_r2"].write_bytes(b"")
    files["rna_bam"].write_bytes(b"BAM\x01")
    files["image"].write_bytes(b"SIF")
    return files


@pytest.fixture
def make_config(tmp_path, inputs):
    """Build a valid Config; evidence keys are picked from the ``inputs`` fixture."""

    def _make(*evidence: str, **overrides) -> Config:
        cfg = Config(
            genome=inputs["genome"],
            genome_name="dmel",
            species="Drosophila_test",
            threads=4,
            work_dir=tmp_path / "work",
        )
        cfg.busco.lineage = "diptera_odb10"
        cfg.braker.image = inputs["image"]
        cfg.environments.runner = "none"
        cfg.runtime.enable_progress = False
        for key in evidence:
            setattr(cfg.evidence, key, inputs[key])
        for key, value in overrides.items():
            setattr(cfg, key, value)
        return cfg

    return _make
