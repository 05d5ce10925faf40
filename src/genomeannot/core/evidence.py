"""Evidence inspection and BRAKER3 execution-mode selection."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import Optional

from genomeannot.exceptions import ConfigurationError


class ExecutionMode(str, Enum):
    """BRAKER3 operating mode, determined by the evidence supplied."""

    EP = "EP"  # proteins only
    ET = "ET"  # RNA-seq only
    ETP = "ETP"  # proteins + RNA-seq

    @property
    def braker_flag(self) -> Optional[str]:
        """Explicit braker.pl flag for this mode (ET/ETP are the tool's defaults)."""
        return "--epmode" if self is ExecutionMode.EP else None


@dataclass(frozen=True)
class EvidenceConfiguration:
    """Which optional evidence was supplied. Immutable once resolved."""

    protein_db: Optional[Path] = None
    rna_r1: Optional[Path] = None
    rna_r2: Optional[Path] = None
    rna_bam: Optional[Path] = None

    @property
    def has_protein(self) -> bool:
        return self.protein_db is not None

    @property
    def has_rna(self) -> bool:
        return self.rna_bam is not None or self.rna_r1 is not None

    @property
    def needs_alignment(self) -> bool:
        """True when raw reads must be aligned (no pre-aligned BAM supplied)."""
        return self.rna_r1 is not None and self.rna_bam is None

    @property
    def paired(self) -> bool:
        return self.rna_r1 is not None and self.rna_r2 is not None


def select_mode(has_protein: bool, has_rna: bool) -> ExecutionMode:
    """Select the BRAKER3 mode from the evidence truth table.

    Raises:
        ConfigurationError: when neither proteins nor RNA-seq evidence is present.
    """
    if has_protein and has_rna:
        return ExecutionMode.ETP
    if has_protein:
        return ExecutionMode.EP
    if has_rna:
        return ExecutionMode.ET
    raise ConfigurationError(
        "Neither protein evidence (evidence.protein_db) nor RNA-seq evidence "
        "(evidence.rna_r1 / evidence.rna_bam) is configured"
    )
