"""STAR aligner wrapper."""

from pathlib import Path
from typing import Optional
from genomeannot.external.base import ExternalTool, Invocation


class Star(ExternalTool):
    """STAR genome indexing and spliced RNA-seq alignment."""

    tool_name = "STAR"
    environment = "rnaseq"

    def __init__(self, sa_index_nbases: int = 13, **kwargs):
        super().__init__(**kwargs)
        self.sa_index_nbases = sa_index_nbases

    def generate_index(self, genome: Path, index_dir: Path) -> Invocation:
        """Build the genome index from the soft-masked assembly."""
        cmd = [
            self.tool_name,
            "--runMode", "genomeGenerate",
            "--genomeDir", str(index_dir),
            "--genomeFastaFiles", str(genome),
            "--genomeSAindexNbases", str(self.sa_index_nbases),
            "--runThreadN", str(self.threads),
        ]
        return self.invocation(
            cmd,
            cwd=index_dir,
            log_file=index_dir / "STAR_index.log",
            description="Building genome index from soft-masked assembly",
        )

    def align(
        self,
        index_dir: Path,
        read1: Path,
        out_dir: Path,
        read2: Optional[Path] = None,
    ) -> Invocation:
        """Align reads with the flags BRAKER3 needs (XS tag, canonical junctions)."""
        reads = [str(read1)] + ([str(read2)] if read2 is not None else [])
        cmd = [
            self.tool_name,
            "--runMode", "alignReads",
            "--genomeDir", str(index_dir),
            "--readFilesIn", *reads,
        ]
        if read1.name.endswith(".gz"):
            cmd += ["--readFilesCommand", "zcat"]
        cmd += [
            "--outSAMstrandField", "intronMotif",
            "--outFilterIntronMotifs", "RemoveNoncanonical",
            "--outSAMtype", "BAM", "SortedByCoordinate",
            "--outSAMattrIHstart", "0",
            "--alignSoftClipAtReferenceEnds", "No",
            "--twopassMode", "Basic",
            "--outFileNamePrefix", f"{out_dir}/",
            "--runThreadN", str(self.threads),
            *self.extra_args,
        ]
        return self.invocation(
            cmd,
            cwd=out_dir,
            log_file=out_dir / "STAR_align.log",
            description="Aligning RNA-seq reads to masked genome",
        )
