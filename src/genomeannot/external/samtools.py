"""Samtools wrapper."""

from pathlib import Path
from typing import Optional
from genomeannot.external.base import ExternalTool, Invocation


class Samtools(ExternalTool):
    """Samtools BAM manipulation."""

    tool_name = "samtools"
    environment = "rnaseq"

    def index_bam(self, bam_file: Path, log_file: Optional[Path] = None) -> Invocation:
        """Index a coordinate-sorted BAM file."""
        cmd = [self.tool_name, "index", "-@", str(self.threads), str(bam_file)]
        return self.invocation(
            cmd,
            cwd=bam_file.parent,
            log_file=log_file,
            append_log=True,
            description="Indexing BAM",
        )
