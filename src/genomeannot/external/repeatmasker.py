"""RepeatMasker wrapper."""

from pathlib import Path
from genomeannot.external.base import ExternalTool, Invocation


class RepeatMasker(ExternalTool):
    """Soft-masks a genome with a repeat library."""

    tool_name = "RepeatMasker"

    def soft_mask(self, genome: Path, library: Path, out_dir: Path) -> Invocation:
        """Soft-mask ``genome``; ``-xsmall`` gives the lowercase masking BRAKER3 expects."""
        cmd = [
            self.tool_name,
            "-lib", str(library),
            "-pa", str(self.threads),
            "-xsmall",
            "-gff",
            "-dir", str(out_dir),
            *self.extra_args,
            str(genome),
        ]
        return self.invocation(
            cmd,
            cwd=out_dir,
            log_file=out_dir / "RepeatMasker.log",
            description="Soft-masking genome",
        )
