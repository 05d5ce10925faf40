"""BUSCO wrapper."""

from pathlib import Path
from genomeannot.external.base import ExternalTool, Invocation


class Busco(ExternalTool):
    """BUSCO assembly completeness assessment (genome mode)."""

    tool_name = "busco"

    def assess(
        self,
        genome: Path,
        run_name: str,
        out_path: Path,
        lineage: str,
        download_path: Path,
    ) -> Invocation:
        """Assess completeness of ``genome`` against a BUSCO lineage."""
        cmd = [
            self.tool_name,
            "--in", str(genome),
            "--out", run_name,
            "--out_path", str(out_path),
            "--lineage_dataset", lineage,
            "--mode", "genome",
            "--cpu", str(self.threads),
            "--download_path", str(download_path),
            *self.extra_args,
        ]
        return self.invocation(
            cmd,
            cwd=out_path,
            log_file=out_path / f"{run_name}.log",
            description=f"Assessing completeness of {genome.name}",
        )
