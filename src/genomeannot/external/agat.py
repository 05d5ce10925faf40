"""AGAT wrapper (bundled in the BRAKER3 image)."""

from pathlib import Path
from genomeannot.external.base import ExternalTool, Invocation


class Agat(ExternalTool):
    """GTF to GFF3 conversion."""

    tool_name = "agat_convert_sp_gxf2gxf.pl"
    environment = "apptainer"

    def gtf_to_gff3(self, image: Path, gtf: Path, gff3: Path) -> Invocation:
        """Convert ``gtf`` to ``gff3``; skipped at run time if the GTF was not produced."""
        work_dir = gtf.parent
        return self.invocation(
            [self.tool_name, "--gxf", str(gtf), "-o", str(gff3)],
            cwd=work_dir,
            log_file=work_dir / "braker.log",
            append_log=True,
            image=image,
            binds=((work_dir, work_dir),),
            description=f"Converting {gtf.name} to {gff3.name}",
            requires_file=gtf,
        )
