"""BRAKER3 wrapper (runs inside the Apptainer image)."""

from pathlib import Path
from typing import Optional
from genomeannot.core.evidence import ExecutionMode
from genomeannot.external.base import ExternalTool, Invocation


class Braker(ExternalTool):
    """Evidence-based gene prediction with braker.pl.

    The teambraker/braker3 image bundles AUGUSTUS, GeneMark-ETP, DIAMOND,
    ProtHint, TSEBRA and AGAT.
    """

    tool_name = "braker.pl"
    environment = "apptainer"

    def predict(
        self,
        image: Path,
        genome: Path,
        species: str,
        working_dir: Path,
        mode: ExecutionMode,
        protein_db: Optional[Path] = None,
        bam: Optional[Path] = None,
    ) -> Invocation:
        """Run braker.pl on a soft-masked genome with the supplied evidence."""
        cmd = [self.tool_name, f"--genome={genome}"]
        if protein_db is not None:
            cmd.append(f"--prot_seq={protein_db}")
        if bam is not None:
            cmd.append(f"--bam={bam}")
        if mode.braker_flag:
            cmd.append(mode.braker_flag)
        cmd += [
            f"--species={species}",
            f"--workingdir={working_dir}",
            f"--threads={self.threads}",
            "--softmasking",
            *self.extra_args,
        ]

        # Bind only the directories the invocation dereferences
        bind_dirs = [genome.parent, working_dir]
        if protein_db is not None:
            bind_dirs.append(protein_db.parent)
        if bam is not None:
            bind_dirs.append(bam.parent)
        binds = []
        for d in bind_dirs:
            if (d, d) not in binds:
                binds.append((d, d))

        return self.invocation(
            cmd,
            cwd=working_dir,
            log_file=working_dir / "braker.log",
            image=image,
            binds=tuple(binds),
            description=f"Running BRAKER3 in {mode.value} mode",
        )
