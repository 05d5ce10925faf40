"""RepeatModeler wrappers (BuildDatabase + RepeatModeler)."""

from pathlib import Path
from genomeannot.external.base import ExternalTool, Invocation


class RepeatModeler(ExternalTool):
    """De novo repeat/TE family discovery."""

    tool_name = "RepeatModeler"

    def __init__(self, engine: str = "ncbi", **kwargs):
        super().__init__(**kwargs)
        self.engine = engine

    def build_database(self, genome: Path, name: str, work_dir: Path) -> Invocation:
        """Create the RepeatModeler sequence database for ``genome``."""
        cmd = ["BuildDatabase", "-name", name, "-engine", self.engine, str(genome)]
        return Invocation(
            tool="BuildDatabase",
            argv=tuple(cmd),
            environment=self.environment,
            cwd=work_dir,
            log_file=work_dir / "RepeatModeler.log",
            description="Building RepeatModeler database",
        )

    def model(self, name: str, work_dir: Path) -> Invocation:
        """Discover repeat families; writes ``<name>-families.fa`` in ``work_dir``."""
        cmd = [
            self.tool_name,
            "-database", name,
            "-engine", self.engine,
            "-pa", str(self.threads),
            "-LTRStruct",
            *self.extra_args,
        ]
        return self.invocation(
            cmd,
            cwd=work_dir,
            log_file=work_dir / "RepeatModeler.log",
            append_log=True,
            description="Building de novo repeat/TE library",
        )
